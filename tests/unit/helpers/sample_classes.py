from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable

MODULE = "unit.helpers.sample_classes"


def ref(name: str) -> str:
    """Class reference for a class in this module."""
    return f"{MODULE}.{name}"


class Recorder:
    """Remembers exactly what its constructor received."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.args = args
        self.kwargs = kwargs


class Event(Recorder):
    pass


class LogEvent(Event):
    pass


class UserLoginEvent(Event):
    pass


class SlowEvent(Event):
    """Counts constructions; each one is slow enough for concurrent callers to overlap."""

    created = 0

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        time.sleep(0.05)
        type(self).created += 1
        super().__init__(*args, **kwargs)


class NotAnEvent(Recorder):
    pass


class DefaultEvent(Recorder):
    """Fallback class; deliberately not an Event."""


class AbstractEvent(Event, ABC):
    @abstractmethod
    def handle(self) -> None: ...


@runtime_checkable
class Describable(Protocol):
    def describe(self) -> str: ...


class StaticProtocol(Protocol):
    def describe(self) -> str: ...


class DescribedEvent(Event):
    def describe(self) -> str:
        return "described"


class Failing:
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        raise RuntimeError("constructor boom")


class Outer:
    class Inner(Recorder):
        pass


def not_a_class() -> None:
    return None


NOT_A_CLASS_EITHER = 42
