from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeVar

T = TypeVar("T")


class Arguments(ABC):
    """
    Constructor arguments for a created object.

    One of:
      - NoArgs: cls()
      - Positional(args): cls(*args)
      - Structured(config): cls(config), one structured parameter
      - Keywords(kwargs): cls(**kwargs)

    Raw values are coerced with Arguments.of().
    """

    @abstractmethod
    def apply(self, klass: type[T]) -> T:
        raise NotImplementedError

    @staticmethod
    def of(value: Any) -> Arguments:
        """
        Coerce a raw value into an Arguments variant.

        Rules:
          - None -> NoArgs
          - Arguments -> unchanged
          - mapping with at least one non-int key -> Structured(mapping)
          - mapping with only int keys -> Positional(values ordered by key)
          - list or tuple -> Positional
          - anything else (str and bytes included) -> Positional((value,))
        """
        if value is None:
            return NO_ARGS
        if isinstance(value, Arguments):
            return value
        if isinstance(value, Mapping):
            m: Mapping = value
            if any(not isinstance(k, int) or isinstance(k, bool) for k in m.keys()):
                return Structured(m)
            return Positional(tuple(m[k] for k in sorted(m.keys())))
        if isinstance(value, (list, tuple)):
            return Positional(tuple(value))
        return Positional((value,))


@dataclass(frozen=True, slots=True)
class NoArgs(Arguments):
    def apply(self, klass: type[T]) -> T:
        return klass()


NO_ARGS = NoArgs()


@dataclass(frozen=True, slots=True)
class Positional(Arguments):
    args: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.args, tuple):
            if isinstance(self.args, Sequence) and not isinstance(self.args, (str, bytes)):
                object.__setattr__(self, "args", tuple(self.args))
            else:
                raise TypeError(
                    f"Positional args must be a sequence, got {type(self.args).__name__}"
                )

    def apply(self, klass: type[T]) -> T:
        return klass(*self.args)


@dataclass(frozen=True, slots=True)
class Structured(Arguments):
    config: Mapping[str, Any] = field(default_factory=dict)

    def apply(self, klass: type[T]) -> T:
        # A fresh dict per instance so created objects never share mutable config.
        return klass(dict(self.config))


@dataclass(frozen=True, slots=True)
class Keywords(Arguments):
    kwargs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        bad = [k for k in self.kwargs if not isinstance(k, str)]
        if bad:
            raise TypeError(f"Keywords keys must be strings: {bad!r}")
        object.__setattr__(self, "kwargs", MappingProxyType(dict(self.kwargs)))

    def apply(self, klass: type[T]) -> T:
        return klass(**self.kwargs)
