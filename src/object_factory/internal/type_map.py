from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from importlib.metadata import entry_points
from typing import Any

from object_factory.errors import FactoryError, FactoryErrorKind
from object_factory.internal.util.classes import class_reference, require_instantiable


def _validate_type_id(type_id: Any) -> str:
    if not isinstance(type_id, str) or not type_id:
        raise FactoryError.from_bad_type(type_id)
    return type_id


def _normalize_class_ref(class_ref: Any) -> str:
    """
    Strict policy: the reference must name an instantiable class at insert time.
    """
    if isinstance(class_ref, type):
        class_ref = class_reference(class_ref)
    if not isinstance(class_ref, str):
        raise FactoryError.from_bad_argument("class name", class_ref, "a string or a class")
    require_instantiable(class_ref)
    return class_ref


class TypeMap:
    """
    Explicit type identifier -> class reference overrides.

    Consulted by factories before the resolver. Entries are validated on insert: keys must
    be non-empty strings and values must name classes that can be instantiated.
    """

    def __init__(self, mapping: Mapping[str, Any] | None = None) -> None:
        self._entries: dict[str, str] = {}
        self._lock = threading.RLock()
        if mapping:
            self.set_map(mapping)

    def set_map(self, mapping: Mapping[str, Any]) -> None:
        """
        Replace the whole map.

        The new map is validated in full before it replaces the current one, so a bad
        entry leaves the previous map in place.
        """
        if not isinstance(mapping, Mapping):
            raise FactoryError.from_bad_argument("type map", mapping, "a mapping")
        staged = {
            _validate_type_id(k): _normalize_class_ref(v) for k, v in mapping.items()
        }
        with self._lock:
            self._entries = staged

    def add_class_to_map(self, type_id: str, class_ref: Any) -> None:
        entry = _normalize_class_ref(class_ref)
        with self._lock:
            self._entries[_validate_type_id(type_id)] = entry

    def map(self) -> dict[str, str]:
        with self._lock:
            return dict(self._entries)

    def get(self, type_id: str) -> str | None:
        return self._entries.get(type_id)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.map())

    def __repr__(self) -> str:
        return f"TypeMap({self.map()!r})"

    @classmethod
    def from_entry_points(cls, group: str) -> TypeMap:
        """
        Build a map from installed entry points.

        Determinism rules:
          - entry point name is the type identifier
          - entry point value ("pkg.mod:Class") is the class reference
          - duplicate names within the group are an error
        """
        if not isinstance(group, str) or not group:
            raise FactoryError.from_bad_argument("entry point group", group, "a non-empty string")

        found: dict[str, str] = {}
        dupes: set[str] = set()

        for ep in entry_points().select(group=group):
            if ep.name in found:
                dupes.add(ep.name)
                continue
            found[ep.name] = ep.value
            logging.debug(f"type map entry point: {ep.name} -> {ep.value} (group={group})")

        if dupes:
            raise FactoryError(
                f"duplicate type ids found in entry points group '{group}': {sorted(dupes)}",
                kind=FactoryErrorKind.BAD_TYPE,
            )

        return cls(found)
