from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, TypedDict, runtime_checkable

from object_factory.errors import FactoryError
from object_factory.internal.util.config import validate_typed_dict

DEFAULT_CAPITALS: tuple[str, ...] = ("-", "_", ".", "/", "\\")
DEFAULT_REPLACEMENTS: Mapping[str, str] = {"-": "", "_": ""}
DEFAULT_SEPARATOR = "/"

_OPTION_TYPES: Mapping[str, type | tuple[type, ...]] = {
    "prefix": str,
    "suffix": str,
    "capitals": Sequence,
    "replacements": Mapping,
    "capitalize_first_letter": bool,
    "separator": str,
}


@runtime_checkable
class TypeResolver(Protocol):
    """
    Maps a type identifier to a candidate class reference.

    Implementations must be pure and must not fail for unknown identifiers: a best guess
    is returned and the factory decides whether it names a real class. Plain functions
    with this signature qualify.
    """

    def __call__(self, type_id: str) -> str: ...


class ResolverOptions(TypedDict, total=False):
    """
    Options for GenericResolver.

    prefix: module path prepended to every result ("app" -> "app.<...>")
    suffix: appended to the class name segment
    capitals: characters after which the next letter is upper cased
    replacements: substitutions applied to the class name segment after capitalization
    capitalize_first_letter: upper case the first letter of the class name segment
    separator: splits an identifier into module segments and a class name segment
    """

    prefix: str
    suffix: str
    capitals: Sequence[str]
    replacements: Mapping[str, str]
    capitalize_first_letter: bool
    separator: str


@dataclass(frozen=True, slots=True)
class GenericResolver:
    """
    Default TypeResolver: builds a class reference by string formatting.

    "event/user_login" with prefix "app" and suffix "Event" resolves to
    "app.event.UserLoginEvent": leading segments become the module path, the last one
    is turned into the class name.
    """

    prefix: str = ""
    suffix: str = ""
    capitals: tuple[str, ...] = DEFAULT_CAPITALS
    replacements: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_REPLACEMENTS)
    )
    capitalize_first_letter: bool = True
    separator: str = DEFAULT_SEPARATOR

    def __post_init__(self) -> None:
        validate_typed_dict(
            "resolver option",
            {name: getattr(self, name) for name in _OPTION_TYPES},
            ResolverOptions,
            _OPTION_TYPES,
        )
        if not self.separator:
            raise FactoryError.from_bad_argument(
                "resolver separator", self.separator, "a non-empty string"
            )
        object.__setattr__(self, "capitals", tuple(self.capitals))
        object.__setattr__(self, "replacements", dict(self.replacements))

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None) -> GenericResolver:
        if not options:
            return cls()
        validate_typed_dict("resolver option", options, ResolverOptions)
        return cls(**dict(options))

    def __call__(self, type_id: str) -> str:
        return self.resolve(type_id)

    def resolve(self, type_id: str) -> str:
        *module_segments, class_segment = type_id.split(self.separator)
        parts: list[str] = []
        if self.prefix:
            parts.append(self.prefix.rstrip("."))
        parts.extend(seg.lower() for seg in module_segments if seg)
        parts.append(self._class_name(class_segment) + self.suffix)
        return ".".join(parts)

    def _class_name(self, segment: str) -> str:
        chars: list[str] = []
        upper_next = self.capitalize_first_letter
        for ch in segment:
            chars.append(ch.upper() if upper_next else ch)
            upper_next = ch in self.capitals
        name = "".join(chars)
        for old, new in self.replacements.items():
            name = name.replace(old, new)
        return name
