from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from object_factory.errors import FactoryError, FactoryErrorKind

ValueTypes = Mapping[str, type | tuple[type, ...]]


def _type_names(expected: type | tuple[type, ...]) -> str:
    if isinstance(expected, type):
        return expected.__name__
    return " | ".join(t.__name__ for t in expected)


def validate_typed_dict(
    desc: str,
    mapping: Any,
    validation_type: type,
    value_types: ValueTypes | None = None,
) -> None:
    """
    Validates a mapping against a TypedDict definition.

    The keys of the mapping must all be declared by the TypedDict. When value_types is
    given, each value whose key it lists must be an instance of the listed type(s).

    Args:
        desc: Description of the mapping being validated, used for error messages.
        mapping: Mapping to be validated against the TypedDict definition.
        validation_type: TypedDict class to validate the keys of the mapping against.
        value_types: Optional expected type or tuple of types, per key.

    Raises:
        FactoryError: BAD_ARGUMENT_SHAPE if the value is not a mapping, holds keys the
            TypedDict does not declare, or holds values of the wrong type.
    """
    if not isinstance(mapping, Mapping):
        raise FactoryError.from_bad_argument(desc, mapping, "a mapping")

    allowed_keys = set(validation_type.__required_keys__) | set(
        validation_type.__optional_keys__
    )
    bad_keys = set(mapping.keys()) - allowed_keys
    if bad_keys:
        raise FactoryError(
            f"Invalid {desc} keys: {sorted(bad_keys, key=str)}",
            kind=FactoryErrorKind.BAD_ARGUMENT_SHAPE,
        )

    if not value_types:
        return

    mismatches = [
        f"{key} must be {_type_names(value_types[key])} (got {type(value).__name__})"
        for key, value in mapping.items()
        if key in value_types and not isinstance(value, value_types[key])
    ]
    if mismatches:
        raise FactoryError(
            f"Invalid {desc} values: {'; '.join(mismatches)}",
            kind=FactoryErrorKind.BAD_ARGUMENT_SHAPE,
        )
