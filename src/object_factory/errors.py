from __future__ import annotations

from enum import Enum
from typing import Any


class FactoryErrorKind(str, Enum):
    """
    Classifies every failure a factory can report.

    BAD_ARGUMENT_SHAPE: a required parameter (class name, callback, resolver, config key)
        is missing, empty or of the wrong type.
    BAD_TYPE: a type identifier is not a non-empty string.
    UNRESOLVED_TYPE: a type cannot be resolved and no default class is configured.
    INVALID_BASE_CLASS: the configured base class or protocol cannot be used.
    INVALID_DEFAULT_CLASS: the configured default class cannot be used.
    CLASS_CONSTRAINT_VIOLATION: a created object does not satisfy the base class.
    REJECTED_CLASS: a class reference was rejected by class validation.
    """

    BAD_ARGUMENT_SHAPE = "bad_argument_shape"
    BAD_TYPE = "bad_type"
    UNRESOLVED_TYPE = "unresolved_type"
    INVALID_BASE_CLASS = "invalid_base_class"
    INVALID_DEFAULT_CLASS = "invalid_default_class"
    CLASS_CONSTRAINT_VIOLATION = "class_constraint_violation"
    REJECTED_CLASS = "rejected_class"


def _describe(value: Any) -> str:
    if isinstance(value, type):
        return value.__qualname__
    return type(value).__name__


class FactoryError(Exception):
    """
    Raised for every factory failure.

    The kind tells callers what went wrong; the payload carries the type identifier
    and class references involved, when there are any.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: FactoryErrorKind,
        type_id: str | None = None,
        class_ref: str | None = None,
        required_ref: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.type_id = type_id
        self.class_ref = class_ref
        self.required_ref = required_ref

    @classmethod
    def from_bad_type(cls, type_id: Any) -> FactoryError:
        if isinstance(type_id, str):
            msg = "object type is empty" if not type_id else f"object type {type_id!r} is invalid"
        elif type_id is None:
            msg = "object type is empty"
        else:
            msg = f"object type must be a string, received {_describe(type_id)}"
        return cls(msg, kind=FactoryErrorKind.BAD_TYPE)

    @classmethod
    def from_bad_argument(cls, name: str, value: Any, expected: str) -> FactoryError:
        return cls(
            f"{name} must be {expected}, received {_describe(value)}",
            kind=FactoryErrorKind.BAD_ARGUMENT_SHAPE,
        )

    @classmethod
    def from_bad_class(cls, class_ref: str, reason: str) -> FactoryError:
        if not class_ref:
            return cls("class is empty", kind=FactoryErrorKind.REJECTED_CLASS)
        return cls(
            f"class {class_ref} {reason}",
            kind=FactoryErrorKind.REJECTED_CLASS,
            class_ref=class_ref,
        )

    @classmethod
    def from_abstract_class(cls, klass: type) -> FactoryError:
        class_ref = f"{klass.__module__}.{klass.__qualname__}"
        return cls(
            f"class {class_ref} is abstract",
            kind=FactoryErrorKind.REJECTED_CLASS,
            class_ref=class_ref,
        )

    @classmethod
    def from_unresolved_type(
        cls, type_id: str, *, factory: str = "", default_class: str = ""
    ) -> FactoryError:
        where = f"[{factory}] " if factory else ""
        return cls(
            f"{where}type {type_id!r} is not a valid type. (using default class {default_class!r})",
            kind=FactoryErrorKind.UNRESOLVED_TYPE,
            type_id=type_id,
            class_ref=default_class or None,
        )

    @classmethod
    def from_rejected_class(
        cls, class_ref: str, required_ref: str, *, factory: str = "", type_id: str | None = None
    ) -> FactoryError:
        if not class_ref or not required_ref:
            return cls("class is invalid", kind=FactoryErrorKind.CLASS_CONSTRAINT_VIOLATION)
        where = f"[{factory}] " if factory else ""
        return cls(
            f"{where}class {class_ref} must be an instance of {required_ref}",
            kind=FactoryErrorKind.CLASS_CONSTRAINT_VIOLATION,
            type_id=type_id,
            class_ref=class_ref,
            required_ref=required_ref,
        )

    @classmethod
    def from_invalid_base_class(cls, class_ref: str, reason: str = "not found") -> FactoryError:
        return cls(
            f"invalid base class: class or protocol {class_ref!r} {reason}",
            kind=FactoryErrorKind.INVALID_BASE_CLASS,
            class_ref=class_ref,
        )

    @classmethod
    def from_invalid_default_class(cls, class_ref: str, reason: str = "not found") -> FactoryError:
        return cls(
            f"invalid default class: class {class_ref!r} {reason}",
            kind=FactoryErrorKind.INVALID_DEFAULT_CLASS,
            class_ref=class_ref,
        )
