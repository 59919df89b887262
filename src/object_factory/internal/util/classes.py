from __future__ import annotations

import builtins
import importlib
import inspect
import logging
import re
from typing import Any

from object_factory.errors import FactoryError

# "pkg.mod.Class", "pkg.mod.Outer.Inner", "pkg.mod:Class" or a bare builtin name.
_REFERENCE_PATTERN = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*"
    r"(:[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*)?$"
)

_MISSING = object()


def class_reference(klass: type) -> str:
    """
    Return the importable reference for a class.

    Builtins are returned by bare name so they round trip through load_object.
    """
    if klass.__module__ == "builtins":
        return klass.__qualname__
    return f"{klass.__module__}.{klass.__qualname__}"


def is_reference(value: Any) -> bool:
    return isinstance(value, str) and bool(_REFERENCE_PATTERN.match(value))


def _is_missing_module(err: ModuleNotFoundError, module_name: str) -> bool:
    # Only the candidate module itself (or one of its parents) being absent means
    # "no such class". A missing dependency inside a real module is a real failure.
    missing = err.name or ""
    return bool(missing) and (
        module_name == missing or module_name.startswith(missing + ".")
    )


def _import_module(module_name: str) -> Any:
    try:
        return importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        if _is_missing_module(e, module_name):
            return _MISSING
        raise


def _walk_attributes(obj: Any, path: list[str]) -> Any:
    for attr in path:
        obj = getattr(obj, attr, _MISSING)
        if obj is _MISSING:
            return _MISSING
    return obj


def load_object(reference: str) -> Any | None:
    """
    Import whatever object a reference names.

    Accepts dotted references ("pkg.mod.Class", "pkg.mod.Outer.Inner"), entry point
    style references ("pkg.mod:Class") and bare builtin names ("dict").

    Returns None when the reference is malformed or names nothing importable.
    """
    if not is_reference(reference):
        return None

    if ":" in reference:
        module_name, _, attr_path = reference.partition(":")
        module = _import_module(module_name)
        if module is _MISSING:
            return None
        obj = _walk_attributes(module, attr_path.split("."))
        return None if obj is _MISSING else obj

    parts = reference.split(".")
    if len(parts) == 1:
        return getattr(builtins, reference, None)

    # Longest importable module prefix wins; the remainder is an attribute path.
    for i in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:i])
        module = _import_module(module_name)
        if module is _MISSING:
            continue
        obj = _walk_attributes(module, parts[i:])
        return None if obj is _MISSING else obj

    return None


def load_class(reference: str) -> type | None:
    obj = load_object(reference)
    return obj if isinstance(obj, type) else None


def is_protocol(klass: type) -> bool:
    return bool(getattr(klass, "_is_protocol", False))


def is_runtime_protocol(klass: type) -> bool:
    return is_protocol(klass) and bool(getattr(klass, "_is_runtime_protocol", False))


def class_exists(reference: str) -> bool:
    """Whether the reference names a class. Protocols do not count."""
    klass = load_class(reference)
    return klass is not None and not is_protocol(klass)


def interface_exists(reference: str) -> bool:
    """Whether the reference names a class or a protocol."""
    return load_class(reference) is not None


def class_rejection_reason(klass: type) -> str | None:
    if is_protocol(klass):
        return "is an interface"
    if inspect.isabstract(klass):
        return "is abstract"
    return None


def rejection_reason(reference: str) -> str | None:
    """
    Explain why a reference cannot be instantiated, or return None if it can.
    """
    obj = load_object(reference)
    if obj is None:
        return "does not exist"
    if not isinstance(obj, type):
        return "is not a class"
    return class_rejection_reason(obj)


def is_instantiable(reference: str) -> bool:
    return rejection_reason(reference) is None


def require_instantiable(reference: str) -> type:
    """
    Load a concrete class or raise a REJECTED_CLASS FactoryError.
    """
    reason = rejection_reason(reference)
    if reason is None:
        return load_class(reference)  # type: ignore[return-value]

    logging.debug(f"class rejected: {reference!r} {reason}")
    if reason == "is abstract":
        raise FactoryError.from_abstract_class(load_class(reference))  # type: ignore[arg-type]
    raise FactoryError.from_bad_class(reference, reason)
