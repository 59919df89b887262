from __future__ import annotations

import importlib
from typing import Any

import pytest

from object_factory.errors import FactoryError, FactoryErrorKind
from object_factory.internal.util import classes as uut
from unit.helpers import sample_classes as sc
from unit.helpers.sample_classes import ref

# ==============================================================================
# CASE MATRIX
# ==============================================================================

_LOAD_OBJECT_CASES: list[dict[str, Any]] = [
    {
        "desc": "dotted reference",
        "reference": ref("LogEvent"),
        "expected": sc.LogEvent,
        "covers": ["C000F004B0003"],
    },
    {
        "desc": "entry point style reference",
        "reference": f"{sc.MODULE}:LogEvent",
        "expected": sc.LogEvent,
        "covers": ["C000F004B0002"],
    },
    {
        "desc": "nested class via dotted path",
        "reference": ref("Outer.Inner"),
        "expected": sc.Outer.Inner,
        "covers": ["C000F004B0003"],
    },
    {
        "desc": "nested class via entry point style",
        "reference": f"{sc.MODULE}:Outer.Inner",
        "expected": sc.Outer.Inner,
        "covers": ["C000F004B0002"],
    },
    {
        "desc": "bare builtin name",
        "reference": "dict",
        "expected": dict,
        "covers": ["C000F004B0004"],
    },
    {
        "desc": "module level non-class object",
        "reference": ref("NOT_A_CLASS_EITHER"),
        "expected": 42,
        "covers": ["C000F004B0003"],
    },
    {
        "desc": "missing attribute on existing module",
        "reference": ref("Nope"),
        "expected": None,
        "covers": ["C000F004B0005"],
    },
    {
        "desc": "missing module",
        "reference": "no_such_pkg_xyz.mod.Thing",
        "expected": None,
        "covers": ["C000F004B0006"],
    },
    {
        "desc": "missing module entry point style",
        "reference": "no_such_pkg_xyz.mod:Thing",
        "expected": None,
        "covers": ["C000F004B0002"],
    },
    {
        "desc": "malformed reference with slash",
        "reference": "event/log",
        "expected": None,
        "covers": ["C000F004B0001"],
    },
    {
        "desc": "empty reference",
        "reference": "",
        "expected": None,
        "covers": ["C000F004B0001"],
    },
    {
        "desc": "unknown bare name",
        "reference": "definitely_not_a_builtin",
        "expected": None,
        "covers": ["C000F004B0004"],
    },
]

_REJECTION_CASES: list[dict[str, Any]] = [
    {"desc": "concrete class", "reference": ref("LogEvent"), "reason": None},
    {"desc": "missing class", "reference": ref("Nope"), "reason": "does not exist"},
    {"desc": "function", "reference": ref("not_a_class"), "reason": "is not a class"},
    {"desc": "protocol", "reference": ref("Describable"), "reason": "is an interface"},
    {"desc": "abstract class", "reference": ref("AbstractEvent"), "reason": "is abstract"},
]


# ==============================================================================
# TESTS
# ==============================================================================


@pytest.mark.parametrize("case", _LOAD_OBJECT_CASES, ids=lambda c: c["desc"])
def test_load_object(case: dict[str, Any]) -> None:
    assert uut.load_object(case["reference"]) == case["expected"]


def test_load_class_ignores_non_classes() -> None:
    assert uut.load_class(ref("not_a_class")) is None
    assert uut.load_class(ref("LogEvent")) is sc.LogEvent


def test_class_reference_round_trips() -> None:
    for klass in (sc.LogEvent, sc.Outer.Inner, dict):
        assert uut.load_class(uut.class_reference(klass)) is klass


def test_class_reference_builtin_is_bare_name() -> None:
    assert uut.class_reference(dict) == "dict"


def test_missing_dependency_inside_real_module_propagates(monkeypatch: pytest.MonkeyPatch) -> None:
    # A module that exists but fails to import one of its own dependencies is a real error.
    real_import = importlib.import_module

    def _import(name: str, package: str | None = None) -> Any:
        if name == "broken_pkg_xyz.mod":
            raise ModuleNotFoundError("No module named 'some_dependency'", name="some_dependency")
        return real_import(name, package)

    monkeypatch.setattr(uut.importlib, "import_module", _import)

    with pytest.raises(ModuleNotFoundError) as excinfo:
        uut.load_object("broken_pkg_xyz.mod.Thing")
    assert excinfo.value.name == "some_dependency"


def test_class_exists_and_interface_exists() -> None:
    assert uut.class_exists(ref("LogEvent")) is True
    assert uut.class_exists(ref("AbstractEvent")) is True
    assert uut.class_exists(ref("Describable")) is False
    assert uut.interface_exists(ref("Describable")) is True
    assert uut.interface_exists(ref("not_a_class")) is False


def test_protocol_detection() -> None:
    assert uut.is_protocol(sc.Describable) is True
    assert uut.is_runtime_protocol(sc.Describable) is True
    assert uut.is_protocol(sc.StaticProtocol) is True
    assert uut.is_runtime_protocol(sc.StaticProtocol) is False
    assert uut.is_protocol(sc.DescribedEvent) is False


@pytest.mark.parametrize("case", _REJECTION_CASES, ids=lambda c: c["desc"])
def test_rejection_reason(case: dict[str, Any]) -> None:
    assert uut.rejection_reason(case["reference"]) == case["reason"]
    assert uut.is_instantiable(case["reference"]) is (case["reason"] is None)


@pytest.mark.parametrize(
    "case", [c for c in _REJECTION_CASES if c["reason"]], ids=lambda c: c["desc"]
)
def test_require_instantiable_raises_rejected_class(case: dict[str, Any]) -> None:
    with pytest.raises(FactoryError) as excinfo:
        uut.require_instantiable(case["reference"])

    assert excinfo.value.kind is FactoryErrorKind.REJECTED_CLASS
    assert case["reason"] in str(excinfo.value)
    assert excinfo.value.class_ref == case["reference"]


def test_require_instantiable_returns_class() -> None:
    assert uut.require_instantiable(ref("LogEvent")) is sc.LogEvent
