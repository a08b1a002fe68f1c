"""Tests for type and instance info registries."""

import pytest

from typeloader import ArgumentInvalidError, ArgumentRequiredError
from typeloader.info import InstanceInfoRegistry, TypeInfoRegistry


@pytest.fixture
def types():
    registry = TypeInfoRegistry()
    registry.declare("test/shape", alias="shape")
    registry.declare("test/circle", base="shape")
    registry.declare("test/square", base="test/shape")
    registry.declare("test/unit-circle", base="test/circle")
    return registry


def test_alias_translation(types):
    assert types.get_id_of("shape") == "test/shape"
    assert types.get_id_of("test/shape") == "test/shape"
    assert types.get_id_of("unknown") is None
    assert "shape" in types


def test_base_recorded_by_id(types):
    assert types.get("test/circle").base_id == "test/shape"


def test_direct_subtypes(types):
    assert types.get_subtypes_of("shape") == ["test/circle", "test/square"]


def test_descendants_depth_first(types):
    assert types.get_subtypes_of("test/shape", include_self=True, include_descendants=True) == [
        "test/shape",
        "test/circle",
        "test/unit-circle",
        "test/square",
    ]


def test_unknown_base_has_no_subtypes(types):
    assert types.get_subtypes_of("test/unknown") is None


def test_redeclaration_fills_missing_fields():
    registry = TypeInfoRegistry()
    registry.declare("test/a")
    registry.declare("test/a", alias="a", base="test/root")

    assert registry.get("a").base_id == "test/root"
    assert registry.get_subtypes_of("test/root") == ["test/a"]


def test_conflicting_alias_is_rejected(types):
    with pytest.raises(ArgumentInvalidError):
        types.declare("test/other", alias="shape")
    with pytest.raises(ArgumentInvalidError):
        types.declare("test/shape", alias="figure")


def test_conflicting_base_is_rejected(types):
    with pytest.raises(ArgumentInvalidError):
        types.declare("test/circle", base="test/square")


def test_declare_requires_id():
    with pytest.raises(ArgumentRequiredError):
        TypeInfoRegistry().declare("")


def test_instance_declarations():
    registry = InstanceInfoRegistry()
    registry.declare("test/a", type_id="test/shape")
    registry.declare("test/b", type_id="test/shape")
    registry.declare("test/a", type_id="test/shape")

    assert registry.get_type_of("test/a") == "test/shape"
    assert registry.get_type_of("test/zzz") is None
    assert registry.get_all_of_type("test/shape") == ["test/a", "test/b"]
    assert len(registry) == 2


def test_instance_redeclared_with_other_type_is_rejected():
    registry = InstanceInfoRegistry()
    registry.declare("test/a", type_id="test/shape")

    with pytest.raises(ArgumentInvalidError):
        registry.declare("test/a", type_id="test/circle")
