"""Tests for simple values and the standard type hierarchy."""

import pytest

from typeloader import (
    ArgumentInvalidError,
    ArgumentRequiredError,
    Boolean,
    Complex,
    Element,
    Instance,
    List,
    Number,
    OperationInvalidError,
    Simple,
    String,
    Value,
)


def test_standard_hierarchy():
    assert String.type.ancestor is Simple.type
    assert Simple.type.ancestor is Element.type
    assert Complex.type.ancestor is Element.type
    assert List.type.ancestor is Value.type
    assert Value.type.ancestor is Instance.type
    assert Instance.type.ancestor is None


def test_standard_ids_and_aliases():
    assert String.type.id == "typeloader/string"
    assert String.type.alias == "string"
    assert String.type.short_id == "string"


def test_abstract_types_cannot_be_instantiated():
    """CRITICAL: Creating an instance of an abstract type fails.

    Why: Abstract types only describe a family of values.
    """
    with pytest.raises(OperationInvalidError, match="abstract"):
        Simple("x")
    with pytest.raises(OperationInvalidError):
        Element()


def test_abstract_flag_is_not_inherited():
    assert Simple.type.is_abstract
    assert not String.type.is_abstract


def test_simple_value_and_formatted():
    value = Number({"v": 1, "f": "one"})

    assert value.value == 1
    assert value.formatted == "one"
    assert str(value) == "one"
    assert value.to_spec() == {"v": 1, "f": "one"}


def test_simple_requires_value():
    with pytest.raises(ArgumentRequiredError):
        String(None)
    with pytest.raises(ArgumentRequiredError):
        String({"f": "only formatted"})


def test_number_casting_and_keys():
    assert Number(2).value == 2
    assert Number("2.5").value == 2.5
    assert Number(1.0).key == "1"
    assert Number(1).key == Number(1.0).key

    with pytest.raises(ArgumentInvalidError):
        Number("abc")
    with pytest.raises(ArgumentInvalidError):
        Number(True)


def test_boolean_casting():
    assert Boolean(True).value is True
    assert Boolean("false").value is False
    assert Boolean("TRUE").key == "true"

    with pytest.raises(ArgumentInvalidError):
        Boolean("yes")


def test_string_casting():
    assert String(12).value == "12"


def test_update_from_copies_formatted():
    target = Number(1)
    target.update_from(Number({"v": 1, "f": "uno"}))

    assert target.formatted == "uno"


def test_update_from_rejects_other_types():
    with pytest.raises(ArgumentInvalidError):
        Number(1).update_from(String("1"))


def test_clone_is_distinct_and_equal():
    original = String({"v": "a", "f": "A"})
    copy = original.clone()

    assert copy is not original
    assert copy.equals(original)
    assert copy.formatted == "A"


def test_to_value_passes_instances_through():
    value = String("a")

    assert String.type.to_value(value) is value
    assert Simple.type.to_value(value) is value
    with pytest.raises(ArgumentInvalidError):
        Number.type.to_value(value)


def test_type_is_subtype_of():
    assert String.type.is_subtype_of(Element.type)
    assert not Element.type.is_subtype_of(String.type)
    assert not String.type.is_subtype_of(None)
