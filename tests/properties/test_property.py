"""Tests for property declaration, inheritance and overriding."""

import pytest

from typeloader import (
    ArgumentInvalidError,
    ArgumentRequiredError,
    Complex,
    List,
    Number,
    OperationInvalidError,
    Property,
    PropertyCollection,
    String,
    Value,
)
from typeloader.properties import title_from_name


class Shape(Complex, type_spec={"id": "test/shape", "props": [
    {"name": "size", "value_type": "number", "description": "Size in cm"},
    {"name": "labels", "value_type": ["string"]},
    "note",
]}):
    pass


class Smaller(Number, type_spec={"id": "test/smaller"}):
    pass


def test_title_from_name():
    assert title_from_name("name") == "Name"
    assert title_from_name("firstName") == "First Name"
    assert title_from_name("unit_price2") == "Unit Price2"
    assert title_from_name("") == ""


def test_declaration_defaults():
    note = Shape.type.props["note"]

    assert note.value_type is Value.type
    assert not note.is_list
    assert note.label == "Note"
    assert note.count_min == 0
    assert note.count_max == 1
    assert note.is_browsable
    assert note.ordinal == 2
    assert note.declaring_type is Shape.type
    assert note.root is note


def test_list_property():
    labels = Shape.type.props["labels"]

    assert labels.is_list
    assert labels.element_type is String.type
    assert labels.count_max is None


def test_is_list_wraps_element_type():
    Tagged = Complex.extend(type_spec={"props": [{"name": "tags", "value_type": "string", "is_list": True}]})
    tags = Tagged.type.props["tags"]

    assert tags.is_list
    assert tags.value_type.of is String.type
    assert tags.value_type.instance_class is Shape.type.props["labels"].value_type.instance_class


def test_list_value_type_with_is_list_false_is_rejected():
    with pytest.raises(ArgumentInvalidError):
        Complex.extend(type_spec={"props": [{"name": "tags", "value_type": ["string"], "is_list": False}]})


def test_name_is_required():
    with pytest.raises(ArgumentRequiredError):
        Complex.extend(type_spec={"props": [{"value_type": "string"}]})
    with pytest.raises(ArgumentRequiredError):
        Complex.extend(type_spec={"props": [""]})


def test_sub_property_narrows_value_type():
    Circle = Shape.extend(type_spec={"props": [{"name": "size", "value_type": Smaller, "label": "Radius"}]})
    size = Circle.type.props["size"]

    assert size.ancestor is Shape.type.props["size"]
    assert size.root is Shape.type.props["size"]
    assert size.value_type is Smaller.type
    assert size.ordinal == 0
    assert Circle.type.props.index_of(size) == 0
    assert size.label == "Radius"
    assert Shape.type.props["size"].label == "Size"


def test_sub_property_inherits_attributes():
    Circle = Shape.extend(type_spec={"props": [{"name": "size", "category": "geometry"}]})
    size = Circle.type.props["size"]

    assert size.value_type is Number.type
    assert size.description == "Size in cm"
    assert size.category == "geometry"


def test_sub_property_unrelated_value_type_is_rejected():
    """CRITICAL: A sub-property's value type must be its ancestor's or a subtype.

    Why: Values of the subtype must stay valid for the base type's property.
    """
    with pytest.raises(ArgumentInvalidError):
        Shape.extend(type_spec={"props": [{"name": "size", "value_type": "string"}]})


def test_sub_property_cardinality_mismatch_is_rejected():
    """CRITICAL: A sub-property cannot change singular to list or back.

    Why: Cardinality is part of the identity of the property.
    """
    with pytest.raises(ArgumentInvalidError, match="'list'"):
        Shape.extend(type_spec={"props": [{"name": "size", "is_list": True}]})
    with pytest.raises(ArgumentInvalidError, match="'list'"):
        Shape.extend(type_spec={"props": [{"name": "labels", "value_type": "string", "is_list": False}]})
    with pytest.raises(ArgumentInvalidError):
        Shape.extend(type_spec={"props": [{"name": "size", "value_type": ["number"]}]})


def test_sub_property_list_element_narrowing():
    Names = Shape.extend(type_spec={"props": [{"name": "labels", "value_type": "string"}]})

    assert Names.type.props["labels"].is_list
    assert Names.type.props["labels"].element_type is String.type


def test_override_with_different_name_is_rejected():
    size = Shape.type.props["size"]
    Circle = Shape.extend()

    with pytest.raises(ArgumentInvalidError, match="'name'"):
        size.override({"name": "radius"}, Circle.type)


def test_override_requires_subtype():
    with pytest.raises(ArgumentInvalidError):
        Shape.type.props["size"].override({"name": "size"}, Complex.extend().type)


def test_label_reset_and_empty():
    Circle = Shape.extend(type_spec={"props": [{"name": "note", "label": ""}]})
    note = Circle.type.props["note"]

    assert note.label == ""
    note.label = None
    assert note.label == "Note"


def test_description_defaults_to_value_type_and_is_cached():
    Described = Number.extend(type_spec={"description": "A number"})
    Holder = Complex.extend(type_spec={"props": [{"name": "amount", "value_type": Described}]})
    amount = Holder.type.props["amount"]

    assert amount.description == "A number"
    Described.type.description = "Changed"
    assert amount.description == "A number"


def test_collection_map_form():
    Mapped = Complex.extend(type_spec={"props": {"a": {"value_type": "string"}, "b": None}})

    assert Mapped.type.props.names == ["a", "b"]
    assert Mapped.type.props["a"].value_type is String.type


def test_collection_map_form_name_mismatch():
    with pytest.raises(ArgumentInvalidError, match="does not match"):
        Complex.extend(type_spec={"props": {"a": {"name": "b"}}})


def test_collection_bare_name_of_existing_is_noop():
    Same = Shape.extend(type_spec={"props": ["size"]})

    assert Same.type.props["size"] is Shape.type.props["size"]


def test_collection_redeclaration_in_same_spec_reconfigures():
    Twice = Complex.extend(type_spec={"props": ["a", {"name": "a", "label": "Alpha"}]})

    assert len(Twice.type.props) == 1
    assert Twice.type.props["a"].label == "Alpha"
    assert Twice.type.props["a"].ancestor is None


def test_collection_new_property_after_creation_is_rejected():
    with pytest.raises(OperationInvalidError):
        Shape.type.props.add("extra")
    with pytest.raises(OperationInvalidError):
        Shape.extend().type.props.add({"name": "size", "label": "Late"})


def test_value_type_cannot_change_after_declaration():
    with pytest.raises(OperationInvalidError):
        Shape.type.props["size"].configure({"value_type": "string"})


def test_collection_lookup():
    props = Shape.type.props

    assert isinstance(props, PropertyCollection)
    assert props.has("size") and "size" in props
    assert props.get("missing") is None
    assert props[0].name == "size"
    assert props.index_of("note") == 2
    assert props.index_of("missing") == -1
    assert [p.name for p in props] == ["size", "labels", "note"]


def test_property_to_spec():
    Circle = Shape.extend(type_spec={"props": [{"name": "size", "label": "Radius"}]})

    assert Shape.type.props["size"].to_spec() == {
        "name": "size",
        "value_type": "typeloader/number",
        "description": "Size in cm",
    }
    assert Circle.type.props["size"].to_spec() == {"name": "size", "label": "Radius"}


def test_property_counts_are_validated():
    with pytest.raises(ArgumentInvalidError):
        Complex.extend(type_spec={"props": [{"name": "a", "count_min": -1}]})


def test_property_is_declared_for_list_type():
    assert isinstance(Shape.type.props["labels"], Property)
    assert issubclass(Shape.type.props["labels"].value_type.instance_class, List)
