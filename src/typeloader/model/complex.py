"""Complex values: structured values holding one value per property.

Usage:
    Person = Complex.extend(type_spec={"props": [
        {"name": "name", "value_type": "string"},
        {"name": "tags", "value_type": ["string"]},
    ]})

    person = Person({"name": "Ann", "tags": ["a", "b"]})
    person.get("name").value       # "Ann"
    person.get("tags").count       # 2
    Person(["Ann"]).get("name").value  # positional form
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, ClassVar, Self

from typeloader.core.specification import SpecificationContext
from typeloader.errors import ArgumentInvalidError, ArgumentInvalidTypeError
from typeloader.model.instance import Type
from typeloader.model.value import Element
from typeloader.properties import Property, PropertyCollection

if TYPE_CHECKING:
    from typeloader.model.lists import List


class ComplexType(Type):
    """Descriptor of complex types. Owns the property collection."""

    is_complex: ClassVar[bool] = True

    def _init(self, spec: Mapping[str, Any]) -> None:
        ancestor = self.ancestor
        self._props = PropertyCollection(self, ancestor.props if isinstance(ancestor, ComplexType) else None)

    @property
    def props(self) -> PropertyCollection:
        """The properties of the type, inherited ones included."""
        return self._props

    def get_property(self, name: str) -> Property:
        """Get a property by name.

        Raises:
            ArgumentInvalidError: If the type has no such property.
        """
        prop = self._props.get(name)
        if prop is None:
            raise ArgumentInvalidError("name", f"Type '{self}' has no property '{name}'.")
        return prop

    def _configure_special(self, key: str, value: Any) -> bool:
        if key != "props":
            return False
        if value is not None:
            self._props.configure(value)
        return True

    def _fill_spec(self, spec: dict[str, Any], context: SpecificationContext) -> None:
        props = self._props.to_spec(context)
        if props:
            spec["props"] = props


class Complex(Element, type_spec={"id": "typeloader/complex", "alias": "complex", "is_abstract": True}):
    """A structured value.

    Args:
        spec: A mapping from property name to value specification, a sequence
            of value specifications in property order, or None. Missing values
            take the property's default value. List properties always hold a
            list, possibly empty.
    """

    type_class = ComplexType

    def __init__(self, spec: Any = None, **key_args: Any) -> None:
        super().__init__(spec, **key_args)
        self._values: dict[str, Any] = {}

        if isinstance(spec, Complex):
            spec = spec._copyable_values()

        if spec is None or isinstance(spec, Mapping):
            read = (spec or {}).get
            for prop in self.type.props:
                self._values[prop.name] = self._to_prop_value(prop, read(prop.name))
        elif isinstance(spec, Sequence) and not isinstance(spec, str):
            for index, prop in enumerate(self.type.props):
                self._values[prop.name] = self._to_prop_value(prop, spec[index] if index < len(spec) else None)
        else:
            raise ArgumentInvalidTypeError("spec", ["Mapping", "Sequence"], type(spec).__name__)

    def _to_prop_value(self, prop: Property, raw: Any) -> Any:
        if raw is None:
            raw = prop.default_value
        if prop.is_list:
            if isinstance(raw, Element) and not raw.type.is_list:
                raw = [raw]
            return prop.value_type.to_value(raw if raw is not None else [], self.type.loader)
        return prop.value_type.to_value(raw, self.type.loader)

    def _copyable_values(self) -> dict[str, Any]:
        # Lists are owned by their complex value; copy their elements instead.
        return {
            name: value.to_array() if value is not None and value.type.is_list else value
            for name, value in self._values.items()
        }

    def get(self, name: str) -> Any:
        """Get the value of a property.

        Raises:
            ArgumentInvalidError: If the type has no such property.
        """
        return self._values[self.type.get_property(name).name]

    def set(self, name: str, value: Any) -> None:
        """Set the value of a property.

        List properties are reconciled in place with the given elements.

        Raises:
            ArgumentInvalidError: If the type has no such property, or the
                value does not fit the property's value type.
        """
        prop = self.type.get_property(name)
        if prop.is_list:
            current: List = self._values[name]
            current.set(value if value is not None else [])
        else:
            self._values[name] = prop.value_type.to_value(value, self.type.loader)

    def clone(self) -> Self:
        return type(self)({name: self._clone_value(value) for name, value in self._values.items()})

    @staticmethod
    def _clone_value(value: Any) -> Any:
        return value.clone() if value is not None else None

    def check_update_from(self, other: Element) -> None:
        super().check_update_from(other)
        self._plan_update(other)

    def _update_from(self, other: Complex) -> None:
        plan = self._plan_update(other)
        for prop, prepared in plan:
            if prop.is_list:
                self._values[prop.name]._apply_set(prepared)
            else:
                self._values[prop.name] = prepared

    def _plan_update(self, other: Complex) -> list[tuple[Property, Any]]:
        # Converts every value before any property is assigned.
        values = other._copyable_values()
        plan: list[tuple[Property, Any]] = []
        for prop in self.type.props:
            if prop.name not in values:
                continue
            value = values[prop.name]
            if prop.is_list:
                current: List = self._values[prop.name]
                plan.append((prop, current._plan_set(value if value is not None else [])))
            else:
                plan.append((prop, prop.value_type.to_value(value, self.type.loader)))
        return plan

    def to_spec(self) -> dict[str, Any]:
        """Get the specification of this value, by property name."""
        spec: dict[str, Any] = {}
        for name, value in self._values.items():
            spec[name] = value.to_spec() if value is not None else None
        return spec

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_spec()!r})"
