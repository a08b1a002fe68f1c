"""Property declarations of complex types.

A property is declared by one complex type and inherited by its subtypes.
A subtype may redeclare an inherited property: the result is a sub-property
that narrows the value type or changes display attributes, keeping the
name and cardinality of its ancestor property.

Usage:
    prop = Property({"name": "price", "value_type": "number"}, declaring_type, 0)
    prop.label         # "Price"
    sub = prop.override({"name": "price", "label": "Unit price"}, sub_type)
    sub.ancestor is prop  # True
    sub.value_type is prop.value_type  # True
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from typeloader.core.attributes import InheritableAttribute
from typeloader.core.specification import SpecificationContext, SpecificationScope
from typeloader.errors import ArgumentInvalidError, ArgumentRequiredError, OperationInvalidError
from typeloader.model.instance import Type, to_str
from typeloader.properties.operations import normalize_property_spec, title_from_name

if TYPE_CHECKING:
    from typeloader.model.instance import Instance


def _default_count_max(prop: Property) -> int | None:
    return None if prop.is_list else 1


def _from_value_type(attribute: str):
    def default(prop: Property) -> Any:
        return getattr(prop.value_type, attribute)

    return default


def _narrows(value_type: Type, base_type: Type) -> bool:
    # Anonymous list types all extend the list base; compare their element types.
    if value_type.is_subtype_of(base_type):
        return True
    return value_type.is_list and base_type.is_list and value_type.of.is_subtype_of(base_type.of)


def _count(value: Any) -> int:
    count = int(value)
    if count < 0:
        raise ArgumentInvalidError("spec.count", "Counts cannot be negative.")
    return count


class Property:
    """A named, typed slot of a complex type.

    Args:
        spec: Property specification: `name`, `value_type`, `is_list`, and
            display attributes. Copied, never retained.
        declaring_type: The complex type declaring the property.
        ordinal: Position of the property in the declaring type.
        ancestor: The overridden property, for sub-properties.

    Raises:
        ArgumentRequiredError: If the name is missing or empty.
        ArgumentInvalidError: If a sub-property changes the name or the
            cardinality, or does not narrow the value type.
    """

    _ATTRIBUTE_KEYS: ClassVar[frozenset[str]] = frozenset(
        {
            "label",
            "description",
            "category",
            "help_url",
            "is_browsable",
            "count_min",
            "count_max",
            "default_value",
        }
    )

    label = InheritableAttribute(cast=to_str, default=lambda prop: title_from_name(prop.name))
    description = InheritableAttribute(
        cast=to_str, default=_from_value_type("description"), cache_default=True
    )
    category = InheritableAttribute(cast=to_str, default=_from_value_type("category"), cache_default=True)
    help_url = InheritableAttribute(cast=to_str, default=_from_value_type("help_url"), cache_default=True)
    is_browsable = InheritableAttribute(cast=bool, default=True)
    count_min = InheritableAttribute(cast=_count, default=0)
    count_max = InheritableAttribute(cast=_count, default=_default_count_max)
    default_value = InheritableAttribute()

    def __init__(
        self,
        spec: str | Mapping[str, Any],
        declaring_type: Type,
        ordinal: int,
        ancestor: Property | None = None,
    ) -> None:
        spec = normalize_property_spec(spec)
        self._declaring_type = declaring_type
        self._ordinal = ordinal
        self._ancestor = ancestor
        self._attributes: dict[str, Any] = {}
        self._annotations: dict[str, Any] = {}

        name = spec.pop("name", None)
        if ancestor is None:
            if not name:
                raise ArgumentRequiredError("spec.name")
            self._name = str(name)
        else:
            if name is not None and name != ancestor.name:
                raise ArgumentInvalidError("spec.name", "Sub-property has a different 'name' value.")
            self._name = ancestor.name

        self._value_type = self._init_value_type(spec.pop("value_type", None), spec.pop("is_list", None))
        self.configure(spec)

    def _init_value_type(self, value_type_ref: Any, is_list: Any) -> Type:
        ancestor = self._ancestor
        if is_list is not None:
            is_list = bool(is_list)
            if ancestor is not None and is_list != ancestor.is_list:
                raise ArgumentInvalidError("spec.is_list", "Sub-property has a different 'list' value.")

        if value_type_ref is None:
            if ancestor is not None:
                return ancestor.value_type
            loader = self._declaring_type.loader
            value_type_ref = loader.settings.list_base_type if is_list else loader.settings.default_property_type

        value_type = self._resolve(value_type_ref)
        if ancestor is not None:
            is_list = ancestor.is_list
        if is_list and not value_type.is_list:
            value_type = self._resolve([value_type])
        elif is_list is False and value_type.is_list:
            if ancestor is not None:
                raise ArgumentInvalidError("spec.value_type", "Sub-property has a different 'list' value.")
            raise ArgumentInvalidError("spec.value_type", "A list value type requires a list property.")

        if ancestor is not None:
            if not _narrows(value_type, ancestor.value_type):
                raise ArgumentInvalidError(
                    "spec.value_type",
                    f"Sub-property's 'value_type' '{value_type}' is not a subtype of '{ancestor.value_type}'.",
                )
        return value_type

    def _resolve(self, ref: Any) -> Type:
        if isinstance(ref, Type):
            return ref
        instance_class: type[Instance] = self._declaring_type.loader.resolve_type(ref)
        return instance_class.type

    # region Structure
    @property
    def name(self) -> str:
        return self._name

    @property
    def value_type(self) -> Type:
        """The type of the values of the property."""
        return self._value_type

    @property
    def is_list(self) -> bool:
        """Whether the property holds a list of values."""
        return self._value_type.is_list

    @property
    def element_type(self) -> Type:
        """The element type of list properties, else the value type."""
        return self._value_type.of if self.is_list else self._value_type

    @property
    def declaring_type(self) -> Type:
        return self._declaring_type

    @property
    def ordinal(self) -> int:
        return self._ordinal

    @property
    def ancestor(self) -> Property | None:
        """The property this property overrides, if any."""
        return self._ancestor

    @property
    def root(self) -> Property:
        """The root property of the override chain."""
        prop = self
        while prop._ancestor is not None:
            prop = prop._ancestor
        return prop

    @property
    def annotations(self) -> dict[str, Any]:
        merged = dict(self._ancestor.annotations) if self._ancestor is not None else {}
        merged.update(self._annotations)
        return merged
    # endregion

    def override(self, spec: str | Mapping[str, Any], declaring_type: Type) -> Property:
        """Create a sub-property of this property, declared by a subtype.

        Args:
            spec: Sub-property specification. Its name, if given, must match.
            declaring_type: The subtype declaring the sub-property.

        Returns:
            The new sub-property, at the same position as this property.

        Raises:
            ArgumentInvalidError: If `declaring_type` is not a subtype of this
                property's declaring type, or the specification breaks
                sub-property rules.
        """
        if declaring_type is self._declaring_type or not declaring_type.is_subtype_of(self._declaring_type):
            raise ArgumentInvalidError(
                "declaring_type", f"Type '{declaring_type}' is not a subtype of '{self._declaring_type}'."
            )
        return Property(spec, declaring_type, self._ordinal, self)

    def configure(self, config: Mapping[str, Any]) -> Property:
        """Configure display and validation attributes.

        Raises:
            ArgumentInvalidError: If `config` changes the name or the cardinality.
            OperationInvalidError: If `config` changes the value type.
        """
        for key, value in config.items():
            if key == "name":
                if value != self._name:
                    raise ArgumentInvalidError("spec.name", "Sub-property has a different 'name' value.")
            elif key == "is_list":
                if value is not None and bool(value) != self.is_list:
                    raise ArgumentInvalidError("spec.is_list", "Sub-property has a different 'list' value.")
            elif key == "value_type":
                if value is not None and self._resolve(value) is not self._value_type:
                    raise OperationInvalidError(f"Cannot change the value type of property '{self._name}'.")
            elif key in self._ATTRIBUTE_KEYS:
                setattr(self, key, value)
            else:
                self._annotations[key] = value
        return self

    def to_spec(self, context: SpecificationContext | None = None) -> dict[str, Any]:
        """Get the specification of the property, as declared by its declaring type."""
        with SpecificationScope(context) as scope:
            spec: dict[str, Any] = {"name": self._name}
            if self._ancestor is None or self._ancestor.value_type is not self._value_type:
                spec["value_type"] = self._value_type.to_ref(scope.context)
            for key in sorted(self._ATTRIBUTE_KEYS):
                if getattr(Property, key).is_explicit(self):
                    spec[key] = self._attributes[key].value
            spec.update(self._annotations)
            return spec

    def __repr__(self) -> str:
        return f"Property({self._declaring_type}.{self._name})"
