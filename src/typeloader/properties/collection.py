"""Ordered collection of the properties of a complex type."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any, overload

from typeloader.core.specification import SpecificationContext, SpecificationScope
from typeloader.errors import (
    ArgumentInvalidError,
    ArgumentInvalidTypeError,
    ArgumentRequiredError,
    OperationInvalidError,
)
from typeloader.model.instance import Type
from typeloader.properties.models import Property
from typeloader.properties.operations import normalize_property_spec


class PropertyCollection:
    """The properties of a complex type, inherited ones included.

    Inherited properties keep their positions. Redeclaring an inherited
    property replaces it, at the same position, by a sub-property.

    Args:
        declaring_type: The complex type owning the collection.
        ancestor: The collection of the ancestor complex type, if any.
    """

    def __init__(self, declaring_type: Type, ancestor: PropertyCollection | None = None) -> None:
        self._declaring_type = declaring_type
        self._props: list[Property] = list(ancestor) if ancestor is not None else []
        self._by_name: dict[str, Property] = {prop.name: prop for prop in self._props}

    @property
    def declaring_type(self) -> Type:
        return self._declaring_type

    def configure(self, config: Sequence[Any] | Mapping[str, Any]) -> PropertyCollection:
        """Add or configure properties.

        Args:
            config: Either a list of property specifications (names or
                mappings) or a mapping from property name to specification.

        Raises:
            ArgumentRequiredError: If `config` is None.
            ArgumentInvalidError: If a mapped specification names a different property.
        """
        if config is None:
            raise ArgumentRequiredError("config")

        if isinstance(config, Mapping):
            for name, spec in config.items():
                spec = normalize_property_spec(spec if spec is not None else name)
                if spec.setdefault("name", name) != name:
                    raise ArgumentInvalidError("config", "Property name does not match object key.")
                self.add(spec)
        elif isinstance(config, Sequence) and not isinstance(config, str):
            for spec in config:
                self.add(spec)
        else:
            raise ArgumentInvalidTypeError("config", ["Sequence", "Mapping"], type(config).__name__)
        return self

    def add(self, spec: str | Mapping[str, Any]) -> Property:
        """Declare, override or reconfigure one property.

        A bare name of an existing property is a no-op.

        Returns:
            The property now registered under the specified name.

        Raises:
            OperationInvalidError: If the property is new, or inherited and
                not yet overridden, and the declaring type is already created.
        """
        is_name = isinstance(spec, str)
        spec = normalize_property_spec(spec)
        name = spec.get("name")
        if not name:
            raise ArgumentRequiredError("spec.name")

        existing = self._by_name.get(name)
        if existing is not None:
            if is_name:
                return existing
            if existing.declaring_type is self._declaring_type:
                return existing.configure(spec)
            self._assert_configuring(name)
            prop = existing.override(spec, self._declaring_type)
            self._props[self._props.index(existing)] = prop
        else:
            self._assert_configuring(name)
            prop = Property(spec, self._declaring_type, len(self._props))
            self._props.append(prop)

        self._by_name[name] = prop
        return prop

    def _assert_configuring(self, name: str) -> None:
        if not self._declaring_type.is_configuring:
            raise OperationInvalidError(
                f"Cannot declare property '{name}' of type '{self._declaring_type}' after it has been created."
            )

    def get(self, name: str) -> Property | None:
        """Get a property by name, or None."""
        return self._by_name.get(name)

    def has(self, name: str) -> bool:
        return name in self._by_name

    def index_of(self, prop: Property | str) -> int:
        """Get the position of a property, or -1."""
        if isinstance(prop, str):
            prop = self._by_name.get(prop)
        for index, item in enumerate(self._props):
            if item is prop:
                return index
        return -1

    @property
    def names(self) -> list[str]:
        return [prop.name for prop in self._props]

    def to_spec(self, context: SpecificationContext | None = None) -> list[dict[str, Any]]:
        """Get the specifications of the properties declared or overridden by the owning type."""
        with SpecificationScope(context) as scope:
            return [
                prop.to_spec(scope.context) for prop in self._props if prop.declaring_type is self._declaring_type
            ]

    @overload
    def __getitem__(self, key: int) -> Property: ...

    @overload
    def __getitem__(self, key: str) -> Property: ...

    def __getitem__(self, key: int | str) -> Property:
        if isinstance(key, str):
            return self._by_name[key]
        return self._props[key]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Property]:
        return iter(list(self._props))

    def __len__(self) -> int:
        return len(self._props)

    def __repr__(self) -> str:
        return f"PropertyCollection({self._declaring_type}, {self.names})"
