"""Abstract value and element types."""

from __future__ import annotations

from typing import Any, Self

from typeloader.errors import ArgumentInvalidError, NotImplementedOperationError
from typeloader.model.instance import Instance


class Value(Instance, type_spec={"id": "typeloader/value", "alias": "value", "is_abstract": True}):
    """Root of value types: anything a property can hold."""

    def clone(self) -> Self:
        """Create a shallow copy of this value."""
        raise NotImplementedOperationError(f"{type(self).__name__}.clone")

    def equals(self, other: Any) -> bool:
        """Check if `other` is a value of the same type with the same key."""
        return self is other or (
            isinstance(other, Value) and other.type is self.type and other.key == self.key
        )


class Element(Value, type_spec={"id": "typeloader/element", "alias": "element", "is_abstract": True}):
    """Root of types that can be stored in lists.

    Lists identify elements by `key`. When a value with the key of an existing
    element is added to a list, the existing element is updated from it.
    """

    def update_from(self, other: Element) -> None:
        """Update this element in place with the content of `other`.

        Raises:
            ArgumentInvalidError: If `other` is not of the type of this element,
                or holds a value this element cannot take.
            NotImplementedOperationError: If the element type does not support updates.
        """
        self.check_update_from(other)
        self._update_from(other)

    def check_update_from(self, other: Element) -> None:
        """Validate an update from `other` without applying it."""
        if not other.type.is_subtype_of(self.type):
            raise ArgumentInvalidError(
                "other", f"Cannot update an element of type '{self.type}' from one of type '{other.type}'."
            )

    def _update_from(self, other: Element) -> None:
        raise NotImplementedOperationError(f"{type(self).__name__}.update_from")
