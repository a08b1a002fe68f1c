"""Specification context: temporary identifiers of anonymous types.

Temporary ids look like "_:1". They only mean something inside the
specification context that defines them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typeloader.model.instance import Type

TEMPORARY_ID_PREFIX = "_:"


def is_id_temporary(type_id: Any) -> bool:
    """Check if a value is a temporary type identifier.

    Args:
        type_id: Value to check.

    Returns:
        True if `type_id` is a string starting with the temporary id prefix.
    """
    return isinstance(type_id, str) and type_id.startswith(TEMPORARY_ID_PREFIX)


class SpecificationContext:
    """Registry binding temporary identifiers to types for one root specification.

    Used in both directions:
    - while resolving a generic specification, each anonymous type declared
      with a temporary id is bound to it (`add(type, id)`);
    - while serializing, anonymous types receive fresh temporary ids (`add(type)`).

    Attributes:
        loader: The loader that opened the context, if any. Types built while
            the context is active resolve their references through it.
    """

    def __init__(self, loader: Any = None) -> None:
        self.loader = loader
        self._types_by_id: dict[str, Type] = {}
        self._ids_by_uid: dict[int, str] = {}
        self._next_id = 1

    def get(self, temporary_id: str) -> Type | None:
        """Get the type bound to a temporary id, or None."""
        return self._types_by_id.get(temporary_id)

    def get_id_of(self, type_: Type) -> str | None:
        """Get the permanent id of a type, else its temporary id in this context, else None."""
        return type_.id or self._ids_by_uid.get(type_.uid)

    def add(self, type_: Type, temporary_id: str | None = None) -> str:
        """Add a type to the context.

        Args:
            type_: The type to add.
            temporary_id: Id to bind. When omitted, a fresh id is generated for
                anonymous types; identified types return their own id.

        Returns:
            The id of the type within this context. When `temporary_id` is
            already bound, the first binding is kept and the id returned.
        """
        if temporary_id is None:
            existing = self.get_id_of(type_)
            if existing is not None:
                return existing
            while (temporary_id := f"{TEMPORARY_ID_PREFIX}{self._next_id}") in self._types_by_id:
                self._next_id += 1
            self._next_id += 1

        if temporary_id in self._types_by_id:
            return temporary_id

        self._types_by_id[temporary_id] = type_
        self._ids_by_uid.setdefault(type_.uid, temporary_id)
        return temporary_id

    def __contains__(self, temporary_id: object) -> bool:
        return temporary_id in self._types_by_id

    def __len__(self) -> int:
        return len(self._types_by_id)

    def dispose(self) -> None:
        """Release all bindings."""
        self._types_by_id.clear()
        self._ids_by_uid.clear()
