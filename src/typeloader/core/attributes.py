"""Inheritable attributes as tagged values.

An attribute slot holds either `Explicit(value)` or nothing (`INHERITED`).
Reading walks the owner's ancestor chain until an explicit value is found,
falling back to the attribute default. Assigning None resets the slot to
inherited; any other value, including "", is stored as explicit.

Usage:
    class Node:
        label = InheritableAttribute(cast=str)

        def __init__(self, ancestor=None):
            self._attributes = {}
            self.ancestor = ancestor

    root = Node()
    root.label = "Root"
    child = Node(root)
    child.label       # "Root" (inherited)
    child.label = ""  # explicit empty, not inherited
    child.label = None  # back to inherited
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Final


@dataclass(frozen=True, slots=True)
class Explicit[T]:
    """An explicitly assigned attribute value."""

    value: T


class _Inherited:
    __slots__ = ()

    def __repr__(self) -> str:
        return "INHERITED"


INHERITED: Final = _Inherited()
"""Marks a slot with no own value: the value comes from the ancestor or the default."""

type Inheritable[T] = Explicit[T] | _Inherited


class InheritableAttribute[T]:
    """Data descriptor implementing explicit-or-inherited attribute semantics.

    Owners must provide an `_attributes` dict and an ancestor attribute
    (named by `chain`) that is None at the root.

    Args:
        cast: Conversion applied to explicit values.
        default: Constant or callable `(owner) -> value` used when no explicit
            value exists anywhere in the chain.
        cache_default: Cache a computed default on the owner at first use.
        chain: Name of the owner attribute holding its ancestor.
    """

    def __init__(
        self,
        *,
        cast: Callable[[Any], T] | None = None,
        default: T | Callable[[Any], T] | None = None,
        cache_default: bool = False,
        chain: str = "ancestor",
    ) -> None:
        self._cast = cast
        self._default = default
        self._cache_default = cache_default
        self._chain = chain
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def slot(self, obj: Any) -> Inheritable[T]:
        """Get the own slot of `obj` for this attribute."""
        return obj._attributes.get(self.name, INHERITED)

    def is_explicit(self, obj: Any) -> bool:
        """Check if `obj` has its own explicit value."""
        return isinstance(self.slot(obj), Explicit)

    def _compute_default(self, obj: Any) -> T | None:
        if not callable(self._default):
            return self._default
        if not self._cache_default:
            return self._default(obj)
        defaults = obj.__dict__.setdefault("_attribute_defaults", {})
        if self.name not in defaults:
            defaults[self.name] = self._default(obj)
        return defaults[self.name]

    def __get__(self, obj: Any, owner: type | None = None) -> Any:
        if obj is None:
            return self
        node = obj
        while node is not None:
            slot = node._attributes.get(self.name, INHERITED)
            if isinstance(slot, Explicit):
                return slot.value
            node = getattr(node, self._chain)
        return self._compute_default(obj)

    def __set__(self, obj: Any, value: Any) -> None:
        if value is None:
            obj._attributes.pop(self.name, None)
        else:
            obj._attributes[self.name] = Explicit(self._cast(value) if self._cast else value)
