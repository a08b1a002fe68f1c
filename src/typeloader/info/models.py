"""Declarations of known types and instances."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class TypeInfo:
    """Declaration of a known type.

    Attributes:
        id: Permanent type id.
        alias: Short alias, if any.
        base_id: Id of the base type, if known.
    """

    id: str
    alias: str | None = None
    base_id: str | None = None


@dataclass(slots=True, frozen=True)
class InstanceDeclaration:
    """Declaration of a known instance.

    Attributes:
        id: Instance (module) id.
        type_id: Id of the type the instance is declared for.
    """

    id: str
    type_id: str
