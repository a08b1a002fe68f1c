"""Registries of known types and instances.

Type infos translate aliases and describe the type hierarchy before any
type is loaded. Instance infos list the known instances of each type.

Usage:
    types = TypeInfoRegistry()
    types.declare("my/shape", alias="shape")
    types.declare("my/circle", base="my/shape")
    types.get_id_of("shape")                         # "my/shape"
    types.get_subtypes_of("my/shape")                # ["my/circle"]

    instances = InstanceInfoRegistry()
    instances.declare("my/unit-circle", type_id="my/circle")
    instances.get_all_of_type("my/circle")           # ["my/unit-circle"]
"""

from __future__ import annotations

from collections.abc import Iterator

from typeloader.errors import ArgumentInvalidError, ArgumentRequiredError
from typeloader.info.models import InstanceDeclaration, TypeInfo


class TypeInfoRegistry:
    """Known type ids, their aliases and their bases."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._by_id: dict[str, TypeInfo] = {}
        self._id_by_alias: dict[str, str] = {}
        self._subtype_ids: dict[str, list[str]] = {}

    def declare(self, type_id: str, *, base: str | None = None, alias: str | None = None) -> TypeInfo:
        """Declare a type.

        Declaring a known type again fills in its missing alias or base.

        Args:
            type_id: Permanent type id.
            base: Id or alias of the base type.
            alias: Short alias of `type_id`.

        Returns:
            The type info.

        Raises:
            ArgumentRequiredError: If `type_id` is empty.
            ArgumentInvalidError: If the alias or the base conflicts with an
                existing declaration.
        """
        if not type_id:
            raise ArgumentRequiredError("type_id")

        base_id = (self.get_id_of(base) or base) if base else None
        existing = self._by_id.get(type_id)
        if existing is not None:
            if alias and existing.alias and alias != existing.alias:
                raise ArgumentInvalidError("alias", f"Type '{type_id}' already has alias '{existing.alias}'.")
            if base_id and existing.base_id and base_id != existing.base_id:
                raise ArgumentInvalidError("base", f"Type '{type_id}' already has base '{existing.base_id}'.")
            alias = alias or existing.alias
            base_id = base_id or existing.base_id

        if alias:
            owner = self._id_by_alias.get(alias)
            if owner is not None and owner != type_id:
                raise ArgumentInvalidError("alias", f"Alias '{alias}' already denotes type '{owner}'.")
            self._id_by_alias[alias] = type_id

        info = TypeInfo(type_id, alias, base_id)
        self._by_id[type_id] = info
        if base_id and (existing is None or existing.base_id is None):
            self._subtype_ids.setdefault(base_id, []).append(type_id)
        return info

    def get_id_of(self, id_or_alias: str | None) -> str | None:
        """Translate an id or alias to the declared id, or None if unknown."""
        if not id_or_alias:
            return None
        if id_or_alias in self._by_id:
            return id_or_alias
        return self._id_by_alias.get(id_or_alias)

    def get(self, id_or_alias: str) -> TypeInfo | None:
        """Get the info of a declared type, or None."""
        type_id = self.get_id_of(id_or_alias)
        return self._by_id.get(type_id) if type_id is not None else None

    def get_subtypes_of(
        self,
        base_id: str,
        *,
        include_self: bool = False,
        include_descendants: bool = False,
    ) -> list[str] | None:
        """Get the ids of the declared subtypes of a type.

        Args:
            base_id: Id or alias of the base type.
            include_self: Include `base_id` itself, first.
            include_descendants: Include subtypes at any depth, not only direct ones.

        Returns:
            The subtype ids in declaration order (depth first), or None if
            the base type is not declared.
        """
        type_id = self.get_id_of(base_id)
        if type_id is None:
            return None

        result = [type_id] if include_self else []
        pending = list(self._subtype_ids.get(type_id, ()))
        pending.reverse()
        while pending:
            subtype_id = pending.pop()
            result.append(subtype_id)
            if include_descendants:
                pending.extend(reversed(self._subtype_ids.get(subtype_id, ())))
        return result

    def __contains__(self, id_or_alias: object) -> bool:
        return isinstance(id_or_alias, str) and self.get_id_of(id_or_alias) is not None

    def __iter__(self) -> Iterator[TypeInfo]:
        return iter(list(self._by_id.values()))


class InstanceInfoRegistry:
    """Known instance ids and the ids of the types they are declared for."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._by_id: dict[str, InstanceDeclaration] = {}
        self._ids_by_type: dict[str, list[str]] = {}

    def declare(self, instance_id: str, *, type_id: str) -> InstanceDeclaration:
        """Declare an instance of a type.

        Raises:
            ArgumentRequiredError: If an id is empty.
            ArgumentInvalidError: If the instance is already declared for another type.
        """
        if not instance_id:
            raise ArgumentRequiredError("instance_id")
        if not type_id:
            raise ArgumentRequiredError("type_id")

        existing = self._by_id.get(instance_id)
        if existing is not None:
            if existing.type_id != type_id:
                raise ArgumentInvalidError(
                    "type_id", f"Instance '{instance_id}' is already declared of type '{existing.type_id}'."
                )
            return existing

        declaration = InstanceDeclaration(instance_id, type_id)
        self._by_id[instance_id] = declaration
        self._ids_by_type.setdefault(type_id, []).append(instance_id)
        return declaration

    def get_type_of(self, instance_id: str) -> str | None:
        """Get the type id of a declared instance, or None."""
        declaration = self._by_id.get(instance_id)
        return declaration.type_id if declaration is not None else None

    def get_all_of_type(self, type_id: str) -> list[str]:
        """Get the ids of the instances declared for exactly `type_id`, in declaration order."""
        return list(self._ids_by_type.get(type_id, ()))

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._by_id

    def __iter__(self) -> Iterator[InstanceDeclaration]:
        return iter(list(self._by_id.values()))

    def __len__(self) -> int:
        return len(self._by_id)
