"""Type and instance resolution.

Usage:
    modules = ModuleRegistry()
    modules.define_value("acme/point", {"props": [
        {"name": "x", "value_type": "number"},
        {"name": "y", "value_type": "number"},
    ]})
    loader = Loader({"acme/origin": {"type_id": "acme/point", "ranking": 10}}, modules=modules)

    Point = await loader.resolve_type_async("acme/point")
    Point is loader.resolve_type("acme/point")           # True, now cached

    # Anonymous types, with temporary ids shared inside one specification
    Pair = loader.resolve_type({
        "props": [
            {"name": "first", "value_type": {"id": "_:1", "props": ["name"]}},
            {"name": "second", "value_type": "_:1"},
        ]
    })

    # Instances
    loader.resolve_instance({"_": "acme/point", "x": 1, "y": 2})
    loader.resolve_instance("text", type_ref="value")    # String("text")
    await loader.get_instance_of_type_async("acme/point")  # best ranked
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from collections.abc import Callable, Iterable, Mapping
from contextvars import ContextVar
from typing import Any, NoReturn

from typeloader.config import LoaderSettings
from typeloader.core.specification import (
    SpecificationContext,
    SpecificationScope,
    current_context,
    is_id_temporary,
)
from typeloader.errors import (
    ArgumentInvalidError,
    ArgumentInvalidTypeError,
    ArgumentRequiredError,
    OperationInvalidError,
)
from typeloader.info import InstanceInfoRegistry, TypeInfoRegistry
from typeloader.loader.dependencies import iter_instance_dependencies, iter_type_dependencies
from typeloader.loader.models import InstanceInfo, LoaderConfig
from typeloader.loader.modules import ModuleLoader, ModuleRegistry
from typeloader.loader.operations import class_name_from_id, default_instance_class
from typeloader.model import STANDARD_TYPES, Instance, Type

logger = logging.getLogger(__name__)

type TypeRef = str | type[Instance] | Type | list[Any] | Mapping[str, Any]
type InstanceFilter = Callable[[Instance], bool]

# Module ids being loaded by the current asynchronous call chain.
_loading_chain: ContextVar[frozenset[str]] = ContextVar("typeloader_loading_chain", default=frozenset())


class Loader:
    """Resolves type references to instance classes and instance references to instances.

    Every operation has a synchronous form, which only uses modules that are
    already loaded, and an asynchronous form, which first loads every module
    the reference depends on, all at once, and then runs the synchronous form.

    Args:
        config: Known instances: a mapping from instance id to
            `{"type_id" | "typeId": str, "ranking": number}`, or a `LoaderConfig`.
        modules: Module loader. Defaults to an empty `ModuleRegistry`.
        type_info: Known type ids, aliases and bases.
        instance_info: Known instance ids and their types.
        settings: Resolution defaults. Defaults to `LoaderSettings()`.
    """

    def __init__(
        self,
        config: LoaderConfig | Mapping[str, Any] | None = None,
        *,
        modules: ModuleLoader | None = None,
        type_info: TypeInfoRegistry | None = None,
        instance_info: InstanceInfoRegistry | None = None,
        settings: LoaderSettings | None = None,
    ) -> None:
        self.settings = settings if settings is not None else LoaderSettings()
        self.modules: ModuleLoader = modules if modules is not None else ModuleRegistry()
        self.type_info = type_info if type_info is not None else TypeInfoRegistry()
        self.instance_info = instance_info if instance_info is not None else InstanceInfoRegistry()

        self._by_type_id: dict[str, type[Instance]] = {}
        self._list_types: dict[tuple[int, int], type[Instance]] = {}
        self._resolving: set[str] = set()

        self._instances_by_id: dict[str, Instance] = {}
        self._instance_infos_by_id: dict[str, InstanceInfo] = {}
        self._instance_infos_by_type_id: dict[str, list[InstanceInfo]] = {}
        self._instance_index = itertools.count()

        for instance_class in STANDARD_TYPES:
            self.register_type(instance_class)

        self._import_instances(config)

    # region Registration
    def register_type(self, instance_class: type[Instance] | Type) -> type[Instance]:
        """Register an identified type, making it resolvable by id and alias.

        The closest identified ancestor is recorded as its base in the type info.

        Raises:
            ArgumentInvalidError: If the type is anonymous, or another type is
                already registered with its id.
        """
        if isinstance(instance_class, Type):
            instance_class = instance_class.instance_class
        type_ = instance_class.type
        if type_.id is None:
            raise ArgumentInvalidError("instance_class", "Anonymous types cannot be registered.")

        existing = self._by_type_id.get(type_.id)
        if existing is not None:
            if existing is not instance_class:
                raise ArgumentInvalidError("instance_class", f"Type '{type_.id}' is already registered.")
            return existing

        base = type_.ancestor
        while base is not None and base.id is None:
            base = base.ancestor
        self.type_info.declare(type_.id, base=base.id if base is not None else None, alias=type_.alias)
        self._by_type_id[type_.id] = instance_class
        logger.debug("Registered type '%s'", type_.id)
        return instance_class

    def register_instance(self, instance_id: str, type_id: str | None = None, ranking: float = 0) -> InstanceInfo:
        """Register a known instance for ranked discovery.

        Args:
            instance_id: Instance (module) id.
            type_id: Id or alias of its type. Defaults to the type declared
                in the instance info.
            ranking: Priority among the instances of the type. Higher wins.

        Raises:
            ArgumentRequiredError: If no type id is given or declared.
            ArgumentInvalidError: If the instance is already registered.
        """
        if not instance_id:
            raise ArgumentRequiredError("instance_id")
        type_id = type_id or self.instance_info.get_type_of(instance_id)
        if not type_id:
            raise ArgumentRequiredError("type_id", f"Instance '{instance_id}' has no declared type.")
        type_id = self._translate_id(type_id)
        if instance_id in self._instance_infos_by_id:
            raise ArgumentInvalidError("instance_id", f"Instance '{instance_id}' is already registered.")

        if instance_id not in self.instance_info:
            self.instance_info.declare(instance_id, type_id=type_id)
        info = InstanceInfo(instance_id, type_id, float(ranking), next(self._instance_index))
        self._instance_infos_by_id[instance_id] = info
        bucket = self._instance_infos_by_type_id.setdefault(type_id, [])
        bucket.append(info)
        bucket.sort(key=lambda item: item.sort_key)
        logger.debug("Registered instance '%s' of type '%s' (ranking %s)", instance_id, type_id, ranking)
        return info

    def _import_instances(self, config: LoaderConfig | Mapping[str, Any] | None) -> None:
        if not isinstance(config, LoaderConfig):
            config = LoaderConfig.model_validate(dict(config or {}))
        configs = config.root

        for declaration in self.instance_info:
            instance_config = configs.get(declaration.id)
            ranking = instance_config.ranking if instance_config is not None else 0
            self.register_instance(declaration.id, declaration.type_id, ranking)

        for instance_id, instance_config in configs.items():
            if instance_id not in self._instance_infos_by_id:
                self.register_instance(instance_id, instance_config.type_id, instance_config.ranking)
    # endregion

    # region Types
    def resolve_type(self, type_ref: TypeRef) -> type[Instance]:
        """Resolve a type reference synchronously.

        Args:
            type_ref: A permanent id or alias, a temporary id (inside a
                generic specification), an instance class, a type, a list
                shorthand `[element_ref]`, or a generic specification
                `{id?, base?, of?, props?, mixins?, ...}`.

        Returns:
            The instance class.

        Raises:
            ArgumentRequiredError: If `type_ref` is empty.
            ArgumentInvalidError: If `type_ref` is malformed or breaks a rule.
            ModuleNotAvailableError: If a referenced module is not loaded.
        """
        return self._resolve_type(type_ref)

    async def resolve_type_async(self, type_ref: TypeRef) -> type[Instance]:
        """Resolve a type reference, loading every module it depends on first."""
        await self._load_dependencies(iter_type_dependencies(type_ref, self._is_known))
        return self._resolve_type(type_ref)

    def _resolve_type(self, type_ref: Any) -> type[Instance]:
        if type_ref is None or type_ref == "":
            raise ArgumentRequiredError("type_ref")
        if isinstance(type_ref, str):
            return self._resolve_type_by_id(type_ref)
        if isinstance(type_ref, Type):
            return type_ref.instance_class
        if isinstance(type_ref, type):
            if not issubclass(type_ref, Instance):
                raise ArgumentInvalidError("type_ref", f"Class '{type_ref.__name__}' is not an instance class.")
            return type_ref
        if isinstance(type_ref, list):
            if len(type_ref) != 1:
                raise ArgumentInvalidError("type_ref", "List type specifications must have a single element.")
            return self._resolve_type({"base": self.settings.list_base_type, "of": type_ref[0]})
        if isinstance(type_ref, Mapping):
            return self._resolve_type_by_spec(type_ref)
        raise ArgumentInvalidTypeError("type_ref", ["str", "type", "Type", "list", "Mapping"], type(type_ref).__name__)

    def _resolve_type_by_id(self, type_id: str) -> type[Instance]:
        if is_id_temporary(type_id):
            context = current_context()
            if context is None:
                raise ArgumentInvalidError(
                    "type_ref", "Temporary ids cannot occur outside of a generic type specification."
                )
            type_ = context.get(type_id)
            if type_ is None:
                raise ArgumentInvalidError("type_ref", "Temporary id does not correspond to a known type.")
            return type_.instance_class

        type_id = self._translate_id(type_id)
        instance_class = self._by_type_id.get(type_id)
        if instance_class is not None:
            return instance_class
        return self._type_from_module(type_id, self.modules.require_sync(type_id))

    def _resolve_type_by_spec(self, spec: Mapping[str, Any]) -> type[Instance]:
        type_id = spec.get("id")
        if type_id:
            if is_id_temporary(type_id):
                context = current_context()
                existing = context.get(type_id) if context is not None else None
                if existing is not None:
                    return existing.instance_class
            else:
                type_id = self._translate_id(type_id)
                known = self._by_type_id.get(type_id)
                if known is not None:
                    return known
                # A module defining the id takes precedence over the inline specification.
                if type_id not in self._resolving and self.modules.is_defined(type_id):
                    return self._resolve_type_by_id(type_id)

        with SpecificationScope(loader=self) as scope:
            return self._create_type_by_object_spec(spec, scope.context)

    def _create_type_by_object_spec(self, spec: Mapping[str, Any], context: SpecificationContext) -> type[Instance]:
        spec = dict(spec)
        type_id = spec.get("id")
        base_class = self._resolve_type(spec.pop("base", None) or self.settings.default_base_type)

        list_key = self._list_type_key(base_class, spec)
        if list_key is not None:
            cached = self._list_types.get(list_key)
            if cached is not None:
                return cached

        instance_class = base_class.extend(
            class_name_from_id(type_id, base_class.__name__), None, None, type_spec=spec
        )
        logger.debug("Created type '%s' extending '%s'", instance_class.type, base_class.type)

        if is_id_temporary(type_id):
            context.add(instance_class.type, type_id)
        elif type_id:
            self.register_type(instance_class)
        elif list_key is not None:
            self._list_types[list_key] = instance_class
        return instance_class

    def _list_type_key(self, base_class: type[Instance], spec: dict[str, Any]) -> tuple[int, int] | None:
        # Only `{base: <list>, of: X}` specifications are shared.
        if not base_class.type.is_list or set(spec) != {"of"}:
            return None
        of_type = self._resolve_type(spec["of"]).type
        spec["of"] = of_type
        return (base_class.type.uid, of_type.uid)

    def _type_from_module(self, type_id: str, value: Any) -> type[Instance]:
        if callable(value) and not isinstance(value, type):
            value = value(self)
            if inspect.isawaitable(value):
                close = getattr(value, "close", None)
                if close is not None:
                    close()
                raise OperationInvalidError(
                    f"Type module '{type_id}' has an asynchronous factory. Use resolve_type_async."
                )
        return self._type_from_value(type_id, value)

    def _type_from_value(self, type_id: str, value: Any) -> type[Instance]:
        cached = self._by_type_id.get(type_id)
        if cached is not None:
            return cached
        if type_id in self._resolving:
            raise OperationInvalidError(f"Type '{type_id}' depends on itself.")

        self._resolving.add(type_id)
        try:
            if isinstance(value, Mapping):
                instance_class = self._resolve_type(value if "id" in value else {**value, "id": type_id})
            elif isinstance(value, (str, list, type, Type)):
                instance_class = self._resolve_type(value)
            else:
                raise ArgumentInvalidTypeError(
                    "module", ["type", "Type", "Mapping", "list", "str", "Callable"], type(value).__name__
                )
        finally:
            self._resolving.discard(type_id)

        if instance_class.type.id is not None:
            self.register_type(instance_class)
        self._by_type_id.setdefault(type_id, instance_class)
        logger.debug("Loaded type module '%s'", type_id)
        return self._by_type_id[type_id]

    async def _load_type_async(self, type_id: str) -> None:
        type_id = self._translate_id(type_id)
        if type_id in self._by_type_id or not self.modules.is_defined(type_id):
            # Undefined ids fail, if referenced, when the type is built.
            return

        value = await self.modules.require_async(type_id)
        if callable(value) and not isinstance(value, type):
            value = value(self)
            if inspect.isawaitable(value):
                value = await value

        if isinstance(value, Mapping) and "id" not in value:
            value = {**value, "id": type_id}
        await self._load_dependencies(iter_type_dependencies(value, self._is_known))
        self._type_from_value(type_id, value)

    def _translate_id(self, id_or_alias: str) -> str:
        return self.type_info.get_id_of(id_or_alias) or id_or_alias

    def get_subtypes_of(
        self,
        base_type_id: str,
        *,
        is_browsable: bool | None = None,
        is_abstract: bool | None = None,
    ) -> list[type[Instance]]:
        """Get the declared subtypes, at any depth, of a type. They must be loaded.

        Args:
            base_type_id: Id or alias of the base type.
            is_browsable: If given, only types with this `is_browsable` value.
            is_abstract: If given, only types with this `is_abstract` value.
        """
        subtype_ids = self._subtype_ids_of(base_type_id)
        return self._filter_types([self._resolve_type(i) for i in subtype_ids], is_browsable, is_abstract)

    async def get_subtypes_of_async(
        self,
        base_type_id: str,
        *,
        is_browsable: bool | None = None,
        is_abstract: bool | None = None,
    ) -> list[type[Instance]]:
        """Get the declared subtypes, at any depth, of a type, loading them first."""
        subtype_ids = self._subtype_ids_of(base_type_id)
        classes = await asyncio.gather(*(self.resolve_type_async(i) for i in subtype_ids))
        return self._filter_types(list(classes), is_browsable, is_abstract)

    def _subtype_ids_of(self, base_type_id: str) -> list[str]:
        if not base_type_id:
            raise ArgumentRequiredError("base_type_id")
        return self.type_info.get_subtypes_of(base_type_id, include_descendants=True) or []

    @staticmethod
    def _filter_types(
        classes: list[type[Instance]],
        is_browsable: bool | None,
        is_abstract: bool | None,
    ) -> list[type[Instance]]:
        return [
            cls
            for cls in classes
            if (is_browsable is None or cls.type.is_browsable == is_browsable)
            and (is_abstract is None or cls.type.is_abstract == is_abstract)
        ]
    # endregion

    # region Instances
    def resolve_instance(
        self,
        inst_ref: Any,
        inst_keys: Mapping[str, Any] | None = None,
        type_ref: TypeRef | None = None,
    ) -> Instance | None:
        """Resolve an instance reference synchronously.

        Args:
            inst_ref: One of:
                - `{"$instance": {"id": str}}`: a registered instance by id;
                - `{"$instance": {"type": type_ref, "filter"?, "is_required"?}}`:
                  the best ranked instance of a type, or, when `type` is a list
                  shorthand, a list of all matching instances;
                - `{"_": type_ref, ...}`: an instance of an inline type;
                - any other value, given to the constructor of `type_ref`, or to
                  the simple type it defaults to when `type_ref` is abstract.
            inst_keys: Keyword arguments for the instance constructor.
            type_ref: Type the instance must be of.

        Returns:
            The instance, or None if `inst_ref` is None or an optional search
            found nothing.

        Raises:
            ArgumentInvalidError: If the instance is not of type `type_ref`.
            OperationInvalidError: If a required search finds nothing, or the
                type of a bare value cannot be determined.
        """
        base_class = self._resolve_type(type_ref) if type_ref is not None else None
        return self._resolve_instance(inst_ref, inst_keys, base_class)

    async def resolve_instance_async(
        self,
        inst_ref: Any,
        inst_keys: Mapping[str, Any] | None = None,
        type_ref: TypeRef | None = None,
    ) -> Instance | None:
        """Resolve an instance reference, loading every module it depends on first."""
        base_class = await self.resolve_type_async(type_ref) if type_ref is not None else None

        special = inst_ref.get("$instance") if isinstance(inst_ref, Mapping) else None
        if special is not None:
            return await self._resolve_special_async(special, base_class)

        await self._load_dependencies(iter_instance_dependencies(inst_ref, self._is_known))
        return self._resolve_instance(inst_ref, inst_keys, base_class)

    def _resolve_instance(
        self,
        inst_ref: Any,
        inst_keys: Mapping[str, Any] | None,
        base_class: type[Instance] | None,
    ) -> Instance | None:
        if inst_ref is None:
            return None
        if isinstance(inst_ref, Instance):
            return self._check_instance(inst_ref, base_class)

        keys = dict(inst_keys or {})
        if isinstance(inst_ref, Mapping):
            special = inst_ref.get("$instance")
            if special is not None:
                return self._resolve_special(special, base_class)
            if "_" in inst_ref:
                instance_class = self._resolve_type(inst_ref["_"])
                if base_class is not None:
                    base_class.type.assert_subtype(instance_class.type)
                return instance_class(inst_ref, **keys)

        if base_class is not None and not base_class.type.is_abstract:
            return base_class(inst_ref, **keys)

        default_class = default_instance_class(inst_ref)
        if default_class is not None and (base_class is None or default_class.type.is_subtype_of(base_class.type)):
            return default_class(inst_ref, **keys)
        if base_class is not None:
            base_class.type.raise_abstract()
        raise OperationInvalidError(f"Cannot determine the type of instance specification '{inst_ref!r}'.")

    @staticmethod
    def _check_instance(instance: Instance, base_class: type[Instance] | None) -> Instance:
        if base_class is not None:
            base_class.type.assert_subtype(instance.type)
        return instance

    def _parse_special(self, special: Any, base_class: type[Instance] | None) -> tuple[Any, Any, bool]:
        if not isinstance(special, Mapping):
            raise ArgumentInvalidTypeError("inst_ref.$instance", ["Mapping"], type(special).__name__)
        type_ref = special.get("type", base_class)
        if type_ref is None:
            raise ArgumentRequiredError("inst_ref.$instance.type")
        is_required = bool(special.get("is_required", special.get("isRequired", False)))
        return type_ref, special.get("filter"), is_required

    def _resolve_special(self, special: Any, base_class: type[Instance] | None) -> Instance | None:
        instance_id = special.get("id") if isinstance(special, Mapping) else None
        if instance_id:
            return self._check_instance(self._get_instance_by_id(instance_id), base_class)

        type_ref, instance_filter, is_required = self._parse_special(special, base_class)
        if isinstance(type_ref, list):
            list_class = self._resolve_type(type_ref)
            self._check_class(list_class, base_class)
            elems = self.get_instances_of_type(list_class.type.of, filter=instance_filter, is_required=is_required)
            return list_class(elems)

        instance = self.get_instance_of_type(type_ref, filter=instance_filter, is_required=is_required)
        return self._check_instance(instance, base_class) if instance is not None else None

    async def _resolve_special_async(self, special: Any, base_class: type[Instance] | None) -> Instance | None:
        instance_id = special.get("id") if isinstance(special, Mapping) else None
        if instance_id:
            return self._check_instance(await self._get_instance_by_id_async(instance_id), base_class)

        type_ref, instance_filter, is_required = self._parse_special(special, base_class)
        if isinstance(type_ref, list):
            list_class = await self.resolve_type_async(type_ref)
            self._check_class(list_class, base_class)
            elems = await self.get_instances_of_type_async(
                list_class.type.of, filter=instance_filter, is_required=is_required
            )
            return list_class(elems)

        instance = await self.get_instance_of_type_async(type_ref, filter=instance_filter, is_required=is_required)
        return self._check_instance(instance, base_class) if instance is not None else None

    @staticmethod
    def _check_class(instance_class: type[Instance], base_class: type[Instance] | None) -> None:
        if base_class is not None:
            base_class.type.assert_subtype(instance_class.type)

    def _get_instance_by_id(self, instance_id: str) -> Instance:
        instance = self._instances_by_id.get(instance_id)
        if instance is not None:
            return instance

        value = self.modules.require_sync(instance_id)
        if callable(value) and not isinstance(value, type):
            value = value(self)
            if inspect.isawaitable(value):
                close = getattr(value, "close", None)
                if close is not None:
                    close()
                raise OperationInvalidError(
                    f"Instance module '{instance_id}' has an asynchronous factory. Use an asynchronous method."
                )
        return self._instance_from_value(instance_id, value)

    async def _get_instance_by_id_async(self, instance_id: str) -> Instance:
        instance = self._instances_by_id.get(instance_id)
        if instance is not None:
            return instance

        value = await self.modules.require_async(instance_id)
        if callable(value) and not isinstance(value, type):
            value = value(self)
            if inspect.isawaitable(value):
                value = await value

        type_id = self._declared_type_of(instance_id)
        await self._load_dependencies(
            itertools.chain(
                iter_type_dependencies(type_id, self._is_known),
                iter_instance_dependencies(value, self._is_known),
            )
        )
        return self._instance_from_value(instance_id, value)

    def _instance_from_value(self, instance_id: str, value: Any) -> Instance:
        cached = self._instances_by_id.get(instance_id)
        if cached is not None:
            return cached

        type_id = self._declared_type_of(instance_id)
        base_class = self._resolve_type(type_id) if type_id else None
        instance = self._resolve_instance(value, None, base_class)
        if instance is None:
            raise OperationInvalidError(f"Instance module '{instance_id}' has no value.")
        self._instances_by_id[instance_id] = instance
        logger.debug("Loaded instance '%s'", instance_id)
        return instance

    def _declared_type_of(self, instance_id: str) -> str | None:
        info = self._instance_infos_by_id.get(instance_id)
        return info.type_id if info is not None else self.instance_info.get_type_of(instance_id)

    def _get_instance_infos(self, type_ref: Any) -> tuple[str, list[InstanceInfo]]:
        if isinstance(type_ref, str) and not is_id_temporary(type_ref):
            type_id = self._translate_id(type_ref)
        else:
            type_id = self._resolve_type(type_ref).type.id
            if type_id is None:
                raise ArgumentInvalidError("type_ref", "Anonymous types have no registered instances.")

        subtype_ids = self.type_info.get_subtypes_of(type_id, include_self=True, include_descendants=True)
        buckets = [
            bucket for i in subtype_ids or [type_id] if (bucket := self._instance_infos_by_type_id.get(i))
        ]
        if not buckets:
            return type_id, []
        if len(buckets) == 1:
            return type_id, buckets[0]
        return type_id, sorted(itertools.chain.from_iterable(buckets), key=lambda item: item.sort_key)

    @staticmethod
    def _raise_no_instance(type_id: str, cause: BaseException | None = None) -> NoReturn:
        raise OperationInvalidError(f"There is no defined matching instance of type '{type_id}'.") from cause

    def get_instance_of_type(
        self,
        type_ref: TypeRef,
        *,
        filter: InstanceFilter | None = None,
        is_required: bool = False,
    ) -> Instance | None:
        """Get the best ranked registered instance of a type or of its subtypes.

        Candidates must already be loaded.

        Args:
            type_ref: Id, alias, class or type of the instances.
            filter: Predicate candidates must satisfy.
            is_required: Raise instead of returning None when nothing matches.

        Raises:
            OperationInvalidError: If `is_required` and no instance matches.
            ModuleNotAvailableError: If a better ranked candidate is not loaded.
        """
        type_id, infos = self._get_instance_infos(type_ref)
        for info in infos:
            instance = self._get_instance_by_id(info.id)
            if filter is None or filter(instance):
                return instance
        if is_required:
            self._raise_no_instance(type_id)
        return None

    def get_instances_of_type(
        self,
        type_ref: TypeRef,
        *,
        filter: InstanceFilter | None = None,
        is_required: bool = False,
    ) -> list[Instance]:
        """Get all registered instances of a type or of its subtypes, best ranked first."""
        type_id, infos = self._get_instance_infos(type_ref)
        instances = [self._get_instance_by_id(info.id) for info in infos]
        instances = [instance for instance in instances if filter is None or filter(instance)]
        if is_required and not instances:
            self._raise_no_instance(type_id)
        return instances

    async def get_instance_of_type_async(
        self,
        type_ref: TypeRef,
        *,
        filter: InstanceFilter | None = None,
        is_required: bool = False,
    ) -> Instance | None:
        """Get the best ranked registered instance of a type, loading candidates first.

        Candidates that fail to load are skipped. Every candidate is awaited
        before the best one is chosen.
        """
        instances, type_id, error = await self._load_candidates(type_ref)
        for instance in instances:
            if instance is not None and (filter is None or filter(instance)):
                return instance
        if is_required:
            self._raise_no_instance(type_id, error)
        return None

    async def get_instances_of_type_async(
        self,
        type_ref: TypeRef,
        *,
        filter: InstanceFilter | None = None,
        is_required: bool = False,
    ) -> list[Instance]:
        """Get all registered instances of a type, loading them first. Failed loads are skipped."""
        instances, type_id, error = await self._load_candidates(type_ref)
        result = [i for i in instances if i is not None and (filter is None or filter(i))]
        if is_required and not result:
            self._raise_no_instance(type_id, error)
        return result

    async def _load_candidates(self, type_ref: Any) -> tuple[list[Instance | None], str, BaseException | None]:
        if not isinstance(type_ref, str):
            type_ref = await self.resolve_type_async(type_ref)
        type_id, infos = self._get_instance_infos(type_ref)
        results = await asyncio.gather(
            *(self._get_instance_by_id_async(info.id) for info in infos), return_exceptions=True
        )

        instances: list[Instance | None] = []
        error: BaseException | None = None
        for info, result in zip(infos, results, strict=True):
            if isinstance(result, Exception):
                logger.debug("Skipping instance '%s' of type '%s': %s", info.id, type_id, result)
                error = result
                instances.append(None)
            elif isinstance(result, BaseException):
                raise result
            else:
                instances.append(result)
        return instances, type_id, error
    # endregion

    # region Dependencies
    def _is_known(self, module_id: str) -> bool:
        return self._translate_id(module_id) in self._by_type_id or module_id in self._instances_by_id

    def _is_instance_id(self, module_id: str) -> bool:
        return module_id in self._instance_infos_by_id or module_id in self.instance_info

    async def _load_dependencies(self, module_ids: Iterable[str]) -> None:
        unique_ids = list(dict.fromkeys(module_ids))
        if unique_ids:
            await asyncio.gather(*(self._load_dependency(module_id) for module_id in unique_ids))

    async def _load_dependency(self, module_id: str) -> None:
        chain = _loading_chain.get()
        if module_id in chain:
            return
        token = _loading_chain.set(chain | {module_id})
        try:
            if self._is_instance_id(module_id):
                await self._get_instance_by_id_async(module_id)
            else:
                await self._load_type_async(module_id)
        finally:
            _loading_chain.reset(token)
    # endregion


_loader: Loader | None = None


def get_loader() -> Loader:
    """Access the default loader, creating it on first use.

    Types created outside any loader (e.g. by class statements) resolve
    their references through it.
    """
    global _loader
    if _loader is None:
        _loader = Loader()
    return _loader


def set_loader(loader: Loader | None) -> None:
    """Replace the default loader. None discards it; the next access creates a new one."""
    global _loader
    _loader = loader
