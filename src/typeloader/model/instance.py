"""Root instance class and type descriptors.

Every instance class carries a `type` descriptor: its identifier (None for
anonymous types), its ancestor descriptor, whether it is abstract, and
inheritable display attributes. Descriptors are created when the instance
class is created, configured immediately from the type specification, and
frozen for structural changes afterwards.

Usage:
    Person = Complex.extend(type_spec={"id": "my/person", "props": ["name"]})
    Person.type.id               # "my/person"
    Person.type.ancestor         # Complex.type
    Person.type.configure({"label": "Person"})  # value-level, always allowed
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from typeloader.core.attributes import InheritableAttribute
from typeloader.core.classes import Base
from typeloader.core.specification import (
    SpecificationContext,
    SpecificationScope,
    current_loader,
    is_id_temporary,
)
from typeloader.errors import (
    ArgumentInvalidError,
    ArgumentRequiredError,
    OperationInvalidError,
)

if TYPE_CHECKING:
    from typeloader.loader.loader import Loader

_type_uids = itertools.count(1)
_instance_uids = itertools.count(1)


def to_str(value: Any) -> str:
    """Cast to str. Empty strings are kept as explicit empty values."""
    return str(value)


class Type:
    """Descriptor of an instance class.

    Attributes:
        label: Display label. Inherited.
        description: Description. Inherited.
        category: Category. Inherited.
        help_url: Help link. Inherited.
        is_browsable: Whether the type is shown in pickers. Inherited, default True.
    """

    # Keys with dedicated handling; every other key is stored as an annotation.
    _STRUCTURAL_KEYS: ClassVar[frozenset[str]] = frozenset({"id", "alias", "is_abstract", "mixins"})
    _ATTRIBUTE_KEYS: ClassVar[frozenset[str]] = frozenset(
        {"label", "description", "category", "help_url", "is_browsable"}
    )

    is_list: ClassVar[bool] = False
    is_complex: ClassVar[bool] = False
    is_simple: ClassVar[bool] = False

    label = InheritableAttribute(cast=to_str)
    description = InheritableAttribute(cast=to_str)
    category = InheritableAttribute(cast=to_str)
    help_url = InheritableAttribute(cast=to_str)
    is_browsable = InheritableAttribute(cast=bool, default=True)

    def __init__(
        self,
        instance_class: type[Instance],
        ancestor: Type | None,
        spec: Mapping[str, Any] | None = None,
    ) -> None:
        self._uid = next(_type_uids)
        self._instance_class = instance_class
        self._ancestor = ancestor
        self._attributes: dict[str, Any] = {}
        self._annotations: dict[str, Any] = {}
        self._id: str | None = None
        self._alias: str | None = None
        self._is_abstract = False
        self._loader = current_loader()
        self._is_configuring = True
        try:
            spec = dict(spec or {})
            self._init_id(spec.pop("id", None), spec.pop("alias", None))
            self._init(spec)
            self.configure(spec)
        finally:
            self._is_configuring = False

    def _init_id(self, type_id: Any, alias: Any) -> None:
        if type_id and not is_id_temporary(type_id):
            self._id = str(type_id)
            self._alias = str(alias) if alias else None
        elif alias:
            raise ArgumentInvalidError("spec.alias", "Anonymous types cannot have an alias.")

    def _init(self, spec: Mapping[str, Any]) -> None:
        """Initialize structural state before configuration. Subclass hook."""

    # region Identity and hierarchy
    @property
    def uid(self) -> int:
        """Process-unique number of this type."""
        return self._uid

    @property
    def id(self) -> str | None:
        """Permanent identifier, or None for anonymous types."""
        return self._id

    @property
    def alias(self) -> str | None:
        """Short alias of the identifier, if any."""
        return self._alias

    @property
    def short_id(self) -> str | None:
        """The alias, if any, else the identifier."""
        return self._alias or self._id

    @property
    def ancestor(self) -> Type | None:
        """The type this type extends, or None for the root."""
        return self._ancestor

    @property
    def instance_class(self) -> type[Instance]:
        """The instance class this type describes."""
        return self._instance_class

    @property
    def is_abstract(self) -> bool:
        """Whether instances cannot be created directly. Not inherited."""
        return self._is_abstract

    @property
    def is_configuring(self) -> bool:
        """True while the type is in its initial configuration phase."""
        return self._is_configuring

    @property
    def loader(self) -> Loader:
        """The loader used to resolve references made by this type."""
        type_: Type | None = self
        while type_ is not None:
            if type_._loader is not None:
                return type_._loader
            type_ = type_._ancestor

        from typeloader.loader.loader import get_loader

        return get_loader()

    @property
    def annotations(self) -> dict[str, Any]:
        """Arbitrary configuration, own entries overriding inherited ones."""
        chain: list[Type] = []
        type_: Type | None = self
        while type_ is not None:
            chain.append(type_)
            type_ = type_._ancestor
        merged: dict[str, Any] = {}
        for type_ in reversed(chain):
            merged.update(type_._annotations)
        return merged

    def is_subtype_of(self, other: Type | None) -> bool:
        """Check if this type is `other` or one of its descendants."""
        if other is None:
            return False
        type_: Type | None = self
        while type_ is not None:
            if type_ is other:
                return True
            type_ = type_._ancestor
        return False

    def assert_subtype(self, subtype: Type) -> None:
        """Raise if `subtype` is not this type or one of its descendants.

        Raises:
            ArgumentInvalidError: If `subtype` is not a subtype of this type.
        """
        if not subtype.is_subtype_of(self):
            raise ArgumentInvalidError(
                "type", f"Type '{subtype}' is not a subtype of '{self}'."
            )

    def raise_abstract(self) -> None:
        """Raise the error for an attempt to instantiate this abstract type."""
        raise OperationInvalidError(f"Cannot create instance of abstract type '{self}'.")
    # endregion

    # region Configuration
    def configure(self, config: Mapping[str, Any]) -> Type:
        """Configure the type.

        Value-level attributes (label, description, ...) and annotations can be
        configured at any time. Structural keys are only accepted while the
        type is being created.

        Args:
            config: Mapping of attribute names to values.

        Returns:
            This type.

        Raises:
            ArgumentRequiredError: If `config` is None.
            OperationInvalidError: If a structural key is given after creation.
        """
        if config is None:
            raise ArgumentRequiredError("config")

        for key, value in config.items():
            if key in self._ATTRIBUTE_KEYS:
                setattr(self, key, value)
            elif key in self._STRUCTURAL_KEYS or key == "base":
                self._configure_structural(key, value)
            elif not self._configure_special(key, value):
                self._annotations[key] = value
        return self

    def _configure_structural(self, key: str, value: Any) -> None:
        if key == "id":
            if value and not is_id_temporary(value) and value != self._id:
                raise OperationInvalidError(f"Cannot change the id of type '{self}'.")
            return
        if key == "alias":
            if value != self._alias:
                raise OperationInvalidError(f"Cannot change the alias of type '{self}'.")
            return
        if key == "base":
            # The base is consumed by the loader when the type is created.
            if not self._is_configuring:
                raise OperationInvalidError(f"Cannot change the base of type '{self}'.")
            return

        self._assert_configuring(key)
        if key == "is_abstract":
            self._is_abstract = bool(value)
        elif key == "mixins":
            self._apply_mixins(value)

    def _configure_special(self, key: str, value: Any) -> bool:
        """Handle a type-specific key. Returns False if `key` is not special."""
        return False

    def _assert_configuring(self, key: str) -> None:
        if not self._is_configuring:
            raise OperationInvalidError(
                f"Cannot configure '{key}' of type '{self}' after it has been created."
            )

    def _apply_mixins(self, mixins: Any) -> None:
        if mixins is None:
            return
        if isinstance(mixins, (str, type)) or not isinstance(mixins, Iterable):
            mixins = [mixins]
        for mixin in mixins:
            if isinstance(mixin, str):
                mixin = self.loader.resolve_type(mixin)
            if not isinstance(mixin, type):
                raise ArgumentInvalidError("spec.mixins", "Mixins must be classes or type ids.")
            self._instance_class.mix(mixin)
    # endregion

    # region Instances
    def create(self, spec: Any = None, **key_args: Any) -> Instance:
        """Create an instance of this type."""
        return self._instance_class(spec, **key_args)

    def to_value(self, value: Any, loader: Loader | None = None, **key_args: Any) -> Instance | None:
        """Convert a value to an instance of this type.

        Instances of this type pass through. Inline-typed (`{"_": ...}`) and
        `$instance` specifications, and values of abstract types, are resolved
        by `loader`, which defaults to the loader of this type.

        Raises:
            ArgumentInvalidError: If `value` is an instance of an unrelated type.
        """
        if value is None:
            return None
        if isinstance(value, Instance):
            self.assert_subtype(value.type)
            return value
        if self._is_abstract or (isinstance(value, Mapping) and ("_" in value or "$instance" in value)):
            return (loader or self.loader).resolve_instance(value, key_args or None, self)
        return self._instance_class(value, **key_args)
    # endregion

    # region Serialization
    def to_ref(self, context: SpecificationContext | None = None) -> str | dict[str, Any]:
        """Get a reference to this type: its id, its temporary id in `context`, or its full spec."""
        if self._id is not None:
            return self._id
        with SpecificationScope(context) as scope:
            temporary_id = scope.context.get_id_of(self)
            if temporary_id is not None:
                return temporary_id
            return self.to_spec(scope.context)

    def to_spec(self, context: SpecificationContext | None = None) -> dict[str, Any]:
        """Get a generic specification of this type.

        Anonymous types, including this one, receive temporary ids in the
        specification context, so resolving the result rebuilds an equivalent type.
        """
        with SpecificationScope(context) as scope:
            spec: dict[str, Any] = {"id": self._id if self._id is not None else scope.context.add(self)}
            if self._alias is not None:
                spec["alias"] = self._alias
            if self._ancestor is not None:
                spec["base"] = self._ancestor.to_ref(scope.context)
            if self._is_abstract:
                spec["is_abstract"] = True
            for key in sorted(self._ATTRIBUTE_KEYS):
                if getattr(type(self), key).is_explicit(self):
                    spec[key] = getattr(self, key)
            spec.update(self._annotations)
            self._fill_spec(spec, scope.context)
            return spec

    def _fill_spec(self, spec: dict[str, Any], context: SpecificationContext) -> None:
        """Add type-specific entries to a specification. Subclass hook."""
    # endregion

    def __str__(self) -> str:
        if self._id is not None:
            return self._id
        return f"<anonymous {self._ancestor}>" if self._ancestor is not None else "<anonymous>"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class Instance(Base):
    """Root of all instance classes.

    Subclasses receive their `type` descriptor on creation, from the
    `type_spec` class keyword:

        class Point(Complex, type_spec={"props": ["x", "y"]}):
            pass

        Point2 = Complex.extend(type_spec={"props": ["x", "y"]})

    A subclass may choose its descriptor class by declaring `type_class`.
    """

    type: ClassVar[Type]
    type_class: ClassVar[type[Type]] = Type

    def __init_subclass__(cls, type_spec: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        ancestor = next(b for b in cls.__mro__[1:] if issubclass(b, Instance)).type
        type_class = cls.__dict__.get("type_class", type(ancestor))
        if not issubclass(type_class, type(ancestor)):
            raise ArgumentInvalidError(
                "type_class", f"'{type_class.__name__}' must derive from '{type(ancestor).__name__}'."
            )
        cls.type = type_class(cls, ancestor, type_spec)

    def __new__(cls, *args: Any, **kwargs: Any) -> Instance:
        if cls.type.is_abstract:
            cls.type.raise_abstract()
        return super().__new__(cls)

    def __init__(self, spec: Any = None, **key_args: Any) -> None:
        self._uid = next(_instance_uids)

    @property
    def uid(self) -> int:
        """Process-unique number of this instance."""
        return self._uid

    @property
    def key(self) -> str:
        """Key identifying this instance within a list. Defaults to its uid."""
        return str(self._uid)


Instance.type = Type(Instance, None, {"id": "typeloader/instance", "alias": "instance", "is_abstract": True})
