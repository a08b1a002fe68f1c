"""Class extension and mixin composition.

Usage:
    Animal = Base.extend("Animal", {
        "speak": lambda self: "...",
    })

    # `base` receives the ancestor implementation, bound to `self`
    def speak(self, base):
        return base() + "!"

    Dog = Animal.extend("Dog", {"speak": speak})

    # Mix members of another class, with the same override rules
    Dog.mix(LoudMixin)

Extension never mutates the base class; independent subclasses of the same
base do not affect each other.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Iterator, Mapping
from typing import Any, Self, overload

from typeloader.core.classes.models import MIXIN_EXCLUDED_MEMBERS, MIXIN_INCLUDED_DUNDERS
from typeloader.core.classes.operations import prepare_member
from typeloader.errors import ArgumentInvalidTypeError

type MemberSpec = Mapping[str, Any]


def lookup_member(cls: type, name: str) -> Any:
    """Get the raw (unbound) member `name` as resolved through the MRO of `cls`.

    Args:
        cls: Class to search.
        name: Member name.

    Returns:
        The first value found in a class `__dict__`, or None.
    """
    for klass in cls.__mro__:
        if name in klass.__dict__:
            return klass.__dict__[name]
    return None


def _unwrap(value: Any) -> Any:
    if isinstance(value, classmethod):
        func = value.__func__
        return classmethod(getattr(func, "__override_of__", func))
    return getattr(value, "__override_of__", value)


def _is_mixable(name: str) -> bool:
    if name in MIXIN_EXCLUDED_MEMBERS:
        return False
    if name.startswith("__") and name.endswith("__"):
        return name in MIXIN_INCLUDED_DUNDERS
    return True


def iter_mixin_members(mixin: type, target: type) -> Iterator[tuple[str, Any]]:
    """Yield the members a mixin class contributes to `target`.

    Walks the mixin's MRO from the most generic class, skipping classes
    `target` already inherits from, so later definitions win.
    """
    members: dict[str, Any] = {}
    inherited = set(target.__mro__)
    for klass in reversed(mixin.__mro__):
        if klass is object or klass in inherited:
            continue
        for name, value in klass.__dict__.items():
            if _is_mixable(name):
                members[name] = _unwrap(value)
    yield from members.items()


def _class_name(name: str | None, base_cls: type) -> str:
    return name or base_cls.__name__


def extend_class(
    base_cls: type,
    name: str | None = None,
    inst_spec: MemberSpec | None = None,
    class_spec: MemberSpec | None = None,
    **class_kwargs: Any,
) -> type:
    """Create a subclass of `base_cls` from instance and class member specifications.

    Args:
        base_cls: Class to extend. Never mutated.
        name: Name of the new class. Defaults to the base class name.
        inst_spec: Instance-level members (methods, properties, fields).
        class_spec: Class-level members. Plain functions become classmethods.
        **class_kwargs: Keyword arguments forwarded to `__init_subclass__`.

    Returns:
        The new subclass.

    Raises:
        ArgumentInvalidError: If a method would replace a non-callable base field.
    """
    namespace: dict[str, Any] = {"__module__": base_cls.__module__}
    for key, value in (inst_spec or {}).items():
        namespace[key] = prepare_member(key, value, lookup_member(base_cls, key))
    for key, value in (class_spec or {}).items():
        namespace[key] = prepare_member(key, value, lookup_member(base_cls, key), static=True)

    class_name = _class_name(name, base_cls)
    namespace.setdefault("__qualname__", class_name)

    return types.new_class(class_name, (base_cls,), class_kwargs, lambda ns: ns.update(namespace))


def mix_into(cls: type, inst_spec: type | MemberSpec | None, class_spec: MemberSpec | None = None) -> type:
    """Apply the members of a mixin class or specification onto `cls`, in place.

    The mixin itself is not modified. Overrides of existing members of `cls`
    are wired exactly as in `extend_class`.

    Args:
        cls: Class receiving the members.
        inst_spec: A mixin class or a mapping of instance-level members.
        class_spec: Optional mapping of class-level members.

    Returns:
        `cls`, for chaining.
    """
    if inst_spec is not None:
        if inspect.isclass(inst_spec):
            members: Iterator[tuple[str, Any]] | Any = iter_mixin_members(inst_spec, cls)
        elif isinstance(inst_spec, Mapping):
            members = inst_spec.items()
        else:
            raise ArgumentInvalidTypeError("inst_spec", ["type", "Mapping"], type(inst_spec).__name__)

        for key, value in list(members):
            setattr(cls, key, prepare_member(key, value, lookup_member(cls, key)))

    if class_spec is not None:
        for key, value in class_spec.items():
            setattr(cls, key, prepare_member(key, value, lookup_member(cls, key), static=True))

    return cls


class Base:
    """Root of classes built through `extend`.

    Subclasses may still be declared with regular class statements;
    `extend` is the dynamic equivalent that also wires `base` overrides.
    """

    @overload
    @classmethod
    def extend(
        cls,
        name: str,
        inst_spec: MemberSpec | None = None,
        class_spec: MemberSpec | None = None,
        **class_kwargs: Any,
    ) -> type[Self]: ...

    @overload
    @classmethod
    def extend(
        cls,
        name: MemberSpec | None = None,
        inst_spec: MemberSpec | None = None,
        **class_kwargs: Any,
    ) -> type[Self]: ...

    @classmethod
    def extend(
        cls,
        name: str | MemberSpec | None = None,
        inst_spec: MemberSpec | None = None,
        class_spec: MemberSpec | None = None,
        **class_kwargs: Any,
    ) -> type[Self]:
        """Create a subclass of this class.

        Supports two forms:
            Base.extend("Name", inst_spec, class_spec)
            Base.extend(inst_spec, class_spec)
        """
        if name is not None and not isinstance(name, str):
            name, inst_spec, class_spec = None, name, inst_spec
        return extend_class(cls, name, inst_spec, class_spec, **class_kwargs)

    @classmethod
    def mix(cls, inst_spec: type | MemberSpec | None, class_spec: MemberSpec | None = None) -> type[Self]:
        """Mix members of a class or specification into this class."""
        return mix_into(cls, inst_spec, class_spec)

    @classmethod
    def implement(cls, *specs: type | MemberSpec | None) -> type[Self]:
        """Mix each of the given instance-level specifications or classes, in order."""
        for spec in specs:
            if spec is not None:
                mix_into(cls, spec)
        return cls

    @classmethod
    def implement_static(cls, *specs: MemberSpec | None) -> type[Self]:
        """Mix each of the given class-level specifications, in order."""
        for spec in specs:
            if spec is not None:
                mix_into(cls, None, spec)
        return cls
