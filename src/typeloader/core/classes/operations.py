"""Override wiring for class extension and mixing.

A function opts into super-calls by naming its first parameter after
`self`/`cls` `base`:

    def describe(self, base, prefix):
        return prefix + base(prefix)

When it overrides an existing member, it is wrapped so that each call receives
the ancestor implementation bound to the same receiver. Functions that do not
declare `base` replace the ancestor member as-is.
"""

from __future__ import annotations

import functools
import inspect
from typing import Any

from typeloader.core.classes.models import OVERRIDE_PARAMETER, BaseMethod, no_base
from typeloader.errors import ArgumentInvalidError


def calls_base(func: Any) -> bool:
    """Check if a function declares the `base` override parameter.

    Args:
        func: Function to inspect.

    Returns:
        True if the second positional parameter is named `base`.
    """
    if not callable(func):
        return False
    try:
        params = list(inspect.signature(func).parameters)
    except (TypeError, ValueError):
        return False
    return len(params) >= 2 and params[1] == OVERRIDE_PARAMETER


def _original(func: Any) -> Any:
    return getattr(func, "__override_of__", func)


def _bind_to_instance(base_value: Any, obj: Any) -> BaseMethod:
    if base_value is None:
        return no_base
    if hasattr(base_value, "__get__"):
        return base_value.__get__(obj, type(obj))
    return base_value


def _bind_to_class(base_value: Any, cls: type) -> BaseMethod:
    if base_value is None:
        return no_base
    if isinstance(base_value, (classmethod, staticmethod)):
        return base_value.__get__(None, cls)
    if inspect.isfunction(base_value):
        return functools.partial(base_value, cls)
    return base_value


def override_method(method: Any, base_value: Any) -> Any:
    """Wrap an instance method so that it receives its ancestor implementation."""
    if not calls_base(method):
        return method
    if base_value is not None and _original(base_value) is _original(method):
        return base_value

    @functools.wraps(method)
    def override(self: Any, *args: Any, **kwargs: Any) -> Any:
        return method(self, _bind_to_instance(base_value, self), *args, **kwargs)

    override.__override_of__ = method  # type: ignore[attr-defined]
    return override


def override_class_method(method: Any, base_value: Any) -> classmethod:
    """Wrap a class-level function as a classmethod receiving its ancestor implementation."""
    if not calls_base(method):
        return classmethod(method)

    @functools.wraps(method)
    def override(cls: type, *args: Any, **kwargs: Any) -> Any:
        return method(cls, _bind_to_class(base_value, cls), *args, **kwargs)

    override.__override_of__ = method  # type: ignore[attr-defined]
    return classmethod(override)


def _override_accessor(accessor: Any, base_accessor: Any) -> Any:
    if accessor is None:
        return base_accessor
    if not calls_base(accessor):
        return accessor

    @functools.wraps(accessor)
    def override(self: Any, *args: Any) -> Any:
        base = functools.partial(base_accessor, self) if base_accessor is not None else no_base
        return accessor(self, base, *args)

    return override


def merge_property(value: property, base_value: Any) -> property:
    """Merge a property field-by-field with the ancestor's property.

    Accessors missing from `value` are inherited, so a subclass may override
    only the getter while keeping the setter.
    """
    base_prop = base_value if isinstance(base_value, property) else None
    fget = _override_accessor(value.fget, base_prop.fget if base_prop else None)
    fset = _override_accessor(value.fset, base_prop.fset if base_prop else None)
    fdel = _override_accessor(value.fdel, base_prop.fdel if base_prop else None)
    doc = value.__doc__ or (base_prop.__doc__ if base_prop else None)
    return property(fget, fset, fdel, doc)


def _check_field_conflict(name: str, base_value: Any) -> None:
    if base_value is None:
        return
    if callable(base_value) or hasattr(base_value, "__get__"):
        return
    raise ArgumentInvalidError(
        name, f"Cannot define method '{name}' over the non-callable field of the base class."
    )


def prepare_member(name: str, value: Any, base_value: Any, *, static: bool = False) -> Any:
    """Compute the value to store for a member given the value it overrides.

    Args:
        name: Member name.
        value: The value given in the specification.
        base_value: The raw member currently resolved for `name`, or None.
        static: Whether `value` comes from a class-level specification, in which
            case plain functions become classmethods.

    Returns:
        The value to place in the class namespace.

    Raises:
        ArgumentInvalidError: If a function would replace a plain data field.
    """
    if isinstance(value, property):
        return merge_property(value, base_value)
    if isinstance(value, staticmethod):
        return value
    if isinstance(value, classmethod):
        _check_field_conflict(name, base_value)
        return override_class_method(value.__func__, base_value)
    if inspect.isfunction(value):
        _check_field_conflict(name, base_value)
        if static:
            return override_class_method(value, base_value)
        return override_method(value, base_value)
    return value
