"""Class system models: override markers and member filtering."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

OVERRIDE_PARAMETER = "base"
"""Name of the parameter through which an override receives the ancestor implementation."""

type BaseMethod = Callable[..., Any]
"""The ancestor implementation, already bound to the receiving instance or class."""

MIXIN_EXCLUDED_MEMBERS = frozenset(
    {
        "type",
        "type_class",
    }
)
"""Class attributes that describe a class and are never copied by `mix`."""

MIXIN_INCLUDED_DUNDERS = frozenset(
    {
        "__init__",
        "__str__",
        "__repr__",
    }
)
"""Dunder members that `mix` copies; all other dunders belong to the mixin itself."""


def no_base(*args: Any, **kwargs: Any) -> None:
    """Ancestor implementation used when there is nothing to override."""
    return None
