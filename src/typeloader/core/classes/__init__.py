"""Class system: extension with explicit super-call wiring and mixins."""

from typeloader.core.classes.core import (
    Base,
    extend_class,
    iter_mixin_members,
    lookup_member,
    mix_into,
)
from typeloader.core.classes.models import OVERRIDE_PARAMETER, BaseMethod, no_base
from typeloader.core.classes.operations import calls_base, merge_property, prepare_member

__all__ = [
    # Models
    "OVERRIDE_PARAMETER",
    "BaseMethod",
    "no_base",
    # Operations
    "calls_base",
    "merge_property",
    "prepare_member",
    # Core
    "Base",
    "extend_class",
    "mix_into",
    "iter_mixin_members",
    "lookup_member",
]
