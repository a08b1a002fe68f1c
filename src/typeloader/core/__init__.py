"""Core functionalities: class extension, specification contexts and inheritable attributes.

Architecture Note:
    core/ holds the mechanisms every type builds on and knows nothing about
    concrete types. The value model lives in model/, resolution in loader/.
"""

from typeloader.core.attributes import INHERITED, Explicit, Inheritable, InheritableAttribute
from typeloader.core.classes import (
    OVERRIDE_PARAMETER,
    Base,
    BaseMethod,
    calls_base,
    extend_class,
    iter_mixin_members,
    lookup_member,
    merge_property,
    mix_into,
    no_base,
    prepare_member,
)
from typeloader.core.specification import (
    TEMPORARY_ID_PREFIX,
    SpecificationContext,
    SpecificationScope,
    current_context,
    current_loader,
    is_id_temporary,
)

__all__ = [
    # Attributes
    "Explicit",
    "INHERITED",
    "Inheritable",
    "InheritableAttribute",
    # Classes
    "OVERRIDE_PARAMETER",
    "Base",
    "BaseMethod",
    "calls_base",
    "extend_class",
    "iter_mixin_members",
    "lookup_member",
    "merge_property",
    "mix_into",
    "no_base",
    "prepare_member",
    # Specification
    "TEMPORARY_ID_PREFIX",
    "SpecificationContext",
    "SpecificationScope",
    "current_context",
    "current_loader",
    "is_id_temporary",
]
