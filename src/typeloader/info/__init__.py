"""Type and instance info: what is known before anything is loaded."""

from typeloader.info.core import InstanceInfoRegistry, TypeInfoRegistry
from typeloader.info.models import InstanceDeclaration, TypeInfo

__all__ = [
    # Models
    "TypeInfo",
    "InstanceDeclaration",
    # Registries
    "TypeInfoRegistry",
    "InstanceInfoRegistry",
]
