"""Loader: type and instance resolution over module loaders."""

from typeloader.loader.dependencies import iter_instance_dependencies, iter_type_dependencies
from typeloader.loader.loader import Loader, get_loader, set_loader
from typeloader.loader.models import InstanceConfig, InstanceInfo, LoaderConfig
from typeloader.loader.modules import ImportlibModuleLoader, ModuleLoader, ModuleRegistry
from typeloader.loader.operations import class_name_from_id, default_instance_class

__all__ = [
    # Models
    "InstanceConfig",
    "InstanceInfo",
    "LoaderConfig",
    # Module loaders
    "ModuleLoader",
    "ModuleRegistry",
    "ImportlibModuleLoader",
    # Operations
    "class_name_from_id",
    "default_instance_class",
    "iter_type_dependencies",
    "iter_instance_dependencies",
    # Core
    "Loader",
    "get_loader",
    "set_loader",
]
