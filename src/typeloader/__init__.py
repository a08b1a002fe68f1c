"""typeloader: runtime type and instance resolution.

Usage:
    from typeloader import Loader, ModuleRegistry

    modules = ModuleRegistry()
    modules.define_value("acme/person", {
        "base": "complex",
        "props": [
            {"name": "name", "value_type": "string"},
            {"name": "nicknames", "value_type": ["string"]},
        ],
    })

    loader = Loader(modules=modules)
    Person = await loader.resolve_type_async("acme/person")

    ann = Person({"name": "Ann", "nicknames": ["Annie"]})
    ann.get("nicknames").add("Nan")

    Names = loader.resolve_type(["string"])  # list of strings
"""

__version__ = "0.1.0"

# Errors
from typeloader.errors import (
    ArgumentInvalidError,
    ArgumentInvalidTypeError,
    ArgumentRequiredError,
    ModuleNotAvailableError,
    NotImplementedOperationError,
    OperationInvalidError,
    TypeLoaderError,
)

# Core primitives
from typeloader.core import (
    Base,
    SpecificationContext,
    SpecificationScope,
    current_context,
    is_id_temporary,
)

# Value model
from typeloader.model import (
    Boolean,
    Complex,
    ComplexType,
    Element,
    Instance,
    List,
    ListType,
    Number,
    Simple,
    SimpleType,
    String,
    Type,
    Value,
)

# Properties
from typeloader.properties import Property, PropertyCollection

# Info
from typeloader.info import InstanceInfoRegistry, TypeInfoRegistry

# Configuration
from typeloader.config import LoaderSettings

# Loader
from typeloader.loader import (
    ImportlibModuleLoader,
    InstanceConfig,
    Loader,
    LoaderConfig,
    ModuleLoader,
    ModuleRegistry,
    get_loader,
    set_loader,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "TypeLoaderError",
    "ArgumentRequiredError",
    "ArgumentInvalidError",
    "ArgumentInvalidTypeError",
    "OperationInvalidError",
    "NotImplementedOperationError",
    "ModuleNotAvailableError",
    # Core
    "Base",
    "SpecificationContext",
    "SpecificationScope",
    "current_context",
    "is_id_temporary",
    # Model
    "Type",
    "SimpleType",
    "ComplexType",
    "ListType",
    "Instance",
    "Value",
    "Element",
    "Simple",
    "String",
    "Number",
    "Boolean",
    "Complex",
    "List",
    # Properties
    "Property",
    "PropertyCollection",
    # Info
    "TypeInfoRegistry",
    "InstanceInfoRegistry",
    # Loader
    "Loader",
    "LoaderConfig",
    "InstanceConfig",
    "ModuleLoader",
    "ModuleRegistry",
    "ImportlibModuleLoader",
    "get_loader",
    "set_loader",
    # Config
    "LoaderSettings",
]
