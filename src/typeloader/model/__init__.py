"""Value model: the standard type catalog.

    instance (abstract)
    └── value (abstract)
        ├── element (abstract)
        │   ├── simple (abstract)
        │   │   ├── string
        │   │   ├── number
        │   │   └── boolean
        │   └── complex (abstract)
        └── list
"""

from typeloader.model.complex import Complex, ComplexType
from typeloader.model.instance import Instance, Type
from typeloader.model.lists import List, ListType
from typeloader.model.simple import Boolean, Number, Simple, SimpleType, String
from typeloader.model.value import Element, Value

STANDARD_TYPES: tuple[type[Instance], ...] = (
    Instance,
    Value,
    Element,
    Simple,
    String,
    Number,
    Boolean,
    Complex,
    List,
)
"""Instance classes every loader knows without loading any module."""

__all__ = [
    # Types
    "Type",
    "SimpleType",
    "ComplexType",
    "ListType",
    # Instances
    "Instance",
    "Value",
    "Element",
    "Simple",
    "String",
    "Number",
    "Boolean",
    "Complex",
    "List",
    "STANDARD_TYPES",
]
