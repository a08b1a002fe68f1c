"""Property model: declaration, inheritance and overriding of complex type properties."""

from typeloader.properties.collection import PropertyCollection
from typeloader.properties.models import Property
from typeloader.properties.operations import normalize_property_spec, title_from_name

__all__ = [
    "Property",
    "PropertyCollection",
    "normalize_property_spec",
    "title_from_name",
]
