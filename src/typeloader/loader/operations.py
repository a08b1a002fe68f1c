"""Helpers of the loader that do not depend on its state."""

from __future__ import annotations

import re
from typing import Any

from typeloader.core.specification import is_id_temporary
from typeloader.model import Boolean, Instance, Number, String

_ID_SEPARATORS = re.compile(r"[/.:]")
_NON_ALPHANUMERIC = re.compile(r"[^0-9A-Za-z]+")


def class_name_from_id(type_id: str | None, default: str) -> str:
    """Derive a class name from the last segment of a permanent type id.

    Examples:
        >>> class_name_from_id("acme/shapes/unit-circle", "Complex")
        'UnitCircle'
        >>> class_name_from_id("_:1", "Complex")
        'Complex'
    """
    if not type_id or is_id_temporary(type_id):
        return default
    segment = _ID_SEPARATORS.split(type_id)[-1]
    name = "".join(part[0].upper() + part[1:] for part in _NON_ALPHANUMERIC.split(segment) if part)
    return name if name and name[0].isalpha() else default


def default_instance_class(value: Any) -> type[Instance] | None:
    """Get the simple type a bare primitive value defaults to, if any."""
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return Boolean
    if isinstance(value, (int, float)):
        return Number
    if isinstance(value, str):
        return String
    return None
