"""Operations on property specifications."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from typeloader.errors import ArgumentInvalidTypeError, ArgumentRequiredError

_CASE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def title_from_name(name: str | None) -> str | None:
    """Generate a display title from a property name.

    Splits camelCase and snake_case words and capitalizes each word.

    Examples:
        >>> title_from_name("firstName")
        'First Name'
        >>> title_from_name("unit_price2")
        'Unit Price2'
    """
    if not name:
        return name
    words = _CASE_BOUNDARY.sub(" ", name.replace("_", " ")).split()
    return " ".join(word[0].upper() + word[1:] for word in words)


def normalize_property_spec(spec: str | Mapping[str, Any] | None) -> dict[str, Any]:
    """Convert a property specification to its mapping form.

    A bare string is shorthand for `{"name": string}`. The returned mapping
    is always a fresh copy.

    Raises:
        ArgumentRequiredError: If `spec` is None.
        ArgumentInvalidTypeError: If `spec` is neither a string nor a mapping.
    """
    if spec is None:
        raise ArgumentRequiredError("spec")
    if isinstance(spec, str):
        return {"name": spec}
    if isinstance(spec, Mapping):
        return dict(spec)
    raise ArgumentInvalidTypeError("spec", ["str", "Mapping"], type(spec).__name__)
