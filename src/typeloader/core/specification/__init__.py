"""Specification contexts: temporary ids scoped to one root specification."""

from typeloader.core.specification.core import (
    SpecificationScope,
    current_context,
    current_loader,
)
from typeloader.core.specification.models import (
    TEMPORARY_ID_PREFIX,
    SpecificationContext,
    is_id_temporary,
)

__all__ = [
    "TEMPORARY_ID_PREFIX",
    "SpecificationContext",
    "SpecificationScope",
    "current_context",
    "current_loader",
    "is_id_temporary",
]
