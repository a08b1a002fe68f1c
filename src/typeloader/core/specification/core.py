"""Ambient specification context and its scope guard.

Usage:
    with SpecificationScope(loader=loader) as scope:
        scope.context.add(some_type, "_:1")
        current_context() is scope.context  # True

    current_context()  # None again, even if the body raised

Only the outermost scope pushes a context; nested scopes reuse it.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from types import TracebackType
from typing import Any

from typeloader.core.specification.models import SpecificationContext

_current: ContextVar[SpecificationContext | None] = ContextVar(
    "typeloader_specification_context", default=None
)


def current_context() -> SpecificationContext | None:
    """Get the active specification context, if any."""
    return _current.get()


def current_loader() -> Any:
    """Get the loader of the active specification context, if any."""
    context = _current.get()
    return context.loader if context is not None else None


class SpecificationScope:
    """Scope guard that makes a specification context ambient.

    Args:
        context: Context to activate. When omitted, the active context is
            reused, or a new one is created if there is none.
        loader: Loader of a newly created context.
    """

    def __init__(self, context: SpecificationContext | None = None, *, loader: Any = None) -> None:
        active = _current.get()
        self._token: Token[SpecificationContext | None] | None = None
        if context is None and active is not None:
            self.context = active
        else:
            self.context = context if context is not None else SpecificationContext(loader)
            self._token = _current.set(self.context)

    @property
    def is_root(self) -> bool:
        """True if this scope pushed its context (as opposed to reusing an active one)."""
        return self._token is not None

    def __enter__(self) -> SpecificationScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def dispose(self) -> None:
        """Pop the context pushed by this scope. Idempotent."""
        if self._token is not None:
            _current.reset(self._token)
            self._token = None
