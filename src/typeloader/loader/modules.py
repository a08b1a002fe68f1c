"""Module loaders: where type and instance modules come from.

A loader only talks to modules through `require_sync` (the module must
already be loaded) and `require_async` (load it if needed).

Usage:
    modules = ModuleRegistry()
    modules.define_value("my/point", {"base": "complex", "props": ["x", "y"]})
    modules.define("my/origin", lambda: {"_": "my/point", "x": 0, "y": 0})

    async def load_shape():
        return await fetch_spec("shape")

    modules.define("my/shape", load_shape)  # async factories work too

    await modules.require_async("my/shape")
    modules.require_sync("my/shape")        # now available synchronously
"""

from __future__ import annotations

import asyncio
import importlib
import importlib.util
import inspect
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from typeloader.errors import ArgumentInvalidError, ArgumentRequiredError, ModuleNotAvailableError

logger = logging.getLogger(__name__)

type ModuleFactory = Callable[[], Any] | Callable[[], Awaitable[Any]]


@runtime_checkable
class ModuleLoader(Protocol):
    """Provider of modules by id."""

    def is_defined(self, module_id: str) -> bool:
        """Check if the module exists, loaded or not."""
        ...

    def require_sync(self, module_id: str) -> Any:
        """Get an already loaded module.

        Raises:
            ModuleNotAvailableError: If the module is not loaded.
        """
        ...

    async def require_async(self, module_id: str) -> Any:
        """Get a module, loading it if needed.

        Raises:
            ModuleNotAvailableError: If the module cannot be loaded.
        """
        ...


class ModuleRegistry:
    """In-memory module loader.

    Modules are defined by value or by a factory. Factories run lazily, on
    the first asynchronous request; concurrent requests share one load.
    A failed load is not cached: the next request runs the factory again.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._values: dict[str, Any] = {}
        self._factories: dict[str, ModuleFactory] = {}
        self._loading: dict[str, asyncio.Task[Any]] = {}

    def define(self, module_id: str, factory: ModuleFactory) -> None:
        """Define a module by a factory.

        Args:
            module_id: Module id.
            factory: Callable returning the module value, or an awaitable of it.

        Raises:
            ArgumentInvalidError: If the module is already defined.
        """
        self._assert_undefined(module_id)
        if not callable(factory):
            raise ArgumentInvalidError("factory", "Module factories must be callable.")
        self._factories[module_id] = factory

    def define_value(self, module_id: str, value: Any) -> None:
        """Define an already loaded module."""
        self._assert_undefined(module_id)
        self._values[module_id] = value

    def _assert_undefined(self, module_id: str) -> None:
        if not module_id:
            raise ArgumentRequiredError("module_id")
        if self.is_defined(module_id):
            raise ArgumentInvalidError("module_id", f"Module '{module_id}' is already defined.")

    def is_defined(self, module_id: str) -> bool:
        return module_id in self._values or module_id in self._factories

    def is_loaded(self, module_id: str) -> bool:
        return module_id in self._values

    def require_sync(self, module_id: str) -> Any:
        if module_id in self._values:
            return self._values[module_id]
        reason = "It has not been loaded yet." if module_id in self._factories else "It is not defined."
        raise ModuleNotAvailableError(module_id, reason)

    async def require_async(self, module_id: str) -> Any:
        if module_id in self._values:
            return self._values[module_id]

        task = self._loading.get(module_id)
        if task is None:
            if module_id not in self._factories:
                raise ModuleNotAvailableError(module_id, "It is not defined.")
            task = asyncio.ensure_future(self._load(module_id))
            self._loading[module_id] = task
        try:
            return await task
        finally:
            if self._loading.get(module_id) is task and task.done():
                del self._loading[module_id]

    async def _load(self, module_id: str) -> Any:
        logger.debug("Loading module '%s'", module_id)
        value = self._factories[module_id]()
        if inspect.isawaitable(value):
            value = await value
        self._values[module_id] = value
        return value


class ImportlibModuleLoader:
    """Module loader over Python modules.

    Module ids have the form "package.module:attribute" (the attribute
    path may be dotted) or "package.module" for the module object itself.
    Synchronous requests only succeed for modules that are already imported.
    Asynchronous requests import on the event loop thread, so module-level
    code runs on the same thread as the loader that requested it.
    """

    @staticmethod
    def _split(module_id: str) -> tuple[str, str | None]:
        if not module_id:
            raise ArgumentRequiredError("module_id")
        module_name, _, attribute = module_id.partition(":")
        return module_name, attribute or None

    @staticmethod
    def _select(module_id: str, module: Any, attribute: str | None) -> Any:
        value = module
        for part in attribute.split(".") if attribute else ():
            try:
                value = getattr(value, part)
            except AttributeError as e:
                raise ModuleNotAvailableError(module_id, f"Attribute '{attribute}' not found.") from e
        return value

    def is_defined(self, module_id: str) -> bool:
        module_name, _ = self._split(module_id)
        if module_name in sys.modules:
            return True
        try:
            return importlib.util.find_spec(module_name) is not None
        except (ImportError, ValueError):
            return False

    def require_sync(self, module_id: str) -> Any:
        module_name, attribute = self._split(module_id)
        module = sys.modules.get(module_name)
        if module is None:
            raise ModuleNotAvailableError(module_id, f"Module '{module_name}' has not been imported.")
        return self._select(module_id, module, attribute)

    async def require_async(self, module_id: str) -> Any:
        module_name, attribute = self._split(module_id)
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ModuleNotAvailableError(module_id, str(e)) from e
        logger.debug("Imported module '%s'", module_name)
        return self._select(module_id, module, attribute)
