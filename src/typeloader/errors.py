"""Error taxonomy shared by the loader, the class system and the value model.

Every failure names the offending parameter or operation:

    ArgumentRequiredError   a mandatory reference/parameter was None or empty
    ArgumentInvalidError    a reference had an unsupported shape or broke a structural rule
    OperationInvalidError   a runtime precondition failed
    NotImplementedOperationError  an abstract contract method was not overridden
"""

from __future__ import annotations

from collections.abc import Sequence


class TypeLoaderError(Exception):
    """Base class for all errors raised by typeloader."""


class ArgumentError(TypeLoaderError):
    """An argument of an operation was not acceptable.

    Attributes:
        name: Name of the offending parameter (dotted for nested fields, e.g. "spec.name").
        reason: Description of the violated rule, if any.
    """

    def __init__(self, name: str, reason: str | None = None) -> None:
        self.name = name
        self.reason = reason
        super().__init__(self._format())

    def _format(self) -> str:
        return f"Argument '{self.name}'." if self.reason is None else self.reason


class ArgumentRequiredError(ArgumentError, ValueError):
    """A required argument was not specified."""

    def _format(self) -> str:
        message = f"Argument '{self.name}' is required."
        return message if self.reason is None else f"{message} {self.reason}"


class ArgumentInvalidError(ArgumentError, ValueError):
    """An argument was specified but is invalid."""

    def _format(self) -> str:
        message = f"Argument '{self.name}' is invalid."
        return message if self.reason is None else f"{message} {self.reason}"


class ArgumentInvalidTypeError(ArgumentInvalidError, TypeError):
    """An argument is not of one of the accepted types."""

    def __init__(self, name: str, expected: Sequence[str], actual: str) -> None:
        self.expected = tuple(expected)
        self.actual = actual
        accepted = ", ".join(f"'{t}'" for t in self.expected)
        super().__init__(name, f"Expected one of {accepted}, got '{actual}'.")


class OperationInvalidError(TypeLoaderError, RuntimeError):
    """An operation is not valid in the current state."""


class NotImplementedOperationError(TypeLoaderError, NotImplementedError):
    """An abstract method was invoked without being overridden."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Operation '{operation}' is not implemented.")


class ModuleNotAvailableError(OperationInvalidError):
    """A module loader could not provide a module.

    Attributes:
        module_id: The requested module identifier.
    """

    def __init__(self, module_id: str, reason: str) -> None:
        self.module_id = module_id
        super().__init__(f"Module '{module_id}' is not available. {reason}")
