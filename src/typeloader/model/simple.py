"""Simple values: a primitive value with an optional formatted representation.

Usage:
    String("a").value            # "a"
    Number({"v": 1, "f": "one"}).formatted  # "one"
    Number("2.5").value          # 2.5
    Boolean("true").key          # "true"
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, Self

from typeloader.errors import ArgumentInvalidError, ArgumentRequiredError
from typeloader.model.instance import Type
from typeloader.model.value import Element


class SimpleType(Type):
    """Descriptor of simple types."""

    is_simple: ClassVar[bool] = True


class Simple(Element, type_spec={"id": "typeloader/simple", "alias": "simple", "is_abstract": True}):
    """A primitive value.

    Args:
        spec: The primitive value, a `{"v": value, "f": formatted}` mapping,
            or another simple value to copy.
    """

    type_class = SimpleType

    def __init__(self, spec: Any = None, **key_args: Any) -> None:
        super().__init__(spec, **key_args)
        formatted = None
        if isinstance(spec, Simple):
            spec, formatted = spec.value, spec.formatted
        elif isinstance(spec, Mapping):
            formatted = spec.get("f")
            spec = spec.get("v")

        if spec is None:
            raise ArgumentRequiredError("value")

        self._value = self._cast(spec)
        self._formatted = None if formatted is None else str(formatted)

    @classmethod
    def _cast(cls, value: Any) -> Any:
        """Convert a raw value to the primitive value of this type."""
        return value

    @property
    def value(self) -> Any:
        """The primitive value."""
        return self._value

    @property
    def formatted(self) -> str | None:
        """The formatted representation, if any."""
        return self._formatted

    @property
    def key(self) -> str:
        return str(self._value)

    def clone(self) -> Self:
        return type(self)({"v": self._value, "f": self._formatted})

    def _update_from(self, other: Simple) -> None:
        self._formatted = other.formatted

    def to_spec(self) -> Any:
        """Get the specification of this value: the value or a `{v, f}` mapping."""
        if self._formatted is None:
            return self._value
        return {"v": self._value, "f": self._formatted}

    def __str__(self) -> str:
        return self._formatted if self._formatted is not None else str(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class String(Simple, type_spec={"id": "typeloader/string", "alias": "string"}):
    """A string value."""

    @classmethod
    def _cast(cls, value: Any) -> str:
        return str(value)


class Number(Simple, type_spec={"id": "typeloader/number", "alias": "number"}):
    """A numeric value. Integers are kept as `int`, everything else becomes `float`."""

    @classmethod
    def _cast(cls, value: Any) -> int | float:
        if isinstance(value, bool):
            raise ArgumentInvalidError("value", "Booleans are not numbers.")
        if isinstance(value, int):
            return value
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ArgumentInvalidError("value", f"'{value}' is not a number.") from e

    @property
    def key(self) -> str:
        value = self._value
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)


class Boolean(Simple, type_spec={"id": "typeloader/boolean", "alias": "boolean"}):
    """A boolean value. Accepts booleans and the strings "true" and "false"."""

    @classmethod
    def _cast(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise ArgumentInvalidError("value", f"'{value}' is not a boolean.")

    @property
    def key(self) -> str:
        return "true" if self._value else "false"
