"""
Runtime values for the olang interpreter.

A `Value` pairs the Python data with its olang `ValueType`:

    INT       Python int, always within the signed 64-bit range
    STRING    Python str
    BOOL      Python bool
    NULL      None
    LIST      Python list of Value (never mutated after construction)
    FUNCTION  DefinedFunction or NativeFunction
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List

from ..ast import Block
from ..tokens import wrap_int
from .signals import wrong_type


class ValueType(Enum):
    INT = "int"
    STRING = "string"
    BOOL = "bool"
    NULL = "null"
    LIST = "list"
    FUNCTION = "function"


@dataclass(frozen=True)
class DefinedFunction:
    """A function written in olang. It does not capture its defining scope."""
    parameters: List[str]
    body: Block

    def __str__(self) -> str:
        return f"<fun({' '.join(self.parameters)})>"


@dataclass(frozen=True)
class NativeFunction:
    """A native function: takes evaluated arguments, returns a Value."""
    name: str
    implementation: Callable[[List["Value"]], "Value"]

    def __call__(self, args: List["Value"]) -> "Value":
        return self.implementation(args)

    def __str__(self) -> str:
        return f"<builtin {self.name}>"


@dataclass(frozen=True)
class Value:
    """
    A runtime value with its olang type.

    Equality is structural, except that functions are never equal to
    anything, themselves included.
    """
    data: Any
    type: ValueType

    def __repr__(self) -> str:
        return f"Value({self.data!r}, {self.type.name})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if self.type == ValueType.FUNCTION or other.type == ValueType.FUNCTION:
            return False
        if self.type != other.type:
            return False
        if self.type == ValueType.LIST:
            # Element-wise, so a shared function element still compares unequal
            return (len(self.data) == len(other.data)
                    and all(a == b for a, b in zip(self.data, other.data)))
        return self.data == other.data

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def display(self) -> str:
        """Display form used by toString, printLn and error messages."""
        return display(self)

    def __str__(self) -> str:
        return display(self)

    @property
    def is_null(self) -> bool:
        return self.type == ValueType.NULL

    # Conversions; each raises ValueIsWrongType on mismatch

    def into_int(self) -> int:
        if self.type != ValueType.INT:
            raise wrong_type(f"expected int, found {self.type.value}")
        return self.data

    def into_str(self) -> str:
        if self.type != ValueType.STRING:
            raise wrong_type(f"expected string, found {self.type.value}")
        return self.data

    def into_bool(self) -> bool:
        if self.type != ValueType.BOOL:
            raise wrong_type(f"expected bool, found {self.type.value}")
        return self.data

    def into_list(self) -> List["Value"]:
        if self.type != ValueType.LIST:
            raise wrong_type(f"expected list, found {self.type.value}")
        return self.data


# Convenience constructors

def int_val(n: int) -> Value:
    """Create an integer value, wrapped to 64 bits."""
    return Value(wrap_int(int(n)), ValueType.INT)


def string_val(s: str) -> Value:
    return Value(str(s), ValueType.STRING)


def bool_val(b: bool) -> Value:
    return Value(bool(b), ValueType.BOOL)


def list_val(items: List[Value]) -> Value:
    """Create a list value; the list is copied."""
    return Value(list(items), ValueType.LIST)


def function_val(fn: Any) -> Value:
    return Value(fn, ValueType.FUNCTION)


NULL = Value(None, ValueType.NULL)


def null_val() -> Value:
    return NULL


def display(value: Value) -> str:
    """Render a value as text."""
    if value.type == ValueType.BOOL:
        return "true" if value.data else "false"
    if value.type == ValueType.INT:
        return str(value.data)
    if value.type == ValueType.STRING:
        return value.data
    if value.type == ValueType.NULL:
        return "null"
    if value.type == ValueType.LIST:
        return "[" + " ".join(display(item) for item in value.data) + "]"
    return str(value.data)
