"""
Non-local exits used while evaluating olang programs.

`continue`, `break` and runtime exceptions all unwind the Python stack as
`ControlFlow` subclasses. Loops absorb `ContinueSignal` and `BreakSignal`;
nothing in the language absorbs a `ScriptException`. The interpreter turns
whatever reaches the top level into an `EvalError`.
"""

from enum import Enum
from typing import Optional

from ..tokens import SourceSpan


class ExceptionKind(Enum):
    """Runtime exception taxonomy."""
    WRONG_NUMBER_OF_ARGUMENTS = "WrongNumberOfArguments"
    UNDECLARED_IDENTIFIER = "UndeclaredIdentifier"
    CALLED_VALUE_IS_NOT_FUNCTION = "CalledValueIsNotFunction"
    VALUE_IS_WRONG_TYPE = "ValueIsWrongType"
    EXPONENTIATION_OVERFLOWED = "ExponentiationOverflowed"
    INDEX_OUT_OF_RANGE = "IndexOutOfRange"
    CUSTOM = "Custom"


class ControlFlow(Exception):
    """Base class for all non-local exits."""

    def __init__(self, span: Optional[SourceSpan] = None):
        super().__init__()
        self.span = span


class ContinueSignal(ControlFlow):
    """Raised by `continue`."""
    pass


class BreakSignal(ControlFlow):
    """Raised by `break`."""
    pass


class ScriptException(ControlFlow):
    """
    A runtime exception raised by olang code or a builtin.

    `message` carries extra detail; for CUSTOM exceptions it is the whole
    payload. `span` is filled in by the interpreter at the innermost
    expression that raised it when the raiser did not know its location.
    """

    def __init__(self, kind: ExceptionKind, message: str = "",
                 span: Optional[SourceSpan] = None):
        super().__init__(span)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        if self.kind == ExceptionKind.CUSTOM:
            return f"Custom({self.message})"
        if self.message:
            return f"{self.kind.value}: {self.message}"
        return self.kind.value

    def __repr__(self) -> str:
        return f"ScriptException({self.kind.name}, {self.message!r})"


def wrong_type(message: str = "") -> ScriptException:
    return ScriptException(ExceptionKind.VALUE_IS_WRONG_TYPE, message)


def wrong_arity(expected, got: int) -> ScriptException:
    return ScriptException(ExceptionKind.WRONG_NUMBER_OF_ARGUMENTS,
                           f"expected {expected}, got {got}")


def custom(message: str) -> ScriptException:
    return ScriptException(ExceptionKind.CUSTOM, message)
