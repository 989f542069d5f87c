"""
Built-in function registry for the olang interpreter.

Every builtin takes the list of already-evaluated argument values and
returns a Value, raising ScriptException on failure. A registry is built per
environment so independent interpreters never share state; the I/O streams
default to sys.stdin / sys.stdout looked up at call time.
"""

import logging
import sys
from typing import Callable, Dict, List, Optional, TextIO

from .values import (
    Value, ValueType, NativeFunction,
    int_val, string_val, function_val, NULL, display,
)
from .signals import wrong_arity, wrong_type, custom

logger = logging.getLogger(__name__)


class BuiltinFunction:
    """A registered builtin: its name and implementation."""

    def __init__(self, name: str, implementation: Callable[[List[Value]], Value]):
        self.name = name
        self.implementation = implementation

    def as_value(self) -> Value:
        """Wrap as an olang function value for binding in a scope."""
        return function_val(NativeFunction(self.name, self.implementation))

    def __repr__(self) -> str:
        return f"BuiltinFunction({self.name!r})"


def _check_arity(args: List[Value], expected: int) -> None:
    if len(args) != expected:
        raise wrong_arity(expected, len(args))


class BuiltinRegistry:
    """
    Registry of the builtin functions.

    Functions are registered by name and can be looked up for execution.
    """

    def __init__(self, stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None):
        self._stdin = stdin
        self._stdout = stdout
        self._functions: Dict[str, BuiltinFunction] = {}
        self._register_all()

    @property
    def stdin(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def get_function(self, name: str) -> Optional[BuiltinFunction]:
        """Look up a function by name."""
        return self._functions.get(name)

    def register(self, func: BuiltinFunction) -> None:
        self._functions[func.name] = func

    def names(self) -> List[str]:
        return sorted(self._functions)

    def _register_all(self) -> None:
        self._register_io_functions()
        self._register_conversion_functions()

    # --- I/O ---

    def _register_io_functions(self) -> None:

        def _print_ln(args: List[Value]) -> Value:
            out = self.stdout
            out.write("".join(display(arg) for arg in args) + "\n")
            out.flush()
            return NULL

        def _read_ln(args: List[Value]) -> Value:
            _check_arity(args, 0)
            try:
                line = self.stdin.readline()
            except OSError as e:
                logger.debug("readLn failed: %s", e)
                raise custom(str(e)) from e
            if line.endswith("\n"):
                line = line[:-1]
            return string_val(line)

        self.register(BuiltinFunction("printLn", _print_ln))
        self.register(BuiltinFunction("readLn", _read_ln))

    # --- Conversions and queries ---

    def _register_conversion_functions(self) -> None:

        def _to_string(args: List[Value]) -> Value:
            _check_arity(args, 1)
            return string_val(display(args[0]))

        def _len(args: List[Value]) -> Value:
            _check_arity(args, 1)
            if args[0].type != ValueType.LIST:
                raise wrong_type(f"len expects a list, found {args[0].type.value}")
            return int_val(len(args[0].data))

        self.register(BuiltinFunction("toString", _to_string))
        self.register(BuiltinFunction("len", _len))
