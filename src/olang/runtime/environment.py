"""
Variable scopes for the olang interpreter.

The environment is a stack of scopes. Lookup walks innermost to outermost,
declaration always targets the innermost scope and assignment updates the
nearest scope that already declares the name. The global scope is never
popped.
"""

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, TextIO

from .values import Value
from .signals import ScriptException, ExceptionKind
from .builtins import BuiltinRegistry


class Environment:
    """
    Stack of identifier-to-value scopes.

    Usage:
        env = create_environment()
        with env.new_scope():
            env.declare("i", int_val(0))
    """

    def __init__(self):
        self.scopes: List[Dict[str, Value]] = [{}]

    @property
    def depth(self) -> int:
        return len(self.scopes)

    def push(self) -> None:
        self.scopes.append({})

    def pop(self) -> None:
        if len(self.scopes) == 1:
            raise RuntimeError("cannot pop the global scope")
        self.scopes.pop()

    def unwind(self, depth: int) -> None:
        """Drop every scope above depth; the global scope always survives."""
        del self.scopes[max(1, depth):]

    @contextmanager
    def new_scope(self) -> Iterator[Dict[str, Value]]:
        """Push a scope for the duration of a with-block."""
        self.push()
        try:
            yield self.scopes[-1]
        finally:
            self.pop()

    def declare(self, name: str, value: Value) -> None:
        """Bind name in the innermost scope, replacing any same-scope binding."""
        self.scopes[-1][name] = value

    def get(self, name: str) -> Optional[Value]:
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        return None

    def get_or_fail(self, name: str) -> Value:
        value = self.get(name)
        if value is None:
            raise ScriptException(ExceptionKind.UNDECLARED_IDENTIFIER, name)
        return value

    def assign(self, name: str, value: Value) -> None:
        """Update the nearest existing binding of name."""
        for scope in reversed(self.scopes):
            if name in scope:
                scope[name] = value
                return
        raise ScriptException(ExceptionKind.UNDECLARED_IDENTIFIER, name)



def create_environment(stdin: Optional[TextIO] = None,
                       stdout: Optional[TextIO] = None) -> Environment:
    """
    Create an environment with the builtin functions in its global scope.

    Args:
        stdin: Stream read by readLn (defaults to sys.stdin)
        stdout: Stream written by printLn (defaults to sys.stdout)

    Returns:
        A fresh Environment holding printLn, toString, readLn and len
    """
    env = Environment()
    registry = BuiltinRegistry(stdin, stdout)
    for name in registry.names():
        env.declare(name, registry.get_function(name).as_value())
    return env
