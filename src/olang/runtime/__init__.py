"""
olang runtime - tree-walking interpreter.

This module provides:
- Interpreter: Evaluates parsed programs
- Value: Runtime values tagged with their olang type
- Environment: Stack of variable scopes
- BuiltinRegistry: printLn, toString, readLn and len
- Signals: continue, break and runtime exceptions as Python exceptions
"""

from .signals import (
    ExceptionKind,
    ControlFlow,
    ContinueSignal,
    BreakSignal,
    ScriptException,
)

from .values import (
    Value,
    ValueType,
    DefinedFunction,
    NativeFunction,
    NULL,
    int_val,
    string_val,
    bool_val,
    list_val,
    function_val,
    null_val,
    display,
)

from .environment import (
    Environment,
    create_environment,
)

from .builtins import (
    BuiltinFunction,
    BuiltinRegistry,
)

from .interpreter import (
    Interpreter,
    ExecutionResult,
    checked_pow,
    evaluate,
    run_source,
)

__all__ = [
    # Signals
    'ExceptionKind',
    'ControlFlow',
    'ContinueSignal',
    'BreakSignal',
    'ScriptException',

    # Values
    'Value',
    'ValueType',
    'DefinedFunction',
    'NativeFunction',
    'NULL',
    'int_val',
    'string_val',
    'bool_val',
    'list_val',
    'function_val',
    'null_val',
    'display',

    # Environment
    'Environment',
    'create_environment',

    # Builtins
    'BuiltinFunction',
    'BuiltinRegistry',

    # Interpreter
    'Interpreter',
    'ExecutionResult',
    'checked_pow',
    'evaluate',
    'run_source',
]
