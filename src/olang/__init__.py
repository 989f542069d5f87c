"""
olang - a small dynamically-typed scripting language.

This package provides:
- Lexer: Tokenizes olang source code
- Parser: Builds an AST from tokens
- Interpreter: Walks the AST against a scoped environment

Usage:
    from olang import Interpreter, tokenize, parse

    tokens = tokenize('var x = 40 + 2')
    program = parse(tokens)

    interp = Interpreter()
    value = interp.eval('''
        var fib = fun(n) {
            if n < 2 { n } else { fib(n - 1) + fib(n - 2) }
        }
        fib(15)
    ''')
    print(value)  # 610
"""

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
    KEYWORDS,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse,
)

from .ast import (
    AstNode,
    AstVisitor,
    ExpressionKind,
    Expression,
    Literal,
    Identifier,
    Block,
    BinaryOp,
    Update,
    VarDecl,
    Assignment,
    FunctionLiteral,
    FunctionCall,
    ListLiteral,
    IndexAccess,
    IfClause,
    IfExpr,
    Loop,
    Continue,
    Break,
    Program,
    PrintVisitor,
    print_ast,
)

from .errors import (
    ErrorSeverity,
    Diagnostic,
    OlangError,
    LexerError,
    ParserError,
    EvalError,
    UnexpectedCharacter,
    NotDigit,
    UnterminatedString,
    UnterminatedComment,
    IntegerOutOfRange,
    ExpectedToken,
    UnexpectedToken,
    NestingTooDeep,
    UnhandledException,
    ContinueOutsideLoop,
    BreakOutsideLoop,
)

from .runtime import (
    Interpreter,
    ExecutionResult,
    Value,
    ValueType,
    Environment,
    ExceptionKind,
    ScriptException,
    create_environment,
    evaluate,
    run_source,
)

__version__ = "0.1.0"

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'SourceLocation',
    'SourceSpan',
    'KEYWORDS',

    # Lexer / parser
    'Lexer',
    'tokenize',
    'Parser',
    'parse',

    # AST
    'AstNode',
    'AstVisitor',
    'ExpressionKind',
    'Expression',
    'Literal',
    'Identifier',
    'Block',
    'BinaryOp',
    'Update',
    'VarDecl',
    'Assignment',
    'FunctionLiteral',
    'FunctionCall',
    'ListLiteral',
    'IndexAccess',
    'IfClause',
    'IfExpr',
    'Loop',
    'Continue',
    'Break',
    'Program',
    'PrintVisitor',
    'print_ast',

    # Errors
    'ErrorSeverity',
    'Diagnostic',
    'OlangError',
    'LexerError',
    'ParserError',
    'EvalError',
    'UnexpectedCharacter',
    'NotDigit',
    'UnterminatedString',
    'UnterminatedComment',
    'IntegerOutOfRange',
    'ExpectedToken',
    'UnexpectedToken',
    'NestingTooDeep',
    'UnhandledException',
    'ContinueOutsideLoop',
    'BreakOutsideLoop',

    # Runtime
    'Interpreter',
    'ExecutionResult',
    'Value',
    'ValueType',
    'Environment',
    'ExceptionKind',
    'ScriptException',
    'create_environment',
    'evaluate',
    'run_source',
]
