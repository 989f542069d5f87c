"""
Tree-walking interpreter for olang.

Evaluates AST nodes against an Environment to produce Values.
"""

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import List, Optional, TextIO

from .values import (
    Value, ValueType, DefinedFunction, NativeFunction,
    int_val, string_val, bool_val, list_val, function_val, NULL,
)
from .environment import Environment, create_environment
from .signals import (
    ContinueSignal, BreakSignal, ScriptException, ExceptionKind,
    wrong_type, wrong_arity, custom,
)

from ..ast import (
    Program, Expression, Literal, Identifier, Block, BinaryOp, Update,
    VarDecl, Assignment, FunctionLiteral, FunctionCall, ListLiteral,
    IndexAccess, IfExpr, Loop, Continue, Break,
)
from ..errors import (
    OlangError,
    error_unhandled_exception,
    error_continue_outside_loop,
    error_break_outside_loop,
)
from ..tokens import SourceSpan, TokenType

logger = logging.getLogger(__name__)


_U64_MASK = (1 << 64) - 1
_U32_MASK = (1 << 32) - 1

# Python stack depth allowed while evaluating; each olang call costs
# roughly ten Python frames
RECURSION_LIMIT = 6000


@contextmanager
def recursion_headroom(limit: int = RECURSION_LIMIT):
    """Raise Python's recursion limit to at least limit, then restore it."""
    previous = sys.getrecursionlimit()
    if previous < limit:
        sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


# Compound assignment operator -> the binary operator it applies
_COMPOUND_OPERATORS = {
    TokenType.PLUS_ASSIGN: TokenType.PLUS,
    TokenType.MINUS_ASSIGN: TokenType.MINUS,
    TokenType.STAR_ASSIGN: TokenType.STAR,
    TokenType.SLASH_ASSIGN: TokenType.SLASH,
    TokenType.PERCENT_ASSIGN: TokenType.PERCENT,
}

_COMPARISONS = {
    TokenType.LT: lambda a, b: a < b,
    TokenType.LE: lambda a, b: a <= b,
    TokenType.GT: lambda a, b: a > b,
    TokenType.GE: lambda a, b: a >= b,
}


@dataclass
class ExecutionResult:
    """Result of running a program without raising."""
    success: bool
    value: Optional[Value] = None
    error: Optional[OlangError] = None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return str(self.error)


def _truncating_divmod(a: int, b: int):
    """Integer division and remainder rounding toward zero."""
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q, a - b * q


def checked_pow(base: int, exponent: int) -> int:
    """
    Raise base to exponent with unsigned 64-bit overflow checking.

    The base is reinterpreted as an unsigned 64-bit integer and the exponent
    truncated to an unsigned 32-bit integer, so negative exponents become
    huge and overflow. The result is reinterpreted as signed.
    """
    base_u = base & _U64_MASK
    exp_u = exponent & _U32_MASK
    if base_u in (0, 1):
        return 1 if exp_u == 0 else base_u
    # base_u >= 2, so anything past 2**64 needs more than 64 doublings
    if exp_u >= 64:
        raise ScriptException(ExceptionKind.EXPONENTIATION_OVERFLOWED,
                              f"{base} ** {exponent}")
    result = base_u ** exp_u
    if result > _U64_MASK:
        raise ScriptException(ExceptionKind.EXPONENTIATION_OVERFLOWED,
                              f"{base} ** {exponent}")
    return int_val(result).data


class Interpreter:
    """
    Tree-walking interpreter for olang.

    One interpreter owns one environment; successive eval() calls share it,
    so declarations from earlier calls stay visible.

    Usage:
        interp = Interpreter()
        result = interp.eval('var x = 2 ** 10  x + 1')
    """

    def __init__(self, environment: Optional[Environment] = None,
                 stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None):
        self.env = environment if environment is not None else create_environment(stdin, stdout)
        self._source_lines: List[str] = []

    # =========================================================================
    # Entry points
    # =========================================================================

    def eval(self, source: str, filename: Optional[str] = None) -> Value:
        """
        Evaluate source text.

        Args:
            source: Program text
            filename: Optional filename for diagnostics

        Returns:
            The value of the last top-level expression, or null

        Raises:
            LexerError: If tokenization fails
            ParserError: If parsing fails
            EvalError: If a runtime exception, continue or break escapes
        """
        from ..lexer import tokenize
        from ..parser import parse

        with recursion_headroom():
            tokens = tokenize(source, filename)
            program = parse(tokens, source)
            self._source_lines = source.splitlines()
            return self.execute(program)

    def execute(self, program: Program) -> Value:
        """Evaluate a parsed program, translating escaped signals to errors."""
        logger.debug("executing %d top-level expressions", len(program.expressions))
        depth = self.env.depth
        result = NULL
        with recursion_headroom():
            try:
                for expr in program.expressions:
                    result = self._evaluate(expr)
            except ScriptException as e:
                logger.debug("unhandled exception: %r", e)
                raise error_unhandled_exception(e, self._line_for(e.span)) from None
            except ContinueSignal as e:
                raise error_continue_outside_loop(e.span, self._line_for(e.span)) from None
            except BreakSignal as e:
                raise error_break_outside_loop(e.span, self._line_for(e.span)) from None
            except RecursionError:
                exc = custom("maximum recursion depth exceeded")
                raise error_unhandled_exception(exc) from None
            finally:
                # Scope exits can themselves fail at the recursion limit
                self.env.unwind(depth)
        return result

    def _line_for(self, span: Optional[SourceSpan]) -> Optional[str]:
        if span is None:
            return None
        line_num = span.start.line
        if 1 <= line_num <= len(self._source_lines):
            return self._source_lines[line_num - 1]
        return None

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _evaluate(self, expr: Expression) -> Value:
        """Evaluate an expression to produce a Value."""
        try:
            if isinstance(expr, Literal):
                return self._eval_literal(expr)
            elif isinstance(expr, Identifier):
                return self.env.get_or_fail(expr.name)
            elif isinstance(expr, BinaryOp):
                return self._eval_binary_op(expr)
            elif isinstance(expr, FunctionCall):
                return self._eval_function_call(expr)
            elif isinstance(expr, Block):
                self.env.push()
                try:
                    return self._eval_sequence(expr.expressions)
                finally:
                    self.env.pop()
            elif isinstance(expr, VarDecl):
                self.env.declare(expr.name, self._evaluate(expr.initializer))
                return NULL
            elif isinstance(expr, Assignment):
                return self._eval_assignment(expr)
            elif isinstance(expr, Update):
                return self._eval_update(expr)
            elif isinstance(expr, FunctionLiteral):
                return function_val(DefinedFunction(list(expr.parameters), expr.body))
            elif isinstance(expr, ListLiteral):
                return list_val([self._evaluate(e) for e in expr.elements])
            elif isinstance(expr, IndexAccess):
                return self._eval_index_access(expr)
            elif isinstance(expr, IfExpr):
                return self._eval_if_expr(expr)
            elif isinstance(expr, Loop):
                return self._eval_loop(expr)
            elif isinstance(expr, Continue):
                raise ContinueSignal(expr.span)
            elif isinstance(expr, Break):
                raise BreakSignal(expr.span)
            else:
                raise RuntimeError(f"Unknown expression type: {type(expr).__name__}")
        except ScriptException as e:
            if e.span is None:
                e.span = expr.span
            raise

    def _eval_sequence(self, expressions: List[Expression]) -> Value:
        """Evaluate in order in the current scope; value of the last one."""
        result = NULL
        for expr in expressions:
            result = self._evaluate(expr)
        return result

    def _eval_literal(self, lit: Literal) -> Value:
        if lit.literal_type == TokenType.INT_LITERAL:
            return int_val(lit.value)
        elif lit.literal_type == TokenType.STRING_LITERAL:
            return string_val(lit.value)
        elif lit.literal_type in (TokenType.TRUE, TokenType.FALSE):
            return bool_val(lit.literal_type == TokenType.TRUE)
        elif lit.literal_type == TokenType.NULL:
            return NULL
        else:
            raise RuntimeError(f"Unknown literal type: {lit.literal_type}")

    # =========================================================================
    # Operators
    # =========================================================================

    def _eval_binary_op(self, op: BinaryOp) -> Value:
        """Evaluate a binary operation; both operands are always evaluated."""
        left = self._evaluate(op.left)
        right = self._evaluate(op.right)
        return self._apply_operator(op.operator, left, right)

    def _apply_operator(self, operator: TokenType, left: Value, right: Value) -> Value:
        if operator == TokenType.PLUS:
            return self._plus(left, right)

        if operator == TokenType.EQ:
            return bool_val(left == right)
        if operator == TokenType.NE:
            return bool_val(left != right)

        if operator == TokenType.AND:
            a, b = left.into_bool(), right.into_bool()
            return bool_val(a and b)
        if operator == TokenType.OR:
            a, b = left.into_bool(), right.into_bool()
            return bool_val(a or b)

        a, b = left.into_int(), right.into_int()

        if operator in _COMPARISONS:
            return bool_val(_COMPARISONS[operator](a, b))
        if operator == TokenType.MINUS:
            return int_val(a - b)
        if operator == TokenType.STAR:
            return int_val(a * b)
        if operator in (TokenType.SLASH, TokenType.PERCENT):
            if b == 0:
                raise custom("division by zero")
            quotient, remainder = _truncating_divmod(a, b)
            return int_val(quotient if operator == TokenType.SLASH else remainder)
        if operator == TokenType.DOUBLE_STAR:
            return int_val(checked_pow(a, b))

        raise RuntimeError(f"Unknown operator: {operator}")

    def _plus(self, left: Value, right: Value) -> Value:
        """int + int, string + string, or list + anything (appends)."""
        if left.type == ValueType.INT:
            return int_val(left.data + right.into_int())
        if left.type == ValueType.STRING:
            return string_val(left.data + right.into_str())
        if left.type == ValueType.LIST:
            return list_val(left.data + [right])
        raise wrong_type(f"cannot add {right.type.value} to {left.type.value}")

    # =========================================================================
    # Variables
    # =========================================================================

    def _eval_assignment(self, assign: Assignment) -> Value:
        value = self._evaluate(assign.value)
        if assign.operator != TokenType.ASSIGN:
            current = self.env.get_or_fail(assign.name)
            value = self._apply_operator(_COMPOUND_OPERATORS[assign.operator],
                                         current, value)
        self.env.assign(assign.name, value)
        return NULL

    def _eval_update(self, update: Update) -> Value:
        current = self.env.get_or_fail(update.name).into_int()
        delta = 1 if update.operator == TokenType.INCREMENT else -1
        self.env.assign(update.name, int_val(current + delta))
        return NULL

    # =========================================================================
    # Functions
    # =========================================================================

    def _eval_function_call(self, call: FunctionCall) -> Value:
        callee = self.env.get_or_fail(call.callee)
        if callee.type != ValueType.FUNCTION:
            raise ScriptException(ExceptionKind.CALLED_VALUE_IS_NOT_FUNCTION,
                                  call.callee)

        # Arguments are evaluated in the caller's scope
        args = [self._evaluate(arg) for arg in call.arguments]

        function = callee.data
        if isinstance(function, NativeFunction):
            return function(args)

        if len(args) != len(function.parameters):
            raise wrong_arity(len(function.parameters), len(args))
        self.env.push()
        try:
            for name, value in zip(function.parameters, args):
                self.env.declare(name, value)
            return self._eval_sequence(function.body.expressions)
        finally:
            self.env.pop()

    # =========================================================================
    # Lists
    # =========================================================================

    def _eval_index_access(self, access: IndexAccess) -> Value:
        items = self._evaluate(access.object).into_list()
        index = self._evaluate(access.index).into_int()
        if index < 0 or index >= len(items):
            raise ScriptException(ExceptionKind.INDEX_OUT_OF_RANGE,
                                  f"index {index}, length {len(items)}")
        return items[index]

    # =========================================================================
    # Control flow
    # =========================================================================

    def _eval_if_expr(self, if_expr: IfExpr) -> Value:
        """First clause whose test is true runs; otherwise the else block."""
        for clause in if_expr.clauses:
            if self._evaluate(clause.test).into_bool():
                return self._evaluate(clause.body)
        if if_expr.else_branch is not None:
            return self._evaluate(if_expr.else_branch)
        return NULL

    def _eval_loop(self, loop: Loop) -> Value:
        """
        Run a while/for/loop construct.

        One scope wraps the whole loop, so init declarations and body
        locals live until the loop ends. continue proceeds to the update
        step and break ends the loop; exceptions pass through.
        """
        result = NULL
        with self.env.new_scope():
            if loop.init is not None:
                self._evaluate(loop.init)
            while True:
                if loop.test is not None and not self._evaluate(loop.test).into_bool():
                    break
                try:
                    result = self._eval_sequence(loop.body.expressions)
                except ContinueSignal:
                    pass
                except BreakSignal:
                    break
                if loop.update is not None:
                    self._evaluate(loop.update)
        return result


def evaluate(source: str) -> Value:
    """Evaluate source with a fresh interpreter."""
    return Interpreter().eval(source)


def run_source(
    source: str,
    filename: Optional[str] = None,
    interpreter: Optional[Interpreter] = None,
) -> ExecutionResult:
    """
    High-level API to run olang source code in one call without raising.

        from olang import run_source

        result = run_source('printLn("hi")')
        if not result.success:
            print(result.error_message)

    Args:
        source: Program text
        filename: Optional filename for diagnostics
        interpreter: Interpreter to run in (a fresh one by default)

    Returns:
        ExecutionResult with the final value or the error
    """
    interp = interpreter if interpreter is not None else Interpreter()
    try:
        value = interp.eval(source, filename)
    except OlangError as e:
        return ExecutionResult(success=False, error=e)
    return ExecutionResult(success=True, value=value)
