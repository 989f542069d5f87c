"""
olang exceptions and error handling.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E4xx: Runtime errors
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from .tokens import SourceSpan, SourceLocation, Token, TokenType, describe_token_type


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: Optional[SourceSpan] = None
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: location: severity[code]: message
        header = f"{self.severity.value}[{self.code}]: {self.message}"
        if self.span is not None:
            header = f"{self.span.start}: {header}"
        parts.append(header)

        # Source line with caret
        if show_source and self.span is not None and self.source_line is not None:
            parts.append("  |")
            line_num = str(self.span.start.line)
            parts.append(f"{line_num:>3} | {self.source_line}")

            col = self.span.start.column
            if self.span.start.line == self.span.end.line:
                end_col = self.span.end.column
            else:
                end_col = len(self.source_line) + 1
            underline_len = max(1, end_col - col)
            parts.append(f"    | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)


class OlangError(Exception):
    """Base exception for olang errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    def __str__(self) -> str:
        return self.diagnostic.format()


class LexerError(OlangError):
    """Error during lexical analysis (E0xx)."""
    pass


class ParserError(OlangError):
    """Error during parsing (E1xx)."""
    pass


class EvalError(OlangError):
    """Error that terminated evaluation (E4xx)."""
    pass


# --- Lexer errors ---

class UnexpectedCharacter(LexerError):
    """E001: a character that cannot start any token."""

    def __init__(self, diagnostic: Diagnostic, char: str, location: SourceLocation):
        super().__init__(diagnostic)
        self.char = char
        self.location = location


class NotDigit(LexerError):
    """E002: a non-digit inside an integer literal."""

    def __init__(self, diagnostic: Diagnostic, char: str, location: SourceLocation):
        super().__init__(diagnostic)
        self.char = char
        self.location = location


class UnterminatedString(LexerError):
    """E003: string literal without closing quote."""
    pass


class UnterminatedComment(LexerError):
    """E004: block comment without closing ]#."""
    pass


class IntegerOutOfRange(LexerError):
    """E005: integer literal outside the signed 64-bit range."""

    def __init__(self, diagnostic: Diagnostic, lexeme: str):
        super().__init__(diagnostic)
        self.lexeme = lexeme


# --- Parser errors ---

class ExpectedToken(ParserError):
    """E101: a specific token was required but another was found."""

    def __init__(self, diagnostic: Diagnostic, while_parsing: Any,
                 expected: TokenType, found: Token):
        super().__init__(diagnostic)
        self.while_parsing = while_parsing
        self.expected = expected
        self.found = found


class UnexpectedToken(ParserError):
    """E102: no grammar rule accepts the current token."""

    def __init__(self, diagnostic: Diagnostic, while_parsing: Any, found: Token):
        super().__init__(diagnostic)
        self.while_parsing = while_parsing
        self.found = found


class NestingTooDeep(ParserError):
    """E103: expressions nested deeper than the parser can follow."""

    def __init__(self, diagnostic: Diagnostic, found: Token):
        super().__init__(diagnostic)
        self.found = found


# --- Runtime errors ---

class UnhandledException(EvalError):
    """E401: a runtime exception reached the top level."""

    def __init__(self, diagnostic: Diagnostic, exception: Any):
        super().__init__(diagnostic)
        self.exception = exception

    @property
    def kind(self):
        return self.exception.kind


class ContinueOutsideLoop(EvalError):
    """E402: continue reached the top level."""
    pass


class BreakOutsideLoop(EvalError):
    """E403: break reached the top level."""
    pass


def _describe_found(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    return f"'{token.lexeme}'"


def _kind_name(while_parsing: Any) -> str:
    if while_parsing is None:
        return "generic"
    return getattr(while_parsing, "value", str(while_parsing))


# --- Lexer error factories ---

def error_unexpected_character(char: str, span: SourceSpan,
                               source_line: str = None) -> UnexpectedCharacter:
    """E001: Unexpected character."""
    diag = Diagnostic(
        code="E001",
        message=f"unexpected character '{char}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    if char in "&|!":
        diag.hints.append(f"'{char}' is only valid as part of '&&', '||' or '!='")
    return UnexpectedCharacter(diag, char, span.start)


def error_not_digit(char: str, span: SourceSpan,
                    source_line: str = None) -> NotDigit:
    """E002: Non-digit character inside an integer literal."""
    diag = Diagnostic(
        code="E002",
        message=f"expected digit, found '{char}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=["identifiers cannot start with a digit"],
    )
    return NotDigit(diag, char, span.start)


def error_unterminated_string(span: SourceSpan,
                              source_line: str = None) -> UnterminatedString:
    """E003: Unterminated string literal."""
    diag = Diagnostic(
        code="E003",
        message="unterminated string literal",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=["string literals must be closed with a matching '\"'"],
    )
    return UnterminatedString(diag)


def error_unterminated_comment(span: SourceSpan,
                               source_line: str = None) -> UnterminatedComment:
    """E004: Unterminated block comment."""
    diag = Diagnostic(
        code="E004",
        message="unterminated block comment (expected closing ]#)",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return UnterminatedComment(diag)


def error_integer_out_of_range(lexeme: str, span: SourceSpan,
                               source_line: str = None) -> IntegerOutOfRange:
    """E005: Integer literal does not fit in 64 bits."""
    diag = Diagnostic(
        code="E005",
        message=f"integer literal {lexeme} does not fit in 64 bits",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
        hints=["integers range from -9223372036854775808 to 9223372036854775807"],
    )
    return IntegerOutOfRange(diag, lexeme)


# --- Parser error factories ---

def error_expected_token(while_parsing: Any, expected: TokenType, found: Token,
                         source_line: str = None) -> ExpectedToken:
    """E101: Expected a specific token."""
    diag = Diagnostic(
        code="E101",
        message=(f"expected {describe_token_type(expected)} while parsing "
                 f"{_kind_name(while_parsing)}, found {_describe_found(found)}"),
        severity=ErrorSeverity.ERROR,
        span=found.span,
        source_line=source_line,
    )
    return ExpectedToken(diag, while_parsing, expected, found)


def error_unexpected_token(while_parsing: Any, found: Token,
                           source_line: str = None) -> UnexpectedToken:
    """E102: Unexpected token."""
    diag = Diagnostic(
        code="E102",
        message=(f"unexpected {_describe_found(found)} while parsing "
                 f"{_kind_name(while_parsing)}"),
        severity=ErrorSeverity.ERROR,
        span=found.span,
        source_line=source_line,
    )
    return UnexpectedToken(diag, while_parsing, found)


def error_nesting_too_deep(found: Token, source_line: str = None) -> NestingTooDeep:
    """E103: Expression nesting exceeds the parser's depth."""
    diag = Diagnostic(
        code="E103",
        message=f"expressions nested too deeply near {_describe_found(found)}",
        severity=ErrorSeverity.ERROR,
        span=found.span,
        source_line=source_line,
        hints=["split deeply nested expressions with variables"],
    )
    return NestingTooDeep(diag, found)


# --- Runtime error factories ---

def error_unhandled_exception(exception: Any,
                              source_line: str = None) -> UnhandledException:
    """E401: Runtime exception escaped to the top level."""
    diag = Diagnostic(
        code="E401",
        message=f"unhandled exception: {exception}",
        severity=ErrorSeverity.ERROR,
        span=exception.span,
        source_line=source_line,
    )
    return UnhandledException(diag, exception)


def error_continue_outside_loop(span: Optional[SourceSpan],
                                source_line: str = None) -> ContinueOutsideLoop:
    """E402: continue used outside of a loop."""
    diag = Diagnostic(
        code="E402",
        message="\"continue\" keyword used outside of loop",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return ContinueOutsideLoop(diag)


def error_break_outside_loop(span: Optional[SourceSpan],
                             source_line: str = None) -> BreakOutsideLoop:
    """E403: break used outside of a loop."""
    diag = Diagnostic(
        code="E403",
        message="\"break\" keyword used outside of loop",
        severity=ErrorSeverity.ERROR,
        span=span,
        source_line=source_line,
    )
    return BreakOutsideLoop(diag)
