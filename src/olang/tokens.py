"""
Token types for the olang lexer.

Token type categories follow the error code ranges used in diagnostics:
- E0xx: Lexer errors
- E1xx: Parser errors
- E4xx: Runtime errors
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the olang lexer."""

    # --- Literals ---
    INT_LITERAL = auto()        # 42, -7
    STRING_LITERAL = auto()     # "hello"

    # --- Identifiers ---
    IDENTIFIER = auto()         # user-defined names

    # --- Keywords ---
    FUN = auto()                # fun
    TRUE = auto()               # true
    FALSE = auto()              # false
    NULL = auto()               # null
    VAR = auto()                # var
    IF = auto()                 # if
    ELIF = auto()               # elif
    ELSE = auto()               # else
    WHILE = auto()              # while
    FOR = auto()                # for
    LOOP = auto()               # loop
    CONTINUE = auto()           # continue
    BREAK = auto()              # break

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # /
    PERCENT = auto()            # %
    DOUBLE_STAR = auto()        # ** (power)

    # --- Comparison operators ---
    LT = auto()                 # <
    GT = auto()                 # >
    LE = auto()                 # <=
    GE = auto()                 # >=
    EQ = auto()                 # ==
    NE = auto()                 # !=

    # --- Logical operators ---
    AND = auto()                # &&
    OR = auto()                 # ||

    # --- Assignment and update ---
    ASSIGN = auto()             # =
    PLUS_ASSIGN = auto()        # +=
    MINUS_ASSIGN = auto()       # -=
    STAR_ASSIGN = auto()        # *=
    SLASH_ASSIGN = auto()       # /=
    PERCENT_ASSIGN = auto()     # %=
    INCREMENT = auto()          # ++
    DECREMENT = auto()          # --

    # --- Delimiters ---
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    LBRACE = auto()             # {
    RBRACE = auto()             # }
    LBRACKET = auto()           # [
    RBRACKET = auto()           # ]

    # --- Special ---
    EOF = auto()                # end of input


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # int for integers, str for strings/identifiers
    lexeme: str             # The source text as written
    span: SourceSpan        # Location in source

    def __str__(self) -> str:
        if self.type in (TokenType.INT_LITERAL, TokenType.STRING_LITERAL,
                         TokenType.IDENTIFIER):
            return f"{self.type.name}({self.value!r})"
        return self.type.name


# Keyword mapping - maps string to token type
KEYWORDS: dict[str, TokenType] = {
    "fun": TokenType.FUN,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "null": TokenType.NULL,
    "var": TokenType.VAR,
    "if": TokenType.IF,
    "elif": TokenType.ELIF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
    "loop": TokenType.LOOP,
    "continue": TokenType.CONTINUE,
    "break": TokenType.BREAK,
}


# Tokens after which a '-' is a binary minus rather than a literal sign
OPERAND_END_TOKENS: frozenset = frozenset({
    TokenType.INT_LITERAL,
    TokenType.STRING_LITERAL,
    TokenType.IDENTIFIER,
    TokenType.TRUE,
    TokenType.FALSE,
    TokenType.NULL,
    TokenType.RPAREN,
    TokenType.RBRACE,
    TokenType.RBRACKET,
    TokenType.INCREMENT,
    TokenType.DECREMENT,
})


# Human-readable spelling of punctuation tokens for diagnostics
TOKEN_SPELLINGS: dict[TokenType, str] = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.PERCENT: "%",
    TokenType.DOUBLE_STAR: "**",
    TokenType.LT: "<",
    TokenType.GT: ">",
    TokenType.LE: "<=",
    TokenType.GE: ">=",
    TokenType.EQ: "==",
    TokenType.NE: "!=",
    TokenType.AND: "&&",
    TokenType.OR: "||",
    TokenType.ASSIGN: "=",
    TokenType.PLUS_ASSIGN: "+=",
    TokenType.MINUS_ASSIGN: "-=",
    TokenType.STAR_ASSIGN: "*=",
    TokenType.SLASH_ASSIGN: "/=",
    TokenType.PERCENT_ASSIGN: "%=",
    TokenType.INCREMENT: "++",
    TokenType.DECREMENT: "--",
    TokenType.LPAREN: "(",
    TokenType.RPAREN: ")",
    TokenType.LBRACE: "{",
    TokenType.RBRACE: "}",
    TokenType.LBRACKET: "[",
    TokenType.RBRACKET: "]",
    TokenType.EOF: "end of input",
}


INT_MIN = -(1 << 63)
INT_MAX = (1 << 63) - 1


def wrap_int(n: int) -> int:
    """Wrap an arbitrary Python int into the signed 64-bit range."""
    n &= (1 << 64) - 1
    if n > INT_MAX:
        n -= 1 << 64
    return n


def describe_token_type(token_type: TokenType) -> str:
    """Get a short description of a token type for error messages."""
    if token_type in TOKEN_SPELLINGS:
        return f"'{TOKEN_SPELLINGS[token_type]}'" if token_type != TokenType.EOF else TOKEN_SPELLINGS[token_type]
    for keyword, kw_type in KEYWORDS.items():
        if kw_type == token_type:
            return f"'{keyword}'"
    return token_type.name.lower().replace("_", " ")


def ends_operand(token_type: TokenType) -> bool:
    """Check if a token can be the last token of an operand."""
    return token_type in OPERAND_END_TOKENS
