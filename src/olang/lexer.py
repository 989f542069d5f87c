"""
Lexer for olang.

Converts source text into a stream of tokens for the parser.
Supports:
- Single-line comments (#)
- Nestable block comments (#[ ... ]#)
- String literals, kept verbatim (embedded newlines included)
- Decimal integer literals, optionally negative
- Two-character operators (**, &&, ||, ==, !=, <=, >=, ++, --, +=, ...)
- All olang keywords
"""

from typing import Iterator, List, Optional

from .tokens import (
    Token, TokenType, SourceLocation, SourceSpan, KEYWORDS,
    INT_MIN, INT_MAX, ends_operand,
)
from .errors import (
    error_unexpected_character,
    error_not_digit,
    error_unterminated_string,
    error_unterminated_comment,
    error_integer_out_of_range,
)


# Operators made of two characters, keyed by first then second character
TWO_CHAR_OPERATORS = {
    ('*', '*'): TokenType.DOUBLE_STAR,
    ('*', '='): TokenType.STAR_ASSIGN,
    ('&', '&'): TokenType.AND,
    ('|', '|'): TokenType.OR,
    ('!', '='): TokenType.NE,
    ('=', '='): TokenType.EQ,
    ('<', '='): TokenType.LE,
    ('>', '='): TokenType.GE,
    ('+', '+'): TokenType.INCREMENT,
    ('+', '='): TokenType.PLUS_ASSIGN,
    ('-', '-'): TokenType.DECREMENT,
    ('-', '='): TokenType.MINUS_ASSIGN,
    ('/', '='): TokenType.SLASH_ASSIGN,
    ('%', '='): TokenType.PERCENT_ASSIGN,
}

SINGLE_CHAR_TOKENS = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
    '%': TokenType.PERCENT,
    '=': TokenType.ASSIGN,
    '<': TokenType.LT,
    '>': TokenType.GT,
}


class Lexer:
    """
    Tokenizer for olang source text.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()

    Or for streaming:
        lexer = Lexer(source_code)
        for token in lexer:
            process(token)
    """

    def __init__(self, source: str, filename: Optional[str] = None):
        self.source = source
        self.filename = filename
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)
        self.column = 1         # Current column (1-indexed)
        self._lines: Optional[List[str]] = None
        self._last_type: Optional[TokenType] = None

    @property
    def lines(self) -> List[str]:
        """Lazy-load line list for error reporting."""
        if self._lines is None:
            self._lines = self.source.splitlines()
        return self._lines

    def get_source_line(self, line_num: int) -> Optional[str]:
        """Get a specific line of source (1-indexed)."""
        if 1 <= line_num <= len(self.lines):
            return self.lines[line_num - 1]
        return None

    def _location(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.pos, self.filename)

    def _span(self, start: SourceLocation) -> SourceSpan:
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _make_token(self, token_type: TokenType, value, start: SourceLocation,
                    lexeme: Optional[str] = None) -> Token:
        span = self._span(start)
        if lexeme is None:
            lexeme = self.source[start.offset:self.pos]
        return Token(token_type, value, lexeme, span)

    def _skip_comment(self) -> None:
        """Skip a single-line comment (# to end of line)."""
        while self._peek() != '\n' and not self._is_at_end():
            self._advance()

    def _skip_block_comment(self) -> None:
        """Skip #[ ... ]# comment, allowing nesting."""
        start = self._location()
        self._advance()  # consume '#'
        self._advance()  # consume '['
        depth = 1

        while not self._is_at_end() and depth > 0:
            if self._peek() == '#' and self._peek(1) == '[':
                self._advance()
                self._advance()
                depth += 1
            elif self._peek() == ']' and self._peek(1) == '#':
                self._advance()
                self._advance()
                depth -= 1
            else:
                self._advance()

        if depth > 0:
            raise error_unterminated_comment(
                self._span(start),
                self.get_source_line(start.line)
            )

    def _skip_trivia(self) -> None:
        """Skip whitespace and comments."""
        while not self._is_at_end():
            ch = self._peek()
            if ch.isspace():
                self._advance()
            elif ch == '#' and self._peek(1) == '[':
                self._skip_block_comment()
            elif ch == '#':
                self._skip_comment()
            else:
                break

    def _scan_string(self) -> Token:
        """Scan a string literal, keeping its contents verbatim."""
        start = self._location()
        self._advance()  # consume opening quote

        chars = []
        while not self._is_at_end() and self._peek() != '"':
            ch = self._advance()
            chars.append(ch)
            # A backslash keeps the next character from closing the string
            if ch == '\\' and not self._is_at_end():
                chars.append(self._advance())

        if self._is_at_end():
            raise error_unterminated_string(
                self._span(start),
                self.get_source_line(start.line)
            )

        self._advance()  # consume closing quote
        return self._make_token(TokenType.STRING_LITERAL, ''.join(chars), start)

    def _scan_number(self) -> Token:
        """Scan a decimal integer literal with an optional leading '-'."""
        start = self._location()
        negative = self._peek() == '-'
        if negative:
            self._advance()

        magnitude = 0
        while self._peek().isdecimal():
            magnitude = magnitude * 10 + int(self._advance())

        if self._peek().isalpha():
            bad_start = self._location()
            ch = self._advance()
            raise error_not_digit(
                ch, self._span(bad_start), self.get_source_line(bad_start.line)
            )

        value = -magnitude if negative else magnitude
        if not INT_MIN <= value <= INT_MAX:
            raise error_integer_out_of_range(
                self.source[start.offset:self.pos], self._span(start),
                self.get_source_line(start.line)
            )
        return self._make_token(TokenType.INT_LITERAL, value, start)

    def _scan_identifier_or_keyword(self) -> Token:
        start = self._location()

        while self._peek().isalnum():
            self._advance()

        lexeme = self.source[start.offset:self.pos]

        if lexeme in KEYWORDS:
            token_type = KEYWORDS[lexeme]
            if token_type in (TokenType.TRUE, TokenType.FALSE):
                value = token_type == TokenType.TRUE
            else:
                value = lexeme
            return self._make_token(token_type, value, start, lexeme)

        return self._make_token(TokenType.IDENTIFIER, lexeme, start, lexeme)

    def _starts_negative_literal(self) -> bool:
        """A '-' directly before a digit is a sign unless it follows an operand."""
        if self._peek() != '-' or not self._peek(1).isdecimal():
            return False
        return self._last_type is None or not ends_operand(self._last_type)

    def _scan_token(self) -> Token:
        """Scan the next token."""
        self._skip_trivia()

        if self._is_at_end():
            return self._make_token(TokenType.EOF, None, self._location(), "")

        start = self._location()
        ch = self._peek()

        if ch == '"':
            return self._scan_string()

        if ch.isdecimal() or self._starts_negative_literal():
            return self._scan_number()

        if ch.isalnum():
            return self._scan_identifier_or_keyword()

        two_char = TWO_CHAR_OPERATORS.get((ch, self._peek(1)))
        if two_char is not None:
            self._advance()
            self._advance()
            return self._make_token(two_char, self.source[start.offset:self.pos], start)

        self._advance()
        if ch in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[ch], ch, start)

        # Unknown character, including a lone '&', '|' or '!'
        raise error_unexpected_character(
            ch, self._span(start), self.get_source_line(start.line)
        )

    def _next(self) -> Token:
        token = self._scan_token()
        self._last_type = token.type
        return token

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, returning a list of tokens."""
        tokens = []
        while True:
            token = self._next()
            tokens.append(token)
            if token.type == TokenType.EOF:
                break
        return tokens

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self._next()
            yield token
            if token.type == TokenType.EOF:
                break


def tokenize(source: str, filename: Optional[str] = None) -> List[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: The source code to tokenize
        filename: Optional filename for error messages

    Returns:
        List of tokens, terminated by an EOF token

    Raises:
        LexerError: If tokenization fails
    """
    lexer = Lexer(source, filename)
    return lexer.tokenize()
