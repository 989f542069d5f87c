"""
Unit tests for the olang lexer.
"""

import pytest
from olang import (
    tokenize, Lexer, TokenType, LexerError,
    UnexpectedCharacter, NotDigit, UnterminatedString, UnterminatedComment,
    IntegerOutOfRange,
)


def types_of(source):
    return [t.type for t in tokenize(source)]


class TestLexerBasics:
    """Test basic lexer functionality."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_whitespace_only(self):
        """Whitespace of any kind produces no tokens."""
        assert types_of("  \t\n\r\n  ") == [TokenType.EOF]

    def test_var_declaration(self):
        """Basic declaration tokenization."""
        assert types_of("var x = 42") == [
            TokenType.VAR,
            TokenType.IDENTIFIER,
            TokenType.ASSIGN,
            TokenType.INT_LITERAL,
            TokenType.EOF,
        ]

    def test_identifier_value(self):
        """Identifier token carries its text."""
        tokens = tokenize("fooBar123")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "fooBar123"

    def test_position_tracking(self):
        """Token positions are tracked correctly."""
        tokens = tokenize("var x = 5")
        assert tokens[0].span.start.line == 1
        assert tokens[0].span.start.column == 1
        assert tokens[1].span.start.column == 5
        assert tokens[3].span.start.offset == 8

    def test_multiline_position_tracking(self):
        """Position tracking across multiple lines."""
        tokens = tokenize("var x = 5\n  var y = 10")
        var_tokens = [t for t in tokens if t.type == TokenType.VAR]
        assert var_tokens[0].span.start.line == 1
        assert var_tokens[1].span.start.line == 2
        assert var_tokens[1].span.start.column == 3

    def test_streaming_iteration(self):
        """Iterating a Lexer yields the same tokens as tokenize()."""
        source = "if x { 1 } else { 2 }"
        assert [t.type for t in Lexer(source)] == types_of(source)

    def test_filename_in_location(self):
        """Filename is recorded in source locations."""
        tokens = tokenize("x", filename="prog.ol")
        assert str(tokens[0].span.start) == "prog.ol:1:1"


class TestKeywords:
    """Test keyword recognition."""

    @pytest.mark.parametrize("text,expected", [
        ("fun", TokenType.FUN),
        ("true", TokenType.TRUE),
        ("false", TokenType.FALSE),
        ("null", TokenType.NULL),
        ("var", TokenType.VAR),
        ("if", TokenType.IF),
        ("elif", TokenType.ELIF),
        ("else", TokenType.ELSE),
        ("while", TokenType.WHILE),
        ("for", TokenType.FOR),
        ("loop", TokenType.LOOP),
        ("continue", TokenType.CONTINUE),
        ("break", TokenType.BREAK),
    ])
    def test_keyword(self, text, expected):
        """Each keyword maps to its own token type."""
        assert tokenize(text)[0].type == expected

    def test_boolean_values(self):
        """true and false carry Python booleans."""
        tokens = tokenize("true false")
        assert tokens[0].value is True
        assert tokens[1].value is False

    def test_keyword_prefix_is_identifier(self):
        """Words that merely start with a keyword are identifiers."""
        tokens = tokenize("variable iffy loops")
        assert all(t.type == TokenType.IDENTIFIER for t in tokens[:-1])


class TestOperators:
    """Test operator tokenization."""

    def test_two_char_operators(self):
        """Two-character operators are recognized by lookahead."""
        assert types_of("** && || != == <= >=")[:-1] == [
            TokenType.DOUBLE_STAR,
            TokenType.AND,
            TokenType.OR,
            TokenType.NE,
            TokenType.EQ,
            TokenType.LE,
            TokenType.GE,
        ]

    def test_assignment_and_update_operators(self):
        """Compound assignment and update operators."""
        assert types_of("+= -= *= /= %= ++ --")[:-1] == [
            TokenType.PLUS_ASSIGN,
            TokenType.MINUS_ASSIGN,
            TokenType.STAR_ASSIGN,
            TokenType.SLASH_ASSIGN,
            TokenType.PERCENT_ASSIGN,
            TokenType.INCREMENT,
            TokenType.DECREMENT,
        ]

    def test_single_char_tokens(self):
        """Single-character punctuation."""
        assert types_of("( ) { } [ ] + - * / % = < >")[:-1] == [
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.LBRACE,
            TokenType.RBRACE,
            TokenType.LBRACKET,
            TokenType.RBRACKET,
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.STAR,
            TokenType.SLASH,
            TokenType.PERCENT,
            TokenType.ASSIGN,
            TokenType.LT,
            TokenType.GT,
        ]

    def test_one_char_fallback(self):
        """'<' followed by something other than '=' stays a single token."""
        assert types_of("a<b")[:-1] == [
            TokenType.IDENTIFIER, TokenType.LT, TokenType.IDENTIFIER,
        ]

    @pytest.mark.parametrize("char", ["&", "|", "!"])
    def test_lone_logical_characters_rejected(self, char):
        """&, | and ! are not tokens on their own."""
        with pytest.raises(UnexpectedCharacter) as exc_info:
            tokenize(f"a {char} b")
        assert exc_info.value.char == char
        assert exc_info.value.location.column == 3
        assert "E001" in str(exc_info.value)


class TestNumbers:
    """Test integer literal tokenization."""

    def test_integer(self):
        tokens = tokenize("12345")
        assert tokens[0].type == TokenType.INT_LITERAL
        assert tokens[0].value == 12345

    def test_negative_literal(self):
        """A leading '-' before a digit negates the literal."""
        tokens = tokenize("-5")
        assert tokens[0].type == TokenType.INT_LITERAL
        assert tokens[0].value == -5
        assert tokens[0].lexeme == "-5"

    def test_negative_literal_after_operator(self):
        """After an operator or opening delimiter '-' is a sign."""
        tokens = tokenize("(3 * -2)")
        assert [t.value for t in tokens if t.type == TokenType.INT_LITERAL] == [3, -2]

    def test_minus_after_operand_is_subtraction(self):
        """After an operand '-' is the binary minus."""
        assert types_of("3-2")[:-1] == [
            TokenType.INT_LITERAL, TokenType.MINUS, TokenType.INT_LITERAL,
        ]
        assert types_of("n -1")[:-1] == [
            TokenType.IDENTIFIER, TokenType.MINUS, TokenType.INT_LITERAL,
        ]
        assert types_of("f(x)-1")[-3:-1] == [TokenType.MINUS, TokenType.INT_LITERAL]

    def test_letter_inside_number(self):
        """A letter directly after digits is a NotDigit error."""
        with pytest.raises(NotDigit) as exc_info:
            tokenize("var x = 12ab")
        assert exc_info.value.char == "a"
        assert exc_info.value.location.column == 11
        assert "E002" in str(exc_info.value)

    def test_literal_range_limits(self):
        """Both ends of the signed 64-bit range are valid literals."""
        assert tokenize("9223372036854775807")[0].value == 9223372036854775807
        assert tokenize("-9223372036854775808")[0].value == -9223372036854775808

    @pytest.mark.parametrize("text", ["9223372036854775808", "-9223372036854775809"])
    def test_literal_out_of_range(self, text):
        """Literals that do not fit in 64 bits are rejected, not wrapped."""
        with pytest.raises(IntegerOutOfRange) as exc_info:
            tokenize(f"var x = {text}")
        assert exc_info.value.lexeme == text
        assert exc_info.value.diagnostic.span.start.column == 9
        assert "E005" in str(exc_info.value)


class TestStrings:
    """Test string literal tokenization."""

    def test_simple_string(self):
        tokens = tokenize('"hello world"')
        assert tokens[0].type == TokenType.STRING_LITERAL
        assert tokens[0].value == "hello world"

    def test_empty_string(self):
        assert tokenize('""')[0].value == ""

    def test_embedded_newline(self):
        """Strings may span lines; the newline is kept."""
        tokens = tokenize('"line one\nline two"')
        assert tokens[0].value == "line one\nline two"
        assert tokens[0].span.end.line == 2

    def test_escaped_quote_kept_verbatim(self):
        """An escaped quote does not end the string and the backslash stays."""
        tokens = tokenize(r'"say \"hi\"" x')
        assert tokens[0].value == r'say \"hi\"'
        assert tokens[1].type == TokenType.IDENTIFIER

    def test_unterminated_string(self):
        with pytest.raises(UnterminatedString) as exc_info:
            tokenize('"never closed')
        assert "E003" in str(exc_info.value)


class TestComments:
    """Test comment handling."""

    def test_line_comment(self):
        """# comments run to end of line."""
        assert types_of("1 # a comment\n2") == [
            TokenType.INT_LITERAL, TokenType.INT_LITERAL, TokenType.EOF,
        ]

    def test_comment_at_end(self):
        assert types_of("x # trailing") == [TokenType.IDENTIFIER, TokenType.EOF]

    def test_block_comment(self):
        """#[ ... ]# comments may span lines."""
        assert types_of("1 #[ spans\nlines ]# 2") == [
            TokenType.INT_LITERAL, TokenType.INT_LITERAL, TokenType.EOF,
        ]

    def test_nested_block_comment(self):
        assert types_of("1 #[ outer #[ inner ]# still outer ]# 2") == [
            TokenType.INT_LITERAL, TokenType.INT_LITERAL, TokenType.EOF,
        ]

    def test_unterminated_block_comment(self):
        with pytest.raises(UnterminatedComment) as exc_info:
            tokenize("1 #[ never closed")
        assert "E004" in str(exc_info.value)


class TestLexerErrors:
    """Test lexer error reporting."""

    def test_unexpected_character(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("var x = 5 @")
        assert isinstance(exc_info.value, UnexpectedCharacter)
        assert exc_info.value.char == "@"

    def test_underscore_not_allowed_in_identifiers(self):
        """Identifiers are alphanumeric only."""
        with pytest.raises(UnexpectedCharacter) as exc_info:
            tokenize("foo_bar")
        assert exc_info.value.char == "_"

    def test_error_shows_source_line(self):
        """Formatted diagnostics show the offending line with a caret."""
        with pytest.raises(LexerError) as exc_info:
            tokenize("var ok = 1\nvar bad = $")
        text = str(exc_info.value)
        assert "2:11" in text
        assert "var bad = $" in text
        assert "^" in text
