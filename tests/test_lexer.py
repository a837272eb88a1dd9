"""
Tests for the configuration lexer.
"""

import pytest

from libcfg.syntax.lexer import Lexer, LexerError, TokenType, tokenize


def types(source: str) -> list[TokenType]:
    return [token.type for token in tokenize(source)]


def values(source: str) -> list:
    return [token.value for token in tokenize(source)[:-1]]


def test_punctuation_tokens() -> None:
    assert types("{ } ( ) [ ] , ; : =") == [
        TokenType.LBRACE,
        TokenType.RBRACE,
        TokenType.LPAREN,
        TokenType.RPAREN,
        TokenType.LBRACKET,
        TokenType.RBRACKET,
        TokenType.COMMA,
        TokenType.SEMICOLON,
        TokenType.COLON,
        TokenType.EQUALS,
        TokenType.EOF,
    ]


def test_identifiers() -> None:
    tokens = tokenize("name _private value_2")

    assert [t.type for t in tokens[:-1]] == [TokenType.IDENTIFIER] * 3
    assert [t.value for t in tokens[:-1]] == ["name", "_private", "value_2"]


def test_integer_literals() -> None:
    tokens = tokenize("42 -7 +3 10L 0x1F 0XffLL 007")

    assert all(t.type == TokenType.INTEGER for t in tokens[:-1])
    assert [t.value for t in tokens[:-1]] == [42, -7, 3, 10, 31, 255, 7]
    assert tokens[4].is_hex
    assert not tokens[0].is_hex


def test_hex_literals_are_twos_complement() -> None:
    assert values("0xFFFFFFFFFFFFFFFF 0x8000000000000000 0x7FFFFFFFFFFFFFFF") == [
        -1,
        -(2**63),
        2**63 - 1,
    ]


def test_integer_range_limits() -> None:
    assert values("9223372036854775807 -9223372036854775808") == [2**63 - 1, -(2**63)]

    with pytest.raises(LexerError):
        tokenize("9223372036854775808")

    with pytest.raises(LexerError):
        tokenize("0x1FFFFFFFFFFFFFFFF")


def test_float_literals() -> None:
    tokens = tokenize("1.5 .5 5. 1e3 -2.5E-3 +0.25")

    assert all(t.type == TokenType.FLOAT for t in tokens[:-1])
    assert [t.value for t in tokens[:-1]] == [1.5, 0.5, 5.0, 1000.0, -0.0025, 0.25]


def test_booleans_are_case_insensitive() -> None:
    tokens = tokenize("true FALSE True")

    assert all(t.type == TokenType.BOOLEAN for t in tokens[:-1])
    assert [t.value for t in tokens[:-1]] == [True, False, True]


def test_string_escapes() -> None:
    tokens = tokenize(r'"a\n\tb\"c\\d\x41\r\f"')

    assert tokens[0].type == TokenType.STRING
    assert tokens[0].value == 'a\n\tb"c\\dA\r\f'


def test_comments_are_skipped_and_lines_counted() -> None:
    source = "# comment\na = 1; // another\n/* block\ncomment */ b = 2;"
    tokens = tokenize(source)

    identifiers = [t for t in tokens if t.type == TokenType.IDENTIFIER]
    assert [(t.value, t.line) for t in identifiers] == [("a", 2), ("b", 4)]
    assert TokenType.EOF == tokens[-1].type


def test_include_token() -> None:
    tokens = tokenize('@include "extra.cfg"')

    assert [t.type for t in tokens] == [TokenType.INCLUDE, TokenType.STRING, TokenType.EOF]
    assert tokens[1].value == "extra.cfg"


def test_lexer_is_iterable() -> None:
    assert [t.type for t in Lexer("a = 1;")] == [
        TokenType.IDENTIFIER,
        TokenType.EQUALS,
        TokenType.INTEGER,
        TokenType.SEMICOLON,
        TokenType.EOF,
    ]


def test_unterminated_string() -> None:
    with pytest.raises(LexerError) as exc_info:
        tokenize('a = "abc')

    assert exc_info.value.line == 1


def test_string_may_span_lines() -> None:
    tokens = tokenize('\na = "abc\ndef";\nb = 1;')

    assert tokens[2].type == TokenType.STRING
    assert tokens[2].value == "abc\ndef"
    assert tokens[2].line == 2
    # Line counting carries on after the literal
    assert tokens[4].value == "b"
    assert tokens[4].line == 4


def test_unexpected_character_reports_position() -> None:
    with pytest.raises(LexerError) as exc_info:
        tokenize("x = 1;\ny = $;", filename="app.cfg")

    error = exc_info.value
    assert error.line == 2
    assert error.column == 5
    assert error.filename == "app.cfg"
    assert str(error).startswith("app.cfg:2:5:")


def test_unterminated_block_comment() -> None:
    with pytest.raises(LexerError):
        tokenize("a = 1; /* never closed")


def test_invalid_numbers() -> None:
    for source in ("12abc", "1.2.3", "0x", "-0x10", "1e999"):
        with pytest.raises(LexerError):
            tokenize(source)


def test_unknown_directive() -> None:
    with pytest.raises(LexerError):
        tokenize('@import "x.cfg"')


def test_invalid_hex_escape() -> None:
    with pytest.raises(LexerError):
        tokenize(r'"\xZZ"')
