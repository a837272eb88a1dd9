"""
Lexer (tokenizer) for the libcfg configuration syntax.

Supports:
- Identifiers (setting names)
- Quoted strings (double quotes with escape sequences)
- Integers (decimal or 0x-prefixed hex, optional L/LL suffix)
- Floats (decimal point and/or exponent)
- Booleans (true/false, any case)
- Punctuation: { } ( ) [ ] , ; : =
- Single-line (# and //) and multi-line (/* */) comments
- @include directives
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator
import math
import re

from ..errors import ConfigError

INT64_MAX = 2**63 - 1
UINT64_MAX = 2**64 - 1

HEX_RE = re.compile(r"0[xX]([0-9A-Fa-f]+)(?:[lL]{1,2})?")
FLOAT_RE = re.compile(
    r"[-+]?(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?"
    r"|[-+]?[0-9]+[eE][-+]?[0-9]+"
)
INT_RE = re.compile(r"[-+]?([0-9]+)(?:[lL]{1,2})?")


class TokenType(Enum):
    """Token types for the configuration syntax."""

    # Literals
    IDENTIFIER = auto()    # setting name
    STRING = auto()        # "quoted string"
    INTEGER = auto()       # 123, -7, 0x1F, 10L
    FLOAT = auto()         # 1.5, .5, 1e10
    BOOLEAN = auto()       # true, false

    # Delimiters
    LBRACE = auto()        # {
    RBRACE = auto()        # }
    LPAREN = auto()        # (
    RPAREN = auto()        # )
    LBRACKET = auto()      # [
    RBRACKET = auto()      # ]
    COMMA = auto()         # ,
    SEMICOLON = auto()     # ;
    COLON = auto()         # :
    EQUALS = auto()        # =

    # Special
    INCLUDE = auto()       # @include directive
    EOF = auto()           # end of input


PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    ":": TokenType.COLON,
    "=": TokenType.EQUALS,
}


@dataclass
class Token:
    """A single token from the lexer."""

    type: TokenType
    value: str | int | float | bool
    line: int
    column: int
    raw: str = ""  # Original text representation

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def is_hex(self) -> bool:
        """True for integer literals written in hexadecimal."""
        return self.type == TokenType.INTEGER and self.raw[:2] in ("0x", "0X")


class LexerError(ConfigError):
    """Exception raised for malformed tokens."""

    def __init__(self, message: str, line: int, column: int, filename: str = "<string>"):
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        super().__init__(f"{filename}:{line}:{column}: {message}")


class Lexer:
    """
    Tokenizer for the configuration syntax.

    Example config:
        # server settings
        server = {
            host = "localhost";
            ports = [8080, 8081];
            mask = 0xFF;
        };
    """

    BOOLEAN_KEYWORDS = {"true": True, "false": False}

    ESCAPES = {
        "n": "\n",
        "t": "\t",
        "r": "\r",
        "f": "\f",
        '"': '"',
        "\\": "\\",
    }

    def __init__(self, source: str, filename: str = "<string>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def _error(self, message: str, line: int | None = None, column: int | None = None) -> LexerError:
        return LexerError(
            message,
            self.line if line is None else line,
            self.column if column is None else column,
            self.filename,
        )

    def _current(self) -> str:
        """Get current character or empty string if at end."""
        if self.pos >= len(self.source):
            return ""
        return self.source[self.pos]

    def _peek(self, offset: int = 1) -> str:
        """Peek at character at offset from current position."""
        pos = self.pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Advance position and return current character."""
        if self.pos >= len(self.source):
            return ""

        char = self.source[self.pos]
        self.pos += 1

        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return char

    def _advance_by(self, count: int) -> None:
        for _ in range(count):
            self._advance()

    def _skip_whitespace(self) -> None:
        char = self._current()
        while char and char in " \t\r\n\f\v":
            self._advance()
            char = self._current()

    def _skip_comment(self) -> bool:
        """Skip single-line or multi-line comment. Returns True if skipped."""
        if self._current() == "#" or (self._current() == "/" and self._peek() == "/"):
            while self._current() and self._current() != "\n":
                self._advance()
            return True

        if self._current() == "/" and self._peek() == "*":
            start_line = self.line
            start_col = self.column
            self._advance_by(2)

            while self.pos < len(self.source):
                if self._current() == "*" and self._peek() == "/":
                    self._advance_by(2)
                    return True
                self._advance()

            raise self._error("Unterminated multi-line comment", start_line, start_col)

        return False

    def _skip_whitespace_and_comments(self) -> None:
        while True:
            self._skip_whitespace()
            if not self._skip_comment():
                break

    def _read_string(self) -> Token:
        """Read a double-quoted string literal."""
        start_line = self.line
        start_col = self.column
        start_pos = self.pos
        self._advance()  # skip opening quote

        result = []

        while self._current() and self._current() != '"':
            char = self._current()

            if char == "\\":
                self._advance()
                escape_char = self._current()

                if escape_char == "":
                    raise self._error("Unexpected end of string")
                if escape_char == "x":
                    digits = self.source[self.pos + 1:self.pos + 3]
                    if len(digits) != 2 or not all(c in "0123456789abcdefABCDEF" for c in digits):
                        raise self._error("Invalid \\x escape sequence")
                    result.append(chr(int(digits, 16)))
                    self._advance_by(3)
                    continue

                result.append(self.ESCAPES.get(escape_char, escape_char))
                self._advance()
            else:
                result.append(char)
                self._advance()

        if not self._current():
            raise self._error("Unterminated string literal", start_line, start_col)

        self._advance()  # skip closing quote

        return Token(
            type=TokenType.STRING,
            value="".join(result),
            line=start_line,
            column=start_col,
            raw=self.source[start_pos:self.pos],
        )

    def _read_number(self) -> Token:
        """Read an integer or float literal."""
        start_line = self.line
        start_col = self.column

        token_type = TokenType.INTEGER
        value: int | float

        match = HEX_RE.match(self.source, self.pos)
        if match:
            value = int(match.group(1), 16)
            if value > UINT64_MAX:
                raise self._error(f"Hex integer out of range: {match.group()}")
            if value > INT64_MAX:
                # Hex literals spell the 64-bit two's complement pattern
                value -= 2**64
        else:
            match = FLOAT_RE.match(self.source, self.pos)
            if match:
                token_type = TokenType.FLOAT
                value = float(match.group())
                if not math.isfinite(value):
                    raise self._error(f"Float out of range: {match.group()}")
            else:
                match = INT_RE.match(self.source, self.pos)
                if not match:
                    raise self._error(f"Invalid number: {self._current()!r}")
                value = int(match.group().rstrip("lL"))
                if not -(2**63) <= value <= INT64_MAX:
                    raise self._error(f"Integer out of range: {match.group()}")

        raw = match.group()
        self._advance_by(len(raw))

        following = self._current()
        if following and (following.isalnum() or following in "_."):
            raise self._error(f"Invalid number: {raw + following!r}", start_line, start_col)

        return Token(
            type=token_type,
            value=value,
            line=start_line,
            column=start_col,
            raw=raw,
        )

    def _read_identifier(self) -> Token:
        """Read an identifier or boolean keyword."""
        start_line = self.line
        start_col = self.column
        start_pos = self.pos

        # First character already validated as ASCII letter or underscore
        while self._current() and (self._current().isascii() and self._current().isalnum() or self._current() == "_"):
            self._advance()

        raw = self.source[start_pos:self.pos]

        if raw.lower() in self.BOOLEAN_KEYWORDS:
            return Token(
                type=TokenType.BOOLEAN,
                value=self.BOOLEAN_KEYWORDS[raw.lower()],
                line=start_line,
                column=start_col,
                raw=raw,
            )

        return Token(
            type=TokenType.IDENTIFIER,
            value=raw,
            line=start_line,
            column=start_col,
            raw=raw,
        )

    def _read_directive(self) -> Token:
        """Read an @-directive (only @include is known)."""
        start_line = self.line
        start_col = self.column
        self._advance()  # skip @

        start_pos = self.pos
        while self._current() and self._current().isalpha():
            self._advance()
        word = self.source[start_pos:self.pos]

        if word != "include":
            raise self._error(f"Unknown directive: @{word}", start_line, start_col)

        return Token(TokenType.INCLUDE, word, start_line, start_col, "@" + word)

    def _starts_number(self) -> bool:
        char = self._current()
        if char.isdigit():
            return True
        if char == ".":
            return self._peek().isdigit()
        if char in "+-":
            nxt = self._peek()
            return nxt.isdigit() or (nxt == "." and self._peek(2).isdigit())
        return False

    def next_token(self) -> Token:
        """Get the next token from the source."""
        self._skip_whitespace_and_comments()

        if self.pos >= len(self.source):
            return Token(
                type=TokenType.EOF,
                value="",
                line=self.line,
                column=self.column,
            )

        char = self._current()
        start_line = self.line
        start_col = self.column

        if char in PUNCTUATION:
            self._advance()
            return Token(PUNCTUATION[char], char, start_line, start_col, char)

        if char == '"':
            return self._read_string()

        if self._starts_number():
            return self._read_number()

        if char.isascii() and (char.isalpha() or char == "_"):
            return self._read_identifier()

        if char == "@":
            return self._read_directive()

        raise self._error(f"Unexpected character: {char!r}", start_line, start_col)

    def tokenize(self) -> Iterator[Token]:
        """Generate all tokens from the source."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def __iter__(self) -> Iterator[Token]:
        """Allow iteration over tokens."""
        return self.tokenize()


def tokenize(source: str, filename: str = "<string>") -> list[Token]:
    """Convenience function to tokenize a source string."""
    return list(Lexer(source, filename))
