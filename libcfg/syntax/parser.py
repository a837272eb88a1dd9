"""
Recursive descent parser for the libcfg configuration syntax.

Consumes tokens from the lexer and builds a Setting tree rooted at a
group. Parsing stops at the first error; no partial tree is handed back
to the caller.
"""

from pathlib import Path
import glob as glob_module

from ..errors import ConfigError, SettingError, SettingExistsError
from ..logging import get_logger
from ..tree.setting import Setting, SettingFormat, SettingType
from .lexer import Lexer, Token, TokenType

logger = get_logger("parser")


class ParseError(ConfigError):
    """Exception raised for grammar violations."""

    def __init__(self, message: str, line: int = 0, filename: str = "<string>"):
        self.message = message
        self.line = line
        self.filename = filename
        super().__init__(f"{filename}:{line}: {message}")


# Token that opens a value -> kind of the setting it produces
VALUE_KINDS = {
    TokenType.LBRACE: SettingType.GROUP,
    TokenType.LBRACKET: SettingType.ARRAY,
    TokenType.LPAREN: SettingType.LIST,
    TokenType.INTEGER: SettingType.INT,
    TokenType.FLOAT: SettingType.FLOAT,
    TokenType.STRING: SettingType.STRING,
    TokenType.BOOLEAN: SettingType.BOOLEAN,
}

CLOSING = {
    TokenType.RBRACE: "}",
    TokenType.RBRACKET: "]",
    TokenType.RPAREN: ")",
}

# Deepest nesting of groups, arrays, lists and includes
MAX_DEPTH = 200


class ConfigParser:
    """
    Recursive descent parser for the configuration syntax.

    Grammar:
        document    := (setting | include)*
        setting     := IDENTIFIER (':' | '=') value (';' | ',')?
        value       := scalar | group | array | list
        group       := '{' (setting | include)* '}'
        array       := '[' (scalar (',' scalar)* ','?)? ']'
        list        := '(' (value (',' value)* ','?)? ')'
        scalar      := INTEGER | FLOAT | STRING+ | BOOLEAN
        include     := '@include' STRING
    """

    def __init__(
        self,
        source: str,
        filename: str = "<string>",
        base_path: Path | None = None,
        include_dir: Path | None = None,
        allow_overrides: bool = False,
        included_files: set[str] | None = None,
        depth: int = 0,
    ):
        self.lexer = Lexer(source, filename)
        self.filename = filename
        self.base_path = base_path
        self.include_dir = include_dir
        self.allow_overrides = allow_overrides
        self.included_files = included_files or set()
        self.depth = depth

        self.current_token: Token | None = None
        self.peek_token: Token | None = None

        # Prime the parser with first two tokens
        self._advance()
        self._advance()

    def _error(self, message: str, token: Token | None = None) -> ParseError:
        token = token or self.current_token
        return ParseError(message, token.line if token else 0, self.filename)

    def _advance(self) -> Token | None:
        """Advance to next token and return previous."""
        previous = self.current_token
        self.current_token = self.peek_token
        self.peek_token = self.lexer.next_token()
        return previous

    def _expect(self, token_type: TokenType, message: str = "") -> Token:
        """Expect current token to be of given type, advance and return it."""
        if self.current_token is None:
            raise self._error("Unexpected end of input")

        if self.current_token.type != token_type:
            msg = message or f"Expected {token_type.name}, got {self.current_token.type.name}"
            raise self._error(msg)

        return self._advance()  # type: ignore

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type."""
        return self.current_token is not None and self.current_token.type == token_type

    def parse(self, root: Setting | None = None) -> Setting:
        """
        Parse the entire document.

        Args:
            root: Group to add the top-level settings to (a new root if None)

        Returns:
            The group holding the parsed settings
        """
        if root is None:
            root = Setting.create_root()

        self._parse_settings(root, TokenType.EOF)
        self._expect(TokenType.EOF)

        logger.debug(f"Parsed {self.filename}: {len(root)} top-level settings")
        return root

    def _parse_settings(self, group: Setting, terminator: TokenType) -> None:
        """Parse settings into group until the terminator token."""
        while not self._check(terminator):
            if self._check(TokenType.INCLUDE):
                self._parse_include(group)
            elif self._check(TokenType.IDENTIFIER):
                self._parse_setting(group)
            elif self._check(TokenType.EOF):
                raise self._error(f"Expected '{CLOSING[terminator]}' before end of input")
            else:
                raise self._error(
                    f"Expected setting name, got {self.current_token.type.name}"  # type: ignore[union-attr]
                )

    def _parse_setting(self, group: Setting) -> None:
        name_token = self._expect(TokenType.IDENTIFIER)
        name = str(name_token.value)

        if not (self._check(TokenType.EQUALS) or self._check(TokenType.COLON)):
            raise self._error(f"Expected '=' or ':' after '{name}'")
        self._advance()

        if group.find(name) is not None:
            if not self.allow_overrides:
                raise self._error(f"Duplicate setting '{name}'", name_token)
            logger.debug(f"{self.filename}:{name_token.line}: overriding setting '{name}'")
            group.remove(name)

        self._parse_value(group, name, name_token)

        if self._check(TokenType.SEMICOLON) or self._check(TokenType.COMMA):
            self._advance()

    def _parse_value(self, parent: Setting, name: str | None, anchor: Token | None = None) -> Setting:
        """Parse one value and attach it to parent as a new child."""
        token = self.current_token
        kind = VALUE_KINDS.get(token.type) if token else None
        if kind is None:
            raise self._error(f"Expected value, got {token.type.name if token else 'end of input'}")

        if kind.is_aggregate:
            self._enter(token)

        try:
            setting = parent.add(kind, name)
        except SettingExistsError:
            raise self._error(f"Duplicate setting '{name}'", anchor or token)
        except SettingError as e:
            raise self._error(e.message, token)

        setting.line = (anchor or token).line
        setting.source_file = self.filename

        if kind == SettingType.GROUP:
            self._advance()
            self._parse_settings(setting, TokenType.RBRACE)
            self._expect(TokenType.RBRACE)
        elif kind == SettingType.ARRAY:
            self._advance()
            self._parse_elements(setting, TokenType.RBRACKET)
        elif kind == SettingType.LIST:
            self._advance()
            self._parse_elements(setting, TokenType.RPAREN)
        else:
            self._parse_scalar(setting)

        if kind.is_aggregate:
            self.depth -= 1
        return setting

    def _enter(self, token: Token | None) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise self._error(f"Nesting too deep (more than {MAX_DEPTH} levels)", token)

    def _parse_elements(self, container: Setting, closing: TokenType) -> None:
        """Parse comma separated elements of an array or list."""
        while not self._check(closing):
            self._parse_value(container, None)
            if not self._check(TokenType.COMMA):
                break
            self._advance()

        self._expect(closing, f"Expected ',' or '{CLOSING[closing]}'")

    def _parse_scalar(self, setting: Setting) -> None:
        token = self._advance()
        assert token is not None

        if token.type == TokenType.STRING:
            # Adjacent string literals are concatenated
            parts = [str(token.value)]
            while self._check(TokenType.STRING):
                parts.append(str(self._advance().value))  # type: ignore[union-attr]
            setting.set("".join(parts))
            return

        try:
            setting.set(token.value)
        except SettingError as e:
            raise self._error(e.message, token)

        if token.is_hex:
            setting.format = SettingFormat.HEX

    def _parse_include(self, group: Setting) -> None:
        """Parse an @include directive and read the included file(s) into group."""
        include_token = self._expect(TokenType.INCLUDE)
        path_token = self._expect(TokenType.STRING, "Expected file path after '@include'")

        pattern = str(path_token.value)
        if not Path(pattern).is_absolute():
            base = self.include_dir or self.base_path or Path.cwd()
            pattern = str(Path(base) / pattern)

        if glob_module.has_magic(pattern):
            paths = sorted(glob_module.glob(pattern))
        else:
            paths = [pattern]

        for path in paths:
            path_obj = Path(path)
            resolved = str(path_obj.resolve())

            if resolved in self.included_files:
                raise self._error(f"Circular include detected: {path}", include_token)

            try:
                source = path_obj.read_text(encoding="utf-8")
            except OSError as e:
                raise self._error(f"Cannot read include file {path}: {e.strerror or e}", path_token) from e

            logger.debug(f"{self.filename}:{include_token.line}: including {path}")
            self._enter(include_token)

            parser = ConfigParser(
                source=source,
                filename=path,
                base_path=path_obj.parent,
                include_dir=self.include_dir,
                allow_overrides=self.allow_overrides,
                included_files=self.included_files | {resolved},
                depth=self.depth,
            )
            parser.parse(group)
            self.depth -= 1


def parse_config(
    source: str,
    filename: str = "<string>",
    base_path: Path | None = None,
    include_dir: Path | None = None,
    allow_overrides: bool = False,
) -> Setting:
    """
    Convenience function to parse a configuration string.

    Args:
        source: Configuration source text
        filename: Filename for error messages
        base_path: Base path for resolving include statements
        include_dir: Directory that takes precedence for relative includes
        allow_overrides: Let a repeated name replace the earlier setting

    Returns:
        Root group of the parsed tree
    """
    parser = ConfigParser(source, filename, base_path, include_dir, allow_overrides)
    return parser.parse()


def parse_config_file(
    path: str | Path,
    include_dir: Path | None = None,
    allow_overrides: bool = False,
) -> Setting:
    """
    Parse a configuration file.

    Args:
        path: Path to the configuration file

    Returns:
        Root group of the parsed tree
    """
    path = Path(path)
    source = path.read_text(encoding="utf-8")
    parser = ConfigParser(
        source,
        str(path),
        path.parent,
        include_dir,
        allow_overrides,
        included_files={str(path.resolve())},
    )
    return parser.parse()
