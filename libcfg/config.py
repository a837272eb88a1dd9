"""
Config facade: owns one setting tree and connects it to text and files.

Usage:
    config = Config()
    config.read_file("/etc/myapp/app.cfg")
    port = config.lookup_value("server.port", int, 8080)
    config.lookup("server.host").value = "example.org"
    config.write_file("/etc/myapp/app.cfg")
"""

from pathlib import Path
from typing import Any, TextIO

from .errors import FileIOError
from .logging import get_logger
from .options import ConfigOptions
from .syntax.parser import ConfigParser
from .syntax.writer import ConfigWriter
from .tree.setting import Setting, SettingType

logger = get_logger("config")


class Config:
    """
    A configuration: one root group plus reader/writer options.

    Reading is all-or-nothing: the current tree is only replaced once the
    new document has been parsed completely.
    """

    def __init__(self, options: ConfigOptions | None = None):
        self.options = options or ConfigOptions()
        self.filename: str | None = None
        self._root = Setting.create_root()

    def __repr__(self) -> str:
        return f"Config(filename={self.filename!r}, settings={len(self._root)})"

    @property
    def root(self) -> Setting:
        return self._root

    @property
    def include_dir(self) -> Path | None:
        return self.options.include_dir

    @include_dir.setter
    def include_dir(self, value: str | Path | None) -> None:
        self.options.include_dir = Path(value) if value is not None else None

    def clear(self) -> None:
        """Drop the whole tree and start again with an empty root group."""
        self._root = Setting.create_root()
        self.filename = None

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_string(self, source: str | bytes, filename: str = "<string>") -> None:
        """
        Parse configuration text and replace the current tree with it.

        Raises:
            FileIOError: If bytes are given that are not valid UTF-8
            LexerError: On malformed tokens
            ParseError: On grammar violations
        """
        if isinstance(source, bytes):
            try:
                source = source.decode("utf-8")
            except UnicodeDecodeError as e:
                raise FileIOError(f"Configuration text is not valid UTF-8: {e}", filename) from e
        self._read(source, filename, base_path=None, included_files=set())

    def read(self, stream: TextIO) -> None:
        """Parse configuration text from a readable stream."""
        filename = getattr(stream, "name", "<stream>")
        self.read_string(stream.read(), str(filename))

    def read_file(self, path: str | Path) -> None:
        """
        Parse a configuration file and replace the current tree with it.

        Raises:
            FileIOError: If the file cannot be read
            LexerError: On malformed tokens
            ParseError: On grammar violations
        """
        path = Path(path)

        try:
            source = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FileIOError(f"Cannot read configuration file {path}: {e.strerror or e}", str(path)) from e
        except UnicodeDecodeError as e:
            raise FileIOError(f"Configuration file {path} is not valid UTF-8: {e}", str(path)) from e

        self._read(source, str(path), base_path=path.parent, included_files={str(path.resolve())})
        self.filename = str(path)

    def _read(self, source: str, filename: str, base_path: Path | None, included_files: set[str]) -> None:
        parser = ConfigParser(
            source,
            filename,
            base_path=base_path,
            include_dir=self.options.include_dir,
            allow_overrides=self.options.allow_overrides,
            included_files=included_files,
        )
        root = parser.parse()
        self._root = root
        self.filename = None
        logger.debug(f"Loaded configuration from {filename}")

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, stream: TextIO) -> None:
        """Serialize the tree to a writable stream."""
        ConfigWriter(self.options).write(self._root, stream)

    def write_string(self) -> str:
        """Serialize the tree to a string."""
        return ConfigWriter(self.options).to_string(self._root)

    def write_file(self, path: str | Path) -> None:
        """
        Serialize the tree to a file.

        Raises:
            FileIOError: If the file cannot be written
        """
        path = Path(path)
        text = self.write_string()

        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise FileIOError(f"Cannot write configuration file {path}: {e.strerror or e}", str(path)) from e

        logger.debug(f"Saved configuration to {path}")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, path: str) -> Setting:
        """
        Find the setting at path.

        Raises:
            SettingNotFoundError: If the path does not resolve
        """
        return self._root.lookup(path)

    def exists(self, path: str) -> bool:
        return self._root.exists(path)

    def __contains__(self, path: str) -> bool:
        return self.exists(path)

    def __getitem__(self, path: str) -> Setting:
        return self.lookup(path)

    def lookup_value(
        self,
        path: str,
        kind: SettingType | type | None = None,
        default: Any = None,
    ) -> Any:
        """
        Soft lookup: the value at path, or default if it is missing or has
        another kind. Int and float convert into each other when the
        auto_convert option is set.
        """
        return self._root.lookup_value(path, kind, default, convert=self.options.auto_convert)

    def to_python(self) -> dict[str, Any]:
        """Whole tree as plain Python data."""
        return self._root.to_python()
