"""
libcfg - structured configuration files.

Reads the brace/bracket/paren configuration notation into a typed
setting tree, lets application code query and edit it by path, and
writes it back out.
"""

from .config import Config
from .const import APP_VERSION as __version__
from .errors import (
    ConfigError,
    FileIOError,
    SettingError,
    SettingExistsError,
    SettingNameError,
    SettingNotFoundError,
    SettingTypeError,
    SettingValueError,
)
from .options import ConfigOptions
from .syntax import LexerError, ParseError, dump_config, parse_config
from .tree import Setting, SettingFormat, SettingType

__all__ = [
    "__version__",
    "Config",
    "ConfigOptions",
    "Setting",
    "SettingFormat",
    "SettingType",
    "parse_config",
    "dump_config",
    "ConfigError",
    "FileIOError",
    "LexerError",
    "ParseError",
    "SettingError",
    "SettingExistsError",
    "SettingNameError",
    "SettingNotFoundError",
    "SettingTypeError",
    "SettingValueError",
]
