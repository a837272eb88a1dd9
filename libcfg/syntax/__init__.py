"""
Configuration text syntax: lexer, parser and writer.
"""

from .lexer import Lexer, LexerError, Token, TokenType, tokenize
from .parser import ConfigParser, ParseError, parse_config, parse_config_file
from .writer import ConfigWriter, dump_config, write_config

__all__ = [
    "Lexer",
    "LexerError",
    "Token",
    "TokenType",
    "tokenize",
    "ConfigParser",
    "ParseError",
    "parse_config",
    "parse_config_file",
    "ConfigWriter",
    "dump_config",
    "write_config",
]
