"""
Setting tree: typed nodes and path resolution.
"""

from .path import parse_path, resolve_path
from .setting import Setting, SettingFormat, SettingType, is_valid_name, type_of

__all__ = [
    "Setting",
    "SettingFormat",
    "SettingType",
    "is_valid_name",
    "type_of",
    "parse_path",
    "resolve_path",
]
