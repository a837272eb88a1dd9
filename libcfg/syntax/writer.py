"""
Writer (serializer) for the libcfg configuration syntax.

Turns a Setting tree back into text that the parser reads as an equal
tree. Layout is controlled by ConfigOptions; it never changes values.
"""

from dataclasses import dataclass, field
from io import StringIO
from typing import TextIO

from ..logging import get_logger
from ..options import ConfigOptions
from ..tree.setting import Setting, SettingFormat, SettingType

logger = get_logger("writer")

UINT64_MASK = 2**64 - 1

STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\f": "\\f",
}


def format_string(value: str) -> str:
    """Quote a string, escaping quotes, backslashes and control characters."""
    out = ['"']
    for char in value:
        if char in STRING_ESCAPES:
            out.append(STRING_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\x{ord(char):02X}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def format_float(value: float, precision: int = 0) -> str:
    """Spell a float so that it always reads back as a float."""
    if precision > 0:
        return f"{value:.{precision}f}"
    text = repr(value)
    if "." not in text and "e" not in text and "E" not in text:
        text += ".0"
    return text


def format_int(value: int, fmt: SettingFormat = SettingFormat.DEFAULT) -> str:
    """Spell an integer, as 64-bit two's complement hex when asked to."""
    if fmt == SettingFormat.HEX:
        return f"0x{value & UINT64_MASK:X}"
    return str(value)


@dataclass
class ConfigWriter:
    """
    Serializer for setting trees.

    Example output:
        server =
        {
          host = "localhost";
          ports = [ 8080, 8081 ];
        };
    """

    options: ConfigOptions = field(default_factory=ConfigOptions)

    def write(self, root: Setting, stream: TextIO) -> None:
        """Write the children of root (a group) to a text stream."""
        lines = self.format_document(root)
        if lines:
            stream.write("\n".join(lines) + "\n")
        logger.debug(f"Wrote {len(root)} top-level settings ({len(lines)} lines)")

    def to_string(self, root: Setting) -> str:
        buffer = StringIO()
        self.write(root, buffer)
        return buffer.getvalue()

    def format_document(self, root: Setting) -> list[str]:
        lines: list[str] = []
        for child in root:
            lines.extend(self.format_setting(child, 0))
        return lines

    def format_setting(self, setting: Setting, level: int) -> list[str]:
        """Format a named setting as a full statement."""
        indent = self._indent(level)
        value_lines = self.format_value(setting, level)

        if setting.is_group:
            colon = self.options.colon_assignment_for_groups
        else:
            colon = self.options.colon_assignment_for_non_groups
        assign = ":" if colon else "="

        if setting.is_group and self.options.open_brace_on_separate_line and len(value_lines) > 1:
            lines = [f"{indent}{setting.name} {assign}", f"{indent}{value_lines[0]}", *value_lines[1:]]
        else:
            lines = [f"{indent}{setting.name} {assign} {value_lines[0]}", *value_lines[1:]]

        if self.options.semicolon_separators:
            lines[-1] += ";"
        return lines

    def format_value(self, setting: Setting, level: int) -> list[str]:
        """
        Format the value of a setting.

        The first returned line carries no indentation (it follows
        'name = ' or the element indent); later lines are fully indented.
        """
        kind = setting.type

        if kind == SettingType.GROUP:
            if not len(setting):
                return ["{ }"]
            lines = ["{"]
            for child in setting:
                lines.extend(self.format_setting(child, level + 1))
            lines.append(f"{self._indent(level)}}}")
            return lines

        if kind == SettingType.ARRAY:
            if not len(setting):
                return ["[ ]"]
            return ["[ " + ", ".join(self.format_scalar(e) for e in setting) + " ]"]

        if kind == SettingType.LIST:
            return self._format_list(setting, level)

        return [self.format_scalar(setting)]

    def _format_list(self, setting: Setting, level: int) -> list[str]:
        if not len(setting):
            return ["( )"]

        if all(e.is_scalar or e.is_array for e in setting):
            return ["( " + ", ".join(self.format_value(e, level)[0] for e in setting) + " )"]

        inner = self._indent(level + 1)
        lines = ["("]
        elements = list(setting)
        for i, element in enumerate(elements):
            element_lines = self.format_value(element, level + 1)
            element_lines[0] = inner + element_lines[0]
            if i < len(elements) - 1:
                element_lines[-1] += ","
            lines.extend(element_lines)
        lines.append(f"{self._indent(level)})")
        return lines

    def format_scalar(self, setting: Setting) -> str:
        kind = setting.type
        value = setting.value

        if kind == SettingType.BOOLEAN:
            return "true" if value else "false"
        if kind == SettingType.INT:
            return format_int(value, setting.format)
        if kind == SettingType.FLOAT:
            return format_float(value, self.options.float_precision)
        return format_string(value)

    def _indent(self, level: int) -> str:
        return "" if level <= 0 else " " * (self.options.tab_width * level)


def write_config(root: Setting, stream: TextIO, options: ConfigOptions | None = None) -> None:
    """Convenience function to write a tree to a stream."""
    ConfigWriter(options or ConfigOptions()).write(root, stream)


def dump_config(root: Setting, options: ConfigOptions | None = None) -> str:
    """Convenience function to serialize a tree to a string."""
    return ConfigWriter(options or ConfigOptions()).to_string(root)
