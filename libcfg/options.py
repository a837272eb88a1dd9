"""
Options that control how configurations are read and written.
"""

from dataclasses import dataclass
from pathlib import Path

from .const import DEFAULT_TAB_WIDTH

MAX_TAB_WIDTH = 15
MAX_FLOAT_PRECISION = 17


@dataclass
class ConfigOptions:
    """Reader and writer options of a Config."""

    # Reading
    auto_convert: bool = False          # lookup_value() may convert int <-> float
    allow_overrides: bool = False       # repeated names replace the earlier setting
    include_dir: Path | None = None     # base directory for relative @include paths

    # Writing
    semicolon_separators: bool = True
    colon_assignment_for_groups: bool = False
    colon_assignment_for_non_groups: bool = False
    open_brace_on_separate_line: bool = True
    tab_width: int = DEFAULT_TAB_WIDTH
    float_precision: int = 0            # 0 = shortest exact representation

    def __post_init__(self) -> None:
        self.tab_width = max(0, min(int(self.tab_width), MAX_TAB_WIDTH))
        self.float_precision = max(0, min(int(self.float_precision), MAX_FLOAT_PRECISION))
        if self.include_dir is not None:
            self.include_dir = Path(self.include_dir)
