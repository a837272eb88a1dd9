"""
Library constants and metadata.
"""

# Library info
APP_NAME = "libcfg"
APP_VERSION = "0.1.0"

# Default values
DEFAULT_TAB_WIDTH = 2
