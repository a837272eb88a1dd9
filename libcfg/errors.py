"""
Exception hierarchy for libcfg.

Every error raised by the library derives from ConfigError, so callers
that do not care about the exact failure can catch a single type.
"""


class ConfigError(Exception):
    """Base class for all libcfg errors."""

    pass


class FileIOError(ConfigError):
    """Exception raised when a configuration file cannot be read or written."""

    def __init__(self, message: str, filename: str | None = None):
        self.filename = filename
        super().__init__(message)


class SettingError(ConfigError):
    """
    Base class for errors raised by setting tree operations.

    Attributes:
        path: Path of the setting (or the requested path) the error refers to
    """

    def __init__(self, message: str, path: str = ""):
        self.path = path
        self.message = message
        if path:
            super().__init__(f"{path}: {message}")
        else:
            super().__init__(message)


class SettingTypeError(SettingError):
    """Operation is not allowed for the kind of the setting."""

    pass


class SettingNotFoundError(SettingError):
    """Named child, index or path component does not exist."""

    pass


class SettingExistsError(SettingError):
    """A child with the same name already exists in the group."""

    pass


class SettingNameError(SettingError):
    """Setting name is not a valid identifier."""

    pass


class SettingValueError(SettingError):
    """Value cannot be represented in the configuration format."""

    pass
