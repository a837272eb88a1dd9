"""
In-memory setting tree.

A configuration is a tree of Setting nodes. Every node has a kind
(SettingType) that is fixed when the node is created:

- GROUP: ordered collection of uniquely named children
- ARRAY: ordered collection of unnamed scalars that all share one kind
- LIST: ordered collection of unnamed children of any kind
- INT, FLOAT, STRING, BOOLEAN: scalar values

Children are owned by their parent. The parent is referenced back through
a weak reference only, so dropping a subtree never leaves a second owner
behind.
"""

from __future__ import annotations

import math
import re
import weakref
from enum import Enum
from typing import Any, Iterator

from ..errors import (
    SettingError,
    SettingExistsError,
    SettingNameError,
    SettingNotFoundError,
    SettingTypeError,
    SettingValueError,
)
from ..logging import get_logger
from .path import resolve_path

logger = get_logger("tree")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")

# Words the lexer reads as booleans; a setting with such a name could not be read back
RESERVED_NAMES = {"true", "false"}


class SettingType(Enum):
    """Kind of a setting node."""

    NONE = "none"
    GROUP = "group"
    ARRAY = "array"
    LIST = "list"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"

    @property
    def is_aggregate(self) -> bool:
        return self in (SettingType.GROUP, SettingType.ARRAY, SettingType.LIST)

    @property
    def is_scalar(self) -> bool:
        return self in (SettingType.INT, SettingType.FLOAT, SettingType.STRING, SettingType.BOOLEAN)

    @property
    def is_number(self) -> bool:
        return self in (SettingType.INT, SettingType.FLOAT)


class SettingFormat(Enum):
    """Display hint for integer settings."""

    DEFAULT = "default"
    HEX = "hex"


# Python type -> setting kind. bool must be looked up before int.
PYTHON_TYPES: dict[type, SettingType] = {
    bool: SettingType.BOOLEAN,
    int: SettingType.INT,
    float: SettingType.FLOAT,
    str: SettingType.STRING,
}

DEFAULT_VALUES: dict[SettingType, Any] = {
    SettingType.BOOLEAN: False,
    SettingType.INT: 0,
    SettingType.FLOAT: 0.0,
    SettingType.STRING: "",
}


def is_valid_name(name: str) -> bool:
    """Check that a name can be written out and read back as a setting name."""
    if not isinstance(name, str) or not NAME_PATTERN.match(name):
        return False
    return name.lower() not in RESERVED_NAMES


def type_of(value: Any) -> SettingType:
    """Map a Python scalar to the setting kind that stores it."""
    for py_type, setting_type in PYTHON_TYPES.items():
        if isinstance(value, py_type):
            return setting_type
    raise SettingTypeError(f"unsupported value type {type(value).__name__}")


def _resolve_kind(kind: SettingType | type) -> SettingType:
    if isinstance(kind, SettingType):
        return kind
    if kind in PYTHON_TYPES:
        return PYTHON_TYPES[kind]
    raise TypeError(f"Expected SettingType or one of bool, int, float, str; got {kind!r}")


class Setting:
    """
    A node of the setting tree.

    Scalars carry a value; groups, arrays and lists carry children.
    Use Setting.create_root() for a fresh tree and add() to grow it.

    Example:
        root = Setting.create_root()
        server = root.add(SettingType.GROUP, "server")
        server.add(SettingType.INT, "port").value = 8080
        root.lookup("server.port").as_int()  # -> 8080
    """

    def __init__(
        self,
        setting_type: SettingType,
        name: str | None = None,
        parent: Setting | None = None,
    ):
        self._type = setting_type
        self._name = name
        self._format = SettingFormat.DEFAULT
        self._value: Any = DEFAULT_VALUES.get(setting_type)
        self._children: list[Setting] | None = [] if setting_type.is_aggregate else None
        # Name -> child, kept in step with _children for groups
        self._members: dict[str, Setting] | None = {} if setting_type is SettingType.GROUP else None
        self._parent: weakref.ref[Setting] | None = weakref.ref(parent) if parent is not None else None

        # Source position, filled in by the parser
        self.line = 0
        self.source_file: str | None = None

    @classmethod
    def create_root(cls) -> Setting:
        """Create an empty root group."""
        return cls(SettingType.GROUP)

    def __repr__(self) -> str:
        label = self.path or "<root>"
        if self._type.is_scalar:
            return f"Setting({label}, {self._type.name}, {self._value!r})"
        return f"Setting({label}, {self._type.name}, children={len(self)})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def type(self) -> SettingType:
        return self._type

    @property
    def name(self) -> str | None:
        """Name of the setting; None for array/list elements and the root."""
        return self._name

    @property
    def format(self) -> SettingFormat:
        return self._format

    @format.setter
    def format(self, value: SettingFormat | str) -> None:
        """
        Set the display format.

        Only integers have a hexadecimal spelling; on any other kind the
        request is ignored.
        """
        value = SettingFormat(value)
        if self._type is not SettingType.INT:
            logger.debug(f"Ignoring format {value.name} on {self._type.name} setting '{self.path}'")
            return
        self._format = value

    @property
    def parent(self) -> Setting | None:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def index(self) -> int | None:
        """Position of this setting within its parent, None for the root."""
        parent = self.parent
        if parent is None:
            return None
        for i, child in enumerate(parent._children or ()):
            if child is self:
                return i
        return None

    @property
    def path(self) -> str:
        """Path from the root to this setting, e.g. 'server.ports[0]'."""
        parent = self.parent
        if parent is None:
            return ""
        prefix = parent.path
        if self._name is not None:
            return f"{prefix}.{self._name}" if prefix else self._name
        return f"{prefix}[{self.index}]"

    @property
    def is_group(self) -> bool:
        return self._type is SettingType.GROUP

    @property
    def is_array(self) -> bool:
        return self._type is SettingType.ARRAY

    @property
    def is_list(self) -> bool:
        return self._type is SettingType.LIST

    @property
    def is_aggregate(self) -> bool:
        return self._type.is_aggregate

    @property
    def is_scalar(self) -> bool:
        return self._type.is_scalar

    @property
    def is_number(self) -> bool:
        return self._type.is_number

    @property
    def element_type(self) -> SettingType:
        """Kind shared by the elements of an array (NONE while it is empty)."""
        if self._type is SettingType.ARRAY and self._children:
            return self._children[0]._type
        return SettingType.NONE

    # ------------------------------------------------------------------
    # Scalar values
    # ------------------------------------------------------------------

    @property
    def value(self) -> Any:
        """Scalar value of the setting."""
        if not self._type.is_scalar:
            raise SettingTypeError(f"{self._type.name} setting has no scalar value", self.path)
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self.set(value)

    def set(self, value: Any) -> None:
        """
        Replace the scalar value in place.

        The Python type of the value must match the kind of the setting
        exactly (bool for BOOLEAN, int for INT, float for FLOAT, str for
        STRING). On failure the previous value is kept.

        Raises:
            SettingTypeError: If the setting is not a scalar or the value has another kind
            SettingValueError: If the value cannot be represented
        """
        if not self._type.is_scalar:
            raise SettingTypeError(f"cannot assign a scalar to a {self._type.name} setting", self.path)

        value_type = type_of(value)
        if value_type is not self._type:
            raise SettingTypeError(
                f"cannot assign {value_type.name} value to {self._type.name} setting", self.path
            )

        if value_type is SettingType.INT and not INT64_MIN <= value <= INT64_MAX:
            raise SettingValueError(f"integer {value} is out of 64-bit range", self.path)
        if value_type is SettingType.FLOAT and not math.isfinite(value):
            raise SettingValueError(f"float {value!r} cannot be represented", self.path)

        self._value = value

    def get(self, kind: SettingType | type, convert: bool = False) -> Any:
        """
        Return the scalar value as the requested kind.

        Args:
            kind: Expected kind (SettingType or bool/int/float/str)
            convert: Allow INT <-> FLOAT conversion

        Raises:
            SettingTypeError: If the setting is not of the requested kind
        """
        kind = _resolve_kind(kind)
        if kind is self._type and kind.is_scalar:
            return self._value

        if convert and kind.is_number and self._type.is_number:
            if kind is SettingType.FLOAT:
                return float(self._value)
            converted = int(self._value)
            if INT64_MIN <= converted <= INT64_MAX:
                return converted

        raise SettingTypeError(f"setting is {self._type.name}, not {kind.name}", self.path)

    def as_bool(self) -> bool:
        return self.get(SettingType.BOOLEAN)

    def as_int(self, convert: bool = False) -> int:
        return self.get(SettingType.INT, convert)

    def as_float(self, convert: bool = False) -> float:
        return self.get(SettingType.FLOAT, convert)

    def as_str(self) -> str:
        return self.get(SettingType.STRING)

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._children) if self._children is not None else 0

    def __bool__(self) -> bool:
        # An empty group is still a setting
        return True

    def __iter__(self) -> Iterator[Setting]:
        return iter(list(self._children or ()))

    def __contains__(self, path: str) -> bool:
        return self.exists(path)

    def __getitem__(self, key: str | int) -> Setting:
        """
        Get a direct child by name (groups) or by position (any aggregate).

        Raises:
            SettingTypeError: If this kind of setting has no such children
            SettingNotFoundError: If no matching child exists
        """
        if isinstance(key, bool):
            raise TypeError("Setting index must be str or int, not bool")
        if isinstance(key, int):
            return self.child_at(key)
        if isinstance(key, str):
            return self.child(key)
        raise TypeError(f"Setting index must be str or int, not {type(key).__name__}")

    def child(self, name: str) -> Setting:
        """Get a direct child of a group by name."""
        if self._type is not SettingType.GROUP:
            raise SettingTypeError(
                f"cannot look up member '{name}' of a {self._type.name} setting", self.path
            )
        found = self.find(name)
        if found is None:
            raise SettingNotFoundError(f"no setting named '{name}'", self._join(name))
        return found

    def child_at(self, index: int) -> Setting:
        """Get a direct child of an aggregate by position."""
        if self._children is None:
            raise SettingTypeError(f"cannot index a {self._type.name} setting", self.path)
        if index < 0 or index >= len(self._children):
            raise SettingNotFoundError(f"index {index} out of range", f"{self.path}[{index}]")
        return self._children[index]

    def exists(self, path: str) -> bool:
        """Check whether a (relative) path resolves. Never raises."""
        try:
            self.lookup(path)
        except SettingError:
            return False
        return True

    def lookup(self, path: str) -> Setting:
        """
        Resolve a path relative to this setting.

        Raises:
            SettingNotFoundError: If any path component does not resolve
        """
        return resolve_path(self, path)

    def lookup_value(
        self,
        path: str,
        kind: SettingType | type | None = None,
        default: Any = None,
        convert: bool = False,
    ) -> Any:
        """
        Soft lookup of a scalar value.

        Returns the value at path if it exists and has the requested kind
        (any scalar kind when kind is None); otherwise returns default.
        Never raises for a missing or mismatched setting.

        Example:
            port = root.lookup_value("server.port", int, 80)
        """
        try:
            setting = self.lookup(path)
            if kind is None:
                return setting.value
            return setting.get(kind, convert)
        except SettingError:
            return default

    def add(self, kind: SettingType | type, name: str | None = None) -> Setting:
        """
        Create a new child setting and return it.

        Named children can only be added to groups; unnamed children only
        to arrays and lists. Array elements must be scalars of the same
        kind as the existing elements. New scalars start with a zero value
        (False, 0, 0.0 or "").

        Raises:
            SettingTypeError: If this setting cannot hold a child of that kind
            SettingNameError: If the name is not a valid identifier
            SettingExistsError: If a child with that name already exists
        """
        kind = _resolve_kind(kind)
        if kind is SettingType.NONE:
            raise SettingTypeError("cannot add a setting of kind NONE", self.path)

        if self._type is SettingType.GROUP:
            if name is None:
                raise SettingNameError("members of a group must be named", self.path)
            if not is_valid_name(name):
                raise SettingNameError(f"invalid setting name '{name}'", self.path)
            if self.find(name) is not None:
                raise SettingExistsError(f"setting '{name}' already exists", self._join(name))
        elif self._type in (SettingType.ARRAY, SettingType.LIST):
            if name is not None:
                raise SettingTypeError(
                    f"cannot add named setting '{name}' to a {self._type.name}", self.path
                )
            if self._type is SettingType.ARRAY:
                if not kind.is_scalar:
                    raise SettingTypeError(f"array elements must be scalars, not {kind.name}", self.path)
                element_type = self.element_type
                if element_type is not SettingType.NONE and element_type is not kind:
                    raise SettingTypeError(
                        f"cannot add {kind.name} element to an array of {element_type.name}", self.path
                    )
        else:
            raise SettingTypeError(f"cannot add a child to a {self._type.name} setting", self.path)

        child = Setting(kind, name, parent=self)
        assert self._children is not None
        self._children.append(child)
        if self._members is not None and name is not None:
            self._members[name] = child
        return child

    def remove(self, name: str) -> None:
        """
        Remove a named child (and everything below it) from a group.

        Raises:
            SettingTypeError: If this setting is not a group
            SettingNotFoundError: If no child has that name
        """
        child = self.child(name)
        self._detach(child)

    def remove_at(self, index: int) -> None:
        """Remove the child at a position of any aggregate."""
        child = self.child_at(index)
        self._detach(child)

    def clear(self) -> None:
        """Remove all children of an aggregate."""
        if self._children is None:
            raise SettingTypeError(f"cannot clear a {self._type.name} setting", self.path)
        for child in self._children:
            child._parent = None
        self._children = []
        if self._members is not None:
            self._members = {}

    def _detach(self, child: Setting) -> None:
        assert self._children is not None
        self._children = [c for c in self._children if c is not child]
        if self._members is not None and child._name is not None:
            self._members.pop(child._name, None)
        child._parent = None

    def find(self, name: str) -> Setting | None:
        """Direct member of a group by name, or None. Never raises."""
        if self._members is None:
            return None
        return self._members.get(name)

    def _join(self, name: str) -> str:
        path = self.path
        return f"{path}.{name}" if path else name

    # ------------------------------------------------------------------
    # Comparison and conversion
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        """Structural equality: kind, name, value and children (format is ignored)."""
        if not isinstance(other, Setting):
            return NotImplemented
        if self._type is not other._type or self._name != other._name:
            return False
        if self._type.is_scalar:
            return self._value == other._value
        return (self._children or []) == (other._children or [])

    __hash__ = None  # type: ignore[assignment]

    def to_python(self) -> Any:
        """Convert the subtree to plain Python data (dict, list, scalars)."""
        if self._type is SettingType.GROUP:
            return {child._name: child.to_python() for child in self._children or ()}
        if self._type.is_aggregate:
            return [child.to_python() for child in self._children or ()]
        return self._value
