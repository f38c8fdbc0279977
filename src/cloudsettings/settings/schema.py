"""Declarative setting definitions for settings panels.

A panel declares its settings as an ordered list of ``SettingDefinition``
objects instead of relying on attribute discovery. Values are restricted to a
closed set of kinds so that stored entries can be matched against the
current value before they are applied.
"""

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from ..errors import ConfigurationError, SettingTypeError


class ValueKind(Enum):
    """Kinds of values a setting may hold.

    Attributes:
        BOOLEAN: ``bool``.
        INTEGER: ``int`` (never ``bool``).
        FLOAT: ``float``.
        STRING: ``str``.
        LIST: ``list`` of JSON-compatible values.
        MAPPING: ``dict`` with string keys and JSON-compatible values.

    JSON-compatible values are None, bool, int, float, str, and lists and
    str-keyed dicts of those. Tuples and non-str keys are rejected because
    they would not survive a save/load round trip unchanged.
    """

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    LIST = "list"
    MAPPING = "mapping"

    @classmethod
    def of(cls, value: Any, name: str = "<value>") -> "ValueKind":
        """Classify a value.

        Args:
            value: The value to classify.
            name: Setting name used in the error message.

        Returns:
            The matching ValueKind.

        Raises:
            SettingTypeError: If the value's type is not supported.
        """
        # bool is a subclass of int, so it must be checked first
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, int):
            return cls.INTEGER
        if isinstance(value, float):
            return cls.FLOAT
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, list):
            _check_json_compatible(value, name)
            return cls.LIST
        if isinstance(value, dict):
            _check_json_compatible(value, name)
            return cls.MAPPING
        raise SettingTypeError(
            name,
            expected="/".join(kind.value for kind in cls),
            actual=type(value).__name__,
        )

    @classmethod
    def matches(cls, value: Any, kind: "ValueKind") -> bool:
        """Check whether ``value`` is of ``kind`` without raising."""
        try:
            return cls.of(value) is kind
        except SettingTypeError:
            return False


def _check_json_compatible(value: Any, name: str) -> None:
    """Raise SettingTypeError if ``value`` contains anything JSON cannot hold."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return
    if isinstance(value, list):
        for item in value:
            _check_json_compatible(item, name)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise SettingTypeError(
                    name, expected="str mapping keys", actual=type(key).__name__
                )
            _check_json_compatible(item, name)
        return
    raise SettingTypeError(
        name, expected="JSON-compatible contents", actual=type(value).__name__
    )


@dataclass(frozen=True)
class SettingDefinition:
    """Declaration of a single setting on a panel.

    Attributes:
        literal_name: Identifier used as the key in persisted mappings.
        display_name: Human-readable name used for lookups and UIs.
        description: Help text.
        default: Initial value; its kind is fixed for the setting's lifetime.
    """

    literal_name: str
    display_name: str
    description: str
    default: Any

    def __post_init__(self):
        """Validate the declaration."""
        if not self.literal_name:
            raise ConfigurationError("Setting definition requires a literal_name")
        ValueKind.of(self.default, self.literal_name)

    @property
    def kind(self) -> ValueKind:
        """Kind of the default value."""
        return ValueKind.of(self.default, self.literal_name)

    def initial_value(self) -> Any:
        """Return a private copy of the default for a new panel instance."""
        return copy.deepcopy(self.default)


def check_schema(schema: List[SettingDefinition], panel_name: str) -> None:
    """Reject schemas that declare the same literal name twice.

    Args:
        schema: The panel's setting definitions.
        panel_name: Panel name used in the error message.

    Raises:
        ConfigurationError: If a literal name is declared more than once.
    """
    seen = set()
    for definition in schema:
        if definition.literal_name in seen:
            raise ConfigurationError(
                f"Panel '{panel_name}' declares '{definition.literal_name}' twice",
                {"panel": panel_name, "literal_name": definition.literal_name},
            )
        seen.add(definition.literal_name)
