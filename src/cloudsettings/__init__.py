"""cloudsettings - settings panels synchronized with a cloud variable store."""

from .errors import (
    CloudSettingsError,
    ConfigurationError,
    DeserializationError,
    SerializationError,
    SettingTypeError,
    StoreError,
    StoreReadError,
    StoreWriteError,
)
from .settings import (
    Setting,
    SettingDefinition,
    SettingsPanel,
    SettingsRegistry,
    ValueField,
    ValueKind,
    get_settings_registry,
    init_settings_registry,
    register_panel,
)
from .store import InMemoryVariableStore, StaticUserIdentity

__version__ = "0.1.0"

__all__ = [
    "CloudSettingsError",
    "ConfigurationError",
    "DeserializationError",
    "SerializationError",
    "SettingTypeError",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    "Setting",
    "SettingDefinition",
    "SettingsPanel",
    "SettingsRegistry",
    "ValueField",
    "ValueKind",
    "register_panel",
    "get_settings_registry",
    "init_settings_registry",
    "InMemoryVariableStore",
    "StaticUserIdentity",
]
