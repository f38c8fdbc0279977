"""Settings panels synchronized with a cloud variable store.

Example usage:
    from cloudsettings.settings import (
        SettingDefinition, SettingsPanel, init_settings_registry, register_panel,
    )

    @register_panel
    class AudioPanel(SettingsPanel):
        display_name = "Audio"
        persistence_command = "/setvar audio"
        settings_schema = [
            SettingDefinition("Volume", "volume", "Master volume", 0.5),
            SettingDefinition("Muted", "muted", "Mute all output", False),
        ]

    registry = init_settings_registry(store, identity)
    registry.get_setting_by_name(AudioPanel, "volume").value = 0.8
    registry.get_panel(AudioPanel).save()
"""

from .codec import decode_settings, encode_settings
from .field import LinkedField, ValueField
from .panel import (
    BootstrapResult,
    BootstrapStatus,
    SettingsPanel,
    derive_persistence_key,
)
from .registry import (
    PANEL_TYPES,
    SettingsRegistry,
    get_settings_registry,
    init_settings_registry,
    register_panel,
)
from .schema import SettingDefinition, ValueKind
from .setting import Setting

__all__ = [
    # Declarations
    "SettingDefinition",
    "ValueKind",
    "Setting",
    # Fields
    "LinkedField",
    "ValueField",
    # Panels
    "SettingsPanel",
    "BootstrapResult",
    "BootstrapStatus",
    "derive_persistence_key",
    # Registry
    "PANEL_TYPES",
    "SettingsRegistry",
    "register_panel",
    "get_settings_registry",
    "init_settings_registry",
    # Codec
    "encode_settings",
    "decode_settings",
]
