"""Settings panels: groups of settings persisted as one cloud variable.

A concrete panel declares its metadata and settings as class attributes:

    class AudioPanel(SettingsPanel):
        display_name = "Audio"
        persistence_command = "/setvar audio"
        settings_schema = [
            SettingDefinition("Volume", "volume", "Master volume", 0.5),
            SettingDefinition("Muted", "muted", "Mute all output", False),
        ]

    panel = AudioPanel(store, identity)
    panel.get_setting_by_name("muted").value = True
    panel.save()
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from ..errors import CloudSettingsError, ConfigurationError
from ..store.base import CloudVariableStore, UserIdentity
from .codec import decode_settings, encode_settings
from .field import LinkedField
from .schema import SettingDefinition, ValueKind, check_schema
from .setting import Setting

logger = logging.getLogger(__name__)


class BootstrapStatus(Enum):
    """Outcome of the construction-time load/save sequence.

    Attributes:
        LOADED: Persisted values were loaded from the store.
        SAVED_DEFAULTS: Loading failed; the defaults were written as a new baseline.
        DEFAULTS_ONLY: Loading and saving both failed; in-memory defaults are used.
    """

    LOADED = "loaded"
    SAVED_DEFAULTS = "saved_defaults"
    DEFAULTS_ONLY = "defaults_only"


@dataclass
class BootstrapResult:
    """Result of ``SettingsPanel.bootstrap()``.

    Attributes:
        status: What the bootstrap managed to do.
        error: The load error when defaults were saved, or the save error
            when nothing could be persisted.
    """

    status: BootstrapStatus
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """True when the panel is in sync with the store."""
        return self.status is not BootstrapStatus.DEFAULTS_ONLY


def derive_persistence_key(command: str, user_id: str) -> str:
    """Build ``"{user_id}.{token}"`` from the second token of a command.

    Args:
        command: Whitespace-separated command, e.g. ``"/setvar audio"``.
        user_id: Identifier of the current user.

    Returns:
        The persistence key.

    Raises:
        ConfigurationError: If the command has fewer than two tokens.
    """
    tokens = (command or "").split()
    if len(tokens) < 2:
        raise ConfigurationError(
            f"Persistence command {command!r} needs at least two tokens",
            {"command": command},
        )
    return f"{user_id}.{tokens[1]}"


class SettingsPanel:
    """Base class for a named group of persisted settings.

    Subclasses set ``display_name``, ``persistence_command`` and
    ``settings_schema``, and may set ``refreshable`` and override
    ``on_refresh_settings()`` for settings that need more than a value
    assignment to take effect.

    Calls that touch the settings are serialized by a per-panel lock.
    """

    # Panel metadata (override in subclasses)
    display_name: ClassVar[str] = "Unnamed Panel"
    persistence_command: ClassVar[str] = ""
    refreshable: ClassVar[bool] = False
    settings_schema: ClassVar[List[SettingDefinition]] = []

    def __init__(self, store: CloudVariableStore, identity: UserIdentity):
        """Create the panel's settings and sync them with the store.

        Args:
            store: Cloud variable store used by load() and save().
            identity: Provider of the current user's id.

        Raises:
            ConfigurationError: If the schema or persistence command is malformed.
        """
        self._store = store
        self._lock = threading.RLock()

        check_schema(self.settings_schema, self.display_name)
        self._settings: List[Setting] = []
        self._raw_field_names: List[str] = []
        for definition in self.settings_schema:
            self._settings.append(
                Setting(
                    definition.display_name,
                    definition.description,
                    definition.initial_value(),
                )
            )
            self._raw_field_names.append(definition.literal_name)

        self._persistence_key = derive_persistence_key(
            self.persistence_command, identity.user_id
        )

        self.bootstrap_result = self.bootstrap()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self._persistence_key!r})"

    @property
    def persistence_key(self) -> str:
        """Store key of this panel, ``"{user_id}.{token}"``."""
        return self._persistence_key

    @property
    def settings(self) -> List[Setting]:
        """Settings in declaration order."""
        return list(self._settings)

    @property
    def raw_field_names(self) -> List[str]:
        """Literal names, parallel to ``settings``."""
        return list(self._raw_field_names)

    # ─────────────────────────────────────────────────────────────────
    # Bootstrap
    # ─────────────────────────────────────────────────────────────────

    def bootstrap(self) -> BootstrapResult:
        """Load persisted values, falling back to saving the current ones.

        Never raises: a load failing for any reason (store, decoding, or the
        refresh hook) falls back to a save, and a failing save is recorded
        in the result so the panel stays usable with its defaults.

        Returns:
            BootstrapResult describing what happened.
        """
        try:
            self.load()
            return BootstrapResult(BootstrapStatus.LOADED)
        except CloudSettingsError as e:
            load_error = e
            logger.debug(f"Initial load of '{self._persistence_key}' failed: {e}")
        except Exception as e:
            load_error = e
            logger.warning(
                f"Initial load of panel '{self.display_name}' raised "
                f"{type(e).__name__}: {e}"
            )

        try:
            self.save()
            return BootstrapResult(BootstrapStatus.SAVED_DEFAULTS, error=load_error)
        except Exception as e:
            logger.warning(
                f"Panel '{self.display_name}' could not be loaded or saved, "
                f"using defaults: {e}"
            )
            return BootstrapResult(BootstrapStatus.DEFAULTS_ONLY, error=e)

    # ─────────────────────────────────────────────────────────────────
    # Persistence
    # ─────────────────────────────────────────────────────────────────

    def get_settings(self) -> Dict[str, Any]:
        """Snapshot of ``{literal_name: value}``. No store access."""
        with self._lock:
            return {
                literal_name: setting.value
                for literal_name, setting in zip(self._raw_field_names, self._settings)
            }

    def save(self) -> Dict[str, Any]:
        """Write all settings to the store.

        Returns:
            The mapping that was written.

        Raises:
            StoreWriteError: If the store rejects the write.
        """
        with self._lock:
            values = self.get_settings()
            self._store.write_variable(self._persistence_key, encode_settings(values))
            logger.debug(f"Saved {len(values)} settings to '{self._persistence_key}'")
            return values

    def load(self, values: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Apply stored values to the settings.

        Without arguments the panel's variable is read from the store. When a
        mapping is given it is applied directly and the store is not touched.
        Entries are applied only where the literal name is known and the
        value has the setting's kind; everything else is skipped. Applied
        values are pushed to linked fields. Refreshable panels run
        ``on_refresh_settings()`` once afterwards.

        Args:
            values: Optional ``{literal_name: value}`` mapping to apply.

        Returns:
            The mapping that was applied.

        Raises:
            StoreReadError: If the variable cannot be read.
            DeserializationError: If the stored blob is not a settings mapping.
        """
        with self._lock:
            if values is None:
                text = self._store.read_variable(self._persistence_key)
                values = decode_settings(text, self._persistence_key)

            self._apply(values)

            if self.refreshable:
                self.on_refresh_settings()

            return values

    def _apply(self, values: Dict[str, Any]) -> None:
        for literal_name, setting in zip(self._raw_field_names, self._settings):
            if literal_name not in values:
                continue

            value = values[literal_name]
            if not ValueKind.matches(value, setting.kind):
                logger.debug(
                    f"Skipping '{literal_name}': stored {type(value).__name__}, "
                    f"expected {setting.kind.value}"
                )
                continue

            setting.value = value
            field = setting.linked_field
            if field is not None:
                field.set_value(value)

    def on_refresh_settings(self) -> None:
        """Hook for settings whose effect needs more than a value assignment.

        Called after every load on refreshable panels. Default does nothing.
        """

    # ─────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────

    def get_setting_by_name(self, name: str) -> Optional[Setting]:
        """Find a setting by its display name.

        Returns:
            The first matching Setting or None.
        """
        for setting in self._settings:
            if setting.name == name:
                return setting
        return None

    def get_setting_by_literal_name(self, name: str) -> Optional[Setting]:
        """Find a setting by its literal (persisted) name.

        Returns:
            The matching Setting or None.
        """
        for literal_name, setting in zip(self._raw_field_names, self._settings):
            if literal_name == name:
                return setting
        return None

    # ─────────────────────────────────────────────────────────────────
    # Field handlers
    # ─────────────────────────────────────────────────────────────────

    def save_settings_field_handler(self, field: LinkedField) -> None:
        """Save when a boolean trigger field becomes true."""
        if field.get_value():
            self.save()

    def load_settings_field_handler(self, field: LinkedField) -> None:
        """Load when a boolean trigger field becomes true."""
        if field.get_value():
            self.load()

    def refresh_settings_field_handler(self, field: LinkedField) -> None:
        """Run the refresh hook when a boolean trigger field becomes true."""
        if field.get_value():
            self.on_refresh_settings()
