"""Tests for SettingsPanel.

Covers:
- Settings created from the declared schema
- Persistence key derivation
- Construction-time load/save bootstrap
- save()/load()/get_settings() round trips and kind checks
- Refresh hook and field handlers
- Serialization of concurrent and re-entrant calls
"""

import json
import threading
import time

import pytest

from cloudsettings.errors import (
    ConfigurationError,
    DeserializationError,
    StoreReadError,
    StoreWriteError,
)
from cloudsettings.settings import (
    BootstrapStatus,
    SettingDefinition,
    SettingsPanel,
    ValueField,
    derive_persistence_key,
)
from cloudsettings.store import InMemoryVariableStore


class AudioPanel(SettingsPanel):
    display_name = "Audio"
    persistence_command = "/setvar audio"
    settings_schema = [
        SettingDefinition("Volume", "volume", "Master volume", 0.5),
        SettingDefinition("Muted", "muted", "Mute all output", False),
    ]


class HotkeyPanel(SettingsPanel):
    display_name = "Hotkeys"
    persistence_command = "/setvar hotkeys"
    refreshable = True
    settings_schema = [
        SettingDefinition("Keys", "keys", "Bound keys", ["F1"]),
        SettingDefinition("Modifiers", "modifiers", "Modifier map", {"save": "ctrl"}),
        SettingDefinition("RepeatDelay", "repeat delay", "Delay in ms", 250),
    ]

    def __init__(self, store, identity):
        self.refresh_calls = 0
        super().__init__(store, identity)

    def on_refresh_settings(self):
        self.refresh_calls += 1


def stored(store, key):
    """Decode the JSON blob stored under ``key``."""
    return json.loads(store.variables[key])


class TestPersistenceKey:
    """Tests for persistence key derivation."""

    def test_uses_second_token(self):
        assert derive_persistence_key("/setvar audio", "U-alice") == "U-alice.audio"

    def test_extra_whitespace_and_tokens(self):
        assert derive_persistence_key("  /setvar   audio  extra ", "U-bob") == "U-bob.audio"

    @pytest.mark.parametrize("command", ["", "   ", "/setvar"])
    def test_too_few_tokens_raise(self, command):
        with pytest.raises(ConfigurationError):
            derive_persistence_key(command, "U-alice")

    def test_panel_key(self, store, identity):
        panel = AudioPanel(store, identity)
        assert panel.persistence_key == "U-alice.audio"

    def test_panel_with_bad_command_raises(self, store, identity):
        class BrokenPanel(SettingsPanel):
            persistence_command = "/setvar"
            settings_schema = [SettingDefinition("A", "a", "", 1)]

        with pytest.raises(ConfigurationError):
            BrokenPanel(store, identity)
        assert store.reads == 0


class TestPanelConstruction:
    """Tests for schema handling and the bootstrap sequence."""

    def test_settings_follow_declaration_order(self, store, identity):
        panel = AudioPanel(store, identity)

        assert [s.name for s in panel.settings] == ["volume", "muted"]
        assert panel.raw_field_names == ["Volume", "Muted"]
        assert [s.description for s in panel.settings] == ["Master volume", "Mute all output"]

    def test_duplicate_literal_names_raise(self, store, identity):
        class DuplicatePanel(SettingsPanel):
            persistence_command = "/setvar dup"
            settings_schema = [
                SettingDefinition("A", "a", "", 1),
                SettingDefinition("A", "b", "", 2),
            ]

        with pytest.raises(ConfigurationError):
            DuplicatePanel(store, identity)

    def test_empty_store_saves_defaults(self, store, identity):
        panel = AudioPanel(store, identity)

        assert panel.bootstrap_result.status is BootstrapStatus.SAVED_DEFAULTS
        assert panel.bootstrap_result.ok
        assert stored(store, "U-alice.audio") == {"Volume": 0.5, "Muted": False}

    def test_existing_values_are_loaded(self, store, identity):
        store.write_variable("U-alice.audio", '{"Volume": 0.9, "Muted": true}')
        store.writes = 0

        panel = AudioPanel(store, identity)

        assert panel.bootstrap_result.status is BootstrapStatus.LOADED
        assert panel.get_settings() == {"Volume": 0.9, "Muted": True}
        assert store.writes == 0

    def test_corrupt_blob_is_replaced_by_defaults(self, store, identity):
        store.write_variable("U-alice.audio", "{not json")

        panel = AudioPanel(store, identity)

        assert panel.bootstrap_result.status is BootstrapStatus.SAVED_DEFAULTS
        assert stored(store, "U-alice.audio") == {"Volume": 0.5, "Muted": False}

    def test_failed_read_then_successful_write(self, store, identity):
        """A store failing the first read still yields a working panel."""
        store.write_variable("U-alice.audio", '{"Volume": 0.1, "Muted": true}')
        store.fail_reads = 1

        panel = AudioPanel(store, identity)

        assert panel.bootstrap_result.status is BootstrapStatus.SAVED_DEFAULTS
        assert panel.get_settings() == {"Volume": 0.5, "Muted": False}
        assert stored(store, "U-alice.audio") == {"Volume": 0.5, "Muted": False}

    def test_unreachable_store_keeps_defaults(self, store, identity):
        store.fail_reads = 1
        store.fail_writes = True

        panel = AudioPanel(store, identity)

        result = panel.bootstrap_result
        assert result.status is BootstrapStatus.DEFAULTS_ONLY
        assert not result.ok
        assert isinstance(result.error, StoreWriteError)
        assert panel.get_settings() == {"Volume": 0.5, "Muted": False}

    def test_instances_do_not_share_values(self, store, identity):
        first = HotkeyPanel(store, identity)
        second = HotkeyPanel(store, identity)

        first.get_setting_by_name("keys").value.append("F2")

        assert second.get_setting_by_name("keys").value == ["F1"]
        assert HotkeyPanel.settings_schema[0].default == ["F1"]

    def test_raising_refresh_hook_does_not_break_construction(self, store, identity):
        """A hook error during the initial load falls back to saving defaults."""

        class BrokenHotkeyPanel(HotkeyPanel):
            def on_refresh_settings(self):
                raise RuntimeError("renderer not ready")

        store.write_variable("U-alice.hotkeys", '{"RepeatDelay": 100}')

        panel = BrokenHotkeyPanel(store, identity)

        result = panel.bootstrap_result
        assert result.status is BootstrapStatus.SAVED_DEFAULTS
        assert result.ok
        assert isinstance(result.error, RuntimeError)
        assert stored(store, "U-alice.hotkeys")["RepeatDelay"] == 100


class TestSaveAndLoad:
    """Tests for save(), load() and get_settings()."""

    def test_save_writes_and_returns_mapping(self, store, identity):
        panel = AudioPanel(store, identity)
        panel.get_setting_by_name("volume").value = 0.7

        result = panel.save()

        assert result == {"Volume": 0.7, "Muted": False}
        assert stored(store, "U-alice.audio") == result

    def test_get_settings_has_no_side_effects(self, store, identity):
        panel = AudioPanel(store, identity)
        reads, writes = store.reads, store.writes

        snapshot = panel.get_settings()
        snapshot["Volume"] = 1.0

        assert store.reads == reads
        assert store.writes == writes
        assert panel.get_settings() == {"Volume": 0.5, "Muted": False}

    def test_save_then_load_is_idempotent(self, store, identity):
        panel = HotkeyPanel(store, identity)
        panel.get_setting_by_name("keys").value = ["F5", "F6"]
        panel.get_setting_by_name("repeat delay").value = 400
        before = panel.get_settings()

        panel.save()
        panel.load()

        assert panel.get_settings() == before

    def test_nested_composites_survive_round_trip(self, store, identity):
        panel = HotkeyPanel(store, identity)
        panel.get_setting_by_name("keys").value = [["F1", "F2"], {"chord": ["ctrl", "k"]}]
        panel.get_setting_by_name("modifiers").value = {
            "save": "ctrl",
            "layers": {"fn": [1, 2.5, None]},
        }
        before = panel.get_settings()

        panel.save()
        fresh = HotkeyPanel(store, identity)

        assert fresh.bootstrap_result.status is BootstrapStatus.LOADED
        assert fresh.get_settings() == before

    def test_load_applies_matching_kinds(self, store, identity):
        panel = AudioPanel(store, identity)
        store.write_variable("U-alice.audio", '{"Volume": 0.25, "Muted": true}')

        result = panel.load()

        assert result == {"Volume": 0.25, "Muted": True}
        assert panel.get_setting_by_name("volume").value == 0.25
        assert panel.get_setting_by_name("muted").value is True

    def test_load_skips_kind_mismatch(self, store, identity):
        panel = AudioPanel(store, identity)

        panel.load({"Volume": "loud", "Muted": True})

        assert panel.get_setting_by_name("volume").value == 0.5
        assert panel.get_setting_by_name("muted").value is True

    def test_load_skips_int_for_float_and_int_for_bool(self, store, identity):
        panel = AudioPanel(store, identity)

        panel.load({"Volume": 1, "Muted": 1})

        assert panel.get_settings() == {"Volume": 0.5, "Muted": False}

    def test_load_ignores_unknown_and_missing_keys(self, store, identity):
        panel = AudioPanel(store, identity)

        panel.load({"Balance": 0.0, "volume": 0.9})

        assert panel.get_settings() == {"Volume": 0.5, "Muted": False}

    def test_load_mapping_does_not_touch_store(self, store, identity):
        panel = AudioPanel(store, identity)
        reads, writes = store.reads, store.writes

        panel.load({"Muted": True})

        assert (store.reads, store.writes) == (reads, writes)

    def test_load_missing_variable_raises(self, store, identity):
        panel = AudioPanel(store, identity)
        store.delete_variable("U-alice.audio")

        with pytest.raises(StoreReadError):
            panel.load()

    @pytest.mark.parametrize("blob", ["not json", "[1, 2]", '"text"'])
    def test_load_corrupt_blob_raises(self, store, identity, blob):
        panel = AudioPanel(store, identity)
        store.write_variable("U-alice.audio", blob)

        with pytest.raises(DeserializationError):
            panel.load()
        assert panel.get_settings() == {"Volume": 0.5, "Muted": False}

    def test_save_failure_propagates(self, store, identity):
        panel = AudioPanel(store, identity)
        store.fail_writes = True

        with pytest.raises(StoreWriteError):
            panel.save()

    def test_load_pushes_to_linked_field(self, store, identity):
        panel = AudioPanel(store, identity)
        field = ValueField(False)
        panel.get_setting_by_name("muted").bind_field(field)

        panel.load({"Muted": True, "Volume": "bad"})

        assert field.get_value() is True

    def test_round_trip_between_instances(self, store, identity):
        """Values saved by one instance are seen by a fresh instance."""
        panel = AudioPanel(store, identity)
        assert stored(store, "U-alice.audio") == {"Volume": 0.5, "Muted": False}

        panel.get_setting_by_name("muted").value = True
        panel.save()

        fresh = AudioPanel(store, identity)
        assert fresh.get_setting_by_name("muted").value is True
        assert fresh.bootstrap_result.status is BootstrapStatus.LOADED


class TestRefresh:
    """Tests for the refresh hook."""

    def test_refresh_once_per_load(self, store, identity):
        panel = HotkeyPanel(store, identity)
        # Bootstrap load failed on the empty store, so no refresh yet
        assert panel.refresh_calls == 0

        panel.load()
        assert panel.refresh_calls == 1

        panel.load({"RepeatDelay": 100})
        assert panel.refresh_calls == 2

    def test_no_refresh_on_save_or_snapshot(self, store, identity):
        panel = HotkeyPanel(store, identity)

        panel.save()
        panel.get_settings()

        assert panel.refresh_calls == 0

    def test_bootstrap_load_refreshes(self, store, identity):
        store.write_variable("U-alice.hotkeys", '{"RepeatDelay": 100}')

        panel = HotkeyPanel(store, identity)

        assert panel.refresh_calls == 1
        assert panel.get_setting_by_literal_name("RepeatDelay").value == 100

    def test_failed_load_does_not_refresh(self, store, identity):
        panel = HotkeyPanel(store, identity)
        store.write_variable("U-alice.hotkeys", "garbage")

        with pytest.raises(DeserializationError):
            panel.load()
        assert panel.refresh_calls == 0

    def test_not_refreshable_panel_skips_hook(self, store, identity):
        calls = []

        class QuietPanel(AudioPanel):
            def on_refresh_settings(self):
                calls.append(True)

        panel = QuietPanel(store, identity)
        panel.load()

        assert calls == []


class TestLookup:
    """Tests for setting lookup."""

    def test_by_display_name(self, store, identity):
        panel = AudioPanel(store, identity)
        assert panel.get_setting_by_name("volume") is panel.settings[0]
        assert panel.get_setting_by_name("Volume") is None

    def test_by_literal_name(self, store, identity):
        panel = AudioPanel(store, identity)
        assert panel.get_setting_by_literal_name("Muted") is panel.settings[1]
        assert panel.get_setting_by_literal_name("muted") is None


class TestFieldHandlers:
    """Tests for the boolean trigger field handlers."""

    def test_save_trigger(self, store, identity):
        panel = AudioPanel(store, identity)
        panel.get_setting_by_name("volume").value = 0.3
        trigger = ValueField(False)
        trigger.on_change(panel.save_settings_field_handler)

        trigger.set_value(True)

        assert stored(store, "U-alice.audio")["Volume"] == 0.3

    def test_handlers_ignore_false(self, store, identity):
        panel = HotkeyPanel(store, identity)
        reads, writes = store.reads, store.writes
        trigger = ValueField(False)

        panel.save_settings_field_handler(trigger)
        panel.load_settings_field_handler(trigger)
        panel.refresh_settings_field_handler(trigger)

        assert (store.reads, store.writes) == (reads, writes)
        assert panel.refresh_calls == 0

    def test_load_trigger(self, store, identity):
        panel = AudioPanel(store, identity)
        store.write_variable("U-alice.audio", '{"Muted": true}')

        panel.load_settings_field_handler(ValueField(True))

        assert panel.get_setting_by_name("muted").value is True

    def test_refresh_trigger(self, store, identity):
        panel = HotkeyPanel(store, identity)

        panel.refresh_settings_field_handler(ValueField(True))

        assert panel.refresh_calls == 1

    def test_explicit_handler_call_propagates_errors(self, store, identity):
        panel = AudioPanel(store, identity)
        store.fail_writes = True

        with pytest.raises(StoreWriteError):
            panel.save_settings_field_handler(ValueField(True))


class OverlapTrackingStore(InMemoryVariableStore):
    """In-memory store that records how many calls run at once."""

    def __init__(self):
        super().__init__()
        self._count_lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0

    def _enter(self):
        with self._count_lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        time.sleep(0.005)

    def _leave(self):
        with self._count_lock:
            self.in_flight -= 1

    def read_variable(self, key: str) -> str:
        self._enter()
        try:
            return super().read_variable(key)
        finally:
            self._leave()

    def write_variable(self, key: str, value: str) -> None:
        self._enter()
        try:
            super().write_variable(key, value)
        finally:
            self._leave()


class TestLocking:
    """Tests for the per-panel lock."""

    def test_concurrent_save_and_load_are_serialized(self, identity):
        store = OverlapTrackingStore()
        panel = AudioPanel(store, identity)
        errors = []

        def worker(index):
            try:
                for _ in range(5):
                    if index % 2:
                        panel.save()
                    else:
                        panel.load()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert not any(thread.is_alive() for thread in threads)
        assert errors == []
        assert store.max_in_flight == 1

    def test_save_from_refresh_hook_does_not_deadlock(self, store, identity):
        class SavingHotkeyPanel(HotkeyPanel):
            def on_refresh_settings(self):
                super().on_refresh_settings()
                self.save()

        panel = SavingHotkeyPanel(store, identity)
        store.write_variable("U-alice.hotkeys", '{"RepeatDelay": 100}')
        writes = store.writes

        thread = threading.Thread(target=panel.load)
        thread.start()
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert panel.refresh_calls == 1
        assert store.writes == writes + 1
        assert stored(store, "U-alice.hotkeys")["RepeatDelay"] == 100
