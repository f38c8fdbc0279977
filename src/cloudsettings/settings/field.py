"""Live value cells that settings can be bound to."""

import logging
from typing import Any, Callable, List, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class LinkedField(Protocol):
    """Narrow contract of a host field a setting can mirror."""

    def get_value(self) -> Any:
        """Return the field's current value."""
        ...

    def set_value(self, value: Any) -> None:
        """Replace the field's value."""
        ...


class ValueField:
    """In-process bindable value with change listeners.

    Listeners are called as ``callback(field)`` after the value changes,
    which matches the signature of the panel field handlers.

    Example:
        save_trigger = ValueField(False)
        save_trigger.on_change(panel.save_settings_field_handler)
        save_trigger.set_value(True)   # panel.save() runs
    """

    def __init__(self, value: Any = None):
        self._value = value
        self._listeners: List[Callable[["ValueField"], None]] = []

    def __repr__(self) -> str:
        return f"ValueField({self._value!r})"

    def get_value(self) -> Any:
        return self._value

    def set_value(self, value: Any) -> None:
        """Set the value and notify listeners if it changed."""
        old_value = self._value
        self._value = value
        if old_value != value or type(old_value) is not type(value):
            self._emit_change()

    def on_change(self, callback: Callable[["ValueField"], None]) -> None:
        """Register a callback invoked after the value changes.

        Args:
            callback: Function(field) called on changes.
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[["ValueField"], None]) -> None:
        """Remove a change listener.

        Args:
            callback: The callback to remove.
        """
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit_change(self) -> None:
        # Snapshot so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.warning(f"Field listener error: {e}")
