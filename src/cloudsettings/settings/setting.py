"""A single named, typed and persistable value."""

import logging
import weakref
from typing import Any, Optional

from ..errors import SettingTypeError
from .field import LinkedField
from .schema import ValueKind

logger = logging.getLogger(__name__)


class Setting:
    """A named value whose kind stays fixed for its whole lifetime.

    A setting may be bound to a live field. Binding copies the field's value
    into the setting; panels push loaded values back out to the field. The
    setting only keeps a weak reference to the field, so the field must
    support weak references.

    Example:
        volume = Setting("Volume", "Master volume", 0.5)
        volume.value = 0.8
        volume.value = "loud"   # raises SettingTypeError
    """

    def __init__(self, name: str, description: str, value: Any):
        self._name = name
        self._description = description
        self._kind = ValueKind.of(value, name)
        self._value = value
        self._field_ref: Optional[weakref.ReferenceType] = None

    def __repr__(self) -> str:
        return f"Setting({self._name!r}, value={self._value!r})"

    @property
    def name(self) -> str:
        """Display name."""
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def kind(self) -> ValueKind:
        """Kind fixed by the initial value."""
        return self._kind

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        """Replace the value. The linked field is not updated.

        Raises:
            SettingTypeError: If the value's kind differs from the setting's kind.
        """
        if not ValueKind.matches(value, self._kind):
            raise SettingTypeError(
                self._name, expected=self._kind.value, actual=type(value).__name__
            )
        self._value = value

    def get_value(self) -> Any:
        """Return the current value."""
        return self._value

    @property
    def linked_field(self) -> Optional[LinkedField]:
        """The bound field, or None if unbound or already collected."""
        if self._field_ref is None:
            return None
        return self._field_ref()

    def bind_field(self, field: LinkedField) -> None:
        """Bind a live field and adopt its current value.

        The field's value replaces whatever the setting held before. When the
        field supports ``on_change`` listeners, later field changes are
        mirrored into the setting as well. Binding again replaces the
        previous binding; a rejected field leaves the previous binding and
        value untouched.

        Args:
            field: Object implementing ``get_value``/``set_value``.

        Raises:
            SettingTypeError: If the field holds a value of another kind.
            TypeError: If the field does not support weak references.
        """
        value = field.get_value()
        if not ValueKind.matches(value, self._kind):
            raise SettingTypeError(
                self._name, expected=self._kind.value, actual=type(value).__name__
            )
        field_ref = weakref.ref(field)

        self.unbind_field()
        self._value = value
        self._field_ref = field_ref

        on_change = getattr(field, "on_change", None)
        if callable(on_change):
            on_change(self._on_field_change)

    def unbind_field(self) -> None:
        """Drop the current binding, if any."""
        field = self.linked_field
        self._field_ref = None
        if field is None:
            return
        remove_listener = getattr(field, "remove_listener", None)
        if callable(remove_listener):
            remove_listener(self._on_field_change)

    def _on_field_change(self, field: LinkedField) -> None:
        value = field.get_value()
        if not ValueKind.matches(value, self._kind):
            logger.debug(
                f"Ignoring {type(value).__name__} from field bound to '{self._name}'"
            )
            return
        self._value = value
