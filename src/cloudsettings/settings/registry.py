"""Process-wide catalog of settings panels.

Panel variants are registered explicitly with ``@register_panel``. At
startup the registry instantiates one panel per registered variant, in
name order.

Example:
    @register_panel
    class AudioPanel(SettingsPanel):
        ...

    registry = init_settings_registry(store, StaticUserIdentity("U-alice"))
    muted = registry.get_setting_by_name(AudioPanel, "muted")
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from ..store.base import CloudVariableStore, UserIdentity
from .panel import SettingsPanel
from .setting import Setting

logger = logging.getLogger(__name__)

PanelT = TypeVar("PanelT", bound=SettingsPanel)

# Registration table: variant tag (class name) -> panel class
PANEL_TYPES: Dict[str, Type[SettingsPanel]] = {}


def register_panel(
    panel_type: Type[PanelT],
    table: Optional[Dict[str, Type[SettingsPanel]]] = None,
) -> Type[PanelT]:
    """Register a panel class under its class name.

    Usable as a class decorator. Re-registering the same class is a no-op.

    Args:
        panel_type: The SettingsPanel subclass.
        table: Registration table to add to (defaults to PANEL_TYPES).

    Returns:
        The class, unchanged.

    Raises:
        TypeError: If the class is not a SettingsPanel subclass.
        ValueError: If another class is already registered under the same name.
    """
    if not (isinstance(panel_type, type) and issubclass(panel_type, SettingsPanel)):
        raise TypeError(f"{panel_type!r} is not a SettingsPanel subclass")

    target = PANEL_TYPES if table is None else table
    tag = panel_type.__name__
    existing = target.get(tag)
    if existing is not None and existing is not panel_type:
        raise ValueError(f"Panel '{tag}' already registered")

    target[tag] = panel_type
    logger.debug(f"Registered settings panel: {tag}")
    return panel_type


class SettingsRegistry:
    """Holds one instance of every registered panel variant."""

    def __init__(
        self,
        store: CloudVariableStore,
        identity: UserIdentity,
        panel_types: Optional[Dict[str, Type[SettingsPanel]]] = None,
    ):
        """Initialize the registry. Call discover_all() to create the panels.

        Args:
            store: Store handed to every panel.
            identity: Identity handed to every panel.
            panel_types: Registration table (defaults to PANEL_TYPES).
        """
        self._store = store
        self._identity = identity
        self._panel_types = PANEL_TYPES if panel_types is None else panel_types
        self._panels: List[SettingsPanel] = []

    @property
    def panels(self) -> List[SettingsPanel]:
        """Panel instances sorted by variant name."""
        return list(self._panels)

    def discover_all(self) -> List[SettingsPanel]:
        """Instantiate one panel per registered variant.

        Panels are created in variant-name order; each runs its own
        load-or-save bootstrap. Replaces any previously discovered panels.

        Returns:
            The new panel instances.
        """
        panels = []
        for tag in sorted(self._panel_types):
            panel = self._panel_types[tag](self._store, self._identity)
            logger.debug(f"Panel {tag} bootstrap: {panel.bootstrap_result.status.value}")
            panels.append(panel)

        self._panels = panels
        logger.info(f"Discovered {len(panels)} settings panel(s)")
        return self.panels

    def get_panel(self, panel_type: Type[PanelT]) -> Optional[PanelT]:
        """Return the panel instance of ``panel_type``, or None."""
        for panel in self._panels:
            if isinstance(panel, panel_type):
                return panel
        return None

    def get_setting_by_name(
        self, panel_type: Type[SettingsPanel], name: str
    ) -> Optional[Setting]:
        """Find a setting by display name on the panel of ``panel_type``.

        Returns:
            The Setting, or None if there is no such panel or setting.
        """
        panel = self.get_panel(panel_type)
        if panel is None:
            return None
        return panel.get_setting_by_name(name)

    def get_setting_by_literal_name(
        self, panel_type: Type[SettingsPanel], name: str
    ) -> Optional[Setting]:
        """Find a setting by literal name on the panel of ``panel_type``.

        Returns:
            The Setting, or None if there is no such panel or setting.
        """
        panel = self.get_panel(panel_type)
        if panel is None:
            return None
        return panel.get_setting_by_literal_name(name)

    def save_all(self) -> Dict[str, Dict[str, Any]]:
        """Save every panel.

        Returns:
            Mapping of variant name to the values written.

        Raises:
            StoreWriteError: On the first panel whose write fails.
        """
        return {type(panel).__name__: panel.save() for panel in self._panels}


# Global instance for singleton pattern (optional)
_global_registry: Optional[SettingsRegistry] = None


def get_settings_registry() -> Optional[SettingsRegistry]:
    """Get the global settings registry.

    Returns:
        The global SettingsRegistry or None if not initialized.
    """
    return _global_registry


def init_settings_registry(
    store: CloudVariableStore, identity: UserIdentity, **kwargs
) -> SettingsRegistry:
    """Create the global settings registry and discover all panels.

    Args:
        store: Cloud variable store.
        identity: Current user identity.
        **kwargs: Additional arguments for SettingsRegistry.

    Returns:
        The initialized SettingsRegistry.
    """
    global _global_registry
    _global_registry = SettingsRegistry(store, identity, **kwargs)
    _global_registry.discover_all()
    return _global_registry
