"""Configuration loading and collaborator construction."""

from .loader import (
    build_identity,
    build_store,
    configure_logging,
    get_settings,
    load_config,
    reset_settings,
)
from .settings import HubSettings, IdentitySettings, Settings, StoreSettings

__all__ = [
    "Settings",
    "StoreSettings",
    "HubSettings",
    "IdentitySettings",
    "load_config",
    "get_settings",
    "reset_settings",
    "build_store",
    "build_identity",
    "configure_logging",
]
