"""Configuration file loader."""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from ..errors import ConfigurationError
from ..store import (
    CloudVariableStore,
    HubStoreConfig,
    HubVariableStore,
    InMemoryVariableStore,
    StaticUserIdentity,
    UserIdentity,
    YamlVariableStore,
)
from .settings import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Global settings instance
_settings: Optional[Settings] = None


def _expand_env_vars(obj):
    """Recursively expand ${VAR} patterns in strings."""
    if isinstance(obj, str):
        # Handle ${VAR} pattern
        if obj.startswith("${") and obj.endswith("}"):
            var_name = obj[2:-1]
            return os.environ.get(var_name, "")
        return obj
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


def load_config(
    config_path: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> Settings:
    """Load configuration from YAML file and environment.

    Args:
        config_path: Path to config.yaml (default: config/config.yaml)
        env_path: Path to .env file (default: .env)

    Returns:
        Loaded Settings instance
    """
    global _settings

    # Load .env file if it exists
    if env_path is None:
        env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    # Load config.yaml
    config_data = {}
    if config_path is None:
        config_path = Path("config/config.yaml")

    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    # Expand environment variables
    config_data = _expand_env_vars(config_data)

    _settings = Settings(**config_data)

    return _settings


def get_settings() -> Settings:
    """Get the current settings instance.

    Loads default settings if not yet loaded.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings to None (for testing)."""
    global _settings
    _settings = None


def build_store(settings: Settings) -> CloudVariableStore:
    """Create the cloud variable store selected by ``settings.store.backend``.

    Raises:
        ConfigurationError: If the hub backend is selected without a token.
    """
    store_settings = settings.store
    if store_settings.backend == "memory":
        return InMemoryVariableStore()
    if store_settings.backend == "yaml":
        return YamlVariableStore(Path(store_settings.yaml_path))

    hub = store_settings.hub
    if not hub.url or not hub.token:
        raise ConfigurationError(
            "Hub store requires store.hub.url and store.hub.token",
            {"backend": "hub"},
        )
    return HubVariableStore(
        HubStoreConfig(url=hub.url, token=hub.token, timeout=hub.timeout_seconds)
    )


def build_identity(settings: Settings) -> UserIdentity:
    """Create the identity provider for the configured user."""
    return StaticUserIdentity(settings.identity.user_id)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for applications using this package.

    Args:
        level: Level name; defaults to the configured ``log_level``.
    """
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )
