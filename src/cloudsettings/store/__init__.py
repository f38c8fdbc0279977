"""Cloud variable stores and user identity providers."""

from .base import CloudVariableStore, StaticUserIdentity, UserIdentity
from .hub import HubStoreConfig, HubVariableStore
from .memory import InMemoryVariableStore
from .yaml_store import YamlVariableStore

__all__ = [
    "CloudVariableStore",
    "UserIdentity",
    "StaticUserIdentity",
    "InMemoryVariableStore",
    "YamlVariableStore",
    "HubStoreConfig",
    "HubVariableStore",
]
