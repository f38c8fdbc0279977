"""Configuration settings models using Pydantic."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class HubSettings(BaseModel):
    """Hub connection settings."""
    url: str = "http://localhost:8000"
    token: Optional[str] = None
    timeout_seconds: float = 30.0


class StoreSettings(BaseModel):
    """Cloud variable store settings."""
    backend: Literal["memory", "yaml", "hub"] = "yaml"
    yaml_path: str = "./data/cloud_variables.yaml"
    hub: HubSettings = Field(default_factory=HubSettings)


class IdentitySettings(BaseModel):
    """Current user identity."""
    user_id: str = "local"


class Settings(BaseModel):
    """Root configuration model."""
    model_config = ConfigDict(extra="ignore")  # Ignore unknown fields in config file

    store: StoreSettings = Field(default_factory=StoreSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    log_level: str = "INFO"
