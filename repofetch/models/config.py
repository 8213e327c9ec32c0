"""Configuration models for the clone service."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from repofetch import __version__

DEFAULT_TIMEOUT = 300.0


class TransportConfig(BaseModel):
    """HTTP transport settings shared by every downloader."""

    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Timeout in seconds")
    verify_tls: bool = Field(
        default=False, description="Verify server TLS certificates"
    )
    user_agent: str = Field(default=f"repofetch/{__version__}")


class ServiceConfig(BaseModel):
    """Complete clone service configuration."""

    transport: TransportConfig = Field(default_factory=TransportConfig)
    preserve_git_directory: bool = Field(
        default=False, description="Keep the .git directory after a git clone"
    )

    @classmethod
    def from_yaml(cls, path: Path) -> "ServiceConfig":
        """Load service configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})
