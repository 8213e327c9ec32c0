"""Clone request model shared by all downloaders."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CloneRequest(BaseModel):
    """Uniform clone request assembled by the service.

    ``depth == 0`` requests the full history. Credentials are used for basic
    authentication as soon as either field is non-empty.
    """

    model_config = ConfigDict(frozen=True)

    repository_url: str = Field(..., description="Remote repository URL")
    username: str = Field(default="")
    password: str = Field(default="", repr=False)
    reference_name: str = Field(default="", description="Branch or tag; empty means default branch")
    depth: int = Field(default=1, ge=0, description="History depth (0 for full history)")

    @property
    def has_credentials(self) -> bool:
        """Check if basic authentication should be used."""
        return bool(self.username or self.password)
