"""Data models for repofetch."""

from repofetch.models.clone import CloneRequest
from repofetch.models.config import ServiceConfig, TransportConfig

__all__ = [
    "CloneRequest",
    "ServiceConfig",
    "TransportConfig",
]
