"""repofetch - Fetch git repositories from generic hosts and Azure DevOps."""

__version__ = "0.1.0"

from repofetch.errors import CloneError, UnsupportedUrlError  # noqa: E402
from repofetch.models import CloneRequest, ServiceConfig, TransportConfig  # noqa: E402
from repofetch.service import CloneService, RepositoryHost, classify_url, get_service  # noqa: E402

__all__ = [
    "CloneError",
    "CloneRequest",
    "CloneService",
    "RepositoryHost",
    "ServiceConfig",
    "TransportConfig",
    "UnsupportedUrlError",
    "classify_url",
    "get_service",
]
