"""Clone service - single entry point for fetching repositories.

Classifies repository URLs by host and hands a normalized
:class:`CloneRequest` to the matching downloader.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable

from repofetch.downloaders.azure import AzureDownloader, is_azure_url
from repofetch.downloaders.base import Downloader
from repofetch.downloaders.git import GitDownloader
from repofetch.models.clone import CloneRequest
from repofetch.models.config import ServiceConfig
from repofetch.transport import TransportClient

SHALLOW_DEPTH = 1


class RepositoryHost(str, Enum):
    """Hosting flavour that decides which downloader handles a URL."""
    AZURE = "azure"
    GENERIC = "generic"


# Checked in order; anything unmatched is GENERIC
HOST_CLASSIFIERS: list[tuple[RepositoryHost, Callable[[str], bool]]] = [
    (RepositoryHost.AZURE, is_azure_url),
]


def classify_url(url: str) -> RepositoryHost:
    """Classify a repository URL by its host."""
    for host, matches in HOST_CLASSIFIERS:
        if matches(url):
            return host
    return RepositoryHost.GENERIC


class CloneService:
    """Clones public or basic-auth protected repositories.

    Owns the shared transport client and one downloader per host. Holds no
    per-call state, so concurrent clones on one instance are safe.
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        transport: TransportClient | None = None,
        downloaders: dict[RepositoryHost, Downloader] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Service configuration (defaults apply when omitted)
            transport: Shared transport client; built from config if omitted
            downloaders: Downloader per host; built on the transport if omitted
        """
        self.config = config or ServiceConfig()
        self.transport = transport or TransportClient(self.config.transport)
        self._downloaders: dict[RepositoryHost, Downloader] = downloaders or {
            RepositoryHost.AZURE: AzureDownloader(self.transport),
            RepositoryHost.GENERIC: GitDownloader(
                self.transport,
                preserve_git_directory=self.config.preserve_git_directory,
            ),
        }

    def get_downloader(self, host: RepositoryHost) -> Downloader:
        """Get the downloader registered for a host."""
        return self._downloaders[host]

    async def clone_public_repository(
        self,
        repository_url: str,
        reference_name: str,
        destination: str | Path,
    ) -> None:
        """Shallow clone a public repository into ``destination``."""
        await self._dispatch(
            Path(destination),
            CloneRequest(
                repository_url=repository_url,
                reference_name=reference_name,
                depth=SHALLOW_DEPTH,
            ),
        )

    async def clone_private_repository_with_basic_auth(
        self,
        repository_url: str,
        reference_name: str,
        destination: str | Path,
        username: str,
        password: str,
    ) -> None:
        """Shallow clone a repository using HTTP basic authentication."""
        await self._dispatch(
            Path(destination),
            CloneRequest(
                repository_url=repository_url,
                username=username,
                password=password,
                reference_name=reference_name,
                depth=SHALLOW_DEPTH,
            ),
        )

    async def _dispatch(self, destination: Path, request: CloneRequest) -> None:
        downloader = self.get_downloader(classify_url(request.repository_url))
        await downloader.download(destination, request)

    async def close(self) -> None:
        """Close the shared transport client."""
        await self.transport.close()

    async def __aenter__(self) -> "CloneService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


# Global service instance
_service: CloneService | None = None


def get_service(config: ServiceConfig | None = None) -> CloneService:
    """Get or create the global clone service.

    ``config`` only applies on the first call. Passing a different config
    once the service exists raises ``ValueError``.
    """
    global _service
    if _service is None:
        _service = CloneService(config)
    elif config is not None and config != _service.config:
        raise ValueError("Global clone service already created with a different config")
    return _service
