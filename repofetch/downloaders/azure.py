"""Azure DevOps downloader.

Azure DevOps repositories are fetched as a zip of the repository tree through
the Git ``items`` REST endpoint, then extracted into the destination.

API Documentation:
https://learn.microsoft.com/en-us/rest/api/azure/devops/git/items/get

Authentication: HTTP basic auth (a personal access token goes in the password)
"""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from repofetch.downloaders.base import Downloader
from repofetch.errors import CloneError, UnsupportedUrlError
from repofetch.models.clone import CloneRequest
from repofetch.transport import TransportClient

logger = logging.getLogger(__name__)

DOWNLOAD_FAILURE = "failed to download repository from Azure DevOps"
API_VERSION = "6.0"

_AZURE_HOSTS = ("dev.azure.com", "visualstudio.com")

# https://[user@]dev.azure.com/Organisation/Project/_git/Repository
_DEV_AZURE_PATTERN = re.compile(
    r"^https?://(?:[^@/]+@)?dev\.azure\.com/"
    r"(?P<organisation>[^/]+)/(?P<project>[^/]+)/_git/(?P<repository>[^/?#]+)/?$"
)
# https://[user@]Organisation.visualstudio.com/Project/_git/Repository
_VISUALSTUDIO_PATTERN = re.compile(
    r"^https?://(?:[^@/]+@)?(?P<organisation>[^./@]+)\.visualstudio\.com/"
    r"(?:DefaultCollection/)?(?P<project>[^/]+)/_git/(?P<repository>[^/?#]+)/?$"
)
# [ssh://]git@ssh.dev.azure.com:v3/Organisation/Project/Repository
_SSH_PATTERN = re.compile(
    r"^(?:ssh://)?git@(?:ssh\.dev\.azure\.com|vs-ssh\.visualstudio\.com)[:/]v3/"
    r"(?P<organisation>[^/]+)/(?P<project>[^/]+)/(?P<repository>[^/?#]+)/?$"
)
_COMMIT_PATTERN = re.compile(r"^[0-9a-fA-F]{40}$")


def is_azure_url(url: str) -> bool:
    """Check if the URL points to an Azure DevOps hosted repository."""
    return any(host in url for host in _AZURE_HOSTS)


@dataclass(frozen=True)
class AzureRepository:
    """Coordinates of an Azure DevOps repository."""

    organisation: str
    project: str
    repository: str
    base_url: str

    @classmethod
    def parse(cls, url: str) -> "AzureRepository":
        """Parse any supported Azure DevOps clone URL."""
        match = _DEV_AZURE_PATTERN.match(url) or _SSH_PATTERN.match(url)
        if match:
            return cls(
                organisation=match["organisation"],
                project=match["project"],
                repository=match["repository"],
                base_url=f"https://dev.azure.com/{match['organisation']}/{match['project']}",
            )

        match = _VISUALSTUDIO_PATTERN.match(url)
        if match:
            return cls(
                organisation=match["organisation"],
                project=match["project"],
                repository=match["repository"],
                base_url=f"https://{match['organisation']}.visualstudio.com/{match['project']}",
            )

        raise UnsupportedUrlError(f"Unsupported Azure DevOps repository URL: {url}")

    @property
    def items_url(self) -> str:
        return f"{self.base_url}/_apis/git/repositories/{self.repository}/items"


def version_descriptor(reference_name: str) -> dict[str, str]:
    """Map a git reference name to Azure version descriptor parameters."""
    if not reference_name:
        return {}
    if reference_name.startswith("refs/heads/"):
        version, version_type = reference_name[len("refs/heads/"):], "branch"
    elif reference_name.startswith("refs/tags/"):
        version, version_type = reference_name[len("refs/tags/"):], "tag"
    elif _COMMIT_PATTERN.match(reference_name):
        version, version_type = reference_name, "commit"
    else:
        version, version_type = reference_name, "branch"
    return {
        "versionDescriptor.version": version,
        "versionDescriptor.versionType": version_type,
    }


def extract_archive(archive: Path, destination: Path) -> None:
    """Extract a zip archive, refusing members outside ``destination``."""
    root = destination.resolve()
    with zipfile.ZipFile(archive, "r") as zf:
        for member in zf.namelist():
            out_path = (destination / member).resolve()
            if not out_path.is_relative_to(root):
                raise CloneError(f"{DOWNLOAD_FAILURE}: archive member escapes destination: {member}")

            # Directory entries keep empty folders from the repository tree
            if member.endswith("/"):
                out_path.mkdir(parents=True, exist_ok=True)
                continue

            out_path.parent.mkdir(parents=True, exist_ok=True)
            with zf.open(member) as src, open(out_path, "wb") as dst:
                shutil.copyfileobj(src, dst)


class AzureDownloader(Downloader):
    """Downloads Azure DevOps repositories through the shared HTTP client."""

    def __init__(self, transport: TransportClient) -> None:
        self.transport = transport

    def build_params(self, request: CloneRequest) -> dict[str, Any]:
        return {
            "scopePath": "/",
            "download": "true",
            "$format": "zip",
            "recursionLevel": "full",
            "api-version": API_VERSION,
            **version_descriptor(request.reference_name),
        }

    async def download(self, destination: Path, request: CloneRequest) -> None:
        """Download and extract the repository into ``destination``."""
        destination = Path(destination)
        repository = AzureRepository.parse(request.repository_url)
        logger.info(
            f"Downloading Azure DevOps repository {repository.organisation}/"
            f"{repository.project}/{repository.repository} into {destination}"
        )

        tmp_path: Path | None = None
        try:
            try:
                destination.mkdir(parents=True, exist_ok=True)
                with tempfile.NamedTemporaryFile(suffix=".zip", delete=False) as tmp:
                    tmp_path = Path(tmp.name)
                await self._fetch_archive(repository.items_url, request, tmp_path)
                await asyncio.to_thread(extract_archive, tmp_path, destination)
            except (httpx.HTTPError, zipfile.BadZipFile, OSError) as e:
                raise CloneError(f"{DOWNLOAD_FAILURE}: {e}") from e
        finally:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()

        logger.info(f"Downloaded {request.repository_url} into {destination}")

    async def _fetch_archive(self, url: str, request: CloneRequest, target: Path) -> None:
        """Stream the repository zip into ``target``."""
        kwargs: dict[str, Any] = {"params": self.build_params(request)}
        if request.has_credentials:
            kwargs["auth"] = httpx.BasicAuth(request.username, request.password)

        async with self.transport.client.stream("GET", url, **kwargs) as response:
            response.raise_for_status()
            # Azure answers failed sign-ins with a 203 and an HTML login page
            if response.status_code != 200:
                raise CloneError(
                    f"{DOWNLOAD_FAILURE}: unexpected status {response.status_code} for {url}"
                )
            with open(target, "wb") as f:
                async for chunk in response.aiter_bytes():
                    f.write(chunk)
