"""Repository transfer strategies."""

from repofetch.downloaders.azure import AzureDownloader, AzureRepository, is_azure_url
from repofetch.downloaders.base import Downloader
from repofetch.downloaders.git import BasicAuth, GitCloneOptions, GitDownloader

__all__ = [
    "Downloader",
    # Generic git
    "BasicAuth",
    "GitCloneOptions",
    "GitDownloader",
    # Azure DevOps
    "AzureDownloader",
    "AzureRepository",
    "is_azure_url",
]
