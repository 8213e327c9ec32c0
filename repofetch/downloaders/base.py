"""Base downloader interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from repofetch.models.clone import CloneRequest


class Downloader(ABC):
    """Abstract base class for repository transfer strategies."""

    @abstractmethod
    async def download(self, destination: Path, request: CloneRequest) -> None:
        """Fetch the requested repository into ``destination``.

        Raises:
            CloneError: If the transfer fails.
            asyncio.CancelledError: If the awaiting task is cancelled.
        """
        ...
