"""Shared HTTP transport used by every downloader."""

from __future__ import annotations

import logging
import math

import httpx

from repofetch.models.config import TransportConfig

logger = logging.getLogger(__name__)


class TransportClient:
    """Process-wide HTTP client with a fixed timeout and TLS policy.

    Azure requests go through :attr:`client` directly. The git downloader
    runs the ``git`` executable, so the same policy is rendered as
    ``git -c`` options by :meth:`git_options`.
    """

    def __init__(self, config: TransportConfig | None = None) -> None:
        self.config = config or TransportConfig()
        self._client: httpx.AsyncClient | None = None
        if not self.config.verify_tls:
            logger.warning("TLS certificate verification is disabled for repository transfers")

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                verify=self.config.verify_tls,
                follow_redirects=True,
                headers={"User-Agent": self.config.user_agent},
            )
        return self._client

    def git_options(self) -> list[str]:
        """Render the transport policy as ``git -c`` arguments.

        git has no whole-request deadline, so the timeout becomes a stall
        timeout: the transfer is aborted once it stays below 1 byte/s for
        ``timeout`` seconds. A clone that keeps making progress may run
        longer than ``timeout`` in total, unlike the httpx client where
        the same value caps each connect, read, write and pool wait.
        ``http.lowSpeedTime`` takes whole seconds and 0 disables it, so
        the value is rounded up to at least 1.
        """
        low_speed_time = max(1, math.ceil(self.config.timeout))
        options = [
            "-c", f"http.userAgent={self.config.user_agent}",
            "-c", "http.lowSpeedLimit=1",
            "-c", f"http.lowSpeedTime={low_speed_time}",
        ]
        if not self.config.verify_tls:
            options.extend(["-c", "http.sslVerify=false"])
        return options

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
