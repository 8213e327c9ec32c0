"""Generic git downloader driving the ``git`` executable."""

from __future__ import annotations

import asyncio
import base64
import contextlib
import logging
import os
import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from repofetch.downloaders.base import Downloader
from repofetch.errors import CloneError
from repofetch.models.clone import CloneRequest
from repofetch.transport import TransportClient

logger = logging.getLogger(__name__)

CLONE_FAILURE = "failed to clone git repository"
GIT_DIRECTORY = ".git"

_REFERENCE_PREFIXES = ("refs/heads/", "refs/tags/")


@dataclass(frozen=True)
class BasicAuth:
    """HTTP basic credentials sent with every git request."""

    username: str
    password: str = field(repr=False)

    def header(self) -> str:
        token = base64.b64encode(f"{self.username}:{self.password}".encode()).decode()
        return f"Authorization: Basic {token}"


@dataclass(frozen=True)
class GitCloneOptions:
    """Transfer configuration for a single ``git clone``."""

    url: str
    depth: int = 0
    auth: BasicAuth | None = None
    reference_name: str | None = None  # None clones the default branch

    @classmethod
    def from_request(cls, request: CloneRequest) -> "GitCloneOptions":
        auth = None
        if request.has_credentials:
            auth = BasicAuth(username=request.username, password=request.password)
        return cls(
            url=request.repository_url,
            depth=request.depth,
            auth=auth,
            reference_name=request.reference_name or None,
        )

    @property
    def branch(self) -> str | None:
        """Reference name as accepted by ``git clone --branch``."""
        if self.reference_name is None:
            return None
        for prefix in _REFERENCE_PREFIXES:
            if self.reference_name.startswith(prefix):
                return self.reference_name[len(prefix):]
        return self.reference_name

    def command(self, destination: Path, transport_options: list[str] | None = None) -> list[str]:
        """Build the ``git clone`` command line (credentials excluded)."""
        cmd = ["git", *(transport_options or []), "clone"]
        if self.depth > 0:
            cmd.extend(["--depth", str(self.depth)])
        if self.branch is not None:
            cmd.extend(["--branch", self.branch])
        cmd.extend(["--", self.url, str(destination)])
        return cmd

    def environment(self, base: Mapping[str, str]) -> dict[str, str]:
        """Build the git environment.

        The auth header is appended to the ``GIT_CONFIG_*`` entries so it
        never shows up in the process argument list.
        """
        env = {**base, "GIT_TERMINAL_PROMPT": "0"}
        if self.auth is not None:
            index = int(env.get("GIT_CONFIG_COUNT") or 0)
            env[f"GIT_CONFIG_KEY_{index}"] = "http.extraHeader"
            env[f"GIT_CONFIG_VALUE_{index}"] = self.auth.header()
            env["GIT_CONFIG_COUNT"] = str(index + 1)
        return env


class GitDownloader(Downloader):
    """Clones repositories over the standard git protocol.

    The ``.git`` directory is removed after a successful clone unless
    ``preserve_git_directory`` is set.
    """

    def __init__(self, transport: TransportClient, preserve_git_directory: bool = False) -> None:
        self.transport = transport
        self.preserve_git_directory = preserve_git_directory

    def build_options(self, request: CloneRequest) -> GitCloneOptions:
        return GitCloneOptions.from_request(request)

    async def download(self, destination: Path, request: CloneRequest) -> None:
        """Clone the repository into ``destination``."""
        destination = Path(destination)
        options = self.build_options(request)
        cmd = options.command(destination, self.transport.git_options())
        env = options.environment(os.environ)

        destination.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cloning {options.url} into {destination}")
        logger.debug(
            f"Clone options: depth={options.depth} branch={options.branch} "
            f"auth={'basic' if options.auth else 'none'}"
        )

        try:
            await self._run_command(cmd, env)
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"git exited with status {e.returncode}"
            raise CloneError(f"{CLONE_FAILURE}: {detail}") from e
        except OSError as e:
            raise CloneError(f"{CLONE_FAILURE}: {e}") from e

        if not self.preserve_git_directory:
            self._remove_git_directory(destination)

        logger.info(f"Cloned {options.url} into {destination}")

    def _remove_git_directory(self, destination: Path) -> None:
        """Remove the metadata directory; failures are logged, not raised."""
        git_dir = destination / GIT_DIRECTORY
        if not git_dir.exists():
            return
        try:
            shutil.rmtree(git_dir)
        except OSError as e:
            logger.warning(f"Failed to remove {git_dir}: {e}")

    async def _run_command(
        self, cmd: list[str], env: dict[str, str] | None = None
    ) -> subprocess.CompletedProcess[str]:
        """Run a command asynchronously, killing it if the caller is cancelled."""
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
            raise

        if process.returncode != 0:
            raise subprocess.CalledProcessError(
                process.returncode, cmd, stdout.decode(), stderr.decode()
            )

        return subprocess.CompletedProcess(
            cmd, process.returncode, stdout.decode(), stderr.decode()
        )
