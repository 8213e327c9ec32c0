"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
import io
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import MagicMock

import httpx
import pytest

from repofetch.models.config import TransportConfig
from repofetch.transport import TransportClient


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def transport_client() -> TransportClient:
    """Transport client with default settings (no HTTP client created yet)."""
    return TransportClient(TransportConfig())


@pytest.fixture
def mock_transport(transport_client: TransportClient) -> Callable[..., TransportClient]:
    """Install an httpx.MockTransport handler on the shared client."""

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> TransportClient:
        transport_client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return transport_client

    return install


@pytest.fixture
def repository_zip() -> bytes:
    """Zip archive as served by the Azure DevOps items endpoint."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("README.md", "# repo\n")
        zf.writestr("src/", "")
        zf.writestr("src/app.py", "print('hello')\n")
        zf.writestr("logs/", "")
    return buffer.getvalue()


@pytest.fixture
def malicious_zip() -> bytes:
    """Zip archive with a member escaping the extraction root."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("../escape.txt", "nope\n")
    return buffer.getvalue()


class FakeProcess:
    """Stand-in for asyncio.subprocess.Process running ``git clone``."""

    def __init__(self, git: "FakeGit", destination: Path) -> None:
        self._git = git
        self._destination = destination
        self.returncode: int | None = None
        self.kill = MagicMock(side_effect=self._kill)

    def _kill(self) -> None:
        self.returncode = -9

    async def communicate(self) -> tuple[bytes, bytes]:
        self._git.started.set()
        if self._git.block:
            await asyncio.Event().wait()

        if self._git.returncode == 0:
            git_dir = self._destination / ".git"
            git_dir.mkdir(parents=True)
            (git_dir / "HEAD").write_text("ref: refs/heads/main\n")
            (self._destination / "README.md").write_text("# repo\n")

        self.returncode = self._git.returncode
        return b"", self._git.stderr

    async def wait(self) -> int | None:
        return self.returncode


class FakeGit:
    """Replacement for asyncio.create_subprocess_exec recording git calls."""

    def __init__(self, returncode: int = 0, stderr: bytes = b"", block: bool = False) -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.block = block
        self.started = asyncio.Event()
        self.commands: list[list[str]] = []
        self.kwargs: list[dict] = []
        self.processes: list[FakeProcess] = []

    async def __call__(self, *cmd: str, **kwargs) -> FakeProcess:
        self.commands.append(list(cmd))
        self.kwargs.append(kwargs)
        process = FakeProcess(self, Path(cmd[-1]))
        self.processes.append(process)
        return process


@pytest.fixture
def fake_git(monkeypatch: pytest.MonkeyPatch) -> Callable[..., FakeGit]:
    """Patch subprocess creation with a fake ``git clone``."""

    def install(**kwargs) -> FakeGit:
        git = FakeGit(**kwargs)
        monkeypatch.setattr(asyncio, "create_subprocess_exec", git)
        return git

    return install


# Markers for test categories
def pytest_configure(config):
    config.addinivalue_line("markers", "mock: tests using mocked transfers")
    config.addinivalue_line("markers", "integration: tests requiring a git executable")
    config.addinivalue_line("markers", "slow: slow running tests")
