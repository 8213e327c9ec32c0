"""Tests for the repofetch CLI."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from repofetch.cli import load_config, main
from repofetch.errors import CloneError
from repofetch.service import CloneService


class TestLoadConfig:
    """Tests for merging CLI flags into the service configuration."""

    def test_defaults(self):
        config = load_config(None, None, None, False)

        assert config.transport.verify_tls is False
        assert config.preserve_git_directory is False

    def test_overrides(self):
        config = load_config(None, True, 30.0, True)

        assert config.transport.verify_tls is True
        assert config.transport.timeout == 30.0
        assert config.preserve_git_directory is True

    def test_flags_override_file(self, temp_dir: Path):
        path = temp_dir / "repofetch.yaml"
        path.write_text("transport:\n  verify_tls: true\n  timeout: 10\n")

        config = load_config(str(path), False, None, False)

        assert config.transport.verify_tls is False
        assert config.transport.timeout == 10


class TestCloneCommand:
    """Tests for the clone command."""

    def test_public_clone(self):
        runner = CliRunner()
        with patch.object(CloneService, "clone_public_repository", new_callable=AsyncMock) as clone:
            result = runner.invoke(main, ["clone", "https://example.com/repo.git", "/tmp/a", "--ref", "main"])

        assert result.exit_code == 0, result.output
        clone.assert_awaited_once_with("https://example.com/repo.git", "main", "/tmp/a")

    def test_private_clone_password_from_env(self):
        runner = CliRunner()
        with patch.object(
            CloneService, "clone_private_repository_with_basic_auth", new_callable=AsyncMock
        ) as clone:
            result = runner.invoke(
                main,
                ["clone", "https://dev.azure.com/org/proj/_git/repo", "/tmp/b", "-u", "u"],
                env={"REPOFETCH_PASSWORD": "p"},
            )

        assert result.exit_code == 0, result.output
        clone.assert_awaited_once_with(
            "https://dev.azure.com/org/proj/_git/repo", "", "/tmp/b", "u", "p"
        )

    def test_clone_failure_exits_nonzero(self):
        runner = CliRunner()
        error = CloneError("failed to clone git repository: not found")
        with patch.object(
            CloneService, "clone_public_repository", new_callable=AsyncMock, side_effect=error
        ):
            result = runner.invoke(main, ["clone", "https://example.com/repo.git", "/tmp/a"])

        assert result.exit_code == 1
        assert "failed to clone git repository" in result.output
