"""CLI commands for repofetch."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from repofetch.errors import CloneError
from repofetch.models.config import ServiceConfig
from repofetch.service import CloneService, classify_url

console = Console()


def load_config(
    config_file: str | None,
    verify_tls: bool | None,
    timeout: float | None,
    keep_git_dir: bool,
) -> ServiceConfig:
    """Load the config file (if any) and apply command-line overrides."""
    config = ServiceConfig.from_yaml(Path(config_file)) if config_file else ServiceConfig()

    transport_updates: dict[str, object] = {}
    if verify_tls is not None:
        transport_updates["verify_tls"] = verify_tls
    if timeout is not None:
        transport_updates["timeout"] = timeout

    updates: dict[str, object] = {}
    if transport_updates:
        updates["transport"] = config.transport.model_copy(update=transport_updates)
    if keep_git_dir:
        updates["preserve_git_directory"] = True
    return config.model_copy(update=updates) if updates else config


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """repofetch - Repository download CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@main.command()
@click.argument("url")
@click.argument("destination", type=click.Path(file_okay=False))
@click.option("--ref", "-r", default="", help="Branch or tag (default branch if omitted)")
@click.option("--username", "-u", default="", help="Username for basic authentication")
@click.option(
    "--password", "-p", default="", envvar="REPOFETCH_PASSWORD",
    help="Password or token for basic authentication",
)
@click.option("--keep-git-dir", is_flag=True, help="Keep the .git directory after cloning")
@click.option("--verify-tls/--no-verify-tls", default=None, help="Verify TLS certificates")
@click.option("--timeout", type=float, default=None, help="HTTP timeout in seconds")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False),
              default=None, help="YAML service configuration")
def clone(
    url: str,
    destination: str,
    ref: str,
    username: str,
    password: str,
    keep_git_dir: bool,
    verify_tls: bool | None,
    timeout: float | None,
    config_file: str | None,
) -> None:
    """Clone URL into DESTINATION (shallow, depth 1)."""
    config = load_config(config_file, verify_tls, timeout, keep_git_dir)

    async def run() -> None:
        async with CloneService(config) as service:
            if username or password:
                await service.clone_private_repository_with_basic_auth(
                    url, ref, destination, username, password
                )
            else:
                await service.clone_public_repository(url, ref, destination)

    host = classify_url(url)
    try:
        with console.status(f"Cloning {url} ({host.value})..."):
            asyncio.run(run())
    except CloneError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    console.print(f"[green]Cloned {url} into {destination}[/green]")


if __name__ == "__main__":
    main()
