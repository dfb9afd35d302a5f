"""
edgedriver - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--driver-version, etc.)
    2. Environment variables (EDGEDRIVER__DRIVER__VERSION, etc.)
    3. Config file (edgedriver.yaml)

Usage:
    edgedriver install
    edgedriver install --driver-version 114.0.1823.43
    edgedriver versions --limit 5
    edgedriver locate
"""

import asyncio
import logging
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from edgedriver import __version__
from edgedriver.config import get_settings
from edgedriver.driver.catalog import CatalogResolver
from edgedriver.driver.installer import DriverInstaller
from edgedriver.driver.profiler import profile
from edgedriver.exceptions import EdgeDriverError
from edgedriver.finder.edge import EdgeFinder
from edgedriver.system.process import SubprocessRunner
from edgedriver.utils.logging import configure_from_settings

app = typer.Typer(
    name="edgedriver",
    help="Download and locate Microsoft Edge WebDriver binaries",
    add_completion=False,
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"edgedriver {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Download and locate Microsoft Edge WebDriver binaries."""


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]✗ {error}[/red]")
    logging.getLogger(__name__).debug("Command failed", exc_info=error)
    raise typer.Exit(1)


@app.command()
def install(
    driver_version: Optional[str] = typer.Option(
        None, "--driver-version", "-V", help="Edge version to install the driver for (default: installed Edge)"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Download the driver matching a Microsoft Edge version.

    Without --driver-version, the version of the installed Microsoft Edge is used.

    Examples:
        edgedriver install
        edgedriver install -V 114.0.1823.43
    """
    settings = get_settings()
    configure_from_settings(settings.logging, verbose=verbose or settings.debug)

    installer = DriverInstaller(settings.driver)
    try:
        binary_path = asyncio.run(installer.acquire(driver_version))
    except (EdgeDriverError, OSError) as e:
        _fail(e)

    console.print(f"[green]✓ Edgedriver available at[/green] {binary_path}")


@app.command()
def versions(
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Number of versions to show"),
):
    """
    List the most recent driver versions in the release catalog.
    """
    settings = get_settings()
    configure_from_settings(settings.logging)

    resolver = CatalogResolver(settings.driver)
    try:
        available = asyncio.run(resolver.available_versions(limit))
    except EdgeDriverError as e:
        _fail(e)

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("#", width=3)
    table.add_column("Version")
    for i, available_version in enumerate(available, 1):
        table.add_row(str(i), available_version)
    console.print(table)


@app.command()
def locate():
    """
    List Microsoft Edge installations, best candidate first.
    """
    settings = get_settings()
    configure_from_settings(settings.logging)

    installations = asyncio.run(EdgeFinder(SubprocessRunner()).find_installations())
    if not installations:
        console.print("[yellow]⚠ No Microsoft Edge installation found[/yellow]")
        raise typer.Exit(1)

    for path in installations:
        console.print(path)


@app.command("platform")
def show_platform():
    """
    Show the platform identifier used to pick driver downloads.
    """
    host = profile()
    console.print(Panel.fit(
        f"[dim]OS family:[/dim] {host.os_family.value}\n"
        f"[dim]Architecture:[/dim] {host.arch_suffix}\n"
        f"[dim]Asset suffix:[/dim] _{host.identifier}",
        border_style="blue",
    ))


if __name__ == "__main__":
    app()
