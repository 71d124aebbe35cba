"""Command line interface for remote-webdriver."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import ClientConfig, load_config
from .errors import WebDriverError
from .factory import build_transport, open_session
from .session import Session

app = typer.Typer(help="Remote WebDriver client")
console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("remote-webdriver"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def status(
    url: Annotated[
        Optional[str],
        typer.Option("--url", "-u", help="Remote end URL prefix."),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to YAML configuration."),
    ] = None,
) -> None:
    """Show the readiness report of a remote end."""

    config = _load(config_path, url)
    transport = build_transport(config)
    try:
        report = Session(transport, config.url_prefix).status()
    except WebDriverError as exc:
        _fail(exc)
    finally:
        transport.close()

    table = Table(title=f"Status of {config.url_prefix}")
    table.add_column("Field")
    table.add_column("Value")
    for key, value in report.model_dump(exclude_none=True).items():
        if value in ({}, []):
            continue
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def title(
    page_url: Annotated[str, typer.Argument(help="Page to load.")],
    browser: Annotated[
        Optional[str],
        typer.Option("--browser", "-b", help="Requested browserName capability."),
    ] = None,
    url: Annotated[
        Optional[str],
        typer.Option("--url", "-u", help="Remote end URL prefix."),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to YAML configuration."),
    ] = None,
) -> None:
    """Open a session, load a page and print its title."""

    config = _load(config_path, url)
    capabilities: dict[str, Any] = {}
    if browser:
        capabilities["browserName"] = browser
    transport = build_transport(config)
    try:
        with open_session(config, capabilities, transport=transport) as session:
            session.get(page_url)
            page_title = session.title()
    except WebDriverError as exc:
        _fail(exc)
    finally:
        transport.close()
    typer.echo(page_title)


def _load(config_path: Optional[Path], url: Optional[str]) -> ClientConfig:
    overrides: dict[str, Any] = {}
    if url:
        overrides["url_prefix"] = url
    return load_config(config_path, **overrides)


def _fail(exc: Exception) -> NoReturn:
    console.print(str(exc), style="red", markup=False)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
