"""
Settings commands for MangaReader CLI.

Reads and writes reading preferences and the Torbox API key.
"""
import click
from rich import box
from rich.table import Table

from .base import AppContext, handle_errors, pass_app
from ..constants import TORBOX_SERVICE_NAME, VALID_DOWNLOAD_QUALITIES
from ..logging import console, get_logger
from ..models import ReadingMode

logger = get_logger(__name__)

ENV_OVERRIDE_NOTICE = "TORBOX_API_KEY from the environment or .env"


@click.group()
def settings() -> None:
    """View and change preferences."""


@settings.command("show")
@pass_app
def show_settings(app: AppContext) -> None:
    """Prints the current preferences."""
    table = Table(title="Settings", box=box.SIMPLE, show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value", style="cyan")
    table.add_row("reading-mode", app.store.reading_mode.value)
    table.add_row("auto-download", "on" if app.store.auto_download else "off")
    table.add_row("quality", app.store.download_quality)
    table.add_row("torbox key", "[green]configured[/green]" if app.torbox.has_api_key() else "[yellow]not set[/yellow]")
    table.add_row("settings file", str(app.store.path))
    console.print(table)


@settings.command("set")
@click.option("--reading-mode", type=click.Choice([m.value for m in ReadingMode]), default=None)
@click.option("--auto-download/--no-auto-download", default=None)
@click.option("--quality", type=click.Choice(sorted(VALID_DOWNLOAD_QUALITIES)), default=None)
@pass_app
@handle_errors
def set_settings(app: AppContext, reading_mode, auto_download, quality) -> None:
    """Updates one or more preferences."""
    if reading_mode is None and auto_download is None and quality is None:
        raise click.UsageError("Nothing to set.")
    if reading_mode is not None:
        app.store.reading_mode = ReadingMode(reading_mode)
    if auto_download is not None:
        app.store.auto_download = auto_download
    if quality is not None:
        app.store.download_quality = quality
    console.print("[green]Settings saved.[/green]")


@settings.command("set-key")
@click.option("--key", prompt="Torbox API key", hide_input=True, help="Torbox API key.")
@pass_app
@handle_errors
def set_key(app: AppContext, key: str) -> None:
    """Stores the Torbox API key."""
    key = key.strip()
    if not key:
        raise click.BadParameter("the key is empty", param_hint="--key")
    app.credentials.save(TORBOX_SERVICE_NAME, key)
    console.print("[green]Torbox API key saved.[/green]")
    if app.credentials.is_overridden(TORBOX_SERVICE_NAME):
        console.print(f"[yellow]{ENV_OVERRIDE_NOTICE} takes precedence over the saved key.[/yellow]")
    else:
        app.torbox.set_api_key(key)


@settings.command("clear-key")
@pass_app
@handle_errors
def clear_key(app: AppContext) -> None:
    """Removes the stored Torbox API key."""
    if app.credentials.delete(TORBOX_SERVICE_NAME):
        console.print("[green]Torbox API key removed.[/green]")
    else:
        console.print("[dim]No stored Torbox API key.[/dim]")
    if app.credentials.is_overridden(TORBOX_SERVICE_NAME):
        logger.warning("Torbox key cleared from file but still set in configuration")
        console.print(f"[yellow]{ENV_OVERRIDE_NOTICE} is still in use; unset it to stop using that key.[/yellow]")
