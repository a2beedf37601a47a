"""
Library commands for MangaReader CLI.

Manages the local library and favorites sets.
"""
import click
from rich import box
from rich.markup import escape
from rich.table import Table

from .base import AppContext, handle_errors, pass_app
from ..logging import console, get_logger

logger = get_logger(__name__)


@click.group()
def library() -> None:
    """Manage saved titles and favorites."""


@library.command("list")
@click.option("--favorites", is_flag=True, help="Only favorites.")
@click.option("--fetch", is_flag=True, help="Look up titles from the catalog.")
@pass_app
@handle_errors
def list_library(app: AppContext, favorites: bool, fetch: bool) -> None:
    """Lists titles in the library."""
    ids = app.store.favorite_manga_ids if favorites else app.store.library_manga_ids
    if not ids:
        console.print("[dim]Your library is empty.[/dim]")
        return

    table = Table(title=f"Library ({len(ids)})", box=box.ROUNDED)
    table.add_column("ID", style="dim", no_wrap=True)
    if fetch:
        table.add_column("Title", style="white")
    table.add_column("Fav", justify="center")
    table.add_column("Downloads", justify="right", style="cyan")

    last_read = app.store.last_read_manga_id
    for manga_id in sorted(ids):
        row = [manga_id + (" [green](last read)[/green]" if manga_id == last_read else "")]
        if fetch:
            row.append(escape(app.catalog.get_manga_details(manga_id).title))
        row.append("[magenta]★[/magenta]" if app.store.is_favorite(manga_id) else "")
        row.append(str(len(app.store.get_torbox_downloads(manga_id))))
        table.add_row(*row)
    console.print(table)


@library.command("add")
@click.argument("manga_id")
@pass_app
@handle_errors
def add_to_library(app: AppContext, manga_id: str) -> None:
    """Adds MANGA_ID to the library."""
    app.store.add_to_library(manga_id)
    console.print(f"[green]Added {manga_id} to library.[/green]")


@library.command("remove")
@click.argument("manga_id")
@pass_app
@handle_errors
def remove_from_library(app: AppContext, manga_id: str) -> None:
    """Removes MANGA_ID from the library (and favorites)."""
    if not app.store.is_in_library(manga_id):
        console.print(f"[yellow]{manga_id} is not in the library.[/yellow]")
        return
    app.store.remove_from_library(manga_id)
    console.print(f"[green]Removed {manga_id} from library.[/green]")


@library.command("favorite")
@click.argument("manga_id")
@pass_app
@handle_errors
def favorite(app: AppContext, manga_id: str) -> None:
    """Toggles the favorite flag on MANGA_ID."""
    if app.store.toggle_favorite(manga_id):
        console.print(f"[magenta]★ {manga_id} added to favorites.[/magenta]")
    else:
        console.print(f"[dim]{manga_id} removed from favorites.[/dim]")
