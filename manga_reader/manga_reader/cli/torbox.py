"""
Torbox commands for MangaReader CLI.

Shows tracked torrents, finds the ones matching a title, adds magnets and
requests download links.
"""
from typing import Optional
from urllib.parse import parse_qs, urlparse

import click
from rich import box
from rich.markup import escape
from rich.table import Table

from .base import AppContext, format_progress, format_size, handle_errors, pass_app
from ..logging import console, get_logger

logger = get_logger(__name__)


def magnet_display_name(magnet: str) -> str:
    """The dn= parameter of a magnet link, or the link itself."""
    names = parse_qs(urlparse(magnet).query).get("dn")
    return names[0] if names else magnet


@click.group()
def torbox() -> None:
    """Interact with the Torbox download service."""


@torbox.command()
@pass_app
@handle_errors
def status(app: AppContext) -> None:
    """Shows all tracked torrents and their progress."""
    torrents = app.torbox.get_torrents()
    if not torrents:
        console.print("[dim]No torrents tracked on Torbox.[/dim]")
        return

    table = Table(title=f"Torbox Torrents ({len(torrents)})", box=box.ROUNDED)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="white", overflow="ellipsis")
    table.add_column("Size", justify="right", style="green")
    table.add_column("Progress", justify="right")
    table.add_column("Status", justify="center", style="cyan")
    for t in torrents:
        table.add_row(t.id, escape(t.name), format_size(t.size), format_progress(t.progress), t.status)
    console.print(table)


@torbox.command()
@click.argument("title")
@pass_app
@handle_errors
def files(app: AppContext, title: str) -> None:
    """Lists tracked torrents whose name matches TITLE."""
    matched = app.torbox.search_manga_files(title, threshold=app.config.matching.threshold)
    if not matched:
        console.print(f"[yellow]No tracked torrents match '{escape(title)}'.[/yellow]")
        return

    table = Table(title=f"Matches for '{escape(title)}'", box=box.SIMPLE)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="white")
    table.add_column("Size", justify="right", style="green")
    table.add_column("Status", justify="center")
    for f in matched:
        table.add_row(f.id, escape(f.name), format_size(f.size), f.status)
    console.print(table)


@torbox.command()
@click.argument("query")
@pass_app
@handle_errors
def search(app: AppContext, query: str) -> None:
    """Searches Torbox for torrents matching QUERY."""
    results = app.torbox.search_torrents(query)
    if not results:
        console.print("[yellow]No torrents found.[/yellow]")
        return

    table = Table(title=f"Torrents for '{escape(query)}'", box=box.SIMPLE)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="white")
    table.add_column("Size", justify="right", style="green")
    table.add_column("Seed", justify="right", style="yellow")
    table.add_column("Leech", justify="right", style="red")
    for r in results:
        table.add_row(
            r.display_id,
            escape(r.name),
            format_size(r.size),
            str(r.seeders) if r.seeders is not None else "-",
            str(r.leechers) if r.leechers is not None else "-",
        )
    console.print(table)


@torbox.command("add")
@click.argument("magnet")
@click.option("--manga-id", default=None, help="Remember this download for a library title.")
@pass_app
@handle_errors
def add_magnet(app: AppContext, magnet: str, manga_id: Optional[str]) -> None:
    """Starts tracking MAGNET on Torbox."""
    if not magnet.startswith("magnet:"):
        raise click.BadParameter("expected a magnet: link", param_hint="MAGNET")

    result = app.torbox.add_magnet(magnet)
    if not result.success:
        console.print("[yellow]Torbox did not confirm the torrent was added.[/yellow]")
        return

    console.print(f"[green]Added to Torbox (torrent id {result.torrent_id}).[/green]")
    if manga_id and result.hash:
        if app.store.save_torbox_download(manga_id, result.hash, magnet_display_name(magnet)):
            logger.info(f"Linked torrent {result.hash} to manga {manga_id}")


@torbox.command()
@click.argument("torrent_id", type=int)
@click.option("--file-id", type=int, default=None, help="A single file inside the torrent.")
@pass_app
@handle_errors
def link(app: AppContext, torrent_id: int, file_id: Optional[int]) -> None:
    """Prints a download link for a completed torrent."""
    url = app.torbox.get_download_link(torrent_id, file_id=file_id)
    if not url:
        console.print("[yellow]Torbox returned no link (is the torrent finished?).[/yellow]")
        return
    console.print(url, soft_wrap=True)


@torbox.command()
@pass_app
@handle_errors
def profile(app: AppContext) -> None:
    """Shows the Torbox account tied to the API key."""
    user = app.torbox.get_user_profile()
    console.print(f"[bold]Email:[/bold] {escape(user.email or '-')}")
    console.print(f"[bold]Plan:[/bold] {user.plan if user.plan is not None else '-'}")
