"""
Browse commands for MangaReader CLI.

Searches the catalog, shows title details and lists chapter pages.
"""
from typing import List, Optional

import click
from rich import box
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .base import AppContext, format_progress, format_size, handle_errors, pass_app
from ..constants import DESCRIPTION_PREVIEW_CHARS
from ..logging import CredentialError, console, get_logger
from ..models import Manga

logger = get_logger(__name__)


def render_manga_table(mangas: List[Manga], app: AppContext, title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Authors", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Lib", justify="center")

    for manga in mangas:
        marker = ""
        if app.store.is_favorite(manga.id):
            marker = "[magenta]★[/magenta]"
        elif app.store.is_in_library(manga.id):
            marker = "[green]✓[/green]"
        table.add_row(
            manga.id,
            escape(manga.title),
            escape(", ".join(manga.authors)),
            manga.status,
            marker,
        )
    return table


@click.command()
@click.argument("query", required=False)
@click.option("--popular", is_flag=True, help="Most followed titles.")
@click.option("--seasonal", is_flag=True, help="Titles updated in the last few months.")
@click.option("--limit", type=int, default=None, help="Number of results.")
@click.option("--offset", type=int, default=0, help="Result offset for paging.")
@pass_app
@handle_errors
def browse(app: AppContext, query: Optional[str], popular: bool, seasonal: bool, limit: Optional[int], offset: int) -> None:
    """
    Searches the catalog for QUERY, or lists popular/seasonal titles.
    """
    logger.info(f"Browse command started (query={query}, popular={popular}, seasonal={seasonal}, limit={limit}, offset={offset})")

    if query:
        mangas = app.catalog.search_manga(query, limit=limit, offset=offset)
        title = f"Results for '{escape(query)}'"
    elif seasonal:
        mangas = app.catalog.get_seasonal_manga()
        title = "Seasonal"
    else:
        mangas = app.catalog.get_popular_manga(limit=limit, offset=offset)
        title = "Popular"

    if not mangas:
        console.print("[yellow]No titles found.[/yellow]")
        return

    console.print(render_manga_table(mangas, app, title))


@click.command()
@click.argument("manga_id")
@click.option("--files", "show_files", is_flag=True, help="List tracked Torbox torrents matching this title.")
@pass_app
@handle_errors
def show(app: AppContext, manga_id: str, show_files: bool) -> None:
    """Shows a title's details, chapters and reading progress."""
    logger.info(f"Show command started (manga_id={manga_id}, files={show_files})")
    manga = app.catalog.get_manga_details(manga_id)

    description = manga.description
    if len(description) > DESCRIPTION_PREVIEW_CHARS:
        description = description[:DESCRIPTION_PREVIEW_CHARS].rstrip() + "..."

    header = [
        f"[bold]Authors:[/bold] {escape(', '.join(manga.authors) or 'Unknown')}",
        f"[bold]Status:[/bold] {manga.status}",
        f"[bold]Tags:[/bold] {escape(', '.join(manga.tags) or '-')}",
        f"[bold]Cover:[/bold] {manga.cover_art}",
    ]
    if app.store.is_favorite(manga.id):
        header.append("[magenta]★ Favorite[/magenta]")
    elif app.store.is_in_library(manga.id):
        header.append("[green]In library[/green]")
    if description:
        header.append("")
        header.append(escape(description))
    console.print(Panel("\n".join(header), title=f"[bold cyan]{escape(manga.title)}[/bold cyan]", expand=False))

    table = Table(title=f"Chapters ({len(manga.chapters)})", box=box.SIMPLE)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Chapter", style="white")
    table.add_column("Published", style="cyan")
    table.add_column("Progress", justify="right")
    for chapter in manga.chapters:
        progress = app.store.get_reading_progress(manga.id, chapter.id)
        progress_cell = "-"
        if progress:
            progress_cell = f"{progress.last_page_read + 1}/{progress.total_pages} {format_progress(progress.fraction)}"
        table.add_row(chapter.id, escape(chapter.label), chapter.publish_date.strftime("%Y-%m-%d"), progress_cell)
    console.print(table)

    if show_files or app.store.auto_download:
        try:
            files = app.torbox.search_manga_files(manga.title, threshold=app.config.matching.threshold)
        except CredentialError:
            if show_files:
                raise
            # auto_download without a key: details are still useful on their own
            logger.info("Skipping Torbox lookup (no API key)")
            return
        if not files:
            console.print("[dim]No tracked Torbox torrents match this title.[/dim]")
            return
        files_table = Table(title="Matching Torbox Torrents", box=box.SIMPLE)
        files_table.add_column("ID", style="dim")
        files_table.add_column("Name", style="white")
        files_table.add_column("Size", justify="right", style="green")
        files_table.add_column("Status", justify="center")
        for f in files:
            files_table.add_row(f.id, escape(f.name), format_size(f.size), f.status)
        console.print(files_table)


@click.command()
@click.argument("chapter_id")
@click.option("--quality", type=click.Choice(["high", "low"]), default=None, help="Override the stored quality preference.")
@pass_app
@handle_errors
def pages(app: AppContext, chapter_id: str, quality: Optional[str]) -> None:
    """Lists the page image URLs of a chapter."""
    quality = quality or app.store.download_quality
    page_urls = app.catalog.get_chapter_pages(chapter_id, quality=quality)
    if not page_urls:
        console.print("[yellow]This chapter has no pages.[/yellow]")
        return
    for i, url in enumerate(page_urls, 1):
        console.print(f"[dim]{i:>3}[/dim] {url}", soft_wrap=True)
