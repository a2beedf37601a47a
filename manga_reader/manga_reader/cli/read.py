"""
Reading commands for MangaReader CLI.

Moves through a chapter's pages, saving progress as it goes.
"""
from typing import Optional

import click
from rich import box
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .base import AppContext, format_progress, handle_errors, pass_app
from ..logging import console, get_logger
from ..reader import ReadingSession

logger = get_logger(__name__)


@click.command()
@click.argument("manga_id")
@click.argument("chapter_id")
@click.option("--page", type=int, default=None, help="Jump to a page (1-based).")
@click.option("--next", "go_next", is_flag=True, help="Advance one page.")
@click.option("--prev", "go_prev", is_flag=True, help="Go back one page.")
@click.option("--bookmark", "bookmark_note", default=None, help="Bookmark the resulting page with a note.")
@pass_app
@handle_errors
def read(app: AppContext, manga_id: str, chapter_id: str, page: Optional[int], go_next: bool, go_prev: bool, bookmark_note: Optional[str]) -> None:
    """
    Opens CHAPTER_ID of MANGA_ID at the saved page and prints the page URL.
    """
    if sum(bool(x) for x in (page is not None, go_next, go_prev)) > 1:
        raise click.UsageError("Use only one of --page, --next, --prev.")

    logger.info(f"Read command started (manga_id={manga_id}, chapter_id={chapter_id}, page={page}, next={go_next}, prev={go_prev})")
    page_urls = app.catalog.get_chapter_pages(chapter_id, quality=app.store.download_quality)
    session = ReadingSession(app.store, manga_id, chapter_id, page_urls)

    if not session.pages:
        console.print("[yellow]This chapter has no pages.[/yellow]")
        return

    if page is not None:
        session.go_to(page - 1)
    elif go_next:
        session.next_page()
    elif go_prev:
        session.previous_page()
    else:
        session.save_progress()

    if bookmark_note is not None:
        session.add_bookmark(bookmark_note)
        console.print(f"[green]Bookmarked page {session.current_index + 1}.[/green]")

    progress = app.store.get_reading_progress(manga_id, chapter_id)
    subtitle = f"{app.store.reading_mode.value} | {format_progress(progress.fraction)}"
    if session.is_last_page:
        subtitle += " | [green]chapter complete[/green]"
    console.print(Panel(
        escape(session.current_page),
        title=f"Page {session.current_index + 1}/{session.total_pages}",
        subtitle=subtitle,
        expand=False,
    ))


@click.command()
@click.argument("manga_id")
@pass_app
@handle_errors
def bookmarks(app: AppContext, manga_id: str) -> None:
    """Lists bookmarks saved for MANGA_ID."""
    saved = app.store.get_bookmarks(manga_id)
    if not saved:
        console.print("[dim]No bookmarks.[/dim]")
        return
    table = Table(title=f"Bookmarks ({len(saved)})", box=box.SIMPLE)
    table.add_column("Chapter", style="dim")
    table.add_column("Page", justify="right", style="cyan")
    table.add_column("Note", style="white")
    table.add_column("Created", style="green")
    for b in saved:
        table.add_row(b.chapter_id, str(b.page_number + 1), escape(b.note or ""), b.created_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)
