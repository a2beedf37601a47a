"""
Match command for MangaReader CLI.

Checks candidate torrent names against a catalog title.
"""
from typing import Tuple

import click
from rich import box
from rich.markup import escape
from rich.table import Table

from .base import AppContext, pass_app
from ..logging import console, get_logger
from ..matcher import is_manga_match, match_score, normalize_title

logger = get_logger(__name__)


@click.command()
@click.argument("title")
@click.argument("candidates", nargs=-1, required=True)
@pass_app
def match(app: AppContext, title: str, candidates: Tuple[str, ...]) -> None:
    """
    Reports whether each CANDIDATE name matches TITLE.
    """
    threshold = app.config.matching.threshold
    logger.info(f"Match command started (title={title}, candidates={len(candidates)}, threshold={threshold})")

    table = Table(title=f"'{escape(normalize_title(title))}'", box=box.SIMPLE)
    table.add_column("Candidate", style="white")
    table.add_column("Coverage", justify="right", style="cyan")
    table.add_column("Match", justify="center")
    for candidate in candidates:
        matched = is_manga_match(title, candidate, threshold)
        table.add_row(
            escape(candidate),
            f"{match_score(title, candidate):.0%}",
            "[green]yes[/green]" if matched else "[red]no[/red]",
        )
    console.print(table)
