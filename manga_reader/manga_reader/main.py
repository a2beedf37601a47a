import logging

import click
from dotenv import load_dotenv, find_dotenv

# Load environment variables before configuration is read
load_dotenv(find_dotenv(usecwd=True))

from .config import get_config
from .logging import setup_logging, set_log_level, get_logger
from .cli.base import build_context
from .cli.browse import browse, show, pages
from .cli.read import read, bookmarks
from .cli.library import library
from .cli.torbox import torbox
from .cli.settings import settings
from .cli.match import match

logger = get_logger(__name__)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v: INFO, -vv: DEBUG).")
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    """MangaReader: browse MangaDex, match Torbox downloads, track reading."""
    config = get_config()
    setup_logging(config.logging.log_file)
    set_log_level(config.logging.file_level, "file")

    console_level = config.logging.console_level
    clean_logs = False
    if verbose == 1:
        console_level = logging.INFO
        clean_logs = True
    elif verbose >= 2 or config.verbose:
        console_level = logging.DEBUG
        set_log_level(logging.DEBUG, "file")
    set_log_level(console_level, "console", clean=clean_logs)

    # Tests and embedders may hand in a prepared context
    if ctx.obj is None:
        ctx.obj = build_context(config)
    logger.info(f"Command '{ctx.invoked_subcommand}' started")


cli.add_command(browse)
cli.add_command(show)
cli.add_command(pages)
cli.add_command(read)
cli.add_command(bookmarks)
cli.add_command(library)
cli.add_command(torbox)
cli.add_command(settings)
cli.add_command(match)


if __name__ == "__main__":
    cli()
