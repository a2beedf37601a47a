"""
Shared CLI utilities and base functionality.

Holds the application context (the service objects every command needs),
error handling for the external-service boundary, and small formatting
helpers.
"""
import sys
import functools
from dataclasses import dataclass
from typing import Optional

import click
from rich.markup import escape

from ..config import MangaReaderConfig
from ..constants import BYTES_PER_KB, BYTES_PER_MB, BYTES_PER_GB, TORBOX_SERVICE_NAME
from ..credentials import CredentialStore
from ..logging import (
    APIError,
    ConfigError,
    CredentialError,
    StorageError,
    console,
    get_logger,
)
from ..mangadex_api import MangaDexAPI
from ..store import SettingsStore
from ..torbox_api import TorboxAPI

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Service objects constructed once per invocation and handed to commands."""
    config: MangaReaderConfig
    store: SettingsStore
    credentials: CredentialStore
    catalog: MangaDexAPI
    torbox: TorboxAPI


def build_context(config: MangaReaderConfig) -> AppContext:
    store = SettingsStore(config.storage.settings_path)
    credentials = CredentialStore(
        config.storage.credentials_path,
        overrides={TORBOX_SERVICE_NAME: config.torbox.api_key},
    )
    catalog = MangaDexAPI(config.mangadex)
    torbox = TorboxAPI(config.torbox, api_key=credentials.get(TORBOX_SERVICE_NAME))
    return AppContext(config=config, store=store, credentials=credentials, catalog=catalog, torbox=torbox)


pass_app = click.make_pass_decorator(AppContext)


def handle_errors(func):
    """
    Turns service failures into a printed notice and exit code 1.

    Credential problems get a configuration hint; network, HTTP and decode
    failures are reported once and the operation is abandoned.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CredentialError as e:
            logger.warning(f"Credential problem: {e}")
            console.print(f"[yellow]{escape(str(e))}[/yellow]")
            console.print("[dim]Set your key with: manga-reader settings set-key[/dim]")
            sys.exit(1)
        except APIError as e:
            logger.error(f"API failure in {func.__name__}: {e}")
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            sys.exit(1)
        except (ConfigError, StorageError) as e:
            logger.error(f"{type(e).__name__} in {func.__name__}: {e}")
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            sys.exit(1)
    return wrapper


def format_size(size_bytes: Optional[int]) -> str:
    if not size_bytes:
        return "-"
    if size_bytes >= BYTES_PER_GB:
        return f"{size_bytes / BYTES_PER_GB:.2f} GB"
    if size_bytes >= BYTES_PER_MB:
        return f"{size_bytes / BYTES_PER_MB:.1f} MB"
    return f"{size_bytes / BYTES_PER_KB:.0f} KB"


def format_progress(fraction: float) -> str:
    color = "green" if fraction >= 1.0 else "yellow"
    return f"[{color}]{int(fraction * 100)}%[/{color}]"
