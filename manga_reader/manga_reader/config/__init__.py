"""
Configuration package for MangaReader.

This package provides centralized, type-safe configuration management.
"""

from .manager import (
    MangaDexConfig,
    TorboxConfig,
    StorageConfig,
    LoggingConfig,
    MatchingConfig,
    MangaReaderConfig,
    setup_config,
    get_config,
    reload_config,
    get_mangadex_config,
    get_torbox_config,
    get_storage_config,
    get_logging_config,
    get_matching_config,
)

__all__ = [
    "MangaDexConfig",
    "TorboxConfig",
    "StorageConfig",
    "LoggingConfig",
    "MatchingConfig",
    "MangaReaderConfig",
    "setup_config",
    "get_config",
    "reload_config",
    "get_mangadex_config",
    "get_torbox_config",
    "get_storage_config",
    "get_logging_config",
    "get_matching_config",
]
