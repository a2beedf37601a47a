"""
Centralized configuration management for MangaReader.

This module provides type-safe, validated configuration using Pydantic.
Values come from environment variables and an optional .env file.
"""

import json
from pathlib import Path
from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import (
    MANGADEX_BASE_URL,
    MANGADEX_UPLOADS_URL,
    MANGADEX_DEFAULT_LANGUAGE,
    MANGADEX_CONTENT_RATING,
    MANGADEX_DEFAULT_LIMIT,
    MANGADEX_FEED_LIMIT,
    TORBOX_BASE_URL,
    API_TIMEOUT_SECONDS,
    DEFAULT_DATA_DIR,
    SETTINGS_FILENAME,
    CREDENTIALS_FILENAME,
    LOG_FILENAME,
    MATCH_WORD_THRESHOLD,
)


class MangaDexConfig(BaseSettings):
    """Configuration for the MangaDex catalog API"""

    model_config = SettingsConfigDict(
        env_prefix="MANGADEX_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    base_url: str = Field(default=MANGADEX_BASE_URL, description="MangaDex API base URL")
    uploads_url: str = Field(default=MANGADEX_UPLOADS_URL, description="Cover image host")
    language: str = Field(default=MANGADEX_DEFAULT_LANGUAGE, description="Chapter translation language")
    content_rating: List[str] = Field(default_factory=lambda: list(MANGADEX_CONTENT_RATING), description="Allowed content ratings")
    page_limit: int = Field(default=MANGADEX_DEFAULT_LIMIT, description="Results per catalog page")
    feed_limit: int = Field(default=MANGADEX_FEED_LIMIT, description="Chapters fetched per feed request")
    timeout: int = Field(default=API_TIMEOUT_SECONDS, description="API timeout in seconds")
    max_retries: int = Field(default=0, description="Retries on 5xx responses (0 disables)")


class TorboxConfig(BaseSettings):
    """Configuration for the Torbox download service"""

    model_config = SettingsConfigDict(
        env_prefix="TORBOX_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    base_url: str = Field(default=TORBOX_BASE_URL, description="Torbox API base URL")
    api_key: Optional[str] = Field(default=None, description="Torbox API key (overrides the credential store)")
    timeout: int = Field(default=API_TIMEOUT_SECONDS, description="API timeout in seconds")
    max_retries: int = Field(default=0, description="Retries on 5xx responses (0 disables)")


class StorageConfig(BaseSettings):
    """Configuration for local settings and credential files"""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    data_dir: Path = Field(default=Path(DEFAULT_DATA_DIR), description="Directory holding local state")
    settings_file: str = Field(default=SETTINGS_FILENAME, description="Settings/progress store file name")
    credentials_file: str = Field(default=CREDENTIALS_FILENAME, description="Credential store file name")

    @property
    def settings_path(self) -> Path:
        return self.data_dir.expanduser() / self.settings_file

    @property
    def credentials_path(self) -> Path:
        return self.data_dir.expanduser() / self.credentials_file


class LoggingConfig(BaseSettings):
    """Configuration for logging behavior"""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    level: str = Field(default="INFO", description="Default logging level")
    file_level: str = Field(default="INFO", description="File logging level")
    console_level: str = Field(default="WARNING", description="Console logging level")
    log_file: str = Field(default=LOG_FILENAME, description="Log file path")

    @field_validator('level', 'file_level', 'console_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is one of the allowed values"""
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class MatchingConfig(BaseSettings):
    """Configuration for torrent-to-title matching"""

    model_config = SettingsConfigDict(
        env_prefix="MATCH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    threshold: float = Field(default=MATCH_WORD_THRESHOLD, description="Fraction of title words required")

    @field_validator('threshold')
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError("Match threshold must be in (0, 1]")
        return v


class MangaReaderConfig(BaseSettings):
    """
    Main configuration class for MangaReader.

    Single source of truth for all configuration. Loads from environment
    variables and .env files; nested sections also accept
    SECTION__FIELD style variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    mangadex: MangaDexConfig = Field(default_factory=MangaDexConfig, description="Catalog API configuration")
    torbox: TorboxConfig = Field(default_factory=TorboxConfig, description="Download service configuration")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Local storage configuration")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")
    matching: MatchingConfig = Field(default_factory=MatchingConfig, description="Title matching configuration")

    verbose: bool = Field(default=False, description="Enable verbose output")

    def save_to_file(self, path: Union[str, Path]) -> None:
        """
        Save configuration to a JSON file.

        Secrets are excluded; they belong in the credential store or .env.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(mode='json', exclude={"torbox": {"api_key"}})

        with open(path, "w", encoding="utf-8") as f:
            json.dump(config_dict, f, indent=2, ensure_ascii=False)

    @classmethod
    def load_from_file(cls, path: Union[str, Path]) -> "MangaReaderConfig":
        """
        Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return cls(**data)


# Global configuration instance
_config_instance: Optional[MangaReaderConfig] = None


def setup_config(
    data_dir: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = None,
    **kwargs
) -> MangaReaderConfig:
    """
    Set up the global configuration.

    Args:
        data_dir: Directory for local state (settings, credentials)
        env_file: Path to .env file
        **kwargs: Additional configuration overrides

    Returns:
        MangaReaderConfig instance
    """
    global _config_instance

    config_kwargs = {}
    if env_file:
        config_kwargs["_env_file"] = str(env_file)

    config_kwargs.update(kwargs)

    config = MangaReaderConfig(**config_kwargs)
    if data_dir:
        config.storage.data_dir = Path(data_dir)

    _config_instance = config
    return _config_instance


def get_config() -> MangaReaderConfig:
    """Get the global configuration instance, creating it on first use."""
    global _config_instance
    if _config_instance is None:
        _config_instance = MangaReaderConfig()
    return _config_instance


def reload_config() -> MangaReaderConfig:
    """Reload configuration from environment and .env files."""
    global _config_instance
    _config_instance = MangaReaderConfig()
    return _config_instance


def get_mangadex_config() -> MangaDexConfig:
    return get_config().mangadex


def get_torbox_config() -> TorboxConfig:
    return get_config().torbox


def get_storage_config() -> StorageConfig:
    return get_config().storage


def get_logging_config() -> LoggingConfig:
    return get_config().logging


def get_matching_config() -> MatchingConfig:
    return get_config().matching


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
