"""
Centralized logging and error handling for MangaReader.

This module provides consistent logging configuration and custom exceptions
across the entire application.
"""

import logging
from contextlib import contextmanager
from typing import Optional, Union
from rich.logging import RichHandler
from rich.console import Console

from .constants import LOG_FILENAME

# Global console instance for the entire application
console = Console()


class MangaReaderError(Exception):
    """Base exception for all MangaReader-specific errors."""
    pass


class ConfigError(MangaReaderError):
    """Raised when there's a configuration-related error."""
    pass


class CredentialError(ConfigError):
    """Raised when a service credential is missing or rejected."""
    pass


class APIError(MangaReaderError):
    """Raised when an external API call fails (MangaDex, Torbox)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(APIError):
    """Raised when an API response does not have the expected shape."""
    pass


class StorageError(MangaReaderError):
    """Raised when the local store cannot be written."""
    pass


class MangaReaderLogger:
    """
    Centralized logging configuration for MangaReader.

    Owns the root logger handlers: a UTF-8 file handler with full detail and a
    RichHandler on the console for warnings and errors.
    """

    def __init__(self, log_file: str = LOG_FILENAME):
        self.log_file = log_file
        self.console = console
        self._setup_root_logger()

    def _setup_root_logger(self) -> None:
        """Configure the root logger with file and console handlers."""
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(file_formatter)

        console_handler = RichHandler(
            console=self.console,
            show_path=False,
            show_time=True,
            show_level=True,
            markup=True,
            keywords=[]
        )
        console_handler.setLevel(logging.WARNING)

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.INFO)

        # Clear existing handlers to avoid duplicates
        root_logger.handlers = []
        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def set_console_level(self, level: Union[str, int], clean: bool = False) -> None:
        """
        Set the console logging level.

        Args:
            level: Logging level (e.g., 'DEBUG', 'INFO', 'WARNING')
            clean: If True, hides time and level for a cleaner UI-like look
        """
        root_logger = logging.getLogger()
        numeric_level = _to_numeric_level(level)

        # Ensure root logger allows this level
        if numeric_level < root_logger.level:
            root_logger.setLevel(numeric_level)

        for handler in root_logger.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(numeric_level)
                handler._log_render.show_time = not clean
                handler._log_render.show_level = not clean
                break

    def set_file_level(self, level: Union[str, int]) -> None:
        """Set the file logging level."""
        root_logger = logging.getLogger()
        numeric_level = _to_numeric_level(level)

        if numeric_level < root_logger.level:
            root_logger.setLevel(numeric_level)

        for handler in root_logger.handlers:
            if isinstance(handler, logging.FileHandler):
                handler.setLevel(numeric_level)
                break


def _to_numeric_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


# Global logger instance
_logger_instance: Optional[MangaReaderLogger] = None


def setup_logging(log_file: str = LOG_FILENAME) -> MangaReaderLogger:
    """
    Set up the global logging configuration.

    Args:
        log_file: Path to the log file

    Returns:
        The configured MangaReaderLogger instance
    """
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = MangaReaderLogger(log_file)
    return _logger_instance


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance. Handlers live on the root logger, so the returned
    logger has none of its own.

    This should be called in each module as:
        from .logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def set_log_level(level: Union[str, int], handler_type: str = "both", clean: bool = False) -> None:
    """
    Set the logging level for console, file, or both handlers.

    Args:
        level: Logging level (e.g., 'DEBUG', 'INFO', 'WARNING', 'ERROR')
        handler_type: 'console', 'file', or 'both'
        clean: If True, hides time and level for console handler
    """
    if _logger_instance is None:
        setup_logging()

    if handler_type in ("console", "both"):
        _logger_instance.set_console_level(level, clean=clean)
    if handler_type in ("file", "both"):
        _logger_instance.set_file_level(level)


@contextmanager
def temporary_log_level(level: Union[str, int], handler_type: str = "console"):
    """
    Temporarily change the log level of one handler.

    Usage:
        with temporary_log_level("DEBUG"):
            ...
    """
    if _logger_instance is None:
        setup_logging()

    handler_cls = RichHandler if handler_type == "console" else logging.FileHandler
    target = None
    previous_level = None
    for handler in logging.getLogger().handlers:
        if isinstance(handler, handler_cls):
            target = handler
            previous_level = handler.level
            handler.setLevel(_to_numeric_level(level))
            break

    try:
        yield
    finally:
        if target is not None:
            target.setLevel(previous_level)


MASKED_PARAM_KEYS = ['api_key', 'token', 'password', 'secret', 'key', 'authorization']


def mask_params(params: Optional[dict]) -> str:
    """Renders request params with credential-like values replaced."""
    if not params:
        return "None"
    safe_params = dict(params)
    for k in safe_params:
        if isinstance(k, str) and any(m in k.lower() for m in MASKED_PARAM_KEYS):
            safe_params[k] = "********"
    return str(safe_params)


def log_api_call(url: str, method: str, params: Optional[dict] = None) -> None:
    """
    Log an API call with sensitive data masking.
    Logs at DEBUG level.
    """
    logger = get_logger("manga_reader.api")

    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"API CALL: {method} {url} | Params: {mask_params(params)}")


__all__ = [
    "console",
    "MangaReaderError",
    "ConfigError",
    "CredentialError",
    "APIError",
    "DecodeError",
    "StorageError",
    "MangaReaderLogger",
    "setup_logging",
    "get_logger",
    "set_log_level",
    "temporary_log_level",
    "mask_params",
    "log_api_call",
]
