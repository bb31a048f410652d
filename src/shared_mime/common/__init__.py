"""Shared infrastructure: errors, logging and configuration."""

from .config import ConfigLoader
from .logging import setup_logging, configure_logging, get_logger, LogContext
from .logging_config import LoggingConfig
from .errors import SharedMimeError, MalformedEntry, DatabaseUnavailable, ConfigError
from .path_utils import normalize_file_name

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'configure_logging',
    'get_logger',
    'LogContext',
    'SharedMimeError',
    'MalformedEntry',
    'DatabaseUnavailable',
    'ConfigError',
    'normalize_file_name',
]
