"""Structured logging utilities."""

import contextvars
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .logging_config import LoggingConfig

# Fields added by the innermost active LogContext of the current thread/task
_context_fields: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "shared_mime_log_fields", default={}
)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        log_data.update(getattr(record, "extra_fields", {}))

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


class DetailedFormatter(logging.Formatter):
    """Human-readable formatter with source location."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class SimpleFormatter(logging.Formatter):
    """Console formatter."""

    def __init__(self) -> None:
        super().__init__(fmt="%(levelname)-8s | %(name)s | %(message)s")


_FORMATTERS = {
    "json": StructuredFormatter,
    "detailed": DetailedFormatter,
    "simple": SimpleFormatter,
}


def _attach_context_fields(factory):
    def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = factory(*args, **kwargs)
        fields = _context_fields.get()
        if fields:
            record.extra_fields = dict(fields)
        return record

    record_factory.shared_mime_context = True
    return record_factory


def _install_record_factory() -> None:
    factory = logging.getLogRecordFactory()
    if not getattr(factory, "shared_mime_context", False):
        logging.setLogRecordFactory(_attach_context_fields(factory))


def setup_logging(
    level: str = "WARNING",
    format: str = "simple",
    log_file: Optional[Path] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
    logger_name: str = "shared_mime",
) -> logging.Logger:
    """Attach handlers to the shared_mime logger tree.

    The root logger is left alone so an embedding application keeps
    control of its own handlers. Calling this again replaces the
    handlers installed by the previous call.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Console format (simple, detailed, json)
        log_file: Optional log file; written as JSON lines and rotated
        max_file_size_mb: Rotation size of the log file
        backup_count: Number of rotated files to keep
        logger_name: Logger to configure

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level.upper())
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(_FORMATTERS.get(format, SimpleFormatter)())
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def configure_logging(config: LoggingConfig, logger_name: str = "shared_mime") -> logging.Logger:
    """Apply a validated :class:`LoggingConfig`."""
    return setup_logging(
        level=config.level,
        format=config.format,
        log_file=Path(config.file) if config.file else None,
        logger_name=logger_name,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """Context manager adding structured fields to records logged inside it.

    Fields live in a context variable, so contexts opened by concurrent
    threads do not leak into each other. Nested contexts merge their
    fields; the inner value wins on conflicts.

    Example:
        >>> with LogContext(logger, source="/usr/share/mime"):
        ...     logger.warning("Skipping malformed record")
    """

    def __init__(self, logger: logging.Logger, **fields: Any) -> None:
        self.logger = logger
        self.fields = fields
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "LogContext":
        _install_record_factory()
        self._token = _context_fields.set({**_context_fields.get(), **self.fields})
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        _context_fields.reset(self._token)
