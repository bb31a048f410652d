"""Base error definitions for shared_mime."""

from typing import Any, Dict


class SharedMimeError(Exception):
    """Base exception for all shared_mime errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class MalformedEntry(SharedMimeError):
    """A single database record violates its format.

    Parsers collect these instead of raising them, so one corrupt
    vendor-supplied record never invalidates the rest of a file.
    """

    @property
    def source(self) -> str:
        return self.context.get("source", "<memory>")

    @property
    def reason(self) -> str:
        return self.context.get("reason", self.message)


class DatabaseUnavailable(SharedMimeError):
    """No usable record was found in any of the database sources."""
    pass


class ConfigError(SharedMimeError):
    """Configuration could not be loaded or failed validation."""
    pass
