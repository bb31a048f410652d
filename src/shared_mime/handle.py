"""Publishing database snapshots to concurrent readers."""

import logging
import threading
from typing import Callable, Optional

from .common import configure_logging
from .config import DatabaseConfig, SharedMimeConfig, load_config
from .database import Database
from .records import RecordSet
from .sources import load_system

logger = logging.getLogger(__name__)


class DatabaseHandle:
    """Holds the current :class:`Database` snapshot.

    Readers call :meth:`get` and query the returned snapshot without any
    locking. :meth:`reload` builds a complete new snapshot first and only
    then swaps the reference, so a reader never sees a half-built index
    and queries already running against the old snapshot finish on it.
    """

    def __init__(self, database: Database) -> None:
        self._database = database
        self._swap_lock = threading.Lock()

    def get(self) -> Database:
        return self._database

    def publish(self, database: Database) -> Database:
        """Replace the current snapshot; returns the previous one."""
        with self._swap_lock:
            previous, self._database = self._database, database
        return previous

    def reload(self, *record_sets: RecordSet) -> Database:
        """Build a new snapshot from *record_sets* and publish it.

        Raises:
            DatabaseUnavailable: If the new records are unusable; the
                current snapshot stays published
        """
        database = self._database.reload(*record_sets)
        self.publish(database)
        logger.info("Published reloaded MIME database")
        return database

    def reload_with(self, build: Callable[[], Database]) -> Database:
        """Publish the database returned by *build* (e.g. a directory loader)."""
        database = build()
        self.publish(database)
        return database


_default_handle: Optional[DatabaseHandle] = None
_default_lock = threading.Lock()


def get_default_handle(config: Optional[DatabaseConfig] = None) -> DatabaseHandle:
    """Handle for the system database, loaded on first use.

    The *config* only matters on the first call; without one the
    layered configuration decides which directories are read.
    """
    global _default_handle
    if _default_handle is None:
        with _default_lock:
            if _default_handle is None:
                _default_handle = DatabaseHandle(load_system(config))
    return _default_handle


def initialize(config: Optional[SharedMimeConfig] = None) -> DatabaseHandle:
    """Apply the full configuration and (re)build the default handle.

    Entry point for applications that want the library to follow the
    layered configuration for both logging and database loading.

    Args:
        config: Configuration to apply; loaded from config files and
            environment when omitted

    Returns:
        The new default handle

    Raises:
        ConfigError: If the layered configuration is invalid
        DatabaseUnavailable: If no directory holds a usable record
    """
    global _default_handle
    config = config or load_config()
    configure_logging(config.logging)

    handle = DatabaseHandle(load_system(config.database))
    with _default_lock:
        _default_handle = handle
    return handle


def get_default_database(config: Optional[DatabaseConfig] = None) -> Database:
    """Current snapshot of the system database."""
    return get_default_handle(config).get()


def reset_default_handle() -> None:
    """Forget the cached system database; the next call loads it again."""
    global _default_handle
    with _default_lock:
        _default_handle = None
