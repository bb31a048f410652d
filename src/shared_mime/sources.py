"""Reading shared MIME database directories from disk."""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

import platformdirs

from .common import LogContext
from .config import DatabaseConfig, load_config
from .database import Database
from .records import RecordSet

logger = logging.getLogger(__name__)


def data_directories() -> List[Path]:
    """The ``mime`` directories of the XDG search path, highest precedence first.

    ``$XDG_DATA_HOME/mime`` comes first, followed by ``<dir>/mime`` for
    every entry of ``$XDG_DATA_DIRS``. Duplicates are dropped.
    """
    roots = [platformdirs.user_data_dir()]
    roots.extend(platformdirs.site_data_dir(multipath=True).split(os.pathsep))

    dirs: List[Path] = []
    for root in roots:
        if not root:
            continue
        mime_dir = Path(root) / "mime"
        if mime_dir not in dirs:
            dirs.append(mime_dir)
    return dirs


def _read_text(path: Path) -> Optional[str]:
    if not path.is_file():
        logger.debug(f"Record file not present: {path}")
        return None
    return path.read_text(encoding="utf-8", errors="replace")


def read_directory(mime_dir: Union[str, Path]) -> RecordSet:
    """Read every record file of one ``mime`` directory.

    ``globs2`` is preferred over the legacy ``globs``. Missing files are
    skipped; an unreadable directory yields an empty record set.

    Args:
        mime_dir: Directory holding ``globs2``, ``magic``, ``aliases`` etc.

    Returns:
        RecordSet for the directory
    """
    mime_dir = Path(mime_dir)
    source = str(mime_dir)

    with LogContext(logger, source=source):
        try:
            globs2 = _read_text(mime_dir / "globs2")
            globs = _read_text(mime_dir / "globs") if globs2 is None else None
            magic_path = mime_dir / "magic"
            magic = magic_path.read_bytes() if magic_path.is_file() else None

            records = RecordSet.from_texts(
                globs2=globs2,
                globs=globs,
                magic=magic,
                subclasses=_read_text(mime_dir / "subclasses"),
                aliases=_read_text(mime_dir / "aliases"),
                icons=_read_text(mime_dir / "icons"),
                generic_icons=_read_text(mime_dir / "generic-icons"),
                source=source,
            )
        except OSError as e:
            logger.warning(f"Cannot read MIME directory: {{'path': '{source}', 'error': '{e}'}}")
            return RecordSet(source=source)

    logger.debug(
        f"Read MIME directory: {{'path': '{source}', 'records': {records.record_count()}, "
        f"'skipped': {len(records.errors)}}}"
    )
    return records


def load_directories(
    dirs: Iterable[Union[str, Path]],
    config: Optional[DatabaseConfig] = None,
) -> Database:
    """Build a database from several ``mime`` directories, highest precedence first.

    Raises:
        DatabaseUnavailable: If none of the directories holds a usable record
    """
    record_sets = [read_directory(d) for d in dirs if Path(d).is_dir()]
    return Database.load(*record_sets, config=config)


def load_system(config: Optional[DatabaseConfig] = None) -> Database:
    """Build a database from the configured or XDG ``mime`` directories.

    Without an explicit *config*, the ``database`` section of the layered
    configuration (config files and ``SHARED_MIME_DATABASE_*`` variables)
    is used.

    Raises:
        ConfigError: If the layered configuration is invalid
        DatabaseUnavailable: If no directory holds a usable record
    """
    if config is None:
        config = load_config().database
    dirs = [Path(d) for d in config.data_dirs] if config.data_dirs else data_directories()
    logger.info(f"Loading MIME database from {[str(d) for d in dirs]}")
    return load_directories(dirs, config=config)
