"""MIME type detection backed by the freedesktop.org shared MIME database."""

from .common import (
    SharedMimeError, MalformedEntry, DatabaseUnavailable, ConfigError,
    setup_logging, configure_logging, get_logger,
)
from .config import SharedMimeConfig, DatabaseConfig, load_config
from .registry import CanonicalType, TypeRegistry, AliasResolver
from .hierarchy import HierarchyGraph
from .globs import GlobClass, GlobRule, GlobIndex, GlobMatch
from .magic import MagicRule, MatchEntry, MagicMatcher, MagicMatch, parse_magic
from .records import RecordSet
from .icons import IconResolver
from .database import Database, load, reload
from .sources import data_directories, read_directory, load_directories, load_system
from .handle import DatabaseHandle, get_default_database, get_default_handle, initialize

__version__ = "0.1.0"

__all__ = [
    'SharedMimeError',
    'MalformedEntry',
    'DatabaseUnavailable',
    'ConfigError',
    'setup_logging',
    'configure_logging',
    'get_logger',
    'SharedMimeConfig',
    'DatabaseConfig',
    'load_config',
    'CanonicalType',
    'TypeRegistry',
    'AliasResolver',
    'HierarchyGraph',
    'GlobClass',
    'GlobRule',
    'GlobIndex',
    'GlobMatch',
    'MagicRule',
    'MatchEntry',
    'MagicMatcher',
    'MagicMatch',
    'parse_magic',
    'RecordSet',
    'IconResolver',
    'Database',
    'load',
    'reload',
    'data_directories',
    'read_directory',
    'load_directories',
    'load_system',
    'DatabaseHandle',
    'get_default_database',
    'get_default_handle',
    'initialize',
]
