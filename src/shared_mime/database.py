"""The shared MIME database and its query surface."""

import logging
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from .common import DatabaseUnavailable
from .config import DatabaseConfig
from .detection import reconcile, shape_fallback
from .globs import GlobIndex, GlobMatch, GlobRule
from .hierarchy import HierarchyGraph
from .icons import IconResolver
from .magic import MagicMatch, MagicMatcher
from .records import RecordSet
from .registry import AliasResolver, CanonicalType, TypeRegistry

logger = logging.getLogger(__name__)

TypeLike = Union[CanonicalType, str]


class Database:
    """An immutable snapshot of the shared MIME database.

    Built once from one or more :class:`RecordSet` objects, then only
    queried. Reloading builds a new instance; readers holding the old one
    keep a consistent view.

    Example:
        >>> records = RecordSet.from_texts(globs2="50:image/gif:*.gif\\n")
        >>> db = Database.load(records)
        >>> db.detect("cat.gif").name
        'image/gif'
    """

    def __init__(self, *record_sets: RecordSet, config: Optional[DatabaseConfig] = None) -> None:
        self.config = config or DatabaseConfig()
        self.registry = TypeRegistry()

        alias_pairs = [(a.alias, a.mime_type) for rs in record_sets for a in rs.aliases]
        self.aliases = AliasResolver(self.registry, alias_pairs, max_depth=self.config.alias_max_depth)
        resolve = self.aliases.resolve
        # Alias targets are known types even when no other record names them
        for alias, _ in alias_pairs:
            resolve(alias)

        self.hierarchy = HierarchyGraph(
            self.registry,
            [(resolve(s.mime_type), resolve(s.parent)) for rs in record_sets for s in rs.subclasses],
        )

        glob_rules = []
        for rs in record_sets:
            for record in rs.globs:
                glob_rules.append(
                    GlobRule(
                        pattern=record.pattern,
                        mime_type=resolve(record.mime_type),
                        weight=record.weight,
                        case_sensitive=record.case_sensitive,
                        order=len(glob_rules),
                    )
                )
        self.globs = GlobIndex(glob_rules)

        self.magic = MagicMatcher(
            [(resolve(rule.mime_type), rule) for rs in record_sets for rule in rs.magic],
            max_sniff_bytes=self.config.max_sniff_bytes,
        )

        self.icons = IconResolver(
            self.hierarchy,
            icons=[(resolve(i.mime_type), i.icon_name) for rs in record_sets for i in rs.icons],
            generic_icons=[(resolve(i.mime_type), i.icon_name) for rs in record_sets for i in rs.generic_icons],
            default_generic_icon=self.config.default_generic_icon,
        )

        self.sources: Tuple[str, ...] = tuple(rs.source for rs in record_sets)

    @classmethod
    def load(cls, *record_sets: RecordSet, config: Optional[DatabaseConfig] = None) -> "Database":
        """Build a database from parsed records.

        Args:
            *record_sets: Sources, highest precedence first
            config: Optional database configuration

        Returns:
            The new database

        Raises:
            DatabaseUnavailable: If no source holds a single usable record
        """
        if all(rs.is_empty() for rs in record_sets):
            raise DatabaseUnavailable(
                "No usable MIME records in any source",
                sources=[rs.source for rs in record_sets],
                skipped=sum(len(rs.errors) for rs in record_sets),
            )

        db = cls(*record_sets, config=config)
        logger.info(
            f"Loaded MIME database: {{'sources': {len(record_sets)}, 'globs': {len(db.globs)}, "
            f"'magic': {len(db.magic)}, 'subclasses': {len(db.hierarchy)}, 'aliases': {len(db.aliases)}, "
            f"'skipped': {sum(len(rs.errors) for rs in record_sets)}}}"
        )
        return db

    def reload(self, *record_sets: RecordSet) -> "Database":
        """Build a fresh database with this database's configuration.

        This instance is left untouched.
        """
        return type(self).load(*record_sets, config=self.config)

    # Types and aliases

    def intern(self, name: str) -> CanonicalType:
        return self.registry.intern(name)

    def resolve_alias(self, name: TypeLike) -> CanonicalType:
        """Canonical type for *name*; unknown names are interned as their own type."""
        if isinstance(name, CanonicalType):
            name = name.name
        return self.aliases.resolve(name)

    def _lookup(self, name: TypeLike) -> CanonicalType:
        # Read-only queries leave the registry unchanged
        if isinstance(name, CanonicalType):
            name = name.name
        return self.aliases.lookup(name)

    def unalias(self, name: TypeLike) -> Optional[CanonicalType]:
        """The type *name* is an alias of, or None if it is not an alias."""
        if isinstance(name, CanonicalType):
            name = name.name
        target = self.aliases.unalias(name)
        return self.registry.lookup(target) if target is not None else None

    def mime_type_equal(self, a: TypeLike, b: TypeLike) -> bool:
        """Whether *a* and *b* name the same type once aliases are resolved."""
        return self._lookup(a) == self._lookup(b)

    # Hierarchy

    def is_subtype(self, mime_type: TypeLike, base: TypeLike) -> bool:
        return self.hierarchy.is_subtype(self._lookup(mime_type), self._lookup(base))

    def ancestors(self, mime_type: TypeLike) -> Iterator[CanonicalType]:
        return self.hierarchy.ancestors(self._lookup(mime_type))

    def parents(self, mime_type: TypeLike) -> List[CanonicalType]:
        return self.hierarchy.parents(self._lookup(mime_type))

    # Icons

    def icon_name(self, mime_type: TypeLike) -> str:
        return self.icons.icon_name(self._lookup(mime_type))

    def generic_icon_name(self, mime_type: TypeLike) -> str:
        return self.icons.generic_icon_name(self._lookup(mime_type))

    def icon_names(self, mime_type: TypeLike) -> List[str]:
        return self.icons.icon_names(self._lookup(mime_type))

    # Detection

    @property
    def max_extent(self) -> int:
        """Number of leading bytes content detection needs."""
        return self.magic.max_extent

    def glob_match(self, file_name: str) -> Optional[GlobMatch]:
        return self.globs.match(file_name)

    def glob_candidates(self, file_name: str) -> List[CanonicalType]:
        """Every type whose globs match *file_name*, best first, without duplicates."""
        types: List[CanonicalType] = []
        for rule in self.globs.candidates(file_name):
            if rule.mime_type not in types:
                types.append(rule.mime_type)
        return types

    def lookup_data(self, data: bytes, byteorder: str = sys.byteorder) -> Optional[MagicMatch]:
        return self.magic.lookup(data, byteorder)

    def detect(
        self,
        filename: Optional[str] = None,
        content: Optional[bytes] = None,
        byteorder: str = sys.byteorder,
    ) -> CanonicalType:
        """Detect the type of a file from its name and/or leading bytes.

        Args:
            filename: File name or path, if known
            content: Leading bytes of the file, if available
            byteorder: Byte order used for multi-byte magic words

        Returns:
            The detected type; ``application/octet-stream`` in the worst case
        """
        glob_match = self.globs.match(filename) if filename else None

        magic_type: Optional[CanonicalType] = None
        if content is not None:
            found = self.magic.lookup(content, byteorder)
            if found is not None:
                magic_type = found.mime_type
            else:
                magic_type = shape_fallback(self.registry, content[:self.config.max_sniff_bytes])

        result = reconcile(self.registry, glob_match, magic_type)
        logger.debug(f"Detected type: {{'file': '{filename}', 'type': '{result.name}'}}")
        return result

    def detect_file(self, path: Union[str, Path]) -> CanonicalType:
        """Detect the type of the file at *path*.

        Reads at most ``max_extent`` bytes, or ``max_sniff_bytes`` when no
        magic rule is loaded.

        Raises:
            OSError: If the file cannot be read
        """
        path = Path(path)
        read_size = self.max_extent or self.config.max_sniff_bytes
        with open(path, "rb") as f:
            content = f.read(read_size)
        return self.detect(path.name, content)


def load(*record_sets: RecordSet, config: Optional[DatabaseConfig] = None) -> Database:
    """Build a database from parsed records. See :meth:`Database.load`."""
    return Database.load(*record_sets, config=config)


def reload(*record_sets: RecordSet, config: Optional[DatabaseConfig] = None) -> Database:
    """Build a new database to replace an existing one."""
    return Database.load(*record_sets, config=config)
