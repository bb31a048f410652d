"""Interned MIME type names and alias resolution."""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN = "text/plain"

# Id carried by types that were looked up but never interned
UNREGISTERED_ID = -1


@dataclass(frozen=True)
class CanonicalType:
    """An interned MIME type.

    Attributes:
        id: Stable integer identifier, unique within one registry
        name: Lower-cased ``media/subtype`` string
    """
    id: int
    name: str

    @property
    def media(self) -> str:
        """Media part (``image`` for ``image/png``); empty if there is no slash."""
        media, sep, _ = self.name.partition("/")
        return media if sep else ""

    @property
    def subtype(self) -> str:
        return self.name.partition("/")[2]

    def __str__(self) -> str:
        return self.name


def normalize_type_name(name: str) -> str:
    """Canonical string form of a type name."""
    return name.strip().lower()


def is_valid_type_name(name: str) -> bool:
    """Check that *name* looks like ``media/subtype``."""
    media, sep, subtype = name.partition("/")
    if not sep or not media or not subtype:
        return False
    return not any(ch.isspace() for ch in name) and "/" not in subtype


class TypeRegistry:
    """Maps type names to :class:`CanonicalType` identifiers.

    Ids are handed out densely from 0, so other components keep per-type
    data in lists or dicts keyed by id. The two generic base types are
    always interned first.

    Lookups of known names are plain dict reads. Interning a previously
    unseen name is the only write after the database is built and is
    serialized by a lock.
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, CanonicalType] = {}
        self._types: List[CanonicalType] = []
        self._lock = threading.Lock()
        self.octet_stream = self.intern(OCTET_STREAM)
        self.text_plain = self.intern(TEXT_PLAIN)

    def intern(self, name: str) -> CanonicalType:
        """Return the canonical type for *name*, creating it if needed."""
        key = normalize_type_name(name)
        found = self._by_name.get(key)
        if found is not None:
            return found

        with self._lock:
            found = self._by_name.get(key)
            if found is None:
                found = CanonicalType(len(self._types), key)
                self._types.append(found)
                self._by_name[key] = found
        return found

    def get(self, name: str) -> Optional[CanonicalType]:
        """Look up *name* without interning it."""
        return self._by_name.get(normalize_type_name(name))

    def lookup(self, name: str) -> CanonicalType:
        """Known type for *name*, or a transient type that is not added to the registry.

        Transient types carry ``UNREGISTERED_ID``; they compare equal by
        name and have no records attached.
        """
        key = normalize_type_name(name)
        found = self._by_name.get(key)
        if found is not None:
            return found
        return CanonicalType(UNREGISTERED_ID, key)

    def by_id(self, type_id: int) -> CanonicalType:
        return self._types[type_id]

    def __contains__(self, name: str) -> bool:
        return normalize_type_name(name) in self._by_name

    def __len__(self) -> int:
        return len(self._types)


class AliasResolver:
    """Resolves alternate type names to their canonical form.

    The alias table maps normalized names to normalized names. Chains
    are followed up to ``max_depth`` hops; a cycle or an over-long chain
    is malformed data and resolves to the name that was asked for.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        aliases: Iterable[Tuple[str, str]] = (),
        max_depth: int = 8,
    ) -> None:
        self._registry = registry
        self._max_depth = max_depth
        self._aliases: Dict[str, str] = {}
        for alias, target in aliases:
            # First definition wins: earlier sources take precedence
            self._aliases.setdefault(normalize_type_name(alias), normalize_type_name(target))

    def __len__(self) -> int:
        return len(self._aliases)

    def __contains__(self, name: str) -> bool:
        return normalize_type_name(name) in self._aliases

    def unalias(self, name: str) -> Optional[str]:
        """Return the canonical name *name* is an alias of, or None if it is not an alias."""
        key = normalize_type_name(name)
        if key not in self._aliases:
            return None
        resolved = self._follow(key)
        return resolved if resolved != key else None

    def resolve_name(self, name: str) -> str:
        """Resolve *name* to its canonical string without interning it."""
        return self._follow(normalize_type_name(name))

    def resolve(self, name: str) -> CanonicalType:
        """Resolve *name* to its interned canonical type."""
        return self._registry.intern(self.resolve_name(name))

    def lookup(self, name: str) -> CanonicalType:
        """Resolve *name* without adding unknown names to the registry."""
        return self._registry.lookup(self.resolve_name(name))

    def _follow(self, key: str) -> str:
        current = key
        visited = {key}
        for _ in range(self._max_depth):
            target = self._aliases.get(current)
            if target is None:
                return current
            if target in visited:
                logger.warning(
                    f"Alias cycle detected: {{'name': '{key}', 'at': '{target}'}}"
                )
                return key
            visited.add(target)
            current = target

        if current in self._aliases:
            logger.warning(
                f"Alias chain too deep: {{'name': '{key}', 'max_depth': {self._max_depth}}}"
            )
            return key
        return current
