"""Subclass hierarchy between canonical MIME types."""

import logging
from collections import deque
from typing import Dict, Iterable, Iterator, List, Set, Tuple

from .registry import CanonicalType, TypeRegistry

logger = logging.getLogger(__name__)


class HierarchyGraph:
    """Parent edges between canonical types, addressed by type id.

    Besides the explicit subclass records, two implicit edges always
    hold:

    - every ``text/*`` type is a subclass of ``text/plain``
    - every type is a subclass of ``application/octet-stream``

    Malformed data may contain cycles. Every traversal carries its own
    visited set, so queries terminate regardless.
    """

    def __init__(self, registry: TypeRegistry, edges: Iterable[Tuple[CanonicalType, CanonicalType]] = ()) -> None:
        self._registry = registry

        adjacency: Dict[int, List[int]] = {}
        for child, parent in edges:
            if child.id == parent.id:
                logger.debug(f"Ignoring self-subclass record for {child.name}")
                continue
            parents = adjacency.setdefault(child.id, [])
            if parent.id not in parents:
                parents.append(parent.id)

        self._parents: Dict[int, Tuple[int, ...]] = {child: tuple(parents) for child, parents in adjacency.items()}

    def __len__(self) -> int:
        """Number of types with at least one explicit parent."""
        return len(self._parents)

    def parents(self, mime_type: CanonicalType) -> List[CanonicalType]:
        """Explicit parents of *mime_type*, in record order."""
        return [self._registry.by_id(p) for p in self._parents.get(mime_type.id, ())]

    def _walk(self, start: Iterable[int], seen: Set[int]) -> Iterator[int]:
        queue = deque(p for p in start)
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            yield current
            queue.extend(self._parents.get(current, ()))

    def ancestors(self, mime_type: CanonicalType) -> Iterator[CanonicalType]:
        """Yield every ancestor of *mime_type*, nearest first.

        Explicit parents are walked breadth-first in record order. The
        implicit ``text/plain`` root (and whatever it inherits from) comes
        next when a text type was seen, and ``application/octet-stream``
        is always last. *mime_type* itself is never yielded and no type
        is yielded twice.

        Args:
            mime_type: Type to start from

        Returns:
            A one-shot generator of ancestor types
        """
        registry = self._registry
        seen = {mime_type.id}
        saw_text = mime_type.media == "text"

        for type_id in self._walk(self._parents.get(mime_type.id, ()), seen):
            ancestor = registry.by_id(type_id)
            saw_text = saw_text or ancestor.media == "text"
            yield ancestor

        if saw_text:
            for type_id in self._walk([registry.text_plain.id], seen):
                yield registry.by_id(type_id)

        for type_id in self._walk([registry.octet_stream.id], seen):
            yield registry.by_id(type_id)

    def is_subtype(self, mime_type: CanonicalType, base: CanonicalType) -> bool:
        """Check whether *mime_type* is *base* or inherits from it.

        A *base* of the form ``media/*`` matches any type whose own media
        part, or the media part of one of its ancestors, is ``media``.
        Implicit ancestors count too, so every type is a subtype of
        ``application/*`` just as it is of ``application/octet-stream``.
        """
        if mime_type == base:
            return True

        if base.subtype == "*":
            if mime_type.media == base.media:
                return True
            return any(a.media == base.media for a in self.ancestors(mime_type))

        if base.id == self._registry.octet_stream.id:
            return True

        return any(a.id == base.id for a in self.ancestors(mime_type))
