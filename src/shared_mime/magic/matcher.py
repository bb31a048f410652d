"""Evaluation of magic rule trees against file contents."""

import logging
import sys
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..registry import CanonicalType
from .rules import MagicRule, MatchEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MagicMatch:
    """The first rule, in priority order, whose tree matched."""
    mime_type: CanonicalType
    priority: int


def _swap_words(chunk: bytes, word_size: int) -> bytes:
    return b"".join(chunk[i:i + word_size][::-1] for i in range(0, len(chunk), word_size))


def window_matches(entry: MatchEntry, data: bytes, byteorder: str = sys.byteorder) -> bool:
    """Check the entry's own value at every position of its scan window.

    Children are not consulted.

    Args:
        entry: Entry to test
        data: Leading bytes of the file
        byteorder: Byte order of multi-byte words in *data*

    Returns:
        True if any position in the window holds the (masked) value
    """
    length = len(entry.value)
    last = min(entry.start + entry.range_length, len(data) - length + 1)
    swap = entry.word_size > 1 and byteorder == "little"

    if entry.mask is None:
        for pos in range(entry.start, last):
            chunk = data[pos:pos + length]
            if swap:
                chunk = _swap_words(chunk, entry.word_size)
            if chunk == entry.value:
                return True
        return False

    mask = int.from_bytes(entry.mask, "big")
    expected = int.from_bytes(entry.value, "big") & mask
    for pos in range(entry.start, last):
        chunk = data[pos:pos + length]
        if swap:
            chunk = _swap_words(chunk, entry.word_size)
        if int.from_bytes(chunk, "big") & mask == expected:
            return True
    return False


def entry_matches(entry: MatchEntry, data: bytes, byteorder: str = sys.byteorder) -> bool:
    """Check an entry and, if it has children, that at least one child subtree matches."""
    if not window_matches(entry, data, byteorder):
        return False
    if not entry.children:
        return True
    return any(entry_matches(child, data, byteorder) for child in entry.children)


def rule_matches(rule: MagicRule, data: bytes, byteorder: str = sys.byteorder) -> bool:
    """Check whether any top-level alternative of *rule* matches."""
    return any(entry_matches(entry, data, byteorder) for entry in rule.entries)


class MagicMatcher:
    """Magic rules in lookup order.

    Rules are sorted by descending priority. The sort is stable, so rules
    of equal priority keep their registration order.
    """

    def __init__(
        self,
        rules: Iterable[Tuple[CanonicalType, MagicRule]] = (),
        max_sniff_bytes: int = 65536,
    ) -> None:
        self._rules: List[Tuple[CanonicalType, MagicRule]] = sorted(
            rules, key=lambda item: -item[1].priority
        )
        extent = max((rule.extent for _, rule in self._rules), default=0)
        self.max_extent = min(extent, max_sniff_bytes)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> List[Tuple[CanonicalType, MagicRule]]:
        return list(self._rules)

    def lookup(self, data: bytes, byteorder: str = sys.byteorder) -> Optional[MagicMatch]:
        """Find the type of *data*.

        Only the first ``max_extent`` bytes are looked at.

        Args:
            data: Leading bytes of the file
            byteorder: Byte order of multi-byte words in *data*

        Returns:
            MagicMatch for the first matching rule, or None
        """
        if not data:
            return None
        window = bytes(data[:self.max_extent])

        for mime_type, rule in self._rules:
            if rule_matches(rule, window, byteorder):
                logger.debug(
                    f"Magic match: {{'type': '{mime_type.name}', 'priority': {rule.priority}}}"
                )
                return MagicMatch(mime_type=mime_type, priority=rule.priority)
        return None
