"""Content-signature (magic) rule trees."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

MIN_PRIORITY = 0
MAX_PRIORITY = 100


def clamp_priority(priority: int) -> int:
    return max(MIN_PRIORITY, min(MAX_PRIORITY, priority))


@dataclass(frozen=True)
class MatchEntry:
    """One node of a magic rule tree.

    The entry compares ``value`` against the data at every position in
    ``[start, start + range_length)``. Children are AND-connected to this
    entry and OR-connected among themselves.

    Attributes:
        start: First offset to compare at
        value: Bytes to look for
        range_length: Number of consecutive start positions to try
        mask: Optional mask applied to both sides, same length as value
        word_size: 1, 2 or 4; values and masks are big-endian words
        children: Sub-entries, at least one of which must also match
    """
    start: int
    value: bytes
    range_length: int = 1
    mask: Optional[bytes] = None
    word_size: int = 1
    children: Tuple["MatchEntry", ...] = ()

    def __post_init__(self) -> None:
        if self.mask is not None and len(self.mask) != len(self.value):
            raise ValueError("mask and value must have the same length")
        if self.range_length < 1:
            raise ValueError("range_length must be at least 1")

    @property
    def extent(self) -> int:
        """Bytes of read-ahead this entry and its children may need."""
        own = self.start + self.range_length + len(self.value)
        return max([own] + [child.extent for child in self.children])


@dataclass(frozen=True)
class MagicRule:
    """All signatures of one ``[priority:mime/type]`` section.

    Attributes:
        mime_type: Type name as written in the section header
        priority: Priority in [0, 100]
        entries: Top-level alternatives, OR-connected
    """
    mime_type: str
    priority: int
    entries: Tuple[MatchEntry, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "priority", clamp_priority(self.priority))

    @property
    def extent(self) -> int:
        return max((entry.extent for entry in self.entries), default=0)
