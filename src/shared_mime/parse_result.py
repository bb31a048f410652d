"""Result container shared by the record parsers."""

from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

from .common import MalformedEntry

T = TypeVar('T')


@dataclass
class ParseResult(Generic[T]):
    """Parsed records of one file plus the records that had to be skipped."""
    items: List[T] = field(default_factory=list)
    errors: List[MalformedEntry] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
