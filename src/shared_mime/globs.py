"""File name glob index."""

import fnmatch
import logging
import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Tuple

from .common import normalize_file_name
from .registry import CanonicalType

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 50
MIN_WEIGHT = 0
MAX_WEIGHT = 100

_WILDCARDS = frozenset("*?[\\")


class GlobClass(IntEnum):
    """Match class of a glob; lower values take precedence."""
    LITERAL = 0
    EXTENSION = 1
    GENERIC = 2


def clamp_weight(weight: int) -> int:
    return max(MIN_WEIGHT, min(MAX_WEIGHT, weight))


def classify_pattern(pattern: str) -> GlobClass:
    """Derive the match class of *pattern*.

    ``Makefile`` is literal, ``*.tar.gz`` is an extension glob, and
    anything else containing ``*``, ``?``, ``[`` or ``\\`` is generic.
    """
    if len(pattern) > 1 and pattern.startswith("*") and not any(ch in _WILDCARDS for ch in pattern[1:]):
        return GlobClass.EXTENSION
    if any(ch in _WILDCARDS for ch in pattern):
        return GlobClass.GENERIC
    return GlobClass.LITERAL


@dataclass(frozen=True)
class GlobRule:
    """A file name pattern owned by a MIME type.

    Attributes:
        pattern: Glob pattern as written in the record
        mime_type: Owning type (already alias-resolved)
        weight: Match weight in [0, 100]
        case_sensitive: Whether matching must respect case
        order: Registration order, used as the final tie-break
    """
    pattern: str
    mime_type: CanonicalType
    weight: int = DEFAULT_WEIGHT
    case_sensitive: bool = False
    order: int = 0
    glob_class: GlobClass = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "weight", clamp_weight(self.weight))
        object.__setattr__(self, "glob_class", classify_pattern(self.pattern))

    @property
    def suffix(self) -> str:
        """Literal suffix of an extension glob (``.gz`` for ``*.gz``)."""
        return self.pattern[1:]

    def sort_key(self) -> Tuple[int, int, int, bool, int]:
        return (self.glob_class, -self.weight, -len(self.pattern), not self.case_sensitive, self.order)


@dataclass(frozen=True)
class GlobMatch:
    """Outcome of a glob lookup.

    Attributes:
        types: Types tied with the best match on class, weight, pattern
            length and case sensitivity, first-registered first, without
            duplicates
        weight: Weight of the best match
        pattern: Pattern of the best match
    """
    types: Tuple[CanonicalType, ...]
    weight: int
    pattern: str

    @property
    def best(self) -> CanonicalType:
        return self.types[0]

    @property
    def is_ambiguous(self) -> bool:
        return len(self.types) > 1


class GlobIndex:
    """Globs routed into literal, extension and generic buckets.

    Extension globs are keyed by their suffix so a lookup costs one dict
    probe per suffix of the file name rather than one comparison per
    rule.
    """

    def __init__(self, rules: Iterable[GlobRule] = ()) -> None:
        self._literal_cs: Dict[str, List[GlobRule]] = {}
        self._literal_ci: Dict[str, List[GlobRule]] = {}
        self._suffix_cs: Dict[str, List[GlobRule]] = {}
        self._suffix_ci: Dict[str, List[GlobRule]] = {}
        self._generic: List[Tuple[GlobRule, re.Pattern]] = []
        self._count = 0

        for rule in rules:
            self._add(rule)

    def _add(self, rule: GlobRule) -> None:
        self._count += 1
        if rule.glob_class is GlobClass.LITERAL:
            if rule.case_sensitive:
                self._literal_cs.setdefault(rule.pattern, []).append(rule)
            else:
                self._literal_ci.setdefault(rule.pattern.casefold(), []).append(rule)
        elif rule.glob_class is GlobClass.EXTENSION:
            if rule.case_sensitive:
                self._suffix_cs.setdefault(rule.suffix, []).append(rule)
            else:
                self._suffix_ci.setdefault(rule.suffix.casefold(), []).append(rule)
        else:
            flags = 0 if rule.case_sensitive else re.IGNORECASE
            self._generic.append((rule, re.compile(fnmatch.translate(rule.pattern), flags)))

    def __len__(self) -> int:
        return self._count

    def candidates(self, file_name: str) -> List[GlobRule]:
        """Every rule matching *file_name*, best first.

        Args:
            file_name: File name or path; only the base name is matched

        Returns:
            Matching rules ordered by class, weight, pattern length, case
            sensitivity (case-sensitive first) and registration order
        """
        name = normalize_file_name(file_name)
        if not name:
            return []
        folded = name.casefold()

        found: List[GlobRule] = []
        found.extend(self._literal_cs.get(name, ()))
        found.extend(self._literal_ci.get(folded, ()))

        if self._suffix_cs or self._suffix_ci:
            for start in range(len(name)):
                found.extend(self._suffix_cs.get(name[start:], ()))
            for start in range(len(folded)):
                found.extend(self._suffix_ci.get(folded[start:], ()))

        for rule, regex in self._generic:
            if regex.match(name):
                found.append(rule)

        found.sort(key=GlobRule.sort_key)
        return found

    def match(self, file_name: str) -> Optional[GlobMatch]:
        """Select the best type(s) for *file_name*, or None if nothing matches."""
        found = self.candidates(file_name)
        if not found:
            return None

        top = found[0]
        rank = top.sort_key()[:4]
        types: List[CanonicalType] = []
        for rule in found:
            if rule.sort_key()[:4] != rank:
                break
            if rule.mime_type not in types:
                types.append(rule.mime_type)

        if len(types) > 1:
            logger.debug(
                f"Ambiguous glob match: {{'file': '{file_name}', "
                f"'types': {[t.name for t in types]}, 'pattern': '{top.pattern}'}}"
            )
        return GlobMatch(types=tuple(types), weight=top.weight, pattern=top.pattern)
