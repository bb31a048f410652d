"""Text record formats of a shared MIME database directory.

All of these are line based: blank lines and lines starting with ``#``
are ignored, and a line that does not fit its format is reported as a
:class:`MalformedEntry` and skipped.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from .common import MalformedEntry
from .globs import DEFAULT_WEIGHT, clamp_weight
from .magic import MagicRule, parse_magic
from .parse_result import ParseResult
from .registry import is_valid_type_name, normalize_type_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobRecord:
    mime_type: str
    pattern: str
    weight: int = DEFAULT_WEIGHT
    case_sensitive: bool = False


@dataclass(frozen=True)
class AliasRecord:
    alias: str
    mime_type: str


@dataclass(frozen=True)
class SubclassRecord:
    mime_type: str
    parent: str


@dataclass(frozen=True)
class IconRecord:
    mime_type: str
    icon_name: str


def _check_type(name: str) -> str:
    name = normalize_type_name(name)
    if not is_valid_type_name(name):
        raise ValueError(f"invalid MIME type {name!r}")
    return name


def parse_glob_v2_line(line: str) -> GlobRecord:
    """Parse ``weight:type:pattern[:flags[:...]]``.

    The ``cs`` flag marks a case-sensitive glob. Unknown flags and extra
    fields are ignored for forward compatibility.
    """
    chunks = line.split(":")
    if len(chunks) < 3:
        raise ValueError("expected weight:type:pattern")
    weight_text, type_text, pattern = chunks[0], chunks[1], chunks[2]
    try:
        weight = int(weight_text)
    except ValueError:
        raise ValueError(f"non-numeric weight {weight_text!r}")
    if not pattern:
        raise ValueError("empty pattern")
    flags = chunks[3].split(",") if len(chunks) > 3 else []
    return GlobRecord(
        mime_type=_check_type(type_text),
        pattern=pattern,
        weight=clamp_weight(weight),
        case_sensitive="cs" in flags,
    )


def parse_glob_v1_line(line: str) -> GlobRecord:
    """Parse the legacy ``type:pattern`` format; the weight is always 50."""
    chunks = line.split(":")
    if len(chunks) != 2 or not chunks[1]:
        raise ValueError("expected type:pattern")
    return GlobRecord(mime_type=_check_type(chunks[0]), pattern=chunks[1])


def parse_alias_line(line: str) -> AliasRecord:
    chunks = line.split()
    if len(chunks) < 2:
        raise ValueError("expected 'alias canonical'")
    return AliasRecord(alias=_check_type(chunks[0]), mime_type=_check_type(chunks[1]))


def parse_subclass_line(line: str) -> SubclassRecord:
    chunks = line.split()
    if len(chunks) < 2:
        raise ValueError("expected 'type parent'")
    return SubclassRecord(mime_type=_check_type(chunks[0]), parent=_check_type(chunks[1]))


def parse_icon_line(line: str) -> IconRecord:
    chunks = line.split(":")
    if len(chunks) != 2 or not chunks[0] or not chunks[1]:
        raise ValueError("expected type:icon-name")
    return IconRecord(mime_type=_check_type(chunks[0]), icon_name=chunks[1].strip())


def parse_lines(text: str, parse_line: Callable, source: str = "<memory>") -> ParseResult:
    """Apply *parse_line* to every record line of *text*.

    Args:
        text: File contents
        parse_line: One of the ``parse_*_line`` functions
        source: Name used in error reports and log messages

    Returns:
        ParseResult with the parsed records and the skipped lines
    """
    result = ParseResult()
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        try:
            result.items.append(parse_line(line))
        except ValueError as e:
            logger.warning(
                f"Skipping malformed record: {{'source': '{source}', 'line': {number}, 'reason': '{e}'}}"
            )
            result.errors.append(
                MalformedEntry(
                    f"Malformed record in {source} line {number}: {e}",
                    source=source,
                    line=number,
                    reason=str(e),
                )
            )
    return result


@dataclass
class RecordSet:
    """Parsed records of one database source.

    A Database is built from one or more record sets; earlier sets take
    precedence for aliases and icons.
    """
    globs: List[GlobRecord] = field(default_factory=list)
    magic: List[MagicRule] = field(default_factory=list)
    subclasses: List[SubclassRecord] = field(default_factory=list)
    aliases: List[AliasRecord] = field(default_factory=list)
    icons: List[IconRecord] = field(default_factory=list)
    generic_icons: List[IconRecord] = field(default_factory=list)
    errors: List[MalformedEntry] = field(default_factory=list)
    source: str = "<memory>"

    def is_empty(self) -> bool:
        return not (
            self.globs or self.magic or self.subclasses
            or self.aliases or self.icons or self.generic_icons
        )

    def record_count(self) -> int:
        return (
            len(self.globs) + len(self.magic) + len(self.subclasses)
            + len(self.aliases) + len(self.icons) + len(self.generic_icons)
        )

    def _collect(self, parsed: ParseResult, target: list) -> None:
        target.extend(parsed.items)
        self.errors.extend(parsed.errors)

    @classmethod
    def from_texts(
        cls,
        globs2: Optional[str] = None,
        globs: Optional[str] = None,
        magic: Optional[Union[bytes, str]] = None,
        subclasses: Optional[str] = None,
        aliases: Optional[str] = None,
        icons: Optional[str] = None,
        generic_icons: Optional[str] = None,
        source: str = "<memory>",
    ) -> "RecordSet":
        """Build a record set from the contents of the individual record files.

        Args:
            globs2: ``globs2`` contents (weighted format)
            globs: Legacy ``globs`` contents, used only when globs2 is None
            magic: ``magic`` contents; str is encoded as latin-1
            subclasses: ``subclasses`` contents
            aliases: ``aliases`` contents
            icons: ``icons`` contents
            generic_icons: ``generic-icons`` contents
            source: Name used in error reports

        Returns:
            RecordSet with every usable record and the list of skipped ones
        """
        records = cls(source=source)

        if globs2 is not None:
            records._collect(parse_lines(globs2, parse_glob_v2_line, f"{source}/globs2"), records.globs)
        elif globs is not None:
            records._collect(parse_lines(globs, parse_glob_v1_line, f"{source}/globs"), records.globs)

        if magic is not None:
            if isinstance(magic, str):
                magic = magic.encode("latin-1")
            records._collect(parse_magic(magic, f"{source}/magic"), records.magic)

        if subclasses is not None:
            records._collect(parse_lines(subclasses, parse_subclass_line, f"{source}/subclasses"), records.subclasses)
        if aliases is not None:
            records._collect(parse_lines(aliases, parse_alias_line, f"{source}/aliases"), records.aliases)
        if icons is not None:
            records._collect(parse_lines(icons, parse_icon_line, f"{source}/icons"), records.icons)
        if generic_icons is not None:
            records._collect(
                parse_lines(generic_icons, parse_icon_line, f"{source}/generic-icons"),
                records.generic_icons,
            )

        return records
