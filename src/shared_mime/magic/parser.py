"""Parser for the shared-mime-info ``magic`` file.

File layout::

    MIME-Magic\\0\\n
    [priority:mime/type]\\n
    [indent] '>' offset '=' <u16 length> <value> ['&' <mask>] ['~' word-size] ['+' range] '\\n'
    ...

The value and mask are raw bytes whose length comes from a big-endian
16-bit prefix. They may contain any byte, newlines included, so the
tokenizer alternates between scanning for textual delimiters and
consuming a fixed number of raw bytes. Splitting the file into lines
first would corrupt the binary fields.

``offset`` is a decimal start offset, or ``start:end`` for the half-open
scan window ``[start, end)``.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..common import MalformedEntry
from ..parse_result import ParseResult
from ..registry import is_valid_type_name, normalize_type_name
from .rules import MagicRule, MatchEntry

logger = logging.getLogger(__name__)

MAGIC_HEADER = b"MIME-Magic\0\n"

_VALID_WORD_SIZES = (0, 1, 2, 4)


class _Tokenizer:
    """Cursor over the raw magic bytes."""

    def __init__(self, data: bytes, pos: int = 0) -> None:
        self.data = data
        self.pos = pos

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def peek(self) -> bytes:
        return self.data[self.pos:self.pos + 1]

    def accept(self, token: bytes) -> bool:
        """Consume *token* if it is next."""
        if self.data.startswith(token, self.pos):
            self.pos += len(token)
            return True
        return False

    def read_until(self, delimiter: bytes) -> Optional[bytes]:
        """Read text up to *delimiter* on the current line and consume the delimiter.

        Returns None, leaving the cursor untouched, if the line ends first.
        """
        end = self.data.find(delimiter, self.pos)
        newline = self.data.find(b"\n", self.pos)
        if end < 0 or (0 <= newline < end):
            return None
        text = self.data[self.pos:end]
        self.pos = end + len(delimiter)
        return text

    def read_digits(self) -> bytes:
        start = self.pos
        while self.pos < len(self.data) and self.data[self.pos:self.pos + 1].isdigit():
            self.pos += 1
        return self.data[start:self.pos]

    def read_raw(self, length: int) -> Optional[bytes]:
        """Consume exactly *length* raw bytes, or None if the data is truncated."""
        if self.pos + length > len(self.data):
            return None
        chunk = self.data[self.pos:self.pos + length]
        self.pos += length
        return chunk

    def skip_line(self) -> None:
        newline = self.data.find(b"\n", self.pos)
        self.pos = len(self.data) if newline < 0 else newline + 1


@dataclass
class _Node:
    start: int
    value: bytes
    range_length: int
    mask: Optional[bytes]
    word_size: int
    children: List["_Node"] = field(default_factory=list)

    def freeze(self) -> MatchEntry:
        return MatchEntry(
            start=self.start,
            value=self.value,
            range_length=self.range_length,
            mask=self.mask,
            word_size=self.word_size,
            children=tuple(child.freeze() for child in self.children),
        )


@dataclass
class _Section:
    mime_type: str
    priority: int
    roots: List[_Node] = field(default_factory=list)
    # stack[d] is the most recent entry at depth d
    stack: List[_Node] = field(default_factory=list)
    # Depth of the last rejected entry; deeper entries belong to it
    skip_depth: Optional[int] = None


class _LineError(Exception):
    """Problem with one match line; the line has already been consumed."""

    def __init__(self, reason: str, indent: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.indent = indent


def _parse_int(text: bytes, what: str) -> int:
    if not text.isdigit():
        raise ValueError(f"non-numeric {what} {text!r}")
    return int(text)


def _parse_offset(text: bytes) -> Tuple[int, Optional[int]]:
    """Parse ``start`` or ``start:end``; returns (start, range_length or None)."""
    start_text, sep, end_text = text.partition(b":")
    start = _parse_int(start_text, "offset")
    if not sep:
        return start, None
    end = _parse_int(end_text, "offset range end")
    if end <= start:
        raise ValueError(f"offset range end {end} is not after start {start}")
    return start, end - start


def _read_match_line(tok: _Tokenizer) -> Tuple[int, _Node]:
    """Read one match line, leaving the cursor at the start of the next line.

    Raises:
        _LineError: If the line is malformed
    """
    indent_text = tok.read_until(b">")
    if indent_text is None:
        tok.skip_line()
        raise _LineError("missing '>' in match line")

    indent: Optional[int] = None
    problems: List[str] = []
    try:
        indent = _parse_int(indent_text, "indent") if indent_text else 0
    except ValueError as e:
        problems.append(str(e))

    offset_text = tok.read_until(b"=")
    if offset_text is None:
        tok.skip_line()
        raise _LineError("missing '=' in match line", indent)

    # Fixed-length section: the value and mask are consumed verbatim
    length_bytes = tok.read_raw(2)
    if length_bytes is None:
        tok.pos = len(tok.data)
        raise _LineError("truncated value length", indent)
    value_length = int.from_bytes(length_bytes, "big")

    value = tok.read_raw(value_length)
    if value is None:
        tok.pos = len(tok.data)
        raise _LineError(f"truncated value: expected {value_length} bytes", indent)

    mask = None
    if tok.accept(b"&"):
        mask = tok.read_raw(value_length)
        if mask is None:
            tok.pos = len(tok.data)
            raise _LineError(f"truncated mask: expected {value_length} bytes", indent)

    # Back to textual scanning
    word_size = 1
    if tok.accept(b"~"):
        try:
            word_size = _parse_int(tok.read_digits(), "word size")
        except ValueError as e:
            problems.append(str(e))

    range_length: Optional[int] = None
    if tok.accept(b"+"):
        try:
            range_length = _parse_int(tok.read_digits(), "range length")
        except ValueError as e:
            problems.append(str(e))

    if not tok.accept(b"\n"):
        # Unknown extension or garbage; the rest of the line is ignored
        problems.append(f"unexpected data {tok.peek()!r} before end of line")
        tok.skip_line()

    start = 0
    offset_range: Optional[int] = None
    try:
        start, offset_range = _parse_offset(offset_text)
    except ValueError as e:
        problems.append(str(e))

    if offset_range is not None and range_length is not None:
        problems.append("range given both as offset range and range length")
    if range_length == 0:
        problems.append("zero range length")
    if word_size not in _VALID_WORD_SIZES:
        problems.append(f"invalid word size {word_size}")
    elif word_size > 1 and value_length % word_size:
        problems.append(f"value length {value_length} is not a multiple of word size {word_size}")
    if value_length == 0:
        problems.append("empty value")

    if problems:
        raise _LineError("; ".join(problems), indent)

    node = _Node(
        start=start,
        value=value,
        range_length=offset_range or range_length or 1,
        mask=mask,
        word_size=max(word_size, 1),
    )
    return indent, node


def _parse_section_header(line: bytes) -> Tuple[int, str]:
    if not (line.startswith(b"[") and line.endswith(b"]")):
        raise ValueError(f"bad section header {line!r}")
    priority_text, sep, type_text = line[1:-1].partition(b":")
    if not sep:
        raise ValueError(f"section header without ':' {line!r}")
    priority = _parse_int(priority_text.strip(), "priority")
    try:
        mime_type = normalize_type_name(type_text.decode("ascii"))
    except UnicodeDecodeError:
        raise ValueError(f"non-ASCII MIME type in section header {line!r}")
    if not is_valid_type_name(mime_type):
        raise ValueError(f"invalid MIME type {mime_type!r}")
    return priority, mime_type


def _close_section(section: Optional[_Section], rules: List[MagicRule]) -> None:
    if section is None:
        return
    if not section.roots:
        logger.debug(f"Dropping magic section without usable entries: {section.mime_type}")
        return
    rules.append(
        MagicRule(
            mime_type=section.mime_type,
            priority=section.priority,
            entries=tuple(node.freeze() for node in section.roots),
        )
    )


def parse_magic(data: bytes, source: str = "<memory>") -> ParseResult[MagicRule]:
    """Parse the contents of a ``magic`` file.

    Malformed records are reported in ``errors`` and skipped together with
    their child entries; everything else is still returned.

    Args:
        data: Raw file contents
        source: Name used in error reports and log messages

    Returns:
        ParseResult with one MagicRule per usable section, in file order
    """
    result: ParseResult[MagicRule] = ParseResult()

    def report(reason: str, offset: int) -> None:
        error = MalformedEntry(
            f"Malformed magic entry in {source} at byte {offset}: {reason}",
            source=source,
            offset=offset,
            reason=reason,
        )
        logger.warning(
            f"Skipping malformed magic entry: {{'source': '{source}', 'offset': {offset}, 'reason': '{reason}'}}"
        )
        result.errors.append(error)

    if not data.startswith(MAGIC_HEADER):
        report("missing MIME-Magic header", 0)
        return result

    tok = _Tokenizer(data, len(MAGIC_HEADER))
    section: Optional[_Section] = None
    # True while inside a section whose header was rejected
    discarding = False

    while not tok.at_end():
        line_start = tok.pos

        if tok.peek() == b"[":
            _close_section(section, result.items)
            section = None
            newline = data.find(b"\n", tok.pos)
            end = len(data) if newline < 0 else newline
            header = data[tok.pos:end]
            tok.pos = end + 1
            try:
                priority, mime_type = _parse_section_header(header)
            except ValueError as e:
                report(str(e), line_start)
                discarding = True
                continue
            section = _Section(mime_type=mime_type, priority=priority)
            discarding = False
            continue

        try:
            indent, node = _read_match_line(tok)
        except _LineError as e:
            if discarding:
                continue
            if section is not None and section.skip_depth is not None and (
                e.indent is not None and e.indent > section.skip_depth
            ):
                continue
            report(e.reason, line_start)
            if section is not None:
                section.skip_depth = e.indent if e.indent is not None else 0
            continue

        if discarding:
            continue
        if section is None:
            report("match line outside of a section", line_start)
            continue

        if section.skip_depth is not None:
            if indent > section.skip_depth:
                continue
            section.skip_depth = None

        if indent > len(section.stack):
            report(f"indent {indent} skips a depth (current depth {len(section.stack) - 1})", line_start)
            section.skip_depth = indent
            continue

        if indent == 0:
            section.roots.append(node)
        else:
            section.stack[indent - 1].children.append(node)
        del section.stack[indent:]
        section.stack.append(node)

    _close_section(section, result.items)

    logger.debug(
        f"Parsed magic file: {{'source': '{source}', 'rules': {len(result.items)}, 'errors': {len(result.errors)}}}"
    )
    return result
