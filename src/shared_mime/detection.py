"""Reconciliation of file name and content evidence."""

import logging
from typing import Optional

from .globs import GlobMatch
from .registry import CanonicalType, TypeRegistry

logger = logging.getLogger(__name__)

# Control bytes that still count as text: TAB, LF, VT, FF, CR, ESC
_TEXT_CONTROL_BYTES = frozenset(b"\t\n\x0b\x0c\r\x1b")


def looks_like_text(data: bytes) -> bool:
    """Check whether *data* contains only text bytes.

    Empty data is not text. Bytes at or above 0x80 are accepted so that
    UTF-8 and legacy 8-bit encodings count as text.
    """
    if not data:
        return False
    for byte in data:
        if byte == 0x7F or (byte < 0x20 and byte not in _TEXT_CONTROL_BYTES):
            return False
    return True


def shape_fallback(registry: TypeRegistry, data: Optional[bytes]) -> CanonicalType:
    """``text/plain`` for text-looking data, ``application/octet-stream`` otherwise."""
    if data and looks_like_text(data):
        return registry.text_plain
    return registry.octet_stream


def is_generic(registry: TypeRegistry, mime_type: CanonicalType) -> bool:
    """Whether *mime_type* is one of the two low-information base types."""
    return mime_type.id in (registry.text_plain.id, registry.octet_stream.id)


def reconcile(
    registry: TypeRegistry,
    glob_match: Optional[GlobMatch],
    magic_type: Optional[CanonicalType],
) -> CanonicalType:
    """Combine the two kinds of evidence into one type.

    *magic_type* is None when no content was available; when content was
    available but no rule matched, callers pass the shape fallback.

    Policy:
        - only one source: its answer, or the binary type if it has none
        - both agree (magic equals any tied glob type): the agreed type
        - magic only says text/plain or application/octet-stream:
          the file name wins
        - otherwise: the content signature wins

    Args:
        registry: Registry holding the generic base types
        glob_match: Result of the glob lookup, if any
        magic_type: Type derived from content, if content was given

    Returns:
        The detected type
    """
    if magic_type is None:
        if glob_match is None:
            return registry.octet_stream
        return glob_match.best

    if glob_match is None:
        return magic_type

    if magic_type in glob_match.types:
        return magic_type

    if is_generic(registry, magic_type):
        logger.debug(
            f"Preferring file name over generic content type: "
            f"{{'glob': '{glob_match.best.name}', 'magic': '{magic_type.name}'}}"
        )
        return glob_match.best

    logger.debug(
        f"Preferring content signature over file name: "
        f"{{'glob': '{glob_match.best.name}', 'magic': '{magic_type.name}'}}"
    )
    return magic_type
