"""Shared fixtures for shared_mime tests."""

import os
from typing import Optional

import pytest

from shared_mime import Database, RecordSet
from shared_mime.magic import MAGIC_HEADER


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's config files and SHARED_MIME_* variables out of every test."""
    monkeypatch.setattr("platformdirs.user_config_dir", lambda *args, **kwargs: str(tmp_path / "config"))
    for key in list(os.environ):
        if key.startswith("SHARED_MIME_"):
            monkeypatch.delenv(key)


def build_magic_line(
    value: bytes,
    indent: int = 0,
    offset: int | str = 0,
    mask: Optional[bytes] = None,
    word_size: Optional[int] = None,
    range_length: Optional[int] = None,
) -> bytes:
    """Encode one match line of a magic file."""
    line = (str(indent).encode() if indent else b"") + b">" + str(offset).encode() + b"="
    line += len(value).to_bytes(2, "big") + value
    if mask is not None:
        line += b"&" + mask
    if word_size is not None:
        line += b"~" + str(word_size).encode()
    if range_length is not None:
        line += b"+" + str(range_length).encode()
    return line + b"\n"


def build_magic_section(priority: int, mime_type: str, *lines: bytes) -> bytes:
    return f"[{priority}:{mime_type}]\n".encode() + b"".join(lines)


def build_magic_file(*sections: bytes) -> bytes:
    return MAGIC_HEADER + b"".join(sections)


@pytest.fixture
def magic_line():
    return build_magic_line


@pytest.fixture
def magic_section():
    return build_magic_section


@pytest.fixture
def magic_file():
    return build_magic_file


SAMPLE_GLOBS2 = """\
# weight:type:pattern
50:text/plain:*.txt
50:image/gif:*.gif
50:image/png:*.png
50:application/zip:*.zip
50:text/x-makefile:Makefile
90:text/x-makefile:*.mk
50:text/x-csrc:*.c
50:text/x-c++src:*.C:cs
50:application/x-compressed-tar:*.tar.gz
50:application/gzip:*.gz
50:video/x-anim:*.anim[1-9j]
50:application/x-wordperfect:*.wp
50:application/json:*.json
50:image/svg+xml:*.svg
"""

SAMPLE_SUBCLASSES = """\
application/rtf text/plain
message/news text/plain
application/json application/javascript
application/javascript text/plain
image/svg+xml application/xml
application/xml text/plain
application/x-compressed-tar application/gzip
image/x-djvu image/vnd.djvu
image/vnd.djvu image/x-djvu
"""

SAMPLE_ALIASES = """\
application/x-wordperfect application/vnd.wordperfect
application/wordperfect application/vnd.wordperfect
application/x-gnome-app-info application/x-desktop
application/ics text/calendar
"""

SAMPLE_ICONS = """\
application/rss+xml:text-html
image/png:my-png-icon
"""

SAMPLE_GENERIC_ICONS = """\
application/javascript:text-x-script
application/zip:package-x-generic
application/gzip:package-x-generic
"""


def sample_magic() -> bytes:
    return build_magic_file(
        build_magic_section(
            80, "image/svg+xml",
            build_magic_line(b"<svg", range_length=256),
        ),
        build_magic_section(
            50, "image/gif",
            build_magic_line(b"GIF8"),
            build_magic_line(b"7a", indent=1, offset=4),
            build_magic_line(b"9a", indent=1, offset=4),
        ),
        build_magic_section(
            50, "image/png",
            build_magic_line(b"\x89PNG\r\n\x1a\n"),
        ),
        build_magic_section(
            40, "application/zip",
            build_magic_line(b"PK\x03\x04"),
        ),
    )


@pytest.fixture
def sample_records() -> RecordSet:
    return RecordSet.from_texts(
        globs2=SAMPLE_GLOBS2,
        magic=sample_magic(),
        subclasses=SAMPLE_SUBCLASSES,
        aliases=SAMPLE_ALIASES,
        icons=SAMPLE_ICONS,
        generic_icons=SAMPLE_GENERIC_ICONS,
        source="sample",
    )


@pytest.fixture
def sample_db(sample_records) -> Database:
    return Database.load(sample_records)
