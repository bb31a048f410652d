"""Tests for reading database directories from disk."""

import os
import sys
from pathlib import Path

import pytest

from shared_mime import DatabaseConfig, DatabaseUnavailable
from shared_mime.sources import data_directories, load_directories, load_system, read_directory

from conftest import SAMPLE_ALIASES, SAMPLE_GLOBS2, SAMPLE_SUBCLASSES, sample_magic


@pytest.fixture
def mime_dir(tmp_path):
    """A populated mime/ directory."""
    path = tmp_path / "share" / "mime"
    path.mkdir(parents=True)
    (path / "globs2").write_text(SAMPLE_GLOBS2)
    (path / "magic").write_bytes(sample_magic())
    (path / "subclasses").write_text(SAMPLE_SUBCLASSES)
    (path / "aliases").write_text(SAMPLE_ALIASES)
    (path / "generic-icons").write_text("application/zip:package-x-generic\n")
    return path


class TestReadDirectory:
    """Tests for read_directory."""

    def test_reads_all_files(self, mime_dir):
        records = read_directory(mime_dir)
        assert records.source == str(mime_dir)
        assert len(records.globs) == 14
        assert len(records.magic) == 4
        assert len(records.subclasses) == 9
        assert len(records.aliases) == 4
        assert records.icons == []
        assert len(records.generic_icons) == 1

    def test_globs2_preferred(self, mime_dir):
        (mime_dir / "globs").write_text("image/x-legacy:*.legacy\n")
        records = read_directory(mime_dir)
        assert all(g.pattern != "*.legacy" for g in records.globs)

    def test_legacy_globs_without_globs2(self, mime_dir):
        (mime_dir / "globs2").unlink()
        (mime_dir / "globs").write_text("image/x-legacy:*.legacy\n")
        records = read_directory(mime_dir)
        assert [g.pattern for g in records.globs] == ["*.legacy"]

    def test_missing_directory_is_empty(self, tmp_path):
        records = read_directory(tmp_path / "nowhere")
        assert records.is_empty()
        assert records.errors == []

    def test_malformed_lines_are_reported(self, mime_dir):
        (mime_dir / "icons").write_text("image/png:good-icon\nbroken\n")
        records = read_directory(mime_dir)
        assert len(records.icons) == 1
        assert records.errors[0].source == f"{mime_dir}/icons"


class TestLoadDirectories:
    """Tests for load_directories and load_system."""

    def test_load_directories(self, mime_dir, tmp_path):
        db = load_directories([tmp_path / "missing", mime_dir])
        assert db.detect("a.gif").name == "image/gif"
        assert db.sources == (str(mime_dir),)

    def test_earlier_directory_takes_precedence(self, mime_dir, tmp_path):
        local = tmp_path / "local" / "mime"
        local.mkdir(parents=True)
        (local / "icons").write_text("image/gif:local-gif\n")
        (mime_dir / "icons").write_text("image/gif:system-gif\n")

        db = load_directories([local, mime_dir])
        assert db.icon_name("image/gif") == "local-gif"

    def test_no_usable_directory(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(DatabaseUnavailable):
            load_directories([empty, tmp_path / "missing"])

    def test_load_system_uses_configured_dirs(self, mime_dir):
        config = DatabaseConfig(data_dirs=[str(mime_dir)])
        db = load_system(config)
        assert db.detect(content=b"PK\x03\x04rest").name == "application/zip"
        assert db.config is config

    @pytest.mark.skipif(sys.platform != "linux", reason="XDG variables apply on Linux only")
    def test_load_system_uses_xdg_dirs(self, mime_dir, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "home-data"))
        monkeypatch.setenv("XDG_DATA_DIRS", str(mime_dir.parent))
        db = load_system()
        assert db.detect("Makefile").name == "text/x-makefile"


class TestDataDirectories:
    """Tests for the XDG search path."""

    @pytest.mark.skipif(sys.platform != "linux", reason="XDG variables apply on Linux only")
    def test_xdg_order(self, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", "/home/u/.local/share")
        monkeypatch.setenv("XDG_DATA_DIRS", os.pathsep.join(["/usr/local/share", "/usr/share"]))
        assert data_directories() == [
            Path("/home/u/.local/share/mime"),
            Path("/usr/local/share/mime"),
            Path("/usr/share/mime"),
        ]

    @pytest.mark.skipif(sys.platform != "linux", reason="XDG variables apply on Linux only")
    def test_duplicates_dropped(self, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", "/usr/share")
        monkeypatch.setenv("XDG_DATA_DIRS", os.pathsep.join(["/usr/share", "/usr/share"]))
        assert data_directories() == [Path("/usr/share/mime")]

    def test_every_entry_is_a_mime_dir(self):
        assert all(d.name == "mime" for d in data_directories())
