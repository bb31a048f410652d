"""Tests for the glob index."""

import pytest

from shared_mime.globs import GlobClass, GlobIndex, GlobRule, classify_pattern
from shared_mime.registry import TypeRegistry


@pytest.fixture
def registry():
    return TypeRegistry()


def make_index(registry, *entries):
    """Build an index from (pattern, type[, weight[, case_sensitive]]) tuples."""
    rules = []
    for order, entry in enumerate(entries):
        pattern, mime_type, *rest = entry
        weight = rest[0] if rest else 50
        case_sensitive = rest[1] if len(rest) > 1 else False
        rules.append(GlobRule(pattern, registry.intern(mime_type), weight, case_sensitive, order))
    return GlobIndex(rules)


class TestClassifyPattern:
    """Tests for match class derivation."""

    def test_literal(self):
        assert classify_pattern("Makefile") is GlobClass.LITERAL
        assert classify_pattern("README.md") is GlobClass.LITERAL

    def test_extension(self):
        assert classify_pattern("*.gif") is GlobClass.EXTENSION
        assert classify_pattern("*.tar.gz") is GlobClass.EXTENSION
        assert classify_pattern("*~") is GlobClass.EXTENSION

    def test_generic(self):
        assert classify_pattern("Foo*.gif") is GlobClass.GENERIC
        assert classify_pattern("*[4].gif") is GlobClass.GENERIC
        assert classify_pattern("tree.[ch]") is GlobClass.GENERIC
        assert classify_pattern("a\\\\b") is GlobClass.GENERIC
        assert classify_pattern("*") is GlobClass.GENERIC

    def test_weight_is_clamped(self, registry):
        """Weights outside [0, 100] are clamped."""
        assert GlobRule("*.a", registry.intern("a/a"), weight=250).weight == 100
        assert GlobRule("*.a", registry.intern("a/a"), weight=-3).weight == 0


class TestGlobMatching:
    """Tests for per-class matching."""

    def test_literal_is_case_insensitive(self, registry):
        index = make_index(registry, ("copying", "text/x-copying"))
        assert index.match("COPYING").best.name == "text/x-copying"

    def test_literal_case_sensitive(self, registry):
        index = make_index(registry, ("README", "text/x-readme", 50, True))
        assert index.match("README") is not None
        assert index.match("readme") is None

    def test_extension_case_insensitive(self, registry):
        index = make_index(registry, ("*.c", "text/x-csrc"))
        assert index.match("foo.c").best.name == "text/x-csrc"
        assert index.match("FOO.C").best.name == "text/x-csrc"

    def test_extension_case_sensitive(self, registry):
        index = make_index(registry, ("*.C", "text/x-c++src", 50, True))
        assert index.match("foo.C").best.name == "text/x-c++src"
        assert index.match("foo.c") is None
        assert index.match("foo.h") is None

    def test_generic_pattern(self, registry):
        index = make_index(registry, ("*.anim[1-9j]", "video/x-anim"))
        assert index.match("foo.anim0") is None
        assert index.match("foo.anim8").best.name == "video/x-anim"
        assert index.match("foo.animk") is None
        assert index.match("FOO.ANIMJ").best.name == "video/x-anim"

    def test_generic_case_sensitive(self, registry):
        index = make_index(registry, ("*.Z[0-9]", "application/x-split", 50, True))
        assert index.match("a.Z1") is not None
        assert index.match("a.z1") is None

    def test_matches_base_name_only(self, registry):
        index = make_index(registry, ("*.txt", "text/plain"), ("Makefile", "text/x-makefile"))
        assert index.match("/home/user/notes.txt").best.name == "text/plain"
        assert index.match("/src/Makefile").best.name == "text/x-makefile"
        assert index.match("/notes.txt/file") is None

    def test_no_match(self, registry):
        index = make_index(registry, ("*.txt", "text/plain"))
        assert index.match("image.png") is None
        assert index.match("") is None
        assert index.candidates("image.png") == []


class TestGlobSelection:
    """Tests for the selection policy between candidates."""

    def test_literal_beats_heavier_pattern(self, registry):
        """A literal match wins over any wildcard match regardless of weight."""
        index = make_index(
            registry,
            ("*.mk", "text/x-mk", 90),
            ("Make*", "text/x-generic-make", 100),
            ("Makefile", "text/x-makefile", 50),
        )
        match = index.match("Makefile")
        assert match.types[0].name == "text/x-makefile"
        assert match.weight == 50

    def test_extension_beats_generic(self, registry):
        index = make_index(
            registry,
            ("*.t[a-z]r", "application/x-tarish", 90),
            ("*.tar", "application/x-tar", 50),
        )
        assert index.match("a.tar").best.name == "application/x-tar"

    def test_higher_weight_wins_within_class(self, registry):
        index = make_index(
            registry,
            ("*.doc", "application/msword", 50),
            ("*.doc", "text/x-doc", 30),
        )
        match = index.match("letter.doc")
        assert match.types == (registry.intern("application/msword"),)
        assert match.weight == 50

    def test_longer_pattern_wins(self, registry):
        index = make_index(
            registry,
            ("*.gz", "application/gzip"),
            ("*.tar.gz", "application/x-compressed-tar"),
        )
        match = index.match("backup.tar.gz")
        assert match.best.name == "application/x-compressed-tar"
        assert not match.is_ambiguous

    def test_full_tie_keeps_registration_order(self, registry):
        """Equal class, weight and length are reported together, first registered first."""
        index = make_index(
            registry,
            ("*.ts", "video/mp2t"),
            ("*.ts", "text/x-typescript"),
        )
        match = index.match("main.ts")
        assert [t.name for t in match.types] == ["video/mp2t", "text/x-typescript"]
        assert match.is_ambiguous
        assert match.best.name == "video/mp2t"

    def test_case_sensitive_beats_case_insensitive(self, registry):
        """An exact-case rule wins a tie against a case-folded one registered earlier."""
        index = make_index(
            registry,
            ("*.c", "text/x-csrc"),
            ("*.C", "text/x-c++src", 50, True),
        )
        match = index.match("main.C")
        assert match.types == (registry.intern("text/x-c++src"),)
        assert index.match("main.c").best.name == "text/x-csrc"

    def test_duplicate_types_are_collapsed(self, registry):
        index = make_index(
            registry,
            ("*.htm", "text/html"),
            ("*.HTM", "text/html"),
        )
        assert index.match("index.htm").types == (registry.intern("text/html"),)

    def test_candidates_are_ordered(self, registry):
        index = make_index(
            registry,
            ("*.gz", "application/gzip", 50),
            ("*.tar.gz", "application/x-compressed-tar", 50),
            ("backup.*", "application/x-backup", 80),
        )
        names = [rule.mime_type.name for rule in index.candidates("backup.tar.gz")]
        assert names == ["application/x-compressed-tar", "application/gzip", "application/x-backup"]
