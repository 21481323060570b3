"""
Catalog Tests - Verify manifest loading and validation.

Tests:
- Source file indices and categories
- Query expected-category parsing
- Malformed manifests abort with ManifestError
- Source counts beyond the membership width raise IndexRangeError
"""

import pytest

from readmatch import catalog
from readmatch.catalog import (
    FileCatalog, load_query_files, load_source_files, parse_categories,
)
from readmatch.errors import IndexRangeError, ManifestError


class TestSourceManifest:
    """Tests for the index manifest."""

    def test_assigns_contiguous_indices(self, write_manifest):
        """Indices follow manifest order starting at 0."""
        manifest = write_manifest("index.tsv", [
            ("a.fastq", "human"),
            ("b.fastq", "bacteria"),
            ("c.fastq",),
        ])

        sources = load_source_files(manifest)

        assert [s.index for s in sources] == [0, 1, 2]
        assert [s.path for s in sources] == ["a.fastq", "b.fastq", "c.fastq"]

    def test_category_is_optional(self, write_manifest):
        """A missing second column means uncategorized."""
        manifest = write_manifest("index.tsv", [("a.fastq",), ("b.fastq", "human")])

        sources = load_source_files(manifest)

        assert sources[0].category == ""
        assert not sources[0].is_categorized
        assert sources[1].category == "human"

    def test_same_path_twice_gets_two_indices(self, write_manifest):
        """Duplicate manifest entries are distinct source files."""
        manifest = write_manifest("index.tsv", [("a.fastq", "x"), ("a.fastq", "y")])

        sources = load_source_files(manifest)

        assert len(sources) == 2
        assert sources[0].index != sources[1].index

    def test_skips_blank_lines(self, temp_dir):
        """Blank lines do not consume an index."""
        manifest = temp_dir / "index.tsv"
        manifest.write_text("a.fastq\thuman\n\n\nb.fastq\n")

        sources = load_source_files(manifest)

        assert [s.index for s in sources] == [0, 1]

    def test_rejects_extra_columns(self, write_manifest):
        """More than two columns is malformed."""
        manifest = write_manifest("index.tsv", [("a.fastq", "human", "extra")])

        with pytest.raises(ManifestError) as excinfo:
            load_source_files(manifest)

        assert excinfo.value.line == 1

    def test_rejects_empty_path(self, write_manifest):
        """A row without a path is malformed."""
        manifest = write_manifest("index.tsv", [("a.fastq",), ("", "human")])

        with pytest.raises(ManifestError) as excinfo:
            load_source_files(manifest)

        assert excinfo.value.line == 2

    def test_rejects_empty_manifest(self, temp_dir):
        """A manifest without entries is malformed."""
        manifest = temp_dir / "index.tsv"
        manifest.write_text("")

        with pytest.raises(ManifestError):
            load_source_files(manifest)

    def test_missing_manifest_is_io_error(self, temp_dir):
        """A nonexistent manifest raises an OSError, not a ManifestError."""
        with pytest.raises(FileNotFoundError):
            load_source_files(temp_dir / "nope.tsv")

    def test_rejects_non_utf8_manifest(self, temp_dir):
        """Undecodable bytes in a path abort loading with a ManifestError."""
        manifest = temp_dir / "index.tsv"
        manifest.write_bytes(b"a\xff.fastq\thuman\n")

        with pytest.raises(ManifestError) as excinfo:
            load_source_files(manifest)

        assert "UTF-8" in excinfo.value.reason
        assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)

    def test_too_many_source_files(self, write_manifest, monkeypatch):
        """More source files than the membership width holds is a range error."""
        monkeypatch.setattr(catalog, "MAX_SOURCE_FILES", 2)
        manifest = write_manifest("index.tsv", [
            ("a.fastq", "human"),
            ("b.fastq", "human"),
            ("c.fastq", "mouse"),
        ])

        with pytest.raises(IndexRangeError) as excinfo:
            load_source_files(manifest)

        assert "line 3" in str(excinfo.value)

    def test_width_limit_is_inclusive(self, write_manifest, monkeypatch):
        """Exactly MAX_SOURCE_FILES entries still load."""
        monkeypatch.setattr(catalog, "MAX_SOURCE_FILES", 2)
        manifest = write_manifest("index.tsv", [("a.fastq",), ("b.fastq",)])

        assert [s.index for s in load_source_files(manifest)] == [0, 1]


class TestQueryManifest:
    """Tests for the query manifest."""

    def test_parses_expected_categories(self, write_manifest):
        """The second column is a comma-delimited category list."""
        manifest = write_manifest("query.tsv", [
            ("q1.fastq", "human,mouse"),
            ("q2.fastq", "bacteria"),
        ])

        queries = load_query_files(manifest)

        assert queries[0].expected_categories == frozenset({"human", "mouse"})
        assert queries[1].expected_categories == frozenset({"bacteria"})

    def test_expected_categories_optional(self, write_manifest):
        """Without a second column nothing is expected."""
        manifest = write_manifest("query.tsv", [("q.fastq",)])

        queries = load_query_files(manifest)

        assert queries[0].expected_categories == frozenset()

    def test_parse_categories_drops_empty_labels(self):
        """Empty and whitespace-only labels are ignored."""
        assert parse_categories("human,, ,mouse ") == frozenset({"human", "mouse"})
        assert parse_categories("") == frozenset()

    def test_parse_categories_quoted_label(self):
        """A quoted label may contain a comma."""
        assert parse_categories('"homo sapiens, hg38",mouse') == frozenset(
            {"homo sapiens, hg38", "mouse"}
        )

    def test_rejects_non_utf8_query_manifest(self, temp_dir):
        """Undecodable category bytes are a malformed query manifest."""
        manifest = temp_dir / "query.tsv"
        manifest.write_bytes(b"q.fastq\thuman,m\xe9use\n")

        with pytest.raises(ManifestError):
            load_query_files(manifest)

    def test_unterminated_quote_is_malformed(self, temp_dir):
        """Broken quoting in the category list aborts loading."""
        manifest = temp_dir / "query.tsv"
        manifest.write_text('q.fastq\thuman,"mouse\n')

        with pytest.raises(ManifestError):
            load_query_files(manifest)


class TestFileCatalog:
    """Tests for the combined catalog."""

    def test_load_both_manifests(self, write_manifest):
        """FileCatalog.load reads source and query tables."""
        index = write_manifest("index.tsv", [("a.fastq", "human"), ("b.fastq",)])
        query = write_manifest("query.tsv", [("q.fastq", "human")])

        catalog = FileCatalog.load(index, query)

        assert len(catalog.sources) == 2
        assert len(catalog.queries) == 1
        assert catalog.source(1).path == "b.fastq"
        assert catalog.categories() == frozenset({"human"})
