"""
Runner Tests - Verify the query phase against a built index.

Tests:
- Partition completeness per query file
- Missing reads routed verbatim
- Uncategorized reads routed with matching paths
- Failures abort the phase
"""

import pytest

from readmatch.builder import build_index
from readmatch.models import QueryFile, SourceFile
from readmatch.runner import QueryRunner
from readmatch.sinks import OutputSinks


@pytest.fixture
def sources(write_fastq):
    human = write_fastq("human.fastq", [("H1", "AAAA"), ("H2", "CCCC"), ("S1", "GATC")])
    bacteria = write_fastq("bacteria.fastq", [("B1", "GGGG"), ("S1", "GATC")])
    plain = write_fastq("plain.fastq", [("P1", "TGCA")])
    return [
        SourceFile(0, str(human), "human"),
        SourceFile(1, str(bacteria), "bacteria"),
        SourceFile(2, str(plain), ""),
    ]


@pytest.fixture
def sinks(output_paths, test_config):
    s = OutputSinks.open(
        output_paths["found"],
        output_paths["uncategorized"],
        output_paths["missing"],
        test_config,
    )
    yield s
    s.close()


class TestQueryRunner:
    """Tests for QueryRunner."""

    def test_partition_completeness(self, sources, sinks, write_fastq, test_config):
        """Every read lands in exactly one bucket."""
        index = build_index(sources, test_config)
        query = write_fastq("q.fastq", [
            ("Q1", "AAAA"),  # expected human
            ("Q2", "GGGG"),  # unexpected bacteria
            ("Q3", "TGCA"),  # uncategorized
            ("Q4", "TTTT"),  # missing
            ("Q5", "GATC"),  # human and bacteria, human expected
        ])
        runner = QueryRunner(index, sources, sinks, test_config)

        summary = runner.process_file(QueryFile(0, str(query), frozenset({"human"})))

        assert summary.total == 5
        assert summary.counts == {"human": 2, "bacteria": 1, "": 1}
        assert summary.missing == 1
        assert summary.found + summary.missing == summary.total

    def test_outputs(self, sources, sinks, write_fastq, output_paths, test_config):
        """Missing, uncategorized and found rows are written."""
        index = build_index(sources, test_config)
        query = write_fastq("q.fastq", [("Q1", "AAAA"), ("Q3", "TGCA"), ("Q4", "TTTT")])
        runner = QueryRunner(index, sources, sinks, test_config)

        stats = runner.run([QueryFile(0, str(query), frozenset({"human"}))])
        sinks.close()

        assert stats.files_processed == 1
        assert stats.reads_seen == 3
        assert stats.missing_reads == 1
        assert stats.uncategorized_reads == 1

        assert output_paths["missing"].read_bytes() == b"@Q4\nTTTT\n+\nIIII\n"
        assert output_paths["uncategorized"].read_text() == (
            f"{query}\tQ3\t{sources[2].path}\n"
        )
        assert output_paths["found"].read_text() == (
            f"{query}\tother (1/3, 33.33%), human (1/3, 33.33%)\n"
        )

    def test_many_query_files(self, sources, sinks, write_fastq, output_paths, test_config):
        """Each query file gets exactly one found row."""
        index = build_index(sources, test_config)
        queries = [
            QueryFile(i, str(write_fastq(f"q{i}.fastq", [("R", "AAAA")])), frozenset({"human"}))
            for i in range(10)
        ]

        QueryRunner(index, sources, sinks, test_config).run(queries)
        sinks.close()

        rows = output_paths["found"].read_text().splitlines()
        assert len(rows) == 10
        assert all(row.endswith("\thuman (1/1, 100.00%)") for row in rows)

    def test_empty_query_file(self, sources, sinks, write_fastq, output_paths, test_config):
        """A zero-read query file yields an empty summary row."""
        index = build_index(sources, test_config)
        query = write_fastq("empty.fastq", raw=b"")

        summary = QueryRunner(index, sources, sinks, test_config).process_file(
            QueryFile(0, str(query))
        )
        sinks.close()

        assert summary.total == 0
        assert output_paths["found"].read_text() == f"{query}\t\n"

    def test_missing_query_file_aborts(self, sources, sinks, write_fastq, temp_dir, test_config):
        """An unreadable query file aborts the phase."""
        index = build_index(sources, test_config)
        good = write_fastq("q.fastq", [("Q1", "AAAA")])
        queries = [
            QueryFile(0, str(good)),
            QueryFile(1, str(temp_dir / "absent.fastq")),
        ]

        with pytest.raises(FileNotFoundError):
            QueryRunner(index, sources, sinks, test_config).run(queries)
