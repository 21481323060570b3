"""
Test Configuration - Shared fixtures for read matcher tests.

Uses pytest fixtures to create isolated test environments with small
FASTQ files and manifests on disk.
"""

import gzip
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator, Iterable, Sequence, Tuple

import pytest

from readmatch.config import MatcherConfig, set_config


def fastq_bytes(reads: Iterable[Tuple[str, str]]) -> bytes:
    """Render (read id, sequence) pairs as FASTQ with constant qualities."""
    lines = []
    for read_id, seq in reads:
        lines.append(f"@{read_id}\n{seq}\n+\n{'I' * len(seq)}\n")
    return "".join(lines).encode()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="readmatch_test_")
    resolved = Path(tmp).resolve()
    yield resolved
    shutil.rmtree(str(resolved), ignore_errors=True)


@pytest.fixture
def test_config() -> Generator[MatcherConfig, None, None]:
    """Create an isolated test configuration."""
    config = MatcherConfig(
        threads=3,
        shards=8,
        seed=1234,
        progress=True,
    )
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def write_fastq(temp_dir: Path) -> Callable[..., Path]:
    """
    Factory writing a FASTQ file into temp_dir.

    Usage:
        path = write_fastq("a.fastq", [("R1", "ACGT")])
        path = write_fastq("b.fastq.gz", [("R1", "ACGT")])
        path = write_fastq("c.fastq", raw=b"@R1\\nACGT\\n+\\nIIII\\n")
    """
    def _write(name: str, reads: Sequence[Tuple[str, str]] = (), raw: bytes | None = None) -> Path:
        path = temp_dir / name
        data = raw if raw is not None else fastq_bytes(reads)
        if name.endswith(".gz"):
            with gzip.open(path, "wb") as handle:
                handle.write(data)
        else:
            path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def write_manifest(temp_dir: Path) -> Callable[[str, Sequence[Sequence[object]]], Path]:
    """Factory writing a tab-delimited manifest into temp_dir."""
    def _write(name: str, rows: Sequence[Sequence[object]]) -> Path:
        path = temp_dir / name
        path.write_text("".join("\t".join(str(c) for c in row) + "\n" for row in rows))
        return path

    return _write


@pytest.fixture
def output_paths(temp_dir: Path) -> dict[str, Path]:
    """Destinations for the three result sinks."""
    return {
        "found": temp_dir / "found.tsv",
        "uncategorized": temp_dir / "uncategorized.tsv",
        "missing": temp_dir / "missing.fastq",
    }
