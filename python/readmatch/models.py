"""
Data Models - Type definitions for the read matching pipeline.

These dataclasses represent the data flowing between the catalog, the two
engine phases and the output sinks.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
from enum import Enum


# Reserved summary bucket for reads that only match uncategorized files
UNCATEGORIZED = ""


@dataclass(frozen=True)
class SourceFile:
    """A file contributing reads to the index during the build phase."""
    index: int
    path: str
    category: str = UNCATEGORIZED

    @property
    def is_categorized(self) -> bool:
        return self.category != UNCATEGORIZED


@dataclass(frozen=True)
class QueryFile:
    """A file whose reads are checked against the index."""
    index: int
    path: str
    expected_categories: frozenset = frozenset()


@dataclass(frozen=True)
class ReadRecord:
    """
    One sequencing read.

    `sequence` is the raw sequence line (no case folding or trimming) and
    `raw` the record exactly as it appeared in the file, newline terminated.
    """
    read_id: str
    sequence: bytes
    raw: bytes


class Classification(Enum):
    """Outcome for a single query read."""
    EXPECTED = "expected"           # Matched a category the query file accepts
    UNEXPECTED = "unexpected"       # Matched only categories outside the accepted set
    UNCATEGORIZED = "uncategorized" # Matched only files without a category
    MISSING = "missing"             # Sequence absent from the index


@dataclass(frozen=True)
class ClassificationResult:
    """Result of classifying one query read."""
    kind: Classification
    category: Optional[str] = None
    matched_paths: Tuple[str, ...] = ()

    @classmethod
    def missing(cls) -> "ClassificationResult":
        return cls(kind=Classification.MISSING)

    @property
    def bucket(self) -> Optional[str]:
        """Summary bucket this result is counted in (None for missing reads)."""
        if self.kind is Classification.MISSING:
            return None
        if self.kind is Classification.UNCATEGORIZED:
            return UNCATEGORIZED
        return self.category


@dataclass
class Summary:
    """
    Per query file category counts.

    `total` counts every parsed read, including the ones sent to the
    missing sink, so the rendered percentages are relative to the file.
    """
    path: str
    counts: Dict[str, int] = field(default_factory=dict)
    total: int = 0
    missing: int = 0

    def record(self, result: ClassificationResult) -> None:
        """Account for one classified read."""
        self.total += 1
        bucket = result.bucket
        if bucket is None:
            self.missing += 1
        else:
            self.counts[bucket] = self.counts.get(bucket, 0) + 1

    @property
    def found(self) -> int:
        return sum(self.counts.values())

    def percentage(self, category: str) -> float:
        if self.total == 0:
            return 0.0
        return self.counts.get(category, 0) / self.total * 100.0

    def render(self) -> str:
        """Render as `category (count/total, pct%)` entries, sorted by category."""
        entries = []
        for category in sorted(self.counts):
            label = category if category != UNCATEGORIZED else "other"
            entries.append(
                f"{label} ({self.counts[category]}/{self.total}, "
                f"{self.percentage(category):.2f}%)"
            )
        return ", ".join(entries)


@dataclass
class PhaseStats:
    """Statistics from one engine phase."""
    files_processed: int = 0
    reads_seen: int = 0
    parse_errors: int = 0
    missing_reads: int = 0
    uncategorized_reads: int = 0
    duration_seconds: float = 0.0


@dataclass
class RunStats:
    """Statistics from a full index + query run."""
    source_files: int = 0
    query_files: int = 0
    distinct_fingerprints: int = 0
    build: PhaseStats = field(default_factory=PhaseStats)
    query: PhaseStats = field(default_factory=PhaseStats)
    duration_seconds: float = 0.0

    def __str__(self) -> str:
        return (
            f"Indexed {self.source_files} files "
            f"({self.build.reads_seen} reads, "
            f"{self.distinct_fingerprints} distinct sequences), "
            f"queried {self.query_files} files "
            f"({self.query.reads_seen} reads, "
            f"{self.query.missing_reads} missing, "
            f"{self.query.uncategorized_reads} uncategorized, "
            f"{self.build.parse_errors + self.query.parse_errors} parse errors) "
            f"in {self.duration_seconds:.1f}s"
        )
