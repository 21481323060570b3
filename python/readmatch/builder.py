"""
Index Builder - Phase 1, fingerprint every read of every source file.

Source files are indexed independently on the worker pool, one file per
task. `build` returns only when all of them are done, so the index it
hands back is complete and will not be written again.
"""

import logging
import time
from typing import List

from .config import get_config, MatcherConfig
from .hasher import Hasher
from .index import SequenceIndex
from .models import PhaseStats, SourceFile
from .reads import ReadStream
from .telemetry import ProgressCounter, memory_report
from .workers import run_per_file


logger = logging.getLogger(__name__)


class SequenceIndexBuilder:
    """
    Builds a SequenceIndex from source files in parallel.

    Inserting the same sequence several times from one file collapses to
    a single membership; the same file listed twice in the manifest gets
    two memberships under its two indices.
    """

    def __init__(
        self,
        config: MatcherConfig | None = None,
        hasher: Hasher | None = None,
        index: SequenceIndex | None = None,
    ):
        self.config = config or get_config()
        self.hasher = hasher or Hasher(self.config)
        self.index = index if index is not None else SequenceIndex(self.config.shards)
        self.stats = PhaseStats()
        self._progress: ProgressCounter | None = None

    def build(self, sources: List[SourceFile]) -> SequenceIndex:
        """
        Index every source file and wait for all of them.

        Args:
            sources: Source files from the catalog

        Returns:
            The populated index (read-only from here on)
        """
        start_time = time.monotonic()
        self._progress = ProgressCounter(len(sources))

        logger.info(
            f"Indexing {len(sources)} files with {self.config.threads} threads "
            f"({self.hasher.algorithm} fingerprints)"
        )

        per_file = run_per_file(
            self.index_file,
            sources,
            threads=self.config.threads,
            thread_name_prefix="indexer",
        )

        for file_stats in per_file:
            self.stats.files_processed += 1
            self.stats.reads_seen += file_stats.reads_seen
            self.stats.parse_errors += file_stats.parse_errors
        self.stats.duration_seconds = time.monotonic() - start_time

        logger.info(
            f"Index complete: {len(self.index)} distinct sequences from "
            f"{self.stats.reads_seen} reads in {self.stats.duration_seconds:.1f}s"
        )
        return self.index

    def index_file(self, source: SourceFile) -> PhaseStats:
        """Stream one source file into the index."""
        file_stats = PhaseStats()
        fingerprint = self.hasher.fingerprint
        add = self.index.add

        with ReadStream(source.path) as reads:
            for record in reads:
                add(fingerprint(record.sequence), source.index)
                file_stats.reads_seen += 1
            file_stats.parse_errors = reads.parse_errors

        file_stats.files_processed = 1
        self._report(source, file_stats)
        return file_stats

    def _report(self, source: SourceFile, file_stats: PhaseStats) -> None:
        if self._progress is None:
            return
        done = self._progress.increment()
        if file_stats.parse_errors:
            logger.warning(
                f"{source.path}: skipped {file_stats.parse_errors} corrupt records"
            )
        if not self.config.progress:
            return
        logger.info(
            f"Indexing file {source.path} ({done}/{self._progress.total}), "
            f"total reads={len(self.index)}, memory usage={memory_report()}"
        )


def build_index(
    sources: List[SourceFile],
    config: MatcherConfig | None = None,
) -> SequenceIndex:
    """
    Convenience function to build an index.

    Usage:
        index = build_index(catalog.sources)
        print(f"{len(index)} distinct sequences")
    """
    return SequenceIndexBuilder(config).build(sources)
