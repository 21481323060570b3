"""
Query Runner - Phase 2, classify every read of every query file.

Runs only after the index is complete. Each query file is one task on the
worker pool: its reads are fingerprinted and looked up, unmatched reads
go verbatim to the missing sink, matched reads are resolved to a single
category, and the file's summary is written to the found sink once the
file is exhausted.
"""

import logging
import random
import threading
import time
from typing import List, Sequence

from .config import get_config, MatcherConfig
from .hasher import Hasher
from .index import SequenceIndex
from .models import Classification, ClassificationResult, PhaseStats, QueryFile, SourceFile, Summary
from .reads import ReadStream
from .resolver import CategoryResolver
from .sinks import OutputSinks
from .telemetry import ProgressCounter, memory_report
from .workers import run_per_file


logger = logging.getLogger(__name__)


class QueryRunner:
    """
    Classifies query files against a finished SequenceIndex.

    Args:
        index: Index returned by the build phase (no longer written)
        sources: Source file table the index memberships refer to
        sinks: Output destinations
        config: Matcher configuration
        hasher: Must use the same algorithm as the build phase
    """

    def __init__(
        self,
        index: SequenceIndex,
        sources: Sequence[SourceFile],
        sinks: OutputSinks,
        config: MatcherConfig | None = None,
        hasher: Hasher | None = None,
        resolver: CategoryResolver | None = None,
    ):
        self.config = config or get_config()
        self.index = index
        self.sources = sources
        self.sinks = sinks
        self.hasher = hasher or Hasher(self.config)
        self.resolver = resolver or CategoryResolver(
            sources, rng=random.Random(self.config.seed)
        )
        self.stats = PhaseStats()
        self._stats_lock = threading.Lock()
        self._progress: ProgressCounter | None = None

    def run(self, queries: List[QueryFile]) -> PhaseStats:
        """
        Classify every query file and wait for all of them.

        Returns:
            Aggregated statistics for the query phase
        """
        start_time = time.monotonic()
        self._progress = ProgressCounter(len(queries))

        logger.info(f"Querying {len(queries)} files with {self.config.threads} threads")

        run_per_file(
            self.process_file,
            queries,
            threads=self.config.threads,
            thread_name_prefix="query",
        )

        self.stats.duration_seconds = time.monotonic() - start_time
        logger.info(
            f"Query complete: {self.stats.reads_seen} reads in "
            f"{self.stats.files_processed} files, "
            f"{self.stats.missing_reads} missing, "
            f"{self.stats.uncategorized_reads} uncategorized "
            f"in {self.stats.duration_seconds:.1f}s"
        )
        return self.stats

    def process_file(self, query: QueryFile) -> Summary:
        """Classify one query file and write its summary row."""
        self._report_start(query)

        summary = Summary(path=query.path)
        uncategorized = 0

        with ReadStream(query.path) as reads:
            for record in reads:
                matched = self.index.get(self.hasher.fingerprint(record.sequence))

                if matched is None:
                    logger.debug(f"{query.path}: read {record.read_id} not found in index")
                    self.sinks.missing.write(record)
                    summary.record(ClassificationResult.missing())
                    continue

                result = self.resolver.resolve(matched, query.expected_categories)
                if result.kind is Classification.UNCATEGORIZED:
                    uncategorized += 1
                    logger.debug(
                        f"Read {record.read_id} matches uncategorized file(s): "
                        f"{','.join(result.matched_paths)}"
                    )
                    self.sinks.uncategorized.write(query.path, record.read_id, result.matched_paths)
                summary.record(result)

            parse_errors = reads.parse_errors

        self.sinks.found.write(query.path, summary.render())

        with self._stats_lock:
            self.stats.files_processed += 1
            self.stats.reads_seen += summary.total
            self.stats.missing_reads += summary.missing
            self.stats.uncategorized_reads += uncategorized
            self.stats.parse_errors += parse_errors

        return summary

    def _report_start(self, query: QueryFile) -> None:
        if self._progress is None:
            return
        started = self._progress.increment()
        if self.config.progress:
            logger.info(
                f"Processing file {query.path} ({started}/{self._progress.total}), "
                f"memory usage={memory_report()}"
            )
