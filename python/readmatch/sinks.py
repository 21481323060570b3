"""
Output Sinks - Lock-guarded result destinations shared by query workers.

    FoundSink          TSV rows: query path, rendered summary
    UncategorizedSink  TSV rows: query path, read id, matching source paths
    MissingSink        unmatched reads, verbatim FASTQ (gzip if path ends in .gz)

Each sink serializes its own writes; hashing and parsing in the workers
stay parallel. A lock that cannot be acquired within the configured
timeout raises SinkLockError instead of dropping or buffering the row.
"""

import csv
import gzip
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, Optional, Sequence

from .config import get_config, MatcherConfig
from .errors import SinkLockError
from .models import ReadRecord


logger = logging.getLogger(__name__)


class Sink:
    """Base class: one output file plus the lock that guards it."""

    name = "output"

    def __init__(self, path: Path | str, lock_timeout: Optional[float] = None):
        self.path = str(path)
        self.lock_timeout = lock_timeout
        self.rows_written = 0
        self._lock = threading.Lock()
        self._handle: IO | None = self._open()

    def _open(self) -> IO:
        raise NotImplementedError

    @contextmanager
    def exclusive(self) -> Iterator[IO]:
        """Hold the sink for the duration of one write."""
        timeout = -1 if self.lock_timeout is None else self.lock_timeout
        if not self._lock.acquire(timeout=timeout):
            raise SinkLockError(self.name, self.path)
        try:
            if self._handle is None:
                raise SinkLockError(self.name, self.path)
            yield self._handle
            self.rows_written += 1
        finally:
            self._lock.release()

    def close(self):
        with self._lock:
            if self._handle is not None:
                self._handle.close()
                self._handle = None


class _TsvSink(Sink):
    def _open(self) -> IO:
        handle = open(self.path, "w", newline="")
        self._writer = csv.writer(handle, delimiter="\t", lineterminator="\n")
        return handle

    def _write_row(self, row: Sequence[str]) -> None:
        with self.exclusive():
            self._writer.writerow(row)


class FoundSink(_TsvSink):
    """Per query file summary rows."""

    name = "found_reads"

    def write(self, query_path: str, summary: str) -> None:
        self._write_row((query_path, summary))


class UncategorizedSink(_TsvSink):
    """Reads whose matches all lack a category."""

    name = "uncategorized_reads"

    def write(self, query_path: str, read_id: str, source_paths: Sequence[str]) -> None:
        self._write_row((query_path, read_id, ",".join(source_paths)))


class MissingSink(Sink):
    """Reads absent from the index, written back as they were read."""

    name = "missing_reads"

    def _open(self) -> IO:
        if self.path.endswith(".gz"):
            return gzip.open(self.path, "wb")
        return open(self.path, "wb")

    def write(self, record: ReadRecord) -> None:
        with self.exclusive() as handle:
            handle.write(record.raw)


class OutputSinks:
    """
    The three result destinations of a query run.

    Usage:
        with OutputSinks.open(found, uncategorized, missing) as sinks:
            sinks.found.write("q.fastq", "human (1/1, 100.00%)")
    """

    def __init__(self, found: FoundSink, uncategorized: UncategorizedSink, missing: MissingSink):
        self.found = found
        self.uncategorized = uncategorized
        self.missing = missing

    @classmethod
    def open(
        cls,
        found_path: Path | str,
        uncategorized_path: Path | str,
        missing_path: Path | str,
        config: MatcherConfig | None = None,
    ) -> "OutputSinks":
        config = config or get_config()
        timeout = config.sink_lock_timeout
        opened = []
        try:
            for sink_cls, path in (
                (FoundSink, found_path),
                (UncategorizedSink, uncategorized_path),
                (MissingSink, missing_path),
            ):
                opened.append(sink_cls(path, lock_timeout=timeout))
        except OSError:
            for sink in opened:
                sink.close()
            raise
        return cls(*opened)

    def __enter__(self) -> "OutputSinks":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        for sink in (self.found, self.uncategorized, self.missing):
            sink.close()
        logger.debug(
            f"Closed sinks: {self.found.rows_written} found rows, "
            f"{self.uncategorized.rows_written} uncategorized rows, "
            f"{self.missing.rows_written} missing reads"
        )
