"""
Read Streams - FASTQ record framing over plain or gzip-compressed files.

Compression is detected from the `.gz` suffix. A corrupt record raises
RecordParseError; the lines it spanned are consumed, so the next read
resumes right after them. ReadStream turns that into the skip-and-retry
loop used by both engine phases: log, skip, keep reading until a valid
record or end of stream.
"""

import gzip
import zlib
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from .errors import ErrorAction, RecordParseError, handle_error
from .models import ReadRecord


def is_gzipped(path: Path | str) -> bool:
    return str(path).endswith(".gz")


def open_reads(path: Path | str) -> BinaryIO:
    """Open a read file for binary streaming, decompressing `.gz` files."""
    if is_gzipped(path):
        # Handles multi-member (bgzip / concatenated) archives
        return gzip.open(path, "rb")
    return open(path, "rb")


def _terminated(line: bytes) -> bytes:
    return line if line.endswith(b"\n") else line + b"\n"


class FastqReader:
    """
    Pull-style FASTQ reader.

    `read()` returns the next record, or None at end of stream. Record
    numbers count every attempt (valid or not) starting at 1.
    """

    def __init__(self, handle: BinaryIO, path: Path | str = "<stream>"):
        self._handle = handle
        self.path = str(path)
        self.record_num = 0

    def _readline(self) -> Optional[bytes]:
        try:
            line = self._handle.readline()
        except (zlib.error, EOFError) as e:
            raise OSError(f"Decompression failed for {self.path}: {e}") from e
        return line or None

    def _fail(self, reason: str) -> RecordParseError:
        return RecordParseError(self.path, self.record_num, reason)

    def read(self) -> Optional[ReadRecord]:
        header = self._readline()
        while header is not None and not header.strip():
            header = self._readline()
        if header is None:
            return None

        self.record_num += 1
        if not header.startswith(b"@"):
            raise self._fail("expected '@' at start of record")

        sequence = self._readline()
        separator = self._readline()
        quality = self._readline()
        if quality is None:
            raise self._fail("incomplete record at end of stream")
        if not separator.startswith(b"+"):
            raise self._fail("expected '+' separator line")

        seq = sequence.rstrip(b"\r\n")
        qual = quality.rstrip(b"\r\n")
        if len(seq) != len(qual):
            raise self._fail(
                f"sequence length {len(seq)} does not match quality length {len(qual)}"
            )

        fields = header[1:].split(maxsplit=1)
        read_id = fields[0].decode("utf-8", errors="replace") if fields else ""

        return ReadRecord(
            read_id=read_id,
            sequence=seq,
            raw=b"".join(_terminated(line) for line in (header, sequence, separator, quality)),
        )


class ReadStream:
    """
    Iterate the valid records of one read file.

    Parse failures are logged and skipped; the count is kept in
    `parse_errors`. There is no cap on how many records are skipped, a
    file of corrupt trailing bytes is read through to the end.

    Usage:
        with ReadStream(path) as reads:
            for record in reads:
                ...
    """

    def __init__(self, path: Path | str):
        self.path = str(path)
        self.parse_errors = 0
        self._handle: BinaryIO | None = None
        self._reader: FastqReader | None = None

    def __enter__(self) -> "ReadStream":
        self._handle = open_reads(self.path)
        self._reader = FastqReader(self._handle, self.path)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __iter__(self) -> Iterator[ReadRecord]:
        if self._reader is None:
            raise RuntimeError(f"ReadStream for {self.path} is not open")
        while True:
            try:
                record = self._reader.read()
            except RecordParseError as e:
                if handle_error(e, self.path) is not ErrorAction.SKIP:
                    raise
                self.parse_errors += 1
                continue
            if record is None:
                return
            yield record

    @property
    def records_read(self) -> int:
        """Records attempted so far, valid or not."""
        return self._reader.record_num if self._reader else 0

    def close(self):
        if self._handle is not None:
            self._handle.close()
            self._handle = None
