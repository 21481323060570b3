"""
File Catalog - Loads the index and query manifests.

Both manifests are tab-delimited without a header:

    index manifest:  <fastq path> [<category>]
    query manifest:  <fastq path> [<expected,categories>]

Any malformed row aborts the run before a single read is processed.
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple

from .errors import IndexRangeError, ManifestError
from .models import QueryFile, SourceFile, UNCATEGORIZED


logger = logging.getLogger(__name__)

# Source file indices are stored as unsigned 32-bit values
MAX_SOURCE_FILES = 2 ** 32


def _manifest_rows(manifest: Path | str) -> Iterator[Tuple[int, List[str]]]:
    """Yield (line number, stripped columns) for every non-blank row."""
    with open(manifest, newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle, delimiter="\t", strict=True)
        try:
            for row in reader:
                columns = [column.strip() for column in row]
                if not any(columns):
                    continue
                if len(columns) > 2:
                    raise ManifestError(
                        manifest, reader.line_num,
                        f"expected at most 2 columns, found {len(columns)}"
                    )
                if not columns[0]:
                    raise ManifestError(manifest, reader.line_num, "empty file path")
                yield reader.line_num, columns
        except csv.Error as e:
            raise ManifestError(manifest, reader.line_num, str(e)) from e
        except UnicodeDecodeError as e:
            raise ManifestError(
                manifest, reader.line_num, f"not valid UTF-8 text ({e.reason})"
            ) from e


def parse_categories(field: str) -> frozenset:
    """
    Split a comma-delimited category list.

    The list is parsed as a CSV record so a quoted label may itself
    contain a comma. Empty labels are dropped.
    """
    if not field:
        return frozenset()
    labels = next(csv.reader([field], strict=True), [])
    return frozenset(label.strip() for label in labels if label.strip())


def load_source_files(manifest: Path | str) -> List[SourceFile]:
    """
    Load the index manifest.

    Args:
        manifest: Tab-delimited file of (path, optional category)

    Returns:
        SourceFile list; indices follow manifest order starting at 0
    """
    sources: List[SourceFile] = []
    for line_num, columns in _manifest_rows(manifest):
        index = len(sources)
        if index >= MAX_SOURCE_FILES:
            raise IndexRangeError(
                f"{manifest}, line {line_num}: more than {MAX_SOURCE_FILES} source files"
            )
        category = columns[1] if len(columns) > 1 else UNCATEGORIZED
        sources.append(SourceFile(index=index, path=columns[0], category=category))

    if not sources:
        raise ManifestError(manifest, 0, "no source files listed")

    categorized = sum(1 for s in sources if s.is_categorized)
    logger.info(
        f"Loaded {len(sources)} source files from {manifest} "
        f"({categorized} categorized)"
    )
    return sources


def load_query_files(manifest: Path | str) -> List[QueryFile]:
    """
    Load the query manifest.

    Args:
        manifest: Tab-delimited file of (path, optional expected categories)

    Returns:
        QueryFile list in manifest order
    """
    queries: List[QueryFile] = []
    for line_num, columns in _manifest_rows(manifest):
        try:
            expected = parse_categories(columns[1]) if len(columns) > 1 else frozenset()
        except csv.Error as e:
            raise ManifestError(manifest, line_num, f"bad category list: {e}") from e
        queries.append(QueryFile(
            index=len(queries),
            path=columns[0],
            expected_categories=expected,
        ))

    if not queries:
        raise ManifestError(manifest, 0, "no query files listed")

    logger.info(f"Loaded {len(queries)} query files from {manifest}")
    return queries


@dataclass
class FileCatalog:
    """Source and query file tables for one run."""
    sources: List[SourceFile]
    queries: List[QueryFile]

    @classmethod
    def load(cls, index_manifest: Path | str, query_manifest: Path | str) -> "FileCatalog":
        return cls(
            sources=load_source_files(index_manifest),
            queries=load_query_files(query_manifest),
        )

    def source(self, index: int) -> SourceFile:
        return self.sources[index]

    def categories(self) -> frozenset:
        """All non-empty categories carried by source files."""
        return frozenset(s.category for s in self.sources if s.is_categorized)
