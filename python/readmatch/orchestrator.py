"""
Orchestrator - Main entry point for the read matcher.

Runs the two-phase engine:
- Phase 1: build the fingerprint index from every source file (parallel)
- Barrier: all indexing tasks joined, index is read-only from here on
- Phase 2: classify every query file against the index (parallel)

Any fatal error in any worker aborts the whole run; only corrupt records
are skipped in place.
"""

import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .builder import SequenceIndexBuilder
from .catalog import FileCatalog
from .config import get_config, MatcherConfig, set_config
from .errors import ReadMatchError, handle_error
from .hasher import Hasher
from .models import RunStats
from .runner import QueryRunner
from .sinks import OutputSinks


logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Drives catalog loading, index build and query classification.

    The manifests are validated before any output file is created, so a
    malformed manifest leaves no partial results behind.
    """

    def __init__(self, config: Optional[MatcherConfig] = None):
        self.config = config or get_config()
        if config:
            set_config(config)
        self._hasher = Hasher(self.config)

    def run(
        self,
        index_manifest: Path | str,
        query_manifest: Path | str,
        found_out: Path | str,
        uncategorized_out: Path | str,
        missing_out: Path | str,
    ) -> RunStats:
        """
        Run a full index + query pass.

        Args:
            index_manifest: TSV of (source fastq, optional category)
            query_manifest: TSV of (query fastq, optional expected categories)
            found_out: Destination for per query file summaries
            uncategorized_out: Destination for reads matching only uncategorized files
            missing_out: Destination for reads absent from the index

        Returns:
            Statistics about the run
        """
        start_time = time.monotonic()
        stats = RunStats()

        catalog = FileCatalog.load(index_manifest, query_manifest)
        stats.source_files = len(catalog.sources)
        stats.query_files = len(catalog.queries)

        with OutputSinks.open(found_out, uncategorized_out, missing_out, self.config) as sinks:
            # ═══════════════════════════════════════════════════════════════
            # PHASE 1: BUILD (fingerprint every source read)
            # ═══════════════════════════════════════════════════════════════
            logger.info("Phase 1/2: Building sequence index...")
            builder = SequenceIndexBuilder(self.config, hasher=self._hasher)
            index = builder.build(catalog.sources)
            stats.build = builder.stats
            stats.distinct_fingerprints = len(index)

            # ═══════════════════════════════════════════════════════════════
            # PHASE 2: QUERY (classify every query read)
            # ═══════════════════════════════════════════════════════════════
            logger.info("Phase 2/2: Classifying query reads...")
            runner = QueryRunner(
                index,
                catalog.sources,
                sinks,
                self.config,
                hasher=self._hasher,
            )
            stats.query = runner.run(catalog.queries)

        stats.duration_seconds = time.monotonic() - start_time
        logger.info(str(stats))
        return stats


def run_matcher(
    index_manifest: Path | str,
    query_manifest: Path | str,
    found_out: Path | str,
    uncategorized_out: Path | str,
    missing_out: Path | str,
    config: Optional[MatcherConfig] = None,
) -> RunStats:
    """
    Convenience function to run a full pass.

    Usage:
        stats = run_matcher("index.tsv", "query.tsv", "found.tsv",
                            "uncategorized.tsv", "missing.fastq")
        print(stats)
    """
    return Orchestrator(config).run(
        index_manifest, query_manifest, found_out, uncategorized_out, missing_out
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="readmatch",
        description="Match query FASTQ reads against indexed FASTQ files by exact sequence",
    )
    parser.add_argument("to_index_fastq_files", help="TSV of FASTQ files to index: path [category]")
    parser.add_argument("query_fastq_files", help="TSV of FASTQ files to query: path [expected,categories]")
    parser.add_argument("found_reads_out", help="Output TSV of per query file category summaries")
    parser.add_argument("uncategorized_reads_out", help="Output TSV of reads matching only uncategorized files")
    parser.add_argument("missing_reads_out", help="Output FASTQ of reads absent from the index")
    parser.add_argument("--threads", "-t", type=int, help="Worker threads (default: THREADS or core count)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s"
    )

    try:
        config = MatcherConfig.from_env()
        if args.threads:
            config.threads = args.threads
            config.__post_init__()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        Orchestrator(config).run(
            args.to_index_fastq_files,
            args.query_fastq_files,
            args.found_reads_out,
            args.uncategorized_reads_out,
            args.missing_reads_out,
        )
    except (ReadMatchError, OSError) as e:
        handle_error(e, context="readmatch")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
