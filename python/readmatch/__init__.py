"""
readmatch - Exact-sequence read matching between FASTQ file sets.

Modules:
    - config: Centralized configuration (env overrides, THREADS)
    - errors: Error taxonomy and handling policies
    - catalog: Index and query manifest loading
    - reads: FASTQ record streams with skip-and-retry on corrupt records
    - hasher: Sequence fingerprints (SHA-1 by default)
    - index: Sharded concurrent fingerprint table
    - builder: Phase 1, parallel index construction
    - resolver: Category resolution with randomized tie-break
    - runner: Phase 2, parallel query classification
    - sinks: Lock-guarded result destinations
    - orchestrator: Main entry point

Flow:
    Catalog → Build (parallel) → barrier → Query (parallel) → Resolve → Sinks

Usage:
    from readmatch import Orchestrator

    stats = Orchestrator().run("index.tsv", "query.tsv",
                               "found.tsv", "uncategorized.tsv", "missing.fastq")
"""

from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]
