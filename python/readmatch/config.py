"""
Matcher Configuration - Centralized settings for the read matcher.

Uses environment variables with sensible defaults. The worker count follows
the host core count unless THREADS (or READMATCH_THREADS) overrides it.
"""

import os
from dataclasses import dataclass
from typing import Optional


SUPPORTED_DIGESTS = ("sha1", "sha256", "blake2b", "xxh128")


@dataclass
class MatcherConfig:
    """
    Configuration for the two-phase index/query engine.

    Concurrency defaults are tuned for one worker per core; the index
    shard count only bounds lock contention during the build phase.
    """

    # --- Concurrency ---
    threads: int = 0                          # 0 = detected host core count
    shards: int = 64                          # Index partitions (one lock each)

    # --- Fingerprints ---
    digest: str = "sha1"                      # 20 byte digest, the historical width

    # --- Category resolution ---
    seed: Optional[int] = None                # Fixed seed for reproducible tie-breaks

    # --- Output sinks ---
    sink_lock_timeout: Optional[float] = None  # Seconds; None waits forever

    # --- Telemetry ---
    progress: bool = True                     # Per-file progress lines

    def __post_init__(self):
        """Resolve defaults and reject values the engine cannot run with."""
        if self.threads <= 0:
            self.threads = os.cpu_count() or 1
        if self.shards <= 0:
            raise ValueError(f"shards must be positive, got {self.shards}")
        self.digest = self.digest.lower()
        if self.digest not in SUPPORTED_DIGESTS:
            raise ValueError(
                f"Unsupported digest '{self.digest}' "
                f"(choose from {', '.join(SUPPORTED_DIGESTS)})"
            )
        if self.sink_lock_timeout is not None and self.sink_lock_timeout < 0:
            raise ValueError(
                f"sink_lock_timeout must be >= 0, got {self.sink_lock_timeout}"
            )

    @classmethod
    def from_env(cls) -> "MatcherConfig":
        """
        Create config from environment variables.

        Supported env vars:
            THREADS: Worker thread count
            READMATCH_THREADS: Worker thread count (takes precedence over THREADS)
            READMATCH_SHARDS: Number of index partitions
            READMATCH_DIGEST: Fingerprint algorithm (sha1, sha256, blake2b, xxh128)
            READMATCH_SEED: Integer seed for the category tie-break
            READMATCH_LOCK_TIMEOUT: Seconds to wait for an output sink
        """
        config = cls()

        if threads := os.environ.get("READMATCH_THREADS", os.environ.get("THREADS")):
            config.threads = int(threads)

        if shards := os.environ.get("READMATCH_SHARDS"):
            config.shards = int(shards)

        if digest := os.environ.get("READMATCH_DIGEST"):
            config.digest = digest

        if seed := os.environ.get("READMATCH_SEED"):
            config.seed = int(seed)

        if timeout := os.environ.get("READMATCH_LOCK_TIMEOUT"):
            config.sink_lock_timeout = float(timeout)

        config.__post_init__()
        return config


# Singleton default config
_default_config: MatcherConfig | None = None


def get_config() -> MatcherConfig:
    """Get the default configuration (singleton)."""
    global _default_config
    if _default_config is None:
        _default_config = MatcherConfig.from_env()
    return _default_config


def set_config(config: MatcherConfig | None) -> None:
    """Override the default configuration (for testing)."""
    global _default_config
    _default_config = config
