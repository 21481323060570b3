"""
Hasher - Sequence fingerprints used as exact-match content keys.

A fingerprint is the digest of a read's raw sequence bytes, with no case
folding or trimming. SHA-1 (20 bytes) is the default; xxHash's 128-bit
variant is available when speed matters more than collision resistance.
Collisions are treated as identical sequences.
"""

import hashlib
from typing import Callable, Dict

import xxhash

from .config import get_config, MatcherConfig


_DIGESTS: Dict[str, Callable[[bytes], bytes]] = {
    "sha1": lambda data: hashlib.sha1(data).digest(),
    "sha256": lambda data: hashlib.sha256(data).digest(),
    "blake2b": lambda data: hashlib.blake2b(data, digest_size=20).digest(),
    "xxh128": lambda data: xxhash.xxh3_128_digest(data),
}

DIGEST_SIZES: Dict[str, int] = {
    "sha1": 20,
    "sha256": 32,
    "blake2b": 20,
    "xxh128": 16,
}


class Hasher:
    """
    Computes sequence fingerprints.

    Instances are stateless apart from the selected algorithm and can be
    shared freely between worker threads.
    """

    def __init__(self, config: MatcherConfig | None = None):
        self.config = config or get_config()
        self.algorithm = self.config.digest
        self._digest = _DIGESTS[self.algorithm]

    @property
    def digest_size(self) -> int:
        return DIGEST_SIZES[self.algorithm]

    def fingerprint(self, sequence: bytes) -> bytes:
        """Digest of the raw sequence bytes."""
        return self._digest(sequence)

    def __repr__(self) -> str:
        return f"Hasher({self.algorithm})"


def fingerprint(sequence: bytes, algorithm: str = "sha1") -> bytes:
    """
    Convenience function to fingerprint one sequence.

    Usage:
        key = fingerprint(record.sequence)
    """
    return _DIGESTS[algorithm](sequence)
