"""
Sequence Index - Sharded fingerprint -> source file membership table.

The table lives through two strictly separated phases. During the build
phase many workers call `add` concurrently; each shard has its own lock,
so two workers never race on the same fingerprint entry. During the
query phase the table is only read and `get` takes no lock. The switch
between phases is the caller's barrier, not something the index enforces.
"""

import bisect
import threading
from typing import Dict, List, Optional, Tuple


class SequenceIndex:
    """
    Concurrent fingerprint table.

    Memberships are kept sorted and duplicate-free, so adding the same
    (fingerprint, file) pair twice is a no-op. Nothing is ever evicted.
    """

    def __init__(self, shards: int = 64):
        if shards <= 0:
            raise ValueError(f"shards must be positive, got {shards}")
        self._shard_count = shards
        self._tables: List[Dict[bytes, List[int]]] = [{} for _ in range(shards)]
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(shards)]

    def _shard(self, fingerprint: bytes) -> int:
        # Partition by key prefix; digests are uniformly distributed
        return int.from_bytes(fingerprint[:4], "big") % self._shard_count

    def add(self, fingerprint: bytes, file_index: int) -> bool:
        """
        Record that `file_index` contains a read with this fingerprint.

        Returns:
            True if the membership was new
        """
        shard = self._shard(fingerprint)
        with self._locks[shard]:
            members = self._tables[shard].get(fingerprint)
            if members is None:
                self._tables[shard][fingerprint] = [file_index]
                return True
            pos = bisect.bisect_left(members, file_index)
            if pos < len(members) and members[pos] == file_index:
                return False
            members.insert(pos, file_index)
            return True

    def get(self, fingerprint: bytes) -> Optional[Tuple[int, ...]]:
        """Source file indices containing the fingerprint, or None."""
        members = self._tables[self._shard(fingerprint)].get(fingerprint)
        return tuple(members) if members is not None else None

    def __contains__(self, fingerprint: bytes) -> bool:
        return fingerprint in self._tables[self._shard(fingerprint)]

    def __len__(self) -> int:
        # Approximate while writers are active; exact after the barrier
        return sum(len(table) for table in self._tables)

    @property
    def shard_count(self) -> int:
        return self._shard_count

    def shard_sizes(self) -> List[int]:
        return [len(table) for table in self._tables]
