"""
Telemetry - Best-effort progress counters and memory usage.

Nothing here is load-bearing: counters are relaxed, and memory figures
come from psutil's view of the current process.
"""

import itertools

import psutil


class ProgressCounter:
    """
    Process-wide completion counter shared by pool workers.

    `next()` on itertools.count is atomic under the GIL, which is all
    the ordering guarantee progress lines need.
    """

    def __init__(self, total: int):
        self.total = total
        self._counter = itertools.count(1)
        self._last = 0

    def increment(self) -> int:
        """Bump the counter and return the new value."""
        value = next(self._counter)
        self._last = value
        return value

    @property
    def value(self) -> int:
        return self._last


def memory_usage() -> int:
    """Resident set size of this process, in bytes."""
    return psutil.Process().memory_info().rss


_SI_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_bytes(num_bytes: int) -> str:
    """Render a byte count with the largest fitting SI unit, e.g. "1.50 MB"."""
    if abs(num_bytes) < 1000:
        return f"{num_bytes} B"
    value = float(num_bytes)
    for unit in _SI_UNITS[1:]:
        value /= 1000
        if abs(value) < 1000 or unit == _SI_UNITS[-1]:
            break
    return f"{value:.2f} {unit}"


def memory_report() -> str:
    """Current memory usage, rendered for progress lines."""
    return format_bytes(memory_usage())
