"""
Thread-safe hit counter keyed by client address
"""

import threading
from types import MappingProxyType
from typing import Mapping


class HitCounter:
    """
    Concurrent address -> hit count map.

    All updates go through a single short-lived lock around the dict
    update, so increments from any number of scanner threads are never
    lost. Readers get copies, never the live dict.
    """

    def __init__(self):
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, ip: str, amount: int = 1) -> int:
        """
        Add `amount` hits for `ip`, creating the entry at zero if absent.

        Returns:
            The count after the update
        """
        with self._lock:
            count = self._counts.get(ip, 0) + amount
            self._counts[ip] = count
            return count

    def reset(self):
        """Drop all entries"""
        with self._lock:
            self._counts = {}

    def snapshot(self) -> Mapping[str, int]:
        """Immutable copy of the counts as of this instant"""
        with self._lock:
            return MappingProxyType(dict(self._counts))

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

    def __contains__(self, ip: str) -> bool:
        with self._lock:
            return ip in self._counts
