"""
In-memory reverse DNS cache with background resolution
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from types import MappingProxyType
from typing import Mapping, Optional

from .config import DEFAULT_RESOLVER_WORKERS
from .enrichment.ptr_resolver import PTRResolver
from .models import Resolution


logger = logging.getLogger(__name__)


class ResolutionCache:
    """
    Concurrent address -> Resolution map.

    The first caller to reserve an address gets to schedule its lookup;
    everyone else sees the existing entry. Lookups run on a thread pool
    owned by the cache and are never awaited by the scan. Entries are
    never removed, so results carry over from one analysis run to the next.
    """

    def __init__(self, resolver: Optional[PTRResolver] = None,
                 max_workers: int = DEFAULT_RESOLVER_WORKERS):
        self.resolver = resolver or PTRResolver()
        self.max_workers = max_workers
        self._entries: dict[str, Resolution] = {}
        self._lock = threading.Lock()
        self._futures: set[Future] = set()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix='loglens-resolve'
        )

    def lookup_or_reserve(self, ip: str) -> bool:
        """
        Insert a pending marker for `ip` if it has no entry yet.

        Returns:
            True if this call created the entry (caller owns the lookup),
            False if an entry was already present
        """
        with self._lock:
            if ip in self._entries:
                return False
            self._entries[ip] = Resolution.pending()
            return True

    def resolve(self, ip: str) -> Resolution:
        """
        Reverse lookup `ip` and store the outcome, overwriting any prior entry.

        A failed lookup is stored as Resolution.unknown().
        """
        try:
            hostname = self.resolver.resolve(ip)
        except Exception:
            logger.exception("Reverse lookup for %s raised", ip)
            hostname = None

        result = Resolution.resolved(hostname) if hostname else Resolution.unknown()
        with self._lock:
            self._entries[ip] = result
        return result

    def submit(self, ip: str) -> Optional[Future]:
        """Schedule a background lookup for `ip`"""
        try:
            future = self._executor.submit(self.resolve, ip)
        except RuntimeError:
            # pool already shut down; leave the entry pending
            logger.debug("Resolver pool closed, not resolving %s", ip)
            return None

        with self._lock:
            self._futures.add(future)
        future.add_done_callback(self._forget)
        return future

    def request(self, ip: str) -> bool:
        """Reserve `ip` and schedule its lookup if this is the first sighting"""
        if self.lookup_or_reserve(ip):
            self.submit(ip)
            return True
        return False

    def _forget(self, future: Future):
        with self._lock:
            self._futures.discard(future)

    def get(self, ip: str) -> Optional[Resolution]:
        """Non-blocking read: Resolution (possibly pending) or None if absent"""
        with self._lock:
            return self._entries.get(ip)

    def get_hostname(self, ip: str) -> Optional[str]:
        """Resolved hostname, None if pending, unknown or absent"""
        entry = self.get(ip)
        if entry is not None and entry.hostname:
            return entry.hostname
        return None

    def snapshot(self) -> Mapping[str, Resolution]:
        """Immutable copy of all entries"""
        with self._lock:
            return MappingProxyType(dict(self._entries))

    def pending_count(self) -> int:
        with self._lock:
            return sum(1 for r in self._entries.values() if r.is_pending)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until in-flight lookups finish or `timeout` expires.

        Returns:
            True if nothing is left in flight
        """
        with self._lock:
            futures = list(self._futures)
        if not futures:
            return True
        _, not_done = wait_futures(futures, timeout=timeout)
        return not not_done

    def close(self, wait: bool = False):
        """Shutdown the lookup pool, dropping queued lookups"""
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, ip: str) -> bool:
        with self._lock:
            return ip in self._entries

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
