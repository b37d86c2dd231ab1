"""
Parallel chunk scanner
"""

import logging
import os
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Iterable, Optional

from ..cache import ResolutionCache
from ..counter import HitCounter
from ..models import Chunk, ChunkStats, FieldLayout
from .parser import LineParser, split_lines


logger = logging.getLogger(__name__)


class ParallelScanner:
    """
    Fan chunks out to a worker pool that counts client addresses.

    Every chunk gets its own task. Each task decodes its buffer, counts
    the address of each non-comment line into the shared HitCounter and
    asks the ResolutionCache to look up addresses seen for the first time.
    scan() returns once every chunk task is done; reverse lookups keep
    running in the cache's own pool.
    """

    def __init__(
        self,
        counter: HitCounter,
        cache: Optional[ResolutionCache] = None,
        layout: Optional[FieldLayout] = None,
        max_workers: Optional[int] = None
    ):
        self.counter = counter
        self.cache = cache
        self.parser = LineParser(layout)
        if max_workers is None:
            max_workers = os.cpu_count() or 4
        self.max_workers = max_workers
        if self.max_workers <= 0:
            raise ValueError(f"Worker count must be positive, got {self.max_workers}")
        # chunks held in memory at once
        self.max_pending = self.max_workers * 2

    def scan_chunk(self, chunk: Chunk, column: Optional[int]) -> ChunkStats:
        """
        Count the addresses of one chunk.

        Args:
            chunk: Line-aligned buffer
            column: IP column in force at the chunk's first byte (None
                under a header without the IP field)

        Returns:
            ChunkStats for the chunk
        """
        stats = ChunkStats(index=chunk.index)
        text = chunk.data.decode(self.parser.encoding, errors='replace')

        for line in split_lines(text):
            if not line or line.isspace():
                continue

            if self.parser.is_comment(line):
                if self.parser.is_header(line):
                    column = self.parser.header_column(line)
                continue

            stats.lines += 1
            ip = self.parser.extract(line, column)
            if ip is None:
                stats.skipped += 1
                continue

            self.counter.increment(ip)
            if self.cache is not None:
                self.cache.request(ip)
            stats.counted += 1

        return stats

    def scan(self, chunks: Iterable[Chunk]) -> list[ChunkStats]:
        """
        Scan all chunks in parallel and wait for them.

        Args:
            chunks: Chunks in file order (may be a lazy iterator)

        Returns:
            Per-chunk stats in file order
        """
        results: list[ChunkStats] = []
        column = self.parser.initial_column

        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix='loglens-scan') as executor:
            pending: set[Future] = set()

            for chunk in chunks:
                if len(pending) >= self.max_pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    results.extend(f.result() for f in done)

                pending.add(executor.submit(self.scan_chunk, chunk, column))
                logger.debug("Dispatched chunk %d (offset %d, %d bytes)",
                             chunk.index, chunk.offset, chunk.size)
                column = self.parser.column_after(chunk.data, column)

            done, _ = wait(pending)
            results.extend(f.result() for f in done)

        results.sort(key=lambda s: s.index)
        return results
