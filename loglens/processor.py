"""
Log analysis orchestrator
"""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Optional, Union

from .cache import ResolutionCache
from .config import ChunkSize, DEFAULT_CHUNK_SIZE
from .counter import HitCounter
from .models import AnalysisSnapshot, FieldLayout, RunSummary
from .scan import ChunkSplitter, ParallelScanner


logger = logging.getLogger(__name__)


class AnalysisRejected(Exception):
    """An analysis request was refused or its log file could not be read"""


class LogFileNotFound(AnalysisRejected):
    """The requested log file does not exist"""


class AnalysisInProgress(AnalysisRejected):
    """Another analysis is already running on this processor"""


class LogFileUnreadable(AnalysisRejected):
    """The log file exists but cannot be opened or read"""


class LogProcessor:
    """
    Single-flight log analyzer.

    Owns the hit counter (reset at the start of every run) and the
    resolution cache (kept for the processor's lifetime, so hostnames found
    in one run are reused by the next). Only one analyze() may run at a
    time; a concurrent call is rejected, not queued.
    """

    def __init__(
        self,
        chunk_size: Union[int, ChunkSize] = DEFAULT_CHUNK_SIZE,
        layout: Optional[FieldLayout] = None,
        cache: Optional[ResolutionCache] = None,
        counter: Optional[HitCounter] = None,
        max_workers: Optional[int] = None,
        resolve: bool = True
    ):
        self.splitter = ChunkSplitter(chunk_size)
        self.layout = layout or FieldLayout()
        self.counter = counter if counter is not None else HitCounter()
        self.cache = cache if cache is not None else ResolutionCache()
        self.scanner = ParallelScanner(
            counter=self.counter,
            cache=self.cache if resolve else None,
            layout=self.layout,
            max_workers=max_workers
        )
        self._run_lock = threading.Lock()

    @property
    def chunk_size(self) -> int:
        return self.splitter.chunk_size

    @property
    def running(self) -> bool:
        return self._run_lock.locked()

    def analyze(self, path: Union[str, os.PathLike]) -> RunSummary:
        """
        Count client addresses in a log file.

        Returns once every chunk is scanned; reverse lookups started by the
        run may still be in flight.

        Args:
            path: Log file to analyze

        Returns:
            RunSummary for the run

        Raises:
            LogFileNotFound: path is not an existing file
            LogFileUnreadable: path cannot be opened, or reading it failed mid-run
            AnalysisInProgress: another run is active on this processor
        """
        path = Path(path)
        if not path.is_file():
            raise LogFileNotFound(f"Invalid file path: {path}")
        try:
            with open(path, 'rb'):
                pass
        except OSError as e:
            raise LogFileUnreadable(f"Cannot open {path}: {e}") from e

        if not self._run_lock.acquire(blocking=False):
            raise AnalysisInProgress("Log file processing is already in progress.")

        try:
            logger.debug("Analyzing %s (chunk size %d)", path, self.chunk_size)
            started = time.perf_counter()

            self.counter.reset()
            try:
                stats = self.scanner.scan(self.splitter.split(path))
            except OSError as e:
                # counts from chunks read before the failure stay in the counter
                raise LogFileUnreadable(f"Cannot read {path}: {e}") from e

            summary = RunSummary.from_stats(str(path), self.chunk_size, stats)
            summary.addresses = len(self.counter)
            summary.elapsed = time.perf_counter() - started
            logger.debug("Finished %s: %d chunks, %d lines in %.3fs",
                         path, summary.chunks, summary.lines, summary.elapsed)
            return summary
        finally:
            self._run_lock.release()

    def snapshot(self) -> AnalysisSnapshot:
        """Current hit counts and reverse lookups; never blocks on a running scan"""
        return AnalysisSnapshot(
            hits=self.counter.snapshot(),
            resolutions=self.cache.snapshot()
        )

    def close(self):
        """Stop background reverse lookups"""
        self.cache.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
