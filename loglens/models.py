"""
Data models for LogLens
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .config import DEFAULT_IP_COLUMN, DEFAULT_IP_FIELD, UNKNOWN_HOST, UNRESOLVED


@dataclass(frozen=True)
class Chunk:
    """A line-aligned byte range of a log file"""
    index: int
    offset: int
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def end(self) -> int:
        return self.offset + len(self.data)


@dataclass(frozen=True)
class FieldLayout:
    """
    Where the client address lives in a log line.

    With use_headers on, a '#Fields:' header naming `field` selects the
    column for the lines that follow it; lines under a header without
    `field` have no address and are skipped. Lines before any header use
    default_column.
    """
    field: str = DEFAULT_IP_FIELD
    default_column: int = DEFAULT_IP_COLUMN
    use_headers: bool = True

    def __post_init__(self):
        if self.default_column < 0:
            raise ValueError(f"IP column must be >= 0, got {self.default_column}")


@dataclass
class ChunkStats:
    """Result of scanning one chunk"""
    index: int
    lines: int = 0
    counted: int = 0
    skipped: int = 0


@dataclass
class RunSummary:
    """Summary of a completed analysis run"""
    path: str
    chunk_size: int
    chunks: int = 0
    lines: int = 0
    counted: int = 0
    skipped: int = 0
    addresses: int = 0
    elapsed: float = 0.0  # seconds

    @classmethod
    def from_stats(cls, path: str, chunk_size: int,
                   stats: list[ChunkStats]) -> 'RunSummary':
        return cls(
            path=path,
            chunk_size=chunk_size,
            chunks=len(stats),
            lines=sum(s.lines for s in stats),
            counted=sum(s.counted for s in stats),
            skipped=sum(s.skipped for s in stats),
        )


class ResolutionState(Enum):
    """Reverse lookup state for one address"""
    PENDING = "pending"
    RESOLVED = "resolved"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Resolution:
    """Reverse lookup result: pending, resolved(hostname) or unknown"""
    state: ResolutionState
    hostname: Optional[str] = None

    @classmethod
    def pending(cls) -> 'Resolution':
        return cls(ResolutionState.PENDING)

    @classmethod
    def resolved(cls, hostname: str) -> 'Resolution':
        return cls(ResolutionState.RESOLVED, hostname)

    @classmethod
    def unknown(cls) -> 'Resolution':
        return cls(ResolutionState.UNKNOWN)

    @property
    def is_pending(self) -> bool:
        return self.state is ResolutionState.PENDING

    @property
    def display_name(self) -> str:
        if self.state is ResolutionState.RESOLVED:
            return self.hostname
        if self.state is ResolutionState.UNKNOWN:
            return UNKNOWN_HOST
        return UNRESOLVED


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Point-in-time view of hit counts and reverse lookups"""
    hits: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    resolutions: Mapping[str, Resolution] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def total_hits(self) -> int:
        return sum(self.hits.values())

    def hostname(self, ip: str) -> Optional[str]:
        """Resolved hostname (or the unknown-host sentinel), None while pending/absent"""
        resolution = self.resolutions.get(ip)
        if resolution is None or resolution.is_pending:
            return None
        return resolution.display_name


@dataclass
class ReportRow:
    """One ranked row of the IP report"""
    rank: int
    ip: str
    hits: int
    hostname: str
    ip_type: Optional[str] = None
