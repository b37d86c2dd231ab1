"""
Configuration presets and defaults for LogLens
"""

from enum import Enum


# Field layout
DEFAULT_IP_FIELD = "c-ip"
DEFAULT_IP_COLUMN = 1
FIELDS_DIRECTIVE = "#Fields"
COMMENT_PREFIX = "#"

# Reverse DNS
DEFAULT_RESOLVER_TIMEOUT = 2.0  # seconds
DEFAULT_RESOLVER_WORKERS = 16
UNKNOWN_HOST = "Unknown host"
UNRESOLVED = "Unresolved ip address"

# Scanning
TEXT_ENCODING = "utf-8"


class ChunkSize(Enum):
    """Target chunk sizes (bytes) for reading log files"""
    SMALL = 4 * 1024          # 4 KB
    MEDIUM = 64 * 1024        # 64 KB
    LARGE = 512 * 1024        # 512 KB
    XLARGE = 1024 * 1024      # 1 MB
    XXLARGE = 4 * 1024 * 1024  # 4 MB

    @classmethod
    def from_name(cls, name: str) -> 'ChunkSize':
        """
        Look up a preset by name (case-insensitive).

        Raises:
            ValueError: if no preset has that name
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(
                f"Unknown chunk size '{name}'. "
                f"Supported: {', '.join(m.name.lower() for m in cls)}"
            )

    @classmethod
    def names(cls) -> list[str]:
        return [m.name.lower() for m in cls]


DEFAULT_CHUNK_SIZE = ChunkSize.XLARGE
