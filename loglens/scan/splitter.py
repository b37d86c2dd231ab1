"""
Line-aligned chunk reader for large log files
"""

import logging
import os
from pathlib import Path
from typing import Iterator, Union

from ..config import ChunkSize, DEFAULT_CHUNK_SIZE
from ..models import Chunk


logger = logging.getLogger(__name__)


class ChunkSplitter:
    """
    Read a file as a sequence of byte chunks that never split a line.

    Each read takes up to `chunk_size` bytes and is cut just after the last
    newline in it; the remainder is re-read as the start of the next chunk.
    A window with no newline at all (one line longer than the chunk size)
    is extended to the end of that line. Concatenating the chunks gives
    back the file byte for byte.
    """

    def __init__(self, chunk_size: Union[int, ChunkSize] = DEFAULT_CHUNK_SIZE):
        if isinstance(chunk_size, ChunkSize):
            chunk_size = chunk_size.value
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def split(self, path: Union[str, os.PathLike]) -> Iterator[Chunk]:
        """
        Yield the chunks of `path` in file order.

        Args:
            path: Log file to read

        Yields:
            Chunk with its index, starting offset and bytes
        """
        path = Path(path)
        index = 0
        offset = 0

        with open(path, 'rb') as handle:
            while True:
                window = handle.read(self.chunk_size)
                if not window:
                    break

                cut = window.rfind(b'\n')
                if cut >= 0:
                    data = window[:cut + 1]
                    if len(data) < len(window):
                        handle.seek(offset + len(data))
                else:
                    # no newline in the window: take the rest of this line
                    data = window + handle.readline()

                yield Chunk(index=index, offset=offset, data=data)
                index += 1
                offset += len(data)

        logger.debug("Split %s into %d chunks (%d bytes, chunk size %d)",
                     path, index, offset, self.chunk_size)


def split_file(path: Union[str, os.PathLike],
               chunk_size: Union[int, ChunkSize] = DEFAULT_CHUNK_SIZE) -> list[Chunk]:
    """Convenience function returning all chunks of a file"""
    return list(ChunkSplitter(chunk_size).split(path))
