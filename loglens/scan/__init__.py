"""
Log scanning engine for LogLens
"""

from .splitter import ChunkSplitter, split_file
from .parser import LineParser, split_lines
from .scanner import ParallelScanner

__all__ = ['ChunkSplitter', 'split_file', 'LineParser', 'split_lines', 'ParallelScanner']
