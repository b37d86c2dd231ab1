"""
Output modules for LogLens
"""

from .console import ConsoleOutput, rank_hits

__all__ = ['ConsoleOutput', 'rank_hits']
