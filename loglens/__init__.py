"""
LogLens - Access Log IP Analyzer

Parallel, chunked scan of large access logs that ranks client IP
addresses by hit count and enriches them with reverse DNS in the background.
"""

__version__ = "1.0.0"
__author__ = "LogLens"
