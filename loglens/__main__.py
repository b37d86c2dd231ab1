"""
LogLens - Access Log IP Analyzer

Entry point for running as a module:
    python -m loglens <logfile>
"""

from .cli import main

if __name__ == '__main__':
    main()
