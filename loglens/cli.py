import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .cache import ResolutionCache
from .config import (
    ChunkSize, DEFAULT_CHUNK_SIZE, DEFAULT_IP_COLUMN, DEFAULT_IP_FIELD,
    DEFAULT_RESOLVER_TIMEOUT, DEFAULT_RESOLVER_WORKERS,
)
from .enrichment import PTRResolver
from .models import FieldLayout
from .output import ConsoleOutput
from .processor import AnalysisRejected, LogProcessor


console = Console()


def configure_logging(verbose: bool):
    """Route library logging to stderr through rich"""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True
    )


def show_results(output: ConsoleOutput, processor: LogProcessor,
                 top: Optional[int], settle: float):
    """Print the table now, and again once lookups settle if asked to"""
    cache = processor.cache
    output.print_results(processor.snapshot(), top=top, pending=cache.pending_count())

    if settle > 0 and cache.pending_count():
        with console.status(f"[dim]Waiting up to {settle:g}s for reverse DNS..."):
            cache.wait(timeout=settle)
        output.print_results(processor.snapshot(), top=top, pending=cache.pending_count())


@click.command()
@click.argument('logfiles', nargs=-1, required=True, type=click.Path())
@click.option('-c', '--chunk-size', default=DEFAULT_CHUNK_SIZE.name.lower(),
              type=click.Choice(ChunkSize.names(), case_sensitive=False),
              help='Read chunk size preset (default: xlarge = 1 MB)')
@click.option('-f', '--field', default=DEFAULT_IP_FIELD,
              help=f'#Fields column holding the client IP (default: {DEFAULT_IP_FIELD})')
@click.option('--column', default=DEFAULT_IP_COLUMN, type=click.IntRange(min=0),
              help=f'IP column when no header names it (default: {DEFAULT_IP_COLUMN})')
@click.option('--headers/--no-headers', default=True,
              help='Follow #Fields headers (default: enabled)')
@click.option('-j', '--workers', default=None, type=click.IntRange(min=1),
              help='Scanner threads (default: CPU count)')
@click.option('--dns/--no-dns', default=True,
              help='Enable/disable reverse DNS lookups (default: enabled)')
@click.option('--backend', default='system',
              type=click.Choice(PTRResolver.BACKENDS, case_sensitive=False),
              help='Reverse lookup backend (default: system)')
@click.option('-n', '--nameserver', 'nameservers', multiple=True,
              help='Nameserver for PTR queries (implies --backend dns)')
@click.option('-w', '--timeout', default=DEFAULT_RESOLVER_TIMEOUT, type=float,
              help='PTR query timeout in seconds for the dns backend '
                   f'(default: {DEFAULT_RESOLVER_TIMEOUT:g})')
@click.option('--top', default=None, type=click.IntRange(min=1),
              help='Show only the N busiest addresses')
@click.option('--settle', default=0.0, type=click.FloatRange(min=0),
              help='Wait up to N seconds for pending lookups, then print again')
@click.option('--repeat', default=1, type=click.IntRange(min=1),
              help='Analyze each file N times (hostnames are reused)')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging to stderr')
@click.version_option(version=__version__)
def main(logfiles: tuple[str, ...], chunk_size: str, field: str, column: int,
         headers: bool, workers: Optional[int], dns: bool, backend: str,
         nameservers: tuple[str, ...], timeout: float, top: Optional[int],
         settle: float, repeat: int, verbose: bool):
    """
    LogLens - Access log IP analyzer.

    Count client IP hits in one or more access logs (W3C / IIS style,
    space separated, with optional #Fields headers) and show them ranked,
    with reverse DNS hostnames resolved in the background.

    Examples:

        loglens ex120326.log

        loglens ex120326.log ex040730.log --settle 5

        loglens access.log --no-headers --column 0 -c medium
    """
    configure_logging(verbose)
    output = ConsoleOutput(console)

    try:
        layout = FieldLayout(field=field, default_column=column, use_headers=headers)
        resolver = PTRResolver(timeout=timeout, backend=backend,
                               nameservers=nameservers or None)
        cache = ResolutionCache(resolver=resolver, max_workers=DEFAULT_RESOLVER_WORKERS)
        processor = LogProcessor(
            chunk_size=ChunkSize.from_name(chunk_size),
            layout=layout,
            cache=cache,
            max_workers=workers,
            resolve=dns
        )
    except ValueError as e:
        output.print_error(str(e))
        sys.exit(1)

    rejected = 0
    try:
        for path in logfiles:
            for _ in range(repeat):
                output.print_header(path, processor.chunk_size,
                                    processor.scanner.max_workers)
                try:
                    summary = processor.analyze(path)
                except AnalysisRejected as e:
                    output.print_error(str(e))
                    rejected += 1
                    break

                output.print_summary(summary)
                show_results(output, processor, top, settle)

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/]")
        sys.exit(130)
    finally:
        processor.close()

    if rejected:
        sys.exit(1)


if __name__ == '__main__':
    main()
