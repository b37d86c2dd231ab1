"""
Rich console output for LogLens
"""

from datetime import timedelta
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from .. import __version__
from ..enrichment import IPClassifier
from ..config import UNRESOLVED
from ..models import AnalysisSnapshot, ReportRow, RunSummary


# Address type styling
TYPE_STYLES = {
    'public': 'green',
    'private': 'dim',
    'cgnat': 'yellow',
    'loopback': 'dim',
    'linklocal': 'dim',
    'multicast': 'cyan',
    'reserved': 'dim',
    'invalid': 'red',
}


def rank_hits(snapshot: AnalysisSnapshot, top: Optional[int] = None,
              classify: bool = True) -> list[ReportRow]:
    """
    Rank addresses by hit count, highest first (ties by address).

    Addresses whose lookup is still pending (or was never requested) get
    the unresolved placeholder; failed lookups get the unknown-host sentinel.
    """
    ordered = sorted(snapshot.hits.items(), key=lambda item: (-item[1], item[0]))
    if top is not None:
        ordered = ordered[:top]

    rows = []
    for rank, (ip, hits) in enumerate(ordered, start=1):
        resolution = snapshot.resolutions.get(ip)
        hostname = resolution.display_name if resolution else None
        rows.append(ReportRow(
            rank=rank,
            ip=ip,
            hits=hits,
            hostname=hostname or UNRESOLVED,
            ip_type=IPClassifier.classify(ip).value if classify else None
        ))
    return rows


class ConsoleOutput:
    """
    Rich console output for IP analysis results.

    Features:
    - Run header and completion summary
    - Ranked hit table with hostnames and address types
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_header(self, path: str, chunk_size: int, workers: int):
        """Print run header"""
        content = Text()
        content.append("LogLens", style="bold cyan")
        content.append(f" v{__version__}\n", style="dim")
        content.append("File: ", style="dim")
        content.append(str(path), style="bold")
        content.append("\n")
        content.append(f"Chunk size: {_format_bytes(chunk_size)}", style="dim")
        content.append(f"  |  Workers: {workers}", style="dim")

        self.console.print(Panel(content, border_style="cyan", padding=(0, 1)))

    def print_summary(self, summary: RunSummary):
        """Print completion line for a run"""
        elapsed = timedelta(seconds=summary.elapsed)
        line = Text()
        line.append("Processing completed", style="bold green")
        line.append(f" in {elapsed}", style="dim")
        line.append(
            f"  ({summary.chunks} chunks, {summary.counted} hits, "
            f"{summary.addresses} addresses",
            style="dim"
        )
        if summary.skipped:
            line.append(f", {summary.skipped} skipped", style="yellow")
        line.append(")", style="dim")
        self.console.print(line)

    def print_results(self, snapshot: AnalysisSnapshot, top: Optional[int] = None,
                      pending: int = 0):
        """Print the ranked IP table"""
        rows = rank_hits(snapshot, top=top)

        table = Table(
            show_header=True,
            header_style="bold magenta",
            box=box.ROUNDED,
            border_style="dim",
            padding=(0, 1)
        )
        table.add_column("#", style="dim", justify="right")
        table.add_column("Hits", justify="right")
        table.add_column("IP")
        table.add_column("Hostname", overflow="fold")
        table.add_column("Type")

        for row in rows:
            table.add_row(
                str(row.rank),
                str(row.hits),
                row.ip,
                self._format_hostname(snapshot, row),
                Text(row.ip_type or "-", style=TYPE_STYLES.get(row.ip_type, 'dim'))
            )

        title = Text("IP Analysis result", style="bold")
        if pending:
            title.append(f"  ({pending} lookups pending)", style="dim")

        self.console.print()
        self.console.print(Panel(table, title=title, border_style="blue", padding=(0, 0)))

    def print_error(self, message: str):
        """Print error message"""
        self.console.print(f"[bold red]Error:[/] {escape(message)}")

    def _format_hostname(self, snapshot: AnalysisSnapshot, row: ReportRow) -> Text:
        if snapshot.hostname(row.ip) is None:
            return Text(row.hostname, style="dim italic")
        return Text(row.hostname)


def _format_bytes(size: int) -> str:
    """Human-readable byte size"""
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):g} MB"
    if size >= 1024:
        return f"{size / 1024:g} KB"
    return f"{size} B"
