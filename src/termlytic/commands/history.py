#region Imports
import sys

from rich.console import Console
from rich.table import Table

from termlytic.services.history_analyzer import ShellHistoryAnalyzer
#endregion


#region Functions


def run(console: Console, analyzer: ShellHistoryAnalyzer, page: int = 1, limit: int = 50, as_json: bool = False) -> None:
    """
    Show one page of recent history, newest first.

    Args:
        console: Rich console for output
        analyzer: History analysis service
        page: 1-based page number
        limit: Entries per page
        as_json: Print the page as JSON
    """
    try:
        result = analyzer.history_page(page, limit)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        console.print_json(data=result)
        return

    table = Table(box=None, padding=(0, 2))
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Shell", style="cyan")
    table.add_column("Command", overflow="fold")

    for entry in result["entries"]:
        table.add_row((entry["timestamp"] or "")[:19].replace("T", " "), entry["shell"], entry["command"])

    console.print(table)
    console.print(
        f"\n[dim]Page {result['page']} of {max(result['total_pages'], 1)} "
        f"({result['total']:,} entries)[/dim]"
    )


#endregion
