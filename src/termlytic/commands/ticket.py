#region Imports
import sys
from typing import Optional

from rich.console import Console

from termlytic.services.history_analyzer import ShellHistoryAnalyzer
from termlytic.visualization.dashboard import render_ticket
#endregion


#region Functions


def run(console: Console, analyzer: ShellHistoryAnalyzer, year: Optional[int] = None, as_json: bool = False) -> None:
    """
    Show the yearly command ticket.

    Args:
        console: Rich console for output
        analyzer: History analysis service
        year: Year to summarize (defaults to current year)
        as_json: Print the ticket as JSON

    Exit:
        Exits with status 1 for an invalid year
    """
    try:
        ticket = analyzer.generate_ticket(year)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        console.print_json(data=ticket.to_dict())
        return

    render_ticket(console, ticket)


#endregion
