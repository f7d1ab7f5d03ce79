#region Imports
import sys

from rich.console import Console

from termlytic.services.history_analyzer import ShellHistoryAnalyzer
from termlytic.visualization.dashboard import render_range_stats
#endregion


#region Functions


def run(console: Console, analyzer: ShellHistoryAnalyzer, time_range: str = "week", as_json: bool = False) -> None:
    """
    Show statistics for one time window.

    Args:
        console: Rich console for output
        analyzer: History analysis service
        time_range: 'day', 'week', 'month', 'year' or 'all'
        as_json: Print the result as JSON

    Exit:
        Exits with status 1 for an unknown range
    """
    try:
        stats = analyzer.stats_for_range(time_range)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        console.print_json(data=stats.to_dict())
        return

    render_range_stats(console, stats)


#endregion
