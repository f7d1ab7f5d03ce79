#region Imports
import sys
from typing import Optional

from rich.console import Console

from termlytic.services.history_analyzer import ShellHistoryAnalyzer
from termlytic.visualization.heatmap import render_heatmap
#endregion


#region Functions


def run(
    console: Console,
    analyzer: ShellHistoryAnalyzer,
    year: Optional[int] = None,
    shells: Optional[list[str]] = None,
    as_json: bool = False,
) -> None:
    """
    Display a GitHub-style command heatmap for a year.

    Args:
        console: Rich console for output
        analyzer: History analysis service
        year: Year to display (defaults to current year)
        shells: Shells to include (defaults to all)
        as_json: Print [date, count] pairs as JSON

    Exit:
        Exits with status 1 for an invalid year
    """
    today = analyzer.stats.now().date()
    display_year = year if year is not None else today.year
    shell_filter = shells or "all"

    try:
        if as_json:
            heatmap = analyzer.heatmap_for_year(display_year, shell_filter)
        else:
            with console.status("[bold #39d353]Preparing heatmap...", spinner="dots", spinner_style="#39d353"):
                heatmap = analyzer.heatmap_for_year(display_year, shell_filter)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        console.print_json(data=[[day, count] for day, count in heatmap])
        return

    title = f"Commands in {display_year}"
    if shells:
        title += f" ({', '.join(shells)})"
    render_heatmap(console, display_year, heatmap, today, title=title)


#endregion
