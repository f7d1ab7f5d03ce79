#region Imports
import sys

from rich.console import Console

from termlytic.services.history_analyzer import AnalysisResponse, ShellHistoryAnalyzer
from termlytic.visualization.dashboard import render_dashboard
#endregion


#region Functions


def run(console: Console, analyzer: ShellHistoryAnalyzer, refresh: bool = False, as_json: bool = False) -> None:
    """
    Analyze shell history and show the statistics dashboard.

    Uses the cache when no history file changed, reads only appended data
    when some did, and rescans everything with --refresh.

    Args:
        console: Rich console for output
        analyzer: History analysis service
        refresh: Discard the cache and rescan every history file
        as_json: Print the raw response as JSON instead of the dashboard
    """
    if as_json:
        response = analyzer.force_refresh() if refresh else analyzer.analyze()
        console.print_json(data=response.to_dict())
        return

    status = "Rescanning shell history..." if refresh else "Analyzing shell history..."
    with console.status(f"[bold #39d353]{status}", spinner="dots", spinner_style="#39d353"):
        response = analyzer.force_refresh() if refresh else analyzer.analyze()

    if response.error:
        console.print(f"[bold red]⚠ {response.error}[/bold red]")
        if response.from_cache:
            console.print("[yellow]Showing last cached results.[/yellow]\n")

    if response.cache_write_error:
        console.print(f"[yellow]Results could not be cached: {response.cache_write_error}[/yellow]\n")

    if response.metadata.total_entries == 0:
        console.print(
            "[yellow]No shell history found.[/yellow]\n"
            "[dim]Run 'termlytic diagnose' to see which history files were checked.[/dim]"
        )
        if response.error:
            sys.exit(1)
        return

    render_dashboard(
        console,
        response.analysis,
        subtitle=_describe_source(response),
        footer=f"Last update: {response.metadata.last_update or 'never'}",
    )


def _describe_source(response: AnalysisResponse) -> str:
    labels = {
        "cache": "cached",
        "incremental": "incremental update",
        "full": "full scan",
        "empty": "no data",
    }
    return f"{response.metadata.total_entries:,} entries, {labels.get(response.metadata.analysis_type, response.metadata.analysis_type)}"


#endregion
