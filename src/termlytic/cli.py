"""
termlytic CLI - Command-line interface using typer.

Main entry point for all termlytic commands.
"""
import sys
from typing import List, Optional

import typer
from rich.console import Console

from termlytic.commands import (
    cache,
    config_cmd,
    date_commands,
    diagnose,
    heatmap,
    history,
    range_stats,
    stats,
    ticket,
    watch,
    years,
)
from termlytic.logging_config import setup_logging
from termlytic.services.history_analyzer import ShellHistoryAnalyzer, create_history_analyzer


# Create typer app
app = typer.Typer(
    name="termlytic",
    help="Shell history statistics for bash, zsh and fish",
    add_completion=False,
    no_args_is_help=False,
)

# Create console for commands
console = Console()

JSON_OPTION = typer.Option(False, "--json", help="Print the result as JSON")
SHELL_OPTION = typer.Option(None, "--shell", "-s", help="Only include this shell (repeatable)")


def _get_analyzer() -> ShellHistoryAnalyzer:
    return create_history_analyzer()


@app.callback(invoke_without_command=True)
def default_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    Shell history statistics for bash, zsh and fish.

    Run without command to show the statistics dashboard.
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    if ctx.invoked_subcommand is None:
        stats.run(console, _get_analyzer())


@app.command(name="stats")
def stats_command(
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the cache and rescan every history file"),
    as_json: bool = JSON_OPTION,
):
    """Show the statistics dashboard."""
    stats.run(console, _get_analyzer(), refresh=refresh, as_json=as_json)


@app.command(name="refresh")
def refresh_command(as_json: bool = JSON_OPTION):
    """Clear the cache and rescan every history file."""
    stats.run(console, _get_analyzer(), refresh=True, as_json=as_json)


@app.command(name="range")
def range_command(
    time_range: str = typer.Argument("week", help="day, week, month, year or all"),
    as_json: bool = JSON_OPTION,
):
    """Show statistics for a time window ending today."""
    range_stats.run(console, _get_analyzer(), time_range=time_range, as_json=as_json)


@app.command(name="heatmap")
def heatmap_command(
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year to display (default: current year)"),
    shells: Optional[List[str]] = SHELL_OPTION,
    as_json: bool = JSON_OPTION,
):
    """Show GitHub-style command heatmap in the terminal."""
    heatmap.run(console, _get_analyzer(), year=year, shells=shells, as_json=as_json)


@app.command(name="date")
def date_command(
    date_str: str = typer.Argument(..., metavar="DATE", help="Date in YYYY-MM-DD format"),
    shells: Optional[List[str]] = SHELL_OPTION,
    as_json: bool = JSON_OPTION,
):
    """List the commands run on a date."""
    date_commands.run(console, _get_analyzer(), date_str, shells=shells, as_json=as_json)


@app.command(name="years")
def years_command(as_json: bool = JSON_OPTION):
    """List years that have timestamped history."""
    years.run(console, _get_analyzer(), as_json=as_json)


@app.command(name="ticket")
def ticket_command(
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year to summarize (default: current year)"),
    as_json: bool = JSON_OPTION,
):
    """Show the yearly command ticket."""
    ticket.run(console, _get_analyzer(), year=year, as_json=as_json)


@app.command(name="history")
def history_command(
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
    limit: int = typer.Option(50, "--limit", "-n", help="Entries per page"),
    as_json: bool = JSON_OPTION,
):
    """Show recent commands, newest first."""
    history.run(console, _get_analyzer(), page=page, limit=limit, as_json=as_json)


@app.command(name="cache-info")
def cache_info_command(as_json: bool = JSON_OPTION):
    """Show what is currently cached."""
    cache.run_info(console, _get_analyzer(), as_json=as_json)


@app.command(name="clear-cache")
def clear_cache_command(
    force: bool = typer.Option(False, "--force", help="Delete without confirmation"),
    as_json: bool = JSON_OPTION,
):
    """Delete the cached history and analysis."""
    cache.run_clear(console, _get_analyzer(), force=force, as_json=as_json)


@app.command(name="diagnose")
def diagnose_command(as_json: bool = JSON_OPTION):
    """Show which history files are used and why data may be missing."""
    diagnose.run(console, _get_analyzer(), as_json=as_json)


@app.command(name="watch")
def watch_command():
    """Redraw the dashboard whenever a history file changes."""
    watch.run(console, _get_analyzer())


@app.command(name="config")
def config_command(
    action: str = typer.Argument(..., help="Action: show, set-data-dir, clear-data-dir, set-history-path, clear-history-path, set-timezone"),
    value: Optional[str] = typer.Argument(None, help="Value for set actions (shell name for history path actions)"),
    path: Optional[str] = typer.Argument(None, help="History file path for set-history-path"),
):
    """Manage configuration (data directory, history files, timezone)."""
    config_cmd.run(console, action, value, path)


def main() -> None:
    """
    Main CLI entry point for termlytic.

    Usage:
        termlytic               Show the statistics dashboard
        termlytic heatmap       Show this year's command heatmap
        termlytic --help        Show help message

    Exit:
        Press Ctrl+C to exit
    """
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
