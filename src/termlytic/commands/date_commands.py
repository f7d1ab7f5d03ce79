#region Imports
import sys
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.table import Table

from termlytic.services.history_analyzer import ShellHistoryAnalyzer
#endregion


#region Functions


def run(
    console: Console,
    analyzer: ShellHistoryAnalyzer,
    date_str: str,
    shells: Optional[list[str]] = None,
    as_json: bool = False,
) -> None:
    """
    List every command run on a date.

    Args:
        console: Rich console for output
        analyzer: History analysis service
        date_str: Date in YYYY-MM-DD format
        shells: Shells to include (defaults to all)
        as_json: Print the commands as JSON

    Exit:
        Exits with status 1 for an invalid date
    """
    try:
        commands = analyzer.commands_for_date(date_str, shells or "all")
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        console.print_json(data=[
            {"command": c.command, "timestamp": c.timestamp, "shell": c.shell} for c in commands
        ])
        return

    if not commands:
        console.print(f"[yellow]No commands recorded on {date_str}.[/yellow]")
        return

    table = Table(title=f"Commands on {date_str}", title_justify="left", box=None, padding=(0, 2))
    table.add_column("Time", style="dim")
    table.add_column("Shell", style="cyan")
    table.add_column("Command", overflow="fold")

    for command in commands:
        time_str = ""
        if command.timestamp:
            time_str = analyzer.stats.to_local(datetime.fromisoformat(command.timestamp)).strftime("%H:%M:%S")
        table.add_row(time_str, command.shell, command.command)

    console.print(table)
    console.print(f"\n[dim]{len(commands):,} commands[/dim]")


#endregion
