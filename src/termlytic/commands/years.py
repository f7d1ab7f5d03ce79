#region Imports
from rich.console import Console

from termlytic.services.history_analyzer import ShellHistoryAnalyzer
#endregion


#region Functions


def run(console: Console, analyzer: ShellHistoryAnalyzer, as_json: bool = False) -> None:
    """List the years that have timestamped history, newest first."""
    years = analyzer.available_years()

    if as_json:
        console.print_json(data=years)
        return

    if not years:
        console.print("[yellow]No timestamped history found.[/yellow]")
        console.print("[dim]Plain bash history has no timestamps; zsh extended history and fish do.[/dim]")
        return

    console.print("[bold cyan]Years with history[/bold cyan]")
    for year in years:
        console.print(f"  {year}")


#endregion
