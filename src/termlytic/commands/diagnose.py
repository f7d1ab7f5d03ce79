#region Imports
from rich.console import Console
from rich.table import Table

from termlytic.services.history_analyzer import ShellHistoryAnalyzer
#endregion


#region Functions


def run(console: Console, analyzer: ShellHistoryAnalyzer, as_json: bool = False) -> None:
    """
    Explain where history is read from and why data may be missing.

    Shows the status of every configured history file, any other history
    files found in the home directory, and recommendations.

    Args:
        console: Rich console for output
        analyzer: History analysis service
        as_json: Print file status and diagnosis as JSON
    """
    status = analyzer.get_file_status()
    diagnosis = analyzer.diagnose()

    if as_json:
        console.print_json(data={"status": status, "diagnosis": diagnosis})
        return

    env = diagnosis["environment"]
    console.print("\n[bold cyan]Environment[/bold cyan]")
    console.print(f"  Detected shell: {env['detectedShell']}")
    console.print(f"  $SHELL:         {env['shell'] or '-'}")
    console.print(f"  $HISTFILE:      {env['histfile'] or '-'}")
    console.print(f"  Home:           {env['home']}")

    table = Table(title="History Files", title_justify="left", box=None, padding=(0, 2))
    table.add_column("Shell", style="cyan")
    table.add_column("Path")
    table.add_column("Exists")
    table.add_column("Readable")
    table.add_column("Size", justify="right")

    for shell, info in status["configured"].items():
        table.add_row(
            shell,
            info["path"] or "-",
            "[green]yes[/green]" if info["exists"] else "[red]no[/red]",
            "[green]yes[/green]" if info["readable"] else "[red]no[/red]",
            f"{info['size']:,}",
        )
    for path, info in status["detected"].items():
        table.add_row("[dim]other[/dim]", path, "[green]yes[/green]", "yes" if info["readable"] else "no", f"{info['size']:,}")

    console.print()
    console.print(table)

    console.print("\n[bold cyan]Recommendations[/bold cyan]")
    for recommendation in diagnosis["recommendations"]:
        console.print(f"  • {recommendation}")
    console.print()


#endregion
