"""
Configuration management command.

Allows users to view and modify termlytic settings.
"""
from typing import Optional

from rich.console import Console
from rich.table import Table

from termlytic.config.settings import APP_DATA_DIR, get_data_dir
from termlytic.config.user_config import (
    CONFIG_PATH,
    clear_data_dir,
    clear_history_path,
    get_analysis_options,
    get_history_path_overrides,
    get_timezone_setting,
    set_data_dir,
    set_history_path,
    set_timezone_setting,
)
from termlytic.models.history_entry import SUPPORTED_SHELLS


def run(console: Console, action: str, value: Optional[str] = None, path: Optional[str] = None) -> None:
    """
    Handle configuration commands.

    Args:
        console: Rich console for output
        action: Configuration action to perform
        value: Value for set actions (a shell name for history path actions)
        path: History file path for set-history-path

    Actions:
        show - Display all current settings
        set-data-dir <path> - Set custom cache directory
        clear-data-dir - Clear custom cache directory (use default)
        set-history-path <shell> <path> - Pin the history file for a shell
        clear-history-path <shell> - Use auto-detection again for a shell
        set-timezone <name> - Set timezone for day/hour bucketing ('auto' for system)
    """
    if action == "show":
        _show_config(console)

    elif action == "set-data-dir":
        if not value:
            console.print("[red]Error: Directory required[/red]")
            console.print("[yellow]Usage: termlytic config set-data-dir /path/to/dir[/yellow]")
            return

        try:
            set_data_dir(value)
            console.print(f"[green]✓ Data directory set to: {value}[/green]")
            console.print("[dim]The cache will be rebuilt there on the next run.[/dim]")
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")

    elif action == "clear-data-dir":
        clear_data_dir()
        console.print("[green]✓ Data directory cleared (using default)[/green]")
        console.print(f"[dim]Current directory: {get_data_dir()}[/dim]")

    elif action == "set-history-path":
        if not value or not path:
            console.print("[red]Error: Shell and path required[/red]")
            console.print("[yellow]Usage: termlytic config set-history-path zsh ~/.zsh_history[/yellow]")
            return

        try:
            set_history_path(value, path)
            console.print(f"[green]✓ {value} history file set to: {path}[/green]")
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")

    elif action == "clear-history-path":
        if not value:
            console.print("[red]Error: Shell required[/red]")
            console.print(f"[yellow]Usage: termlytic config clear-history-path <{'|'.join(SUPPORTED_SHELLS)}>[/yellow]")
            return

        clear_history_path(value)
        console.print(f"[green]✓ {value} history file cleared (using auto-detect)[/green]")

    elif action == "set-timezone":
        if not value:
            console.print("[red]Error: Timezone required[/red]")
            console.print("[yellow]Usage: termlytic config set-timezone Europe/Berlin[/yellow]")
            return

        try:
            set_timezone_setting(value)
            console.print(f"[green]✓ Timezone set to: {value}[/green]")
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")

    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("\n[yellow]Available actions:[/yellow]")
        console.print("  show                             - Display all settings")
        console.print("  set-data-dir <path>              - Set custom cache directory")
        console.print("  clear-data-dir                   - Clear custom cache directory")
        console.print("  set-history-path <shell> <path>  - Pin a shell's history file")
        console.print("  clear-history-path <shell>       - Auto-detect a shell's history file")
        console.print("  set-timezone <name>              - Set timezone ('auto' for system)")


def _show_config(console: Console) -> None:
    """Display all current configuration settings."""
    from termlytic.utils.timezone import get_user_timezone

    console.print("\n[bold cyan]termlytic Configuration[/bold cyan]\n")

    table = Table(title="Storage", show_header=False, box=None, padding=(0, 2))
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    data_dir = get_data_dir()
    if data_dir == APP_DATA_DIR:
        table.add_row("Data dir (default)", str(data_dir))
    else:
        table.add_row("Data dir (custom)", str(data_dir))
    table.add_row("Config file", str(CONFIG_PATH))

    console.print(table)
    console.print()

    table = Table(title="History Files", show_header=False, box=None, padding=(0, 2))
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    overrides = get_history_path_overrides()
    for shell in SUPPORTED_SHELLS:
        if shell in overrides:
            table.add_row(f"{shell} (pinned)", overrides[shell])
        else:
            table.add_row(shell, "[dim]auto-detect[/dim]")

    console.print(table)
    console.print()

    table = Table(title="Analysis", show_header=False, box=None, padding=(0, 2))
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    tz_setting = get_timezone_setting()
    if tz_setting == "auto":
        table.add_row("Timezone (auto)", get_user_timezone())
    else:
        table.add_row("Timezone", tz_setting)
    for key, value in get_analysis_options().items():
        table.add_row(key.replace("_", " ").capitalize(), str(value))

    console.print(table)

    console.print("\n[dim]To change settings, run:[/dim]")
    console.print("[dim]  termlytic config set-history-path zsh ~/.zsh_history[/dim]")
    console.print("[dim]  termlytic config set-timezone Europe/Berlin[/dim]")
    console.print()
