#region Imports
import sys
import threading
import time

from rich.console import Console

from termlytic.config.user_config import get_watch_debounce
from termlytic.services.history_analyzer import ShellHistoryAnalyzer
from termlytic.utils.file_watcher import HistoryFileWatcher
from termlytic.visualization.dashboard import render_dashboard
#endregion


#region Functions


def run(console: Console, analyzer: ShellHistoryAnalyzer) -> None:
    """
    Re-analyze and redraw the dashboard whenever a history file changes.

    Args:
        console: Rich console for output

    Exit:
        Press Ctrl+C to exit
    """
    render_lock = threading.Lock()

    def refresh() -> None:
        with render_lock:
            response = analyzer.analyze()
            console.clear()
            render_dashboard(
                console,
                response.analysis,
                subtitle=f"{response.metadata.total_entries:,} entries, watching",
                footer="Watching history files. Press Ctrl+C to exit.",
            )
            if response.error:
                console.print(f"[bold red]⚠ {response.error}[/bold red]")

    paths = [path for path in analyzer.resolver.history_files().values() if path is not None]
    watcher = HistoryFileWatcher(paths, refresh, debounce_seconds=get_watch_debounce())

    try:
        watcher.start()
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    refresh()

    try:
        while watcher.is_alive():
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n[cyan]Exiting...[/cyan]")
    finally:
        watcher.stop()


#endregion
