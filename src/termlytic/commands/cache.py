#region Imports
from rich.console import Console
from rich.table import Table

from termlytic.services.history_analyzer import ShellHistoryAnalyzer
#endregion


#region Functions


def run_info(console: Console, analyzer: ShellHistoryAnalyzer, as_json: bool = False) -> None:
    """
    Describe what is currently cached.

    Args:
        console: Rich console for output
        analyzer: History analysis service
        as_json: Print the cache info as JSON
    """
    info = analyzer.get_cache_info()

    if as_json:
        console.print_json(data={
            "hasCache": info.has_cache,
            "lastUpdate": info.last_update,
            "files": info.files,
            "size": info.size,
            "entries": info.entries,
            "dataFile": info.data_file,
            "metaFile": info.meta_file,
        })
        return

    if not info.has_cache:
        console.print("[yellow]No cache yet. Run 'termlytic' to build it.[/yellow]")
        console.print(f"[dim]Cache location: {info.data_file}[/dim]")
        return

    table = Table(title="Cache", show_header=False, box=None, padding=(0, 2), title_justify="left")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Data file", info.data_file)
    table.add_row("Metadata file", info.meta_file)
    table.add_row("Size", f"{info.size / 1024:,.1f} KB")
    table.add_row("Entries", f"{info.entries:,}")
    table.add_row("Last update", info.last_update or "unknown")
    console.print(table)

    if info.files:
        console.print()
        files = Table(title="Fingerprints", box=None, padding=(0, 2), title_justify="left")
        files.add_column("Shell", style="cyan")
        files.add_column("Exists")
        files.add_column("Size", justify="right")
        files.add_column("Modified (ms)", justify="right", style="dim")
        for shell, fingerprint in info.files.items():
            files.add_row(
                shell,
                "yes" if fingerprint.get("exists") else "no",
                f"{fingerprint.get('size', 0):,}",
                str(fingerprint.get("mtime", 0)),
            )
        console.print(files)


def run_clear(console: Console, analyzer: ShellHistoryAnalyzer, force: bool = False, as_json: bool = False) -> None:
    """
    Delete the cached entries and analysis.

    Requires --force to prevent accidental deletion. The next analysis
    rescans every history file.

    Args:
        console: Rich console for output
        analyzer: History analysis service
        force: Confirm deletion
        as_json: Print the ClearResult as JSON
    """
    if not force:
        console.print("[red]WARNING: This will DELETE the cached history analysis![/red]")
        console.print("[yellow]To confirm, use: termlytic clear-cache --force[/yellow]")
        return

    result = analyzer.clear_cache()

    if as_json:
        console.print_json(data={
            "success": result.success,
            "dataDeleted": result.data_deleted,
            "metadataDeleted": result.metadata_deleted,
            "errors": result.errors,
        })
        return

    if not result.data_deleted and not result.metadata_deleted and result.success:
        console.print("[yellow]No cache found. Nothing to clear.[/yellow]")
        return

    if result.data_deleted:
        console.print("[green]✓ Deleted cached history data[/green]")
    if result.metadata_deleted:
        console.print("[green]✓ Deleted cache metadata[/green]")
    for error in result.errors:
        console.print(f"[red]{error}[/red]")


#endregion
