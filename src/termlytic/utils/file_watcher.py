#region Imports
import logging
import time
from pathlib import Path
from typing import Callable, Iterable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
#endregion


logger = logging.getLogger(__name__)


#region Classes

class HistoryFileHandler(FileSystemEventHandler):
    """
    File system event handler for shell history files.

    Watchdog reports every change in a watched directory, so events are
    filtered down to the history files themselves before the callback fires.
    """

    def __init__(self, paths: Iterable[Path], callback: Callable[[], None], debounce_seconds: float = 2.0):
        """
        Initialize the history file handler.

        Args:
            paths: History files to react to
            callback: Function to call when one of them changes
            debounce_seconds: Minimum seconds between callback invocations
        """
        super().__init__()
        self.paths = {str(Path(p).expanduser().absolute()) for p in paths}
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.last_triggered = 0.0

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._handle(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._handle(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # zsh and fish save by writing a temp file and renaming it over the history
        if not event.is_directory:
            self._handle(event.dest_path)

    def _handle(self, path) -> None:
        if isinstance(path, bytes):
            path = path.decode(errors="replace")
        if str(Path(path).absolute()) in self.paths:
            self._trigger_callback()

    def _trigger_callback(self) -> None:
        """Trigger the callback unless it already fired within the debounce window."""
        current_time = time.time()

        if current_time - self.last_triggered >= self.debounce_seconds:
            self.last_triggered = current_time
            logger.debug("History file change detected")
            self.callback()


class HistoryFileWatcher:
    """
    Watches shell history files and reports changes.

    Each file's parent directory is watched non-recursively, because many
    shells replace the history file instead of writing to it in place.
    """

    def __init__(self, paths: Iterable[Path], callback: Callable[[], None], debounce_seconds: float = 2.0):
        """
        Initialize the file watcher.

        Args:
            paths: History files to watch
            callback: Function to call when files change
            debounce_seconds: Minimum seconds between callback invocations
        """
        self.paths = [Path(p) for p in paths]
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.observer: Optional[Observer] = None

    def watched_directories(self) -> list[Path]:
        """Existing parent directories of the watched files, without duplicates."""
        directories = []
        for path in self.paths:
            parent = path.expanduser().absolute().parent
            if parent.is_dir() and parent not in directories:
                directories.append(parent)
        return directories

    def start(self) -> None:
        """
        Start watching for file changes.

        Raises:
            FileNotFoundError: If none of the history files' directories exist
        """
        directories = self.watched_directories()
        if not directories:
            raise FileNotFoundError("No history file directory exists to watch")

        event_handler = HistoryFileHandler(self.paths, self.callback, self.debounce_seconds)
        self.observer = Observer()
        for directory in directories:
            self.observer.schedule(event_handler, str(directory), recursive=False)
            logger.info("Watching %s", directory)
        self.observer.start()

    def stop(self) -> None:
        """Stop watching for file changes."""
        if self.observer:
            self.observer.stop()
            self.observer.join()

    def is_alive(self) -> bool:
        return self.observer is not None and self.observer.is_alive()


#endregion
