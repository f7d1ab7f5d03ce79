#region Imports
import os
from pathlib import Path
from typing import Final, Mapping, Optional
#endregion


#region Constants
# Application data directory (config file, cache files)
APP_DATA_DIR: Final[Path] = Path.home() / ".termlytic"

# Cache file names inside the data directory
HISTORY_DATA_FILENAME: Final[str] = "history_data.json"
METADATA_FILENAME: Final[str] = "metadata.json"
CACHE_VERSION: Final[str] = "1.0"

# Time ranges accepted by range statistics
TIME_RANGES: Final[tuple[str, ...]] = ("day", "week", "month", "year", "all")

# Extra locations probed by file status and diagnosis
ADDITIONAL_HISTORY_FILES: Final[tuple[str, ...]] = (
    ".history",
    ".zhistory",
    ".config/fish/fish_history",
    ".sh_history",
)
#endregion


#region Functions


def get_history_candidates(
    shell: str,
    home: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> list[Path]:
    """
    Candidate history file locations for a shell, most preferred first.

    Args:
        shell: Shell name ('bash', 'zsh', 'fish')
        home: Home directory to resolve defaults against
        environ: Environment mapping (defaults to os.environ)

    Returns:
        List of candidate paths; empty for unknown shells
    """
    env = os.environ if environ is None else environ

    if shell == "bash":
        candidates = [
            env.get("BASH_HISTORY"),
            home / ".bash_history",
            home / ".history",
        ]
    elif shell == "zsh":
        candidates = [
            env.get("HISTFILE"),
            home / ".zsh_history",
            home / ".zhistory",
            home / ".history",
        ]
    elif shell == "fish":
        candidates = [
            home / ".local" / "share" / "fish" / "fish_history",
            home / ".config" / "fish" / "fish_history",
        ]
    else:
        return []

    return [Path(c).expanduser() for c in candidates if c]


def get_data_dir() -> Path:
    """
    Get the directory holding the cache files.

    Priority:
    1. Config file: user_config.get_data_dir()
    2. Environment variable: TERMLYTIC_DATA_DIR
    3. Default: ~/.termlytic

    Returns:
        Path to the data directory (may not exist yet)
    """
    from termlytic.config.user_config import get_data_dir as get_configured_data_dir

    configured = get_configured_data_dir()
    if configured:
        return Path(configured).expanduser()

    custom_path = os.getenv("TERMLYTIC_DATA_DIR")
    if custom_path:
        return Path(custom_path).expanduser()

    return APP_DATA_DIR
#endregion
