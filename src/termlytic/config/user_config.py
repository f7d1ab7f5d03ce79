#region Imports
import json
from pathlib import Path
from typing import Optional

from termlytic.config.defaults import get_all_defaults
from termlytic.config.settings import APP_DATA_DIR
from termlytic.models.history_entry import SUPPORTED_SHELLS
#endregion


#region Constants
_CONFIG_FILENAME = "termlytic.json"
CONFIG_PATH = APP_DATA_DIR / _CONFIG_FILENAME
#endregion


#region Helpers

def _ensure_config_dir() -> bool:
    """Ensure the directory holding the config file exists. Returns True if available."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        return True
    except (PermissionError, OSError):
        return False


#endregion


#region Functions


def load_config() -> dict:
    """
    Load user configuration from disk.

    Missing keys are filled from defaults; a missing or corrupt file yields
    the defaults.

    Returns:
        Configuration dictionary with user preferences
    """
    config = get_default_config()

    if not CONFIG_PATH.exists():
        return config

    try:
        with open(CONFIG_PATH, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (json.JSONDecodeError, OSError):
        return config

    if isinstance(stored, dict):
        config.update(stored)
    return config


def save_config(config: dict) -> None:
    """
    Save user configuration to disk.

    Args:
        config: Configuration dictionary to save

    Raises:
        OSError: If config cannot be written
    """
    if not _ensure_config_dir():
        raise OSError(f"Cannot create config directory: {CONFIG_PATH.parent}")

    with open(CONFIG_PATH, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)


def get_default_config() -> dict:
    """
    Get default configuration values.

    Returns:
        Default configuration dictionary
    """
    config = get_all_defaults()
    config["version"] = "1.0"
    return config


def get_data_dir() -> Optional[str]:
    """
    Get the custom cache directory from config.

    Returns:
        Custom directory path or None if not set
    """
    config = load_config()
    return config.get("data_dir") or None


def set_data_dir(path: str) -> None:
    """
    Set a custom cache directory.

    Args:
        path: Directory to hold history_data.json and metadata.json

    Raises:
        ValueError: If path points at an existing file
    """
    target = Path(path).expanduser()
    if target.exists() and not target.is_dir():
        raise ValueError(f"Not a directory: {target}")

    config = load_config()
    config["data_dir"] = str(target)
    save_config(config)


def clear_data_dir() -> None:
    """Clear the custom cache directory (revert to default)."""
    config = load_config()
    config["data_dir"] = ""
    save_config(config)


def get_history_path_overrides() -> dict[str, str]:
    """
    Get explicitly configured history file paths.

    Returns:
        Mapping of shell name to file path
    """
    config = load_config()
    overrides = config.get("history_paths") or {}
    return {shell: path for shell, path in overrides.items() if shell in SUPPORTED_SHELLS and path}


def set_history_path(shell: str, path: str) -> None:
    """
    Pin the history file used for a shell.

    Args:
        shell: One of 'bash', 'zsh', 'fish'
        path: History file path

    Raises:
        ValueError: If shell is not supported
    """
    if shell not in SUPPORTED_SHELLS:
        raise ValueError(f"Invalid shell: {shell}. Must be one of {', '.join(SUPPORTED_SHELLS)}")

    config = load_config()
    overrides = dict(config.get("history_paths") or {})
    overrides[shell] = str(Path(path).expanduser())
    config["history_paths"] = overrides
    save_config(config)


def clear_history_path(shell: str) -> None:
    """Remove a pinned history path so the shell falls back to auto-detection."""
    config = load_config()
    overrides = dict(config.get("history_paths") or {})
    overrides.pop(shell, None)
    config["history_paths"] = overrides
    save_config(config)


def get_timezone_setting() -> str:
    """
    Get the configured timezone.

    Returns:
        IANA timezone name or 'auto'
    """
    config = load_config()
    return config.get("timezone") or "auto"


def set_timezone_setting(tz_name: str) -> None:
    """
    Set the timezone used for day/hour bucketing.

    Raises:
        ValueError: If tz_name is not a known timezone
    """
    from termlytic.utils.timezone import validate_timezone

    if not validate_timezone(tz_name):
        raise ValueError(f"Unknown timezone: {tz_name}")

    config = load_config()
    config["timezone"] = tz_name
    save_config(config)


def get_analysis_options() -> dict:
    """
    Get the numeric analysis settings.

    Returns:
        Dictionary with max_top_commands, day_start_hour, day_end_hour, result_cap
    """
    config = load_config()
    defaults = get_all_defaults()
    options = {}
    for key in ("max_top_commands", "day_start_hour", "day_end_hour", "result_cap"):
        try:
            options[key] = int(config.get(key, defaults[key]))
        except (TypeError, ValueError):
            options[key] = defaults[key]
    return options


def get_watch_debounce() -> float:
    """Get the debounce interval for the history file watcher, in seconds."""
    config = load_config()
    try:
        return float(config.get("watch_debounce", 2))
    except (TypeError, ValueError):
        return 2.0


#endregion
