"""
Default configuration values for termlytic.

Edit this file to change default settings.
This file is used for:
1. First run (no config file yet)
2. Falling back when the config file is missing keys or corrupt
"""

#region Analysis Defaults

DEFAULT_ANALYSIS = {
    "max_top_commands": 50,     # Entries kept in each frequency table
    "day_start_hour": 6,        # Daytime window start (inclusive)
    "day_end_hour": 18,         # Daytime window end (exclusive)
    "result_cap": 10000,        # Entries returned to callers per response
}

#endregion


#region Interval Defaults

DEFAULT_INTERVALS = {
    "watch_debounce": 2,        # Seconds between watcher-triggered refreshes
}

#endregion


#region Other Defaults

DEFAULT_PREFERENCES = {
    "timezone": "auto",         # auto | UTC | Asia/Seoul | ...
    "data_dir": "",             # custom cache directory or empty (~/.termlytic)
    "history_paths": {},        # shell -> explicit history file path
}

#endregion


def get_all_defaults() -> dict:
    """
    Get all default settings merged into a single dictionary.

    Returns:
        Dictionary with all default settings combined
    """
    defaults = {}
    defaults.update(DEFAULT_ANALYSIS)
    defaults.update(DEFAULT_INTERVALS)
    defaults.update(DEFAULT_PREFERENCES)
    defaults["history_paths"] = {}
    return defaults
