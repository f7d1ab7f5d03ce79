"""Configuration module for termlytic."""

from termlytic.config.defaults import (
    DEFAULT_ANALYSIS,
    DEFAULT_INTERVALS,
    DEFAULT_PREFERENCES,
    get_all_defaults,
)

__all__ = [
    "DEFAULT_ANALYSIS",
    "DEFAULT_INTERVALS",
    "DEFAULT_PREFERENCES",
    "get_all_defaults",
]
