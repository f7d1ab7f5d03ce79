"""Statistics engine: single-pass analysis, time ranges and yearly views."""
