"""Per-dialect history line parsers."""
