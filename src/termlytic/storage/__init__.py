"""On-disk cache of parsed history and its analysis."""
