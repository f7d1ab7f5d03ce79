"""History file discovery and reading."""
