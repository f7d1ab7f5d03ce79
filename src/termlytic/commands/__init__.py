"""CLI command implementations. Each module exposes run(console, ...)."""
