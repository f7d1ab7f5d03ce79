"""Shell history ingestion, incremental caching and usage statistics."""

__version__ = "0.1.0"
