"""Analysis orchestration."""
