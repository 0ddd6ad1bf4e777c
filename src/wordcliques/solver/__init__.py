"""Compatibility graph search: configuration, workers and orchestration."""
