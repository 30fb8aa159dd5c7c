"""Lato travel marketplace core: authenticated API client, saved-items cache,
conversation store and the upstream trips proxy."""

__version__ = "0.1.0"
