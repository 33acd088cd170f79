"""Perfect Kitchen client core: typed API client and local recipe store."""

__version__ = "1.0.0"
