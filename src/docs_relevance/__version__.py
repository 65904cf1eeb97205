"""Version information for docs-relevance-search."""

__version__ = "0.3.0"
