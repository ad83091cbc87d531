"""Cross-agent package manager for skills kept in git repositories."""

__version__ = "0.1.0"
