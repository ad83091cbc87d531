"""Utility functions for skillctl."""

from .prompt import confirm
from .url import is_file_url, normalize_git_url, resolve_file_path

__all__ = [
    "confirm",
    "is_file_url",
    "normalize_git_url",
    "resolve_file_path",
]
