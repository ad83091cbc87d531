"""URL and path helpers for skillctl."""

from pathlib import Path

REMOTE_PREFIXES = ("http://", "https://", "git@", "git://", "ssh://")


def is_file_url(url: str) -> bool:
    """Check if a URL is a file:// URL or a plain filesystem path.

    Args:
        url: The URL to check

    Returns:
        True if it's a file:// URL or plain path, False otherwise
    """
    # Reject URLs with leading/trailing whitespace
    if url != url.strip():
        return False

    if url.startswith("file://"):
        return True

    # Absolute, home-relative and explicitly relative paths
    if url.startswith(("/", "~", "./", "../")):
        return True

    return url in (".", "..")


def resolve_file_path(url: str) -> Path:
    """Resolve a file:// URL or plain path to an absolute path.

    Args:
        url: The file:// URL to resolve (or plain path)

    Returns:
        Resolved absolute Path
    """
    path_str = url[7:] if url.startswith("file://") else url
    return Path(path_str).expanduser().resolve()


def normalize_git_url(url: str) -> str:
    """Turn a repository locator into something git can clone.

    Remote URLs pass through unchanged, local paths become ``file://``
    URLs (so shallow clones are honoured), and bare host paths such as
    ``github.com/org/repo.git`` get an ``https://`` prefix.

    Args:
        url: Locator as given by the user

    Returns:
        Clonable URL
    """
    if url.startswith(REMOTE_PREFIXES):
        return url
    if is_file_url(url):
        return f"file://{resolve_file_path(url)}"
    return f"https://{url}"
