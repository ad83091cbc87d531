"""Abstract base class for repository resolvers."""

from abc import ABC, abstractmethod
from pathlib import Path


class AbstractResolver(ABC):
    """Turns a repository locator and ref into a local content snapshot."""

    # Subclasses must define this to identify their type
    REPO_TYPE: str = "unknown"

    @classmethod
    @abstractmethod
    def can_handle_url(cls, url: str) -> bool:
        """Check if this resolver can handle the given URL.

        Args:
            url: The URL to check

        Returns:
            True if this resolver can handle the URL, False otherwise
        """
        pass

    @abstractmethod
    def resolve(self, url: str, ref: str, dest: Path) -> str:
        """Fetch a snapshot of *url* at *ref* into *dest*.

        Any prior content at *dest* is replaced.

        Args:
            url: Repository locator
            ref: Branch, tag or commit to check out
            dest: Directory to hold the snapshot

        Returns:
            Content identifier of the snapshot

        Raises:
            ResolutionError: If the snapshot could not be produced
        """
        pass

    @abstractmethod
    def refresh(self, dest: Path, ref: str) -> str:
        """Update the snapshot at *dest* in place to the latest *ref*.

        Args:
            dest: Directory holding an existing snapshot
            ref: Ref the snapshot tracks

        Returns:
            Content identifier after the update

        Raises:
            ResolutionError: If the snapshot could not be updated
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.REPO_TYPE!r})"
