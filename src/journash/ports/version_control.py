"""Version control interface."""

from typing import Protocol


class VersionControl(Protocol):
    """Interface for backing up the journal directory."""

    def commit(self, message: str) -> None:
        """Commit all changes. Raises RuntimeError on failure."""
        ...

    def push(self) -> None:
        """Push committed changes to the remote. Raises RuntimeError on failure."""
        ...

    def status(self) -> str:
        """Human-readable repository status."""
        ...
