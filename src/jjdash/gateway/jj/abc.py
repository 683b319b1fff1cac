"""Abstract base class for jj operations.

Every mutation is followed by the caller reloading the repository; the gateway
does not push change notifications.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from jjdash.models.types import ChangedFile, Repository


class JjGateway(ABC):
    """Abstract interface for the jj command line tool.

    All implementations (real, fake) must implement this interface.
    Failures raise JjCommandError; a missing repository raises NotARepositoryError.
    """

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def load_repository(self) -> Repository:
        """Load a fresh snapshot of the change graph.

        The returned Repository carries no pull requests; callers merge those in.

        Raises:
            NotARepositoryError: If the path is not inside a jj repository
            JjCommandError: If jj fails
        """
        ...

    @abstractmethod
    def get_description(self, change_id: str) -> str:
        """Return the full description of a change (may be empty)."""
        ...

    @abstractmethod
    def changed_files(self, change_id: str) -> list[ChangedFile]:
        """Return the files touched by a change."""
        ...

    @abstractmethod
    def remote_url(self) -> str | None:
        """URL of the origin remote (or the first remote), None if there is none."""
        ...

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def new_change(self, parent_id: str | None) -> None:
        """Create a new empty change on top of ``parent_id`` (or @ when None)."""
        ...

    @abstractmethod
    def edit(self, change_id: str) -> None:
        """Make ``change_id`` the working-copy change."""
        ...

    @abstractmethod
    def squash(self, change_id: str) -> None:
        """Squash a change into its parent, keeping both descriptions."""
        ...

    @abstractmethod
    def abandon(self, change_id: str) -> None:
        ...

    @abstractmethod
    def rebase(self, source_id: str, destination_id: str) -> None:
        """Rebase ``source_id`` and its descendants onto ``destination_id``."""
        ...

    @abstractmethod
    def describe(self, change_id: str, text: str) -> None:
        ...

    @abstractmethod
    def create_bookmark(self, name: str, change_id: str) -> None:
        ...

    @abstractmethod
    def move_bookmark(self, name: str, change_id: str) -> None:
        ...

    @abstractmethod
    def delete_bookmark(self, name: str) -> None:
        ...

    @abstractmethod
    def create_bookmark_from_main(self, name: str) -> None:
        """Start a new line of work from main and put ``name`` on it.

        Reuses the first non-empty mutable change directly on top of main when the
        working copy descends from one; otherwise creates a new change on main.
        """
        ...

    @abstractmethod
    def move_file_to_parent(self, change_id: str, path: str) -> None:
        """Split ``path`` out of a change into a new change inserted below it."""
        ...

    @abstractmethod
    def move_file_to_child(self, change_id: str, path: str) -> None:
        """Split ``path`` out of a change into a new change inserted above it."""
        ...

    @abstractmethod
    def revert_file(self, change_id: str, path: str) -> None:
        """Restore ``path`` in a change from the change's parents."""
        ...

    @abstractmethod
    def fetch(self) -> str:
        """Fetch from all git remotes.

        Returns:
            Output of the fetch
        """
        ...

    @abstractmethod
    def push_bookmark(self, name: str) -> str:
        """Push a bookmark to the git remote.

        Returns:
            Output of the push, for display on failure of later steps
        """
        ...

    @abstractmethod
    def undo(self) -> None:
        ...

    @abstractmethod
    def redo(self) -> None:
        ...

    @abstractmethod
    def init_repository(self) -> None:
        """Initialize a git-backed jj repository at the gateway's path."""
        ...
