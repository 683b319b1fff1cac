"""Value types for repository snapshots, pull requests and tickets.

Every type here is immutable. A reload replaces the whole snapshot; nothing is
patched in place.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class PullRequestState(Enum):
    """Lifecycle state of a pull request."""

    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"


class CheckStatus(Enum):
    """Aggregate status of the check runs on a pull request head."""

    NONE = "none"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class ReviewStatus(Enum):
    """Aggregate review decision on a pull request."""

    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"


@dataclass(frozen=True)
class ChangeSet:
    """One jj change.

    Attributes:
        commit_id: Commit hash prefix; changes on every rewrite
        change_id: Change id prefix; survives rewrites
        short_id: Display id
        author: Author name
        email: Author email
        timestamp: Author timestamp, None when jj did not report one
        summary: First line of the description
        description: Full description (the summary when only the first line is loaded)
        parents: Commit ids of the parents
        bookmarks: Bookmark names pointing directly at this change
        is_working_copy: True for the change checked out as @
        has_conflicts: True when the change contains unresolved conflicts
        is_immutable: True when the change is shared and must not be rewritten
        graph_prefix: Graph art jj drew in front of the row
    """

    commit_id: str
    change_id: str
    short_id: str
    author: str
    email: str
    timestamp: datetime | None
    summary: str
    description: str
    parents: tuple[str, ...]
    bookmarks: tuple[str, ...]
    is_working_copy: bool
    has_conflicts: bool
    is_immutable: bool
    graph_prefix: str = ""


@dataclass(frozen=True)
class ChangeGraph:
    """Ordered changes plus a parent -> children index.

    Parent ids that do not resolve to a change in the graph are kept on the
    ChangeSet but never appear as keys of ``children``.
    """

    changes: tuple[ChangeSet, ...]
    children: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    @staticmethod
    def build(changes: tuple[ChangeSet, ...]) -> ChangeGraph:
        """Create a graph, computing the adjacency index from parent links."""
        known = {change.commit_id for change in changes}
        children: dict[str, list[str]] = {}
        for change in changes:
            for parent in change.parents:
                if parent in known:
                    children.setdefault(parent, []).append(change.commit_id)
        return ChangeGraph(
            changes=changes,
            children={parent: tuple(ids) for parent, ids in children.items()},
        )

    @staticmethod
    def empty() -> ChangeGraph:
        return ChangeGraph(changes=())

    def __len__(self) -> int:
        return len(self.changes)

    def index_of(self, identity: str) -> int:
        """Find a change by commit id or change id.

        Returns:
            The index, or -1 if no change matches
        """
        for index, change in enumerate(self.changes):
            if identity in (change.commit_id, change.change_id):
                return index
        return -1


@dataclass(frozen=True)
class PullRequest:
    """A GitHub pull request."""

    number: int
    title: str
    body: str
    url: str
    state: PullRequestState
    base_branch: str
    head_branch: str
    check_status: CheckStatus = CheckStatus.NONE
    review_status: ReviewStatus = ReviewStatus.NONE

    @property
    def is_open(self) -> bool:
        return self.state == PullRequestState.OPEN


@dataclass(frozen=True)
class Ticket:
    """Provider-agnostic work item.

    Attributes:
        key: Provider key used for API calls (Jira issue key, Codecks card id)
        display_key: Short key shown to the user and used in bookmark names
        summary: One-line title
        status: Human readable status
        priority: Human readable priority
        ticket_type: Issue type ("Bug", "Story", "Card", ...)
        description: Plain text description
        deck_id: Codecks deck the card lives in, empty for other providers
    """

    key: str
    display_key: str
    summary: str
    status: str
    priority: str
    ticket_type: str
    description: str
    deck_id: str = ""


@dataclass(frozen=True)
class Transition:
    """A status change a ticket provider offers for a ticket."""

    transition_id: str
    name: str


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by a change (``jj diff --summary`` line)."""

    status: str
    path: str


@dataclass(frozen=True)
class Repository:
    """Snapshot of a repository and the pull requests fetched for it."""

    path: str
    graph: ChangeGraph
    pull_requests: tuple[PullRequest, ...] = ()

    @property
    def working_copy(self) -> ChangeSet | None:
        for change in self.graph.changes:
            if change.is_working_copy:
                return change
        return None

    def with_pull_requests(self, pull_requests: tuple[PullRequest, ...]) -> Repository:
        """Return a copy carrying ``pull_requests``."""
        return replace(self, pull_requests=pull_requests)


@dataclass(frozen=True)
class CreatePullRequest:
    """Parameters for opening a pull request."""

    title: str
    body: str
    head_branch: str
    base_branch: str


@dataclass(frozen=True)
class UpdatePullRequest:
    """Fields to change on an existing pull request; None leaves a field as is."""

    title: str | None = None
    body: str | None = None


@dataclass(frozen=True)
class PullRequestFilters:
    """Listing options for pull requests.

    Attributes:
        only_mine: Only pull requests authored by the authenticated user
        show_merged: Include merged pull requests
        show_closed: Include closed, unmerged pull requests
        limit: Maximum number of pull requests returned
    """

    only_mine: bool
    show_merged: bool
    show_closed: bool
    limit: int

    @staticmethod
    def default() -> PullRequestFilters:
        return PullRequestFilters(only_mine=False, show_merged=False, show_closed=False, limit=100)
