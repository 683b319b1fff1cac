"""Messages consumed by the update loop.

Input events, timer ticks, and exactly one result message per command.
"""

from __future__ import annotations

from dataclasses import dataclass

from jjdash.gateway.connector.abc import Connection
from jjdash.models.types import ChangedFile, PullRequest, Repository, Ticket, Transition

# ============================================================================
# Input and timers
# ============================================================================


@dataclass(frozen=True)
class Started:
    """The application is mounted; connect services and load the repository."""


@dataclass(frozen=True)
class KeyPressed:
    """A key event. ``character`` is the printable character, if any."""

    key: str
    character: str | None = None


@dataclass(frozen=True)
class WindowResized:
    width: int
    height: int


@dataclass(frozen=True)
class Tick:
    generation: int


@dataclass(frozen=True)
class PullRequestTick:
    generation: int


@dataclass(frozen=True)
class LoginPoll:
    generation: int


# ============================================================================
# Command results
# ============================================================================


@dataclass(frozen=True)
class RepositoryLoaded:
    repository: Repository


@dataclass(frozen=True)
class RepositoryReloadedSilently:
    repository: Repository


@dataclass(frozen=True)
class SilentReloadFailed:
    error: str


@dataclass(frozen=True)
class EditCompleted:
    """The working copy moved to another change; ``repository`` is the reload."""

    repository: Repository


@dataclass(frozen=True)
class FileOperationCompleted:
    """A file was moved or reverted; ``repository`` is the reload."""

    repository: Repository
    status: str


@dataclass(frozen=True)
class FetchCompleted:
    repository: Repository


@dataclass(frozen=True)
class CommandFailed:
    """A collaborator failed.

    Attributes:
        error: Message shown in the error banner
        not_a_repo: True when the failure is the missing repository at startup
        path: Directory that was checked, for the bootstrap banner
    """

    error: str
    not_a_repo: bool = False
    path: str = ""


@dataclass(frozen=True)
class RepositoryInitialized:
    pass


@dataclass(frozen=True)
class ServicesInitialized:
    repository: Repository
    connection: Connection


@dataclass(frozen=True)
class PullRequestsLoaded:
    pull_requests: tuple[PullRequest, ...]


@dataclass(frozen=True)
class PullRequestMerged:
    number: int


@dataclass(frozen=True)
class PullRequestClosed:
    number: int


@dataclass(frozen=True)
class PullRequestCreated:
    pull_request: PullRequest


@dataclass(frozen=True)
class BranchPushed:
    branch: str


@dataclass(frozen=True)
class TicketsLoaded:
    tickets: tuple[Ticket, ...]


@dataclass(frozen=True)
class TransitionsLoaded:
    key: str
    transitions: tuple[Transition, ...]


@dataclass(frozen=True)
class TransitionCompleted:
    """``status`` is empty when no matching transition was offered."""

    key: str
    status: str


@dataclass(frozen=True)
class BookmarkSaved:
    name: str
    moved: bool
    ticket_key: str = ""


@dataclass(frozen=True)
class BookmarkDeleted:
    name: str


@dataclass(frozen=True)
class ChangedFilesLoaded:
    change_id: str
    files: tuple[ChangedFile, ...]


@dataclass(frozen=True)
class DescriptionLoaded:
    change_id: str
    description: str


@dataclass(frozen=True)
class DescriptionSaved:
    short_id: str


@dataclass(frozen=True)
class UndoCompleted:
    status: str


@dataclass(frozen=True)
class SettingsSaved:
    """``location`` is the file written; ``from_login`` marks the save after a GitHub login."""

    location: str
    local: bool
    from_login: bool = False


@dataclass(frozen=True)
class LoginStarted:
    device_code: str
    user_code: str
    verification_uri: str
    interval: int


@dataclass(frozen=True)
class LoginPending:
    """No token yet; ``slow_down`` asks for a longer interval."""

    slow_down: bool


@dataclass(frozen=True)
class LoginSucceeded:
    token: str


@dataclass(frozen=True)
class LoginFailed:
    error: str


@dataclass(frozen=True)
class UrlOpened:
    url: str


@dataclass(frozen=True)
class ClipboardCopied:
    """``label`` names what was copied; ``text`` is shown when the copy failed."""

    label: str
    text: str
    success: bool


Message = (
    Started
    | KeyPressed
    | WindowResized
    | Tick
    | PullRequestTick
    | LoginPoll
    | RepositoryLoaded
    | RepositoryReloadedSilently
    | SilentReloadFailed
    | EditCompleted
    | FileOperationCompleted
    | FetchCompleted
    | CommandFailed
    | RepositoryInitialized
    | ServicesInitialized
    | PullRequestsLoaded
    | PullRequestMerged
    | PullRequestClosed
    | PullRequestCreated
    | BranchPushed
    | TicketsLoaded
    | TransitionsLoaded
    | TransitionCompleted
    | BookmarkSaved
    | BookmarkDeleted
    | ChangedFilesLoaded
    | DescriptionLoaded
    | DescriptionSaved
    | UndoCompleted
    | SettingsSaved
    | LoginStarted
    | LoginPending
    | LoginSucceeded
    | LoginFailed
    | UrlOpened
    | ClipboardCopied
)
