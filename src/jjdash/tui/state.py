"""Application state owned by the update loop."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum, auto

from jjdash.config import DashConfig
from jjdash.gateway.browser.abc import BrowserLauncher
from jjdash.gateway.clipboard.abc import Clipboard
from jjdash.gateway.config_store.abc import ConfigStore
from jjdash.gateway.connector.abc import Connection, ServiceConnector
from jjdash.gateway.github.abc import GitHubAuthGateway, GitHubGateway
from jjdash.gateway.jj.abc import JjGateway
from jjdash.gateway.tickets.abc import TicketService
from jjdash.graph.inference import BranchApplicability, infer_branch_applicability
from jjdash.models.types import (
    ChangedFile,
    ChangeSet,
    PullRequest,
    Repository,
    Ticket,
    Transition,
)
from jjdash.tui.machines.bookmark import BookmarkForm
from jjdash.tui.machines.description import DescriptionEditor
from jjdash.tui.machines.pr_form import PullRequestForm
from jjdash.tui.machines.rebase import RebaseState
from jjdash.tui.machines.settings import SettingsForm
from jjdash.tui.machines.warning import DescriptionWarning


class ViewMode(Enum):
    """Views the dashboard can show."""

    GRAPH = auto()
    PULL_REQUESTS = auto()
    TICKETS = auto()
    SETTINGS = auto()
    HELP = auto()
    CREATE_PR = auto()
    EDIT_DESCRIPTION = auto()
    CREATE_BOOKMARK = auto()
    GITHUB_LOGIN = auto()
    DESCRIPTION_WARNING = auto()


# Views that own all input while open.
MODAL_VIEWS = frozenset(
    {
        ViewMode.EDIT_DESCRIPTION,
        ViewMode.SETTINGS,
        ViewMode.CREATE_PR,
        ViewMode.CREATE_BOOKMARK,
        ViewMode.GITHUB_LOGIN,
        ViewMode.DESCRIPTION_WARNING,
    }
)


class FocusPane(Enum):
    """Which pane of the graph view receives list navigation."""

    GRAPH = auto()
    FILES = auto()


@dataclass(frozen=True)
class Services:
    """Gateway handles commands are built from.

    ``github`` and ``tickets`` are None until services are connected, and stay
    None when the settings do not allow a connection.
    """

    jj: JjGateway
    connector: ServiceConnector
    config_store: ConfigStore
    browser: BrowserLauncher
    clipboard: Clipboard
    github_auth: GitHubAuthGateway
    sleep: Callable[[float], None] = time.sleep
    github: GitHubGateway | None = None
    tickets: TicketService | None = None

    def with_connection(self, connection: Connection) -> Services:
        return replace(self, github=connection.github, tickets=connection.tickets)


@dataclass(frozen=True)
class LoginState:
    """GitHub device-flow login in progress.

    Attributes:
        device_code: Secret code used for polling
        user_code: Code shown to the user
        verification_uri: Page the user enters the code on
        interval: Seconds between polls; grows on slow_down
    """

    device_code: str
    user_code: str
    verification_uri: str
    interval: int


@dataclass(frozen=True)
class AppState:
    """Everything the dashboard knows.

    Selection indices are -1 when their list is empty, otherwise valid indices.
    """

    services: Services
    config: DashConfig
    repository: Repository | None = None
    applicability: BranchApplicability | None = None
    view: ViewMode = ViewMode.GRAPH
    return_view: ViewMode = ViewMode.GRAPH
    focus: FocusPane = FocusPane.GRAPH
    selected_change: int = -1
    selected_file: int = -1
    selected_pr: int = -1
    selected_ticket: int = -1
    error: str | None = None
    not_a_repo: bool = False
    error_path: str = ""
    loading: bool = True
    status: str = "Loading repository..."
    rebase: RebaseState = field(default_factory=RebaseState.initial)
    bookmark_form: BookmarkForm | None = None
    settings_form: SettingsForm | None = None
    pr_form: PullRequestForm | None = None
    description: DescriptionEditor | None = None
    warning: DescriptionWarning | None = None
    changed_files: tuple[ChangedFile, ...] = ()
    files_change_id: str = ""
    tickets: tuple[Ticket, ...] = ()
    transitions: tuple[Transition, ...] = ()
    status_change_mode: bool = False
    github_info: str = ""
    ticket_info: str = ""
    login: LoginState | None = None
    login_generation: int = 0
    tick_generation: int = 0
    pr_tick_generation: int = 0
    ticket_bookmarks: Mapping[str, str] = field(default_factory=dict)
    ticket_pr_titles: Mapping[str, str] = field(default_factory=dict)
    width: int = 80
    height: int = 24

    @property
    def changes(self) -> tuple[ChangeSet, ...]:
        if self.repository is None:
            return ()
        return self.repository.graph.changes

    @property
    def pull_requests(self) -> tuple[PullRequest, ...]:
        if self.repository is None:
            return ()
        return self.repository.pull_requests

    @property
    def current_change(self) -> ChangeSet | None:
        changes = self.changes
        if 0 <= self.selected_change < len(changes):
            return changes[self.selected_change]
        return None

    @property
    def current_pull_request(self) -> PullRequest | None:
        if 0 <= self.selected_pr < len(self.pull_requests):
            return self.pull_requests[self.selected_pr]
        return None

    @property
    def current_ticket(self) -> Ticket | None:
        if 0 <= self.selected_ticket < len(self.tickets):
            return self.tickets[self.selected_ticket]
        return None

    @property
    def all_bookmarks(self) -> list[str]:
        names: list[str] = []
        for change in self.changes:
            names.extend(change.bookmarks)
        return names


def clamp_index(index: int, count: int) -> int:
    """Keep ``index`` in ``[0, count)``; -1 when the list is empty.

    An index of -1 stays -1 so callers can decide whether to auto-select.
    """
    if count == 0:
        return -1
    if index >= count:
        return count - 1
    return max(-1, index)


def with_repository(state: AppState, repository: Repository) -> AppState:
    """Swap in a new snapshot and recompute the derived branch facts."""
    applicability = infer_branch_applicability(repository.graph, repository.pull_requests)
    return replace(state, repository=repository, applicability=applicability)


def initial_state(services: Services, config: DashConfig) -> AppState:
    return AppState(services=services, config=config)
