"""Command factories.

Each factory captures immutable values and gateway handles and returns a Command
whose ``run`` performs the blocking calls and returns one message. Gateway
failures (JjDashError subclasses) become failure messages here; any other
exception is a bug and propagates to the shell.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from jjdash.config import DashConfig
from jjdash.errors import JjDashError, NotARepositoryError
from jjdash.gateway.browser.abc import BrowserLauncher
from jjdash.gateway.clipboard.abc import Clipboard
from jjdash.gateway.config_store.abc import ConfigStore
from jjdash.gateway.connector.abc import ServiceConnector
from jjdash.gateway.github.abc import GitHubAuthGateway, GitHubGateway, PollStatus
from jjdash.gateway.jj.abc import JjGateway
from jjdash.gateway.tickets.abc import TicketService
from jjdash.gateway.tickets.filtering import find_transition, select_tickets
from jjdash.models.types import CreatePullRequest, PullRequest, PullRequestFilters
from jjdash.tui.effects.types import Command
from jjdash.tui.machines.bookmark import BookmarkAction, BookmarkSubmission
from jjdash.tui.machines.pr_form import PullRequestForm
from jjdash.tui.messages import (
    BookmarkDeleted,
    BookmarkSaved,
    BranchPushed,
    ChangedFilesLoaded,
    ClipboardCopied,
    CommandFailed,
    DescriptionLoaded,
    DescriptionSaved,
    EditCompleted,
    FetchCompleted,
    FileOperationCompleted,
    LoginFailed,
    LoginPending,
    LoginStarted,
    LoginSucceeded,
    Message,
    PullRequestClosed,
    PullRequestCreated,
    PullRequestMerged,
    PullRequestsLoaded,
    RepositoryInitialized,
    RepositoryLoaded,
    RepositoryReloadedSilently,
    ServicesInitialized,
    SettingsSaved,
    SilentReloadFailed,
    TicketsLoaded,
    TransitionCompleted,
    TransitionsLoaded,
    UndoCompleted,
    UrlOpened,
)

logger = logging.getLogger(__name__)

PUSH_SETTLE_SECONDS = 3.0
CREATE_PR_ATTEMPTS = 5
CREATE_PR_RETRY_SECONDS = 3.0


def _is_transient_create_error(message: str) -> bool:
    return "not all refs" in message or "422" in message


# ============================================================================
# Repository
# ============================================================================


def initialize_services(
    jj: JjGateway, connector: ServiceConnector, config: DashConfig
) -> Command:
    """Load the repository, then connect GitHub and the ticket provider."""

    def run() -> Message:
        try:
            repository = jj.load_repository()
            remote_url = jj.remote_url()
        except NotARepositoryError as e:
            return CommandFailed(error=str(e), not_a_repo=True, path=e.path)
        except JjDashError as e:
            return CommandFailed(error=str(e))
        connection = connector.connect(config, remote_url)
        return ServicesInitialized(repository=repository, connection=connection)

    return Command(name="initialize_services", run=run)


def load_repository(jj: JjGateway) -> Command:
    def run() -> Message:
        try:
            return RepositoryLoaded(repository=jj.load_repository())
        except NotARepositoryError as e:
            return CommandFailed(error=str(e), not_a_repo=True, path=e.path)
        except JjDashError as e:
            return CommandFailed(error=str(e))

    return Command(name="load_repository", run=run)


def reload_silently(jj: JjGateway) -> Command:
    """Background reload; failures are reported without touching the error banner."""

    def run() -> Message:
        try:
            return RepositoryReloadedSilently(repository=jj.load_repository())
        except JjDashError as e:
            return SilentReloadFailed(error=str(e))

    return Command(name="reload_silently", run=run)


def init_repository(jj: JjGateway) -> Command:
    def run() -> Message:
        try:
            jj.init_repository()
        except JjDashError as e:
            return CommandFailed(error=f"failed to initialize repository: {e}", not_a_repo=True)
        return RepositoryInitialized()

    return Command(name="init_repository", run=run)


def _mutate_then_load(
    name: str,
    jj: JjGateway,
    mutation: Callable[[], None],
    failure: str,
    *,
    working_copy_moved: bool = False,
) -> Command:
    def run() -> Message:
        try:
            mutation()
        except JjDashError as e:
            return CommandFailed(error=f"{failure}: {e}")
        try:
            repository = jj.load_repository()
        except JjDashError as e:
            return CommandFailed(error=str(e))
        if working_copy_moved:
            return EditCompleted(repository=repository)
        return RepositoryLoaded(repository=repository)

    return Command(name=name, run=run)


def new_change(jj: JjGateway, parent_id: str | None) -> Command:
    return _mutate_then_load(
        "new_change", jj, lambda: jj.new_change(parent_id), "failed to create commit"
    )


def edit_change(jj: JjGateway, change_id: str) -> Command:
    return _mutate_then_load(
        "edit_change", jj, lambda: jj.edit(change_id), "failed to checkout", working_copy_moved=True
    )


def squash_change(jj: JjGateway, change_id: str) -> Command:
    return _mutate_then_load("squash_change", jj, lambda: jj.squash(change_id), "failed to squash")


def abandon_change(jj: JjGateway, change_id: str) -> Command:
    return _mutate_then_load("abandon_change", jj, lambda: jj.abandon(change_id), "failed to abandon")


def rebase_change(jj: JjGateway, source_id: str, destination_id: str) -> Command:
    return _mutate_then_load(
        "rebase_change", jj, lambda: jj.rebase(source_id, destination_id), "failed to rebase"
    )


def _file_operation(name: str, jj: JjGateway, mutation: Callable[[], None], failure: str, status: str) -> Command:
    def run() -> Message:
        try:
            mutation()
        except JjDashError as e:
            return CommandFailed(error=f"{failure}: {e}")
        try:
            repository = jj.load_repository()
        except JjDashError as e:
            return CommandFailed(error=str(e))
        return FileOperationCompleted(repository=repository, status=status)

    return Command(name=name, run=run)


def move_file_to_parent(jj: JjGateway, change_id: str, path: str) -> Command:
    return _file_operation(
        "move_file_to_parent",
        jj,
        lambda: jj.move_file_to_parent(change_id, path),
        f"failed to move {path}",
        f"Moved {path} to new parent commit",
    )


def move_file_to_child(jj: JjGateway, change_id: str, path: str) -> Command:
    return _file_operation(
        "move_file_to_child",
        jj,
        lambda: jj.move_file_to_child(change_id, path),
        f"failed to move {path}",
        f"Moved {path} to new child commit",
    )


def revert_file(jj: JjGateway, change_id: str, path: str) -> Command:
    return _file_operation(
        "revert_file",
        jj,
        lambda: jj.revert_file(change_id, path),
        f"failed to revert {path}",
        f"Reverted changes to {path}",
    )


def fetch(jj: JjGateway) -> Command:
    def run() -> Message:
        try:
            output = jj.fetch()
        except JjDashError as e:
            return CommandFailed(error=str(e))
        logger.debug("jj git fetch: %s", output)
        try:
            repository = jj.load_repository()
        except JjDashError as e:
            return CommandFailed(error=str(e))
        return FetchCompleted(repository=repository)

    return Command(name="fetch", run=run)


def load_changed_files(jj: JjGateway, change_id: str) -> Command:
    """Files for one change; a failure yields an empty list."""

    def run() -> Message:
        try:
            files = tuple(jj.changed_files(change_id))
        except JjDashError as e:
            logger.warning("Could not load changed files for %s: %s", change_id, e)
            files = ()
        return ChangedFilesLoaded(change_id=change_id, files=files)

    return Command(name="load_changed_files", run=run)


def load_description(jj: JjGateway, change_id: str) -> Command:
    def run() -> Message:
        try:
            description = jj.get_description(change_id)
        except JjDashError as e:
            return CommandFailed(error=f"failed to load description: {e}")
        return DescriptionLoaded(change_id=change_id, description=description)

    return Command(name="load_description", run=run)


def save_description(jj: JjGateway, change_id: str, short_id: str, text: str) -> Command:
    def run() -> Message:
        try:
            jj.describe(change_id, text)
        except JjDashError as e:
            return CommandFailed(error=f"failed to update description: {e}")
        return DescriptionSaved(short_id=short_id)

    return Command(name="save_description", run=run)


def save_bookmark(jj: JjGateway, submission: BookmarkSubmission, ticket_key: str) -> Command:
    """Create, move, or branch-from-main depending on the submission."""

    def run() -> Message:
        try:
            if submission.action == BookmarkAction.MOVE:
                jj.move_bookmark(submission.name, submission.change_id)
            elif submission.action == BookmarkAction.CREATE:
                jj.create_bookmark(submission.name, submission.change_id)
            else:
                jj.create_bookmark_from_main(submission.name)
        except JjDashError as e:
            return CommandFailed(error=f"failed to save bookmark {submission.name}: {e}")
        return BookmarkSaved(
            name=submission.name,
            moved=submission.action == BookmarkAction.MOVE,
            ticket_key=ticket_key,
        )

    return Command(name="save_bookmark", run=run)


def delete_bookmark(jj: JjGateway, name: str) -> Command:
    def run() -> Message:
        try:
            jj.delete_bookmark(name)
        except JjDashError as e:
            return CommandFailed(error=f"failed to delete bookmark {name}: {e}")
        return BookmarkDeleted(name=name)

    return Command(name="delete_bookmark", run=run)


def undo(jj: JjGateway) -> Command:
    def run() -> Message:
        try:
            jj.undo()
        except JjDashError as e:
            return CommandFailed(error=f"undo failed: {e}")
        return UndoCompleted(status="Undo successful")

    return Command(name="undo", run=run)


def redo(jj: JjGateway) -> Command:
    def run() -> Message:
        try:
            jj.redo()
        except JjDashError as e:
            return CommandFailed(error=f"redo failed: {e}")
        return UndoCompleted(status="Redo successful")

    return Command(name="redo", run=run)


# ============================================================================
# Pull requests
# ============================================================================


def load_pull_requests(github: GitHubGateway, filters: PullRequestFilters, info: str) -> Command:
    def run() -> Message:
        try:
            pull_requests = github.list_pull_requests(filters)
        except JjDashError as e:
            message = f"failed to load PRs: {e}"
            if info:
                message += f" [{info}]"
            return CommandFailed(error=message)
        return PullRequestsLoaded(pull_requests=tuple(pull_requests))

    return Command(name="load_pull_requests", run=run)


def merge_pull_request(github: GitHubGateway, number: int) -> Command:
    def run() -> Message:
        try:
            github.merge_pull_request(number)
        except JjDashError as e:
            return CommandFailed(error=f"Failed to merge PR #{number}: {e}")
        return PullRequestMerged(number=number)

    return Command(name="merge_pull_request", run=run)


def close_pull_request(github: GitHubGateway, number: int) -> Command:
    def run() -> Message:
        try:
            github.close_pull_request(number)
        except JjDashError as e:
            return CommandFailed(error=f"Failed to close PR #{number}: {e}")
        return PullRequestClosed(number=number)

    return Command(name="close_pull_request", run=run)


def create_pull_request(
    jj: JjGateway,
    github: GitHubGateway,
    form: PullRequestForm,
    sleep: Callable[[float], None],
) -> Command:
    """Move the bookmark if needed, push it, then open the pull request.

    GitHub may not see a just-pushed branch yet, so creation is retried on
    "not all refs" and 422 errors.
    """

    def run() -> Message:
        if form.needs_move and form.change_id:
            try:
                jj.move_bookmark(form.head_branch, form.change_id)
            except JjDashError as e:
                return CommandFailed(error=f"failed to move bookmark {form.head_branch}: {e}")
        try:
            push_output = jj.push_bookmark(form.head_branch)
        except JjDashError as e:
            return CommandFailed(error=f"failed to push branch: {e}")

        sleep(PUSH_SETTLE_SECONDS)

        request = CreatePullRequest(
            title=form.title,
            body=form.body,
            head_branch=form.head_branch,
            base_branch=form.base_branch,
        )
        pull_request: PullRequest | None = None
        last_error = ""
        for attempt in range(1, CREATE_PR_ATTEMPTS + 1):
            try:
                pull_request = github.create_pull_request(request)
            except JjDashError as e:
                last_error = str(e)
                logger.debug("Create PR attempt %d failed: %s", attempt, last_error)
                if _is_transient_create_error(last_error) and attempt < CREATE_PR_ATTEMPTS:
                    sleep(CREATE_PR_RETRY_SECONDS)
                    continue
                break
            break
        if pull_request is None:
            return CommandFailed(error=f"failed to create PR: {last_error}\nPush output: {push_output}")
        return PullRequestCreated(pull_request=pull_request)

    return Command(name="create_pull_request", run=run)


def push_to_pull_request(jj: JjGateway, branch: str, change_id: str, move_bookmark: bool) -> Command:
    def run() -> Message:
        if move_bookmark:
            try:
                jj.move_bookmark(branch, change_id)
            except JjDashError as e:
                return CommandFailed(error=f"failed to move bookmark {branch}: {e}")
        try:
            jj.push_bookmark(branch)
        except JjDashError as e:
            return CommandFailed(error=f"failed to push: {e}")
        return BranchPushed(branch=branch)

    return Command(name="push_to_pull_request", run=run)


# ============================================================================
# Tickets
# ============================================================================


def load_tickets(tickets: TicketService, excluded_statuses: frozenset[str]) -> Command:
    def run() -> Message:
        try:
            assigned = tickets.list_assigned()
        except JjDashError as e:
            return CommandFailed(error=f"failed to load tickets: {e}")
        return TicketsLoaded(tickets=tuple(select_tickets(assigned, excluded_statuses)))

    return Command(name="load_tickets", run=run)


def load_transitions(tickets: TicketService, key: str) -> Command:
    """Transitions for one ticket; a failure yields none."""

    def run() -> Message:
        try:
            transitions = tuple(tickets.available_transitions(key))
        except JjDashError as e:
            logger.warning("Could not load transitions for %s: %s", key, e)
            transitions = ()
        return TransitionsLoaded(key=key, transitions=transitions)

    return Command(name="load_transitions", run=run)


def transition_ticket(tickets: TicketService, key: str, target: str) -> Command:
    """Apply the transition whose name matches ``target``.

    Completes with an empty status when the provider offers no such transition.
    """

    def run() -> Message:
        try:
            transition = find_transition(tickets.available_transitions(key), target)
            if transition is None:
                return TransitionCompleted(key=key, status="")
            tickets.apply_transition(key, transition.transition_id)
        except JjDashError as e:
            return CommandFailed(error=f"Failed to transition {key}: {e}")
        return TransitionCompleted(key=key, status=target)

    return Command(name="transition_ticket", run=run)


# ============================================================================
# Settings and login
# ============================================================================


def save_settings(
    config_store: ConfigStore, config: DashConfig, *, local: bool, from_login: bool = False
) -> Command:
    def run() -> Message:
        try:
            path = config_store.save(config, local=local)
        except JjDashError as e:
            return CommandFailed(error=f"Error saving settings: {e}")
        return SettingsSaved(location=str(path), local=local, from_login=from_login)

    return Command(name="save_settings", run=run)


def start_login(auth: GitHubAuthGateway) -> Command:
    def run() -> Message:
        try:
            code = auth.start_device_flow()
        except JjDashError as e:
            return LoginFailed(error=f"failed to start GitHub login: {e}")
        return LoginStarted(
            device_code=code.device_code,
            user_code=code.user_code,
            verification_uri=code.verification_uri,
            interval=code.interval,
        )

    return Command(name="start_login", run=run)


def poll_login(auth: GitHubAuthGateway, device_code: str) -> Command:
    def run() -> Message:
        try:
            poll = auth.poll_device_flow(device_code)
        except JjDashError as e:
            return LoginFailed(error=f"GitHub login failed: {e}")
        if poll.status == PollStatus.AUTHORIZED:
            return LoginSucceeded(token=poll.token)
        return LoginPending(slow_down=poll.status == PollStatus.SLOW_DOWN)

    return Command(name="poll_login", run=run)


# ============================================================================
# Desktop
# ============================================================================


def open_url(browser: BrowserLauncher, url: str) -> Command:
    def run() -> Message:
        browser.launch(url)
        return UrlOpened(url=url)

    return Command(name="open_url", run=run)


def copy_to_clipboard(clipboard: Clipboard, label: str, text: str) -> Command:
    def run() -> Message:
        return ClipboardCopied(label=label, text=text, success=clipboard.copy(text))

    return Command(name="copy_to_clipboard", run=run)
