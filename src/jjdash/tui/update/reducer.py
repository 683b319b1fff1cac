"""The update function: ``(state, message) -> (state, effects)``.

Handlers never perform I/O; blocking work is returned as Command effects.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from jjdash.gateway.jj.parsing import NO_DESCRIPTION
from jjdash.graph.inference import find_bookmark_for_change
from jjdash.tui.effects import commands
from jjdash.tui.effects.types import Delay, Effect
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
    KeyPressed,
    LoginFailed,
    LoginPending,
    LoginPoll,
    LoginStarted,
    LoginSucceeded,
    Message,
    PullRequestClosed,
    PullRequestCreated,
    PullRequestMerged,
    PullRequestsLoaded,
    PullRequestTick,
    RepositoryInitialized,
    RepositoryLoaded,
    RepositoryReloadedSilently,
    ServicesInitialized,
    SettingsSaved,
    SilentReloadFailed,
    Started,
    Tick,
    TicketsLoaded,
    TransitionCompleted,
    TransitionsLoaded,
    UndoCompleted,
    UrlOpened,
    WindowResized,
)
from jjdash.tui.state import AppState, LoginState, ViewMode, with_repository
from jjdash.tui.update.actions import clamp_lists
from jjdash.tui.update.helpers import adopt_snapshot, focus_change, pull_request_loads, resync_selection
from jjdash.tui.update.keys import route_key
from jjdash.tui.update.refresh import (
    arm_pull_request_tick,
    arm_tick,
    handle_pull_request_tick,
    handle_tick,
)
from jjdash.tui.update.types import Outcome

logger = logging.getLogger(__name__)

SLOW_DOWN_SECONDS = 5


def _started(state: AppState, message: Started) -> Outcome:
    services = state.services
    state = replace(state, loading=True, status="Loading repository...")
    return state, (commands.initialize_services(services.jj, services.connector, state.config),)


def _window_resized(state: AppState, message: WindowResized) -> Outcome:
    return replace(state, width=message.width, height=message.height), ()


# ============================================================================
# Repository results
# ============================================================================


def _services_initialized(state: AppState, message: ServicesInitialized) -> Outcome:
    connection = message.connection
    state = replace(
        state,
        services=state.services.with_connection(connection),
        github_info=connection.github_info,
        ticket_info=connection.ticket_info,
        loading=False,
    )
    state = adopt_snapshot(state, message.repository)
    status = f"Loaded {len(state.changes)} commits"
    for info in (connection.github_info, connection.ticket_info):
        if info:
            status += f" ({info})"
    state = replace(state, status=status)

    state, tick = arm_tick(state)
    effects: list[Effect] = [tick]
    if state.services.github is not None:
        effects.extend(pull_request_loads(state))
        state, delays = arm_pull_request_tick(state)
        effects.extend(delays)
    state, selection_effects = resync_selection(state)
    effects.extend(selection_effects)
    return state, tuple(effects)


def _repository_loaded(state: AppState, message: RepositoryLoaded) -> Outcome:
    state = adopt_snapshot(state, message.repository)
    state = replace(state, loading=False, status=f"Loaded {len(state.changes)} commits")
    state, tick = arm_tick(state)
    effects: list[Effect] = [tick, *pull_request_loads(state)]
    state, selection_effects = resync_selection(state)
    effects.extend(selection_effects)
    return state, tuple(effects)


def _repository_reloaded_silently(state: AppState, message: RepositoryReloadedSilently) -> Outcome:
    # Never touches the status line.
    return resync_selection(adopt_snapshot(state, message.repository))


def _silent_reload_failed(state: AppState, message: SilentReloadFailed) -> Outcome:
    logger.debug("Background reload failed: %s", message.error)
    return state, ()


def _edit_completed(state: AppState, message: EditCompleted) -> Outcome:
    state = adopt_snapshot(state, message.repository)
    state = replace(state, loading=False, status="Now editing working copy")
    state, tick = arm_tick(state)
    effects: list[Effect] = [tick, *pull_request_loads(state)]
    working = next((i for i, change in enumerate(state.changes) if change.is_working_copy), -1)
    if working >= 0:
        state, selection_effects = focus_change(state, working)
    else:
        state, selection_effects = resync_selection(state)
    effects.extend(selection_effects)
    return state, tuple(effects)


def _file_operation_completed(state: AppState, message: FileOperationCompleted) -> Outcome:
    state = adopt_snapshot(state, message.repository)
    state = replace(state, loading=False, status=message.status)
    state, tick = arm_tick(state)
    effects: list[Effect] = [tick, *pull_request_loads(state)]
    state, selection_effects = resync_selection(state)
    effects.extend(selection_effects)
    # The change keeps its id, so its file list must be fetched again.
    if state.files_change_id and not selection_effects:
        effects.append(commands.load_changed_files(state.services.jj, state.files_change_id))
    return state, tuple(effects)


def _fetch_completed(state: AppState, message: FetchCompleted) -> Outcome:
    state = adopt_snapshot(state, message.repository)
    state = replace(state, loading=False, status="Fetched from all remotes")
    state, tick = arm_tick(state)
    effects: list[Effect] = [tick, *pull_request_loads(state)]
    state, selection_effects = resync_selection(state)
    effects.extend(selection_effects)
    return state, tuple(effects)


def _command_failed(state: AppState, message: CommandFailed) -> Outcome:
    state = replace(
        state,
        error=message.error,
        not_a_repo=message.not_a_repo,
        error_path=message.path,
        loading=False,
        status=f"Error: {message.error}",
    )
    return state, ()


def _repository_initialized(state: AppState, message: RepositoryInitialized) -> Outcome:
    services = state.services
    state = replace(state, not_a_repo=False, status="Repository initialized! Loading...")
    return state, (commands.initialize_services(services.jj, services.connector, state.config),)


def _changed_files_loaded(state: AppState, message: ChangedFilesLoaded) -> Outcome:
    if message.change_id != state.files_change_id:
        return state, ()
    return replace(
        state,
        changed_files=message.files,
        selected_file=0 if message.files else -1,
    ), ()


def _undo_completed(state: AppState, message: UndoCompleted) -> Outcome:
    state = replace(state, status=message.status)
    return state, (commands.load_repository(state.services.jj),)


# ============================================================================
# Descriptions and bookmarks
# ============================================================================


def _ticket_prefix(state: AppState, change_id: str) -> str:
    """``"<display key> "`` for a change whose own or nearest ancestor bookmark
    was created from a ticket, else empty."""
    if state.repository is None:
        return ""
    position = state.repository.graph.index_of(change_id)
    if position < 0:
        return ""
    for bookmark in state.changes[position].bookmarks:
        display_key = state.ticket_bookmarks.get(bookmark)
        if display_key:
            return display_key + " "
    ancestor = find_bookmark_for_change(state.repository.graph, position)
    if ancestor is not None and ancestor in state.ticket_bookmarks:
        return state.ticket_bookmarks[ancestor] + " "
    return ""


def _description_loaded(state: AppState, message: DescriptionLoaded) -> Outcome:
    editor = state.description
    if state.view != ViewMode.EDIT_DESCRIPTION or editor is None or editor.change_id != message.change_id:
        return state, ()
    text = message.description
    if text.strip() == NO_DESCRIPTION:
        text = ""
    if not text:
        text = _ticket_prefix(state, message.change_id)
    return replace(
        state,
        description=editor.with_loaded_text(text),
        status="Editing description (Ctrl+S to save, Esc to cancel)",
    ), ()


def _description_saved(state: AppState, message: DescriptionSaved) -> Outcome:
    state = replace(state, status=f"Description updated for {message.short_id}")
    return state, (commands.load_repository(state.services.jj),)


def _bookmark_saved(state: AppState, message: BookmarkSaved) -> Outcome:
    verb = "moved" if message.moved else "created"
    state = replace(
        state,
        view=ViewMode.GRAPH,
        bookmark_form=None,
        status=f"Bookmark '{message.name}' {verb}",
    )
    effects: list[Effect] = [commands.load_repository(state.services.jj)]
    tickets = state.services.tickets
    if message.ticket_key and tickets is not None and state.config.ticket_auto_in_progress:
        effects.append(commands.transition_ticket(tickets, message.ticket_key, "In Progress"))
    return state, tuple(effects)


def _bookmark_deleted(state: AppState, message: BookmarkDeleted) -> Outcome:
    state = replace(state, view=ViewMode.GRAPH, status=f"Bookmark '{message.name}' deleted")
    return state, (commands.load_repository(state.services.jj), *pull_request_loads(state))


# ============================================================================
# Pull requests
# ============================================================================


def _pull_requests_loaded(state: AppState, message: PullRequestsLoaded) -> Outcome:
    if state.repository is None:
        return state, ()
    state = with_repository(state, state.repository.with_pull_requests(message.pull_requests))
    if state.error is None:
        state = replace(state, status=f"Loaded {len(message.pull_requests)} PRs")
    state = clamp_lists(state)
    if state.selected_pr == -1 and message.pull_requests:
        state = replace(state, selected_pr=0)
    return state, ()


def _pull_request_merged(state: AppState, message: PullRequestMerged) -> Outcome:
    state = replace(state, status=f"Merged PR #{message.number}")
    return state, pull_request_loads(state)


def _pull_request_closed(state: AppState, message: PullRequestClosed) -> Outcome:
    state = replace(state, status=f"Closed PR #{message.number}")
    return state, pull_request_loads(state)


def _pull_request_created(state: AppState, message: PullRequestCreated) -> Outcome:
    pr = message.pull_request
    state = replace(state, view=ViewMode.GRAPH, pr_form=None, status=f"PR #{pr.number} created: {pr.title}")
    return state, (commands.open_url(state.services.browser, pr.url), *pull_request_loads(state))


def _branch_pushed(state: AppState, message: BranchPushed) -> Outcome:
    state = replace(state, status=f"Pushed {message.branch} to remote")
    return state, (commands.load_repository(state.services.jj), *pull_request_loads(state))


# ============================================================================
# Tickets
# ============================================================================


def _tickets_loaded(state: AppState, message: TicketsLoaded) -> Outcome:
    state = replace(state, tickets=message.tickets, transitions=())
    tickets = state.services.tickets
    if state.error is None:
        provider = f"{tickets.provider_name()} tickets" if tickets is not None else "tickets"
        state = replace(state, status=f"Loaded {len(message.tickets)} {provider}")
    state = clamp_lists(state)
    if state.selected_ticket == -1 and message.tickets:
        state = replace(state, selected_ticket=0)
    ticket = state.current_ticket
    if ticket is None or tickets is None:
        return state, ()
    return state, (commands.load_transitions(tickets, ticket.key),)


def _transitions_loaded(state: AppState, message: TransitionsLoaded) -> Outcome:
    ticket = state.current_ticket
    if ticket is None or ticket.key != message.key:
        return state, ()
    return replace(state, transitions=message.transitions), ()


def _transition_completed(state: AppState, message: TransitionCompleted) -> Outcome:
    state = replace(state, status_change_mode=False)
    if not message.status:
        return replace(state, status=f"No matching transition for {message.key}"), ()
    state = replace(state, status=f"Ticket {message.key} transitioned to {message.status}")
    tickets = state.services.tickets
    if tickets is None:
        return state, ()
    return state, (commands.load_tickets(tickets, state.config.excluded_statuses()),)


# ============================================================================
# Settings and GitHub login
# ============================================================================


def _settings_saved(state: AppState, message: SettingsSaved) -> Outcome:
    services = state.services
    reconnect = commands.initialize_services(services.jj, services.connector, state.config)
    if message.from_login:
        return state, (reconnect,)
    where = f"to {message.location} (local)" if message.local else "globally"
    status = f"Settings saved {where}"
    connected = state.config.connected_services()
    if connected != "none":
        status += f". Connected: {connected}"
    state = replace(state, view=ViewMode.GRAPH, settings_form=None, status=status)
    return state, (reconnect,)


def _arm_login_poll(state: AppState) -> Outcome:
    if state.login is None:
        return state, ()
    generation = state.login_generation + 1
    state = replace(state, login_generation=generation)
    return state, (Delay(name="login_poll", seconds=float(state.login.interval), message=LoginPoll(generation)),)


def _login_started(state: AppState, message: LoginStarted) -> Outcome:
    state = replace(
        state,
        view=ViewMode.GITHUB_LOGIN,
        login=LoginState(
            device_code=message.device_code,
            user_code=message.user_code,
            verification_uri=message.verification_uri,
            interval=message.interval,
        ),
        login_generation=state.login_generation + 1,
        status="Waiting for GitHub authorization...",
    )
    services = state.services
    return state, (
        commands.open_url(services.browser, message.verification_uri),
        commands.poll_login(services.github_auth, message.device_code),
    )


def _login_pending(state: AppState, message: LoginPending) -> Outcome:
    if state.login is None:
        return state, ()
    if message.slow_down:
        state = replace(state, login=replace(state.login, interval=state.login.interval + SLOW_DOWN_SECONDS))
    return _arm_login_poll(state)


def _login_poll(state: AppState, message: LoginPoll) -> Outcome:
    if state.login is None or message.generation != state.login_generation:
        return state, ()
    return state, (commands.poll_login(state.services.github_auth, state.login.device_code),)


def _login_succeeded(state: AppState, message: LoginSucceeded) -> Outcome:
    if state.login is None:
        return state, ()
    config = replace(state.config, github_token=message.token)
    form = state.settings_form
    if form is not None:
        form = replace(form, values={**form.values, "github_token": message.token})
    state = replace(
        state,
        view=ViewMode.SETTINGS,
        login=None,
        config=config,
        settings_form=form,
        status="GitHub login successful!",
    )
    return state, (commands.save_settings(state.services.config_store, config, local=False, from_login=True),)


def _login_failed(state: AppState, message: LoginFailed) -> Outcome:
    if state.view not in (ViewMode.SETTINGS, ViewMode.GITHUB_LOGIN):
        return state, ()
    state = replace(
        state,
        view=ViewMode.SETTINGS,
        login=None,
        error=message.error,
        status=f"Error: {message.error}",
    )
    return state, ()


# ============================================================================
# Desktop
# ============================================================================


def _url_opened(state: AppState, message: UrlOpened) -> Outcome:
    logger.debug("Opened %s", message.url)
    return state, ()


def _clipboard_copied(state: AppState, message: ClipboardCopied) -> Outcome:
    if message.success:
        return replace(state, status=f"Copied {message.label}: {message.text}"), ()
    return replace(state, status=f"Clipboard unavailable. Copy manually: {message.text}"), ()


_HANDLERS: dict[type, Callable[[AppState, Any], Outcome]] = {
    Started: _started,
    KeyPressed: route_key,
    WindowResized: _window_resized,
    Tick: handle_tick,
    PullRequestTick: handle_pull_request_tick,
    LoginPoll: _login_poll,
    RepositoryLoaded: _repository_loaded,
    RepositoryReloadedSilently: _repository_reloaded_silently,
    SilentReloadFailed: _silent_reload_failed,
    EditCompleted: _edit_completed,
    FileOperationCompleted: _file_operation_completed,
    FetchCompleted: _fetch_completed,
    CommandFailed: _command_failed,
    RepositoryInitialized: _repository_initialized,
    ServicesInitialized: _services_initialized,
    PullRequestsLoaded: _pull_requests_loaded,
    PullRequestMerged: _pull_request_merged,
    PullRequestClosed: _pull_request_closed,
    PullRequestCreated: _pull_request_created,
    BranchPushed: _branch_pushed,
    TicketsLoaded: _tickets_loaded,
    TransitionsLoaded: _transitions_loaded,
    TransitionCompleted: _transition_completed,
    BookmarkSaved: _bookmark_saved,
    BookmarkDeleted: _bookmark_deleted,
    ChangedFilesLoaded: _changed_files_loaded,
    DescriptionLoaded: _description_loaded,
    DescriptionSaved: _description_saved,
    UndoCompleted: _undo_completed,
    SettingsSaved: _settings_saved,
    LoginStarted: _login_started,
    LoginPending: _login_pending,
    LoginSucceeded: _login_succeeded,
    LoginFailed: _login_failed,
    UrlOpened: _url_opened,
    ClipboardCopied: _clipboard_copied,
}


def update(state: AppState, message: Message) -> tuple[AppState, tuple[Effect, ...]]:
    """Apply one message.

    Raises:
        TypeError: If the message type has no handler
    """
    handler = _HANDLERS.get(type(message))
    if handler is None:
        raise TypeError(f"unhandled message type: {type(message).__name__}")
    return handler(state, message)
