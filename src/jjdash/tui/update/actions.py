"""Key handlers.

Every handler takes the state and returns the new state plus effects. Mutating
actions check the target change's immutability before scheduling anything.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

from jjdash.gateway.jj.abc import JjGateway
from jjdash.graph.inference import find_bookmark_for_change, find_empty_descriptions, find_pr_branch_for_change
from jjdash.models.types import ChangeSet
from jjdash.tui.effects import commands
from jjdash.tui.effects.types import Command, Exit
from jjdash.tui.machines.bookmark import BookmarkAction, BookmarkForm
from jjdash.tui.machines.description import DescriptionEditor
from jjdash.tui.machines.pr_form import BODY, TITLE, PullRequestForm
from jjdash.tui.machines.settings import SettingsForm
from jjdash.tui.machines.warning import DescriptionWarning, UndescribedChange
from jjdash.tui.naming import format_bookmark_name, sanitize_bookmark_name, validate_bookmark_name
from jjdash.tui.state import AppState, FocusPane, ViewMode, clamp_index
from jjdash.tui.update.helpers import focus_change, pull_request_loads
from jjdash.tui.update.refresh import arm_tick
from jjdash.tui.update.types import KeyHandler, Outcome

GITHUB_NOT_CONNECTED = "GitHub not connected. Configure in Settings (,)"
TICKETS_NOT_CONNECTED = "No ticket provider configured. Configure in Settings (,)"
DEFAULT_BASE_BRANCH = "main"


def _status(state: AppState, status: str) -> Outcome:
    return replace(state, status=status), ()


def _immutable_rejection(change: ChangeSet, action: str) -> str | None:
    if change.is_immutable:
        return f"Cannot {action}: commit is immutable"
    return None


# ============================================================================
# Global
# ============================================================================


def quit_app(state: AppState) -> Outcome:
    return state, (Exit(),)


def refresh(state: AppState) -> Outcome:
    state = replace(state, status="Refreshing...", loading=True)
    services = state.services
    if state.repository is None:
        return state, (commands.initialize_services(services.jj, services.connector, state.config),)
    return state, (commands.load_repository(services.jj),)


def show_graph(state: AppState) -> Outcome:
    return refresh(replace(state, view=ViewMode.GRAPH, status_change_mode=False))


def show_pull_requests(state: AppState) -> Outcome:
    state = replace(state, view=ViewMode.PULL_REQUESTS, status_change_mode=False)
    if state.services.github is None:
        return _status(state, GITHUB_NOT_CONNECTED)
    return replace(state, status="Loading PRs..."), pull_request_loads(state)


def show_tickets(state: AppState) -> Outcome:
    state = replace(state, view=ViewMode.TICKETS)
    tickets = state.services.tickets
    if tickets is None:
        return _status(state, TICKETS_NOT_CONNECTED)
    state = replace(state, status=f"Loading {tickets.provider_name()} tickets...")
    return state, (commands.load_tickets(tickets, state.config.excluded_statuses()),)


def show_settings(state: AppState) -> Outcome:
    state = replace(
        state,
        view=ViewMode.SETTINGS,
        settings_form=SettingsForm.from_config(state.config),
        status="Settings: Tab next field, Ctrl+J/K switch tab, Ctrl+S save, Ctrl+L save locally, Esc cancel",
    )
    return state, ()


def show_help(state: AppState) -> Outcome:
    return replace(state, view=ViewMode.HELP, status_change_mode=False), ()


def undo(state: AppState) -> Outcome:
    return replace(state, status="Undoing..."), (commands.undo(state.services.jj),)


def redo(state: AppState) -> Outcome:
    return replace(state, status="Redoing..."), (commands.redo(state.services.jj),)


def back(state: AppState) -> Outcome:
    if state.status_change_mode:
        return replace(state, status_change_mode=False, status="Status change cancelled"), ()
    if state.view != ViewMode.GRAPH:
        return replace(state, view=ViewMode.GRAPH), ()
    return state, ()


def _move(state: AppState, delta: int) -> Outcome:
    """Move the selection of whichever list is visible; clamped, no wraparound."""
    if state.view == ViewMode.GRAPH:
        if state.focus == FocusPane.FILES:
            count = len(state.changed_files)
            if count == 0:
                return state, ()
            return replace(state, selected_file=max(0, min(count - 1, state.selected_file + delta))), ()
        count = len(state.changes)
        if count == 0:
            return state, ()
        return focus_change(state, max(0, min(count - 1, state.selected_change + delta)))
    if state.view == ViewMode.PULL_REQUESTS:
        count = len(state.pull_requests)
        if count == 0:
            return state, ()
        return replace(state, selected_pr=max(0, min(count - 1, state.selected_pr + delta))), ()
    if state.view == ViewMode.TICKETS:
        count = len(state.tickets)
        if count == 0:
            return state, ()
        selected = max(0, min(count - 1, state.selected_ticket + delta))
        if selected == state.selected_ticket:
            return state, ()
        state = replace(state, selected_ticket=selected, transitions=())
        tickets = state.services.tickets
        if tickets is None:
            return state, ()
        return state, (commands.load_transitions(tickets, state.tickets[selected].key),)
    return state, ()


def move_down(state: AppState) -> Outcome:
    return _move(state, 1)


def move_up(state: AppState) -> Outcome:
    return _move(state, -1)


# ============================================================================
# Graph view
# ============================================================================


def new_change(state: AppState) -> Outcome:
    change = state.current_change
    parent_id = change.change_id if change is not None else None
    state = replace(state, status="Creating new commit...")
    return state, (commands.new_change(state.services.jj, parent_id),)


def describe_change(state: AppState) -> Outcome:
    change = state.current_change
    if change is None:
        return _status(state, "No commit selected")
    rejection = _immutable_rejection(change, "edit description")
    if rejection is not None:
        return _status(state, rejection)
    state = replace(
        state,
        view=ViewMode.EDIT_DESCRIPTION,
        description=DescriptionEditor.opening(change.change_id, change.short_id),
        status=f"Loading description for {change.short_id}...",
    )
    return state, (commands.load_description(state.services.jj, change.change_id),)


def edit_change(state: AppState) -> Outcome:
    change = state.current_change
    if change is None:
        return _status(state, "No commit selected")
    rejection = _immutable_rejection(change, "edit")
    if rejection is not None:
        return _status(state, rejection)
    state = replace(state, status=f"Editing {change.short_id}...")
    return state, (commands.edit_change(state.services.jj, change.change_id),)


def squash_change(state: AppState) -> Outcome:
    change = state.current_change
    if change is None:
        return _status(state, "No commit selected")
    rejection = _immutable_rejection(change, "squash")
    if rejection is not None:
        return _status(state, rejection)
    state = replace(state, status=f"Squashing {change.short_id}...")
    return state, (commands.squash_change(state.services.jj, change.change_id),)


def abandon_change(state: AppState) -> Outcome:
    change = state.current_change
    if change is None:
        return _status(state, "No commit selected")
    rejection = _immutable_rejection(change, "abandon")
    if rejection is not None:
        return _status(state, rejection)
    state = replace(state, status=f"Abandoning {change.short_id}...")
    return state, (commands.abandon_change(state.services.jj, change.change_id),)


def start_rebase(state: AppState) -> Outcome:
    change = state.current_change
    if change is None:
        return _status(state, "No commit selected")
    rejection = _immutable_rejection(change, "rebase")
    if rejection is not None:
        return _status(state, rejection)
    state = replace(
        state,
        rebase=state.rebase.start(state.selected_change, change.change_id),
        status=f"Select destination for rebasing {change.short_id} (Esc to cancel)",
    )
    return state, ()


def start_bookmark(state: AppState) -> Outcome:
    change = state.current_change
    if change is None:
        return _status(state, "No commit selected")
    rejection = _immutable_rejection(change, "create bookmark")
    if rejection is not None:
        return _status(state, rejection)
    form = BookmarkForm.for_change(change.change_id, change.short_id, state.all_bookmarks, change.bookmarks)
    state = replace(
        state,
        view=ViewMode.CREATE_BOOKMARK,
        return_view=ViewMode.GRAPH,
        bookmark_form=form,
        status=f"Create or move bookmark on {change.short_id}",
    )
    return state, ()


def delete_bookmark(state: AppState) -> Outcome:
    change = state.current_change
    if change is None:
        return _status(state, "No commit selected")
    if not change.bookmarks:
        return _status(state, "No bookmark on this commit to delete")
    name = change.bookmarks[0]
    state = replace(state, status=f"Deleting bookmark '{name}'...")
    return state, (commands.delete_bookmark(state.services.jj, name),)


def _start_pull_request(state: AppState, *, check_descriptions: bool) -> Outcome:
    change = state.current_change
    if change is None or state.repository is None:
        return _status(state, "No commit selected")
    if state.services.github is None:
        return _status(state, GITHUB_NOT_CONNECTED)
    if change.bookmarks:
        head, needs_move = change.bookmarks[0], False
    else:
        ancestor = find_bookmark_for_change(state.repository.graph, state.selected_change)
        if ancestor is None:
            return _status(state, "No bookmark found. Create one first with 'b'.")
        head, needs_move = ancestor, True
    if any(pr.is_open and pr.head_branch == head for pr in state.pull_requests):
        return _status(state, f"PR already exists for {head}. Use 'u' to push updates.")
    if check_descriptions:
        warning = _description_warning(state)
        if warning is not None:
            count = len(warning.changes)
            noun = "commit has" if count == 1 else "commits have"
            return replace(
                state,
                view=ViewMode.DESCRIPTION_WARNING,
                warning=warning,
                status=f"{count} {noun} no description (Enter describe, c create anyway, Esc cancel)",
            ), ()
    form = PullRequestForm(
        change_id=change.change_id,
        head_branch=head,
        base_branch=DEFAULT_BASE_BRANCH,
        title=state.ticket_pr_titles.get(head, head),
        body="",
        focus=TITLE,
        needs_move=needs_move,
    )
    state = replace(
        state,
        view=ViewMode.CREATE_PR,
        pr_form=form,
        warning=None,
        status=f"Create PR {head} -> {DEFAULT_BASE_BRANCH} (Tab switch field, Ctrl+S submit, Esc cancel)",
    )
    return state, ()


def _description_warning(state: AppState) -> DescriptionWarning | None:
    if state.repository is None:
        return None
    positions = find_empty_descriptions(state.repository.graph, state.selected_change)
    if not positions:
        return None
    changes = tuple(
        UndescribedChange(change_id=state.changes[i].change_id, short_id=state.changes[i].short_id) for i in positions
    )
    return DescriptionWarning(changes=changes)


def start_pull_request(state: AppState) -> Outcome:
    return _start_pull_request(state, check_descriptions=True)


def update_pull_request(state: AppState) -> Outcome:
    change = state.current_change
    if change is None or state.repository is None:
        return _status(state, "No commit selected")
    if state.services.github is None:
        return _status(state, GITHUB_NOT_CONNECTED)
    branch = find_pr_branch_for_change(state.repository.graph, state.pull_requests, state.selected_change)
    if branch is None:
        return _status(state, "No open PR found for this commit or its ancestors")
    move_bookmark = branch not in change.bookmarks
    state = replace(state, status=f"Pushing {change.short_id} to {branch}...")
    return state, (commands.push_to_pull_request(state.services.jj, branch, change.change_id, move_bookmark),)


def toggle_files_focus(state: AppState) -> Outcome:
    if state.focus == FocusPane.GRAPH:
        selected = 0 if state.changed_files and state.selected_file < 0 else state.selected_file
        return replace(state, focus=FocusPane.FILES, selected_file=selected), ()
    return replace(state, focus=FocusPane.GRAPH), ()


def copy_change_id(state: AppState) -> Outcome:
    change = state.current_change
    if change is None:
        return _status(state, "No commit selected")
    return state, (commands.copy_to_clipboard(state.services.clipboard, "change id", change.change_id),)


def fetch(state: AppState) -> Outcome:
    state = replace(state, status="Fetching from all remotes...", loading=True)
    return state, (commands.fetch(state.services.jj),)


# ============================================================================
# Files pane
# ============================================================================


def _file_action(action: str, progress: str, command: Callable[[JjGateway, str, str], Command]) -> KeyHandler:
    """Handler acting on the selected file of the selected change.

    Only active while the files pane has focus.
    """

    def handler(state: AppState) -> Outcome:
        change = state.current_change
        if state.focus != FocusPane.FILES or change is None:
            return state, ()
        if not 0 <= state.selected_file < len(state.changed_files):
            return state, ()
        rejection = _immutable_rejection(change, action)
        if rejection is not None:
            return _status(state, rejection)
        path = state.changed_files[state.selected_file].path
        state = replace(state, status=progress.format(path=path), loading=True)
        return state, (command(state.services.jj, change.change_id, path),)

    return handler


move_file_to_parent = _file_action(
    "move file", "Moving {path} to new parent commit...", commands.move_file_to_parent
)
move_file_to_child = _file_action("move file", "Moving {path} to new child commit...", commands.move_file_to_child)
revert_file = _file_action("revert file", "Reverting {path}...", commands.revert_file)


# ============================================================================
# Pull request view
# ============================================================================


def open_pull_request(state: AppState) -> Outcome:
    pr = state.current_pull_request
    if pr is None:
        return _status(state, "No PR selected")
    state = replace(state, status=f"Opening PR #{pr.number} in browser")
    return state, (commands.open_url(state.services.browser, pr.url),)


def merge_pull_request(state: AppState) -> Outcome:
    pr = state.current_pull_request
    if pr is None:
        return _status(state, "No PR selected")
    if not pr.is_open:
        return _status(state, "Can only merge open PRs")
    github = state.services.github
    if github is None:
        return _status(state, GITHUB_NOT_CONNECTED)
    return replace(state, status=f"Merging PR #{pr.number}..."), (commands.merge_pull_request(github, pr.number),)


def close_pull_request(state: AppState) -> Outcome:
    pr = state.current_pull_request
    if pr is None:
        return _status(state, "No PR selected")
    if not pr.is_open:
        return _status(state, "Can only close open PRs")
    github = state.services.github
    if github is None:
        return _status(state, GITHUB_NOT_CONNECTED)
    return replace(state, status=f"Closing PR #{pr.number}..."), (commands.close_pull_request(github, pr.number),)


def copy_pull_request_url(state: AppState) -> Outcome:
    pr = state.current_pull_request
    if pr is None:
        return _status(state, "No PR selected")
    return state, (commands.copy_to_clipboard(state.services.clipboard, "PR URL", pr.url),)


# ============================================================================
# Ticket view
# ============================================================================


def start_bookmark_from_ticket(state: AppState) -> Outcome:
    ticket = state.current_ticket
    if ticket is None:
        return _status(state, "No ticket selected")
    name = format_bookmark_name(ticket.display_key, ticket.summary)
    form = BookmarkForm.for_ticket(ticket.key, ticket.display_key, ticket.summary, name)
    state = replace(
        state,
        view=ViewMode.CREATE_BOOKMARK,
        return_view=ViewMode.TICKETS,
        bookmark_form=form,
        status=f"Create branch from main for {ticket.display_key} (Enter to confirm, Esc to cancel)",
    )
    return state, ()


def open_ticket(state: AppState) -> Outcome:
    ticket = state.current_ticket
    tickets = state.services.tickets
    if ticket is None or tickets is None:
        return _status(state, "No ticket selected")
    state = replace(state, status=f"Opening {ticket.display_key} in browser")
    return state, (commands.open_url(state.services.browser, tickets.browser_url(ticket)),)


def toggle_status_change_mode(state: AppState) -> Outcome:
    if state.current_ticket is None:
        return _status(state, "No ticket selected")
    if state.status_change_mode:
        return replace(state, status_change_mode=False, status="Status change cancelled"), ()
    return replace(
        state,
        status_change_mode=True,
        status="Set status: i In Progress, D Done, B Blocked, N Not Started (Esc to cancel)",
    ), ()


def _transition_to(target: str) -> KeyHandler:
    def handler(state: AppState) -> Outcome:
        ticket = state.current_ticket
        tickets = state.services.tickets
        if not state.status_change_mode or ticket is None or tickets is None:
            return state, ()
        state = replace(state, status=f"Moving {ticket.display_key} to {target}...")
        return state, (commands.transition_ticket(tickets, ticket.key, target),)

    return handler


transition_in_progress = _transition_to("In Progress")
transition_done = _transition_to("Done")
transition_blocked = _transition_to("Blocked")
transition_not_started = _transition_to("Not Started")


def copy_ticket_key(state: AppState) -> Outcome:
    ticket = state.current_ticket
    if ticket is None:
        return _status(state, "No ticket selected")
    return state, (commands.copy_to_clipboard(state.services.clipboard, "ticket key", ticket.display_key),)


# ============================================================================
# Error banner
# ============================================================================


def _clear_error(state: AppState) -> AppState:
    return replace(state, error=None, not_a_repo=False, error_path="")


def retry_after_error(state: AppState) -> Outcome:
    return refresh(replace(_clear_error(state), view=ViewMode.GRAPH))


def dismiss_error(state: AppState) -> Outcome:
    state = replace(
        _clear_error(state),
        view=ViewMode.GRAPH,
        rebase=state.rebase.cancel(),
        description=None,
        pr_form=None,
        bookmark_form=None,
        settings_form=None,
        login=None,
        warning=None,
        status="Error dismissed",
    )
    state, tick = arm_tick(state)
    return state, (tick,)


def init_repository(state: AppState) -> Outcome:
    if not state.not_a_repo:
        return state, ()
    state = replace(_clear_error(state), status="Initializing repository...", loading=True)
    return state, (commands.init_repository(state.services.jj),)


# ============================================================================
# Rebase picker
# ============================================================================


def rebase_down(state: AppState) -> Outcome:
    return replace(state, rebase=state.rebase.move(1, len(state.changes))), ()


def rebase_up(state: AppState) -> Outcome:
    return replace(state, rebase=state.rebase.move(-1, len(state.changes))), ()


def confirm_rebase(state: AppState) -> Outcome:
    """Rebase the picked change; the source is looked up again by change id."""
    picker = state.rebase
    changes = state.changes
    state = replace(state, rebase=picker.cancel())
    source_index = state.repository.graph.index_of(picker.source_change_id) if state.repository else -1
    if source_index < 0 or not 0 <= picker.destination < len(changes):
        return _status(state, "Rebase cancelled")
    if source_index == picker.destination:
        return _status(state, "Cannot rebase commit onto itself")
    source = changes[source_index]
    rejection = _immutable_rejection(source, "rebase")
    if rejection is not None:
        return _status(state, rejection)
    destination = changes[picker.destination]
    state = replace(state, status=f"Rebasing {source.short_id} onto {destination.short_id}...")
    return state, (commands.rebase_change(state.services.jj, source.change_id, destination.change_id),)


def cancel_rebase(state: AppState) -> Outcome:
    return replace(state, rebase=state.rebase.cancel(), status="Rebase cancelled"), ()


# ============================================================================
# Empty description warning
# ============================================================================


def cancel_warning(state: AppState) -> Outcome:
    return replace(state, view=ViewMode.GRAPH, warning=None, status="Cancelled"), ()


def warning_down(state: AppState) -> Outcome:
    if state.warning is None:
        return state, ()
    return replace(state, warning=state.warning.move(1)), ()


def warning_up(state: AppState) -> Outcome:
    if state.warning is None:
        return state, ()
    return replace(state, warning=state.warning.move(-1)), ()


def describe_undescribed(state: AppState) -> Outcome:
    """Leave the warning and open the description editor on the highlighted change."""
    target = state.warning.current if state.warning is not None else None
    state = replace(state, view=ViewMode.GRAPH, warning=None)
    if target is None or state.repository is None:
        return _status(state, "Cancelled")
    position = state.repository.graph.index_of(target.change_id)
    if position < 0:
        return _status(state, f"{target.short_id} is no longer in the graph")
    state, effects = focus_change(state, position)
    state = replace(state, focus=FocusPane.GRAPH)
    state, describe_effects = describe_change(state)
    return state, (*effects, *describe_effects)


def create_pull_request_anyway(state: AppState) -> Outcome:
    return _start_pull_request(replace(state, view=ViewMode.GRAPH, warning=None), check_descriptions=False)


# ============================================================================
# Description editor
# ============================================================================


def cancel_description(state: AppState) -> Outcome:
    return replace(state, view=ViewMode.GRAPH, description=None, status="Description editing cancelled"), ()


def save_description(state: AppState) -> Outcome:
    editor = state.description
    if editor is None:
        return state, ()
    if not editor.loaded:
        return _status(state, "Description is still loading")
    state = replace(
        state,
        view=ViewMode.GRAPH,
        description=None,
        status=f"Saving description for {editor.short_id}...",
    )
    return state, (commands.save_description(state.services.jj, editor.change_id, editor.short_id, editor.text),)


def description_newline(state: AppState) -> Outcome:
    if state.description is None:
        return state, ()
    return replace(state, description=state.description.type_text("\n")), ()


def description_backspace(state: AppState) -> Outcome:
    if state.description is None:
        return state, ()
    return replace(state, description=state.description.backspace()), ()


def description_text(state: AppState, text: str) -> Outcome:
    if state.description is None:
        return state, ()
    return replace(state, description=state.description.type_text(text)), ()


# ============================================================================
# Create pull request form
# ============================================================================


def cancel_pull_request(state: AppState) -> Outcome:
    return replace(state, view=ViewMode.GRAPH, pr_form=None, status="PR creation cancelled"), ()


def submit_pull_request(state: AppState) -> Outcome:
    form = state.pr_form
    github = state.services.github
    if form is None:
        return state, ()
    if not form.title.strip():
        return _status(state, "Title is required")
    if github is None:
        return _status(state, GITHUB_NOT_CONNECTED)
    form = replace(form, title=form.title.strip())
    state = replace(
        state,
        view=ViewMode.GRAPH,
        pr_form=None,
        status=f"Pushing {form.head_branch} and creating PR...",
    )
    return state, (commands.create_pull_request(state.services.jj, github, form, state.services.sleep),)


def pull_request_toggle_field(state: AppState) -> Outcome:
    if state.pr_form is None:
        return state, ()
    return replace(state, pr_form=state.pr_form.toggle_focus()), ()


def pull_request_enter(state: AppState) -> Outcome:
    form = state.pr_form
    if form is None:
        return state, ()
    if form.focus == TITLE:
        return replace(state, pr_form=replace(form, focus=BODY)), ()
    return replace(state, pr_form=form.newline()), ()


def pull_request_backspace(state: AppState) -> Outcome:
    if state.pr_form is None:
        return state, ()
    return replace(state, pr_form=state.pr_form.backspace()), ()


def pull_request_text(state: AppState, text: str) -> Outcome:
    if state.pr_form is None:
        return state, ()
    return replace(state, pr_form=state.pr_form.type_text(text)), ()


# ============================================================================
# Bookmark form
# ============================================================================


def cancel_bookmark(state: AppState) -> Outcome:
    return replace(
        state, view=state.return_view, bookmark_form=None, status="Bookmark creation cancelled"
    ), ()


def submit_bookmark(state: AppState) -> Outcome:
    form = state.bookmark_form
    if form is None:
        return state, ()
    name = form.name.strip()
    if not form.browsing and state.config.sanitize_bookmarks:
        name = sanitize_bookmark_name(name)
    if not form.browsing:
        problem = validate_bookmark_name(name)
        if problem is not None:
            return _status(state, problem)
    submission = form.resolve(name)
    if submission.action == BookmarkAction.MOVE:
        status = f"Moving bookmark '{submission.name}'..."
    elif submission.action == BookmarkAction.CREATE_FROM_MAIN:
        status = f"Creating branch '{submission.name}' from main..."
        state = replace(
            state,
            ticket_bookmarks={**state.ticket_bookmarks, submission.name: form.ticket_display_key},
            ticket_pr_titles={
                **state.ticket_pr_titles,
                submission.name: f"{form.ticket_display_key} - {form.ticket_title}",
            },
        )
    else:
        status = f"Creating bookmark '{submission.name}'..."
    state = replace(state, status=status)
    return state, (commands.save_bookmark(state.services.jj, submission, form.ticket_key),)


def bookmark_toggle_mode(state: AppState) -> Outcome:
    if state.bookmark_form is None:
        return state, ()
    return replace(state, bookmark_form=state.bookmark_form.toggle_mode()), ()


def bookmark_down(state: AppState) -> Outcome:
    if state.bookmark_form is None:
        return state, ()
    return replace(state, bookmark_form=state.bookmark_form.move(1)), ()


def bookmark_up(state: AppState) -> Outcome:
    if state.bookmark_form is None:
        return state, ()
    return replace(state, bookmark_form=state.bookmark_form.move(-1)), ()


def bookmark_backspace(state: AppState) -> Outcome:
    if state.bookmark_form is None:
        return state, ()
    return replace(state, bookmark_form=state.bookmark_form.backspace()), ()


def bookmark_text(state: AppState, text: str) -> Outcome:
    if state.bookmark_form is None:
        return state, ()
    return replace(state, bookmark_form=state.bookmark_form.type_text(text)), ()


# ============================================================================
# Settings form
# ============================================================================


def cancel_settings(state: AppState) -> Outcome:
    return replace(state, view=ViewMode.GRAPH, settings_form=None, status="Settings cancelled"), ()


def _persist_settings(state: AppState, *, local: bool) -> Outcome:
    form = state.settings_form
    if form is None:
        return state, ()
    config = form.to_config(state.config)
    state = replace(state, config=config, status="Saving settings...")
    return state, (commands.save_settings(state.services.config_store, config, local=local),)


def save_settings_globally(state: AppState) -> Outcome:
    return _persist_settings(state, local=False)


def save_settings_locally(state: AppState) -> Outcome:
    return _persist_settings(state, local=True)


def submit_settings(state: AppState) -> Outcome:
    form = state.settings_form
    if form is None:
        return state, ()
    form, persist = form.submit()
    state = replace(state, settings_form=form)
    if persist:
        return _persist_settings(state, local=False)
    return state, ()


def _settings_step(step: str) -> KeyHandler:
    def handler(state: AppState) -> Outcome:
        if state.settings_form is None:
            return state, ()
        return replace(state, settings_form=getattr(state.settings_form, step)()), ()

    return handler


settings_next_tab = _settings_step("next_tab")
settings_previous_tab = _settings_step("previous_tab")
settings_next_field = _settings_step("next_field")
settings_previous_field = _settings_step("previous_field")
settings_backspace = _settings_step("backspace")


def settings_space(state: AppState) -> Outcome:
    """Space flips a toggle field and types a space anywhere else."""
    form = state.settings_form
    if form is None:
        return state, ()
    toggled = form.toggle()
    if toggled is form:
        return replace(state, settings_form=form.type_text(" ")), ()
    return replace(state, settings_form=toggled), ()


def settings_text(state: AppState, text: str) -> Outcome:
    if state.settings_form is None:
        return state, ()
    return replace(state, settings_form=state.settings_form.type_text(text)), ()


def start_github_login(state: AppState) -> Outcome:
    state = replace(state, status="Starting GitHub login...")
    return state, (commands.start_login(state.services.github_auth),)


# ============================================================================
# GitHub login view
# ============================================================================


def cancel_login(state: AppState) -> Outcome:
    return replace(
        state,
        view=ViewMode.SETTINGS,
        login=None,
        login_generation=state.login_generation + 1,
        status="GitHub login cancelled",
    ), ()


def reopen_login_page(state: AppState) -> Outcome:
    if state.login is None:
        return state, ()
    return state, (commands.open_url(state.services.browser, state.login.verification_uri),)


def copy_login_code(state: AppState) -> Outcome:
    if state.login is None:
        return state, ()
    return state, (commands.copy_to_clipboard(state.services.clipboard, "login code", state.login.user_code),)


def clamp_lists(state: AppState) -> AppState:
    """Re-clamp the PR and ticket selections to their lists."""
    return replace(
        state,
        selected_pr=clamp_index(state.selected_pr, len(state.pull_requests)),
        selected_ticket=clamp_index(state.selected_ticket, len(state.tickets)),
    )
