"""Key routing table.

``resolve_scope`` picks the scope with the highest precedence for the current
state. Modal scopes own all input: a key missing from their table falls back to
text input where the scope accepts text, and is swallowed otherwise. List views
consult their own table first and then the global one.
"""

from __future__ import annotations

from enum import Enum, auto

from jjdash.tui.messages import KeyPressed
from jjdash.tui.state import AppState, ViewMode
from jjdash.tui.update import actions
from jjdash.tui.update.types import KeyHandler, Outcome, TextHandler


class KeyScope(Enum):
    ERROR = auto()
    EDIT_DESCRIPTION = auto()
    SETTINGS = auto()
    CREATE_PR = auto()
    CREATE_BOOKMARK = auto()
    GITHUB_LOGIN = auto()
    DESCRIPTION_WARNING = auto()
    REBASE = auto()
    GRAPH = auto()
    PULL_REQUESTS = auto()
    TICKETS = auto()
    HELP = auto()
    GLOBAL = auto()


MODAL_SCOPES = frozenset(
    {
        KeyScope.ERROR,
        KeyScope.EDIT_DESCRIPTION,
        KeyScope.SETTINGS,
        KeyScope.CREATE_PR,
        KeyScope.CREATE_BOOKMARK,
        KeyScope.GITHUB_LOGIN,
        KeyScope.DESCRIPTION_WARNING,
        KeyScope.REBASE,
    }
)

_VIEW_SCOPES: dict[ViewMode, KeyScope] = {
    ViewMode.EDIT_DESCRIPTION: KeyScope.EDIT_DESCRIPTION,
    ViewMode.SETTINGS: KeyScope.SETTINGS,
    ViewMode.CREATE_PR: KeyScope.CREATE_PR,
    ViewMode.CREATE_BOOKMARK: KeyScope.CREATE_BOOKMARK,
    ViewMode.GITHUB_LOGIN: KeyScope.GITHUB_LOGIN,
    ViewMode.DESCRIPTION_WARNING: KeyScope.DESCRIPTION_WARNING,
    ViewMode.GRAPH: KeyScope.GRAPH,
    ViewMode.PULL_REQUESTS: KeyScope.PULL_REQUESTS,
    ViewMode.TICKETS: KeyScope.TICKETS,
    ViewMode.HELP: KeyScope.HELP,
}


KEY_TABLE: dict[KeyScope, dict[str, KeyHandler]] = {
    KeyScope.ERROR: {
        "ctrl+q": actions.quit_app,
        "ctrl+c": actions.quit_app,
        "ctrl+r": actions.retry_after_error,
        "escape": actions.dismiss_error,
        "i": actions.init_repository,
    },
    KeyScope.EDIT_DESCRIPTION: {
        "ctrl+c": actions.quit_app,
        "escape": actions.cancel_description,
        "ctrl+s": actions.save_description,
        "enter": actions.description_newline,
        "backspace": actions.description_backspace,
    },
    KeyScope.SETTINGS: {
        "ctrl+c": actions.quit_app,
        "escape": actions.cancel_settings,
        "ctrl+j": actions.settings_next_tab,
        "ctrl+k": actions.settings_previous_tab,
        "tab": actions.settings_next_field,
        "down": actions.settings_next_field,
        "shift+tab": actions.settings_previous_field,
        "up": actions.settings_previous_field,
        "enter": actions.submit_settings,
        "space": actions.settings_space,
        "backspace": actions.settings_backspace,
        "ctrl+s": actions.save_settings_globally,
        "ctrl+l": actions.save_settings_locally,
        "ctrl+g": actions.start_github_login,
    },
    KeyScope.CREATE_PR: {
        "ctrl+c": actions.quit_app,
        "escape": actions.cancel_pull_request,
        "ctrl+s": actions.submit_pull_request,
        "tab": actions.pull_request_toggle_field,
        "shift+tab": actions.pull_request_toggle_field,
        "enter": actions.pull_request_enter,
        "backspace": actions.pull_request_backspace,
    },
    KeyScope.CREATE_BOOKMARK: {
        "ctrl+c": actions.quit_app,
        "escape": actions.cancel_bookmark,
        "enter": actions.submit_bookmark,
        "tab": actions.bookmark_toggle_mode,
        "down": actions.bookmark_down,
        "up": actions.bookmark_up,
        "backspace": actions.bookmark_backspace,
    },
    KeyScope.GITHUB_LOGIN: {
        "ctrl+c": actions.quit_app,
        "escape": actions.cancel_login,
        "o": actions.reopen_login_page,
        "y": actions.copy_login_code,
    },
    KeyScope.DESCRIPTION_WARNING: {
        "ctrl+c": actions.quit_app,
        "escape": actions.cancel_warning,
        "enter": actions.describe_undescribed,
        "c": actions.create_pull_request_anyway,
        "j": actions.warning_down,
        "down": actions.warning_down,
        "k": actions.warning_up,
        "up": actions.warning_up,
    },
    KeyScope.REBASE: {
        "ctrl+c": actions.quit_app,
        "escape": actions.cancel_rebase,
        "enter": actions.confirm_rebase,
        "j": actions.rebase_down,
        "down": actions.rebase_down,
        "k": actions.rebase_up,
        "up": actions.rebase_up,
    },
    KeyScope.GRAPH: {
        "n": actions.new_change,
        "d": actions.describe_change,
        "enter": actions.edit_change,
        "e": actions.edit_change,
        "s": actions.squash_change,
        "a": actions.abandon_change,
        "r": actions.start_rebase,
        "b": actions.start_bookmark,
        "x": actions.delete_bookmark,
        "c": actions.start_pull_request,
        "u": actions.update_pull_request,
        "tab": actions.toggle_files_focus,
        "y": actions.copy_change_id,
        "f": actions.fetch,
        "[": actions.move_file_to_parent,
        "]": actions.move_file_to_child,
        "v": actions.revert_file,
    },
    KeyScope.PULL_REQUESTS: {
        "enter": actions.open_pull_request,
        "o": actions.open_pull_request,
        "M": actions.merge_pull_request,
        "X": actions.close_pull_request,
        "y": actions.copy_pull_request_url,
    },
    KeyScope.TICKETS: {
        "enter": actions.start_bookmark_from_ticket,
        "e": actions.start_bookmark_from_ticket,
        "o": actions.open_ticket,
        "c": actions.toggle_status_change_mode,
        "i": actions.transition_in_progress,
        "D": actions.transition_done,
        "B": actions.transition_blocked,
        "N": actions.transition_not_started,
        "y": actions.copy_ticket_key,
    },
    KeyScope.HELP: {},
    KeyScope.GLOBAL: {
        "q": actions.quit_app,
        "ctrl+q": actions.quit_app,
        "ctrl+c": actions.quit_app,
        "g": actions.show_graph,
        "p": actions.show_pull_requests,
        "t": actions.show_tickets,
        ",": actions.show_settings,
        "h": actions.show_help,
        "?": actions.show_help,
        "ctrl+r": actions.refresh,
        "ctrl+z": actions.undo,
        "ctrl+y": actions.redo,
        "escape": actions.back,
        "j": actions.move_down,
        "down": actions.move_down,
        "k": actions.move_up,
        "up": actions.move_up,
    },
}

TEXT_INPUT: dict[KeyScope, TextHandler] = {
    KeyScope.EDIT_DESCRIPTION: actions.description_text,
    KeyScope.SETTINGS: actions.settings_text,
    KeyScope.CREATE_PR: actions.pull_request_text,
    KeyScope.CREATE_BOOKMARK: actions.bookmark_text,
}


def resolve_scope(state: AppState) -> KeyScope:
    """Scope that receives the next key: error, then modal views, then the rebase
    picker, then the visible list view."""
    if state.error is not None:
        return KeyScope.ERROR
    scope = _VIEW_SCOPES[state.view]
    if scope in MODAL_SCOPES:
        return scope
    if state.rebase.active:
        return KeyScope.REBASE
    return scope


def _printable(message: KeyPressed) -> str | None:
    character = message.character
    if character is None or len(character) != 1 or not character.isprintable():
        return None
    return character


def route_key(state: AppState, message: KeyPressed) -> Outcome:
    scope = resolve_scope(state)
    handler = KEY_TABLE[scope].get(message.key)
    if handler is not None:
        return handler(state)
    if scope in MODAL_SCOPES:
        text_handler = TEXT_INPUT.get(scope)
        character = _printable(message)
        if text_handler is not None and character is not None:
            return text_handler(state, character)
        return state, ()
    handler = KEY_TABLE[KeyScope.GLOBAL].get(message.key)
    if handler is not None:
        return handler(state)
    return state, ()
