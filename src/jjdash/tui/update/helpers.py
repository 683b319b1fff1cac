"""Snapshot and selection bookkeeping shared by key and result handlers."""

from __future__ import annotations

from dataclasses import replace

from jjdash.models.types import Repository
from jjdash.tui.effects import commands
from jjdash.tui.effects.types import Effect
from jjdash.tui.state import AppState, clamp_index, with_repository
from jjdash.tui.update.types import Outcome


def adopt_snapshot(state: AppState, repository: Repository) -> AppState:
    """Install a freshly loaded graph, keeping the pull requests already fetched.

    An active rebase picker follows its source change into the new graph and is
    cancelled when that change is gone.
    """
    if state.repository is not None:
        repository = repository.with_pull_requests(state.repository.pull_requests)
    state = with_repository(state, repository)
    if state.rebase.active:
        graph = repository.graph
        rebase = state.rebase.reanchor(graph.index_of(state.rebase.source_change_id), len(graph.changes))
        state = replace(state, rebase=rebase)
    return state


def pull_request_loads(state: AppState) -> tuple[Effect, ...]:
    """A pull request reload when GitHub is connected, else nothing."""
    github = state.services.github
    if github is None:
        return ()
    return (commands.load_pull_requests(github, state.config.pull_request_filters(), state.github_info),)


def focus_change(state: AppState, index: int) -> Outcome:
    """Select a change and fetch its files if it differs from the one shown."""
    changes = state.changes
    if not 0 <= index < len(changes):
        return replace(state, selected_change=-1, files_change_id="", changed_files=(), selected_file=-1), ()
    change_id = changes[index].change_id
    state = replace(state, selected_change=index)
    if change_id == state.files_change_id:
        return state, ()
    state = replace(state, files_change_id=change_id, changed_files=(), selected_file=-1)
    return state, (commands.load_changed_files(state.services.jj, change_id),)


def resync_selection(state: AppState) -> Outcome:
    """Re-find the selected change by change id after a reload.

    Falls back to clamping when the change is gone, and selects the first change
    when nothing is selected.
    """
    changes = state.changes
    selected = state.selected_change
    files_change_id = state.files_change_id
    if files_change_id:
        position = state.repository.graph.index_of(files_change_id) if state.repository else -1
        if position < 0:
            selected = -1
            files_change_id = ""
        else:
            selected = position
    selected = clamp_index(selected, len(changes))
    state = replace(state, selected_change=selected, files_change_id=files_change_id)
    if not files_change_id:
        state = replace(state, changed_files=(), selected_file=-1)
    if selected == -1 and changes:
        return focus_change(state, 0)
    return state, ()
