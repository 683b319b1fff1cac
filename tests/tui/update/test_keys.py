"""Tests for key scope resolution and routing."""

from dataclasses import replace

import pytest

from jjdash.tui.effects.types import Exit
from jjdash.tui.messages import KeyPressed
from jjdash.tui.state import ViewMode
from jjdash.tui.update.keys import KEY_TABLE, MODAL_SCOPES, KeyScope, resolve_scope
from jjdash.tui.update.reducer import update
from tests.fakes.builders import make_change, make_repository, make_state, press


def _state(**overrides):
    repository = make_repository(make_change("bbbb", parents=("aaaa",)), make_change("aaaa"))
    return make_state(repository, **overrides)


def test_list_views_map_to_their_scope() -> None:
    """Without modals each list view owns its keys."""
    assert resolve_scope(_state()) == KeyScope.GRAPH
    assert resolve_scope(_state(view=ViewMode.PULL_REQUESTS)) == KeyScope.PULL_REQUESTS
    assert resolve_scope(_state(view=ViewMode.TICKETS)) == KeyScope.TICKETS
    assert resolve_scope(_state(view=ViewMode.HELP)) == KeyScope.HELP


def test_error_beats_everything() -> None:
    """An error banner captures keys even over a modal view."""
    state = _state(view=ViewMode.SETTINGS, error="boom")
    assert resolve_scope(state) == KeyScope.ERROR


def test_modal_view_beats_rebase() -> None:
    """A modal view opened during a rebase pick still owns the keys."""
    state = _state()
    state = replace(state, rebase=state.rebase.start(0, "bbbb"), view=ViewMode.EDIT_DESCRIPTION)
    assert resolve_scope(state) == KeyScope.EDIT_DESCRIPTION


def test_rebase_beats_list_view() -> None:
    state = _state()
    state = replace(state, rebase=state.rebase.start(0, "bbbb"))
    assert resolve_scope(state) == KeyScope.REBASE


def test_rebase_swallows_global_keys() -> None:
    """q is not a quit while picking a rebase destination."""
    state = _state()
    state = replace(state, rebase=state.rebase.start(0, "bbbb"))
    state, effects = press(state, "q")
    assert effects == ()
    assert state.rebase.active


@pytest.mark.parametrize("scope", sorted(MODAL_SCOPES, key=lambda scope: scope.name))
def test_every_modal_scope_quits_on_ctrl_c(scope: KeyScope) -> None:
    """ctrl+c always quits, even when the scope swallows other keys."""
    assert "ctrl+c" in KEY_TABLE[scope]


def test_ctrl_c_quits_from_description_editor() -> None:
    state = _state(view=ViewMode.EDIT_DESCRIPTION)
    _, effects = press(state, "ctrl+c")
    assert effects == (Exit(),)


def test_global_keys_apply_to_list_views() -> None:
    """Keys absent from a list scope fall back to the global table."""
    _, effects = press(_state(view=ViewMode.HELP), "q")
    assert effects == (Exit(),)


def test_unknown_key_is_ignored() -> None:
    state = _state()
    new_state, effects = press(state, "F")
    assert new_state == state
    assert effects == ()


def test_non_printable_character_is_not_typed() -> None:
    """A key with a control character does not reach a text field."""
    state, _ = press(_state(), "b")
    before = state.bookmark_form
    state, _ = update(state, KeyPressed(key="ctrl+t", character="\x14"))
    assert state.bookmark_form == before
