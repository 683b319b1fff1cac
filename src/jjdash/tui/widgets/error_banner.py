"""Error banner shown above the panels while an error is active."""

from __future__ import annotations

from textual.widgets import Static

from jjdash.tui.render import render_error
from jjdash.tui.state import AppState


class ErrorBanner(Static):
    """Hidden unless the state carries an error."""

    DEFAULT_CSS = """
    ErrorBanner {
        dock: top;
        height: auto;
        background: $error 20%;
        padding: 0 1;
        display: none;
    }
    """

    def show_state(self, state: AppState) -> None:
        self.display = state.error is not None
        self.update(render_error(state))
