"""Status bar widget for the dashboard."""

from __future__ import annotations

from textual.widgets import Static

from jjdash.tui.render import render_status
from jjdash.tui.state import AppState


class StatusBar(Static):
    """Bottom line carrying the latest status message."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: $surface;
        padding: 0 1;
    }
    """

    def show_state(self, state: AppState) -> None:
        self.update(render_status(state))
