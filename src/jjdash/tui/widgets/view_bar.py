"""View bar widget for the dashboard."""

from __future__ import annotations

from textual.widgets import Static

from jjdash.tui.render import render_view_bar
from jjdash.tui.state import AppState


class ViewBar(Static):
    """Top bar showing available views with the active view highlighted.

    Renders: g:Graph  p:PRs  t:Tickets  ,:Settings  h:Help
    Active view is bold white, inactive views are dimmed.
    """

    DEFAULT_CSS = """
    ViewBar {
        dock: top;
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def show_state(self, state: AppState) -> None:
        self.update(render_view_bar(state))
