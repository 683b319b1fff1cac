"""Detail panel: selected item details, forms and help."""

from __future__ import annotations

from textual.containers import VerticalScroll
from textual.widgets import Static

from jjdash.tui.render import render_detail
from jjdash.tui.state import AppState, ViewMode

_FULL_WIDTH_VIEWS = frozenset({ViewMode.SETTINGS, ViewMode.HELP, ViewMode.GITHUB_LOGIN})


class DetailPanel(VerticalScroll):
    """Scrollable panel beside the list. Takes the whole width for settings,
    help and the login screen, which have no list."""

    DEFAULT_CSS = """
    DetailPanel {
        width: 1fr;
        border-left: solid $primary-background;
        padding: 0 1;
    }
    DetailPanel.-full {
        border-left: none;
    }
    """

    can_focus = False

    def compose(self):
        yield Static(id="detail-content")

    def show_state(self, state: AppState) -> None:
        self.set_class(state.view in _FULL_WIDTH_VIEWS, "-full")
        self.query_one("#detail-content", Static).update(render_detail(state))
