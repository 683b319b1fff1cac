"""List table for the graph, pull request and ticket views."""

from __future__ import annotations

from textual.widgets import DataTable

from jjdash.tui.render import change_row, pull_request_row, ticket_row
from jjdash.tui.state import AppState, ViewMode

_COLUMNS: dict[ViewMode, tuple[str, ...]] = {
    ViewMode.GRAPH: ("", "change", "bookmarks", "author", "description", "pr"),
    ViewMode.PULL_REQUESTS: ("#", "state", "chks", "branch", "title"),
    ViewMode.TICKETS: ("key", "status", "priority", "type", "summary"),
}

# Forms keep the list they were opened from visible.
_LIST_FOR_VIEW: dict[ViewMode, ViewMode] = {
    ViewMode.GRAPH: ViewMode.GRAPH,
    ViewMode.PULL_REQUESTS: ViewMode.PULL_REQUESTS,
    ViewMode.TICKETS: ViewMode.TICKETS,
    ViewMode.CREATE_PR: ViewMode.GRAPH,
    ViewMode.EDIT_DESCRIPTION: ViewMode.GRAPH,
    ViewMode.DESCRIPTION_WARNING: ViewMode.GRAPH,
}


class ChangeTable(DataTable):
    """DataTable mirroring whichever list the state shows.

    The table never takes focus: every key goes through the app's reducer, and
    the cursor is driven from the selection indices in the state.
    """

    DEFAULT_CSS = """
    ChangeTable {
        width: 2fr;
    }
    """

    can_focus = False

    def __init__(self) -> None:
        super().__init__(cursor_type="row", zebra_stripes=False)
        self._shown: ViewMode | None = None

    def action_cursor_left(self) -> None:
        """Disable left arrow navigation (row mode only)."""
        pass

    def action_cursor_right(self) -> None:
        """Disable right arrow navigation (row mode only)."""
        pass

    def list_view(self, state: AppState) -> ViewMode | None:
        if state.view == ViewMode.CREATE_BOOKMARK:
            form = state.bookmark_form
            return ViewMode.TICKETS if form is not None and form.from_ticket else ViewMode.GRAPH
        return _LIST_FOR_VIEW.get(state.view)

    def show_state(self, state: AppState) -> None:
        view = self.list_view(state)
        self.display = view is not None
        if view is None:
            return
        if view != self._shown:
            self.clear(columns=True)
            for label in _COLUMNS[view]:
                self.add_column(label)
            self._shown = view
        else:
            self.clear()
        if view == ViewMode.GRAPH:
            for index in range(len(state.changes)):
                self.add_row(*change_row(state, index))
            cursor = state.rebase.destination if state.rebase.active else state.selected_change
        elif view == ViewMode.PULL_REQUESTS:
            for pr in state.pull_requests:
                self.add_row(*pull_request_row(pr))
            cursor = state.selected_pr
        else:
            for ticket in state.tickets:
                self.add_row(*ticket_row(ticket))
            cursor = state.selected_ticket
        if 0 <= cursor < self.row_count:
            self.move_cursor(row=cursor)
