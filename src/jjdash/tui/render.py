"""Rich renderables for the dashboard panels.

Pure functions of AppState so they can be tested without running the app.
"""

from __future__ import annotations

from rich.text import Text

from jjdash.models.types import ChangeSet, CheckStatus, PullRequest, ReviewStatus, Ticket
from jjdash.tui.machines.pr_form import BODY, TITLE
from jjdash.tui.machines.settings import TAB_TITLES, FieldKind, SettingsTab
from jjdash.tui.state import AppState, FocusPane, ViewMode

VIEW_TABS: tuple[tuple[ViewMode, str, str], ...] = (
    (ViewMode.GRAPH, "g", "Graph"),
    (ViewMode.PULL_REQUESTS, "p", "PRs"),
    (ViewMode.TICKETS, "t", "Tickets"),
    (ViewMode.SETTINGS, ",", "Settings"),
    (ViewMode.HELP, "h", "Help"),
)

_CHECK_MARKS = {
    CheckStatus.NONE: ("", ""),
    CheckStatus.PENDING: ("●", "yellow"),
    CheckStatus.SUCCESS: ("✓", "green"),
    CheckStatus.FAILURE: ("✗", "red"),
}

_REVIEW_LABELS = {
    ReviewStatus.NONE: "",
    ReviewStatus.PENDING: "review pending",
    ReviewStatus.APPROVED: "approved",
    ReviewStatus.CHANGES_REQUESTED: "changes requested",
}

HELP_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Views",
        (
            ("g", "Commit graph (refresh)"),
            ("p", "Pull requests"),
            ("t", "Tickets"),
            (",", "Settings"),
            ("h/?", "This help"),
        ),
    ),
    (
        "Graph",
        (
            ("j/k", "Move selection"),
            ("n", "New commit on selection"),
            ("e/Enter", "Edit (check out) commit"),
            ("d", "Edit description"),
            ("s", "Squash into parent"),
            ("a", "Abandon"),
            ("r", "Rebase onto another commit"),
            ("b", "Create or move bookmark"),
            ("x", "Delete bookmark"),
            ("c", "Create PR"),
            ("u", "Push to existing PR"),
            ("Tab", "Switch between graph and files"),
            ("[ / ]", "Move file to new parent / child commit (files pane)"),
            ("v", "Revert file (files pane)"),
            ("f", "Fetch from all remotes"),
            ("y", "Copy change id"),
        ),
    ),
    (
        "Pull requests",
        (("o/Enter", "Open in browser"), ("M", "Merge"), ("X", "Close"), ("y", "Copy URL")),
    ),
    (
        "Tickets",
        (
            ("e/Enter", "Create branch from ticket"),
            ("o", "Open in browser"),
            ("c", "Change status (then i/D/B/N)"),
            ("y", "Copy key"),
        ),
    ),
    (
        "General",
        (
            ("Ctrl+R", "Refresh"),
            ("Ctrl+Z / Ctrl+Y", "Undo / redo"),
            ("Esc", "Back"),
            ("q / Ctrl+Q", "Quit"),
        ),
    ),
)


def render_view_bar(state: AppState) -> Text:
    """Renders: g:Graph  p:PRs  t:Tickets  ,:Settings  h:Help"""
    text = Text()
    for i, (mode, key, title) in enumerate(VIEW_TABS):
        if i > 0:
            text.append("  ")
        label = f"{key}:{title}"
        if mode == state.view:
            text.append(label, style="bold white")
        else:
            text.append(label, style="dim")
    return text


def render_error(state: AppState) -> Text:
    text = Text()
    if state.error is None:
        return text
    text.append("Error: ", style="bold red")
    text.append(state.error)
    text.append("\n")
    if state.not_a_repo:
        if state.error_path:
            text.append(f"No jj repository at {state.error_path}. ", style="yellow")
        text.append("i", style="bold")
        text.append(" initialize repository  ")
    text.append("Esc", style="bold")
    text.append(" dismiss  ")
    text.append("Ctrl+R", style="bold")
    text.append(" retry  ")
    text.append("Ctrl+Q", style="bold")
    text.append(" quit")
    return text


def render_status(state: AppState) -> Text:
    text = Text(state.status)
    if state.loading:
        text.append("  (loading)", style="dim")
    return text


# ============================================================================
# List rows
# ============================================================================


def change_markers(change: ChangeSet) -> str:
    markers = ""
    if change.is_working_copy:
        markers += "@"
    if change.is_immutable:
        markers += "◆"
    if change.has_conflicts:
        markers += "×"
    return markers


def change_row(state: AppState, index: int) -> tuple[Text, ...]:
    """Cells of one graph row: graph, id, bookmarks, author, summary, PR action."""
    change = state.changes[index]
    rebase = state.rebase
    id_style = "bold magenta" if change.is_working_copy else "cyan"
    if rebase.active and index == rebase.source:
        id_style = "reverse yellow"
    elif rebase.active and index == rebase.destination:
        id_style = "reverse green"
    summary_style = "dim" if change.is_immutable else ""
    if change.has_conflicts:
        summary_style = "red"
    action = ""
    if state.applicability is not None:
        action = state.applicability.action_label(index) or ""
    return (
        Text(change.graph_prefix or change_markers(change), style="dim"),
        Text(change.short_id, style=id_style),
        Text(" ".join(change.bookmarks), style="green"),
        Text(change.author),
        Text(change.summary, style=summary_style),
        Text(action, style="blue"),
    )


def pull_request_row(pr: PullRequest) -> tuple[Text, ...]:
    mark, style = _CHECK_MARKS[pr.check_status]
    state_style = {"open": "green", "merged": "magenta", "closed": "red"}[pr.state.value]
    return (
        Text(f"#{pr.number}", style="cyan"),
        Text(pr.state.value, style=state_style),
        Text(mark, style=style),
        Text(pr.head_branch, style="green"),
        Text(pr.title),
    )


def ticket_row(ticket: Ticket) -> tuple[Text, ...]:
    return (
        Text(ticket.display_key, style="cyan"),
        Text(ticket.status, style="yellow"),
        Text(ticket.priority),
        Text(ticket.ticket_type, style="dim"),
        Text(ticket.summary),
    )


# ============================================================================
# Detail panel
# ============================================================================


def _change_detail(state: AppState) -> Text:
    change = state.current_change
    text = Text()
    if change is None:
        text.append("No commit selected", style="dim")
        return text
    text.append(change.short_id, style="bold cyan")
    text.append(f"  {change.commit_id}\n", style="dim")
    text.append(f"{change.author} <{change.email}>\n")
    if change.timestamp is not None:
        text.append(change.timestamp.strftime("%Y-%m-%d %H:%M") + "\n", style="dim")
    if change.bookmarks:
        text.append("Bookmarks: ", style="bold")
        text.append(", ".join(change.bookmarks) + "\n", style="green")
    flags = [
        label
        for flag, label in (
            (change.is_working_copy, "working copy"),
            (change.is_immutable, "immutable"),
            (change.has_conflicts, "conflicts"),
        )
        if flag
    ]
    if flags:
        text.append(" · ".join(flags) + "\n", style="yellow")
    text.append("\n")
    text.append((change.description or change.summary) + "\n\n")
    text.append("Files", style="bold")
    if state.focus == FocusPane.FILES:
        text.append(" (Tab to return to graph)", style="dim")
    text.append("\n")
    if not state.changed_files:
        text.append("  (no changes)\n", style="dim")
    for i, changed in enumerate(state.changed_files):
        selected = state.focus == FocusPane.FILES and i == state.selected_file
        text.append(
            f"  {changed.status} {changed.path}\n",
            style="reverse" if selected else "",
        )
    return text


def _pull_request_detail(state: AppState) -> Text:
    text = Text()
    if state.services.github is None:
        text.append("GitHub not connected.\n", style="yellow")
        if state.github_info:
            text.append(state.github_info + "\n", style="dim")
        text.append("Configure a token in Settings (,)")
        return text
    pr = state.current_pull_request
    if pr is None:
        text.append("No pull requests", style="dim")
        return text
    text.append(f"#{pr.number} {pr.title}\n", style="bold")
    text.append(f"{pr.head_branch} → {pr.base_branch}  ", style="green")
    text.append(pr.state.value + "\n")
    review = _REVIEW_LABELS[pr.review_status]
    if review:
        text.append(review + "\n", style="yellow")
    text.append(pr.url + "\n\n", style="dim underline")
    text.append(pr.body or "(no description)")
    return text


def _ticket_detail(state: AppState) -> Text:
    text = Text()
    if state.services.tickets is None:
        text.append("No ticket provider configured.\n", style="yellow")
        text.append("Configure Jira, Codecks or GitHub Issues in Settings (,)")
        return text
    ticket = state.current_ticket
    if ticket is None:
        text.append("No tickets", style="dim")
        return text
    text.append(f"{ticket.display_key} {ticket.summary}\n", style="bold")
    text.append(f"{ticket.ticket_type} · {ticket.status} · {ticket.priority}\n\n", style="dim")
    text.append((ticket.description or "(no description)") + "\n")
    if state.status_change_mode:
        text.append("\nSet status: ", style="bold")
        text.append("i In Progress  D Done  B Blocked  N Not Started\n")
    if state.transitions:
        text.append("\nAvailable: " + ", ".join(t.name for t in state.transitions), style="dim")
    return text


def _settings_detail(state: AppState) -> Text:
    form = state.settings_form
    text = Text()
    if form is None:
        return text
    for i, tab in enumerate(SettingsTab):
        if i > 0:
            text.append("  ")
        style = "bold reverse" if tab == form.tab else "dim"
        text.append(f" {TAB_TITLES[tab]} ", style=style)
    text.append("\n\n")
    for i, field in enumerate(form.fields):
        focused = i == form.focus
        value = form.values.get(field.key, "")
        if field.kind == FieldKind.SECRET and value:
            value = "•" * min(len(value), 12)
        elif field.kind == FieldKind.TOGGLE:
            value = "[x]" if value == "true" else "[ ]"
        text.append("> " if focused else "  ", style="bold")
        text.append(f"{field.label}: ", style="bold" if focused else "")
        text.append(value + ("▏" if focused and field.kind != FieldKind.TOGGLE else "") + "\n")
    text.append("\n")
    if form.tab == SettingsTab.GITHUB:
        text.append("Ctrl+G to log in with GitHub\n", style="dim")
    text.append(f"Connected: {state.config.connected_services()}", style="dim")
    return text


def _bookmark_detail(state: AppState) -> Text:
    form = state.bookmark_form
    text = Text()
    if form is None:
        return text
    if form.from_ticket:
        text.append(f"New branch from main for {form.ticket_display_key}\n\n", style="bold")
    else:
        text.append(f"Bookmark on {form.target_short_id}\n\n", style="bold")
    text.append("Name: ", style="bold" if not form.browsing else "dim")
    text.append(form.name + ("▏" if not form.browsing else "") + "\n")
    if form.existing:
        text.append("\nMove existing (Tab):\n", style="bold" if form.browsing else "dim")
        for i, name in enumerate(form.existing):
            style = "reverse" if i == form.selected else ""
            text.append(f"  {name}\n", style=style)
    return text


def _pull_request_form_detail(state: AppState) -> Text:
    form = state.pr_form
    text = Text()
    if form is None:
        return text
    text.append(f"{form.head_branch} → {form.base_branch}", style="green")
    if form.needs_move:
        text.append("  (bookmark will be moved here)", style="yellow")
    text.append("\n\n")
    text.append("Title: ", style="bold" if form.focus == TITLE else "dim")
    text.append(form.title + ("▏" if form.focus == TITLE else "") + "\n\n")
    text.append("Body:\n", style="bold" if form.focus == BODY else "dim")
    text.append(form.body + ("▏" if form.focus == BODY else ""))
    return text


def _description_detail(state: AppState) -> Text:
    editor = state.description
    text = Text()
    if editor is None:
        return text
    text.append(f"Description of {editor.short_id}\n\n", style="bold")
    if not editor.loaded:
        text.append("Loading...", style="dim")
        return text
    text.append(editor.text + "▏")
    return text


def _warning_detail(state: AppState) -> Text:
    warning = state.warning
    text = Text()
    if warning is None:
        return text
    text.append("These commits have no description:\n\n", style="bold yellow")
    for i, change in enumerate(warning.changes):
        selected = i == warning.selected
        text.append("> " if selected else "  ", style="bold")
        text.append(change.short_id + "\n", style="reverse cyan" if selected else "cyan")
    text.append("\nEnter describe  c create PR anyway  Esc cancel", style="dim")
    return text


def _login_detail(state: AppState) -> Text:
    login = state.login
    text = Text()
    if login is None:
        text.append("Starting GitHub login...", style="dim")
        return text
    text.append("Open ", style="")
    text.append(login.verification_uri, style="underline")
    text.append(" and enter the code:\n\n")
    text.append(f"    {login.user_code}\n\n", style="bold reverse")
    text.append("o reopen page  y copy code  Esc cancel", style="dim")
    return text


def _help_detail(state: AppState) -> Text:
    text = Text()
    for title, bindings in HELP_SECTIONS:
        text.append(title + "\n", style="bold")
        for key, description in bindings:
            text.append(f"  {key:<16}", style="cyan")
            text.append(description + "\n")
        text.append("\n")
    return text


_DETAIL_RENDERERS = {
    ViewMode.GRAPH: _change_detail,
    ViewMode.PULL_REQUESTS: _pull_request_detail,
    ViewMode.TICKETS: _ticket_detail,
    ViewMode.SETTINGS: _settings_detail,
    ViewMode.HELP: _help_detail,
    ViewMode.CREATE_PR: _pull_request_form_detail,
    ViewMode.EDIT_DESCRIPTION: _description_detail,
    ViewMode.CREATE_BOOKMARK: _bookmark_detail,
    ViewMode.GITHUB_LOGIN: _login_detail,
    ViewMode.DESCRIPTION_WARNING: _warning_detail,
}


def render_detail(state: AppState) -> Text:
    """Content of the detail panel for the current view."""
    return _DETAIL_RENDERERS[state.view](state)
