"""Tests for the rich renderables behind each panel."""

from dataclasses import replace

from jjdash.gateway.github.fake import FakeGitHub
from jjdash.models.types import ChangedFile, CheckStatus, ReviewStatus
from jjdash.tui.machines.warning import DescriptionWarning, UndescribedChange
from jjdash.tui.render import (
    change_markers,
    change_row,
    pull_request_row,
    render_detail,
    render_error,
    render_status,
    render_view_bar,
)
from jjdash.tui.state import FocusPane, ViewMode
from tests.fakes.builders import (
    make_change,
    make_pull_request,
    make_repository,
    make_services,
    make_state,
    make_ticket,
    press,
)


def _repo():
    return make_repository(
        make_change("cccc", parents=("bbbb",), is_working_copy=True, has_conflicts=True),
        make_change("bbbb", bookmarks=("feat-x",), is_immutable=True),
    )


def test_view_bar_highlights_active_view() -> None:
    text = render_view_bar(make_state(view=ViewMode.TICKETS))
    assert text.plain == "g:Graph  p:PRs  t:Tickets  ,:Settings  h:Help"
    highlighted = [
        text.plain[span.start : span.end] for span in text.spans if span.style == "bold white"
    ]
    assert highlighted == ["t:Tickets"]


def test_error_banner_offers_init_for_missing_repository() -> None:
    state = make_state(error="not a jujutsu repository: /work", not_a_repo=True, error_path="/work")
    plain = render_error(state).plain
    assert "No jj repository at /work." in plain
    assert "i initialize repository" in plain
    assert "Esc dismiss" in plain


def test_error_banner_without_error_is_empty() -> None:
    assert render_error(make_state()).plain == ""
    assert "initialize" not in render_error(make_state(error="boom")).plain


def test_status_marks_loading() -> None:
    assert render_status(make_state(status="Refreshing...", loading=True)).plain == (
        "Refreshing...  (loading)"
    )


def test_change_markers() -> None:
    change = make_change("aaaa", is_working_copy=True, is_immutable=True, has_conflicts=True)
    assert change_markers(change) == "@◆×"


def test_change_row_shows_pull_request_action() -> None:
    repository = make_repository(
        make_change("cccc", parents=("bbbb",)), make_change("bbbb", bookmarks=("feat-x",))
    )
    state = make_state(repository)
    cells = [cell.plain for cell in change_row(state, 0)]
    assert cells[1:] == ["cccc", "", "Alice", "work on cccc", "Create PR [feat-x] (c)"]


def test_change_row_marks_rebase_source_and_destination() -> None:
    state = make_state(_repo())
    state = replace(state, rebase=state.rebase.start(0, "cccc").move(1, 2))
    assert change_row(state, 0)[1].style == "reverse yellow"
    assert change_row(state, 1)[1].style == "reverse green"


def test_pull_request_row() -> None:
    pr = replace(make_pull_request(7, "feat-x"), check_status=CheckStatus.SUCCESS)
    assert [cell.plain for cell in pull_request_row(pr)] == ["#7", "open", "✓", "feat-x", "PR for feat-x"]


def test_change_detail_lists_files() -> None:
    state = make_state(
        _repo(),
        changed_files=(ChangedFile(status="M", path="src/app.py"),),
        selected_file=0,
        focus=FocusPane.FILES,
    )
    plain = render_detail(state).plain
    assert "working copy · conflicts" in plain
    assert "M src/app.py" in plain
    assert "(Tab to return to graph)" in plain


def test_pull_request_detail_without_github() -> None:
    state = make_state(_repo(), view=ViewMode.PULL_REQUESTS, github_info="GitHub: no git remote")
    plain = render_detail(state).plain
    assert "GitHub not connected." in plain
    assert "GitHub: no git remote" in plain


def test_pull_request_detail() -> None:
    pr = replace(make_pull_request(7, "feat-x"), review_status=ReviewStatus.APPROVED)
    state = make_state(
        make_repository(make_change("aaaa")),
        services=make_services(github=FakeGitHub()),
        view=ViewMode.PULL_REQUESTS,
    )
    state = replace(state, repository=replace(state.repository, pull_requests=(pr,)), selected_pr=0)
    plain = render_detail(state).plain
    assert "#7 PR for feat-x" in plain
    assert "feat-x → main" in plain
    assert "approved" in plain


def test_ticket_detail_without_provider() -> None:
    state = make_state(view=ViewMode.TICKETS, tickets=(make_ticket("A-1"),), selected_ticket=0)
    assert "No ticket provider configured." in render_detail(state).plain


def test_settings_masks_secrets() -> None:
    state, _ = press(make_state(_repo()), ",", "s", "e", "c", "r", "e", "t")
    plain = render_detail(state).plain
    assert "secret" not in plain
    assert "Token: ••••••" in plain
    assert "Ctrl+G to log in with GitHub" in plain


def test_help_lists_every_section() -> None:
    plain = render_detail(make_state(view=ViewMode.HELP)).plain
    for section in ("Views", "Graph", "Pull requests", "Tickets", "General"):
        assert f"{section}\n" in plain


def test_description_warning_marks_highlighted_change() -> None:
    warning = DescriptionWarning(
        changes=(UndescribedChange("cccc", "cccc"), UndescribedChange("bbbb", "bbbb")), selected=1
    )
    state = make_state(_repo(), view=ViewMode.DESCRIPTION_WARNING, warning=warning)
    plain = render_detail(state).plain
    assert "  cccc\n> bbbb\n" in plain
    assert "c create PR anyway" in plain
