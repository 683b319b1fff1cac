"""Tests for ticket selection and the provider payload conversions."""

import pytest
import requests

from jjdash.errors import TicketServiceError
from jjdash.gateway.tickets.codecks import (
    CodecksTicketService,
    encode_short_id,
    slugify,
    ticket_from_card,
)
from jjdash.gateway.tickets.filtering import find_transition, select_tickets
from jjdash.gateway.tickets.github_issues import GitHubIssuesTicketService, issue_number
from jjdash.gateway.tickets.github_issues import ticket_from_issue as ticket_from_github_issue
from jjdash.gateway.tickets.jira import flatten_adf, ticket_from_issue
from jjdash.models.types import Transition
from tests.fakes.builders import make_ticket


class TestSelectTickets:
    def test_hides_excluded_statuses_case_insensitively(self) -> None:
        tickets = [
            make_ticket("A-1", status="Done"),
            make_ticket("A-2", status="In Progress"),
            make_ticket("A-3", status="won't do"),
        ]
        selected = select_tickets(tickets, frozenset({"done", "won't do"}))
        assert [t.key for t in selected] == ["A-2"]

    def test_sorts_by_display_key_descending(self) -> None:
        tickets = [make_ticket("A-1"), make_ticket("A-3"), make_ticket("A-2")]
        assert [t.key for t in select_tickets(tickets, frozenset())] == ["A-3", "A-2", "A-1"]


class TestFindTransition:
    @pytest.mark.parametrize(
        ("target", "name"),
        [
            ("In Progress", "Start Progress"),
            ("In Progress", "Started"),
            ("Done", "Resolve Issue"),
            ("Done", "Completed"),
            ("Blocked", "Mark Blocked"),
            ("Not Started", "Not Started"),
            ("Done", "Close Issue"),
            ("Not Started", "Reopen Issue"),
        ],
    )
    def test_matches_by_name(self, target: str, name: str) -> None:
        transitions = [Transition("9", "Archive"), Transition("1", name)]
        found = find_transition(transitions, target)
        assert found == Transition("1", name)

    def test_not_started_is_not_in_progress(self) -> None:
        """A not-started transition never counts as starting work."""
        assert find_transition([Transition("1", "Not Started")], "In Progress") is None

    def test_first_match_wins(self) -> None:
        transitions = [Transition("1", "Done"), Transition("2", "Resolved")]
        assert find_transition(transitions, "Done") == Transition("1", "Done")

    def test_no_match(self) -> None:
        assert find_transition([Transition("1", "Review")], "Blocked") is None


class TestCodecks:
    @pytest.mark.parametrize(
        ("sequence", "short_id"),
        [(0, ""), (1, "111"), (2, "112"), (28, "11z")],
    )
    def test_encode_short_id(self, sequence: int, short_id: str) -> None:
        assert encode_short_id(sequence) == short_id

    def test_slugify(self) -> None:
        assert slugify("Fix  the Login -- page!") == "fix-the-login-page"

    def test_ticket_from_card(self) -> None:
        card = {
            "title": "Boss fight",
            "status": "started",
            "priority": "b",
            "content": "Make it hard",
            "accountSeq": 1,
            "deck": "deck-9",
        }
        ticket = ticket_from_card("card-1", card)
        assert ticket.key == "card-1"
        assert ticket.display_key == "$111"
        assert ticket.status == "In Progress"
        assert ticket.priority == "High"
        assert ticket.deck_id == "deck-9"

    def test_every_status_is_offered(self) -> None:
        service = CodecksTicketService(subdomain="team", token="t")
        names = [t.name for t in service.available_transitions("card-1")]
        assert names == ["Not Started", "In Progress", "Blocked", "Done"]

    def test_browser_url_without_deck(self) -> None:
        service = CodecksTicketService(subdomain="team", token="t")
        ticket = ticket_from_card("card-1", {"title": "Boss fight", "accountSeq": 1})
        assert service.browser_url(ticket) == "https://team.codecks.io/card/111-boss-fight"


class TestJira:
    def test_flatten_adf(self) -> None:
        document = {
            "type": "doc",
            "content": [
                {"type": "paragraph", "content": [{"type": "text", "text": "First"}]},
                {"type": "paragraph", "content": [{"type": "text", "text": "second"}]},
            ],
        }
        assert flatten_adf(document) == "First second"
        assert flatten_adf(None) == ""

    def test_ticket_from_issue(self) -> None:
        issue = {
            "key": "PROJ-7",
            "fields": {
                "summary": "Broken login",
                "status": {"name": "To Do"},
                "priority": {"name": "High"},
                "issuetype": {"name": "Bug"},
                "description": None,
            },
        }
        ticket = ticket_from_issue(issue)
        assert ticket.key == ticket.display_key == "PROJ-7"
        assert ticket.status == "To Do"
        assert ticket.ticket_type == "Bug"
        assert ticket.description == ""


def _response(status: int, body: bytes) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body
    return response


class TestGitHubIssues:
    def test_ticket_from_issue_reads_labels(self) -> None:
        issue = {
            "number": 42,
            "title": "Crash on save",
            "body": None,
            "state": "open",
            "labels": [{"name": "P1-high"}, {"name": "bug"}],
        }
        ticket = ticket_from_github_issue(issue)
        assert (ticket.key, ticket.display_key) == ("#42", "#42")
        assert ticket.status == "Open"
        assert ticket.priority == "P1-high"
        assert ticket.ticket_type == "Bug"
        assert ticket.description == ""

    def test_unlabelled_issue(self) -> None:
        ticket = ticket_from_github_issue({"number": 3, "title": "Idea", "state": "closed", "labels": []})
        assert ticket.status == "Closed"
        assert ticket.priority == ""
        assert ticket.ticket_type == "Issue"

    @pytest.mark.parametrize(("key", "number"), [("#12", 12), ("12", 12)])
    def test_issue_number(self, key: str, number: int) -> None:
        assert issue_number(key) == number

    def test_invalid_issue_number(self) -> None:
        with pytest.raises(TicketServiceError, match="invalid issue number"):
            issue_number("PROJ-1")

    def test_browser_url(self) -> None:
        service = GitHubIssuesTicketService(owner="acme", repo="widgets", token="t")
        ticket = ticket_from_github_issue({"number": 7, "title": "x", "state": "open"})
        assert service.browser_url(ticket) == "https://github.com/acme/widgets/issues/7"

    def test_rejects_unknown_transition(self) -> None:
        service = GitHubIssuesTicketService(owner="acme", repo="widgets", token="t")
        with pytest.raises(TicketServiceError, match="invalid transition"):
            service.apply_transition("#7", "done")

    def test_lists_assigned_issues_without_pull_requests(self, monkeypatch: pytest.MonkeyPatch) -> None:
        service = GitHubIssuesTicketService(owner="acme", repo="widgets", token="t")
        calls = []

        def request(method, url, **kwargs):
            calls.append((method, url, dict(kwargs.get("params") or {})))
            if url.endswith("/user"):
                return _response(200, b'{"login": "alice"}')
            return _response(
                200,
                b'[{"number": 1, "title": "a", "state": "open"},'
                b' {"number": 2, "title": "b", "state": "open", "pull_request": {}}]',
            )

        monkeypatch.setattr(service._session, "request", request)
        tickets = service.list_assigned()

        assert [ticket.key for ticket in tickets] == ["#1"]
        assert calls[1][2]["assignee"] == "alice"
        assert calls[1][2]["state"] == "open"

    def test_non_json_response_is_a_ticket_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        service = GitHubIssuesTicketService(owner="acme", repo="widgets", token="t")
        monkeypatch.setattr(service._session, "request", lambda *args, **kwargs: _response(200, b"<html>"))
        with pytest.raises(TicketServiceError, match="non-JSON"):
            service.get("#1")
