"""GitHub Issues of the repository's GitHub remote as a ticket provider."""

from __future__ import annotations

import logging
from typing import Any

import requests

from jjdash.errors import TicketServiceError
from jjdash.gateway.tickets.abc import TicketService
from jjdash.models.types import Ticket, Transition

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30
PER_PAGE = 100

CLOSE = Transition(transition_id="closed", name="Close Issue")
REOPEN = Transition(transition_id="open", name="Reopen Issue")

_PRIORITY_WORDS = ("priority", "p0", "p1", "p2", "critical", "high", "medium", "low")
_TYPE_WORDS = (
    (("bug",), "Bug"),
    (("feature", "enhancement"), "Feature"),
    (("documentation", "docs"), "Documentation"),
)


def issue_number(key: str) -> int:
    """Parse ``"#12"`` or ``"12"``.

    Raises:
        TicketServiceError: If the key is not an issue number
    """
    raw = key.removeprefix("#")
    if not raw.isdigit():
        raise TicketServiceError(f"invalid issue number: {key}")
    return int(raw)


def ticket_from_issue(issue: dict[str, Any]) -> Ticket:
    """Convert a REST issue object; labels supply priority and type."""
    labels = [label.get("name", "") for label in issue.get("labels") or [] if isinstance(label, dict)]
    priority = next((name for name in labels if any(w in name.lower() for w in _PRIORITY_WORDS)), "")
    ticket_type = "Issue"
    for name in labels:
        lowered = name.lower()
        match = next((kind for words, kind in _TYPE_WORDS if any(w in lowered for w in words)), None)
        if match is not None:
            ticket_type = match
            break
    key = f"#{issue['number']}"
    return Ticket(
        key=key,
        display_key=key,
        summary=issue.get("title") or "",
        status=(issue.get("state") or "").capitalize(),
        priority=priority,
        ticket_type=ticket_type,
        description=issue.get("body") or "",
    )


class GitHubIssuesTicketService(TicketService):
    """Open issues of one repository assigned to the authenticated user."""

    def __init__(self, *, owner: str, repo: str, token: str) -> None:
        self._owner = owner
        self._repo = repo
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        self._login = ""

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{API_URL}{path}"
        logger.debug("GitHub Issues %s %s", method, url)
        try:
            response = self._session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            raise TicketServiceError(f"GitHub request failed: {e}") from e
        if response.status_code >= 400:
            raise TicketServiceError(f"GitHub API error {response.status_code}: {response.text[:200]}")
        try:
            return response.json()
        except ValueError as e:
            raise TicketServiceError(f"GitHub returned a non-JSON response (status {response.status_code})") from e

    def _viewer(self) -> str:
        if not self._login:
            self._login = self._request("GET", "/user").get("login", "")
        return self._login

    def _issue(self, key: str) -> dict[str, Any]:
        return self._request("GET", f"/repos/{self._owner}/{self._repo}/issues/{issue_number(key)}")

    def list_assigned(self) -> list[Ticket]:
        params: dict[str, Any] = {
            "assignee": self._viewer(),
            "state": "open",
            "sort": "updated",
            "direction": "desc",
            "per_page": PER_PAGE,
            "page": 1,
        }
        tickets: list[Ticket] = []
        while True:
            issues = self._request("GET", f"/repos/{self._owner}/{self._repo}/issues", params=params)
            # The issues endpoint also returns pull requests.
            tickets.extend(ticket_from_issue(issue) for issue in issues if "pull_request" not in issue)
            if len(issues) < PER_PAGE:
                return tickets
            params["page"] += 1

    def get(self, key: str) -> Ticket:
        return ticket_from_issue(self._issue(key))

    def available_transitions(self, key: str) -> list[Transition]:
        if self._issue(key).get("state") == "open":
            return [CLOSE]
        return [REOPEN]

    def apply_transition(self, key: str, transition_id: str) -> None:
        if transition_id not in (CLOSE.transition_id, REOPEN.transition_id):
            raise TicketServiceError(f"invalid transition: {transition_id} (must be 'open' or 'closed')")
        self._request(
            "PATCH",
            f"/repos/{self._owner}/{self._repo}/issues/{issue_number(key)}",
            json={"state": transition_id},
        )

    def browser_url(self, ticket: Ticket) -> str:
        return f"https://github.com/{self._owner}/{self._repo}/issues/{ticket.key.removeprefix('#')}"

    def provider_name(self) -> str:
        return "GitHub Issues"
