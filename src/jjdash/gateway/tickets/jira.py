"""Jira Cloud ticket provider (REST API v3)."""

from __future__ import annotations

import logging
from typing import Any

import requests

from jjdash.errors import TicketServiceError
from jjdash.gateway.tickets.abc import TicketService
from jjdash.models.types import Ticket, Transition

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
SEARCH_FIELDS = "key,summary,status,priority,issuetype,description"
MAX_RESULTS = 50


def flatten_adf(document: dict[str, Any] | None) -> str:
    """Collect the text of an Atlassian Document Format description.

    Only the text nodes of top-level blocks are kept, joined by spaces.
    """
    if not document:
        return ""
    parts: list[str] = []
    for block in document.get("content") or []:
        for inline in block.get("content") or []:
            text = inline.get("text")
            if text:
                parts.append(text)
    return " ".join(parts)


def _name(fields: dict[str, Any], key: str) -> str:
    value = fields.get(key)
    if isinstance(value, dict):
        return value.get("name", "")
    return ""


def ticket_from_issue(issue: dict[str, Any]) -> Ticket:
    """Convert a Jira issue payload."""
    fields = issue.get("fields") or {}
    return Ticket(
        key=issue["key"],
        display_key=issue["key"],
        summary=fields.get("summary") or "",
        status=_name(fields, "status"),
        priority=_name(fields, "priority"),
        ticket_type=_name(fields, "issuetype"),
        description=flatten_adf(fields.get("description")),
    )


class JiraTicketService(TicketService):
    """Tickets assigned to one Jira user."""

    def __init__(self, *, base_url: str, user: str, token: str) -> None:
        self._base_url = base_url.rstrip("/")
        self._user = user
        self._session = requests.Session()
        self._session.auth = (user, token)
        self._session.headers.update({"Accept": "application/json"})

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug("Jira %s %s", method, url)
        try:
            response = self._session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            raise TicketServiceError(f"Jira request failed: {e}") from e
        if response.status_code >= 400:
            raise TicketServiceError(
                f"Jira API error (status {response.status_code}): {response.text[:200]}"
            )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def list_assigned(self) -> list[Ticket]:
        jql = f'assignee = "{self._user}" AND status != Done ORDER BY updated DESC'
        payload = self._request(
            "GET",
            "/rest/api/3/search/jql",
            params={"jql": jql, "maxResults": MAX_RESULTS, "fields": SEARCH_FIELDS},
        )
        return [ticket_from_issue(issue) for issue in payload.get("issues", [])]

    def get(self, key: str) -> Ticket:
        return ticket_from_issue(self._request("GET", f"/rest/api/3/issue/{key}"))

    def available_transitions(self, key: str) -> list[Transition]:
        payload = self._request("GET", f"/rest/api/3/issue/{key}/transitions")
        return [
            Transition(transition_id=str(t["id"]), name=t.get("name", ""))
            for t in payload.get("transitions", [])
        ]

    def apply_transition(self, key: str, transition_id: str) -> None:
        self._request(
            "POST",
            f"/rest/api/3/issue/{key}/transitions",
            json={"transition": {"id": transition_id}},
        )

    def browser_url(self, ticket: Ticket) -> str:
        return f"{self._base_url}/browse/{ticket.key}"

    def provider_name(self) -> str:
        return "Jira"
