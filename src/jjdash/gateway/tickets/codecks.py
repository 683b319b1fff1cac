"""Codecks ticket provider.

Codecks answers queries with normalized payloads: the requested relations come
back as id lists, and the records themselves live in top-level maps keyed by
entity type ("card", "deck", "project").
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

import requests

from jjdash.errors import TicketServiceError
from jjdash.gateway.tickets.abc import TicketService
from jjdash.models.types import Ticket, Transition

logger = logging.getLogger(__name__)

API_URL = "https://api.codecks.io/"
REQUEST_TIMEOUT = 30
CARD_FIELDS = ["title", "status", "priority", "content", "accountSeq", "visibility", "deck"]

SHORT_ID_ALPHABET = "123456789acefghijkoqrsuvwxyz"
# Every card id has at least three digits: 812 is "zz", the largest two-digit id.
SHORT_ID_OFFSET = 812

_STATUS_NAMES = {
    "not_started": "Not Started",
    "started": "In Progress",
    "done": "Done",
    "blocked": "Blocked",
}

_PRIORITY_NAMES = {
    "a": "Highest",
    "b": "High",
    "c": "Medium",
    "d": "Low",
    "e": "Lowest",
}

# Codecks has no workflow; every card can move to any status.
TRANSITIONS = (
    Transition(transition_id="not_started", name="Not Started"),
    Transition(transition_id="started", name="In Progress"),
    Transition(transition_id="blocked", name="Blocked"),
    Transition(transition_id="done", name="Done"),
)


def encode_short_id(sequence: int) -> str:
    """Encode an account sequence number as a Codecks short id.

    Bijective base-28 over an alphabet without look-alike characters, offset so
    the first card is "111".
    """
    if sequence == 0:
        return ""
    n = sequence + SHORT_ID_OFFSET
    base = len(SHORT_ID_ALPHABET)
    digits: list[str] = []
    while n > 0:
        remainder = n % base
        if remainder == 0:
            remainder = base
            n = n // base - 1
        else:
            n = n // base
        digits.append(SHORT_ID_ALPHABET[remainder - 1])
    return "".join(reversed(digits))


def slugify(text: str) -> str:
    """URL slug: lower case, hyphens for spaces, only [a-z0-9-]."""
    slug = text.lower().replace(" ", "-")
    slug = re.sub(r"[^a-z0-9\-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def ticket_from_card(card_id: str, card: dict[str, Any], deck_id: str = "") -> Ticket:
    """Convert a normalized card record."""
    status = card.get("status") or ""
    priority = card.get("priority") or ""
    return Ticket(
        key=card_id,
        display_key="$" + encode_short_id(int(card.get("accountSeq") or 0)),
        summary=card.get("title") or "",
        status=_STATUS_NAMES.get(status, status),
        priority=_PRIORITY_NAMES.get(priority, priority),
        ticket_type="Card",
        description=card.get("content") or "",
        deck_id=deck_id or (card.get("deck") or ""),
    )


def _is_visible(card: dict[str, Any]) -> bool:
    if card.get("visibility") in ("archived", "deleted"):
        return False
    return card.get("status") != "done"


@dataclass(frozen=True)
class _Deck:
    sequence: int
    title: str


class CodecksTicketService(TicketService):
    """Cards of one Codecks account, optionally limited to one project."""

    def __init__(self, *, subdomain: str, token: str, project: str = "") -> None:
        self._subdomain = subdomain
        self._project = project
        self._session = requests.Session()
        self._session.headers.update(
            {
                "X-Account": subdomain,
                "X-Auth-Token": token,
                "Content-Type": "application/json",
            }
        )
        self._decks: dict[str, _Deck] | None = None
        self._project_decks: dict[str, list[str]] = {}

    def _query(self, query: dict[str, Any]) -> dict[str, Any]:
        return self._post(API_URL, {"query": query})

    def _post(self, url: str, body: dict[str, Any]) -> dict[str, Any]:
        logger.debug("Codecks POST %s", url)
        try:
            response = self._session.post(url, json=body, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise TicketServiceError(f"Codecks request failed: {e}") from e
        if response.status_code != 200:
            raise TicketServiceError(
                f"Codecks API error (status {response.status_code}): {response.text[:200]}"
            )
        if not response.content:
            return {}
        return response.json()

    def _load_metadata(self) -> dict[str, _Deck]:
        """Fetch projects and decks once; later calls reuse the result."""
        if self._decks is not None:
            return self._decks
        payload = self._query(
            {
                "_root": [
                    {
                        "account": [
                            "name",
                            {"projects": ["id", "name", {"decks": ["id", "isDeleted", "accountSeq", "title"]}]},
                            {"archivedProjects": ["id", "name"]},
                        ]
                    }
                ]
            }
        )
        archived: set[str] = set()
        for account in (payload.get("account") or {}).values():
            archived.update(account.get("archivedProjects") or [])

        decks: dict[str, _Deck] = {}
        deleted: set[str] = set()
        for deck_id, deck in (payload.get("deck") or {}).items():
            if deck.get("isDeleted"):
                deleted.add(deck_id)
            decks[deck_id] = _Deck(sequence=int(deck.get("accountSeq") or 0), title=deck.get("title") or "")

        for project_id, project in (payload.get("project") or {}).items():
            if project_id in archived:
                continue
            name = project.get("name") or ""
            self._project_decks[name] = [d for d in project.get("decks") or [] if d not in deleted]
        self._decks = decks
        return decks

    def list_assigned(self) -> list[Ticket]:
        self._load_metadata()
        if self._project:
            tickets: list[Ticket] = []
            for deck_id in self._project_decks.get(self._project, []):
                tickets.extend(self._cards_in_deck(deck_id))
            return tickets
        payload = self._query({"_root": [{"account": [{"cards": CARD_FIELDS}]}]})
        cards = payload.get("card")
        if not isinstance(cards, dict):
            raise TicketServiceError("unexpected response format: missing 'card' object")
        return [ticket_from_card(card_id, card) for card_id, card in cards.items() if _is_visible(card)]

    def _cards_in_deck(self, deck_id: str) -> list[Ticket]:
        payload = self._query({f"deck({deck_id})": [{"cards": CARD_FIELDS}]})
        cards = payload.get("card") or {}
        return [
            ticket_from_card(card_id, card, deck_id)
            for card_id, card in cards.items()
            if _is_visible(card)
        ]

    def get(self, key: str) -> Ticket:
        payload = self._query({f"card({key})": CARD_FIELDS})
        card = (payload.get("card") or {}).get(key)
        if card is None:
            raise TicketServiceError(f"card {key} not found")
        if card.get("visibility") in ("archived", "deleted"):
            raise TicketServiceError(f"card {key} is archived")
        return ticket_from_card(key, card)

    def available_transitions(self, key: str) -> list[Transition]:
        return list(TRANSITIONS)

    def apply_transition(self, key: str, transition_id: str) -> None:
        self._post(f"{API_URL}dispatch/cards/update", {"id": key, "status": transition_id})

    def browser_url(self, ticket: Ticket) -> str:
        short_id = ticket.display_key.removeprefix("$")
        card_slug = f"{short_id}-{slugify(ticket.summary)}"
        deck = (self._decks or {}).get(ticket.deck_id)
        if deck is not None and deck.sequence > 0:
            deck_slug = f"{deck.sequence}-{slugify(deck.title)}"
            return f"https://{self._subdomain}.codecks.io/decks/{deck_slug}/card/{card_slug}"
        return f"https://{self._subdomain}.codecks.io/card/{card_slug}"

    def provider_name(self) -> str:
        return "Codecks"
