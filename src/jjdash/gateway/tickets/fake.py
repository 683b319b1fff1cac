"""Fake ticket provider for testing."""

from __future__ import annotations

from collections.abc import Mapping

from jjdash.errors import TicketServiceError
from jjdash.gateway.tickets.abc import TicketService
from jjdash.models.types import Ticket, Transition


class FakeTicketService(TicketService):
    """In-memory ticket provider.

    Constructor Injection:
    ---------------------
    - tickets: Tickets returned by list_assigned()
    - transitions: ticket key -> offered transitions (defaults to none)
    - name: Provider name
    - list_error / transition_error: Raised as TicketServiceError when set

    Mutation Tracking:
    -----------------
    - applied_transitions: (key, transition id) pairs, in call order
    """

    def __init__(
        self,
        *,
        tickets: list[Ticket] | None = None,
        transitions: Mapping[str, list[Transition]] | None = None,
        name: str = "Jira",
        list_error: str | None = None,
        transition_error: str | None = None,
    ) -> None:
        self._tickets = list(tickets or [])
        self._transitions = {key: list(value) for key, value in (transitions or {}).items()}
        self._name = name
        self._list_error = list_error
        self._transition_error = transition_error
        self._applied: list[tuple[str, str]] = []

    def list_assigned(self) -> list[Ticket]:
        if self._list_error is not None:
            raise TicketServiceError(self._list_error)
        return list(self._tickets)

    def get(self, key: str) -> Ticket:
        for ticket in self._tickets:
            if ticket.key == key:
                return ticket
        raise TicketServiceError(f"ticket {key} not found")

    def available_transitions(self, key: str) -> list[Transition]:
        return list(self._transitions.get(key, []))

    def apply_transition(self, key: str, transition_id: str) -> None:
        if self._transition_error is not None:
            raise TicketServiceError(self._transition_error)
        self._applied.append((key, transition_id))

    def browser_url(self, ticket: Ticket) -> str:
        return f"https://tickets.example.com/browse/{ticket.key}"

    def provider_name(self) -> str:
        return self._name

    @property
    def applied_transitions(self) -> list[tuple[str, str]]:
        return list(self._applied)
