"""Abstract base class for ticket providers.

The dashboard depends only on this capability set, never on a concrete
provider. Failures raise TicketServiceError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from jjdash.models.types import Ticket, Transition


class TicketService(ABC):
    """One ticket provider (Jira, Codecks, ...)."""

    @abstractmethod
    def list_assigned(self) -> list[Ticket]:
        """Tickets assigned to the configured user that are not done."""
        ...

    @abstractmethod
    def get(self, key: str) -> Ticket:
        ...

    @abstractmethod
    def available_transitions(self, key: str) -> list[Transition]:
        ...

    @abstractmethod
    def apply_transition(self, key: str, transition_id: str) -> None:
        ...

    @abstractmethod
    def browser_url(self, ticket: Ticket) -> str:
        ...

    @abstractmethod
    def provider_name(self) -> str:
        """Human readable provider name, e.g. "Jira"."""
        ...
