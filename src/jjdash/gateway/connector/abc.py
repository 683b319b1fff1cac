"""Abstract base class for building the service gateways from settings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from jjdash.config import DashConfig
from jjdash.gateway.github.abc import GitHubGateway
from jjdash.gateway.tickets.abc import TicketService


@dataclass(frozen=True)
class Connection:
    """Gateways available for the current settings.

    Attributes:
        github: GitHub gateway, None when not connected
        tickets: Active ticket provider, None when none is configured
        github_info: Short connection description ("GitHub connected", "GitHub: ...")
        ticket_info: Short description of the ticket provider, empty when none
    """

    github: GitHubGateway | None
    tickets: TicketService | None
    github_info: str
    ticket_info: str


class ServiceConnector(ABC):
    @abstractmethod
    def connect(self, config: DashConfig, remote_url: str | None) -> Connection:
        """Build gateways for ``config`` and the repository's git remote."""
        ...
