"""Fake service connector for testing."""

from __future__ import annotations

from jjdash.config import DashConfig
from jjdash.gateway.connector.abc import Connection, ServiceConnector
from jjdash.gateway.github.abc import GitHubGateway
from jjdash.gateway.tickets.abc import TicketService


class FakeServiceConnector(ServiceConnector):
    """Hands out pre-built gateways.

    Mutation Tracking:
    -----------------
    - connected_configs: Configs passed to connect(), in order
    """

    def __init__(
        self,
        *,
        github: GitHubGateway | None = None,
        tickets: TicketService | None = None,
        github_info: str | None = None,
        ticket_info: str | None = None,
    ) -> None:
        self._github = github
        self._tickets = tickets
        if github_info is None:
            github_info = "GitHub connected" if github is not None else "GitHub: not configured"
        if ticket_info is None:
            ticket_info = f"{tickets.provider_name()} connected" if tickets is not None else ""
        self._github_info = github_info
        self._ticket_info = ticket_info
        self._connected_configs: list[DashConfig] = []

    def connect(self, config: DashConfig, remote_url: str | None) -> Connection:
        self._connected_configs.append(config)
        return Connection(
            github=self._github,
            tickets=self._tickets,
            github_info=self._github_info,
            ticket_info=self._ticket_info,
        )

    @property
    def connected_configs(self) -> list[DashConfig]:
        return list(self._connected_configs)
