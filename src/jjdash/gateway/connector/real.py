"""Builds the real GitHub and ticket gateways."""

from __future__ import annotations

import logging
import os

from jjdash.config import DashConfig
from jjdash.gateway.connector.abc import Connection, ServiceConnector
from jjdash.gateway.github.abc import GitHubGateway
from jjdash.gateway.github.auth import parse_github_remote, resolve_github_token
from jjdash.gateway.github.real import RealGitHub
from jjdash.gateway.tickets.abc import TicketService
from jjdash.gateway.tickets.codecks import CodecksTicketService
from jjdash.gateway.tickets.github_issues import GitHubIssuesTicketService
from jjdash.gateway.tickets.jira import JiraTicketService

logger = logging.getLogger(__name__)


class RealServiceConnector(ServiceConnector):
    def connect(self, config: DashConfig, remote_url: str | None) -> Connection:
        github, github_info = self._connect_github(config, remote_url)
        tickets, ticket_info = self._connect_tickets(config, remote_url)
        return Connection(github=github, tickets=tickets, github_info=github_info, ticket_info=ticket_info)

    def _connect_github(
        self, config: DashConfig, remote_url: str | None
    ) -> tuple[GitHubGateway | None, str]:
        if remote_url is None:
            return None, "GitHub: no git remote"
        parsed = parse_github_remote(remote_url)
        if parsed is None:
            return None, "GitHub: remote is not on github.com"
        token = resolve_github_token(config.github_token, os.environ)
        if token is None:
            return None, "GitHub: no token (set GITHUB_TOKEN or log in from Settings)"
        owner, repo = parsed
        logger.debug("Connecting to GitHub repository %s/%s", owner, repo)
        return RealGitHub(owner=owner, repo=repo, token=token), "GitHub connected"

    def _connect_tickets(self, config: DashConfig, remote_url: str | None) -> tuple[TicketService | None, str]:
        provider = config.resolved_ticket_provider()
        if provider == "jira":
            if not config.jira_configured():
                return None, "Jira: not configured"
            return (
                JiraTicketService(base_url=config.jira_url, user=config.jira_user, token=config.jira_token),
                "Jira connected",
            )
        if provider == "codecks":
            if not config.codecks_configured():
                return None, "Codecks: not configured"
            return (
                CodecksTicketService(
                    subdomain=config.codecks_subdomain,
                    token=config.codecks_token,
                    project=config.codecks_project,
                ),
                "Codecks connected",
            )
        if provider == "github_issues":
            parsed = parse_github_remote(remote_url) if remote_url is not None else None
            if parsed is None:
                return None, "GitHub Issues: remote is not on github.com"
            token = resolve_github_token(config.github_token, os.environ)
            if token is None:
                return None, "GitHub Issues: no GitHub token"
            owner, repo = parsed
            return GitHubIssuesTicketService(owner=owner, repo=repo, token=token), "GitHub Issues connected"
        return None, ""
