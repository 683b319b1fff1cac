"""Tests for building service gateways from settings."""

import pytest

from jjdash.config import DashConfig
from jjdash.gateway.connector.fake import FakeServiceConnector
from jjdash.gateway.connector.real import RealServiceConnector
from jjdash.gateway.github import auth
from jjdash.gateway.github.fake import FakeGitHub
from jjdash.gateway.tickets.codecks import CodecksTicketService
from jjdash.gateway.tickets.fake import FakeTicketService
from jjdash.gateway.tickets.github_issues import GitHubIssuesTicketService


def test_no_remote_means_no_github() -> None:
    connection = RealServiceConnector().connect(DashConfig(), None)
    assert connection.github is None
    assert connection.github_info == "GitHub: no git remote"


def test_non_github_remote() -> None:
    connection = RealServiceConnector().connect(DashConfig(), "git@gitlab.com:acme/widgets.git")
    assert connection.github is None
    assert connection.github_info == "GitHub: remote is not on github.com"


def test_explicit_provider_without_credentials() -> None:
    connection = RealServiceConnector().connect(DashConfig(ticket_provider="jira"), None)
    assert connection.tickets is None
    assert connection.ticket_info == "Jira: not configured"


def test_codecks_detected_from_credentials() -> None:
    config = DashConfig(codecks_subdomain="team", codecks_token="t")
    connection = RealServiceConnector().connect(config, None)
    assert isinstance(connection.tickets, CodecksTicketService)
    assert connection.ticket_info == "Codecks connected"


def test_no_provider() -> None:
    connection = RealServiceConnector().connect(DashConfig(), None)
    assert connection.tickets is None
    assert connection.ticket_info == ""


def test_fake_connector_describes_its_gateways() -> None:
    github = FakeGitHub()
    tickets = FakeTicketService(name="Codecks")
    connector = FakeServiceConnector(github=github, tickets=tickets)
    connection = connector.connect(DashConfig(), None)
    assert connection.github is github
    assert connection.github_info == "GitHub connected"
    assert connection.ticket_info == "Codecks connected"


def _no_gh_token() -> str:
    raise ValueError("gh not logged in")


def test_github_issues_uses_the_github_remote(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    config = DashConfig(ticket_provider="github_issues", github_token="t")
    connection = RealServiceConnector().connect(config, "git@github.com:acme/widgets.git")
    assert isinstance(connection.tickets, GitHubIssuesTicketService)
    assert connection.ticket_info == "GitHub Issues connected"
    assert connection.tickets.provider_name() == "GitHub Issues"


def test_github_issues_without_github_remote() -> None:
    config = DashConfig(ticket_provider="github_issues", github_token="t")
    connection = RealServiceConnector().connect(config, "git@gitlab.com:acme/widgets.git")
    assert connection.tickets is None
    assert connection.ticket_info == "GitHub Issues: remote is not on github.com"


def test_github_issues_without_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setattr(auth, "fetch_github_token", _no_gh_token)
    config = DashConfig(ticket_provider="github_issues")
    connection = RealServiceConnector().connect(config, "git@github.com:acme/widgets.git")
    assert connection.tickets is None
    assert connection.ticket_info == "GitHub Issues: no GitHub token"
