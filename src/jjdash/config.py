"""Dashboard configuration model.

Example config.toml:

    [github]
    token = "ghp_..."
    only_mine = true
    show_merged = false
    show_closed = false
    pr_limit = 100
    refresh_interval = 120

    [tickets]
    provider = "jira"          # "", "jira", "codecks" or "github_issues"
    auto_in_progress = true

    [jira]
    url = "https://example.atlassian.net"
    user = "me@example.com"
    token = "..."
    excluded_statuses = "Done, Won't Do"

    [codecks]
    subdomain = "myteam"
    token = "..."
    project = "Game"
    excluded_statuses = ""

    [github_issues]
    excluded_statuses = "Closed"

    [bookmarks]
    sanitize = true
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from jjdash.errors import ConfigError
from jjdash.models.types import PullRequestFilters

# field name -> (table, key)
_TOML_LAYOUT: dict[str, tuple[str, str]] = {
    "github_token": ("github", "token"),
    "only_mine": ("github", "only_mine"),
    "show_merged": ("github", "show_merged"),
    "show_closed": ("github", "show_closed"),
    "pr_limit": ("github", "pr_limit"),
    "pr_refresh_interval": ("github", "refresh_interval"),
    "ticket_provider": ("tickets", "provider"),
    "ticket_auto_in_progress": ("tickets", "auto_in_progress"),
    "jira_url": ("jira", "url"),
    "jira_user": ("jira", "user"),
    "jira_token": ("jira", "token"),
    "jira_excluded_statuses": ("jira", "excluded_statuses"),
    "codecks_subdomain": ("codecks", "subdomain"),
    "codecks_token": ("codecks", "token"),
    "codecks_project": ("codecks", "project"),
    "codecks_excluded_statuses": ("codecks", "excluded_statuses"),
    "github_issues_excluded_statuses": ("github_issues", "excluded_statuses"),
    "sanitize_bookmarks": ("bookmarks", "sanitize"),
}

_ENV_OVERRIDES: dict[str, str] = {
    "jira_url": "JIRA_URL",
    "jira_user": "JIRA_USER",
    "jira_token": "JIRA_TOKEN",
    "codecks_subdomain": "CODECKS_SUBDOMAIN",
    "codecks_token": "CODECKS_TOKEN",
    "codecks_project": "CODECKS_PROJECT",
}

TICKET_PROVIDERS = ("", "jira", "codecks", "github_issues")


@dataclass(frozen=True)
class DashConfig:
    """User settings for the dashboard.

    Attributes:
        github_token: Token for the GitHub API; empty falls back to env / gh CLI
        only_mine: List only pull requests authored by the current user
        show_merged: Include merged pull requests
        show_closed: Include closed pull requests
        pr_limit: Maximum number of pull requests to list
        pr_refresh_interval: Seconds between pull request refreshes (0 disables)
        ticket_provider: Explicit provider name, empty to auto-detect Jira or Codecks
        ticket_auto_in_progress: Move a ticket to "In Progress" when a bookmark is created from it
        sanitize_bookmarks: Clean up typed bookmark names before validating them
    """

    github_token: str = ""
    only_mine: bool = False
    show_merged: bool = False
    show_closed: bool = False
    pr_limit: int = 100
    pr_refresh_interval: int = 120
    ticket_provider: str = ""
    ticket_auto_in_progress: bool = True
    jira_url: str = ""
    jira_user: str = ""
    jira_token: str = ""
    jira_excluded_statuses: str = ""
    codecks_subdomain: str = ""
    codecks_token: str = ""
    codecks_project: str = ""
    codecks_excluded_statuses: str = ""
    github_issues_excluded_statuses: str = ""
    sanitize_bookmarks: bool = True

    @staticmethod
    def default() -> DashConfig:
        return DashConfig()

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> DashConfig:
        """Build a config from parsed TOML tables.

        Missing tables and keys keep their defaults.

        Raises:
            ConfigError: If a value has the wrong type
        """
        defaults = DashConfig()
        values: dict[str, Any] = {}
        for name, (table, key) in _TOML_LAYOUT.items():
            section = data.get(table, {})
            if not isinstance(section, Mapping) or key not in section:
                continue
            value = section[key]
            expected = type(getattr(defaults, name))
            if expected is int and isinstance(value, bool):
                raise ConfigError(f"[{table}] {key} must be an integer")
            if not isinstance(value, expected):
                raise ConfigError(f"[{table}] {key} must be of type {expected.__name__}")
            values[name] = value
        config = DashConfig(**values)
        if config.ticket_provider not in TICKET_PROVIDERS:
            raise ConfigError(f"[tickets] provider must be one of {TICKET_PROVIDERS}")
        return config

    def to_mapping(self) -> dict[str, dict[str, Any]]:
        """Render as TOML tables, in a stable order."""
        data: dict[str, dict[str, Any]] = {}
        for name, (table, key) in _TOML_LAYOUT.items():
            data.setdefault(table, {})[key] = getattr(self, name)
        return data

    def merged_with(self, overrides: Mapping[str, Any]) -> DashConfig:
        """Overlay the keys present in ``overrides`` (parsed TOML) onto this config."""
        values: dict[str, Any] = {}
        parsed = DashConfig.from_mapping(overrides)
        for name, (table, key) in _TOML_LAYOUT.items():
            section = overrides.get(table, {})
            if isinstance(section, Mapping) and key in section:
                values[name] = getattr(parsed, name)
        return replace(self, **values)

    def with_environment(self, environ: Mapping[str, str]) -> DashConfig:
        """Fill empty ticket provider fields from environment variables."""
        values = {
            name: environ[variable]
            for name, variable in _ENV_OVERRIDES.items()
            if not getattr(self, name) and environ.get(variable)
        }
        return replace(self, **values)

    def pull_request_filters(self) -> PullRequestFilters:
        return PullRequestFilters(
            only_mine=self.only_mine,
            show_merged=self.show_merged,
            show_closed=self.show_closed,
            limit=self.pr_limit,
        )

    def jira_configured(self) -> bool:
        return bool(self.jira_url and self.jira_user and self.jira_token)

    def codecks_configured(self) -> bool:
        return bool(self.codecks_subdomain and self.codecks_token)

    def resolved_ticket_provider(self) -> str:
        """The provider to use: the explicit one, else the first configured one."""
        if self.ticket_provider:
            return self.ticket_provider
        if self.jira_configured():
            return "jira"
        if self.codecks_configured():
            return "codecks"
        return ""

    def excluded_statuses(self) -> frozenset[str]:
        """Lower-cased statuses hidden from the ticket list for the active provider."""
        provider = self.resolved_ticket_provider()
        if provider == "jira":
            raw = self.jira_excluded_statuses
        elif provider == "codecks":
            raw = self.codecks_excluded_statuses
        elif provider == "github_issues":
            raw = self.github_issues_excluded_statuses
        else:
            raw = ""
        return frozenset(part.strip().lower() for part in raw.split(",") if part.strip())

    def connected_services(self) -> str:
        """Comma-separated names of the services with credentials configured."""
        names = []
        if self.github_token:
            names.append("GitHub")
        if self.jira_configured():
            names.append("Jira")
        if self.codecks_configured():
            names.append("Codecks")
        return ", ".join(names) if names else "none"

