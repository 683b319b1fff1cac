"""Tests for DashConfig and the TOML config store."""

from pathlib import Path

import pytest

from jjdash.config import DashConfig
from jjdash.errors import ConfigError
from jjdash.gateway.config_store.real import RealConfigStore, default_global_path


class TestDashConfigMapping:
    def test_defaults(self) -> None:
        """An empty mapping yields the defaults."""
        config = DashConfig.from_mapping({})
        assert config == DashConfig.default()
        assert config.pr_refresh_interval == 120
        assert config.sanitize_bookmarks

    def test_reads_tables(self) -> None:
        """Values are read from their TOML tables."""
        config = DashConfig.from_mapping(
            {
                "github": {"token": "ghp_x", "only_mine": True, "pr_limit": 20},
                "tickets": {"provider": "jira"},
                "jira": {"url": "https://acme.atlassian.net"},
            }
        )
        assert config.github_token == "ghp_x"
        assert config.only_mine
        assert config.pr_limit == 20
        assert config.ticket_provider == "jira"
        assert config.jira_url == "https://acme.atlassian.net"

    def test_wrong_type_raises(self) -> None:
        """A value of the wrong type is a ConfigError."""
        with pytest.raises(ConfigError, match="pr_limit"):
            DashConfig.from_mapping({"github": {"pr_limit": "many"}})

    def test_bool_is_not_an_integer(self) -> None:
        """Booleans are rejected for integer settings."""
        with pytest.raises(ConfigError):
            DashConfig.from_mapping({"github": {"refresh_interval": True}})

    def test_unknown_provider_raises(self) -> None:
        """Only known ticket providers are accepted."""
        with pytest.raises(ConfigError, match="provider"):
            DashConfig.from_mapping({"tickets": {"provider": "trello"}})

    def test_to_mapping_round_trips(self) -> None:
        """to_mapping output reads back to an equal config."""
        config = DashConfig(github_token="t", show_closed=True, codecks_project="Game")
        assert DashConfig.from_mapping(config.to_mapping()) == config


class TestDashConfigBehaviour:
    def test_merged_with_only_overrides_present_keys(self) -> None:
        """Local overrides replace just the keys they set."""
        base = DashConfig(github_token="global", pr_limit=50)
        merged = base.merged_with({"github": {"pr_limit": 10}})
        assert merged.github_token == "global"
        assert merged.pr_limit == 10

    def test_environment_fills_empty_values(self) -> None:
        """Environment variables only fill fields that are empty."""
        config = DashConfig(jira_url="https://configured").with_environment(
            {"JIRA_URL": "https://env", "JIRA_TOKEN": "secret"}
        )
        assert config.jira_url == "https://configured"
        assert config.jira_token == "secret"

    def test_resolved_provider_auto_detects(self) -> None:
        """Jira wins auto-detection, then Codecks."""
        jira = DashConfig(jira_url="u", jira_user="me", jira_token="t")
        codecks = DashConfig(codecks_subdomain="team", codecks_token="t")
        assert jira.resolved_ticket_provider() == "jira"
        assert codecks.resolved_ticket_provider() == "codecks"
        assert DashConfig().resolved_ticket_provider() == ""

    def test_excluded_statuses_for_active_provider(self) -> None:
        """Statuses are split, trimmed and lower-cased."""
        config = DashConfig(
            ticket_provider="jira", jira_excluded_statuses="Done, Won't Do ,", codecks_excluded_statuses="x"
        )
        assert config.excluded_statuses() == frozenset({"done", "won't do"})

    def test_github_issues_provider_reads_its_table(self) -> None:
        config = DashConfig.from_mapping(
            {"tickets": {"provider": "github_issues"}, "github_issues": {"excluded_statuses": "Closed"}}
        )
        assert config.resolved_ticket_provider() == "github_issues"
        assert config.excluded_statuses() == frozenset({"closed"})
        assert DashConfig.from_mapping(config.to_mapping()) == config

    def test_connected_services(self) -> None:
        """Lists services with credentials, or 'none'."""
        assert DashConfig().connected_services() == "none"
        config = DashConfig(github_token="t", codecks_subdomain="s", codecks_token="t")
        assert config.connected_services() == "GitHub, Codecks"


class TestRealConfigStore:
    def test_load_missing_files_gives_defaults(self, tmp_path: Path) -> None:
        """No files on disk means default settings."""
        store = RealConfigStore(repo_root=tmp_path, global_path=tmp_path / "global.toml")
        assert store.load().pr_limit == 100

    def test_local_file_overrides_global(self, tmp_path: Path) -> None:
        """Keys in .jjdash.toml win over the global file."""
        global_path = tmp_path / "global.toml"
        global_path.write_text('[github]\ntoken = "g"\npr_limit = 5\n', encoding="utf-8")
        (tmp_path / ".jjdash.toml").write_text("[github]\npr_limit = 9\n", encoding="utf-8")

        config = RealConfigStore(repo_root=tmp_path, global_path=global_path).load()

        assert config.github_token == "g"
        assert config.pr_limit == 9

    def test_malformed_toml_raises(self, tmp_path: Path) -> None:
        """Broken TOML is reported as ConfigError."""
        global_path = tmp_path / "global.toml"
        global_path.write_text("[github\n", encoding="utf-8")
        store = RealConfigStore(repo_root=tmp_path, global_path=global_path)
        with pytest.raises(ConfigError, match="Invalid config file"):
            store.load()

    def test_save_locally_and_globally(self, tmp_path: Path) -> None:
        """save() writes to the chosen file and returns its path."""
        global_path = tmp_path / "cfg" / "config.toml"
        store = RealConfigStore(repo_root=tmp_path, global_path=global_path)

        local = store.save(DashConfig(pr_limit=7), local=True)
        written = store.save(DashConfig(pr_limit=3), local=False)

        assert local == tmp_path / ".jjdash.toml"
        assert written == global_path
        assert "pr_limit = 7" in local.read_text(encoding="utf-8")
        assert "pr_limit = 3" in global_path.read_text(encoding="utf-8")


def test_default_global_path_honours_env() -> None:
    """JJDASH_CONFIG overrides the default location."""
    assert default_global_path({"JJDASH_CONFIG": "/tmp/x.toml"}) == Path("/tmp/x.toml")
    assert default_global_path({}).name == "config.toml"
