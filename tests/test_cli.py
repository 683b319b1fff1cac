"""Tests for the jjdash command."""

from click.testing import CliRunner

from jjdash.cli import cli
from jjdash.config import DashConfig
from jjdash.errors import ConfigError
from jjdash.gateway.config_store.fake import FakeConfigStore
from jjdash.tui.app import JjDashApp
from jjdash.tui.context import JjDashContext
from jjdash.tui.runner import FakeTuiRunner


class _BrokenConfigStore(FakeConfigStore):
    def load(self) -> DashConfig:
        raise ConfigError("[github] pr_limit must be an integer")


def test_runs_dashboard_with_loaded_config() -> None:
    runner = FakeTuiRunner()
    store = FakeConfigStore(config=DashConfig(github_token="t"))
    ctx = JjDashContext.for_test(tui_runner=runner, config_store=store)

    result = CliRunner().invoke(cli, [], obj=ctx)

    assert result.exit_code == 0, result.output
    (app,) = runner.apps_run
    assert isinstance(app, JjDashApp)
    assert app.state.config.github_token == "t"


def test_environment_fills_ticket_credentials() -> None:
    runner = FakeTuiRunner()
    ctx = JjDashContext.for_test(tui_runner=runner)

    result = CliRunner().invoke(cli, [], obj=ctx, env={"JIRA_URL": "https://acme.atlassian.net"})

    assert result.exit_code == 0, result.output
    assert runner.apps_run[0].state.config.jira_url == "https://acme.atlassian.net"


def test_invalid_config_is_reported() -> None:
    runner = FakeTuiRunner()
    ctx = JjDashContext.for_test(tui_runner=runner, config_store=_BrokenConfigStore())

    result = CliRunner().invoke(cli, [], obj=ctx)

    assert result.exit_code == 1
    assert "pr_limit must be an integer" in result.output
    assert runner.apps_run == []
