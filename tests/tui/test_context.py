"""Tests for JjDashContext."""

from pathlib import Path

from jjdash.config import DashConfig
from jjdash.gateway.browser.fake import FakeBrowserLauncher
from jjdash.gateway.browser.real import RealBrowserLauncher
from jjdash.gateway.config_store.real import RealConfigStore
from jjdash.gateway.connector.real import RealServiceConnector
from jjdash.gateway.jj.fake import FakeJj
from jjdash.gateway.jj.real import RealJj
from jjdash.tui.context import JjDashContext
from jjdash.tui.runner import FakeTuiRunner, RealTuiRunner


def test_for_production_creates_real_implementations(tmp_path: Path) -> None:
    ctx = JjDashContext.for_production(tmp_path)

    assert isinstance(ctx.jj, RealJj)
    assert isinstance(ctx.connector, RealServiceConnector)
    assert isinstance(ctx.config_store, RealConfigStore)
    assert isinstance(ctx.browser, RealBrowserLauncher)
    assert isinstance(ctx.tui_runner, RealTuiRunner)


def test_for_test_fills_fakes_and_keeps_overrides() -> None:
    jj = FakeJj()
    ctx = JjDashContext.for_test(jj=jj)

    assert ctx.jj is jj
    assert isinstance(ctx.browser, FakeBrowserLauncher)
    assert isinstance(ctx.tui_runner, FakeTuiRunner)


def test_initial_state_starts_loading_without_connections() -> None:
    """Services are only connected after the first load."""
    ctx = JjDashContext.for_test()
    state = ctx.initial_state(DashConfig(github_token="t"))

    assert state.loading
    assert state.repository is None
    assert state.services.jj is ctx.jj
    assert state.services.github is None
    assert state.config.github_token == "t"
