"""Tests for TuiRunner implementations."""

from jjdash.config import DashConfig
from jjdash.tui.app import JjDashApp
from jjdash.tui.context import JjDashContext
from jjdash.tui.runner import FakeTuiRunner


def _app() -> JjDashApp:
    return JjDashApp(JjDashContext.for_test().initial_state(DashConfig()))


def test_apps_run_starts_empty() -> None:
    """FakeTuiRunner starts with empty app list."""
    assert FakeTuiRunner().apps_run == []


def test_run_captures_apps_in_order() -> None:
    """run() records apps without starting the event loop.

    If the app's run() were called, this test would hang.
    """
    runner = FakeTuiRunner()
    first, second = _app(), _app()

    runner.run(first)
    runner.run(second)

    assert runner.apps_run == [first, second]
