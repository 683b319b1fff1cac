"""Tests for the auto-refresh and pull request refresh chains."""

from dataclasses import replace

from jjdash.config import DashConfig
from jjdash.gateway.github.fake import FakeGitHub
from jjdash.tui.effects.types import Delay, command_names
from jjdash.tui.messages import PullRequestTick, Tick
from jjdash.tui.state import ViewMode
from jjdash.tui.update.refresh import AUTO_REFRESH_SECONDS, arm_pull_request_tick, arm_tick
from jjdash.tui.update.reducer import update
from tests.fakes.builders import make_change, make_repository, make_services, make_state


def _state(**overrides):
    return make_state(make_repository(make_change("aaaa")), **overrides)


def test_arm_tick_bumps_generation() -> None:
    state, delay = arm_tick(_state())
    assert state.tick_generation == 1
    assert delay == Delay(name="tick", seconds=AUTO_REFRESH_SECONDS, message=Tick(1))


def test_tick_reloads_silently_and_rearms() -> None:
    state, _ = arm_tick(_state())
    state, effects = update(state, Tick(state.tick_generation))
    assert command_names(effects) == ["reload_silently", "tick"]
    assert state.tick_generation == 2


def test_stale_tick_is_dropped() -> None:
    """Only the most recently armed chain survives."""
    state, _ = arm_tick(_state())
    state, _ = arm_tick(state)
    new_state, effects = update(state, Tick(1))
    assert effects == ()
    assert new_state == state


def test_error_stops_the_chain() -> None:
    state, _ = arm_tick(_state(error="boom"))
    _, effects = update(state, Tick(state.tick_generation))
    assert effects == ()


def test_tick_only_rearms_while_modal() -> None:
    """A reload would clobber typed input, so modal views skip it."""
    state, _ = arm_tick(_state(view=ViewMode.SETTINGS))
    _, effects = update(state, Tick(state.tick_generation))
    assert command_names(effects) == ["tick"]


def test_tick_only_rearms_while_loading() -> None:
    state, _ = arm_tick(_state(loading=True))
    _, effects = update(state, Tick(state.tick_generation))
    assert command_names(effects) == ["tick"]


def test_tick_only_rearms_during_rebase() -> None:
    state = _state()
    state = replace(state, rebase=state.rebase.start(0, "aaaa"))
    state, _ = arm_tick(state)
    _, effects = update(state, Tick(state.tick_generation))
    assert command_names(effects) == ["tick"]


def test_tick_without_repository_initializes() -> None:
    """Until the first load succeeds, ticks retry the full startup."""
    state, _ = arm_tick(make_state())
    state, effects = update(state, Tick(state.tick_generation))
    assert state.loading
    assert command_names(effects) == ["initialize_services", "tick"]


def test_pull_request_tick_disabled_by_zero_interval() -> None:
    state = _state(config=DashConfig(pr_refresh_interval=0))
    state, effects = arm_pull_request_tick(state)
    assert state.pr_tick_generation == 1
    assert effects == ()


def test_pull_request_tick_uses_configured_interval() -> None:
    state = _state(config=DashConfig(pr_refresh_interval=30))
    _, effects = arm_pull_request_tick(state)
    (delay,) = effects
    assert isinstance(delay, Delay)
    assert delay.seconds == 30.0


def test_pull_request_tick_loads_only_in_pull_request_view() -> None:
    services = make_services(github=FakeGitHub())
    state, _ = arm_pull_request_tick(_state(services=services))
    _, effects = update(state, PullRequestTick(state.pr_tick_generation))
    assert command_names(effects) == ["pull_request_tick"]

    state, _ = arm_pull_request_tick(_state(services=services, view=ViewMode.PULL_REQUESTS))
    _, effects = update(state, PullRequestTick(state.pr_tick_generation))
    assert command_names(effects) == ["load_pull_requests", "pull_request_tick"]


def test_pull_request_tick_needs_github() -> None:
    state, _ = arm_pull_request_tick(_state(view=ViewMode.PULL_REQUESTS))
    _, effects = update(state, PullRequestTick(state.pr_tick_generation))
    assert effects == ()


def test_stale_pull_request_tick_is_dropped() -> None:
    services = make_services(github=FakeGitHub())
    state, _ = arm_pull_request_tick(_state(services=services))
    state, _ = arm_pull_request_tick(state)
    _, effects = update(state, PullRequestTick(1))
    assert effects == ()
