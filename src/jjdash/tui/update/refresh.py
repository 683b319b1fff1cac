"""Periodic refresh driver.

Each timer message carries the generation it was armed with. Arming bumps the
generation, so a message from an older chain is dropped and at most one chain of
each kind stays alive.
"""

from __future__ import annotations

from dataclasses import replace

from jjdash.tui.effects import commands
from jjdash.tui.effects.types import Delay, Effect
from jjdash.tui.messages import PullRequestTick, Tick
from jjdash.tui.state import MODAL_VIEWS, AppState, ViewMode
from jjdash.tui.update.types import Outcome

AUTO_REFRESH_SECONDS = 2.0


def arm_tick(state: AppState) -> tuple[AppState, Delay]:
    generation = state.tick_generation + 1
    state = replace(state, tick_generation=generation)
    return state, Delay(name="tick", seconds=AUTO_REFRESH_SECONDS, message=Tick(generation=generation))


def arm_pull_request_tick(state: AppState) -> tuple[AppState, tuple[Effect, ...]]:
    """Start a new pull request tick chain; none when the interval is 0."""
    generation = state.pr_tick_generation + 1
    state = replace(state, pr_tick_generation=generation)
    interval = state.config.pr_refresh_interval
    if interval <= 0:
        return state, ()
    return state, (
        Delay(name="pull_request_tick", seconds=float(interval), message=PullRequestTick(generation)),
    )


def refresh_suppressed(state: AppState) -> bool:
    """True while a reload could clobber input or a pick in progress."""
    return state.loading or state.view in MODAL_VIEWS or state.rebase.active


def handle_tick(state: AppState, message: Tick) -> Outcome:
    if message.generation != state.tick_generation:
        return state, ()
    # Errors stop the chain until the user dismisses or retries.
    if state.error is not None:
        return state, ()
    state, delay = arm_tick(state)
    if refresh_suppressed(state):
        return state, (delay,)
    if state.repository is None:
        state = replace(state, loading=True)
        services = state.services
        return state, (commands.initialize_services(services.jj, services.connector, state.config), delay)
    return state, (commands.reload_silently(state.services.jj), delay)


def handle_pull_request_tick(state: AppState, message: PullRequestTick) -> Outcome:
    if message.generation != state.pr_tick_generation:
        return state, ()
    github = state.services.github
    if state.error is not None or github is None:
        return state, ()
    effects: list[Effect] = []
    if state.view == ViewMode.PULL_REQUESTS and not state.loading:
        effects.append(
            commands.load_pull_requests(github, state.config.pull_request_filters(), state.github_info)
        )
    state, delays = arm_pull_request_tick(state)
    return state, (*effects, *delays)
