"""Shared types for the update loop."""

from __future__ import annotations

from collections.abc import Callable

from jjdash.tui.effects.types import Effect
from jjdash.tui.state import AppState

Outcome = tuple[AppState, tuple[Effect, ...]]

KeyHandler = Callable[[AppState], Outcome]
TextHandler = Callable[[AppState, str], Outcome]
