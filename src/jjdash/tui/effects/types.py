"""Effects returned by the update loop for the shell to execute."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from jjdash.tui.messages import Message


@dataclass(frozen=True)
class Command:
    """Deferred blocking work that produces exactly one message.

    Attributes:
        name: Short identifier, used in logs and test assertions
        run: Zero-argument callable performing the work
    """

    name: str
    run: Callable[[], Message]


@dataclass(frozen=True)
class Delay:
    """Deliver ``message`` after ``seconds``."""

    name: str
    seconds: float
    message: Message


@dataclass(frozen=True)
class Exit:
    """Quit the application."""


Effect = Command | Delay | Exit


def command_names(effects: tuple[Effect, ...]) -> list[str]:
    """Names of the Command and Delay effects, in order."""
    return [effect.name for effect in effects if isinstance(effect, (Command, Delay))]
