"""Pure selection logic for ticket lists."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from jjdash.models.types import Ticket, Transition


def select_tickets(tickets: Iterable[Ticket], excluded_statuses: frozenset[str]) -> list[Ticket]:
    """Drop tickets in excluded statuses and sort by display key, newest first.

    Args:
        tickets: Tickets returned by the provider
        excluded_statuses: Lower-cased status names to hide

    Returns:
        The visible tickets
    """
    visible = [t for t in tickets if t.status.lower() not in excluded_statuses]
    return sorted(visible, key=lambda t: t.display_key, reverse=True)


def _is_in_progress(name: str) -> bool:
    if "progress" in name:
        return True
    return "start" in name and "not start" not in name and "not_start" not in name


def _is_done(name: str) -> bool:
    return any(word in name for word in ("done", "complete", "resolve", "close"))


def _is_blocked(name: str) -> bool:
    return "block" in name


def _is_not_started(name: str) -> bool:
    return ("not" in name and "start" in name) or "reopen" in name


TRANSITION_MATCHERS = {
    "In Progress": _is_in_progress,
    "Done": _is_done,
    "Blocked": _is_blocked,
    "Not Started": _is_not_started,
}


def find_transition(transitions: Sequence[Transition], target: str) -> Transition | None:
    """Find the transition that moves a ticket to ``target``.

    Args:
        transitions: Transitions offered for the ticket
        target: One of the TRANSITION_MATCHERS keys

    Returns:
        The first matching transition, or None
    """
    matches = TRANSITION_MATCHERS[target]
    for transition in transitions:
        if matches(transition.name.lower()):
            return transition
    return None
