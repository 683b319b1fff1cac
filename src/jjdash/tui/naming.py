"""Bookmark name rules."""

from __future__ import annotations

import re

_VALID_NAME = re.compile(r"^[A-Za-z0-9_\-/]+$")
_INVALID_CHARS = re.compile(r"[^A-Za-z0-9_\-/]")
_HYPHEN_RUNS = re.compile(r"-{2,}")

NAME_REQUIRED = "Bookmark name is required"
NAME_INVALID = "Invalid bookmark name. Use letters, numbers, -, _, or /"


def validate_bookmark_name(name: str) -> str | None:
    """Check a bookmark name.

    Returns:
        None if the name is usable, otherwise the message to show
    """
    if not name:
        return NAME_REQUIRED
    if _VALID_NAME.match(name) is None:
        return NAME_INVALID
    return None


def sanitize_bookmark_name(name: str) -> str:
    """Turn free text into a bookmark name: spaces become hyphens, other
    invalid characters are dropped and hyphen runs collapse."""
    cleaned = name.strip().replace(" ", "-")
    cleaned = _INVALID_CHARS.sub("", cleaned)
    cleaned = _HYPHEN_RUNS.sub("-", cleaned)
    return cleaned.strip("-")


def format_bookmark_name(display_key: str, summary: str) -> str:
    """Build ``KEY-Title-words`` for a bookmark created from a ticket.

    Falls back to "bookmark" when nothing usable remains.
    """
    name = sanitize_bookmark_name(f"{display_key} {summary}")
    if not name:
        return "bookmark"
    return name
