"""Tests for bookmark name validation and sanitizing."""

import pytest

from jjdash.tui.naming import (
    NAME_INVALID,
    NAME_REQUIRED,
    format_bookmark_name,
    sanitize_bookmark_name,
    validate_bookmark_name,
)


@pytest.mark.parametrize("name", ["feat-x", "user/topic_2", "ABC-123"])
def test_valid_names(name: str) -> None:
    """Letters, digits, hyphen, underscore and slash are allowed."""
    assert validate_bookmark_name(name) is None


def test_empty_name_is_required() -> None:
    """An empty name is rejected with the required message."""
    assert validate_bookmark_name("") == NAME_REQUIRED


@pytest.mark.parametrize("name", ["has space", "emoji✨", "semi;colon"])
def test_invalid_names(name: str) -> None:
    """Anything else is rejected."""
    assert validate_bookmark_name(name) == NAME_INVALID


def test_sanitize_replaces_spaces_and_drops_symbols() -> None:
    """Spaces turn into hyphens, other symbols vanish, runs collapse."""
    assert sanitize_bookmark_name("  Fix: the  login page!  ") == "Fix-the-login-page"


def test_format_bookmark_name_from_ticket() -> None:
    """Ticket key and summary make the default branch name."""
    assert format_bookmark_name("PROJ-12", "Crash on save (Windows)") == "PROJ-12-Crash-on-save-Windows"


def test_format_bookmark_name_fallback() -> None:
    """A name that sanitizes to nothing falls back to 'bookmark'."""
    assert format_bookmark_name("", "!!!") == "bookmark"
