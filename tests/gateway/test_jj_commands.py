"""Tests for the jj command lines RealJj runs for file operations and fetch."""

import subprocess
from pathlib import Path

import pytest

from jjdash.errors import JjCommandError
from jjdash.gateway.jj.real import RealJj


class _RecordingJj(RealJj):
    """RealJj whose subprocess calls are recorded and answered from a queue."""

    def __init__(self, *results: subprocess.CompletedProcess[str]) -> None:
        super().__init__(Path("/repo"))
        self.calls: list[tuple[str, ...]] = []
        self._results = list(results)

    def _invoke(self, args: tuple[str, ...]) -> subprocess.CompletedProcess[str]:
        self.calls.append(args)
        if self._results:
            return self._results.pop(0)
        return subprocess.CompletedProcess(["jj", *args], 0, "", "")


def test_move_file_to_parent_splits_before_change() -> None:
    jj = _RecordingJj()
    jj.move_file_to_parent("bbbb", "src/a.py")
    assert jj.calls == [
        ("new", "--insert-before", "bbbb", "-m", "(split)"),
        ("squash", "--from", "bbbb", "--", "src/a.py"),
    ]


def test_move_file_to_child_splits_after_change() -> None:
    jj = _RecordingJj()
    jj.move_file_to_child("bbbb", "src/a.py")
    assert jj.calls == [
        ("new", "--insert-after", "bbbb", "-m", "(split)"),
        ("squash", "--from", "bbbb", "--", "src/a.py"),
    ]


def test_revert_file_restores_from_parents() -> None:
    jj = _RecordingJj()
    jj.revert_file("bbbb", "src/a.py")
    assert jj.calls == [("restore", "--to", "bbbb", "--from", "parents(bbbb)", "--", "src/a.py")]


def test_failed_split_stops_before_squash() -> None:
    jj = _RecordingJj(subprocess.CompletedProcess([], 1, "", "Error: Commit bbbb is immutable\n"))
    with pytest.raises(JjCommandError, match="immutable"):
        jj.move_file_to_parent("bbbb", "src/a.py")
    assert len(jj.calls) == 1


def test_fetch_returns_output() -> None:
    jj = _RecordingJj(subprocess.CompletedProcess([], 0, "", "Nothing changed.\n"))
    assert jj.fetch() == "Nothing changed."
    assert jj.calls == [("git", "fetch", "--all-remotes")]


def test_fetch_failure() -> None:
    jj = _RecordingJj(subprocess.CompletedProcess([], 1, "", "Error: No git remotes to fetch from\n"))
    with pytest.raises(JjCommandError, match="^fetch failed: "):
        jj.fetch()
