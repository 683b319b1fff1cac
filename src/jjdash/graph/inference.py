"""Derived facts about changes in a graph.

Pure functions over a ChangeGraph: nearest-ancestor bookmark lookup and the
fixed-point propagation that decides which pull-request action a change offers.
Parent ids that do not resolve to a change in the graph are skipped.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from jjdash.models.types import ChangeGraph, PullRequest


def index_by_identity(graph: ChangeGraph) -> dict[str, int]:
    """Map both commit ids and change ids to their index in the graph."""
    index: dict[str, int] = {}
    for position, change in enumerate(graph.changes):
        index[change.commit_id] = position
        index[change.change_id] = position
    return index


def open_pr_branches(pull_requests: Iterable[PullRequest]) -> frozenset[str]:
    """Head branch names of the open pull requests."""
    return frozenset(pr.head_branch for pr in pull_requests if pr.is_open)


def _walk_ancestors(graph: ChangeGraph, start: int) -> Iterable[int]:
    """Yield ``start`` and its ancestors in breadth-first order, each once."""
    if start < 0 or start >= len(graph.changes):
        return
    index = index_by_identity(graph)
    visited: set[int] = set()
    queue = deque([start])
    while queue:
        position = queue.popleft()
        if position in visited:
            continue
        visited.add(position)
        yield position
        for parent in graph.changes[position].parents:
            parent_position = index.get(parent)
            if parent_position is not None and parent_position not in visited:
                queue.append(parent_position)


def find_bookmark_for_change(graph: ChangeGraph, position: int) -> str | None:
    """Find the bookmark on a change or its closest ancestor.

    Args:
        graph: The change graph
        position: Index of the starting change

    Returns:
        The first bookmark of the closest change that has one, or None
    """
    for ancestor in _walk_ancestors(graph, position):
        bookmarks = graph.changes[ancestor].bookmarks
        if bookmarks:
            return bookmarks[0]
    return None


def find_pr_branch_for_change(
    graph: ChangeGraph, pull_requests: Iterable[PullRequest], position: int
) -> str | None:
    """Find the closest bookmark, from the change upwards, that backs an open PR."""
    branches = open_pr_branches(pull_requests)
    if not branches:
        return None
    for ancestor in _walk_ancestors(graph, position):
        for bookmark in graph.changes[ancestor].bookmarks:
            if bookmark in branches:
                return bookmark
    return None


def find_empty_descriptions(graph: ChangeGraph, position: int) -> tuple[int, ...]:
    """Positions of undescribed changes a pull request from ``position`` would carry.

    Walks from the change through its parents and stops at immutable changes.
    """
    if position < 0 or position >= len(graph.changes):
        return ()
    index = index_by_identity(graph)
    visited: set[int] = set()
    found: list[int] = []
    queue = deque([position])
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        change = graph.changes[current]
        if change.is_immutable:
            continue
        if not change.description.strip():
            found.append(current)
        for parent in change.parents:
            parent_position = index.get(parent)
            if parent_position is not None:
                queue.append(parent_position)
    return tuple(found)


@dataclass(frozen=True)
class BranchApplicability:
    """Which branch each change can push to.

    Attributes:
        pr_branches: Change index -> branch of an open PR the change can update
        bookmarks: Change index -> bookmark (without an open PR) the change can open a PR for
        scans: Total number of full scans both propagations needed
    """

    pr_branches: Mapping[int, str]
    bookmarks: Mapping[int, str]
    scans: int

    def action_label(self, position: int) -> str | None:
        """Label of the pull-request action offered for a change."""
        if position in self.pr_branches:
            return f"Update PR [{self.pr_branches[position]}] (u)"
        if position in self.bookmarks:
            return f"Create PR [{self.bookmarks[position]}] (c)"
        return None


def _propagate(
    graph: ChangeGraph,
    index: Mapping[str, int],
    assigned: dict[int, str],
    blocked: Mapping[int, str],
) -> int:
    """Copy assignments from parents to children until nothing changes.

    Entries are only ever added, so the loop stops after at most
    ``len(graph.changes)`` scans that make progress plus one that does not.

    Returns:
        Number of scans performed
    """
    scans = 0
    changed = True
    while changed:
        changed = False
        scans += 1
        for position, change in enumerate(graph.changes):
            if position in assigned or position in blocked:
                continue
            for parent in change.parents:
                parent_position = index.get(parent)
                if parent_position is None:
                    continue
                branch = assigned.get(parent_position)
                if branch is not None:
                    assigned[position] = branch
                    changed = True
                    break
    return scans


def infer_branch_applicability(
    graph: ChangeGraph, pull_requests: Iterable[PullRequest]
) -> BranchApplicability:
    """Propagate PR branches and plain bookmarks from changes to their descendants.

    A change carrying a bookmark that backs an open PR seeds ``pr_branches``; a
    change whose first non-PR bookmark exists seeds ``bookmarks``. Descendants
    inherit from any parent that has an assignment. A change inheriting a PR
    branch never also gets a plain bookmark.

    Args:
        graph: The change graph, in any order
        pull_requests: Pull requests known for the repository

    Returns:
        The two assignment maps
    """
    branches = open_pr_branches(pull_requests)
    index = index_by_identity(graph)

    pr_branches: dict[int, str] = {}
    bookmarks: dict[int, str] = {}
    for position, change in enumerate(graph.changes):
        for bookmark in change.bookmarks:
            if bookmark in branches:
                pr_branches[position] = bookmark
                break
        for bookmark in change.bookmarks:
            if bookmark not in branches:
                bookmarks[position] = bookmark
                break

    scans = _propagate(graph, index, pr_branches, blocked={})
    scans += _propagate(graph, index, bookmarks, blocked=pr_branches)
    return BranchApplicability(pr_branches=pr_branches, bookmarks=bookmarks, scans=scans)
