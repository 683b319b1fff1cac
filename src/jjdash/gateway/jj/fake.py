"""Fake jj gateway for testing."""

from __future__ import annotations

from collections.abc import Mapping

from jjdash.errors import JjCommandError, NotARepositoryError
from jjdash.gateway.jj.abc import JjGateway
from jjdash.models.types import ChangedFile, ChangeGraph, Repository


class FakeJj(JjGateway):
    """In-memory fake implementation of the jj gateway.

    Constructor Injection:
    ---------------------
    - repository: Snapshot returned by load_repository()
    - descriptions: change id -> full description
    - changed_files: change id -> files
    - remote_url: Value returned by remote_url()
    - not_a_repository: If set, load_repository() raises NotARepositoryError for this path
    - failures: operation name -> error message raised as JjCommandError
    - push_output: Output returned by push_bookmark()
    - fetch_output: Output returned by fetch()

    Mutation Tracking:
    -----------------
    - mutations: List of (operation, *args) tuples, in call order
    - load_count: Number of load_repository() calls
    """

    def __init__(
        self,
        *,
        repository: Repository | None = None,
        descriptions: Mapping[str, str] | None = None,
        changed_files: Mapping[str, list[ChangedFile]] | None = None,
        remote_url: str | None = None,
        not_a_repository: str | None = None,
        failures: Mapping[str, str] | None = None,
        push_output: str = "",
        fetch_output: str = "",
    ) -> None:
        self._repository = repository or Repository(path="/repo", graph=ChangeGraph.empty())
        self._descriptions = dict(descriptions or {})
        self._changed_files = dict(changed_files or {})
        self._remote_url = remote_url
        self._not_a_repository = not_a_repository
        self._failures = dict(failures or {})
        self._push_output = push_output
        self._fetch_output = fetch_output
        self._mutations: list[tuple[str, ...]] = []
        self._load_count = 0

    def set_repository(self, repository: Repository) -> None:
        """Replace the snapshot returned by subsequent loads."""
        self._repository = repository

    def _check(self, operation: str) -> None:
        message = self._failures.get(operation)
        if message is not None:
            raise JjCommandError(message)

    # ============================================================================
    # Queries
    # ============================================================================

    def load_repository(self) -> Repository:
        self._load_count += 1
        if self._not_a_repository is not None:
            raise NotARepositoryError(self._not_a_repository)
        self._check("load_repository")
        return self._repository

    def get_description(self, change_id: str) -> str:
        self._check("get_description")
        return self._descriptions.get(change_id, "")

    def changed_files(self, change_id: str) -> list[ChangedFile]:
        self._check("changed_files")
        return list(self._changed_files.get(change_id, []))

    def remote_url(self) -> str | None:
        return self._remote_url

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    def _record(self, operation: str, *args: str) -> None:
        self._check(operation)
        self._mutations.append((operation, *args))

    def new_change(self, parent_id: str | None) -> None:
        self._record("new_change", parent_id or "@")

    def edit(self, change_id: str) -> None:
        self._record("edit", change_id)

    def squash(self, change_id: str) -> None:
        self._record("squash", change_id)

    def abandon(self, change_id: str) -> None:
        self._record("abandon", change_id)

    def rebase(self, source_id: str, destination_id: str) -> None:
        self._record("rebase", source_id, destination_id)

    def describe(self, change_id: str, text: str) -> None:
        self._record("describe", change_id, text)
        self._descriptions[change_id] = text

    def create_bookmark(self, name: str, change_id: str) -> None:
        self._record("create_bookmark", name, change_id)

    def move_bookmark(self, name: str, change_id: str) -> None:
        self._record("move_bookmark", name, change_id)

    def delete_bookmark(self, name: str) -> None:
        self._record("delete_bookmark", name)

    def create_bookmark_from_main(self, name: str) -> None:
        self._record("create_bookmark_from_main", name)

    def move_file_to_parent(self, change_id: str, path: str) -> None:
        self._record("move_file_to_parent", change_id, path)

    def move_file_to_child(self, change_id: str, path: str) -> None:
        self._record("move_file_to_child", change_id, path)

    def revert_file(self, change_id: str, path: str) -> None:
        self._record("revert_file", change_id, path)

    def fetch(self) -> str:
        self._record("fetch")
        return self._fetch_output

    def push_bookmark(self, name: str) -> str:
        self._record("push_bookmark", name)
        return self._push_output

    def undo(self) -> None:
        self._record("undo")

    def redo(self) -> None:
        self._record("redo")

    def init_repository(self) -> None:
        self._record("init_repository")
        self._not_a_repository = None

    @property
    def mutations(self) -> list[tuple[str, ...]]:
        """Mutations performed, in call order. For test assertions only."""
        return list(self._mutations)

    @property
    def load_count(self) -> int:
        return self._load_count
