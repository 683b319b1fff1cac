"""Production jj gateway using subprocess."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from jjdash.errors import JjCommandError, NotARepositoryError
from jjdash.gateway.jj.abc import JjGateway
from jjdash.gateway.jj.parsing import (
    LOG_TEMPLATE,
    combine_descriptions,
    extract_error_message,
    parse_diff_summary,
    parse_log_output,
    parse_remote_list,
)
from jjdash.models.types import ChangedFile, Repository

logger = logging.getLogger(__name__)

GRAPH_REVSET = "mutable() | bookmarks() | main@origin"
GRAPH_REVSET_NO_REMOTE = "mutable() | bookmarks()"
SPLIT_DESCRIPTION = "(split)"


def is_jj_repository(path: Path) -> bool:
    """True when ``path`` or one of its parents contains a .jj directory."""
    for candidate in (path, *path.parents):
        if (candidate / ".jj").is_dir():
            return True
    return False


class RealJj(JjGateway):
    """Runs jj in a repository directory."""

    def __init__(self, repo_path: Path) -> None:
        """Create a gateway bound to a repository directory.

        Args:
            repo_path: Directory jj commands run in
        """
        self._repo_path = repo_path

    @property
    def repo_path(self) -> Path:
        return self._repo_path

    # ------------------------------------------------------------------
    # Process helpers
    # ------------------------------------------------------------------

    def _run(self, *args: str) -> None:
        """Run jj, raising with the extracted error line on failure."""
        result = self._invoke(args)
        if result.returncode != 0:
            combined = f"{result.stdout}\n{result.stderr}"
            message = extract_error_message(combined) or f"jj {args[0]} failed"
            raise JjCommandError(message)

    def _output(self, *args: str) -> str:
        """Run jj and return stdout only; hints and warnings stay on stderr."""
        result = self._invoke(args)
        if result.returncode != 0:
            output = result.stderr.strip() or result.stdout.strip()
            msg = f"jj command 'jj {' '.join(args)}' failed\nOutput: {output}"
            raise JjCommandError(msg)
        return result.stdout

    def _invoke(self, args: tuple[str, ...]) -> subprocess.CompletedProcess[str]:
        logger.debug("jj %s (in %s)", " ".join(args), self._repo_path)
        try:
            return subprocess.run(
                ["jj", *args],
                cwd=self._repo_path,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise JjCommandError("jj command not found - please install jujutsu") from e

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def load_repository(self) -> Repository:
        if not is_jj_repository(self._repo_path):
            raise NotARepositoryError(str(self._repo_path))
        try:
            output = self._output("log", "-r", GRAPH_REVSET, "-T", LOG_TEMPLATE)
        except JjCommandError:
            # main@origin does not exist in repositories without a remote
            output = self._output("log", "-r", GRAPH_REVSET_NO_REMOTE, "-T", LOG_TEMPLATE)
        return Repository(path=str(self._repo_path), graph=parse_log_output(output))

    def get_description(self, change_id: str) -> str:
        return self._output("log", "-r", change_id, "--no-graph", "-T", "description")

    def changed_files(self, change_id: str) -> list[ChangedFile]:
        return parse_diff_summary(self._output("diff", "--summary", "-r", change_id))

    def remote_url(self) -> str | None:
        return parse_remote_list(self._output("git", "remote", "list"))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def new_change(self, parent_id: str | None) -> None:
        if parent_id is None:
            self._run("new")
        else:
            self._run("new", parent_id)

    def edit(self, change_id: str) -> None:
        self._run("edit", change_id)

    def squash(self, change_id: str) -> None:
        child = self._output("log", "-r", change_id, "--no-graph", "-T", "description")
        parent = self._output("log", "-r", f"parents({change_id})", "--no-graph", "-T", "description")
        self._run("squash", "-r", change_id, "-m", combine_descriptions(parent, child))

    def abandon(self, change_id: str) -> None:
        self._run("abandon", change_id)

    def rebase(self, source_id: str, destination_id: str) -> None:
        self._run("rebase", "-s", source_id, "-d", destination_id)

    def describe(self, change_id: str, text: str) -> None:
        self._run("describe", change_id, "-m", text)

    def create_bookmark(self, name: str, change_id: str) -> None:
        self._run("bookmark", "create", name, "-r", change_id)

    def move_bookmark(self, name: str, change_id: str) -> None:
        self._run("bookmark", "set", name, "-r", change_id, "--allow-backwards")

    def delete_bookmark(self, name: str) -> None:
        self._run("bookmark", "delete", name)

    def create_bookmark_from_main(self, name: str) -> None:
        root = ""
        try:
            root = self._output(
                "log",
                "-r",
                "ancestors(@) & mutable() & children(main@origin)",
                "--no-graph",
                "-T",
                "change_id",
                "--limit",
                "1",
            ).strip()
        except JjCommandError as e:
            logger.debug("No work on top of main@origin: %s", e)
        if root:
            empty = self._output("log", "-r", root, "--no-graph", "-T", "empty").strip()
            if empty != "true":
                self._run("bookmark", "create", name, "-r", root)
                return
        self._run("new", "main@origin")
        self._run("bookmark", "create", name)

    def move_file_to_parent(self, change_id: str, path: str) -> None:
        # The new change becomes @, so the squash lands there.
        self._run("new", "--insert-before", change_id, "-m", SPLIT_DESCRIPTION)
        self._run("squash", "--from", change_id, "--", path)

    def move_file_to_child(self, change_id: str, path: str) -> None:
        self._run("new", "--insert-after", change_id, "-m", SPLIT_DESCRIPTION)
        self._run("squash", "--from", change_id, "--", path)

    def revert_file(self, change_id: str, path: str) -> None:
        self._run("restore", "--to", change_id, "--from", f"parents({change_id})", "--", path)

    def fetch(self) -> str:
        result = self._invoke(("git", "fetch", "--all-remotes"))
        output = f"{result.stdout}{result.stderr}".strip()
        if result.returncode != 0:
            message = extract_error_message(output) or "fetch failed"
            raise JjCommandError(f"fetch failed: {message}")
        return output

    def push_bookmark(self, name: str) -> str:
        result = self._invoke(("git", "push", "--bookmark", name, "--allow-new"))
        output = f"{result.stdout}{result.stderr}".strip()
        if result.returncode != 0:
            message = extract_error_message(output) or "push failed"
            raise JjCommandError(f"push failed: {message}\n{output}")
        return output

    def undo(self) -> None:
        self._run("undo")

    def redo(self) -> None:
        self._run("redo")

    def init_repository(self) -> None:
        self._run("git", "init")
        try:
            self._run("bookmark", "track", "main@origin")
        except JjCommandError as e:
            logger.warning("Could not track main@origin after init: %s", e)
