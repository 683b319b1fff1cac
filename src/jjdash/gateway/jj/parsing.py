"""Parsing of jj command output."""

from __future__ import annotations

import logging
from datetime import datetime

from jjdash.models.types import ChangedFile, ChangeGraph, ChangeSet

logger = logging.getLogger(__name__)

COMMIT_MARKER = "<<<COMMIT>>>"
NO_DESCRIPTION = "(no description)"

LOG_TEMPLATE = (
    "concat("
    f'"{COMMIT_MARKER}", '
    'change_id.short(8), "|", '
    'commit_id.short(8), "|", '
    'author.email(), "|", '
    'author.timestamp(), "|", '
    f'if(description, description.first_line(), "{NO_DESCRIPTION}"), "|", '
    'parents.map(|p| p.commit_id().short(8)).join(","), "|", '
    'bookmarks.join(","), "|", '
    'if(self.current_working_copy(), "true", "false"), "|", '
    'if(self.conflict(), "true", "false"), "|", '
    'if(immutable, "true", "false"), '
    '"\\n")'
)

_FIELD_COUNT = 10


def clean_bookmarks(raw: str) -> tuple[str, ...]:
    """Normalize a comma-separated bookmark list.

    Strips the ``*`` marker of a moved bookmark and any ``@remote`` suffix, and
    drops duplicates while keeping first-seen order.

    Example:
        "feat*,feat@origin,main@origin" -> ("feat", "main")
    """
    names: list[str] = []
    for part in raw.split(","):
        name = part.strip().removesuffix("*")
        at = name.find("@")
        if at > 0:
            name = name[:at]
        if name and name not in names:
            names.append(name)
    return tuple(names)


def _parse_timestamp(raw: str) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        logger.debug("Unparseable jj timestamp %r", raw)
        return None


def parse_log_output(output: str) -> ChangeGraph:
    """Parse ``jj log`` output produced with LOG_TEMPLATE.

    Lines without the marker are graph connector lines and carry no change.

    Args:
        output: Raw stdout of jj log

    Returns:
        The change graph in jj's display order (newest first)
    """
    changes: list[ChangeSet] = []
    for line in output.splitlines():
        marker = line.find(COMMIT_MARKER)
        if marker == -1:
            continue
        prefix = line[:marker]
        parts = line[marker + len(COMMIT_MARKER) :].split("|")
        if len(parts) < _FIELD_COUNT:
            logger.warning("Skipping malformed jj log row: %r", line)
            continue
        # The description may itself contain "|"; the last five fields never do.
        head = parts[:4]
        tail = parts[-5:]
        summary = "|".join(parts[4:-5]).strip()
        change_id, commit_id, email, timestamp = (field.strip() for field in head)
        parents_raw, bookmarks_raw, working, conflict, immutable = (field.strip() for field in tail)
        if summary == NO_DESCRIPTION:
            description = ""
        else:
            description = summary
        changes.append(
            ChangeSet(
                commit_id=commit_id,
                change_id=change_id,
                short_id=change_id,
                author=email.split("@")[0] if email else "",
                email=email,
                timestamp=_parse_timestamp(timestamp),
                summary=summary,
                description=description,
                parents=tuple(p for p in parents_raw.split(",") if p),
                bookmarks=clean_bookmarks(bookmarks_raw),
                is_working_copy=working == "true",
                has_conflicts=conflict == "true",
                is_immutable=immutable == "true",
                graph_prefix=prefix.rstrip(),
            )
        )
    return ChangeGraph.build(tuple(changes))


def parse_diff_summary(output: str) -> list[ChangedFile]:
    """Parse ``jj diff --summary`` output ("M path" per line)."""
    files: list[ChangedFile] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        status, _, path = line.partition(" ")
        if path:
            files.append(ChangedFile(status=status, path=path.strip()))
    return files


def parse_remote_list(output: str) -> str | None:
    """Pick the origin URL from ``jj git remote list``, else the first remote."""
    remotes: list[tuple[str, str]] = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2:
            remotes.append((parts[0], parts[1]))
    for name, url in remotes:
        if name == "origin":
            return url
    if remotes:
        return remotes[0][1]
    return None


def extract_error_message(output: str) -> str:
    """Pick the most useful line out of jj's combined output.

    Prefers the ``Error:`` line; otherwise the first line that is not a warning
    or hint.
    """
    lines = [line.strip() for line in output.splitlines()]
    for line in lines:
        if line.startswith("Error:"):
            return line.removeprefix("Error:").strip()
    for line in lines:
        if line and not line.startswith(("Warning:", "Hint:")):
            return line
    return ""


def combine_descriptions(parent: str, child: str) -> str:
    """Description for a squash result: parent first, then child."""
    parent = parent.strip()
    child = child.strip()
    if parent and child:
        return f"{parent}\n\n{child}"
    return parent or child
