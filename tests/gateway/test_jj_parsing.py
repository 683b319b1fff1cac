"""Tests for jj output parsing."""

from datetime import datetime

from jjdash.gateway.jj.parsing import (
    COMMIT_MARKER,
    NO_DESCRIPTION,
    clean_bookmarks,
    combine_descriptions,
    extract_error_message,
    parse_diff_summary,
    parse_log_output,
    parse_remote_list,
)


def _row(
    change_id: str,
    commit_id: str,
    *,
    summary: str = "add widget",
    parents: str = "",
    bookmarks: str = "",
    working: str = "false",
    conflict: str = "false",
    immutable: str = "false",
    prefix: str = "○  ",
) -> str:
    fields = [
        change_id,
        commit_id,
        "alice@example.com",
        "2024-01-15T10:30:00+00:00",
        summary,
        parents,
        bookmarks,
        working,
        conflict,
        immutable,
    ]
    return prefix + COMMIT_MARKER + "|".join(fields)


class TestParseLogOutput:
    def test_parses_rows_and_skips_connector_lines(self) -> None:
        """Marker rows become changes; graph-only lines are ignored."""
        output = "\n".join(
            [
                _row("kkkkkkkk", "11111111", parents="22222222", working="true", prefix="@  "),
                "│",
                _row("llllllll", "22222222", bookmarks="main", immutable="true", prefix="◆  "),
                "~",
            ]
        )
        graph = parse_log_output(output)

        assert len(graph) == 2
        first, second = graph.changes
        assert first.change_id == "kkkkkkkk"
        assert first.is_working_copy
        assert first.parents == ("22222222",)
        assert first.author == "alice"
        assert first.timestamp == datetime.fromisoformat("2024-01-15T10:30:00+00:00")
        assert first.graph_prefix == "@"
        assert second.is_immutable
        assert second.bookmarks == ("main",)
        assert graph.children == {"22222222": ("11111111",)}

    def test_description_containing_separator(self) -> None:
        """Pipes inside the description stay in the summary."""
        graph = parse_log_output(_row("kkkkkkkk", "11111111", summary="a | b"))
        assert graph.changes[0].summary == "a | b"

    def test_placeholder_description_is_empty(self) -> None:
        """The no-description placeholder is shown but not kept as description."""
        graph = parse_log_output(_row("kkkkkkkk", "11111111", summary=NO_DESCRIPTION))
        change = graph.changes[0]
        assert change.summary == NO_DESCRIPTION
        assert change.description == ""

    def test_malformed_row_is_skipped(self) -> None:
        """Rows with too few fields are dropped."""
        graph = parse_log_output(COMMIT_MARKER + "only|three|fields")
        assert len(graph) == 0

    def test_bad_timestamp_becomes_none(self) -> None:
        """Unparseable timestamps do not fail the whole load."""
        row = _row("kkkkkkkk", "11111111").replace("2024-01-15T10:30:00+00:00", "yesterday")
        assert parse_log_output(row).changes[0].timestamp is None


def test_clean_bookmarks() -> None:
    """Moved markers and remote suffixes are stripped and duplicates dropped."""
    assert clean_bookmarks("feat*,feat@origin,main@origin") == ("feat", "main")
    assert clean_bookmarks("") == ()


def test_parse_diff_summary() -> None:
    """Each non-empty line yields a status and a path."""
    files = parse_diff_summary("M src/app.py\nA docs/new file.md\n\n")
    assert [(f.status, f.path) for f in files] == [("M", "src/app.py"), ("A", "docs/new file.md")]


class TestParseRemoteList:
    def test_prefers_origin(self) -> None:
        """origin wins over remotes listed before it."""
        output = "upstream https://github.com/up/repo.git\norigin git@github.com:me/repo.git\n"
        assert parse_remote_list(output) == "git@github.com:me/repo.git"

    def test_falls_back_to_first_remote(self) -> None:
        """Without origin the first remote is used."""
        assert parse_remote_list("fork https://github.com/me/repo\n") == "https://github.com/me/repo"

    def test_no_remotes(self) -> None:
        """Empty output means no remote."""
        assert parse_remote_list("") is None


def test_extract_error_message_prefers_error_line() -> None:
    """The Error: line is picked over warnings and hints."""
    output = "Warning: something odd\nError: Commit abc is immutable\nHint: use --ignore-immutable"
    assert extract_error_message(output) == "Commit abc is immutable"


def test_extract_error_message_falls_back_to_first_plain_line() -> None:
    """Without an Error: line the first non-warning line is used."""
    assert extract_error_message("Hint: try again\nconnection refused\n") == "connection refused"


def test_combine_descriptions() -> None:
    """Parent text comes first; empty sides are dropped."""
    assert combine_descriptions("parent\n", "child") == "parent\n\nchild"
    assert combine_descriptions("", "child") == "child"
    assert combine_descriptions("parent", "  ") == "parent"
