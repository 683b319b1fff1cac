"""Tests for command factories run against fake gateways."""

from jjdash.config import DashConfig
from jjdash.errors import TicketServiceError
from jjdash.gateway.clipboard.fake import FakeClipboard
from jjdash.gateway.config_store.fake import FakeConfigStore
from jjdash.gateway.connector.fake import FakeServiceConnector
from jjdash.gateway.github.abc import DeviceCode
from jjdash.gateway.github.fake import FakeGitHub, FakeGitHubAuth
from jjdash.gateway.jj.fake import FakeJj
from jjdash.gateway.tickets.fake import FakeTicketService
from jjdash.models.types import ChangedFile, Transition
from jjdash.tui.effects import commands
from jjdash.tui.machines.pr_form import TITLE, PullRequestForm
from jjdash.tui.messages import (
    ChangedFilesLoaded,
    ClipboardCopied,
    CommandFailed,
    EditCompleted,
    LoginFailed,
    LoginStarted,
    PullRequestCreated,
    RepositoryLoaded,
    ServicesInitialized,
    SettingsSaved,
    SilentReloadFailed,
    TransitionCompleted,
    TransitionsLoaded,
)
from tests.fakes.builders import make_change, make_repository


def _form(*, needs_move: bool = False) -> PullRequestForm:
    return PullRequestForm(
        change_id="cccc",
        head_branch="feat-x",
        base_branch="main",
        title="Add widgets",
        body="Details",
        focus=TITLE,
        needs_move=needs_move,
    )


class _Sleeps:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class TestInitializeServices:
    def test_connects_after_loading(self) -> None:
        repository = make_repository(make_change("aaaa"))
        jj = FakeJj(repository=repository, remote_url="git@github.com:acme/widgets.git")
        connector = FakeServiceConnector(github=FakeGitHub())
        config = DashConfig(github_token="t")

        result = commands.initialize_services(jj, connector, config).run()

        assert isinstance(result, ServicesInitialized)
        assert result.repository == repository
        assert result.connection.github_info == "GitHub connected"
        assert connector.connected_configs == [config]

    def test_missing_repository_is_flagged(self) -> None:
        """A missing repository is reported with the path for the init hint."""
        jj = FakeJj(not_a_repository="/work")
        connector = FakeServiceConnector()
        result = commands.initialize_services(jj, connector, DashConfig()).run()
        assert isinstance(result, CommandFailed)
        assert result.not_a_repo
        assert result.path == "/work"
        assert connector.connected_configs == []


class TestMutations:
    def test_mutation_reloads_in_the_same_command(self) -> None:
        jj = FakeJj(repository=make_repository(make_change("aaaa")))
        result = commands.squash_change(jj, "aaaa").run()
        assert isinstance(result, RepositoryLoaded)
        assert jj.mutations == [("squash", "aaaa")]
        assert jj.load_count == 1

    def test_edit_reports_working_copy_move(self) -> None:
        jj = FakeJj()
        result = commands.edit_change(jj, "aaaa").run()
        assert isinstance(result, EditCompleted)

    def test_failure_skips_reload(self) -> None:
        jj = FakeJj(failures={"abandon": "immutable commit"})
        result = commands.abandon_change(jj, "aaaa").run()
        assert result == CommandFailed(error="failed to abandon: immutable commit")
        assert jj.load_count == 0

    def test_new_change_defaults_to_working_copy(self) -> None:
        jj = FakeJj()
        commands.new_change(jj, None).run()
        assert jj.mutations == [("new_change", "@")]


class TestQueries:
    def test_changed_files_errors_yield_empty_list(self) -> None:
        jj = FakeJj(failures={"changed_files": "boom"})
        result = commands.load_changed_files(jj, "aaaa").run()
        assert result == ChangedFilesLoaded(change_id="aaaa", files=())

    def test_changed_files(self) -> None:
        files = [ChangedFile(path="src/app.py", status="M")]
        jj = FakeJj(changed_files={"aaaa": files})
        result = commands.load_changed_files(jj, "aaaa").run()
        assert result == ChangedFilesLoaded(change_id="aaaa", files=tuple(files))

    def test_silent_reload_failure(self) -> None:
        jj = FakeJj(failures={"load_repository": "lock held"})
        result = commands.reload_silently(jj).run()
        assert result == SilentReloadFailed(error="lock held")

    def test_init_repository_failure_keeps_bootstrap_banner(self) -> None:
        jj = FakeJj(failures={"init_repository": "permission denied"})
        result = commands.init_repository(jj).run()
        assert result == CommandFailed(
            error="failed to initialize repository: permission denied", not_a_repo=True
        )


class TestCreatePullRequest:
    def test_pushes_then_creates(self) -> None:
        jj = FakeJj(push_output="pushed feat-x")
        github = FakeGitHub()
        sleeps = _Sleeps()

        result = commands.create_pull_request(jj, github, _form(), sleeps).run()

        assert isinstance(result, PullRequestCreated)
        assert result.pull_request.title == "Add widgets"
        assert jj.mutations == [("push_bookmark", "feat-x")]
        assert sleeps.calls == [commands.PUSH_SETTLE_SECONDS]

    def test_moves_ancestor_bookmark_first(self) -> None:
        jj = FakeJj()
        commands.create_pull_request(jj, FakeGitHub(), _form(needs_move=True), _Sleeps()).run()
        assert jj.mutations == [("move_bookmark", "feat-x", "cccc"), ("push_bookmark", "feat-x")]

    def test_retries_while_branch_is_not_visible(self) -> None:
        """GitHub answers 422 until it sees the pushed branch."""
        github = FakeGitHub(create_errors=["GitHub API error 422: not all refs are readable"] * 2)
        sleeps = _Sleeps()
        result = commands.create_pull_request(FakeJj(), github, _form(), sleeps).run()
        assert isinstance(result, PullRequestCreated)
        assert len(github.create_attempts) == 3
        assert sleeps.calls.count(commands.CREATE_PR_RETRY_SECONDS) == 2

    def test_gives_up_after_five_attempts(self) -> None:
        github = FakeGitHub(create_errors=["GitHub API error 422: Validation Failed"] * 10)
        jj = FakeJj(push_output="To github.com:acme/widgets")
        result = commands.create_pull_request(jj, github, _form(), _Sleeps()).run()
        assert len(github.create_attempts) == commands.CREATE_PR_ATTEMPTS
        assert result == CommandFailed(
            error="failed to create PR: GitHub API error 422: Validation Failed\n"
            "Push output: To github.com:acme/widgets"
        )

    def test_other_errors_are_not_retried(self) -> None:
        github = FakeGitHub(create_errors=["GitHub API error 401: Bad credentials"])
        result = commands.create_pull_request(FakeJj(), github, _form(), _Sleeps()).run()
        assert isinstance(result, CommandFailed)
        assert len(github.create_attempts) == 1

    def test_push_failure_stops_before_creating(self) -> None:
        jj = FakeJj(failures={"push_bookmark": "rejected"})
        github = FakeGitHub()
        result = commands.create_pull_request(jj, github, _form(), _Sleeps()).run()
        assert result == CommandFailed(error="failed to push branch: rejected")
        assert github.create_attempts == []


class TestTickets:
    def test_transition_by_name(self) -> None:
        tickets = FakeTicketService(
            transitions={"PROJ-1": [Transition("11", "Start Progress"), Transition("31", "Resolve")]}
        )
        result = commands.transition_ticket(tickets, "PROJ-1", "In Progress").run()
        assert result == TransitionCompleted(key="PROJ-1", status="In Progress")
        assert tickets.applied_transitions == [("PROJ-1", "11")]

    def test_missing_transition(self) -> None:
        tickets = FakeTicketService(transitions={"PROJ-1": [Transition("31", "Resolve")]})
        result = commands.transition_ticket(tickets, "PROJ-1", "Blocked").run()
        assert result == TransitionCompleted(key="PROJ-1", status="")
        assert tickets.applied_transitions == []

    def test_transition_errors_are_reported(self) -> None:
        tickets = FakeTicketService(
            transitions={"PROJ-1": [Transition("31", "Done")]}, transition_error="forbidden"
        )
        result = commands.transition_ticket(tickets, "PROJ-1", "Done").run()
        assert result == CommandFailed(error="Failed to transition PROJ-1: forbidden")

    def test_transitions_failure_yields_none(self) -> None:
        class _Broken(FakeTicketService):
            def available_transitions(self, key: str) -> list[Transition]:
                raise TicketServiceError("timeout")

        result = commands.load_transitions(_Broken(), "PROJ-1").run()
        assert result == TransitionsLoaded(key="PROJ-1", transitions=())


class TestSettingsAndLogin:
    def test_save_failure(self) -> None:
        store = FakeConfigStore(save_error="read-only file system")
        result = commands.save_settings(store, DashConfig(), local=True).run()
        assert result == CommandFailed(error="Error saving settings: read-only file system")

    def test_save_local(self) -> None:
        result = commands.save_settings(FakeConfigStore(), DashConfig(), local=True).run()
        assert result == SettingsSaved(location=".jjdash.toml", local=True)

    def test_start_login(self) -> None:
        code = DeviceCode("dev", "WXYZ-0000", "https://github.com/login/device", 7)
        result = commands.start_login(FakeGitHubAuth(device_code=code)).run()
        assert result == LoginStarted(
            device_code="dev",
            user_code="WXYZ-0000",
            verification_uri="https://github.com/login/device",
            interval=7,
        )

    def test_start_login_failure(self) -> None:
        result = commands.start_login(FakeGitHubAuth(start_error="no client id")).run()
        assert result == LoginFailed(error="failed to start GitHub login: no client id")


def test_clipboard_failure_is_reported() -> None:
    result = commands.copy_to_clipboard(FakeClipboard(available=False), "change id", "kkkk").run()
    assert result == ClipboardCopied(label="change id", text="kkkk", success=False)
