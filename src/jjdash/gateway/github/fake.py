"""Fake GitHub gateways for testing."""

from __future__ import annotations

from dataclasses import replace

from jjdash.errors import GitHubError
from jjdash.gateway.github.abc import (
    DeviceCode,
    DevicePoll,
    GitHubAuthGateway,
    GitHubGateway,
    PollStatus,
)
from jjdash.models.types import (
    CreatePullRequest,
    PullRequest,
    PullRequestFilters,
    PullRequestState,
    UpdatePullRequest,
)


class FakeGitHub(GitHubGateway):
    """In-memory fake of the pull request API.

    Constructor Injection:
    ---------------------
    - pull_requests: Initial pull requests
    - create_errors: Messages raised (in order) by successive create_pull_request()
      calls before one succeeds
    - list_error: If set, list_pull_requests() raises GitHubError with this message
    - merge_error / close_error: Raised by merge / close when set

    Mutation Tracking:
    -----------------
    - list_count: Number of list_pull_requests() calls
    - create_attempts: Requests passed to create_pull_request(), including failures
    - merged / closed: Numbers merged / closed
    """

    def __init__(
        self,
        *,
        pull_requests: list[PullRequest] | None = None,
        create_errors: list[str] | None = None,
        list_error: str | None = None,
        merge_error: str | None = None,
        close_error: str | None = None,
    ) -> None:
        self._pull_requests = list(pull_requests or [])
        self._create_errors = list(create_errors or [])
        self._list_error = list_error
        self._merge_error = merge_error
        self._close_error = close_error
        self._list_count = 0
        self._create_attempts: list[CreatePullRequest] = []
        self._merged: list[int] = []
        self._closed: list[int] = []

    def list_pull_requests(self, filters: PullRequestFilters) -> list[PullRequest]:
        self._list_count += 1
        if self._list_error is not None:
            raise GitHubError(self._list_error)
        visible = []
        for pr in self._pull_requests:
            if pr.state == PullRequestState.MERGED and not filters.show_merged:
                continue
            if pr.state == PullRequestState.CLOSED and not filters.show_closed:
                continue
            visible.append(pr)
        return visible[: filters.limit]

    def create_pull_request(self, request: CreatePullRequest) -> PullRequest:
        self._create_attempts.append(request)
        if self._create_errors:
            raise GitHubError(self._create_errors.pop(0))
        number = max((pr.number for pr in self._pull_requests), default=0) + 1
        pr = PullRequest(
            number=number,
            title=request.title,
            body=request.body,
            url=f"https://github.com/owner/repo/pull/{number}",
            state=PullRequestState.OPEN,
            base_branch=request.base_branch,
            head_branch=request.head_branch,
        )
        self._pull_requests.append(pr)
        return pr

    def update_pull_request(self, number: int, request: UpdatePullRequest) -> PullRequest:
        for position, pr in enumerate(self._pull_requests):
            if pr.number == number:
                updated = replace(
                    pr,
                    title=pr.title if request.title is None else request.title,
                    body=pr.body if request.body is None else request.body,
                )
                self._pull_requests[position] = updated
                return updated
        raise GitHubError(f"GitHub API error 404: pull request #{number} not found")

    def merge_pull_request(self, number: int) -> None:
        if self._merge_error is not None:
            raise GitHubError(self._merge_error)
        self._merged.append(number)

    def close_pull_request(self, number: int) -> None:
        if self._close_error is not None:
            raise GitHubError(self._close_error)
        self._closed.append(number)

    @property
    def list_count(self) -> int:
        return self._list_count

    @property
    def create_attempts(self) -> list[CreatePullRequest]:
        return list(self._create_attempts)

    @property
    def merged(self) -> list[int]:
        return list(self._merged)

    @property
    def closed(self) -> list[int]:
        return list(self._closed)


class FakeGitHubAuth(GitHubAuthGateway):
    """Scripted device flow.

    ``polls`` is consumed one entry per poll_device_flow() call; once exhausted the
    flow keeps answering PENDING.
    """

    def __init__(
        self,
        *,
        device_code: DeviceCode | None = None,
        polls: list[DevicePoll] | None = None,
        start_error: str | None = None,
    ) -> None:
        self._device_code = device_code or DeviceCode(
            device_code="device-123",
            user_code="ABCD-1234",
            verification_uri="https://github.com/login/device",
            interval=5,
        )
        self._polls = list(polls or [])
        self._start_error = start_error
        self._poll_count = 0

    def start_device_flow(self) -> DeviceCode:
        if self._start_error is not None:
            raise GitHubError(self._start_error)
        return self._device_code

    def poll_device_flow(self, device_code: str) -> DevicePoll:
        self._poll_count += 1
        if self._polls:
            return self._polls.pop(0)
        return DevicePoll(status=PollStatus.PENDING)

    @property
    def poll_count(self) -> int:
        return self._poll_count
