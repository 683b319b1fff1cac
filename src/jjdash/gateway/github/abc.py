"""Abstract base classes for GitHub operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto

from jjdash.models.types import (
    CreatePullRequest,
    PullRequest,
    PullRequestFilters,
    UpdatePullRequest,
)


class GitHubGateway(ABC):
    """Pull request operations for one repository.

    GitHub is eventually consistent: a branch pushed a moment ago may not be
    visible yet, so create_pull_request can fail transiently with a 422.
    Failures raise GitHubError.
    """

    @abstractmethod
    def list_pull_requests(self, filters: PullRequestFilters) -> list[PullRequest]:
        """List pull requests, newest activity first."""
        ...

    @abstractmethod
    def create_pull_request(self, request: CreatePullRequest) -> PullRequest:
        ...

    @abstractmethod
    def update_pull_request(self, number: int, request: UpdatePullRequest) -> PullRequest:
        ...

    @abstractmethod
    def merge_pull_request(self, number: int) -> None:
        ...

    @abstractmethod
    def close_pull_request(self, number: int) -> None:
        ...


@dataclass(frozen=True)
class DeviceCode:
    """Response to starting the OAuth device flow.

    Attributes:
        device_code: Secret code used when polling
        user_code: Code the user types on the verification page
        verification_uri: Page the user opens
        interval: Minimum seconds between polls
    """

    device_code: str
    user_code: str
    verification_uri: str
    interval: int


class PollStatus(Enum):
    PENDING = auto()
    SLOW_DOWN = auto()
    AUTHORIZED = auto()


@dataclass(frozen=True)
class DevicePoll:
    """Result of one device-flow poll; ``token`` is set when AUTHORIZED."""

    status: PollStatus
    token: str = ""


class GitHubAuthGateway(ABC):
    """OAuth device flow used by the login view."""

    @abstractmethod
    def start_device_flow(self) -> DeviceCode:
        ...

    @abstractmethod
    def poll_device_flow(self, device_code: str) -> DevicePoll:
        """Poll once for the token.

        Raises:
            GitHubError: If the code expired, access was denied, or the request failed
        """
        ...
