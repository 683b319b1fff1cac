"""Production GitHub gateways using the REST and GraphQL APIs via requests."""

from __future__ import annotations

import logging
from typing import Any

import requests

from jjdash.errors import GitHubError
from jjdash.gateway.github.abc import (
    DeviceCode,
    DevicePoll,
    GitHubAuthGateway,
    GitHubGateway,
    PollStatus,
)
from jjdash.models.types import (
    CheckStatus,
    CreatePullRequest,
    PullRequest,
    PullRequestFilters,
    PullRequestState,
    ReviewStatus,
    UpdatePullRequest,
)

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30

_LIST_QUERY = """
query($owner: String!, $repo: String!, $states: [PullRequestState!], $first: Int!) {
  viewer { login }
  repository(owner: $owner, name: $repo) {
    pullRequests(first: $first, states: $states, orderBy: {field: UPDATED_AT, direction: DESC}) {
      nodes {
        number
        title
        body
        url
        state
        baseRefName
        headRefName
        author { login }
        reviewDecision
        commits(last: 1) { nodes { commit { statusCheckRollup { state } } } }
      }
    }
  }
}
"""

_CHECK_STATES = {
    "SUCCESS": CheckStatus.SUCCESS,
    "FAILURE": CheckStatus.FAILURE,
    "ERROR": CheckStatus.FAILURE,
    "PENDING": CheckStatus.PENDING,
    "EXPECTED": CheckStatus.PENDING,
}

_REVIEW_STATES = {
    "APPROVED": ReviewStatus.APPROVED,
    "CHANGES_REQUESTED": ReviewStatus.CHANGES_REQUESTED,
    "REVIEW_REQUIRED": ReviewStatus.PENDING,
}


def _check_status(node: dict[str, Any]) -> CheckStatus:
    commits = (node.get("commits") or {}).get("nodes") or []
    if not commits:
        return CheckStatus.NONE
    rollup = (commits[0].get("commit") or {}).get("statusCheckRollup")
    if rollup is None:
        return CheckStatus.NONE
    return _CHECK_STATES.get(rollup.get("state", ""), CheckStatus.NONE)


def pull_request_from_graphql(node: dict[str, Any]) -> PullRequest:
    """Convert a GraphQL pullRequest node."""
    return PullRequest(
        number=node["number"],
        title=node.get("title") or "",
        body=node.get("body") or "",
        url=node.get("url") or "",
        state=PullRequestState(node["state"].lower()),
        base_branch=node.get("baseRefName") or "",
        head_branch=node.get("headRefName") or "",
        check_status=_check_status(node),
        review_status=_REVIEW_STATES.get(node.get("reviewDecision") or "", ReviewStatus.NONE),
    )


def pull_request_from_rest(data: dict[str, Any]) -> PullRequest:
    """Convert a REST pull request object."""
    if data.get("merged_at"):
        state = PullRequestState.MERGED
    else:
        state = PullRequestState(data["state"])
    return PullRequest(
        number=data["number"],
        title=data.get("title") or "",
        body=data.get("body") or "",
        url=data.get("html_url") or "",
        state=state,
        base_branch=data["base"]["ref"],
        head_branch=data["head"]["ref"],
    )


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    message = payload.get("message", "")
    errors = payload.get("errors") or []
    details = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
    return f"{message}: {details}" if details else message


class RealGitHub(GitHubGateway):
    """GitHub API client for one repository."""

    def __init__(self, *, owner: str, repo: str, token: str) -> None:
        self._owner = owner
        self._repo = repo
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    @property
    def repository_name(self) -> str:
        return f"{self._owner}/{self._repo}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{API_URL}{path}"
        logger.debug("GitHub %s %s", method, url)
        try:
            response = self._session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            raise GitHubError(f"GitHub request failed: {e}") from e
        if response.status_code >= 400:
            raise GitHubError(
                f"GitHub API error {response.status_code}: {_error_message(response)}"
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GitHubError(f"GitHub returned a non-JSON response (status {response.status_code})") from e

    def list_pull_requests(self, filters: PullRequestFilters) -> list[PullRequest]:
        states = ["OPEN"]
        if filters.show_merged:
            states.append("MERGED")
        if filters.show_closed:
            states.append("CLOSED")
        variables = {
            "owner": self._owner,
            "repo": self._repo,
            "states": states,
            "first": max(1, min(filters.limit, 100)),
        }
        payload = self._request("POST", "/graphql", json={"query": _LIST_QUERY, "variables": variables})
        if payload.get("errors"):
            raise GitHubError(f"GitHub GraphQL error: {payload['errors'][0].get('message', '')}")
        data = payload["data"]
        viewer = data["viewer"]["login"]
        nodes = data["repository"]["pullRequests"]["nodes"]
        pull_requests = []
        for node in nodes:
            if filters.only_mine and (node.get("author") or {}).get("login") != viewer:
                continue
            pull_requests.append(pull_request_from_graphql(node))
        return pull_requests

    def create_pull_request(self, request: CreatePullRequest) -> PullRequest:
        data = self._request(
            "POST",
            f"/repos/{self._owner}/{self._repo}/pulls",
            json={
                "title": request.title,
                "body": request.body,
                "head": request.head_branch,
                "base": request.base_branch,
            },
        )
        return pull_request_from_rest(data)

    def update_pull_request(self, number: int, request: UpdatePullRequest) -> PullRequest:
        fields = {}
        if request.title is not None:
            fields["title"] = request.title
        if request.body is not None:
            fields["body"] = request.body
        data = self._request("PATCH", f"/repos/{self._owner}/{self._repo}/pulls/{number}", json=fields)
        return pull_request_from_rest(data)

    def merge_pull_request(self, number: int) -> None:
        self._request("PUT", f"/repos/{self._owner}/{self._repo}/pulls/{number}/merge", json={})

    def close_pull_request(self, number: int) -> None:
        self._request(
            "PATCH", f"/repos/{self._owner}/{self._repo}/pulls/{number}", json={"state": "closed"}
        )


class RealGitHubAuth(GitHubAuthGateway):
    """OAuth device flow against github.com."""

    def __init__(self, client_id: str) -> None:
        self._client_id = client_id

    def _post(self, url: str, data: dict[str, str]) -> dict[str, Any]:
        if not self._client_id:
            raise GitHubError("No OAuth client id configured (set JJDASH_GITHUB_CLIENT_ID)")
        logger.debug("GitHub device flow POST %s", url)
        try:
            response = requests.post(
                url,
                data={"client_id": self._client_id, **data},
                headers={"Accept": "application/json"},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise GitHubError(f"GitHub login request failed: {e}") from e
        if response.status_code >= 400:
            raise GitHubError(f"GitHub login failed ({response.status_code}): {response.text[:200]}")
        try:
            payload = response.json()
        except ValueError as e:
            raise GitHubError(f"GitHub login returned a non-JSON response (status {response.status_code})") from e
        if not isinstance(payload, dict):
            raise GitHubError("GitHub login returned an unexpected response")
        return payload

    def start_device_flow(self) -> DeviceCode:
        payload = self._post("https://github.com/login/device/code", {"scope": "repo"})
        return DeviceCode(
            device_code=payload["device_code"],
            user_code=payload["user_code"],
            verification_uri=payload["verification_uri"],
            interval=int(payload.get("interval", 5)),
        )

    def poll_device_flow(self, device_code: str) -> DevicePoll:
        payload = self._post(
            "https://github.com/login/oauth/access_token",
            {
                "device_code": device_code,
                "grant_type": "urn:ietf:params:oauth:grant-type:device_code",
            },
        )
        error = payload.get("error", "")
        if error == "authorization_pending":
            return DevicePoll(status=PollStatus.PENDING)
        if error == "slow_down":
            return DevicePoll(status=PollStatus.SLOW_DOWN)
        if error == "expired_token":
            raise GitHubError("device code expired, please try again")
        if error == "access_denied":
            raise GitHubError("access denied by user")
        if error:
            raise GitHubError(f"auth error: {error} - {payload.get('error_description', '')}")
        token = payload.get("access_token", "")
        if token:
            return DevicePoll(status=PollStatus.AUTHORIZED, token=token)
        return DevicePoll(status=PollStatus.PENDING)
