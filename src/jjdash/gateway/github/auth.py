"""GitHub token and remote resolution.

These helpers run once when services are connected, not on every request.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from jjdash.subprocess_utils import run_subprocess_with_context

_REMOTE_PATTERNS = (
    re.compile(r"^git@github\.com:(?P<owner>[^/]+)/(?P<repo>.+?)(?:\.git)?/?$"),
    re.compile(r"^ssh://git@github\.com/(?P<owner>[^/]+)/(?P<repo>.+?)(?:\.git)?/?$"),
    re.compile(r"^https?://(?:[^@/]+@)?github\.com/(?P<owner>[^/]+)/(?P<repo>.+?)(?:\.git)?/?$"),
)


def parse_github_remote(url: str) -> tuple[str, str] | None:
    """Extract (owner, repo) from a GitHub remote URL.

    Args:
        url: ssh or https remote URL

    Returns:
        (owner, repo), or None if the URL is not a GitHub remote
    """
    for pattern in _REMOTE_PATTERNS:
        match = pattern.match(url.strip())
        if match is not None:
            return match.group("owner"), match.group("repo")
    return None


def fetch_github_token(hostname: str = "github.com") -> str:
    """Fetch a GitHub token via the gh CLI.

    Args:
        hostname: GitHub hostname (default: "github.com")

    Returns:
        GitHub authentication token

    Raises:
        RuntimeError: If gh auth token fails
        ValueError: If token is empty
    """
    result = run_subprocess_with_context(
        cmd=["gh", "auth", "token", "--hostname", hostname],
        operation_context=f"fetch GitHub token for {hostname}",
    )
    token = result.stdout.strip()
    if not token:
        msg = f"Empty token returned from gh auth for {hostname}"
        raise ValueError(msg)
    return token


def resolve_github_token(configured: str, environ: Mapping[str, str]) -> str | None:
    """Pick a token: GITHUB_TOKEN, then the configured one, then gh CLI.

    Returns:
        The token, or None if no source provides one
    """
    from_env = environ.get("GITHUB_TOKEN", "").strip()
    if from_env:
        return from_env
    if configured.strip():
        return configured.strip()
    try:
        return fetch_github_token()
    except (RuntimeError, ValueError):
        return None
