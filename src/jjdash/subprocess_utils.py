"""Subprocess helpers shared by the real gateways."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def run_subprocess_with_context(
    *,
    cmd: list[str],
    operation_context: str,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, raising RuntimeError with context when it fails.

    Args:
        cmd: Command and arguments
        operation_context: Short description used in the error message
        cwd: Working directory
        env: Full environment for the child process (inherits when None)

    Returns:
        The completed process

    Raises:
        RuntimeError: If the command exits non-zero or cannot be started
    """
    logger.debug("Running %s (%s)", cmd, operation_context)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        msg = f"Failed to {operation_context}: {cmd[0]} not found"
        raise RuntimeError(msg) from e

    if result.returncode != 0:
        output = result.stderr.strip() or result.stdout.strip()
        msg = f"Failed to {operation_context}: {output}"
        raise RuntimeError(msg)
    return result
