"""Error types raised by jjdash gateways.

Gateways raise subclasses of JjDashError for failures of the external tools and
services they wrap. Commands translate these into failure messages; anything else
is a programming error and propagates.
"""


class JjDashError(Exception):
    """Base class for collaborator failures."""


class JjCommandError(JjDashError):
    """A jj invocation failed."""


class NotARepositoryError(JjCommandError):
    """The working directory is not inside a jj repository.

    Attributes:
        path: The directory that was checked
    """

    def __init__(self, path: str) -> None:
        super().__init__(
            f"not a jujutsu repository: {path}\n"
            "Hint: Run 'jj git init' to initialize a repository"
        )
        self.path = path


class GitHubError(JjDashError):
    """A GitHub API call failed."""


class TicketServiceError(JjDashError):
    """A ticket provider API call failed."""


class ConfigError(JjDashError):
    """The configuration could not be read or written."""
