"""Abstract base class for opening URLs in a browser."""

from abc import ABC, abstractmethod


class BrowserLauncher(ABC):
    """Opens pull request and ticket pages."""

    @abstractmethod
    def launch(self, url: str) -> None:
        """Open ``url`` in the user's browser."""
        ...
