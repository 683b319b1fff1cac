"""Fake BrowserLauncher that records URLs instead of opening them."""

from jjdash.gateway.browser.abc import BrowserLauncher


class FakeBrowserLauncher(BrowserLauncher):
    """In-memory fake; state is only captured for assertions."""

    def __init__(self) -> None:
        self._launched_urls: list[str] = []

    def launch(self, url: str) -> None:
        self._launched_urls.append(url)

    @property
    def launched_urls(self) -> list[str]:
        """URLs passed to launch(), in order. For test assertions only."""
        return list(self._launched_urls)
