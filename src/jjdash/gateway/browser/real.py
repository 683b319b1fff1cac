"""Real BrowserLauncher implementation using click.launch."""

import click

from jjdash.gateway.browser.abc import BrowserLauncher


class RealBrowserLauncher(BrowserLauncher):
    """Opens URLs in the system browser."""

    def launch(self, url: str) -> None:
        click.launch(url)
