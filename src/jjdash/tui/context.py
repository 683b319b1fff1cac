"""Context bundling the dashboard's gateways.

JjDashContext follows the ABC/Real/Fake pattern of the gateways it holds:
``for_production`` wires the real implementations for a repository path,
``for_test`` fills every slot that was not provided with a fake.
"""

import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from jjdash.config import DashConfig
from jjdash.gateway.browser.abc import BrowserLauncher
from jjdash.gateway.browser.fake import FakeBrowserLauncher
from jjdash.gateway.browser.real import RealBrowserLauncher
from jjdash.gateway.clipboard.abc import Clipboard
from jjdash.gateway.clipboard.fake import FakeClipboard
from jjdash.gateway.clipboard.real import RealClipboard
from jjdash.gateway.config_store.abc import ConfigStore
from jjdash.gateway.config_store.fake import FakeConfigStore
from jjdash.gateway.config_store.real import RealConfigStore
from jjdash.gateway.connector.abc import ServiceConnector
from jjdash.gateway.connector.fake import FakeServiceConnector
from jjdash.gateway.connector.real import RealServiceConnector
from jjdash.gateway.github.abc import GitHubAuthGateway
from jjdash.gateway.github.fake import FakeGitHubAuth
from jjdash.gateway.github.real import RealGitHubAuth
from jjdash.gateway.jj.abc import JjGateway
from jjdash.gateway.jj.fake import FakeJj
from jjdash.gateway.jj.real import RealJj
from jjdash.tui.runner import FakeTuiRunner, RealTuiRunner, TuiRunner
from jjdash.tui.state import AppState, Services, initial_state

GITHUB_CLIENT_ID_ENV = "JJDASH_GITHUB_CLIENT_ID"


@dataclass(frozen=True)
class JjDashContext:
    """Everything the CLI needs to build and run the dashboard."""

    jj: JjGateway
    connector: ServiceConnector
    config_store: ConfigStore
    browser: BrowserLauncher
    clipboard: Clipboard
    github_auth: GitHubAuthGateway
    tui_runner: TuiRunner
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def for_production(cls, repo_path: Path) -> "JjDashContext":
        """Create a context with real gateways rooted at ``repo_path``."""
        return cls(
            jj=RealJj(repo_path),
            connector=RealServiceConnector(),
            config_store=RealConfigStore(repo_root=repo_path),
            browser=RealBrowserLauncher(),
            clipboard=RealClipboard(),
            github_auth=RealGitHubAuth(os.environ.get(GITHUB_CLIENT_ID_ENV, "")),
            tui_runner=RealTuiRunner(),
        )

    @classmethod
    def for_test(
        cls,
        *,
        jj: JjGateway | None = None,
        connector: ServiceConnector | None = None,
        config_store: ConfigStore | None = None,
        browser: BrowserLauncher | None = None,
        clipboard: Clipboard | None = None,
        github_auth: GitHubAuthGateway | None = None,
        tui_runner: TuiRunner | None = None,
    ) -> "JjDashContext":
        """Create a context where every gateway not given is a fake.

        ``sleep`` is a no-op so retry loops finish instantly.
        """
        return cls(
            jj=jj or FakeJj(),
            connector=connector or FakeServiceConnector(),
            config_store=config_store or FakeConfigStore(),
            browser=browser or FakeBrowserLauncher(),
            clipboard=clipboard or FakeClipboard(),
            github_auth=github_auth or FakeGitHubAuth(),
            tui_runner=tui_runner or FakeTuiRunner(),
            sleep=lambda seconds: None,
        )

    def services(self) -> Services:
        return Services(
            jj=self.jj,
            connector=self.connector,
            config_store=self.config_store,
            browser=self.browser,
            clipboard=self.clipboard,
            github_auth=self.github_auth,
            sleep=self.sleep,
        )

    def initial_state(self, config: DashConfig) -> AppState:
        return initial_state(self.services(), config)
