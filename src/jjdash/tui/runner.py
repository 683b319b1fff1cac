"""TUI runner abstraction for testability.

Lets CLI tests check which app was built without starting the Textual event
loop.
"""

from abc import ABC, abstractmethod

from jjdash.tui.app import JjDashApp


class TuiRunner(ABC):
    """Abstract interface for running the dashboard."""

    @abstractmethod
    def run(self, app: JjDashApp) -> None: ...


class RealTuiRunner(TuiRunner):
    """Production implementation that runs the Textual event loop."""

    def run(self, app: JjDashApp) -> None:
        app.run()


class FakeTuiRunner(TuiRunner):
    """Captures apps without running the event loop."""

    def __init__(self) -> None:
        self._apps_run: list[JjDashApp] = []

    def run(self, app: JjDashApp) -> None:
        self._apps_run.append(app)

    @property
    def apps_run(self) -> list[JjDashApp]:
        """Apps that were passed to run(). For test assertions only."""
        return self._apps_run
