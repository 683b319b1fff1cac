"""Main Textual application for jjdash."""

import asyncio
import logging
from functools import partial

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal

from jjdash.tui.effects.types import Command, Delay, Effect, Exit
from jjdash.tui.messages import KeyPressed, Message, Started, WindowResized
from jjdash.tui.state import AppState
from jjdash.tui.update.reducer import update
from jjdash.tui.widgets.change_table import ChangeTable
from jjdash.tui.widgets.detail_panel import DetailPanel
from jjdash.tui.widgets.error_banner import ErrorBanner
from jjdash.tui.widgets.status_bar import StatusBar
from jjdash.tui.widgets.view_bar import ViewBar

logger = logging.getLogger(__name__)


def key_name(event: events.Key) -> str:
    """Name used by the key table: the printed character for printable keys
    (so ``,`` and ``M`` match directly), Textual's key name otherwise."""
    character = event.character
    if event.is_printable and character and character != " ":
        return character
    return event.key


class JjDashApp(App):
    """Dashboard over a jj repository.

    The app owns no behavior of its own. Every input becomes a message for the
    reducer, and the effects it returns are executed here: commands run on a
    worker thread and feed their result back in, delays become timers.
    """

    TITLE = "jjdash"
    ENABLE_COMMAND_PALETTE = False

    # Keys Textual binds itself are claimed up front and routed like any other.
    BINDINGS = [
        Binding("ctrl+q", "press('ctrl+q')", show=False, priority=True),
        Binding("ctrl+c", "press('ctrl+c')", show=False, priority=True),
        Binding("tab", "press('tab')", show=False, priority=True),
        Binding("shift+tab", "press('shift+tab')", show=False, priority=True),
    ]

    CSS = """
    #panels {
        height: 1fr;
    }
    """

    def __init__(self, state: AppState) -> None:
        super().__init__()
        self._state = state
        self._mounted = False

    @property
    def state(self) -> AppState:
        return self._state

    def compose(self) -> ComposeResult:
        yield ViewBar()
        yield ErrorBanner()
        with Horizontal(id="panels"):
            yield ChangeTable()
            yield DetailPanel()
        yield StatusBar()

    def on_mount(self) -> None:
        self._mounted = True
        self.dispatch(WindowResized(width=self.size.width, height=self.size.height))
        self.dispatch(Started())

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.dispatch(KeyPressed(key=key_name(event), character=event.character))

    def on_resize(self, event: events.Resize) -> None:
        self.dispatch(WindowResized(width=event.size.width, height=event.size.height))

    def action_press(self, key: str) -> None:
        self.dispatch(KeyPressed(key=key))

    def dispatch(self, message: Message) -> None:
        """Feed a message through the reducer, redraw, and run the effects."""
        self._state, effects = update(self._state, message)
        self._redraw()
        for effect in effects:
            self._execute(effect)

    def _execute(self, effect: Effect) -> None:
        if isinstance(effect, Command):
            logger.debug("running command %s", effect.name)
            self.run_worker(self._run_command(effect), name=effect.name, group="commands")
        elif isinstance(effect, Delay):
            self.set_timer(effect.seconds, partial(self.dispatch, effect.message))
        elif isinstance(effect, Exit):
            self.exit()

    async def _run_command(self, command: Command) -> None:
        # Run blocking jj/HTTP calls in executor to keep the UI responsive
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, command.run)
        self.dispatch(result)

    def _redraw(self) -> None:
        if not self._mounted:
            return
        self.query_one(ViewBar).show_state(self._state)
        self.query_one(ErrorBanner).show_state(self._state)
        self.query_one(ChangeTable).show_state(self._state)
        self.query_one(DetailPanel).show_state(self._state)
        self.query_one(StatusBar).show_state(self._state)
