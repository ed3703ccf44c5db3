"""
Textual application: paints the dashboard and maps keys to state transitions.
"""
from __future__ import annotations

import logging
import traceback
from typing import Callable, Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Static

from . import dashboard
from .commit import CommitMetadata
from .config import Settings
from .diff import CHROME_HEIGHT
from .errors import RepositoryAccessError
from .history import History
from .state import NavigationState

logger = logging.getLogger(__name__)


class GitHistApp(App):
    """Full-screen view of one file's history.

    The top row is the commit-info panel between the two navigation
    gutters; the rest of the screen is the diff of the current commit.
    """

    TITLE = "git-hist"
    ENABLE_COMMAND_PALETTE = False

    CSS = f"""
Screen {{
    overflow: hidden;
    scrollbar-size: 0 0;
}}
#commit-row {{
    height: {CHROME_HEIGHT};
}}
#older-navi, #newer-navi {{
    width: 2;
    height: {CHROME_HEIGHT};
}}
#commit-info {{
    width: 1fr;
    height: {CHROME_HEIGHT};
    border: round white;
    padding: 0 1;
    margin: 0 1;
}}
#diff {{
    height: 1fr;
    overflow: hidden;
}}
"""

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("ctrl+d", "quit", "Quit", show=False, priority=True),
        Binding("left", "move_older", "Older", priority=True),
        Binding("right", "move_newer", "Newer", priority=True),
        Binding("up", "scroll_line_up", show=False, priority=True),
        Binding("down", "scroll_line_down", show=False, priority=True),
        Binding("pageup", "scroll_page_up", show=False, priority=True),
        Binding("pagedown", "scroll_page_down", show=False, priority=True),
        Binding("home", "scroll_to_top", show=False, priority=True),
        Binding("end", "scroll_to_bottom", show=False, priority=True),
    ]

    def __init__(self, history: History, metadata: CommitMetadata, settings: Settings, **kwargs) -> None:
        super().__init__(**kwargs)
        self.history = history
        self.metadata = metadata
        self.settings = settings
        self.state: Optional[NavigationState] = None

    def compose(self) -> ComposeResult:
        with Vertical(id="root"):
            with Horizontal(id="commit-row"):
                yield Static(id="older-navi")
                yield Static(id="commit-info")
                yield Static(id="newer-navi")
            yield Static(id="diff")

    def on_mount(self) -> None:
        try:
            self.state = NavigationState.first(
                self.history, self.size.height, self.settings.beyond_last_line
            )
            self.refresh_dashboard()
        except RepositoryAccessError as exc:
            self._fail(exc)

    def on_resize(self, event: events.Resize) -> None:
        height = event.size.height
        logger.debug(f"GitHistApp.on_resize: height={height}")
        self._transition(lambda state: state.resize(self.history, height))

    def _fail(self, exc: Exception) -> None:
        logger.debug(f"GitHistApp: repository access failed: {exc}")
        logger.debug(traceback.format_exc())
        self.exit(return_code=1, message=f"git-hist: {exc}")

    def _transition(self, step: Callable[[NavigationState], NavigationState]) -> None:
        if self.state is None:
            return
        try:
            next_state = step(self.state)
            if next_state is self.state:
                return
            self.state = next_state
            self.refresh_dashboard()
        except RepositoryAccessError as exc:
            self._fail(exc)

    def refresh_dashboard(self) -> None:
        """Repaint every panel from the current state."""
        state = self.state
        point = state.point(self.history)
        self.query_one("#older-navi", Static).update(dashboard.navi_text(state, self.history, older=True))
        self.query_one("#newer-navi", Static).update(dashboard.navi_text(state, self.history, older=False))
        info = self.query_one("#commit-info", Static)
        info.border_title = dashboard.commit_title(point, self.metadata, self.settings)
        info.update(dashboard.commit_body(point, self.metadata))
        self.query_one("#diff", Static).update(dashboard.diff_text(state, self.history, self.settings))

    def action_move_older(self) -> None:
        self._transition(lambda state: state.move_older(self.history))

    def action_move_newer(self) -> None:
        self._transition(lambda state: state.move_newer(self.history))

    def action_scroll_line_up(self) -> None:
        self._transition(lambda state: state.scroll_line_up(self.history))

    def action_scroll_line_down(self) -> None:
        self._transition(lambda state: state.scroll_line_down(self.history))

    def action_scroll_page_up(self) -> None:
        self._transition(lambda state: state.scroll_page_up(self.history))

    def action_scroll_page_down(self) -> None:
        self._transition(lambda state: state.scroll_page_down(self.history))

    def action_scroll_to_top(self) -> None:
        self._transition(lambda state: state.scroll_to_top(self.history))

    def action_scroll_to_bottom(self) -> None:
        self._transition(lambda state: state.scroll_to_bottom(self.history))
