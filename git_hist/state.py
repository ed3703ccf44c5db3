"""
Navigation state: where in the history we are and how far the diff is scrolled.

`NavigationState` is an immutable value. Each transition takes the shared,
read-only `History` and returns a new state (or the same one when the move
is not possible), so the controller only ever swaps its current value.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from .diff import Diff, visible_height
from .history import History, PointIndex, TurningPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationState:
    position: PointIndex
    line_index: int
    terminal_height: int
    # widest line number of any visited diff; never shrinks
    max_line_number_len: int
    beyond_last_line: bool = False

    @classmethod
    def first(cls, history: History, terminal_height: int, beyond_last_line: bool = False) -> "NavigationState":
        point = history.latest()
        return cls(
            position=point.index,
            line_index=0,
            terminal_height=terminal_height,
            max_line_number_len=point.diff.max_line_number_len(),
            beyond_last_line=beyond_last_line,
        )

    def point(self, history: History) -> TurningPoint:
        return history[self.position]

    def diff(self, history: History) -> Diff:
        return self.point(history).diff

    @property
    def diff_height(self) -> int:
        return visible_height(self.terminal_height)

    def _allowed_max_index(self, history: History) -> int:
        return self.diff(history).allowed_max_index(self.terminal_height, self.beyond_last_line)

    def can_move_up(self, history: History) -> bool:
        return self.diff(history).can_move_up(self.line_index)

    def can_move_down(self, history: History) -> bool:
        return self.diff(history).can_move_down(
            self.line_index, self.terminal_height, self.beyond_last_line
        )

    def is_latest(self, history: History) -> bool:
        return history.is_latest(self.point(history))

    def is_earliest(self, history: History) -> bool:
        return history.is_earliest(self.point(history))

    def _with(self, **changes) -> "NavigationState":
        return dataclasses.replace(self, **changes)

    def _moved_to(self, point: TurningPoint, line_index: int) -> "NavigationState":
        return self._with(
            position=point.index,
            line_index=line_index,
            max_line_number_len=max(self.max_line_number_len, point.diff.max_line_number_len()),
        )

    def move_older(self, history: History) -> "NavigationState":
        """Go to the previous turning point, keeping the same logical line on screen.

        The old side of the current diff is the same blob as the new side of
        the older diff, so the anchoring line is looked up by its old index
        here and by its new index there.
        """
        current = self.point(history)
        older = history.backward(current)
        if older is None:
            return self
        pair = current.diff.nearest_old_index_pair(self.line_index)
        target = older.diff.find_index_from_new_index(pair.partial_index)
        line_index = max(0, target - pair.relative_index) if target is not None else 0
        logger.debug(f"NavigationState.move_older: {current.index}->{older.index} line {self.line_index}->{line_index}")
        return self._moved_to(older, line_index)

    def move_newer(self, history: History) -> "NavigationState":
        current = self.point(history)
        newer = history.forward(current)
        if newer is None:
            return self
        pair = current.diff.nearest_new_index_pair(self.line_index)
        target = newer.diff.find_index_from_old_index(pair.partial_index)
        line_index = max(0, target - pair.relative_index) if target is not None else 0
        logger.debug(f"NavigationState.move_newer: {current.index}->{newer.index} line {self.line_index}->{line_index}")
        return self._moved_to(newer, line_index)

    def scroll_line_up(self, history: History) -> "NavigationState":
        if not self.can_move_up(history):
            return self
        return self._with(line_index=self.line_index - 1)

    def scroll_line_down(self, history: History) -> "NavigationState":
        if not self.can_move_down(history):
            return self
        return self._with(line_index=self.line_index + 1)

    def scroll_page_up(self, history: History) -> "NavigationState":
        lowest = self.diff(history).allowed_min_index()
        line_index = min(self.line_index, max(self.line_index - self.diff_height, lowest))
        if line_index == self.line_index:
            return self
        return self._with(line_index=line_index)

    def scroll_page_down(self, history: History) -> "NavigationState":
        highest = self._allowed_max_index(history)
        line_index = max(self.line_index, min(self.line_index + self.diff_height, highest))
        if line_index == self.line_index:
            return self
        return self._with(line_index=line_index)

    def scroll_to_top(self, history: History) -> "NavigationState":
        line_index = min(self.line_index, self.diff(history).allowed_min_index())
        if line_index == self.line_index:
            return self
        return self._with(line_index=line_index)

    def scroll_to_bottom(self, history: History) -> "NavigationState":
        line_index = max(self.line_index, self._allowed_max_index(history))
        if line_index == self.line_index:
            return self
        return self._with(line_index=line_index)

    def resize(self, history: History, terminal_height: int) -> "NavigationState":
        """Take a new terminal height and pull the scroll position back in range."""
        resized = self._with(terminal_height=terminal_height)
        highest = resized._allowed_max_index(history)
        if resized.line_index > highest:
            resized = resized._with(line_index=highest)
        return resized
