"""
Builds the rich renderables shown by the app.

Nothing here changes the navigation state or the diff; every function only
reads them and returns `rich.text.Text`.
"""
from __future__ import annotations

import logging
from typing import List

from rich.text import Text

from .commit import CommitMetadata
from .config import Settings, UserType
from .diff import DiffLine
from .history import ChangeStatus, History, TurningPoint
from .state import NavigationState

logger = logging.getLogger(__name__)

OLDER_SYMBOL = "<<"
NEWER_SYMBOL = ">>"
SCROLL_UP_SYMBOL = "▲"
SCROLL_DOWN_SYMBOL = "▼"
BINARY_PLACEHOLDER = "Binary file (no text diff available)"

TAG_STYLES = {
    "-": "red",
    "+": "green",
    " ": "",
}


def navi_text(state: NavigationState, history: History, older: bool) -> Text:
    """One navigation gutter: history arrows in the middle, scroll marks at the ends.

    The left gutter says whether an older commit exists and whether the diff
    can scroll up; the right one covers newer commits and scrolling down.
    """
    if older:
        symbol = "" if state.is_earliest(history) else OLDER_SYMBOL
        edge = SCROLL_UP_SYMBOL if state.can_move_up(history) else ""
        rows = [edge, symbol, symbol, ""]
    else:
        symbol = "" if state.is_latest(history) else NEWER_SYMBOL
        edge = SCROLL_DOWN_SYMBOL if state.can_move_down(history) else ""
        rows = ["", symbol, symbol, edge]
    return Text("\n".join(rows))


def commit_title(point: TurningPoint, metadata: CommitMetadata, settings: Settings) -> Text:
    """` Commit: <hash> <date> (<refs>) @<name> `"""
    commit = metadata.commit(point.commit_id)
    references = metadata.references(point.commit_id)

    commit_hash = commit.long_id if settings.full_hash else commit.short_id
    if settings.date_of is UserType.AUTHOR:
        date = commit.author_date
    else:
        date = commit.committer_date
    if settings.name_of is UserType.AUTHOR:
        name = commit.author_name
    else:
        name = commit.committer_name

    title = Text(" Commit: ")
    title.append(commit_hash, style="yellow")
    title.append(" ")
    title.append(date.strftime(settings.date_format))
    title.append(" ")
    if not references.is_empty():
        title.append("(")
        for i, ref_name in enumerate(references.names()):
            if i:
                title.append(", ")
            title.append(ref_name, style="bold cyan")
        title.append(") ")
    title.append(f"@{name}", style="bold")
    title.append(" ")
    return title


def commit_body(point: TurningPoint, metadata: CommitMetadata) -> Text:
    commit = metadata.commit(point.commit_id)
    body = Text(commit.summary)
    body.append("\n")
    if point.status is ChangeStatus.RENAMED:
        body.append(f"* {point.status.value}: {point.old_path} -> {point.new_path}")
    else:
        body.append(f"* {point.status.value}: {point.new_path}")
    return body


def diff_line_text(line: DiffLine, number_width: int, settings: Settings) -> Text:
    """`old new|s text` with numbers right-aligned to `number_width`."""
    old_number = "" if line.old_line_number is None else str(line.old_line_number)
    new_number = "" if line.new_line_number is None else str(line.new_line_number)
    style = TAG_STYLES[line.sign]

    text = Text()
    text.append(f"{old_number:>{number_width}} {new_number:>{number_width}}|", style="dim")
    text.append(f"{line.sign} ", style=style)
    column = 0
    for part in line.parts:
        # tab stops count from the start of the line text, not of the part
        fragment = (" " * column + part.text).expandtabs(settings.tab_size)[column:]
        column += len(fragment)
        if part.emphasized and settings.emphasize_diff:
            text.append(fragment, style=f"{style} reverse".strip())
        else:
            text.append(fragment, style=style)
    return text


def diff_text(state: NavigationState, history: History, settings: Settings) -> Text:
    """The visible window of the current diff."""
    lines = state.diff(history).lines()
    if lines is None:
        return Text(BINARY_PLACEHOLDER, style="italic")
    window = lines[state.line_index:state.line_index + state.diff_height]
    rendered: List[Text] = [
        diff_line_text(line, state.max_line_number_len, settings) for line in window
    ]
    text = Text("\n").join(rendered)
    # one diff line per row, long lines are cut at the right edge
    text.no_wrap = True
    text.overflow = "crop"
    return text
