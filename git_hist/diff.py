"""
Line and inline diffs for a single turning point.

A `Diff` fetches the old and new blob once, aligns them line by line with
`difflib.SequenceMatcher`, and then runs a second, token-level match over
every changed region so that the changed words inside a replaced line can be
emphasized. The scroll-bound and index-correlation queries used by the
navigation state live here as well.
"""
from __future__ import annotations

import difflib
import enum
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

# Height of the commit-info panel (rounded border + summary + change status).
CHROME_HEIGHT = 4

# Changed regions whose token similarity ratio is below this get no emphasis.
INLINE_SIMILARITY_CUTOFF = 0.5

_TOKEN_RE = re.compile(r"\w+|\s+|[^\w\s]")
_LINE_RE = re.compile(r"(?<=\n)")


class BlobStore(Protocol):
    def blob_content(self, oid) -> bytes: ...

    def is_binary(self, oid) -> bool: ...


class ChangeTag(enum.Enum):
    DELETE = "-"
    INSERT = "+"
    EQUAL = " "


@dataclass(frozen=True)
class DiffLinePart:
    text: str
    emphasized: bool = False


@dataclass(frozen=True)
class DiffLine:
    index: int
    old_index: Optional[int]
    new_index: Optional[int]
    tag: ChangeTag
    parts: Tuple[DiffLinePart, ...]

    @property
    def old_line_number(self) -> Optional[int]:
        return None if self.old_index is None else self.old_index + 1

    @property
    def new_line_number(self) -> Optional[int]:
        return None if self.new_index is None else self.new_index + 1

    @property
    def sign(self) -> str:
        return self.tag.value

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.parts)


@dataclass(frozen=True)
class IndexPair:
    # distance from the top of the visible diff to the anchoring line
    relative_index: int
    # old_index or new_index of the anchoring line
    partial_index: int


def visible_height(terminal_height: int) -> int:
    """Rows left for the diff panel once the commit-info panel is drawn."""
    return max(0, terminal_height - CHROME_HEIGHT)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _split_lines(text: str) -> List[str]:
    """Split on line feeds only, keeping the line endings."""
    lines = _LINE_RE.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _strip_eol(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


def _merge_parts(tokens: Sequence[str], flags: Sequence[bool]) -> Tuple[DiffLinePart, ...]:
    """Join runs of tokens sharing the same emphasis flag into parts."""
    parts: List[DiffLinePart] = []
    for token, flag in zip(tokens, flags):
        if parts and parts[-1].emphasized == flag:
            parts[-1] = DiffLinePart(parts[-1].text + token, flag)
        else:
            parts.append(DiffLinePart(token, flag))
    return tuple(parts)


def inline_parts(
    old_lines: Sequence[str], new_lines: Sequence[str]
) -> Tuple[List[Tuple[DiffLinePart, ...]], List[Tuple[DiffLinePart, ...]]]:
    """Split each line of a changed region into emphasized/plain parts.

    Both sides are tokenized into words, whitespace runs and punctuation.
    The token streams of the whole region are matched at once, so a word that
    moved between two adjacent lines is still recognized as unchanged. Tokens
    outside matching blocks are emphasized.
    """
    old_tokens = [_TOKEN_RE.findall(line) for line in old_lines]
    new_tokens = [_TOKEN_RE.findall(line) for line in new_lines]
    old_flat = [t for tokens in old_tokens for t in tokens]
    new_flat = [t for tokens in new_tokens for t in tokens]

    old_flags = [False] * len(old_flat)
    new_flags = [False] * len(new_flat)
    if old_flat and new_flat:
        matcher = difflib.SequenceMatcher(None, old_flat, new_flat, autojunk=False)
        if matcher.ratio() >= INLINE_SIMILARITY_CUTOFF:
            for tag, i1, i2, j1, j2 in matcher.get_opcodes():
                if tag == "equal":
                    continue
                for i in range(i1, i2):
                    old_flags[i] = True
                for j in range(j1, j2):
                    new_flags[j] = True

    def _regroup(per_line, flags):
        out = []
        pos = 0
        for tokens in per_line:
            out.append(_merge_parts(tokens, flags[pos:pos + len(tokens)]))
            pos += len(tokens)
        return out

    return _regroup(old_tokens, old_flags), _regroup(new_tokens, new_flags)


def compute_diff_lines(old_text: str, new_text: str) -> Tuple[DiffLine, ...]:
    """Align two texts line by line and flatten the result into DiffLines."""
    old_lines = _split_lines(old_text)
    new_lines = _split_lines(new_text)
    old_display = [_strip_eol(line) for line in old_lines]
    new_display = [_strip_eol(line) for line in new_lines]

    lines: List[DiffLine] = []

    def _append(old_index, new_index, tag, parts):
        lines.append(DiffLine(len(lines), old_index, new_index, tag, parts))

    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for offset in range(i2 - i1):
                text = old_display[i1 + offset]
                parts = (DiffLinePart(text),) if text else ()
                _append(i1 + offset, j1 + offset, ChangeTag.EQUAL, parts)
            continue
        old_parts, new_parts = inline_parts(old_display[i1:i2], new_display[j1:j2])
        for offset, parts in enumerate(old_parts):
            _append(i1 + offset, None, ChangeTag.DELETE, parts)
        for offset, parts in enumerate(new_parts):
            _append(None, j1 + offset, ChangeTag.INSERT, parts)
    return tuple(lines)


class Diff:
    """The diff that a turning point introduced to the tracked file.

    `old_id` is None when the file was added. Content is fetched and the
    diff computed on the first call to `lines()`; later calls return the same
    tuple.
    """

    _UNSET = object()

    def __init__(self, old_id, new_id, store: BlobStore) -> None:
        self.old_id = old_id
        self.new_id = new_id
        self._store = store
        self._lines = Diff._UNSET

    def lines(self) -> Optional[Tuple[DiffLine, ...]]:
        """All diff lines, or None when either side is a binary blob."""
        if self._lines is Diff._UNSET:
            self._lines = self._calc_lines()
        return self._lines

    def _calc_lines(self) -> Optional[Tuple[DiffLine, ...]]:
        if self.old_id is None:
            old_binary, old_data = False, b""
        else:
            old_binary = self._store.is_binary(self.old_id)
            old_data = self._store.blob_content(self.old_id)
        new_binary = self._store.is_binary(self.new_id)
        new_data = self._store.blob_content(self.new_id)
        if old_binary or new_binary:
            logger.debug(f"Diff._calc_lines: binary {self.old_id}..{self.new_id}")
            return None
        lines = compute_diff_lines(_decode(old_data), _decode(new_data))
        logger.debug(f"Diff._calc_lines: {self.old_id}..{self.new_id} -> {len(lines)} lines")
        return lines

    @property
    def is_binary(self) -> bool:
        return self.lines() is None

    def _lines_or_empty(self) -> Tuple[DiffLine, ...]:
        return self.lines() or ()

    def __len__(self) -> int:
        return len(self._lines_or_empty())

    def max_line_number_len(self) -> int:
        largest = 0
        for line in self._lines_or_empty():
            for number in (line.old_line_number, line.new_line_number):
                if number is not None and number > largest:
                    largest = number
        return len(str(largest)) if largest else 0

    def allowed_min_index(self) -> int:
        return 0

    def allowed_max_index(self, terminal_height: int, beyond_last_line: bool = False) -> int:
        line_count = len(self)
        if beyond_last_line:
            return max(0, line_count - 1)
        return max(0, line_count - visible_height(terminal_height))

    def can_move_up(self, line_index: int) -> bool:
        return line_index > self.allowed_min_index()

    def can_move_down(self, line_index: int, terminal_height: int, beyond_last_line: bool = False) -> bool:
        return line_index < self.allowed_max_index(terminal_height, beyond_last_line)

    def _nearest_pair(self, line_index: int, side: str) -> IndexPair:
        lines = self._lines_or_empty()
        for line in lines[line_index:]:
            value = getattr(line, side)
            if value is not None:
                return IndexPair(line.index - line_index, value)
        for line in reversed(lines[:line_index]):
            value = getattr(line, side)
            if value is not None:
                return IndexPair(0, value)
        return IndexPair(0, 0)

    def nearest_old_index_pair(self, line_index: int) -> IndexPair:
        """Closest line at or below `line_index` that exists on the old side.

        Falls back to the closest one above it (with a relative index of 0),
        and to (0, 0) when no line has an old side at all.
        """
        return self._nearest_pair(line_index, "old_index")

    def nearest_new_index_pair(self, line_index: int) -> IndexPair:
        return self._nearest_pair(line_index, "new_index")

    def find_index_from_old_index(self, old_index: int) -> Optional[int]:
        for line in self._lines_or_empty():
            if line.old_index == old_index:
                return line.index
        return None

    def find_index_from_new_index(self, new_index: int) -> Optional[int]:
        for line in self._lines_or_empty():
            if line.new_index == new_index:
                return line.index
        return None
