"""
The history of one file as a sequence of turning points.

A turning point is a commit on the first-parent chain of HEAD that changed
the tracked file, either its content or its path. The builder follows the
file backwards through renames by matching each commit's deltas against the
(content id, path) identity the file had just after that commit.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, NewType, Optional, Tuple

from pygit2.enums import DeltaStatus

from .diff import Diff
from .git import GitRepository

logger = logging.getLogger(__name__)

PointIndex = NewType("PointIndex", int)


class ChangeStatus(enum.Enum):
    ADDED = "Added"
    MODIFIED = "Modified"
    RENAMED = "Renamed"

    @classmethod
    def from_delta_status(cls, status) -> "ChangeStatus":
        status = DeltaStatus(status)
        if status == DeltaStatus.ADDED:
            return cls.ADDED
        if status == DeltaStatus.RENAMED:
            return cls.RENAMED
        # anything else matching on the new side (modified, type change,
        # copied) is shown as a modification
        return cls.MODIFIED


@dataclass(frozen=True)
class TurningPoint:
    index: PointIndex
    commit_id: object
    status: ChangeStatus
    old_id: Optional[object]
    new_id: object
    old_path: Optional[str]
    new_path: str
    diff: Diff = field(compare=False, repr=False)


class History:
    """Newest-first, non-empty sequence of turning points."""

    def __init__(self, points: Iterable[TurningPoint]) -> None:
        self._points: Tuple[TurningPoint, ...] = tuple(points)
        if not self._points:
            raise ValueError("a history needs at least one turning point")
        for i, point in enumerate(self._points):
            if point.index != i:
                raise ValueError(f"turning point at position {i} carries index {point.index}")

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[TurningPoint]:
        return iter(self._points)

    def __getitem__(self, index: int) -> TurningPoint:
        return self._points[index]

    def latest(self) -> TurningPoint:
        return self._points[0]

    def earliest(self) -> TurningPoint:
        return self._points[-1]

    def backward(self, point: TurningPoint) -> Optional[TurningPoint]:
        """The next older turning point, or None at the earliest one."""
        i = point.index + 1
        return self._points[i] if i < len(self._points) else None

    def forward(self, point: TurningPoint) -> Optional[TurningPoint]:
        """The next newer turning point, or None at the latest one."""
        i = point.index - 1
        return self._points[i] if i >= 0 else None

    def is_latest(self, point: TurningPoint) -> bool:
        return point.index == 0

    def is_earliest(self, point: TurningPoint) -> bool:
        return point.index == len(self._points) - 1


def build_history(repo: GitRepository, path: str) -> History:
    """Build the history of the file at `path` (relative to the work tree).

    Raises RepositoryEmptyError, FileNotFoundOnHeadError or NotAFileError.
    """
    commits = repo.first_parent_commits()
    file_id = repo.blob_entry(commits[0], path)
    file_path: Optional[str] = path

    points: List[TurningPoint] = []
    for commit in commits:
        if file_path is None:
            # the file was added in a newer commit; nothing older can match
            break
        delta = None
        for candidate in repo.tree_deltas(commit):
            if candidate.new_file.id == file_id and candidate.new_file.path == file_path:
                delta = candidate
                break
        if delta is None:
            continue

        status = ChangeStatus.from_delta_status(delta.status)
        if status is ChangeStatus.ADDED:
            old_id, old_path = None, None
        else:
            old_id, old_path = delta.old_file.id, delta.old_file.path
        point = TurningPoint(
            index=PointIndex(len(points)),
            commit_id=commit.id,
            status=status,
            old_id=old_id,
            new_id=delta.new_file.id,
            old_path=old_path,
            new_path=delta.new_file.path,
            diff=Diff(old_id, delta.new_file.id, repo),
        )
        logger.debug(
            f"build_history: {commit.short_id} {status.value} {old_path} -> {point.new_path}"
        )
        points.append(point)
        file_id, file_path = old_id, old_path

    return History(points)
