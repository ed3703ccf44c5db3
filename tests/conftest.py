from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import pygit2
import pytest

from git_hist.diff import Diff
from git_hist.errors import RepositoryAccessError
from git_hist.history import ChangeStatus, History, PointIndex, TurningPoint


class RepoBuilder:
    """Creates commits in a real repository through the index."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.repo = pygit2.init_repository(str(path), bare=False, initial_head="main")
        self.time = 1_600_000_000

    def signature(self, name: str, offset: int = 0) -> pygit2.Signature:
        return pygit2.Signature(name, f"{name.lower()}@example.com", self.time + offset, 0)

    def commit(
        self,
        message: str,
        files: Optional[Dict[str, Union[str, bytes]]] = None,
        removed: Iterable[str] = (),
        author: str = "Alice",
        committer: str = "Carol",
        parents: Optional[List[pygit2.Oid]] = None,
        ref: Optional[str] = "HEAD",
    ) -> pygit2.Oid:
        index = self.repo.index
        for name, content in (files or {}).items():
            full = self.path / name
            full.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                content = content.encode("utf-8")
            full.write_bytes(content)
            index.add(name)
        for name in removed:
            index.remove(name)
            (self.path / name).unlink()
        index.write()
        tree = index.write_tree()
        self.time += 3600
        if parents is None:
            parents = [] if self.repo.head_is_unborn else [self.repo.head.target]
        return self.repo.create_commit(
            ref,
            self.signature(author),
            self.signature(committer, offset=60),
            message,
            tree,
            parents,
        )


@pytest.fixture
def builder(tmp_path) -> RepoBuilder:
    return RepoBuilder(tmp_path / "work")


class FakeStore:
    """In-memory blob store keyed by arbitrary ids."""

    def __init__(self, blobs: Optional[Dict[str, bytes]] = None) -> None:
        self.blobs: Dict[str, bytes] = dict(blobs or {})
        self.content_calls = 0
        self.broken = set()

    def add(self, key: str, content: Union[str, bytes]) -> str:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.blobs[key] = content
        return key

    def blob_content(self, oid) -> bytes:
        if oid in self.broken:
            raise RepositoryAccessError(f"missing {oid}")
        self.content_calls += 1
        return self.blobs[oid]

    def is_binary(self, oid) -> bool:
        if oid in self.broken:
            raise RepositoryAccessError(f"missing {oid}")
        return b"\0" in self.blobs[oid]


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


def numbered(count: int, changed: Optional[Dict[int, str]] = None) -> str:
    """`count` lines "line N", with some replaced by `changed`."""
    changed = changed or {}
    return "".join(f"{changed.get(i, f'line {i}')}\n" for i in range(count))


def make_history(store: FakeStore, versions: List[Union[str, bytes]]) -> History:
    """History over file versions given oldest first; the oldest one is Added."""
    keys = [store.add(f"v{i}", text) for i, text in enumerate(versions)]
    points = []
    for position, i in enumerate(reversed(range(len(keys)))):
        old = keys[i - 1] if i > 0 else None
        points.append(
            TurningPoint(
                index=PointIndex(position),
                commit_id=f"c{i}",
                status=ChangeStatus.MODIFIED if old else ChangeStatus.ADDED,
                old_id=old,
                new_id=keys[i],
                old_path="a.txt" if old else None,
                new_path="a.txt",
                diff=Diff(old, keys[i], store),
            )
        )
    return History(points)
