"""
Read-only access to a git repository through pygit2.

Everything the history builder, the diff engine and the commit metadata need
from the repository goes through `GitRepository`, so the rest of the package
never touches pygit2 objects directly.
"""
from __future__ import annotations

import logging
import os
from typing import Iterator, List, Optional

import pygit2
from pygit2.enums import DiffFind, ObjectType, SortMode

from .errors import (
    BareRepositoryError,
    FileNotFoundOnHeadError,
    NotAFileError,
    RepositoryAccessError,
    RepositoryEmptyError,
    RepositoryNotFoundError,
)

logger = logging.getLogger(__name__)


class GitRepository:
    """A thin wrapper around `pygit2.Repository`."""

    def __init__(self, repo: pygit2.Repository) -> None:
        self.repo = repo

    @classmethod
    def discover(cls, start: Optional[str] = None) -> "GitRepository":
        """Open the non-bare repository containing `start` (default: cwd)."""
        start = os.path.abspath(start or os.getcwd())
        try:
            gitdir = pygit2.discover_repository(start)
        except KeyError:
            gitdir = None
        if not gitdir:
            raise RepositoryNotFoundError(
                f"Failed to open a git repository for '{start}'"
            )
        repo = pygit2.Repository(gitdir)
        if repo.is_bare:
            raise BareRepositoryError("git-hist does not support a bare repository")
        logger.debug(f"GitRepository.discover: gitdir={gitdir} workdir={repo.workdir}")
        return cls(repo)

    @property
    def workdir(self) -> str:
        return os.path.abspath(self.repo.workdir)

    def relative_path(self, file_path: str, cwd: Optional[str] = None) -> str:
        """Return `file_path` (relative to `cwd`) relative to the work tree root.

        The result uses forward slashes, which is how tree entries are named.
        """
        full = os.path.abspath(os.path.join(cwd or os.getcwd(), file_path))
        rel = os.path.relpath(full, self.workdir)
        return rel.replace(os.sep, "/")

    def first_parent_commits(self) -> List[pygit2.Commit]:
        """Commits reachable from HEAD following first parents only, newest first."""
        if self.repo.head_is_unborn:
            raise RepositoryEmptyError("Failed to get any commit")
        walker = self.repo.walk(self.repo.head.target, SortMode.NONE)
        walker.simplify_first_parent()
        commits = list(walker)
        if not commits:
            raise RepositoryEmptyError("Failed to get any commit")
        logger.debug(f"GitRepository.first_parent_commits: {len(commits)} commits")
        return commits

    def blob_entry(self, commit: pygit2.Commit, path: str) -> pygit2.Oid:
        """Return the id of the blob at `path` in the tree of `commit`."""
        try:
            entry = commit.tree[path]
        except KeyError:
            raise FileNotFoundOnHeadError(
                f"Failed to find the file '{path}' on HEAD"
            ) from None
        if entry.type != ObjectType.BLOB:
            raise NotAFileError(f"Failed to find the path '{path}' as a blob on HEAD")
        return entry.id

    def tree_deltas(self, commit: pygit2.Commit) -> Iterator[pygit2.DiffDelta]:
        """Deltas between the first parent's tree and the commit's tree.

        A root commit is compared against the empty tree. Renames are
        detected, so a moved file shows up as a single RENAMED delta.
        """
        if commit.parents:
            diff = self.repo.diff(commit.parents[0].tree, commit.tree)
        else:
            # swap so that the commit's tree is the new side
            diff = commit.tree.diff_to_tree(swap=True)
        diff.find_similar(flags=DiffFind.FIND_RENAMES)
        return iter(diff.deltas)

    def _lookup(self, oid: pygit2.Oid, kind: type):
        try:
            obj = self.repo[oid]
        except (KeyError, ValueError, pygit2.GitError) as exc:
            raise RepositoryAccessError(f"Failed to look up object {oid}: {exc}") from exc
        if not isinstance(obj, kind):
            raise RepositoryAccessError(
                f"Object {oid} is a {type(obj).__name__}, expected {kind.__name__}"
            )
        return obj

    def blob_content(self, oid: pygit2.Oid) -> bytes:
        return self._lookup(oid, pygit2.Blob).data

    def is_binary(self, oid: pygit2.Oid) -> bool:
        return self._lookup(oid, pygit2.Blob).is_binary

    def find_commit(self, oid: pygit2.Oid) -> pygit2.Commit:
        return self._lookup(oid, pygit2.Commit)

    def references(self) -> List[pygit2.Reference]:
        return list(self.repo.references.objects)

    def peel_to_commit_id(self, ref: pygit2.Reference) -> Optional[pygit2.Oid]:
        """Commit id a direct reference points at, looking through annotated tags."""
        target = ref.target
        if not isinstance(target, pygit2.Oid):
            return None
        obj = self.repo.get(target)
        while isinstance(obj, pygit2.Tag):
            target = obj.target
            obj = self.repo.get(target)
        return target

    def head(self) -> pygit2.Reference:
        return self.repo.head

    @property
    def head_is_detached(self) -> bool:
        return self.repo.head_is_detached
