"""
Human-readable facts about commits, resolved lazily and cached.
"""
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .git import GitRepository

logger = logging.getLogger(__name__)

HEAD_NAME = "HEAD"

LOCAL_BRANCH_PREFIX = "refs/heads/"
REMOTE_BRANCH_PREFIX = "refs/remotes/"
TAG_PREFIX = "refs/tags/"


def _local_time(seconds: int) -> datetime.datetime:
    return datetime.datetime.fromtimestamp(seconds, tz=datetime.timezone.utc).astimezone()


def _summary(message: str) -> str:
    """First paragraph of a commit message, its lines joined by spaces."""
    paragraph = []
    for line in message.strip().split("\n"):
        if not line.strip():
            break
        paragraph.append(line.strip())
    return " ".join(paragraph)


@dataclass(frozen=True)
class CommitRef:
    id: object
    short_id: str
    long_id: str
    author_name: str
    author_date: datetime.datetime
    committer_name: str
    committer_date: datetime.datetime
    summary: str


@dataclass(frozen=True)
class LocalBranch:
    name: str
    is_head: bool = False

    def __str__(self) -> str:
        if self.is_head:
            return f"{HEAD_NAME} -> {self.name}"
        return self.name


@dataclass(frozen=True)
class ReferenceSet:
    local_branches: Tuple[LocalBranch, ...] = ()
    remote_branches: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    # HEAD is detached and points at this commit
    is_head: bool = False

    def is_empty(self) -> bool:
        return not (self.local_branches or self.remote_branches or self.tags or self.is_head)

    def head_names(self) -> List[str]:
        return [HEAD_NAME] if self.is_head else []

    def local_branch_names(self) -> List[str]:
        return [str(branch) for branch in self.local_branches]

    def remote_branch_names(self) -> List[str]:
        return list(self.remote_branches)

    def tag_names(self) -> List[str]:
        return [f"tag: {tag}" for tag in self.tags]

    def names(self) -> List[str]:
        """Every name in display order: HEAD, branches, remotes, tags."""
        return (
            self.head_names()
            + self.local_branch_names()
            + self.remote_branch_names()
            + self.tag_names()
        )


@dataclass
class CommitMetadata:
    """Resolves CommitRefs and ReferenceSets, each at most once per commit."""

    repo: GitRepository
    _commits: Dict[object, CommitRef] = field(default_factory=dict, repr=False)
    _references: Dict[object, ReferenceSet] = field(default_factory=dict, repr=False)

    def commit(self, commit_id) -> CommitRef:
        ref = self._commits.get(commit_id)
        if ref is None:
            ref = self._resolve_commit(commit_id)
            self._commits[commit_id] = ref
        return ref

    def references(self, commit_id) -> ReferenceSet:
        refs = self._references.get(commit_id)
        if refs is None:
            refs = self._resolve_references(commit_id)
            self._references[commit_id] = refs
        return refs

    def _resolve_commit(self, commit_id) -> CommitRef:
        commit = self.repo.find_commit(commit_id)
        return CommitRef(
            id=commit.id,
            short_id=commit.short_id,
            long_id=str(commit.id),
            author_name=commit.author.name or "",
            author_date=_local_time(commit.author.time),
            committer_name=commit.committer.name or "",
            committer_date=_local_time(commit.committer.time),
            summary=_summary(commit.message or ""),
        )

    def _resolve_references(self, commit_id) -> ReferenceSet:
        head = self.repo.head()
        local_branches: List[LocalBranch] = []
        remote_branches: List[str] = []
        tags: List[str] = []
        for ref in self.repo.references():
            if self.repo.peel_to_commit_id(ref) != commit_id:
                continue
            name = ref.name
            if name.startswith(LOCAL_BRANCH_PREFIX):
                local_branches.append(LocalBranch(ref.shorthand, name == head.name))
            elif name.startswith(REMOTE_BRANCH_PREFIX):
                remote_branches.append(ref.shorthand)
            elif name.startswith(TAG_PREFIX):
                tags.append(ref.shorthand)
            else:
                logger.debug(f"CommitMetadata._resolve_references: ignoring {name}")
        is_head = self.repo.head_is_detached and head.target == commit_id
        refs = ReferenceSet(tuple(local_branches), tuple(remote_branches), tuple(tags), is_head)
        logger.debug(f"CommitMetadata._resolve_references: {commit_id} -> {refs.names()}")
        return refs
