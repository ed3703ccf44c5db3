"""
Exceptions raised by git-hist.
"""
from __future__ import annotations


class GitHistError(Exception):
    """Base class for all git-hist errors."""


class SetupError(GitHistError):
    """A failure before the interactive view starts.

    These are reported to the user and the process exits non-zero. The
    terminal mode is never changed when one of these is raised.
    """


class RepositoryNotFoundError(SetupError):
    pass


class BareRepositoryError(SetupError):
    pass


class RepositoryEmptyError(SetupError):
    pass


class FileNotFoundOnHeadError(SetupError):
    pass


class NotAFileError(SetupError):
    pass


class RepositoryAccessError(GitHistError):
    """An object lookup failed while a session was already running."""
