"""
Command line entry point.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import __version__
from .app import GitHistApp
from .commit import CommitMetadata
from .config import DEFAULT_DATE_FORMAT, DEFAULT_TAB_SIZE, Settings, UserType, configure_logging
from .errors import GitHistError
from .git import GitRepository
from .history import History, build_history

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-hist",
        description="Browse the git history of a file on a terminal.",
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"%(prog)s {__version__}",
        help="Print version information",
    )
    parser.add_argument(
        "--full-hash", action="store_true",
        help="Show full commit hashes instead of abbreviated commit hashes",
    )
    parser.add_argument(
        "--beyond-last-line", action="store_true",
        help="Let the diff view scroll beyond the last line",
    )
    parser.add_argument(
        "--emphasize-diff", action="store_true",
        help="Emphasize the changed parts inside modified lines",
    )
    users = [user.value for user in UserType]
    parser.add_argument(
        "--name-of", choices=users, default=UserType.AUTHOR.value, metavar="{author,committer}",
        help="Show the name of the author or the committer (default: author)",
    )
    parser.add_argument(
        "--date-of", choices=users, default=UserType.AUTHOR.value, metavar="{author,committer}",
        help="Show the date of the author or the committer (default: author)",
    )
    parser.add_argument(
        "--date-format", default=DEFAULT_DATE_FORMAT, metavar="FORMAT",
        help=f"strftime format for commit dates (default: {DEFAULT_DATE_FORMAT!r})",
    )
    parser.add_argument(
        "--tab-size", type=_positive_int, default=DEFAULT_TAB_SIZE, metavar="N",
        help=f"Number of columns a tab expands to (default: {DEFAULT_TAB_SIZE})",
    )
    parser.add_argument("file", metavar="FILE", help="Target file path")
    return parser


def parse_settings(argv: Optional[List[str]] = None) -> Settings:
    args = build_parser().parse_args(argv)
    return Settings(
        file_path=args.file,
        full_hash=args.full_hash,
        beyond_last_line=args.beyond_last_line,
        emphasize_diff=args.emphasize_diff,
        name_of=UserType(args.name_of),
        date_of=UserType(args.date_of),
        date_format=args.date_format,
        tab_size=args.tab_size,
    )


def load_history(settings: Settings, cwd: Optional[str] = None):
    """Open the repository around `cwd` and build the file's history.

    Returns (repository, history). Every failure is a GitHistError.
    """
    cwd = cwd or os.getcwd()
    repo = GitRepository.discover(cwd)
    path = repo.relative_path(settings.file_path, cwd)
    logger.debug(f"load_history: file={settings.file_path} path={path}")
    history: History = build_history(repo, path)
    logger.debug(f"load_history: {len(history)} turning points")
    return repo, history


def main(argv: Optional[List[str]] = None) -> int:
    settings = parse_settings(argv)
    configure_logging()
    try:
        repo, history = load_history(settings)
    except GitHistError as exc:
        print(f"git-hist: {exc}", file=sys.stderr)
        return 1

    app = GitHistApp(history, CommitMetadata(repo), settings)
    app.run()
    return app.return_code or 0


def run() -> None:
    sys.exit(main())
