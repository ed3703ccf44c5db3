"""
Runtime settings and logging setup.
"""
from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_DATE_FORMAT = "[%Y-%m-%d]"
DEFAULT_TAB_SIZE = 4

# Debug logging goes to this file when set, never to the terminal.
LOG_ENV_VAR = "GIT_HIST_LOG"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class UserType(enum.Enum):
    AUTHOR = "author"
    COMMITTER = "committer"


@dataclass(frozen=True)
class Settings:
    file_path: str
    full_hash: bool = False
    beyond_last_line: bool = False
    emphasize_diff: bool = False
    name_of: UserType = UserType.AUTHOR
    date_of: UserType = UserType.AUTHOR
    date_format: str = DEFAULT_DATE_FORMAT
    tab_size: int = DEFAULT_TAB_SIZE


def configure_logging(log_file: Optional[str] = None) -> None:
    """Send debug logging to `log_file` (or $GIT_HIST_LOG), else discard it."""
    log_file = log_file or os.environ.get(LOG_ENV_VAR)
    if log_file:
        logging.basicConfig(filename=log_file, level=logging.DEBUG, format=LOG_FORMAT)
    else:
        logging.getLogger("git_hist").addHandler(logging.NullHandler())
