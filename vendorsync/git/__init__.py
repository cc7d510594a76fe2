"""Source-control driver interface and its git-executable implementation."""

from __future__ import annotations

from .driver import SourceControlDriver, WorkingCopy
from .errors import GitCommandError, GitTimeoutError
from .subprocess_driver import SubprocessGitDriver

__all__ = [
    "GitCommandError",
    "GitTimeoutError",
    "SourceControlDriver",
    "SubprocessGitDriver",
    "WorkingCopy",
]
