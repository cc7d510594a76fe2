"""Source-control capability interface used by the pick workflow.

The workflow only ever needs a handful of git operations on a throwaway
clone. Keeping them behind this protocol lets tests drive the workflow with
an in-memory fake instead of spawning processes.
"""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


@dataclasses.dataclass(frozen=True, slots=True)
class WorkingCopy:
    """A disposable clone owned by exactly one pick task.

    Attributes
    ----------
    path
        Directory holding the clone.
    repository
        ``owner/name`` slug the clone was made from.

    """

    path: Path
    repository: str


class SourceControlDriver(typ.Protocol):
    """Operations the pick workflow performs on a fork clone."""

    async def clone(self, repository: str) -> WorkingCopy:
        """Clone ``repository`` (an ``owner/name`` slug) into a new directory."""
        ...

    async def set_config(self, copy: WorkingCopy, key: str, value: str) -> None:
        """Set a repository-local git configuration value."""
        ...

    async def checkout(self, copy: WorkingCopy, branch: str) -> None:
        """Check out an existing branch."""
        ...

    async def create_branch(self, copy: WorkingCopy, branch: str) -> None:
        """Create ``branch`` at HEAD and check it out."""
        ...

    async def apply_patch(
        self, copy: WorkingCopy, patch: str, *, strip_count: int
    ) -> None:
        """Apply an mbox patch as a commit, three-way merging when needed."""
        ...

    async def push(self, copy: WorkingCopy, repository: str, branch: str) -> None:
        """Push ``branch`` to the ``owner/name`` repository ``repository``."""
        ...

    async def cleanup(self, copy: WorkingCopy) -> None:
        """Remove the clone from disk."""
        ...
