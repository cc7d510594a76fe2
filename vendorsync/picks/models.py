"""Domain models for upstream picks and their destinations."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

if typ.TYPE_CHECKING:
    from vendorsync.forks.models import ForkMapping
    from vendorsync.github.events import PushEvent

SHORT_ID_LENGTH = 7
WORKING_BRANCH_PREFIX = "auto-pick"


@dataclasses.dataclass(frozen=True, slots=True)
class PushCommit:
    """A commit as delivered in a push notification."""

    id: str
    message: str
    author: str
    source_repository: str


def push_commits(event: PushEvent) -> list[PushCommit]:
    """Return the commits of ``event`` in push order.

    The push sender is recorded as the author of every commit, and the
    pushed repository's web URL as the source patches are fetched from.
    """
    return [
        PushCommit(
            id=commit.id,
            message=commit.message,
            author=event.sender.login,
            source_repository=event.repository.html_url,
        )
        for commit in event.commits
    ]


@dataclasses.dataclass(frozen=True, slots=True)
class DestinationKey:
    """Fork repository and branch a set of picks is proposed against."""

    fork_repository: str
    branch: str

    def __str__(self) -> str:
        """Render as ``repository#branch``."""
        return f"{self.fork_repository}#{self.branch}"


@dataclasses.dataclass(frozen=True, slots=True)
class PickCommit:
    """An upstream cherry-pick resolved to its fork mapping.

    Attributes
    ----------
    id
        Commit identifier in the source repository.
    source_repository
        Web URL of the source repository.
    mapping
        Fork the pick should be proposed to.
    author
        Login credited in the pull request body.
    message
        Trimmed original commit message.

    """

    id: str
    source_repository: str
    mapping: ForkMapping
    author: str
    message: str

    @property
    def destination(self) -> DestinationKey:
        """Return the fork/branch this pick belongs to."""
        return DestinationKey(
            fork_repository=self.mapping.fork_repository,
            branch=self.mapping.fork_default_branch,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class DestinationGroup:
    """Picks from one push sharing a destination, in push order."""

    key: DestinationKey
    commits: tuple[PickCommit, ...]

    def __post_init__(self) -> None:
        """Reject empty groups and commits bound for another destination."""
        if not self.commits:
            msg = f"destination group {self.key} has no commits"
            raise ValueError(msg)
        for commit in self.commits:
            if commit.destination != self.key:
                msg = (
                    f"commit {commit.id} belongs to {commit.destination}, "
                    f"not {self.key}"
                )
                raise ValueError(msg)

    @property
    def mapping(self) -> ForkMapping:
        """Return the fork mapping shared by the group."""
        return self.commits[0].mapping

    @property
    def short_id(self) -> str:
        """Return the abbreviated identifier of the first commit."""
        return self.commits[0].id[:SHORT_ID_LENGTH]

    @property
    def working_branch(self) -> str:
        """Return the branch name the picks are applied on.

        Derived only from the base branch and :attr:`short_id`, so a
        redelivered push produces the same name.
        """
        return f"{WORKING_BRANCH_PREFIX}-{self.key.branch}-{self.short_id}"

    @property
    def source_repository(self) -> str:
        """Return the repository the picks were pushed to."""
        return self.commits[-1].source_repository

    @property
    def authors(self) -> list[str]:
        """Return distinct commit authors in push order."""
        return list(dict.fromkeys(commit.author for commit in self.commits))


class PickStatus(enum.StrEnum):
    """Final state of one destination group."""

    CREATED = "created"
    DRY_RUN = "dry_run"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True, slots=True)
class PickOutcome:
    """What happened to one destination group."""

    key: DestinationKey
    status: PickStatus
    pull_request_number: int | None = None
    error: Exception | None = None
