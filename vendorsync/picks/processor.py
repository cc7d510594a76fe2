"""Group the upstream picks of a push by destination and run them.

Commits are classified and resolved one by one, in push order. Commits that
are not picks, or whose repository has no usable fork mapping, are logged
and skipped; they never fail the push. The remaining picks are grouped by
fork repository and branch, and each group is handed to a
:class:`PickRunner`. Groups run concurrently up to a bound; within a group
the runner applies patches in order.
"""

from __future__ import annotations

import asyncio
import enum
import typing as typ

from vendorsync.forks.resolver import resolve_fork
from vendorsync.logging import get_logger, log_exception

from .classifier import classify_commit
from .models import (
    DestinationGroup,
    DestinationKey,
    PickCommit,
    PickOutcome,
    PickStatus,
    PushCommit,
    push_commits,
)
from .observability import PickEventLogger

if typ.TYPE_CHECKING:
    from vendorsync.forks.models import ForkMappingTable
    from vendorsync.github.events import PushEvent

logger = get_logger(__name__)

_DEFAULT_MAX_CONCURRENT_GROUPS = 4


class SkipReason(enum.StrEnum):
    """Why a pushed commit is not picked."""

    NOT_UPSTREAM = "not_upstream"
    NO_MAPPING = "no_fork_mapping"
    NO_FORK = "fork_repository_not_set"


class PickRunner(typ.Protocol):
    """Anything that can take a destination group to completion."""

    async def run(self, group: DestinationGroup) -> PickOutcome:
        """Process ``group`` and report the outcome."""
        ...


def resolve_pick(
    commit: PushCommit, table: ForkMappingTable
) -> PickCommit | SkipReason:
    """Classify and resolve one commit.

    Returns the :class:`PickCommit` when the commit is an upstream pick for a
    repository with a configured fork, otherwise the reason it is skipped.
    """
    classified = classify_commit(commit.message)
    if classified is None:
        return SkipReason.NOT_UPSTREAM

    mapping = resolve_fork(classified.short_name, table)
    if mapping is None:
        return SkipReason.NO_MAPPING
    if not mapping.has_fork:
        return SkipReason.NO_FORK

    return PickCommit(
        id=commit.id,
        source_repository=commit.source_repository,
        mapping=mapping,
        author=commit.author,
        message=classified.message,
    )


def group_push(
    event: PushEvent,
    table: ForkMappingTable,
    *,
    event_logger: PickEventLogger | None = None,
) -> dict[DestinationKey, DestinationGroup]:
    """Return the push's picks grouped by destination, each in push order."""
    events = event_logger or PickEventLogger()
    pending: dict[DestinationKey, list[PickCommit]] = {}

    for commit in push_commits(event):
        result = resolve_pick(commit, table)
        if isinstance(result, SkipReason):
            events.log_commit_skipped(commit, result)
            continue
        pending.setdefault(result.destination, []).append(result)

    return {
        key: DestinationGroup(key=key, commits=tuple(commits))
        for key, commits in pending.items()
    }


class PushEventProcessor:
    """Fan a push out into one pick run per destination group."""

    def __init__(
        self,
        table: ForkMappingTable,
        runner: PickRunner,
        *,
        max_concurrent_groups: int = _DEFAULT_MAX_CONCURRENT_GROUPS,
        event_logger: PickEventLogger | None = None,
    ) -> None:
        """Bind the mapping table and the runner used for every group."""
        if max_concurrent_groups < 1:
            msg = f"max_concurrent_groups must be positive, got {max_concurrent_groups}"
            raise ValueError(msg)
        self._table = table
        self._runner = runner
        self._max_concurrent_groups = max_concurrent_groups
        self._events = event_logger or PickEventLogger()

    async def process(self, event: PushEvent) -> list[PickOutcome]:
        """Group ``event`` and wait for every group to finish.

        Returns
        -------
        list[PickOutcome]
            One outcome per destination group; empty when the push carried
            no usable picks.

        """
        self._events.log_push_received(
            event.repository.html_url, event.ref, len(event.commits)
        )
        groups = group_push(event, self._table, event_logger=self._events)
        if not groups:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrent_groups)

        async def bounded_run(group: DestinationGroup) -> PickOutcome:
            async with semaphore:
                return await self._runner.run(group)

        ordered = list(groups.values())
        gathered = await asyncio.gather(
            *(bounded_run(group) for group in ordered), return_exceptions=True
        )
        return _collect_outcomes(ordered, gathered)


def _collect_outcomes(
    groups: list[DestinationGroup],
    gathered: list[PickOutcome | BaseException],
) -> list[PickOutcome]:
    """Turn unexpected runner exceptions into failed outcomes.

    Raises
    ------
    BaseException
        Re-raised immediately for system-level exceptions such as
        cancellation or ``KeyboardInterrupt``.

    """
    outcomes: list[PickOutcome] = []
    for group, result in zip(groups, gathered, strict=True):
        if isinstance(result, Exception):
            log_exception(logger, f"Pick run for {group.key} crashed", result)
            outcomes.append(
                PickOutcome(key=group.key, status=PickStatus.FAILED, error=result)
            )
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes.append(result)
    return outcomes
