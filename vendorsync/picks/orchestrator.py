"""Turn one destination group into a pull request against its fork.

The workflow for a group is strictly sequential::

    clone -> configure identity -> checkout base -> create working branch
          -> (fetch patch -> git am) for each commit, in push order
          -> push working branch -> open pull request

Any failing step abandons the rest of the group. Nothing is rolled back:
the push happens last, so a half-applied series never leaves the clone,
and the clone itself is always removed.

Usage
-----
Run a group against real collaborators::

    orchestrator = PickOrchestrator(
        PickCollaborators(driver=driver, patches=patches, pull_requests=client),
        settings=PickSettings(bot_name="vendorpicker-bot"),
    )
    outcome = await orchestrator.run(group)

"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import typing as typ

from vendorsync.git.errors import GitCommandError, GitTimeoutError
from vendorsync.github.client import PullRequestSpec
from vendorsync.github.errors import (
    GitHubAPIError,
    GitHubResponseShapeError,
    GitHubTimeoutError,
)

from .errors import PickStep, PickStepError, PickStepTimeoutError
from .models import PickOutcome, PickStatus
from .observability import PickEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from vendorsync.git.driver import SourceControlDriver, WorkingCopy
    from vendorsync.github.client import PullRequestClient
    from vendorsync.github.patches import PatchSource

    from .models import DestinationGroup

_TIMEOUT_FAILURES: tuple[type[BaseException], ...] = (
    TimeoutError,
    GitTimeoutError,
    GitHubTimeoutError,
)
_STEP_FAILURES: tuple[type[BaseException], ...] = (
    GitCommandError,
    GitHubAPIError,
    GitHubResponseShapeError,
    OSError,
)


@dataclasses.dataclass(frozen=True, slots=True)
class PickSettings:
    """Tunables for the pick workflow.

    Attributes
    ----------
    commit_user_name
        ``user.name`` configured on every clone.
    commit_user_email
        ``user.email`` configured on every clone.
    bot_name
        Account that owns the pushed branches. When ``None`` it is looked up
        from the pull request client by the first group that needs it and
        reused afterwards.
    dry_run
        Apply patches but skip the push and the pull request.
    step_timeout_s
        Upper bound for any single step.

    """

    commit_user_name: str = "vendorpicker"
    commit_user_email: str = "vendorpicker@localhost"
    bot_name: str | None = None
    dry_run: bool = False
    step_timeout_s: float = 600.0


@dataclasses.dataclass(frozen=True, slots=True)
class PickCollaborators:
    """External systems the workflow drives."""

    driver: SourceControlDriver
    patches: PatchSource
    pull_requests: PullRequestClient


def pull_request_title(group: DestinationGroup) -> str:
    """Return the pull request title for ``group``.

    A single pick reuses its commit message; a series is named after the
    group's short identifier to keep the title short.
    """
    if len(group.commits) == 1:
        return "Automatic pick of " + group.commits[0].message
    return "Automatic pick for " + group.short_id


def pull_request_body(group: DestinationGroup) -> str:
    """Return the pull request body crediting every author."""
    lines = [f"This is automatic pick from {group.source_repository}."]
    lines.extend(f"/cc @{author}" for author in group.authors)
    return "\n".join(lines) + "\n"


class PickOrchestrator:
    """Apply a destination group as a patch series and propose it."""

    def __init__(
        self,
        collaborators: PickCollaborators,
        *,
        settings: PickSettings | None = None,
        event_logger: PickEventLogger | None = None,
    ) -> None:
        """Bind collaborators and settings shared by every group."""
        self._driver = collaborators.driver
        self._patches = collaborators.patches
        self._pull_requests = collaborators.pull_requests
        self._settings = settings or PickSettings()
        self._events = event_logger or PickEventLogger()
        self._bot_name = self._settings.bot_name
        self._bot_name_lock = asyncio.Lock()

    async def run(self, group: DestinationGroup) -> PickOutcome:
        """Run the workflow for ``group``.

        Step failures are logged and reported in the returned outcome; they
        are never raised, so sibling groups are unaffected.
        """
        self._events.log_group_started(group)
        try:
            outcome = await self._run_steps(group)
        except PickStepError as exc:
            self._events.log_group_failed(group, exc)
            return PickOutcome(key=group.key, status=PickStatus.FAILED, error=exc)

        self._events.log_group_completed(outcome)
        return outcome

    async def _run_steps(self, group: DestinationGroup) -> PickOutcome:
        settings = self._settings
        branch = group.working_branch

        async with self._working_copy(group) as copy:
            await self._step(
                PickStep.CONFIGURE,
                group,
                self._configure_identity(copy),
            )
            await self._step(
                PickStep.CHECKOUT,
                group,
                self._driver.checkout(copy, group.key.branch),
            )
            await self._step(
                PickStep.CREATE_BRANCH,
                group,
                self._driver.create_branch(copy, branch),
            )
            await self._apply_series(group, copy)

            title = pull_request_title(group)
            if settings.dry_run:
                self._events.log_dry_run(group, title)
                return PickOutcome(key=group.key, status=PickStatus.DRY_RUN)

            bot_name = await self._resolve_bot_name(group)
            mapping = group.mapping
            await self._step(
                PickStep.PUSH,
                group,
                self._driver.push(copy, f"{bot_name}/{mapping.name}", branch),
            )
            number = await self._step(
                PickStep.OPEN_PULL_REQUEST,
                group,
                self._pull_requests.create_pull_request(
                    PullRequestSpec(
                        owner=mapping.owner,
                        repo=mapping.name,
                        title=title,
                        body=pull_request_body(group),
                        head=f"{bot_name}:{branch}",
                        base=group.key.branch,
                        maintainer_can_modify=True,
                    )
                ),
            )

        return PickOutcome(
            key=group.key,
            status=PickStatus.CREATED,
            pull_request_number=number,
        )

    async def _apply_series(self, group: DestinationGroup, copy: WorkingCopy) -> None:
        """Fetch and apply each commit's patch in push order."""
        for commit in group.commits:
            patch = await self._step(
                PickStep.FETCH_PATCH,
                group,
                self._patches.fetch_patch(commit.source_repository, commit.id),
                commit_id=commit.id,
            )
            await self._step(
                PickStep.APPLY_PATCH,
                group,
                self._driver.apply_patch(
                    copy, patch, strip_count=commit.mapping.strip_count
                ),
                commit_id=commit.id,
            )
            self._events.log_commit_applied(group, commit)

    async def _resolve_bot_name(self, group: DestinationGroup) -> str:
        """Return the bot login, asking GitHub only until a lookup succeeds."""
        async with self._bot_name_lock:
            if self._bot_name is None:
                self._bot_name = await self._step(
                    PickStep.RESOLVE_IDENTITY,
                    group,
                    self._pull_requests.authenticated_login(),
                )
            return self._bot_name

    async def _configure_identity(self, copy: WorkingCopy) -> None:
        await self._driver.set_config(
            copy, "user.name", self._settings.commit_user_name
        )
        await self._driver.set_config(
            copy, "user.email", self._settings.commit_user_email
        )

    @contextlib.asynccontextmanager
    async def _working_copy(
        self, group: DestinationGroup
    ) -> cabc.AsyncIterator[WorkingCopy]:
        """Clone the fork and remove the clone however the block exits."""
        mapping = group.mapping
        copy = await self._step(
            PickStep.CLONE,
            group,
            self._driver.clone(f"{mapping.owner}/{mapping.name}"),
        )
        try:
            yield copy
        finally:
            await self._driver.cleanup(copy)

    async def _step[T](
        self,
        step: PickStep,
        group: DestinationGroup,
        operation: cabc.Awaitable[T],
        *,
        commit_id: str | None = None,
    ) -> T:
        """Await ``operation`` under the step timeout, wrapping failures."""
        destination = str(group.key)
        try:
            async with asyncio.timeout(self._settings.step_timeout_s):
                return await operation
        except _TIMEOUT_FAILURES as exc:
            raise PickStepTimeoutError(
                step, destination, commit_id=commit_id, reason=str(exc) or "timed out"
            ) from exc
        except _STEP_FAILURES as exc:
            raise PickStepError(
                step, destination, commit_id=commit_id, reason=str(exc)
            ) from exc
