"""Unit tests for the pick workflow run against each destination group."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from tests.helpers.builders import push_event
from tests.helpers.fakes import FakeGitDriver, FakePatchSource, FakePullRequestClient
from vendorsync.git.errors import GitCommandError, GitTimeoutError
from vendorsync.github.errors import GitHubAPIError
from vendorsync.picks import (
    DestinationGroup,
    PickCollaborators,
    PickOrchestrator,
    PickSettings,
    PickStatus,
    PickStep,
    PickStepError,
    PickStepTimeoutError,
    group_push,
    pull_request_body,
    pull_request_title,
)

if typ.TYPE_CHECKING:
    from tests.helpers.fakes import FakeLogger
    from vendorsync.forks.models import ForkMappingTable
    from vendorsync.picks import PickEventLogger

_SOURCE = "https://github.com/cri-o/cri-o"


def _image_group(table: ForkMappingTable, *ids: str) -> DestinationGroup:
    event = push_event(
        [
            (cid, f"UPSTREAM: containers/image: {n}: change {n}")
            for n, cid in enumerate(ids)
        ]
    )
    (group,) = group_push(event, table).values()
    return group


def _orchestrator(
    driver: FakeGitDriver,
    patches: FakePatchSource,
    pull_requests: FakePullRequestClient,
    event_logger: PickEventLogger,
    **settings: typ.Any,
) -> PickOrchestrator:
    return PickOrchestrator(
        PickCollaborators(driver=driver, patches=patches, pull_requests=pull_requests),
        settings=PickSettings(**settings),
        event_logger=event_logger,
    )


class TestPullRequestText:
    """Tests for pull request titles and bodies."""

    def test_single_commit_title_uses_message(self, table: ForkMappingTable) -> None:
        """A single pick is titled after its commit message."""
        group = _image_group(table, "0123456789")

        assert pull_request_title(group) == (
            "Automatic pick of UPSTREAM: containers/image: 0: change 0"
        )

    def test_series_title_uses_short_id(self, table: ForkMappingTable) -> None:
        """A series is titled after the first commit's short id."""
        group = _image_group(table, "0123456789", "abcdef0123")

        assert pull_request_title(group) == "Automatic pick for 0123456"

    def test_body_credits_authors(self, table: ForkMappingTable) -> None:
        """The body names the source and cc's the pusher."""
        group = _image_group(table, "0123456789")

        assert pull_request_body(group) == (
            f"This is automatic pick from {_SOURCE}.\n/cc @alice\n"
        )


class TestPickOrchestrator:
    """Tests for PickOrchestrator.run."""

    @pytest.mark.asyncio
    async def test_happy_path(
        self,
        table: ForkMappingTable,
        driver: FakeGitDriver,
        patches: FakePatchSource,
        pull_requests: FakePullRequestClient,
        event_logger: PickEventLogger,
    ) -> None:
        """A group is cloned, patched in order, pushed and proposed."""
        group = _image_group(table, "0123456789", "abcdef0123")
        orchestrator = _orchestrator(driver, patches, pull_requests, event_logger)

        outcome = await orchestrator.run(group)

        assert outcome.status is PickStatus.CREATED
        assert outcome.pull_request_number == 42
        assert driver.calls == [
            ("clone", "openshift/containers-image"),
            ("set_config", "user.name", "vendorpicker"),
            ("set_config", "user.email", "vendorpicker@localhost"),
            ("checkout", "openshift-4.1"),
            ("create_branch", "auto-pick-openshift-4.1-0123456"),
            ("apply_patch", "patch 0123456789", 5),
            ("apply_patch", "patch abcdef0123", 5),
            (
                "push",
                "vendorpicker-bot/containers-image",
                "auto-pick-openshift-4.1-0123456",
            ),
            ("cleanup", "openshift/containers-image"),
        ]
        assert patches.requests == [(_SOURCE, "0123456789"), (_SOURCE, "abcdef0123")]

        (spec,) = pull_requests.specs
        assert (spec.owner, spec.repo) == ("openshift", "containers-image")
        assert spec.head == "vendorpicker-bot:auto-pick-openshift-4.1-0123456"
        assert spec.base == "openshift-4.1"
        assert spec.title == "Automatic pick for 0123456"
        assert spec.maintainer_can_modify is True

    @pytest.mark.asyncio
    async def test_configured_bot_name_skips_lookup(
        self,
        table: ForkMappingTable,
        driver: FakeGitDriver,
        patches: FakePatchSource,
        pull_requests: FakePullRequestClient,
        event_logger: PickEventLogger,
    ) -> None:
        """A configured bot name is used without asking GitHub."""
        orchestrator = _orchestrator(
            driver, patches, pull_requests, event_logger, bot_name="picker"
        )

        await orchestrator.run(_image_group(table, "0123456789"))

        assert pull_requests.login_calls == 0
        assert driver.pushed == [
            ("picker/containers-image", "auto-pick-openshift-4.1-0123456")
        ]
        assert pull_requests.specs[0].head == "picker:auto-pick-openshift-4.1-0123456"

    @pytest.mark.asyncio
    async def test_bot_login_is_looked_up_once(
        self,
        table: ForkMappingTable,
        driver: FakeGitDriver,
        patches: FakePatchSource,
        pull_requests: FakePullRequestClient,
        event_logger: PickEventLogger,
    ) -> None:
        """Concurrent groups share a single GitHub identity lookup."""
        orchestrator = _orchestrator(driver, patches, pull_requests, event_logger)
        event = push_event(
            [
                ("0123456789", "UPSTREAM: containers/image: 1: x"),
                ("abcdef0123", "UPSTREAM: containers/storage: 2: y"),
            ]
        )
        groups = list(group_push(event, table).values())

        outcomes = await asyncio.gather(*(orchestrator.run(g) for g in groups))

        assert [o.status for o in outcomes] == [PickStatus.CREATED] * 2
        assert pull_requests.login_calls == 1
        assert {spec.head.split(":")[0] for spec in pull_requests.specs} == {
            "vendorpicker-bot"
        }

    @pytest.mark.asyncio
    async def test_failed_patch_abandons_group(
        self,
        table: ForkMappingTable,
        patches: FakePatchSource,
        pull_requests: FakePullRequestClient,
        event_logger: PickEventLogger,
        fake_logger: FakeLogger,
    ) -> None:
        """A conflict on the second of three patches stops the series."""
        driver = FakeGitDriver(
            apply_failures={
                2: GitCommandError.failed("am", 128, "patch does not apply")
            }
        )
        orchestrator = _orchestrator(driver, patches, pull_requests, event_logger)

        outcome = await orchestrator.run(_image_group(table, "c1", "c2", "c3"))

        assert outcome.status is PickStatus.FAILED
        assert isinstance(outcome.error, PickStepError)
        assert outcome.error.step is PickStep.APPLY_PATCH
        assert outcome.error.commit_id == "c2"
        assert driver.applied == [("patch c1", 5)]
        assert driver.pushed == []
        assert pull_requests.specs == []
        assert driver.methods()[-1] == "cleanup", "clone must be removed on failure"

        (failure,) = fake_logger.messages("ERROR")
        assert "pick.group.failed" in failure
        assert "step=apply_patch commit_id=c2 commits=c1,c2,c3" in failure
        assert "error_category=patch_conflict" in failure

    @pytest.mark.asyncio
    async def test_missing_patch_is_reported(
        self,
        table: ForkMappingTable,
        driver: FakeGitDriver,
        pull_requests: FakePullRequestClient,
        event_logger: PickEventLogger,
    ) -> None:
        """A patch that cannot be downloaded fails the fetch step."""
        patches = FakePatchSource(missing=frozenset({"c1"}))
        orchestrator = _orchestrator(driver, patches, pull_requests, event_logger)

        outcome = await orchestrator.run(_image_group(table, "c1"))

        assert isinstance(outcome.error, PickStepError)
        assert outcome.error.step is PickStep.FETCH_PATCH
        assert "apply_patch" not in driver.methods()

    @pytest.mark.asyncio
    async def test_clone_failure_needs_no_cleanup(
        self,
        table: ForkMappingTable,
        patches: FakePatchSource,
        pull_requests: FakePullRequestClient,
        event_logger: PickEventLogger,
    ) -> None:
        """Nothing is left to remove when the clone itself fails."""
        driver = FakeGitDriver(
            failures={"clone": GitCommandError.failed("clone", 128, "not found")}
        )
        orchestrator = _orchestrator(driver, patches, pull_requests, event_logger)

        outcome = await orchestrator.run(_image_group(table, "c1"))

        assert isinstance(outcome.error, PickStepError)
        assert outcome.error.step is PickStep.CLONE
        assert driver.methods() == ["clone"]

    @pytest.mark.asyncio
    async def test_pull_request_failure(
        self,
        table: ForkMappingTable,
        driver: FakeGitDriver,
        patches: FakePatchSource,
        event_logger: PickEventLogger,
    ) -> None:
        """A rejected pull request fails the group after the push."""
        pull_requests = FakePullRequestClient(
            failure=GitHubAPIError.http_error("create pull request", 422)
        )
        orchestrator = _orchestrator(driver, patches, pull_requests, event_logger)

        outcome = await orchestrator.run(_image_group(table, "c1"))

        assert isinstance(outcome.error, PickStepError)
        assert outcome.error.step is PickStep.OPEN_PULL_REQUEST
        assert len(driver.pushed) == 1

    @pytest.mark.asyncio
    async def test_dry_run_skips_push_and_pull_request(
        self,
        table: ForkMappingTable,
        driver: FakeGitDriver,
        patches: FakePatchSource,
        pull_requests: FakePullRequestClient,
        event_logger: PickEventLogger,
        fake_logger: FakeLogger,
    ) -> None:
        """Dry runs apply the series but never write to GitHub."""
        orchestrator = _orchestrator(
            driver, patches, pull_requests, event_logger, dry_run=True
        )

        outcome = await orchestrator.run(_image_group(table, "c1"))

        assert outcome.status is PickStatus.DRY_RUN
        assert len(driver.applied) == 1
        assert driver.pushed == []
        assert pull_requests.specs == []
        assert pull_requests.login_calls == 0
        assert driver.methods()[-1] == "cleanup"
        assert any("[dry-run]" in m for m in fake_logger.messages("WARNING"))

    @pytest.mark.asyncio
    async def test_step_timeout(
        self,
        table: ForkMappingTable,
        patches: FakePatchSource,
        pull_requests: FakePullRequestClient,
        event_logger: PickEventLogger,
    ) -> None:
        """A hanging step is cut off and reported as a timeout."""
        driver = FakeGitDriver(hangs=frozenset({"checkout"}))
        orchestrator = _orchestrator(
            driver, patches, pull_requests, event_logger, step_timeout_s=0.01
        )

        outcome = await orchestrator.run(_image_group(table, "c1"))

        assert isinstance(outcome.error, PickStepTimeoutError)
        assert outcome.error.step is PickStep.CHECKOUT
        assert driver.methods()[-1] == "cleanup"

    @pytest.mark.asyncio
    async def test_git_timeout_is_a_step_timeout(
        self,
        table: ForkMappingTable,
        patches: FakePatchSource,
        pull_requests: FakePullRequestClient,
        event_logger: PickEventLogger,
    ) -> None:
        """A killed git process is reported as a timeout."""
        driver = FakeGitDriver(
            failures={"push": GitTimeoutError.timed_out("push", 300)}
        )
        orchestrator = _orchestrator(driver, patches, pull_requests, event_logger)

        outcome = await orchestrator.run(_image_group(table, "c1"))

        assert isinstance(outcome.error, PickStepTimeoutError)
        assert outcome.error.step is PickStep.PUSH
