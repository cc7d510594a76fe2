"""Unit tests for destination groups and push commit extraction."""

from __future__ import annotations

import pytest

from tests.helpers.builders import push_event, sample_table
from vendorsync.forks.models import ForkMapping
from vendorsync.picks.models import (
    DestinationGroup,
    DestinationKey,
    PickCommit,
    push_commits,
)

_IMAGE = ForkMapping(
    fork_repository="github.com/openshift/containers-image",
    fork_default_branch="openshift-4.1",
    vendor_path="vendor/github.com/containers/image",
)
_KEY = DestinationKey(
    fork_repository="github.com/openshift/containers-image", branch="openshift-4.1"
)


def _pick(
    commit_id: str, author: str = "alice", mapping: ForkMapping = _IMAGE
) -> PickCommit:
    return PickCommit(
        id=commit_id,
        source_repository="https://github.com/cri-o/cri-o",
        mapping=mapping,
        author=author,
        message=f"UPSTREAM: containers/image: {commit_id}: change",
    )


def test_push_commits_credit_the_sender() -> None:
    """Every commit is attributed to the pusher and the pushed repository."""
    event = push_event([("a1", "one"), ("b2", "two")], sender="bob")

    commits = push_commits(event)

    assert [c.id for c in commits] == ["a1", "b2"]
    assert {c.author for c in commits} == {"bob"}
    assert {c.source_repository for c in commits} == {"https://github.com/cri-o/cri-o"}


def test_destination_key_renders_repository_and_branch() -> None:
    """Keys read as ``repository#branch`` in logs."""
    assert str(_KEY) == "github.com/openshift/containers-image#openshift-4.1"


def test_pick_destination_comes_from_mapping() -> None:
    """A pick's destination is its mapping's fork and default branch."""
    assert _pick("a1").destination == _KEY


class TestDestinationGroup:
    """Tests for DestinationGroup."""

    def test_working_branch_uses_first_commit(self) -> None:
        """The branch name depends only on the base and the first commit."""
        group = DestinationGroup(
            key=_KEY, commits=(_pick("0123456789abcdef"), _pick("fedcba9876543210"))
        )

        assert group.short_id == "0123456"
        assert group.working_branch == "auto-pick-openshift-4.1-0123456"

    def test_authors_are_distinct_and_ordered(self) -> None:
        """Authors appear once each, in push order."""
        group = DestinationGroup(
            key=_KEY,
            commits=(_pick("a1", "bob"), _pick("b2", "alice"), _pick("c3", "bob")),
        )

        assert group.authors == ["bob", "alice"]

    def test_rejects_empty_group(self) -> None:
        """Groups always hold at least one commit."""
        with pytest.raises(ValueError, match="no commits"):
            DestinationGroup(key=_KEY, commits=())

    def test_rejects_foreign_commit(self) -> None:
        """Commits for another destination cannot join the group."""
        storage = sample_table().get("containers/storage")
        assert storage is not None

        with pytest.raises(ValueError, match="belongs to"):
            DestinationGroup(
                key=_KEY, commits=(_pick("a1"), _pick("b2", mapping=storage))
            )
