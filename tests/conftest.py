"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from tests.helpers.builders import sample_table
from tests.helpers.fakes import (
    FakeGitDriver,
    FakeLogger,
    FakePatchSource,
    FakePullRequestClient,
)
from vendorsync.forks.models import ForkMappingTable
from vendorsync.picks.observability import PickEventLogger


@pytest.fixture
def table() -> ForkMappingTable:
    """Fork mapping table shared by workflow tests."""
    return sample_table()


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Logger recording every call."""
    return FakeLogger()


@pytest.fixture
def event_logger(fake_logger: FakeLogger) -> PickEventLogger:
    """Pick event logger writing to :func:`fake_logger`."""
    return PickEventLogger(fake_logger)


@pytest.fixture
def driver() -> FakeGitDriver:
    """Source-control driver that always succeeds."""
    return FakeGitDriver()


@pytest.fixture
def patches() -> FakePatchSource:
    """Patch source that serves every commit."""
    return FakePatchSource()


@pytest.fixture
def pull_requests() -> FakePullRequestClient:
    """Pull request client numbering from 42."""
    return FakePullRequestClient()
