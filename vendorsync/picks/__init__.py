"""Upstream pick detection, grouping and the pull request workflow."""

from __future__ import annotations

from .classifier import ClassifiedCommit, classify_commit
from .errors import PickError, PickStep, PickStepError, PickStepTimeoutError
from .models import (
    DestinationGroup,
    DestinationKey,
    PickCommit,
    PickOutcome,
    PickStatus,
    PushCommit,
    push_commits,
)
from .observability import ErrorCategory, PickEventLogger, categorize_error
from .orchestrator import (
    PickCollaborators,
    PickOrchestrator,
    PickSettings,
    pull_request_body,
    pull_request_title,
)
from .processor import (
    PickRunner,
    PushEventProcessor,
    SkipReason,
    group_push,
    resolve_pick,
)

__all__ = [
    "ClassifiedCommit",
    "DestinationGroup",
    "DestinationKey",
    "ErrorCategory",
    "PickCollaborators",
    "PickCommit",
    "PickError",
    "PickEventLogger",
    "PickOrchestrator",
    "PickOutcome",
    "PickRunner",
    "PickSettings",
    "PickStatus",
    "PickStep",
    "PickStepError",
    "PickStepTimeoutError",
    "PushCommit",
    "PushEventProcessor",
    "SkipReason",
    "categorize_error",
    "classify_commit",
    "group_push",
    "pull_request_body",
    "pull_request_title",
    "push_commits",
    "resolve_pick",
]
