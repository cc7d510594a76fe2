"""Structured log events for the pick workflow.

Operators follow picks only through logs, so every event carries the
destination key and, where relevant, the commit id needed to redo a pick by
hand. Lines have the shape ``[event.type] key=value ...``.
"""

from __future__ import annotations

import enum
import typing as typ

from vendorsync.github.errors import GitHubAPIError
from vendorsync.logging import get_logger, log_error, log_info, log_warning

from .errors import PickStep, PickStepError, PickStepTimeoutError

if typ.TYPE_CHECKING:
    from vendorsync.logging import SupportsLog

    from .models import DestinationGroup, PickCommit, PickOutcome, PushCommit

# HTTP status code threshold for server errors (5xx)
_HTTP_SERVER_ERROR_THRESHOLD = 500


class PickEventType(enum.StrEnum):
    """Structured log event types for pick observability."""

    PUSH_RECEIVED = "pick.push.received"
    COMMIT_SKIPPED = "pick.commit.skipped"
    GROUP_STARTED = "pick.group.started"
    COMMIT_APPLIED = "pick.commit.applied"
    GROUP_COMPLETED = "pick.group.completed"
    GROUP_FAILED = "pick.group.failed"


class ErrorCategory(enum.StrEnum):
    """Categories used to triage failed groups."""

    SOURCE_CONTROL = "source_control"
    PATCH_FETCH = "patch_fetch"
    PATCH_CONFLICT = "patch_conflict"
    PULL_REQUEST = "pull_request"
    TRANSIENT = "transient"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


_STEP_CATEGORY_MAP: dict[PickStep, ErrorCategory] = {
    PickStep.CLONE: ErrorCategory.SOURCE_CONTROL,
    PickStep.CONFIGURE: ErrorCategory.SOURCE_CONTROL,
    PickStep.CHECKOUT: ErrorCategory.SOURCE_CONTROL,
    PickStep.CREATE_BRANCH: ErrorCategory.SOURCE_CONTROL,
    PickStep.PUSH: ErrorCategory.SOURCE_CONTROL,
    PickStep.FETCH_PATCH: ErrorCategory.PATCH_FETCH,
    PickStep.APPLY_PATCH: ErrorCategory.PATCH_CONFLICT,
    PickStep.RESOLVE_IDENTITY: ErrorCategory.PULL_REQUEST,
    PickStep.OPEN_PULL_REQUEST: ErrorCategory.PULL_REQUEST,
}


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize a group failure for alert routing."""
    if isinstance(exc, PickStepTimeoutError):
        return ErrorCategory.TIMEOUT

    cause = exc.__cause__
    if (
        isinstance(cause, GitHubAPIError)
        and cause.status_code is not None
        and cause.status_code >= _HTTP_SERVER_ERROR_THRESHOLD
    ):
        return ErrorCategory.TRANSIENT

    if isinstance(exc, PickStepError):
        return _STEP_CATEGORY_MAP.get(exc.step, ErrorCategory.UNKNOWN)

    return ErrorCategory.UNKNOWN


class PickEventLogger:
    """Emit pick lifecycle events through femtologging."""

    def __init__(self, logger: SupportsLog | None = None) -> None:
        """Use ``logger`` or this module's logger."""
        self._logger = logger if logger is not None else get_logger(__name__)

    def log_push_received(self, repository: str, ref: str, commit_count: int) -> None:
        """Log receipt of a push and how many commits it carries."""
        log_info(
            self._logger,
            "[%s] repository=%s ref=%s commits=%d",
            PickEventType.PUSH_RECEIVED,
            repository,
            ref,
            commit_count,
        )

    def log_commit_skipped(self, commit: PushCommit, reason: str) -> None:
        """Log a commit that will not be picked."""
        log_info(
            self._logger,
            "[%s] commit_id=%s reason=%s message=%r",
            PickEventType.COMMIT_SKIPPED,
            commit.id,
            reason,
            commit.message.strip().splitlines()[0] if commit.message.strip() else "",
        )

    def log_group_started(self, group: DestinationGroup) -> None:
        """Log the start of a group's workflow."""
        log_info(
            self._logger,
            "[%s] destination=%s working_branch=%s commits=%d",
            PickEventType.GROUP_STARTED,
            group.key,
            group.working_branch,
            len(group.commits),
        )

    def log_commit_applied(self, group: DestinationGroup, commit: PickCommit) -> None:
        """Log a patch applied to the working branch."""
        log_info(
            self._logger,
            "[%s] destination=%s commit_id=%s",
            PickEventType.COMMIT_APPLIED,
            group.key,
            commit.id,
        )

    def log_group_completed(self, outcome: PickOutcome) -> None:
        """Log a group that reached its final step."""
        log_info(
            self._logger,
            "[%s] destination=%s status=%s pull_request=%s",
            PickEventType.GROUP_COMPLETED,
            outcome.key,
            outcome.status,
            outcome.pull_request_number,
        )

    def log_group_failed(self, group: DestinationGroup, error: Exception) -> None:
        """Log an abandoned group with enough context for a manual pick."""
        step = error.step if isinstance(error, PickStepError) else None
        commit_id = error.commit_id if isinstance(error, PickStepError) else None
        log_error(
            self._logger,
            "[%s] destination=%s step=%s commit_id=%s commits=%s "
            "error_type=%s error_category=%s error_message=%s",
            PickEventType.GROUP_FAILED,
            group.key,
            step,
            commit_id,
            ",".join(commit.id for commit in group.commits),
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )

    def log_dry_run(self, group: DestinationGroup, title: str) -> None:
        """Log the push and pull request a dry run skipped."""
        log_warning(
            self._logger,
            "[dry-run] destination=%s would push %s and open pull request %r",
            group.key,
            group.working_branch,
            title,
        )
