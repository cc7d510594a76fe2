"""Errors raised while turning a destination group into a pull request."""

from __future__ import annotations

import enum


class PickStep(enum.StrEnum):
    """Workflow steps, in execution order."""

    CLONE = "clone"
    CONFIGURE = "configure"
    CHECKOUT = "checkout"
    CREATE_BRANCH = "create_branch"
    FETCH_PATCH = "fetch_patch"
    APPLY_PATCH = "apply_patch"
    RESOLVE_IDENTITY = "resolve_identity"
    PUSH = "push"
    OPEN_PULL_REQUEST = "open_pull_request"


class PickError(Exception):
    """Base class for pick workflow errors."""


class PickStepError(PickError):
    """Raised when a workflow step fails and the group is abandoned.

    Attributes
    ----------
    step
        The step that failed.
    destination
        ``repository#branch`` of the group.
    commit_id
        Commit being fetched or applied, when the step concerns one.

    """

    def __init__(
        self,
        step: PickStep,
        destination: str,
        *,
        commit_id: str | None = None,
        reason: str = "",
    ) -> None:
        """Initialise with the failing step and its group context."""
        self.step = step
        self.destination = destination
        self.commit_id = commit_id
        self.reason = reason
        where = f"{destination} commit {commit_id}" if commit_id else destination
        super().__init__(f"{step} failed for {where}: {reason}")


class PickStepTimeoutError(PickStepError):
    """Raised when a workflow step exceeds its time limit."""
