"""GitHub collaborators: webhook payloads, pull requests and patches."""

from __future__ import annotations

from .client import (
    GitHubRESTClient,
    GitHubRESTConfig,
    PullRequestClient,
    PullRequestSpec,
)
from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubTimeoutError,
    PatchFetchError,
)
from .events import PushCommitPayload, PushEvent, decode_push_event
from .patches import HTTPPatchSource, PatchSource, patch_url

__all__ = [
    "GitHubAPIError",
    "GitHubConfigError",
    "GitHubRESTClient",
    "GitHubRESTConfig",
    "GitHubResponseShapeError",
    "GitHubTimeoutError",
    "HTTPPatchSource",
    "PatchFetchError",
    "PatchSource",
    "PullRequestClient",
    "PullRequestSpec",
    "PushCommitPayload",
    "PushEvent",
    "decode_push_event",
    "patch_url",
]
