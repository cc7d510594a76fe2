"""Webhook payload structures for the GitHub events vendorsync consumes.

Only the fields the service reads are declared; msgspec ignores the rest of
GitHub's (large) payloads.
"""

from __future__ import annotations

import msgspec


class PushCommitPayload(msgspec.Struct, kw_only=True):
    """One entry of ``commits`` in a push payload."""

    id: str
    message: str = ""


class RepositoryPayload(msgspec.Struct, kw_only=True):
    """The repository that received the push."""

    html_url: str
    full_name: str = ""


class SenderPayload(msgspec.Struct, kw_only=True):
    """The account that performed the push."""

    login: str


class PushEvent(msgspec.Struct, kw_only=True):
    """Decoded ``push`` webhook payload.

    Attributes
    ----------
    ref : str
        Full ref that was pushed, e.g. ``refs/heads/master``.
    commits : list[PushCommitPayload]
        Pushed commits, oldest first as GitHub delivers them.
    repository : RepositoryPayload
        Source repository; its ``html_url`` is where patches are fetched from.
    sender : SenderPayload
        Pushing user, credited in pull request bodies.

    """

    repository: RepositoryPayload
    sender: SenderPayload
    ref: str = ""
    commits: list[PushCommitPayload] = msgspec.field(default_factory=list)


def decode_push_event(payload: bytes | str) -> PushEvent:
    """Decode raw JSON into a :class:`PushEvent`.

    Raises
    ------
    msgspec.DecodeError
        If the payload is not JSON or does not match the push shape.

    """
    return msgspec.json.decode(payload, type=PushEvent)
