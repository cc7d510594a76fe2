"""Recognise upstream cherry-pick commits by their message.

Picks follow the convention::

    UPSTREAM: <short repository name>: <upstream reference>: <description>

for example ``UPSTREAM: containers/image: 2384: Fix manifest lookup``.
"""

from __future__ import annotations

import dataclasses

UPSTREAM_MARKER = "UPSTREAM: "
NAME_DELIMITER = ": "


@dataclasses.dataclass(frozen=True, slots=True)
class ClassifiedCommit:
    """A commit message recognised as an upstream pick."""

    short_name: str
    message: str


def classify_commit(message: str) -> ClassifiedCommit | None:
    """Return the short repository name and trimmed message, or ``None``.

    Messages without the ``UPSTREAM: `` marker, and marked messages with no
    ``: `` after the repository name, are not picks. ``<drop>`` commits are
    not recognised.
    """
    trimmed = message.strip()
    if not trimmed.startswith(UPSTREAM_MARKER):
        return None

    remainder = trimmed[len(UPSTREAM_MARKER) :]
    short_name, delimiter, _ = remainder.partition(NAME_DELIMITER)
    if not delimiter:
        return None

    return ClassifiedCommit(short_name=short_name, message=trimmed)
