"""Resolve short repository names from commit messages to fork mappings."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .models import ForkMapping, ForkMappingTable

_SUFFIX_SEGMENTS = 2


def resolve_fork(short_name: str, table: ForkMappingTable) -> ForkMapping | None:
    """Return the mapping for ``short_name`` or ``None``.

    An exact key wins. Otherwise the last two ``/``-separated segments are
    tried, so ``github.com/containers/image`` finds a ``containers/image``
    entry. Names with fewer than two segments never fall back.
    """
    mapping = table.get(short_name)
    if mapping is not None:
        return mapping

    parts = short_name.split("/")
    if len(parts) < _SUFFIX_SEGMENTS:
        return None

    return table.get("/".join(parts[-_SUFFIX_SEGMENTS:]))
