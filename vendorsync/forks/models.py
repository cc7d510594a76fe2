"""Typed fork mapping structures loaded from the mappings file."""

from __future__ import annotations

import msgspec

# Patches are generated as ``a/<vendorPath>/<file>``: one segment for the
# ``a/`` prefix plus one per vendor path component.
_PATCH_PREFIX_SEGMENTS = 2


class ForkMapping(
    msgspec.Struct,
    kw_only=True,
    frozen=True,
    forbid_unknown_fields=True,
    rename="camel",
):
    """Where picks for one vendored dependency should be proposed.

    Attributes
    ----------
    fork_repository : str
        Fork location as ``org/repo`` or ``host/org/repo``. Empty when the
        dependency is known but no fork exists yet.
    fork_default_branch : str
        Branch pull requests are opened against.
    vendor_path : str
        Location of the dependency inside the source repository, for example
        ``vendor/github.com/containers/image``.

    """

    fork_default_branch: str
    vendor_path: str
    fork_repository: str = ""

    @property
    def has_fork(self) -> bool:
        """Return whether a fork repository is configured."""
        return bool(self.fork_repository.strip())

    @property
    def owner(self) -> str:
        """Return the organisation owning the fork."""
        return self._slug_parts()[0]

    @property
    def name(self) -> str:
        """Return the fork repository name."""
        return self._slug_parts()[1]

    @property
    def strip_count(self) -> int:
        """Return the ``git am -p`` value mapping vendor paths onto the fork."""
        return self.vendor_path.count("/") + _PATCH_PREFIX_SEGMENTS

    def _slug_parts(self) -> tuple[str, str]:
        parts = self.fork_repository.strip().split("/")
        if len(parts) < 2:  # noqa: PLR2004
            msg = f"fork repository {self.fork_repository!r} is not org/repo"
            raise ValueError(msg)
        return (parts[-2], parts[-1])


class ForkMappingTable(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    """All fork mappings keyed by the short repository name used in commits.

    The key is the name that appears in commit messages, e.g.
    ``containers/image`` in ``UPSTREAM: containers/image: 2384: Fix``.
    """

    repositories: dict[str, ForkMapping] = msgspec.field(default_factory=dict)

    def get(self, short_name: str) -> ForkMapping | None:
        """Return the mapping registered under ``short_name`` exactly."""
        return self.repositories.get(short_name)

    def __len__(self) -> int:
        """Return the number of configured mappings."""
        return len(self.repositories)

    def __contains__(self, short_name: object) -> bool:
        """Return whether ``short_name`` is an exact key."""
        return short_name in self.repositories
