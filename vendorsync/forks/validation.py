"""Semantic validation for fork mapping tables."""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    from .models import ForkMapping, ForkMappingTable

REPO_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class ForkMappingError(ValueError):
    """Raised when the fork mapping file cannot be used.

    All problems found in one pass are collected in ``issues`` so an operator
    can fix the file in one go.
    """

    def __init__(self, issues: list[str]) -> None:
        """Capture the issues and join them into the exception message."""
        super().__init__("\n".join(issues))
        self.issues = issues


def validate_table(table: ForkMappingTable) -> ForkMappingTable:
    """Return ``table`` unchanged when every mapping is usable."""
    issues: list[str] = []

    if not table.repositories:
        issues.append("no repositories are defined")

    for short_name, mapping in table.repositories.items():
        if not short_name.strip():
            issues.append("repository keys must be non-empty")
            continue
        _validate_mapping(short_name, mapping, issues)

    if issues:
        raise ForkMappingError(issues)

    return table


def _validate_mapping(short_name: str, mapping: ForkMapping, issues: list[str]) -> None:
    if mapping.has_fork:
        segments = mapping.fork_repository.strip().split("/")
        if len(segments) < 2 or not all(  # noqa: PLR2004
            REPO_SEGMENT_PATTERN.match(segment) for segment in segments
        ):
            issues.append(
                f"{short_name}: forkRepository {mapping.fork_repository!r} "
                "must look like org/repo or host/org/repo"
            )

    if not mapping.fork_default_branch.strip():
        issues.append(f"{short_name}: forkDefaultBranch must be non-empty")

    vendor_path = mapping.vendor_path
    if not vendor_path.strip():
        issues.append(f"{short_name}: vendorPath must be non-empty")
    elif vendor_path.startswith("/") or vendor_path.endswith("/"):
        issues.append(
            f"{short_name}: vendorPath {vendor_path!r} must not start or end with '/'"
        )
