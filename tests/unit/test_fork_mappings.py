"""Unit tests for loading, validating and resolving fork mappings."""

from __future__ import annotations

import textwrap
import typing as typ

import pytest

from vendorsync.forks import (
    ForkMapping,
    ForkMappingError,
    ForkMappingTable,
    load_fork_mappings,
    resolve_fork,
    validate_table,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "fork-mappings.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


class TestLoadForkMappings:
    """Tests for load_fork_mappings."""

    def test_loads_camel_case_fields(self, tmp_path: Path) -> None:
        """Mappings use camelCase keys under ``repositories``."""
        path = _write(
            tmp_path,
            """
            repositories:
              containers/image:
                forkRepository: github.com/openshift/containers-image
                forkDefaultBranch: openshift-4.1
                vendorPath: vendor/github.com/containers/image
              opencontainers/runc:
                forkDefaultBranch: master
                vendorPath: vendor/github.com/opencontainers/runc
            """,
        )

        table = load_fork_mappings(path)

        assert len(table) == 2
        image = table.get("containers/image")
        assert image == ForkMapping(
            fork_repository="github.com/openshift/containers-image",
            fork_default_branch="openshift-4.1",
            vendor_path="vendor/github.com/containers/image",
        )
        runc = table.get("opencontainers/runc")
        assert runc is not None
        assert runc.has_fork is False, "absent forkRepository means no fork"

    def test_missing_file(self, tmp_path: Path) -> None:
        """An unreadable file is reported as a mapping error."""
        with pytest.raises(ForkMappingError, match="failed to read"):
            load_fork_mappings(tmp_path / "absent.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty document is rejected."""
        path = _write(tmp_path, "")

        with pytest.raises(ForkMappingError, match="is empty"):
            load_fork_mappings(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Syntax errors surface as mapping errors."""
        path = _write(tmp_path, "repositories: [unterminated\n")

        with pytest.raises(ForkMappingError, match="failed to read"):
            load_fork_mappings(path)

    def test_duplicate_keys_are_rejected(self, tmp_path: Path) -> None:
        """A repository listed twice is an error, not a silent override."""
        path = _write(
            tmp_path,
            """
            repositories:
              containers/image:
                forkDefaultBranch: master
                vendorPath: vendor/a
              containers/image:
                forkDefaultBranch: master
                vendorPath: vendor/b
            """,
        )

        with pytest.raises(ForkMappingError):
            load_fork_mappings(path)

    def test_unknown_field_is_rejected(self, tmp_path: Path) -> None:
        """Typos in field names fail schema validation."""
        path = _write(
            tmp_path,
            """
            repositories:
              containers/image:
                forkRepo: openshift/containers-image
                forkDefaultBranch: master
                vendorPath: vendor/github.com/containers/image
            """,
        )

        with pytest.raises(ForkMappingError, match="schema validation failed"):
            load_fork_mappings(path)

    def test_missing_required_field(self, tmp_path: Path) -> None:
        """``vendorPath`` is required."""
        path = _write(
            tmp_path,
            """
            repositories:
              containers/image:
                forkRepository: openshift/containers-image
                forkDefaultBranch: master
            """,
        )

        with pytest.raises(ForkMappingError, match="schema validation failed"):
            load_fork_mappings(path)


class TestValidateTable:
    """Tests for validate_table."""

    def test_empty_table(self) -> None:
        """A table without repositories is unusable."""
        with pytest.raises(ForkMappingError, match="no repositories"):
            validate_table(ForkMappingTable(repositories={}))

    def test_collects_every_issue(self) -> None:
        """All problems are reported together."""
        table = ForkMappingTable(
            repositories={
                "a/b": ForkMapping(
                    fork_repository="not-a-slug",
                    fork_default_branch=" ",
                    vendor_path="/vendor/a/b/",
                ),
                "c/d": ForkMapping(
                    fork_repository="org/repo",
                    fork_default_branch="master",
                    vendor_path="",
                ),
            }
        )

        with pytest.raises(ForkMappingError) as excinfo:
            validate_table(table)

        issues = excinfo.value.issues
        assert len(issues) == 4, f"expected four issues, got {issues}"
        assert any("forkRepository" in issue for issue in issues)
        assert any("forkDefaultBranch" in issue for issue in issues)
        assert any("must not start or end" in issue for issue in issues)
        assert any("c/d: vendorPath must be non-empty" in issue for issue in issues)

    def test_empty_fork_repository_is_allowed(self) -> None:
        """Dependencies without a fork are valid entries."""
        table = ForkMappingTable(
            repositories={
                "opencontainers/runc": ForkMapping(
                    fork_default_branch="master",
                    vendor_path="vendor/github.com/opencontainers/runc",
                )
            }
        )

        assert validate_table(table) is table


class TestForkMapping:
    """Tests for derived ForkMapping properties."""

    @pytest.mark.parametrize(
        ("vendor_path", "expected"),
        [
            ("vendor/github.com/containers/image", 5),
            ("vendor/k8s.io/api", 4),
            ("vendor", 2),
        ],
    )
    def test_strip_count(self, vendor_path: str, expected: int) -> None:
        """Strip count covers the ``a/`` prefix and every vendor segment."""
        mapping = ForkMapping(fork_default_branch="master", vendor_path=vendor_path)
        assert mapping.strip_count == expected

    @pytest.mark.parametrize(
        "fork_repository",
        ["openshift/containers-image", "github.com/openshift/containers-image"],
    )
    def test_owner_and_name(self, fork_repository: str) -> None:
        """Owner and name are the last two slug segments."""
        mapping = ForkMapping(
            fork_repository=fork_repository,
            fork_default_branch="master",
            vendor_path="vendor/x",
        )

        assert (mapping.owner, mapping.name) == ("openshift", "containers-image")

    def test_owner_requires_slug(self) -> None:
        """A single-segment fork has no owner."""
        mapping = ForkMapping(
            fork_repository="containers-image",
            fork_default_branch="master",
            vendor_path="vendor/x",
        )

        with pytest.raises(ValueError, match="not org/repo"):
            _ = mapping.owner


class TestResolveFork:
    """Tests for resolve_fork."""

    def test_exact_match(self, table: ForkMappingTable) -> None:
        """The exact key is found."""
        assert resolve_fork("containers/image", table) is table.get("containers/image")

    def test_suffix_match(self, table: ForkMappingTable) -> None:
        """Host-qualified names fall back to their last two segments."""
        assert resolve_fork("github.com/containers/image", table) is table.get(
            "containers/image"
        )

    def test_exact_match_wins_over_suffix(self) -> None:
        """A key matching the full name is preferred."""
        exact = ForkMapping(fork_default_branch="main", vendor_path="vendor/a")
        suffix = ForkMapping(fork_default_branch="master", vendor_path="vendor/b")
        table = ForkMappingTable(
            repositories={"github.com/org/repo": exact, "org/repo": suffix}
        )

        assert resolve_fork("github.com/org/repo", table) is exact

    @pytest.mark.parametrize(
        "short_name", ["image", "unknown/repo", "containers/other", ""]
    )
    def test_unknown_names(self, table: ForkMappingTable, short_name: str) -> None:
        """Names without a matching key resolve to None."""
        assert resolve_fork(short_name, table) is None
