"""YAML loader for the fork mappings file."""

from __future__ import annotations

from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .models import ForkMappingTable
from .validation import ForkMappingError, validate_table

YAML_VERSION = (1, 2)


def load_fork_mappings(path: Path | str) -> ForkMappingTable:
    """Parse and validate a fork mappings file.

    Raises
    ------
    ForkMappingError
        If the file is unreadable, is not valid YAML, does not match the
        expected shape, or contains unusable mappings.

    """
    path_obj = Path(path)

    try:
        loaded = _yaml().load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise ForkMappingError([f"failed to read {path_obj}: {exc}"]) from exc

    if loaded is None:
        raise ForkMappingError([f"{path_obj} is empty"])

    try:
        table = msgspec.convert(loaded, type=ForkMappingTable)
    except msgspec.ValidationError as exc:
        raise ForkMappingError([f"schema validation failed: {exc}"]) from exc

    return validate_table(table)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
