"""Fork mapping table: loading, validation and lookup."""

from __future__ import annotations

from .loader import load_fork_mappings
from .models import ForkMapping, ForkMappingTable
from .resolver import resolve_fork
from .validation import ForkMappingError, validate_table

__all__ = [
    "ForkMapping",
    "ForkMappingError",
    "ForkMappingTable",
    "load_fork_mappings",
    "resolve_fork",
    "validate_table",
]
