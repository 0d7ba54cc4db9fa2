"""Convenience re-exports for test helpers."""

from __future__ import annotations

from tests.helpers.documents import (
    build_context,
    build_document,
    build_full_document,
    build_gearing,
)
from tests.helpers.cli import run_cli_in_tmp
from tests.helpers.mappings import (
    SAMPLE_MAPPING_TOML,
    build_sample_mappings,
    write_mapping_file,
)

__all__ = [
    "SAMPLE_MAPPING_TOML",
    "build_context",
    "build_document",
    "build_full_document",
    "build_gearing",
    "build_sample_mappings",
    "run_cli_in_tmp",
    "write_mapping_file",
]
