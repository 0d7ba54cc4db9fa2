"""CLI-related test helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import pytest

from orsf.cli import run_cli as _run_cli
from orsf.configuration import CONFIG_ENV_VAR


def run_cli_in_tmp(
    args: Sequence[str] | Iterable[str],
    *,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> str:
    """Execute ``run_cli`` with ``tmp_path`` as the working directory.

    ``ORSF_CONFIG`` is cleared so only configuration inside ``tmp_path`` is
    picked up.
    """

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    return _run_cli(list(args))
