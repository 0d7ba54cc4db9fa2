"""Package version lookup."""

from __future__ import annotations

import os
import re
from importlib import metadata
from pathlib import Path
from typing import Mapping, Optional

from packaging.version import InvalidVersion, Version

__all__ = ["RELEASE_VERSION_ENV_VAR", "__version__", "resolve_version"]

RELEASE_VERSION_ENV_VAR = "ORSF_RELEASE_VERSION"

_DISTRIBUTION = "orsf"
_CHANGELOG_HEADING = re.compile(r"^## v(?P<version>\d+\.\d+\.\d+)\b")


def _changelog_version(root: Path) -> Optional[str]:
    changelog = root / "CHANGELOG.md"
    if not changelog.is_file():
        return None
    for line in changelog.read_text(encoding="utf-8").splitlines():
        match = _CHANGELOG_HEADING.match(line)
        if match:
            return match.group("version")
    return None


def _checkout_version() -> str:
    # src/orsf/_version.py -> the repository root is two levels above the package.
    for root in Path(__file__).resolve().parents[1:3]:
        version = _changelog_version(root)
        if version is not None:
            return version
    raise RuntimeError("Unable to determine the 'orsf' version: not installed and no CHANGELOG.md")


def resolve_version(environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the ``MAJOR.MINOR.PATCH`` version of the package.

    ``ORSF_RELEASE_VERSION`` wins over the installed distribution metadata,
    which wins over the newest ``## vX.Y.Z`` heading of ``CHANGELOG.md``.
    """

    env = os.environ if environ is None else environ
    raw = env.get(RELEASE_VERSION_ENV_VAR)
    if not raw:
        try:
            raw = metadata.version(_DISTRIBUTION)
        except metadata.PackageNotFoundError:
            raw = _checkout_version()
    try:
        parsed = Version(raw)
    except InvalidVersion as exc:
        raise RuntimeError(f"Invalid 'orsf' version {raw!r}") from exc
    if len(parsed.release) != 3:
        raise RuntimeError(f"The 'orsf' version must be MAJOR.MINOR.PATCH, got {raw!r}")
    return raw


__version__ = resolve_version()
