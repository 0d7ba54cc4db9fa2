"""Helpers to load project-level configuration files."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping as ABCMapping
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore


CONFIG_ENV_VAR = "ORSF_CONFIG"

_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "orsf"

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {"level": "info", "output": "stderr", "format": "json"},
    "paths": {"strict": False},
    "mappings": {},
}


def _as_dict(payload: ABCMapping[str, Any]) -> dict[str, Any]:
    """Recursively coerce TOML mappings into regular dictionaries."""

    result: dict[str, Any] = {}
    for key, value in payload.items():
        key_str = str(key)
        if isinstance(value, ABCMapping):
            result[key_str] = _as_dict(value)
        elif isinstance(value, list):
            result[key_str] = [
                _as_dict(item) if isinstance(item, ABCMapping) else item for item in value
            ]
        else:
            result[key_str] = value
    return result


def _resolve_pyproject_path(candidate: Path) -> Path | None:
    """Return the concrete ``pyproject.toml`` path for ``candidate`` if possible."""

    candidate = candidate.expanduser()
    if candidate.suffix == ".toml":
        return candidate
    if candidate.suffix:
        return None
    return candidate / _PROJECT_FILENAME


def _iter_unique_paths(paths: Iterable[Path]) -> list[Path]:
    seen: dict[Path, None] = {}
    ordered: list[Path] = []
    for path in paths:
        resolved = path.expanduser().resolve(strict=False)
        if resolved in seen:
            continue
        seen[resolved] = None
        ordered.append(resolved)
    return ordered


def _load_toml_mapping(path: Path) -> dict[str, Any] | None:
    if not path.is_file():
        return None
    with path.open("rb") as handle:
        data = tomllib.load(handle)
    if isinstance(data, ABCMapping):
        return _as_dict(data)
    return None


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.orsf]`` section from ``pyproject.toml``.

    ``path`` may name the TOML file or the directory holding it. Returns
    ``None`` when the file or the section is absent.
    """

    pyproject_path = _resolve_pyproject_path(path)
    if pyproject_path is None:
        return None

    pyproject_path = pyproject_path.expanduser().resolve(strict=False)
    pyproject_payload = _load_toml_mapping(pyproject_path)
    if not pyproject_payload:
        return None

    tool_section = pyproject_payload.get("tool")
    if not isinstance(tool_section, ABCMapping):
        return None

    section = tool_section.get(_TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None

    return _as_dict(section), pyproject_path


def _merge(base: ABCMapping[str, Any], override: ABCMapping[str, Any]) -> dict[str, Any]:
    merged = _as_dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, ABCMapping) and isinstance(value, ABCMapping):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


def resolve_config(
    explicit: Path | None = None,
    *,
    cwd: Path | None = None,
) -> dict[str, Any]:
    """Return the effective configuration merged over :data:`DEFAULT_CONFIG`.

    Candidates are tried in order: ``explicit``, ``$ORSF_CONFIG`` and the
    working directory. The first one carrying ``[tool.orsf]`` wins and its
    location is recorded under ``_config_path``.
    """

    candidates: list[Path] = []
    if explicit is not None:
        candidates.append(Path(explicit))
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        candidates.append(Path(env_value))
    candidates.append(Path(cwd) if cwd is not None else Path.cwd())

    for candidate in _iter_unique_paths(candidates):
        loaded = load_project_config(candidate)
        if loaded is None:
            continue
        config, source_path = loaded
        merged = _merge(DEFAULT_CONFIG, config)
        merged["_config_path"] = source_path
        return merged
    return _merge(DEFAULT_CONFIG, {})


def mappings_directory(config: ABCMapping[str, Any]) -> Path | None:
    """Return ``[mappings].directory`` resolved against the config file."""

    table = config.get("mappings")
    if not isinstance(table, ABCMapping):
        return None
    directory = table.get("directory")
    if not directory:
        return None
    path = Path(str(directory)).expanduser()
    source = config.get("_config_path")
    if not path.is_absolute() and isinstance(source, Path):
        path = source.parent / path
    return path


def strict_paths(config: ABCMapping[str, Any]) -> bool:
    table = config.get("paths")
    if not isinstance(table, ABCMapping):
        return False
    return bool(table.get("strict", False))


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG",
    "load_project_config",
    "mappings_directory",
    "resolve_config",
    "strict_paths",
]
