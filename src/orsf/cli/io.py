"""File helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Optional

from ..adapters import (
    Adapter,
    AdapterRegistrationError,
    AdapterRegistry,
    MappingDeclarationError,
    load_adapter,
    load_mapping_directory,
)
from ..configuration import mappings_directory, strict_paths
from ..core.codec import DocumentDecodeError, loads
from ..core.document import SetupDocument
from .errors import CliError

__all__ = ["native_sources", "read_bytes", "read_document", "resolve_adapter", "write_output"]


def read_bytes(source: Path, *, kind: str) -> bytes:
    if not source.is_file():
        raise CliError(
            f"{kind.capitalize()} {source} does not exist",
            category="not_found",
            context={"path": str(source), "kind": kind},
        )
    try:
        return source.read_bytes()
    except OSError as exc:
        raise CliError(
            f"Unable to read {kind} {source}: {exc}",
            category="io",
            context={"path": str(source), "kind": kind},
        ) from exc


def read_document(source: Path, *, kind: str = "document") -> SetupDocument:
    data = read_bytes(source, kind=kind)
    try:
        return loads(data)
    except DocumentDecodeError as exc:
        raise CliError(
            f"{source}: {exc}",
            category="invalid",
            context={"path": str(source), "kind": kind},
        ) from exc


def write_output(payload: bytes, destination: Path) -> Path:
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(payload)
    except OSError as exc:
        raise CliError(
            f"Unable to write {destination}: {exc}",
            category="io",
            context={"path": str(destination)},
        ) from exc
    return destination


def resolve_adapter(
    reference: str,
    config: Mapping[str, Any],
    *,
    version: str = "",
    car_key: str = "",
) -> Adapter:
    """Load the adapter named by ``reference``.

    ``reference`` is either a mapping file or the id of an adapter declared
    in the configured mappings directory.
    """

    strict = strict_paths(config)
    candidate = Path(reference).expanduser()
    try:
        if candidate.is_file():
            return load_adapter(candidate, strict=strict)
        directory: Optional[Path] = mappings_directory(config)
        if directory is None:
            raise CliError(
                f"Mapping file {candidate} does not exist",
                category="not_found",
                context={"mapping": reference},
            )
        registry = AdapterRegistry()
        load_mapping_directory(directory, registry, strict=strict)
    except (MappingDeclarationError, AdapterRegistrationError) as exc:
        raise CliError(
            str(exc),
            category="invalid",
            context={"mapping": reference},
        ) from exc
    except OSError as exc:
        raise CliError(
            f"Unable to read mapping {reference}: {exc}",
            category="io",
            context={"mapping": reference},
        ) from exc

    adapter = registry.resolve(reference, version, car_key)
    if adapter is None:
        raise CliError(
            f"No adapter '{reference}' in mappings directory {directory}",
            category="not_found",
            context={"mapping": reference, "directory": str(directory)},
        )
    return adapter


def native_sources(directory: Path, adapter: Adapter) -> List[Path]:
    """Files in ``directory`` matching the import glob of ``adapter``."""

    try:
        entries = sorted(directory.iterdir())
    except OSError as exc:
        raise CliError(
            f"Unable to list {directory}: {exc}",
            category="io",
            context={"path": str(directory)},
        ) from exc
    return [entry for entry in entries if entry.is_file() and adapter.metadata.matches_import(entry.name)]
