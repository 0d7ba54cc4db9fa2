"""Handlers behind the ``orsf`` subcommands.

Every handler receives the parsed namespace and the effective
configuration and returns the text printed on stdout.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional

from ..adapters import Adapter, NativeDecodeError, current_platform, json_adapter
from ..core.codec import DocumentDecodeError, dumps
from ..core.document import SetupDocument
from ..core.mapping import MappingError, flatten
from ..core.paths import PathError
from ..core.validator import Finding, Severity, count_by_severity, validate
from .errors import CliError
from .io import native_sources, read_bytes, read_document, resolve_adapter, write_output

__all__ = [
    "format_findings",
    "handle_export",
    "handle_flatten",
    "handle_import",
    "handle_validate",
]

logger = logging.getLogger(__name__)


def format_findings(findings: List[Finding]) -> str:
    """Render findings one per line followed by a severity summary."""

    counts = count_by_severity(findings)
    summary = (
        f"{counts[Severity.ERROR]} error(s), "
        f"{counts[Severity.WARNING]} warning(s), "
        f"{counts[Severity.INFO]} info"
    )
    if not findings:
        return f"Document is valid. {summary}"
    return "\n".join([*(str(finding) for finding in findings), summary])


def handle_validate(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    doc = read_document(namespace.file)
    findings = validate(doc)
    report = format_findings(findings)
    counts = count_by_severity(findings)
    failing = counts[Severity.ERROR] > 0 or (
        namespace.strict_warnings and counts[Severity.WARNING] > 0
    )
    logger.info(
        "Validated setup document.",
        extra={
            "event": "cli.validate",
            "path": str(namespace.file),
            "errors": counts[Severity.ERROR],
            "warnings": counts[Severity.WARNING],
        },
    )
    if failing:
        raise CliError(
            report,
            category="invalid",
            context={
                "path": str(namespace.file),
                "errors": counts[Severity.ERROR],
                "warnings": counts[Severity.WARNING],
            },
        )
    return report


def handle_flatten(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    doc = read_document(namespace.file)
    return json.dumps(flatten(doc), indent=2)


def _adapter(namespace: argparse.Namespace, config: Mapping[str, Any]) -> Adapter:
    return resolve_adapter(
        namespace.mapping,
        config,
        version=namespace.game_version or "",
        car_key=namespace.car_key or "",
    )


def _destination(output: Optional[Path], adapter: Adapter, doc: SetupDocument) -> Optional[Path]:
    if output is None:
        return None
    if output.is_dir():
        return output / adapter.suggested_filename(doc)
    return output


def _conversion_error(exc: Exception, namespace: argparse.Namespace) -> CliError:
    return CliError(
        str(exc),
        category="invalid",
        context={"path": str(namespace.file), "mapping": namespace.mapping},
    )


def _require_capability(adapter: Adapter, capability: str) -> None:
    if adapter.metadata.supports(capability):
        return
    raise CliError(
        f"Adapter {adapter.metadata.id!r} does not support {capability}",
        category="invalid",
        context={"adapter": adapter.metadata.id, "capability": capability},
    )


def _install_directory(adapter: Adapter) -> Path:
    directory = adapter.metadata.install_path()
    if directory is None:
        raise CliError(
            f"Adapter {adapter.metadata.id!r} declares no install path for {current_platform()}",
            category="not_found",
            context={"adapter": adapter.metadata.id, "platform": current_platform()},
        )
    return directory


def handle_export(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    doc = read_document(namespace.file)
    adapter = _adapter(namespace, config)
    _require_capability(adapter, "export")
    try:
        payload = adapter.to_native(doc)
    except MappingError as exc:
        raise _conversion_error(exc, namespace) from exc

    if namespace.install:
        destination = _install_directory(adapter) / adapter.suggested_filename(doc)
    else:
        destination = _destination(namespace.output, adapter, doc)
    if destination is None:
        return payload.decode("utf-8")
    write_output(payload, destination)
    logger.info(
        "Exported setup document.",
        extra={"event": "cli.export", "adapter": adapter.metadata.id, "path": str(destination)},
    )
    return f"Wrote {destination}"


def _import_one(
    source: Path,
    adapter: Adapter,
    template: Optional[SetupDocument],
    namespace: argparse.Namespace,
) -> SetupDocument:
    data = read_bytes(source, kind="native file")
    try:
        return adapter.from_native(data, template)
    except (NativeDecodeError, DocumentDecodeError, MappingError, PathError) as exc:
        raise CliError(
            f"{source}: {exc}",
            category="invalid",
            context={"path": str(source), "mapping": namespace.mapping},
        ) from exc


def _import_directory(
    adapter: Adapter,
    template: Optional[SetupDocument],
    namespace: argparse.Namespace,
) -> str:
    output: Optional[Path] = namespace.output
    if output is None or (output.exists() and not output.is_dir()):
        raise CliError(
            "Importing a directory needs --output pointing at a directory",
            category="usage",
            context={"path": str(namespace.file)},
        )
    sources = native_sources(namespace.file, adapter)
    if not sources:
        raise CliError(
            f"No files in {namespace.file} match {adapter.metadata.import_pattern()!r}",
            category="not_found",
            context={"path": str(namespace.file), "pattern": adapter.metadata.import_pattern()},
        )
    written: List[str] = []
    for source in sources:
        doc = _import_one(source, adapter, template, namespace)
        destination = output / f"{source.stem}.json"
        write_output((dumps(doc, indent=2) + "\n").encode("utf-8"), destination)
        written.append(f"Wrote {destination}")
    logger.info(
        "Imported native setup directory.",
        extra={
            "event": "cli.import",
            "adapter": adapter.metadata.id,
            "path": str(namespace.file),
            "files": len(written),
        },
    )
    return "\n".join(written)


def handle_import(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    adapter = _adapter(namespace, config)
    _require_capability(adapter, "import")
    template = None
    if namespace.template is not None:
        template = read_document(namespace.template, kind="template")
    if namespace.file.is_dir():
        return _import_directory(adapter, template, namespace)

    doc = _import_one(namespace.file, adapter, template, namespace)
    text = dumps(doc, indent=2)
    destination = _destination(namespace.output, json_adapter(), doc)
    if destination is None:
        return text
    write_output((text + "\n").encode("utf-8"), destination)
    logger.info(
        "Imported native setup.",
        extra={"event": "cli.import", "adapter": adapter.metadata.id, "path": str(destination)},
    )
    return f"Wrote {destination}"
