"""Argument parsing for the ORSF CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from .commands import handle_export, handle_flatten, handle_import, handle_validate


def _add_mapping_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mapping",
        required=True,
        help=(
            "Mapping file (.toml or .json) or the id of an adapter declared in "
            "the configured mappings directory."
        ),
    )
    parser.add_argument(
        "--game-version",
        dest="game_version",
        default=None,
        help="Game version used when resolving an adapter id.",
    )
    parser.add_argument(
        "--car-key",
        dest="car_key",
        default=None,
        help="Car key used when resolving an adapter id.",
    )


def _add_output_argument(parser: Any) -> None:
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Destination file or directory (default: print to stdout).",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg = dict(config.get("logging", {}))

    parser = argparse.ArgumentParser(
        prog="orsf",
        description="ORSF: convert and validate Open Racing Setup Format documents",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding a [tool.orsf] section.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Check a setup document and print its findings.",
    )
    validate_parser.add_argument("file", type=Path, help="Canonical JSON setup document.")
    validate_parser.add_argument(
        "--strict-warnings",
        action="store_true",
        help="Fail when any warning is reported, not only on errors.",
    )
    validate_parser.set_defaults(handler=handle_validate)

    flatten_parser = subparsers.add_parser(
        "flatten",
        help="Print every numeric setup value keyed by its dotted path.",
    )
    flatten_parser.add_argument("file", type=Path, help="Canonical JSON setup document.")
    flatten_parser.set_defaults(handler=handle_flatten)

    export_parser = subparsers.add_parser(
        "export",
        help="Convert a setup document into a native setup file.",
    )
    export_parser.add_argument("file", type=Path, help="Canonical JSON setup document.")
    _add_mapping_arguments(export_parser)
    destination = export_parser.add_mutually_exclusive_group()
    _add_output_argument(destination)
    destination.add_argument(
        "--install",
        action="store_true",
        help="Write into the setup folder the adapter declares for this platform.",
    )
    export_parser.set_defaults(handler=handle_export)

    import_parser = subparsers.add_parser(
        "import",
        help="Convert a native setup file into a setup document.",
    )
    import_parser.add_argument(
        "file",
        type=Path,
        help="Native setup file, or a directory whose files match the adapter import glob.",
    )
    _add_mapping_arguments(import_parser)
    _add_output_argument(import_parser)
    import_parser.add_argument(
        "--template",
        type=Path,
        default=None,
        help="Setup document providing values the native file does not carry.",
    )
    import_parser.set_defaults(handler=handle_import)

    return parser
