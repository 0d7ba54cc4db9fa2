"""Command line application entry point for ORSF."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, NoReturn, Optional, Sequence

from ..configuration import resolve_config
from ..logging.config import setup_logging
from .errors import CliError, log_cli_error
from .parser import build_parser

CommandHandler = Callable[..., str]


def _preliminary_parser() -> argparse.ArgumentParser:
    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding a [tool.orsf] section.",
    )
    config_parser.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        help="Logging level (default: info).",
    )
    config_parser.add_argument(
        "--log-output",
        dest="log_output",
        default=None,
        help="Logging destination (stdout, stderr or a file path).",
    )
    config_parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=None,
        help="Logging formatter (json or text).",
    )
    return config_parser


def _logging_config(config: Mapping[str, Any], preliminary: argparse.Namespace) -> dict[str, Any]:
    logging_config = dict(config.get("logging", {}))
    if preliminary.log_level is not None:
        logging_config["level"] = preliminary.log_level
    if preliminary.log_output is not None:
        logging_config["output"] = preliminary.log_output
    if preliminary.log_format is not None:
        logging_config["format"] = preliminary.log_format
    logging_config.setdefault("level", "info")
    logging_config.setdefault("output", "stderr")
    logging_config.setdefault("format", "json")
    return logging_config


def _exit_with(exc: CliError) -> NoReturn:
    if not exc.logged:
        log_cli_error(exc)
        exc.logged = True
    message = exc.message
    if message:
        sys.stdout.write(message)
        if not message.endswith("\n"):
            sys.stdout.write("\n")
    raise SystemExit(exc.status_code) from exc


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the ORSF command line interface and return its output."""

    preliminary, remaining = _preliminary_parser().parse_known_args(args)

    config = resolve_config(preliminary.config_path)
    logging_config = _logging_config(config, preliminary)
    config["logging"] = logging_config
    try:
        setup_logging(config)
    except ValueError as exc:
        # Logging is not configured yet; report on stdout only.
        sys.stdout.write(f"{exc}\n")
        raise SystemExit(2) from exc

    parser = build_parser(config)
    parser.set_defaults(config_path=preliminary.config_path)
    parser.set_defaults(log_level=logging_config.get("level"))
    parser.set_defaults(log_output=logging_config.get("output"))
    parser.set_defaults(log_format=logging_config.get("format"))
    namespace = parser.parse_args(list(remaining), namespace=preliminary)
    namespace.config = config
    namespace.config_path = namespace.config_path or config.get("_config_path")

    handler: Optional[CommandHandler] = getattr(namespace, "handler", None)
    try:
        if handler is None:
            raise CliError(
                f"Unknown command '{getattr(namespace, 'command', None)}'.",
                category="usage",
                context={"command": getattr(namespace, "command", None)},
            )
        result = handler(namespace, config=config)
    except CliError as exc:
        _exit_with(exc)
    if result:
        sys.stdout.write(result)
        if not result.endswith("\n"):
            sys.stdout.write("\n")
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
