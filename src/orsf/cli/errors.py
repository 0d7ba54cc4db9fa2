"""Errors raised by the ``orsf`` subcommands and their exit statuses."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

__all__ = ["EXIT_STATUSES", "CliError", "log_cli_error"]

logger = logging.getLogger("orsf.cli")

EXIT_STATUSES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
    "invalid": 5,
}


def _plain(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class CliError(RuntimeError):
    """A command failure with a category deciding the exit status.

    Unknown categories exit like ``runtime`` failures. ``context`` values that
    are not JSON scalars are stored as strings so the log record stays
    serialisable.
    """

    def __init__(
        self,
        message: str,
        *,
        category: str = "runtime",
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
        logged: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category or "runtime"
        if status_code is None:
            status_code = EXIT_STATUSES.get(self.category, EXIT_STATUSES["runtime"])
        self.status_code = status_code
        self.context: Dict[str, Any] = {key: _plain(value) for key, value in (context or {}).items()}
        self.logged = logged


def log_cli_error(error: CliError, *, target: Optional[logging.Logger] = None) -> None:
    (target or logger).error(
        error.message,
        extra={
            "event": "cli.error",
            "category": error.category,
            "status_code": error.status_code,
            "context": error.context,
        },
        exc_info=error,
    )
