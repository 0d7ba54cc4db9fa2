"""ISO-8601 timestamp helpers used by setup metadata."""

from __future__ import annotations

import re
from datetime import datetime, timezone

__all__ = [
    "ISO8601_PATTERN",
    "is_valid_iso8601",
    "iso8601_to_unix",
    "now_iso8601",
    "unix_to_iso8601",
]

# YYYY-MM-DDTHH:MM:SS(.sss)?(Z|[+-]HH:MM)?
ISO8601_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?P<fraction>\.\d{3})?(?P<zone>Z|[+-]\d{2}:\d{2})?$"
)

_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def now_iso8601() -> str:
    """Return the current UTC time with second precision and a ``Z`` suffix."""

    return datetime.now(timezone.utc).strftime(_FORMAT)


def is_valid_iso8601(value: object) -> bool:
    """Return whether ``value`` has the shape accepted for setup timestamps.

    Only the shape is checked; ``2024-13-45T99:00:00Z`` passes.
    """

    return isinstance(value, str) and ISO8601_PATTERN.match(value) is not None


def iso8601_to_unix(value: str) -> int:
    """Return whole seconds since the epoch for ``value``.

    Timestamps without a zone designator are read as UTC.
    """

    match = ISO8601_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Invalid ISO8601 timestamp: {value!r}")
    zone = match.group("zone")
    text = f"{match.group('date')}T{match.group('time')}"
    if zone is None or zone == "Z":
        parsed = datetime.fromisoformat(text).replace(tzinfo=timezone.utc)
    else:
        parsed = datetime.fromisoformat(text + zone)
    return int(parsed.timestamp())


def unix_to_iso8601(seconds: float) -> str:
    """Format ``seconds`` since the epoch as a UTC timestamp."""

    return datetime.fromtimestamp(int(seconds), tz=timezone.utc).strftime(_FORMAT)
