"""Small helpers shared across :mod:`orsf`."""

from orsf.utils.timestamps import (
    is_valid_iso8601,
    iso8601_to_unix,
    now_iso8601,
    unix_to_iso8601,
)

__all__ = [
    "is_valid_iso8601",
    "iso8601_to_unix",
    "now_iso8601",
    "unix_to_iso8601",
]
