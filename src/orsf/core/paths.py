"""Dotted-path addressing into the numeric leaves of a setup document.

Grammar::

    setup.<subsystem>.<leaf>
    setup.suspension.<corner>.<leaf>
    setup.gearing.gear_<index>

Reads never create anything. Writes create absent containers on the way to
the leaf. Paths that cannot be resolved are logged and ignored unless the
caller asks for ``strict`` handling.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from .document import (
    Aerodynamics,
    Brakes,
    CornerSuspension,
    Drivetrain,
    Electronics,
    Fuel,
    Gearing,
    SetupDocument,
    Suspension,
    Tires,
    numeric_leaves,
)
from .units import round_half_away

__all__ = [
    "CORNERS",
    "FieldPath",
    "PathError",
    "ROOT",
    "SUBSYSTEMS",
    "get_value",
    "iter_leaf_paths",
    "parse_path",
    "set_value",
]

logger = logging.getLogger(__name__)

ROOT = "setup"

# Section order used by flatten and iter_leaf_paths.
SUBSYSTEMS: Mapping[str, type] = {
    "aero": Aerodynamics,
    "suspension": Suspension,
    "tires": Tires,
    "drivetrain": Drivetrain,
    "gearing": Gearing,
    "brakes": Brakes,
    "electronics": Electronics,
    "fuel": Fuel,
}

CORNERS: Tuple[str, ...] = Suspension.CORNERS

_GEAR_PATTERN = re.compile(r"^gear_(?P<index>\d+)$")

_LEAF_KINDS: Dict[type, Dict[str, type]] = {
    cls: dict(numeric_leaves(cls))
    for cls in (*SUBSYSTEMS.values(), CornerSuspension)
}


class PathError(ValueError):
    """Raised for paths that do not name a numeric leaf."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{reason}: {path!r}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class FieldPath:
    """Parsed form of a dotted field path."""

    subsystem: str
    leaf: str
    corner: Optional[str] = None
    gear_index: Optional[int] = None

    @property
    def kind(self) -> type:
        """Python type stored at the leaf (``float`` or ``int``)."""

        if self.gear_index is not None:
            return float
        owner = CornerSuspension if self.corner is not None else SUBSYSTEMS[self.subsystem]
        return _LEAF_KINDS[owner][self.leaf]

    def __str__(self) -> str:
        parts = [ROOT, self.subsystem]
        if self.corner is not None:
            parts.append(self.corner)
        parts.append(self.leaf)
        return ".".join(parts)


def parse_path(path: str) -> FieldPath:
    """Parse ``path`` or raise :class:`PathError` describing the problem."""

    if not isinstance(path, str) or not path:
        raise PathError(str(path), "empty path")
    segments = path.split(".")
    if segments[0] != ROOT:
        raise PathError(path, f"path must start with '{ROOT}'")
    if len(segments) < 3:
        raise PathError(path, "too few segments")

    subsystem = segments[1]
    owner = SUBSYSTEMS.get(subsystem)
    if owner is None:
        raise PathError(path, f"unknown subsystem {subsystem!r}")

    if subsystem == "suspension" and len(segments) == 4:
        corner, name = segments[2], segments[3]
        if corner not in CORNERS:
            raise PathError(path, f"unknown corner {corner!r}")
        if name not in _LEAF_KINDS[CornerSuspension]:
            raise PathError(path, f"unknown corner field {name!r}")
        return FieldPath(subsystem, name, corner=corner)

    if len(segments) != 3:
        raise PathError(path, "too many segments")

    name = segments[2]
    if subsystem == "gearing":
        match = _GEAR_PATTERN.match(name)
        if match is not None:
            return FieldPath(subsystem, name, gear_index=int(match.group("index")))
    if name not in _LEAF_KINDS[owner]:
        raise PathError(path, f"unknown field {name!r} in {subsystem!r}")
    return FieldPath(subsystem, name)


def iter_leaf_paths() -> Iterator[FieldPath]:
    """Yield every fixed numeric leaf in document section order.

    Gear ratios are positional and therefore not included.
    """

    for subsystem, owner in SUBSYSTEMS.items():
        if subsystem == "suspension":
            for corner in CORNERS:
                for name in _LEAF_KINDS[CornerSuspension]:
                    yield FieldPath(subsystem, name, corner=corner)
        for name in _LEAF_KINDS[owner]:
            yield FieldPath(subsystem, name)


def _container(doc: SetupDocument, field_path: FieldPath, *, create: bool) -> Any:
    section = getattr(doc.setup, field_path.subsystem)
    if section is None:
        if not create:
            return None
        section = SUBSYSTEMS[field_path.subsystem]()
        setattr(doc.setup, field_path.subsystem, section)
    if field_path.corner is None:
        return section
    corner = getattr(section, field_path.corner)
    if corner is None:
        if not create:
            return None
        corner = CornerSuspension()
        setattr(section, field_path.corner, corner)
    return corner


def get_value(doc: SetupDocument, path: str | FieldPath) -> Optional[float]:
    """Return the numeric value at ``path`` or ``None``.

    ``None`` covers malformed paths, absent containers and empty leaves.
    """

    if isinstance(path, FieldPath):
        field_path = path
    else:
        try:
            field_path = parse_path(path)
        except PathError:
            return None

    container = _container(doc, field_path, create=False)
    if container is None:
        return None
    if field_path.gear_index is not None:
        ratios = container.gear_ratios or []
        if field_path.gear_index >= len(ratios):
            return None
        return float(ratios[field_path.gear_index])
    value = getattr(container, field_path.leaf)
    return None if value is None else float(value)


def _reject(path: str, reason: str, strict: bool) -> None:
    error = PathError(path, reason)
    if strict:
        raise error
    logger.warning(
        "Ignoring write to unresolvable setup path.",
        extra={"event": "paths.unresolvable", "path": path, "reason": reason},
    )


def set_value(
    doc: SetupDocument,
    path: str | FieldPath,
    value: float,
    *,
    strict: bool = False,
) -> bool:
    """Write ``value`` at ``path``, creating absent containers.

    Integer leaves store ``value`` rounded half away from zero. A gear index
    equal to the current number of ratios appends; a larger index cannot be
    represented and is rejected like a malformed path, as is a non-finite
    ``value``. Returns ``True`` when the document was written.
    """

    if isinstance(path, FieldPath):
        field_path = path
    else:
        try:
            field_path = parse_path(path)
        except PathError as exc:
            _reject(str(path), exc.reason, strict)
            return False

    number = float(value)
    if not math.isfinite(number):
        _reject(str(path), f"non-finite value {number!r}", strict)
        return False
    if field_path.gear_index is not None:
        gearing = doc.setup.gearing
        current = len(gearing.gear_ratios or []) if gearing is not None else 0
        if field_path.gear_index > current:
            _reject(
                str(path),
                f"gear index {field_path.gear_index} beyond {current} ratios",
                strict,
            )
            return False
        container = _container(doc, field_path, create=True)
        if container.gear_ratios is None:
            container.gear_ratios = []
        if field_path.gear_index == current:
            container.gear_ratios.append(number)
        else:
            container.gear_ratios[field_path.gear_index] = number
        return True

    container = _container(doc, field_path, create=True)
    if field_path.kind is int:
        setattr(container, field_path.leaf, int(round_half_away(number)))
    else:
        setattr(container, field_path.leaf, number)
    return True
