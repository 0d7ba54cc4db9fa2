"""Flat views of a setup document and declarative field mappings."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .document import SetupDocument
from .lookup import LookupTableError
from .paths import FieldPath, get_value, iter_leaf_paths, parse_path, set_value
from .transforms import TransformError

__all__ = [
    "FieldMapping",
    "FieldTransformError",
    "MappingError",
    "RequiredFieldError",
    "flatten",
    "inflate",
    "map_to_native",
    "map_to_orsf",
]

ScalarFunction = Callable[[float], float]


class MappingError(ValueError):
    """Base class for failures while applying field mappings."""


class RequiredFieldError(MappingError):
    """A required field was absent on the side being read."""

    def __init__(self, field: str, *, native: bool = False) -> None:
        prefix = "Required native field missing" if native else "Required field missing"
        super().__init__(f"{prefix}: {field}")
        self.field = field
        self.native = native


class FieldTransformError(MappingError):
    """A transform failed while converting a single field."""

    def __init__(self, orsf_path: str, native_key: str, direction: str, cause: Exception) -> None:
        super().__init__(
            f"Transform failed for {orsf_path} -> {native_key} ({direction}): {cause}"
        )
        self.orsf_path = orsf_path
        self.native_key = native_key
        self.direction = direction


@dataclass(frozen=True)
class FieldMapping:
    """Link between a canonical path and a native key.

    ``to_native`` converts canonical values into native ones and ``to_orsf``
    does the opposite; either may be omitted for an identity copy.
    """

    orsf_path: str
    native_key: str
    to_native: Optional[ScalarFunction] = None
    to_orsf: Optional[ScalarFunction] = None
    required: bool = False


# ---------------------------------------------------------------------------
# Flatten / inflate
# ---------------------------------------------------------------------------


def flatten(doc: SetupDocument) -> Dict[str, float]:
    """Return every populated numeric leaf keyed by its dotted path.

    Keys follow document section order; gear ratios are emitted as
    ``gear_<index>`` ahead of ``reverse_ratio``.
    """

    flat: Dict[str, float] = {}
    for field_path in iter_leaf_paths():
        if field_path.subsystem == "gearing" and field_path.leaf == "reverse_ratio":
            gearing = doc.setup.gearing
            for index, ratio in enumerate((gearing.gear_ratios or []) if gearing else []):
                flat[f"setup.gearing.gear_{index}"] = float(ratio)
        value = get_value(doc, field_path)
        if value is not None:
            flat[str(field_path)] = value
    return flat


def _gear_order(item: Tuple[str, float]) -> Tuple[int, int]:
    try:
        field_path: Optional[FieldPath] = parse_path(item[0])
    except ValueError:
        field_path = None
    if field_path is None or field_path.gear_index is None:
        return (0, 0)
    return (1, field_path.gear_index)


def inflate(
    flat: Mapping[str, float],
    template: Optional[SetupDocument] = None,
    *,
    strict: bool = False,
) -> SetupDocument:
    """Write ``flat`` into a deep copy of ``template`` (or a new document).

    Gear entries are applied in ascending index order after every other
    entry, so ``gear_0`` … ``gear_n`` rebuild a list regardless of key order.
    """

    doc = copy.deepcopy(template) if template is not None else SetupDocument()
    for path, value in sorted(flat.items(), key=_gear_order):
        set_value(doc, path, value, strict=strict)
    return doc


# ---------------------------------------------------------------------------
# Field mappings
# ---------------------------------------------------------------------------


def _apply(
    func: Optional[ScalarFunction],
    value: float,
    mapping: FieldMapping,
    direction: str,
) -> float:
    try:
        result = value if func is None else float(func(value))
    except (TransformError, LookupTableError, ArithmeticError, ValueError) as exc:
        raise FieldTransformError(mapping.orsf_path, mapping.native_key, direction, exc) from exc
    if not math.isfinite(result):
        cause = ValueError(f"non-finite value {result!r}")
        raise FieldTransformError(mapping.orsf_path, mapping.native_key, direction, cause)
    return result


def map_to_native(doc: SetupDocument, mappings: Iterable[FieldMapping]) -> Dict[str, float]:
    """Produce the native key/value map declared by ``mappings``.

    Raises :class:`RequiredFieldError` for an absent required path and
    :class:`FieldTransformError` when a forward transform fails; no partial
    map is returned in either case.
    """

    native: Dict[str, float] = {}
    for mapping in mappings:
        value = get_value(doc, mapping.orsf_path)
        if value is None:
            if mapping.required:
                raise RequiredFieldError(mapping.orsf_path)
            continue
        native[mapping.native_key] = _apply(mapping.to_native, value, mapping, "to_native")
    return native


def map_to_orsf(
    native: Mapping[str, float],
    mappings: Sequence[FieldMapping],
    template: Optional[SetupDocument] = None,
    *,
    strict: bool = False,
) -> SetupDocument:
    """Write the native values named by ``mappings`` into a copy of ``template``.

    Paths not covered by ``mappings`` keep their template values.
    """

    doc = copy.deepcopy(template) if template is not None else SetupDocument()
    pending: List[Tuple[FieldMapping, float]] = []
    for mapping in mappings:
        if mapping.native_key not in native:
            if mapping.required:
                raise RequiredFieldError(mapping.native_key, native=True)
            continue
        value = _apply(mapping.to_orsf, float(native[mapping.native_key]), mapping, "to_orsf")
        pending.append((mapping, value))

    pending.sort(key=lambda item: _gear_order((item[0].orsf_path, item[1])))
    for mapping, value in pending:
        set_value(doc, mapping.orsf_path, value, strict=strict)
    return doc
