"""Adapters declared in TOML or JSON mapping files.

A mapping file holds an ``[adapter]`` table and a list of ``[[fields]]``::

    [adapter]
    id = "customgame"
    version = "1.0"
    car_key = "gt3"
    format = "ini"
    file_extension = "ini"
    filename_template = "{car}_{track}_{name}.{ext}"
    import_glob = "{car}_*.{ext}"

    [install_paths]
    windows = "~/Documents/CustomGame/setups"
    linux = "~/.local/share/customgame/setups"

    [capabilities]
    import = false

    [[fields]]
    orsf = "setup.tires.pressure_fl_kpa"
    native = "tyre_fl"
    transform = "unit"
    from = "kpa"
    to = "psi"
    codomain = { min = 10.0, max = 60.0, step = 0.1 }

The forward transform turns canonical values into native ones. Unless a
``reverse`` descriptor is given, the reverse is the forward's inverse.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Tuple

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from ..core import transforms
from ..core.mapping import FieldMapping
from ..core.paths import PathError, parse_path
from ..core.transforms import Transform, TransformError
from ..core.units import UnitDimensionError
from .base import Adapter, AdapterMetadata
from .formats import ini_adapter, json_adapter
from .registry import AdapterRegistry

__all__ = [
    "MappingDeclaration",
    "MappingDeclarationError",
    "build_adapter",
    "build_transform",
    "load_adapter",
    "load_mapping_directory",
    "load_mapping_file",
    "parse_mapping_declaration",
]

logger = logging.getLogger(__name__)

_SUPPORTED_SUFFIXES = (".toml", ".json")
_FORMATS = ("ini", "json")


class MappingDeclarationError(ValueError):
    """Raised when a mapping file is malformed."""


@dataclass(frozen=True)
class MappingDeclaration:
    """Parsed mapping file."""

    metadata: AdapterMetadata
    mappings: Tuple[FieldMapping, ...]
    format: str = "ini"
    source: Optional[Path] = None


# ---------------------------------------------------------------------------
# Transform descriptors
# ---------------------------------------------------------------------------


def _number(descriptor: Mapping[str, Any], *names: str, default: Optional[float] = None) -> float:
    for name in names:
        if name in descriptor:
            value = descriptor[name]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise MappingDeclarationError(f"'{name}' must be a number, got {value!r}")
            return float(value)
    if default is None:
        raise MappingDeclarationError(f"transform is missing '{names[0]}'")
    return default


def _lut_entries(raw: Any) -> List[Tuple[float, float]]:
    if not isinstance(raw, list) or not raw:
        raise MappingDeclarationError("'lut' must be a non-empty list of points")
    entries: List[Tuple[float, float]] = []
    for point in raw:
        if isinstance(point, ABCMapping):
            entries.append((_number(point, "x"), _number(point, "y")))
        elif isinstance(point, (list, tuple)) and len(point) == 2:
            entries.append((_number({"x": point[0]}, "x"), _number({"y": point[1]}, "y")))
        else:
            raise MappingDeclarationError(f"invalid lookup table point {point!r}")
    return entries


def _unit_transform(descriptor: Mapping[str, Any]) -> Transform:
    source, target = descriptor.get("from"), descriptor.get("to")
    if not source or not target:
        raise MappingDeclarationError("unit transform needs 'from' and 'to'")
    return transforms.unit_convert(source, target)


def _compose_transform(descriptor: Mapping[str, Any]) -> Transform:
    steps = descriptor.get("steps")
    if not isinstance(steps, list):
        raise MappingDeclarationError("'steps' must be a list of transforms")
    return transforms.compose(build_transform(step) for step in steps)


_BUILDERS: Mapping[str, Callable[[Mapping[str, Any]], Transform]] = {
    "identity": lambda d: transforms.identity(),
    "scale": lambda d: transforms.scale(_number(d, "factor", "scale")),
    "offset": lambda d: transforms.offset(_number(d, "amount", "offset")),
    "linear": lambda d: transforms.linear(_number(d, "scale"), _number(d, "offset", default=0.0)),
    "invert": lambda d: transforms.invert(),
    "negate": lambda d: transforms.negate(),
    "clamp": lambda d: transforms.clamp(
        _number(d, "min", default=-math.inf),
        _number(d, "max", default=math.inf),
        _number(d, "step", default=0.0),
    ),
    "percent_to_ratio": lambda d: transforms.percent_to_ratio(),
    "ratio_to_percent": lambda d: transforms.ratio_to_percent(),
    "unit": _unit_transform,
    "unit_convert": _unit_transform,
    "lut": lambda d: transforms.lookup_table(_lut_entries(d.get("lut"))),
    "lookup_table": lambda d: transforms.lookup_table(_lut_entries(d.get("lut"))),
    "reverse_lut": lambda d: transforms.reverse_lookup_table(_lut_entries(d.get("lut"))),
    "reverse_lookup_table": lambda d: transforms.reverse_lookup_table(_lut_entries(d.get("lut"))),
    "compose": _compose_transform,
}


def build_transform(descriptor: Mapping[str, Any]) -> Transform:
    """Build a transform from a descriptor table.

    ``transform`` names the constructor and the remaining keys are its
    parameters. A descriptor with ``steps`` but no ``transform`` composes the
    steps left to right.
    """

    if not isinstance(descriptor, ABCMapping):
        raise MappingDeclarationError(f"transform descriptor must be a table, got {descriptor!r}")
    name = descriptor.get("transform")
    if name is None and "steps" in descriptor:
        name = "compose"
    builder = _BUILDERS.get(str(name)) if name is not None else None
    if builder is None:
        raise MappingDeclarationError(f"unknown transform {name!r}")
    try:
        return builder(descriptor)
    except MappingDeclarationError:
        raise
    except (TransformError, UnitDimensionError, ValueError) as exc:
        raise MappingDeclarationError(f"invalid '{name}' transform: {exc}") from exc


def _codomain(raw: Any) -> Transform:
    if not isinstance(raw, ABCMapping):
        raise MappingDeclarationError("'codomain' must be a table")
    return build_transform({"transform": "clamp", **raw})


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


def _field_mapping(entry: Any, index: int) -> FieldMapping:
    if not isinstance(entry, ABCMapping):
        raise MappingDeclarationError(f"fields[{index}] must be a table")
    orsf_path = entry.get("orsf")
    native_key = entry.get("native", entry.get("nativeKey"))
    if not isinstance(orsf_path, str) or not isinstance(native_key, str) or not native_key:
        raise MappingDeclarationError(f"fields[{index}] needs string 'orsf' and 'native' keys")
    try:
        parse_path(orsf_path)
    except PathError as exc:
        raise MappingDeclarationError(f"fields[{index}]: {exc}") from exc

    forward: Optional[Transform] = None
    if "transform" in entry or "steps" in entry:
        forward = build_transform(entry)
    if "codomain" in entry:
        clamp = _codomain(entry["codomain"])
        forward = clamp if forward is None else forward.then(clamp)

    reverse: Optional[Transform] = None
    if "reverse" in entry:
        reverse = build_transform(entry["reverse"])
    elif forward is not None:
        try:
            reverse = forward.inverse()
        except TransformError as exc:
            raise MappingDeclarationError(
                f"fields[{index}] ({orsf_path}): {exc}; declare a 'reverse' transform"
            ) from exc

    return FieldMapping(
        orsf_path=orsf_path,
        native_key=native_key,
        to_native=forward,
        to_orsf=reverse,
        required=bool(entry.get("required", False)),
    )


def _string_table(raw: Any, name: str) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, ABCMapping):
        raise MappingDeclarationError(f"'{name}' must be a table")
    return raw


def _adapter_metadata(payload: Mapping[str, Any]) -> Tuple[AdapterMetadata, str]:
    table = payload.get("adapter")
    if isinstance(table, str):
        # Flat layout: adapter id with version and carKey alongside it.
        table = {
            "id": table,
            "version": payload.get("version", ""),
            "car_key": payload.get("carKey", payload.get("car_key", "")),
        }
    if not isinstance(table, ABCMapping):
        raise MappingDeclarationError("mapping file needs an [adapter] table")
    fmt = str(table.get("format", "ini")).lower()
    if fmt not in _FORMATS:
        raise MappingDeclarationError(f"unknown adapter format {fmt!r}")

    templates = _string_table(payload.get("filenameTemplates"), "filenameTemplates")
    template = table.get("filename_template", templates.get("export"))
    import_glob = table.get("import_glob", templates.get("import_glob"))
    install_paths = _string_table(
        payload.get("install_paths", payload.get("installPaths")), "install_paths"
    )
    capabilities = _string_table(payload.get("capabilities"), "capabilities")
    try:
        metadata = AdapterMetadata(
            id=str(table.get("id", "")),
            version=str(table.get("version", "")),
            car_key=str(table.get("car_key", table.get("carKey", ""))),
            description=str(table.get("description", "")),
            author=str(table.get("author", "")),
            file_extension=str(table.get("file_extension", fmt)),
            filename_template=str(template) if template is not None else None,
            import_glob=str(import_glob) if import_glob is not None else None,
            install_paths={str(key): value for key, value in install_paths.items()},
            capabilities={str(key): bool(value) for key, value in capabilities.items()},
        )
    except (TypeError, ValueError) as exc:
        raise MappingDeclarationError(f"invalid [adapter] table: {exc}") from exc
    return metadata, fmt


def parse_mapping_declaration(
    payload: Mapping[str, Any],
    source: Optional[Path] = None,
) -> MappingDeclaration:
    metadata, fmt = _adapter_metadata(payload)
    entries = payload.get("fields")
    if not isinstance(entries, list):
        raise MappingDeclarationError("mapping file needs a list of [[fields]]")
    mappings = tuple(_field_mapping(entry, index) for index, entry in enumerate(entries))
    return MappingDeclaration(metadata, mappings, fmt, source)


def load_mapping_file(path: Path | str) -> MappingDeclaration:
    """Parse a ``.toml`` or ``.json`` mapping file."""

    source = Path(path)
    try:
        if source.suffix == ".json":
            payload = json.loads(source.read_text(encoding="utf-8"))
        else:
            with source.open("rb") as handle:
                payload = tomllib.load(handle)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise MappingDeclarationError(f"{source}: {exc}") from exc
    if not isinstance(payload, ABCMapping):
        raise MappingDeclarationError(f"{source}: top level must be a table")
    try:
        return parse_mapping_declaration(payload, source)
    except MappingDeclarationError as exc:
        raise MappingDeclarationError(f"{source}: {exc}") from exc


def build_adapter(declaration: MappingDeclaration, *, strict: bool = False) -> Adapter:
    if declaration.format == "json":
        return json_adapter(declaration.metadata)
    return ini_adapter(declaration.metadata, declaration.mappings, strict=strict)


def load_adapter(path: Path | str, *, strict: bool = False) -> Adapter:
    return build_adapter(load_mapping_file(path), strict=strict)


def load_mapping_directory(
    directory: Path | str,
    registry: AdapterRegistry,
    *,
    strict: bool = False,
) -> List[Adapter]:
    """Register an adapter for every mapping file in ``directory``.

    Files are read in name order; a malformed file aborts the load.
    """

    root = Path(directory)
    if not root.is_dir():
        logger.warning("Mapping directory '%s' does not exist", root)
        return []
    loaded: List[Adapter] = []
    for entry in sorted(root.iterdir()):
        if entry.suffix not in _SUPPORTED_SUFFIXES or not entry.is_file():
            continue
        adapter = load_adapter(entry, strict=strict)
        registry.register(adapter)
        loaded.append(adapter)
    return loaded
