"""Top-level package for ORSF, the Open Racing Setup Format.

The package exposes the canonical setup document model, the mapping
engine that translates documents to and from native game formats, and
the validator that reports findings on a document.
"""

from ._version import __version__
from .adapters import (
    Adapter,
    AdapterMetadata,
    AdapterRegistry,
    MappedAdapter,
    ini_adapter,
    json_adapter,
    load_adapter,
)
from .core.codec import dump, dumps, load, loads
from .core.document import SCHEMA_ID, SetupDocument
from .core.mapping import FieldMapping, flatten, inflate, map_to_native, map_to_orsf
from .core.units import Unit, convert
from .core.validator import Finding, Severity, validate

__all__ = [
    "Adapter",
    "AdapterMetadata",
    "AdapterRegistry",
    "FieldMapping",
    "Finding",
    "MappedAdapter",
    "SCHEMA_ID",
    "SetupDocument",
    "Severity",
    "Unit",
    "__version__",
    "convert",
    "dump",
    "dumps",
    "flatten",
    "inflate",
    "ini_adapter",
    "json_adapter",
    "load",
    "load_adapter",
    "loads",
    "map_to_native",
    "map_to_orsf",
    "validate",
]
