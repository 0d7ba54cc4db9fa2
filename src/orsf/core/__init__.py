"""Format-neutral core of ORSF: document model, conversion and validation."""

from __future__ import annotations

from importlib import import_module

_codec = import_module("orsf.core.codec")
_document = import_module("orsf.core.document")
_lookup = import_module("orsf.core.lookup")
_mapping = import_module("orsf.core.mapping")
_paths = import_module("orsf.core.paths")
_transforms = import_module("orsf.core.transforms")
_units = import_module("orsf.core.units")
_validator = import_module("orsf.core.validator")

# Public handles to the structured namespaces.
codec = _codec
document = _document
lookup = _lookup
mapping = _mapping
paths = _paths
transforms = _transforms
units = _units
validator = _validator

from orsf.core.codec import (  # noqa: E402
    DocumentDecodeError,
    SchemaVersionError,
    document_from_dict,
    document_to_dict,
    dump,
    dumps,
    load,
    loads,
)
from orsf.core.document import *  # noqa: E402,F401,F403
from orsf.core.lookup import LookupTable, LookupTableError  # noqa: E402
from orsf.core.mapping import (  # noqa: E402
    FieldMapping,
    FieldTransformError,
    MappingError,
    RequiredFieldError,
    flatten,
    inflate,
    map_to_native,
    map_to_orsf,
)
from orsf.core.paths import (  # noqa: E402
    FieldPath,
    PathError,
    get_value,
    iter_leaf_paths,
    parse_path,
    set_value,
)
from orsf.core.transforms import Transform, TransformDomainError, TransformError  # noqa: E402
from orsf.core.units import Dimension, Unit, UnitDimensionError, convert  # noqa: E402
from orsf.core.validator import (  # noqa: E402
    DEFAULT_RULES,
    Finding,
    Severity,
    ValidationCode,
    count_by_severity,
    has_errors,
    validate,
)

__all__ = list(
    dict.fromkeys(
        [
            *_codec.__all__,
            *_document.__all__,
            "FieldMapping",
            "FieldPath",
            "FieldTransformError",
            "LookupTable",
            "LookupTableError",
            "MappingError",
            "PathError",
            "RequiredFieldError",
            "Transform",
            "TransformDomainError",
            "TransformError",
            "Dimension",
            "Unit",
            "UnitDimensionError",
            "convert",
            "flatten",
            "inflate",
            "get_value",
            "iter_leaf_paths",
            "map_to_native",
            "map_to_orsf",
            "parse_path",
            "set_value",
            "DEFAULT_RULES",
            "Finding",
            "Severity",
            "ValidationCode",
            "count_by_severity",
            "has_errors",
            "validate",
            "codec",
            "document",
            "lookup",
            "mapping",
            "paths",
            "transforms",
            "units",
            "validator",
        ]
    )
)
