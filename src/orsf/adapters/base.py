"""Adapter contract and the mapping-driven adapter implementation."""

from __future__ import annotations

import fnmatch
import logging
import math
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

from ..core.document import SetupDocument
from ..core.mapping import FieldMapping, map_to_native, map_to_orsf
from ..core.validator import DEFAULT_RULES, Finding, ValidationRule, validate
from ..utils.timestamps import now_iso8601

__all__ = [
    "Adapter",
    "AdapterMetadata",
    "INVALID_NAME_CHARS",
    "MappedAdapter",
    "NativeDecodeError",
    "NativePayload",
    "PLATFORMS",
    "current_platform",
    "native_values",
    "render_filename",
]

logger = logging.getLogger(__name__)

INVALID_NAME_CHARS = set('\\/:*?"<>|')
_DEFAULT_TEMPLATE = "setup_{id}.{ext}"


class NativeDecodeError(ValueError):
    """Raised when native bytes cannot be decoded."""


def _ensure_string(value: str, *, field_name: str, allow_empty: bool = True) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    normalised = value.strip()
    if not normalised and not allow_empty:
        raise ValueError(f"{field_name} must not be empty")
    return normalised


PLATFORMS = ("windows", "macos", "linux")


def current_platform() -> str:
    """Name of the running platform as used by ``install_paths`` keys."""

    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    return "linux"


@dataclass(frozen=True, slots=True)
class AdapterMetadata:
    """Identity of an adapter: game id, game version and car key.

    ``install_paths`` maps ``windows``, ``macos`` and ``linux`` to the game's
    setup folder. ``capabilities`` switches operations off; an undeclared
    capability is supported.
    """

    id: str
    version: str = ""
    car_key: str = ""
    description: str = ""
    author: str = ""
    file_extension: str = "json"
    filename_template: Optional[str] = None
    import_glob: Optional[str] = None
    install_paths: Mapping[str, str] = field(default_factory=dict, hash=False)
    capabilities: Mapping[str, bool] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", _ensure_string(self.id, field_name="id", allow_empty=False))
        object.__setattr__(self, "version", _ensure_string(self.version, field_name="version"))
        object.__setattr__(self, "car_key", _ensure_string(self.car_key, field_name="car_key"))
        extension = _ensure_string(self.file_extension, field_name="file_extension")
        object.__setattr__(self, "file_extension", extension.lstrip("."))
        paths: Dict[str, str] = {}
        for name, location in dict(self.install_paths).items():
            if name not in PLATFORMS:
                raise ValueError(f"unknown install platform {name!r}; expected one of {PLATFORMS}")
            paths[name] = _ensure_string(location, field_name=f"install_paths.{name}")
        object.__setattr__(self, "install_paths", MappingProxyType(paths))
        capabilities = {str(name): bool(flag) for name, flag in dict(self.capabilities).items()}
        object.__setattr__(self, "capabilities", MappingProxyType(capabilities))
        if self.import_glob is not None:
            self.import_pattern()

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.id, self.version, self.car_key)

    def install_path(self, platform: Optional[str] = None) -> Optional[Path]:
        """Setup folder declared for ``platform`` (default: the running one)."""

        location = self.install_paths.get(platform or current_platform())
        if not location:
            return None
        return Path(location).expanduser()

    def supports(self, capability: str) -> bool:
        return self.capabilities.get(capability, True)

    def import_pattern(self) -> str:
        """File-name glob matching native files this adapter imports."""

        template = self.import_glob or f"*.{self.file_extension}"
        values = {"car": _sanitise(self.car_key) or "*", "ext": self.file_extension}
        try:
            return template.format(**values)
        except (KeyError, IndexError) as exc:
            raise ValueError(f"Unknown token in import glob {template!r}: {exc}") from exc

    def matches_import(self, name: str) -> bool:
        return fnmatch.fnmatch(name, self.import_pattern())


@runtime_checkable
class Adapter(Protocol):
    """Capabilities every target format provides."""

    @property
    def metadata(self) -> AdapterMetadata: ...

    def identify(self, data: bytes) -> bool: ...

    def to_native(self, doc: SetupDocument) -> bytes: ...

    def from_native(self, data: bytes, template: Optional[SetupDocument] = None) -> SetupDocument: ...

    def field_mappings(self) -> Tuple[FieldMapping, ...]: ...

    def validate(self, doc: SetupDocument) -> List[Finding]: ...

    def suggested_filename(self, doc: SetupDocument) -> str: ...


def _sanitise(value: str) -> str:
    cleaned = "".join(char for char in value if char not in INVALID_NAME_CHARS)
    return "_".join(cleaned.split())


def render_filename(metadata: AdapterMetadata, doc: SetupDocument) -> str:
    """Expand the filename template of ``metadata`` for ``doc``.

    Supported tokens: ``{id}``, ``{name}``, ``{make}``, ``{model}``,
    ``{car}``, ``{track}`` and ``{ext}``. Characters that are invalid in
    file names are removed from every substituted value.
    """

    template = metadata.filename_template or _DEFAULT_TEMPLATE
    track = doc.context.track if doc.context is not None and doc.context.track else ""
    tokens = {
        "id": doc.metadata.id,
        "name": doc.metadata.name,
        "make": doc.car.make,
        "model": doc.car.model,
        "car": metadata.car_key or doc.car.model,
        "track": track,
    }
    values = {key: _sanitise(value or "") for key, value in tokens.items()}
    values["ext"] = metadata.file_extension
    try:
        return template.format(**values)
    except (KeyError, IndexError) as exc:
        raise ValueError(f"Unknown token in filename template {template!r}: {exc}") from exc


@dataclass(frozen=True)
class NativePayload:
    """Decoded native data: mapped numeric values plus header strings."""

    values: Mapping[str, float]
    header: Mapping[str, str] = field(default_factory=dict)


Encoder = Callable[[Mapping[str, float], SetupDocument], bytes]
Decoder = Callable[[bytes], NativePayload]


def _document_from_header(header: Mapping[str, str]) -> SetupDocument:
    doc = SetupDocument()
    doc.metadata.id = header.get("id") or f"converted-{int(time.time())}"
    doc.metadata.name = header.get("name") or "Converted Setup"
    doc.metadata.created_at = now_iso8601()
    make, _, model = (header.get("car") or "").partition(" ")
    doc.car.make = make
    doc.car.model = model
    return doc


class MappedAdapter:
    """Adapter assembled from field mappings and a native codec.

    ``encoder`` turns the native key/value map produced by
    :func:`~orsf.core.mapping.map_to_native` into bytes; ``decoder`` does the
    reverse. Extra ``rules`` run after the default validation rules.
    """

    def __init__(
        self,
        metadata: AdapterMetadata,
        mappings: Sequence[FieldMapping],
        encoder: Encoder,
        decoder: Decoder,
        *,
        rules: Sequence[ValidationRule] = (),
        strict: bool = False,
    ) -> None:
        self._metadata = metadata
        self._mappings = tuple(mappings)
        self._encoder = encoder
        self._decoder = decoder
        self._rules = (*DEFAULT_RULES, *rules)
        self._strict = strict

    def __repr__(self) -> str:
        return f"MappedAdapter({self._metadata.id!r}, {self._metadata.version!r}, {self._metadata.car_key!r})"

    @property
    def metadata(self) -> AdapterMetadata:
        return self._metadata

    def field_mappings(self) -> Tuple[FieldMapping, ...]:
        return self._mappings

    def identify(self, data: bytes) -> bool:
        """Return whether ``data`` decodes and carries a mapped native key."""

        try:
            payload = self._decoder(data)
        except NativeDecodeError:
            return False
        return any(mapping.native_key in payload.values for mapping in self._mappings)

    def to_native(self, doc: SetupDocument) -> bytes:
        native = map_to_native(doc, self._mappings)
        logger.debug(
            "Mapped setup to native values.",
            extra={"event": "adapter.to_native", "adapter": self._metadata.id, "fields": len(native)},
        )
        return self._encoder(native, doc)

    def from_native(self, data: bytes, template: Optional[SetupDocument] = None) -> SetupDocument:
        payload = self._decoder(data)
        base = template if template is not None else _document_from_header(payload.header)
        return map_to_orsf(payload.values, self._mappings, base, strict=self._strict)

    def validate(self, doc: SetupDocument) -> List[Finding]:
        return validate(doc, self._rules)

    def suggested_filename(self, doc: SetupDocument) -> str:
        return render_filename(self._metadata, doc)


def native_values(payload: Mapping[str, str]) -> Dict[str, float]:
    """Parse textual native values, raising :class:`NativeDecodeError`."""

    values: Dict[str, float] = {}
    for key, raw in payload.items():
        try:
            number = float(raw)
        except (TypeError, ValueError) as exc:
            raise NativeDecodeError(f"Native value for {key!r} is not numeric: {raw!r}") from exc
        if not math.isfinite(number):
            raise NativeDecodeError(f"Native value for {key!r} is not finite: {raw!r}")
        values[key] = number
    return values
