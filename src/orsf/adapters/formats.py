"""Built-in native formats: canonical JSON and INI key/value text."""

from __future__ import annotations

import configparser
import io
from typing import List, Mapping, Optional, Sequence, Tuple

from ..core import codec
from ..core.document import SetupDocument
from ..core.mapping import FieldMapping
from ..core.transforms import unit_convert
from ..core.validator import DEFAULT_RULES, Finding, ValidationRule, validate
from .base import (
    AdapterMetadata,
    MappedAdapter,
    NativeDecodeError,
    NativePayload,
    native_values,
    render_filename,
)

__all__ = [
    "INI_HEADER_SECTION",
    "INI_SETTINGS_SECTION",
    "JsonDocumentAdapter",
    "decode_ini",
    "encode_ini",
    "ini_adapter",
    "json_adapter",
]

INI_HEADER_SECTION = "Setup"
INI_SETTINGS_SECTION = "Settings"


# ---------------------------------------------------------------------------
# INI
# ---------------------------------------------------------------------------


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None, inline_comment_prefixes=(";",))
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


def _format_number(value: float) -> str:
    return repr(float(value))


def encode_ini(native: Mapping[str, float], doc: SetupDocument) -> bytes:
    """Render ``native`` below a ``[Setup]`` header describing ``doc``."""

    parser = _new_parser()
    parser[INI_HEADER_SECTION] = {
        "id": doc.metadata.id,
        "name": doc.metadata.name,
        "car": f"{doc.car.make} {doc.car.model}".strip(),
    }
    parser[INI_SETTINGS_SECTION] = {key: _format_number(value) for key, value in native.items()}
    buffer = io.StringIO()
    parser.write(buffer)
    return buffer.getvalue().encode("utf-8")


def decode_ini(data: bytes) -> NativePayload:
    """Parse INI bytes into the ``[Settings]`` values and ``[Setup]`` header."""

    parser = _new_parser()
    try:
        parser.read_string(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, configparser.Error) as exc:
        raise NativeDecodeError(f"Invalid INI payload: {exc}") from exc
    if not parser.has_section(INI_SETTINGS_SECTION):
        raise NativeDecodeError(f"INI payload has no [{INI_SETTINGS_SECTION}] section")
    header = dict(parser[INI_HEADER_SECTION]) if parser.has_section(INI_HEADER_SECTION) else {}
    return NativePayload(native_values(dict(parser[INI_SETTINGS_SECTION])), header)


def ini_adapter(
    metadata: AdapterMetadata,
    mappings: Sequence[FieldMapping],
    *,
    rules: Sequence[ValidationRule] = (),
    strict: bool = False,
) -> MappedAdapter:
    """Adapter whose native payload is INI text with a ``[Settings]`` table."""

    return MappedAdapter(metadata, mappings, encode_ini, decode_ini, rules=rules, strict=strict)


# ---------------------------------------------------------------------------
# Canonical JSON
# ---------------------------------------------------------------------------

_JSON_METADATA = AdapterMetadata(
    id="example",
    version="1.0",
    car_key="generic",
    description="Canonical ORSF JSON documents",
    author="ORSF",
    file_extension="json",
    filename_template="setup_{id}.{ext}",
)

_JSON_MAPPINGS: Tuple[FieldMapping, ...] = (
    FieldMapping("setup.aero.front_wing", "aero_front"),
    FieldMapping("setup.aero.rear_wing", "aero_rear"),
    FieldMapping(
        "setup.tires.pressure_fl_kpa",
        "tire_fl_pressure",
        to_native=unit_convert("kpa", "psi"),
        to_orsf=unit_convert("psi", "kpa"),
    ),
    FieldMapping("setup.brakes.brake_bias_pct", "brake_balance"),
)


class JsonDocumentAdapter:
    """Adapter whose native bytes are the canonical JSON document itself."""

    def __init__(self, metadata: AdapterMetadata = _JSON_METADATA, *, indent: int = 2) -> None:
        self._metadata = metadata
        self._indent = indent

    @property
    def metadata(self) -> AdapterMetadata:
        return self._metadata

    def identify(self, data: bytes) -> bool:
        try:
            codec.loads(data)
        except codec.DocumentDecodeError:
            return False
        return True

    def to_native(self, doc: SetupDocument) -> bytes:
        return codec.dumps(doc, indent=self._indent).encode("utf-8")

    def from_native(self, data: bytes, template: Optional[SetupDocument] = None) -> SetupDocument:
        # The payload is a complete document; ``template`` has nothing to add.
        try:
            return codec.loads(data)
        except codec.DocumentDecodeError as exc:
            raise NativeDecodeError(f"Invalid ORSF JSON payload: {exc}") from exc

    def field_mappings(self) -> Tuple[FieldMapping, ...]:
        return _JSON_MAPPINGS

    def validate(self, doc: SetupDocument) -> List[Finding]:
        return validate(doc, DEFAULT_RULES)

    def suggested_filename(self, doc: SetupDocument) -> str:
        return render_filename(self._metadata, doc)


def json_adapter(metadata: Optional[AdapterMetadata] = None) -> JsonDocumentAdapter:
    return JsonDocumentAdapter(metadata or _JSON_METADATA)
