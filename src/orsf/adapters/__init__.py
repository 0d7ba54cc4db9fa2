"""Adapters translating ORSF documents to and from native setup formats."""

from __future__ import annotations

from .base import (
    Adapter,
    AdapterMetadata,
    MappedAdapter,
    NativeDecodeError,
    NativePayload,
    current_platform,
    render_filename,
)
from .declarative import (
    MappingDeclaration,
    MappingDeclarationError,
    build_adapter,
    build_transform,
    load_adapter,
    load_mapping_directory,
    load_mapping_file,
)
from .formats import JsonDocumentAdapter, decode_ini, encode_ini, ini_adapter, json_adapter
from .registry import AdapterRegistrationError, AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterMetadata",
    "AdapterRegistrationError",
    "AdapterRegistry",
    "JsonDocumentAdapter",
    "MappedAdapter",
    "MappingDeclaration",
    "MappingDeclarationError",
    "NativeDecodeError",
    "NativePayload",
    "build_adapter",
    "build_transform",
    "current_platform",
    "decode_ini",
    "encode_ini",
    "ini_adapter",
    "json_adapter",
    "load_adapter",
    "load_mapping_directory",
    "load_mapping_file",
    "render_filename",
]
