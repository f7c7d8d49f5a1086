"""Public package surface for ``lib_layered_db``.

Datasets build on :class:`DatasetLoader` (or subclass :class:`Dataset`) and read
entry fields with the typed accessors re-exported here. Diagnostics are emitted
through the ``lib_layered_db`` logger, silent until the host attaches a handler.
"""

from __future__ import annotations

from .adapters.documents.yaml_document import YAMLDocument, YAMLDocumentLoader, YAMLNode
from .adapters.path_resolvers.default import DefaultLocationResolver
from .adapters.settings.default import settings_from_env, settings_from_file
from .application.compatibility import Compatibility, check_compatibility, verify
from .application.diagnostics import invalid_warning, render
from .application.fields import (
    MISSING,
    FieldResult,
    as_bool,
    as_double,
    as_float,
    as_int16,
    as_int32,
    as_int64,
    as_string,
    as_uint16,
    as_uint32,
    as_uint64,
    extract,
)
from .core import Dataset, DatasetLoader, LoaderState
from .domain.definition import DatasetDefinition, LocationSettings, Placement
from .domain.errors import (
    AccessorMisuse,
    CompatibilityError,
    ConversionError,
    DatabaseError,
    FieldError,
    FieldTypeMismatch,
    InvalidVersion,
    MissingField,
    MissingHeader,
    MissingType,
    NotFound,
    ParseError,
    TypeMismatch,
    ValidationError,
    VersionTooNew,
    VersionTooOld,
)
from .domain.primitives import Primitive
from .observability import bind_current_file, bind_trace_id, get_logger

__all__ = [
    "AccessorMisuse",
    "Compatibility",
    "CompatibilityError",
    "ConversionError",
    "DatabaseError",
    "Dataset",
    "DatasetDefinition",
    "DatasetLoader",
    "DefaultLocationResolver",
    "FieldError",
    "FieldResult",
    "FieldTypeMismatch",
    "InvalidVersion",
    "LoaderState",
    "LocationSettings",
    "MISSING",
    "MissingField",
    "MissingHeader",
    "MissingType",
    "NotFound",
    "ParseError",
    "Placement",
    "Primitive",
    "TypeMismatch",
    "ValidationError",
    "VersionTooNew",
    "VersionTooOld",
    "YAMLDocument",
    "YAMLDocumentLoader",
    "YAMLNode",
    "as_bool",
    "as_double",
    "as_float",
    "as_int16",
    "as_int32",
    "as_int64",
    "as_string",
    "as_uint16",
    "as_uint32",
    "as_uint64",
    "bind_current_file",
    "bind_trace_id",
    "check_compatibility",
    "extract",
    "get_logger",
    "invalid_warning",
    "render",
    "settings_from_env",
    "settings_from_file",
    "verify",
]
