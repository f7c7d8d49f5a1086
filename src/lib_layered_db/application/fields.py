"""Typed field extraction with default fallback and structured diagnostics.

Purpose
-------
Pull a named field out of a document node as a specific primitive type. Every
public accessor shares :func:`extract` so the default-handling matrix is
identical for all types:

==========================  ==============  ========================================
Situation                   Default given   Outcome
==========================  ==============  ========================================
field missing               no              failure, error citing the node's line
field missing               yes             default, no diagnostic
field not convertible       no              failure, error citing the field's line
field not convertible       yes             default, one warning with field + line
==========================  ==============  ========================================

Contents
--------
* :data:`MISSING` – sentinel meaning "no default supplied".
* :class:`FieldResult` – outcome of one read.
* :func:`extract` – generic entry point parameterised by :class:`Primitive`.
* ``as_bool`` … ``as_string`` – one accessor per supported primitive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final

from ..domain.errors import AccessorMisuse, ConversionError, FieldError, FieldTypeMismatch, MissingField
from ..domain.primitives import Primitive
from ..observability import log_error, log_fatal, log_warning
from .ports import DocumentNode


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final[Any] = _Missing()


@dataclass(frozen=True, slots=True)
class FieldResult:
    """Transient outcome of a typed field read.

    Attributes
    ----------
    value:
        Converted value, the default, or ``None`` on failure.
    succeeded:
        ``True`` when ``value`` may be used.
    used_default:
        ``True`` when the default replaced a missing or malformed field.
    error:
        The :class:`FieldError` describing a failure, ``None`` otherwise.

    Instances are truthy exactly when ``succeeded`` is set, so callers can write
    ``if not (result := as_uint32(node, "Id")): return False``.
    """

    value: Any
    succeeded: bool
    used_default: bool = False
    error: FieldError | None = None

    def __bool__(self) -> bool:
        return self.succeeded


def extract(node: DocumentNode, name: str, primitive: Primitive, default: Any = MISSING) -> FieldResult:
    """Read *name* from *node* as *primitive*.

    Raises
    ------
    AccessorMisuse
        When *node* is not a document node, *name* is not a non-empty string,
        or *primitive* is not a :class:`Primitive`. Logged at fatal severity.

    Examples
    --------
    >>> import yaml
    >>> from lib_layered_db.adapters.documents.yaml_document import YAMLNode
    >>> node = YAMLNode(yaml.compose("Id: 501\\nWeight: heavy\\n"))
    >>> extract(node, "Id", Primitive.UINT32).value
    501
    >>> extract(node, "Slots", Primitive.UINT16, default=0)
    FieldResult(value=0, succeeded=True, used_default=True, error=None)
    >>> bool(extract(node, "Weight", Primitive.UINT32))
    False
    """

    _ensure_usable(node, name, primitive)

    if not node.exists(name):
        if default is not MISSING:
            return FieldResult(default, True, used_default=True)
        error = MissingField(f'Missing node "{name}" in line {node.line}.', field=name, line=node.line)
        log_error("field_missing", str(error), field=name, line=node.line, expected=primitive.value)
        return FieldResult(None, False, error=error)

    field_node = node.get(name)
    try:
        return FieldResult(field_node.convert(primitive), True)
    except ConversionError as exc:
        line = field_node.line
        if default is not MISSING:
            log_warning(
                "field_defaulted",
                f'Unable to parse "{name}" in line {line}. Using default value...',
                field=name,
                line=line,
                expected=primitive.value,
                reason=str(exc),
            )
            return FieldResult(default, True, used_default=True)
        error = FieldTypeMismatch(f'Unable to parse "{name}" in line {line}.', field=name, line=line)
        log_error("field_invalid", str(error), field=name, line=line, expected=primitive.value, reason=str(exc))
        return FieldResult(None, False, error=error)


def _ensure_usable(node: object, name: object, primitive: object) -> None:
    if not isinstance(node, DocumentNode):
        problem = f"expected a document node, got {type(node).__name__}"
    elif not isinstance(name, str) or not name:
        problem = "field name must be a non-empty string"
    elif not isinstance(primitive, Primitive):
        problem = f"unsupported primitive {primitive!r}"
    else:
        return
    log_fatal("accessor_misuse", f"extract: {problem}.", field=name if isinstance(name, str) else None)
    raise AccessorMisuse(f"extract: {problem}")


def as_bool(node: DocumentNode, name: str, default: bool = MISSING) -> FieldResult:
    return extract(node, name, Primitive.BOOL, default)


def as_int16(node: DocumentNode, name: str, default: int = MISSING) -> FieldResult:
    return extract(node, name, Primitive.INT16, default)


def as_uint16(node: DocumentNode, name: str, default: int = MISSING) -> FieldResult:
    return extract(node, name, Primitive.UINT16, default)


def as_int32(node: DocumentNode, name: str, default: int = MISSING) -> FieldResult:
    return extract(node, name, Primitive.INT32, default)


def as_uint32(node: DocumentNode, name: str, default: int = MISSING) -> FieldResult:
    return extract(node, name, Primitive.UINT32, default)


def as_int64(node: DocumentNode, name: str, default: int = MISSING) -> FieldResult:
    return extract(node, name, Primitive.INT64, default)


def as_uint64(node: DocumentNode, name: str, default: int = MISSING) -> FieldResult:
    return extract(node, name, Primitive.UINT64, default)


def as_float(node: DocumentNode, name: str, default: float = MISSING) -> FieldResult:
    return extract(node, name, Primitive.FLOAT, default)


def as_double(node: DocumentNode, name: str, default: float = MISSING) -> FieldResult:
    return extract(node, name, Primitive.DOUBLE, default)


def as_string(node: DocumentNode, name: str, default: str = MISSING) -> FieldResult:
    """Read *name* as the scalar text exactly as written in the file."""

    return extract(node, name, Primitive.STRING, default)
