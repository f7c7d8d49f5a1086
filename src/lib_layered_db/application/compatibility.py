"""Document header compatibility checks.

Purpose
-------
Decide whether a parsed document may be processed by a dataset: the header
must name the dataset's type and carry a version inside the dataset's
supported window. Files inside the deprecation window load with a warning.

Contents
--------
* :class:`Compatibility` – outcome of an accepted header.
* :func:`check_compatibility` – raising variant returning the outcome.
* :func:`verify` – reporting variant returning ``True``/``False``.

System Role
-----------
Called by :meth:`lib_layered_db.core.DatasetLoader.load` right after parsing.
The document is never mutated.
"""

from __future__ import annotations

from enum import Enum

from ..domain.definition import DatasetDefinition
from ..domain.errors import (
    CompatibilityError,
    ConversionError,
    InvalidVersion,
    MissingHeader,
    MissingType,
    TypeMismatch,
    VersionTooNew,
    VersionTooOld,
)
from ..domain.primitives import Primitive
from ..observability import log_error, log_warning
from .ports import Document


class Compatibility(Enum):
    """How an accepted header relates to the dataset's current version."""

    CURRENT = "current"
    OUTDATED = "outdated"


def check_compatibility(document: Document, definition: DatasetDefinition) -> Compatibility:
    """Validate the header of *document* against *definition*.

    Why
    ----
    Rejecting a file before its body is touched keeps datasets from reading
    entries written for a layout they do not understand.

    Returns
    -------
    Compatibility
        ``CURRENT`` for an exact version match, ``OUTDATED`` for a version in
        ``[minimum_version, version)``. The latter also emits one warning.

    Raises
    ------
    CompatibilityError
        The specific subclass for the first failing step.
    """

    root = document.root
    header = root.get("Header")
    if not header.defined or header.null:
        raise MissingHeader("No database header was found.")

    if not header.exists("Type"):
        raise MissingType("No database type was found.")
    try:
        file_type = header.get("Type").convert(Primitive.STRING)
    except ConversionError as exc:
        raise TypeMismatch(f"Database type in line {header.get('Type').line} is not a string.") from exc
    if file_type != definition.type:
        raise TypeMismatch(f"Database type mismatch: {definition.type} != {file_type}.")

    if not header.exists("Version"):
        raise InvalidVersion(f"Missing header version for {definition.type} database.")
    try:
        file_version = header.get("Version").convert(Primitive.UINT16)
    except ConversionError as exc:
        raise InvalidVersion(f"Invalid header version type for {definition.type} database.") from exc

    if file_version == definition.version:
        return Compatibility.CURRENT
    if file_version > definition.version:
        raise VersionTooNew(
            f"Your database version {file_version} is not supported by your server. "
            f"Maximum version is: {definition.version}"
        )
    if file_version < definition.minimum_version:
        raise VersionTooOld(
            f"Your database version {file_version} is not supported anymore by your server. "
            f"Minimum version is: {definition.minimum_version}"
        )
    log_warning(
        "database_version_outdated",
        f"Your database version {file_version} is outdated and should be updated. "
        f"Current version is: {definition.version}",
        dataset=definition.type,
        path=document.path,
        version=file_version,
        current=definition.version,
        minimum=definition.minimum_version,
    )
    return Compatibility.OUTDATED


def verify(document: Document, definition: DatasetDefinition) -> bool:
    """Return ``True`` when *document* may be processed by *definition*'s dataset.

    Failures are reported on the error channel with the exception class name
    as ``reason`` so log consumers can tell them apart.
    """

    try:
        check_compatibility(document, definition)
    except CompatibilityError as exc:
        log_error(
            "database_incompatible",
            str(exc),
            dataset=definition.type,
            path=document.path,
            reason=type(exc).__name__,
        )
        return False
    return True
