"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by adapters, the application services,
and consuming datasets. The hierarchy lives in the domain layer so outer layers
may depend on it without the domain depending on them.

Contents
--------
* :class:`DatabaseError` – umbrella base class for every library failure.
* :class:`ParseError` / :class:`NotFound` – a file could not be read or parsed.
* :class:`ValidationError` – invalid dataset definitions or settings.
* :class:`CompatibilityError` and subclasses – header checks that reject a file.
* :class:`FieldError` and subclasses – typed field extraction failures.
* :class:`ConversionError` – a scalar could not be converted to a primitive.
* :class:`AccessorMisuse` – programmer errors reported at fatal severity.

System Role
-----------
Adapters and application services raise these exceptions; the loader catches
the file-level ones and reports them through :mod:`lib_layered_db.observability`
so callers only see ``True``/``False`` outcomes for data problems.
"""

from __future__ import annotations


class DatabaseError(Exception):
    """Base type for all exceptions emitted by ``lib_layered_db``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class ParseError(DatabaseError):
    """Raised when a document cannot be read or parsed into a node tree.

    Attributes
    ----------
    line / column:
        1-based position reported by the parser, ``None`` when unknown (I/O
        failures, missing files).
    """

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class NotFound(ParseError):
    """Represents a data file that does not exist on disk.

    Why
    ----
    Resolved locations are never checked for existence up front, so a missing
    overlay surfaces here and fails the load like any other unreadable file.
    """


class ValidationError(DatabaseError):
    """Signifies an invalid dataset definition or location settings value."""


class CompatibilityError(DatabaseError):
    """Base type for header checks that reject a document."""


class MissingHeader(CompatibilityError):
    """The document has no ``Header`` section."""


class MissingType(CompatibilityError):
    """The header has no ``Type`` field."""


class TypeMismatch(CompatibilityError):
    """The header ``Type`` does not name the dataset being loaded."""


class InvalidVersion(CompatibilityError):
    """The header ``Version`` is missing or not an unsigned 16-bit value."""


class VersionTooNew(CompatibilityError):
    """The file was written for a newer dataset version than supported."""


class VersionTooOld(CompatibilityError):
    """The file predates the minimum dataset version still accepted."""


class FieldError(DatabaseError):
    """Base type for typed field extraction failures.

    Attributes
    ----------
    field:
        Name of the requested field.
    line:
        1-based source line the diagnostic points at.
    """

    def __init__(self, message: str, *, field: str, line: int | None) -> None:
        super().__init__(message)
        self.field = field
        self.line = line


class MissingField(FieldError):
    """The requested field does not exist on the node."""


class FieldTypeMismatch(FieldError):
    """The field exists but cannot be converted to the requested primitive."""


class ConversionError(DatabaseError):
    """Raised by document nodes when a scalar cannot become the requested primitive."""


class AccessorMisuse(DatabaseError):
    """Raised when the typed accessor is called with arguments it cannot honour.

    Why
    ----
    These are programming errors rather than data errors; they are logged at
    fatal severity and always propagate.
    """
