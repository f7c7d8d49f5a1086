"""Structured diagnostics helpers shared by every loader component.

Purpose
    Route every status line, warning, error, and fatal report through one
    package logger so host applications decide where diagnostics end up while
    each record still carries machine-readable context.

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``CURRENT_FILE`` / ``bind_current_file``: the data file being iterated,
      added as ``path`` to records that do not name one themselves.
    - ``log_debug`` / ``log_status`` / ``log_warning`` / ``log_error`` /
      ``log_fatal``: emit structured entries via a single private emitter.
    - ``make_event``: convenience builder for structured event payloads.

System Integration
    The severities map onto :mod:`logging` levels: status is ``INFO``, fatal is
    ``CRITICAL``. Every record exposes ``record.context`` with the trace id, an
    ``event`` name, and the structured fields passed by the caller.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_layered_db_trace_id", default=None)
"""Current trace identifier propagated through logging helpers."""

CURRENT_FILE: ContextVar[str | None] = ContextVar("lib_layered_db_current_file", default=None)
"""Data file whose body is being iterated; reported as ``path`` on every record."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_layered_db")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving host applications full
        control over handler and formatter configuration.
    """

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('load-42')
    >>> TRACE_ID.get()
    'load-42'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def bind_current_file(path: str | None) -> None:
    """Bind or clear the data file records default their ``path`` to.

    Examples
    --------
    >>> bind_current_file("db/item_db.yml")
    >>> _with_trace("field_missing", {"field": "Id"})["path"]
    'db/item_db.yml'
    >>> bind_current_file(None)
    >>> "path" in _with_trace("field_missing", {"field": "Id"})
    False
    """

    CURRENT_FILE.set(path)


def log_debug(event: str, message: str | None = None, **fields: Any) -> None:
    """Emit a structured debug entry; *message* defaults to the event name."""

    _emit(logging.DEBUG, event, message, fields)


def log_status(event: str, message: str | None = None, **fields: Any) -> None:
    """Emit an informational status entry (progress such as entry counts)."""

    _emit(logging.INFO, event, message, fields)


def log_warning(event: str, message: str | None = None, **fields: Any) -> None:
    """Emit a recoverable warning (outdated versions, defaulted fields)."""

    _emit(logging.WARNING, event, message, fields)


def log_error(event: str, message: str | None = None, **fields: Any) -> None:
    """Emit an error entry for load, compatibility, and field failures."""

    _emit(logging.ERROR, event, message, fields)


def log_fatal(event: str, message: str | None = None, **fields: Any) -> None:
    """Emit a fatal entry reserved for programmer misuse of the library."""

    _emit(logging.CRITICAL, event, message, fields)


def make_event(
    dataset: str | None,
    path: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured logging payload for dataset lifecycle events.

    Inputs
        dataset: Type tag of the dataset being processed, if known.
        path: Filesystem path associated with the event, if available.
        payload: Optional mapping with extra diagnostic detail.
    Outputs
        dict[str, Any]: Data safe to unpack into the ``log_*`` helpers.

    Examples
    --------
    >>> make_event('ITEM_DB', 'db/item_db.yml', {'entries': 5})
    {'dataset': 'ITEM_DB', 'path': 'db/item_db.yml', 'entries': 5}
    """

    event = {"dataset": dataset, "path": path}
    if payload:
        event |= dict(payload)
    return event


def _emit(level: int, event: str, message: str | None, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    _LOGGER.log(level, message or event, extra={"context": _with_trace(event, fields)})


def _with_trace(event: str, fields: Mapping[str, Any]) -> dict[str, Any]:
    """Attach the trace identifier and event name to the structured fields."""

    context: dict[str, Any] = {"trace_id": TRACE_ID.get(), "event": event}
    current = CURRENT_FILE.get()
    if current is not None:
        context["path"] = current
    context.update(fields)
    return context
