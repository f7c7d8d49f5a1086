"""Location settings sources.

Purpose
-------
Build the explicit :class:`~lib_layered_db.domain.definition.LocationSettings`
value consumed by the location resolver from the process environment and an
optional TOML file, so the resolver itself never reads ambient state.

Key behaviours
--------------
* Environment variables use the ``LIB_LAYERED_DB_`` prefix
  (``LIB_LAYERED_DB_DATA_ROOT``, ``..._CONFIG_ROOT``, ``..._IMPORT_FOLDER``,
  ``..._SPLIT_SUBPATH``, ``..._PRERENEWAL``).
* A settings file stores the same keys in lowercase under a ``[paths]`` table.
* Precedence is defaults → file → environment.
"""

from __future__ import annotations

import os
from dataclasses import fields
from pathlib import Path
from typing import Mapping

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

from ...domain.definition import LocationSettings
from ...domain.errors import NotFound, ParseError, ValidationError
from ...observability import log_debug, log_error

ENV_PREFIX = "LIB_LAYERED_DB_"
PRERENEWAL_SUBPATH = "pre-re/"
_KEYS = tuple(item.name for item in fields(LocationSettings))
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def settings_from_env(environ: Mapping[str, str] | None = None) -> LocationSettings:
    """Return settings built from defaults overridden by the environment.

    Examples
    --------
    >>> settings_from_env({"LIB_LAYERED_DB_DATA_ROOT": "/srv/db", "LIB_LAYERED_DB_PRERENEWAL": "1"})
    LocationSettings(data_root='/srv/db', config_root='conf', import_folder='import', split_subpath='pre-re/')
    """

    return _build({}, os.environ if environ is None else environ, source=None)


def settings_from_file(path: str | Path, environ: Mapping[str, str] | None = None) -> LocationSettings:
    """Return settings read from the ``[paths]`` table of a TOML file.

    Environment variables still take precedence over file values.

    Raises
    ------
    NotFound
        When *path* is not a file.
    ParseError
        When the file is not valid TOML.
    ValidationError
        When ``[paths]`` is not a table or holds unknown or non-string keys.
    """

    file_path = Path(path)
    if not file_path.is_file():
        raise NotFound(f"Settings file not found: {path}")
    try:
        data = tomllib.loads(file_path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        log_error("settings_file_invalid", str(exc), path=str(path))
        raise ParseError(f"Invalid TOML in {path}: {exc}") from exc
    table = data.get("paths", {})
    if not isinstance(table, dict):
        raise ValidationError(f"[paths] in {path} must be a table")
    unknown = sorted(set(table) - set(_KEYS) - {"prerenewal"})
    if unknown:
        raise ValidationError(f"Unknown location settings in {path}: {', '.join(unknown)}")
    return _build(table, os.environ if environ is None else environ, source=str(path))


def _build(values: Mapping[str, object], environ: Mapping[str, str], *, source: str | None) -> LocationSettings:
    collected: dict[str, object] = {key: values[key] for key in _KEYS if key in values}
    prerenewal: object = values.get("prerenewal", False)

    for key in _KEYS:
        env_value = environ.get(f"{ENV_PREFIX}{key.upper()}")
        if env_value is not None:
            collected[key] = env_value
    env_prerenewal = environ.get(f"{ENV_PREFIX}PRERENEWAL")
    if env_prerenewal is not None:
        prerenewal = env_prerenewal.strip().lower() in _TRUTHY

    for key, value in collected.items():
        if not isinstance(value, str):
            raise ValidationError(f"Location setting {key} must be a string, got {type(value).__name__}")
    if not isinstance(prerenewal, bool):
        raise ValidationError("Location setting prerenewal must be a boolean")
    if prerenewal and "split_subpath" not in collected:
        collected["split_subpath"] = PRERENEWAL_SUBPATH

    settings = LocationSettings(**collected)  # type: ignore[arg-type]
    log_debug("settings_loaded", path=source, **{key: getattr(settings, key) for key in _KEYS})
    return settings
