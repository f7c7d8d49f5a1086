"""Shared fixtures for the ``lib_layered_db`` suite.

The fixtures build small on-disk data trees (base files plus import overlays)
so loader and CLI tests read like the layouts documented for each placement.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from lib_layered_db.domain.definition import LocationSettings
from tests.support import database_text

WriteDatabase = Callable[..., Path]


@pytest.fixture()
def write_database() -> WriteDatabase:
    """Write a data file at ``path`` creating parent directories on demand."""

    def _write(path: Path, db_type: str = "ITEM_DB", version: Any = 3, entries: Iterable[Any] | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(database_text(db_type, version, entries), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def settings(tmp_path: Path) -> LocationSettings:
    """Location settings rooted inside the test's temporary directory."""

    return LocationSettings(
        data_root=str(tmp_path / "db"),
        config_root=str(tmp_path / "conf"),
        import_folder="import",
        split_subpath="re/",
    )


@pytest.fixture()
def diagnostics(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture every record emitted by the package logger, debug included."""

    caplog.set_level(logging.DEBUG, logger="lib_layered_db")
    return caplog
