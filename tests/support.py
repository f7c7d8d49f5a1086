"""Helpers shared by the test modules (documents, data files, log records)."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import pytest
import yaml

from lib_layered_db.adapters.documents.yaml_document import YAMLDocument, YAMLNode


def database_text(db_type: str, version: Any, entries: Iterable[Any] | None = None) -> str:
    """Return the YAML text of a data file with the given header and body."""

    payload: dict[str, Any] = {"Header": {"Type": db_type, "Version": version}}
    if entries is not None:
        payload["Body"] = list(entries)
    return yaml.safe_dump(payload, sort_keys=False)


def node_from(text: str) -> YAMLNode:
    """Compose *text* into a document node."""

    return YAMLNode(yaml.compose(text))


def document_from(text: str, path: str = "memory.yml") -> YAMLDocument:
    """Compose *text* into an in-memory document."""

    return YAMLDocument(path=path, root=node_from(text))


def records_at(caplog: pytest.LogCaptureFixture, level: int) -> list[logging.LogRecord]:
    """Return package records emitted at exactly *level*."""

    return [record for record in caplog.records if record.name == "lib_layered_db" and record.levelno == level]


def events(caplog: pytest.LogCaptureFixture) -> list[str]:
    """Return the ``event`` names of package records in emission order."""

    return [record.context["event"] for record in caplog.records if record.name == "lib_layered_db"]
