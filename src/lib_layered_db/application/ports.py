"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts the application services rely on so the
accessor, the compatibility check, and the loader never depend on a concrete
document parser or filesystem convention.

Contents
--------
* :class:`DocumentNode` – non-raising navigation and scalar conversion.
* :class:`Document` – a parsed file exposing its root node and path.
* :class:`DocumentLoader` – parses a file into a :class:`Document`.
* :class:`LocationResolver` – maps a logical dataset name to physical paths.

System Role
-----------
These protocols enforce Dependency Inversion. The YAML adapter and the default
location resolver each implement one of them; tests can substitute fakes.
"""

from __future__ import annotations

from typing import Any, Iterator, Protocol, runtime_checkable

from ..domain.definition import Placement
from ..domain.primitives import Primitive


@runtime_checkable
class DocumentNode(Protocol):
    """Read-only handle into a parsed hierarchical document.

    Why
    ----
    Probing a loosely typed tree must never raise on a malformed or missing
    intermediate path; lookups that miss yield an *undefined* node instead.
    """

    @property
    def defined(self) -> bool:
        """``False`` for the placeholder returned by a missing lookup."""

    @property
    def null(self) -> bool:
        """``True`` for an explicit null value."""

    @property
    def line(self) -> int:
        """1-based source line of the node (``0`` when undefined)."""

    @property
    def column(self) -> int:
        """1-based source column of the node (``0`` when undefined)."""

    def exists(self, key: str) -> bool:
        """Return ``True`` when *key* names a child of this mapping node."""

    def get(self, key: str) -> "DocumentNode":
        """Return the child under *key* or an undefined node."""

    def convert(self, primitive: Primitive) -> Any:
        """Return the scalar as *primitive* or raise ``ConversionError``."""

    def dump(self) -> str:
        """Serialise the node back into document text."""

    def __iter__(self) -> Iterator["DocumentNode"]:
        """Iterate sequence items (nothing for other node kinds)."""


@runtime_checkable
class Document(Protocol):
    """Root of one parsed file."""

    path: str

    @property
    def root(self) -> DocumentNode:
        """Top-level node of the file."""


class DocumentLoader(Protocol):
    """Parse a data file into a :class:`Document`."""

    def load(self, path: str) -> Document:
        """Read *path* or raise ``ParseError`` / ``NotFound``."""


@runtime_checkable
class LocationResolver(Protocol):
    """Produce the ordered physical paths for a logical dataset name."""

    def resolve(self, name: str, placement: Placement | str) -> list[str]:
        """Return base path(s) before overlay path(s); empty when unresolved."""
