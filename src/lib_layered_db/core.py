"""Composition root for ``lib_layered_db``.

Purpose
-------
Provide the driver that turns a logical dataset name into loaded, checked
documents and hands every body entry to a dataset-specific callback. It wires
the location resolver, the YAML document loader, and the compatibility check
together and reports progress through :mod:`lib_layered_db.observability`.

Contents
--------
* :class:`LoaderState` – lifecycle of a single :meth:`DatasetLoader.parse` call.
* :class:`DatasetLoader` – ``load``/``parse`` driver holding the current root.
* :class:`Dataset` – abstract base for tables that parse their own entries.

System Role
-----------
File-level problems are fail-fast: the first file that cannot be parsed or
fails the header check aborts the whole ``parse`` call. Entry-level problems are
fail-soft: a callback returning ``False`` is simply not counted.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable

from .adapters.documents.yaml_document import YAMLDocumentLoader
from .adapters.path_resolvers.default import DefaultLocationResolver
from .application.compatibility import verify
from .application.diagnostics import invalid_warning
from .application.ports import Document, DocumentLoader, DocumentNode, LocationResolver
from .domain.definition import DatasetDefinition, Placement
from .domain.errors import ParseError
from .observability import bind_current_file, log_debug, log_error, log_status, make_event

EntryCallback = Callable[[DocumentNode, str], bool]


class LoaderState(Enum):
    """Lifecycle of one :meth:`DatasetLoader.parse` invocation."""

    IDLE = "idle"
    RESOLVING = "resolving"
    LOADING = "loading"
    CHECKING = "checking"
    ITERATING = "iterating"
    DONE = "done"
    FAILED = "failed"


class DatasetLoader:
    """Load and iterate the files of one dataset.

    Why
    ----
    Every table shares the same header protocol, overlay policy, and progress
    reporting; only the per-entry parsing differs. The loader owns the shared
    part and receives the entry parser as a callback.

    The current root document is instance state, so concurrent loads need one
    loader each.

    Parameters
    ----------
    definition:
        Type tag and version window every loaded header must satisfy.
    resolver:
        Location resolver; defaults to :class:`DefaultLocationResolver` with
        default :class:`~lib_layered_db.domain.definition.LocationSettings`.
    document_loader:
        Parser for individual files; defaults to :class:`YAMLDocumentLoader`.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> from pathlib import Path
    >>> from lib_layered_db.domain.definition import LocationSettings
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> (root / "import").mkdir()
    >>> text = "Header:\\n  Type: DEMO_DB\\n  Version: 1\\nBody:\\n  - Id: 1\\n  - Id: 2\\n"
    >>> _ = (root / "demo.yml").write_text(text, encoding="utf-8")
    >>> _ = (root / "import" / "demo.yml").write_text("Header:\\n  Type: DEMO_DB\\n  Version: 1\\n", encoding="utf-8")
    >>> loader = DatasetLoader(
    ...     DatasetDefinition("DEMO_DB", 1),
    ...     resolver=DefaultLocationResolver(LocationSettings(data_root=str(root))),
    ... )
    >>> loader.parse("demo.yml", Placement.PLAIN, lambda node, path: True)
    True
    >>> list(loader.counts.values())
    [2, 0]
    >>> tmp.cleanup()
    """

    def __init__(
        self,
        definition: DatasetDefinition,
        *,
        resolver: LocationResolver | None = None,
        document_loader: DocumentLoader | None = None,
    ) -> None:
        self.definition = definition
        self.resolver = resolver or DefaultLocationResolver()
        self.document_loader = document_loader or YAMLDocumentLoader()
        self.state = LoaderState.IDLE
        self.counts: dict[str, int] = {}
        self.current_file: str | None = None
        self._root: Document | None = None

    @property
    def root(self) -> Document | None:
        """Most recently loaded document that passed the header check."""

        return self._root

    def load(self, path: str) -> bool:
        """Parse *path*, verify its header, and make it the current root.

        Returns
        -------
        bool
            ``False`` when the file cannot be parsed (missing, unreadable,
            malformed) or its header is rejected. The previous root is kept in
            that case.

        Side Effects
        ------------
        Emits ``database_read_failed`` / ``database_incompatible`` errors.
        """

        dataset = self.definition.type
        self.state = LoaderState.LOADING
        try:
            document = self.document_loader.load(path)
        except ParseError as exc:
            self.state = LoaderState.FAILED
            log_error(
                "database_read_failed",
                f"Failed to read {dataset} database file from '{path}'.",
                **make_event(dataset, path, {"reason": type(exc).__name__}),
            )
            log_error(
                "database_parse_error",
                f"{exc} (Line {exc.line}: Column {exc.column})" if exc.line is not None else str(exc),
                **make_event(dataset, path, {"line": exc.line, "column": exc.column}),
            )
            return False

        self.state = LoaderState.CHECKING
        if not verify(document, self.definition):
            self.state = LoaderState.FAILED
            log_error(
                "database_check_failed",
                f"Failed to verify compatibility with {dataset} database file from '{path}'.",
                **make_event(dataset, path),
            )
            return False

        self._root = document
        log_debug("database_loaded", **make_event(dataset, path))
        return True

    def parse(self, filename: str, placement: Placement | str, callback: EntryCallback) -> bool:
        """Load every location of *filename* and feed body entries to *callback*.

        Why
        ----
        Base files and import overlays are processed in that order so a
        dataset's callback sees overlay entries last and may treat them as
        overrides or additions.

        What
        ----
        Resolves locations, then for each path: loads it (aborting the whole
        call on failure), calls ``callback(node, path)`` for each defined,
        non-null body entry, counts truthy results, and reports the count.

        Returns
        -------
        bool
            ``True`` once every resolved file was loaded and iterated, however
            many entries the callback rejected. An unresolved placement yields
            no files and therefore ``True``.
        """

        dataset = self.definition.type
        self.counts = {}
        self.state = LoaderState.RESOLVING
        locations = self.resolver.resolve(filename, placement)
        if not locations:
            log_debug("dataset_no_locations", **make_event(dataset, None, {"name": filename}))

        for current in locations:
            if not self.load(current):
                self.current_file = None
                return False

            self.state = LoaderState.ITERATING
            self.current_file = current
            count = 0
            bind_current_file(current)
            try:
                for node in self._root.root.get("Body"):
                    if node.defined and not node.null and callback(node, current):
                        count += 1
            finally:
                bind_current_file(None)
            self.counts[current] = count
            log_status(
                "dataset_file_done",
                f"Done reading '{count}' entries in '{current}'",
                **make_event(dataset, current, {"entries": count}),
            )

        self.current_file = None
        self.state = LoaderState.DONE
        return True


class Dataset(ABC):
    """Base class for a table whose entries come from layered data files.

    Subclasses provide the definition, the default location, a way to forget
    previously loaded entries, and the per-entry parser. Everything else (file
    resolution, header checks, progress reporting) is inherited.

    Examples
    --------
    >>> class Names(Dataset):
    ...     def __init__(self):
    ...         super().__init__(DatasetDefinition("NAME_DB", 1))
    ...         self.names = []
    ...     def default_location(self):
    ...         return "names.yml", Placement.PLAIN
    ...     def clear(self):
    ...         self.names.clear()
    ...     def parse_entry(self, node, path):
    ...         self.names.append(node)
    ...         return True
    >>> Names().definition.type
    'NAME_DB'
    """

    def __init__(
        self,
        definition: DatasetDefinition,
        *,
        resolver: LocationResolver | None = None,
        document_loader: DocumentLoader | None = None,
    ) -> None:
        self.definition = definition
        self.loader = DatasetLoader(definition, resolver=resolver, document_loader=document_loader)

    @abstractmethod
    def default_location(self) -> tuple[str, Placement]:
        """Return the logical filename and placement of this dataset."""

    @abstractmethod
    def clear(self) -> None:
        """Forget every entry loaded so far."""

    @abstractmethod
    def parse_entry(self, node: DocumentNode, path: str) -> bool:
        """Parse one body entry; return ``False`` to reject it."""

    @property
    def current_file(self) -> str | None:
        """File whose body is being iterated, ``None`` outside of a load."""

        return self.loader.current_file

    def load(self) -> bool:
        """Load the default location, keeping entries loaded earlier."""

        filename, placement = self.default_location()
        return self.loader.parse(filename, placement, self.parse_entry)

    def reload(self) -> bool:
        """Clear all entries, then load the default location again."""

        self.clear()
        return self.load()

    def invalid_warning(self, template: str, node: DocumentNode) -> None:
        """Warn about *node* in the file currently being iterated.

        *template* may reference the file as ``{path}``.
        """

        invalid_warning(template, node, self.current_file or "")
