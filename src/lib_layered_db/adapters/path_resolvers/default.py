"""Filesystem location resolution for datasets.

Purpose
-------
Implement the :class:`lib_layered_db.application.ports.LocationResolver`
protocol. The adapter is the only component that understands the directory
conventions of the three placement categories.

Contents
--------
* :class:`DefaultLocationResolver` – maps a logical name to its base and
  import overlay paths.

System Role
-----------
Feeds ordered path lists into :meth:`lib_layered_db.core.DatasetLoader.parse`.
The resolver performs no I/O: a path that does not exist is reported later,
when the loader tries to read it.
"""

from __future__ import annotations

from pathlib import Path

from ...domain.definition import LocationSettings, Placement
from ...observability import log_debug


class DefaultLocationResolver:
    """Resolve base and overlay paths for each placement category.

    Examples
    --------
    >>> resolver = DefaultLocationResolver(LocationSettings(data_root="db", config_root="conf"))
    >>> [Path(p).as_posix() for p in resolver.resolve("item_db.yml", Placement.SPLIT)]
    ['db/re/item_db.yml', 'db/import/item_db.yml']
    >>> resolver.resolve("item_db.yml", "unknown")
    []
    """

    def __init__(self, settings: LocationSettings | None = None) -> None:
        """Store the root path settings; defaults mirror :class:`LocationSettings`."""

        self.settings = settings or LocationSettings()

    def resolve(self, name: str, placement: Placement | str) -> list[str]:
        """Return ``[base, overlay]`` for *name* under *placement*.

        Why
        ----
        Split datasets keep distinct base directories per variant but share the
        single import overlay, while configuration datasets use their own
        ``import`` folder below the configuration root.

        Returns
        -------
        list[str]
            Base path first, overlay second. Empty for an unrecognised
            placement or an absolute *name*; callers treat that as nothing
            to load.
        """

        category = _coerce_placement(placement)
        if Path(name).is_absolute():
            log_debug(
                "location_unresolved",
                path=None,
                name=name,
                placement=repr(placement),
                reason="absolute name",
            )
            return []
        settings = self.settings
        data_root = Path(settings.data_root)
        config_root = Path(settings.config_root)

        if category is Placement.PLAIN:
            paths = [data_root / name, data_root / settings.import_folder / name]
        elif category is Placement.SPLIT:
            paths = [data_root / f"{settings.split_subpath}{name}", data_root / settings.import_folder / name]
        elif category is Placement.CONFIG:
            paths = [config_root / name, config_root / "import" / name]
        else:
            log_debug("location_unresolved", path=None, name=name, placement=repr(placement))
            return []

        resolved = [str(path) for path in paths]
        log_debug("location_resolved", path=resolved[0], name=name, placement=category.value, count=len(resolved))
        return resolved


def _coerce_placement(placement: Placement | str) -> Placement | None:
    if isinstance(placement, Placement):
        return placement
    if isinstance(placement, str):
        try:
            return Placement(placement.lower())
        except ValueError:
            return None
    return None
