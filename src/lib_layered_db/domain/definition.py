"""Domain value objects describing datasets and where their files live.

Purpose
-------
Hold the immutable identity of a dataset (type tag and version window), the
placement categories that select a directory convention, and the explicit root
path settings consumed by the location resolver. Nothing here performs I/O.

Contents
--------
* :class:`DatasetDefinition` – type tag, current version, minimum version.
* :class:`Placement` – directory naming convention for a dataset's files.
* :class:`LocationSettings` – data/config roots and folder names.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import ValidationError
from .primitives import Primitive

_VERSION_MIN, _VERSION_MAX = Primitive.UINT16.bounds


@dataclass(frozen=True, slots=True)
class DatasetDefinition:
    """Identity and version window of one dataset.

    Why
    ----
    The compatibility check compares every loaded header against these values;
    freezing them keeps a dataset's expectations stable for its lifetime.

    Parameters
    ----------
    type:
        Tag that must equal the header ``Type`` field (case-sensitive).
    version:
        Current version the dataset understands.
    minimum_version:
        Oldest version still accepted (with a warning). Defaults to
        ``version``, which disables the deprecation window.

    Examples
    --------
    >>> DatasetDefinition("ITEM_DB", 3, 2)
    DatasetDefinition(type='ITEM_DB', version=3, minimum_version=2)
    >>> DatasetDefinition("MOB_DB", 1).minimum_version
    1
    >>> DatasetDefinition("MOB_DB", 1, 4)
    Traceback (most recent call last):
    ...
    lib_layered_db.domain.errors.ValidationError: Minimum version 4 of MOB_DB exceeds its current version 1
    """

    type: str
    version: int
    minimum_version: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type:
            raise ValidationError("Dataset type must be a non-empty string")
        if self.minimum_version is None:
            object.__setattr__(self, "minimum_version", self.version)
        for label, value in (("version", self.version), ("minimum version", self.minimum_version)):
            if isinstance(value, bool) or not isinstance(value, int) or not _VERSION_MIN <= value <= _VERSION_MAX:
                raise ValidationError(f"Dataset {label} of {self.type} must be an integer in [0, {_VERSION_MAX}]")
        if self.minimum_version > self.version:
            raise ValidationError(
                f"Minimum version {self.minimum_version} of {self.type} exceeds its current version {self.version}"
            )


class Placement(Enum):
    """Directory naming convention used to locate a dataset's files.

    ``PLAIN`` datasets live directly under the data root, ``SPLIT`` datasets
    keep a variant subdirectory (renewal / pre-renewal) for the base file, and
    ``CONFIG`` datasets live under the configuration root.
    """

    PLAIN = "plain"
    SPLIT = "split"
    CONFIG = "config"


@dataclass(frozen=True, slots=True)
class LocationSettings:
    """Root paths and folder names used when resolving dataset files.

    Attributes
    ----------
    data_root:
        Directory holding plain and split datasets.
    config_root:
        Directory holding configuration-style datasets.
    import_folder:
        Name of the overlay folder below ``data_root``.
    split_subpath:
        Prefix joined with the logical name for split datasets. It carries its
        own trailing separator (``"re/"``) and may be empty.
    """

    data_root: str = "db"
    config_root: str = "conf"
    import_folder: str = "import"
    split_subpath: str = "re/"

    def __post_init__(self) -> None:
        for name in ("data_root", "config_root", "import_folder"):
            if not getattr(self, name):
                raise ValidationError(f"Location setting {name} must not be empty")
