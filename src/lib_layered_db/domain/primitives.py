"""Primitive element types understood by the typed field accessor.

Each member carries the inclusive integer bounds used for range checks so the
document adapter can validate integer conversions without a lookup table.
"""

from __future__ import annotations

from enum import Enum


class Primitive(Enum):
    """Supported element types for typed field extraction.

    Examples
    --------
    >>> Primitive.UINT16.bounds
    (0, 65535)
    >>> Primitive.INT16.is_integer, Primitive.DOUBLE.is_integer
    (True, False)
    """

    BOOL = "bool"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_BOUNDS

    @property
    def is_real(self) -> bool:
        return self in (Primitive.FLOAT, Primitive.DOUBLE)

    @property
    def bounds(self) -> tuple[int, int]:
        """Return the inclusive ``(minimum, maximum)`` range of an integer primitive."""

        try:
            return _INTEGER_BOUNDS[self]
        except KeyError as exc:
            raise TypeError(f"{self.value} is not an integer primitive") from exc


_INTEGER_BOUNDS: dict[Primitive, tuple[int, int]] = {
    Primitive.INT16: (-(2**15), 2**15 - 1),
    Primitive.UINT16: (0, 2**16 - 1),
    Primitive.INT32: (-(2**31), 2**31 - 1),
    Primitive.UINT32: (0, 2**32 - 1),
    Primitive.INT64: (-(2**63), 2**63 - 1),
    Primitive.UINT64: (0, 2**64 - 1),
}
