"""YAML document adapter.

Purpose
-------
Parse data files with PyYAML's composer so every node keeps its source marks,
and expose the result through the :class:`~lib_layered_db.application.ports.DocumentNode`
capability: non-raising navigation, scalar conversion, and re-serialisation.

Contents
--------
* :class:`YAMLNode` – read-only view over a composed ``yaml.Node``.
* :class:`YAMLDocument` – a parsed file (path + root node).
* :class:`YAMLDocumentLoader` – reads a file and composes it into a document.

System Role
-----------
Used by :class:`lib_layered_db.core.DatasetLoader` to materialise each resolved
location. Conversions read the scalar text as written, so quoting a number does
not stop it from converting to an integer and any scalar can be read as text.
"""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

import yaml

from ...domain.errors import ConversionError, NotFound, ParseError
from ...domain.primitives import Primitive
from ...observability import log_debug

_NULL_TAG = "tag:yaml.org,2002:null"
_TRUE = frozenset({"true", "yes", "on", "y"})
_FALSE = frozenset({"false", "no", "off", "n"})
_INTEGER = re.compile(r"^([-+]?)(0x[0-9a-fA-F]+|0o[0-7]+|[0-9]+)$")
_REAL = re.compile(r"^[-+]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][-+]?[0-9]+)?$")
_SPECIAL_REALS = {
    ".inf": float("inf"),
    "+.inf": float("inf"),
    "-.inf": float("-inf"),
    ".nan": float("nan"),
}


class YAMLNode:
    """Read-only handle over a composed PyYAML node.

    ``YAMLNode(None)`` is the *undefined* node: the result of looking up a key
    that does not exist. Every operation on it is safe and yields nothing.

    Examples
    --------
    >>> node = YAMLNode(yaml.compose("Id: 501\\nName: Red Potion\\n"))
    >>> node.exists("Id"), node.exists("Weight")
    (True, False)
    >>> node.get("Id").convert(Primitive.UINT32)
    501
    >>> node.get("Weight").get("Deeper").defined
    False
    """

    __slots__ = ("_node",)

    def __init__(self, node: yaml.Node | None) -> None:
        self._node = node

    def __repr__(self) -> str:
        if self._node is None:
            return "YAMLNode(<undefined>)"
        return f"YAMLNode({type(self._node).__name__} at line {self.line})"

    @property
    def defined(self) -> bool:
        return self._node is not None

    @property
    def null(self) -> bool:
        """``True`` for an explicit YAML null (``~``, ``null``, or an empty value)."""

        return isinstance(self._node, yaml.ScalarNode) and self._node.tag == _NULL_TAG

    @property
    def is_mapping(self) -> bool:
        return isinstance(self._node, yaml.MappingNode)

    @property
    def is_sequence(self) -> bool:
        return isinstance(self._node, yaml.SequenceNode)

    @property
    def is_scalar(self) -> bool:
        return isinstance(self._node, yaml.ScalarNode)

    @property
    def line(self) -> int:
        return self._node.start_mark.line + 1 if self._node is not None else 0

    @property
    def column(self) -> int:
        return self._node.start_mark.column + 1 if self._node is not None else 0

    def exists(self, key: str) -> bool:
        return self._child(key) is not None

    def get(self, key: str) -> YAMLNode:
        return YAMLNode(self._child(key))

    def keys(self) -> list[str]:
        """Return the scalar keys of a mapping node in document order."""

        if not isinstance(self._node, yaml.MappingNode):
            return []
        return [key.value for key, _ in self._node.value if isinstance(key, yaml.ScalarNode)]

    def __iter__(self) -> Iterator[YAMLNode]:
        if isinstance(self._node, yaml.SequenceNode):
            for item in self._node.value:
                yield YAMLNode(item)

    def __len__(self) -> int:
        if isinstance(self._node, (yaml.SequenceNode, yaml.MappingNode)):
            return len(self._node.value)
        return 0

    def convert(self, primitive: Primitive) -> Any:
        """Return the scalar converted to *primitive*.

        Raises
        ------
        ConversionError
            When the node is not a non-null scalar or its text does not fit
            the requested type.
        """

        if not isinstance(self._node, yaml.ScalarNode) or self._node.tag == _NULL_TAG:
            raise ConversionError(f"Cannot convert {self._describe()} to {primitive.value}")
        text = self._node.value
        if primitive is Primitive.STRING:
            return text
        if primitive is Primitive.BOOL:
            return _to_bool(text)
        if primitive.is_integer:
            return _to_integer(text, primitive)
        if primitive.is_real:
            return _to_real(text, primitive)
        raise ConversionError(f"Unsupported primitive {primitive!r}")

    def dump(self) -> str:
        """Serialise the node back to YAML text without the document end marker.

        Examples
        --------
        >>> YAMLNode(yaml.compose("Id: 1\\nName: Apple\\n")).dump()
        'Id: 1\\nName: Apple'
        """

        if self._node is None:
            return ""
        text = yaml.serialize(self._node, Dumper=yaml.SafeDumper, allow_unicode=True)
        if text.endswith("\n...\n"):
            text = text[: -len("...\n")]
        return text.rstrip("\n")

    def _child(self, key: str) -> yaml.Node | None:
        if not isinstance(self._node, yaml.MappingNode):
            return None
        for key_node, value_node in self._node.value:
            if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
                return value_node
        return None

    def _describe(self) -> str:
        if self._node is None:
            return "undefined node"
        if self.null:
            return f"null value in line {self.line}"
        return f"{type(self._node).__name__} in line {self.line}"


@dataclass(frozen=True, slots=True)
class YAMLDocument:
    """A parsed data file.

    Attributes
    ----------
    path:
        Path the document was read from.
    root:
        Top-level node; undefined for an empty file.
    """

    path: str
    root: YAMLNode

    @property
    def header(self) -> YAMLNode:
        return self.root.get("Header")

    @property
    def body(self) -> YAMLNode:
        return self.root.get("Body")


class YAMLDocumentLoader:
    """Compose YAML (and JSON, a YAML subset) files into :class:`YAMLDocument` objects."""

    def load(self, path: str) -> YAMLDocument:
        """Return the document stored at *path*.

        Raises
        ------
        NotFound
            When *path* is not an existing file.
        ParseError
            When the file cannot be read or is not valid YAML. ``line`` and
            ``column`` carry the 1-based parser position when known.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile('w', suffix='.yml', delete=False, encoding='utf-8')
        >>> _ = tmp.write('Header:\\n  Type: DEMO_DB\\n  Version: 1\\n')
        >>> tmp.close()
        >>> YAMLDocumentLoader().load(tmp.name).header.get('Type').convert(Primitive.STRING)
        'DEMO_DB'
        >>> Path(tmp.name).unlink()
        """

        payload = self._read(path)
        try:
            node = yaml.compose(payload, Loader=yaml.SafeLoader)
        except yaml.MarkedYAMLError as exc:
            mark = exc.problem_mark or exc.context_mark
            line = mark.line + 1 if mark is not None else None
            column = mark.column + 1 if mark is not None else None
            raise ParseError(_describe_yaml_error(exc), line=line, column=column) from exc
        except yaml.YAMLError as exc:
            raise ParseError(str(exc)) from exc
        log_debug("document_composed", path=path, empty=node is None)
        return YAMLDocument(path=path, root=YAMLNode(node))

    @staticmethod
    def _read(path: str) -> bytes:
        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Database file not found: {path}")
        try:
            payload = file_path.read_bytes()
        except OSError as exc:
            raise ParseError(f"Unable to read {path}: {exc.strerror or exc}") from exc
        log_debug("document_read", path=path, size=len(payload))
        return payload


def _describe_yaml_error(exc: yaml.MarkedYAMLError) -> str:
    parts = [part for part in (exc.context, exc.problem) if part]
    return ", ".join(parts) if parts else str(exc)


def _to_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConversionError(f"{text!r} is not a boolean")


def _to_integer(text: str, primitive: Primitive) -> int:
    match = _INTEGER.match(text.strip())
    if match is None:
        raise ConversionError(f"{text!r} is not an integer")
    sign, digits = match.groups()
    if digits.startswith("0x"):
        value = int(digits[2:], 16)
    elif digits.startswith("0o"):
        value = int(digits[2:], 8)
    else:
        value = int(digits, 10)
    if sign == "-":
        value = -value
    minimum, maximum = primitive.bounds
    if not minimum <= value <= maximum:
        raise ConversionError(f"{value} is outside the {primitive.value} range [{minimum}, {maximum}]")
    return value


def _to_real(text: str, primitive: Primitive) -> float:
    stripped = text.strip()
    special = _SPECIAL_REALS.get(stripped.lower())
    if special is not None:
        return special
    if _REAL.match(stripped) is None:
        raise ConversionError(f"{text!r} is not a number")
    value = float(stripped)
    if primitive is Primitive.FLOAT:
        try:
            (single,) = struct.unpack("f", struct.pack("f", value))
        except OverflowError as exc:
            raise ConversionError(f"{text!r} overflows single precision") from exc
        # pack() may round an out-of-range double to inf without raising
        if math.isinf(single) and not math.isinf(value):
            raise ConversionError(f"{text!r} overflows single precision")
        value = single
    return value
