"""Render document nodes for inclusion in warning messages."""

from __future__ import annotations

from ..observability import log_warning
from .ports import DocumentNode


def render(node: DocumentNode) -> str:
    """Return *node* serialised back to document text (empty when undefined).

    Examples
    --------
    >>> import yaml
    >>> from lib_layered_db.adapters.documents.yaml_document import YAMLNode
    >>> render(YAMLNode(yaml.compose("Id: 7\\n")))
    'Id: 7'
    >>> render(YAMLNode(None))
    ''
    """

    if not node.defined:
        return ""
    return node.dump()


def invalid_warning(template: str, node: DocumentNode, path: str) -> None:
    """Warn about an entry a dataset rejected, quoting the offending node.

    Each ``{path}`` in *template* is replaced by the originating file; any
    other braces are kept as written. The rendered node follows on its own
    line so the entry can be found in the file.
    """

    rendered = render(node)
    message = template.replace("{path}", path).rstrip("\n")
    log_warning("entry_invalid", f"{message}\n{rendered}", path=path, line=node.line, node=rendered)
