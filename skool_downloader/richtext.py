"""
Tiptap / ProseMirror document handling for module descriptions.

Skool stores a module description as the serialized output of its rich-text
editor, usually wrapped in some leading text and HTML-entity encoded. This module:
1. Decodes that blob into a tree of ``RichTextNode`` (``parse_document``).
2. Renders the tree into a plain HTML fragment (``render_html``).

Anything that does not look like an editor document is kept as escaped plain text,
so a description is always renderable.
"""

from __future__ import annotations

import html
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

NODE_KINDS = frozenset(
    {
        "text",
        "paragraph",
        "heading",
        "bulletList",
        "orderedList",
        "listItem",
        "blockquote",
        "hardBreak",
    }
)
MARK_KINDS = frozenset({"bold", "italic", "link"})
OTHER = "other"

# Older descriptions are prefixed with a format revision tag.
VERSION_MARKER = "[v2]"
DOCUMENT_START = "[{"


class DocumentShapeError(ValueError):
    """Raised when decoded JSON does not have the shape of an editor document."""


@dataclass
class Mark:
    """Inline annotation attached to a text node."""

    kind: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def href(self) -> str:
        value = self.attributes.get("href")
        return value if isinstance(value, str) else ""

    @classmethod
    def from_json(cls, data: Any) -> "Mark":
        if not isinstance(data, dict):
            raise DocumentShapeError(f"mark must be an object, got {type(data).__name__}")
        kind = data.get("type", "")
        if not isinstance(kind, str):
            raise DocumentShapeError("mark type must be a string")
        return cls(
            kind=kind if kind in MARK_KINDS else OTHER,
            attributes=_attrs_from_json(data.get("attrs")),
        )


@dataclass
class RichTextNode:
    """One node of a parsed editor document."""

    kind: str
    text: Optional[str] = None
    marks: List[Mark] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)
    children: List["RichTextNode"] = field(default_factory=list)
    type_name: str = ""

    @classmethod
    def from_json(cls, data: Any) -> "RichTextNode":
        """Build a node (and its subtree) from decoded JSON, rejecting malformed shapes."""
        if not isinstance(data, dict):
            raise DocumentShapeError(f"node must be an object, got {type(data).__name__}")

        type_name = data.get("type", "")
        if not isinstance(type_name, str):
            raise DocumentShapeError("node type must be a string")

        text = data.get("text")
        if text is not None and not isinstance(text, str):
            raise DocumentShapeError("node text must be a string")

        kind = type_name if type_name in NODE_KINDS else OTHER
        return cls(
            kind=kind,
            text=text if kind == "text" else None,
            marks=[Mark.from_json(mark) for mark in _list_from_json(data.get("marks"), "marks")],
            attributes=_attrs_from_json(data.get("attrs")),
            children=nodes_from_json(data.get("content")),
            type_name=type_name,
        )


def nodes_from_json(data: Any) -> List[RichTextNode]:
    """Decode a JSON array of nodes."""
    return [RichTextNode.from_json(item) for item in _list_from_json(data, "content")]


def _list_from_json(data: Any, name: str) -> list:
    if data is None:
        return []
    if not isinstance(data, list):
        raise DocumentShapeError(f"{name} must be an array")
    return data


def _attrs_from_json(data: Any) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DocumentShapeError("attrs must be an object")
    return dict(data)


def plain_text_document(raw: str) -> List[RichTextNode]:
    """Wrap raw text in a single paragraph."""
    return [
        RichTextNode(
            kind="paragraph",
            children=[RichTextNode(kind="text", text=raw.strip(), type_name="text")],
            type_name="paragraph",
        )
    ]


def parse_document(raw: str) -> List[RichTextNode]:
    """
    Decode a module description into rich-text nodes.

    The editor JSON may sit at any offset inside ``raw`` and may be HTML-entity
    encoded. Both a bare array of nodes and a ``{"content": [...]}`` document are
    accepted. Anything else becomes a single plain-text paragraph; this never raises.
    """
    if not raw:
        return []

    raw = raw.replace(VERSION_MARKER, "")
    start = raw.find(DOCUMENT_START)
    if start < 0:
        return plain_text_document(raw)

    payload = html.unescape(raw[start:])

    try:
        return nodes_from_json(json.loads(payload))
    except (ValueError, RecursionError) as exc:
        logger.debug("Description is not a node array: %s", exc)

    try:
        root = json.loads(payload)
        if not isinstance(root, dict):
            raise DocumentShapeError("document root must be an object")
        nodes = nodes_from_json(root.get("content"))
        if nodes:
            return nodes
        logger.debug("Description document has no content")
    except (ValueError, RecursionError) as exc:
        logger.debug("Description is not a document object: %s", exc)

    return plain_text_document(raw)


def render_html(nodes: Sequence[RichTextNode]) -> str:
    """Render a node sequence into an HTML fragment."""
    return _render_nodes(nodes).strip()


def _render_nodes(nodes: Sequence[RichTextNode]) -> str:
    return "".join(_render_node(node) for node in nodes)


def _render_node(node: RichTextNode) -> str:
    kind = node.kind

    if kind == "heading":
        level = _heading_level(node.attributes)
        inner = _render_nodes(node.children).strip()
        return f"<h{level}>{inner}</h{level}>\n"

    if kind == "paragraph":
        inner = _render_nodes(node.children).strip()
        if not inner:
            return ""
        return f"<p>{inner}</p>\n"

    if kind == "bulletList":
        return "<ul>\n" + _render_nodes(node.children) + "</ul>\n"

    if kind == "orderedList":
        return "<ol>\n" + _render_nodes(node.children) + "</ol>\n"

    if kind == "listItem":
        return "<li>" + _render_nodes(node.children).strip() + "</li>\n"

    if kind == "text":
        return _apply_marks(html.escape(node.text or ""), node.marks)

    if kind == "hardBreak":
        return "<br>\n"

    if kind == "blockquote":
        return "<blockquote>" + _render_nodes(node.children).strip() + "</blockquote>\n"

    # Unknown node types are transparent.
    return _render_nodes(node.children)


def _apply_marks(text: str, marks: Sequence[Mark]) -> str:
    """Wrap text with each mark in turn; the first mark ends up innermost."""
    for mark in marks:
        if mark.kind == "bold":
            text = f"<strong>{text}</strong>"
        elif mark.kind == "italic":
            text = f"<em>{text}</em>"
        elif mark.kind == "link":
            text = f'<a href="{html.escape(mark.href)}" target="_blank">{text}</a>'
    return text


def _heading_level(attributes: Dict[str, Any]) -> int:
    level = attributes.get("level")
    if isinstance(level, bool) or not isinstance(level, (int, float)):
        return 1
    try:
        return min(max(int(level), 1), 6)
    except (OverflowError, ValueError):
        return 1


def render_description(raw: str) -> str:
    """Parse and render a description, falling back to plain text if JSON leaks through."""
    rendered = render_html(parse_document(raw))
    if DOCUMENT_START in rendered or '"type":' in rendered:
        logger.debug("Rendered description still contains raw JSON, using plain text")
        return render_html(plain_text_document(raw.replace(VERSION_MARKER, "")))
    return rendered


__all__ = [
    "DocumentShapeError",
    "Mark",
    "RichTextNode",
    "nodes_from_json",
    "parse_document",
    "plain_text_document",
    "render_description",
    "render_html",
]
