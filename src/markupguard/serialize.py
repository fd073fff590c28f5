"""HTML serialization for markupguard nodes."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .constants import LEADING_NEWLINE_ELEMENTS, VOID_ELEMENTS
from .node import Element, Node, Text


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr_value(value: str | None) -> str:
    if value is None:
        return ""
    return str(value).replace("&", "&amp;").replace('"', "&quot;")


def serialize_start_tag(name: str, attrs: Mapping[str, str | None] | None) -> str:
    parts: list[str] = ["<", name]
    for key, value in (attrs or {}).items():
        parts.extend([" ", key, '="', _escape_attr_value(value), '"'])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def to_html(nodes: Node | Iterable[Node]) -> str:
    """Convert a node, or a list of sibling nodes, to an HTML string."""
    if isinstance(nodes, (Element, Text)):
        nodes = [nodes]
    parts: list[str] = []
    # Pending work in reverse document order: nodes, or end tags as plain strings.
    stack: list[Node | str] = list(reversed(list(nodes)))
    while stack:
        node = stack.pop()
        if isinstance(node, str):
            parts.append(node)
            continue
        if isinstance(node, Text):
            parts.append(_escape_text(node.data))
            continue

        name = node.name
        parts.append(serialize_start_tag(name, node.attrs))
        if name in VOID_ELEMENTS:
            continue

        children = node.children
        if (
            name in LEADING_NEWLINE_ELEMENTS
            and children
            and isinstance(children[0], Text)
            and children[0].data.startswith("\n")
        ):
            parts.append("\n")
        stack.append(serialize_end_tag(name))
        stack.extend(reversed(children))
    return "".join(parts)


def to_test_format(nodes: Node | Iterable[Node], indent: int = 0) -> str:
    """Render nodes in the html5lib-tests tree format.

    Uses '| ' prefixes with two-space indentation per level and sorted
    attributes, which makes tree shape easy to compare in tests.
    """
    if isinstance(nodes, (Element, Text)):
        nodes = [nodes]
    lines: list[str] = []
    stack: list[tuple[Node, int]] = [(node, indent) for node in reversed(list(nodes))]
    while stack:
        node, depth = stack.pop()
        padding = " " * depth
        if isinstance(node, Text):
            lines.append(f'| {padding}"{node.data}"')
            continue
        lines.append(f"| {padding}<{node.name}>")
        for attr_name, attr_value in sorted(node.attrs.items()):
            lines.append(f'| {padding}  {attr_name}="{attr_value or ""}"')
        stack.extend((child, depth + 2) for child in reversed(node.children))
    return "\n".join(lines)
