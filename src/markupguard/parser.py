"""Adapter from html5lib's etree output to markupguard nodes.

html5lib implements the WHATWG parsing algorithm, including its error
recovery, and never evaluates script content. Its etree builder stores text
in `.text`/`.tail` and comments under the `ElementTree.Comment` factory; this
module flattens that into Element/Text nodes and drops comments.
"""

from __future__ import annotations

import logging
from typing import Any

import html5lib

from .constants import NAMESPACE_PREFIXES
from .errors import MarkupParseError
from .node import Element, Node, Text

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER = "div"


def _local_name(name: str) -> tuple[str, str]:
    """Split "{uri}local" into (prefix, local); prefix is "" for HTML/SVG/MathML."""
    if name.startswith("{"):
        uri, _, local = name[1:].partition("}")
        return NAMESPACE_PREFIXES.get(uri, uri), local
    return "", name


def _attr_name(name: str) -> str:
    prefix, local = _local_name(name)
    if prefix:
        return f"{prefix}:{local}".lower()
    return local.lower()


def _append_text(out: list[Node], data: str | None) -> None:
    if not data:
        return
    if out and isinstance(out[-1], Text):
        out[-1] = Text(out[-1].data + data)
    else:
        out.append(Text(data))


def _convert_children(root: Any) -> list[Node]:
    out: list[Node] = []
    # (etree element, list its converted children go into)
    stack: list[tuple[Any, list[Node]]] = [(root, out)]
    while stack:
        parent, target = stack.pop()
        _append_text(target, parent.text)
        for child in parent:
            if isinstance(child.tag, str) and not child.tag.startswith("<!"):
                _, local = _local_name(child.tag)
                attrs = {_attr_name(k): v for k, v in child.attrib.items()}
                element = Element(local.lower(), attrs)
                target.append(element)
                stack.append((child, element.children))
            # Comments, doctypes and processing instructions are dropped; their
            # tail text still belongs to the parent.
            _append_text(target, child.tail)
    return out


def parse(text: str, *, container: str = DEFAULT_CONTAINER) -> list[Node]:
    """Parse `text` as an HTML fragment and return its top-level nodes."""
    if not isinstance(text, str):
        raise MarkupParseError("unsupported-input", f"Expected str, got {type(text).__name__}")
    try:
        fragment = html5lib.parseFragment(
            text,
            container=container,
            treebuilder="etree",
            namespaceHTMLElements=False,
        )
        return _convert_children(fragment)
    except (ValueError, TypeError, LookupError) as exc:
        logger.debug("html5lib failed to parse input: %s", exc)
        raise MarkupParseError("parse-failed", str(exc)) from exc
