"""Minimal tree model shared by the parser adapter, the engine and the serializer."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Union


class Text:
    """A run of character data."""

    __slots__ = ("data",)

    name = "#text"

    def __init__(self, data: str) -> None:
        self.data = data

    def __repr__(self) -> str:
        return f"Text({self.data!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Text):
            return NotImplemented
        return self.data == other.data

    __hash__ = None  # type: ignore[assignment]


class Element:
    """An element with an ordered attribute mapping and child nodes.

    - name: lower-cased local tag name, e.g. 'div'
    - attrs: insertion-ordered dict of attribute name -> value
    - children: list of Element/Text nodes
    """

    __slots__ = ("attrs", "children", "name")

    def __init__(
        self,
        name: str,
        attrs: Mapping[str, str | None] | None = None,
        children: Iterable[Node] | None = None,
    ) -> None:
        if not name:
            msg = "Empty tag name passed to Element constructor"
            raise ValueError(msg)
        self.name = name
        self.attrs: dict[str, str | None] = dict(attrs) if attrs else {}
        self.children: list[Node] = list(children) if children else []

    def append_child(self, child: Node) -> None:
        if child is self:
            msg = f"Adding {self.name} as a child of itself would create a circular reference"
            raise ValueError(msg)
        self.children.append(child)

    def __repr__(self) -> str:
        return f"Element({self.name!r}, {self.attrs!r}, {self.children!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return self.name == other.name and self.attrs == other.attrs and self.children == other.children

    __hash__ = None  # type: ignore[assignment]


Node = Union[Element, Text]


def text_content(nodes: Node | Iterable[Node]) -> str:
    """Concatenate the character data of `nodes` in document order."""
    if isinstance(nodes, (Element, Text)):
        nodes = [nodes]
    parts: list[str] = []
    stack: list[Node] = list(reversed(list(nodes)))
    while stack:
        node = stack.pop()
        if isinstance(node, Text):
            parts.append(node.data)
        else:
            stack.extend(reversed(node.children))
    return "".join(parts)
