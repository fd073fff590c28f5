"""Tree sanitizer.

`sanitize_node` is a pure, depth-first transform from one node to the list of
nodes that replace it:

- text is copied as-is (escaping belongs to the serializer);
- a REMOVE tag yields nothing and its subtree is never visited;
- an UNWRAP tag yields its sanitized children in its place;
- an ALLOW tag yields a single new element with filtered attributes.

The walk keeps its own stack, so nesting depth is bounded by memory rather
than by the interpreter's recursion limit. The input tree is never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .attrs import ReportCallback, report_unsafe, sanitize_attributes
from .node import Element, Node, Text
from .policy import DEFAULT_POLICY, SanitizationPolicy, TagAction


def classify(tag: str, policy: SanitizationPolicy = DEFAULT_POLICY) -> TagAction:
    """Return ALLOW, UNWRAP or REMOVE for `tag` (case-insensitive, exact match)."""
    return policy.tag_action(tag.lower())


class _Frame:
    """An element whose children are still being sanitized."""

    __slots__ = ("action", "children", "out", "source", "tag")

    def __init__(self, source: Element | None, tag: str, action: TagAction, children: Iterable[Node]) -> None:
        self.source = source
        self.tag = tag
        self.action = action
        self.children: Iterator[Node] = iter(children)
        self.out: list[Node] = []


def sanitize_node(
    node: Node,
    policy: SanitizationPolicy = DEFAULT_POLICY,
    *,
    report: ReportCallback | None = None,
) -> list[Node]:
    return sanitize_nodes([node], policy, report=report)


def sanitize_nodes(
    nodes: Iterable[Node],
    policy: SanitizationPolicy = DEFAULT_POLICY,
    *,
    report: ReportCallback | None = None,
) -> list[Node]:
    """Sanitize each root in `nodes` and concatenate the results."""
    root = _Frame(None, "", TagAction.UNWRAP, nodes)
    stack = [root]
    while stack:
        frame = stack[-1]
        node = next(frame.children, None)

        if node is None:
            # All children done: replace the element by its result.
            stack.pop()
            if frame.source is None:
                continue
            parent = stack[-1].out
            if frame.action is TagAction.UNWRAP:
                report_unsafe(report, f"Unsafe tag '{frame.tag}' (not allowed)", node=frame.source)
                parent.extend(frame.out)
            else:
                attrs = sanitize_attributes(frame.tag, frame.source.attrs, policy, report=report, node=frame.source)
                parent.append(Element(frame.tag, attrs, frame.out))
            continue

        if isinstance(node, Text):
            frame.out.append(Text(node.data))
            continue
        if not isinstance(node, Element):
            raise TypeError(f"Cannot sanitize {type(node).__name__}; expected Element or Text")

        tag = node.name.lower()
        action = classify(tag, policy)
        if action is TagAction.REMOVE:
            report_unsafe(report, f"Unsafe tag '{tag}' (dropped content)", node=node)
            continue
        stack.append(_Frame(node, tag, action, node.children))

    return root.out
