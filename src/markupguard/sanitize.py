"""Public sanitization entry points.

`sanitize()` is the one operation most callers need: untrusted markup in,
markup that is safe to render out. The other helpers share the same
parse -> sanitize pipeline for callers that want nodes, plain text, or a
single URL check.
"""

from __future__ import annotations

import logging

from .attrs import ReportCallback
from .engine import sanitize_nodes
from .errors import MarkupParseError
from .node import Node, text_content
from .parser import parse
from .policy import DEFAULT_POLICY, SanitizationPolicy
from .serialize import to_html
from .urls import is_url_allowed

logger = logging.getLogger(__name__)

Markup = str | bytes | None

# Upper bound on parse/sanitize/serialize rounds per call.
MAX_PASSES = 4


def _coerce_markup(markup: Markup) -> str:
    if markup is None:
        return ""
    if isinstance(markup, bytes):
        try:
            return markup.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MarkupParseError("invalid-encoding", f"Input is not valid UTF-8: {exc.reason}") from exc
    if not isinstance(markup, str):
        raise MarkupParseError("unsupported-input", f"Expected str or bytes, got {type(markup).__name__}")
    return markup


def _sanitize_pass(text: str, policy: SanitizationPolicy, report: ReportCallback | None) -> tuple[list[Node], str]:
    clean = sanitize_nodes(parse(text), policy, report=report)
    return clean, to_html(clean)


def _sanitize_to_fixpoint(
    markup: Markup, policy: SanitizationPolicy, report: ReportCallback | None
) -> tuple[list[Node], str]:
    # Unwrapping can leave markup that the parser restructures when it reads
    # the output again (e.g. an <a> that was nested inside <svg> content).
    # Re-run until the serialized form is stable so sanitize() is idempotent.
    text = _coerce_markup(markup)
    if not text:
        return [], ""
    nodes, html = _sanitize_pass(text, policy, report)
    for _ in range(MAX_PASSES - 1):
        if not html:
            break
        again, again_html = _sanitize_pass(html, policy, report)
        if again_html == html:
            break
        logger.debug("Sanitized output changed on re-parse; running another pass")
        nodes, html = again, again_html
    return nodes, html


def sanitize_fragment(
    markup: Markup,
    *,
    policy: SanitizationPolicy = DEFAULT_POLICY,
    report: ReportCallback | None = None,
) -> list[Node]:
    """Parse `markup` and return the sanitized top-level nodes."""
    nodes, _ = _sanitize_to_fixpoint(markup, policy, report)
    return nodes


def sanitize(
    markup: Markup,
    *,
    policy: SanitizationPolicy = DEFAULT_POLICY,
    report: ReportCallback | None = None,
) -> str:
    """Return `markup` with every construct outside `policy` removed.

    Dangerous tags, attributes, URLs and style declarations are dropped
    silently (pass `report` to observe them). Raises MarkupParseError only
    when no tree can be built from the input at all.
    """
    _, html = _sanitize_to_fixpoint(markup, policy, report)
    return html


def strip_tags(markup: Markup, *, policy: SanitizationPolicy = DEFAULT_POLICY) -> str:
    """Return the plain text of `markup` after sanitization.

    Content of removed tags (scripts, styles, embedded documents) does not
    appear in the result.
    """
    return text_content(sanitize_fragment(markup, policy=policy))


def is_url_safe(
    url: str | None,
    *,
    policy: SanitizationPolicy = DEFAULT_POLICY,
    attr: str = "href",
    tag: str | None = None,
) -> bool:
    """Return True if `url` may be kept in attribute `attr` (of `tag`, when given)."""
    if not url or not isinstance(url, str):
        return False
    return is_url_allowed(url, policy, attr.lower(), tag=tag.lower() if tag else None)


def sanitize_url(
    url: str | None,
    *,
    policy: SanitizationPolicy = DEFAULT_POLICY,
    attr: str = "href",
    tag: str | None = None,
) -> str | None:
    """Return `url` unchanged if it is safe for `attr`, otherwise None."""
    if is_url_safe(url, policy=policy, attr=attr, tag=tag):
        return url
    return None
