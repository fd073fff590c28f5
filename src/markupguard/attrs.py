"""Per-element attribute filtering."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from .css import sanitize_style
from .urls import is_url_allowed

if TYPE_CHECKING:
    from .policy import SanitizationPolicy

ReportCallback = Callable[..., None]

logger = logging.getLogger(__name__)

_EVENT_HANDLER_RE = re.compile(r"on\w")


def is_event_handler(name: str) -> bool:
    """Return True for `onclick`, `ONERROR`, `on_x` and any other name starting with "on" + a word character."""
    return bool(_EVENT_HANDLER_RE.match(name.lower()))


def report_unsafe(report: ReportCallback | None, msg: str, *, node: Any | None = None) -> None:
    logger.debug(msg)
    if report is not None:
        report(msg, node=node)


def _filter_classes(value: str, patterns: tuple[re.Pattern[str], ...]) -> str:
    return " ".join(cls for cls in value.split() if any(p.match(cls) for p in patterns))


def _merge_rel(existing: str | None, tokens: tuple[str, ...]) -> str:
    merged: list[str] = []
    for tok in (existing or "").split():
        tok = tok.lower()
        if tok not in merged:
            merged.append(tok)
    for tok in tokens:
        if tok not in merged:
            merged.append(tok)
    return " ".join(merged)


def sanitize_attributes(
    tag: str,
    attrs: Mapping[str, str | None],
    policy: SanitizationPolicy,
    *,
    report: ReportCallback | None = None,
    node: Any | None = None,
) -> dict[str, str]:
    """Return the attributes of an allowed `tag` that survive `policy`.

    Surviving attributes keep their original relative order and, apart from
    `style`/`class` filtering and `rel` hardening, their original values.
    """
    tag = tag.lower()
    allowed = policy.allowed_attributes(tag)
    out: dict[str, str] = {}

    for raw_key, raw_value in attrs.items():
        key = str(raw_key).strip().lower()
        if not key or key in out:
            continue
        value = "" if raw_value is None else str(raw_value)

        if is_event_handler(key):
            report_unsafe(report, f"Unsafe attribute '{key}' (event handler)", node=node)
            continue

        if key not in allowed:
            report_unsafe(report, f"Unsafe attribute '{key}' (not allowed)", node=node)
            continue

        if key in policy.uri_attributes:
            if not is_url_allowed(value, policy, key, tag=tag):
                report_unsafe(report, f"Unsafe URL in attribute '{key}'", node=node)
                continue

        elif key == "style":
            sanitized = sanitize_style(value, policy)
            if not sanitized:
                report_unsafe(report, "Unsafe inline style in attribute 'style'", node=node)
                continue
            value = sanitized

        elif key == "class" and policy.class_patterns is not None:
            value = _filter_classes(value, policy.class_patterns)
            if not value:
                report_unsafe(report, "Unsafe attribute 'class' (no allowed classes)", node=node)
                continue

        elif key == "target" and policy.link_targets is not None:
            if value not in policy.link_targets:
                report_unsafe(report, f"Unsafe attribute 'target' (value {value!r} not allowed)", node=node)
                continue

        out[key] = value

    if tag == "a" and "href" in out and policy.force_link_rel:
        out["rel"] = _merge_rel(out.get("rel"), policy.force_link_rel)

    return out
