"""Inline style sanitization.

A style attribute is treated as a flat list of `property: value`
declarations. Each declaration must name an allow-listed property, pass a
universal denylist and pass the property's own value validator, otherwise it
is dropped. There is no tag awareness here: the same function serves every
`style` attribute.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TYPE_CHECKING

from .urls import is_url_allowed

if TYPE_CHECKING:
    from .policy import SanitizationPolicy

logger = logging.getLogger(__name__)

CssValidator = Callable[[str], bool]


# -----------------
# Value validators
# -----------------

_NUMBER = r"[+-]?(?:\d+\.?\d*|\.\d+)"
_LENGTH = rf"(?:0|{_NUMBER}(?:px|em|rem|ex|ch|pt|pc|cm|mm|in|q|vw|vh|vmin|vmax|%))"
_LENGTH_RE = re.compile(rf"{_LENGTH}\Z", re.IGNORECASE)
_COLOR_RE = re.compile(
    rf"""(?:
        \#(?:[0-9a-f]{{3,4}}|[0-9a-f]{{6}}|[0-9a-f]{{8}})
        |[a-z]+
        |(?:rgba?|hsla?)\(\s*{_NUMBER}(?:%|deg)?(?:\s*[,/]?\s*{_NUMBER}(?:%|deg)?){{2,3}}\s*\)
    )\Z""",
    re.IGNORECASE | re.VERBOSE,
)
_FONT_FAMILY_RE = re.compile(r"""[a-z0-9 _\-"',]+\Z""", re.IGNORECASE)
_URL_FUNCTION_RE = re.compile(r"""url\(\s*(["']?)([^"'()]*)\1\s*\)""", re.IGNORECASE)

_TEXT_ALIGN = frozenset(["left", "right", "center", "justify", "start", "end"])
_FONT_SIZE_KEYWORDS = frozenset(
    ["xx-small", "x-small", "small", "medium", "large", "x-large", "xx-large", "xxx-large", "smaller", "larger"]
)
_FONT_WEIGHT = frozenset(["normal", "bold", "bolder", "lighter", "100", "200", "300", "400", "500", "600", "700", "800", "900"])
_FONT_STYLE = frozenset(["normal", "italic", "oblique"])
_TEXT_DECORATION = frozenset(["none", "underline", "overline", "line-through"])
_GLOBAL_KEYWORDS = frozenset(["inherit", "initial", "unset"])


def _keyword(value: str, allowed: frozenset[str]) -> bool:
    v = value.strip().lower()
    return v in allowed or v in _GLOBAL_KEYWORDS


def is_color(value: str) -> bool:
    return bool(_COLOR_RE.match(value.strip()))


def is_length(value: str) -> bool:
    return bool(_LENGTH_RE.match(value.strip()))


def is_text_align(value: str) -> bool:
    return _keyword(value, _TEXT_ALIGN)


def is_font_size(value: str) -> bool:
    return is_length(value) or _keyword(value, _FONT_SIZE_KEYWORDS)


def is_font_weight(value: str) -> bool:
    return _keyword(value, _FONT_WEIGHT)


def is_font_style(value: str) -> bool:
    return _keyword(value, _FONT_STYLE)


def is_text_decoration(value: str) -> bool:
    tokens = value.lower().split()
    return bool(tokens) and all(t in _TEXT_DECORATION for t in tokens)


def is_font_family(value: str) -> bool:
    return bool(_FONT_FAMILY_RE.match(value.strip()))


def is_line_height(value: str) -> bool:
    v = value.strip()
    return is_length(v) or bool(re.match(rf"{_NUMBER}\Z", v)) or _keyword(v, frozenset(["normal"]))


def is_box_lengths(value: str) -> bool:
    """One to four lengths (or `auto`), as accepted by margin/padding shorthands."""
    tokens = value.split()
    return 1 <= len(tokens) <= 4 and all(is_length(t) or t.lower() == "auto" for t in tokens)


def is_size(value: str) -> bool:
    return is_length(value) or _keyword(value, frozenset(["auto"]))


def is_background_image(value: str) -> bool:
    v = value.strip()
    return v.lower() == "none" or bool(_URL_FUNCTION_RE.fullmatch(v))


# -----------------
# Universal denylist
# -----------------

_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*\Z", re.IGNORECASE)
_EMBEDDED_SCHEME_RE = re.compile(r"(?<![a-z0-9+.\-/@])([a-z][a-z0-9+.\-]*)\s*:")
_DENIED_SUBSTRINGS = ("expression(", "-moz-binding", "\\", "/*", "<", ">")


def is_value_denied(value: str, policy: SanitizationPolicy) -> bool:
    """Return True when `value` must be rejected whatever its property.

    Rejects the legacy `expression()` function, escape sequences and comments
    that could hide one, markup characters, and any URL (inside `url()` or
    bare) whose scheme `policy` does not allow.
    """
    lowered = value.lower()
    compact = re.sub(r"\s+", "", lowered)
    for needle in _DENIED_SUBSTRINGS:
        if needle in compact:
            return True

    for match in _URL_FUNCTION_RE.finditer(value):
        if not is_url_allowed(match.group(2), policy):
            return True
    remainder = _URL_FUNCTION_RE.sub("", lowered)
    if "url(" in re.sub(r"\s+", "", remainder):
        # Unbalanced or nested url() that the pattern above could not read.
        return True
    for match in _EMBEDDED_SCHEME_RE.finditer(remainder):
        scheme = match.group(1)
        if scheme == "data" or scheme not in policy.allowed_schemes:
            return True
    return False


# -----------------
# Declarations
# -----------------


def parse_declarations(value: str) -> list[tuple[str, str]]:
    """Split a style attribute into (property, value) pairs.

    Declarations without a colon, or with an empty property or value, are
    skipped. Property names are lower-cased.
    """
    out: list[tuple[str, str]] = []
    for raw in value.split(";"):
        prop, sep, val = raw.partition(":")
        if not sep:
            continue
        prop = prop.strip().lower()
        val = val.strip()
        if not prop or not val:
            continue
        out.append((prop, val))
    return out


def sanitize_style(value: str | None, policy: SanitizationPolicy) -> str:
    """Return the allow-listed subset of a style attribute ("" if nothing survives)."""
    if not value:
        return ""

    kept: list[str] = []
    for prop, val in parse_declarations(value):
        validator = policy.css_properties.get(prop)
        if validator is None:
            logger.debug("Dropped CSS declaration %r (property not allowed)", prop)
            continue
        if is_value_denied(val, policy):
            logger.debug("Dropped CSS declaration %r (unsafe value)", prop)
            continue
        core = _IMPORTANT_RE.sub("", val)
        if not core or not validator(core):
            logger.debug("Dropped CSS declaration %r (invalid value)", prop)
            continue
        kept.append(f"{prop}: {val}")
    return "; ".join(kept)
