"""URI scheme checks shared by URL-valued attributes and inline CSS.

The check is deliberately binary: a URL is either kept verbatim or the caller
drops the whole attribute/declaration. Nothing here rewrites a URL into a
"neutered" form.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .policy import SanitizationPolicy

_SCHEME_RE = re.compile(r"[a-z][a-z0-9+.\-]*\Z")

# Browsers strip C0 controls and spaces around a URL and delete tab/newline
# characters anywhere inside it ("java\tscript:" is a javascript: URL).
_EDGE_CHARS = "".join(chr(c) for c in range(0x21))
_EMBEDDED_CHARS_RE = re.compile(r"[\t\n\r]")


def normalize_url(value: str) -> str:
    """Return `value` the way a browser sees it before scheme parsing."""
    return _EMBEDDED_CHARS_RE.sub("", value.strip(_EDGE_CHARS))


def url_scheme(value: str) -> str | None:
    """Return the lower-cased scheme of `value`, or None for a relative reference.

    A colon only introduces a scheme when it comes before any '/', '?' or '#'.
    The returned text is not validated; callers reject anything that does
    not look like a scheme.
    """
    url = normalize_url(value)
    for i, ch in enumerate(url):
        if ch == ":":
            return url[:i].lower()
        if ch in "/?#":
            return None
    return None


def data_media_type(value: str) -> str:
    """Return the lower-cased media type of a data: URL ("" when absent)."""
    url = normalize_url(value)
    _, _, rest = url.partition(":")
    header = rest.split(",", 1)[0]
    return header.split(";", 1)[0].strip().lower()


def is_url_allowed(value: str, policy: SanitizationPolicy, attr: str | None = None, *, tag: str | None = None) -> bool:
    """Return True if `value` may be kept for attribute `attr` under `policy`.

    `attr` is None for URLs embedded in CSS, which never accept data: URLs.
    When `tag` is given and the policy has a UrlRule for `(tag, attr)`, that
    rule's schemes replace `policy.allowed_schemes`.
    """
    rule = policy.url_rule(tag, attr) if tag and attr else None
    scheme = url_scheme(value)
    if scheme is None:
        return rule is None or rule.allow_relative
    if not _SCHEME_RE.match(scheme):
        return False
    if scheme == "data":
        if attr is None or attr not in policy.data_uri_attributes:
            return False
        return data_media_type(value) in policy.allowed_data_media_types
    if rule is not None:
        return scheme in rule.allowed_schemes
    return scheme in policy.allowed_schemes
