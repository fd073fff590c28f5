"""HTML constants used by the parser adapter and the serializer.

Usage:
    from markupguard.constants import VOID_ELEMENTS

References:
    - https://html.spec.whatwg.org/multipage/syntax.html#void-elements
    - https://html.spec.whatwg.org/multipage/parsing.html#serialising-html-fragments
"""

# Elements that never have an end tag or children
VOID_ELEMENTS = frozenset(
    [
        "area",
        "base",
        "basefont",
        "bgsound",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    ]
)

# The parser drops a single newline right after these start tags, so the
# serializer has to emit one extra to round-trip text that starts with "\n".
LEADING_NEWLINE_ELEMENTS = frozenset(["listing", "pre", "textarea"])

# Namespace URIs that html5lib's etree builder puts in "{uri}local" names
NAMESPACE_PREFIXES = {
    "http://www.w3.org/1999/xhtml": "",
    "http://www.w3.org/2000/svg": "",
    "http://www.w3.org/1998/Math/MathML": "",
    "http://www.w3.org/1999/xlink": "xlink",
    "http://www.w3.org/XML/1998/namespace": "xml",
    "http://www.w3.org/2000/xmlns/": "xmlns",
}
