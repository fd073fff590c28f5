from .engine import classify, sanitize_node, sanitize_nodes
from .errors import MarkupParseError, PolicyError
from .node import Element, Text, text_content
from .parser import parse
from .policy import (
    DEFAULT_POLICY,
    IMAGE_DATA_MEDIA_TYPES,
    SanitizationPolicy,
    TagAction,
    TagRule,
    UrlRule,
)
from .sanitize import is_url_safe, sanitize, sanitize_fragment, sanitize_url, strip_tags
from .serialize import to_html, to_test_format

__all__ = [
    "DEFAULT_POLICY",
    "IMAGE_DATA_MEDIA_TYPES",
    "Element",
    "MarkupParseError",
    "PolicyError",
    "SanitizationPolicy",
    "TagAction",
    "TagRule",
    "Text",
    "UrlRule",
    "classify",
    "is_url_safe",
    "parse",
    "sanitize",
    "sanitize_fragment",
    "sanitize_node",
    "sanitize_nodes",
    "sanitize_url",
    "strip_tags",
    "text_content",
    "to_html",
    "to_test_format",
]
