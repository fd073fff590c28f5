"""Sanitization policy tables.

A policy is pure data: which tags are kept, unwrapped or removed, which
attributes each kept tag may carry, which attributes hold URLs and which
schemes those URLs may use, and which CSS properties survive in inline
styles. Policies are frozen and validated once at construction, so a bad
configuration fails at import/startup rather than in the middle of a
sanitize call.

All tag and attribute names are canonicalized to ASCII lower case.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

from .css import (
    CssValidator,
    is_background_image,
    is_box_lengths,
    is_color,
    is_font_family,
    is_font_size,
    is_font_style,
    is_font_weight,
    is_line_height,
    is_size,
    is_text_align,
    is_text_decoration,
)
from .errors import PolicyError

_SCHEME_NAME_RE = re.compile(r"[a-z][a-z0-9+.\-]*\Z")


class _StrEnum(str, Enum):
    """Backport of enum.StrEnum (Python 3.11+)."""


class TagAction(_StrEnum):
    ALLOW = "allow"
    UNWRAP = "unwrap"
    REMOVE = "remove"


def _lower_set(values: Collection[str]) -> frozenset[str]:
    return frozenset(str(v).strip().lower() for v in values if str(v).strip())


@dataclass(frozen=True, slots=True)
class TagRule:
    """What to do with one tag, and which attributes it may keep when allowed."""

    action: TagAction = TagAction.ALLOW
    attributes: Collection[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        try:
            action = TagAction(self.action)
        except ValueError:
            raise PolicyError(f"Unknown tag action: {self.action!r}") from None
        object.__setattr__(self, "action", action)
        object.__setattr__(self, "attributes", _lower_set(self.attributes))
        if action is not TagAction.ALLOW and self.attributes:
            raise PolicyError(f"Tag rule with action {action.value!r} cannot list attributes")


def allow(*attributes: str) -> TagRule:
    return TagRule(TagAction.ALLOW, attributes)


REMOVE = TagRule(TagAction.REMOVE)
UNWRAP = TagRule(TagAction.UNWRAP)


@dataclass(frozen=True, slots=True)
class UrlRule:
    """Scheme rule for a single URL-valued attribute (e.g. img[src]).

    Replaces the policy-wide `allowed_schemes` for that attribute. `data:`
    URLs keep their own opt-in (`allowed_data_media_types`).
    """

    allowed_schemes: Collection[str] = field(default_factory=frozenset)

    # Allow relative URLs (/path, ./path, ?query, #fragment, //host).
    allow_relative: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_schemes", _lower_set(self.allowed_schemes))
        for scheme in self.allowed_schemes:
            if not _SCHEME_NAME_RE.match(scheme):
                raise PolicyError(f"Malformed URI scheme in UrlRule: {scheme!r}")
        if "data" in self.allowed_schemes:
            raise PolicyError("'data' cannot be an allowed scheme; use allowed_data_media_types instead")


@dataclass(frozen=True, slots=True)
class SanitizationPolicy:
    """An allow-list driven policy for sanitizing a parsed tree.

    - Tags missing from `tags` are unwrapped: the tag goes, its children stay.
    - Attributes not in the tag's rule (or `global_attributes`) are dropped.
    - Attributes named in `uri_attributes` must use a scheme from
      `allowed_schemes` or be relative.
      `url_rules` narrows that per (tag, attribute).
    - `data:` URLs are a separate opt-in: they are accepted only on
      `data_uri_attributes` and only for `allowed_data_media_types`.
    - `style` values are filtered through `css_properties`.
    """

    tags: Mapping[str, TagRule]
    global_attributes: Collection[str] = field(default_factory=frozenset)
    uri_attributes: Collection[str] = field(default_factory=frozenset)
    allowed_schemes: Collection[str] = field(default_factory=frozenset)
    # Per-attribute overrides of `allowed_schemes`, keyed by (tag, attribute).
    url_rules: Mapping[tuple[str, str], UrlRule] = field(default_factory=dict)
    css_properties: Mapping[str, CssValidator] = field(default_factory=dict)

    allowed_data_media_types: Collection[str] = field(default_factory=frozenset)
    data_uri_attributes: Collection[str] = field(default_factory=lambda: frozenset({"src"}))

    # If set, only `class` tokens matching one of these patterns survive.
    class_patterns: tuple[re.Pattern[str], ...] | None = None

    # If set, `target` is kept only when its value is listed here.
    link_targets: Collection[str] | None = field(default_factory=lambda: frozenset({"_blank"}))

    # Tokens merged into <a rel> whenever the link keeps its href.
    force_link_rel: tuple[str, ...] = ("noopener", "noreferrer")

    def __post_init__(self) -> None:
        tags: dict[str, TagRule] = {}
        for name, rule in self.tags.items():
            key = str(name).strip().lower()
            if not key:
                raise PolicyError("Empty tag name in policy")
            if not isinstance(rule, TagRule):
                raise PolicyError(f"Rule for tag {key!r} must be a TagRule, got {type(rule).__name__}")
            tags[key] = rule
        object.__setattr__(self, "tags", MappingProxyType(tags))

        rules: dict[tuple[str, str], UrlRule] = {}
        for key, url_rule in self.url_rules.items():
            tag, attr = (str(part).strip().lower() for part in key)
            if not isinstance(url_rule, UrlRule):
                raise PolicyError(f"URL rule for {tag}[{attr}] must be a UrlRule, got {type(url_rule).__name__}")
            rules[(tag, attr)] = url_rule
        object.__setattr__(self, "url_rules", MappingProxyType(rules))

        object.__setattr__(self, "global_attributes", _lower_set(self.global_attributes))
        object.__setattr__(self, "uri_attributes", _lower_set(self.uri_attributes))
        object.__setattr__(self, "allowed_schemes", _lower_set(self.allowed_schemes))
        object.__setattr__(self, "allowed_data_media_types", _lower_set(self.allowed_data_media_types))
        object.__setattr__(self, "data_uri_attributes", _lower_set(self.data_uri_attributes))
        if self.link_targets is not None:
            object.__setattr__(self, "link_targets", frozenset(str(t) for t in self.link_targets))
        object.__setattr__(self, "force_link_rel", tuple(dict.fromkeys(t.strip().lower() for t in self.force_link_rel if t.strip())))

        if self.class_patterns is not None:
            object.__setattr__(
                self,
                "class_patterns",
                tuple(p if isinstance(p, re.Pattern) else re.compile(p) for p in self.class_patterns),
            )

        css: dict[str, CssValidator] = {}
        for prop, validator in self.css_properties.items():
            key = str(prop).strip().lower()
            if not key:
                raise PolicyError("Empty CSS property name in policy")
            if not callable(validator):
                raise PolicyError(f"Validator for CSS property {key!r} is not callable")
            css[key] = validator
        object.__setattr__(self, "css_properties", MappingProxyType(css))

        self._validate()

    def _validate(self) -> None:
        for scheme in self.allowed_schemes:
            if not _SCHEME_NAME_RE.match(scheme):
                raise PolicyError(f"Malformed URI scheme in allowed_schemes: {scheme!r}")
        if "data" in self.allowed_schemes:
            raise PolicyError("'data' cannot be an allowed scheme; use allowed_data_media_types instead")
        if "style" in self.uri_attributes:
            raise PolicyError("'style' cannot be a URI attribute")
        overlap = self.uri_attributes & set(self.css_properties)
        if overlap:
            raise PolicyError(f"Names used both as URI attributes and CSS properties: {sorted(overlap)}")
        for tag, attr in self.url_rules:
            if attr not in self.uri_attributes:
                raise PolicyError(f"URL rule for {tag}[{attr}] names an attribute that is not a URI attribute")
        stray = self.data_uri_attributes - self.uri_attributes
        if self.allowed_data_media_types and stray:
            raise PolicyError(f"data_uri_attributes must be URI attributes: {sorted(stray)}")

    def tag_action(self, tag: str) -> TagAction:
        rule = self.tags.get(tag.lower())
        if rule is None:
            return TagAction.UNWRAP
        return rule.action

    def url_rule(self, tag: str, attr: str) -> UrlRule | None:
        return self.url_rules.get((tag.lower(), attr.lower()))

    def allowed_attributes(self, tag: str) -> frozenset[str]:
        rule = self.tags.get(tag.lower())
        if rule is None or rule.action is not TagAction.ALLOW:
            return frozenset()
        return frozenset(rule.attributes) | frozenset(self.global_attributes)

    @property
    def remove_tags(self) -> frozenset[str]:
        return frozenset(name for name, rule in self.tags.items() if rule.action is TagAction.REMOVE)

    def with_overrides(self, **changes: Any) -> SanitizationPolicy:
        """Return a copy with `changes` applied (validated like a fresh policy)."""
        return replace(self, **changes)


# Raster and SVG images, for callers that opt into inline image data.
IMAGE_DATA_MEDIA_TYPES: frozenset[str] = frozenset(
    ["image/png", "image/jpeg", "image/jpg", "image/gif", "image/webp", "image/svg+xml"]
)

DEFAULT_URI_ATTRIBUTES: frozenset[str] = frozenset(
    ["href", "src", "cite", "action", "formaction", "poster", "background", "longdesc", "usemap", "xlink:href"]
)

DEFAULT_CSS_PROPERTIES: Mapping[str, CssValidator] = MappingProxyType(
    {
        "color": is_color,
        "background-color": is_color,
        "background-image": is_background_image,
        "text-align": is_text_align,
        "text-decoration": is_text_decoration,
        "font-size": is_font_size,
        "font-weight": is_font_weight,
        "font-style": is_font_style,
        "font-family": is_font_family,
        "line-height": is_line_height,
        "margin": is_box_lengths,
        "margin-top": is_box_lengths,
        "margin-right": is_box_lengths,
        "margin-bottom": is_box_lengths,
        "margin-left": is_box_lengths,
        "padding": is_box_lengths,
        "padding-top": is_box_lengths,
        "padding-right": is_box_lengths,
        "padding-bottom": is_box_lengths,
        "padding-left": is_box_lengths,
        "width": is_size,
        "height": is_size,
    }
)

DEFAULT_CLASS_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Syntax highlighting: language-python, hljs-keyword, token-string
    re.compile(r"language-\w+\Z"),
    re.compile(r"hljs(?:-\w+)?\Z"),
    re.compile(r"token(?:-\w+)?\Z"),
)


DEFAULT_POLICY: SanitizationPolicy = SanitizationPolicy(
    tags={
        # Block elements
        "p": allow(),
        "div": allow(),
        "br": allow(),
        "hr": allow(),
        "h1": allow(),
        "h2": allow(),
        "h3": allow(),
        "h4": allow(),
        "h5": allow(),
        "h6": allow(),
        "ul": allow(),
        "ol": allow(),
        "li": allow(),
        "blockquote": allow("cite"),
        "pre": allow("data-language"),
        "code": allow("data-language", "class"),
        # Inline elements
        "strong": allow(),
        "b": allow(),
        "em": allow(),
        "i": allow(),
        "u": allow(),
        "s": allow(),
        "del": allow(),
        "ins": allow(),
        "mark": allow(),
        "sub": allow(),
        "sup": allow(),
        "small": allow(),
        "span": allow(),
        "a": allow("href", "title", "target", "rel"),
        # Media
        "img": allow("src", "alt", "width", "height", "title"),
        # Tables (for paste compatibility)
        "table": allow(),
        "thead": allow(),
        "tbody": allow(),
        "tfoot": allow(),
        "tr": allow(),
        "th": allow("colspan", "rowspan", "scope"),
        "td": allow("colspan", "rowspan"),
        # Script, embedded documents and plugins: dropped with their content
        "script": REMOVE,
        "style": REMOVE,
        "iframe": REMOVE,
        "frame": REMOVE,
        "frameset": REMOVE,
        "object": REMOVE,
        "embed": REMOVE,
        "applet": REMOVE,
        "noscript": REMOVE,
        "noembed": REMOVE,
        "noframes": REMOVE,
        "template": REMOVE,
    },
    global_attributes=["data-mention", "data-mention-id", "data-tag", "data-tag-id", "style"],
    uri_attributes=DEFAULT_URI_ATTRIBUTES,
    allowed_schemes=["http", "https", "mailto"],
    # img[src] loads without user action: https or relative only.
    url_rules={("img", "src"): UrlRule(allowed_schemes=["https"])},
    css_properties=DEFAULT_CSS_PROPERTIES,
    class_patterns=DEFAULT_CLASS_PATTERNS,
)
