from __future__ import annotations

import unittest

from markupguard.css import (
    is_background_image,
    is_box_lengths,
    is_color,
    is_font_family,
    is_font_size,
    is_text_decoration,
    is_value_denied,
    parse_declarations,
    sanitize_style,
)
from markupguard.policy import DEFAULT_POLICY, SanitizationPolicy


class TestParseDeclarations(unittest.TestCase):
    def test_splits_on_semicolon_then_first_colon(self) -> None:
        assert parse_declarations("color: red; font-size: 14px;") == [("color", "red"), ("font-size", "14px")]
        assert parse_declarations("background-image: url(http://x/a.png)") == [
            ("background-image", "url(http://x/a.png)")
        ]

    def test_malformed_declarations_are_skipped(self) -> None:
        assert parse_declarations("no-colon; : red; color:; ;;  COLOR :  Blue ") == [("color", "Blue")]


class TestValidators(unittest.TestCase):
    def test_colors(self) -> None:
        for ok in ["red", "#fff", "#FFFFFF", "#ffff", "#11223344", "rgb(255, 0, 0)", "rgba(0,0,0,0.5)", "hsl(120deg, 50%, 50%)"]:
            assert is_color(ok), ok
        for bad in ["#ff", "red blue", "rgb(1)", "url(x)", "rgb(a,b,c)"]:
            assert not is_color(bad), bad

    def test_font_size(self) -> None:
        assert is_font_size("14px")
        assert is_font_size("1.5em")
        assert is_font_size("120%")
        assert is_font_size("large")
        assert not is_font_size("14")
        assert not is_font_size("huge")

    def test_box_lengths(self) -> None:
        assert is_box_lengths("0")
        assert is_box_lengths("1px 2px 3px 4px")
        assert is_box_lengths("auto 10px")
        assert not is_box_lengths("1px 2px 3px 4px 5px")
        assert not is_box_lengths("")

    def test_text_decoration_and_font_family(self) -> None:
        assert is_text_decoration("underline line-through")
        assert not is_text_decoration("blink")
        assert is_font_family('"Times New Roman", serif')
        assert not is_font_family("a(b)")

    def test_background_image(self) -> None:
        assert is_background_image("none")
        assert is_background_image("url(/img/a.png)")
        assert is_background_image("url('https://example.com/a.png')")
        assert not is_background_image("linear-gradient(red, blue)")


class TestDenylist(unittest.TestCase):
    def test_expression_is_denied_in_any_spelling(self) -> None:
        assert is_value_denied("expression(alert(1))", DEFAULT_POLICY)
        assert is_value_denied("EXPRESSION (alert(1))", DEFAULT_POLICY)

    def test_escapes_comments_and_markup_are_denied(self) -> None:
        assert is_value_denied("red\\3b", DEFAULT_POLICY)
        assert is_value_denied("exp/**/ression(1)", DEFAULT_POLICY)
        assert is_value_denied("red</style>", DEFAULT_POLICY)

    def test_urls_with_disallowed_schemes_are_denied(self) -> None:
        assert is_value_denied("url(javascript:alert(1))", DEFAULT_POLICY)
        assert is_value_denied("url('vbscript:x')", DEFAULT_POLICY)
        assert is_value_denied("url(data:image/png;base64,AAAA)", DEFAULT_POLICY)
        assert is_value_denied("javascript:alert(1)", DEFAULT_POLICY)
        assert is_value_denied("url(x", DEFAULT_POLICY)

    def test_safe_values_pass(self) -> None:
        assert not is_value_denied("red", DEFAULT_POLICY)
        assert not is_value_denied("url(https://example.com:8080/a.png)", DEFAULT_POLICY)
        assert not is_value_denied("url(/a.png)", DEFAULT_POLICY)


class TestSanitizeStyle(unittest.TestCase):
    def test_keeps_allowed_declarations_in_order(self) -> None:
        assert sanitize_style("color: red; font-size: 14px;", DEFAULT_POLICY) == "color: red; font-size: 14px"

    def test_property_names_are_lowercased(self) -> None:
        assert sanitize_style("COLOR: Red;Text-Align:center", DEFAULT_POLICY) == "color: Red; text-align: center"

    def test_unknown_properties_are_dropped(self) -> None:
        assert sanitize_style("position: fixed; color: red; behavior: url(x.htc)", DEFAULT_POLICY) == "color: red"

    def test_invalid_values_are_dropped(self) -> None:
        assert sanitize_style("color: url(x); font-size: huge; text-align: left", DEFAULT_POLICY) == "text-align: left"

    def test_dangerous_urls_remove_the_declaration(self) -> None:
        assert sanitize_style("background-image: url(javascript:alert(1))", DEFAULT_POLICY) == ""
        assert sanitize_style("width: expression(alert(1)); color: blue", DEFAULT_POLICY) == "color: blue"

    def test_important_is_kept(self) -> None:
        assert sanitize_style("color: red !important", DEFAULT_POLICY) == "color: red !important"

    def test_empty_input(self) -> None:
        assert sanitize_style("", DEFAULT_POLICY) == ""
        assert sanitize_style(None, DEFAULT_POLICY) == ""
        assert sanitize_style(";;;", DEFAULT_POLICY) == ""

    def test_custom_css_policy(self) -> None:
        policy = SanitizationPolicy(tags={}, css_properties={"color": is_color})
        assert sanitize_style("color: red; font-size: 14px", policy) == "color: red"


if __name__ == "__main__":
    unittest.main()
