from __future__ import annotations

import json
import unittest
from pathlib import Path
from typing import Any

from markupguard import DEFAULT_POLICY, IMAGE_DATA_MEDIA_TYPES, SanitizationPolicy, TagRule, sanitize
from markupguard.policy import DEFAULT_CSS_PROPERTIES, DEFAULT_URI_ATTRIBUTES

_CASES_DIR = Path(__file__).with_name("sanitize-cases")


def _build_rule(spec: Any) -> TagRule:
    if isinstance(spec, list):
        return TagRule("allow", spec)
    if isinstance(spec, str):
        return TagRule(spec)
    raise TypeError("tag rules must be an action name or a list of attributes")


def _build_policy(spec: Any) -> SanitizationPolicy:
    if spec == "DEFAULT":
        return DEFAULT_POLICY
    if spec == "DATA_IMAGES":
        return DEFAULT_POLICY.with_overrides(allowed_data_media_types=IMAGE_DATA_MEDIA_TYPES)

    if not isinstance(spec, dict):
        raise TypeError("policy must be 'DEFAULT', 'DATA_IMAGES' or an object")

    css_names = spec.get("css_properties", [])
    return SanitizationPolicy(
        tags={name: _build_rule(rule) for name, rule in spec["tags"].items()},
        global_attributes=spec.get("global_attributes", []),
        uri_attributes=DEFAULT_URI_ATTRIBUTES,
        allowed_schemes=spec.get("allowed_schemes", ["http", "https"]),
        css_properties={name: DEFAULT_CSS_PROPERTIES[name] for name in css_names},
        force_link_rel=tuple(spec.get("force_link_rel", [])),
    )


class TestSanitizeIntegration(unittest.TestCase):
    def test_sanitize_cases(self) -> None:
        cases_path = _CASES_DIR / "cases.json"
        cases = json.loads(cases_path.read_text(encoding="utf-8"))
        if not isinstance(cases, list):
            raise TypeError("cases.json must contain a list")

        for case in cases:
            name = case["name"]
            policy = _build_policy(case["policy"])
            input_html = case["input_html"]
            expected_html = case["expected_html"]

            actual = sanitize(input_html, policy=policy)
            if actual != expected_html:
                self.fail(
                    "\n".join(
                        [
                            f"Case: {name}",
                            f"Input: {input_html}",
                            f"Expected: {expected_html}",
                            f"Actual:   {actual}",
                        ]
                    )
                )
            again = sanitize(actual, policy=policy)
            if again != actual:
                self.fail(f"Case: {name}\nOutput is not stable under re-sanitizing: {again}")


if __name__ == "__main__":
    unittest.main()
