"""Exceptions raised by markupguard.

Dangerous markup is never an error: the sanitizer removes it silently. These
exceptions cover the two cases where the caller must be told that no safe
output could be produced.
"""

from __future__ import annotations


class MarkupParseError(Exception):
    """The input could not be turned into a tree at all."""

    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        self.message = message or code
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"MarkupParseError({self.code!r})"

    def __str__(self) -> str:
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code


class PolicyError(ValueError):
    """A SanitizationPolicy was configured inconsistently."""
