"""Code identity helpers.

Sources reformat codes between scrapes (stray whitespace, different casing),
so every set-membership and equality check on codes goes through
``normalize_code_key``. The display form is kept separately because the store
keys rows by the literal it was given.
"""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def sanitize_code_display(code: object) -> str | None:
    if not isinstance(code, str):
        return None
    trimmed = code.strip()
    return trimmed or None


def normalize_code_key(code: object) -> str | None:
    sanitized = sanitize_code_display(code)
    if sanitized is None:
        return None
    return _WHITESPACE.sub("", sanitized).upper()


def dedupe_codes(codes: list[str] | tuple[str, ...]) -> list[str]:
    """Drop blanks and normalized duplicates, keeping the first display form."""

    seen: set[str] = set()
    result: list[str] = []
    for raw in codes:
        display = sanitize_code_display(raw)
        key = normalize_code_key(display)
        if display is None or key is None or key in seen:
            continue
        seen.add(key)
        result.append(display)
    return result
