"""
Module: ingest.text

Purpose:
    Text clean-up shared by both ingestion grammars.

Key Functions:
    - strip_code_fences(): Remove markdown code fences around a payload
    - is_placeholder(): Detect "N/A"-style empty values
"""

from __future__ import annotations

import re
from typing import Optional

_LEADING_FENCE = re.compile(r"\A\s*```[a-zA-Z]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*\Z")
_PLACEHOLDERS = {"n/a", "na", "none", "null", "-"}


def strip_code_fences(text: str) -> str:
    """
    Remove a markdown code fence (```json, ```text, ```) wrapping the
    payload and trim. Backticks inside the payload are kept.

    Example:
        >>> strip_code_fences('```json\\n{"title": "A"}\\n```')
        '{"title": "A"}'
    """
    text = _LEADING_FENCE.sub("", text, count=1)
    return _TRAILING_FENCE.sub("", text, count=1).strip()


def is_placeholder(value: Optional[str]) -> bool:
    """True for None, blank strings and N/A-style placeholders."""
    if value is None:
        return True
    stripped = value.strip()
    return not stripped or stripped.lower() in _PLACEHOLDERS


def optional_text(value: object) -> Optional[str]:
    """Coerce a producer value to text, mapping placeholders to None."""
    if value is None:
        return None
    text = str(value).strip()
    return None if is_placeholder(text) else text
