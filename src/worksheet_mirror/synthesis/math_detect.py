"""
Module: synthesis.math_detect

Purpose:
    Heuristics for generated problem text: find undelimited math in prose
    and wrap it in inline delimiters, tell prose from a bare expression,
    and strip instruction words and currency markers from expressions.

    These are heuristics over model output, not a parser. Text that
    already carries math delimiters is trusted and left alone.

Key Functions:
    - auto_format_math(): Wrap math-looking spans in \\( ... \\)
    - looks_like_prose(): Does the text read as a sentence?
    - strip_command_word(): Drop a leading "Solve:", "Simplify", ...
    - strip_dollars(): Remove $ and \\$ from a pure expression

Dependencies:
    - re (std)

Used By:
    - synthesis.synthesizer: Record classification
"""

from __future__ import annotations

import re

_DELIMITED_PATTERN = re.compile(r"\\\(.*?\\\)|\\\[.*?\\\]")

# A LaTeX command with optional argument groups, sub/superscripts and
# spacing; or a digit run joined by operators; or two or more operator chars
_MATH_SPAN_PATTERN = re.compile(
    r"(\\[a-zA-Z]+(?:\[[^\[\]]*\])?(?:\{[^{}]*\}|\s*[\^_](?:\{[^{}]*\}|[a-zA-Z0-9]+)|\s+)*"
    r"|\d+[\d+=\-/*()^._<>!]*\d+"
    r"|[\d+=\-/*()^._<>!]{2,})"
)
_MATH_SIGNAL_PATTERN = re.compile(r"[\\]|[\^_{}=/*+]")

_PROSE_PATTERN = re.compile(r"(?<![\\a-zA-Z])[a-zA-Z]{4,}\s")
_COMMAND_WORD_PATTERN = re.compile(
    r"^(?:Solve|Calculate|Evaluate|Simplify|Find|Determine)\b\s*:?\s*",
    re.IGNORECASE,
)
_DOLLAR_PATTERN = re.compile(r"\\?\$")


def has_math_delimiters(text: str) -> bool:
    """True when text contains a \\( ... \\) or \\[ ... \\] span."""
    return bool(_DELIMITED_PATTERN.search(text))


def _wrap_span(match: re.Match) -> str:
    span = match.group(0)
    if not _MATH_SIGNAL_PATTERN.search(span):
        return span
    core = span.strip()
    leading = span[: len(span) - len(span.lstrip())]
    trailing = span[len(span.rstrip()):]
    return f"{leading}\\({core}\\){trailing}"


def auto_format_math(text: str) -> str:
    """
    Wrap undelimited math spans in inline delimiters.

    Text that already has delimiters is returned unchanged. A candidate
    span is wrapped only when it contains a backslash or one of ^ _ { } =
    / * +, so plain numbers stay plain. Whitespace around a span is kept
    as written.

    Example:
        >>> auto_format_math("What is 3+4 in total?")
        'What is \\\\(3+4\\\\) in total?'
        >>> auto_format_math("It costs 35 dollars")
        'It costs 35 dollars'
    """
    if not text or has_math_delimiters(text):
        return text
    return _MATH_SPAN_PATTERN.sub(_wrap_span, text)


def looks_like_prose(text: str) -> bool:
    """
    True when text reads as a sentence rather than an expression.

    Prose has a run of four or more letters followed by whitespace that is
    not the tail of a \\command, and no \\text{...} (which marks a pure
    expression carrying a word).
    """
    if "\\text" in text:
        return False
    return bool(_PROSE_PATTERN.search(text))


def strip_command_word(text: str) -> str:
    """
    Remove a leading instruction word and optional colon.

    Example:
        >>> strip_command_word("Simplify: 3x + 2x")
        '3x + 2x'
    """
    return _COMMAND_WORD_PATTERN.sub("", text, count=1)


def strip_dollars(text: str) -> str:
    """Remove $ and \\$ from a pure expression."""
    return _DOLLAR_PATTERN.sub("", text)
