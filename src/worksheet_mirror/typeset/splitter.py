"""
Module: typeset.splitter

Purpose:
    Split a mixed string of prose, delimited math and underscore fill-in
    blanks into ordered fragments. The splitter only tokenizes; painting is
    done by typeset.text_flow.

Key Functions:
    - split_mixed_content(): Text -> ordered Fragment list
    - rule_width(): Fill-in rule width for an underscore run
    - plain_reading_text(): Fragments -> reading-order text

Dependencies:
    - re (std)

Used By:
    - typeset.text_flow: Line layout
    - layout.compositor: Text elements and answer blocks
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

# Inline math, block math, then runs of two or more underscores.
# Non-greedy, and math spans do not cross line breaks.
_SPLIT_PATTERN = re.compile(r"(\\\(.*?\\\)|\\\[.*?\\\]|__+)")
_ESCAPED_DOLLAR = re.compile(r"\\(\$)")

DEFAULT_RULE_PX_PER_CHAR = 8
DEFAULT_RULE_MIN_WIDTH = 40


class FragmentKind(str, Enum):
    """Fragment classification."""
    PLAIN_TEXT = "plain_text"
    INLINE_MATH = "inline_math"
    BLOCK_MATH = "block_math"
    RULE = "rule"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Fragment:
    """
    One tokenized piece of mixed content.

    Attributes:
        kind: Fragment classification
        text: Plain text (unescaped), math body without delimiters, or the
            underscore run for rules
    """

    kind: FragmentKind
    text: str

    @property
    def run_length(self) -> int:
        """Underscore count for rule fragments, 0 otherwise."""
        return len(self.text) if self.kind is FragmentKind.RULE else 0

    @property
    def is_math(self) -> bool:
        return self.kind in (FragmentKind.INLINE_MATH, FragmentKind.BLOCK_MATH)


def rule_width(
    run_length: int,
    *,
    px_per_char: float = DEFAULT_RULE_PX_PER_CHAR,
    min_width: int = DEFAULT_RULE_MIN_WIDTH,
) -> int:
    """
    Width of a fill-in rule in reference pixels.

    Example:
        >>> rule_width(6), rule_width(20)
        (48, 160)
        >>> rule_width(2)
        40
    """
    return max(int(math.floor(run_length * px_per_char)), min_width)


def split_mixed_content(text: str) -> List[Fragment]:
    """
    Tokenize mixed content into ordered fragments.

    Recognizes \\( ... \\) as inline math, \\[ ... \\] as block math and
    runs of two or more underscores as fill-in rules. Everything else is
    plain text with \\$ unescaped to $. Empty plain spans are dropped.

    Args:
        text: Mixed content string

    Returns:
        Fragments in reading order

    Example:
        >>> [f.kind.value for f in split_mixed_content(r"Solve \\(x+1=3\\) for x")]
        ['plain_text', 'inline_math', 'plain_text']
    """
    if not text:
        return []

    fragments: List[Fragment] = []
    for part in _SPLIT_PATTERN.split(text):
        if not part:
            continue
        if part.startswith("\\(") and part.endswith("\\)") and len(part) >= 4:
            fragments.append(Fragment(FragmentKind.INLINE_MATH, part[2:-2]))
        elif part.startswith("\\[") and part.endswith("\\]") and len(part) >= 4:
            fragments.append(Fragment(FragmentKind.BLOCK_MATH, part[2:-2]))
        elif part.startswith("__") and part.strip("_") == "":
            fragments.append(Fragment(FragmentKind.RULE, part))
        else:
            fragments.append(Fragment(FragmentKind.PLAIN_TEXT, _ESCAPED_DOLLAR.sub(r"\1", part)))
    return fragments


def plain_reading_text(fragments: Iterable[Fragment]) -> str:
    """
    Concatenate fragments into reading-order text.

    Math bodies appear without delimiters; rules appear as their
    underscore runs.
    """
    return "".join(f.text for f in fragments)
