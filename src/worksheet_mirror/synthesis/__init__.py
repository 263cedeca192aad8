"""
Module: synthesis

Purpose:
    Programmatic layout for topic worksheets: classify generated problems,
    enforce the word-problem ratio and place everything on a two-column
    grid under a name/date/title header.

Key Functions:
    - synthesize_layout(): Problem records -> SynthesisResult
    - composition_counts(): Ratio -> (word problems, equations)
    - auto_format_math(): Wrap undelimited math in prose

Used By:
    - controller: Topic worksheet builds
"""

from .config import SynthesisConfig
from .math_detect import (
    auto_format_math,
    has_math_delimiters,
    looks_like_prose,
    strip_command_word,
    strip_dollars,
)
from .synthesizer import (
    SynthesisResult,
    classify_record,
    composition_counts,
    synthesize_layout,
)

__all__ = [
    "SynthesisConfig",
    "auto_format_math",
    "has_math_delimiters",
    "looks_like_prose",
    "strip_command_word",
    "strip_dollars",
    "SynthesisResult",
    "classify_record",
    "composition_counts",
    "synthesize_layout",
]
