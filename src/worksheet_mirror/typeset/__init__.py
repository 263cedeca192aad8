"""
Typesetting Package

Math rendering, mixed-content splitting and line layout for page text.
"""

from .fonts import load_font
from .math import MathMode, MathRun, render_math, to_mathtext, wrap_markup
from .splitter import (
    Fragment,
    FragmentKind,
    plain_reading_text,
    rule_width,
    split_mixed_content,
)
from .text_flow import TextLayout, TextStyle, layout_fragments, layout_text

__all__ = [
    "load_font",
    "MathMode",
    "MathRun",
    "render_math",
    "to_mathtext",
    "wrap_markup",
    "Fragment",
    "FragmentKind",
    "plain_reading_text",
    "rule_width",
    "split_mixed_content",
    "TextLayout",
    "TextStyle",
    "layout_fragments",
    "layout_text",
]
