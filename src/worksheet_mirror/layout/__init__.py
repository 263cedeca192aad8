"""
Module: layout

Purpose:
    Page geometry and composition: the page configuration, element
    normalization, the compositor that paints full pages and the answer
    key renderer.

Key Classes:
    - PageConfig: Immutable page configuration
    - PlacedElement: Element with resolved geometry and typography
    - RenderOptions: Mirrored / show-answers view flags
    - AnswerKeyEntry: One numbered problem in the answer key

Key Functions:
    - normalize_element(), normalize_elements()
    - render_page(): Paint a page
    - render_answer_key(): Paint the problem-by-problem answer key

Used By:
    - controller: Worksheet rendering
"""

from .config import PageConfig
from .normalizer import PlacedElement, normalize_element, normalize_elements
from .compositor import RenderOptions, render_page, shows_answer
from .answer_key import AnswerKeyEntry, answer_key_entries, has_answer_key, render_answer_key

__all__ = [
    "PageConfig",
    "PlacedElement",
    "normalize_element",
    "normalize_elements",
    "RenderOptions",
    "render_page",
    "shows_answer",
    "AnswerKeyEntry",
    "answer_key_entries",
    "has_answer_key",
    "render_answer_key",
]
