"""
Module: layout.normalizer

Purpose:
    Turn layout elements into safe rendering parameters: integer pixel
    rectangles on the reference page and resolved typography. Producer
    hints are coarse, so every value is rounded and clamped here once
    instead of inside each painter.

Key Functions:
    - normalize_element(): LayoutElement -> PlacedElement
    - normalize_elements(): Filter placeholders, keep source order

Key Classes:
    - PlacedElement: Element plus resolved geometry and typography

Dependencies:
    - core.models: LayoutElement, PixelRect
    - layout.config: PageConfig

Used By:
    - layout.compositor: Page painting
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

from worksheet_mirror.core.models import (
    Alignment,
    ElementType,
    FontFamily,
    FontWeight,
    LayoutElement,
    PixelRect,
    round_half_up,
)

from .config import PageConfig

logger = logging.getLogger(__name__)

WORD_PROBLEM_LINE_HEIGHT = 1.6
DEFAULT_LINE_HEIGHT = 1.25


@dataclass(frozen=True)
class PlacedElement:
    """
    An element with resolved geometry and typography (immutable).

    Attributes:
        element: Source element
        rect: Rectangle in reference pixels
        font_size: Integer font size in reference pixels
        font_weight: Resolved weight
        alignment: Resolved alignment
        font_family: Resolved family
        line_height: Line height multiplier
    """

    element: LayoutElement
    rect: PixelRect
    font_size: int
    font_weight: FontWeight
    alignment: Alignment
    font_family: FontFamily
    line_height: float

    @property
    def id(self) -> str:
        return self.element.id

    @property
    def type(self) -> ElementType:
        return self.element.type

    @property
    def bold(self) -> bool:
        """Lighter weight renders with the regular face."""
        return self.font_weight is FontWeight.BOLD


def normalize_element(element: LayoutElement, config: PageConfig = PageConfig()) -> PlacedElement:
    """
    Resolve an element's geometry and typography.

    Args:
        element: Element to place
        config: Page configuration (reference size and font limits)

    Returns:
        PlacedElement

    Example:
        >>> placed = normalize_element(el)  # el.style.font_size == 9.4
        >>> placed.font_size
        11
    """
    rect = element.bounding_box.to_pixels(config.page_width, config.page_height)
    style = element.style

    size = style.font_size if style is not None else config.default_font_size
    # Clamp before rounding so absurd producer sizes never reach the font loader
    font_size = max(round_half_up(min(size, config.max_font_size)), config.min_font_size)

    weight = style.font_weight if style is not None else FontWeight.NORMAL
    alignment = style.alignment if style is not None else Alignment.LEFT
    family = (
        FontFamily.SERIF
        if style is not None and style.font_family is FontFamily.SERIF
        else FontFamily.SANS_SERIF
    )

    if element.type is ElementType.QUESTION_NUMBER:
        weight = FontWeight.BOLD
        family = FontFamily.SANS_SERIF

    line_height = (
        WORD_PROBLEM_LINE_HEIGHT
        if element.type is ElementType.WORD_PROBLEM
        else DEFAULT_LINE_HEIGHT
    )

    return PlacedElement(
        element=element,
        rect=rect,
        font_size=font_size,
        font_weight=weight,
        alignment=alignment,
        font_family=family,
        line_height=line_height,
    )


def normalize_elements(
    elements: Iterable[LayoutElement],
    config: PageConfig = PageConfig(),
) -> List[PlacedElement]:
    """
    Place every rendered element, preserving source order.

    White space elements have no footprint and are dropped here.
    """
    placed = [normalize_element(el, config) for el in elements if el.is_rendered]
    logger.debug(f"Normalized {len(placed)} element(s)")
    return placed
