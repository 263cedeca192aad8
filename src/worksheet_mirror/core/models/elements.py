"""
Module: elements

Purpose:
    Provides the LayoutElement dataclass - the atomic positioned, typed unit
    of worksheet content - together with its closed type enumeration and
    optional typography hints.

Key Functions:
    - selected_content(element, mirrored): The single mirroring mechanism
    - LayoutElement.to_dict() / LayoutElement.from_dict(): camelCase wire format
    - ElementStyle.to_dict() / ElementStyle.from_dict()

Dependencies:
    - dataclasses (std)
    - enum (std)
    - .geometry.BoundingBox

Used By:
    - core.models.worksheet.Worksheet
    - layout.normalizer / layout.compositor
    - ingest (record conversion)
    - synthesis (layout synthesis)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .geometry import BoundingBox


class ElementType(str, Enum):
    """Element type wire values (closed enumeration)."""
    HEADER = "header"
    QUESTION_NUMBER = "question_number"
    PROBLEM = "problem"
    WHITE_SPACE = "white_space"
    FOOTER = "footer"
    INSTRUCTION = "instruction"
    WORD_PROBLEM = "word_problem"
    DIAGRAM = "diagram"
    SECTION_HEADER = "section_header"
    RESPONSE_AREA = "response_area"

    def __str__(self) -> str:
        return self.value


class FontWeight(str, Enum):
    """Font weight hint."""
    NORMAL = "normal"
    BOLD = "bold"
    LIGHTER = "lighter"

    def __str__(self) -> str:
        return self.value


class Alignment(str, Enum):
    """Horizontal text alignment hint."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    def __str__(self) -> str:
        return self.value


class FontFamily(str, Enum):
    """Font family hint."""
    SERIF = "serif"
    SANS_SERIF = "sans-serif"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ElementStyle:
    """
    Typography hints for an element (immutable).

    Values are hints from the producer; the normalizer turns them into
    safe rendering parameters (rounding, minimum size, type overrides).

    Attributes:
        font_size: Font size in reference pixels (positive, finite)
        font_weight: normal, bold or lighter
        alignment: left, center or right
        font_family: serif, sans-serif or None (type default)
    """

    font_size: float
    font_weight: FontWeight = FontWeight.NORMAL
    alignment: Alignment = Alignment.LEFT
    font_family: Optional[FontFamily] = None

    def __post_init__(self) -> None:
        """Validate style on construction."""
        if not (math.isfinite(self.font_size) and self.font_size > 0):
            raise ValueError(f"font_size must be a positive finite number: {self.font_size}")

    def to_dict(self) -> dict:
        """Serialize to the camelCase wire format."""
        d: dict[str, Any] = {
            "fontSize": self.font_size,
            "fontWeight": self.font_weight.value,
            "alignment": self.alignment.value,
        }
        if self.font_family is not None:
            d["fontFamily"] = self.font_family.value
        return d

    @classmethod
    def from_dict(cls, data: dict) -> ElementStyle:
        """
        Deserialize from the wire format (strict).

        Raises:
            ValueError: If a value is outside its enumeration or size invalid
            KeyError: If fontSize is missing
        """
        family = data.get("fontFamily")
        return cls(
            font_size=float(data["fontSize"]),
            font_weight=FontWeight(data.get("fontWeight", "normal")),
            alignment=Alignment(data.get("alignment", "left")),
            font_family=FontFamily(family) if family else None,
        )


@dataclass(frozen=True, slots=True)
class LayoutElement:
    """
    One visually positioned unit on a worksheet page (immutable).

    Elements are produced once, by analysis parsing or by synthesis, and
    never mutated afterwards. Mirrored and answers-shown views are
    rendering-time projections over the same value.

    Attributes:
        id: Identifier, unique within a page
        type: Layout and rendering strategy
        content: Source-of-truth text/markup
        bounding_box: Normalized position on the page
        mirrored_content: Alternate text shown in mirrored view
        solution: Answer text shown when answers are visible
        skill: Display-only tag
        style: Typography hints (None means type defaults)

    Example:
        >>> el = LayoutElement("p1", ElementType.PROBLEM, "2+2",
        ...                    BoundingBox(100, 100, 150, 500),
        ...                    mirrored_content="3+5")
        >>> selected_content(el, mirrored=True)
        '3+5'
    """

    id: str
    type: ElementType
    content: str
    bounding_box: BoundingBox
    mirrored_content: Optional[str] = None
    solution: Optional[str] = None
    skill: Optional[str] = None
    style: Optional[ElementStyle] = field(default=None)

    @property
    def is_rendered(self) -> bool:
        """White space elements are layout placeholders only."""
        return self.type is not ElementType.WHITE_SPACE

    @property
    def has_solution(self) -> bool:
        """True when a non-empty solution is attached."""
        return bool(self.solution and self.solution.strip())

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        """Serialize to the camelCase wire format."""
        d: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "content": self.content,
            "boundingBox": self.bounding_box.to_list(),
        }
        if self.mirrored_content is not None:
            d["mirroredContent"] = self.mirrored_content
        if self.solution is not None:
            d["solution"] = self.solution
        if self.skill is not None:
            d["skill"] = self.skill
        if self.style is not None:
            d["style"] = self.style.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: dict) -> LayoutElement:
        """
        Deserialize from the wire format (strict).

        Use the ingest package for untrusted producer output; this method
        expects data that already satisfies every invariant.

        Raises:
            ValueError: If type, box or style are invalid
            KeyError: If a required field is missing
        """
        style = data.get("style")
        return cls(
            id=str(data["id"]),
            type=ElementType(data["type"]),
            content=str(data.get("content", "")),
            bounding_box=BoundingBox.from_list(data["boundingBox"]),
            mirrored_content=data.get("mirroredContent"),
            solution=data.get("solution"),
            skill=data.get("skill"),
            style=ElementStyle.from_dict(style) if style else None,
        )


def selected_content(element: LayoutElement, mirrored: bool) -> str:
    """
    Select the text to render for an element.

    Returns mirrored_content when the mirrored view is requested and the
    element carries a non-empty alternate; otherwise the original content.

    Args:
        element: Element to read from
        mirrored: Whether the mirrored view is active

    Returns:
        Text/markup to render
    """
    if mirrored and element.mirrored_content:
        return element.mirrored_content
    return element.content
