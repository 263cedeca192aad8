"""
Module: worksheet

Purpose:
    Provides the Worksheet dataclass - the immutable value the host
    application passes in per render: a title, an ordered element list,
    an optional source raster and the answers flag.

Key Functions:
    - Worksheet.rendered_elements: Elements that occupy page space
    - Worksheet.to_dict() / Worksheet.from_dict(): JSON serialization

Dependencies:
    - dataclasses (std)
    - pathlib (std)
    - .elements.LayoutElement

Used By:
    - controller: Build pipeline output
    - output.renderer (indirectly through controller)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from .elements import LayoutElement


class WorksheetKind(str, Enum):
    """How the worksheet was produced."""
    MIRROR = "Mirror"  # Transformed from a source page
    TOPIC = "Topic"    # Synthesized from a topic, no source page

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Worksheet:
    """
    Worksheet value consumed by the renderer (immutable).

    Renaming, archiving or toggling answers is the host application's
    job: it builds a new Worksheet rather than mutating this one.

    Attributes:
        title: Display title
        kind: MIRROR (from a source page) or TOPIC (synthesized)
        elements: Ordered layout elements
        source_image: Source page raster, used only by diagram elements
        show_answers: Whether solutions are rendered

    Example:
        >>> ws = Worksheet("Fractions", WorksheetKind.TOPIC, elements=tuple(els))
        >>> ws.element_count
        14
    """

    title: str
    kind: WorksheetKind
    elements: Tuple[LayoutElement, ...] = ()
    source_image: Optional[Path] = None
    show_answers: bool = False

    def __post_init__(self) -> None:
        """Validate element ids are unique within the page."""
        seen: set[str] = set()
        for element in self.elements:
            if element.id in seen:
                raise ValueError(f"duplicate element id: {element.id!r}")
            seen.add(element.id)

    @property
    def element_count(self) -> int:
        """Number of elements, white space included."""
        return len(self.elements)

    @property
    def rendered_elements(self) -> Tuple[LayoutElement, ...]:
        """Elements with a visual footprint, in source order."""
        return tuple(el for el in self.elements if el.is_rendered)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dictionary."""
        d = {
            "title": self.title,
            "type": self.kind.value,
            "elements": [el.to_dict() for el in self.elements],
            "showAnswers": self.show_answers,
        }
        if self.source_image is not None:
            d["sourceImage"] = str(self.source_image)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Worksheet:
        """Deserialize from a dictionary produced by to_dict()."""
        source = data.get("sourceImage")
        return cls(
            title=str(data["title"]),
            kind=WorksheetKind(data.get("type", WorksheetKind.MIRROR.value)),
            elements=tuple(LayoutElement.from_dict(el) for el in data.get("elements", [])),
            source_image=Path(source) if source else None,
            show_answers=bool(data.get("showAnswers", False)),
        )
