"""
Core Models Package

Immutable, validated data models shared by ingestion, synthesis and
rendering.

All models in this package are frozen dataclasses. A mirrored or
answers-shown view is computed at render time from the same values;
nothing in the pipeline mutates an element after it is produced.
"""

from .geometry import BoundingBox, PixelRect, round_half_up, NORMALIZED_EXTENT
from .elements import (
    Alignment,
    ElementStyle,
    ElementType,
    FontFamily,
    FontWeight,
    LayoutElement,
    selected_content,
)
from .problems import ProblemRecord
from .worksheet import Worksheet, WorksheetKind

__all__ = [
    "BoundingBox",
    "PixelRect",
    "round_half_up",
    "NORMALIZED_EXTENT",
    "Alignment",
    "ElementStyle",
    "ElementType",
    "FontFamily",
    "FontWeight",
    "LayoutElement",
    "selected_content",
    "ProblemRecord",
    "Worksheet",
    "WorksheetKind",
]
