"""Core models shared across the toolkit."""

from .models import (
    Alignment,
    BoundingBox,
    ElementStyle,
    ElementType,
    FontFamily,
    FontWeight,
    LayoutElement,
    PixelRect,
    ProblemRecord,
    Worksheet,
    WorksheetKind,
    selected_content,
)

__all__ = [
    "Alignment",
    "BoundingBox",
    "ElementStyle",
    "ElementType",
    "FontFamily",
    "FontWeight",
    "LayoutElement",
    "PixelRect",
    "ProblemRecord",
    "Worksheet",
    "WorksheetKind",
    "selected_content",
]
