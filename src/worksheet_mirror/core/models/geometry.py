"""
Module: geometry

Purpose:
    Provides the BoundingBox dataclass - a page position expressed in the
    resolution-independent 0-1000 coordinate space - and PixelRect, the
    integer pixel rectangle it maps to on a concrete page surface.

Key Functions:
    - BoundingBox.clamped(values): Build a box from untrusted producer values
    - BoundingBox.to_pixels(width, height): Scale to integer page pixels
    - BoundingBox.to_list() / BoundingBox.from_list(): Wire format
    - PixelRect.scaled(factor): Multiply into a render-resolution rectangle
    - round_half_up(value): Rounding used for every geometry conversion

Dependencies:
    - dataclasses (std)
    - math (std)

Used By:
    - core.models.elements.LayoutElement
    - layout.normalizer
    - layout.compositor
    - ingest (clamping of analysis boxes)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

# Normalized coordinate extent on both axes
NORMALIZED_EXTENT = 1000


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves rounding up.

    Python's round() uses banker's rounding (2.5 -> 2), which would make
    geometry depend on the parity of the value. Every pixel conversion goes
    through this function instead.

    Example:
        >>> round_half_up(561.5)
        562
        >>> round_half_up(2.5)
        3
    """
    return int(math.floor(value + 0.5))


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Normalized page position [yMin, xMin, yMax, xMax] (immutable).

    Coordinates live in the closed range [0, 1000] on both axes and are
    independent of the pixel resolution of the page they are drawn on.

    Attributes:
        y_min: Top edge
        x_min: Left edge
        y_max: Bottom edge
        x_max: Right edge

    Invariants:
        - 0 <= value <= 1000 for every coordinate
        - y_min <= y_max
        - x_min <= x_max

    Example:
        >>> box = BoundingBox(500, 500, 1000, 1000)
        >>> box.to_pixels(794, 1123)
        PixelRect(x=397, y=562, width=397, height=562)
    """

    y_min: float
    x_min: float
    y_max: float
    x_max: float

    def __post_init__(self) -> None:
        """Validate box on construction."""
        for name in ("y_min", "x_min", "y_max", "x_max"):
            value = getattr(self, name)
            if not 0 <= value <= NORMALIZED_EXTENT:
                raise ValueError(f"{name} must be within [0, {NORMALIZED_EXTENT}]: {value}")
        if self.y_min > self.y_max:
            raise ValueError(f"y_min must be <= y_max: {self.y_min} > {self.y_max}")
        if self.x_min > self.x_max:
            raise ValueError(f"x_min must be <= x_max: {self.x_min} > {self.x_max}")

    # ─────────────────────────────────────────────────────────────────────────
    # Construction from untrusted input
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def clamped(cls, values: Sequence[float]) -> Tuple[BoundingBox, bool]:
        """
        Build a box from producer values, clamping instead of failing.

        Each coordinate is clamped into [0, 1000]. An inverted axis is
        collapsed onto its minimum edge (max := min); it is never swapped.

        Args:
            values: Four numbers in [yMin, xMin, yMax, xMax] order

        Returns:
            Tuple of (box, adjusted) where adjusted is True when any value
            had to be changed

        Raises:
            ValueError: If values does not hold exactly four numbers
        """
        if len(values) != 4:
            raise ValueError(f"bounding box needs 4 values, got {len(values)}")

        raw = [float(v) for v in values]
        if any(math.isnan(v) for v in raw):
            raise ValueError(f"bounding box contains NaN: {list(values)}")

        y_min, x_min, y_max, x_max = (
            min(max(v, 0.0), float(NORMALIZED_EXTENT)) for v in raw
        )
        if y_max < y_min:
            y_max = y_min
        if x_max < x_min:
            x_max = x_min

        box = cls(y_min, x_min, y_max, x_max)
        return box, box.to_list() != raw

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def height(self) -> float:
        """Normalized height."""
        return self.y_max - self.y_min

    @property
    def width(self) -> float:
        """Normalized width."""
        return self.x_max - self.x_min

    # ─────────────────────────────────────────────────────────────────────────
    # Conversion
    # ─────────────────────────────────────────────────────────────────────────

    def to_pixels(self, page_width: int, page_height: int) -> PixelRect:
        """
        Scale to integer pixels on a page of the given size.

        Uses fixed linear factors (page_width/1000, page_height/1000) and
        rounds every value half-up, so the same box always lands on the
        same pixels. Width and height are scaled from the normalized extent
        rather than derived from the rounded edges.

        Args:
            page_width: Page width in pixels
            page_height: Page height in pixels

        Returns:
            PixelRect on that page
        """
        # Multiply before dividing so exact halves (561.5) survive float math
        return PixelRect(
            x=round_half_up(self.x_min * page_width / NORMALIZED_EXTENT),
            y=round_half_up(self.y_min * page_height / NORMALIZED_EXTENT),
            width=round_half_up(self.width * page_width / NORMALIZED_EXTENT),
            height=round_half_up(self.height * page_height / NORMALIZED_EXTENT),
        )

    def to_list(self) -> list[float]:
        """Serialize to the [yMin, xMin, yMax, xMax] wire format."""
        return [self.y_min, self.x_min, self.y_max, self.x_max]

    @classmethod
    def from_list(cls, values: Sequence[float]) -> BoundingBox:
        """
        Deserialize from the wire format (strict).

        Raises:
            ValueError: If values are not four in-range, ordered numbers
        """
        if len(values) != 4:
            raise ValueError(f"bounding box needs 4 values, got {len(values)}")
        return cls(*(float(v) for v in values))

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return f"BoundingBox({self.y_min:g}, {self.x_min:g}, {self.y_max:g}, {self.x_max:g})"


@dataclass(frozen=True, slots=True)
class PixelRect:
    """
    Integer pixel rectangle on a page (immutable).

    Attributes:
        x: Left edge in pixels
        y: Top edge in pixels
        width: Width in pixels
        height: Height in pixels
    """

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Bottom edge (exclusive)."""
        return self.y + self.height

    def scaled(self, factor: int) -> PixelRect:
        """Multiply every value by an integer render scale."""
        return PixelRect(self.x * factor, self.y * factor, self.width * factor, self.height * factor)

    def as_box(self) -> tuple[int, int, int, int]:
        """Get as (left, top, right, bottom) tuple for PIL."""
        return (self.x, self.y, self.right, self.bottom)
