"""
Module: layout.config

Purpose:
    Configuration for the page surface.
    Defines the fixed A4 reference size, render scale and typography floors.

Key Classes:
    - PageConfig: Immutable page configuration

Dependencies:
    - dataclasses (std)

Used By:
    - layout.normalizer: Pixel geometry and font sizes
    - layout.compositor: Page painting
    - output.renderer: PDF export
    - images.source: Source page resizing
"""

from __future__ import annotations

from dataclasses import dataclass


# A4 at 96 DPI, the reference surface every bounding box is measured against
REFERENCE_PAGE_WIDTH_PX = 794
REFERENCE_PAGE_HEIGHT_PX = 1123
REFERENCE_DPI = 96
DEFAULT_SCALE = 2


@dataclass(frozen=True)
class PageConfig:
    """
    Configuration for the page surface (immutable).

    Geometry is always computed at the reference size and multiplied by the
    integer scale, so layout never depends on the output resolution.

    Attributes:
        page_width: Reference page width in pixels
        page_height: Reference page height in pixels
        reference_dpi: DPI the reference size corresponds to
        scale: Integer render multiplier for export fidelity
        min_font_size: Smallest font size any element renders at
        max_font_size: Largest font size any element renders at
        default_font_size: Font size when an element has no style
        rule_px_per_char: Fill-in rule width per underscore
        rule_min_width: Smallest fill-in rule width

    Example:
        >>> config = PageConfig(scale=2)
        >>> config.pixel_size
        (1588, 2246)
    """

    page_width: int = REFERENCE_PAGE_WIDTH_PX
    page_height: int = REFERENCE_PAGE_HEIGHT_PX
    reference_dpi: int = REFERENCE_DPI
    scale: int = DEFAULT_SCALE

    # Typography
    min_font_size: int = 11
    max_font_size: int = 144
    default_font_size: int = 12

    # Fill-in rules
    rule_px_per_char: int = 8
    rule_min_width: int = 40

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0:
            raise ValueError(f"page_width must be positive: {self.page_width}")
        if self.page_height <= 0:
            raise ValueError(f"page_height must be positive: {self.page_height}")
        if self.reference_dpi <= 0:
            raise ValueError(f"reference_dpi must be positive: {self.reference_dpi}")
        if not isinstance(self.scale, int) or self.scale < 1:
            raise ValueError(f"scale must be a positive integer: {self.scale}")
        if self.min_font_size <= 0:
            raise ValueError(f"min_font_size must be positive: {self.min_font_size}")
        if self.max_font_size < self.min_font_size:
            raise ValueError(
                f"max_font_size must be at least min_font_size: "
                f"{self.max_font_size} < {self.min_font_size}"
            )
        if self.default_font_size <= 0:
            raise ValueError(f"default_font_size must be positive: {self.default_font_size}")

    @property
    def pixel_width(self) -> int:
        """Rendered page width."""
        return self.page_width * self.scale

    @property
    def pixel_height(self) -> int:
        """Rendered page height."""
        return self.page_height * self.scale

    @property
    def pixel_size(self) -> tuple[int, int]:
        """Rendered (width, height) for PIL."""
        return (self.pixel_width, self.pixel_height)

    @property
    def dpi(self) -> int:
        """Effective DPI of the rendered page."""
        return self.reference_dpi * self.scale
