"""
Module: synthesis.config

Purpose:
    Grid configuration for synthesized topic worksheets. All values are in
    the normalized 0-1000 page space.

Key Classes:
    - SynthesisConfig: Immutable grid configuration

Dependencies:
    - dataclasses (std)

Used By:
    - synthesis.synthesizer: Layout synthesis
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SynthesisConfig:
    """
    Configuration for the two-column problem grid (immutable).

    Attributes:
        page_extent: Normalized page size on both axes
        margin: Page margin
        header_height: Space reserved for the name/date/title header
        header_gap: Gap between header and first row
        columns: Number of problem columns
        column_gap: Horizontal gap between columns
        min_row_height: Rows never get shorter than this
        content_fraction: Share of a row used by the problem text; the
            rest is working space
        number_width: Width of the question number box
        number_height: Height of the question number box
        number_gap: Horizontal offset of the content box from the number
        blank_length: Underscores in the Name/Date fill-in blanks
        name_field_right: Right edge of the Name field
        date_field_left: Left edge of the Date field

    Example:
        >>> config = SynthesisConfig()
        >>> config.column_width, config.content_start
        (420.0, 170)
    """

    page_extent: int = 1000
    margin: int = 50
    header_height: int = 150
    header_gap: int = 20
    columns: int = 2
    column_gap: int = 60
    min_row_height: int = 150
    content_fraction: float = 0.4

    # Question number box
    number_width: int = 40
    number_height: int = 30
    number_gap: int = 50

    # Header
    blank_length: int = 27
    name_field_right: int = 450
    date_field_left: int = 650

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.columns < 1:
            raise ValueError(f"columns must be at least 1: {self.columns}")
        if not 0 < self.content_fraction <= 1:
            raise ValueError(f"content_fraction must be in (0, 1]: {self.content_fraction}")
        if self.min_row_height <= 0:
            raise ValueError(f"min_row_height must be positive: {self.min_row_height}")
        if self.column_width <= self.number_gap:
            raise ValueError("Margins and gaps leave no room for problem content")
        if self.available_height <= 0:
            raise ValueError("Header and margins exceed page height")

    @property
    def content_start(self) -> int:
        """Top of the first problem row."""
        return self.header_height + self.header_gap

    @property
    def column_width(self) -> float:
        """Width of one problem column."""
        usable = self.page_extent - 2 * self.margin - (self.columns - 1) * self.column_gap
        return usable / self.columns

    @property
    def available_height(self) -> int:
        """Height available to problem rows."""
        return self.page_extent - self.content_start - self.margin
