"""
Module: config

Purpose:
    Configuration dataclass for the worksheet build pipeline. Immutable
    configuration with validation on construction.

Key Classes:
    - BuildConfig: Main configuration for building worksheets
    - BuildMode: Mirror an analysed page or synthesize from a topic
    - OutputFormat: Export formats

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - controller: Main build controller
    - cli: Command line entry point
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from worksheet_mirror.layout.config import DEFAULT_SCALE, PageConfig
from worksheet_mirror.synthesis.config import SynthesisConfig


class BuildMode(str, Enum):
    """Where the worksheet's elements come from."""
    MIRROR = "mirror"  # Image-analysis output with geometry
    TOPIC = "topic"    # Generated problems, geometry synthesized

    def __str__(self) -> str:
        return self.value


class OutputFormat(str, Enum):
    """Export format."""
    PDF = "pdf"
    PNG = "png"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BuildConfig:
    """
    Configuration for building a worksheet (immutable).

    Attributes:
        input_path: Producer output (JSON or delimited text)
        mode: MIRROR or TOPIC
        output_dir: Base output directory; a timestamped subfolder is
            created inside it
        source_image: Original page (raster or PDF) for diagram crops
        title: Title override
        problem_count: Problems to place (topic mode)
        word_problem_ratio: Share of word problems in [0, 1] (topic mode)
        include_original: Render the original view
        include_mirrored: Render the mirrored view (mirror mode)
        include_answer_key: Render a page with answers shown
        formats: Export formats
        scale: Integer render scale

    Example:
        >>> config = BuildConfig(
        ...     input_path=Path("analysis.txt"),
        ...     source_image=Path("scan.png"),
        ...     include_answer_key=True,
        ... )
    """

    # Required
    input_path: Path

    mode: BuildMode = BuildMode.MIRROR

    # Inputs
    source_image: Optional[Path] = None
    title: Optional[str] = None

    # Topic synthesis
    problem_count: int = 10
    word_problem_ratio: float = 0.5

    # Pages
    include_original: bool = True
    include_mirrored: bool = True
    include_answer_key: bool = False

    # Output
    output_dir: Optional[Path] = None
    formats: Tuple[OutputFormat, ...] = (OutputFormat.PDF,)
    scale: int = DEFAULT_SCALE

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.problem_count < 0:
            raise ValueError(f"problem_count must be non-negative: {self.problem_count}")
        if not 0 <= self.word_problem_ratio <= 1:
            raise ValueError(f"word_problem_ratio must be in [0, 1]: {self.word_problem_ratio}")
        if not isinstance(self.scale, int) or self.scale < 1:
            raise ValueError(f"scale must be a positive integer: {self.scale}")
        if not self.formats:
            raise ValueError("At least one output format is required")
        if not (self.include_original or self.include_mirrored or self.include_answer_key):
            raise ValueError("No pages selected for output")

    @property
    def page_config(self) -> PageConfig:
        """Page configuration at this build's scale."""
        return PageConfig(scale=self.scale)

    @property
    def synthesis_config(self) -> SynthesisConfig:
        return SynthesisConfig()
