"""
Module: synthesis.synthesizer

Purpose:
    Build a complete topic worksheet layout from generated problem
    records: a name/date/title header and a two-column grid of numbered
    problems, with each record classified as a word problem or a pure
    equation and the requested mix enforced.

    Synthesis is pure and deterministic: the same inputs always produce
    the same elements, and no source image is involved.

Key Functions:
    - composition_counts(): Total + ratio -> (word problems, equations)
    - classify_record(): Normalize one record's type and text
    - synthesize_layout(): Records -> SynthesisResult

Key Classes:
    - SynthesisResult: Elements, warnings and achieved mix

Dependencies:
    - core.models
    - synthesis.math_detect: Text heuristics

Used By:
    - controller: Topic worksheet builds
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from worksheet_mirror.core.models import (
    Alignment,
    BoundingBox,
    ElementStyle,
    ElementType,
    FontFamily,
    FontWeight,
    LayoutElement,
    ProblemRecord,
    round_half_up,
)

from .config import SynthesisConfig
from .math_detect import (
    auto_format_math,
    looks_like_prose,
    strip_command_word,
    strip_dollars,
)

logger = logging.getLogger(__name__)

HEADER_FONT_SIZE = 12
TITLE_FONT_SIZE = 16
NUMBER_FONT_SIZE = 14
CONTENT_FONT_SIZE = 12


@dataclass(frozen=True)
class SynthesisResult:
    """
    Outcome of layout synthesis.

    Attributes:
        title: Worksheet title
        elements: Header, then (number, content) pairs in grid order
        warnings: Recovered faults (ratio shortfall, page overflow, ...)
        word_problem_count: Word problems placed
        equation_count: Equations placed
    """

    title: str
    elements: Tuple[LayoutElement, ...]
    warnings: Tuple[str, ...] = ()
    word_problem_count: int = 0
    equation_count: int = 0

    @property
    def problem_count(self) -> int:
        return self.word_problem_count + self.equation_count


@dataclass(frozen=True)
class _Classified:
    index: int
    type: ElementType
    content: str
    solution: Optional[str]
    skill: Optional[str] = None


@dataclass
class _Warnings:
    messages: List[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        self.messages.append(message)
        logger.warning(message)


def composition_counts(total: int, word_problem_ratio: float) -> Tuple[int, int]:
    """
    Split a problem count into (word problems, equations).

    Word problems are rounded half-up; equations take the complement so
    the two always sum to total.

    Args:
        total: Number of problems
        word_problem_ratio: Share of word problems in [0, 1]

    Returns:
        Tuple of (word_problems, equations)

    Raises:
        ValueError: If total is negative or the ratio is outside [0, 1]

    Example:
        >>> composition_counts(7, 0.5)
        (4, 3)
    """
    if total < 0:
        raise ValueError(f"total must be non-negative: {total}")
    if not 0 <= word_problem_ratio <= 1:
        raise ValueError(f"word_problem_ratio must be in [0, 1]: {word_problem_ratio}")
    words = round_half_up(total * word_problem_ratio)
    return words, total - words


def classify_record(record: ProblemRecord, index: int = 0) -> _Classified:
    """
    Decide a record's final type and normalize its text.

    A "problem" that reads as prose once its instruction word is removed
    becomes a word problem with its wording kept; otherwise it is a bare
    expression with the instruction word and dollar signs removed. Word
    problems and all solutions get undelimited math wrapped.
    """
    solution = auto_format_math(record.solution) if record.solution else None
    word_problem = _Classified(
        index, ElementType.WORD_PROBLEM, auto_format_math(record.content), solution, record.skill
    )

    if record.type is ElementType.WORD_PROBLEM:
        return word_problem

    stripped = strip_command_word(record.content.strip())
    if looks_like_prose(stripped):
        logger.debug(f"Record {index} reads as prose, reclassified as word problem")
        return word_problem

    return _Classified(
        index, ElementType.PROBLEM, strip_dollars(stripped).strip(), solution, record.skill
    )


def _select(
    classified: Sequence[_Classified],
    problem_count: int,
    word_quota: int,
    equation_quota: int,
    warnings: _Warnings,
) -> List[_Classified]:
    """Take records in source order by quota, then backfill shortfalls."""
    quotas = {ElementType.WORD_PROBLEM: word_quota, ElementType.PROBLEM: equation_quota}
    selected: List[_Classified] = []
    skipped: List[_Classified] = []

    for item in classified:
        if quotas[item.type] > 0:
            quotas[item.type] -= 1
            selected.append(item)
        else:
            skipped.append(item)

    missing = problem_count - len(selected)
    if missing > 0 and skipped:
        if quotas[ElementType.WORD_PROBLEM] > 0:
            warnings.add(
                f"Only {word_quota - quotas[ElementType.WORD_PROBLEM]} of {word_quota} "
                f"word problems available, backfilling with equations"
            )
        if quotas[ElementType.PROBLEM] > 0:
            warnings.add(
                f"Only {equation_quota - quotas[ElementType.PROBLEM]} of {equation_quota} "
                f"equations available, backfilling with word problems"
            )
        selected.extend(skipped[:missing])

    if len(selected) < problem_count:
        warnings.add(f"Requested {problem_count} problems but only {len(selected)} available")

    return sorted(selected, key=lambda item: item.index)


def _header_elements(title: str, config: SynthesisConfig) -> List[LayoutElement]:
    blank = "_" * config.blank_length
    margin = config.margin
    extent = config.page_extent

    def style(size: int, weight: FontWeight, alignment: Alignment) -> ElementStyle:
        return ElementStyle(size, weight, alignment, FontFamily.SANS_SERIF)

    return [
        LayoutElement(
            id="h1",
            type=ElementType.HEADER,
            content=f"Name: {blank}",
            bounding_box=BoundingBox(margin, margin, margin + 30, config.name_field_right),
            style=style(HEADER_FONT_SIZE, FontWeight.NORMAL, Alignment.LEFT),
        ),
        LayoutElement(
            id="h2",
            type=ElementType.HEADER,
            content=f"Date: {blank}",
            bounding_box=BoundingBox(margin, config.date_field_left, margin + 30, extent - margin),
            style=style(HEADER_FONT_SIZE, FontWeight.NORMAL, Alignment.RIGHT),
        ),
        LayoutElement(
            id="title",
            type=ElementType.SECTION_HEADER,
            content=title.upper(),
            bounding_box=BoundingBox(2 * margin, margin, 2 * margin + 40, extent - margin),
            style=style(TITLE_FONT_SIZE, FontWeight.BOLD, Alignment.CENTER),
        ),
    ]


def _grid_box(values: List[float], label: str, warnings: _Warnings) -> BoundingBox:
    box, adjusted = BoundingBox.clamped(values)
    if adjusted:
        warnings.add(f"{label} overflows the page, clamped to {box.to_list()}")
    return box


def synthesize_layout(
    title: str,
    records: Sequence[ProblemRecord],
    *,
    problem_count: int,
    word_problem_ratio: float,
    config: SynthesisConfig = SynthesisConfig(),
) -> SynthesisResult:
    """
    Synthesize a full worksheet layout.

    Args:
        title: Worksheet title (rendered uppercase)
        records: Generated problems, in source order
        problem_count: Problems to place
        word_problem_ratio: Target share of word problems in [0, 1]
        config: Grid configuration

    Returns:
        SynthesisResult with ids h1, h2, title, then q{i}/p{i} per problem

    Raises:
        ValueError: If problem_count is negative or the ratio is invalid

    Example:
        >>> result = synthesize_layout("Fractions", records, problem_count=7,
        ...                            word_problem_ratio=0.5)
        >>> result.word_problem_count, result.equation_count
        (4, 3)
    """
    word_quota, equation_quota = composition_counts(problem_count, word_problem_ratio)
    warnings = _Warnings()

    classified = [classify_record(record, i) for i, record in enumerate(records)]
    chosen = _select(classified, problem_count, word_quota, equation_quota, warnings)

    elements = _header_elements(title, config)

    columns = config.columns
    column_width = config.column_width
    rows = math.ceil(len(chosen) / columns) if chosen else 0
    row_height = max(config.available_height // rows, config.min_row_height) if rows else 0
    zone = row_height * config.content_fraction

    for idx, item in enumerate(chosen):
        col, row = idx % columns, idx // columns
        x = config.margin + col * (column_width + config.column_gap)
        y = config.content_start + row * row_height

        elements.append(LayoutElement(
            id=f"q{idx}",
            type=ElementType.QUESTION_NUMBER,
            content=f"{idx + 1}.",
            bounding_box=_grid_box(
                [y, x, y + config.number_height, x + config.number_width], f"q{idx}", warnings
            ),
            style=ElementStyle(NUMBER_FONT_SIZE, FontWeight.BOLD, Alignment.LEFT, FontFamily.SANS_SERIF),
        ))
        elements.append(LayoutElement(
            id=f"p{idx}",
            type=item.type,
            content=item.content,
            bounding_box=_grid_box(
                [y, x + config.number_gap, y + zone, x + column_width], f"p{idx}", warnings
            ),
            solution=item.solution,
            skill=item.skill,
            style=ElementStyle(CONTENT_FONT_SIZE, FontWeight.NORMAL, Alignment.LEFT, FontFamily.SANS_SERIF),
        ))

    words = sum(1 for item in chosen if item.type is ElementType.WORD_PROBLEM)
    logger.info(
        f"Synthesized '{title}': {len(chosen)} problem(s) in {rows} row(s), "
        f"{words} word / {len(chosen) - words} equation"
    )
    return SynthesisResult(
        title=title,
        elements=tuple(elements),
        warnings=tuple(warnings.messages),
        word_problem_count=words,
        equation_count=len(chosen) - words,
    )
