"""
Module: layout.answer_key

Purpose:
    Render the answer key: every problem and word problem on the worksheet
    as a numbered card with its skill tag, its content and its solution.
    Mirror worksheets show the original and mirrored content side by side.
    Cards are rendered as separate images and stacked down the page,
    moving to a new page when the next card no longer fits.

Key Functions:
    - answer_key_entries(): Problem elements in source order, numbered
    - has_answer_key(): True when any problem element carries a solution
    - render_answer_key(): Elements -> answer key page images

Key Classes:
    - AnswerKeyEntry: One numbered problem

Dependencies:
    - PIL: Card and page surfaces
    - typeset: Splitter, math and line layout

Used By:
    - controller: Answer key pages for export
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from worksheet_mirror.core.models import (
    Alignment,
    ElementType,
    LayoutElement,
    selected_content,
)
from worksheet_mirror.typeset import (
    Fragment,
    FragmentKind,
    TextLayout,
    TextStyle,
    layout_fragments,
    split_mixed_content,
)

from .compositor import EMPTY_PROBLEM_TEXT, PAGE_BACKGROUND, RenderOptions
from .config import PageConfig

logger = logging.getLogger(__name__)

PROBLEM_TYPES = (ElementType.PROBLEM, ElementType.WORD_PROBLEM)
DEFAULT_SKILL = "Mathematics"

ANSWER_KEY_LABEL = "Answer Key"
ORIGINAL_LABEL = "Original"
MIRRORED_LABEL = "Mirrored"
PROBLEM_LABEL = "Problem"
SOLUTION_LABEL = "Official Solution"

# Palette
TITLE_COLOR = "#0f172a"
SUBTITLE_COLOR = "#0ea5e9"
CARD_BORDER_COLOR = "#e2e8f0"
CARD_ACCENT_COLOR = "#0ea5e9"
TAG_COLOR = "#0ea5e9"
NUMBER_COLOR = "#cbd5e1"
LABEL_COLOR = "#94a3b8"
MIRRORED_LABEL_COLOR = "#0ea5e9"
ORIGINAL_TEXT_COLOR = "#475569"
CONTENT_COLOR = "#0f172a"
PLACEHOLDER_COLOR = "#cbd5e1"
SOLUTION_LABEL_COLOR = "#10b981"
SOLUTION_FILL_COLOR = "#ecfdf5"
SOLUTION_TEXT_COLOR = "#064e3b"

# Geometry in reference pixels
PAGE_MARGIN = 48
TITLE_GAP = 16
CARD_GAP = 16
CARD_PADDING = 16
CARD_ACCENT_WIDTH = 4
SECTION_GAP = 8
LABEL_GAP = 4
COLUMN_GAP = 16
SOLUTION_PADDING = 8

# Font sizes in reference pixels
TITLE_SIZE = 18
SUBTITLE_SIZE = 10
TAG_SIZE = 8
NUMBER_SIZE = 24
LABEL_SIZE = 8
CONTENT_SIZE = 12
SOLUTION_SIZE = 11


@dataclass(frozen=True)
class AnswerKeyEntry:
    """
    One numbered problem in the answer key (immutable).

    Attributes:
        number: 1-based position among problem elements
        element: The problem or word problem element
    """

    number: int
    element: LayoutElement

    @property
    def skill(self) -> str:
        """Skill tag, or the generic subject when the producer gave none."""
        return self.element.skill or DEFAULT_SKILL

    @property
    def label(self) -> str:
        """Zero-padded number, e.g. '03'."""
        return f"{self.number:02d}"


def answer_key_entries(elements: Sequence[LayoutElement]) -> List[AnswerKeyEntry]:
    """Number the problem and word problem elements in source order."""
    problems = [el for el in elements if el.type in PROBLEM_TYPES]
    return [AnswerKeyEntry(i + 1, el) for i, el in enumerate(problems)]


def has_answer_key(elements: Sequence[LayoutElement]) -> bool:
    """True when the answer key would show at least one solution."""
    return any(el.type in PROBLEM_TYPES and el.has_solution for el in elements)


# ─────────────────────────────────────────────────────────────────────────────
# Card rendering
# ─────────────────────────────────────────────────────────────────────────────

# A drawing step: paste a text layout at (x, y) in card pixels
_Placed = Tuple[int, int, TextLayout]


def _layout(
    fragments: Sequence[Fragment],
    width: int,
    style: TextStyle,
    config: PageConfig,
) -> TextLayout:
    return layout_fragments(
        fragments,
        width,
        style,
        scale=config.scale,
        rule_px_per_char=config.rule_px_per_char,
        rule_min_width=config.rule_min_width,
    )


def _label(text: str, width: int, color: str, config: PageConfig, *, size: int = LABEL_SIZE,
           alignment: Alignment = Alignment.LEFT) -> TextLayout:
    style = TextStyle(
        font_size=size,
        bold=True,
        color=color,
        uppercase=True,
        pre_wrap=False,
        alignment=alignment,
    )
    return _layout(split_mixed_content(text), width, style, config)


def _content_fragments(element: LayoutElement, content: str) -> List[Fragment]:
    """
    Fragments for a problem's content, matching how the page paints it.

    A problem that is one delimited span or undelimited markup renders as
    display math; anything mixed goes through the splitter unchanged.
    """
    if element.type is ElementType.WORD_PROBLEM:
        return split_mixed_content(content)

    stripped = content.strip()
    fragments = split_mixed_content(stripped)
    math_fragments = [f for f in fragments if f.is_math]
    if math_fragments and len(fragments) > 1:
        return fragments
    markup = math_fragments[0].text if math_fragments else stripped
    return [Fragment(FragmentKind.BLOCK_MATH, markup)]


def _content(element: LayoutElement, content: str, width: int, color: str,
             config: PageConfig) -> TextLayout:
    if not content.strip():
        style = TextStyle(font_size=CONTENT_SIZE, italic=True, color=PLACEHOLDER_COLOR)
        return _layout(split_mixed_content(EMPTY_PROBLEM_TEXT), width, style, config)
    style = TextStyle(font_size=CONTENT_SIZE, color=color, line_height=1.4)
    return _layout(_content_fragments(element, content), width, style, config)


def _render_card(entry: AnswerKeyEntry, options: RenderOptions, width: int,
                 config: PageConfig) -> Image.Image:
    """Lay out one card and paint it on its own image."""
    def px(value: int) -> int:
        return value * config.scale

    element = entry.element
    inner_x = px(CARD_ACCENT_WIDTH + CARD_PADDING)
    inner_width = max(1, width - inner_x - px(CARD_PADDING))
    placed: List[_Placed] = []
    y = px(CARD_PADDING)

    # Skill tag left, number right
    tag = _label(entry.skill, inner_width, TAG_COLOR, config)
    number = _label(entry.label, inner_width, NUMBER_COLOR, config,
                    size=NUMBER_SIZE, alignment=Alignment.RIGHT)
    placed.append((inner_x, y, tag))
    placed.append((inner_x, y, number))
    y += max(tag.height, number.height) + px(SECTION_GAP)

    # Content columns
    if options.mirrored:
        column_width = max(1, (inner_width - px(COLUMN_GAP)) // 2)
        columns = [
            (ORIGINAL_LABEL, LABEL_COLOR, selected_content(element, False), ORIGINAL_TEXT_COLOR),
            (MIRRORED_LABEL, MIRRORED_LABEL_COLOR, selected_content(element, True), CONTENT_COLOR),
        ]
    else:
        column_width = inner_width
        columns = [(PROBLEM_LABEL, LABEL_COLOR, selected_content(element, False), CONTENT_COLOR)]

    row_height = 0
    for i, (label_text, label_color, content, color) in enumerate(columns):
        x = inner_x + i * (column_width + px(COLUMN_GAP))
        label = _label(label_text, column_width, label_color, config)
        body = _content(element, content, column_width, color, config)
        placed.append((x, y, label))
        placed.append((x, y + label.height + px(LABEL_GAP), body))
        row_height = max(row_height, label.height + px(LABEL_GAP) + body.height)
    y += row_height

    # Solution block
    solution_box = None
    rule_y = None
    if options.show_answers and element.has_solution:
        y += px(SECTION_GAP)
        rule_y = y
        y += px(SECTION_GAP)
        label = _label(SOLUTION_LABEL, inner_width, SOLUTION_LABEL_COLOR, config)
        placed.append((inner_x, y, label))
        y += label.height + px(LABEL_GAP)

        padding = px(SOLUTION_PADDING)
        style = TextStyle(font_size=SOLUTION_SIZE, bold=True, color=SOLUTION_TEXT_COLOR)
        answer = _layout(
            split_mixed_content(element.solution or ""),
            max(1, inner_width - 2 * padding),
            style,
            config,
        )
        solution_box = (inner_x, y, inner_x + inner_width - 1, y + answer.height + 2 * padding - 1)
        placed.append((inner_x + padding, y + padding, answer))
        y += answer.height + 2 * padding

    height = y + px(CARD_PADDING)
    card = Image.new("RGB", (width, height), PAGE_BACKGROUND)
    draw = ImageDraw.Draw(card)
    draw.rectangle([0, 0, width - 1, height - 1], outline=CARD_BORDER_COLOR, width=config.scale)
    draw.rectangle([0, 0, px(CARD_ACCENT_WIDTH) - 1, height - 1], fill=CARD_ACCENT_COLOR)
    if rule_y is not None:
        draw.rectangle([inner_x, rule_y, inner_x + inner_width - 1, rule_y + config.scale - 1],
                       fill=CARD_BORDER_COLOR)
    if solution_box is not None:
        draw.rectangle(solution_box, fill=SOLUTION_FILL_COLOR)

    for x, top, layout in placed:
        layout.draw(card, x, top)
    return card


def _render_title(title: str, width: int, config: PageConfig) -> Tuple[TextLayout, TextLayout]:
    heading = _layout(
        split_mixed_content(title),
        width,
        TextStyle(font_size=TITLE_SIZE, bold=True, color=TITLE_COLOR),
        config,
    )
    subtitle = _label(ANSWER_KEY_LABEL, width, SUBTITLE_COLOR, config, size=SUBTITLE_SIZE)
    return heading, subtitle


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def render_answer_key(
    elements: Sequence[LayoutElement],
    options: RenderOptions = RenderOptions(show_answers=True),
    *,
    title: Optional[str] = None,
    config: PageConfig = PageConfig(),
) -> List[Image.Image]:
    """
    Render the answer key pages for a worksheet.

    Cards keep their order and never split across pages. A card taller
    than a page is placed alone and clipped at the bottom edge.

    Args:
        elements: Worksheet elements; only problems and word problems appear
        options: mirrored shows original and mirrored content side by side;
            show_answers adds each problem's solution
        title: Heading for the first page
        config: Page configuration

    Returns:
        Page images of config.pixel_size, at least one

    Example:
        >>> pages = render_answer_key(worksheet.elements, title=worksheet.title)
        >>> len(pages)
        1
    """
    entries = answer_key_entries(elements)
    margin = PAGE_MARGIN * config.scale
    gap = CARD_GAP * config.scale
    card_width = config.pixel_width - 2 * margin
    page_bottom = config.pixel_height - margin

    heading = subtitle = None
    top = margin
    if title:
        heading, subtitle = _render_title(title, card_width, config)
        top += heading.height + subtitle.height + TITLE_GAP * config.scale

    # (y, card) placements per page
    pages: List[List[Tuple[int, Image.Image]]] = []
    current: List[Tuple[int, Image.Image]] = []
    y = top

    for entry in entries:
        card = _render_card(entry, options, card_width, config)
        is_start_of_page = not current
        needed = card.height + (0 if is_start_of_page else gap)

        if y + needed > page_bottom and is_start_of_page:
            logger.warning(
                f"Answer key card {entry.label} overflows page {len(pages) + 1}: "
                f"{needed}px needed, {page_bottom - y}px available"
            )
        elif y + needed > page_bottom:
            pages.append(current)
            current = []
            y = margin
            needed = card.height

        current.append((y + needed - card.height, card))
        y += needed

    pages.append(current)

    images: List[Image.Image] = []
    for index, placements in enumerate(pages):
        image = Image.new("RGB", config.pixel_size, PAGE_BACKGROUND)
        if index == 0 and heading is not None and subtitle is not None:
            heading.draw(image, margin, margin)
            subtitle.draw(image, margin, margin + heading.height)
        for card_y, card in placements:
            image.paste(card, (margin, card_y))
        images.append(image)

    logger.info(
        f"Rendered answer key: {len(entries)} problem(s) on {len(images)} page(s), "
        f"mirrored={options.mirrored}, answers={options.show_answers}"
    )
    return images
