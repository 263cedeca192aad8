"""
Module: layout.compositor

Purpose:
    Paint a complete worksheet page. Every element is positioned
    absolutely at its normalized rectangle and painted in source order by
    a type-specific painter; nothing reflows. The same inputs always give
    the same pixels.

Key Functions:
    - render_page(): Elements + options -> page image

Key Classes:
    - RenderOptions: The two view flags (mirrored, show_answers)

Dependencies:
    - PIL: Page surface and drawing
    - typeset: Math, splitter and line layout
    - images.cropper: Diagram viewport crops

Used By:
    - controller: Page rendering for export
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Sequence

from PIL import Image, ImageColor, ImageDraw

from worksheet_mirror.core.models import (
    Alignment,
    ElementType,
    LayoutElement,
    PixelRect,
    round_half_up,
    selected_content,
)
from worksheet_mirror.images.cropper import crop_to_rect
from worksheet_mirror.typeset import (
    MathMode,
    TextStyle,
    layout_fragments,
    layout_text,
    render_math,
    split_mixed_content,
)

from .config import PageConfig
from .normalizer import PlacedElement, normalize_elements

logger = logging.getLogger(__name__)

PAGE_BACKGROUND = "white"

# Palette
TEXT_COLOR = "#0f172a"
HEADER_COLOR = "#334155"
SECTION_HEADER_COLOR = "#1e293b"
WORD_PROBLEM_COLOR = "#1e293b"
QUESTION_NUMBER_COLOR = "#0284c7"
PLACEHOLDER_TEXT_COLOR = "#cbd5e1"
RULE_COLOR = "#e2e8f0"
DIAGRAM_BORDER_COLOR = "#f1f5f9"
DIAGRAM_DASH_COLOR = "#cbd5e1"
DIAGRAM_FILL_COLOR = "#f8fafc"
DIAGRAM_LABEL_COLOR = "#94a3b8"
ANSWER_FILL_COLOR = "#f0f9ff"
ANSWER_ACCENT_COLOR = "#0ea5e9"
ANSWER_TEXT_COLOR = "#0369a1"

# Geometry in reference pixels
HEADER_MIN_WIDTH = 120
RESPONSE_RULE_INSET = 4
RULE_THICKNESS = 2
SECTION_RULE_PADDING = 4
DIAGRAM_DASH = 6
DIAGRAM_PADDING = 8
DIAGRAM_LABEL_SIZE = 10
EMPTY_PROBLEM_SIZE = 10
ANSWER_MARGIN_TOP = 8
ANSWER_PADDING = 8
ANSWER_LABEL_GAP = 4
ANSWER_TEXT_SIZE = 10
ANSWER_LABEL_SIZE = 8
ANSWER_LABEL_OPACITY = 0.6

EMPTY_PROBLEM_TEXT = "Empty problem"
DIAGRAM_MISSING_TEXT = "Diagram Missing"
ANSWER_LABEL = "ANSWER"

# Types that render through the default text painter and may show answers
_DEFAULT_TEXT_TYPES = frozenset({
    ElementType.HEADER,
    ElementType.QUESTION_NUMBER,
    ElementType.INSTRUCTION,
    ElementType.FOOTER,
})


@dataclass(frozen=True)
class RenderOptions:
    """
    View flags for one render (immutable).

    Attributes:
        mirrored: Render mirrored_content where present
        show_answers: Render answer blocks for elements with solutions
    """

    mirrored: bool = False
    show_answers: bool = False


def shows_answer(element: LayoutElement) -> bool:
    """True when the element renders an answer block with answers visible."""
    return element.type in _DEFAULT_TEXT_TYPES and element.has_solution


@dataclass
class _Surface:
    """Per-render drawing context."""
    image: Image.Image
    draw: ImageDraw.ImageDraw
    config: PageConfig
    source: Optional[Image.Image]

    @property
    def scale(self) -> int:
        return self.config.scale

    def px(self, value: int) -> int:
        """Reference pixels -> render pixels."""
        return value * self.config.scale


def _blend(foreground: str, background: str, alpha: float) -> tuple[int, int, int]:
    """Color seen when foreground at alpha opacity covers background."""
    fg = ImageColor.getrgb(foreground)
    bg = ImageColor.getrgb(background)
    return tuple(round_half_up(f * alpha + b * (1 - alpha)) for f, b in zip(fg[:3], bg[:3]))


def _text_style(placed: PlacedElement, **overrides) -> TextStyle:
    values = dict(
        font_size=placed.font_size,
        bold=placed.bold,
        family=placed.font_family,
        color=TEXT_COLOR,
        line_height=placed.line_height,
        alignment=placed.alignment,
    )
    values.update(overrides)
    return TextStyle(**values)


def _layout(surface: _Surface, text: str, width: int, style: TextStyle):
    return layout_text(
        text,
        width,
        style,
        scale=surface.scale,
        rule_px_per_char=surface.config.rule_px_per_char,
        rule_min_width=surface.config.rule_min_width,
    )


def _hline(surface: _Surface, x: int, y: int, width: int, thickness: int, color: str) -> None:
    """Horizontal bar in render pixels; y is the top edge."""
    if width <= 0 or thickness <= 0:
        return
    surface.draw.rectangle([x, y, x + width - 1, y + thickness - 1], fill=color)


def _clip_to_page(rect: PixelRect, config: PageConfig) -> PixelRect:
    """Trim a rect whose rounded edge lands one pixel past the page."""
    width = min(rect.width, config.pixel_width - rect.x)
    height = min(rect.height, config.pixel_height - rect.y)
    return PixelRect(rect.x, rect.y, max(width, 0), max(height, 0))


def _dashed_rectangle(
    surface: _Surface, rect: PixelRect, color: str, width: int, dash: int
) -> None:
    """Dashed outline inside rect (render pixels)."""
    left, top, right, bottom = rect.x, rect.y, rect.right - 1, rect.bottom - 1
    if right - left < width or bottom - top < width:
        return
    step = dash * 2
    for x in range(left, right + 1, step):
        end = min(x + dash - 1, right)
        surface.draw.rectangle([x, top, end, top + width - 1], fill=color)
        surface.draw.rectangle([x, bottom - width + 1, end, bottom], fill=color)
    for y in range(top, bottom + 1, step):
        end = min(y + dash - 1, bottom)
        surface.draw.rectangle([left, y, left + width - 1, end], fill=color)
        surface.draw.rectangle([right - width + 1, y, right, end], fill=color)


# ─────────────────────────────────────────────────────────────────────────────
# Painters
# ─────────────────────────────────────────────────────────────────────────────

def _paint_problem(surface: _Surface, placed: PlacedElement, content: str) -> None:
    """Display math, vertically centered; mixed prose goes through the splitter."""
    rect = placed.rect.scaled(surface.scale)

    if not content.strip():
        style = TextStyle(
            font_size=EMPTY_PROBLEM_SIZE,
            italic=True,
            color=PLACEHOLDER_TEXT_COLOR,
            line_height=1.0,
            alignment=placed.alignment,
        )
        layout = _layout(surface, EMPTY_PROBLEM_TEXT, rect.width, style)
        layout.draw(surface.image, rect.x, rect.y + (rect.height - layout.height) // 2)
        return

    fragments = split_mixed_content(content.strip())
    math_fragments = [f for f in fragments if f.is_math]

    if math_fragments and len(fragments) > 1:
        layout = layout_fragments(
            fragments,
            rect.width,
            _text_style(placed),
            scale=surface.scale,
            rule_px_per_char=surface.config.rule_px_per_char,
            rule_min_width=surface.config.rule_min_width,
        )
        layout.draw(surface.image, rect.x, rect.y + (rect.height - layout.height) // 2)
        return

    # Whole content is one delimited span, or undelimited math
    markup = math_fragments[0].text if math_fragments else content
    run = render_math(markup, MathMode.BLOCK, font_size=placed.font_size, scale=surface.scale)

    x = rect.x
    if placed.alignment is Alignment.CENTER:
        x += (rect.width - run.width) // 2
    elif placed.alignment is Alignment.RIGHT:
        x += rect.width - run.width
    y = rect.y + (rect.height - run.height) // 2
    surface.image.paste(TEXT_COLOR, (x, y, x + run.width, y + run.height), run.mask)


def _paint_word_problem(surface: _Surface, placed: PlacedElement, content: str) -> None:
    rect = placed.rect.scaled(surface.scale)
    layout = _layout(surface, content, rect.width, _text_style(placed, color=WORD_PROBLEM_COLOR))
    layout.draw(surface.image, rect.x, rect.y)


def _paint_diagram(surface: _Surface, placed: PlacedElement, content: str) -> None:
    """Crop of the source page, or a dashed placeholder when there is none."""
    rect = _clip_to_page(placed.rect.scaled(surface.scale), surface.config)
    if rect.width <= 0 or rect.height <= 0:
        return

    if surface.source is not None:
        surface.image.paste(crop_to_rect(surface.source, rect), (rect.x, rect.y))
        surface.draw.rectangle(
            [rect.x, rect.y, rect.right - 1, rect.bottom - 1],
            outline=DIAGRAM_BORDER_COLOR,
            width=surface.px(1),
        )
        return

    surface.draw.rectangle([rect.x, rect.y, rect.right - 1, rect.bottom - 1], fill=DIAGRAM_FILL_COLOR)
    _dashed_rectangle(surface, rect, DIAGRAM_DASH_COLOR, surface.px(RULE_THICKNESS), surface.px(DIAGRAM_DASH))

    label = (content.strip() or DIAGRAM_MISSING_TEXT).upper()
    padding = surface.px(DIAGRAM_PADDING)
    style = TextStyle(
        font_size=DIAGRAM_LABEL_SIZE,
        bold=True,
        color=DIAGRAM_LABEL_COLOR,
        alignment=Alignment.CENTER,
        pre_wrap=False,
    )
    inner_width = max(1, rect.width - 2 * padding)
    layout = _layout(surface, label, inner_width, style)
    layout.draw(surface.image, rect.x + padding, rect.y + (rect.height - layout.height) // 2)


def _paint_response_area(surface: _Surface, placed: PlacedElement, content: str) -> None:
    """Writing line near the bottom of the box; content is ignored."""
    rect = placed.rect.scaled(surface.scale)
    thickness = surface.px(RULE_THICKNESS)
    top = rect.bottom - surface.px(RESPONSE_RULE_INSET) - thickness
    _hline(surface, rect.x, top, rect.width, thickness, RULE_COLOR)


def _paint_section_header(surface: _Surface, placed: PlacedElement, content: str) -> None:
    rect = placed.rect.scaled(surface.scale)
    style = _text_style(placed, bold=True, uppercase=True, color=SECTION_HEADER_COLOR)
    layout = _layout(surface, content, rect.width, style)
    layout.draw(surface.image, rect.x, rect.y)

    top = rect.y + layout.height + surface.px(SECTION_RULE_PADDING)
    _hline(surface, rect.x, top, rect.width, surface.px(RULE_THICKNESS), RULE_COLOR)


def _paint_answer(surface: _Surface, placed: PlacedElement, x: int, y: int, width: int) -> None:
    """Tinted answer block with its top-left corner at (x, y) in render pixels."""
    padding = surface.px(ANSWER_PADDING)
    accent = surface.px(RULE_THICKNESS)
    inner_width = max(1, width - accent - 2 * padding)

    label_style = TextStyle(
        font_size=ANSWER_LABEL_SIZE,
        bold=True,
        color="#%02x%02x%02x" % _blend(ANSWER_TEXT_COLOR, ANSWER_FILL_COLOR, ANSWER_LABEL_OPACITY),
        pre_wrap=False,
    )
    answer_style = TextStyle(
        font_size=ANSWER_TEXT_SIZE,
        bold=True,
        family=placed.font_family,
        color=ANSWER_TEXT_COLOR,
    )
    label = _layout(surface, ANSWER_LABEL, inner_width, label_style)
    answer = _layout(surface, placed.element.solution or "", inner_width, answer_style)

    height = 2 * padding + label.height + surface.px(ANSWER_LABEL_GAP) + answer.height
    surface.draw.rectangle([x, y, x + width - 1, y + height - 1], fill=ANSWER_FILL_COLOR)
    surface.draw.rectangle([x, y, x + accent - 1, y + height - 1], fill=ANSWER_ACCENT_COLOR)

    text_x = x + accent + padding
    label.draw(surface.image, text_x, y + padding)
    answer.draw(surface.image, text_x, y + padding + label.height + surface.px(ANSWER_LABEL_GAP))


def _paint_text(
    surface: _Surface,
    placed: PlacedElement,
    content: str,
    *,
    show_answers: bool,
) -> None:
    """Default painter for header, question number, instruction and footer."""
    rect = placed.rect.scaled(surface.scale)
    color = TEXT_COLOR
    if placed.type is ElementType.HEADER:
        color = HEADER_COLOR
    elif placed.type is ElementType.QUESTION_NUMBER:
        color = QUESTION_NUMBER_COLOR
    style = _text_style(placed, color=color)

    if placed.type is ElementType.HEADER:
        # Auto width: may run to the right page edge, never narrower than the minimum
        available = max(surface.config.pixel_width - rect.x, surface.px(HEADER_MIN_WIDTH))
        natural = _layout(surface, content, available, style)
        layout = replace(natural, box_width=max(natural.width, surface.px(HEADER_MIN_WIDTH)))
    else:
        layout = _layout(surface, content, rect.width, style)

    answer_needed = show_answers and placed.element.has_solution
    top = rect.y
    if placed.type is ElementType.HEADER and not answer_needed:
        top = rect.y + (rect.height - layout.height) // 2
    layout.draw(surface.image, rect.x, top)

    if answer_needed:
        _paint_answer(
            surface,
            placed,
            rect.x,
            top + layout.height + surface.px(ANSWER_MARGIN_TOP),
            max(rect.width, layout.width),
        )


_PAINTERS: Dict[ElementType, Callable[[_Surface, PlacedElement, str], None]] = {
    ElementType.PROBLEM: _paint_problem,
    ElementType.WORD_PROBLEM: _paint_word_problem,
    ElementType.DIAGRAM: _paint_diagram,
    ElementType.RESPONSE_AREA: _paint_response_area,
    ElementType.SECTION_HEADER: _paint_section_header,
}


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def render_page(
    elements: Sequence[LayoutElement],
    options: RenderOptions = RenderOptions(),
    *,
    source_image: Optional[Image.Image] = None,
    config: PageConfig = PageConfig(),
) -> Image.Image:
    """
    Paint a full worksheet page.

    Elements are painted in list order at their own rectangles; white
    space elements occupy no pixels. The result is a pure function of the
    arguments.

    Args:
        elements: Ordered layout elements
        options: Mirrored and show-answers flags
        source_image: Original page raster for diagram crops (any size;
            resized to the page pixel size)
        config: Page configuration

    Returns:
        RGB image of config.pixel_size

    Example:
        >>> page = render_page(worksheet.elements, RenderOptions(mirrored=True))
        >>> page.size
        (1588, 2246)
    """
    image = Image.new("RGB", config.pixel_size, PAGE_BACKGROUND)
    source = None
    if source_image is not None:
        source = source_image.convert("RGB")
        if source.size != config.pixel_size:
            source = source.resize(config.pixel_size, Image.Resampling.LANCZOS)

    surface = _Surface(image=image, draw=ImageDraw.Draw(image), config=config, source=source)

    placed_elements = normalize_elements(elements, config)
    for placed in placed_elements:
        content = selected_content(placed.element, options.mirrored)
        painter = _PAINTERS.get(placed.type)
        if painter is not None:
            painter(surface, placed, content)
        else:
            _paint_text(surface, placed, content, show_answers=options.show_answers)
        logger.debug(f"Painted {placed.type.value} '{placed.id}' at {placed.rect}")

    logger.info(
        f"Rendered page: {len(placed_elements)} element(s), "
        f"mirrored={options.mirrored}, answers={options.show_answers}"
    )
    return image
