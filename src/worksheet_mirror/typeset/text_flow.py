"""
Module: typeset.text_flow

Purpose:
    Lay out and paint a fragment sequence inside a fixed-width box: words
    and preserved spaces, inline math sitting on the text baseline, fill-in
    rules and display math on lines of their own. Lines wrap greedily at
    spaces and rules; author line breaks are kept.

Key Classes:
    - TextStyle: Typography for one flow
    - TextLayout: Measured lines, ready to draw

Key Functions:
    - layout_fragments(): Fragments -> TextLayout
    - layout_text(): Convenience wrapper that splits mixed content first

Dependencies:
    - PIL: ImageDraw
    - typeset.fonts / typeset.math / typeset.splitter

Used By:
    - layout.compositor: Every text-bearing element type
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from worksheet_mirror.core.models import Alignment, FontFamily, round_half_up

from .fonts import load_font
from .math import MathMode, MathRun, render_math
from .splitter import (
    DEFAULT_RULE_MIN_WIDTH,
    DEFAULT_RULE_PX_PER_CHAR,
    Fragment,
    FragmentKind,
    rule_width,
    split_mixed_content,
)

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r"\n|[ \t]+|[^ \t\n]+")
_COLLAPSE_PATTERN = re.compile(r"\s+")

# Fill-in rule geometry in reference pixels
RULE_SIDE_MARGIN = 4
RULE_THICKNESS = 2
RULE_BASELINE_OFFSET = 2
DEFAULT_RULE_COLOR = "#cbd5e1"


@dataclass(frozen=True)
class TextStyle:
    """
    Typography for a text flow (immutable).

    Attributes:
        font_size: Font size in reference pixels
        bold: Bold weight
        italic: Italic slant
        family: Serif or sans-serif
        color: Text and math color
        line_height: Line height as a multiple of font size
        alignment: Horizontal alignment of each line
        uppercase: Uppercase plain text (math is left alone)
        pre_wrap: Keep author line breaks and space runs
        rule_color: Fill-in rule color
    """

    font_size: int
    bold: bool = False
    italic: bool = False
    family: FontFamily = FontFamily.SANS_SERIF
    color: str = "#0f172a"
    line_height: float = 1.25
    alignment: Alignment = Alignment.LEFT
    uppercase: bool = False
    pre_wrap: bool = True
    rule_color: str = DEFAULT_RULE_COLOR

    def __post_init__(self) -> None:
        if self.font_size <= 0:
            raise ValueError(f"font_size must be positive: {self.font_size}")
        if self.line_height <= 0:
            raise ValueError(f"line_height must be positive: {self.line_height}")


# ─────────────────────────────────────────────────────────────────────────────
# Line model
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class _Piece:
    """Atomic drawable: a word, a space run, a math run or a rule."""
    kind: str  # "text", "space", "math", "rule"
    width: float
    text: str = ""
    run: Optional[MathRun] = None
    x: float = 0.0


@dataclass
class _Line:
    pieces: List[_Piece] = field(default_factory=list)
    ascent: int = 0
    descent: int = 0
    is_block: bool = False

    @property
    def has_content(self) -> bool:
        return any(p.kind != "space" for p in self.pieces)

    @property
    def width(self) -> float:
        """Width without trailing (hanging) spaces."""
        pieces = list(self.pieces)
        while pieces and pieces[-1].kind == "space":
            pieces.pop()
        return sum(p.width for p in pieces)

    @property
    def height(self) -> int:
        return self.ascent + self.descent


@dataclass
class TextLayout:
    """
    Measured text flow (all values in render pixels).

    Attributes:
        lines: Laid-out lines, top to bottom
        box_width: Width lines are aligned within
        style: Style used for drawing
        scale: Render scale the layout was measured at
    """

    lines: List[_Line]
    box_width: int
    style: TextStyle
    scale: int = 1

    @property
    def height(self) -> int:
        """Total height of all lines."""
        return sum(line.height for line in self.lines)

    @property
    def width(self) -> int:
        """Widest line."""
        if not self.lines:
            return 0
        return round_half_up(max(line.width for line in self.lines))

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def _line_offset(self, line: _Line) -> int:
        if line.is_block:
            return max(0, (self.box_width - round_half_up(line.width)) // 2)
        free = self.box_width - round_half_up(line.width)
        if self.style.alignment is Alignment.CENTER:
            return free // 2
        if self.style.alignment is Alignment.RIGHT:
            return free
        return 0

    def draw(self, image: Image.Image, x: int, y: int) -> None:
        """
        Paint the flow with its top-left corner at (x, y).

        Args:
            image: RGB page image, modified in place
            x: Left edge in render pixels
            y: Top edge in render pixels
        """
        draw = ImageDraw.Draw(image)
        font = _style_font(self.style, self.scale)
        thickness = RULE_THICKNESS * self.scale
        offset = RULE_BASELINE_OFFSET * self.scale
        side = RULE_SIDE_MARGIN * self.scale

        top = y
        for line in self.lines:
            baseline = top + line.ascent
            left = x + self._line_offset(line)
            for piece in line.pieces:
                px = left + round_half_up(piece.x)
                if piece.kind == "text":
                    draw.text((px, baseline), piece.text, font=font,
                              fill=self.style.color, anchor="ls")
                elif piece.kind == "math" and piece.run is not None:
                    run = piece.run
                    box = (px, baseline - run.ascent, px + run.width, baseline + run.depth)
                    image.paste(self.style.color, box, run.mask)
                elif piece.kind == "rule":
                    rule_left = px + side
                    rule_right = px + round_half_up(piece.width) - side
                    bottom = baseline + offset
                    draw.rectangle(
                        [rule_left, bottom - thickness, rule_right - 1, bottom - 1],
                        fill=self.style.rule_color,
                    )
            top += line.height


# ─────────────────────────────────────────────────────────────────────────────
# Layout
# ─────────────────────────────────────────────────────────────────────────────

def _style_font(style: TextStyle, scale: int):
    return load_font(style.font_size * scale, style.family, bold=style.bold, italic=style.italic)


def _text_metrics(style: TextStyle, scale: int) -> Tuple[int, int]:
    """Line (ascent, descent) for plain text with half-leading applied."""
    font = _style_font(style, scale)
    ascent, descent = font.getmetrics()
    line_height = round_half_up(style.font_size * scale * style.line_height)
    half_leading = (line_height - (ascent + descent)) // 2
    line_ascent = ascent + half_leading
    return line_ascent, line_height - line_ascent


def _tokens(
    fragments: Sequence[Fragment],
    style: TextStyle,
    scale: int,
    rule_px_per_char: float,
    rule_min_width: int,
) -> Iterator[Tuple[str, List[_Piece]]]:
    """
    Yield (token_kind, pieces) where token_kind is "newline", "space",
    "group" (glued pieces that wrap as one) or "block".
    """
    font = _style_font(style, scale)
    group: List[_Piece] = []

    for fragment in fragments:
        if fragment.kind is FragmentKind.PLAIN_TEXT:
            text = fragment.text.replace("\r\n", "\n").replace("\r", "\n")
            if not style.pre_wrap:
                text = _COLLAPSE_PATTERN.sub(" ", text)
            if style.uppercase:
                text = text.upper()
            for match in _TOKEN_PATTERN.finditer(text):
                token = match.group(0)
                if token == "\n" or token[0] in " \t":
                    if group:
                        yield "group", group
                        group = []
                    if token == "\n":
                        yield "newline", []
                    else:
                        spaces = token.replace("\t", " ")
                        yield "space", [_Piece("space", font.getlength(spaces), spaces)]
                else:
                    group.append(_Piece("text", font.getlength(token), token))

        elif fragment.kind is FragmentKind.INLINE_MATH:
            run = render_math(fragment.text, MathMode.INLINE, font_size=style.font_size, scale=scale)
            group.append(_Piece("math", run.width, fragment.text, run))

        elif fragment.kind is FragmentKind.BLOCK_MATH:
            if group:
                yield "group", group
                group = []
            run = render_math(fragment.text, MathMode.BLOCK, font_size=style.font_size, scale=scale)
            yield "block", [_Piece("math", run.width, fragment.text, run)]

        elif fragment.kind is FragmentKind.RULE:
            if group:
                yield "group", group
                group = []
            width = rule_width(
                fragment.run_length, px_per_char=rule_px_per_char, min_width=rule_min_width
            ) + 2 * RULE_SIDE_MARGIN
            yield "group", [_Piece("rule", width * scale, fragment.text)]

    if group:
        yield "group", group


def layout_fragments(
    fragments: Sequence[Fragment],
    max_width: int,
    style: TextStyle,
    *,
    scale: int = 1,
    rule_px_per_char: float = DEFAULT_RULE_PX_PER_CHAR,
    rule_min_width: int = DEFAULT_RULE_MIN_WIDTH,
) -> TextLayout:
    """
    Break fragments into lines that fit max_width.

    Wrapping is greedy: a glued group moves to the next line when it would
    overflow a line that already has content. A group wider than the box
    overflows on its own line. Trailing spaces hang past the edge and do
    not count toward alignment. Block math always occupies its own line,
    centered in the box.

    Args:
        fragments: Output of split_mixed_content()
        max_width: Box width in render pixels
        style: Typography
        scale: Render scale (fonts and math are sized font_size * scale)
        rule_px_per_char: Rule width per underscore (reference pixels)
        rule_min_width: Minimum rule width (reference pixels)

    Returns:
        TextLayout ready to draw
    """
    text_ascent, text_descent = _text_metrics(style, scale)
    lines: List[_Line] = []
    current = _Line()
    cursor = 0.0
    last_kind = ""

    def finish(line: _Line) -> None:
        ascent, descent = (0, 0) if line.is_block else (text_ascent, text_descent)
        for piece in line.pieces:
            if piece.run is not None:
                ascent = max(ascent, piece.run.ascent)
                descent = max(descent, piece.run.depth)
            elif piece.kind == "rule":
                descent = max(descent, RULE_BASELINE_OFFSET * scale)
        line.ascent, line.descent = ascent, descent
        lines.append(line)

    for kind, pieces in _tokens(fragments, style, scale, rule_px_per_char, rule_min_width):
        if kind == "newline":
            if last_kind != "block":
                finish(current)
            current, cursor = _Line(), 0.0
        elif kind == "block":
            if current.pieces:
                finish(current)
            piece = pieces[0]
            finish(_Line(pieces=[piece], is_block=True))
            current, cursor = _Line(), 0.0
        elif kind == "space":
            # Leading spaces survive only in pre-wrap, and never after display math
            if current.pieces or (style.pre_wrap and last_kind != "block"):
                for piece in pieces:
                    piece.x = cursor
                    cursor += piece.width
                    current.pieces.append(piece)
        else:
            group_width = sum(p.width for p in pieces)
            if current.has_content and cursor + group_width > max_width:
                finish(current)
                current, cursor = _Line(), 0.0
            for piece in pieces:
                piece.x = cursor
                cursor += piece.width
                current.pieces.append(piece)
        last_kind = kind

    if current.pieces:
        finish(current)

    logger.debug(f"Laid out {len(lines)} line(s) in {max_width}px")
    return TextLayout(lines=lines, box_width=max_width, style=style, scale=scale)


def layout_text(
    text: str,
    max_width: int,
    style: TextStyle,
    *,
    scale: int = 1,
    rule_px_per_char: float = DEFAULT_RULE_PX_PER_CHAR,
    rule_min_width: int = DEFAULT_RULE_MIN_WIDTH,
) -> TextLayout:
    """Split mixed content and lay it out in one step."""
    return layout_fragments(
        split_mixed_content(text),
        max_width,
        style,
        scale=scale,
        rule_px_per_char=rule_px_per_char,
        rule_min_width=rule_min_width,
    )
