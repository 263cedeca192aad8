"""
Module: typeset.math

Purpose:
    Render a single math expression into a glyph run. Block mode gets a
    display-style wrapper, inline mode a text-style wrapper. Any markup
    that fails to typeset is shown as the raw string in plain sans-serif
    text; no worksheet ever shows an error artifact.

Key Functions:
    - wrap_markup(): Apply the mode directive to a markup string
    - to_mathtext(): Translate wrapped markup into a mathtext expression
    - render_math(): Pure markup -> MathRun rendering

Key Classes:
    - MathMode: INLINE or BLOCK
    - MathRun: Rendered coverage mask plus baseline metrics

Dependencies:
    - matplotlib.mathtext: Expression typesetting
    - PIL: Mask images
    - typeset.fonts: Fallback text font

Used By:
    - typeset.text_flow: Inline and block math fragments
    - layout.compositor: Problem elements
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Tuple

from matplotlib import mathtext
from matplotlib.font_manager import FontProperties
from PIL import Image, ImageDraw, ImageOps

from worksheet_mirror.core.models import round_half_up

from .fonts import load_font

logger = logging.getLogger(__name__)

DISPLAY_DIRECTIVE = r"\displaystyle"
TEXT_DIRECTIVE = r"\textstyle"

# Computer Modern glyphs, closest to classic TeX output
MATH_FONTSET = "cm"

_FRAC_PATTERN = re.compile(r"\\frac(?![a-zA-Z])")
_DIRECTIVE_PATTERN = re.compile(r"\\(?:displaystyle|textstyle)(?![a-zA-Z])")
_BARE_DOLLAR_PATTERN = re.compile(r"(?<!\\)\$")
_WHITESPACE_PATTERN = re.compile(r"\s+")


class MathMode(str, Enum):
    """Math rendering stance."""
    INLINE = "inline"  # Text-flow sizing, baseline aligned
    BLOCK = "block"    # Display sizing, standalone

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class MathRun:
    """
    A rendered math expression (immutable).

    The mask is an 8-bit coverage image (255 = ink) so callers can
    colorize it for any element color.

    Attributes:
        mask: Coverage image, mode "L"
        depth: Pixels below the baseline
        markup: Input markup string
        mode: Mode it was rendered in
        typeset_string: The mathtext expression, or the raw text on fallback
        is_fallback: True when the markup could not be typeset
    """

    mask: Image.Image
    depth: int
    markup: str
    mode: MathMode
    typeset_string: str
    is_fallback: bool = False

    @property
    def width(self) -> int:
        """Run width in pixels."""
        return self.mask.width

    @property
    def height(self) -> int:
        """Run height in pixels."""
        return self.mask.height

    @property
    def ascent(self) -> int:
        """Pixels above the baseline."""
        return self.mask.height - self.depth


def wrap_markup(markup: str, mode: MathMode) -> str:
    """
    Wrap markup in the directive for its mode.

    Strings that already declare the directive are returned unchanged
    (apart from surrounding whitespace).

    Example:
        >>> wrap_markup("x^2", MathMode.BLOCK)
        '\\\\displaystyle{ x^2 }'
    """
    stripped = markup.strip()
    directive = DISPLAY_DIRECTIVE if mode is MathMode.BLOCK else TEXT_DIRECTIVE
    if stripped.startswith(directive):
        return stripped
    return f"{directive}{{ {stripped} }}"


def _outer_group_closes_at_end(text: str) -> bool:
    """True when text is a single {...} group whose first brace closes last."""
    if not (text.startswith("{") and text.endswith("}")):
        return False
    depth = 0
    for i, ch in enumerate(text):
        if ch == "{" and (i == 0 or text[i - 1] != "\\"):
            depth += 1
        elif ch == "}" and (i == 0 or text[i - 1] != "\\"):
            depth -= 1
            if depth == 0:
                return i == len(text) - 1
    return False


def to_mathtext(wrapped: str, mode: MathMode) -> str:
    """
    Translate wrapped markup into a mathtext expression.

    mathtext has no style directives, so the leading directive and its
    group are unwrapped and display mode is expressed by upgrading
    fractions to display fractions. Bare dollar signs are escaped.

    Args:
        wrapped: Output of wrap_markup()
        mode: Rendering mode

    Returns:
        "$...$" expression, or "" when there is nothing to typeset
    """
    body = wrapped.strip()
    for directive in (DISPLAY_DIRECTIVE, TEXT_DIRECTIVE):
        if body.startswith(directive):
            rest = body[len(directive):].strip()
            if _outer_group_closes_at_end(rest):
                rest = rest[1:-1]
            body = rest
            break

    body = _DIRECTIVE_PATTERN.sub("", body)
    if mode is MathMode.BLOCK:
        body = _FRAC_PATTERN.sub(r"\\dfrac", body)
    body = _WHITESPACE_PATTERN.sub(" ", body).strip()
    body = _BARE_DOLLAR_PATTERN.sub(r"\\$", body)

    if not body:
        return ""
    return f"${body}$"


@lru_cache(maxsize=512)
def _rasterize(expression: str, size_px: int) -> Tuple[bytes, Tuple[int, int], int]:
    """
    Typeset a mathtext expression at a pixel size.

    Rendered at 72 DPI so one point equals one pixel. Returns raw mask
    bytes so the cache never hands out a mutable image.

    Raises:
        ValueError: If mathtext cannot parse the expression
    """
    prop = FontProperties(size=size_px, math_fontfamily=MATH_FONTSET)
    buf = io.BytesIO()
    depth = mathtext.math_to_image(expression, buf, prop=prop, dpi=72, format="png")
    buf.seek(0)
    with Image.open(buf) as img:
        mask = ImageOps.invert(img.convert("L"))
    return mask.tobytes(), mask.size, round_half_up(depth)


def _render_plain(text: str, size_px: int) -> Tuple[Image.Image, int]:
    """Render text as a single sans-serif line; returns (mask, depth)."""
    font = load_font(size_px)
    ascent, descent = font.getmetrics()
    line = _WHITESPACE_PATTERN.sub(" ", text).strip()
    width = max(1, round_half_up(font.getlength(line)))
    mask = Image.new("L", (width, ascent + descent), 0)
    if line:
        ImageDraw.Draw(mask).text((0, ascent), line, fill=255, font=font, anchor="ls")
    return mask, descent


def render_math(
    markup: str,
    mode: MathMode = MathMode.BLOCK,
    *,
    font_size: int,
    scale: int = 1,
) -> MathRun:
    """
    Render a math expression.

    Pure function: the same (markup, mode, size) always yields the same
    pixels. Callers re-invoke it whenever the markup or mode changes.

    Args:
        markup: Math markup, possibly malformed
        mode: INLINE or BLOCK
        font_size: Font size in reference pixels
        scale: Integer render scale

    Returns:
        MathRun; on any typesetting failure the run shows the raw markup
        as plain text and is_fallback is True

    Example:
        >>> run = render_math(r"\\frac{1}{2", MathMode.BLOCK, font_size=12)
        >>> run.is_fallback, run.typeset_string
        (True, '\\\\frac{1}{2')
    """
    size_px = max(1, font_size * scale)
    expression = to_mathtext(wrap_markup(markup, mode), mode)

    if not expression:
        return MathRun(
            mask=Image.new("L", (1, size_px), 0),
            depth=0,
            markup=markup,
            mode=mode,
            typeset_string="",
        )

    try:
        data, size, depth = _rasterize(expression, size_px)
    except Exception as e:
        logger.warning(f"Math markup failed to typeset, showing raw text: {markup!r} ({e})")
        mask, depth = _render_plain(markup, size_px)
        return MathRun(
            mask=mask,
            depth=depth,
            markup=markup,
            mode=mode,
            typeset_string=markup,
            is_fallback=True,
        )

    return MathRun(
        mask=Image.frombytes("L", size, data),
        depth=depth,
        markup=markup,
        mode=mode,
        typeset_string=expression,
    )
