"""
Module: typeset.fonts

Purpose:
    Resolve and load TrueType fonts for page text. Fonts come from
    matplotlib's bundled DejaVu families so every machine renders the same
    glyphs; well-known system names are tried before giving up.

Key Functions:
    - load_font(): Load a font by size, family, weight and slant

Dependencies:
    - PIL: ImageFont
    - matplotlib.font_manager: Bundled font discovery

Used By:
    - typeset.math: Plain text fallback
    - typeset.text_flow: Word measurement and drawing
    - layout.compositor: Placeholders and labels
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from matplotlib import font_manager
from PIL import ImageFont

from worksheet_mirror.core.models import FontFamily

logger = logging.getLogger(__name__)

# Bundled with matplotlib, so always resolvable
SANS_FAMILY = "DejaVu Sans"
SERIF_FAMILY = "DejaVu Serif"

# System fallbacks by (serif, bold)
_SYSTEM_FONTS = {
    (False, False): ["DejaVuSans.ttf", "arial.ttf", "Arial.ttf"],
    (False, True): ["DejaVuSans-Bold.ttf", "arialbd.ttf", "Arial Bold.ttf"],
    (True, False): ["DejaVuSerif.ttf", "times.ttf", "Times New Roman.ttf"],
    (True, True): ["DejaVuSerif-Bold.ttf", "timesbd.ttf", "Times New Roman Bold.ttf"],
}


@lru_cache(maxsize=None)
def _bundled_font_path(serif: bool, bold: bool, italic: bool) -> Optional[str]:
    """Locate a bundled DejaVu face through matplotlib's font manager."""
    props = font_manager.FontProperties(
        family=SERIF_FAMILY if serif else SANS_FAMILY,
        weight="bold" if bold else "normal",
        style="italic" if italic else "normal",
    )
    try:
        return font_manager.findfont(props, fallback_to_default=True)
    except ValueError as e:
        logger.debug(f"Font manager could not resolve {props}: {e}")
        return None


@lru_cache(maxsize=256)
def load_font(
    size: int,
    family: FontFamily = FontFamily.SANS_SERIF,
    *,
    bold: bool = False,
    italic: bool = False,
) -> ImageFont.FreeTypeFont:
    """
    Load a font for text rendering.

    Fonts are cached per (size, family, bold, italic); FreeTypeFont objects
    are read-only so sharing them between renders is safe.

    Args:
        size: Font size in pixels
        family: Serif or sans-serif
        bold: Bold weight
        italic: Italic/oblique slant

    Returns:
        Font object

    Example:
        >>> font = load_font(24, FontFamily.SERIF, bold=True)
        >>> font.size
        24
    """
    serif = family is FontFamily.SERIF
    candidates = []
    bundled = _bundled_font_path(serif, bold, italic)
    if bundled:
        candidates.append(bundled)
    candidates.extend(_SYSTEM_FONTS[(serif, bold)])

    for font_name in candidates:
        try:
            return ImageFont.truetype(font_name, size)
        except (IOError, OSError):
            continue

    logger.warning("Could not load TrueType font, using default")
    return ImageFont.load_default(size=size)
