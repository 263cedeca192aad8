"""
Tests for typeset.fonts
"""
from PIL import ImageFont

from worksheet_mirror.core.models import FontFamily
from worksheet_mirror.typeset import load_font


def test_load_font_returns_truetype_at_size():
    font = load_font(24)

    assert isinstance(font, ImageFont.FreeTypeFont)
    assert font.size == 24


def test_load_font_is_cached():
    assert load_font(18, FontFamily.SERIF, bold=True) is load_font(18, FontFamily.SERIF, bold=True)


def test_load_font_bold_differs_from_regular():
    regular = load_font(20)
    bold = load_font(20, bold=True)

    assert regular.getlength("Worksheet") != bold.getlength("Worksheet")
