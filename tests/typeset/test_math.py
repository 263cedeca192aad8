"""
Tests for typeset.math

Test Coverage:
- wrap_markup(): Display/text directives
- to_mathtext(): Directive translation
- render_math(): Rasterization, determinism and malformed-markup fallback
"""
import pytest

from worksheet_mirror.typeset import MathMode, render_math, to_mathtext, wrap_markup


class TestWrapMarkup:
    """Tests for wrap_markup()."""

    def test_wrap_markup_when_block_then_display_directive(self):
        assert wrap_markup(" x^2 ", MathMode.BLOCK) == r"\displaystyle{ x^2 }"

    def test_wrap_markup_when_inline_then_text_directive(self):
        assert wrap_markup("x^2", MathMode.INLINE) == r"\textstyle{ x^2 }"

    def test_wrap_markup_when_already_wrapped_then_unchanged(self):
        wrapped = r"\displaystyle{ \frac{1}{2} }"
        assert wrap_markup(wrapped, MathMode.BLOCK) == wrapped


class TestToMathtext:
    """Tests for to_mathtext()."""

    def test_to_mathtext_when_block_then_display_fractions(self):
        wrapped = wrap_markup(r"\frac{1}{2} + \frac{1}{3}", MathMode.BLOCK)
        assert to_mathtext(wrapped, MathMode.BLOCK) == r"$\dfrac{1}{2} + \dfrac{1}{3}$"

    def test_to_mathtext_when_inline_then_fractions_kept(self):
        wrapped = wrap_markup(r"\frac{1}{2}", MathMode.INLINE)
        assert to_mathtext(wrapped, MathMode.INLINE) == r"$\frac{1}{2}$"

    def test_to_mathtext_when_bare_dollar_then_escaped(self):
        wrapped = wrap_markup("5$", MathMode.INLINE)
        assert to_mathtext(wrapped, MathMode.INLINE) == r"$5\$$"

    def test_to_mathtext_when_empty_then_empty_string(self):
        assert to_mathtext(wrap_markup("   ", MathMode.BLOCK), MathMode.BLOCK) == ""


class TestRenderMath:
    """Tests for render_math()."""

    def test_render_math_when_valid_then_typeset(self):
        run = render_math(r"\frac{1}{2} + \frac{1}{3}", MathMode.BLOCK, font_size=12)

        assert run.is_fallback is False
        assert run.typeset_string.startswith("$")
        assert run.width > 0
        assert run.height > 0
        assert run.mask.mode == "L"

    def test_render_math_when_malformed_then_falls_back_to_raw_text(self):
        """Unbalanced braces never raise; the raw markup is shown instead."""
        run = render_math(r"\frac{1}{2", MathMode.BLOCK, font_size=12)

        assert run.is_fallback is True
        assert run.typeset_string == r"\frac{1}{2"
        assert run.width > 1
        assert run.mask.getbbox() is not None

    def test_render_math_when_repeated_then_identical_pixels(self):
        first = render_math("x^2 + 2x + 1", MathMode.INLINE, font_size=14, scale=2)
        second = render_math("x^2 + 2x + 1", MathMode.INLINE, font_size=14, scale=2)

        assert first.mask.size == second.mask.size
        assert first.mask.tobytes() == second.mask.tobytes()
        assert first.depth == second.depth

    def test_render_math_when_scaled_then_larger(self):
        small = render_math("x^2", MathMode.INLINE, font_size=12, scale=1)
        large = render_math("x^2", MathMode.INLINE, font_size=12, scale=2)

        assert large.height > small.height
        assert large.width > small.width

    def test_render_math_when_empty_then_blank_run(self):
        run = render_math("", MathMode.BLOCK, font_size=12)

        assert run.is_fallback is False
        assert run.typeset_string == ""
        assert run.width == 1
        assert run.mask.getbbox() is None

    @pytest.mark.parametrize("mode", [MathMode.INLINE, MathMode.BLOCK])
    def test_render_math_when_rendered_then_ascent_plus_depth_is_height(self, mode):
        run = render_math(r"\sqrt{y_1}", mode, font_size=16)
        assert run.ascent + run.depth == run.height
