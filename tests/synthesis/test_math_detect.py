"""
Tests for synthesis.math_detect
"""
import pytest

from worksheet_mirror.synthesis import (
    auto_format_math,
    has_math_delimiters,
    looks_like_prose,
    strip_command_word,
    strip_dollars,
)


class TestAutoFormatMath:
    """Tests for auto_format_math()."""

    def test_auto_format_when_operator_expression_then_wrapped(self):
        assert auto_format_math("What is 3+4 in total?") == r"What is \(3+4\) in total?"

    def test_auto_format_when_plain_number_then_unchanged(self):
        assert auto_format_math("It costs 35 dollars") == "It costs 35 dollars"

    def test_auto_format_when_latex_command_then_wrapped(self):
        assert auto_format_math(r"Share \frac{3}{4} of the cake") == r"Share \(\frac{3}{4}\) of the cake"

    def test_auto_format_when_already_delimited_then_unchanged(self):
        text = r"Find \(x\) when 2+2 is known"
        assert auto_format_math(text) == text

    def test_auto_format_when_empty_then_empty(self):
        assert auto_format_math("") == ""


class TestLooksLikeProse:
    """Tests for looks_like_prose()."""

    @pytest.mark.parametrize("text", [
        "the value of x when 2x = 10",
        "Sam has three apples",
    ])
    def test_looks_like_prose_when_sentence_then_true(self, text):
        assert looks_like_prose(text) is True

    @pytest.mark.parametrize("text", [
        "2x + 3 = 7",
        r"\frac{1}{2} + \sqrt {9}",
        r"5 \text{ apples } + 3",
    ])
    def test_looks_like_prose_when_expression_then_false(self, text):
        assert looks_like_prose(text) is False


class TestStripping:
    """Tests for strip_command_word() and strip_dollars()."""

    @pytest.mark.parametrize("text,expected", [
        ("Simplify: 3x + 2x", "3x + 2x"),
        ("solve 2x = 4", "2x = 4"),
        ("Evaluate:5^2", "5^2"),
        ("Findings: 3", "Findings: 3"),
    ])
    def test_strip_command_word(self, text, expected):
        assert strip_command_word(text) == expected

    def test_strip_dollars_removes_plain_and_escaped(self):
        assert strip_dollars(r"$3 + \$4") == "3 + 4"

    def test_has_math_delimiters(self):
        assert has_math_delimiters(r"\[x\]") is True
        assert has_math_delimiters("x + 1") is False
