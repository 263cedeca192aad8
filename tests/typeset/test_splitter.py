"""
Tests for typeset.splitter

Test Coverage:
- split_mixed_content(): Fragment kinds, order and text
- rule_width(): Width per underscore with a floor
- plain_reading_text(): Reading order reconstruction
"""
import pytest

from worksheet_mirror.typeset import (
    Fragment,
    FragmentKind,
    plain_reading_text,
    rule_width,
    split_mixed_content,
)


def test_split_inline_math_between_prose():
    """Inline math keeps its position between plain spans."""
    # Act
    fragments = split_mixed_content(r"Solve \(x+1=3\) for x")

    # Assert
    assert fragments == [
        Fragment(FragmentKind.PLAIN_TEXT, "Solve "),
        Fragment(FragmentKind.INLINE_MATH, "x+1=3"),
        Fragment(FragmentKind.PLAIN_TEXT, " for x"),
    ]


def test_split_block_math():
    fragments = split_mixed_content(r"Work out \[\frac{1}{2}\]")

    assert [f.kind for f in fragments] == [FragmentKind.PLAIN_TEXT, FragmentKind.BLOCK_MATH]
    assert fragments[1].text == r"\frac{1}{2}"


def test_split_underscore_runs_become_rules():
    """Two or more underscores are a fill-in rule; one is plain text."""
    fragments = split_mixed_content("Name: ______ and a_b")

    assert fragments == [
        Fragment(FragmentKind.PLAIN_TEXT, "Name: "),
        Fragment(FragmentKind.RULE, "______"),
        Fragment(FragmentKind.PLAIN_TEXT, " and a_b"),
    ]
    assert fragments[1].run_length == 6


def test_split_unescapes_dollar_in_plain_text():
    fragments = split_mixed_content(r"It costs \$5")

    assert fragments == [Fragment(FragmentKind.PLAIN_TEXT, "It costs $5")]


def test_split_leaves_math_body_untouched():
    """Escaped dollars inside math stay escaped for the typesetter."""
    fragments = split_mixed_content(r"\(\$5 + x\)")

    assert fragments == [Fragment(FragmentKind.INLINE_MATH, r"\$5 + x")]


def test_split_math_does_not_span_lines():
    """A delimiter pair broken by a newline stays plain text."""
    fragments = split_mixed_content("\\(x\n\\)")

    assert all(f.kind is FragmentKind.PLAIN_TEXT for f in fragments)


def test_split_adjacent_spans_drop_empty_text():
    fragments = split_mixed_content(r"\(a\)\(b\)")

    assert [f.kind for f in fragments] == [FragmentKind.INLINE_MATH, FragmentKind.INLINE_MATH]


def test_split_empty_string_returns_nothing():
    assert split_mixed_content("") == []


def test_split_non_greedy_pairs():
    """Each opening delimiter closes at the nearest closing delimiter."""
    fragments = split_mixed_content(r"\(a\) and \(b\)")

    assert [f.text for f in fragments] == ["a", " and ", "b"]


def test_plain_reading_text_strips_delimiters_only():
    """Concatenated fragments reproduce the input without math delimiters."""
    text = r"Find \(x\) if ___ equals \[y^2\]."

    assert plain_reading_text(split_mixed_content(text)) == "Find x if ___ equals y^2."


@pytest.mark.parametrize("run_length,expected", [
    (6, 48),
    (20, 160),
    (5, 40),
    (2, 40),
])
def test_rule_width(run_length, expected):
    assert rule_width(run_length) == expected


def test_rule_width_custom_factor():
    assert rule_width(10, px_per_char=5, min_width=20) == 50
