"""
Tests for layout.answer_key

Test Coverage:
- answer_key_entries(): Problem numbering in source order
- has_answer_key(): Only problem solutions count
- render_answer_key(): Page size, determinism, solutions, mirrored columns
- Pagination of long answer keys
"""
import pytest
from PIL import Image, ImageChops

from worksheet_mirror.core.models import ElementType
from worksheet_mirror.layout import (
    PageConfig,
    RenderOptions,
    answer_key_entries,
    has_answer_key,
    render_answer_key,
)

SCALE_ONE = PageConfig(scale=1)


def _same(a: Image.Image, b: Image.Image) -> bool:
    return ImageChops.difference(a, b).getbbox() is None


def _blank() -> Image.Image:
    return Image.new("RGB", SCALE_ONE.pixel_size, "white")


@pytest.fixture
def problem_elements(make_element):
    """A numbered equation and word problem with solutions and skills."""
    return [
        make_element("h", ElementType.HEADER, "Name: ______", box=(20, 50, 60, 450)),
        make_element("q0", ElementType.QUESTION_NUMBER, "1.", box=(170, 50, 200, 90)),
        make_element("p0", ElementType.PROBLEM, r"\frac{1}{2} + \frac{1}{3}",
                     box=(170, 100, 482, 470),
                     mirrored_content=r"\frac{1}{4} + \frac{1}{5}", solution=r"\(\frac{5}{6}\)",
                     skill="Adding fractions"),
        make_element("q1", ElementType.QUESTION_NUMBER, "2.", box=(170, 530, 200, 570)),
        make_element("p1", ElementType.WORD_PROBLEM, r"Sam eats \(\frac{1}{4}\) of a pie.",
                     box=(170, 580, 482, 950), solution="3/4 is left"),
    ]


class TestAnswerKeyEntries:
    """Tests for answer_key_entries() and has_answer_key()."""

    def test_entries_when_mixed_types_then_problems_numbered_in_order(self, problem_elements):
        entries = answer_key_entries(problem_elements)

        assert [entry.element.id for entry in entries] == ["p0", "p1"]
        assert [entry.label for entry in entries] == ["01", "02"]

    def test_entry_skill_when_missing_then_generic_subject(self, problem_elements):
        first, second = answer_key_entries(problem_elements)

        assert first.skill == "Adding fractions"
        assert second.skill == "Mathematics"

    def test_has_answer_key_when_problem_solution_then_true(self, problem_elements):
        assert has_answer_key(problem_elements) is True

    def test_has_answer_key_when_only_text_solution_then_false(self, make_element):
        elements = [
            make_element("q", ElementType.QUESTION_NUMBER, "1.", solution="5/6"),
            make_element("p", ElementType.PROBLEM, "1+1", solution="  "),
        ]

        assert has_answer_key(elements) is False


class TestRenderAnswerKey:
    """Tests for render_answer_key()."""

    def test_render_when_problems_then_single_page_of_page_size(self, problem_elements):
        # Act
        pages = render_answer_key(problem_elements, title="Fractions", config=SCALE_ONE)

        # Assert
        assert len(pages) == 1
        assert pages[0].size == SCALE_ONE.pixel_size
        assert not _same(pages[0], _blank())

    def test_render_when_repeated_then_identical_pixels(self, problem_elements):
        options = RenderOptions(mirrored=True, show_answers=True)

        first = render_answer_key(problem_elements, options, title="Fractions", config=SCALE_ONE)
        second = render_answer_key(problem_elements, options, title="Fractions", config=SCALE_ONE)

        assert _same(first[0], second[0])

    def test_render_when_answers_hidden_then_solutions_omitted(self, problem_elements):
        shown = render_answer_key(problem_elements, RenderOptions(show_answers=True), config=SCALE_ONE)
        hidden = render_answer_key(problem_elements, RenderOptions(show_answers=False), config=SCALE_ONE)

        assert not _same(shown[0], hidden[0])

    def test_render_when_no_solutions_then_answers_flag_changes_nothing(self, make_element):
        elements = [make_element("p", ElementType.PROBLEM, "2x + 3 = 7")]

        shown = render_answer_key(elements, RenderOptions(show_answers=True), config=SCALE_ONE)
        hidden = render_answer_key(elements, RenderOptions(show_answers=False), config=SCALE_ONE)

        assert _same(shown[0], hidden[0])

    def test_render_when_mirrored_then_columns_differ(self, problem_elements):
        single = render_answer_key(problem_elements, RenderOptions(mirrored=False), config=SCALE_ONE)
        paired = render_answer_key(problem_elements, RenderOptions(mirrored=True), config=SCALE_ONE)

        assert not _same(single[0], paired[0])

    def test_render_when_many_problems_then_paginated(self, make_element):
        elements = [
            make_element(f"p{i}", ElementType.WORD_PROBLEM,
                         "A train travels 60 miles in 2 hours. Find its speed in miles per hour.",
                         solution="30 mph")
            for i in range(40)
        ]

        pages = render_answer_key(elements, title="Speed", config=SCALE_ONE)

        assert len(pages) > 1
        assert all(page.size == SCALE_ONE.pixel_size for page in pages)

    def test_render_when_no_problems_then_title_page_only(self, make_element):
        pages = render_answer_key([make_element()], title="Empty", config=SCALE_ONE)

        assert len(pages) == 1
        assert not _same(pages[0], _blank())

    def test_render_when_empty_problem_then_placeholder_card(self, make_element):
        elements = [make_element("p", ElementType.PROBLEM, "   ")]

        pages = render_answer_key(elements, config=SCALE_ONE)

        assert len(pages) == 1
        assert not _same(pages[0], _blank())
