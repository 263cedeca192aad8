"""
Tests for layout.compositor

Test Coverage:
- render_page(): Page size, determinism, blank pages
- Mirrored view selection
- Answer blocks for default text types only
- Diagram crops and placeholders
- Response area rules
- Malformed math never aborts a render
"""
import pytest
from PIL import Image, ImageChops

from worksheet_mirror.core.models import ElementStyle, ElementType
from worksheet_mirror.layout import PageConfig, RenderOptions, render_page, shows_answer

SCALE_ONE = PageConfig(scale=1)


def _same(a: Image.Image, b: Image.Image) -> bool:
    return ImageChops.difference(a, b).getbbox() is None


def _blank(config: PageConfig = SCALE_ONE) -> Image.Image:
    return Image.new("RGB", config.pixel_size, "white")


@pytest.fixture
def mixed_page(make_element):
    """One element of each painted type."""
    return [
        make_element("h", ElementType.HEADER, "Name: ______", box=(20, 50, 60, 450)),
        make_element("q1", ElementType.QUESTION_NUMBER, "1.", box=(100, 50, 130, 90), solution="5/6"),
        make_element("p1", ElementType.PROBLEM, r"\frac{1}{2} + \frac{1}{3}", box=(100, 100, 160, 500),
                     mirrored_content=r"\frac{1}{4} + \frac{1}{5}"),
        make_element("w1", ElementType.WORD_PROBLEM, r"Sam eats \(\frac{1}{4}\) of a pie.",
                     box=(200, 100, 300, 900)),
        make_element("s1", ElementType.SECTION_HEADER, "Part B", box=(320, 50, 360, 900)),
        make_element("r1", ElementType.RESPONSE_AREA, "", box=(380, 100, 440, 900)),
        make_element("d1", ElementType.DIAGRAM, "Triangle ABC", box=(500, 100, 700, 500)),
        make_element("f1", ElementType.FOOTER, "Page 1", box=(950, 400, 980, 600)),
    ]


class TestRenderPage:
    """Page-level rendering behavior."""

    def test_render_when_default_config_then_scaled_page(self):
        page = render_page([])
        assert page.size == (1588, 2246)
        assert page.mode == "RGB"

    def test_render_when_no_elements_then_blank(self):
        assert _same(render_page([], config=SCALE_ONE), _blank())

    def test_render_when_only_white_space_then_blank(self, make_element):
        elements = [make_element("gap", ElementType.WHITE_SPACE, "ignored", box=(0, 0, 1000, 1000))]
        assert _same(render_page(elements, config=SCALE_ONE), _blank())

    def test_render_when_repeated_then_identical_pixels(self, mixed_page):
        options = RenderOptions(mirrored=True, show_answers=True)
        first = render_page(mixed_page, options, config=SCALE_ONE)
        second = render_page(mixed_page, options, config=SCALE_ONE)
        assert _same(first, second)

    def test_render_when_huge_font_size_then_page_still_rendered(self, make_element):
        element = make_element(style=ElementStyle(font_size=20000))

        page = render_page([element], config=SCALE_ONE)

        assert page.size == SCALE_ONE.pixel_size
        assert not _same(page, _blank())

    def test_render_when_malformed_math_then_page_still_rendered(self, make_element):
        elements = [make_element("p", ElementType.PROBLEM, r"\frac{1}{2", box=(100, 100, 200, 900))]
        page = render_page(elements, config=SCALE_ONE)
        assert not _same(page, _blank())

    def test_render_when_empty_problem_then_placeholder_drawn(self, make_element):
        elements = [make_element("p", ElementType.PROBLEM, "   ", box=(100, 100, 200, 900))]
        assert not _same(render_page(elements, config=SCALE_ONE), _blank())


class TestMirroredView:
    """Mirrored content selection at render time."""

    def test_mirrored_when_alternate_present_then_page_differs(self, make_element):
        elements = [make_element("p", ElementType.PROBLEM, "2+2", box=(100, 100, 200, 900),
                                 mirrored_content="37 \\times 91")]
        original = render_page(elements, RenderOptions(mirrored=False), config=SCALE_ONE)
        mirrored = render_page(elements, RenderOptions(mirrored=True), config=SCALE_ONE)
        assert not _same(original, mirrored)

    def test_mirrored_when_no_alternate_then_page_identical(self, make_element):
        elements = [make_element("p", ElementType.PROBLEM, "2+2", box=(100, 100, 200, 900))]
        original = render_page(elements, RenderOptions(mirrored=False), config=SCALE_ONE)
        mirrored = render_page(elements, RenderOptions(mirrored=True), config=SCALE_ONE)
        assert _same(original, mirrored)

    def test_mirrored_when_alternate_matches_other_content_then_same_pixels(self, make_element):
        """Mirroring is exactly a content swap; geometry and style are shared."""
        swapped = [make_element("p", ElementType.PROBLEM, "2+2", box=(100, 100, 200, 900),
                                mirrored_content="3+5")]
        direct = [make_element("p", ElementType.PROBLEM, "3+5", box=(100, 100, 200, 900))]
        assert _same(
            render_page(swapped, RenderOptions(mirrored=True), config=SCALE_ONE),
            render_page(direct, config=SCALE_ONE),
        )


class TestAnswers:
    """Answer blocks."""

    def test_answers_when_instruction_has_solution_then_block_drawn(self, make_element):
        elements = [make_element("i", ElementType.INSTRUCTION, "Work out 2+2", solution="4")]
        hidden = render_page(elements, RenderOptions(show_answers=False), config=SCALE_ONE)
        shown = render_page(elements, RenderOptions(show_answers=True), config=SCALE_ONE)
        assert not _same(hidden, shown)

    def test_answers_when_problem_has_solution_then_nothing_added(self, make_element):
        """Only default text types render answer blocks."""
        elements = [make_element("p", ElementType.PROBLEM, "2+2", box=(100, 100, 200, 900), solution="4")]
        hidden = render_page(elements, RenderOptions(show_answers=False), config=SCALE_ONE)
        shown = render_page(elements, RenderOptions(show_answers=True), config=SCALE_ONE)
        assert _same(hidden, shown)

    def test_answers_when_solution_blank_then_nothing_added(self, make_element):
        elements = [make_element("i", ElementType.INSTRUCTION, "Work out 2+2", solution="  ")]
        hidden = render_page(elements, RenderOptions(show_answers=False), config=SCALE_ONE)
        shown = render_page(elements, RenderOptions(show_answers=True), config=SCALE_ONE)
        assert _same(hidden, shown)

    def test_answers_when_header_has_solution_then_block_drawn(self, make_element):
        elements = [make_element("h", ElementType.HEADER, "Name", box=(20, 50, 60, 450), solution="Ada")]
        hidden = render_page(elements, RenderOptions(show_answers=False), config=SCALE_ONE)
        shown = render_page(elements, RenderOptions(show_answers=True), config=SCALE_ONE)
        assert not _same(hidden, shown)

    @pytest.mark.parametrize("element_type,expected", [
        (ElementType.HEADER, True),
        (ElementType.QUESTION_NUMBER, True),
        (ElementType.INSTRUCTION, True),
        (ElementType.FOOTER, True),
        (ElementType.PROBLEM, False),
        (ElementType.WORD_PROBLEM, False),
        (ElementType.DIAGRAM, False),
    ])
    def test_shows_answer_by_type(self, make_element, element_type, expected):
        assert shows_answer(make_element(element_type=element_type, solution="x = 2")) is expected


class TestDiagram:
    """Diagram crops and placeholders."""

    def test_diagram_when_source_given_then_region_copied(self, make_element, source_page):
        # Arrange - left half of the source is red
        elements = [make_element("d", ElementType.DIAGRAM, "Pie", box=(0, 0, 1000, 500))]

        # Act
        page = render_page(elements, source_image=source_page, config=SCALE_ONE)

        # Assert
        assert page.getpixel((100, 500)) == (255, 0, 0)
        assert page.getpixel((600, 500)) == (255, 255, 255)

    def test_diagram_when_source_is_larger_then_resized_to_page(self, make_element, source_page):
        big_source = source_page.resize((1588, 2246))
        elements = [make_element("d", ElementType.DIAGRAM, "Pie", box=(0, 0, 1000, 500))]

        page = render_page(elements, source_image=big_source, config=SCALE_ONE)

        r, g, b = page.getpixel((100, 500))
        assert r > 240 and g < 15 and b < 15

    def test_diagram_when_bottom_right_corner_then_stays_on_page(self, make_element, source_page):
        elements = [make_element("d", ElementType.DIAGRAM, "Corner", box=(500, 500, 1000, 1000))]

        page = render_page(elements, source_image=source_page, config=SCALE_ONE)

        assert page.size == (794, 1123)
        assert page.getpixel((700, 1000)) == (0, 0, 255)

    def test_diagram_when_no_source_then_placeholder_fill(self, make_element):
        # Arrange - rect x=79, y=225, 318 x 225 at scale 1
        elements = [make_element("d", ElementType.DIAGRAM, "Triangle", box=(200, 100, 400, 500))]

        # Act
        page = render_page(elements, config=SCALE_ONE)

        # Assert - inside the dashed border, away from the centered label
        assert page.getpixel((99, 245)) == (248, 250, 252)
        assert page.getpixel((70, 245)) == (255, 255, 255)


class TestResponseArea:
    """Response area rules."""

    def test_response_area_draws_rule_near_bottom(self, make_element):
        # Arrange - rect y=562, height=56 at scale 1, so the rule occupies rows 612-613
        elements = [make_element("r", ElementType.RESPONSE_AREA, "ignored", box=(500, 100, 550, 900))]

        # Act
        page = render_page(elements, config=SCALE_ONE)

        # Assert
        assert page.getpixel((200, 612)) == (226, 232, 240)
        assert page.getpixel((200, 613)) == (226, 232, 240)
        assert page.getpixel((200, 590)) == (255, 255, 255)
