import pytest
import sys
from pathlib import Path
from PIL import Image

# Add src to sys.path so we can import worksheet_mirror
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from worksheet_mirror.core.models import (  # noqa: E402
    BoundingBox,
    ElementType,
    LayoutElement,
)


# Common test fixtures
@pytest.fixture
def make_element():
    """Factory for layout elements with sensible defaults."""
    def _make(
        element_id="el0",
        element_type=ElementType.INSTRUCTION,
        content="Answer all questions.",
        box=(100, 100, 150, 900),
        **kwargs,
    ):
        return LayoutElement(
            id=element_id,
            type=element_type,
            content=content,
            bounding_box=BoundingBox(*box),
            **kwargs,
        )
    return _make


@pytest.fixture
def source_page():
    """A reference-size source page: left half red, right half blue."""
    img = Image.new("RGB", (794, 1123), color="blue")
    img.paste("red", (0, 0, 397, 1123))
    return img


@pytest.fixture
def source_page_path(tmp_path: Path, source_page):
    """The source page saved as PNG."""
    path = tmp_path / "scan.png"
    source_page.save(path)
    return path


@pytest.fixture
def analysis_text():
    """Delimited analysis output for a small mirrored page."""
    return (
        "---TITLE---\n"
        "Fractions Practice\n"
        "---ELEMENT---\n"
        "Type: header\n"
        "Box: [20, 50, 60, 450]\n"
        "Content: Name: ____\n"
        "---ELEMENT---\n"
        "Type: question_number\n"
        "Box: [100, 50, 130, 90]\n"
        "Content: 1.\n"
        "Solution: 5/6\n"
        "---ELEMENT---\n"
        "Type: problem\n"
        "Box: [100, 100, 160, 500]\n"
        "Content: \\frac{1}{2} + \\frac{1}{3}\n"
        "Mirrored Content: \\frac{1}{4} + \\frac{1}{5}\n"
        "---ELEMENT---\n"
        "Type: diagram\n"
        "Box: [200, 500, 400, 900]\n"
        "Content: A pie chart\n"
    )


@pytest.fixture
def problems_text():
    """Delimited problem-generation output for a topic worksheet."""
    return (
        "---TITLE---\n"
        "Linear Equations\n"
        "---PROBLEM---\n"
        "Type: problem\n"
        "Content: Solve: 2x + 3 = 7\n"
        "Solution: x = 2\n"
        "---PROBLEM---\n"
        "Type: word_problem\n"
        "Content: Sam buys 3 apples at 2x pence each and pays 90 pence.\n"
        "Solution: x = 15\n"
        "---PROBLEM---\n"
        "Type: problem\n"
        "Content: 5x - 4 = 11\n"
        "Solution: x = 3\n"
    )
