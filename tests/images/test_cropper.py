"""
Tests for images.cropper

Test Coverage:
- crop_to_rect(): Region cropping from a page raster
- Bounds validation
"""
import pytest
from PIL import Image

from worksheet_mirror.core.models import PixelRect
from worksheet_mirror.images import crop_to_rect


@pytest.fixture
def page():
    """Create sample page raster."""
    return Image.new("RGB", (794, 1123), color="white")


def test_crop_to_rect_basic(page):
    """Crops region using rect."""
    # Arrange
    rect = PixelRect(x=10, y=100, width=300, height=200)

    # Act
    result = crop_to_rect(page, rect)

    # Assert
    assert result.size == (300, 200)


def test_crop_to_rect_copies_pixels(source_page):
    result = crop_to_rect(source_page, PixelRect(390, 0, 14, 10))

    assert result.getpixel((0, 0)) == (255, 0, 0)
    assert result.getpixel((13, 0)) == (0, 0, 255)


def test_crop_to_rect_full_page(page):
    result = crop_to_rect(page, PixelRect(0, 0, 794, 1123))

    assert result.size == page.size


def test_crop_to_rect_beyond_right_edge(page):
    with pytest.raises(ValueError, match="exceeds image width"):
        crop_to_rect(page, PixelRect(700, 0, 100, 10))


def test_crop_to_rect_beyond_bottom_edge(page):
    with pytest.raises(ValueError, match="exceeds image height"):
        crop_to_rect(page, PixelRect(0, 1100, 10, 24))


def test_crop_to_rect_negative_origin(page):
    with pytest.raises(ValueError, match="negative"):
        crop_to_rect(page, PixelRect(-1, 0, 10, 10))


def test_crop_to_rect_empty(page):
    with pytest.raises(ValueError, match="empty"):
        crop_to_rect(page, PixelRect(0, 0, 0, 10))
