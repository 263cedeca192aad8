"""
Module: images.cropper

Purpose:
    Cut the diagram viewport out of a full-page source raster.
    Crops with bounds validation so a bad rectangle fails loudly instead
    of padding with black.

Key Functions:
    - crop_to_rect(): Crop one pixel rectangle

Dependencies:
    - PIL: Image manipulation
    - worksheet_mirror.core.models.geometry: PixelRect

Used By:
    - layout.compositor: Diagram elements
"""

from __future__ import annotations

from PIL import Image

from worksheet_mirror.core.models import PixelRect


def crop_to_rect(source: Image.Image, rect: PixelRect) -> Image.Image:
    """
    Crop a region from a page raster.

    Args:
        source: Page raster at the render pixel size
        rect: Region to crop, in the same pixels

    Returns:
        Cropped image (new copy, not a view)

    Raises:
        ValueError: If rect lies outside the image or is empty

    Example:
        >>> crop = crop_to_rect(page, PixelRect(10, 20, 100, 50))
        >>> crop.size
        (100, 50)
    """
    if rect.x < 0:
        raise ValueError(f"Rect left {rect.x} is negative")
    if rect.y < 0:
        raise ValueError(f"Rect top {rect.y} is negative")
    if rect.width <= 0 or rect.height <= 0:
        raise ValueError(f"Rect is empty: {rect}")
    if rect.right > source.width:
        raise ValueError(f"Rect right {rect.right} exceeds image width {source.width}")
    if rect.bottom > source.height:
        raise ValueError(f"Rect bottom {rect.bottom} exceeds image height {source.height}")

    return source.crop(rect.as_box())
