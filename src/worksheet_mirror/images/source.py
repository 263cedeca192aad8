"""
Module: images.source

Purpose:
    Load the original page a worksheet was analysed from. Raster files are
    opened with Pillow; PDFs have their first page rasterized with PyMuPDF
    at the page DPI. The result is always RGB at the render pixel size so
    diagram crops line up with normalized geometry.

Key Functions:
    - load_source_image(): Path -> page-sized RGB image

Key Classes:
    - SourceImageError: Source page missing or unreadable

Dependencies:
    - PIL: Raster decoding and resizing
    - fitz (PyMuPDF): PDF rasterization

Used By:
    - controller: Diagram crops for mirror worksheets
"""

from __future__ import annotations

import logging
from pathlib import Path

import fitz
from PIL import Image, UnidentifiedImageError

from worksheet_mirror.layout.config import PageConfig

logger = logging.getLogger(__name__)

PDF_SUFFIXES = {".pdf"}


class SourceImageError(Exception):
    """Source page image missing or unreadable."""
    pass


def _render_pdf_page(path: Path, dpi: int) -> Image.Image:
    """Rasterize the first page of a PDF."""
    with fitz.open(path) as doc:
        if doc.page_count == 0:
            raise SourceImageError(f"PDF has no pages: {path}")
        page = doc[0]
        matrix = fitz.Matrix(dpi / 72.0, dpi / 72.0)
        pix = page.get_pixmap(matrix=matrix, alpha=False, colorspace=fitz.csRGB)
        return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def load_source_image(path: Path, config: PageConfig = PageConfig()) -> Image.Image:
    """
    Load a source page and fit it to the page surface.

    The page is stretched to exactly config.pixel_size; source pages are
    A4 scans, so the aspect change is negligible and geometry stays exact.

    Args:
        path: PNG/JPEG/... raster or PDF
        config: Page configuration

    Returns:
        RGB image of config.pixel_size

    Raises:
        SourceImageError: If the file is missing or cannot be decoded
    """
    path = Path(path)
    if not path.exists():
        raise SourceImageError(f"Source image not found: {path}")

    try:
        if path.suffix.lower() in PDF_SUFFIXES:
            image = _render_pdf_page(path, config.dpi)
        else:
            with Image.open(path) as img:
                image = img.convert("RGB")
    except SourceImageError:
        raise
    except (UnidentifiedImageError, OSError, RuntimeError, ValueError) as e:
        raise SourceImageError(f"Cannot read source image {path}: {e}") from e

    if image.size != config.pixel_size:
        logger.debug(f"Resizing source {image.size} -> {config.pixel_size}")
        image = image.resize(config.pixel_size, Image.Resampling.LANCZOS)

    logger.info(f"Loaded source page: {path.name}")
    return image
