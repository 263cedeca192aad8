"""
Module: output.renderer

Purpose:
    Export rendered page images. Each page becomes one PDF page with the
    image drawn full-bleed, so the PDF shows exactly the composited
    pixels; pages can also be written as PNG files.

Key Functions:
    - render_to_pdf(): Page images -> multi-page PDF
    - save_png(): One page image -> PNG file

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - layout.config: PageConfig

Used By:
    - controller: Pipeline orchestration
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from worksheet_mirror.layout.config import PageConfig

logger = logging.getLogger(__name__)


def render_to_pdf(
    pages: Sequence[Image.Image],
    output_path: Path,
    *,
    config: PageConfig = PageConfig(),
    title: Optional[str] = None,
) -> None:
    """
    Write page images to a PDF file.

    The PDF page size is the reference page at the reference DPI (A4), so
    images rendered at any scale keep their physical size.

    Args:
        pages: Rendered page images, in order
        output_path: Path to write PDF
        config: Page configuration the images were rendered with
        title: Optional PDF document title

    Raises:
        IOError: If PDF cannot be written

    Example:
        >>> render_to_pdf([original, mirrored], Path("out/worksheet.pdf"))
    """
    if not pages:
        logger.warning("No pages to render, creating empty PDF")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    page_width_pt = _px_to_pt(config.pixel_width, config.dpi)
    page_height_pt = _px_to_pt(config.pixel_height, config.dpi)

    c = canvas.Canvas(str(output_path), pagesize=(page_width_pt, page_height_pt))
    if title:
        c.setTitle(title)

    for page in pages:
        c.drawImage(
            _pil_to_reader(page),
            0,
            0,
            width=page_width_pt,
            height=page_height_pt,
        )
        c.showPage()

    c.save()

    logger.info(f"Rendered {len(pages)} page(s) to {output_path}")


def save_png(page: Image.Image, output_path: Path) -> Path:
    """
    Write a page image as PNG.

    Returns:
        The written path
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    page.save(output_path, format="PNG")
    logger.debug(f"Saved page image {output_path}")
    return output_path


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    PNG keeps the page lossless inside the PDF.
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _px_to_pt(px: int, dpi: int) -> float:
    """
    Convert pixels to PDF points.

    PDF points are 1/72 inch.
    """
    return px * 72.0 / dpi
