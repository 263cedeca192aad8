"""
Module: images

Purpose:
    Source page access for diagram elements: loading the original page
    raster and cropping element viewports from it.

Key Functions:
    - load_source_image(): Load and fit a source page
    - crop_to_rect(): Crop a pixel rectangle

Dependencies:
    - PIL: Image manipulation
    - fitz (PyMuPDF): PDF source pages

Used By:
    - layout.compositor: Diagram crops
    - controller: Source loading
"""

from .cropper import crop_to_rect
from .source import SourceImageError, load_source_image

__all__ = [
    "crop_to_rect",
    "SourceImageError",
    "load_source_image",
]
