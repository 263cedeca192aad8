"""
Module: output

Purpose:
    Export of rendered worksheet pages to PDF and PNG.

Key Functions:
    - render_to_pdf(): Multi-page PDF export
    - save_png(): Single page PNG export

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling

Used By:
    - controller: Pipeline orchestration
"""

from .renderer import render_to_pdf, save_png

__all__ = [
    "render_to_pdf",
    "save_png",
]
