"""Worksheet Mirror: layout reconstruction and rendering for math worksheets.

Subpackages:
- worksheet_mirror.core – immutable element, geometry and worksheet models
- worksheet_mirror.typeset – math rendering, mixed-content splitting, text flow
- worksheet_mirror.layout – element normalization and page compositing
- worksheet_mirror.ingest – parsing of analysis JSON and delimited text blocks
- worksheet_mirror.synthesis – topic worksheet layout synthesis
- worksheet_mirror.images – source page loading and diagram crops
- worksheet_mirror.output – PDF/PNG export
"""
from importlib.metadata import PackageNotFoundError, version as _pkg_version

try:
    __version__ = _pkg_version("worksheet_mirror")
except PackageNotFoundError:
    # Running from a source checkout without an install
    __version__ = "0.0.0"

__all__: list[str] = ["__version__"]
