"""
Module: ingest

Purpose:
    Turn raw producer output (image-analysis JSON or the delimited text
    grammar) into validated LayoutElements. Ingestion never fails on a bad
    element: faults are recorded in IngestResult.warnings and rendering
    continues with whatever survived, possibly an empty page.

Key Functions:
    - ingest_analysis(): Producer text -> IngestResult
    - parse_text_block(): Delimited grammar parser
    - problem_records(): PROBLEM blocks -> ProblemRecord list

Key Classes:
    - IngestResult: Title, elements, warnings

Used By:
    - controller: Mirror and topic worksheet builds
"""

from __future__ import annotations

import logging

from .blocks import (
    DEFAULT_TITLE,
    BlockDocument,
    TextBlock,
    block_to_record,
    looks_like_block_text,
    parse_box,
    parse_text_block,
    problem_records,
)
from .records import (
    IngestError,
    IngestResult,
    element_from_record,
    elements_from_records,
    parse_structured,
)
from .text import strip_code_fences

logger = logging.getLogger(__name__)

MISSING_TITLE_WARNING = "Producer output has no title"


def ingest_analysis(text: str) -> IngestResult:
    """
    Ingest image-analysis output in either supported format.

    The delimited grammar is detected by its markers; anything else is
    treated as JSON.

    Args:
        text: Raw producer output

    Returns:
        IngestResult with elements in source order

    Example:
        >>> result = ingest_analysis(open("analysis.txt").read())
        >>> len(result.elements), len(result.warnings)
        (12, 1)
    """
    result = IngestResult()

    if looks_like_block_text(text):
        document = parse_text_block(text)
        if document.has_title:
            result.title = document.title
        else:
            result.warn(MISSING_TITLE_WARNING)
        if document.problem_blocks:
            result.warn(
                f"{len(document.problem_blocks)} PROBLEM block(s) in analysis output ignored"
            )
        records = [block_to_record(block) for block in document.element_blocks]
    else:
        try:
            result.title, records = parse_structured(text)
        except IngestError as e:
            result.warn(f"Could not parse producer output: {e}")
            records = []
        else:
            if result.title is None:
                result.warn(MISSING_TITLE_WARNING)

    elements_from_records(records, result)
    if not result.elements:
        result.warn("Producer output contained no usable elements")

    logger.info(
        f"Ingested {len(result.elements)} element(s) with {len(result.warnings)} warning(s)"
    )
    return result


__all__ = [
    "DEFAULT_TITLE",
    "MISSING_TITLE_WARNING",
    "BlockDocument",
    "TextBlock",
    "block_to_record",
    "looks_like_block_text",
    "parse_box",
    "parse_text_block",
    "problem_records",
    "IngestError",
    "IngestResult",
    "element_from_record",
    "elements_from_records",
    "parse_structured",
    "strip_code_fences",
    "ingest_analysis",
]
