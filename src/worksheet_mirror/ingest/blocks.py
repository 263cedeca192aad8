"""
Module: ingest.blocks

Purpose:
    Parse the delimited plain-text grammar producers emit instead of JSON:

        ---TITLE---
        Algebra Review
        ---ELEMENT---
        Type: problem
        Box: [100, 50, 200, 450]
        Content: \\( x^2 + 5 = 10 \\)
        Mirrored: \\( y^2 - 3 = 13 \\)
        Solution: \\( y = \\pm 4 \\)

    Blocks start with ---ELEMENT--- (analysis output, with geometry) or
    ---PROBLEM--- (generated problems, no geometry). Field labels may
    appear in any order; a value runs until the next label or block.

Key Functions:
    - parse_text_block(): Text -> BlockDocument
    - parse_box(): "Box:" value -> four numbers
    - problem_records(): PROBLEM blocks -> ProblemRecord list

Key Classes:
    - TextBlock: Fields of one block
    - BlockDocument: Title plus blocks in source order

Dependencies:
    - re (std)

Used By:
    - ingest: Analysis ingestion
    - controller: Topic worksheet generation
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from worksheet_mirror.core.models import ElementType, ProblemRecord

from .text import is_placeholder, optional_text, strip_code_fences

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Generated Worksheet"

ELEMENT_MARKER = "---ELEMENT---"
PROBLEM_MARKER = "---PROBLEM---"
TITLE_MARKER = "---TITLE---"

_TITLE_PATTERN = re.compile(r"---TITLE---\s*\n?(.*?)\n?---(?:PROBLEM|ELEMENT)---", re.DOTALL)
_TITLE_ONLY_PATTERN = re.compile(r"---TITLE---\s*\n?(.*)", re.DOTALL)
_BLOCK_PATTERN = re.compile(r"---(ELEMENT|PROBLEM)---")
_FIELD_PATTERN = re.compile(
    r"^[ \t]*(type|box|content|mirrored(?:[ \t]*content)?|solution|skill)[ \t]*:",
    re.IGNORECASE | re.MULTILINE,
)
_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class TextBlock:
    """
    One ---ELEMENT--- or ---PROBLEM--- block.

    Attributes:
        kind: "ELEMENT" or "PROBLEM"
        fields: Lower-case field name -> raw value (type, box, content,
            mirrored, solution, skill)
        index: Position among all blocks
    """

    kind: str
    fields: Dict[str, str] = field(default_factory=dict)
    index: int = 0

    def get(self, name: str) -> Optional[str]:
        return self.fields.get(name)


@dataclass(frozen=True)
class BlockDocument:
    """Parsed delimited text: title plus blocks in source order."""

    title: str
    blocks: Tuple[TextBlock, ...] = ()
    has_title: bool = False

    @property
    def element_blocks(self) -> Tuple[TextBlock, ...]:
        return tuple(b for b in self.blocks if b.kind == "ELEMENT")

    @property
    def problem_blocks(self) -> Tuple[TextBlock, ...]:
        return tuple(b for b in self.blocks if b.kind == "PROBLEM")


def looks_like_block_text(text: str) -> bool:
    """True when text uses the delimited grammar rather than JSON."""
    return any(marker in text for marker in (ELEMENT_MARKER, PROBLEM_MARKER, TITLE_MARKER))


def _field_name(label: str) -> str:
    name = label.lower()
    return "mirrored" if name.startswith("mirrored") else name


def _parse_fields(body: str) -> Dict[str, str]:
    """Slice a block body between field labels; the first label wins."""
    fields: Dict[str, str] = {}
    matches = list(_FIELD_PATTERN.finditer(body))
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(body)
        name = _field_name(match.group(1))
        if name in fields:
            logger.debug(f"Repeated field '{name}' ignored")
            continue
        fields[name] = body[match.end():end].strip()
    return fields


def parse_text_block(text: str) -> BlockDocument:
    """
    Parse delimited producer text.

    Code fences are stripped first. Text before the first block marker
    (other than the title) is ignored.

    Args:
        text: Raw producer output

    Returns:
        BlockDocument; the title defaults to "Generated Worksheet"

    Example:
        >>> doc = parse_text_block("---TITLE---\\nFractions\\n---PROBLEM---\\nType: problem\\nContent: 1/2")
        >>> doc.title, doc.blocks[0].get("content")
        ('Fractions', '1/2')
    """
    cleaned = strip_code_fences(text)

    title = DEFAULT_TITLE
    has_title = False
    match = _TITLE_PATTERN.search(cleaned) or _TITLE_ONLY_PATTERN.search(cleaned)
    if match and match.group(1).strip():
        title = match.group(1).strip()
        has_title = True

    parts = _BLOCK_PATTERN.split(cleaned)
    blocks: List[TextBlock] = []
    # parts = [preamble, kind, body, kind, body, ...]
    for i in range(1, len(parts) - 1, 2):
        blocks.append(TextBlock(kind=parts[i], fields=_parse_fields(parts[i + 1]), index=len(blocks)))

    logger.debug(f"Parsed {len(blocks)} block(s), title={title!r}")
    return BlockDocument(title=title, blocks=tuple(blocks), has_title=has_title)


def parse_box(value: Optional[str]) -> Optional[List[float]]:
    """
    Read the numbers of a "Box:" value.

    Returns:
        All numbers found (the caller validates the count), or None when
        the value is missing or holds no numbers

    Example:
        >>> parse_box("[100, 50, 200, 450]")
        [100.0, 50.0, 200.0, 450.0]
    """
    if value is None or is_placeholder(value):
        return None
    numbers = [float(n) for n in _NUMBER_PATTERN.findall(value)]
    return numbers or None


def block_to_record(block: TextBlock) -> Dict[str, object]:
    """Convert an ELEMENT block into a wire-format record for ingestion."""
    record: Dict[str, object] = {
        "id": f"el{block.index}",
        "type": block.get("type"),
        "content": block.get("content") or "",
    }
    box = parse_box(block.get("box"))
    if box is not None:
        record["boundingBox"] = box
    for name, key in (("mirrored", "mirroredContent"), ("solution", "solution"), ("skill", "skill")):
        value = optional_text(block.get(name))
        if value is not None:
            record[key] = value
    return record


def problem_records(
    document: BlockDocument,
    warnings: Optional[List[str]] = None,
) -> List[ProblemRecord]:
    """
    Convert PROBLEM blocks into problem records, in source order.

    A missing or unknown Type defaults to problem. Blocks without a
    Content field are skipped.

    Args:
        document: Parsed document
        warnings: Optional list collecting skip messages

    Returns:
        ProblemRecord list
    """
    records: List[ProblemRecord] = []
    for block in document.problem_blocks:
        content = block.get("content")
        if content is None:
            message = f"problem block {block.index}: no Content field, skipped"
            logger.warning(message)
            if warnings is not None:
                warnings.append(message)
            continue
        raw_type = (block.get("type") or "").strip().lower()
        record_type = ElementType.WORD_PROBLEM if raw_type == "word_problem" else ElementType.PROBLEM
        records.append(ProblemRecord(
            record_type,
            content,
            optional_text(block.get("solution")),
            optional_text(block.get("skill")),
        ))
    return records
