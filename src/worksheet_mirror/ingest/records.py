"""
Module: ingest.records

Purpose:
    Convert untrusted producer records into LayoutElements. Producers are
    generative models, so every field is checked leniently: recoverable
    faults become warnings and a best-effort element, unrecoverable ones
    drop only the offending element.

Key Classes:
    - IngestResult: Title, elements and collected warnings

Key Functions:
    - parse_structured(): JSON text -> (title, record dicts)
    - element_from_record(): One record dict -> LayoutElement or None
    - elements_from_records(): All records, with id de-duplication

Dependencies:
    - json (std)
    - core.models

Used By:
    - ingest: Analysis ingestion entry point
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field, replace
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from worksheet_mirror.core.models import (
    Alignment,
    BoundingBox,
    ElementStyle,
    ElementType,
    FontFamily,
    FontWeight,
    LayoutElement,
)

from .text import optional_text, strip_code_fences

logger = logging.getLogger(__name__)

DEFAULT_STYLE_FONT_SIZE = 12.0

_JSON_SPAN_PATTERN = re.compile(r"\{[\s\S]*\}|\[[\s\S]*\]")

_KEY_ALIASES = {
    "boundingBox": ("boundingBox", "bounding_box", "box"),
    "mirroredContent": ("mirroredContent", "mirrored_content", "mirrored"),
}


class IngestError(Exception):
    """Producer output could not be parsed at all."""
    pass


@dataclass
class IngestResult:
    """
    Outcome of ingesting producer output.

    Attributes:
        title: Title found in the payload, None when absent
        elements: Elements that survived validation, in source order
        warnings: Human-readable descriptions of recovered faults
    """

    title: Optional[str] = None
    elements: List[LayoutElement] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        """Record and log a recovered fault."""
        self.warnings.append(message)
        logger.warning(message)

    @property
    def ok(self) -> bool:
        return not self.warnings


# ─────────────────────────────────────────────────────────────────────────────
# Structured (JSON) payloads
# ─────────────────────────────────────────────────────────────────────────────

def parse_structured(text: str) -> Tuple[Optional[str], List[Any]]:
    """
    Parse a JSON payload into (title, records).

    Accepts an object {"title": ..., "elements": [...]} or a bare array,
    optionally wrapped in code fences. When the text is not valid JSON the
    first {...} or [...] span is tried.

    Raises:
        IngestError: If no JSON can be recovered
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _JSON_SPAN_PATTERN.search(text)
        if not match:
            raise IngestError("No JSON object or array found in producer output")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise IngestError(f"Invalid JSON in producer output: {e}") from e

    if isinstance(data, list):
        return None, data
    if isinstance(data, dict):
        title = data.get("title")
        elements = data.get("elements") or []
        if not isinstance(elements, list):
            raise IngestError(f"'elements' must be a list, got {type(elements).__name__}")
        return (str(title).strip() if title else None), elements
    raise IngestError(f"Unexpected JSON payload type: {type(data).__name__}")


# ─────────────────────────────────────────────────────────────────────────────
# Record conversion
# ─────────────────────────────────────────────────────────────────────────────

def _lookup(record: Mapping[str, Any], key: str) -> Any:
    for alias in _KEY_ALIASES.get(key, (key,)):
        if alias in record:
            return record[alias]
    return None


def _coerce_type(value: Any, label: str, result: IngestResult) -> ElementType:
    """Unknown or missing types render as plain-text instructions."""
    raw = str(value).strip().lower() if value is not None else ""
    try:
        return ElementType(raw)
    except ValueError:
        result.warn(f"{label}: unknown type {value!r}, rendering as instruction")
        return ElementType.INSTRUCTION


def _coerce_box(value: Any, label: str, result: IngestResult) -> Optional[BoundingBox]:
    if not isinstance(value, Sequence) or isinstance(value, str):
        result.warn(f"{label}: missing or invalid bounding box {value!r}, element dropped")
        return None
    try:
        box, adjusted = BoundingBox.clamped([float(v) for v in value])
    except (TypeError, ValueError) as e:
        result.warn(f"{label}: invalid bounding box {list(value)!r} ({e}), element dropped")
        return None
    if adjusted:
        result.warn(f"{label}: bounding box {list(value)!r} clamped to {box.to_list()}")
    return box


def _coerce_style(value: Any, label: str, result: IngestResult) -> Optional[ElementStyle]:
    """Keep every usable hint; drop the invalid ones with a warning."""
    if value is None:
        return None
    if not isinstance(value, Mapping):
        result.warn(f"{label}: style {value!r} is not an object, ignored")
        return None

    size = DEFAULT_STYLE_FONT_SIZE
    raw_size = value.get("fontSize")
    if raw_size is not None:
        try:
            size = float(raw_size)
            if not (math.isfinite(size) and size > 0):
                raise ValueError(size)
        except (TypeError, ValueError, OverflowError):
            result.warn(f"{label}: invalid fontSize {raw_size!r}, using {DEFAULT_STYLE_FONT_SIZE:g}")
            size = DEFAULT_STYLE_FONT_SIZE

    def enum_hint(enum_cls, key, default):
        raw = value.get(key)
        if raw is None:
            return default
        try:
            return enum_cls(str(raw).strip().lower())
        except ValueError:
            result.warn(f"{label}: invalid {key} {raw!r}, ignored")
            return default

    return ElementStyle(
        font_size=size,
        font_weight=enum_hint(FontWeight, "fontWeight", FontWeight.NORMAL),
        alignment=enum_hint(Alignment, "alignment", Alignment.LEFT),
        font_family=enum_hint(FontFamily, "fontFamily", None),
    )


def element_from_record(
    record: Any,
    index: int,
    result: IngestResult,
) -> Optional[LayoutElement]:
    """
    Convert one producer record into a LayoutElement.

    Args:
        record: Decoded record (expected to be a mapping)
        index: Position in the payload, used for default ids and messages
        result: Collects warnings

    Returns:
        LayoutElement, or None when the record has no usable geometry
    """
    label = f"element {index}"
    if not isinstance(record, Mapping):
        result.warn(f"{label}: record is not an object, skipped")
        return None

    element_id = optional_text(record.get("id")) or f"el{index}"
    label = f"element {index} ({element_id})"

    box = _coerce_box(_lookup(record, "boundingBox"), label, result)
    if box is None:
        return None

    content = record.get("content")
    return LayoutElement(
        id=element_id,
        type=_coerce_type(record.get("type"), label, result),
        content="" if content is None else str(content),
        bounding_box=box,
        mirrored_content=optional_text(_lookup(record, "mirroredContent")),
        solution=optional_text(record.get("solution")),
        skill=optional_text(record.get("skill")),
        style=_coerce_style(record.get("style"), label, result),
    )


def elements_from_records(records: Sequence[Any], result: IngestResult) -> None:
    """
    Convert records in order, appending to result.elements.

    Ids repeated within the page get an index suffix so every element
    stays addressable.
    """
    seen: set[str] = set()
    for index, record in enumerate(records):
        element = element_from_record(record, index, result)
        if element is None:
            continue
        if element.id in seen:
            new_id = f"{element.id}_{index}"
            while new_id in seen:
                new_id = f"{new_id}_"
            result.warn(f"element {index}: duplicate id {element.id!r} renamed to {new_id!r}")
            element = replace(element, id=new_id)
        seen.add(element.id)
        result.elements.append(element)
