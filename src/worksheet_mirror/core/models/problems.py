"""
Module: problems

Purpose:
    Provides the ProblemRecord dataclass - one generated problem as parsed
    from a text-generation source, before it has any page geometry.

Dependencies:
    - dataclasses (std)
    - .elements.ElementType

Used By:
    - ingest.blocks: Problem block parsing
    - synthesis.synthesizer: Layout synthesis
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .elements import ElementType

PROBLEM_RECORD_TYPES = (ElementType.PROBLEM, ElementType.WORD_PROBLEM)


@dataclass(frozen=True, slots=True)
class ProblemRecord:
    """
    A generated problem without geometry (immutable).

    Attributes:
        type: PROBLEM (pure expression) or WORD_PROBLEM (prose with math)
        content: Problem text/markup as generated
        solution: Answer text, None when absent
        skill: Skill tag shown in the answer key, None when absent

    Example:
        >>> rec = ProblemRecord(ElementType.PROBLEM, r"\\frac{1}{2} + \\frac{1}{3}", "5/6")
        >>> rec.is_word_problem
        False
    """

    type: ElementType
    content: str
    solution: Optional[str] = None
    skill: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate record type on construction."""
        if self.type not in PROBLEM_RECORD_TYPES:
            raise ValueError(f"type must be problem or word_problem: {self.type}")

    @property
    def is_word_problem(self) -> bool:
        return self.type is ElementType.WORD_PROBLEM
