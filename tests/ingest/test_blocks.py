"""
Tests for ingest.blocks and ingest.text

Test Coverage:
- strip_code_fences() / is_placeholder()
- parse_text_block(): Title, block kinds, field labels
- parse_box(): Number extraction
- problem_records(): Problem block conversion
"""
import pytest

from worksheet_mirror.core.models import ElementType
from worksheet_mirror.ingest import (
    DEFAULT_TITLE,
    looks_like_block_text,
    parse_box,
    parse_text_block,
    problem_records,
    strip_code_fences,
)
from worksheet_mirror.ingest.text import is_placeholder, optional_text


class TestTextCleanup:
    """Tests for shared text helpers."""

    def test_strip_code_fences_when_json_fence_then_payload_only(self):
        assert strip_code_fences('```json\n{"title": "A"}\n```') == '{"title": "A"}'

    def test_strip_code_fences_when_no_fence_then_trimmed(self):
        assert strip_code_fences("  plain  ") == "plain"

    def test_strip_code_fences_when_backticks_inside_then_kept(self):
        text = "```text\nContent: Type ```x``` here\n```"

        assert strip_code_fences(text) == "Content: Type ```x``` here"

    def test_strip_code_fences_when_only_opening_fence_then_removed(self):
        assert strip_code_fences("```\n---TITLE---\nA") == "---TITLE---\nA"

    @pytest.mark.parametrize("value", [None, "", "  ", "N/A", "none", "NULL", "-"])
    def test_is_placeholder_when_empty_like_then_true(self, value):
        assert is_placeholder(value) is True

    def test_optional_text_when_value_then_stripped(self):
        assert optional_text("  x = 2 ") == "x = 2"
        assert optional_text("n/a") is None


class TestParseTextBlock:
    """Tests for parse_text_block()."""

    def test_parse_when_title_present_then_title_and_blocks(self, analysis_text):
        # Act
        document = parse_text_block(analysis_text)

        # Assert
        assert document.title == "Fractions Practice"
        assert document.has_title is True
        assert len(document.element_blocks) == 4
        assert document.problem_blocks == ()

    def test_parse_when_no_title_then_default(self):
        document = parse_text_block("---PROBLEM---\nType: problem\nContent: 1+1")

        assert document.title == DEFAULT_TITLE
        assert document.has_title is False

    def test_parse_when_fields_multiline_then_value_runs_to_next_label(self):
        text = (
            "---ELEMENT---\n"
            "Content: First line\n"
            "second line\n"
            "Type: instruction\n"
            "Box: [0, 0, 10, 10]\n"
        )
        block = parse_text_block(text).blocks[0]

        assert block.get("content") == "First line\nsecond line"
        assert block.get("type") == "instruction"
        assert block.get("box") == "[0, 0, 10, 10]"

    def test_parse_when_label_repeated_then_first_wins(self):
        text = "---ELEMENT---\nType: header\nContent: A\nContent: B\n"

        assert parse_text_block(text).blocks[0].get("content") == "A"

    def test_parse_when_labels_vary_in_case_then_recognized(self):
        text = "---ELEMENT---\nTYPE: footer\nmirrored content: Seite 1\n"
        block = parse_text_block(text).blocks[0]

        assert block.get("type") == "footer"
        assert block.get("mirrored") == "Seite 1"

    def test_parse_when_fenced_then_fences_removed(self):
        text = "```text\n---TITLE---\nAlgebra\n---PROBLEM---\nContent: x+1\n```"
        document = parse_text_block(text)

        assert document.title == "Algebra"
        assert document.blocks[0].get("content") == "x+1"

    def test_looks_like_block_text(self, analysis_text):
        assert looks_like_block_text(analysis_text) is True
        assert looks_like_block_text('{"elements": []}') is False


class TestParseBox:
    """Tests for parse_box()."""

    def test_parse_box_when_bracketed_then_numbers(self):
        assert parse_box("[100, 50, 200, 450]") == [100.0, 50.0, 200.0, 450.0]

    def test_parse_box_when_decimals_and_negatives_then_kept(self):
        assert parse_box("-5, 10.5, 20, 30") == [-5.0, 10.5, 20.0, 30.0]

    @pytest.mark.parametrize("value", [None, "N/A", "unknown"])
    def test_parse_box_when_no_numbers_then_none(self, value):
        assert parse_box(value) is None


class TestProblemRecords:
    """Tests for problem_records()."""

    def test_problem_records_when_valid_then_in_source_order(self, problems_text):
        records = problem_records(parse_text_block(problems_text))

        assert [r.type for r in records] == [
            ElementType.PROBLEM,
            ElementType.WORD_PROBLEM,
            ElementType.PROBLEM,
        ]
        assert records[0].content == "Solve: 2x + 3 = 7"
        assert records[0].solution == "x = 2"

    def test_problem_records_when_type_missing_then_problem(self):
        records = problem_records(parse_text_block("---PROBLEM---\nContent: 3 + 4"))

        assert records[0].type is ElementType.PROBLEM
        assert records[0].solution is None

    def test_problem_records_when_skill_given_then_kept(self):
        records = problem_records(parse_text_block("---PROBLEM---\nContent: 3 + 4\nSkill: Addition"))

        assert records[0].skill == "Addition"

    def test_problem_records_when_content_missing_then_skipped_with_warning(self):
        warnings = []
        text = "---PROBLEM---\nType: problem\nSolution: 4\n---PROBLEM---\nContent: 2+2"

        records = problem_records(parse_text_block(text), warnings)

        assert len(records) == 1
        assert len(warnings) == 1
        assert "no Content field" in warnings[0]
