"""
Unit tests for the response sanitizer.

Covers every step of the parse chain and the envelope normalization.
"""

import json

import pytest

from content_processor.enums import ParseStrategy
from content_processor.services.processing.sanitizers import (
    empty_envelope,
    parse_response,
    sanitize_response,
    sanitize_theory_blocks,
)
from content_processor.services.processing.sanitizers.response import (
    repair_json,
    strip_fence,
)


class TestParseChain:
    """Tests for parse_response()."""

    @pytest.mark.parametrize("text", ["", "   \n ", None, 42, {"theory": []}])
    def test_blank_or_non_string_falls_back(self, text) -> None:
        parsed = parse_response(text)

        assert parsed.is_fallback
        assert parsed.data is None

    def test_prose_falls_back(self) -> None:
        parsed = parse_response("Sorry, I cannot help with that request.")

        assert parsed.strategy == ParseStrategy.FALLBACK

    def test_direct(self) -> None:
        parsed = parse_response('{"theory": []}')

        assert parsed.strategy == ParseStrategy.DIRECT
        assert parsed.data == {"theory": []}

    def test_fence_stripped(self) -> None:
        parsed = parse_response('```json\n{"theory": [{"title": "t1"}]}\n```')

        assert parsed.strategy == ParseStrategy.FENCE_STRIPPED
        assert parsed.data["theory"][0]["title"] == "t1"

    def test_unterminated_fence(self) -> None:
        """Truncated output without a closing fence still parses."""
        parsed = parse_response('```json\n{"tasks": []}')

        assert parsed.strategy == ParseStrategy.FENCE_STRIPPED
        assert parsed.data == {"tasks": []}

    def test_brace_extracted_from_prose(self) -> None:
        parsed = parse_response('Here you go: {"theory": [{"title": "t1"}]} Enjoy!')

        assert parsed.strategy == ParseStrategy.BRACE_EXTRACTED
        assert parsed.data["theory"][0]["title"] == "t1"

    def test_fenced_body_containing_fences(self) -> None:
        """Code fences inside string values must not cut the object short."""
        body = json.dumps({"theory": [{"content": "```js\nconst a = 1;\n```"}]})
        parsed = parse_response(f"```json\n{body}\n```")

        assert not parsed.is_fallback
        assert parsed.data["theory"][0]["content"].startswith("```js")

    def test_trailing_commas_repaired(self) -> None:
        parsed = parse_response('Result: {"theory": [{"title": "t1",},],}')

        assert parsed.strategy == ParseStrategy.REPAIRED
        assert parsed.data == {"theory": [{"title": "t1"}]}

    def test_bare_newline_in_string_repaired(self) -> None:
        parsed = parse_response('{"theory": [{"title": "line one\nline two"}]}')

        assert parsed.strategy == ParseStrategy.REPAIRED
        assert parsed.data["theory"][0]["title"] == "line one\nline two"

    def test_top_level_array_with_key(self) -> None:
        parsed = parse_response('[{"question": "What is JSX?"}]', array_key="questions")

        assert parsed.strategy == ParseStrategy.DIRECT
        assert parsed.data == {"questions": [{"question": "What is JSX?"}]}

    def test_top_level_array_in_prose_with_key(self) -> None:
        parsed = parse_response('Tasks:\n[{"title": "A"}, {"title": "B"}]', array_key="tasks")

        assert not parsed.is_fallback
        assert [t["title"] for t in parsed.data["tasks"]] == ["A", "B"]


class TestRepairJson:
    """Tests for the syntactic repairs."""

    def test_drops_trailing_commas(self) -> None:
        assert json.loads(repair_json('{"a": [1, 2, ], }')) == {"a": [1, 2]}

    def test_leaves_string_contents_alone(self) -> None:
        text = '{"a": ",]"}'
        assert repair_json(text) == text

    def test_keeps_escaped_quotes(self) -> None:
        assert json.loads(repair_json('{"a": "say \\"hi\\"\n"}')) == {"a": 'say "hi"\n'}

    def test_strip_fence_without_fence(self) -> None:
        assert strip_fence("no fence here") is None


class TestEnvelope:
    """Tests for sanitize_response() and the envelope shape."""

    def test_empty_input_yields_empty_envelope(self) -> None:
        assert sanitize_response("") == empty_envelope()
        assert sanitize_response("") == {
            "logicalBlockInfo": {"suggestedEndLine": -1},
            "theory": [],
            "questions": [],
            "tasks": [],
        }

    def test_only_envelope_keys_survive(self) -> None:
        envelope = sanitize_response('{"theory": [], "extra": 1}')

        assert set(envelope) == {"logicalBlockInfo", "theory", "questions", "tasks"}

    def test_non_list_sections_become_empty(self) -> None:
        envelope = sanitize_response('{"theory": "oops", "questions": {"a": 1}}')

        assert envelope["theory"] == []
        assert envelope["questions"] == []
        assert envelope["tasks"] == []

    @pytest.mark.parametrize(
        "value,expected",
        [
            (42, 42),
            ("17", 17),
            (12.0, 12),
            (0, 0),
            (3.5, -1),
            (True, -1),
            (-5, -1),
            ("x", -1),
            (None, -1),
        ],
    )
    def test_suggested_end_line(self, value, expected) -> None:
        text = json.dumps({"logicalBlockInfo": {"suggestedEndLine": value}, "theory": []})

        envelope = sanitize_response(text)

        assert envelope["logicalBlockInfo"]["suggestedEndLine"] == expected

    def test_trailing_comma_with_prose_expands_theory(self) -> None:
        """A repaired theory entry is expanded into a complete block."""
        envelope = sanitize_response('Output: {"theory": [{"title": "t1",},],}')

        blocks = sanitize_theory_blocks(envelope["theory"])

        assert len(blocks) == 1
        assert blocks[0].title == "t1"
        assert blocks[0].id.startswith("theory_")
        assert len(blocks[0].examples) == 1
        assert blocks[0].complexity == 5
