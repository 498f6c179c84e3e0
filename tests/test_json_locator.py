"""Tests for locating a JSON object in free-text model output.

Covers:
- the strategy cascade (direct, fence-stripped, brace-span, marker pairs,
  balanced braces)
- the markdown fallback for numbered objection lists
- total failure raising ExtractionError

Run: pytest tests/test_json_locator.py -v
Markers: unit
"""
import pytest

from pipeline.errors import ExtractionError
from pipeline.json_locator import (
    DEFAULT_OBJECTION_RESPONSE,
    DEFAULT_PROOF_POINT,
    STRATEGIES,
    _marker_pairs,
    _outermost_spans,
    locate_json,
    parse_objection_markdown,
)

pytestmark = pytest.mark.unit


class TestLocateJson:
    @pytest.mark.parametrize("text", [
        '{"a":1}',
        '```json\n{"a":1}\n```',
        'Here is the result:\n{"a":1}\nThanks!',
    ])
    def test_finds_embedded_object(self, text):
        assert locate_json(text) == {"a": 1}

    def test_prose_before_fence(self):
        text = 'Sure! ```json\n{"talkTracks": ["T1"]}\n```'
        assert locate_json(text) == {"talkTracks": ["T1"]}

    def test_heading_before_object(self):
        text = '### Pitch Strategy\n**Draft**\n{"a": {"b": [1, 2]}}'
        assert locate_json(text) == {"a": {"b": [1, 2]}}

    def test_nested_braces_in_strings(self):
        text = 'Result: {"template": "Hi {{first_name}}", "n": 2} -- end'
        assert locate_json(text) == {"template": "Hi {{first_name}}", "n": 2}

    def test_two_objects_uses_balanced_strategy(self):
        # The greedy span covers both objects and fails to parse.
        text = 'First {"a": 1} then {"b": 2}'
        assert locate_json(text) == {"a": 1}

    def test_top_level_array_is_not_an_object(self):
        with pytest.raises(ExtractionError):
            locate_json("[1, 2, 3]")

    def test_no_json_raises(self):
        with pytest.raises(ExtractionError):
            locate_json("I'm sorry, I can't help with that.")

    def test_strategy_order(self):
        names = [name for name, _ in STRATEGIES]
        assert names == [
            "direct", "fence-stripped", "brace-span", "marker-pairs", "balanced-braces",
        ]

    def test_json_preferred_over_markdown(self):
        text = '{"objectionHandling": []}'
        assert locate_json(text, markdown_objections=True) == {"objectionHandling": []}

    def test_unclosed_brace_in_prose(self):
        text = 'Note: { see below {"a": 1}'
        assert locate_json(text) == {"a": 1}

    def test_deeply_nested_output_is_not_json(self):
        depth = 100_000
        text = "Result: " + '{"a":' * depth + "1" + "}" * depth
        with pytest.raises(ExtractionError):
            locate_json(text)


class TestMarkerPairs:
    def test_first_open_to_last_close(self):
        assert _marker_pairs('Answer:\n{\n  "a": 1\n}\nDone') == {"a": 1}

    def test_no_braces(self):
        assert _marker_pairs("no object here") is None

    def test_trailing_brace_breaks_the_span(self):
        assert _marker_pairs('x {"a": 1} y }') is None


class TestOutermostSpans:
    def test_nested_spans_collapse(self):
        text = 'a {"x": {"y": 1}} b {"z": "}"}'
        assert _outermost_spans(text) == [(2, 17), (20, 30)]

    def test_unmatched_braces_ignored(self):
        assert _outermost_spans("} { {}") == [(4, 6)]


MARKDOWN_OBJECTIONS = """\
### 1. **Price concerns**
"It's too expensive for us right now."
Strategic Response: "I hear you. Most teams recover the cost within a quarter."
Evidence:
- Globex saved $40k in year one

### 2. Timing
We understand that timing matters for a rollout like this.

### 3) Existing tool
"We already use something similar."
"""


class TestObjectionMarkdown:
    def test_sections_become_objections(self):
        result = parse_objection_markdown(MARKDOWN_OBJECTIONS)
        items = result["objectionHandling"]
        assert len(items) == 3
        assert items[0] == {
            "objection": "It's too expensive for us right now.",
            "response": "I hear you. Most teams recover the cost within a quarter.",
            "proofPoint": "Globex saved $40k in year one",
        }

    def test_title_used_when_no_quote(self):
        items = parse_objection_markdown(MARKDOWN_OBJECTIONS)["objectionHandling"]
        assert items[1]["objection"] == "Timing"
        assert "understand" in items[1]["response"]

    def test_defaults_fill_gaps(self):
        items = parse_objection_markdown(MARKDOWN_OBJECTIONS)["objectionHandling"]
        assert items[2]["response"] == DEFAULT_OBJECTION_RESPONSE
        assert items[2]["proofPoint"] == DEFAULT_PROOF_POINT

    def test_locator_falls_back_to_markdown(self):
        result = locate_json(MARKDOWN_OBJECTIONS, markdown_objections=True)
        assert len(result["objectionHandling"]) == 3

    def test_no_sections_raises(self):
        with pytest.raises(ExtractionError):
            parse_objection_markdown("Just some prose.")
