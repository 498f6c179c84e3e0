"""Locate a JSON object inside free-text model output.

Models asked to "return only JSON" frequently wrap the object in code fences,
lead with a sentence of prose, or append a sign-off.  ``locate_json`` runs a
cascade of progressively looser strategies and returns the first candidate
that parses to a JSON object.  Whether that object has the right *shape* is
the schema validator's concern, not ours.
"""

import json
import logging
import re
from typing import Callable, Optional

from pipeline.errors import ExtractionError
from pipeline.normalizer import normalize_response, strip_markdown_headings

logger = logging.getLogger("pitch_builder")

_GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")

START_MARKERS = ("{", "{\n", "{ \n")
END_MARKERS = ("}", "\n}", "\n }")

DEFAULT_OBJECTION_RESPONSE = "I understand your concern. Let me address that for you."
DEFAULT_PROOF_POINT = "Our customers have seen significant value from this solution."


def _loads_object(candidate: Optional[str]) -> Optional[dict]:
    """Parse ``candidate``; return it only if it is a JSON object."""
    if not candidate:
        return None
    try:
        parsed = json.loads(candidate)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


# ------------------------------------------------------------------
# Strategies
# ------------------------------------------------------------------

def _direct(text: str) -> Optional[dict]:
    return _loads_object(text)


def _fence_stripped(text: str) -> Optional[dict]:
    return _loads_object(normalize_response(text))


def _brace_span(text: str) -> Optional[dict]:
    # Greedy first-{ to last-}; not brace balanced.
    m = _GREEDY_OBJECT.search(strip_markdown_headings(text))
    return _loads_object(m.group(0)) if m else None


def _marker_pairs(text: str) -> Optional[dict]:
    for start_marker in START_MARKERS:
        start = text.find(start_marker)
        if start == -1:
            continue
        for end_marker in END_MARKERS:
            end = text.rfind(end_marker)
            if end <= start:
                continue
            parsed = _loads_object(text[start:end + len(end_marker)].strip())
            if parsed is not None:
                return parsed
    return None


def _outermost_spans(text: str) -> list[tuple[int, int]]:
    """``(start, end)`` of every matched ``{...}`` not nested in another.

    One pass with a stack; quotes are tracked only inside an open brace, and
    unmatched braces are ignored.
    """
    stack: list[int] = []
    spans: list[tuple[int, int]] = []
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"' and stack:
            in_string = True
        elif ch == "{":
            stack.append(i)
        elif ch == "}" and stack:
            spans.append((stack.pop(), i + 1))

    spans.sort()
    outermost: list[tuple[int, int]] = []
    for start, end in spans:
        if not outermost or start >= outermost[-1][1]:
            outermost.append((start, end))
    return outermost


def _balanced_braces(text: str) -> Optional[dict]:
    """First outermost brace-balanced span that parses to an object."""
    for start, end in _outermost_spans(text):
        parsed = _loads_object(text[start:end])
        if parsed is not None:
            return parsed
    return None


STRATEGIES: list[tuple[str, Callable[[str], Optional[dict]]]] = [
    ("direct", _direct),
    ("fence-stripped", _fence_stripped),
    ("brace-span", _brace_span),
    ("marker-pairs", _marker_pairs),
    ("balanced-braces", _balanced_braces),
]


# ------------------------------------------------------------------
# Markdown objections
# ------------------------------------------------------------------

_OBJECTION_SECTION = re.compile(
    r"###?\s*\d+[.)]\s*\**(.+?)\**\s*\n([\s\S]*?)(?=###?\s*\d+|$)"
)
_QUOTED = re.compile(r'"([^"]+)"')
_LABELED_RESPONSE = re.compile(
    r'(?:Response|Strategic Response|Feel-Felt-Found)[\s\S]*?"([^"]+)"',
    re.IGNORECASE,
)
_LABELED_PROOF = re.compile(
    r"(?:Evidence|ROI|Metrics|Testimonials?)[\s\S]*?[-•]\s*([^-•\n]+)",
    re.IGNORECASE,
)


def parse_objection_markdown(text: str) -> dict:
    """Build ``{"objectionHandling": [...]}`` from numbered markdown sections.

    Raises ExtractionError when no numbered section is found.
    """
    objections: list[dict] = []
    for m in _OBJECTION_SECTION.finditer(text):
        title = m.group(1).strip()
        content = m.group(2).strip()

        quoted = _QUOTED.search(content)
        objection = quoted.group(1) if quoted else title

        labeled = _LABELED_RESPONSE.search(content)
        if labeled:
            response = labeled.group(1)
        else:
            response = next(
                (
                    re.sub(r'[*"]', "", line).strip()
                    for line in content.split("\n")
                    if "understand" in line or "appreciate" in line
                ),
                DEFAULT_OBJECTION_RESPONSE,
            )

        proof = _LABELED_PROOF.search(content)
        proof_point = proof.group(1).strip() if proof else DEFAULT_PROOF_POINT

        objections.append(
            {"objection": objection, "response": response, "proofPoint": proof_point}
        )

    if not objections:
        raise ExtractionError("No numbered objection sections found in markdown")

    logger.info(f"Recovered {len(objections)} objections from markdown")
    return {"objectionHandling": objections}


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def locate_json(text: str, markdown_objections: bool = False) -> dict:
    """Return the first JSON object found in ``text``.

    Args:
        text: Raw or normalized model output.
        markdown_objections: When True and no JSON object exists, parse the
            text as a markdown list of objections instead.

    Raises:
        ExtractionError: Every strategy failed.
    """
    normalized = normalize_response(text)

    for name, strategy in STRATEGIES:
        parsed = strategy(normalized)
        if parsed is not None:
            logger.debug(f"JSON located via {name} strategy")
            return parsed
        logger.debug(f"JSON strategy {name} failed")

    if markdown_objections:
        return parse_objection_markdown(text)

    raise ExtractionError("Could not extract valid JSON from response")
