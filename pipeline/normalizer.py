"""Text normalization for raw model completions."""

import re

_JSON_FENCE_OPEN = re.compile(r"^```json\s*")
_FENCE_OPEN = re.compile(r"^```\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")

_HEADING_LINE = re.compile(r"^#+\s.*$", re.MULTILINE)
_BOLD_LINE = re.compile(r"^\*\*.*\*\*$", re.MULTILINE)
_LIST_DASH = re.compile(r"^-\s", re.MULTILINE)
_ANY_FENCE_OPEN = re.compile(r"```(?:json)?\s*")
_ANY_FENCE_CLOSE = re.compile(r"\s*```")


def _strip_fence_once(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = _FENCE_CLOSE.sub("", _JSON_FENCE_OPEN.sub("", text))
    elif text.startswith("```"):
        text = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))
    return text.strip()


def normalize_response(text: str) -> str:
    """Trim the completion and strip surrounding markdown code fences.

    Repeats until nothing changes, so nested fences are fully removed and
    ``normalize_response(normalize_response(x)) == normalize_response(x)``.
    """
    if not text:
        return ""
    current = text
    while True:
        stripped = _strip_fence_once(current)
        if stripped == current:
            return stripped
        current = stripped


def strip_markdown_headings(text: str) -> str:
    """Aggressive cleanup used before the brace-span search.

    Drops heading lines, bold-only lines, leading list dashes and every
    code-fence marker wherever it appears.
    """
    cleaned = text.strip()
    cleaned = _HEADING_LINE.sub("", cleaned)
    cleaned = _BOLD_LINE.sub("", cleaned)
    cleaned = _LIST_DASH.sub("", cleaned)
    cleaned = _ANY_FENCE_OPEN.sub("", cleaned)
    cleaned = _ANY_FENCE_CLOSE.sub("", cleaned)
    return cleaned
