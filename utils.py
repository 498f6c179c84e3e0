"""Shared utility functions."""

import logging
import re
from pathlib import Path

logger = logging.getLogger("pitch_builder")

PROMPTS_DIR = Path(__file__).parent / "pipeline" / "prompts"


def extract_text_from_html(html: str, max_length: int = 4000) -> str:
    """Extract readable text from HTML, stripping scripts, styles, and tags."""
    # Remove script, style, and noscript blocks
    html = re.sub(
        r"<(script|style|noscript)[^>]*>.*?</\1>",
        "",
        html,
        flags=re.DOTALL | re.IGNORECASE,
    )
    # Remove HTML comments
    html = re.sub(r"<!--.*?-->", "", html, flags=re.DOTALL)
    # Strip remaining tags
    text = re.sub(r"<[^>]+>", " ", html)
    # Decode common HTML entities
    for entity, char in [
        ("&amp;", "&"),
        ("&lt;", "<"),
        ("&gt;", ">"),
        ("&quot;", '"'),
        ("&#39;", "'"),
        ("&nbsp;", " "),
    ]:
        text = text.replace(entity, char)
    # Collapse whitespace; the model only needs a flat run of text
    text = re.sub(r"\s+", " ", text).strip()
    return text[:max_length]


def normalize_url(url: str) -> str:
    """Normalise user input into an absolute ``http(s)://`` URL.

    Handles bare domains (``acme.com``), surrounding whitespace and quotes,
    and a doubled ``www.`` prefix.  Paths and query strings are kept since
    users often paste a specific product page.
    """
    url = url.strip().strip("\"'")
    if not url:
        return ""

    m = re.match(r"^(https?)://", url, flags=re.IGNORECASE)
    if m:
        scheme = m.group(1).lower()
        rest = url[m.end():]
    else:
        scheme = "https"
        rest = re.sub(r"^//", "", url)

    # Ensure www. prefix is not doubled
    rest = re.sub(r"^(www\.)+", "www.", rest, flags=re.IGNORECASE)
    if not rest or rest.startswith("/"):
        return ""

    return f"{scheme}://{rest}"


def load_prompt(name: str) -> str:
    """Load a prompt template from the prompts directory."""
    with open(PROMPTS_DIR / name, "r") as f:
        return f.read().strip()
