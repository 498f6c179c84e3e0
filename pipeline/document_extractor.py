"""Heuristic text extraction from raw PDF bytes.

No PDF parser is involved: the decoded bytes are viewed as Latin-1 and text
is scraped out of the content-stream operators with regular expressions.
That is enough for most text-based PDFs; image-only or encrypted documents
yield too little text and are rejected explicitly.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass

from config import settings
from pipeline.errors import (
    DocumentDecodeError,
    DocumentTooLargeError,
    InsufficientTextError,
)

logger = logging.getLogger("pitch_builder")

TRUNCATION_MARKER = "\n\n[... middle content truncated ...]\n\n"
HEAD_SHARE = 0.7

_PAREN_LITERAL = re.compile(r"\(([^)]{2,})\)")
_TJ_ARRAY = re.compile(r"\[(.*?)\]\s*TJ")
_TEXT_BLOCK = re.compile(r"BT\s+(.*?)\s+ET", re.DOTALL)
_BLOCK_LITERAL = re.compile(r"\(([^)]+)\)")
_LETTER_RUNS = re.compile(r"\s([A-Za-z]{3,}(?:\s[A-Za-z]{3,})*)\s")
_HAS_LETTER = re.compile(r"[a-zA-Z]")
_NUMERIC_ONLY = re.compile(r"^[0-9.\-\s]+$")

_ESCAPES = re.compile(r"\\[nrtbf]")
_WHITESPACE = re.compile(r"\s+")
_UNPRINTABLE = re.compile(r"[^\x20-\x7E\u00A0-\u024F\u1E00-\u1EFF]")
_DATA_URL_PREFIX = re.compile(r"^data:[^,]*;base64,", re.IGNORECASE)


@dataclass
class ExtractedDocument:
    text: str
    method: str


def decoded_size(b64: str) -> int:
    """Byte length ``b64`` decodes to, computed without decoding."""
    n = len(b64)
    padding = len(b64) - len(b64.rstrip("="))
    return (n * 3) // 4 - padding


def _clean_payload(pdf_content: str) -> str:
    return "".join(_DATA_URL_PREFIX.sub("", pdf_content.strip()).split())


def _decode(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DocumentDecodeError("Invalid base64 PDF content") from e


def _collect_text(raw: str) -> tuple[str, str]:
    """Run the regex passes over the Latin-1 view; return (text, method)."""
    parts: list[str] = []
    methods: list[str] = []

    # 1. Literal string operands: (Hello world)
    literals = _PAREN_LITERAL.findall(raw)
    if len(literals) > 5:
        kept = [t for t in literals if len(t) > 1 and _HAS_LETTER.search(t)]
        parts.append(" ".join(kept))
        methods.append("parentheses")

    # 2. Text-show arrays: [(Hel) -20 (lo)] TJ
    arrays = [a for a in _TJ_ARRAY.findall(raw) if len(a) > 1]
    if arrays:
        parts.append(" ".join(arrays))
        methods.append("tj")

    # 3. BT ... ET text blocks
    blocks = []
    for block in _TEXT_BLOCK.findall(raw):
        inner = " ".join(_BLOCK_LITERAL.findall(block))
        if len(inner) > 1:
            blocks.append(inner)
    if blocks:
        parts.append(" ".join(blocks))
        methods.append("bt")

    # 4. Last resort for odd encodings: plain runs of words
    so_far = " ".join(parts)
    if len(so_far) < 100:
        runs = [
            r.strip()
            for r in _LETTER_RUNS.findall(raw)
            if len(r.strip()) > 3 and not _NUMERIC_ONLY.match(r.strip())
        ]
        if runs:
            parts.append(" ".join(runs))
            methods.append("simple")

    return " ".join(parts), "+".join(methods) or "none"


def clean_text(text: str) -> str:
    text = _ESCAPES.sub(" ", text)
    text = _WHITESPACE.sub(" ", text)
    text = _UNPRINTABLE.sub(" ", text)
    return text.strip()


def truncate_text(text: str, limit: int) -> str:
    """Keep the head and the tail of ``text`` when it exceeds ``limit``."""
    if len(text) <= limit:
        return text
    head = int(limit * HEAD_SHARE)
    tail = limit - head
    return text[:head] + TRUNCATION_MARKER + text[-tail:]


def extract_pdf_text(pdf_content: str, file_name: str = "unknown") -> ExtractedDocument:
    """Extract readable text from a base64-encoded PDF.

    Raises:
        DocumentTooLargeError: The payload decodes to more than
            ``settings.max_pdf_bytes``; checked before any decoding.
        DocumentDecodeError: The payload is not valid base64.
        InsufficientTextError: Fewer than ``settings.min_document_chars``
            characters survived cleaning.
    """
    payload = _clean_payload(pdf_content)
    size = decoded_size(payload)
    if size > settings.max_pdf_bytes:
        limit_mb = settings.max_pdf_bytes / 1_000_000
        raise DocumentTooLargeError(
            f"PDF file is too large ({size:,} bytes). "
            f"Please use a file smaller than {limit_mb:g}MB."
        )

    logger.info(f"Processing PDF: {file_name}, ~{size:,} bytes")
    raw = _decode(payload).decode("latin-1")

    text, method = _collect_text(raw)
    text = clean_text(text)
    logger.info(f"Extracted {len(text)} characters from {file_name} via {method}")

    if len(text) < settings.min_document_chars:
        raise InsufficientTextError(
            "Could not extract sufficient text from PDF. The PDF might be "
            "image-based, encrypted, or contain no readable text. Please try "
            "converting the PDF to a text-based format first."
        )

    if len(text) > settings.max_document_chars:
        logger.info(
            f"Text too long ({len(text)} chars), keeping head and tail "
            f"within {settings.max_document_chars}"
        )
        text = truncate_text(text, settings.max_document_chars)

    return ExtractedDocument(text=text, method=method)
