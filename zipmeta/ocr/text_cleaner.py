"""Normalization of raw OCR output before captioning."""

import re

# Printable ASCII plus the Hebrew block; everything else is OCR noise.
_DISALLOWED_CHARS = re.compile(r"[^\x20-\x7E\u0590-\u05FF]")
_INVISIBLE_CHARS = re.compile(r"[\u200B-\u200F\u202A-\u202E]")
_UNDERSCORE_RUNS = re.compile(r"_{2,}")
_WHITESPACE_RUNS = re.compile(r"\s{2,}")

MIN_TEXT_LENGTH = 3


def clean_text(text: str | None) -> str:
    """Strip noise characters from OCR output.

    Removes characters outside the target scripts, invisible directional
    marks, underscore fill lines, and repeated whitespace. Results shorter
    than ``MIN_TEXT_LENGTH`` carry no usable content and become ``""``.
    Applying it to its own output returns the same string.

    Args:
        text: Raw text from OCR or the PDF text layer.

    Returns:
        Cleaned text, or an empty string.
    """
    if not text:
        return ""

    cleaned = _DISALLOWED_CHARS.sub("", text)
    cleaned = _INVISIBLE_CHARS.sub("", cleaned)
    cleaned = _UNDERSCORE_RUNS.sub("", cleaned)
    cleaned = _WHITESPACE_RUNS.sub(" ", cleaned)
    cleaned = cleaned.strip()

    if len(cleaned) < MIN_TEXT_LENGTH:
        return ""
    return cleaned
