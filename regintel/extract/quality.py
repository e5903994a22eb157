# regintel/extract/quality.py

from __future__ import annotations

import re

from dataclasses import dataclass
from typing import Any, Dict

_LETTER_RE = re.compile(r"[A-Za-z]")
# PyMuPDF emits U+FFFD for glyphs of fonts without a usable ToUnicode map
_UNMAPPED_GLYPH = "\ufffd"


@dataclass
class TextQuality:
    ok: bool
    reason: str
    metrics: Dict[str, Any]


def text_quality_ok(
    text: str,
    *,
    min_chars: int = 200,
    min_letter_ratio: float = 0.25,
    max_unmapped_ratio: float = 0.02,
) -> TextQuality:
    """
    Decide whether extracted PDF text is usable or OCR is needed.

    Policies are often short, so the character floor is lower than for reports.
    The letter ratio catches extractions that are mostly symbols; the unmapped
    ratio catches embedded fonts that PyMuPDF cannot decode.
    """
    if not text or not text.strip():
        return TextQuality(ok=False, reason="empty_text", metrics={"chars": 0, "letters": 0, "letter_ratio": 0.0})

    chars = len(text)
    letters = len(_LETTER_RE.findall(text))
    unmapped = text.count(_UNMAPPED_GLYPH)
    metrics = {
        "chars": chars,
        "letters": letters,
        "letter_ratio": round(letters / chars, 4),
        "unmapped_ratio": round(unmapped / chars, 4),
    }

    if chars < min_chars:
        return TextQuality(ok=False, reason="too_short", metrics={**metrics, "min_chars": min_chars})

    if unmapped / chars > max_unmapped_ratio:
        return TextQuality(ok=False, reason="unmapped_glyphs", metrics={**metrics, "max_unmapped_ratio": max_unmapped_ratio})

    if letters / chars < min_letter_ratio:
        return TextQuality(ok=False, reason="low_letter_ratio", metrics={**metrics, "min_letter_ratio": min_letter_ratio})

    return TextQuality(ok=True, reason="ok", metrics=metrics)
