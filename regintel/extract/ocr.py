# regintel/extract/ocr.py

from __future__ import annotations

import re

from typing import Optional

import pytesseract

from pdf2image import convert_from_bytes, convert_from_path

from regintel.features.sections import split_lines

from .pdf_text import ExtractedDoc, PdfSource

_HYPHEN_BREAK_RE = re.compile(r"-\n(\w)")
_SPACES_RE = re.compile(r"[ \t]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")

# psm 6 = uniform block of text, suits single-column policies
TESSERACT_CONFIG = "--psm 6"


def clean_ocr_text(s: str) -> str:
    """
    Light cleanup of Tesseract output:
    - re-join words hyphenated across line breaks
    - collapse runs of spaces and blank lines
    """
    s = _HYPHEN_BREAK_RE.sub(r"\1", s)
    s = _SPACES_RE.sub(" ", s)
    return _BLANK_LINES_RE.sub("\n\n", s).strip()


def ocr_pdf(
    pdf: PdfSource,
    *,
    dpi: int = 220,
    lang: str = "eng",
    max_pages: Optional[int] = None,
    tesseract_cmd: Optional[str] = None,
) -> ExtractedDoc:
    """
    OCR a scanned policy by rasterising its pages and running Tesseract.

    Requires the tesseract and poppler binaries on PATH.
    """
    if tesseract_cmd:
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    if isinstance(pdf, (bytes, bytearray)):
        images = convert_from_bytes(bytes(pdf), dpi=dpi, last_page=max_pages)
    else:
        images = convert_from_path(pdf, dpi=dpi, last_page=max_pages)

    page_texts = [
        clean_ocr_text(pytesseract.image_to_string(img, lang=lang, config=TESSERACT_CONFIG) or "")
        for img in images
    ]
    text = "\n\n".join(page_texts).strip()

    return ExtractedDoc(
        text=text,
        lines=split_lines(text),
        pages=len(images),
        source="ocr",
        meta={"ocr_pages": len(images), "dpi": dpi, "lang": lang, "engine": "tesseract"},
    )
