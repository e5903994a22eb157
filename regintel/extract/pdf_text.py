# regintel/extract/pdf_text.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import fitz  # PyMuPDF

from regintel.features.sections import split_lines

PdfSource = Union[str, bytes]


@dataclass
class ExtractedDoc:
    """
    Text pulled out of an uploaded policy document, plus where it came from.
    """
    text: str
    lines: List[str]
    pages: int
    source: str  # "pdf_text", "ocr" or "plain_text"
    meta: Dict[str, Any] = field(default_factory=dict)


def open_pdf(pdf: PdfSource) -> "fitz.Document":
    """Open a PDF from a path or from uploaded bytes."""
    if isinstance(pdf, (bytes, bytearray)):
        return fitz.open(stream=bytes(pdf), filetype="pdf")
    return fitz.open(pdf)


def extract_pdf_text(
    pdf: PdfSource,
    *,
    max_pages: Optional[int] = None,
    join_pages_with: str = "\n\n",
) -> ExtractedDoc:
    """
    Extract the embedded text layer of a policy PDF.

    Scanned policies (images only) come back nearly empty; blank_pages in
    meta counts pages without any text so callers can decide on OCR.

    Args:
        pdf: path to PDF, or its bytes
        max_pages: if set, only extract the first N pages
        join_pages_with: separator between pages

    Returns:
        ExtractedDoc
    """
    with open_pdf(pdf) as doc:
        total_pages = doc.page_count
        n = total_pages if max_pages is None else min(max_pages, total_pages)
        page_texts = [doc.load_page(i).get_text("text") or "" for i in range(n)]

    text = join_pages_with.join(page_texts).strip()
    return ExtractedDoc(
        text=text,
        lines=split_lines(text),
        pages=total_pages,
        source="pdf_text",
        meta={
            "extracted_pages": n,
            "blank_pages": sum(1 for t in page_texts if not t.strip()),
            "engine": "pymupdf",
        },
    )
