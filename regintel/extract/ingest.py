# regintel/extract/ingest.py

from __future__ import annotations

import logging

from dataclasses import replace
from typing import Tuple

from regintel.features.sections import split_lines

from .pdf_text import ExtractedDoc, extract_pdf_text
from .quality import TextQuality, text_quality_ok

log = logging.getLogger(__name__)

TEXT_SUFFIXES = (".md", ".markdown", ".txt")
PDF_SUFFIXES = (".pdf",)


class UnsupportedDocumentError(ValueError):
    """Upload is not a PDF, markdown or plain-text file."""


def decode_text(contents: bytes) -> ExtractedDoc:
    text = contents.decode("utf-8-sig", errors="replace")
    return ExtractedDoc(text=text, lines=split_lines(text), pages=1, source="plain_text", meta={"encoding": "utf-8"})


def extract_upload(
    filename: str,
    contents: bytes,
    *,
    ocr_lang: str = "eng",
    ocr_max_pages: int = 20,
) -> Tuple[ExtractedDoc, TextQuality]:
    """
    Turn an uploaded file into text for assessment.

    PDFs go through PyMuPDF first; when the extracted text fails the quality
    gate the pages are OCR'd instead. The returned quality is that of the
    embedded text layer.
    """
    name = (filename or "").lower()

    if name.endswith(TEXT_SUFFIXES):
        doc = decode_text(contents)
        return doc, text_quality_ok(doc.text, min_chars=1)

    if not name.endswith(PDF_SUFFIXES):
        raise UnsupportedDocumentError(f"Unsupported file type: {filename}")

    doc = extract_pdf_text(contents)
    quality = text_quality_ok(doc.text)
    if quality.ok:
        return doc, quality

    from .ocr import ocr_pdf

    log.info("PDF text quality %s for %s, falling back to OCR", quality.reason, filename)
    ocr_doc = ocr_pdf(contents, lang=ocr_lang, max_pages=ocr_max_pages)
    return replace(ocr_doc, pages=doc.pages, meta={**doc.meta, **ocr_doc.meta}), quality
