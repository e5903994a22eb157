"""
Text extraction from uploaded policy files.
"""

import fitz  # PyMuPDF
import pytest

from regintel import DocumentType, detect_document_type
from regintel.extract.ingest import UnsupportedDocumentError, decode_text, extract_upload
from regintel.extract.ocr import clean_ocr_text
from regintel.extract.pdf_text import extract_pdf_text
from regintel.extract.quality import text_quality_ok

PDF_LINES = [
    "ANTI-MONEY LAUNDERING POLICY",
    "1. Governance",
    "The MLRO holds the SMF17 function and reports to the Board of Directors.",
    "2. Customer Due Diligence",
    "We apply customer due diligence and enhanced due diligence to all customers.",
    "3. Reporting",
    "Suspicious activity is reported to the National Crime Agency.",
    "Records are retained for five years after the relationship ends.",
]


def _make_pdf(lines, pages=1) -> bytes:
    doc = fitz.open()
    for _ in range(pages):
        page = doc.new_page()
        y = 72
        for line in lines:
            page.insert_text((72, y), line, fontsize=10)
            y += 16
    data = doc.tobytes()
    doc.close()
    return data


def test_quality_gate_reasons():
    assert text_quality_ok("").reason == "empty_text"
    assert text_quality_ok("Short policy.").reason == "too_short"
    assert text_quality_ok("1234 5678 | " * 40).reason == "low_letter_ratio"
    assert text_quality_ok("Safeguarding \ufffd\ufffd\ufffd policy. " * 20).reason == "unmapped_glyphs"
    good = text_quality_ok(" ".join(PDF_LINES))
    assert good.ok is True
    assert good.metrics["letter_ratio"] > 0.5


def test_decode_text_strips_bom():
    doc = decode_text("\ufeff# Safeguarding Policy\n\nRelevant funds are segregated.".encode("utf-8"))
    assert doc.text.startswith("# Safeguarding Policy")
    assert doc.lines == ["# Safeguarding Policy", "Relevant funds are segregated."]
    assert doc.source == "plain_text"


def test_markdown_upload(good_docs):
    doc, quality = extract_upload("governance.md", good_docs["governance_policy"].encode("utf-8"))
    assert quality.ok
    assert doc.source == "plain_text"
    assert detect_document_type(doc.text) is DocumentType.GOVERNANCE_POLICY


@pytest.mark.parametrize("filename", ["policy.docx", "policy", "scan.png"])
def test_unsupported_upload(filename):
    with pytest.raises(UnsupportedDocumentError):
        extract_upload(filename, b"data")


def test_pdf_upload_uses_embedded_text():
    doc, quality = extract_upload("aml.PDF", _make_pdf(PDF_LINES))
    assert quality.ok
    assert doc.source == "pdf_text"
    assert doc.pages == 1
    assert "National Crime Agency" in doc.text
    assert doc.lines[0] == "ANTI-MONEY LAUNDERING POLICY"
    assert detect_document_type(doc.text) is DocumentType.AML_POLICY


def test_pdf_page_limit(tmp_path):
    path = tmp_path / "policy.pdf"
    path.write_bytes(_make_pdf(PDF_LINES, pages=3))
    doc = extract_pdf_text(str(path), max_pages=2)
    assert doc.pages == 3
    assert doc.meta["extracted_pages"] == 2
    assert doc.text.count("ANTI-MONEY LAUNDERING POLICY") == 2


def test_clean_ocr_text():
    raw = "money laun-\ndering   policy\n\n\n\nreported to the  NCA"
    assert clean_ocr_text(raw) == "money laundering policy\n\nreported to the NCA"


def test_pdf_without_text_layer_falls_back_to_ocr(monkeypatch):
    import regintel.extract.ocr as ocr

    calls = []

    def fake_ocr(pdf, **kwargs):
        calls.append((type(pdf), kwargs))
        text = "\n".join(PDF_LINES)
        return ocr.ExtractedDoc(text=text, lines=list(PDF_LINES), pages=1, source="ocr", meta={"engine": "tesseract"})

    monkeypatch.setattr(ocr, "ocr_pdf", fake_ocr)
    doc, quality = extract_upload("scan.pdf", _make_pdf(["Page 1"]), ocr_max_pages=5)

    assert quality.reason == "too_short"
    assert calls == [(bytes, {"lang": "eng", "max_pages": 5})]
    assert doc.source == "ocr"
    assert doc.meta["engine"] == "tesseract"
    assert doc.meta["blank_pages"] == 0
