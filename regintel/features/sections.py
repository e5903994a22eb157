# regintel/features/sections.py

from __future__ import annotations

import re

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SectionSignals:
    """
    Structural markers derived from line-level text (markdown or PDF-extracted).
    """
    title: Optional[str]
    headings: List[str] = field(default_factory=list)
    bullet_count: int = 0
    table_rows: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "heading_count": len(self.headings),
            "bullet_count": self.bullet_count,
            "table_rows": self.table_rows,
        }


# '# Heading', '## 2.1 Heading'
_MD_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")
# '1. Introduction', '2.3 Customer Due Diligence' (short, no sentence punctuation)
_NUMBERED_HEADING_RE = re.compile(r"^\s*\d+(\.\d+)*\.?\s+([A-Z][^.;:!?]{2,80})$")
_BULLET_RE = re.compile(r"^\s*([-*+•]|\d+[.)])\s+\S")
_TABLE_RE = re.compile(r"^\s*\|.*\|\s*$")
_TABLE_RULE_RE = re.compile(r"^\s*\|?[\s:\-|]+\|?\s*$")


def split_lines(text: str) -> List[str]:
    """Non-empty, stripped lines."""
    return [ln.strip() for ln in (text or "").splitlines() if ln.strip()]


def count_sections(
    lines: List[str],
    *,
    max_heading_len: int = 120,
) -> SectionSignals:
    """
    Detect headings, bullets and table rows by scanning line-level text.

    The title is the first markdown heading; documents without markdown
    headings (e.g. PDF extractions) fall back to the first non-empty line.

    Args:
        lines: extracted lines (preferably stripped, non-empty)
        max_heading_len: ignore very long lines (likely paragraphs, not headings)

    Returns:
        SectionSignals
    """
    headings: List[str] = []
    bullets = 0
    table_rows = 0

    for ln in lines:
        if not ln:
            continue

        m = _MD_HEADING_RE.match(ln)
        if m and len(ln) <= max_heading_len:
            headings.append(m.group(1).strip())
            continue

        if _TABLE_RE.match(ln):
            if not _TABLE_RULE_RE.match(ln):
                table_rows += 1
            continue

        if _BULLET_RE.match(ln):
            # Numbered short lines without punctuation are headings in PDF text.
            n = _NUMBERED_HEADING_RE.match(ln)
            if n and len(ln.split()) <= 10:
                headings.append(n.group(2).strip())
            else:
                bullets += 1
            continue

        n = _NUMBERED_HEADING_RE.match(ln)
        if n and len(ln) <= max_heading_len and len(ln.split()) <= 10:
            headings.append(n.group(2).strip())

    md_title = next((_MD_HEADING_RE.match(ln).group(1).strip() for ln in lines if _MD_HEADING_RE.match(ln)), None)
    title = md_title or (lines[0] if lines else None)

    return SectionSignals(title=title, headings=headings, bullet_count=bullets, table_rows=table_rows)
