# regintel/pipeline/findings.py

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from regintel.config import DEFAULT_CONFIG, EngineConfig
from regintel.features.keywords import find_terms, normalize_text
from regintel.rubrics import CategoryScoreResult, CoverageStatus
from regintel.rubrics.categories import parse_document_type
from regintel.rubrics.category_scorer import score_category

NO_CONTENT = "No document content provided"
UNCLASSIFIED = "Unable to detect document type from content"


def detect_critical_findings(
    text: Any,
    document_type: Any,
    *,
    category_scores: Optional[Sequence[CategoryScoreResult]] = None,
    config: Optional[EngineConfig] = None,
) -> List[str]:
    """
    Hard-fail conditions that block readiness regardless of the overall score.

    - critical category whose anchor terms are all absent
    - critical category scoring MISSING
    - prohibited-practice language
    - no content, or content that cannot be classified
    """
    cfg = config or DEFAULT_CONFIG
    if not isinstance(text, str) or not text.strip():
        return [NO_CONTENT]

    doc_type = parse_document_type(document_type)
    if doc_type is None or doc_type not in cfg.categories:
        return [UNCLASSIFIED]

    t = normalize_text(text)
    categories = cfg.categories[doc_type]
    if category_scores is None:
        category_scores = [score_category(text, c, config=cfg) for c in categories]
    by_name = {cs.category: cs for cs in category_scores}

    findings: List[str] = []
    for cat in categories:
        if not cat.critical:
            continue
        anchors = cat.anchor_terms
        if anchors and not find_terms(t, anchors):
            findings.append(f"CRITICAL: {cat.name}: none of the required terms found ({', '.join(anchors)})")
            continue
        cs = by_name.get(cat.name)
        if cs is not None and cs.status is CoverageStatus.MISSING:
            findings.append(f"CRITICAL: {cat.name} is missing ({cs.score}/{cs.max_score})")

    for _, _, snippet in find_terms(t, cfg.prohibited.get(doc_type, ())):
        findings.append(f"PROHIBITED: {snippet}")

    return findings
