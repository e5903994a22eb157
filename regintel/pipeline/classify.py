# regintel/pipeline/classify.py

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from regintel.config import DEFAULT_CONFIG, EngineConfig
from regintel.features.keywords import bucket_fraction, count_keywords, find_terms, normalize_text
from regintel.features.sections import count_sections, split_lines
from regintel.rubrics.categories import DocumentType

log = logging.getLogger(__name__)


@dataclass
class Classification:
    document_type: Optional[DocumentType]
    confidence: float
    scores: Dict[str, float] = field(default_factory=dict)
    evidence: List[str] = field(default_factory=list)
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_type": self.document_type.value if self.document_type else None,
            "confidence": self.confidence,
            "scores": dict(self.scores),
            "evidence": list(self.evidence),
            "title": self.title,
        }


def classify_document(text: Any, *, config: Optional[EngineConfig] = None) -> Classification:
    """
    Keyword-fingerprint classifier.

    Per type: share of its signature keywords present, plus a bonus when the
    document title names the type. The best type wins if it clears the
    confidence floor and is not tied with the runner-up.
    """
    cfg = config or DEFAULT_CONFIG
    if not isinstance(text, str) or not text.strip():
        return Classification(document_type=None, confidence=0.0)

    t = normalize_text(text)
    title = count_sections(split_lines(t)).title or ""

    buckets = {dt.value: sig.keywords for dt, sig in cfg.signatures.items()}
    kw = count_keywords(t, buckets)

    scores: Dict[str, float] = {}
    for dt, sig in cfg.signatures.items():
        score = bucket_fraction(kw.bucket_hits.get(dt.value, 0), len(sig.keywords))
        if find_terms(title, sig.title_terms):
            score += cfg.thresholds.title_bonus
        scores[dt.value] = round(score, 4)

    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    if not ranked:
        return Classification(document_type=None, confidence=0.0, scores=scores, title=title or None)

    best_key, best = ranked[0]
    runner_up = ranked[1][1] if len(ranked) > 1 else 0.0

    if best < cfg.thresholds.min_confidence:
        log.debug("No document type clears the confidence floor: %s", scores)
        return Classification(document_type=None, confidence=best, scores=scores, title=title or None)
    if best == runner_up:
        log.debug("Ambiguous document type: %s", scores)
        return Classification(document_type=None, confidence=best, scores=scores, title=title or None)

    log.debug("Detected %s (score %.3f, runner-up %.3f)", best_key, best, runner_up)
    return Classification(
        document_type=DocumentType(best_key),
        confidence=min(1.0, best),
        scores=scores,
        evidence=list(kw.term_hits.get(best_key, {}).keys()),
        title=title or None,
    )


def detect_document_type(text: Any, *, config: Optional[EngineConfig] = None) -> Optional[DocumentType]:
    """
    Detect the document type from text content.

    Returns None for empty or non-string input, unrelated prose, or ambiguous matches.
    """
    return classify_document(text, config=config).document_type
