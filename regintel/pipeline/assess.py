# regintel/pipeline/assess.py
"""
Policy assessment pipeline.

classify -> rubric lookup -> per-category scoring -> overall score
-> critical findings -> readiness verdict -> AssessmentResult

assess_policy never raises for any text or options input: absence, unknown
content and malformed options are reported in the returned result.
"""

from __future__ import annotations

import hashlib
import logging
import re

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from regintel.config import DEFAULT_CONFIG, EngineConfig
from regintel.features.keywords import normalize_text
from regintel.features.sections import count_sections, split_lines
from regintel.licence.matrix import AREA_DOCUMENT_TYPES, get_licence
from regintel.pipeline.classify import classify_document
from regintel.pipeline.findings import NO_CONTENT, UNCLASSIFIED, detect_critical_findings
from regintel.rubrics import CategoryScoreResult, CoverageStatus
from regintel.rubrics.categories import DocumentType, parse_document_type
from regintel.rubrics.category_scorer import score_category

log = logging.getLogger(__name__)


def _scrub_surrogates(s: str) -> str:
    # Lone surrogates (a JSON "\ud800" escape) cannot be UTF-8 encoded; they become U+FFFD
    return s.encode("utf-8", errors="surrogatepass").decode("utf-8", errors="replace")


class ReadinessStatus(str, Enum):
    READY = "READY"
    WARNING = "WARNING"
    BLOCKED = "BLOCKED"


@dataclass(frozen=True)
class AssessOptions:
    document_id: Optional[str] = None
    licence_type: Optional[str] = None
    # Skips detection when it names a known type
    document_type: Optional[str] = None

    @classmethod
    def from_any(cls, options: Any) -> "AssessOptions":
        """Accept an AssessOptions, a mapping, or anything else (ignored)."""
        if isinstance(options, AssessOptions):
            return options
        if not isinstance(options, Mapping):
            return cls()

        def _str(key: str) -> Optional[str]:
            v = options.get(key)
            return _scrub_surrogates(v).strip() or None if isinstance(v, str) else None

        return cls(
            document_id=_str("document_id"),
            licence_type=_str("licence_type"),
            document_type=_str("document_type"),
        )


@dataclass
class AssessmentResult:
    document_id: str
    document_type: Optional[DocumentType]
    licence_type: Optional[str]
    overall_score: int
    readiness_status: ReadinessStatus
    category_scores: List[CategoryScoreResult] = field(default_factory=list)
    critical_findings: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def category(self, name: str) -> Optional[CategoryScoreResult]:
        return next((c for c in self.category_scores if c.category == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_id": self.document_id,
            "document_type": self.document_type.value if self.document_type else None,
            "licence_type": self.licence_type,
            "overall_score": self.overall_score,
            "readiness_status": self.readiness_status.value,
            "category_scores": [c.to_dict() for c in self.category_scores],
            "critical_findings": list(self.critical_findings),
            "warnings": list(self.warnings),
            "metadata": dict(self.metadata),
        }


_WS_RE = re.compile(r"\s+")


def policy_hash(text: str) -> str:
    """SHA-256 of the normalised text; whitespace and markdown emphasis do not change it."""
    normalized = _WS_RE.sub(" ", normalize_text(text)).strip().lower()
    return hashlib.sha256(normalized.encode("utf-8", errors="surrogatepass")).hexdigest()


def readiness_status(overall_score: int, critical_findings: List[str], config: EngineConfig = DEFAULT_CONFIG) -> ReadinessStatus:
    if critical_findings or overall_score < config.thresholds.blocked_below:
        return ReadinessStatus.BLOCKED
    if overall_score >= config.thresholds.ready:
        return ReadinessStatus.READY
    return ReadinessStatus.WARNING


def _coerce_text(text: Any) -> str:
    if isinstance(text, str):
        return _scrub_surrogates(text)
    if isinstance(text, (bytes, bytearray)):
        return bytes(text).decode("utf-8", errors="replace")
    return ""


def _licence_warnings(licence_type: Optional[str], doc_type: Optional[DocumentType], config: EngineConfig) -> List[str]:
    if not licence_type:
        return []
    licence = get_licence(licence_type, config.licences)
    if licence is None:
        return [f"Unknown licence type '{licence_type}': licence context ignored"]
    if doc_type is not None and licence.is_prohibited(doc_type):
        return [f"{doc_type.value} is PROHIBITED for {licence.code}"]
    return []


def assess_policy(
    text: Any,
    options: Any = None,
    *,
    config: Optional[EngineConfig] = None,
) -> AssessmentResult:
    """
    Assess a policy document and return a structured result.

    Args:
        text: full text of the policy document (markdown tolerated)
        options: AssessOptions or mapping with document_id, licence_type, document_type

    Returns:
        AssessmentResult
    """
    cfg = config or DEFAULT_CONFIG
    opts = AssessOptions.from_any(options)
    body = _coerce_text(text)

    digest = policy_hash(body)
    document_id = opts.document_id or f"doc-{digest[:12]}"
    lines = split_lines(body)
    metadata: Dict[str, Any] = {
        "policy_hash": digest,
        "assessed_at": datetime.now(timezone.utc).isoformat(),
        "engine_version": cfg.engine_version,
        "classification_confidence": 0.0,
        "structure": count_sections(lines).to_dict(),
    }

    if not body.strip():
        log.info("Assessment %s: no content", document_id)
        return AssessmentResult(
            document_id=document_id,
            document_type=None,
            licence_type=opts.licence_type,
            overall_score=0,
            readiness_status=ReadinessStatus.BLOCKED,
            critical_findings=[NO_CONTENT],
            warnings=_licence_warnings(opts.licence_type, None, cfg),
            metadata=metadata,
        )

    doc_type = parse_document_type(opts.document_type)
    if doc_type is not None and doc_type in cfg.categories:
        metadata["classification_confidence"] = 1.0
        metadata["document_type_source"] = "override"
    else:
        classification = classify_document(body, config=cfg)
        doc_type = classification.document_type
        metadata["classification_confidence"] = round(classification.confidence, 4)
        metadata["document_type_source"] = "detected"

    warnings = _licence_warnings(opts.licence_type, doc_type, cfg)

    if doc_type is None or doc_type not in cfg.categories:
        log.info("Assessment %s: document type not detected", document_id)
        return AssessmentResult(
            document_id=document_id,
            document_type=None,
            licence_type=opts.licence_type,
            overall_score=0,
            readiness_status=ReadinessStatus.BLOCKED,
            critical_findings=[UNCLASSIFIED],
            warnings=warnings + ["Document type could not be determined; no rubric applied"],
            metadata=metadata,
        )

    categories = cfg.categories[doc_type]
    category_scores = [score_category(body, c, config=cfg) for c in categories]
    overall = max(0, min(100, sum(cs.score for cs in category_scores)))

    findings = detect_critical_findings(body, doc_type, category_scores=category_scores, config=cfg)

    for cs in category_scores:
        if cs.status is CoverageStatus.PARTIAL:
            warnings.append(f"{cs.category} only partially covered (score: {cs.score}/{cs.max_score})")

    status = readiness_status(overall, findings, cfg)
    log.info("Assessment %s: %s scored %d -> %s (%d critical)", document_id, doc_type.value, overall, status.value, len(findings))

    return AssessmentResult(
        document_id=document_id,
        document_type=doc_type,
        licence_type=opts.licence_type,
        overall_score=overall,
        readiness_status=status,
        category_scores=category_scores,
        critical_findings=findings,
        warnings=warnings,
        metadata=metadata,
    )


def assess_documents(
    texts_by_area: Mapping[str, Any],
    licence_type: Optional[str] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> Dict[str, AssessmentResult]:
    """
    Assess a bundle of documents keyed by area (aml_policy, safeguarding_policy, ...).

    The bundle key is used as the document type, so a mislabelled upload is
    still scored against the rubric the caller asked for.
    """
    known = {dt.value for dt in AREA_DOCUMENT_TYPES.values()}
    results: Dict[str, AssessmentResult] = {}
    for area, text in texts_by_area.items():
        options = {"licence_type": licence_type, "document_id": area}
        if area in known:
            options["document_type"] = area
        results[area] = assess_policy(text, options, config=config)
    return results
