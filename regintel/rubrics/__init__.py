# regintel/rubrics/__init__.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class CoverageStatus(str, Enum):
    COVERED = "COVERED"
    PARTIAL = "PARTIAL"
    MISSING = "MISSING"


@dataclass(frozen=True)
class CategoryScoreResult:
    """Outcome of scoring one rubric category against one document."""
    category: str
    score: int
    max_score: int
    status: CoverageStatus
    impact: str
    evidence: List[str] = field(default_factory=list)
    explanation: str = ""
    signals_found: List[str] = field(default_factory=list)
    signals_missing: List[str] = field(default_factory=list)

    @property
    def percentage(self) -> float:
        return round(self.score * 100.0 / self.max_score, 2) if self.max_score else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "score": self.score,
            "max_score": self.max_score,
            "status": self.status.value,
            "impact": self.impact,
            "evidence": list(self.evidence),
            "explanation": self.explanation,
            "signals_found": list(self.signals_found),
            "signals_missing": list(self.signals_missing),
        }
