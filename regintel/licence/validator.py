# regintel/licence/validator.py

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from regintel.config import DEFAULT_CONFIG, EngineConfig
from regintel.licence.matrix import AREA_DOCUMENT_TYPES, AreaStatus, LicenceExpectation, get_licence

log = logging.getLogger(__name__)

CAPITAL_CATEGORY = "Capital"


@dataclass(frozen=True)
class ValidationFailure:
    area: str
    reason: str
    detail: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"area": self.area, "reason": self.reason, "detail": self.detail}


@dataclass
class ValidationResult:
    valid: bool
    licence_type: Optional[str]
    failures: List[ValidationFailure] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "licence_type": self.licence_type,
            "failures": [f.to_dict() for f in self.failures],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class CategoryScoreLike:
    category: str
    score: float
    max_score: float = 100

    @property
    def percentage(self) -> float:
        return self.score * 100.0 / self.max_score if self.max_score else 0.0


@dataclass(frozen=True)
class AreaResult:
    """The parts of an assessment the validator reads."""
    overall_score: float
    category_scores: tuple = ()

    def category(self, name: str) -> Optional[CategoryScoreLike]:
        return next((c for c in self.category_scores if c.category == name), None)

    @classmethod
    def from_any(cls, value: Any) -> "AreaResult":
        """
        Accept an AssessmentResult or a mapping shaped like its JSON form.
        Unreadable values become an empty result.
        """
        if isinstance(value, AreaResult):
            return value
        if isinstance(value, Mapping):
            overall = value.get("overall_score")
            raw_scores = value.get("category_scores") or ()
        else:
            overall = getattr(value, "overall_score", None)
            raw_scores = getattr(value, "category_scores", None) or ()

        scores = []
        for cs in raw_scores if isinstance(raw_scores, (list, tuple)) else ():
            parsed = _category_like(cs)
            if parsed is not None:
                scores.append(parsed)
        return cls(overall_score=_number(overall, 0.0), category_scores=tuple(scores))


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value)


def _category_like(cs: Any) -> Optional[CategoryScoreLike]:
    if isinstance(cs, Mapping):
        name = cs.get("category")
        score, max_score = cs.get("score"), cs.get("max_score")
    else:
        name = getattr(cs, "category", None)
        score, max_score = getattr(cs, "score", None), getattr(cs, "max_score", None)
    if not isinstance(name, str):
        return None
    return CategoryScoreLike(category=name, score=_number(score, 0.0), max_score=_number(max_score, 100.0))


def _check_capital(licence: LicenceExpectation, business_plan: Optional[AreaResult]) -> Optional[ValidationFailure]:
    capital = licence.capital
    if not capital.required:
        return None
    entry = business_plan.category(CAPITAL_CATEGORY) if business_plan else None
    if entry is None:
        return ValidationFailure(
            area="capital",
            reason="below_minimum",
            detail=f"No {CAPITAL_CATEGORY} category score in the business plan. {capital.description}.",
        )
    if capital.minimum_score is not None and entry.percentage < capital.minimum_score:
        return ValidationFailure(
            area="capital",
            reason="below_minimum",
            detail=(
                f"Capital coverage {entry.percentage:.0f}% is below the {capital.minimum_score:.0f}% "
                f"required for {licence.code}. {capital.description}."
            ),
        )
    return None


def validate_policy_for_licence(
    licence_type: Any,
    results_by_area: Any,
    *,
    config: Optional[EngineConfig] = None,
) -> ValidationResult:
    """
    Validate a set of assessment results against a licence's expectations.

    Args:
        licence_type: one of the matrix keys (SEMI, API, AEMI, RAISP)
        results_by_area: mapping of aml_policy / safeguarding_policy /
            governance_policy / business_plan to an assessment result

    Returns:
        ValidationResult; valid is True only when there are no failures
    """
    cfg = config or DEFAULT_CONFIG
    licence = get_licence(licence_type, cfg.licences)
    if licence is None:
        return ValidationResult(
            valid=False,
            licence_type=licence_type if isinstance(licence_type, str) else None,
            failures=[ValidationFailure(
                area="licence_type",
                reason="unknown_licence_type",
                detail=f"Unknown licence type: {licence_type}",
            )],
        )

    bundle: Mapping[str, Any] = results_by_area if isinstance(results_by_area, Mapping) else {}
    bundle_keys = {dt.value for dt in AREA_DOCUMENT_TYPES.values()}
    present: Dict[str, AreaResult] = {
        area: AreaResult.from_any(bundle[dt.value])
        for area, dt in AREA_DOCUMENT_TYPES.items()
        if bundle.get(dt.value) is not None
    }

    failures: List[ValidationFailure] = []
    warnings: List[str] = []

    for area, expectation in licence.areas():
        result = present.get(area)
        if expectation.status is AreaStatus.PROHIBITED:
            if result is not None:
                failures.append(ValidationFailure(
                    area=area,
                    reason="prohibited_present",
                    detail=f"{area} is PROHIBITED for {licence.code}.",
                ))
            continue
        if result is None:
            if expectation.required:
                regulation = f" under {expectation.regulation}" if expectation.regulation else ""
                failures.append(ValidationFailure(
                    area=area,
                    reason="missing",
                    detail=f"{area} policy is required for {licence.code}{regulation}.",
                ))
            continue
        if result.overall_score < cfg.thresholds.area_min_score:
            warnings.append(f"{area} score ({result.overall_score:g}) is below the minimum threshold of {cfg.thresholds.area_min_score}.")

    capital_failure = _check_capital(licence, present.get("business_plan"))
    if capital_failure:
        failures.append(capital_failure)

    business_plan = present.get("business_plan")
    if licence.business_plan_depth == "High" and business_plan and business_plan.overall_score < cfg.thresholds.high_depth_min_score:
        warnings.append(
            f"{licence.code} requires a HIGH-depth business plan. "
            f"Current score ({business_plan.overall_score:g}) may be insufficient."
        )

    for key in bundle:
        if key not in bundle_keys:
            warnings.append(f"Unrecognised area '{key}' ignored")

    log.debug("Validated %s: %d failures, %d warnings", licence.code, len(failures), len(warnings))
    return ValidationResult(valid=not failures, licence_type=licence.code, failures=failures, warnings=warnings)
