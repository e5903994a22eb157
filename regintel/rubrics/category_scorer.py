# regintel/rubrics/category_scorer.py
"""
Evidence-based category scoring.

A category is a set of signal groups. The score is the category's max points
times the share of groups found in the text, so repeating a phrase never adds
points. Every matched term contributes a literal snippet as evidence.
"""

from __future__ import annotations

import logging
import math

from typing import List, Optional, Tuple

from regintel.config import DEFAULT_CONFIG, EngineConfig
from regintel.features.keywords import find_terms, normalize_text, ordered_snippets
from regintel.rubrics import CategoryScoreResult, CoverageStatus
from regintel.rubrics.categories import CategoryDefinition, ImpactLevel

log = logging.getLogger(__name__)


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def coverage_status(score: int, max_points: int, config: EngineConfig = DEFAULT_CONFIG) -> CoverageStatus:
    ratio = score / max_points if max_points else 0.0
    if ratio >= config.thresholds.covered:
        return CoverageStatus.COVERED
    if ratio >= config.thresholds.partial:
        return CoverageStatus.PARTIAL
    return CoverageStatus.MISSING


_IMPACT_TEMPLATES = {
    CoverageStatus.COVERED: "{level} impact area: adequately covered, no material {gap}",
    CoverageStatus.PARTIAL: "{level} impact: partial {gap}, strengthen before submission",
    CoverageStatus.MISSING: "{level} impact: {gap}, key requirements absent",
}


def describe_impact(category: CategoryDefinition, status: CoverageStatus) -> str:
    if status is not CoverageStatus.COVERED and category.impact is ImpactLevel.LOW:
        return f"LOW impact: cosmetic {category.gap_label}"
    return _IMPACT_TEMPLATES[status].format(level=category.impact.value, gap=category.gap_label)


def _humanise(names: List[str]) -> str:
    return ", ".join(n.replace("_", " ") for n in names)


def explain(
    category: CategoryDefinition,
    status: CoverageStatus,
    found: List[str],
    missing: List[str],
) -> str:
    total = len(category.signals)
    if status is CoverageStatus.COVERED:
        s = f"{category.name} is well addressed: {len(found)}/{total} expected signals found."
        if missing:
            s += f" Not found: {_humanise(missing)}."
        return s
    if status is CoverageStatus.PARTIAL:
        return (
            f"{category.name} is partially addressed: {len(found)}/{total} expected signals found "
            f"({_humanise(found)}). Missing: {_humanise(missing)}."
        )
    if found:
        return (
            f"{category.name} is not adequately addressed: only {len(found)}/{total} expected signals "
            f"found ({_humanise(found)}). Missing: {_humanise(missing)}."
        )
    return f"{category.name} is not addressed: none of the {total} expected signals found."


def match_signals(
    normalized_text: str,
    category: CategoryDefinition,
) -> Tuple[List[str], List[str], List[str]]:
    """
    Returns:
        (signals_found, signals_missing, evidence_snippets)
    """
    found: List[str] = []
    missing: List[str] = []
    hits = []
    for group in category.signals:
        group_hits = find_terms(normalized_text, group.terms)
        if group_hits:
            found.append(group.name)
            hits.extend(group_hits)
        else:
            missing.append(group.name)
    return found, missing, ordered_snippets(hits)


def score_category(
    text: str,
    category: CategoryDefinition,
    *,
    config: Optional[EngineConfig] = None,
) -> CategoryScoreResult:
    """
    Score a single category against the document text.

    Args:
        text: raw document text (markdown tolerated)
        category: rubric category definition

    Returns:
        CategoryScoreResult
    """
    cfg = config or DEFAULT_CONFIG
    t = normalize_text(text if isinstance(text, str) else "")

    found, missing, evidence = match_signals(t, category)

    total = len(category.signals)
    fraction = len(found) / total if total else 0.0
    score = max(0, min(category.max_points, round_half_up(category.max_points * fraction)))
    status = coverage_status(score, category.max_points, cfg)

    log.debug("%s: %d/%d signals, score %d/%d (%s)", category.name, len(found), total, score, category.max_points, status.value)

    return CategoryScoreResult(
        category=category.name,
        score=score,
        max_score=category.max_points,
        status=status,
        impact=describe_impact(category, status),
        evidence=evidence,
        explanation=explain(category, status, found, missing),
        signals_found=found,
        signals_missing=missing,
    )
