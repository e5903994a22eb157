# regintel/__init__.py
"""
Deterministic policy assessment and licence compliance engine.

    from regintel import assess_policy, validate_policy_for_licence

    result = assess_policy(text, {"licence_type": "SEMI"})
    check = validate_policy_for_licence("SEMI", {"aml_policy": result, ...})
"""

from regintel.config import DEFAULT_CONFIG, ENGINE_VERSION, EngineConfig, Thresholds, load_engine_config
from regintel.licence.matrix import LICENCE_EXPECTATIONS, AreaStatus, LicenceExpectation
from regintel.licence.validator import ValidationFailure, ValidationResult, validate_policy_for_licence
from regintel.pipeline.assess import (
    AssessmentResult, AssessOptions, ReadinessStatus, assess_documents, assess_policy,
)
from regintel.pipeline.classify import classify_document, detect_document_type
from regintel.pipeline.findings import detect_critical_findings
from regintel.rubrics import CategoryScoreResult, CoverageStatus
from regintel.rubrics.categories import CATEGORY_DEFINITIONS, CategoryDefinition, DocumentType
from regintel.rubrics.category_scorer import score_category

__all__ = [
    "AreaStatus",
    "AssessOptions",
    "AssessmentResult",
    "CATEGORY_DEFINITIONS",
    "CategoryDefinition",
    "CategoryScoreResult",
    "CoverageStatus",
    "DEFAULT_CONFIG",
    "DocumentType",
    "ENGINE_VERSION",
    "EngineConfig",
    "LICENCE_EXPECTATIONS",
    "LicenceExpectation",
    "ReadinessStatus",
    "Thresholds",
    "ValidationFailure",
    "ValidationResult",
    "assess_documents",
    "assess_policy",
    "classify_document",
    "detect_critical_findings",
    "detect_document_type",
    "load_engine_config",
    "score_category",
    "validate_policy_for_licence",
]
