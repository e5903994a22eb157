# regintel/config.py
"""
Engine configuration.

An EngineConfig bundles everything the engine reads: rubric, classifier
signatures, prohibited phrases, licence matrix and thresholds. It is immutable;
reconfiguring means building a new EngineConfig and passing it in (or swapping
the reference a service holds).
"""

from __future__ import annotations

import json
import logging

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple, Union

from regintel.licence.matrix import LICENCE_EXPECTATIONS, LicenceExpectation
from regintel.rubrics.categories import (
    CATEGORY_DEFINITIONS, DOCUMENT_SIGNATURES, PROHIBITED_PHRASES,
    CategoryDefinition, DocumentSignature, DocumentType, ImpactLevel, SignalGroup,
)

log = logging.getLogger(__name__)

ENGINE_VERSION = "reg-intel-2.0"


@dataclass(frozen=True)
class Thresholds:
    # Category status, as a fraction of the category's max points
    covered: float = 0.70
    partial: float = 0.40
    # Readiness, on the 0-100 overall score
    ready: int = 80
    blocked_below: int = 50
    # Classifier
    min_confidence: float = 0.10
    title_bonus: float = 0.5
    # Licence validation warnings
    area_min_score: int = 50
    high_depth_min_score: int = 80


@dataclass(frozen=True)
class EngineConfig:
    engine_version: str
    categories: Mapping[DocumentType, Tuple[CategoryDefinition, ...]]
    signatures: Mapping[DocumentType, DocumentSignature]
    prohibited: Mapping[DocumentType, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    licences: Mapping[str, LicenceExpectation] = field(default_factory=lambda: LICENCE_EXPECTATIONS)
    thresholds: Thresholds = field(default_factory=Thresholds)

    def __post_init__(self) -> None:
        for doc_type, cats in self.categories.items():
            total = sum(c.weight for c in cats)
            if cats and total != 100:
                raise ValueError(f"Category weights for {doc_type.value} sum to {total}, expected 100")
            names = [c.name for c in cats]
            if len(set(names)) != len(names):
                raise ValueError(f"Duplicate category names for {doc_type.value}")

    def rubric_dict(self) -> Dict[str, Any]:
        """JSON shape accepted by load_engine_config."""
        return {
            "engine_version": self.engine_version,
            "document_types": {
                dt.value: {
                    "signature": self.signatures[dt].to_dict() if dt in self.signatures else None,
                    "prohibited": list(self.prohibited.get(dt, ())),
                    "categories": [c.to_dict() for c in cats],
                }
                for dt, cats in self.categories.items()
            },
        }


DEFAULT_CONFIG = EngineConfig(
    engine_version=ENGINE_VERSION,
    categories=CATEGORY_DEFINITIONS,
    signatures=DOCUMENT_SIGNATURES,
    prohibited=PROHIBITED_PHRASES,
)


def _parse_category(doc_type: DocumentType, raw: Mapping[str, Any]) -> CategoryDefinition:
    try:
        signals = tuple(
            SignalGroup(name=str(g["name"]), terms=tuple(str(t) for t in g["terms"]), anchor=bool(g.get("anchor", False)))
            for g in raw["signals"]
        )
        return CategoryDefinition(
            name=str(raw["category"]),
            document_type=doc_type,
            signals=signals,
            weight=int(raw["weight"]),
            critical=bool(raw.get("critical", False)),
            impact=ImpactLevel(raw.get("impact", "HIGH")),
            gap_label=str(raw.get("gap_label", "coverage gap")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid category definition for {doc_type.value}: {e}") from e


def config_from_dict(data: Mapping[str, Any], *, base: EngineConfig = DEFAULT_CONFIG) -> EngineConfig:
    """
    Build an EngineConfig from a rubric mapping (see EngineConfig.rubric_dict).
    Document types missing from the mapping keep the base rubric.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Rubric must be a JSON object, got {type(data).__name__}")
    doc_types = data.get("document_types") or {}
    if not isinstance(doc_types, Mapping):
        raise ValueError("Rubric 'document_types' must be an object keyed by document type")

    categories: Dict[DocumentType, Tuple[CategoryDefinition, ...]] = dict(base.categories)
    signatures: Dict[DocumentType, DocumentSignature] = dict(base.signatures)
    prohibited: Dict[DocumentType, Tuple[str, ...]] = dict(base.prohibited)

    for key, entry in doc_types.items():
        try:
            doc_type = DocumentType(key)
        except ValueError as e:
            raise ValueError(f"Unknown document type in rubric: {key!r}") from e
        if not isinstance(entry, Mapping):
            raise ValueError(f"Rubric entry for {key!r} must be an object")

        for list_key in ("categories", "prohibited"):
            if list_key in entry and not isinstance(entry[list_key], list):
                raise ValueError(f"Rubric '{list_key}' for {key!r} must be a list")

        if "categories" in entry:
            categories[doc_type] = tuple(_parse_category(doc_type, c) for c in entry["categories"])
        sig = entry.get("signature")
        if sig and not isinstance(sig, Mapping):
            raise ValueError(f"Signature for {key!r} must be an object")
        if sig:
            signatures[doc_type] = DocumentSignature(
                keywords=tuple(sig.get("keywords", ())),
                title_terms=tuple(sig.get("title_terms", ())),
            )
        if "prohibited" in entry:
            prohibited[doc_type] = tuple(entry["prohibited"])

    return EngineConfig(
        engine_version=str(data.get("engine_version") or base.engine_version),
        categories=MappingProxyType(categories),
        signatures=MappingProxyType(signatures),
        prohibited=MappingProxyType(prohibited),
        licences=base.licences,
        thresholds=base.thresholds,
    )


def load_engine_config(path: Union[str, Path], *, base: EngineConfig = DEFAULT_CONFIG) -> EngineConfig:
    """Load a JSON rubric file into a new EngineConfig."""
    p = Path(path)
    with p.open(encoding="utf-8") as f:
        data = json.load(f)
    config = config_from_dict(data, base=base)
    log.info("Loaded rubric %s from %s", config.engine_version, p)
    return config
