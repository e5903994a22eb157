"""
Rubric configuration: built-in tables and JSON overrides.
"""

import json
from dataclasses import replace

import pytest

from regintel import (
    DEFAULT_CONFIG, ENGINE_VERSION, DocumentType, EngineConfig, ReadinessStatus, Thresholds, assess_policy,
    load_engine_config,
)
from regintel.config import config_from_dict
from regintel.licence.matrix import LICENCE_EXPECTATIONS
from regintel.rubrics.categories import CategoryDefinition, SignalGroup


def test_category_weights_sum_to_100():
    for doc_type, categories in DEFAULT_CONFIG.categories.items():
        assert sum(c.weight for c in categories) == 100, doc_type


def test_every_critical_category_has_an_anchor():
    for categories in DEFAULT_CONFIG.categories.values():
        for c in categories:
            if c.critical:
                assert c.anchor_terms, c.name


def test_every_document_type_has_signature_and_prohibited_phrases():
    for doc_type in DocumentType:
        assert DEFAULT_CONFIG.signatures[doc_type].keywords
        assert DEFAULT_CONFIG.signatures[doc_type].title_terms
        assert DEFAULT_CONFIG.prohibited[doc_type]


def test_built_in_tables_are_read_only():
    with pytest.raises(TypeError):
        DEFAULT_CONFIG.categories[DocumentType.AML_POLICY] = ()


def test_rubric_dict_loads_back_unchanged():
    config = config_from_dict(DEFAULT_CONFIG.rubric_dict())
    assert dict(config.categories) == dict(DEFAULT_CONFIG.categories)
    assert dict(config.signatures) == dict(DEFAULT_CONFIG.signatures)
    assert config.engine_version == ENGINE_VERSION


def test_load_engine_config_overrides_one_document_type(tmp_path, good_docs):
    rubric = {
        "engine_version": "reg-intel-custom",
        "document_types": {
            "business_plan": {
                "categories": [
                    {
                        "category": "Financials",
                        "weight": 60,
                        "critical": True,
                        "signals": [
                            {"name": "projections", "terms": ["financial projection*"], "anchor": True},
                            {"name": "cash", "terms": ["cash flow"]},
                        ],
                    },
                    {
                        "category": "Exit Plan",
                        "weight": 40,
                        "impact": "LOW",
                        "signals": [{"name": "exit", "terms": ["exit strategy"]}],
                    },
                ],
            },
        },
    }
    path = tmp_path / "rubric.json"
    path.write_text(json.dumps(rubric), encoding="utf-8")

    config = load_engine_config(path)
    assert config.engine_version == "reg-intel-custom"
    assert config.categories[DocumentType.AML_POLICY] == DEFAULT_CONFIG.categories[DocumentType.AML_POLICY]

    result = assess_policy(good_docs["business_plan"], config=config)
    assert [c.category for c in result.category_scores] == ["Financials", "Exit Plan"]
    assert result.overall_score == 60
    assert result.readiness_status is ReadinessStatus.WARNING
    assert result.category("Exit Plan").impact == "LOW impact: cosmetic coverage gap"
    assert result.metadata["engine_version"] == "reg-intel-custom"


def test_weights_must_sum_to_100():
    rubric = {
        "document_types": {
            "aml_policy": {
                "categories": [{"category": "Only", "weight": 50, "signals": [{"name": "mlro", "terms": ["mlro"]}]}],
            },
        },
    }
    with pytest.raises(ValueError, match="sum to 50"):
        config_from_dict(rubric)


def test_duplicate_category_names_are_rejected():
    group = (SignalGroup(name="g", terms=("x",)),)
    cats = tuple(
        CategoryDefinition(name="Same", document_type=DocumentType.AML_POLICY, signals=group, weight=50)
        for _ in range(2)
    )
    with pytest.raises(ValueError, match="Duplicate"):
        replace(DEFAULT_CONFIG, categories={DocumentType.AML_POLICY: cats})


@pytest.mark.parametrize(
    "rubric",
    [
        {"document_types": {"tax_return": {"categories": []}}},
        {"document_types": {"aml_policy": {"categories": [{"category": "No weight", "signals": []}]}}},
        [1, 2],
        {"document_types": ["aml_policy"]},
        {"document_types": {"aml_policy": ["x"]}},
        {"document_types": {"aml_policy": {"signature": ["mlro"]}}},
        {"document_types": {"aml_policy": {"categories": 5}}},
        {"document_types": {"aml_policy": {"prohibited": "optional"}}},
    ],
)
def test_invalid_rubrics_raise_value_error(rubric):
    with pytest.raises(ValueError):
        config_from_dict(rubric)


def test_licences_default_to_built_in_matrix():
    config = EngineConfig(
        engine_version="custom",
        categories=DEFAULT_CONFIG.categories,
        signatures=DEFAULT_CONFIG.signatures,
    )
    assert config.licences is LICENCE_EXPECTATIONS
    assert sorted(config.licences) == ["AEMI", "API", "RAISP", "SEMI"]


def test_rubric_file_that_is_not_an_object(tmp_path):
    path = tmp_path / "rubric.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON object"):
        load_engine_config(path)


def test_custom_thresholds(good_docs):
    strict = replace(DEFAULT_CONFIG, thresholds=Thresholds(ready=101))
    assert assess_policy(good_docs["aml_policy"], config=strict).readiness_status is ReadinessStatus.WARNING
