#!/usr/bin/env python3
"""
Tests for the Policy Assessment API.

Covers auth, health, text and file assessment, licence validation and the
rubric/licence listing endpoints.
"""

import pytest
from fastapi.testclient import TestClient

import app as app_module
from app import app

# Create test client
client = TestClient(app)

AUTH_USER = "reviewer"
AUTH_PASSWORD = "s3cret-pass"


@pytest.fixture
def auth_on(monkeypatch):
    """Enable Basic Auth for one test."""
    monkeypatch.setattr(app_module, "AUTHORIZED_USERS", {AUTH_USER: AUTH_PASSWORD})
    monkeypatch.setattr(app_module, "AUTH_ENABLED", True)


# =============================================================================
# AUTH
# =============================================================================

def test_no_auth(auth_on):
    """Endpoints reject requests without credentials."""
    resp = client.get("/")
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"].startswith("Basic")


def test_wrong_auth(auth_on):
    """Endpoints reject a wrong password."""
    resp = client.get("/", auth=(AUTH_USER, "wrongpassword"))
    assert resp.status_code == 401


def test_malformed_auth_header(auth_on):
    resp = client.get("/", headers={"Authorization": "Basic not-base64!"})
    assert resp.status_code == 401


def test_valid_auth(auth_on):
    resp = client.get("/", auth=(AUTH_USER, AUTH_PASSWORD))
    assert resp.status_code == 200
    assert resp.json()["authenticated_user"] == AUTH_USER


def test_auth_disabled_by_default(monkeypatch):
    monkeypatch.setattr(app_module, "AUTH_ENABLED", False)
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["authenticated_user"] == "anonymous"


# =============================================================================
# INFO
# =============================================================================

def test_health():
    """Health endpoint reports engine and rubric."""
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["engine_version"] == "reg-intel-2.0"
    assert data["rubric"]["source"] == "built-in"
    assert sorted(data["rubric"]["document_types"]) == [
        "aml_policy", "business_plan", "governance_policy", "safeguarding_policy",
    ]
    assert data["licences"] == ["AEMI", "API", "RAISP", "SEMI"]


def test_categories():
    data = client.get("/categories").json()
    aml = data["document_types"]["aml_policy"]
    assert sum(c["weight"] for c in aml["categories"]) == 100
    assert aml["signature"]["title_terms"]


def test_licences():
    data = client.get("/licences").json()
    assert data["total"] == 4
    assert data["licences"]["RAISP"]["safeguarding"]["status"] == "PROHIBITED"
    assert data["licences"]["AEMI"]["capital"]["minimum_amount"] == 350000


# =============================================================================
# ASSESSMENT
# =============================================================================

def test_assess_text(good_docs):
    resp = client.post("/assess", json={"text": good_docs["aml_policy"], "document_id": "aml-1", "licence_type": "SEMI"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["document_id"] == "aml-1"
    assert data["document_type"] == "aml_policy"
    assert data["overall_score"] == 100
    assert data["readiness_status"] == "READY"
    assert len(data["category_scores"]) == 6
    assert data["metadata"]["engine_version"] == "reg-intel-2.0"


def test_assess_empty_text():
    data = client.post("/assess", json={"text": ""}).json()
    assert data["readiness_status"] == "BLOCKED"
    assert data["critical_findings"] == ["No document content provided"]


def test_assess_requires_text():
    resp = client.post("/assess", json={"document_id": "x"})
    assert resp.status_code == 422


def test_assess_text_with_lone_surrogate_escape():
    resp = client.post(
        "/assess",
        content=b'{"text": "AML policy MLRO \\ud800"}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 200
    assert resp.json()["metadata"]["policy_hash"]


def test_assess_file_markdown(bad_docs):
    resp = client.post(
        "/assess/file",
        files={"file": ("safeguarding.md", bad_docs["safeguarding_policy"].encode("utf-8"), "text/markdown")},
        params={"licence_type": "API"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["document_id"] == "safeguarding.md"
    assert data["document_type"] == "safeguarding_policy"
    assert data["readiness_status"] == "BLOCKED"
    info = data["metadata"]["document_info"]
    assert info["filename"] == "safeguarding.md"
    assert info["source"] == "plain_text"
    assert "processing_time_ms" in info


def test_assess_file_type_override(good_docs):
    resp = client.post(
        "/assess/file",
        files={"file": ("policy.txt", good_docs["aml_policy"].encode("utf-8"), "text/plain")},
        params={"document_type": "governance_policy", "document_id": "board-pack"},
    )
    data = resp.json()
    assert data["document_id"] == "board-pack"
    assert data["document_type"] == "governance_policy"


def test_assess_file_unsupported():
    resp = client.post("/assess/file", files={"file": ("policy.docx", b"PK\x03\x04", "application/octet-stream")})
    assert resp.status_code == 415


def test_assess_file_empty():
    resp = client.post("/assess/file", files={"file": ("policy.md", b"", "text/markdown")})
    assert resp.status_code == 400


# =============================================================================
# LICENCE VALIDATION
# =============================================================================

def test_validate_results():
    body = {
        "licence_type": "AEMI",
        "results": {
            "aml_policy": {"overall_score": 90},
            "safeguarding_policy": {"overall_score": 90},
            "governance_policy": {"overall_score": 90},
            "business_plan": {
                "overall_score": 85,
                "category_scores": [{"category": "Capital", "score": 6, "max_score": 20}],
            },
        },
    }
    data = client.post("/validate", json=body).json()
    assert data["valid"] is False
    assert data["licence_type"] == "AEMI"
    assert [(f["area"], f["reason"]) for f in data["failures"]] == [("capital", "below_minimum")]


def test_validate_unknown_licence():
    data = client.post("/validate", json={"licence_type": "BANK", "results": {}}).json()
    assert data["valid"] is False
    assert data["failures"][0]["reason"] == "unknown_licence_type"


def test_application_assess(good_docs):
    resp = client.post("/applications/assess", json={"licence_type": "SEMI", "documents": good_docs})
    assert resp.status_code == 200
    data = resp.json()
    assert set(data["results"]) == set(good_docs)
    assert all(r["readiness_status"] == "READY" for r in data["results"].values())
    assert data["validation"]["valid"] is True


def test_application_assess_raisp_with_safeguarding(good_docs):
    data = client.post("/applications/assess", json={"licence_type": "RAISP", "documents": good_docs}).json()
    assert data["validation"]["valid"] is False
    assert data["validation"]["failures"][0]["reason"] == "prohibited_present"
    assert data["results"]["safeguarding_policy"]["warnings"] == ["safeguarding_policy is PROHIBITED for RAISP"]
