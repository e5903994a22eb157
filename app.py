# app.py
"""
Policy Assessment API - FastAPI service over the regintel engine.

Assesses FCA policy documents (AML, safeguarding, governance, business plan)
against a deterministic rubric and validates document sets against licence
expectations (SEMI, API, AEMI, RAISP).

Run with: uvicorn app:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import secrets
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from regintel import (
    DEFAULT_CONFIG, EngineConfig, assess_documents, assess_policy, load_engine_config,
    validate_policy_for_licence,
)
from regintel.extract.ingest import UnsupportedDocumentError, extract_upload

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("regintel.api")

API_VERSION = "1.0.0"

# =============================================================================
# CONFIGURATION
# =============================================================================

RUBRIC_PATH = os.getenv("REGINTEL_RUBRIC_PATH", "").strip()
OCR_LANG = os.getenv("REGINTEL_OCR_LANG", "eng")


def build_engine_config() -> EngineConfig:
    if RUBRIC_PATH:
        return load_engine_config(RUBRIC_PATH)
    return DEFAULT_CONFIG


# Swapped as a whole, never mutated
ENGINE_CONFIG: EngineConfig = build_engine_config()

# =============================================================================
# BASIC AUTH CONFIGURATION
# =============================================================================

AUTH_USERS_STR = os.getenv("REGINTEL_AUTH_USERS", "")
AUTH_PASSWORD = os.getenv("REGINTEL_AUTH_PASSWORD", "")

# Parse comma-separated usernames
AUTHORIZED_USERS: Dict[str, str] = {}
if AUTH_USERS_STR and AUTH_PASSWORD:
    for username in AUTH_USERS_STR.split(","):
        username = username.strip()
        if username:
            AUTHORIZED_USERS[username] = AUTH_PASSWORD

AUTH_ENABLED = bool(AUTHORIZED_USERS)
AUTH_REALM = 'Basic realm="Policy Assessment API"'


def check_credentials(auth_header: Optional[str]) -> Optional[str]:
    """
    Return the username for a valid Basic Authorization header, else None.
    """
    if not auth_header or not auth_header.startswith("Basic "):
        return None
    try:
        decoded = base64.b64decode(auth_header.split(" ", 1)[1]).decode("utf-8")
        username, password = decoded.split(":", 1)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    stored_password = AUTHORIZED_USERS.get(username)
    # Constant-time comparison
    if stored_password is None or not secrets.compare_digest(password, stored_password):
        return None
    return username


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class AssessRequest(BaseModel):
    text: str = Field(..., description="Full policy text (markdown tolerated)")
    document_id: Optional[str] = None
    licence_type: Optional[str] = Field(None, description="SEMI, API, AEMI or RAISP")
    document_type: Optional[str] = Field(None, description="Override type detection")


class CategoryScoreOut(BaseModel):
    category: str
    score: int
    max_score: int
    status: str
    impact: str
    evidence: List[str]
    explanation: str
    signals_found: List[str]
    signals_missing: List[str]


class AssessmentResponse(BaseModel):
    document_id: str
    document_type: Optional[str]
    licence_type: Optional[str]
    overall_score: int = Field(..., ge=0, le=100)
    readiness_status: str
    category_scores: List[CategoryScoreOut]
    critical_findings: List[str]
    warnings: List[str]
    metadata: Dict[str, Any]


class CategoryScoreIn(BaseModel):
    category: str
    score: float
    max_score: float = 100


class AreaResultIn(BaseModel):
    overall_score: float = 0
    category_scores: List[CategoryScoreIn] = Field(default_factory=list)


class ValidateRequest(BaseModel):
    licence_type: str
    results: Dict[str, AreaResultIn] = Field(
        default_factory=dict,
        description="Keyed by aml_policy, safeguarding_policy, governance_policy, business_plan",
    )


class ValidationFailureOut(BaseModel):
    area: str
    reason: str
    detail: str


class ValidationResponse(BaseModel):
    valid: bool
    licence_type: Optional[str]
    failures: List[ValidationFailureOut]
    warnings: List[str]


class ApplicationRequest(BaseModel):
    licence_type: str
    documents: Dict[str, str] = Field(
        ...,
        description="Policy texts keyed by aml_policy, safeguarding_policy, governance_policy, business_plan",
    )


class ApplicationResponse(BaseModel):
    results: Dict[str, AssessmentResponse]
    validation: ValidationResponse


# =============================================================================
# FASTAPI APP
# =============================================================================

app = FastAPI(
    title="Policy Assessment API",
    description="""
    Deterministic assessment of FCA policy documents and licence compliance checks.

    ## Authentication

    When `REGINTEL_AUTH_USERS` and `REGINTEL_AUTH_PASSWORD` are set, every request
    needs **Basic HTTP Authentication**.

    ## Readiness

    * **READY**: overall score >= 80 and no critical findings
    * **WARNING**: overall score 50-79 and no critical findings
    * **BLOCKED**: overall score < 50 or any critical finding
    """,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def to_response(result) -> AssessmentResponse:
    return AssessmentResponse(**result.to_dict())


# =============================================================================
# API ENDPOINTS
# =============================================================================

@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    """
    Enforce Basic Auth on all requests when configured.
    Skips OPTIONS requests (CORS preflight).
    """
    if not AUTH_ENABLED or request.method == "OPTIONS":
        return await call_next(request)

    username = check_credentials(request.headers.get("Authorization"))
    if username is None:
        return JSONResponse(
            status_code=401,
            headers={"WWW-Authenticate": AUTH_REALM},
            content={"detail": "Authentication required"},
        )

    request.state.username = username
    return await call_next(request)


@app.get("/")
async def root(request: Request):
    """Root endpoint with API info."""
    return {
        "name": "Policy Assessment API",
        "version": API_VERSION,
        "engine_version": ENGINE_CONFIG.engine_version,
        "authenticated_user": getattr(request.state, "username", "anonymous"),
        "auth_enabled": AUTH_ENABLED,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health(request: Request):
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": API_VERSION,
        "engine_version": ENGINE_CONFIG.engine_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "authenticated_user": getattr(request.state, "username", "anonymous"),
        "auth_enabled": AUTH_ENABLED,
        "rubric": {
            "source": RUBRIC_PATH or "built-in",
            "document_types": [dt.value for dt in ENGINE_CONFIG.categories],
        },
        "licences": sorted(ENGINE_CONFIG.licences.keys()),
    }


@app.post("/assess", response_model=AssessmentResponse)
def assess_endpoint(body: AssessRequest):
    """Assess one policy document supplied as text."""
    result = assess_policy(
        body.text,
        {"document_id": body.document_id, "licence_type": body.licence_type, "document_type": body.document_type},
        config=ENGINE_CONFIG,
    )
    return to_response(result)


@app.post("/assess/file", response_model=AssessmentResponse)
async def assess_file_endpoint(
    file: UploadFile = File(..., description="Policy document (.pdf, .md or .txt)"),
    document_id: Optional[str] = Query(None),
    licence_type: Optional[str] = Query(None, description="SEMI, API, AEMI or RAISP"),
    document_type: Optional[str] = Query(None, description="Override type detection"),
    ocr_max_pages: int = Query(20, ge=1, le=200),
):
    """Assess an uploaded policy document."""
    filename = file.filename or "unknown"

    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Empty file")

    start_time = time.time()
    try:
        doc, quality = extract_upload(filename, contents, ocr_lang=OCR_LANG, ocr_max_pages=ocr_max_pages)
    except UnsupportedDocumentError as e:
        raise HTTPException(status_code=415, detail=str(e)) from e
    except Exception as e:
        log.exception("Extraction failed for %s", filename)
        raise HTTPException(status_code=500, detail=f"Extraction failed: {e}") from e

    result = assess_policy(
        doc.text,
        {"document_id": document_id or filename, "licence_type": licence_type, "document_type": document_type},
        config=ENGINE_CONFIG,
    )
    result.metadata["document_info"] = {
        "filename": filename,
        "pages": doc.pages,
        "source": doc.source,
        "text_length": len(doc.text),
        "text_quality": {"ok": quality.ok, "reason": quality.reason, **quality.metrics},
        "processing_time_ms": round((time.time() - start_time) * 1000, 2),
    }
    return to_response(result)


@app.post("/validate", response_model=ValidationResponse)
def validate_endpoint(body: ValidateRequest):
    """Validate per-area assessment results against a licence class."""
    results = {area: r.model_dump() for area, r in body.results.items()}
    return ValidationResponse(**validate_policy_for_licence(body.licence_type, results, config=ENGINE_CONFIG).to_dict())


@app.post("/applications/assess", response_model=ApplicationResponse)
def application_endpoint(body: ApplicationRequest):
    """Assess a full document set and validate it for the licence in one call."""
    results = assess_documents(body.documents, body.licence_type, config=ENGINE_CONFIG)
    validation = validate_policy_for_licence(body.licence_type, results, config=ENGINE_CONFIG)
    return ApplicationResponse(
        results={area: to_response(r) for area, r in results.items()},
        validation=ValidationResponse(**validation.to_dict()),
    )


@app.get("/categories")
async def list_categories():
    """Rubric definitions (same JSON shape accepted by REGINTEL_RUBRIC_PATH)."""
    return ENGINE_CONFIG.rubric_dict()


@app.get("/licences")
async def list_licences():
    """Licence expectation matrix."""
    return {
        "licences": {code: exp.to_dict() for code, exp in ENGINE_CONFIG.licences.items()},
        "total": len(ENGINE_CONFIG.licences),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
