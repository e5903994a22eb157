from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"

DOC_FILES = {
    "aml_policy": "aml-policy",
    "safeguarding_policy": "safeguarding-policy",
    "governance_policy": "governance-policy",
    "business_plan": "business-plan",
}


def _load(kind: str) -> dict:
    suffix = kind.lower()
    return {
        doc_type: (FIXTURES / kind / f"{stem}-{suffix}.md").read_text(encoding="utf-8")
        for doc_type, stem in DOC_FILES.items()
    }


@pytest.fixture(scope="session")
def good_docs():
    """Complete policies, one per document type."""
    return _load("GOOD")


@pytest.fixture(scope="session")
def bad_docs():
    """Thin policies that name their type but cover little of it."""
    return _load("BAD")
