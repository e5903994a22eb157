# regintel/rubrics/categories.py
"""
Static rubric for FCA policy documents.

Each document type has:
- categories: weighted topical dimensions; weights are the category's max points
  and sum to 100 per type
- signal groups: distinct requirements inside a category; a group counts once
  no matter how many of its alternative terms appear
- a signature: keywords and title terms used by the classifier
- prohibited phrases: language that blocks readiness on sight

Terms are plain phrases. Matching is case-insensitive and whole-word; spaces and
hyphens are interchangeable; a trailing '*' is a prefix wildcard.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple


class DocumentType(str, Enum):
    AML_POLICY = "aml_policy"
    SAFEGUARDING_POLICY = "safeguarding_policy"
    GOVERNANCE_POLICY = "governance_policy"
    BUSINESS_PLAN = "business_plan"


class ImpactLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class SignalGroup:
    """One distinct requirement; any of its terms satisfies it."""
    name: str
    terms: Tuple[str, ...]
    # Anchor groups must be present in critical categories.
    anchor: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "terms": list(self.terms), "anchor": self.anchor}


@dataclass(frozen=True)
class CategoryDefinition:
    """Complete definition of a scored rubric category."""
    name: str
    document_type: DocumentType
    signals: Tuple[SignalGroup, ...]
    weight: int
    critical: bool = False
    impact: ImpactLevel = ImpactLevel.HIGH
    # What a shortfall here means for the firm's risk profile
    gap_label: str = "coverage gap"

    @property
    def max_points(self) -> int:
        return self.weight

    @property
    def anchor_terms(self) -> Tuple[str, ...]:
        return tuple(t for g in self.signals if g.anchor for t in g.terms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.name,
            "document_type": self.document_type.value,
            "weight": self.weight,
            "critical": self.critical,
            "impact": self.impact.value,
            "gap_label": self.gap_label,
            "signals": [g.to_dict() for g in self.signals],
        }


@dataclass(frozen=True)
class DocumentSignature:
    """Classifier fingerprint for a document type."""
    keywords: Tuple[str, ...]
    title_terms: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"keywords": list(self.keywords), "title_terms": list(self.title_terms)}


def _g(name: str, *terms: str, anchor: bool = False) -> SignalGroup:
    return SignalGroup(name=name, terms=tuple(terms), anchor=anchor)


# =============================================================================
# CATEGORY DEFINITIONS
# =============================================================================

_AML = DocumentType.AML_POLICY
_SAFE = DocumentType.SAFEGUARDING_POLICY
_GOV = DocumentType.GOVERNANCE_POLICY
_BP = DocumentType.BUSINESS_PLAN

_CATEGORIES: Dict[DocumentType, Tuple[CategoryDefinition, ...]] = {
    _AML: (
        CategoryDefinition(
            name="AML Governance",
            document_type=_AML,
            weight=25,
            critical=True,
            gap_label="governance gap",
            signals=(
                _g("mlro", "mlro", "money laundering reporting officer", "nominated officer", anchor=True),
                _g("smf17", "smf17", "smf 17"),
                _g("board_oversight", "board oversight", "board of directors", "board receives", "board responsibility"),
                _g("management_reporting", "annual mlro report", "quarterly report*", "annual report", "management information"),
                _g("deputy", "deputy mlro", "deputy nominated officer"),
                _g("framework", "aml framework", "compliance monitoring", "policy review"),
            ),
        ),
        CategoryDefinition(
            name="Risk-Based Approach",
            document_type=_AML,
            weight=25,
            critical=True,
            gap_label="risk assessment gap",
            signals=(
                _g("risk_based_approach", "risk-based approach", "risk assessment", anchor=True),
                _g("business_wide_assessment", "business-wide risk assessment", "firm-wide risk assessment"),
                _g("customer_risk", "customer risk", "risk rating", "risk scoring"),
                _g("risk_factors", "geographic risk", "product risk", "channel risk", "delivery channel*"),
                _g("high_risk_jurisdictions", "high-risk third countr*", "high-risk jurisdiction*", "fatf"),
                _g("risk_appetite", "risk appetite"),
            ),
        ),
        CategoryDefinition(
            name="CDD & EDD",
            document_type=_AML,
            weight=20,
            critical=True,
            gap_label="customer due diligence gap",
            signals=(
                _g("cdd", "customer due diligence", "cdd", anchor=True),
                _g("edd", "enhanced due diligence", "edd"),
                _g("sdd", "simplified due diligence", "sdd"),
                _g("beneficial_ownership", "beneficial owner*", "ultimate beneficial"),
                _g("peps", "politically exposed", "pep", "peps"),
                _g("source_of_funds", "source of funds", "source of wealth"),
                _g("ongoing_monitoring", "ongoing monitoring"),
            ),
        ),
        CategoryDefinition(
            name="Transaction Monitoring",
            document_type=_AML,
            weight=15,
            gap_label="detection gap",
            signals=(
                _g("monitoring", "transaction monitoring", "automated monitoring"),
                _g("sars", "suspicious activity report*", "sar", "sars"),
                _g("nca", "national crime agency", "nca"),
                _g("tipping_off", "tipping off"),
                _g("alerts", "alert*"),
                _g("consent", "defence against money laundering", "daml"),
            ),
        ),
        CategoryDefinition(
            name="Record Keeping",
            document_type=_AML,
            weight=10,
            impact=ImpactLevel.MEDIUM,
            gap_label="audit trail gap",
            signals=(
                _g("retention", "five years", "5 years", "retention period"),
                _g("records", "record keeping", "records maintained", "transaction records"),
                _g("data_protection", "data protection", "gdpr"),
                _g("audit_trail", "audit trail"),
            ),
        ),
        CategoryDefinition(
            name="Training",
            document_type=_AML,
            weight=5,
            impact=ImpactLevel.MEDIUM,
            gap_label="competence gap",
            signals=(
                _g("programme", "training programme", "training program", "staff training"),
                _g("refresher", "annual refresher", "refresher training"),
                _g("induction", "induction"),
                _g("competence", "competence", "assessment of understanding"),
            ),
        ),
    ),
    _SAFE: (
        CategoryDefinition(
            name="Safeguarding Method",
            document_type=_SAFE,
            weight=40,
            critical=True,
            gap_label="client fund protection gap",
            signals=(
                _g("method", "segregation method", "segregat*", "safeguarding account", "designated client account", anchor=True),
                _g("relevant_funds", "relevant funds"),
                _g("regulation", "emr 21", "regulation 21", "psr 23", "regulation 23"),
                _g("timing", "business day following receipt", "end of the business day", "d+1"),
                _g("credit_institution", "authorised credit institution", "credit institution"),
                _g("acknowledgement_letter", "acknowledgement letter", "acknowledgment letter"),
                _g("commingling", "commingl*", "co-mingl*"),
                _g("alternative_methods", "insurance method", "guarantee method", "comparable guarantee"),
            ),
        ),
        CategoryDefinition(
            name="Reconciliation",
            document_type=_SAFE,
            weight=30,
            critical=True,
            gap_label="reconciliation gap",
            signals=(
                _g("reconciliation", "reconciliation*", "reconcil*", anchor=True),
                _g("frequency", "daily reconciliation", "each business day", "daily"),
                _g("internal_external", "internal reconciliation", "external reconciliation"),
                _g("discrepancies", "discrepanc*", "shortfall*"),
                _g("top_up", "top up", "topped up"),
                _g("evidence", "reconciliation record*", "bank statement*"),
            ),
        ),
        CategoryDefinition(
            name="Governance Oversight",
            document_type=_SAFE,
            weight=20,
            gap_label="oversight gap",
            signals=(
                _g("board", "board", "board of directors"),
                _g("reporting", "monthly report*", "quarterly report*", "management information"),
                _g("responsible_person", "head of finance", "designated individual", "safeguarding officer", "smf"),
                _g("audit", "safeguarding audit", "external audit*", "internal audit", "annual audit"),
                _g("review", "annual review", "policy review"),
            ),
        ),
        CategoryDefinition(
            name="Wind-Down",
            document_type=_SAFE,
            weight=10,
            impact=ImpactLevel.MEDIUM,
            gap_label="resolution gap",
            signals=(
                _g("plan", "wind-down plan", "wind down", "winding down"),
                _g("insolvency", "insolvency", "insolvency practitioner", "administrator*"),
                _g("return_of_funds", "return of funds", "redemption", "returned to customers"),
                _g("notification", "customer notification", "notify customers"),
            ),
        ),
    ),
    _GOV: (
        CategoryDefinition(
            name="Board Structure",
            document_type=_GOV,
            weight=30,
            critical=True,
            gap_label="governance gap",
            signals=(
                _g("board", "board of directors", "the board", "board", anchor=True),
                _g("composition", "board composition", "board structure", "chair*"),
                _g("executive_roles", "chief executive", "ceo", "cfo", "chief financial officer", "executive director*"),
                _g("meetings", "board meeting*", "quorum", "minutes"),
                _g("reserved_matters", "matters reserved", "reserved matters", "terms of reference"),
                _g("committees", "audit committee", "risk committee", "remuneration committee", "nomination committee"),
            ),
        ),
        CategoryDefinition(
            name="Independence",
            document_type=_GOV,
            weight=25,
            critical=True,
            gap_label="independent challenge gap",
            signals=(
                _g("independence", "independent", "independence", anchor=True),
                _g("neds", "non-executive director*", "ned", "neds"),
                _g("conflicts", "conflict of interest", "conflicts of interest"),
                _g("register", "register of interests"),
                _g("challenge", "independent challenge", "constructive challenge", "private session"),
                _g("effectiveness", "board effectiveness", "effectiveness review"),
            ),
        ),
        CategoryDefinition(
            name="Three Lines of Defence",
            document_type=_GOV,
            weight=25,
            critical=True,
            gap_label="assurance gap",
            signals=(
                _g("model", "three lines of defence", "three lines of defense", "internal audit", anchor=True),
                _g("first_line", "first line"),
                _g("second_line", "second line"),
                _g("third_line", "third line"),
                _g("assurance", "independent assurance", "combined assurance", "audit plan"),
                _g("remediation", "remediation", "action tracking"),
            ),
        ),
        CategoryDefinition(
            name="Compliance Oversight",
            document_type=_GOV,
            weight=20,
            gap_label="compliance gap",
            signals=(
                _g("function", "compliance function", "head of compliance", "compliance oversight"),
                _g("smf16", "smf16", "smf 16"),
                _g("monitoring", "compliance monitoring programme", "compliance monitoring program", "compliance monitoring plan"),
                _g("regulatory_reporting", "regulatory reporting", "regulatory return*"),
                _g("conduct", "consumer duty", "fca principles", "principles for businesses"),
                _g("whistleblowing", "whistleblow*"),
                _g("breaches", "breach*"),
            ),
        ),
    ),
    _BP: (
        CategoryDefinition(
            name="Business Model",
            document_type=_BP,
            weight=30,
            critical=True,
            gap_label="viability gap",
            signals=(
                _g("model", "business model", "revenue model", "revenue stream*", anchor=True),
                _g("target_market", "target market", "customer segment*"),
                _g("competition", "competitive advantage", "competitor*", "competitive landscape"),
                _g("distribution", "distribution channel*", "go-to-market"),
                _g("offering", "product*", "service offering", "e-money", "payment service*"),
                _g("pricing", "transaction fee*", "subscription*", "interchange", "pricing"),
            ),
        ),
        CategoryDefinition(
            name="Financial Viability",
            document_type=_BP,
            weight=30,
            critical=True,
            gap_label="viability gap",
            signals=(
                _g("projections", "financial projection*", "financial forecast*", "financial viability", anchor=True),
                _g("horizon", "three-year", "3-year", "year 1", "year 3"),
                _g("revenue", "revenue"),
                _g("costs", "operating cost*", "operating expense*", "cost base"),
                _g("profitability", "ebitda", "net profit", "breakeven", "break-even"),
                _g("cash", "cash flow", "burn rate", "cash runway", "runway"),
                _g("stress_testing", "stress test*", "stress scenario*", "sensitivity analysis"),
                _g("funding", "funding", "investment", "investor*"),
            ),
        ),
        CategoryDefinition(
            name="Regulatory Readiness",
            document_type=_BP,
            weight=20,
            gap_label="authorisation readiness gap",
            signals=(
                _g("authorisation", "fca authorisation", "fca authorization", "authorisation application", "authorization application", "regulatory readiness"),
                _g("smcr", "sm&cr", "senior managers", "senior management function*", "smf"),
                _g("policies", "aml policy", "safeguarding policy", "governance framework"),
                _g("consumer_duty", "consumer duty"),
                _g("resilience", "operational resilience", "business continuity"),
                _g("complaints", "complaints handling", "complaints procedure", "financial ombudsman"),
                _g("reporting", "regulatory reporting", "regdata", "reg data"),
            ),
        ),
        CategoryDefinition(
            name="Capital",
            document_type=_BP,
            weight=20,
            gap_label="prudential gap",
            signals=(
                _g("capital", "initial capital", "share capital", "own funds"),
                _g("requirement", "capital requirement*", "minimum requirement", "€350,000", "350,000", "350k"),
                _g("calculation_method", "method a", "method b", "method d", "calculation method"),
                _g("adequacy", "capital adequacy", "icaap", "capital monitoring"),
                _g("buffer", "buffer", "headroom"),
                _g("equity", "equity", "share premium", "paid-up"),
            ),
        ),
    ),
}


# =============================================================================
# CLASSIFIER SIGNATURES
# =============================================================================

_SIGNATURES: Dict[DocumentType, DocumentSignature] = {
    _AML: DocumentSignature(
        keywords=(
            "money laundering", "aml", "mlro", "suspicious activity", "sar",
            "customer due diligence", "cdd", "enhanced due diligence", "edd",
            "know your customer", "kyc", "terrorist financing", "ctf",
            "proceeds of crime", "national crime agency", "nca",
            "politically exposed", "pep", "sanctions screening",
            "transaction monitoring", "tipping off", "mlr 2017",
        ),
        title_terms=("anti-money laundering", "money laundering", "aml", "financial crime", "terrorist financing"),
    ),
    _SAFE: DocumentSignature(
        keywords=(
            "safeguarding", "client fund*", "client money", "segregat*",
            "relevant funds", "emr 21", "regulation 21", "psr 23",
            "reconciliation", "designated client account", "safeguarding account",
            "wind-down", "e-money", "electronic money", "cass", "client asset*",
        ),
        title_terms=("safeguarding", "client funds", "relevant funds"),
    ),
    _GOV: DocumentSignature(
        keywords=(
            "governance", "board of directors", "board structure", "non-executive",
            "ned", "independent director*", "three lines of defence", "three lines of defense",
            "internal audit", "compliance oversight", "smf", "sm&cr",
            "senior managers", "certification regime", "audit committee",
            "risk committee", "remuneration committee", "nomination committee",
            "whistleblow*", "board effectiveness",
        ),
        title_terms=("governance", "board charter", "terms of reference"),
    ),
    _BP: DocumentSignature(
        keywords=(
            "business plan", "business model", "revenue model", "financial projection*",
            "financial viability", "capital requirement*", "initial capital",
            "three-year", "3-year", "target market", "competitive advantage",
            "funding", "cash flow", "breakeven", "break-even", "ebitda",
            "staffing plan", "distribution channel*", "regulatory readiness",
            "authorisation application", "authorization application",
        ),
        title_terms=("business plan", "regulatory business plan", "programme of operations"),
    ),
}


# =============================================================================
# PROHIBITED PRACTICE LANGUAGE
# =============================================================================

_PROHIBITED: Dict[DocumentType, Tuple[str, ...]] = {
    _AML: (
        "anonymous accounts are permitted",
        "cdd is not required",
        "due diligence is not required",
        "identity verification is optional",
        "tip off the customer",
        "we do not report suspicious",
    ),
    _SAFE: (
        "relevant funds may be used",
        "client funds may be used",
        "held in our operating account",
        "used to pay operating expenses",
        "reconciliation is not performed",
    ),
    _GOV: (
        "no board meetings",
        "the ceo also acts as chair",
        "conflicts are not recorded",
    ),
    _BP: (
        "no financial projections",
        "capital is not required",
    ),
}


def _freeze(d: Dict[DocumentType, Any]) -> Mapping[DocumentType, Any]:
    return MappingProxyType(dict(d))


CATEGORY_DEFINITIONS: Mapping[DocumentType, Tuple[CategoryDefinition, ...]] = _freeze(_CATEGORIES)
DOCUMENT_SIGNATURES: Mapping[DocumentType, DocumentSignature] = _freeze(_SIGNATURES)
PROHIBITED_PHRASES: Mapping[DocumentType, Tuple[str, ...]] = _freeze(_PROHIBITED)


def parse_document_type(value: Any) -> DocumentType | None:
    """Map a string (or DocumentType) to a DocumentType, None if unknown."""
    if isinstance(value, DocumentType):
        return value
    if isinstance(value, str):
        try:
            return DocumentType(value.strip().lower())
        except ValueError:
            return None
    return None


def get_categories(
    document_type: DocumentType,
    rubric: Mapping[DocumentType, Tuple[CategoryDefinition, ...]] = CATEGORY_DEFINITIONS,
) -> Tuple[CategoryDefinition, ...]:
    return rubric.get(document_type, ())


def get_category(
    document_type: DocumentType,
    name: str,
    rubric: Mapping[DocumentType, Tuple[CategoryDefinition, ...]] = CATEGORY_DEFINITIONS,
) -> CategoryDefinition | None:
    return next((c for c in get_categories(document_type, rubric) if c.name == name), None)
