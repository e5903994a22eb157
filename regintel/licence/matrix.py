# regintel/licence/matrix.py
"""
Regulatory expectations per FCA licence class.

Each licence states, for every document area, whether a policy is REQUIRED,
PROHIBITED or OPTIONAL, plus a capital expectation. Adding a licence class means
adding one entry to LICENCE_EXPECTATIONS.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from regintel.rubrics.categories import DocumentType


class AreaStatus(str, Enum):
    REQUIRED = "REQUIRED"
    PROHIBITED = "PROHIBITED"
    OPTIONAL = "OPTIONAL"


# Matrix area -> key used in assessment bundles
AREA_DOCUMENT_TYPES: Mapping[str, DocumentType] = MappingProxyType({
    "safeguarding": DocumentType.SAFEGUARDING_POLICY,
    "aml": DocumentType.AML_POLICY,
    "governance": DocumentType.GOVERNANCE_POLICY,
    "business_plan": DocumentType.BUSINESS_PLAN,
})

AREAS: Tuple[str, ...] = tuple(AREA_DOCUMENT_TYPES.keys())


@dataclass(frozen=True)
class AreaExpectation:
    required: bool
    status: AreaStatus
    regulation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"required": self.required, "status": self.status.value, "regulation": self.regulation}


@dataclass(frozen=True)
class CapitalExpectation:
    """
    Capital is checked through the business plan's Capital category.

    minimum_score is a coverage percentage (0-100) of that category.
    minimum_amount is the regulatory initial capital in EUR; it is informational
    and never compared against a rubric score.
    """
    required: bool
    minimum_score: Optional[float] = None
    minimum_amount: Optional[int] = None
    level: str = "N/A"
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "required": self.required,
            "minimum_score": self.minimum_score,
            "minimum_amount": self.minimum_amount,
            "level": self.level,
            "description": self.description,
        }


@dataclass(frozen=True)
class LicenceExpectation:
    code: str
    name: str
    safeguarding: AreaExpectation
    aml: AreaExpectation
    governance: AreaExpectation
    business_plan: AreaExpectation
    capital: CapitalExpectation
    business_plan_depth: str = "Low"

    def area(self, name: str) -> AreaExpectation:
        if name not in AREA_DOCUMENT_TYPES:
            raise KeyError(name)
        return getattr(self, name)

    def areas(self) -> Tuple[Tuple[str, AreaExpectation], ...]:
        return tuple((a, self.area(a)) for a in AREAS)

    def is_prohibited(self, document_type: DocumentType) -> bool:
        return any(
            AREA_DOCUMENT_TYPES[a] == document_type and exp.status is AreaStatus.PROHIBITED
            for a, exp in self.areas()
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code, "name": self.name}
        for a, exp in self.areas():
            out[a] = exp.to_dict()
        out["capital"] = self.capital.to_dict()
        out["business_plan_depth"] = self.business_plan_depth
        return out


def _required(regulation: Optional[str] = None) -> AreaExpectation:
    return AreaExpectation(required=True, status=AreaStatus.REQUIRED, regulation=regulation)


_LICENCES: Dict[str, LicenceExpectation] = {
    "SEMI": LicenceExpectation(
        code="SEMI",
        name="Small Electronic Money Institution",
        safeguarding=_required("EMR 21"),
        aml=_required("MLR 2017"),
        governance=_required("FCA SYSC"),
        business_plan=_required(),
        capital=CapitalExpectation(required=True, level="Low", description="No fixed minimum for SEMI"),
        business_plan_depth="Low",
    ),
    "API": LicenceExpectation(
        code="API",
        name="Authorised Payment Institution",
        safeguarding=_required("PSR 23"),
        aml=_required("MLR 2017"),
        governance=_required("FCA SYSC"),
        business_plan=_required(),
        capital=CapitalExpectation(required=True, level="Proportional", description="Proportional to payment volumes"),
        business_plan_depth="Medium",
    ),
    "AEMI": LicenceExpectation(
        code="AEMI",
        name="Authorised Electronic Money Institution",
        safeguarding=_required("EMR 21"),
        aml=_required("MLR 2017"),
        governance=_required("FCA SYSC"),
        business_plan=_required(),
        capital=CapitalExpectation(
            required=True,
            minimum_score=60,
            minimum_amount=350000,
            level="High",
            description="€350k initial capital requirement",
        ),
        business_plan_depth="High",
    ),
    "RAISP": LicenceExpectation(
        code="RAISP",
        name="Registered Account Information Service Provider",
        safeguarding=AreaExpectation(required=False, status=AreaStatus.PROHIBITED),
        aml=_required("MLR 2017"),
        governance=_required("FCA SYSC"),
        business_plan=_required(),
        capital=CapitalExpectation(required=False, description="No capital requirement for RAISP"),
        business_plan_depth="Low",
    ),
}

LICENCE_EXPECTATIONS: Mapping[str, LicenceExpectation] = MappingProxyType(_LICENCES)


def get_licence(
    code: Any,
    licences: Mapping[str, LicenceExpectation] = LICENCE_EXPECTATIONS,
) -> LicenceExpectation | None:
    if not isinstance(code, str):
        return None
    return licences.get(code.strip().upper())
