from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReadinessVerdict(str, Enum):
    GREEN = "GREEN"
    AMBER = "AMBER"
    RED = "RED"


class RiskFactor(str, Enum):
    REGULATORY_COMPLEXITY = "regulatory_complexity"
    HAZARD_EXPOSURE = "hazard_exposure"
    DOCUMENT_VOLUME = "document_volume"
    TRADE_RESTRICTION = "trade_restriction"


class RegulatoryTriggers(BaseModel):
    """Regulatory regimes that apply to a commodity/origin/destination corridor."""

    sps: bool = False
    eudr: bool = False
    cbam: bool = False
    csddd: bool = False
    kimberley: bool = False
    conflict: bool = False
    iuu: bool = False
    cites: bool = False
    lacey_act: bool = False
    fda_prior_notice: bool = False
    reach: bool = False
    section232: bool = False
    fsis: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ReadinessInputs(BaseModel):
    triggers: RegulatoryTriggers = Field(default_factory=RegulatoryTriggers)
    hazards: List[str] = Field(default_factory=list)
    restriction_flags: Optional[Dict[str, str]] = Field(default=None, alias="stopFlags")
    requirements: List[str] = Field(
        default_factory=list,
        description="Titles of the document requirements that apply to the trade.",
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def document_count(self) -> int:
        return len(self.requirements)

    @property
    def has_restriction(self) -> bool:
        return bool(self.restriction_flags)


class RegulatoryFactor(BaseModel):
    penalty: int
    max: int
    overlay_count: int


class HazardFactor(BaseModel):
    penalty: int
    max: int
    primary_hazard: Optional[str] = None


class DocumentVolumeFactor(BaseModel):
    penalty: int
    max: int
    document_count: int


class RestrictionFactor(BaseModel):
    penalty: int
    max: int
    stop_triggered: bool


class ReadinessFactors(BaseModel):
    regulatory_complexity: RegulatoryFactor
    hazard_exposure: HazardFactor
    document_volume: DocumentVolumeFactor
    trade_restriction: RestrictionFactor
    total_penalty: int
    score: int
    primary_risk_factor: RiskFactor


class ReadinessResult(BaseModel):
    score: int = Field(ge=0, le=100)
    verdict: ReadinessVerdict
    summary: str
    factors: ReadinessFactors


class ComplianceReadiness(BaseModel):
    """Qualitative readiness view shown next to the numeric score."""

    overall_status: Literal["READY", "CONDITIONAL", "NOT_READY"]
    border_clearance: Literal["READY", "CONDITIONAL", "BLOCKED"]
    finance_ready: Literal["YES", "NO"]
    audit_exposure_24m: Literal["LOW", "MEDIUM", "HIGH"]
    rationale: List[str] = Field(default_factory=list)
