"""Regulatory readiness scoring for trade corridors."""

from .models import (
    ComplianceReadiness,
    ReadinessFactors,
    ReadinessInputs,
    ReadinessResult,
    ReadinessVerdict,
    RegulatoryTriggers,
    RiskFactor,
)
from .scorer import compute_readiness_score
from .status import evaluate_compliance_readiness

__all__ = [
    "ComplianceReadiness",
    "ReadinessFactors",
    "ReadinessInputs",
    "ReadinessResult",
    "ReadinessVerdict",
    "RegulatoryTriggers",
    "RiskFactor",
    "compute_readiness_score",
    "evaluate_compliance_readiness",
]
