from __future__ import annotations

from typing import List

from tradeverify.readiness.models import ComplianceReadiness, ReadinessInputs

# Documents a bank expects in most LC presentations for this trade profile.
LC_SENSITIVE_DOCUMENTS = ("Certificate of Origin", "Phytosanitary", "Bill of Lading")
AUDIT_FRAMEWORKS = ("eudr", "cbam", "csddd")


def evaluate_compliance_readiness(inputs: ReadinessInputs) -> ComplianceReadiness:
    """Derive border, finance and audit readiness from the scoring inputs."""

    rationale: List[str] = []
    overall_status = "READY"
    border_clearance = "READY"
    finance_ready = "YES"
    audit_exposure = "LOW"

    restricted = inputs.has_restriction
    if restricted:
        overall_status = "NOT_READY"
        border_clearance = "BLOCKED"
        rationale.append("Trade prohibited or restricted for this corridor")

    if inputs.triggers.sps or inputs.hazards:
        if border_clearance != "BLOCKED":
            border_clearance = "CONDITIONAL"
        rationale.append("Sanitary/Phytosanitary inspection likely at destination")

    if restricted:
        finance_ready = "NO"
        rationale.append("Missing documents may cause LC or bank rejection")
    else:
        missing = [
            document
            for document in LC_SENSITIVE_DOCUMENTS
            if not any(document in title for title in inputs.requirements)
        ]
        if missing:
            finance_ready = "NO"
            rationale.append("Missing documents may cause LC or bank rejection")

    frameworks = sum(1 for name in AUDIT_FRAMEWORKS if getattr(inputs.triggers, name))
    if frameworks > 1:
        audit_exposure = "HIGH"
        rationale.append("Multiple regulatory audit frameworks apply (EUDR, CBAM, CSDDD)")
    elif frameworks == 1:
        audit_exposure = "MEDIUM"
        rationale.append("Regulatory audit framework applies; maintain evidence for 24 months")

    if overall_status != "NOT_READY" and (border_clearance == "CONDITIONAL" or audit_exposure != "LOW"):
        overall_status = "CONDITIONAL"

    return ComplianceReadiness(
        overall_status=overall_status,
        border_clearance=border_clearance,
        finance_ready=finance_ready,
        audit_exposure_24m=audit_exposure,
        rationale=rationale,
    )
