"""Trade readiness scoring.

The score starts at 100 and loses points in four independent categories.
Each category is capped on its own before the penalties are summed::

    regulatory_complexity  overlay count 0/1/2/3+   ->  0/8/16/30
    hazard_exposure        15 high, 8 medium, 3 other per hazard, cap 30
    document_volume        requirements <5/5-7/8-10/11+  ->  0/8/14/20
    trade_restriction      any restriction flag      ->  20

    score = max(0, 100 - total_penalty)

A restriction flag forces a RED verdict whatever the numeric score.  The
function is pure: stored results are compared against a recomputation to
detect stale templates, so identical inputs must always give identical output.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from tradeverify.readiness.models import (
    DocumentVolumeFactor,
    HazardFactor,
    ReadinessFactors,
    ReadinessInputs,
    ReadinessResult,
    ReadinessVerdict,
    RegulatoryFactor,
    RegulatoryTriggers,
    RestrictionFactor,
    RiskFactor,
)

# Overlay regimes counted towards regulatory complexity.  SPS is handled by the
# hazard and border-clearance logic instead.
OVERLAY_TRIGGERS: Tuple[str, ...] = (
    "eudr",
    "cbam",
    "csddd",
    "kimberley",
    "conflict",
    "iuu",
    "cites",
    "lacey_act",
    "fda_prior_notice",
    "reach",
    "section232",
    "fsis",
)

HIGH_HAZARDS = frozenset(
    {
        "aflatoxin",
        "salmonella",
        "histamine",
        "BSE",
        "FMD",
        "avian_influenza",
        "cyanide",
        "radioactive",
    }
)
MEDIUM_HAZARDS = frozenset(
    {
        "pesticide_residues",
        "heavy_metals",
        "chrome_VI",
        "antibiotics",
        "cadmium",
        "3-MCPD",
        "mercury_contamination",
        "fruit_fly",
        "ethylene_oxide",
    }
)
HAZARD_SENTINELS = frozenset({"none", "none_significant"})

HIGH_HAZARD_POINTS = 15
MEDIUM_HAZARD_POINTS = 8
OTHER_HAZARD_POINTS = 3

REGULATORY_MAX = 30
HAZARD_MAX = 30
DOCUMENT_VOLUME_MAX = 20
RESTRICTION_PENALTY = 20

GREEN_THRESHOLD = 80
AMBER_THRESHOLD = 50

# Tie-break order for the primary risk factor: the first category wins ties.
FACTOR_PRIORITY: Tuple[RiskFactor, ...] = (
    RiskFactor.REGULATORY_COMPLEXITY,
    RiskFactor.HAZARD_EXPOSURE,
    RiskFactor.DOCUMENT_VOLUME,
    RiskFactor.TRADE_RESTRICTION,
)

GREEN_SUMMARY = "This trade has low regulatory complexity. Standard documents apply."
RESTRICTION_SUMMARY = "This trade is subject to a restriction. Review the STOP warning below before proceeding."
HAZARD_SUMMARY = "Known hazard exposure to {hazard} requires pre-shipment testing and documented results."
REGULATORY_SUMMARY = (
    "Multiple overlapping regulations apply; verify all compliance requirements before committing."
)
DOCUMENT_VOLUME_SUMMARY = "High document count increases discrepancy risk; run an LC check before finalising."
FALLBACK_SUMMARY = "This trade requires careful attention before proceeding."


def count_overlays(triggers: RegulatoryTriggers) -> int:
    return sum(1 for name in OVERLAY_TRIGGERS if getattr(triggers, name))


def regulatory_penalty(overlay_count: int) -> int:
    if overlay_count >= 3:
        return REGULATORY_MAX
    if overlay_count == 2:
        return 16
    if overlay_count == 1:
        return 8
    return 0


def hazard_points(hazard: str) -> int:
    if hazard in HIGH_HAZARDS:
        return HIGH_HAZARD_POINTS
    if hazard in MEDIUM_HAZARDS:
        return MEDIUM_HAZARD_POINTS
    return OTHER_HAZARD_POINTS


def hazard_penalty(hazards: Sequence[str]) -> Tuple[int, Optional[str]]:
    """Return the capped hazard penalty and the highest-scoring hazard."""

    total = 0
    primary: Optional[str] = None
    highest = 0
    for hazard in hazards:
        if hazard in HAZARD_SENTINELS:
            continue
        points = hazard_points(hazard)
        total += points
        if points > highest:
            highest = points
            primary = hazard
    return min(total, HAZARD_MAX), primary


def document_volume_penalty(document_count: int) -> int:
    if document_count >= 11:
        return DOCUMENT_VOLUME_MAX
    if document_count >= 8:
        return 14
    if document_count >= 5:
        return 8
    return 0


def primary_risk_factor(penalties: Dict[RiskFactor, int]) -> RiskFactor:
    primary = FACTOR_PRIORITY[0]
    for factor in FACTOR_PRIORITY[1:]:
        if penalties[factor] > penalties[primary]:
            primary = factor
    return primary


def readiness_verdict(score: int, *, restricted: bool) -> ReadinessVerdict:
    if restricted:
        return ReadinessVerdict.RED
    if score >= GREEN_THRESHOLD:
        return ReadinessVerdict.GREEN
    if score >= AMBER_THRESHOLD:
        return ReadinessVerdict.AMBER
    return ReadinessVerdict.RED


def summarize(verdict: ReadinessVerdict, primary: RiskFactor, primary_hazard: Optional[str]) -> str:
    # Message priority (restriction, hazard, regulatory, volume) is not the
    # tie-break order above; both orders are relied upon downstream.
    if verdict is ReadinessVerdict.GREEN:
        return GREEN_SUMMARY
    if primary is RiskFactor.TRADE_RESTRICTION:
        return RESTRICTION_SUMMARY
    if primary is RiskFactor.HAZARD_EXPOSURE and primary_hazard:
        return HAZARD_SUMMARY.format(hazard=primary_hazard.replace("_", " "))
    if primary is RiskFactor.REGULATORY_COMPLEXITY:
        return REGULATORY_SUMMARY
    if primary is RiskFactor.DOCUMENT_VOLUME:
        return DOCUMENT_VOLUME_SUMMARY
    return FALLBACK_SUMMARY


def compute_readiness_score(inputs: ReadinessInputs) -> ReadinessResult:
    """Score trade readiness from regulatory, hazard, volume and restriction signals."""

    overlays = count_overlays(inputs.triggers)
    reg_penalty = regulatory_penalty(overlays)
    haz_penalty, primary_hazard = hazard_penalty(inputs.hazards)
    doc_count = inputs.document_count
    doc_penalty = document_volume_penalty(doc_count)
    restricted = inputs.has_restriction
    stop_penalty = RESTRICTION_PENALTY if restricted else 0

    total_penalty = reg_penalty + haz_penalty + doc_penalty + stop_penalty
    score = max(0, 100 - total_penalty)

    primary = primary_risk_factor(
        {
            RiskFactor.REGULATORY_COMPLEXITY: reg_penalty,
            RiskFactor.HAZARD_EXPOSURE: haz_penalty,
            RiskFactor.DOCUMENT_VOLUME: doc_penalty,
            RiskFactor.TRADE_RESTRICTION: stop_penalty,
        }
    )
    verdict = readiness_verdict(score, restricted=restricted)

    factors = ReadinessFactors(
        regulatory_complexity=RegulatoryFactor(penalty=reg_penalty, max=REGULATORY_MAX, overlay_count=overlays),
        hazard_exposure=HazardFactor(penalty=haz_penalty, max=HAZARD_MAX, primary_hazard=primary_hazard),
        document_volume=DocumentVolumeFactor(
            penalty=doc_penalty, max=DOCUMENT_VOLUME_MAX, document_count=doc_count
        ),
        trade_restriction=RestrictionFactor(
            penalty=stop_penalty, max=RESTRICTION_PENALTY, stop_triggered=restricted
        ),
        total_penalty=total_penalty,
        score=score,
        primary_risk_factor=primary,
    )
    return ReadinessResult(
        score=score,
        verdict=verdict,
        summary=summarize(verdict, primary, primary_hazard),
        factors=factors,
    )
