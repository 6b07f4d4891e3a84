"""Tests for the trade readiness scorer.

Covers each penalty band, the caps, the restriction override and the
primary-risk tie-break.
"""

from __future__ import annotations

from typing import Any, Dict

import pytest

from tradeverify.readiness.models import ReadinessInputs, ReadinessVerdict, RiskFactor
from tradeverify.readiness.scorer import (
    DOCUMENT_VOLUME_SUMMARY,
    GREEN_SUMMARY,
    REGULATORY_SUMMARY,
    RESTRICTION_SUMMARY,
    compute_readiness_score,
    document_volume_penalty,
    hazard_penalty,
    primary_risk_factor,
    regulatory_penalty,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_inputs(**overrides) -> ReadinessInputs:
    base: Dict[str, Any] = {"triggers": {}, "hazards": [], "stopFlags": None, "requirements": []}
    base.update(overrides)
    return ReadinessInputs.model_validate(base)


def _requirements(count: int):
    return [f"Requirement {index}" for index in range(count)]


# ---------------------------------------------------------------------------
# Penalty bands
# ---------------------------------------------------------------------------

class TestPenaltyBands:
    @pytest.mark.parametrize("overlays, expected", [(0, 0), (1, 8), (2, 16), (3, 30), (7, 30)])
    def test_regulatory(self, overlays, expected):
        assert regulatory_penalty(overlays) == expected

    @pytest.mark.parametrize("count, expected", [(0, 0), (4, 0), (5, 8), (7, 8), (8, 14), (10, 14), (11, 20)])
    def test_document_volume(self, count, expected):
        assert document_volume_penalty(count) == expected

    def test_hazards_are_weighted_and_capped(self):
        assert hazard_penalty(["aflatoxin"]) == (15, "aflatoxin")
        assert hazard_penalty(["pesticide_residues"]) == (8, "pesticide_residues")
        assert hazard_penalty(["mould"]) == (3, "mould")
        assert hazard_penalty(["aflatoxin", "salmonella", "cadmium"]) == (30, "aflatoxin")

    def test_primary_hazard_is_first_of_highest_weight(self):
        _, primary = hazard_penalty(["mould", "cadmium", "salmonella", "aflatoxin"])
        assert primary == "salmonella"

    @pytest.mark.parametrize("sentinel", ["none", "none_significant"])
    def test_sentinels_contribute_nothing(self, sentinel):
        assert hazard_penalty([sentinel]) == (0, None)


# ---------------------------------------------------------------------------
# Score and verdict
# ---------------------------------------------------------------------------

class TestComputeReadinessScore:
    def test_no_signals_is_green(self):
        result = compute_readiness_score(_make_inputs())
        assert result.score == 100
        assert result.verdict is ReadinessVerdict.GREEN
        assert result.summary == GREEN_SUMMARY
        assert result.factors.primary_risk_factor is RiskFactor.REGULATORY_COMPLEXITY

    def test_sps_is_not_an_overlay(self):
        result = compute_readiness_score(_make_inputs(triggers={"sps": True}))
        assert result.factors.regulatory_complexity.overlay_count == 0

    def test_camel_case_triggers_are_counted(self):
        result = compute_readiness_score(
            _make_inputs(triggers={"laceyAct": True, "fdaPriorNotice": True, "section232": True})
        )
        assert result.factors.regulatory_complexity.overlay_count == 3
        assert result.factors.regulatory_complexity.penalty == 30

    def test_three_overlays_is_amber_with_regulatory_summary(self):
        result = compute_readiness_score(_make_inputs(triggers={"eudr": True, "cbam": True, "csddd": True}))
        assert result.score == 70
        assert result.verdict is ReadinessVerdict.AMBER
        assert result.summary == REGULATORY_SUMMARY

    def test_hazard_summary_names_the_hazard(self):
        result = compute_readiness_score(_make_inputs(hazards=["aflatoxin", "salmonella", "heavy_metals"]))
        assert result.factors.hazard_exposure.penalty == 30
        assert result.factors.primary_risk_factor is RiskFactor.HAZARD_EXPOSURE
        assert result.verdict is ReadinessVerdict.AMBER
        assert "aflatoxin" in result.summary

    def test_restriction_forces_red_whatever_the_score(self):
        result = compute_readiness_score(_make_inputs(stopFlags={"GB": "Import ban on raw poultry"}))
        assert result.score == 80
        assert result.verdict is ReadinessVerdict.RED
        assert result.factors.trade_restriction.stop_triggered is True
        assert result.factors.primary_risk_factor is RiskFactor.TRADE_RESTRICTION
        assert result.summary == RESTRICTION_SUMMARY

    def test_empty_restriction_map_is_not_a_restriction(self):
        result = compute_readiness_score(_make_inputs(stopFlags={}))
        assert result.factors.trade_restriction.penalty == 0

    def test_thresholds(self):
        at_green = compute_readiness_score(_make_inputs(requirements=_requirements(11)))
        assert at_green.score == 80
        assert at_green.verdict is ReadinessVerdict.GREEN

        at_amber = compute_readiness_score(
            _make_inputs(triggers={"eudr": True, "cbam": True, "iuu": True}, requirements=_requirements(11))
        )
        assert at_amber.score == 50
        assert at_amber.verdict is ReadinessVerdict.AMBER
        assert at_amber.summary == REGULATORY_SUMMARY

        below = compute_readiness_score(
            _make_inputs(
                triggers={"eudr": True, "cbam": True, "iuu": True},
                hazards=["mould"],
                requirements=_requirements(11),
            )
        )
        assert below.score == 47
        assert below.verdict is ReadinessVerdict.RED

    def test_score_floors_at_zero(self):
        result = compute_readiness_score(
            _make_inputs(
                triggers={"eudr": True, "cbam": True, "csddd": True},
                hazards=["aflatoxin", "salmonella"],
                requirements=_requirements(12),
                stopFlags={"GB": "ban"},
            )
        )
        assert result.factors.total_penalty == 100
        assert result.score == 0
        assert result.verdict is ReadinessVerdict.RED

    def test_document_volume_summary(self):
        result = compute_readiness_score(
            _make_inputs(hazards=["mould"], triggers={"reach": True}, requirements=_requirements(11))
        )
        # regulatory 8, hazard 3, volume 20: volume dominates.
        assert result.factors.primary_risk_factor is RiskFactor.DOCUMENT_VOLUME
        assert result.score == 69
        assert result.summary == DOCUMENT_VOLUME_SUMMARY

    def test_identical_inputs_give_identical_results(self):
        inputs = _make_inputs(triggers={"eudr": True}, hazards=["cadmium"], requirements=_requirements(6))
        assert compute_readiness_score(inputs) == compute_readiness_score(inputs)


class TestPrimaryRiskFactor:
    def test_ties_go_to_the_earlier_category(self):
        penalties = {
            RiskFactor.REGULATORY_COMPLEXITY: 16,
            RiskFactor.HAZARD_EXPOSURE: 16,
            RiskFactor.DOCUMENT_VOLUME: 14,
            RiskFactor.TRADE_RESTRICTION: 0,
        }
        assert primary_risk_factor(penalties) is RiskFactor.REGULATORY_COMPLEXITY

    def test_restriction_wins_only_when_strictly_largest(self):
        penalties = {
            RiskFactor.REGULATORY_COMPLEXITY: 0,
            RiskFactor.HAZARD_EXPOSURE: 20,
            RiskFactor.DOCUMENT_VOLUME: 20,
            RiskFactor.TRADE_RESTRICTION: 20,
        }
        assert primary_risk_factor(penalties) is RiskFactor.HAZARD_EXPOSURE

    def test_tied_regulatory_and_hazard_reads_as_regulatory(self):
        result = compute_readiness_score(
            _make_inputs(triggers={"eudr": True, "cites": True}, hazards=["cadmium", "mercury_contamination"])
        )
        assert result.score == 68
        assert result.factors.primary_risk_factor is RiskFactor.REGULATORY_COMPLEXITY
        assert result.summary == REGULATORY_SUMMARY


class TestMonotonicity:
    def test_each_high_hazard_lowers_the_score_until_the_cap(self):
        hazards = ["aflatoxin", "salmonella", "histamine"]
        scores = [compute_readiness_score(_make_inputs(hazards=hazards[:count])).score for count in range(4)]
        assert scores == [100, 85, 70, 70]

    def test_verdict_moves_through_amber(self):
        verdicts = [
            compute_readiness_score(
                _make_inputs(triggers={"eudr": True, "cbam": True, "csddd": True}, hazards=["aflatoxin"] * count)
            ).verdict
            for count in range(3)
        ]
        assert verdicts == [ReadinessVerdict.AMBER, ReadinessVerdict.AMBER, ReadinessVerdict.RED]
