"""
Tests for the Combined Risk Combiner.

Tests cover:
- Default 0.4 / 0.6 weighting
- Monotonicity in each input
- Weight normalization and rejection
- Combined report content, freshness and confidence
"""

import pytest
from datetime import datetime, timedelta, timezone

from risk_scoring.combiner import CombinedRiskCombiner, combine
from risk_scoring.config import CombinerConfig, CombinerWeights
from risk_scoring.types import (
    ComplianceScoreResult,
    ConfigurationError,
    DataFreshnessStatus,
    RiskLevel,
    TravelRiskFactors,
    TravelRiskResult,
    TripAssessment,
    TripLeg,
    TripLegAssessment,
)


FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


# =============================================================
# FIXTURES
# =============================================================

@pytest.fixture
def combiner():
    return CombinedRiskCombiner(clock=lambda: FIXED_NOW)


def travel_result(score, last_updated):
    return TravelRiskResult(
        destination="Somewhere",
        score=score,
        risk_level=RiskLevel.from_score(score),
        factors=TravelRiskFactors(advisory_level="Exercise Increased Caution"),
        travel_recommendation="",
        last_updated=last_updated,
        advisory_level=2,
    )


# =============================================================
# TEST: combine()
# =============================================================

class TestCombine:
    """Weighted combination of two scores."""

    @pytest.mark.parametrize("compliance,travel,expected", [
        (50, 80, 68),
        (10, 90, 58),
        (90, 10, 42),
        (0, 0, 0),
        (100, 100, 100),
    ])
    def test_default_weights(self, compliance, travel, expected):
        assert combine(compliance, travel) == expected

    def test_travel_dominates_by_default(self):
        assert combine(10, 90) > combine(90, 10)

    def test_monotonic_in_each_input(self):
        for fixed in (0, 35, 70, 100):
            compliance_series = [combine(x, fixed) for x in range(0, 101, 5)]
            travel_series = [combine(fixed, x) for x in range(0, 101, 5)]

            assert compliance_series == sorted(compliance_series)
            assert travel_series == sorted(travel_series)

    def test_custom_weights(self):
        assert combine(50, 80, CombinerWeights(compliance=0.6, travel=0.4)) == 62

    def test_non_normalized_weights_are_normalized(self, caplog):
        with caplog.at_level("WARNING", logger="risk_scoring.config"):
            result = combine(40, 80, CombinerWeights(compliance=1, travel=1))

        assert result == 60
        assert "normalizing" in caplog.text

    def test_result_stays_in_range(self):
        assert combine(100, 100, CombinerWeights(compliance=5, travel=3)) == 100

    def test_negative_weight_rejected(self):
        with pytest.raises(ConfigurationError):
            CombinerWeights(compliance=-0.1, travel=1.1)

    def test_zero_weights_rejected(self):
        with pytest.raises(ConfigurationError):
            CombinerWeights(compliance=0, travel=0)

    def test_combiner_uses_configured_weights(self):
        combiner = CombinedRiskCombiner(config=CombinerConfig(weights=CombinerWeights(compliance=1, travel=0)))

        assert combiner.combine(30, 90) == 30

    def test_configured_weights_normalized_once(self, caplog):
        config = CombinerConfig(weights=CombinerWeights(compliance=1, travel=1))

        with caplog.at_level("WARNING", logger="risk_scoring.config"):
            combiner = CombinedRiskCombiner(config=config, clock=lambda: FIXED_NOW)
            results = [combiner.combine(40, 80) for _ in range(3)]
            report = combiner.build_report(40, 80, FIXED_NOW, FIXED_NOW)

        warnings = [r for r in caplog.records if "normalizing" in r.getMessage()]
        assert len(warnings) == 1
        assert results == [60, 60, 60]
        assert report.combined_score == 60
        assert report.compliance_weight == 0.5


# =============================================================
# TEST: Combined Report
# =============================================================

class TestCombinedReport:
    """Executive report built around the combined score."""

    def test_report_scores_and_level(self, combiner):
        report = combiner.build_report(50, 80, FIXED_NOW, FIXED_NOW)

        assert report.combined_score == 68
        assert report.risk_level == RiskLevel.HIGH
        assert report.compliance_weight == 0.4
        assert report.travel_weight == 0.6
        assert report.created_at == FIXED_NOW
        assert report.report_id.startswith("report-")

    def test_report_weights_are_effective_weights(self, combiner):
        report = combiner.build_report(50, 50, weights=CombinerWeights(compliance=3, travel=1))

        assert report.compliance_weight == 0.75
        assert report.travel_weight == 0.25

    def test_fresh_inputs_have_full_confidence(self, combiner):
        recent = FIXED_NOW - timedelta(minutes=5)

        report = combiner.build_report(20, 20, recent, recent)

        assert report.compliance_data_freshness == DataFreshnessStatus.FRESH
        assert report.travel_data_freshness == DataFreshnessStatus.FRESH
        assert report.confidence == 100

    def test_stale_input_reduces_confidence(self, combiner):
        report = combiner.build_report(20, 20, FIXED_NOW - timedelta(hours=3), FIXED_NOW)

        assert report.compliance_data_freshness == DataFreshnessStatus.STALE
        assert report.confidence == 85

    def test_missing_inputs_reduce_confidence(self, combiner):
        report = combiner.build_report(20, 20)

        assert report.compliance_data_freshness == DataFreshnessStatus.MISSING
        assert report.travel_data_freshness == DataFreshnessStatus.MISSING
        assert report.confidence == 40

    def test_naive_timestamps_treated_as_utc(self, combiner):
        naive = (FIXED_NOW - timedelta(minutes=1)).replace(tzinfo=None)

        assert combiner.evaluate_freshness(naive) == DataFreshnessStatus.FRESH

    def test_low_risk_report_has_no_mitigations(self, combiner):
        report = combiner.build_report(10, 10, FIXED_NOW, FIXED_NOW)

        assert report.risk_level == RiskLevel.LOW
        assert report.mitigations == ()
        assert "LOW" in report.executive_summary
        assert "strong" in report.executive_summary
        assert "favorable" in report.executive_summary

    def test_high_risk_report_mitigations(self, combiner):
        report = combiner.build_report(80, 90, FIXED_NOW, FIXED_NOW)

        assert report.risk_level == RiskLevel.CRITICAL
        assert "Use secure VPN for all internet communications" in report.mitigations
        assert "Require executive approval for this trip" in report.mitigations
        assert "Strengthen organizational security controls and compliance posture" in report.mitigations
        assert "weak" in report.executive_summary

    def test_report_from_travel_result(self, combiner):
        compliance = ComplianceScoreResult(overall_score=30, timestamp=FIXED_NOW)

        report = combiner.report_from_results(compliance, travel_result(70, FIXED_NOW))

        assert report.compliance_score == 30
        assert report.travel_score == 70
        assert report.combined_score == 54

    def test_report_from_trip_uses_oldest_advisory(self, combiner):
        departure = datetime(2025, 3, 1, tzinfo=timezone.utc)
        legs = [
            TripLegAssessment(
                leg=TripLeg("JP", departure, departure + timedelta(days=2), "business"),
                travel_result=travel_result(10, FIXED_NOW),
            ),
            TripLegAssessment(
                leg=TripLeg("MX", departure, departure + timedelta(days=2), "business"),
                travel_result=travel_result(40, FIXED_NOW - timedelta(days=2)),
            ),
        ]
        trip = TripAssessment(
            legs=legs,
            highest_risk=legs[1],
            overall_trip_score=25,
            overall_risk_level=RiskLevel.LOW,
        )
        compliance = ComplianceScoreResult(overall_score=0, timestamp=FIXED_NOW)

        report = combiner.report_from_results(compliance, trip)

        assert report.travel_score == 25
        assert report.combined_score == 15
        assert report.travel_data_freshness == DataFreshnessStatus.STALE

    def test_report_mitigations_are_immutable(self, combiner):
        report = combiner.build_report(80, 90, FIXED_NOW, FIXED_NOW)

        assert isinstance(report.mitigations, tuple)
        with pytest.raises(AttributeError):
            report.mitigations.append("Skip the trip")

    def test_report_to_dict(self, combiner):
        data = combiner.build_report(50, 80, FIXED_NOW, None, report_id="r-1").to_dict()

        assert data["report_id"] == "r-1"
        assert data["risk_level"] == "high"
        assert data["travel_data_freshness"] == "missing"
        assert data["created_at"] == FIXED_NOW.isoformat()
