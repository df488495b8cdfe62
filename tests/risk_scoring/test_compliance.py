"""
Tests for the Compliance Scorer.

Tests cover:
- Zero result for empty input
- All-implemented / all-not-implemented bounds
- Category grouping, weights and ordering
- Fail-safe defaults (unknown category, unrecognized response)
- Key findings ranking
- Determinism
"""

import pytest
from datetime import datetime, timezone

from risk_scoring.compliance import ComplianceScorer, MAX_KEY_FINDINGS
from risk_scoring.config import WeightTable
from risk_scoring.types import (
    ComplianceFinding,
    ComplianceScoreResult,
    ControlResponse,
    ControlStatus,
    RiskLevel,
    UNCATEGORIZED,
)


FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


# =============================================================
# FIXTURES
# =============================================================

@pytest.fixture
def scorer():
    """Compliance scorer with default weights and a fixed clock."""
    return ComplianceScorer(clock=lambda: FIXED_NOW)


def controls_with(category: str, *responses: str):
    return [
        ControlResponse(control_id=f"{category[:2].upper()}-{i}", category=category, response=r)
        for i, r in enumerate(responses, start=1)
    ]


# =============================================================
# TEST: Overall Bounds
# =============================================================

class TestOverallBounds:
    """Overall score limits for uniform control sets."""

    def test_empty_controls_yield_zero_result(self, scorer):
        result = scorer.score([])

        assert result.overall_score == 0
        assert result.risk_level == RiskLevel.LOW
        assert result.category_scores == ()
        assert result.key_findings == ()
        assert result.recommendations == ()
        assert result.remediation_estimate.total_days == 0
        assert result.total_controls == 0

    def test_all_implemented_is_low(self, scorer):
        controls = (
            controls_with("Access Control", "implemented", "implemented")
            + controls_with("Cryptography", "implemented")
            + controls_with("Operations", "implemented", "implemented", "implemented")
        )

        result = scorer.score(controls)

        assert result.overall_score <= 25
        assert result.overall_score == 0
        assert result.risk_level == RiskLevel.LOW

    def test_all_not_implemented_is_critical(self, scorer):
        controls = (
            controls_with("Access Control", "not-implemented", "not-implemented")
            + controls_with("Business Continuity", "not-implemented")
        )

        result = scorer.score(controls)

        assert result.overall_score >= 75
        assert result.overall_score == 100
        assert result.risk_level == RiskLevel.CRITICAL

    def test_all_partial_is_medium(self, scorer):
        result = scorer.score(controls_with("Compliance", "partially-implemented", "partially-implemented"))

        assert result.overall_score == 50
        assert result.risk_level == RiskLevel.MEDIUM


# =============================================================
# TEST: Category Scores
# =============================================================

class TestCategoryScores:
    """Per-category grouping, weights and counts."""

    def test_one_score_per_distinct_category(self, scorer):
        controls = (
            controls_with("Cryptography", "implemented")
            + controls_with("Access Control", "not-implemented", "implemented")
            + controls_with("Vendor Management", "partially-implemented")
        )

        result = scorer.score(controls)

        assert len(result.category_scores) == 3
        assert [c.category for c in result.category_scores] == [
            "Access Control",
            "Cryptography",
            "Vendor Management",
        ]

    def test_weights_come_from_weight_table(self, scorer):
        controls = (
            controls_with("Access Control", "implemented")
            + controls_with("Cryptography", "implemented")
            + controls_with("Physical Security", "implemented")
        )

        result = scorer.score(controls)

        assert result.get_category("Access Control").weight == 0.15
        assert result.get_category("Cryptography").weight == 0.12
        assert result.get_category("Physical Security").weight == 0.08

    def test_unknown_category_uses_default_weight(self, scorer):
        result = scorer.score(controls_with("Vendor Management", "not-implemented"))

        assert result.get_category("Vendor Management").weight == 0.1

    def test_category_score_is_mean_contribution(self, scorer):
        controls = controls_with("Access Control", "implemented", "partially-implemented", "not-implemented")

        category = scorer.score(controls).get_category("Access Control")

        assert category.score == 50
        assert category.control_count == 3
        assert category.implemented_count == 1
        assert category.partial_count == 1
        assert category.not_implemented_count == 1
        assert category.compliance_percentage == 33

    def test_category_score_rounds_half_up(self, scorer):
        # (0.5 / 4) x 100 = 12.5
        controls = controls_with("Operations", "partially-implemented", "implemented", "implemented", "implemented")

        assert scorer.score(controls).get_category("Operations").score == 13

    def test_implemented_count_never_exceeds_control_count(self, scorer):
        controls = controls_with("Compliance", "implemented", "implemented", "bogus", "partially-implemented")

        for category in scorer.score(controls).category_scores:
            assert category.implemented_count <= category.control_count
            assert (
                category.implemented_count + category.partial_count + category.not_implemented_count
                == category.control_count
            )


# =============================================================
# TEST: Weighted Overall Score
# =============================================================

class TestWeightedOverall:
    """Overall score is the weight-averaged category score."""

    def test_overall_is_weighted_average(self, scorer):
        # Access Control 100 x 0.15, Cryptography 0 x 0.12 -> 15 / 0.27 = 55.6
        controls = (
            controls_with("Access Control", "not-implemented")
            + controls_with("Cryptography", "implemented")
        )

        result = scorer.score(controls)

        assert result.overall_score == 56
        assert result.risk_level == RiskLevel.HIGH

    def test_alternate_weight_table_is_injected(self):
        table = WeightTable(categories={"Access Control": 0.9}, version="test")
        scorer = ComplianceScorer(weight_table=table)
        controls = (
            controls_with("Access Control", "implemented")
            + controls_with("Cryptography", "not-implemented")
        )

        result = scorer.score(controls)

        # Cryptography falls back to 0.1: 100 x 0.1 / 1.0
        assert result.overall_score == 10
        assert result.weights_version == "test"

    def test_default_table_unaffected_by_alternate_table(self, scorer):
        WeightTable(categories={"Access Control": 0.9})
        controls = (
            controls_with("Access Control", "implemented")
            + controls_with("Cryptography", "not-implemented")
        )

        # 100 x 0.12 / 0.27 = 44.4
        assert scorer.score(controls).overall_score == 44


# =============================================================
# TEST: Fail-Safe Defaults
# =============================================================

class TestFailSafeDefaults:
    """Every default path biases toward flagging risk."""

    def test_unrecognized_response_scores_worst_case(self, scorer):
        result = scorer.score(controls_with("Access Control", "maybe"))

        category = result.get_category("Access Control")
        assert category.score == 100
        assert category.not_implemented_count == 1

    def test_missing_category_is_uncategorized(self, scorer):
        controls = [
            ControlResponse(control_id="X-1", category=None, response="not-implemented"),
            ControlResponse(control_id="X-2", category="   ", response="implemented"),
        ]

        result = scorer.score(controls)

        assert [c.category for c in result.category_scores] == [UNCATEGORIZED]
        assert result.category_scores[0].weight == 0.1
        assert result.category_scores[0].control_count == 2

    @pytest.mark.parametrize("raw,expected", [
        ("implemented", ControlStatus.IMPLEMENTED),
        ("partially-implemented", ControlStatus.PARTIALLY_IMPLEMENTED),
        ("not-implemented", ControlStatus.NOT_IMPLEMENTED),
        ("Implemented", None),
        ("partially implemented", None),
        ("  partially_implemented ", None),
        ("NOT IMPLEMENTED", None),
        ("n/a", None),
        ("", None),
        (None, None),
    ])
    def test_only_exact_responses_are_recognized(self, raw, expected):
        assert ControlStatus.parse(raw) == expected

    @pytest.mark.parametrize("response", [
        "Implemented",
        "IMPLEMENTED",
        " implemented",
        "partially implemented",
        "Partially-Implemented",
        "implemnted",
    ])
    def test_non_exact_spelling_scores_worst_case(self, scorer, response):
        result = scorer.score(controls_with("Access Control", response))

        assert result.overall_score == 100
        assert result.get_category("Access Control").implemented_count == 0
        assert result.key_findings[0].status == "unrecognized"


# =============================================================
# TEST: Key Findings
# =============================================================

class TestKeyFindings:
    """Non-implemented controls ranked for remediation."""

    def test_findings_exclude_implemented_controls(self, scorer):
        controls = controls_with("Access Control", "implemented", "not-implemented")

        findings = scorer.score(controls).key_findings

        assert [f.control_id for f in findings] == ["AC-2"]
        assert findings[0].status == ControlStatus.NOT_IMPLEMENTED.value

    def test_findings_limited_and_ranked(self, scorer):
        controls = (
            controls_with("Operations", *["not-implemented"] * 4)
            + controls_with("Incident Management", "not-implemented")
            + controls_with("Cryptography", "partially-implemented", "garbage")
        )

        findings = scorer.score(controls).key_findings

        assert len(findings) == MAX_KEY_FINDINGS
        # Incident Management 15 + 10, Cryptography unknown 12 + 15
        assert findings[0].category == "Cryptography"
        assert findings[0].status == "unrecognized"
        assert findings[1].category == "Incident Management"
        priorities = [f.priority for f in findings]
        assert priorities == sorted(priorities, reverse=True)


# =============================================================
# TEST: Determinism
# =============================================================

class TestDeterminism:
    """Scoring is a pure function of its inputs."""

    def test_repeated_scoring_is_identical(self, scorer):
        controls = (
            controls_with("Access Control", "implemented", "not-implemented")
            + controls_with("Risk Assessment", "partially-implemented")
            + controls_with("Legal", "unknown-value")
        )

        first = scorer.score(controls)
        second = scorer.score(controls)

        assert first.overall_score == second.overall_score
        assert first.category_scores == second.category_scores

    def test_input_order_does_not_change_result(self, scorer):
        controls = (
            controls_with("Access Control", "implemented", "not-implemented")
            + controls_with("Compliance", "partially-implemented")
        )

        forward = scorer.score(controls)
        backward = scorer.score(list(reversed(controls)))

        assert forward.overall_score == backward.overall_score
        assert forward.category_scores == backward.category_scores

    def test_to_dict_uses_iso_timestamp(self, scorer):
        data = scorer.score(controls_with("Access Control", "implemented")).to_dict()

        assert data["timestamp"] == FIXED_NOW.isoformat()
        assert data["risk_level"] == "low"
        assert data["category_scores"][0]["weight"] == 0.15

    def test_result_sequences_are_immutable(self, scorer):
        result = scorer.score(controls_with("Access Control", "not-implemented"))

        assert isinstance(result.category_scores, tuple)
        assert isinstance(result.key_findings, tuple)
        with pytest.raises(AttributeError):
            result.key_findings.append(result.key_findings[0])

    def test_list_input_is_stored_as_tuple(self):
        finding = ComplianceFinding("AC-1", "Access Control", "not-implemented", 0.15, "gap", 25)

        result = ComplianceScoreResult(key_findings=[finding])

        assert result.key_findings == (finding,)
