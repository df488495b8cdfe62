"""
Tests for Remediation Recommendations.

Tests cover:
- Library lookup by control id, then category slug
- Generic fallback graded by finding priority
- One recommendation per control
- Effort level thresholds and cost range
- Recommendations on compliance results
"""

import pytest
from datetime import datetime, timezone

from risk_scoring.compliance import ComplianceScorer
from risk_scoring.recommendations import (
    GENERIC_ACTION_ITEMS,
    category_slug,
    estimate_remediation_effort,
    generate_recommendations,
    recommend,
)
from risk_scoring.types import (
    ComplianceFinding,
    ControlResponse,
    Recommendation,
    RemediationEffort,
)


FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


# =============================================================
# FIXTURES
# =============================================================

def finding(control_id="X-1", category="Risk Assessment", status="not-implemented", priority=20):
    return ComplianceFinding(
        control_id=control_id,
        category=category,
        status=status,
        weight=0.1,
        impact="Control gap - remediation required",
        priority=priority,
    )


def recommendation_with_days(days):
    return Recommendation(
        control_id="X",
        finding_id="X-rec",
        title="Fix",
        description="",
        priority="P2",
        estimated_effort=RemediationEffort.MEDIUM,
        estimated_days=days,
    )


# =============================================================
# TEST: Library Lookup
# =============================================================

class TestLibraryLookup:
    """Control id first, then category slug."""

    def test_control_id_match(self):
        rec = recommend(finding(control_id="patch-management", category="Operations"))

        assert rec.title == "Implement Patch Management Program"
        assert rec.priority == "P0"
        assert rec.estimated_effort == RemediationEffort.MEDIUM
        assert rec.estimated_days == 21
        assert rec.finding_id == "patch-management-rec"
        assert len(rec.action_items) == 6

    def test_control_id_wins_over_category(self):
        rec = recommend(finding(control_id="cryptography", category="Access Control"))

        assert rec.title == "Implement Cryptographic Controls"
        assert rec.estimated_days == 45

    def test_category_slug_match(self):
        rec = recommend(finding(control_id="AC-2", category="Access Control"))

        assert rec.control_id == "AC-2"
        assert rec.finding_id == "AC-2-rec"
        assert rec.title == "Implement Comprehensive Access Control Policy"
        assert rec.priority == "P0"
        assert rec.estimated_effort == RemediationEffort.HIGH
        assert rec.estimated_days == 30

    @pytest.mark.parametrize("category,slug", [
        ("Access Control", "access-control"),
        ("  Incident   Management ", "-incident-management"),
        ("Configuration Management", "configuration-manage"),
        ("Cryptography", "cryptography"),
    ])
    def test_category_slug(self, category, slug):
        assert category_slug(category) == slug

    def test_truncated_slug_falls_back_to_generic(self):
        rec = recommend(finding(control_id="CM-1", category="Configuration Management"))

        assert rec.title == "Remediate CM-1 (Configuration Management) Gap"
        assert rec.action_items == GENERIC_ACTION_ITEMS


# =============================================================
# TEST: Generic Fallback
# =============================================================

class TestGenericFallback:
    """Findings with no library entry get a generic plan."""

    @pytest.mark.parametrize("priority,expected_priority,days,effort", [
        (27, "P0", 30, RemediationEffort.HIGH),
        (25, "P0", 30, RemediationEffort.HIGH),
        (22, "P1", 21, RemediationEffort.MEDIUM),
        (17, "P2", 14, RemediationEffort.MEDIUM),
        (13, "P3", 7, RemediationEffort.LOW),
        (0, "P3", 7, RemediationEffort.LOW),
    ])
    def test_graded_by_finding_priority(self, priority, expected_priority, days, effort):
        rec = recommend(finding(control_id="RA-3", priority=priority))

        assert rec.priority == expected_priority
        assert rec.estimated_days == days
        assert rec.estimated_effort == effort

    def test_generic_content(self):
        rec = recommend(finding(control_id="RA-3", status="partially-implemented"))

        assert rec.finding_id == "RA-3-rec"
        assert rec.title == "Remediate RA-3 (Risk Assessment) Gap"
        assert "partially-implemented" in rec.description
        assert rec.action_items == GENERIC_ACTION_ITEMS

    def test_generic_fallback_is_logged(self, caplog):
        with caplog.at_level("DEBUG", logger="risk_scoring.recommendations"):
            recommend(finding(control_id="RA-3"))

        assert "RA-3" in caplog.text


# =============================================================
# TEST: Generate Recommendations
# =============================================================

class TestGenerateRecommendations:

    def test_one_per_control_in_finding_order(self):
        findings = [
            finding(control_id="IR-1", category="Incident Management", priority=25),
            finding(control_id="AC-2", category="Access Control", priority=25),
            finding(control_id="IR-1", category="Incident Management", priority=20),
        ]

        recs = generate_recommendations(findings)

        assert [r.control_id for r in recs] == ["IR-1", "AC-2"]
        assert isinstance(recs, tuple)

    def test_no_findings(self):
        assert generate_recommendations([]) == ()

    def test_to_dict(self):
        data = recommend(finding(control_id="AC-2", category="Access Control")).to_dict()

        assert data["estimated_effort"] == "high"
        assert data["estimated_days"] == 30
        assert isinstance(data["action_items"], list)


# =============================================================
# TEST: Effort Estimate
# =============================================================

class TestEstimateRemediationEffort:

    @pytest.mark.parametrize("days,effort", [
        (14, RemediationEffort.LOW),
        (15, RemediationEffort.MEDIUM),
        (45, RemediationEffort.MEDIUM),
        (46, RemediationEffort.HIGH),
    ])
    def test_effort_thresholds(self, days, effort):
        assert estimate_remediation_effort([recommendation_with_days(days)]).effort_level == effort

    def test_days_are_summed_and_costed(self):
        estimate = estimate_remediation_effort([recommendation_with_days(10), recommendation_with_days(20)])

        assert estimate.total_days == 30
        assert estimate.cost_low == 4500
        assert estimate.cost_high == 7500

    def test_empty_estimate(self):
        estimate = estimate_remediation_effort([])

        assert estimate.total_days == 0
        assert estimate.effort_level == RemediationEffort.LOW
        assert estimate.cost_low == 0
        assert estimate.cost_high == 0


# =============================================================
# TEST: Compliance Results
# =============================================================

class TestComplianceRecommendations:
    """Recommendations attached to compliance scoring results."""

    def test_result_carries_recommendations(self):
        scorer = ComplianceScorer(clock=lambda: FIXED_NOW)

        result = scorer.score([
            ControlResponse("AC-1", "Access Control", "implemented"),
            ControlResponse("AC-2", "Access Control", "not-implemented"),
            ControlResponse("IR-1", "Incident Management", "partially-implemented"),
        ])

        assert [r.control_id for r in result.recommendations] == [f.control_id for f in result.key_findings]
        assert [r.estimated_days for r in result.recommendations] == [30, 40]
        assert result.remediation_estimate.total_days == 70
        assert result.remediation_estimate.effort_level == RemediationEffort.HIGH

        data = result.to_dict()
        assert data["recommendations"][0]["finding_id"] == "AC-2-rec"
        assert data["remediation_estimate"]["cost_low"] == 10500
        assert data["remediation_estimate"]["cost_high"] == 17500
