"""
Risk Scoring Engine - Combined Risk Combiner.

============================================================
PURPOSE
============================================================
Merges a compliance risk score and a travel (or trip) risk
score into one combined score for board and executive
reporting.

============================================================
FORMULA
============================================================
    combined = round(compliance x w_compliance + travel x w_travel)

Default weights: compliance 0.4, travel 0.6.

Weights that do not sum to 1.0 are normalized (with a warning)
and the result is clamped to 0-100, so a combined score always
stays on the engine's 0-100 scale.

============================================================
REPORT
============================================================
build_report() adds an executive summary, mitigations and a
confidence value derived from the age of each input score:
    fresh   -> no deduction
    stale   -> -15
    missing -> -30

============================================================
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Union
from uuid import uuid4

from .config import CombinerConfig, CombinerWeights, RiskThresholds
from .types import (
    CombinedRiskResult,
    ComplianceScoreResult,
    DataFreshnessStatus,
    RiskLevel,
    TravelRiskResult,
    TripAssessment,
    round_score,
    utc_now,
)


logger = logging.getLogger(__name__)


def combine(
    compliance_score: float,
    travel_score: float,
    weights: Optional[CombinerWeights] = None,
) -> int:
    """
    Combine a compliance score and a travel/trip score.

    Args:
        compliance_score: Compliance risk score (0-100)
        travel_score: Travel or trip risk score (0-100)
        weights: Dimension weights, defaults to 0.4 / 0.6

    Returns:
        Combined score (0-100)
    """
    effective = (weights or CombinerWeights()).normalized()
    combined = compliance_score * effective.compliance + travel_score * effective.travel
    return max(0, min(100, round_score(combined)))


class CombinedRiskCombiner:
    """Builds combined risk scores and executive reports."""

    def __init__(
        self,
        config: Optional[CombinerConfig] = None,
        thresholds: Optional[RiskThresholds] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or CombinerConfig()
        self.thresholds = thresholds or RiskThresholds()
        self._clock = clock or utc_now

        # Normalized once; per-call overrides are normalized per call
        self.weights = self.config.weights.normalized()

    def combine(
        self,
        compliance_score: float,
        travel_score: float,
        weights: Optional[CombinerWeights] = None,
    ) -> int:
        """Combined score using the configured weights unless overridden."""
        return combine(compliance_score, travel_score, weights or self.weights)

    def classify(self, combined_score: float) -> RiskLevel:
        return self.thresholds.classify(combined_score)

    def build_report(
        self,
        compliance_score: int,
        travel_score: int,
        compliance_as_of: Optional[datetime] = None,
        travel_as_of: Optional[datetime] = None,
        weights: Optional[CombinerWeights] = None,
        report_id: Optional[str] = None,
    ) -> CombinedRiskResult:
        """
        Build a combined risk report.

        Args:
            compliance_score: Compliance risk score (0-100)
            travel_score: Travel or trip risk score (0-100)
            compliance_as_of: When the compliance score was computed
            travel_as_of: Age of the advisory data behind the travel score
            weights: Override of the configured weights
            report_id: Identifier for the report, generated if omitted

        Returns:
            CombinedRiskResult
        """
        effective = weights.normalized() if weights is not None else self.weights
        combined_score = combine(compliance_score, travel_score, effective)
        risk_level = self.classify(combined_score)

        now = self._clock()
        compliance_freshness = self.evaluate_freshness(compliance_as_of, now)
        travel_freshness = self.evaluate_freshness(travel_as_of, now)

        return CombinedRiskResult(
            compliance_score=compliance_score,
            travel_score=travel_score,
            combined_score=combined_score,
            risk_level=risk_level,
            compliance_weight=effective.compliance,
            travel_weight=effective.travel,
            executive_summary=self._executive_summary(
                compliance_score, travel_score, combined_score, risk_level
            ),
            mitigations=self._mitigations(compliance_score, travel_score, risk_level),
            confidence=self._confidence(compliance_freshness, travel_freshness),
            compliance_data_freshness=compliance_freshness,
            travel_data_freshness=travel_freshness,
            report_id=report_id or f"report-{uuid4()}",
            created_at=now,
        )

    def report_from_results(
        self,
        compliance: ComplianceScoreResult,
        travel: Union[TravelRiskResult, TripAssessment],
        weights: Optional[CombinerWeights] = None,
        report_id: Optional[str] = None,
    ) -> CombinedRiskResult:
        """
        Build a report from scorer outputs.

        For a trip, the travel data is as old as its oldest advisory.
        """
        if isinstance(travel, TripAssessment):
            travel_score = travel.overall_trip_score
            travel_as_of = min(
                (leg.travel_result.last_updated for leg in travel.legs),
                key=_as_utc,
            )
        else:
            travel_score = travel.score
            travel_as_of = travel.last_updated

        return self.build_report(
            compliance_score=compliance.overall_score,
            travel_score=travel_score,
            compliance_as_of=compliance.timestamp,
            travel_as_of=travel_as_of,
            weights=weights,
            report_id=report_id,
        )

    # --------------------------------------------------------
    # REPORT CONTENT
    # --------------------------------------------------------

    def evaluate_freshness(self, as_of: Optional[datetime], now: Optional[datetime] = None) -> DataFreshnessStatus:
        """Classify the age of an input score."""
        if as_of is None:
            return DataFreshnessStatus.MISSING
        age = _as_utc(now or self._clock()) - _as_utc(as_of)
        if age < timedelta(minutes=self.config.freshness_window_minutes):
            return DataFreshnessStatus.FRESH
        return DataFreshnessStatus.STALE

    def _confidence(self, *freshness: DataFreshnessStatus) -> int:
        confidence = 100
        for status in freshness:
            if status == DataFreshnessStatus.STALE:
                confidence -= self.config.stale_confidence_penalty
            elif status == DataFreshnessStatus.MISSING:
                confidence -= self.config.missing_confidence_penalty
        return max(0, confidence)

    def _executive_summary(
        self,
        compliance_score: int,
        travel_score: int,
        combined_score: int,
        risk_level: RiskLevel,
    ) -> str:
        threshold = self.config.weak_posture_threshold
        posture = "strong" if compliance_score <= threshold else "weak"
        conditions = "favorable" if travel_score <= threshold else "challenging"
        return (
            f"Unified risk assessment shows {risk_level.value.upper()} risk. "
            f"Compliance posture is {posture} (score: {compliance_score}), "
            f"while travel conditions are {conditions} (score: {travel_score}). "
            f"Combined risk index: {combined_score}. "
            f"Review the mitigations below before proceeding."
        )

    def _mitigations(self, compliance_score: int, travel_score: int, risk_level: RiskLevel) -> List[str]:
        threshold = self.config.weak_posture_threshold
        mitigations: List[str] = []

        if compliance_score > threshold:
            mitigations.extend([
                "Strengthen organizational security controls and compliance posture",
                "Conduct security awareness training for all personnel involved in travel",
                "Implement enhanced data protection measures during travel",
            ])

        if travel_score > threshold:
            mitigations.extend([
                "Use secure VPN for all internet communications",
                "Avoid public WiFi and use cellular data or corporate VPN only",
                "Maintain heightened awareness of physical security threats",
                "Register travel with corporate security team",
            ])

        if risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
            mitigations.extend([
                "Require executive approval for this trip",
                "Assign security escort or buddy system",
                "Implement continuous monitoring and check-in protocols",
                "Consider rescheduling or converting to remote participation",
            ])

        return mitigations


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
