"""
Risk Scoring Engine - Trip Aggregator.

============================================================
PURPOSE
============================================================
Scores every leg of a multi-leg trip and rolls the legs up
into one trip-level verdict.

============================================================
AGGREGATION
============================================================
- Each leg is scored independently (input order preserved)
- highest_risk: leg with the maximum score, earliest leg wins ties
- overall_trip_score: arithmetic mean of leg scores, rounded
- recommendations: each leg's recommendation, de-duplicated
  in first-seen order

============================================================
VALIDATION
============================================================
Leg validation (non-blank destination and purpose, departure
strictly before return) is the caller's job and happens before
assess_trip() is invoked, see validate_trip_legs() and the
request schemas. The aggregator does not re-validate legs.

============================================================
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from .advisory import AdvisorySource
from .config import RiskThresholds
from .travel import TravelRiskScorer
from .types import (
    RiskLevel,
    TripAssessment,
    TripLeg,
    TripLegAssessment,
    TripRiskSummary,
    TripTravelDecision,
    TripValidationError,
    round_score,
    utc_now,
)


logger = logging.getLogger(__name__)


# Number of HIGH legs that escalates a trip for review
HIGH_RISK_LEG_REVIEW_COUNT = 2


class TripAggregator:
    """
    Aggregates per-leg travel risk into trip risk.

    Advisory records are resolved through the injected advisory
    source; a missing record raises AdvisoryNotFoundError, which
    is left to the caller.
    """

    def __init__(
        self,
        advisory_source: AdvisorySource,
        travel_scorer: Optional[TravelRiskScorer] = None,
        thresholds: Optional[RiskThresholds] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.advisory_source = advisory_source
        self.thresholds = thresholds or RiskThresholds()
        self.travel_scorer = travel_scorer or TravelRiskScorer(thresholds=self.thresholds)
        self._clock = clock or utc_now

    def assess_leg(self, leg: TripLeg) -> TripLegAssessment:
        """Resolve and score a single leg."""
        advisory = self.advisory_source.get_advisory(leg.destination)
        return TripLegAssessment(
            leg=leg,
            travel_result=self.travel_scorer.score(leg.destination, advisory),
        )

    def assess_trip(self, legs: Sequence[TripLeg]) -> TripAssessment:
        """
        Assess a multi-leg trip.

        Args:
            legs: Already-validated trip legs, in travel order

        Returns:
            TripAssessment with per-leg and overall scores

        Raises:
            TripValidationError: If no legs are given
            AdvisoryNotFoundError: If a destination has no advisory
        """
        if not legs:
            raise TripValidationError("At least one trip leg is required")

        assessments = [self.assess_leg(leg) for leg in legs]

        highest = assessments[0]
        for assessment in assessments[1:]:
            if assessment.risk_score > highest.risk_score:
                highest = assessment

        overall = round_score(sum(a.risk_score for a in assessments) / len(assessments))

        recommendations: List[str] = []
        for assessment in assessments:
            if assessment.recommendation not in recommendations:
                recommendations.append(assessment.recommendation)

        return TripAssessment(
            legs=assessments,
            highest_risk=highest,
            overall_trip_score=overall,
            overall_risk_level=self.thresholds.classify(overall),
            recommendations=recommendations,
            created_at=self._clock(),
        )


# ============================================================
# CALLER-SIDE VALIDATION
# ============================================================


def validate_trip_legs(legs: Sequence[TripLeg]) -> None:
    """
    Structural validation of trip legs, run before scoring.

    Raises:
        TripValidationError: Naming the first invalid leg (1-based)
    """
    if not legs:
        raise TripValidationError("At least one trip leg is required")

    for index, leg in enumerate(legs):
        position = index + 1
        if not leg.destination or not str(leg.destination).strip():
            raise TripValidationError(f"Leg {position}: destination is required", leg_index=index)
        if not leg.purpose or not str(leg.purpose).strip():
            raise TripValidationError(f"Leg {position}: purpose is required", leg_index=index)
        if leg.departure_date is None or leg.return_date is None:
            raise TripValidationError(
                f"Leg {position}: departure and return dates are required",
                leg_index=index,
            )
        try:
            ordered = leg.departure_date < leg.return_date
        except TypeError as e:
            # Mixing naive and aware datetimes
            raise TripValidationError(
                f"Leg {position}: departure and return dates are not comparable",
                leg_index=index,
            ) from e
        if not ordered:
            raise TripValidationError(
                f"Leg {position}: departure date must be before return date",
                leg_index=index,
            )


# ============================================================
# TRIP REPORTING HELPERS
# ============================================================


def summarize_trip(assessment: TripAssessment) -> TripRiskSummary:
    """Count legs per risk level."""
    counts = {level: 0 for level in RiskLevel}
    for leg in assessment.legs:
        counts[leg.risk_level] += 1

    return TripRiskSummary(
        low_risk_legs=counts[RiskLevel.LOW],
        medium_risk_legs=counts[RiskLevel.MEDIUM],
        high_risk_legs=counts[RiskLevel.HIGH],
        critical_risk_legs=counts[RiskLevel.CRITICAL],
        overall_risk_level=assessment.overall_risk_level,
    )


def evaluate_trip_safety(assessment: TripAssessment) -> TripTravelDecision:
    """
    Decide whether a trip may proceed without escalation.

    Note: This is a helper for downstream approval workflows.
    The engine itself does not approve or block travel.
    """
    if assessment.overall_risk_level == RiskLevel.CRITICAL:
        return TripTravelDecision(
            safe=False,
            reason="Trip involves critical risk destination - requires executive approval",
        )

    high_risk_count = sum(1 for leg in assessment.legs if leg.risk_level == RiskLevel.HIGH)
    if high_risk_count >= HIGH_RISK_LEG_REVIEW_COUNT:
        return TripTravelDecision(
            safe=False,
            reason="Multiple high-risk destinations - requires risk management review",
        )

    return TripTravelDecision(safe=True)
