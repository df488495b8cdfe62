"""
Risk Scoring Engine - Travel Risk Scorer.

============================================================
PURPOSE
============================================================
Converts one destination advisory record into a 0-100 travel
risk score, a risk level and a recommendation.

============================================================
ALGORITHM
============================================================
    base     = {1: 10, 2: 40, 3: 70, 4: 95}[advisory_level]  (else 50)
    health   = health_risk_level x 10      (None -> 0)
    security = security_risk_level x 10    (None -> 0)
    score    = min(100, base + health + security), rounded

============================================================
FAIL-OPEN POLICY
============================================================
An advisory level outside 1-4 is scored as 50 (medium) with a
generic recommendation and a warning log. The scorer never
raises for a malformed advisory; validating advisory records
belongs to the advisory source.

============================================================
"""

import logging
from typing import Dict, Optional, Tuple

from .config import RiskThresholds, TravelScoringConfig
from .types import (
    AdvisoryRecord,
    TravelRiskFactors,
    TravelRiskResult,
    round_score,
)


logger = logging.getLogger(__name__)


ADVISORY_LEVEL_LABELS: Dict[int, str] = {
    1: "Exercise Normal Precautions",
    2: "Exercise Increased Caution",
    3: "Reconsider Travel",
    4: "Do Not Travel",
}

UNKNOWN_ADVISORY_LABEL = "Unknown Advisory Level"

GENERIC_ADVISORIES: Tuple[str, ...] = (
    "Check with local authorities",
    "Register travel itinerary",
    "Purchase travel insurance",
)

TRAVEL_RECOMMENDATIONS: Dict[int, str] = {
    1: (
        "Exercise Normal Precautions. Safe to travel. "
        "Follow normal precautions as you would in your home country."
    ),
    2: (
        "Exercise Increased Caution. Travel is possible but be aware "
        "of your surroundings and monitor local conditions."
    ),
    3: (
        "Reconsider Travel. Consider postponing travel unless absolutely "
        "necessary and avoid any non-essential trips."
    ),
    4: (
        "Do Not Travel. Government advisories recommend against all "
        "travel to this destination."
    ),
}

FALLBACK_RECOMMENDATION = "Check current travel advisories before planning your trip."


def _advisory_key(advisory_level) -> Optional[int]:
    try:
        return advisory_level if advisory_level in ADVISORY_LEVEL_LABELS else None
    except TypeError:
        return None


def get_advisory_label(advisory_level) -> str:
    """Human-readable name of an advisory level."""
    key = _advisory_key(advisory_level)
    return ADVISORY_LEVEL_LABELS[key] if key is not None else UNKNOWN_ADVISORY_LABEL


def get_travel_recommendation(advisory_level) -> str:
    """Fixed recommendation text for an advisory level."""
    key = _advisory_key(advisory_level)
    return TRAVEL_RECOMMENDATIONS[key] if key is not None else FALLBACK_RECOMMENDATION


class TravelRiskScorer:
    """Scores a single destination from its advisory record."""

    def __init__(
        self,
        config: Optional[TravelScoringConfig] = None,
        thresholds: Optional[RiskThresholds] = None,
    ) -> None:
        self.config = config or TravelScoringConfig()
        self.thresholds = thresholds or RiskThresholds()

    def score(self, destination: str, advisory: AdvisoryRecord) -> TravelRiskResult:
        """
        Score travel risk for a destination.

        Args:
            destination: Display name of the destination
            advisory: Advisory record supplied by the advisory source

        Returns:
            TravelRiskResult (never raises for any advisory level)
        """
        base = self._base_score(destination, advisory.advisory_level)
        health_impact = (advisory.health_risk_level or 0) * self.config.impact_per_level
        security_impact = (advisory.security_risk_level or 0) * self.config.impact_per_level

        raw = min(self.config.max_score, base + health_impact + security_impact)
        score = max(0, round_score(raw))

        return TravelRiskResult(
            destination=destination,
            score=score,
            risk_level=self.thresholds.classify(score),
            factors=self._extract_factors(advisory),
            travel_recommendation=get_travel_recommendation(advisory.advisory_level),
            last_updated=advisory.last_updated,
            advisory_level=advisory.advisory_level,
        )

    def _base_score(self, destination: str, advisory_level) -> float:
        base = self.config.base_score(advisory_level)
        if base is None:
            logger.warning(
                f"Unrecognized advisory level {advisory_level!r} for {destination}, "
                f"using base score {self.config.unknown_level_base_score}"
            )
            return self.config.unknown_level_base_score
        return base

    def _extract_factors(self, advisory: AdvisoryRecord) -> TravelRiskFactors:
        health_factors = []
        if advisory.health_risk_level:
            health_factors.append(f"Health risk level: {advisory.health_risk_level}/5")

        security_factors = []
        if advisory.security_risk_level:
            security_factors.append(f"Security risk level: {advisory.security_risk_level}/5")

        return TravelRiskFactors(
            advisory_level=get_advisory_label(advisory.advisory_level),
            health_factors=health_factors,
            security_factors=security_factors,
            other_factors=GENERIC_ADVISORIES,
        )
