"""
Risk Scoring Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the Risk Scoring Engine.

This module defines all enums, records and exceptions shared by
the compliance scorer, the travel risk scorer, the trip
aggregator and the combined risk combiner.

============================================================
DESIGN PRINCIPLES
============================================================
- All records are immutable (frozen dataclasses, sequence
  fields stored as tuples)
- Enums for discrete values
- Every output record serializes to JSON-compatible data
  through to_dict(), timestamps as ISO-8601 strings
- Clear separation between input and output types

============================================================
SCORE SCALE
============================================================
Every score produced by the engine is an integer 0-100.
Higher is riskier.

    0-25    LOW
    26-50   MEDIUM
    51-75   HIGH
    76-100  CRITICAL

============================================================
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


UNCATEGORIZED = "Uncategorized"


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


def round_score(value: float) -> int:
    """
    Round a score half-up to the nearest integer.

    Python's round() uses banker's rounding (round(42.5) == 42);
    scores are rounded half away from zero instead so that
    42.5 becomes 43. The float is converted through repr() to
    avoid binary artifacts such as 2.675 -> 2.67499999.
    """
    return int(Decimal(repr(float(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _iso(value: Optional[Union[datetime, date]]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _freeze(record: Any, *names: str) -> None:
    # Store sequence fields as tuples on a frozen dataclass
    for name in names:
        object.__setattr__(record, name, tuple(getattr(record, name)))


# ============================================================
# ENUMS
# ============================================================


class RiskLevel(str, Enum):
    """
    Engine-wide risk level classification of a 0-100 score.

    Boundaries are inclusive upper bounds:
    - LOW: score <= 25
    - MEDIUM: score <= 50
    - HIGH: score <= 75
    - CRITICAL: score > 75
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def from_score(cls, score: float) -> "RiskLevel":
        """
        Classify a 0-100 score with the default thresholds.

        Use RiskThresholds.classify() for custom thresholds.
        """
        if score <= 25:
            return cls.LOW
        elif score <= 50:
            return cls.MEDIUM
        elif score <= 75:
            return cls.HIGH
        else:
            return cls.CRITICAL

    @property
    def severity_order(self) -> int:
        """Numeric ordering for severity comparison."""
        return {"low": 0, "medium": 1, "high": 2, "critical": 3}[self.value]


class ControlStatus(str, Enum):
    """Graded implementation status of a compliance control."""

    IMPLEMENTED = "implemented"
    PARTIALLY_IMPLEMENTED = "partially-implemented"
    NOT_IMPLEMENTED = "not-implemented"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["ControlStatus"]:
        """
        Match a raw response string against the three exact values.

        Any other spelling ("Implemented", "partially implemented")
        is unrecognized and scored as worst case by the caller.

        Returns:
            The matching status, or None when unrecognized
        """
        if raw is None:
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


class DataFreshnessStatus(str, Enum):
    """Freshness of a score fed into the combined report."""

    FRESH = "fresh"          # Younger than the freshness window
    STALE = "stale"          # Older than the freshness window
    MISSING = "missing"      # No timestamp available


# ============================================================
# COMPLIANCE CONTRACTS
# ============================================================


@dataclass(frozen=True)
class ControlResponse:
    """
    One assessor answer to one compliance control.

    Immutable once scored; a re-submission creates a new record.
    """

    control_id: str
    category: Optional[str]
    response: str

    @property
    def category_name(self) -> str:
        """Category used for grouping, blank categories bucketed as Uncategorized."""
        if self.category is None or not str(self.category).strip():
            return UNCATEGORIZED
        return str(self.category).strip()

    @property
    def status(self) -> Optional[ControlStatus]:
        return ControlStatus.parse(self.response)


@dataclass(frozen=True)
class CategoryScore:
    """
    Score for one compliance category within a scoring run.

    Invariant: implemented + partial + not_implemented == control_count
    """

    category: str
    score: int
    weight: float
    control_count: int
    implemented_count: int
    partial_count: int = 0
    not_implemented_count: int = 0

    @property
    def compliance_percentage(self) -> int:
        if self.control_count == 0:
            return 0
        return round_score(self.implemented_count / self.control_count * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "score": self.score,
            "weight": self.weight,
            "control_count": self.control_count,
            "implemented_count": self.implemented_count,
            "partial_count": self.partial_count,
            "not_implemented_count": self.not_implemented_count,
            "compliance_percentage": self.compliance_percentage,
        }


@dataclass(frozen=True)
class ComplianceFinding:
    """A control that is not fully implemented, ranked for remediation."""

    control_id: str
    category: str
    status: str          # ControlStatus value or "unrecognized"
    weight: float
    impact: str
    priority: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "control_id": self.control_id,
            "category": self.category,
            "status": self.status,
            "weight": self.weight,
            "impact": self.impact,
            "priority": self.priority,
        }


class RemediationEffort(str, Enum):
    """Effort needed to close a compliance gap."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Recommendation:
    """Remediation steps for one key finding."""

    control_id: str
    finding_id: str
    title: str
    description: str
    priority: str                 # P0 (most urgent) .. P3
    estimated_effort: RemediationEffort
    estimated_days: int
    action_items: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "action_items")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "control_id": self.control_id,
            "finding_id": self.finding_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "estimated_effort": self.estimated_effort.value,
            "estimated_days": self.estimated_days,
            "action_items": list(self.action_items),
        }


@dataclass(frozen=True)
class RemediationEstimate:
    """Total effort and cost range of a set of recommendations (USD)."""

    total_days: int = 0
    effort_level: RemediationEffort = RemediationEffort.LOW
    cost_low: int = 0
    cost_high: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_days": self.total_days,
            "effort_level": self.effort_level.value,
            "cost_low": self.cost_low,
            "cost_high": self.cost_high,
        }


@dataclass(frozen=True)
class ComplianceScoreResult:
    """
    Output of one compliance scoring run.

    ============================================================
    OUTPUT GUARANTEES
    ============================================================
    - overall_score: Always 0-100
    - category_scores: Sorted by category name
    - Empty input: overall_score 0, LOW, no categories
    ============================================================
    """

    overall_score: int = 0
    risk_level: RiskLevel = RiskLevel.LOW
    category_scores: Tuple[CategoryScore, ...] = ()
    key_findings: Tuple[ComplianceFinding, ...] = ()
    total_controls: int = 0
    weights_version: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)
    recommendations: Tuple[Recommendation, ...] = ()
    remediation_estimate: RemediationEstimate = field(default_factory=RemediationEstimate)

    def __post_init__(self) -> None:
        _freeze(self, "category_scores", "key_findings", "recommendations")

    def get_category(self, category: str) -> Optional[CategoryScore]:
        """Return the score for a category, or None if absent from the run."""
        for category_score in self.category_scores:
            if category_score.category == category:
                return category_score
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "risk_level": self.risk_level.value,
            "category_scores": [c.to_dict() for c in self.category_scores],
            "key_findings": [f.to_dict() for f in self.key_findings],
            "total_controls": self.total_controls,
            "weights_version": self.weights_version,
            "timestamp": _iso(self.timestamp),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "remediation_estimate": self.remediation_estimate.to_dict(),
        }


# ============================================================
# TRAVEL CONTRACTS
# ============================================================


@dataclass(frozen=True)
class AdvisoryRecord:
    """
    Travel advisory for one destination.

    Produced by the advisory source collaborator; read-only input
    to the engine. advisory_level is nominally 1-4, health and
    security levels 0-5 (None is treated as 0).
    """

    country_code: str
    advisory_level: int
    health_risk_level: Optional[int] = None
    security_risk_level: Optional[int] = None
    last_updated: datetime = field(default_factory=utc_now)
    country_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "country_code": self.country_code,
            "country_name": self.country_name,
            "advisory_level": self.advisory_level,
            "health_risk_level": self.health_risk_level,
            "security_risk_level": self.security_risk_level,
            "last_updated": _iso(self.last_updated),
        }


@dataclass(frozen=True)
class TravelRiskFactors:
    """Explanation of a travel risk score."""

    advisory_level: str
    health_factors: Tuple[str, ...] = ()
    security_factors: Tuple[str, ...] = ()
    other_factors: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "health_factors", "security_factors", "other_factors")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "advisory_level": self.advisory_level,
            "health_factors": list(self.health_factors),
            "security_factors": list(self.security_factors),
            "other_factors": list(self.other_factors),
        }


@dataclass(frozen=True)
class TravelRiskResult:
    """Travel risk for one destination, derived from one AdvisoryRecord."""

    destination: str
    score: int
    risk_level: RiskLevel
    factors: TravelRiskFactors
    travel_recommendation: str
    last_updated: datetime
    advisory_level: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "destination": self.destination,
            "score": self.score,
            "risk_level": self.risk_level.value,
            "factors": self.factors.to_dict(),
            "travel_recommendation": self.travel_recommendation,
            "last_updated": _iso(self.last_updated),
            "advisory_level": self.advisory_level,
        }


# ============================================================
# TRIP CONTRACTS
# ============================================================


@dataclass(frozen=True)
class TripLeg:
    """One leg of a business trip. Validated by the caller before scoring."""

    destination: str
    departure_date: datetime
    return_date: datetime
    purpose: str
    origin: Optional[str] = None

    @property
    def duration_days(self) -> int:
        """Whole days spanned by the leg, partial days rounded up."""
        delta = self.return_date - self.departure_date
        days = delta.days
        if delta.seconds or delta.microseconds:
            days += 1
        return max(0, days)


@dataclass(frozen=True)
class TripLegAssessment:
    """A scored trip leg."""

    leg: TripLeg
    travel_result: TravelRiskResult

    @property
    def destination(self) -> str:
        return self.leg.destination

    @property
    def risk_score(self) -> int:
        return self.travel_result.score

    @property
    def risk_level(self) -> RiskLevel:
        return self.travel_result.risk_level

    @property
    def advisory_level(self) -> int:
        return self.travel_result.advisory_level

    @property
    def recommendation(self) -> str:
        return self.travel_result.travel_recommendation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "destination": self.leg.destination,
            "origin": self.leg.origin,
            "departure_date": _iso(self.leg.departure_date),
            "return_date": _iso(self.leg.return_date),
            "purpose": self.leg.purpose,
            "duration_days": self.leg.duration_days,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "advisory_level": self.advisory_level,
            "recommendation": self.recommendation,
            "travel_result": self.travel_result.to_dict(),
        }


@dataclass(frozen=True)
class TripAssessment:
    """
    Risk assessment of a multi-leg trip.

    highest_risk is one of the objects in legs, not a copy.
    """

    legs: Tuple[TripLegAssessment, ...]
    highest_risk: TripLegAssessment
    overall_trip_score: int
    overall_risk_level: RiskLevel
    recommendations: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        _freeze(self, "legs", "recommendations")

    @property
    def highest_risk_index(self) -> int:
        for index, leg in enumerate(self.legs):
            if leg is self.highest_risk:
                return index
        return -1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "legs": [leg.to_dict() for leg in self.legs],
            "highest_risk": self.highest_risk.to_dict(),
            "highest_risk_index": self.highest_risk_index,
            "overall_trip_score": self.overall_trip_score,
            "overall_risk_level": self.overall_risk_level.value,
            "recommendations": list(self.recommendations),
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class TripRiskSummary:
    """Count of trip legs per risk level."""

    low_risk_legs: int
    medium_risk_legs: int
    high_risk_legs: int
    critical_risk_legs: int
    overall_risk_level: RiskLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "low_risk_legs": self.low_risk_legs,
            "medium_risk_legs": self.medium_risk_legs,
            "high_risk_legs": self.high_risk_legs,
            "critical_risk_legs": self.critical_risk_legs,
            "overall_risk_level": self.overall_risk_level.value,
        }


@dataclass(frozen=True)
class TripTravelDecision:
    """Whether a trip may proceed without escalation."""

    safe: bool
    reason: Optional[str] = None


# ============================================================
# COMBINED RISK CONTRACTS
# ============================================================


@dataclass(frozen=True)
class CombinedRiskResult:
    """
    Compliance and travel risk merged into one number.

    Not persisted by the engine; storing reports is the caller's
    responsibility. Weights are the effective (normalized) weights.
    """

    compliance_score: int
    travel_score: int
    combined_score: int
    risk_level: RiskLevel
    compliance_weight: float
    travel_weight: float
    executive_summary: str = ""
    mitigations: Tuple[str, ...] = ()
    confidence: int = 100
    compliance_data_freshness: DataFreshnessStatus = DataFreshnessStatus.MISSING
    travel_data_freshness: DataFreshnessStatus = DataFreshnessStatus.MISSING
    report_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        _freeze(self, "mitigations")

    @property
    def is_high_or_critical(self) -> bool:
        return self.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "compliance_score": self.compliance_score,
            "travel_score": self.travel_score,
            "combined_score": self.combined_score,
            "risk_level": self.risk_level.value,
            "compliance_weight": self.compliance_weight,
            "travel_weight": self.travel_weight,
            "executive_summary": self.executive_summary,
            "mitigations": list(self.mitigations),
            "confidence": self.confidence,
            "compliance_data_freshness": self.compliance_data_freshness.value,
            "travel_data_freshness": self.travel_data_freshness.value,
            "created_at": _iso(self.created_at),
        }


# ============================================================
# ERROR TYPES
# ============================================================


class RiskScoringError(Exception):
    """Base exception for risk scoring errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(RiskScoringError):
    """Raised when a weight table or engine configuration is invalid."""
    pass


class TripValidationError(RiskScoringError):
    """
    Raised for structurally invalid trip input.

    This is a caller-side validation failure and must be raised
    before scoring is attempted.
    """

    def __init__(self, message: str, leg_index: Optional[int] = None) -> None:
        super().__init__(message, details={"leg_index": leg_index})
        self.leg_index = leg_index


class AdvisoryNotFoundError(RiskScoringError):
    """Raised by an advisory source when it has no record for a destination."""

    def __init__(self, destination: str) -> None:
        super().__init__(
            f"No travel advisory available for destination '{destination}'",
            details={"destination": destination},
        )
        self.destination = destination
