"""
Risk Scoring Engine - Package.

============================================================
PURPOSE
============================================================
The Risk Scoring Engine converts compliance control responses
and travel advisories into normalized, weighted, threshold-
classified risk scores, and combines the compliance and travel
dimensions into a single verdict for executive reporting.

============================================================
WHAT IT IS
============================================================
- Pure, deterministic scoring (no I/O, no shared state)
- Fail-safe defaults that bias toward flagging risk
- Serializable outputs for dashboards and reports

============================================================
WHAT IT IS NOT
============================================================
- NOT a persistence layer (callers store results)
- NOT an advisory fetcher (advisories are supplied)
- NOT an approval workflow

============================================================
COMPONENTS
============================================================
1. COMPLIANCE: per-category and weighted overall score,
   plus remediation recommendations for key findings
2. TRAVEL: per-destination score from an advisory record
3. TRIP: per-leg scores rolled up into a trip score
4. COMBINED: weighted merge of compliance and travel

============================================================
SCORING
============================================================
Every score: 0-100, higher is riskier.

Classification:
- LOW (0-25)
- MEDIUM (26-50)
- HIGH (51-75)
- CRITICAL (76-100)

============================================================
USAGE
============================================================
    from risk_scoring import ControlResponse, RiskScoringEngine

    engine = RiskScoringEngine()
    result = engine.score_compliance([
        ControlResponse("AC-1", "Access Control", "implemented"),
        ControlResponse("AC-2", "Access Control", "partially-implemented"),
    ])

    print(f"Risk Level: {result.risk_level.name}")
    print(f"Overall Score: {result.overall_score}/100")

============================================================
"""

# Types
from .types import (
    # Enums
    RiskLevel,
    ControlStatus,
    DataFreshnessStatus,

    # Input types
    ControlResponse,
    AdvisoryRecord,
    TripLeg,

    # Output types
    CategoryScore,
    ComplianceFinding,
    ComplianceScoreResult,
    RemediationEffort,
    Recommendation,
    RemediationEstimate,
    TravelRiskFactors,
    TravelRiskResult,
    TripLegAssessment,
    TripAssessment,
    TripRiskSummary,
    TripTravelDecision,
    CombinedRiskResult,

    # Helpers
    UNCATEGORIZED,
    round_score,

    # Exceptions
    RiskScoringError,
    ConfigurationError,
    TripValidationError,
    AdvisoryNotFoundError,
)

# Configuration
from .config import (
    WeightTable,
    RiskThresholds,
    TravelScoringConfig,
    CombinerWeights,
    CombinerConfig,
    RiskScoringConfig,
    DEFAULT_CATEGORY_WEIGHTS,
    get_default_config,
)

# Components
from .compliance import ComplianceScorer
from .recommendations import generate_recommendations, estimate_remediation_effort
from .advisory import AdvisorySource, StaticAdvisorySource
from .travel import (
    TravelRiskScorer,
    get_advisory_label,
    get_travel_recommendation,
)
from .trip import (
    TripAggregator,
    validate_trip_legs,
    summarize_trip,
    evaluate_trip_safety,
)
from .combiner import CombinedRiskCombiner, combine

# Engine
from .engine import (
    RiskScoringEngine,
    score_compliance,
    score_travel_risk,
    combine_risk_scores,
    get_risk_level_from_score,
    format_risk_summary,
)


__all__ = [
    # Enums
    "RiskLevel",
    "ControlStatus",
    "DataFreshnessStatus",

    # Input types
    "ControlResponse",
    "AdvisoryRecord",
    "TripLeg",

    # Output types
    "CategoryScore",
    "ComplianceFinding",
    "ComplianceScoreResult",
    "RemediationEffort",
    "Recommendation",
    "RemediationEstimate",
    "TravelRiskFactors",
    "TravelRiskResult",
    "TripLegAssessment",
    "TripAssessment",
    "TripRiskSummary",
    "TripTravelDecision",
    "CombinedRiskResult",

    # Helpers
    "UNCATEGORIZED",
    "round_score",

    # Exceptions
    "RiskScoringError",
    "ConfigurationError",
    "TripValidationError",
    "AdvisoryNotFoundError",

    # Configuration
    "WeightTable",
    "RiskThresholds",
    "TravelScoringConfig",
    "CombinerWeights",
    "CombinerConfig",
    "RiskScoringConfig",
    "DEFAULT_CATEGORY_WEIGHTS",
    "get_default_config",

    # Components
    "ComplianceScorer",
    "generate_recommendations",
    "estimate_remediation_effort",
    "AdvisorySource",
    "StaticAdvisorySource",
    "TravelRiskScorer",
    "get_advisory_label",
    "get_travel_recommendation",
    "TripAggregator",
    "validate_trip_legs",
    "summarize_trip",
    "evaluate_trip_safety",
    "CombinedRiskCombiner",
    "combine",

    # Engine
    "RiskScoringEngine",
    "score_compliance",
    "score_travel_risk",
    "combine_risk_scores",
    "get_risk_level_from_score",
    "format_risk_summary",
]


__version__ = "1.0.0"
