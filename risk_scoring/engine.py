"""
Risk Scoring Engine - Main Orchestrator.

============================================================
PURPOSE
============================================================
The RiskScoringEngine is the main entry point for risk scoring.

It wires the four components from one configuration:
1. Compliance Scorer
2. Travel Risk Scorer
3. Trip Aggregator
4. Combined Risk Combiner

============================================================
DESIGN PRINCIPLES
============================================================
- Orchestration only; scoring lives in the components
- Deterministic and stateless per call
- Configuration passed in explicitly, never global
- Safe to share across threads and coroutines

============================================================
USAGE
============================================================
    from risk_scoring import (
        RiskScoringEngine,
        ControlResponse,
        AdvisoryRecord,
        StaticAdvisorySource,
    )

    engine = RiskScoringEngine(
        advisory_source=StaticAdvisorySource([
            AdvisoryRecord(country_code="JP", advisory_level=1),
        ]),
    )

    compliance = engine.score_compliance([
        ControlResponse("AC-1", "Access Control", "implemented"),
        ControlResponse("IR-4", "Incident Management", "not-implemented"),
    ])
    trip = engine.assess_trip(legs)
    report = engine.build_combined_report(compliance, trip)

    print(format_risk_summary(report))

============================================================
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence, Union

from .advisory import AdvisorySource, StaticAdvisorySource
from .combiner import CombinedRiskCombiner, combine
from .compliance import ComplianceScorer
from .config import CombinerWeights, RiskScoringConfig
from .travel import TravelRiskScorer
from .trip import TripAggregator, validate_trip_legs
from .types import (
    AdvisoryRecord,
    CombinedRiskResult,
    ComplianceScoreResult,
    ControlResponse,
    RiskLevel,
    TravelRiskResult,
    TripAssessment,
    TripLeg,
    utc_now,
)


logger = logging.getLogger(__name__)


class RiskScoringEngine:
    """
    Facade over the compliance, travel, trip and combined scorers.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    1. Build every component from one RiskScoringConfig
    2. Validate trip legs before aggregation
    3. Log each completed scoring operation
    ============================================================
    """

    def __init__(
        self,
        config: Optional[RiskScoringConfig] = None,
        advisory_source: Optional[AdvisorySource] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize the Risk Scoring Engine.

        Args:
            config: Engine configuration. Uses defaults if not provided.
            advisory_source: Resolves trip destinations to advisories.
                             An empty in-memory source if not provided.
            clock: Timestamp source for results.
        """
        self.config = config or RiskScoringConfig()
        self.advisory_source = advisory_source or StaticAdvisorySource()
        self._clock = clock or utc_now

        thresholds = self.config.thresholds
        self.compliance_scorer = ComplianceScorer(
            weight_table=self.config.weight_table,
            thresholds=thresholds,
            clock=self._clock,
        )
        self.travel_scorer = TravelRiskScorer(config=self.config.travel, thresholds=thresholds)
        self.trip_aggregator = TripAggregator(
            advisory_source=self.advisory_source,
            travel_scorer=self.travel_scorer,
            thresholds=thresholds,
            clock=self._clock,
        )
        self.combiner = CombinedRiskCombiner(
            config=self.config.combiner,
            thresholds=thresholds,
            clock=self._clock,
        )

    def score_compliance(self, controls: Iterable[ControlResponse]) -> ComplianceScoreResult:
        """Score control responses into a compliance risk result."""
        result = self.compliance_scorer.score(controls)
        logger.info(
            f"Compliance score {result.overall_score} ({result.risk_level.value}) "
            f"from {result.total_controls} controls in {len(result.category_scores)} categories"
        )
        return result

    def score_travel(self, destination: str, advisory: Optional[AdvisoryRecord] = None) -> TravelRiskResult:
        """
        Score travel risk for a destination.

        The advisory is looked up through the advisory source when
        not supplied.
        """
        if advisory is None:
            advisory = self.advisory_source.get_advisory(destination)
        result = self.travel_scorer.score(destination, advisory)
        logger.info(f"Travel risk for {destination}: {result.score} ({result.risk_level.value})")
        return result

    def assess_trip(self, legs: Sequence[TripLeg]) -> TripAssessment:
        """
        Validate and assess a multi-leg trip.

        Raises:
            TripValidationError: If a leg is structurally invalid
            AdvisoryNotFoundError: If a destination has no advisory
        """
        validate_trip_legs(legs)
        assessment = self.trip_aggregator.assess_trip(legs)
        logger.info(
            f"Trip of {len(assessment.legs)} legs scored {assessment.overall_trip_score} "
            f"({assessment.overall_risk_level.value}), highest risk {assessment.highest_risk.destination}"
        )
        return assessment

    def combine(
        self,
        compliance_score: float,
        travel_score: float,
        weights: Optional[CombinerWeights] = None,
    ) -> int:
        """Combined 0-100 score using the configured weights unless overridden."""
        return self.combiner.combine(compliance_score, travel_score, weights)

    def build_combined_report(
        self,
        compliance: ComplianceScoreResult,
        travel: Union[TravelRiskResult, TripAssessment],
        weights: Optional[CombinerWeights] = None,
        report_id: Optional[str] = None,
    ) -> CombinedRiskResult:
        """Combined report from a compliance result and a travel or trip result."""
        report = self.combiner.report_from_results(compliance, travel, weights=weights, report_id=report_id)
        logger.info(
            f"Combined risk {report.combined_score} ({report.risk_level.value}), "
            f"confidence {report.confidence}"
        )
        return report

    def get_config(self) -> RiskScoringConfig:
        """Return the current engine configuration."""
        return self.config


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def score_compliance(
    controls: Iterable[ControlResponse],
    config: Optional[RiskScoringConfig] = None,
) -> ComplianceScoreResult:
    """
    Convenience function to score compliance in one call.

    For repeated scoring, prefer creating a RiskScoringEngine.
    """
    return RiskScoringEngine(config=config).score_compliance(controls)


def score_travel_risk(
    destination: str,
    advisory: AdvisoryRecord,
    config: Optional[RiskScoringConfig] = None,
) -> TravelRiskResult:
    """Convenience function to score one destination in one call."""
    return RiskScoringEngine(config=config).score_travel(destination, advisory)


def combine_risk_scores(
    compliance_score: float,
    travel_score: float,
    weights: Optional[CombinerWeights] = None,
) -> int:
    """Combine two 0-100 scores, default weights compliance 0.4 / travel 0.6."""
    return combine(compliance_score, travel_score, weights)


def get_risk_level_from_score(score: float) -> RiskLevel:
    """Risk level of a 0-100 score with the default thresholds."""
    return RiskLevel.from_score(score)


def format_risk_summary(
    result: Union[ComplianceScoreResult, TravelRiskResult, TripAssessment, CombinedRiskResult],
) -> str:
    """
    Format a human-readable risk summary.

    Useful for logging, alerts, and dashboards.
    """
    lines = ["=" * 50]

    if isinstance(result, ComplianceScoreResult):
        lines += [
            "COMPLIANCE RISK SUMMARY",
            "=" * 50,
            f"Overall Score: {result.overall_score}/100",
            f"Risk Level: {result.risk_level.name}",
            f"Timestamp: {result.timestamp.isoformat()}",
            "",
            "Category Breakdown:",
        ]
        lines += [
            f"  {c.category:<24} {c.score:>3}  (weight {c.weight:.2f}, "
            f"{c.implemented_count}/{c.control_count} implemented)"
            for c in result.category_scores
        ]
        if result.key_findings:
            lines += ["", "Key Findings:"]
            lines += [f"  {f.control_id} [{f.category}] {f.status}: {f.impact}" for f in result.key_findings]
        if result.recommendations:
            estimate = result.remediation_estimate
            lines += ["", "Remediation:"]
            lines += [
                f"  [{r.priority}] {r.control_id}: {r.title} ({r.estimated_days} days)"
                for r in result.recommendations
            ]
            lines.append(
                f"  Estimated effort: {estimate.effort_level.name}, {estimate.total_days} days, "
                f"${estimate.cost_low:,}-${estimate.cost_high:,}"
            )

    elif isinstance(result, TravelRiskResult):
        lines += [
            "TRAVEL RISK SUMMARY",
            "=" * 50,
            f"Destination: {result.destination}",
            f"Score: {result.score}/100",
            f"Risk Level: {result.risk_level.name}",
            f"Advisory: {result.factors.advisory_level}",
            f"Recommendation: {result.travel_recommendation}",
        ]

    elif isinstance(result, TripAssessment):
        lines += [
            "TRIP RISK SUMMARY",
            "=" * 50,
            f"Overall Score: {result.overall_trip_score}/100",
            f"Risk Level: {result.overall_risk_level.name}",
            f"Highest Risk: {result.highest_risk.destination} ({result.highest_risk.risk_score})",
            "",
            "Legs:",
        ]
        lines += [
            f"  {i + 1}. {leg.destination:<20} {leg.risk_score:>3}  {leg.risk_level.name}"
            for i, leg in enumerate(result.legs)
        ]

    else:
        lines += [
            "COMBINED RISK SUMMARY",
            "=" * 50,
            f"Combined Score: {result.combined_score}/100",
            f"Risk Level: {result.risk_level.name}",
            f"Compliance: {result.compliance_score} (weight {result.compliance_weight:.2f})",
            f"Travel: {result.travel_score} (weight {result.travel_weight:.2f})",
            f"Confidence: {result.confidence}%",
            "",
            result.executive_summary,
        ]
        if result.mitigations:
            lines += ["", "Mitigations:"]
            lines += [f"  - {m}" for m in result.mitigations]

    lines.append("=" * 50)
    return "\n".join(lines)
