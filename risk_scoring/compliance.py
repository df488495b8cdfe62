"""
Risk Scoring Engine - Compliance Scorer.

============================================================
PURPOSE
============================================================
Converts a list of compliance control responses into a 0-100
risk score per category and a weighted overall score.

============================================================
ALGORITHM
============================================================
1. Group controls by category (blank -> "Uncategorized")
2. Per control contribution:
       implemented             0.0
       partially-implemented   0.5
       not-implemented         1.0
       anything else           1.0  (fail safe toward worse)
3. Category score = mean contribution x 100, rounded
4. Category weight = Weight Table lookup (unknown -> 0.1)
5. Overall = sum(score x weight) / sum(weight), rounded
6. Risk level from thresholds (<=25, <=50, <=75, >75)
7. Key findings ranked by priority, each mapped to a
   remediation recommendation with an effort estimate

============================================================
DESIGN PRINCIPLES
============================================================
- Pure: same input = same output, no side effects
- Weight table injected, never read from global state
- Empty input is a valid zero result, not an error

============================================================
"""

import logging
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .config import RiskThresholds, WeightTable
from .recommendations import estimate_remediation_effort, generate_recommendations
from .types import (
    CategoryScore,
    ComplianceFinding,
    ComplianceScoreResult,
    ControlResponse,
    ControlStatus,
    RiskLevel,
    round_score,
    utc_now,
)


logger = logging.getLogger(__name__)


MAX_KEY_FINDINGS = 5

UNRECOGNIZED_STATUS = "unrecognized"

# Added to the category weight (x100) when ranking findings.
# Unrecognized answers rank above confirmed gaps.
_STATUS_PRIORITY_BONUS: Dict[str, int] = {
    UNRECOGNIZED_STATUS: 15,
    ControlStatus.NOT_IMPLEMENTED.value: 10,
    ControlStatus.PARTIALLY_IMPLEMENTED.value: 5,
}

_STATUS_IMPACT: Dict[str, str] = {
    UNRECOGNIZED_STATUS: "Control status could not be determined - treated as not implemented",
    ControlStatus.NOT_IMPLEMENTED.value: "Control gap - remediation required",
    ControlStatus.PARTIALLY_IMPLEMENTED.value: "Partial control coverage - complete implementation",
}


class ComplianceScorer:
    """
    Scores compliance control responses.

    Thread-safe: holds only immutable configuration.
    """

    def __init__(
        self,
        weight_table: Optional[WeightTable] = None,
        thresholds: Optional[RiskThresholds] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            weight_table: Category weights and response values.
                          Uses the default table if not provided.
            thresholds: Risk level thresholds.
            clock: Returns the timestamp stamped on results.
        """
        self.weight_table = weight_table or WeightTable()
        self.thresholds = thresholds or RiskThresholds()
        self._clock = clock or utc_now

    def score(self, controls: Iterable[ControlResponse]) -> ComplianceScoreResult:
        """
        Score a set of control responses.

        Args:
            controls: Control responses of one assessment

        Returns:
            ComplianceScoreResult with per-category breakdown
        """
        controls = list(controls)
        timestamp = self._clock()

        if not controls:
            return ComplianceScoreResult(
                overall_score=0,
                risk_level=RiskLevel.LOW,
                category_scores=(),
                key_findings=(),
                total_controls=0,
                weights_version=self.weight_table.version,
                timestamp=timestamp,
            )

        grouped = self._group_by_category(controls)
        category_scores = [
            self._score_category(category, members)
            for category, members in sorted(grouped.items())
        ]
        overall = self._calculate_overall_score(category_scores)
        key_findings = self._extract_key_findings(controls)
        recommendations = generate_recommendations(key_findings)

        return ComplianceScoreResult(
            overall_score=overall,
            risk_level=self.thresholds.classify(overall),
            category_scores=category_scores,
            key_findings=key_findings,
            recommendations=recommendations,
            remediation_estimate=estimate_remediation_effort(recommendations),
            total_controls=len(controls),
            weights_version=self.weight_table.version,
            timestamp=timestamp,
        )

    # --------------------------------------------------------
    # INTERNALS
    # --------------------------------------------------------

    def _group_by_category(self, controls: List[ControlResponse]) -> Dict[str, List[ControlResponse]]:
        grouped: Dict[str, List[ControlResponse]] = OrderedDict()
        for control in controls:
            grouped.setdefault(control.category_name, []).append(control)
        return grouped

    def _contribution(self, control: ControlResponse) -> Tuple[Optional[ControlStatus], float]:
        status = control.status
        if status is None:
            logger.debug(
                f"Unrecognized response '{control.response}' for control {control.control_id}, "
                f"scoring as worst case"
            )
        return status, self.weight_table.get_response_value(status)

    def _score_category(self, category: str, controls: List[ControlResponse]) -> CategoryScore:
        implemented = 0
        partial = 0
        not_implemented = 0
        total_contribution = 0.0

        for control in controls:
            status, contribution = self._contribution(control)
            total_contribution += contribution
            if status == ControlStatus.IMPLEMENTED:
                implemented += 1
            elif status == ControlStatus.PARTIALLY_IMPLEMENTED:
                partial += 1
            else:
                not_implemented += 1

        if not self.weight_table.is_known_category(category):
            logger.debug(f"Category '{category}' not in weight table, using default weight")

        return CategoryScore(
            category=category,
            score=round_score(total_contribution / len(controls) * 100),
            weight=self.weight_table.get_weight(category),
            control_count=len(controls),
            implemented_count=implemented,
            partial_count=partial,
            not_implemented_count=not_implemented,
        )

    def _calculate_overall_score(self, category_scores: List[CategoryScore]) -> int:
        """
        Weighted average of category scores.

        Total = sum(score x weight) / sum(weight)
        """
        total_weight = sum(c.weight for c in category_scores)
        if total_weight <= 0:
            return 0
        weighted = sum(c.score * c.weight for c in category_scores)
        return round_score(weighted / total_weight)

    def _extract_key_findings(self, controls: List[ControlResponse]) -> List[ComplianceFinding]:
        """Top findings among controls that are not fully implemented."""
        findings: List[ComplianceFinding] = []

        for control in controls:
            status = control.status
            if status == ControlStatus.IMPLEMENTED:
                continue
            status_key = status.value if status is not None else UNRECOGNIZED_STATUS
            weight = self.weight_table.get_weight(control.category_name)
            findings.append(ComplianceFinding(
                control_id=control.control_id,
                category=control.category_name,
                status=status_key,
                weight=weight,
                impact=_STATUS_IMPACT[status_key],
                priority=round_score(weight * 100) + _STATUS_PRIORITY_BONUS[status_key],
            ))

        findings.sort(key=lambda f: (-f.priority, f.category, str(f.control_id)))
        return findings[:MAX_KEY_FINDINGS]
