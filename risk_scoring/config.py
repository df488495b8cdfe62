"""
Risk Scoring Engine - Configuration.

============================================================
PURPOSE
============================================================
Defines the Weight Table and every threshold used by the
Risk Scoring Engine.

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable configurations (frozen dataclasses)
- Explicitly constructed and passed to each scorer;
  there is no process-wide configuration object
- Invalid configuration fails at construction time
- Conservative defaults (unknown categories still count)

============================================================
LOADING
============================================================
Configuration can be loaded from:
- Default values (get_default_config)
- Environment variables / .env file (RiskScoringConfig.from_env)
- YAML weight table file (WeightTable.from_yaml)

Changing the Weight Table changes future overall scores only.
Stored historical scores are never rescaled.

============================================================
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv

from .types import ConfigurationError, ControlStatus, RiskLevel


logger = logging.getLogger(__name__)


DEFAULT_CATEGORY_WEIGHTS: Dict[str, float] = {
    "Access Control": 0.15,
    "Asset Management": 0.1,
    "Cryptography": 0.12,
    "Physical Security": 0.08,
    "Incident Management": 0.15,
    "Business Continuity": 0.12,
    "Risk Assessment": 0.1,
    "Compliance": 0.1,
    "Operations": 0.08,
}

DEFAULT_RESPONSE_VALUES: Dict[ControlStatus, float] = {
    ControlStatus.IMPLEMENTED: 0.0,
    ControlStatus.PARTIALLY_IMPLEMENTED: 0.5,
    ControlStatus.NOT_IMPLEMENTED: 1.0,
}


# ============================================================
# WEIGHT TABLE
# ============================================================


@dataclass(frozen=True)
class WeightTable:
    """
    Category weights and control response values.

    ============================================================
    RULES
    ============================================================
    - Category weights are in (0, 1]
    - Unknown categories use default_weight (never zero, so
      unclassified risk is never silently dropped)
    - Response values are risk contributions in [0, 1]
    - Unrecognized responses use unrecognized_response_value
      (worst case by default)
    ============================================================
    """

    categories: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS))
    default_weight: float = 0.1
    response_values: Mapping[ControlStatus, float] = field(default_factory=lambda: dict(DEFAULT_RESPONSE_VALUES))
    unrecognized_response_value: float = 1.0
    version: str = "default"

    def __post_init__(self) -> None:
        for category, weight in self.categories.items():
            if not 0 < weight <= 1:
                raise ConfigurationError(
                    f"Weight for category '{category}' must be in (0, 1], got {weight}",
                    details={"category": category, "weight": weight},
                )
        if not 0 < self.default_weight <= 1:
            raise ConfigurationError(
                f"default_weight must be in (0, 1], got {self.default_weight}",
                details={"default_weight": self.default_weight},
            )

        response_values = {ControlStatus(k): float(v) for k, v in self.response_values.items()}
        missing = [status.value for status in ControlStatus if status not in response_values]
        if missing:
            raise ConfigurationError(
                f"Response values missing for: {', '.join(missing)}",
                details={"missing": missing},
            )
        for status, value in response_values.items():
            if not 0 <= value <= 1:
                raise ConfigurationError(
                    f"Response value for '{status.value}' must be in [0, 1], got {value}",
                    details={"status": status.value, "value": value},
                )
        if not 0 <= self.unrecognized_response_value <= 1:
            raise ConfigurationError(
                f"unrecognized_response_value must be in [0, 1], got {self.unrecognized_response_value}",
            )

        # Freeze the mappings so a shared table cannot be mutated.
        object.__setattr__(self, "categories", MappingProxyType({str(k): float(v) for k, v in self.categories.items()}))
        object.__setattr__(self, "response_values", MappingProxyType(response_values))

    def get_weight(self, category: str) -> float:
        """Weight for a category, default_weight when not in the table."""
        return self.categories.get(category, self.default_weight)

    def is_known_category(self, category: str) -> bool:
        return category in self.categories

    def get_response_value(self, status: Optional[ControlStatus]) -> float:
        """Risk contribution for a status; None means unrecognized."""
        if status is None:
            return self.unrecognized_response_value
        return self.response_values.get(status, self.unrecognized_response_value)

    def with_categories(self, categories: Mapping[str, float], version: Optional[str] = None) -> "WeightTable":
        """Return a copy with a different category mapping."""
        return replace(self, categories=dict(categories), version=version or self.version)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "WeightTable":
        """
        Load a weight table from a YAML file.

        Expected layout:

            version: "2024-q3"
            default_weight: 0.1
            categories:
              Access Control: 0.15
              Cryptography: 0.12

        A missing or malformed file falls back to the default
        table with a warning. Out-of-range weights raise
        ConfigurationError.
        """
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("top-level YAML value must be a mapping")
            categories = data.get("categories", DEFAULT_CATEGORY_WEIGHTS)
            if not isinstance(categories, dict):
                raise ValueError("'categories' must be a mapping")
            parsed = {str(k): float(v) for k, v in categories.items()}
            default_weight = float(data.get("default_weight", 0.1))
            version = str(data.get("version", Path(path).stem))
        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load weight table from {path}: {e}; using default weights")
            return cls()

        table = cls(categories=parsed, default_weight=default_weight, version=version)
        logger.info(f"Loaded weight table '{table.version}' with {len(parsed)} categories from {path}")
        return table

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "categories": dict(self.categories),
            "default_weight": self.default_weight,
            "response_values": {k.value: v for k, v in self.response_values.items()},
            "unrecognized_response_value": self.unrecognized_response_value,
        }


# ============================================================
# RISK LEVEL THRESHOLDS
# ============================================================


@dataclass(frozen=True)
class RiskThresholds:
    """
    Inclusive upper bounds of the LOW, MEDIUM and HIGH buckets.

    score <= low_max       -> LOW
    score <= medium_max    -> MEDIUM
    score <= high_max      -> HIGH
    otherwise              -> CRITICAL
    """

    low_max: float = 25
    medium_max: float = 50
    high_max: float = 75

    def __post_init__(self) -> None:
        if not 0 <= self.low_max < self.medium_max < self.high_max <= 100:
            raise ConfigurationError(
                "Thresholds must satisfy 0 <= low_max < medium_max < high_max <= 100",
                details=self.to_dict(),
            )

    def classify(self, score: float) -> RiskLevel:
        if score <= self.low_max:
            return RiskLevel.LOW
        elif score <= self.medium_max:
            return RiskLevel.MEDIUM
        elif score <= self.high_max:
            return RiskLevel.HIGH
        return RiskLevel.CRITICAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "low_max": self.low_max,
            "medium_max": self.medium_max,
            "high_max": self.high_max,
        }


# ============================================================
# TRAVEL SCORING CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class TravelScoringConfig:
    """
    Travel risk scoring constants.

    Base scores follow the 1-4 government advisory scale:
    1 Exercise Normal Precautions, 2 Exercise Increased Caution,
    3 Reconsider Travel, 4 Do Not Travel.
    """

    base_scores: Mapping[int, float] = field(default_factory=lambda: {1: 10, 2: 40, 3: 70, 4: 95})
    unknown_level_base_score: float = 50
    impact_per_level: float = 10     # Per health / security risk level
    max_score: float = 100

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_scores", MappingProxyType(dict(self.base_scores)))

    def base_score(self, advisory_level: Any) -> Optional[float]:
        """Base score for a known level, None for anything else."""
        try:
            return self.base_scores.get(advisory_level)
        except TypeError:
            # Unhashable level values are simply unknown.
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_scores": dict(self.base_scores),
            "unknown_level_base_score": self.unknown_level_base_score,
            "impact_per_level": self.impact_per_level,
            "max_score": self.max_score,
        }


# ============================================================
# COMBINER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class CombinerWeights:
    """
    Weights of the compliance and travel dimensions.

    Travel dominates by default.
    """

    compliance: float = 0.4
    travel: float = 0.6

    def __post_init__(self) -> None:
        if self.compliance < 0 or self.travel < 0:
            raise ConfigurationError(
                "Combiner weights must be non-negative",
                details=self.to_dict(),
            )
        if self.total() <= 0:
            raise ConfigurationError(
                "Combiner weights must not both be zero",
                details=self.to_dict(),
            )

    def total(self) -> float:
        return self.compliance + self.travel

    def is_normalized(self) -> bool:
        return abs(self.total() - 1.0) <= 1e-9

    def normalized(self) -> "CombinerWeights":
        """Weights scaled to sum to 1.0."""
        if self.is_normalized():
            return self
        total = self.total()
        logger.warning(f"Combiner weights sum to {total}, normalizing to 1.0")
        return CombinerWeights(compliance=self.compliance / total, travel=self.travel / total)

    def to_dict(self) -> Dict[str, float]:
        return {"compliance": self.compliance, "travel": self.travel}


@dataclass(frozen=True)
class CombinerConfig:
    """Configuration for the combined risk report."""

    weights: CombinerWeights = field(default_factory=CombinerWeights)

    # An input score is FRESH when younger than this window
    freshness_window_minutes: float = 30.0

    # Confidence deductions (from 100) per input
    stale_confidence_penalty: int = 15
    missing_confidence_penalty: int = 30

    # Above this score a dimension is reported as weak / challenging
    weak_posture_threshold: float = 50

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weights": self.weights.to_dict(),
            "freshness_window_minutes": self.freshness_window_minutes,
            "stale_confidence_penalty": self.stale_confidence_penalty,
            "missing_confidence_penalty": self.missing_confidence_penalty,
            "weak_posture_threshold": self.weak_posture_threshold,
        }


# ============================================================
# MASTER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class RiskScoringConfig:
    """
    Master configuration for the Risk Scoring Engine.

    Aggregates the weight table, thresholds and per-component
    settings.
    """

    weight_table: WeightTable = field(default_factory=WeightTable)
    thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    travel: TravelScoringConfig = field(default_factory=TravelScoringConfig)
    combiner: CombinerConfig = field(default_factory=CombinerConfig)

    engine_version: str = "1.0.0"

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, Path]] = None) -> "RiskScoringConfig":
        """
        Load configuration from environment variables.

        A .env file is read first when present; variables already
        set in the process environment take precedence.

        Environment variables:
        - RISK_WEIGHT_TABLE_PATH
        - RISK_DEFAULT_CATEGORY_WEIGHT
        - RISK_COMBINER_COMPLIANCE_WEIGHT
        - RISK_COMBINER_TRAVEL_WEIGHT
        - RISK_FRESHNESS_WINDOW_MINUTES
        """
        load_dotenv(dotenv_path)

        weight_table = WeightTable()
        if os.getenv("RISK_WEIGHT_TABLE_PATH"):
            weight_table = WeightTable.from_yaml(os.getenv("RISK_WEIGHT_TABLE_PATH"))
        if os.getenv("RISK_DEFAULT_CATEGORY_WEIGHT"):
            weight_table = replace(
                weight_table,
                default_weight=_env_float("RISK_DEFAULT_CATEGORY_WEIGHT"),
            )

        weights = CombinerWeights()
        if os.getenv("RISK_COMBINER_COMPLIANCE_WEIGHT") or os.getenv("RISK_COMBINER_TRAVEL_WEIGHT"):
            weights = CombinerWeights(
                compliance=_env_float("RISK_COMBINER_COMPLIANCE_WEIGHT", weights.compliance),
                travel=_env_float("RISK_COMBINER_TRAVEL_WEIGHT", weights.travel),
            )

        combiner = CombinerConfig(weights=weights)
        if os.getenv("RISK_FRESHNESS_WINDOW_MINUTES"):
            combiner = replace(
                combiner,
                freshness_window_minutes=_env_float("RISK_FRESHNESS_WINDOW_MINUTES"),
            )

        return cls(weight_table=weight_table, combiner=combiner)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weight_table": self.weight_table.to_dict(),
            "thresholds": self.thresholds.to_dict(),
            "travel": self.travel.to_dict(),
            "combiner": self.combiner.to_dict(),
            "engine_version": self.engine_version,
        }


def _env_float(name: str, default: Optional[float] = None) -> float:
    raw = os.getenv(name)
    if not raw:
        if default is None:
            raise ConfigurationError(f"{name} is not set")
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'", details={name: raw}) from e


# ============================================================
# DEFAULT CONFIGURATION
# ============================================================


def get_default_config() -> RiskScoringConfig:
    """Return a fresh default Risk Scoring Engine configuration."""
    return RiskScoringConfig()
