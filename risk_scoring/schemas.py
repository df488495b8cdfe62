"""
Pydantic Schemas for the Risk Scoring Engine.

Request models used by the HTTP layer to validate input before
any scoring is attempted. Each model converts to the engine's
dataclasses through to_domain().

Structural violations (blank destination, return date not after
departure, out-of-range advisory levels) are rejected here with a
pydantic ValidationError; the scorers themselves never validate.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .config import CombinerWeights
from .types import AdvisoryRecord, ControlResponse, TripLeg, utc_now


# =============================================================
# COMPLIANCE
# =============================================================

class ControlResponseIn(BaseModel):
    """One control answer as submitted by an assessor."""
    model_config = ConfigDict(populate_by_name=True)

    control_id: str = Field(..., alias="controlId", min_length=1)
    category: Optional[str] = None
    response: str

    def to_domain(self) -> ControlResponse:
        return ControlResponse(
            control_id=self.control_id,
            category=self.category,
            response=self.response,
        )


class ComplianceScoreRequest(BaseModel):
    """Control responses of one assessment. An empty list is valid."""
    controls: List[ControlResponseIn] = Field(default_factory=list)

    def to_domain(self) -> List[ControlResponse]:
        return [c.to_domain() for c in self.controls]


# =============================================================
# TRAVEL
# =============================================================

class AdvisoryRecordIn(BaseModel):
    """Advisory record received from an advisory provider."""
    model_config = ConfigDict(populate_by_name=True)

    country_code: str = Field(..., alias="countryCode", min_length=1)
    country_name: Optional[str] = Field(None, alias="countryName")
    advisory_level: int = Field(..., alias="advisoryLevel", ge=1, le=4)
    health_risk_level: Optional[int] = Field(None, alias="healthRiskLevel", ge=0, le=5)
    security_risk_level: Optional[int] = Field(None, alias="securityRiskLevel", ge=0, le=5)
    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")

    def to_domain(self) -> AdvisoryRecord:
        return AdvisoryRecord(
            country_code=self.country_code,
            country_name=self.country_name,
            advisory_level=self.advisory_level,
            health_risk_level=self.health_risk_level,
            security_risk_level=self.security_risk_level,
            last_updated=self.last_updated or utc_now(),
        )


class TripLegIn(BaseModel):
    """One leg of a trip request."""
    model_config = ConfigDict(populate_by_name=True)

    origin: Optional[str] = None
    destination: str
    departure_date: datetime = Field(..., alias="departureDate")
    return_date: datetime = Field(..., alias="returnDate")
    purpose: str

    @field_validator("destination", "purpose")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def validate_dates(self) -> "TripLegIn":
        """Departure must be strictly before return."""
        try:
            ordered = self.departure_date < self.return_date
        except TypeError:
            raise ValueError("departure_date and return_date must both include or both omit a timezone")
        if not ordered:
            raise ValueError(
                f"departure_date ({self.departure_date.isoformat()}) must be before "
                f"return_date ({self.return_date.isoformat()})"
            )
        return self

    def to_domain(self) -> TripLeg:
        return TripLeg(
            destination=self.destination,
            departure_date=self.departure_date,
            return_date=self.return_date,
            purpose=self.purpose,
            origin=self.origin,
        )


class TripAssessmentRequest(BaseModel):
    """A multi-leg trip to assess."""
    legs: List[TripLegIn] = Field(..., min_length=1)

    def to_domain(self) -> List[TripLeg]:
        return [leg.to_domain() for leg in self.legs]


# =============================================================
# COMBINED RISK
# =============================================================

class CombinedRiskRequest(BaseModel):
    """Scores to combine, with an optional custom weight pair."""
    model_config = ConfigDict(populate_by_name=True)

    compliance_score: float = Field(..., alias="complianceScore", ge=0, le=100)
    travel_score: float = Field(..., alias="travelScore", ge=0, le=100)
    compliance_weight: Optional[float] = Field(None, alias="complianceWeight", ge=0)
    travel_weight: Optional[float] = Field(None, alias="travelWeight", ge=0)

    @model_validator(mode="after")
    def validate_weights(self) -> "CombinedRiskRequest":
        """Custom weights come as a pair and must not both be zero."""
        given = [w for w in (self.compliance_weight, self.travel_weight) if w is not None]
        if len(given) == 1:
            raise ValueError("complianceWeight and travelWeight must be provided together")
        if len(given) == 2 and sum(given) <= 0:
            raise ValueError("complianceWeight and travelWeight must not both be zero")
        return self

    def weights(self) -> Optional[CombinerWeights]:
        """Requested weights, or None to use the configured defaults."""
        if self.compliance_weight is None:
            return None
        return CombinerWeights(compliance=self.compliance_weight, travel=self.travel_weight)
