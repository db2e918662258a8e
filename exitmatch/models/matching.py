"""Match scoring models."""

from datetime import datetime
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field

from .business import BusinessSummary


class MatchWeights(BaseModel):
    """Weights for the factors that make up the total match score (0-100 each).

    The defaults do not need to sum to 100; the scorer divides by the sum of
    the merged weights.
    """

    industry_alignment: float = Field(default=30, ge=0, le=100)
    budget_fit: float = Field(default=25, ge=0, le=100)
    location_preference: float = Field(default=15, ge=0, le=100)
    revenue_match: float = Field(default=15, ge=0, le=100)
    company_size: float = Field(default=10, ge=0, le=100)
    growth_potential: float = Field(default=5, ge=0, le=100)

    @classmethod
    def merged(
        cls,
        overrides: Union["MatchWeights", Mapping[str, Any], None] = None,
    ) -> "MatchWeights":
        """Merge a partial weight mapping over the defaults, field by field."""
        if overrides is None:
            return cls()
        if isinstance(overrides, MatchWeights):
            overrides = overrides.model_dump(exclude_unset=True)
        values = {k: v for k, v in overrides.items() if v is not None}
        return cls(**{**cls().model_dump(), **values})

    def total(self) -> float:
        return sum(self.model_dump().values())


class MatchFactors(BaseModel):
    """Individual factor scores, each clamped to 0-100."""

    industry_alignment: float = Field(ge=0, le=100)
    budget_fit: float = Field(ge=0, le=100)
    location_match: float = Field(ge=0, le=100)
    revenue_match: float = Field(ge=0, le=100)
    profitability_match: float = Field(ge=0, le=100)
    size_match: float = Field(ge=0, le=100)
    growth_potential: float = Field(ge=0, le=100)
    strategic_fit: float = Field(ge=0, le=100)


class MatchScoreDetails(BaseModel):
    """Full result of scoring one buyer against one business."""

    total_score: int = Field(ge=0, le=100)
    confidence: int = Field(ge=0, le=100, description="Data completeness, not match quality")
    factors: MatchFactors
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    reasoning: str = ""


class HeuristicAnalysis(BaseModel):
    """Rule-based deal enrichment.

    Every value is derived from fixed rules over the two records; no model
    or external service is consulted.
    """

    synergy_score: int = Field(ge=0, le=100)
    market_trends: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    cultural_fit: int = Field(ge=0, le=100)
    integration_complexity: Literal["low", "medium", "high"]
    estimated_time_to_close: str = Field(description="e.g. '3-6 months'")


class MatchRecord(BaseModel):
    """Flat record a caller persists after scoring a pair."""

    buyer_id: str
    business_id: str
    match_score: int
    confidence: int
    factors: MatchFactors
    recommended: bool
    budget_match: bool
    industry_match: bool
    location_match: bool
    size_match: bool
    created_at: datetime
    expires_at: datetime


class MatchRecommendation(BaseModel):
    """A scored business recommended to a buyer."""

    business_id: str
    buyer_id: str
    score: MatchScoreDetails
    business: BusinessSummary
    created_at: datetime
    match_id: Optional[str] = None
