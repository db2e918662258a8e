"""Valuation wizard input and result models."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

ProfitType = Literal["ebitda", "net_profit", "gross_profit"]
OwnerInvolvement = Literal["full_time", "part_time", "passive"]
ValuationMethod = Literal["revenue", "ebitda", "asset"]


class ValuationStepData(BaseModel):
    """Answers collected by the ten-step valuation wizard.

    Every field is optional until calculation time. The range constraints
    mirror the wizard's validation and are enforced when the model is built
    from untrusted input.
    """

    # Step 1: sector
    sector: Optional[str] = None
    sic_code: Optional[str] = None
    sub_sector: Optional[str] = None

    # Step 2: revenue
    annual_revenue: Optional[float] = Field(default=None, ge=0, le=1_000_000_000)
    revenue_growth_trend: Optional[Literal["declining", "stable", "growing", "rapid_growth"]] = None

    # Step 3: profitability
    profit_type: Optional[ProfitType] = None
    profit_value: Optional[float] = Field(default=None, ge=0)
    profit_margin: Optional[float] = Field(default=None, ge=0, le=100)

    # Step 4: age
    year_established: Optional[int] = Field(default=None, ge=1800)
    years_in_operation: Optional[float] = Field(default=None, ge=0)

    # Step 5: team
    employee_count: Optional[int] = Field(default=None, ge=0)
    employee_range: Optional[str] = None

    # Step 6: customers
    top_customer_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    customer_count: Optional[int] = Field(default=None, ge=1)
    customer_retention: Optional[float] = Field(default=None, ge=0, le=100)

    # Step 7: growth
    current_year_revenue: Optional[float] = Field(default=None, ge=0)
    last_year_revenue: Optional[float] = Field(default=None, ge=0)
    growth_rate: Optional[float] = Field(default=None, ge=-100, le=1000)
    growth_trend: Optional[Literal["declining", "stable", "moderate", "high"]] = None

    # Step 8: recurring revenue
    recurring_revenue_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    contract_length: Optional[Literal["monthly", "quarterly", "annual", "multi_year"]] = None
    churn_rate: Optional[float] = Field(default=None, ge=0, le=100)

    # Step 9: assets
    key_assets: Optional[list[str]] = None
    intellectual_property: Optional[bool] = None
    real_estate: Optional[bool] = None
    equipment: Optional[bool] = None
    inventory: Optional[bool] = None
    brand: Optional[bool] = None
    patents: Optional[bool] = None

    # Step 10: exit
    exit_reason: Optional[str] = None
    exit_timeline: Optional[str] = None
    owner_involvement: Optional[OwnerInvolvement] = None
    post_sale_involvement: Optional[Literal["none", "consulting", "employment"]] = None


class ValuationRange(BaseModel):
    minimum: int
    typical: int
    maximum: int
    confidence: float = Field(ge=0, le=100)


class MultipleMethod(BaseModel):
    value: float
    multiple: float
    weight: float


class AssetMethod(BaseModel):
    value: float
    weight: float


class MethodBreakdown(BaseModel):
    revenue_multiple: MultipleMethod
    ebitda_multiple: MultipleMethod
    asset_based: AssetMethod


class ValuationFactor(BaseModel):
    """A strength or weakness that moves the valuation."""

    factor: str
    impact: Literal["positive", "negative"]
    weight: Literal["low", "medium", "high"]
    description: str
    improvement_tip: Optional[str] = None


class ComparableBusiness(BaseModel):
    sector: str
    revenue: int
    sold_price: int
    multiple: float
    date: str = Field(description="ISO date of the transaction")


class MarketCondition(BaseModel):
    trend: Literal["buyers_market", "neutral", "sellers_market"]
    demand_level: Literal["low", "moderate", "high", "very_high"]
    average_time_to_sale: int = Field(description="Months")
    premium_factors: list[str] = Field(default_factory=list)


class ValuationResult(BaseModel):
    """Outcome of one valuation run. ``valid_until`` is advisory only."""

    valuation_range: ValuationRange
    method_breakdown: MethodBreakdown
    primary_method: ValuationMethod
    industry_multiple: float
    adjusted_multiple: float
    strength_factors: list[ValuationFactor] = Field(default_factory=list)
    weakness_factors: list[ValuationFactor] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    comparable_businesses: list[ComparableBusiness] = Field(default_factory=list)
    market_conditions: MarketCondition
    calculated_at: datetime
    valid_until: datetime
