"""Business listing and buyer profile models."""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

LocationFlexibility = Literal["exact", "region", "country", "any"]
DealPreference = Union[bool, Literal["preferred", "required"]]


class BusinessRecord(BaseModel):
    """A business listing as supplied by the record store.

    Amounts are plain numbers in GBP. The scoring engines assume the record
    was validated at the boundary and never mutate it.
    """

    id: str = Field(description="Listing identifier")
    title: Optional[str] = None
    industry: str = Field(description="Primary industry label, e.g. 'Technology'")
    sub_industry: Optional[str] = None
    location: Optional[str] = Field(default=None, description="Primary location, e.g. 'London, UK'")
    locations: list[str] = Field(default_factory=list, description="Additional trading locations")

    # Financials
    asking_price: Optional[float] = Field(default=None, ge=0)
    minimum_price: Optional[float] = Field(default=None, ge=0)
    annual_revenue: Optional[float] = Field(default=None, ge=0)
    annual_profit: Optional[float] = None
    ebitda: Optional[float] = None
    gross_margin: Optional[float] = None
    debt: Optional[float] = Field(default=None, ge=0)

    # Operations
    employees: Optional[int] = Field(default=None, ge=0)
    year_established: Optional[int] = None
    management_staying: bool = False
    property_included: bool = False
    relocatable: bool = False
    franchise_opportunity: bool = False
    training_provided: bool = False
    growth_opportunities: Optional[str] = Field(
        default=None,
        description="Free text; only its presence is scored",
    )
    nda_required: bool = False


class BuyerProfile(BaseModel):
    """A buyer's stored acquisition profile."""

    id: str = Field(description="Buyer (user) identifier")
    industries: list[str] = Field(default_factory=list)
    min_budget: Optional[float] = Field(default=None, ge=0)
    max_budget: Optional[float] = Field(default=None, ge=0)
    preferred_locations: list[str] = Field(default_factory=list)
    location_flexibility: Optional[LocationFlexibility] = None
    min_revenue: Optional[float] = Field(default=None, ge=0)
    max_revenue: Optional[float] = Field(default=None, ge=0)
    min_ebitda: Optional[float] = None
    max_ebitda: Optional[float] = None
    verified: bool = False
    financing_approved: bool = False
    synergies: Optional[str] = Field(
        default=None,
        description="Free text; only its presence is scored",
    )


class BuyerPreferences(BaseModel):
    """Per-call preference overrides.

    Any value that is set takes precedence over the matching BuyerProfile
    field for one calculation only.
    """

    industries: list[str] = Field(default_factory=list)
    min_budget: Optional[float] = Field(default=None, ge=0)
    max_budget: Optional[float] = Field(default=None, ge=0)
    budget_flexibility: Optional[float] = Field(
        default=None, ge=0, description="Percentage either side of the budget range"
    )
    preferred_locations: list[str] = Field(default_factory=list)
    location_flexibility: Optional[LocationFlexibility] = None
    min_revenue: Optional[float] = Field(default=None, ge=0)
    max_revenue: Optional[float] = Field(default=None, ge=0)
    min_ebitda: Optional[float] = None
    max_ebitda: Optional[float] = None
    min_profit_margin: Optional[float] = None
    min_employees: Optional[int] = Field(default=None, ge=0)
    max_employees: Optional[int] = Field(default=None, ge=0)
    min_years_in_business: Optional[int] = Field(default=None, ge=0)
    management_stay_required: Optional[bool] = None
    property_included: Optional[DealPreference] = None
    relocatable: Optional[DealPreference] = None
    min_growth_rate: Optional[float] = None


class BusinessSummary(BaseModel):
    """Listing fields echoed back alongside a recommendation."""

    id: str
    title: Optional[str] = None
    industry: str
    location: Optional[str] = None
    asking_price: Optional[float] = None
    annual_revenue: Optional[float] = None
    employees: Optional[int] = None

    @classmethod
    def from_business(cls, business: BusinessRecord) -> "BusinessSummary":
        return cls(
            id=business.id,
            title=business.title,
            industry=business.industry,
            location=business.location,
            asking_price=business.asking_price,
            annual_revenue=business.annual_revenue,
            employees=business.employees,
        )
