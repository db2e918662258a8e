"""Individual match factor calculators.

Each calculator maps a (business, buyer, preferences) triple to a score in
[0, 100]. Preferences, when given, take precedence over the buyer profile
for that one calculation. Missing data yields the factor's neutral score.

Inputs are assumed to be validated (non-negative amounts) by the models.
"""

import logging
import math
from datetime import date
from typing import Optional

from exitmatch.config import settings
from exitmatch.models import BusinessRecord, BuyerProfile, BuyerPreferences
from exitmatch.utils import clamp
from .regions import RegionTable

logger = logging.getLogger(__name__)

# Industry category -> related industry names
RELATED_INDUSTRIES: dict[str, list[str]] = {
    "Technology": ["Software", "IT Services", "E-commerce", "Digital Marketing"],
    "Manufacturing": ["Industrial", "Engineering", "Production", "Assembly"],
    "Retail": ["E-commerce", "Wholesale", "Distribution", "Consumer Goods"],
    "Healthcare": ["Medical", "Pharmaceutical", "Wellness", "Senior Care"],
}

# Growth bonus added to growth_potential, by industry substring
INDUSTRY_GROWTH_SCORES: dict[str, float] = {
    "Technology": 15,
    "Healthcare": 12,
    "E-commerce": 15,
    "Renewable Energy": 18,
    "Digital Marketing": 10,
    "Manufacturing": 5,
    "Retail": 3,
    "Hospitality": 5,
}
DEFAULT_GROWTH_SCORE = 5

_default_regions = RegionTable()


def _pref(preferences: Optional[BuyerPreferences], name: str):
    return getattr(preferences, name) if preferences is not None else None


def related_industry_score(business_industry: str, buyer_industries: list[str]) -> float:
    """70 when the business and any buyer industry share a related group, else 0."""
    industry = business_industry.lower()
    for category, related in RELATED_INDUSTRIES.items():
        names = [category.lower()] + [r.lower() for r in related]
        if not any(name in industry for name in names):
            continue
        for buyer_industry in buyer_industries:
            if any(name in buyer_industry.lower() for name in names):
                return 70
    return 0


def industry_growth_score(industry: str) -> float:
    lowered = industry.lower()
    for key, score in INDUSTRY_GROWTH_SCORES.items():
        if key.lower() in lowered:
            return score
    return DEFAULT_GROWTH_SCORE


def industry_alignment(
    business: BusinessRecord,
    buyer: BuyerProfile,
    preferences: Optional[BuyerPreferences] = None,
) -> float:
    """Score how well the business industry fits the buyer's industries."""
    buyer_industries = _pref(preferences, "industries") or buyer.industries

    if not buyer_industries:
        return 50  # No preference

    if business.industry in buyer_industries:
        return 100

    if business.sub_industry and business.sub_industry in buyer_industries:
        return 85

    return related_industry_score(business.industry, buyer_industries)


def budget_fit(
    business: BusinessRecord,
    buyer: BuyerProfile,
    preferences: Optional[BuyerPreferences] = None,
    default_flexibility: Optional[float] = None,
) -> float:
    """Score the asking price against the buyer budget.

    Inside the budget: 70-100 by closeness to the midpoint. Inside the
    flexibility band around it: 50-70. Beyond that: decaying to 0.
    """
    price = business.asking_price or business.minimum_price
    if not price:
        return 50  # No price set

    min_budget = _pref(preferences, "min_budget") or buyer.min_budget or 0
    max_budget = _pref(preferences, "max_budget") or buyer.max_budget
    if max_budget is None:
        max_budget = math.inf
    flexibility = (
        _pref(preferences, "budget_flexibility")
        or default_flexibility
        or settings.budget_flexibility_percent
    )

    if min_budget <= price <= max_budget:
        if math.isinf(max_budget):
            return 70  # No upper bound, no midpoint to measure against
        half_range = (max_budget - min_budget) / 2
        if half_range == 0:
            return 100
        deviation = abs(price - (min_budget + half_range)) / half_range
        return max(70, 100 - deviation * 30)

    flex_min = min_budget * (1 - flexibility / 100)
    flex_max = max_budget * (1 + flexibility / 100)

    if flex_min <= price <= flex_max:
        if price < min_budget:
            band = min_budget - flex_min
            ratio = (min_budget - price) / band if band else 0
        else:
            band = flex_max - max_budget
            ratio = (price - max_budget) / band if band else 0
        return 70 - ratio * 20

    if price < flex_min:
        bound, distance = flex_min, flex_min - price
    else:
        bound, distance = flex_max, price - flex_max
    if not bound:
        return 50
    ratio = min(1, distance / bound)
    return max(0, 50 - ratio * 50)


def location_match(
    business: BusinessRecord,
    buyer: BuyerProfile,
    preferences: Optional[BuyerPreferences] = None,
    regions: Optional[RegionTable] = None,
    default_flexibility: Optional[str] = None,
) -> float:
    """Score the business location against the buyer's preferred locations."""
    preferred = _pref(preferences, "preferred_locations") or buyer.preferred_locations
    flexibility = (
        _pref(preferences, "location_flexibility")
        or buyer.location_flexibility
        or default_flexibility
        or settings.default_location_flexibility
    )

    if not preferred:
        return 75  # No preference

    if business.location in preferred:
        return 100

    if any(loc in preferred for loc in business.locations):
        return 95

    if flexibility == "exact":
        return 0
    if flexibility == "region":
        table = regions or _default_regions
        return 75 if table.same_region(business.location, preferred) else 25
    if flexibility == "country":
        return 50  # All listings are UK based
    if flexibility == "any":
        return 75

    logger.warning(f"Unknown location flexibility '{flexibility}'")
    return 25


def revenue_match(
    business: BusinessRecord,
    buyer: BuyerProfile,
    preferences: Optional[BuyerPreferences] = None,
) -> float:
    """Score annual revenue against the buyer's revenue range."""
    revenue = business.annual_revenue
    if not revenue:
        return 50

    min_revenue = _pref(preferences, "min_revenue") or buyer.min_revenue
    max_revenue = _pref(preferences, "max_revenue") or buyer.max_revenue

    if not min_revenue and not max_revenue:
        return 75

    score = 100.0
    if min_revenue and revenue < min_revenue:
        score = max(0, revenue / min_revenue * 100)
    if max_revenue and revenue > max_revenue:
        score = min(score, max(0, max_revenue / revenue * 100))
    return score


def profitability_match(
    business: BusinessRecord,
    buyer: BuyerProfile,
    preferences: Optional[BuyerPreferences] = None,
) -> float:
    """Score EBITDA/profit against the buyer profile's EBITDA range.

    Only the stored profile range is used; preferences do not override it.
    """
    ebitda = business.ebitda
    profit = business.annual_profit
    revenue = business.annual_revenue

    if not ebitda and not profit:
        return 50

    score = 75.0
    min_ebitda = buyer.min_ebitda
    max_ebitda = buyer.max_ebitda

    if min_ebitda or max_ebitda:
        value = ebitda or profit or 0
        if min_ebitda and value < min_ebitda:
            score = max(0, value / min_ebitda * 100)
        if max_ebitda and value > max_ebitda:
            score = min(score, 90)  # Exceeding the range is not penalised hard

    if revenue and profit:
        margin = profit / revenue * 100
        if margin > 20:
            score += 10
        elif margin > 10:
            score += 5
        elif margin < 5:
            score -= 10

    return clamp(score)


def size_match(
    business: BusinessRecord,
    buyer: BuyerProfile,
    preferences: Optional[BuyerPreferences] = None,
) -> float:
    """Score headcount against the preferred employee range (floor 50)."""
    employees = business.employees
    if not employees:
        return 70

    min_employees = _pref(preferences, "min_employees")
    max_employees = _pref(preferences, "max_employees")

    if not min_employees and not max_employees:
        return 80

    score = 100.0
    if min_employees and employees < min_employees:
        score = max(50, employees / min_employees * 100)
    if max_employees and employees > max_employees:
        score = min(score, max(50, max_employees / employees * 100))
    return score


def growth_potential(
    business: BusinessRecord,
    buyer: BuyerProfile,
    preferences: Optional[BuyerPreferences] = None,
    current_year: Optional[int] = None,
) -> float:
    """Score growth indicators, business age and industry growth."""
    score = 50.0

    if business.franchise_opportunity:
        score += 15
    if business.relocatable:
        score += 10
    if business.growth_opportunities:
        score += 15

    if business.year_established:
        age = (current_year or date.today().year) - business.year_established
        if age < 5:
            score += 10
        elif age < 10:
            score += 5
        elif age > 30:
            score -= 5

    score += industry_growth_score(business.industry)
    return clamp(score)


def strategic_fit(
    business: BusinessRecord,
    buyer: BuyerProfile,
    preferences: Optional[BuyerPreferences] = None,
) -> float:
    """Score deal-structure preferences: management, property, relocation."""
    score = 50.0

    management_required = _pref(preferences, "management_stay_required")
    if management_required is not None:
        score += 20 if management_required == business.management_staying else -10

    property_pref = _pref(preferences, "property_included")
    if property_pref:
        if property_pref == "required" and not business.property_included:
            score -= 30
        elif property_pref == "preferred" and business.property_included:
            score += 15
        elif business.property_included:
            score += 10

    relocatable_pref = _pref(preferences, "relocatable")
    if relocatable_pref:
        if relocatable_pref == "required" and not business.relocatable:
            score -= 25
        elif relocatable_pref == "preferred" and business.relocatable:
            score += 15
        elif business.relocatable:
            score += 5

    if business.training_provided:
        score += 10
    if buyer.synergies:
        score += 10

    return clamp(score)
