"""UK industry sectors with market EBITDA and revenue multiples.

Figures reflect 2024 UK M&A market reports (BDO PCPI, Deloitte, PwC deal
insights) and are used as baseline multiples by the valuation engine.
"""

from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field

from exitmatch.utils import round_half_up


class MultipleRange(BaseModel):
    min: float
    typical: float
    max: float


class IndustryData(BaseModel):
    """Reference data for one industry sector."""

    code: str
    name: str
    category: str
    ebitda_multiple: MultipleRange
    revenue_multiple: MultipleRange
    trend: Literal["growing", "stable", "declining"]
    demand_level: Literal["high", "medium", "low"]
    typical_gross_margin: float = Field(description="Percentage")
    notes: Optional[str] = None


class MultipleFactors(BaseModel):
    """Business factors that adjust a base multiple. All percentages."""

    revenue_growth: Optional[float] = None
    recurring_revenue: Optional[float] = None
    customer_concentration: Optional[float] = Field(
        default=None, description="Share of revenue from the top customer"
    )
    years_in_business: Optional[float] = None
    ebitda_margin: Optional[float] = None


def _industry(
    code: str,
    name: str,
    category: str,
    ebitda: tuple[float, float, float],
    revenue: tuple[float, float, float],
    trend: str,
    demand: str,
    gross_margin: float,
    notes: Optional[str] = None,
) -> IndustryData:
    return IndustryData(
        code=code,
        name=name,
        category=category,
        ebitda_multiple=MultipleRange(min=ebitda[0], typical=ebitda[1], max=ebitda[2]),
        revenue_multiple=MultipleRange(min=revenue[0], typical=revenue[1], max=revenue[2]),
        trend=trend,
        demand_level=demand,
        typical_gross_margin=gross_margin,
        notes=notes,
    )


UK_INDUSTRIES: dict[str, IndustryData] = {
    # Technology & software
    "saas_b2b": _industry(
        "SAAS_B2B", "SaaS - Business Software", "Technology",
        (8, 15, 25), (2, 4, 8), "growing", "high", 75,
        "High multiples for recurring revenue models",
    ),
    "software_development": _industry(
        "SOFTWARE_DEV", "Software Development & IT Services", "Technology",
        (6, 10, 16), (1, 2, 4), "growing", "high", 65,
    ),
    "fintech": _industry(
        "FINTECH", "Financial Technology", "Technology",
        (10, 18, 30), (3, 6, 10), "growing", "high", 70,
    ),
    "cyber_security": _industry(
        "CYBERSEC", "Cyber Security", "Technology",
        (12, 20, 35), (3, 5, 9), "growing", "high", 80,
    ),
    "ecommerce_tech": _industry(
        "ECOM_TECH", "E-commerce Technology", "Technology",
        (7, 12, 20), (1.5, 3, 5), "stable", "medium", 60,
    ),
    # Healthcare & medical
    "private_healthcare": _industry(
        "PRIVATE_HEALTH", "Private Healthcare Providers", "Healthcare",
        (8, 12, 18), (1.5, 2.5, 4), "growing", "high", 45,
    ),
    "dental_practice": _industry(
        "DENTAL", "Dental Practices", "Healthcare",
        (6, 9, 14), (1.2, 2, 3), "stable", "high", 40,
        "NHS vs private mix affects valuation",
    ),
    "veterinary": _industry(
        "VET", "Veterinary Practices", "Healthcare",
        (10, 14, 20), (2, 3, 4.5), "growing", "high", 50,
        "Corporate consolidation driving high multiples",
    ),
    "care_homes": _industry(
        "CARE_HOMES", "Care Homes & Assisted Living", "Healthcare",
        (5, 8, 12), (0.8, 1.5, 2.5), "growing", "medium", 35,
    ),
    "pharma_biotech": _industry(
        "PHARMA_BIO", "Pharmaceuticals & Biotech", "Healthcare",
        (12, 18, 30), (3, 5, 10), "growing", "high", 65,
    ),
    # Professional services
    "accounting": _industry(
        "ACCOUNTING", "Accounting & Bookkeeping", "Professional Services",
        (4, 6, 10), (0.8, 1.2, 2), "stable", "medium", 55,
    ),
    "legal_services": _industry(
        "LEGAL", "Legal Services", "Professional Services",
        (5, 8, 12), (1, 1.5, 2.5), "stable", "medium", 60,
    ),
    "recruitment": _industry(
        "RECRUITMENT", "Recruitment & Staffing", "Professional Services",
        (4, 7, 11), (0.5, 0.8, 1.5), "stable", "medium", 30,
    ),
    "consulting": _industry(
        "CONSULTING", "Management Consulting", "Professional Services",
        (6, 10, 15), (1, 2, 3), "growing", "medium", 50,
    ),
    "marketing_agency": _industry(
        "MARKETING", "Marketing & Advertising Agencies", "Professional Services",
        (5, 8, 12), (0.8, 1.5, 2.5), "stable", "medium", 45,
    ),
    # Manufacturing
    "food_manufacturing": _industry(
        "FOOD_MFG", "Food & Beverage Manufacturing", "Manufacturing",
        (5, 8, 12), (0.6, 1, 1.8), "stable", "medium", 30,
    ),
    "engineering": _industry(
        "ENGINEERING", "Engineering & Precision Manufacturing", "Manufacturing",
        (5, 7, 10), (0.7, 1.2, 2), "stable", "medium", 35,
    ),
    "chemicals": _industry(
        "CHEMICALS", "Chemicals & Materials", "Manufacturing",
        (6, 9, 14), (1, 1.5, 2.5), "stable", "medium", 40,
    ),
    "packaging": _industry(
        "PACKAGING", "Packaging & Containers", "Manufacturing",
        (5, 7, 10), (0.6, 1, 1.5), "stable", "medium", 28,
    ),
    "textiles": _industry(
        "TEXTILES", "Textiles & Apparel Manufacturing", "Manufacturing",
        (4, 6, 9), (0.4, 0.7, 1.2), "declining", "low", 25,
    ),
    # Retail & consumer
    "ecommerce_retail": _industry(
        "ECOM_RETAIL", "E-commerce & Online Retail", "Retail",
        (6, 10, 16), (0.8, 1.5, 3), "growing", "high", 40,
    ),
    "specialty_retail": _industry(
        "SPECIALTY_RETAIL", "Specialty Retail Stores", "Retail",
        (4, 6, 9), (0.4, 0.8, 1.2), "declining", "low", 35,
    ),
    "wholesale_distribution": _industry(
        "WHOLESALE", "Wholesale & Distribution", "Retail",
        (4, 6, 8), (0.3, 0.5, 0.8), "stable", "medium", 20,
    ),
    "hospitality": _industry(
        "HOSPITALITY", "Hotels & Hospitality", "Retail",
        (6, 9, 14), (1, 2, 3), "stable", "medium", 55,
    ),
    "restaurants": _industry(
        "RESTAURANTS", "Restaurants & Food Service", "Retail",
        (4, 6, 9), (0.4, 0.7, 1.2), "stable", "medium", 60,
    ),
    # Construction & real estate
    "construction": _industry(
        "CONSTRUCTION", "Construction & Building", "Construction",
        (3, 5, 8), (0.3, 0.6, 1), "stable", "medium", 20,
    ),
    "property_management": _industry(
        "PROPERTY_MGMT", "Property Management", "Real Estate",
        (6, 9, 12), (1.5, 2.5, 3.5), "stable", "medium", 45,
    ),
    "facilities_management": _industry(
        "FACILITIES", "Facilities Management", "Real Estate",
        (5, 7, 10), (0.5, 0.8, 1.3), "stable", "medium", 25,
    ),
    # Education & training
    "education_training": _industry(
        "EDUCATION", "Education & Training Providers", "Education",
        (5, 8, 12), (1, 1.5, 2.5), "growing", "medium", 50,
    ),
    "nurseries": _industry(
        "NURSERIES", "Nurseries & Childcare", "Education",
        (6, 9, 13), (1.2, 2, 3), "growing", "high", 40,
        "Government funding support drives valuations",
    ),
    # Logistics & transport
    "logistics": _industry(
        "LOGISTICS", "Logistics & Freight", "Transport",
        (4, 6, 9), (0.4, 0.7, 1.2), "growing", "high", 25,
    ),
    "courier_delivery": _industry(
        "COURIER", "Courier & Last-Mile Delivery", "Transport",
        (5, 8, 12), (0.5, 1, 1.8), "growing", "high", 30,
    ),
    # Energy & utilities
    "renewable_energy": _industry(
        "RENEWABLE", "Renewable Energy", "Energy",
        (8, 12, 18), (2, 3.5, 5), "growing", "high", 45,
        "ESG focus driving premium valuations",
    ),
    "energy_services": _industry(
        "ENERGY_SERVICES", "Energy Services & Utilities", "Energy",
        (6, 9, 13), (1, 1.8, 2.8), "stable", "medium", 35,
    ),
    "waste_management": _industry(
        "WASTE", "Waste Management & Recycling", "Energy",
        (6, 9, 12), (1, 1.5, 2.2), "growing", "medium", 35,
    ),
    # Financial services
    "insurance_broking": _industry(
        "INSURANCE", "Insurance Broking", "Financial Services",
        (7, 11, 16), (1.5, 2.5, 4), "stable", "high", 50,
        "Recurring commissions drive value",
    ),
    "wealth_management": _industry(
        "WEALTH_MGMT", "Wealth Management & IFAs", "Financial Services",
        (8, 12, 18), (2, 3, 5), "growing", "high", 55,
        "AUM-based valuations common",
    ),
    "mortgage_broking": _industry(
        "MORTGAGE", "Mortgage Broking", "Financial Services",
        (5, 8, 12), (1, 1.5, 2.5), "stable", "medium", 45,
    ),
    # Agriculture & food
    "agriculture": _industry(
        "AGRICULTURE", "Agriculture & Farming", "Agriculture",
        (4, 6, 9), (0.5, 1, 1.5), "stable", "low", 25,
    ),
    "food_wholesale": _industry(
        "FOOD_WHOLESALE", "Food Wholesale & Distribution", "Agriculture",
        (4, 6, 8), (0.3, 0.5, 0.8), "stable", "medium", 18,
    ),
    # Media & entertainment
    "digital_media": _industry(
        "DIGITAL_MEDIA", "Digital Media & Content", "Media",
        (6, 10, 16), (1.5, 2.5, 4), "growing", "high", 60,
    ),
    "gaming": _industry(
        "GAMING", "Gaming & Entertainment", "Media",
        (8, 14, 22), (2, 4, 7), "growing", "high", 70,
    ),
    "publishing": _industry(
        "PUBLISHING", "Publishing & Print Media", "Media",
        (3, 5, 8), (0.4, 0.7, 1.2), "declining", "low", 40,
    ),
    # Other services
    "security_services": _industry(
        "SECURITY", "Security Services", "Services",
        (5, 7, 10), (0.6, 1, 1.5), "stable", "medium", 30,
    ),
    "cleaning_services": _industry(
        "CLEANING", "Cleaning & Janitorial Services", "Services",
        (3, 5, 7), (0.3, 0.5, 0.8), "stable", "medium", 25,
    ),
    "fitness_wellness": _industry(
        "FITNESS", "Fitness & Wellness", "Services",
        (5, 8, 12), (0.8, 1.3, 2), "growing", "medium", 45,
    ),
}


def get_industry(key: str) -> Optional[IndustryData]:
    """Look up an industry by key; unknown keys return None."""
    return UK_INDUSTRIES.get(key)


def get_industries_by_category(category: str) -> list[IndustryData]:
    """Get all industries for a category, in table order."""
    return [ind for ind in UK_INDUSTRIES.values() if ind.category == category]


def get_categories() -> list[str]:
    """Get unique categories in order of first occurrence."""
    return list(dict.fromkeys(ind.category for ind in UK_INDUSTRIES.values()))


def calculate_adjusted_multiple(
    base_multiple: float,
    factors: Union[MultipleFactors, Mapping[str, Any], None] = None,
) -> float:
    """Adjust a base EBITDA multiple for growth, recurrence, risk and quality.

    Each factor applies at most one multiplier (the first threshold that
    matches, highest first). Missing or zero factors leave the multiple
    unchanged. The result is rounded to one decimal place.
    """
    if factors is None:
        factors = MultipleFactors()
    elif not isinstance(factors, MultipleFactors):
        factors = MultipleFactors(**factors)

    adjusted = base_multiple

    growth = factors.revenue_growth
    if growth:
        if growth > 30:
            adjusted *= 1.3
        elif growth > 20:
            adjusted *= 1.2
        elif growth > 10:
            adjusted *= 1.1
        elif growth < 0:
            adjusted *= 0.8

    recurring = factors.recurring_revenue
    if recurring:
        if recurring > 80:
            adjusted *= 1.25
        elif recurring > 60:
            adjusted *= 1.15
        elif recurring > 40:
            adjusted *= 1.08
        elif recurring < 20:
            adjusted *= 0.9

    concentration = factors.customer_concentration
    if concentration:
        if concentration > 50:
            adjusted *= 0.75
        elif concentration > 30:
            adjusted *= 0.85
        elif concentration > 20:
            adjusted *= 0.95

    years = factors.years_in_business
    if years:
        if years > 20:
            adjusted *= 1.1
        elif years > 10:
            adjusted *= 1.05
        elif years < 3:
            adjusted *= 0.85

    margin = factors.ebitda_margin
    if margin:
        if margin > 25:
            adjusted *= 1.15
        elif margin > 15:
            adjusted *= 1.05
        elif margin < 5:
            adjusted *= 0.8

    return round_half_up(adjusted, 1)
