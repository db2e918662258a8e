"""Valuation wizard sectors (UK SIC codes) and their base multiples."""

import logging
from typing import Optional

from pydantic import BaseModel

from .industries import get_industry

logger = logging.getLogger(__name__)


class BaseMultiple(BaseModel):
    revenue: float
    ebitda: float


class SectorBenchmarks(BaseModel):
    avg_profit_margin: float
    avg_growth_rate: float
    avg_customer_retention: float


class SectorData(BaseModel):
    """Valuation data for a wizard sector."""

    code: str
    name: str
    category: str
    base_multiple: BaseMultiple
    adjustment_factors: dict[str, dict[str, float]]
    benchmarks: SectorBenchmarks


class SectorOption(BaseModel):
    value: str
    label: str
    sic_code: str
    data: SectorData


def _sector(
    code: str,
    name: str,
    category: str,
    revenue: float,
    ebitda: float,
    size: tuple[float, float, float],
    growth: tuple[float, float, float],
    profitability: tuple[float, float, float],
    benchmarks: tuple[float, float, float],
) -> SectorData:
    return SectorData(
        code=code,
        name=name,
        category=category,
        base_multiple=BaseMultiple(revenue=revenue, ebitda=ebitda),
        adjustment_factors={
            "size": dict(zip(("small", "medium", "large"), size)),
            "growth": dict(zip(("low", "moderate", "high"), growth)),
            "profitability": dict(zip(("low", "average", "high"), profitability)),
        },
        benchmarks=SectorBenchmarks(
            avg_profit_margin=benchmarks[0],
            avg_growth_rate=benchmarks[1],
            avg_customer_retention=benchmarks[2],
        ),
    )


SECTOR_DATA: dict[str, SectorData] = {
    "technology": _sector(
        "62", "Computer Programming & Consultancy", "Technology", 2.5, 12,
        (0.8, 1.0, 1.3), (0.7, 1.0, 1.5), (0.8, 1.0, 1.3), (15, 20, 85),
    ),
    "saas": _sector(
        "62.01", "Software as a Service", "Technology", 4.0, 15,
        (0.9, 1.0, 1.4), (0.6, 1.0, 1.8), (0.7, 1.0, 1.4), (20, 30, 90),
    ),
    "ecommerce": _sector(
        "47.91", "Retail via Internet", "Retail", 1.2, 8,
        (0.7, 1.0, 1.2), (0.8, 1.0, 1.4), (0.8, 1.0, 1.2), (8, 15, 70),
    ),
    "manufacturing": _sector(
        "10-33", "Manufacturing", "Industrial", 0.8, 6,
        (0.7, 1.0, 1.2), (0.9, 1.0, 1.2), (0.8, 1.0, 1.2), (10, 5, 80),
    ),
    "professional_services": _sector(
        "69-75", "Professional Services", "Services", 1.0, 7,
        (0.8, 1.0, 1.2), (0.9, 1.0, 1.3), (0.8, 1.0, 1.3), (12, 10, 85),
    ),
    "healthcare": _sector(
        "86", "Healthcare", "Healthcare", 1.5, 9,
        (0.8, 1.0, 1.3), (0.9, 1.0, 1.3), (0.9, 1.0, 1.2), (14, 8, 90),
    ),
    "hospitality": _sector(
        "55-56", "Hospitality & Food Service", "Hospitality", 0.5, 4,
        (0.7, 1.0, 1.2), (0.8, 1.0, 1.3), (0.7, 1.0, 1.3), (6, 5, 60),
    ),
    "construction": _sector(
        "41-43", "Construction", "Construction", 0.6, 5,
        (0.7, 1.0, 1.2), (0.9, 1.0, 1.2), (0.8, 1.0, 1.2), (8, 6, 75),
    ),
}

# (value, label, SIC code) for the sector dropdown
UK_SECTORS: list[tuple[str, str, str]] = [
    ("technology", "Technology & Software", "62"),
    ("saas", "Software as a Service (SaaS)", "62.01"),
    ("ecommerce", "E-commerce & Online Retail", "47.91"),
    ("manufacturing", "Manufacturing", "10-33"),
    ("professional_services", "Professional Services", "69-75"),
    ("healthcare", "Healthcare & Medical", "86"),
    ("hospitality", "Hospitality & Food Service", "55-56"),
    ("construction", "Construction", "41-43"),
    ("retail", "Retail (Physical)", "47"),
    ("wholesale", "Wholesale Trade", "46"),
    ("transportation", "Transportation & Logistics", "49-53"),
    ("real_estate", "Real Estate", "68"),
    ("finance", "Financial Services", "64-66"),
    ("education", "Education & Training", "85"),
    ("entertainment", "Entertainment & Recreation", "90-93"),
    ("agriculture", "Agriculture & Farming", "01-03"),
    ("energy", "Energy & Utilities", "35"),
    ("telecommunications", "Telecommunications", "61"),
    ("consulting", "Management Consulting", "70"),
    ("marketing", "Marketing & Advertising", "73"),
]
_SECTOR_OPTIONS = {value: (label, sic_code) for value, label, sic_code in UK_SECTORS}


def _fallback_sector(label: str, sic_code: str) -> SectorData:
    return _sector(
        sic_code, label, "General", 1.0, 7.0,
        (0.8, 1.0, 1.2), (0.8, 1.0, 1.3), (0.8, 1.0, 1.2), (10, 10, 75),
    )


def list_sectors() -> list[SectorOption]:
    """Sectors offered by the valuation wizard, with data or a generic fallback."""
    return [
        SectorOption(
            value=value,
            label=label,
            sic_code=sic_code,
            data=SECTOR_DATA.get(value) or _fallback_sector(label, sic_code),
        )
        for value, label, sic_code in UK_SECTORS
    ]


def get_sector_multiples(sector: Optional[str]) -> Optional[BaseMultiple]:
    """Resolve base revenue/EBITDA multiples for a sector key.

    Wizard sector keys resolve exactly as ``list_sectors()`` advertises
    them: sector data first, then the generic fallback for dropdown entries
    without data. Other keys (e.g. ``saas_b2b``) use the industry table's
    typical multiples. Returns None for unknown sectors so callers apply
    their defaults.
    """
    if not sector:
        return None

    data = SECTOR_DATA.get(sector)
    if data:
        return data.base_multiple

    option = _SECTOR_OPTIONS.get(sector)
    if option:
        label, sic_code = option
        return _fallback_sector(label, sic_code).base_multiple

    industry = get_industry(sector)
    if industry:
        return BaseMultiple(
            revenue=industry.revenue_multiple.typical,
            ebitda=industry.ebitda_multiple.typical,
        )

    logger.warning(f"Unknown valuation sector '{sector}', using default multiples")
    return None
