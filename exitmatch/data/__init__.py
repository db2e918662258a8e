"""Static reference data: industry multiples and valuation sectors."""

from .industries import (
    IndustryData,
    MultipleFactors,
    UK_INDUSTRIES,
    get_industry,
    get_categories,
    get_industries_by_category,
    calculate_adjusted_multiple,
)
from .sectors import SECTOR_DATA, SectorData, list_sectors, get_sector_multiples

__all__ = [
    "IndustryData",
    "MultipleFactors",
    "UK_INDUSTRIES",
    "get_industry",
    "get_categories",
    "get_industries_by_category",
    "calculate_adjusted_multiple",
    "SECTOR_DATA",
    "SectorData",
    "list_sectors",
    "get_sector_multiples",
]
