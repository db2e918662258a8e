"""Business valuation engine."""

from .comparables import ComparablesSource, SyntheticComparables
from .engine import ValuationEngine, calculate_valuation

__all__ = [
    "ComparablesSource",
    "SyntheticComparables",
    "ValuationEngine",
    "calculate_valuation",
]
