"""Data models for the ExitMatch scoring core."""

from .business import (
    BusinessRecord,
    BuyerProfile,
    BuyerPreferences,
    BusinessSummary,
)
from .matching import (
    MatchWeights,
    MatchFactors,
    MatchScoreDetails,
    HeuristicAnalysis,
    MatchRecord,
    MatchRecommendation,
)
from .valuation import (
    ValuationStepData,
    ValuationResult,
    ValuationRange,
    MethodBreakdown,
    MultipleMethod,
    AssetMethod,
    ValuationFactor,
    ComparableBusiness,
    MarketCondition,
)

__all__ = [
    "BusinessRecord",
    "BuyerProfile",
    "BuyerPreferences",
    "BusinessSummary",
    "MatchWeights",
    "MatchFactors",
    "MatchScoreDetails",
    "HeuristicAnalysis",
    "MatchRecord",
    "MatchRecommendation",
    "ValuationStepData",
    "ValuationResult",
    "ValuationRange",
    "MethodBreakdown",
    "MultipleMethod",
    "AssetMethod",
    "ValuationFactor",
    "ComparableBusiness",
    "MarketCondition",
]
