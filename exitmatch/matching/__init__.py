"""Buyer/business match scoring."""

from .regions import RegionTable, DEFAULT_REGIONS, load_region_table
from .scorer import MatchScorer, calculate_match_score, heuristic_enrichment

__all__ = [
    "RegionTable",
    "DEFAULT_REGIONS",
    "load_region_table",
    "MatchScorer",
    "calculate_match_score",
    "heuristic_enrichment",
]
