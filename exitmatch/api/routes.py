"""API routes for match scoring and valuations.

Records arrive in the request body; the caller owns persistence and
authorization.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from exitmatch.cache import INVALIDATION_MAP, MatchCache, cache_keys
from exitmatch.config import settings
from exitmatch.data import (
    IndustryData,
    UK_INDUSTRIES,
    get_categories,
    get_industry,
    list_sectors,
)
from exitmatch.data.sectors import SectorOption
from exitmatch.matching import MatchScorer
from exitmatch.models import (
    BusinessRecord,
    BuyerPreferences,
    BuyerProfile,
    HeuristicAnalysis,
    MatchRecommendation,
    MatchRecord,
    MatchScoreDetails,
    MatchWeights,
    ValuationResult,
    ValuationStepData,
)
from exitmatch.valuation import SyntheticComparables, ValuationEngine

logger = logging.getLogger(__name__)

router = APIRouter()


class ScoreRequest(BaseModel):
    """Request body for scoring one buyer/business pair."""
    business: BusinessRecord
    buyer: BuyerProfile
    preferences: Optional[BuyerPreferences] = None
    weights: Optional[MatchWeights] = None
    include_analysis: bool = False


class ScoreResponse(BaseModel):
    """Response for a pair score."""
    details: MatchScoreDetails
    cached: bool
    analysis: Optional[HeuristicAnalysis] = None
    match_record: MatchRecord


class RecommendationsRequest(BaseModel):
    """Request body for ranking businesses for a buyer."""
    buyer: BuyerProfile
    businesses: list[BusinessRecord]
    preferences: Optional[BuyerPreferences] = None
    min_score: int = Field(default=settings.recommendations_min_score, ge=0, le=100)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class RecommendationsResponse(BaseModel):
    """Response for ranked recommendations."""
    buyer_id: str
    cached: bool
    page: int
    limit: int
    total: int
    recommendations: list[MatchRecommendation]


class InvalidationResponse(BaseModel):
    event: str
    invalidated: int


class IndustryItem(BaseModel):
    """Industry table entry with its lookup key."""
    key: str
    industry: IndustryData


def _cache(request: Request) -> MatchCache:
    return request.app.state.cache


def _scorer(request: Request) -> MatchScorer:
    return request.app.state.scorer


@router.post("/matching/score", response_model=ScoreResponse)
async def score_match(body: ScoreRequest, request: Request):
    """Score a business for a buyer, served from cache unless analysis is requested."""
    cache = _cache(request)
    scorer = _scorer(request)
    key = cache_keys.match(body.buyer.id, body.business.id)

    details = None if body.include_analysis else cache.get(key)
    was_cached = details is not None

    if details is None:
        details = scorer.calculate_match_score(
            body.business, body.buyer, body.preferences, body.weights
        )
        cache.set(key, details, settings.match_cache_ttl)

    analysis = None
    if body.include_analysis:
        analysis = scorer.heuristic_enrichment(body.business, body.buyer)

    return ScoreResponse(
        details=details,
        cached=was_cached,
        analysis=analysis,
        match_record=scorer.to_match_record(body.buyer.id, body.business.id, details),
    )


@router.post("/matching/recommendations", response_model=RecommendationsResponse)
async def recommendations(body: RecommendationsRequest, request: Request):
    """Rank the supplied businesses for a buyer, one page at a time.

    The cache key covers everything in the body that changes the ranking
    (buyer, businesses, preferences, min_score), not only the buyer id.
    """
    cache = _cache(request)
    fingerprint = cache_keys.fingerprint(
        body.model_dump(mode="json", exclude={"page", "limit"})
    )
    key = cache_keys.recommendations(body.buyer.id, body.page, body.limit, fingerprint)

    page = cache.get(key)
    was_cached = page is not None

    if page is None:
        ranked = _scorer(request).score_and_rank(
            body.businesses,
            body.buyer,
            preferences=body.preferences,
            min_score=body.min_score,
        )
        start = (body.page - 1) * body.limit
        page = ranked[start:start + body.limit]
        cache.set(key, page, settings.recommendations_cache_ttl)

    return RecommendationsResponse(
        buyer_id=body.buyer.id,
        cached=was_cached,
        page=body.page,
        limit=body.limit,
        total=len(page),
        recommendations=page,
    )


@router.post("/matching/events/{event}", response_model=InvalidationResponse)
async def invalidate(event: str, request: Request):
    """Invalidate cached results after a domain event."""
    if event not in INVALIDATION_MAP:
        raise HTTPException(status_code=400, detail=f"Unknown event: {event}")

    removed = _cache(request).invalidate_by_event(event)
    return InvalidationResponse(event=event, invalidated=removed)


@router.get("/industries", response_model=list[IndustryItem])
async def industries(category: Optional[str] = Query(default=None)):
    """List industries, optionally restricted to one category."""
    return [
        IndustryItem(key=key, industry=ind)
        for key, ind in UK_INDUSTRIES.items()
        if not category or ind.category == category
    ]


@router.get("/industries/categories", response_model=list[str])
async def industry_categories():
    return get_categories()


@router.get("/industries/{key}", response_model=IndustryData)
async def industry(key: str):
    """Get one industry by key."""
    found = get_industry(key)
    if not found:
        raise HTTPException(status_code=404, detail=f"Industry not found: {key}")
    return found


@router.get("/valuations/sectors", response_model=list[SectorOption])
async def valuation_sectors():
    return list_sectors()


@router.post("/valuations/calculate", response_model=ValuationResult)
async def calculate_valuation(
    data: ValuationStepData,
    seed: Optional[int] = Query(default=None, description="Seed for reproducible comparables"),
):
    """Value a business from its wizard answers."""
    comparables = SyntheticComparables(seed=seed, count=settings.comparables_count)
    result = ValuationEngine(data, comparables=comparables).calculate()
    logger.info(
        f"Valuation for sector={data.sector}: {result.valuation_range.typical} "
        f"({result.primary_method})"
    )
    return result
