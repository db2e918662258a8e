"""Match score aggregator: combines factor scores into a ranked match."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Union

from exitmatch.config import Settings, settings as default_settings
from exitmatch.models import (
    BusinessRecord,
    BuyerProfile,
    BuyerPreferences,
    BusinessSummary,
    HeuristicAnalysis,
    MatchFactors,
    MatchRecommendation,
    MatchRecord,
    MatchScoreDetails,
    MatchWeights,
)
from exitmatch.utils import round_int
from . import factors as f
from .enrichment import heuristic_enrichment as _heuristic_enrichment
from .regions import RegionTable, load_region_table

logger = logging.getLogger(__name__)

WeightsInput = Union[MatchWeights, Mapping[str, Any], None]


class MatchScorer:
    """Score buyer/business pairs and rank businesses for a buyer."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        regions: Optional[RegionTable] = None,
        current_year: Optional[int] = None,
    ):
        self.settings = settings or default_settings
        self.regions = regions or load_region_table(self.settings.region_table_path)
        self.current_year = current_year

    def calculate_match_score(
        self,
        business: BusinessRecord,
        buyer: BuyerProfile,
        preferences: Optional[BuyerPreferences] = None,
        weights: WeightsInput = None,
    ) -> MatchScoreDetails:
        """Score one business against one buyer profile."""
        merged = MatchWeights.merged(weights)
        factors = self.calculate_factors(business, buyer, preferences)
        total = self._weighted_score(factors, merged)
        strengths, weaknesses, recommendations = self._generate_insights(factors, business)

        details = MatchScoreDetails(
            total_score=round_int(total),
            confidence=round_int(self._calculate_confidence(business, buyer, preferences)),
            factors=factors,
            strengths=strengths,
            weaknesses=weaknesses,
            recommendations=recommendations,
            reasoning=self._generate_reasoning(factors, total, business, buyer),
        )
        logger.debug(
            f"Scored business {business.id} for buyer {buyer.id}: "
            f"{details.total_score} (confidence {details.confidence})"
        )
        return details

    def calculate_factors(
        self,
        business: BusinessRecord,
        buyer: BuyerProfile,
        preferences: Optional[BuyerPreferences] = None,
    ) -> MatchFactors:
        """Run all eight factor calculators."""
        return MatchFactors(
            industry_alignment=f.industry_alignment(business, buyer, preferences),
            budget_fit=f.budget_fit(
                business, buyer, preferences,
                default_flexibility=self.settings.budget_flexibility_percent,
            ),
            location_match=f.location_match(
                business, buyer, preferences,
                regions=self.regions,
                default_flexibility=self.settings.default_location_flexibility,
            ),
            revenue_match=f.revenue_match(business, buyer, preferences),
            profitability_match=f.profitability_match(business, buyer, preferences),
            size_match=f.size_match(business, buyer, preferences),
            growth_potential=f.growth_potential(
                business, buyer, preferences, current_year=self.current_year
            ),
            strategic_fit=f.strategic_fit(business, buyer, preferences),
        )

    def heuristic_enrichment(self, business: BusinessRecord, buyer: BuyerProfile) -> HeuristicAnalysis:
        return _heuristic_enrichment(business, buyer)

    def score_and_rank(
        self,
        businesses: list[BusinessRecord],
        buyer: BuyerProfile,
        preferences: Optional[BuyerPreferences] = None,
        weights: WeightsInput = None,
        min_score: int = 0,
        limit: Optional[int] = None,
        max_workers: Optional[int] = None,
    ) -> list[MatchRecommendation]:
        """Score many businesses for one buyer, best matches first.

        Businesses scoring below ``min_score`` are dropped. With
        ``max_workers`` the pairs are scored on a thread pool.
        """
        def score(business: BusinessRecord) -> MatchScoreDetails:
            return self.calculate_match_score(business, buyer, preferences, weights)

        if max_workers and len(businesses) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                scores = list(pool.map(score, businesses))
        else:
            scores = [score(business) for business in businesses]

        now = datetime.now(timezone.utc)
        ranked = [
            MatchRecommendation(
                business_id=business.id,
                buyer_id=buyer.id,
                score=details,
                business=BusinessSummary.from_business(business),
                created_at=now,
            )
            for business, details in zip(businesses, scores)
            if details.total_score >= min_score
        ]

        # Sort by total score descending, then by confidence
        ranked.sort(key=lambda r: (r.score.total_score, r.score.confidence), reverse=True)

        logger.info(
            f"Ranked {len(ranked)} of {len(businesses)} businesses for buyer {buyer.id}"
        )
        return ranked[:limit] if limit is not None else ranked

    def to_match_record(
        self,
        buyer_id: str,
        business_id: str,
        details: MatchScoreDetails,
        now: Optional[datetime] = None,
    ) -> MatchRecord:
        """Flatten a score into the record a caller stores."""
        created = now or datetime.now(timezone.utc)
        threshold = self.settings.factor_match_threshold
        factors = details.factors
        return MatchRecord(
            buyer_id=buyer_id,
            business_id=business_id,
            match_score=details.total_score,
            confidence=details.confidence,
            factors=factors,
            recommended=details.total_score >= self.settings.recommended_score_threshold,
            budget_match=factors.budget_fit >= threshold,
            industry_match=factors.industry_alignment >= threshold,
            location_match=factors.location_match >= threshold,
            size_match=factors.size_match >= threshold,
            created_at=created,
            expires_at=created + timedelta(days=self.settings.match_record_lifetime_days),
        )

    def _weighted_score(self, factors: MatchFactors, weights: MatchWeights) -> float:
        """Weighted average over the six weighted factors.

        NOTE: profitability_match and strategic_fit are computed and reported
        but have no weight, so they never move the total. Unclear whether this
        is intended; kept so existing scores stay stable.
        """
        total_weight = weights.total()
        if total_weight == 0:
            return 0.0

        weighted_sum = (
            factors.industry_alignment * weights.industry_alignment
            + factors.budget_fit * weights.budget_fit
            + factors.location_match * weights.location_preference
            + factors.revenue_match * weights.revenue_match
            + factors.size_match * weights.company_size
            + factors.growth_potential * weights.growth_potential
        )
        return weighted_sum / total_weight

    def _calculate_confidence(
        self,
        business: BusinessRecord,
        buyer: BuyerProfile,
        preferences: Optional[BuyerPreferences],
    ) -> float:
        """Share of the checked input fields that are filled in (0-100)."""
        business_fields = [
            business.asking_price,
            business.annual_revenue,
            business.annual_profit,
            business.ebitda,
            business.employees,
            business.year_established,
            business.industry,
            business.location,
        ]
        buyer_fields = [
            len(buyer.industries) > 0,
            bool(buyer.min_budget or buyer.max_budget),
            len(buyer.preferred_locations) > 0,
            bool(buyer.min_revenue or buyer.max_revenue),
        ]

        data_points = sum(1 for value in business_fields if value is not None)
        data_points += sum(buyer_fields)
        total_points = len(business_fields) + len(buyer_fields)

        if preferences is not None:
            total_points += 2
            data_points += len(preferences.industries) > 0
            data_points += preferences.budget_flexibility is not None

        return data_points / total_points * 100

    def _generate_insights(
        self,
        factors: MatchFactors,
        business: BusinessRecord,
    ) -> tuple[list[str], list[str], list[str]]:
        strengths = []
        weaknesses = []
        recommendations = []

        if factors.industry_alignment >= 85:
            strengths.append("Excellent industry alignment with buyer expertise")
        if factors.budget_fit >= 90:
            strengths.append("Asking price well within buyer budget range")
        if factors.location_match >= 90:
            strengths.append("Perfect location match with buyer preferences")
        if factors.profitability_match >= 80:
            strengths.append("Strong profitability metrics meet buyer requirements")
        if factors.growth_potential >= 75:
            strengths.append("High growth potential identified")

        if factors.industry_alignment < 50:
            weaknesses.append("Limited industry alignment may require learning curve")
        if factors.budget_fit < 50:
            weaknesses.append("Asking price outside buyer's ideal budget range")
        if factors.location_match < 50:
            weaknesses.append("Location mismatch with buyer preferences")
        if factors.revenue_match < 50:
            weaknesses.append("Revenue outside buyer's target range")

        if 40 < factors.budget_fit < 70:
            recommendations.append(
                "Consider negotiating on price or exploring seller financing options"
            )
        if 40 < factors.industry_alignment < 70:
            recommendations.append(
                "Evaluate transferable skills and consider industry advisor support"
            )
        if factors.growth_potential > 75:
            recommendations.append("Focus on growth opportunities during due diligence")
        if business.management_staying:
            recommendations.append("Leverage existing management for smooth transition")
        if factors.profitability_match > 80 and factors.budget_fit < 60:
            recommendations.append("Strong profitability may justify premium pricing")

        return strengths, weaknesses, recommendations

    def _generate_reasoning(
        self,
        factors: MatchFactors,
        total_score: float,
        business: BusinessRecord,
        buyer: BuyerProfile,
    ) -> str:
        parts = []

        if total_score >= 80:
            parts.append("This is an excellent match with strong alignment across multiple factors.")
        elif total_score >= 65:
            parts.append("This is a good match with several positive alignment factors.")
        elif total_score >= 50:
            parts.append("This is a moderate match with both opportunities and challenges.")
        else:
            parts.append("This match has significant gaps that would need to be addressed.")

        # sorted() is stable, so ties keep field order
        top = sorted(factors.model_dump().items(), key=lambda item: item[1], reverse=True)[:2]
        described = " and ".join(
            f"{name.replace('_', ' ')} ({round_int(score)}%)" for name, score in top
        )
        parts.append(f"The strongest alignment is in {described}.")

        if factors.budget_fit >= 90 and factors.industry_alignment >= 80:
            parts.append(
                "The combination of budget fit and industry expertise makes this particularly attractive."
            )
        if business.nda_required and buyer.verified:
            parts.append(
                "Verified buyer status enables immediate access to confidential information."
            )

        return " ".join(parts)


_default_scorer: Optional[MatchScorer] = None


def _get_default_scorer() -> MatchScorer:
    global _default_scorer
    if _default_scorer is None:
        _default_scorer = MatchScorer()
    return _default_scorer


def calculate_match_score(
    business: BusinessRecord,
    buyer: BuyerProfile,
    preferences: Optional[BuyerPreferences] = None,
    weights: WeightsInput = None,
) -> MatchScoreDetails:
    """Score a pair with the default scorer."""
    return _get_default_scorer().calculate_match_score(business, buyer, preferences, weights)


def heuristic_enrichment(business: BusinessRecord, buyer: BuyerProfile) -> HeuristicAnalysis:
    """Rule-based deal analysis; no external service is involved."""
    return _heuristic_enrichment(business, buyer)
