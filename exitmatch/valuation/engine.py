"""Business valuation from the wizard's financial inputs.

Three methods are blended: a revenue multiple, an EBITDA multiple and an
asset-based estimate. Their weights depend on margin, sector and recurring
revenue, and the blended value is widened into a range whose width shrinks
as input completeness (confidence) grows.

Inputs are assumed validated by ``ValuationStepData``. Absent numeric fields
count as zero in threshold checks.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from exitmatch.config import Settings, settings as default_settings
from exitmatch.data import get_sector_multiples
from exitmatch.models import (
    AssetMethod,
    MarketCondition,
    MethodBreakdown,
    MultipleMethod,
    ValuationFactor,
    ValuationRange,
    ValuationResult,
    ValuationStepData,
)
from exitmatch.utils import clamp, format_number, round_half_up, round_int
from .comparables import ComparablesSource, SyntheticComparables

logger = logging.getLogger(__name__)

# Premium over base asset value per key asset type
ASSET_PREMIUMS: dict[str, float] = {
    "intellectual_property": 0.3,
    "real_estate": 0.4,
    "patents": 0.35,
    "brand": 0.25,
    "customer_database": 0.2,
    "software": 0.25,
    "contracts": 0.15,
    "equipment": 0.1,
    "inventory": 0.05,
    "licenses": 0.1,
}

TECH_SECTORS = ("technology", "saas")
ASSET_HEAVY_SECTORS = ("manufacturing", "construction")


class ValuationEngine:
    """Value one business from its wizard answers."""

    def __init__(
        self,
        data: ValuationStepData,
        comparables: Optional[ComparablesSource] = None,
        settings: Optional[Settings] = None,
        now: Optional[datetime] = None,
    ):
        self.data = data
        self.settings = settings or default_settings
        self.comparables = comparables or SyntheticComparables(
            count=self.settings.comparables_count
        )
        self.now = now

        multiples = get_sector_multiples(data.sector)
        self.base_revenue_multiple = (
            multiples.revenue if multiples and multiples.revenue
            else self.settings.default_revenue_multiple
        )
        self.base_ebitda_multiple = (
            multiples.ebitda if multiples and multiples.ebitda
            else self.settings.default_ebitda_multiple
        )

    def calculate(self) -> ValuationResult:
        """Run all three methods and assemble the valuation."""
        revenue_value = self.revenue_multiple_value()
        ebitda_value = self.ebitda_multiple_value()
        asset_value = self.asset_value()

        weights = self.method_weights()
        typical = (
            revenue_value * weights["revenue"]
            + ebitda_value * weights["ebitda"]
            + asset_value * weights["asset"]
        )
        confidence = self.confidence()
        adjusted_ebitda = self.adjusted_ebitda_multiple()

        now = self.now or datetime.now(timezone.utc)
        result = ValuationResult(
            valuation_range=self.valuation_range(typical, confidence),
            method_breakdown=MethodBreakdown(
                revenue_multiple=MultipleMethod(
                    value=revenue_value,
                    multiple=self.adjusted_revenue_multiple(),
                    weight=weights["revenue"],
                ),
                ebitda_multiple=MultipleMethod(
                    value=ebitda_value,
                    multiple=adjusted_ebitda,
                    weight=weights["ebitda"],
                ),
                asset_based=AssetMethod(value=asset_value, weight=weights["asset"]),
            ),
            primary_method=self.primary_method(weights),
            industry_multiple=self.base_ebitda_multiple,
            adjusted_multiple=adjusted_ebitda,
            strength_factors=self._identify_strengths(),
            weakness_factors=self._identify_weaknesses(),
            opportunities=self._generate_opportunities(),
            recommendations=self._generate_recommendations(),
            comparable_businesses=self.comparables.find(self.data, self.base_revenue_multiple),
            market_conditions=self._assess_market_conditions(),
            calculated_at=now,
            valid_until=now + timedelta(days=self.settings.valuation_validity_days),
        )

        logger.debug(
            f"Valued sector={self.data.sector} at {result.valuation_range.typical} "
            f"(primary={result.primary_method}, confidence={confidence:.1f})"
        )
        return result

    # Methods

    def revenue_multiple_value(self) -> float:
        d = self.data
        revenue = d.annual_revenue or 0
        multiple = self.base_revenue_multiple

        if d.growth_rate:
            if d.growth_rate > 30:
                multiple *= 1.5
            elif d.growth_rate > 20:
                multiple *= 1.3
            elif d.growth_rate > 10:
                multiple *= 1.1
            elif d.growth_rate < 0:
                multiple *= 0.7

        if d.recurring_revenue_percentage:
            multiple *= 1 + (d.recurring_revenue_percentage / 100) * 0.5

        if d.top_customer_percentage:
            if d.top_customer_percentage > 50:
                multiple *= 0.7
            elif d.top_customer_percentage > 30:
                multiple *= 0.85
            elif d.top_customer_percentage < 10:
                multiple *= 1.1

        if d.years_in_operation:
            if d.years_in_operation > 20:
                multiple *= 1.2
            elif d.years_in_operation > 10:
                multiple *= 1.1
            elif d.years_in_operation < 3:
                multiple *= 0.8

        return revenue * multiple

    def ebitda(self) -> float:
        """EBITDA as given, or estimated from the margin and profit type."""
        d = self.data
        revenue = d.annual_revenue or 0

        if d.profit_type == "ebitda" and d.profit_value:
            return d.profit_value
        if d.profit_margin and revenue:
            ebitda = revenue * (d.profit_margin / 100)
            if d.profit_type == "net_profit":
                ebitda *= 1.3  # add back tax and interest
            elif d.profit_type == "gross_profit":
                ebitda *= 0.5
            return ebitda
        return 0.0

    def ebitda_multiple_value(self) -> float:
        d = self.data
        ebitda = self.ebitda()
        if ebitda <= 0:
            return 0.0

        revenue = d.annual_revenue or 0
        multiple = self.base_ebitda_multiple

        if revenue > 10_000_000:
            multiple *= 1.3
        elif revenue > 5_000_000:
            multiple *= 1.15
        elif revenue < 1_000_000:
            multiple *= 0.8

        if d.growth_rate:
            if d.growth_rate > 25:
                multiple *= 1.4
            elif d.growth_rate > 15:
                multiple *= 1.2
            elif d.growth_rate > 5:
                multiple *= 1.1
            elif d.growth_rate < 0:
                multiple *= 0.8

        if d.recurring_revenue_percentage:
            if d.recurring_revenue_percentage > 80:
                multiple *= 1.3
            elif d.recurring_revenue_percentage > 60:
                multiple *= 1.2
            elif d.recurring_revenue_percentage > 40:
                multiple *= 1.1

        if d.owner_involvement == "full_time":
            multiple *= 0.9
        elif d.owner_involvement == "passive":
            multiple *= 1.1

        return ebitda * multiple

    def asset_value(self) -> float:
        d = self.data
        value = (d.annual_revenue or 0) * 0.3

        if d.key_assets:
            value *= 1 + sum(ASSET_PREMIUMS.get(asset, 0) for asset in d.key_assets)

        if d.years_in_operation:
            if d.years_in_operation > 20:
                value *= 1.3
            elif d.years_in_operation > 10:
                value *= 1.15
            elif d.years_in_operation < 3:
                value *= 0.7

        return value

    def method_weights(self) -> dict[str, float]:
        """Normalised revenue/ebitda/asset weights.

        Later rules override earlier ones: margin, then SaaS or recurring
        revenue above 70%, then asset-heavy sectors.
        """
        d = self.data
        margin = d.profit_margin or 0
        weights = {"revenue": 0.25, "ebitda": 0.5, "asset": 0.25}

        if margin > 20:
            weights = {"revenue": 0.2, "ebitda": 0.6, "asset": 0.2}
        elif margin < 5:
            weights = {"revenue": 0.4, "ebitda": 0.2, "asset": 0.4}

        if d.sector == "saas" or (d.recurring_revenue_percentage or 0) > 70:
            weights = {"revenue": 0.4, "ebitda": 0.5, "asset": 0.1}

        if d.sector in ASSET_HEAVY_SECTORS:
            weights = {"revenue": 0.2, "ebitda": 0.4, "asset": 0.4}

        total = sum(weights.values())
        return {method: weight / total for method, weight in weights.items()}

    @staticmethod
    def primary_method(weights: dict[str, float]) -> str:
        """Method with the largest weight; ties go ebitda, revenue, asset."""
        highest = max(weights.values())
        for method in ("ebitda", "revenue", "asset"):
            if weights[method] == highest:
                return method
        return "asset"

    def confidence(self) -> float:
        """50 plus up to 30 for input completeness plus stability bonuses."""
        d = self.data
        fields = [
            d.sector,
            d.annual_revenue,
            d.profit_value or d.profit_margin,
            d.year_established,
            d.employee_count,
            d.top_customer_percentage,
            d.growth_rate,
            d.recurring_revenue_percentage,
            d.key_assets,
            d.exit_reason,
        ]
        filled = sum(1 for value in fields if value is not None)
        confidence = 50 + filled / len(fields) * 30

        if (d.years_in_operation or 0) > 10:
            confidence += 5
        if (d.recurring_revenue_percentage or 0) > 60:
            confidence += 5
        if (d.top_customer_percentage or 0) < 20:
            confidence += 5
        if (d.growth_rate or 0) > 10:
            confidence += 5

        return clamp(confidence)

    @staticmethod
    def valuation_range(typical: float, confidence: float) -> ValuationRange:
        uncertainty = 1 - confidence / 100
        min_variance = 0.2 + uncertainty * 0.2
        max_variance = 0.2 + uncertainty * 0.3
        return ValuationRange(
            minimum=round_int(typical * (1 - min_variance)),
            typical=round_int(typical),
            maximum=round_int(typical * (1 + max_variance)),
            confidence=confidence,
        )

    def adjusted_revenue_multiple(self) -> float:
        d = self.data
        multiple = self.base_revenue_multiple
        if (d.growth_rate or 0) > 20:
            multiple *= 1.3
        if (d.recurring_revenue_percentage or 0) > 60:
            multiple *= 1.2
        # Unknown concentration earns no premium
        if (d.top_customer_percentage or 100) < 20:
            multiple *= 1.1
        if (d.years_in_operation or 0) > 10:
            multiple *= 1.1
        return round_half_up(multiple, 1)

    def adjusted_ebitda_multiple(self) -> float:
        d = self.data
        multiple = self.base_ebitda_multiple
        if (d.annual_revenue or 0) > 5_000_000:
            multiple *= 1.2
        if (d.growth_rate or 0) > 15:
            multiple *= 1.2
        if (d.recurring_revenue_percentage or 0) > 60:
            multiple *= 1.15
        if d.owner_involvement == "passive":
            multiple *= 1.1
        return round_half_up(multiple, 1)

    # Insights

    def _identify_strengths(self) -> list[ValuationFactor]:
        d = self.data
        strengths = []

        if (d.recurring_revenue_percentage or 0) > 60:
            strengths.append(ValuationFactor(
                factor="High Recurring Revenue",
                impact="positive",
                weight="high",
                description=(
                    f"{format_number(d.recurring_revenue_percentage)}% recurring revenue "
                    "provides predictable cash flow"
                ),
                improvement_tip="Consider increasing contract lengths for even better multiples",
            ))

        if (d.growth_rate or 0) > 20:
            strengths.append(ValuationFactor(
                factor="Strong Growth Rate",
                impact="positive",
                weight="high",
                description=(
                    f"{format_number(d.growth_rate)}% year-over-year growth "
                    "demonstrates market demand"
                ),
                improvement_tip="Document growth drivers to justify premium valuation",
            ))

        if (d.top_customer_percentage or 0) < 15:
            strengths.append(ValuationFactor(
                factor="Diversified Customer Base",
                impact="positive",
                weight="medium",
                description="Low customer concentration reduces business risk",
                improvement_tip="Highlight customer diversity in marketing materials",
            ))

        if (d.years_in_operation or 0) > 15:
            strengths.append(ValuationFactor(
                factor="Established Business",
                impact="positive",
                weight="medium",
                description=(
                    f"{format_number(d.years_in_operation)} years of operation "
                    "shows proven stability"
                ),
                improvement_tip="Emphasize long-term customer relationships and brand recognition",
            ))

        if (d.profit_margin or 0) > 20:
            strengths.append(ValuationFactor(
                factor="High Profit Margins",
                impact="positive",
                weight="high",
                description=(
                    f"{format_number(d.profit_margin)}% profit margin indicates "
                    "strong operational efficiency"
                ),
                improvement_tip="Document cost management strategies for buyers",
            ))

        return strengths

    def _identify_weaknesses(self) -> list[ValuationFactor]:
        d = self.data
        weaknesses = []

        if (d.top_customer_percentage or 0) > 40:
            weaknesses.append(ValuationFactor(
                factor="Customer Concentration Risk",
                impact="negative",
                weight="high",
                description=(
                    f"{format_number(d.top_customer_percentage)}% revenue from top customer "
                    "creates dependency risk"
                ),
                improvement_tip="Develop strategy to diversify customer base before sale",
            ))

        if (d.growth_rate or 0) < 0:
            weaknesses.append(ValuationFactor(
                factor="Declining Revenue",
                impact="negative",
                weight="high",
                description="Negative growth trend reduces buyer interest",
                improvement_tip="Address decline causes and show turnaround plan",
            ))

        if (d.recurring_revenue_percentage or 0) < 30:
            weaknesses.append(ValuationFactor(
                factor="Low Recurring Revenue",
                impact="negative",
                weight="medium",
                description="Limited recurring revenue increases cash flow uncertainty",
                improvement_tip="Introduce subscription models or service contracts",
            ))

        if d.owner_involvement == "full_time":
            weaknesses.append(ValuationFactor(
                factor="Owner Dependency",
                impact="negative",
                weight="medium",
                description="Business heavily dependent on owner involvement",
                improvement_tip="Document processes and train key employees",
            ))

        if (d.years_in_operation or 0) < 3:
            weaknesses.append(ValuationFactor(
                factor="Limited Operating History",
                impact="negative",
                weight="medium",
                description="Short track record increases buyer perceived risk",
                improvement_tip="Provide detailed financial projections and market analysis",
            ))

        return weaknesses

    def _generate_opportunities(self) -> list[str]:
        d = self.data
        opportunities = []

        if (d.recurring_revenue_percentage or 0) < 50:
            opportunities.append(
                "Increase recurring revenue through subscription models or service contracts"
            )
        if (d.top_customer_percentage or 0) > 30:
            opportunities.append("Diversify customer base to reduce concentration risk")
        if d.sector in TECH_SECTORS:
            opportunities.append("Explore international expansion opportunities")
            opportunities.append("Develop additional product lines or features")
        if (d.profit_margin or 0) < 15:
            opportunities.append("Improve operational efficiency to increase profit margins")
        if not d.intellectual_property:
            opportunities.append("Develop and protect intellectual property to increase value")

        return opportunities

    def _generate_recommendations(self) -> list[str]:
        d = self.data
        growth = d.growth_rate or 0
        recommendations = []

        if growth > 20:
            recommendations.append("Consider waiting 6-12 months to maximize growth trajectory value")
        elif growth < 0:
            recommendations.append("Address declining revenue before going to market")

        recommendations.append("Prepare 3 years of audited financial statements")
        recommendations.append("Document all standard operating procedures")

        if d.owner_involvement == "full_time":
            recommendations.append("Develop management team to reduce owner dependency")
        if (d.recurring_revenue_percentage or 0) < 40:
            recommendations.append("Focus on increasing recurring revenue to improve multiples")
        if (d.top_customer_percentage or 0) > 30:
            recommendations.append("Implement customer diversification strategy over next 6 months")
        if d.exit_reason == "retirement":
            recommendations.append("Consider seller financing to achieve higher sale price")

        return recommendations

    def _assess_market_conditions(self) -> MarketCondition:
        d = self.data
        trend = "neutral"
        demand_level = "moderate"
        average_time_to_sale = 6
        premium_factors = []

        if d.sector in TECH_SECTORS:
            trend = "sellers_market"
            demand_level = "high"
            average_time_to_sale = 4
            premium_factors.append("High demand for tech businesses")

        if (d.recurring_revenue_percentage or 0) > 70:
            demand_level = "high"
            premium_factors.append("Strong recurring revenue model")

        if (d.growth_rate or 0) > 20:
            # Both steps run in order, so moderate ends up very_high
            if demand_level == "moderate":
                demand_level = "high"
            if demand_level == "high":
                demand_level = "very_high"
            premium_factors.append("Above-market growth rate")

        if (d.profit_margin or 0) > 20:
            premium_factors.append("High profit margins")

        return MarketCondition(
            trend=trend,
            demand_level=demand_level,
            average_time_to_sale=average_time_to_sale,
            premium_factors=premium_factors,
        )


def calculate_valuation(
    data: ValuationStepData,
    comparables: Optional[ComparablesSource] = None,
) -> ValuationResult:
    """Value a business with the default settings."""
    return ValuationEngine(data, comparables=comparables).calculate()
