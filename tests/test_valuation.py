"""Tests for the valuation engine."""

import random
from datetime import date, datetime, timedelta, timezone

import pytest

from exitmatch.models import ValuationStepData
from exitmatch.valuation import SyntheticComparables, ValuationEngine, calculate_valuation

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_data(**kwargs) -> ValuationStepData:
    """Create test wizard answers with defaults."""
    defaults = {
        "sector": "saas_b2b",
        "annual_revenue": 1_000_000,
        "profit_type": "ebitda",
        "profit_value": 200_000,
        "growth_rate": 25,
        "recurring_revenue_percentage": 70,
    }
    defaults.update(kwargs)
    return ValuationStepData(**defaults)


def make_engine(data=None, **kwargs) -> ValuationEngine:
    comparables = SyntheticComparables(seed=7, now=NOW)
    return ValuationEngine(data or make_data(**kwargs), comparables=comparables, now=NOW)


class TestMethodWeights:
    """Tests for the revenue/ebitda/asset blend."""

    def test_recurring_at_seventy_does_not_switch(self):
        weights = make_engine(recurring_revenue_percentage=70).method_weights()
        assert weights == pytest.approx({"revenue": 0.4, "ebitda": 0.2, "asset": 0.4})
        assert ValuationEngine.primary_method(weights) == "revenue"

    def test_recurring_above_seventy(self):
        weights = make_engine(recurring_revenue_percentage=75).method_weights()
        assert weights == pytest.approx({"revenue": 0.4, "ebitda": 0.5, "asset": 0.1})
        assert ValuationEngine.primary_method(weights) == "ebitda"

    def test_saas_sector(self):
        weights = make_engine(sector="saas", recurring_revenue_percentage=None).method_weights()
        assert weights == pytest.approx({"revenue": 0.4, "ebitda": 0.5, "asset": 0.1})

    def test_asset_heavy_sector_wins(self):
        data = make_data(sector="manufacturing", recurring_revenue_percentage=90)
        weights = make_engine(data).method_weights()
        assert weights == pytest.approx({"revenue": 0.2, "ebitda": 0.4, "asset": 0.4})
        # Tie between ebitda and asset resolves to ebitda
        assert ValuationEngine.primary_method(weights) == "ebitda"

    def test_high_margin(self):
        data = make_data(sector="retail", profit_margin=25, recurring_revenue_percentage=None)
        weights = make_engine(data).method_weights()
        assert weights == pytest.approx({"revenue": 0.2, "ebitda": 0.6, "asset": 0.2})

    def test_mid_margin_default(self):
        data = make_data(sector="retail", profit_margin=10, recurring_revenue_percentage=None)
        weights = make_engine(data).method_weights()
        assert weights == pytest.approx({"revenue": 0.25, "ebitda": 0.5, "asset": 0.25})

    @pytest.mark.parametrize("sector", ["saas", "manufacturing", "retail", None])
    def test_weights_sum_to_one(self, sector):
        weights = make_engine(sector=sector, profit_margin=12).method_weights()
        assert sum(weights.values()) == pytest.approx(1.0)


class TestMethodValues:
    """Tests for the three valuation methods."""

    def test_revenue_multiple_value(self):
        # 4 * 1.3 (growth) * 1.35 (recurring)
        assert make_engine().revenue_multiple_value() == pytest.approx(7_020_000)

    def test_ebitda_multiple_value(self):
        # 15 * 1.2 (growth) * 1.2 (recurring)
        assert make_engine().ebitda_multiple_value() == pytest.approx(4_320_000)

    def test_asset_value(self):
        assert make_engine().asset_value() == pytest.approx(300_000)

    def test_asset_premiums(self):
        data = make_data(key_assets=["real_estate", "patents", "unknown"], years_in_operation=25)
        # 300k * 1.75 * 1.3
        assert make_engine(data).asset_value() == pytest.approx(682_500)

    def test_ebitda_from_net_profit_margin(self):
        data = make_data(
            annual_revenue=2_000_000, profit_type="net_profit", profit_value=None, profit_margin=10
        )
        assert make_engine(data).ebitda() == pytest.approx(260_000)

    def test_ebitda_from_gross_profit_margin(self):
        data = make_data(
            annual_revenue=2_000_000, profit_type="gross_profit", profit_value=None, profit_margin=10
        )
        assert make_engine(data).ebitda() == pytest.approx(100_000)

    def test_no_profit_data(self):
        engine = make_engine(profit_type=None, profit_value=None)
        assert engine.ebitda() == 0
        assert engine.ebitda_multiple_value() == 0

    def test_unknown_sector_uses_defaults(self):
        engine = make_engine(sector="space_mining")
        assert engine.base_ebitda_multiple == 7.0
        assert engine.base_revenue_multiple == 1.0

    def test_hospitality_uses_wizard_sector_multiples(self):
        engine = make_engine(sector="hospitality")
        assert engine.base_revenue_multiple == 0.5
        assert engine.base_ebitda_multiple == 4

    def test_adjusted_multiples(self):
        engine = make_engine()
        assert engine.adjusted_ebitda_multiple() == pytest.approx(20.7)
        assert engine.adjusted_revenue_multiple() == pytest.approx(6.2)

    def test_unknown_concentration_earns_no_premium(self):
        assert make_engine(top_customer_percentage=None).adjusted_revenue_multiple() == pytest.approx(6.2)
        assert make_engine(top_customer_percentage=10).adjusted_revenue_multiple() == pytest.approx(6.9)


class TestValuationRange:
    """Tests for confidence and the value range."""

    def test_confidence(self):
        # 5 of 10 fields, plus recurring, concentration and growth bonuses
        assert make_engine().confidence() == pytest.approx(80)

    def test_confidence_is_capped(self):
        data = make_data(
            year_established=2000,
            years_in_operation=26,
            employee_count=12,
            top_customer_percentage=5,
            key_assets=["brand"],
            exit_reason="retirement",
        )
        assert make_engine(data).confidence() == 100

    def test_range_width_shrinks_with_confidence(self):
        low = ValuationEngine.valuation_range(1_000_000, 50)
        high = ValuationEngine.valuation_range(1_000_000, 100)
        assert low.maximum - low.minimum > high.maximum - high.minimum
        assert high.minimum == 800_000
        assert high.maximum == 1_200_000

    def test_full_calculation(self):
        result = make_engine().calculate()
        assert result.valuation_range.typical == 3_792_000
        assert result.valuation_range.minimum == 2_881_920
        assert result.valuation_range.maximum == 4_777_920
        assert result.valuation_range.confidence == pytest.approx(80)
        assert result.primary_method == "revenue"
        assert result.industry_multiple == 15
        assert result.adjusted_multiple == pytest.approx(20.7)
        assert result.method_breakdown.revenue_multiple.multiple == pytest.approx(6.2)
        assert result.method_breakdown.asset_based.weight == pytest.approx(0.4)

    def test_range_is_ordered(self):
        result = make_engine(growth_rate=-10, top_customer_percentage=60).calculate()
        vr = result.valuation_range
        assert vr.minimum <= vr.typical <= vr.maximum

    def test_validity_window(self):
        result = make_engine().calculate()
        assert result.calculated_at == NOW
        assert result.valid_until == NOW + timedelta(days=90)


class TestInsights:
    """Tests for strengths, weaknesses and advice."""

    def test_strengths(self):
        result = make_engine().calculate()
        names = [s.factor for s in result.strength_factors]
        assert names == [
            "High Recurring Revenue",
            "Strong Growth Rate",
            "Diversified Customer Base",
        ]
        assert result.strength_factors[0].description == (
            "70% recurring revenue provides predictable cash flow"
        )

    def test_weaknesses(self):
        result = make_engine().calculate()
        assert [w.factor for w in result.weakness_factors] == ["Limited Operating History"]

    def test_struggling_business(self):
        data = make_data(
            growth_rate=-5,
            top_customer_percentage=45,
            recurring_revenue_percentage=10,
            owner_involvement="full_time",
            years_in_operation=8,
            exit_reason="retirement",
        )
        result = make_engine(data).calculate()
        assert [w.factor for w in result.weakness_factors] == [
            "Customer Concentration Risk",
            "Declining Revenue",
            "Low Recurring Revenue",
            "Owner Dependency",
        ]
        assert result.weakness_factors[0].description == (
            "45% revenue from top customer creates dependency risk"
        )
        assert result.recommendations == [
            "Address declining revenue before going to market",
            "Prepare 3 years of audited financial statements",
            "Document all standard operating procedures",
            "Develop management team to reduce owner dependency",
            "Focus on increasing recurring revenue to improve multiples",
            "Implement customer diversification strategy over next 6 months",
            "Consider seller financing to achieve higher sale price",
        ]

    def test_opportunities(self):
        result = make_engine().calculate()
        assert result.opportunities == [
            "Improve operational efficiency to increase profit margins",
            "Develop and protect intellectual property to increase value",
        ]

    def test_tech_sector_opportunities(self):
        data = make_data(sector="technology", intellectual_property=True, profit_margin=30)
        result = make_engine(data).calculate()
        assert result.opportunities == [
            "Explore international expansion opportunities",
            "Develop additional product lines or features",
        ]

    def test_recommendations(self):
        result = make_engine().calculate()
        assert result.recommendations == [
            "Consider waiting 6-12 months to maximize growth trajectory value",
            "Prepare 3 years of audited financial statements",
            "Document all standard operating procedures",
        ]

    def test_market_conditions(self):
        market = make_engine().calculate().market_conditions
        assert market.trend == "neutral"
        assert market.demand_level == "very_high"
        assert market.average_time_to_sale == 6
        assert market.premium_factors == ["Above-market growth rate"]

    def test_tech_market(self):
        data = make_data(sector="technology", growth_rate=5, recurring_revenue_percentage=80)
        market = make_engine(data).calculate().market_conditions
        assert market.trend == "sellers_market"
        assert market.demand_level == "high"
        assert market.average_time_to_sale == 4
        assert market.premium_factors == [
            "High demand for tech businesses",
            "Strong recurring revenue model",
        ]


class TestComparables:
    """Tests for synthetic comparables."""

    def test_count_and_order(self):
        comparables = SyntheticComparables(seed=1, now=NOW).find(make_data(), 4)
        assert len(comparables) == 4
        multiples = [c.multiple for c in comparables]
        assert multiples == sorted(multiples, reverse=True)

    def test_within_bounds(self):
        comparables = SyntheticComparables(seed=2, count=10, now=NOW).find(make_data(), 4)
        for comp in comparables:
            assert 700_000 <= comp.revenue <= 1_300_000
            assert 3.2 <= comp.multiple <= 4.8
            assert comp.sector == "saas_b2b"
            sold_on = date.fromisoformat(comp.date)
            assert NOW.date() - timedelta(days=366) <= sold_on <= NOW.date()

    def test_seed_is_reproducible(self):
        first = SyntheticComparables(seed=42, now=NOW).find(make_data(), 4)
        second = SyntheticComparables(rng=random.Random(42), now=NOW).find(make_data(), 4)
        assert first == second

    def test_defaults_without_revenue_or_sector(self):
        data = make_data(sector=None, annual_revenue=None)
        comparables = SyntheticComparables(seed=3, count=2, now=NOW).find(data, 1.0)
        assert all(c.sector == "General Business" for c in comparables)
        assert all(700_000 <= c.revenue <= 1_300_000 for c in comparables)

    def test_engine_uses_injected_source(self):
        result = make_engine().calculate()
        assert len(result.comparable_businesses) == 4


class TestValidation:
    """Tests for input validation at the boundary."""

    def test_rejects_margin_over_hundred(self):
        with pytest.raises(ValueError):
            ValuationStepData(profit_margin=150)

    def test_rejects_negative_revenue(self):
        with pytest.raises(ValueError):
            ValuationStepData(annual_revenue=-1)

    def test_empty_answers_still_value(self):
        result = calculate_valuation(
            ValuationStepData(), comparables=SyntheticComparables(seed=0)
        )
        assert result.valuation_range.typical == 0
        assert result.industry_multiple == 7.0
