"""Tests for the individual match factor calculators."""

import json

import pytest

from exitmatch.matching import RegionTable
from exitmatch.matching import factors
from exitmatch.models import BusinessRecord, BuyerPreferences, BuyerProfile


def make_business(**kwargs) -> BusinessRecord:
    """Create a test business with defaults."""
    defaults = {
        "id": "biz-1",
        "title": "London SaaS Co",
        "industry": "Technology",
        "asking_price": 2_500_000,
        "annual_revenue": 850_000,
        "location": "London, UK",
        "employees": 30,
    }
    defaults.update(kwargs)
    return BusinessRecord(**defaults)


def make_buyer(**kwargs) -> BuyerProfile:
    """Create a test buyer profile with defaults."""
    defaults = {
        "id": "buyer-1",
        "industries": ["Technology"],
        "min_budget": 1_000_000,
        "max_budget": 3_000_000,
        "preferred_locations": ["London, UK"],
    }
    defaults.update(kwargs)
    return BuyerProfile(**defaults)


class TestIndustryAlignment:
    """Tests for industry alignment."""

    def test_exact_match(self):
        assert factors.industry_alignment(make_business(), make_buyer()) == 100

    def test_no_buyer_industries(self):
        assert factors.industry_alignment(make_business(), make_buyer(industries=[])) == 50

    def test_sub_industry_match(self):
        business = make_business(sub_industry="SaaS")
        assert factors.industry_alignment(business, make_buyer(industries=["SaaS"])) == 85

    def test_related_industry(self):
        business = make_business(industry="Software Development")
        assert factors.industry_alignment(business, make_buyer()) == 70

    def test_unrelated_industry(self):
        business = make_business(industry="Hospitality")
        assert factors.industry_alignment(business, make_buyer()) == 0

    def test_preferences_override_profile(self):
        prefs = BuyerPreferences(industries=["Retail"])
        assert factors.industry_alignment(make_business(), make_buyer(), prefs) == 0

    def test_empty_preference_falls_back_to_profile(self):
        prefs = BuyerPreferences()
        assert factors.industry_alignment(make_business(), make_buyer(), prefs) == 100


class TestBudgetFit:
    """Tests for budget fit."""

    def test_midpoint_scores_top(self):
        business = make_business(asking_price=2_000_000)
        assert factors.budget_fit(business, make_buyer()) == pytest.approx(100)

    def test_scales_towards_edges(self):
        assert factors.budget_fit(make_business(), make_buyer()) == pytest.approx(85)
        edge = make_business(asking_price=3_000_000)
        assert factors.budget_fit(edge, make_buyer()) == pytest.approx(70)

    def test_no_price_is_neutral(self):
        business = make_business(asking_price=None, minimum_price=None)
        assert factors.budget_fit(business, make_buyer()) == 50
        assert factors.budget_fit(business, make_buyer(min_budget=None, max_budget=None)) == 50

    def test_minimum_price_used_without_asking_price(self):
        business = make_business(asking_price=None, minimum_price=2_000_000)
        assert factors.budget_fit(business, make_buyer()) == pytest.approx(100)

    def test_within_flexibility_above_max(self):
        business = make_business(asking_price=3_150_000)
        assert factors.budget_fit(business, make_buyer()) == pytest.approx(60)

    def test_preference_flexibility(self):
        business = make_business(asking_price=3_300_000)
        prefs = BuyerPreferences(budget_flexibility=20)
        assert factors.budget_fit(business, make_buyer(), prefs) == pytest.approx(60)

    def test_below_flexibility_range(self):
        business = make_business(asking_price=450_000)
        assert factors.budget_fit(business, make_buyer()) == pytest.approx(25)

    def test_far_outside_range_floors_at_zero(self):
        business = make_business(asking_price=10_000_000)
        assert factors.budget_fit(business, make_buyer()) == 0

    def test_no_max_budget(self):
        business = make_business(asking_price=5_000_000)
        assert factors.budget_fit(business, make_buyer(max_budget=None)) == 70

    def test_zero_width_range(self):
        business = make_business(asking_price=2_000_000)
        buyer = make_buyer(min_budget=2_000_000, max_budget=2_000_000)
        assert factors.budget_fit(business, buyer) == 100


class TestLocationMatch:
    """Tests for location matching."""

    def test_exact_location(self):
        assert factors.location_match(make_business(), make_buyer()) == 100

    def test_no_preference(self):
        buyer = make_buyer(preferred_locations=[])
        assert factors.location_match(make_business(), buyer) == 75

    def test_secondary_location(self):
        business = make_business(location="Reading", locations=["London, UK"])
        assert factors.location_match(business, make_buyer()) == 95

    def test_same_region(self):
        business = make_business(location="Manchester, UK")
        buyer = make_buyer(preferred_locations=["Liverpool"])
        assert factors.location_match(business, buyer) == 75

    def test_different_region(self):
        business = make_business(location="Manchester, UK")
        buyer = make_buyer(preferred_locations=["Edinburgh"])
        assert factors.location_match(business, buyer) == 25

    @pytest.mark.parametrize(
        "flexibility,expected",
        [("exact", 0), ("country", 50), ("any", 75)],
    )
    def test_flexibility(self, flexibility, expected):
        business = make_business(location="Manchester, UK")
        prefs = BuyerPreferences(location_flexibility=flexibility)
        assert factors.location_match(business, make_buyer(), prefs) == expected

    def test_profile_flexibility(self):
        business = make_business(location="Manchester, UK")
        buyer = make_buyer(location_flexibility="country")
        assert factors.location_match(business, buyer) == 50

    def test_custom_region_table(self):
        regions = RegionTable({"Midlands": ["Birmingham", "Coventry"]})
        business = make_business(location="Birmingham")
        buyer = make_buyer(preferred_locations=["Coventry"])
        assert factors.location_match(business, buyer, regions=regions) == 75
        # Default table has no Midlands
        assert factors.location_match(business, buyer) == 25


class TestRegionTable:
    """Tests for the region lookup table."""

    def test_case_insensitive_substring(self):
        table = RegionTable()
        assert table.region_of("central LONDON") == "London"
        assert table.same_region("Glasgow", ["edinburgh city"])

    def test_unknown_location(self):
        table = RegionTable()
        assert table.region_of("Cardiff") is None
        assert not table.same_region("Cardiff", ["Cardiff"])

    def test_extend_keeps_defaults(self):
        table = RegionTable().extend({"Wales": ["Cardiff", "Swansea"]})
        assert table.same_region("Cardiff", ["Swansea"])
        assert table.region_of("Kent") == "South East"

    def test_from_file(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({"Wales": ["Cardiff", "Swansea"]}))
        table = RegionTable.from_file(path)
        assert table.region_of("Swansea") == "Wales"
        assert len(table) == 5

    @pytest.mark.parametrize(
        "content",
        ["not json", json.dumps(["London"]), json.dumps({"Wales": "Cardiff"})],
    )
    def test_from_file_rejects_malformed(self, tmp_path, content):
        path = tmp_path / "regions.json"
        path.write_text(content)
        with pytest.raises(ValueError):
            RegionTable.from_file(path)


class TestRevenueMatch:
    """Tests for revenue matching."""

    def test_no_revenue(self):
        business = make_business(annual_revenue=None)
        assert factors.revenue_match(business, make_buyer(min_revenue=1_000_000)) == 50

    def test_no_requirement(self):
        assert factors.revenue_match(make_business(), make_buyer()) == 75

    def test_within_range(self):
        buyer = make_buyer(min_revenue=500_000, max_revenue=1_000_000)
        assert factors.revenue_match(make_business(), buyer) == 100

    def test_below_min(self):
        business = make_business(annual_revenue=500_000)
        assert factors.revenue_match(business, make_buyer(min_revenue=1_000_000)) == pytest.approx(50)

    def test_above_max(self):
        business = make_business(annual_revenue=2_000_000)
        assert factors.revenue_match(business, make_buyer(max_revenue=1_000_000)) == pytest.approx(50)


class TestProfitabilityMatch:
    """Tests for profitability matching."""

    def test_no_profit_data(self):
        assert factors.profitability_match(make_business(), make_buyer()) == 50

    def test_profitable_base(self):
        business = make_business(ebitda=100_000)
        assert factors.profitability_match(business, make_buyer()) == 75

    def test_below_min_ebitda(self):
        business = make_business(ebitda=50_000)
        buyer = make_buyer(min_ebitda=100_000)
        assert factors.profitability_match(business, buyer) == pytest.approx(50)

    def test_above_max_ebitda_is_capped_not_penalised(self):
        business = make_business(ebitda=500_000)
        buyer = make_buyer(max_ebitda=200_000)
        assert factors.profitability_match(business, buyer) == 75

    def test_high_margin_bonus(self):
        business = make_business(annual_profit=250_000, annual_revenue=1_000_000)
        assert factors.profitability_match(business, make_buyer()) == 85

    def test_low_margin_penalty(self):
        business = make_business(annual_profit=30_000, annual_revenue=1_000_000)
        assert factors.profitability_match(business, make_buyer()) == 65


class TestSizeMatch:
    """Tests for company size matching."""

    def test_no_employee_data(self):
        business = make_business(employees=None)
        assert factors.size_match(business, make_buyer()) == 70

    def test_no_preference(self):
        assert factors.size_match(make_business(), make_buyer()) == 80

    def test_below_min(self):
        prefs = BuyerPreferences(min_employees=50)
        assert factors.size_match(make_business(), make_buyer(), prefs) == pytest.approx(60)

    def test_above_max_floors_at_fifty(self):
        prefs = BuyerPreferences(max_employees=10)
        assert factors.size_match(make_business(), make_buyer(), prefs) == 50


class TestGrowthPotential:
    """Tests for growth potential."""

    def test_industry_bonus(self):
        assert factors.growth_potential(make_business(), make_buyer(), current_year=2026) == 65

    def test_capped_at_hundred(self):
        business = make_business(
            franchise_opportunity=True,
            relocatable=True,
            growth_opportunities="Export markets",
            year_established=2023,
        )
        assert factors.growth_potential(business, make_buyer(), current_year=2026) == 100

    def test_old_business(self):
        business = make_business(industry="Hospitality", year_established=1980)
        assert factors.growth_potential(business, make_buyer(), current_year=2026) == 50

    def test_default_industry_bonus(self):
        business = make_business(industry="Funeral Services")
        assert factors.growth_potential(business, make_buyer(), current_year=2026) == 55


class TestStrategicFit:
    """Tests for strategic fit."""

    def test_baseline(self):
        assert factors.strategic_fit(make_business(), make_buyer()) == 50

    def test_management_requirement(self):
        prefs = BuyerPreferences(management_stay_required=True)
        staying = make_business(management_staying=True)
        assert factors.strategic_fit(staying, make_buyer(), prefs) == 70
        assert factors.strategic_fit(make_business(), make_buyer(), prefs) == 40

    def test_property_required_but_missing(self):
        prefs = BuyerPreferences(property_included="required")
        assert factors.strategic_fit(make_business(), make_buyer(), prefs) == 20

    def test_property_preferred_and_present(self):
        prefs = BuyerPreferences(property_included="preferred")
        business = make_business(property_included=True)
        assert factors.strategic_fit(business, make_buyer(), prefs) == 65

    def test_property_wanted_and_present(self):
        prefs = BuyerPreferences(property_included=True)
        business = make_business(property_included=True)
        assert factors.strategic_fit(business, make_buyer(), prefs) == 60

    def test_relocatable_required_but_missing(self):
        prefs = BuyerPreferences(relocatable="required")
        assert factors.strategic_fit(make_business(), make_buyer(), prefs) == 25

    def test_training_and_synergies(self):
        business = make_business(training_provided=True)
        buyer = make_buyer(synergies="Shared sales team")
        assert factors.strategic_fit(business, buyer) == 70
