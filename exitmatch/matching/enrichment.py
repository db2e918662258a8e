"""Rule-based deal enrichment.

A heuristic placeholder for a future model-backed analysis. Every value is
derived from fixed rules over the two records and no external service is
called, so there is no remote failure mode.
"""

from exitmatch.models import BusinessRecord, BuyerProfile, HeuristicAnalysis

MARKET_TRENDS: dict[str, list[str]] = {
    "Technology": ["Digital transformation accelerating", "AI adoption increasing"],
    "Healthcare": ["Aging population driving demand", "Telemedicine growth"],
    "E-commerce": ["Mobile commerce expansion", "Social commerce emerging"],
}


def _in_buyer_industries(business: BusinessRecord, buyer: BuyerProfile) -> bool:
    return business.industry in buyer.industries


def synergy_score(business: BusinessRecord, buyer: BuyerProfile) -> int:
    score = 50
    if buyer.synergies:
        score += 20
    if _in_buyer_industries(business, buyer):
        score += 15
    if business.relocatable:
        score += 10
    return min(100, score)


def market_trends(industry: str) -> list[str]:
    lowered = industry.lower()
    for key, trends in MARKET_TRENDS.items():
        if key.lower() in lowered:
            return list(trends)
    return ["Steady market conditions"]


def risk_factors(business: BusinessRecord, buyer: BuyerProfile) -> list[str]:
    risks = []
    if not _in_buyer_industries(business, buyer):
        risks.append("Industry experience gap")
    if business.debt and business.debt > 0:
        risks.append("Existing debt obligations")
    if not business.management_staying:
        risks.append("Key personnel transition risk")
    return risks or ["Low risk profile"]


def opportunities(business: BusinessRecord) -> list[str]:
    found = []
    if business.franchise_opportunity:
        found.append("Franchise expansion potential")
    if business.relocatable:
        found.append("Geographic expansion flexibility")
    if business.growth_opportunities:
        found.append("Identified growth opportunities")
    return found or ["Stable business operations"]


def cultural_fit(business: BusinessRecord, buyer: BuyerProfile) -> int:
    fit = 70
    if _in_buyer_industries(business, buyer):
        fit += 15
    if business.management_staying:
        fit += 10
    return min(100, fit)


def integration_complexity(business: BusinessRecord, buyer: BuyerProfile) -> str:
    """low / medium / high from a count of four integration hurdles."""
    hurdles = sum([
        not _in_buyer_industries(business, buyer),
        bool(business.employees and business.employees > 50),
        len(business.locations) > 3,
        not business.management_staying,
    ])
    if hurdles <= 1:
        return "low"
    if hurdles <= 2:
        return "medium"
    return "high"


def time_to_close(business: BusinessRecord) -> str:
    price = business.asking_price or 0
    if price < 500_000:
        return "2-3 months"
    if price < 2_000_000:
        return "3-6 months"
    if price < 5_000_000:
        return "4-8 months"
    return "6-12 months"


def heuristic_enrichment(business: BusinessRecord, buyer: BuyerProfile) -> HeuristicAnalysis:
    """Build the rule-based deal analysis for a buyer/business pair."""
    return HeuristicAnalysis(
        synergy_score=synergy_score(business, buyer),
        market_trends=market_trends(business.industry),
        risk_factors=risk_factors(business, buyer),
        opportunities=opportunities(business),
        cultural_fit=cultural_fit(business, buyer),
        integration_complexity=integration_complexity(business, buyer),
        estimated_time_to_close=time_to_close(business),
    )
