"""CLI entry point for the ExitMatch scoring core."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from exitmatch.config import settings
from exitmatch.data import UK_INDUSTRIES, get_industry
from exitmatch.matching import MatchScorer
from exitmatch.models import (
    BusinessRecord,
    BuyerPreferences,
    BuyerProfile,
    MatchWeights,
    ValuationStepData,
)
from exitmatch.valuation import SyntheticComparables, ValuationEngine

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def load_json(path: Path) -> Any:
    """Load a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value


def write_output(payload: Any, output: Optional[Path]):
    """Print JSON to stdout, or write it to ``output``."""
    text = json.dumps(to_jsonable(payload), indent=2)
    if output is None:
        print(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    logger.info(f"Results written to {output}")


def run_match(args) -> Any:
    """Score one business, or rank a list of businesses, for a buyer."""
    scorer = MatchScorer(settings)
    buyer = BuyerProfile(**load_json(args.buyer))
    preferences = BuyerPreferences(**load_json(args.preferences)) if args.preferences else None
    weights = MatchWeights(**load_json(args.weights)) if args.weights else None

    data = load_json(args.business)
    if isinstance(data, list):
        businesses = [BusinessRecord(**item) for item in data]
        logger.info(f"Ranking {len(businesses)} businesses for buyer {buyer.id}")
        return scorer.score_and_rank(
            businesses,
            buyer,
            preferences=preferences,
            weights=weights,
            min_score=args.min_score,
            limit=args.limit,
        )

    business = BusinessRecord(**data)
    details = scorer.calculate_match_score(business, buyer, preferences, weights)
    result = {
        "details": details,
        "match_record": scorer.to_match_record(buyer.id, business.id, details),
    }
    if args.analysis:
        result["analysis"] = scorer.heuristic_enrichment(business, buyer)
    return result


def run_value(args) -> Any:
    """Value a business from a wizard answers file."""
    data = ValuationStepData(**load_json(args.input))
    comparables = SyntheticComparables(seed=args.seed, count=settings.comparables_count)
    result = ValuationEngine(data, comparables=comparables).calculate()
    logger.info(
        f"Typical value {result.valuation_range.typical:,} "
        f"(primary method: {result.primary_method})"
    )
    return result


def run_industries(args) -> Any:
    """Show one industry, or list them (optionally by category)."""
    if args.key:
        industry = get_industry(args.key)
        if industry is None:
            logger.error(f"Unknown industry: {args.key}")
            logger.info("Run `exitmatch industries` to list the known keys")
            sys.exit(1)
        return industry
    return {
        key: industry
        for key, industry in UK_INDUSTRIES.items()
        if not args.category or industry.category == args.category
    }


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="ExitMatch - Score buyer/business matches and value businesses"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Write JSON to this path instead of stdout",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    match_parser = subparsers.add_parser("match", help="Score businesses for a buyer")
    match_parser.add_argument(
        "--business", "-b",
        type=Path,
        required=True,
        help="Business JSON file (an object, or a list to rank)",
    )
    match_parser.add_argument("--buyer", type=Path, required=True, help="Buyer profile JSON file")
    match_parser.add_argument("--preferences", type=Path, help="Preference overrides JSON file")
    match_parser.add_argument("--weights", type=Path, help="Weight overrides JSON file")
    match_parser.add_argument(
        "--analysis",
        action="store_true",
        help="Include the rule-based deal analysis",
    )
    match_parser.add_argument(
        "--min-score",
        type=int,
        default=0,
        help="Drop ranked businesses scoring below this (default: 0)",
    )
    match_parser.add_argument(
        "--limit", "-l",
        type=int,
        default=None,
        help="Maximum number of ranked businesses to return",
    )
    match_parser.set_defaults(handler=run_match)

    value_parser = subparsers.add_parser("value", help="Value a business")
    value_parser.add_argument("--input", "-i", type=Path, required=True, help="Wizard answers JSON file")
    value_parser.add_argument("--seed", type=int, default=None, help="Seed for comparables")
    value_parser.set_defaults(handler=run_value)

    industries_parser = subparsers.add_parser("industries", help="Show industry multiples")
    industries_parser.add_argument("--key", "-k", help="Industry key, e.g. saas_b2b")
    industries_parser.add_argument("--category", help="Only industries in this category")
    industries_parser.set_defaults(handler=run_industries)

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        result = args.handler(args)
    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON: {e}")
        sys.exit(1)
    except ValidationError as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(1)

    write_output(result, args.output)


if __name__ == "__main__":
    main()
