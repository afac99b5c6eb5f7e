"""
Quote a facility from a JSON dataset and print the result as JSON.

The dataset holds camelCase records under accounts, facilities, tasks,
pricingPlans, proposals, contracts and invoices. Useful for checking a
pricing plan change against real facility data before rolling it out.

Usage:
  python scripts/quote_facility.py --data dataset.json --facility-id fac-1
  python scripts/quote_facility.py --data dataset.json --facility-id fac-1 --frequency 5x_week --strategy per_hour_v1
  python scripts/quote_facility.py --data dataset.json --facility-id fac-1 --compare
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional

# Allow running as a plain script from the engine directory
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config.errors import PricingEngineError  # noqa: E402
from models.quote import PricingContext  # noqa: E402
from services.frequency_service import DEFAULT_COMPARISON_FREQUENCIES  # noqa: E402
from services.pricing_service import PricingService  # noqa: E402
from services.pricing_store import InMemoryPricingStore  # noqa: E402
from utils.pricing_logger import configure_logging, log_quote_summary  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Quote a facility from a JSON dataset")
    parser.add_argument("--data", required=True, help="Path to the dataset JSON file")
    parser.add_argument("--facility-id", required=True, help="Facility ID to quote")
    parser.add_argument("--frequency", default="1x_week", help="Service frequency token (default: 1x_week)")
    parser.add_argument("--strategy", required=False, help="Strategy key; resolved from scope when omitted")
    parser.add_argument("--plan-id", required=False, help="Pricing plan ID; resolved from scope when omitted")
    parser.add_argument("--task-complexity", default="standard", help="Task complexity tier")
    parser.add_argument("--worker-count", type=int, default=1, help="Recorded on the snapshot only")
    parser.add_argument(
        "--subcontractor-pct",
        type=float,
        required=False,
        help="Override the subcontractor share (0-1)",
    )
    parser.add_argument(
        "--compare",
        action="store_true",
        help=f"Compare monthly totals across frequencies (default: {', '.join(DEFAULT_COMPARISON_FREQUENCIES)})",
    )
    parser.add_argument(
        "--frequencies",
        nargs="+",
        required=False,
        help="Frequencies used with --compare",
    )
    parser.add_argument("--services", action="store_true", help="Print proposal service lines instead")
    parser.add_argument("--summary", action="store_true", help="Also print a formatted summary")
    parser.add_argument("--out", required=False, help="Write JSON to this file instead of stdout")
    return parser


def run(args: argparse.Namespace) -> Dict[str, Any]:
    store = InMemoryPricingStore.from_json_file(args.data)
    service = PricingService(store)

    if args.compare:
        comparisons = service.compare_frequencies(
            args.facility_id,
            frequencies=args.frequencies,
            strategy_key=args.strategy,
        )
        return {
            "facilityId": args.facility_id,
            "comparisons": [c.model_dump(by_alias=True) for c in comparisons],
        }

    context = PricingContext(
        facility_id=args.facility_id,
        service_frequency=args.frequency,
        task_complexity=args.task_complexity,
        pricing_plan_id=args.plan_id,
        worker_count=args.worker_count,
        subcontractor_percentage_override=args.subcontractor_pct,
    )

    if args.services:
        lines = service.generate_proposal_services(context, strategy_key=args.strategy)
        return {
            "facilityId": args.facility_id,
            "services": [line.model_dump(by_alias=True) for line in lines],
        }

    quote = service.calculate_pricing(context, strategy_key=args.strategy).to_dict()
    if args.summary:
        log_quote_summary(quote, echo=True)
    return quote


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        result = run(args)
    except FileNotFoundError:
        print(f"Dataset not found: {args.data}", file=sys.stderr)
        return 2
    except PricingEngineError as e:
        print(json.dumps({"error": e.to_dict()}, indent=2, default=str), file=sys.stderr)
        return 1

    payload = json.dumps(result, indent=2, sort_keys=True, default=str)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(payload)
        print(f"Wrote {args.out}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
