"""Eligibility check command.

Evaluates a JSON record against a JSON criteria document.

Usage:
    eligibility-check --record cart.json --criteria criteria.json [--explain] [--json]

Exit codes: 0 eligible, 1 not eligible, 2 invalid input.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .compiler import compute_criteria_hash, load_criteria, load_record
from .config import EvaluatorConfig
from .errors import EligibilityError
from .evaluator import EligibilityEvaluator

logger = logging.getLogger(__name__)

EXIT_ELIGIBLE = 0
EXIT_NOT_ELIGIBLE = 1
EXIT_INVALID = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eligibility-check",
        description="Check whether a record satisfies a criteria document"
    )
    parser.add_argument(
        "--record",
        type=Path,
        required=True,
        help="Path to record JSON file"
    )
    parser.add_argument(
        "--criteria",
        type=Path,
        required=True,
        help="Path to criteria JSON file"
    )
    parser.add_argument(
        "--parse-dates",
        action="store_true",
        help='Treat {"$date": "<ISO-8601>"} objects as dates'
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Show per-path outcomes"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON format"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        record = load_record(args.record, parse_dates=args.parse_dates)
        criteria = load_criteria(args.criteria, parse_dates=args.parse_dates)
        evaluator = EligibilityEvaluator(EvaluatorConfig.from_env())
        result = evaluator.explain(record, criteria)
    except (FileNotFoundError, EligibilityError) as e:
        logger.warning("Eligibility check failed: %s", e)
        if args.json:
            error = e.to_dict() if isinstance(e, EligibilityError) else {"error_type": type(e).__name__, "message": str(e)}
            print(json.dumps({"eligible": None, "error": error}, indent=2))
        else:
            print(f"ERROR: {e}")
        return EXIT_INVALID

    if args.json:
        output = result.model_dump(mode="json")
        output["criteria_hash"] = compute_criteria_hash(criteria)
        if not args.explain:
            output.pop("outcomes")
        print(json.dumps(output, indent=2))
    else:
        print("ELIGIBLE" if result.eligible else "NOT ELIGIBLE")
        if args.explain:
            print(result.explanation_text)

    return EXIT_ELIGIBLE if result.eligible else EXIT_NOT_ELIGIBLE


if __name__ == "__main__":
    sys.exit(main())
