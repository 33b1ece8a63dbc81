"""
evaluate_assessment.py — Process one assessment submission from a JSON file.

This script loads a submission (nested or flat form payload), runs the
valuation engine, and prints or writes the processed Assessment record.

Example:
    python scripts/evaluate_assessment.py \
        --input-json samples/roofing_free.json \
        --output-json outputs/roofing_free_assessment.json

    python scripts/evaluate_assessment.py --input-json samples/growth.json --result-only
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from valuation_engine.core.config import settings
from valuation_engine.core.exceptions import ValuationEngineError
from valuation_engine.core.logging import configure_logging, get_logger
from valuation_engine.services.assessments import process_assessment
from valuation_engine.valuation.engine import evaluate
from valuation_engine.valuation.multiple_resolver import MultipleResolver
from valuation_engine.valuation.multiples import get_multiple_table

logger = get_logger(__name__)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run the valuation engine on an assessment submission JSON"
    )
    parser.add_argument(
        "--input-json",
        type=str,
        required=True,
        help="Path to the submission JSON file",
    )
    parser.add_argument(
        "--output-json",
        type=str,
        default=None,
        help="Path to write the output JSON (prints to stdout when omitted)",
    )
    parser.add_argument(
        "--multiples-json",
        type=str,
        default=None,
        help="Override the industry multiple table (defaults to VALUATION_MULTIPLES_PATH)",
    )
    parser.add_argument(
        "--result-only",
        action="store_true",
        help="Emit only the valuation result instead of the full assessment record",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.LOG_LEVEL,
        help="DEBUG, INFO, WARNING, ERROR (default: LOG_LEVEL setting)",
    )

    args = parser.parse_args()
    configure_logging(args.log_level)

    try:
        input_path = Path(args.input_json)
        if not input_path.exists():
            raise FileNotFoundError(f"Submission JSON file not found: {args.input_json}")

        logger.info("Loading submission from: %s", args.input_json)
        with input_path.open("r", encoding="utf-8") as f:
            submission = json.load(f)

        resolver = None
        if args.multiples_json:
            resolver = MultipleResolver(get_multiple_table(args.multiples_json))

        if args.result_only:
            output = evaluate(submission, resolver=resolver).model_dump(mode="json")
        else:
            output = process_assessment(submission, resolver=resolver).model_dump(mode="json")

        text = json.dumps(output, indent=2, ensure_ascii=False)
        if args.output_json:
            output_path = Path(args.output_json)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(text, encoding="utf-8")
            print(f"Successfully wrote output to {args.output_json}")
        else:
            print(text)

    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    except json.JSONDecodeError as e:
        print(f"ERROR: Submission is not valid JSON: {e}", file=sys.stderr)
        sys.exit(1)

    except ValueError as e:
        # pydantic ValidationError, e.g. an unknown tier
        print(f"ERROR: Invalid submission: {e}", file=sys.stderr)
        sys.exit(1)

    except ValuationEngineError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
