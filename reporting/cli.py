#!/usr/bin/env python3
"""
CLI for total-loss appraisals.

Usage:
    python -m reporting.cli extract <report.txt>
    python -m reporting.cli validate --vin <vin> --year <year> --mileage <miles>
    python -m reporting.cli analyze <report.txt> <comparables.json>
    python -m reporting.cli report <report.txt> <comparables.json> [-o out.pdf]

The comparables file is either a JSON list of comparables or an object
with "comparables" and optional "loss_vehicle" overrides (equipment,
condition, location, mileage) for fields the report does not carry.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from appraisal import (
    AggregationPreconditionError,
    AppraisalPipeline,
    ComparableVehicle,
    Condition,
    ExtractedVehicleData,
    ExtractionFailure,
)
from utils.config import Config, configure_logging
from utils.formatting import format_currency, format_percent

from .pdf_generator import ReportSuccess, ValuationReportGenerator

logger = logging.getLogger(__name__)

LOSS_OVERRIDES = ("equipment", "location", "mileage", "year", "make", "model", "trim")


def load_comparables(path: Path) -> Tuple[List[ComparableVehicle], dict]:
    """
    Load comparables (and optional loss vehicle overrides) from JSON.

    Returns:
        (comparables, loss_vehicle_overrides)
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        return [ComparableVehicle.from_dict(item) for item in data], {}
    comps = [ComparableVehicle.from_dict(item) for item in data.get("comparables", [])]
    return comps, data.get("loss_vehicle", {})


def apply_overrides(record: ExtractedVehicleData, overrides: dict) -> None:
    """Fill in user-entered loss vehicle fields."""
    for name in LOSS_OVERRIDES:
        if name in overrides:
            setattr(record, name, overrides[name])
    if overrides.get("condition"):
        record.condition = Condition.from_string(overrides["condition"])


def _pipeline(config: Config) -> AppraisalPipeline:
    return AppraisalPipeline(
        reference_date=config.reference_date,
        max_comp_distance=config.max_comp_distance,
    )


def _run_appraisal(args, config: Config):
    pipeline = _pipeline(config)
    record, _ = pipeline.process_report(Path(args.report_file).read_text(encoding="utf-8"), args.method)
    comps, overrides = load_comparables(Path(args.comparables_file))
    apply_overrides(record, overrides)
    return pipeline.appraise(record, comps, appraisal_id=args.appraisal_id)


# =============================================================================
# Commands
# =============================================================================

def cmd_extract(args, config: Config) -> int:
    """Extract and validate a loss vehicle from report text."""
    pipeline = _pipeline(config)
    text = Path(args.report_file).read_text(encoding="utf-8")
    record, validation = pipeline.process_report(text, args.method)
    output = {
        "vehicle": record.to_dict(),
        "validation": {name: result.to_dict() for name, result in validation.items()},
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_validate(args, config: Config) -> int:
    """Validate fields given on the command line."""
    fields = {
        name: getattr(args, name)
        for name in ("vin", "year", "mileage", "make", "model")
        if getattr(args, name) is not None
    }
    if not fields:
        print("Error: give at least one of --vin, --year, --mileage, --make, --model",
              file=sys.stderr)
        return 1

    results = _pipeline(config).validator.validate_all(fields)
    print(json.dumps({name: r.to_dict() for name, r in results.items()}, indent=2))
    return 0 if all(r.is_valid for r in results.values()) else 2


def cmd_analyze(args, config: Config) -> int:
    """Print the market analysis for a report and its comparables."""
    appraisal = _run_appraisal(args, config)
    if args.json:
        print(json.dumps(appraisal.to_dict(), indent=2))
        return 0

    analysis = appraisal.analysis
    print(f"Vehicle:        {appraisal.loss_vehicle.description or 'unknown'}")
    print(f"Comparables:    {analysis.comparables_count}")
    print(f"Market value:   {format_currency(analysis.calculated_market_value)}")
    print(f"Confidence:     {analysis.confidence_level} ({analysis.confidence_label.value})")
    print(f"Insurer value:  {format_currency(analysis.insurance_value)}")
    if analysis.insurance_value is not None:
        print(
            f"Difference:     {format_currency(analysis.value_difference)} "
            f"({format_percent(analysis.value_difference_percentage, signed=True)})"
        )
        print(f"Undervalued:    {'yes' if analysis.is_undervalued else 'no'}")
    for note in appraisal.notes:
        print(f"Note: {note}")
    return 0


def cmd_report(args, config: Config) -> int:
    """Write the valuation report PDF."""
    appraisal = _run_appraisal(args, config)
    output = Path(args.output) if args.output else Path(config.output_dir) / "valuation_report.pdf"
    result = ValuationReportGenerator().generate_report(appraisal, output)
    if isinstance(result, ReportSuccess):
        print(f"Report generated: {result.path}")
        return 0
    print(result.message, file=sys.stderr)
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    config = Config.load()

    parser = argparse.ArgumentParser(
        description="Total-loss vehicle appraisal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m reporting.cli extract reports/mitchell.txt
    python -m reporting.cli analyze reports/mitchell.txt comps.json
    python -m reporting.cli report reports/mitchell.txt comps.json -o valuation.pdf
        """,
    )
    parser.add_argument("--log-level", default=config.log_level, help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_report_args(sub):
        sub.add_argument("report_file", help="Path to extracted report text")
        sub.add_argument(
            "--method", default="standard", choices=["standard", "ocr", "hybrid"],
            help="How the report text was produced",
        )

    extract_parser = subparsers.add_parser("extract", help="Extract fields from report text")
    add_report_args(extract_parser)
    extract_parser.set_defaults(func=cmd_extract)

    validate_parser = subparsers.add_parser("validate", help="Validate vehicle fields")
    validate_parser.add_argument("--vin")
    validate_parser.add_argument("--year")
    validate_parser.add_argument("--mileage")
    validate_parser.add_argument("--make")
    validate_parser.add_argument("--model")
    validate_parser.set_defaults(func=cmd_validate)

    for name, func, help_text in (
        ("analyze", cmd_analyze, "Calculate market value from comparables"),
        ("report", cmd_report, "Generate the valuation report PDF"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        add_report_args(sub)
        sub.add_argument("comparables_file", help="Path to comparables JSON")
        sub.add_argument("--appraisal-id", dest="appraisal_id")
        if name == "analyze":
            sub.add_argument("--json", action="store_true", help="Print full JSON result")
        else:
            sub.add_argument("-o", "--output", help="Output PDF path")
        sub.set_defaults(func=func)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        return args.func(args, config)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        return 1
    except (ExtractionFailure, AggregationPreconditionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyError as e:
        print(f"Error: Missing field {e} in comparables file", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
