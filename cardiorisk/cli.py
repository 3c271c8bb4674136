#!/usr/bin/env python3
"""
Cardiovascular Risk Engine - Command Line Interface

Score one patient snapshot with both risk models and print the
consolidated risk level.

Usage:
    cardiorisk --sample                                 # Built-in adult patient
    cardiorisk --age 55 --sex male --total-chol 213 \\
        --hdl 50 --sbp 120 --egfr 90                    # Explicit input
    cardiorisk --sample --json                          # Machine-readable output
"""

import argparse
import json
import sys
from typing import Any

from cardiorisk.core.logging import configure_logging
from cardiorisk.schemas.base import Race, Sex
from cardiorisk.services.risk_engine import RiskAssessment, assess
from cardiorisk.services.risk_recommendations import age_band_label, get_recommendations
from cardiorisk.services.risk_validation import InvalidInputError, RiskInput

EXIT_INVALID_INPUT = 2

SAMPLE_INPUT = RiskInput(
    age=55,
    sex=Sex.MALE,
    race=Race.WHITE,
    total_cholesterol=213,
    hdl_cholesterol=50,
    systolic_bp=120,
    egfr=90,
)


# ============================================================================
# Display Functions
# ============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    END = '\033[0m'
    GRAY = '\033[90m'


LEVEL_COLORS = {
    "Low": Colors.GREEN,
    "Moderate": Colors.YELLOW,
    "High": Colors.RED,
}


def print_header(text: str, char: str = "="):
    """Print a formatted header."""
    width = 60
    print()
    print(f"{Colors.BOLD}{Colors.CYAN}{char * width}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text.center(width)}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{char * width}{Colors.END}")


def print_item(label: str, value: str, indent: int = 2):
    """Print a labeled item."""
    spaces = " " * indent
    print(f"{spaces}{Colors.GRAY}{label}:{Colors.END} {value}")


def print_error(text: str):
    print(f"  {Colors.RED}✗{Colors.END} {text}")


def assessment_to_dict(assessment: RiskAssessment) -> dict[str, Any]:
    """Serialize an assessment for --json output."""
    def result_dict(result):
        return {
            "model": result.model.value,
            "riskPercent": result.risk_percent,
            "classification": str(getattr(result.classification, "value", result.classification)),
            "formulaName": result.formula_name,
            "disclaimer": result.disclaimer,
        }

    consolidated = assessment.consolidated
    return {
        "ageBand": assessment.age_band.value,
        "ascvd": result_dict(assessment.ascvd),
        "prevent": result_dict(assessment.prevent),
        "consolidated": {
            "riskLevel": consolidated.risk_level.value,
            "ascvdRisk": consolidated.ascvd_risk,
            "preventRisk": consolidated.prevent_risk,
            "maxRisk": consolidated.max_risk,
            "methodology": consolidated.methodology,
        },
        "recommendations": get_recommendations(consolidated.risk_level),
    }


def display_assessment(assessment: RiskAssessment):
    """Print an assessment in human-readable form."""
    print_header(age_band_label(assessment.age_band).upper())

    for result in (assessment.ascvd, assessment.prevent):
        print()
        print(f"  {Colors.BOLD}{result.formula_name}{Colors.END} ({result.model.value})")
        print_item("Risk", f"{result.risk_percent:.1f}%", indent=4)
        print_item("Classification", str(getattr(result.classification, "value", result.classification)), indent=4)
        if result.disclaimer:
            print_item("Note", result.disclaimer, indent=4)

    consolidated = assessment.consolidated
    color = LEVEL_COLORS.get(consolidated.risk_level.value, "")
    print()
    print(f"  {Colors.BOLD}Consolidated risk:{Colors.END} {color}{consolidated.risk_level.value}{Colors.END}")
    print_item("Max risk", f"{consolidated.max_risk:.1f}%", indent=4)
    print_item("Methodology", consolidated.methodology, indent=4)

    print()
    for recommendation in get_recommendations(consolidated.risk_level):
        print(f"  - {recommendation}")


# ============================================================================
# Main Entry Point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cardiorisk",
        description="Cardiovascular Risk Engine - ASCVD and PREVENT scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cardiorisk --sample
  cardiorisk --age 12 --sex female --sbp 105
  cardiorisk --age 67 --sex female --race africanAmerican --total-chol 220 \\
      --hdl 45 --sbp 145 --egfr 70 --diabetic --hba1c 7.2 --json
""",
    )
    parser.add_argument('--sample', '-s', action='store_true', help='Use the built-in sample patient')
    parser.add_argument('--age', type=int, help='Age in years (1-130)')
    parser.add_argument('--sex', choices=[s.value for s in Sex], default=Sex.MALE.value)
    parser.add_argument('--race', choices=[r.value for r in Race], default=Race.WHITE.value)
    parser.add_argument('--total-chol', type=float, help='Total cholesterol (mg/dL)')
    parser.add_argument('--hdl', type=float, help='HDL cholesterol (mg/dL)')
    parser.add_argument('--sbp', type=float, help='Systolic blood pressure (mmHg)')
    parser.add_argument('--bp-meds', action='store_true', help='On blood pressure medication')
    parser.add_argument('--diabetic', action='store_true', help='Has diabetes')
    parser.add_argument('--smoker', action='store_true', help='Current smoker')
    parser.add_argument('--egfr', type=float, help='eGFR (mL/min/1.73m²)')
    parser.add_argument('--hba1c', type=float, help='HbA1c (%%), required if diabetic')
    parser.add_argument('--json', action='store_true', help='Print JSON instead of formatted text')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def input_from_args(args: argparse.Namespace) -> RiskInput:
    if args.sample:
        return SAMPLE_INPUT
    return RiskInput(
        age=args.age,
        sex=Sex(args.sex),
        race=Race(args.race),
        total_cholesterol=args.total_chol,
        hdl_cholesterol=args.hdl,
        systolic_bp=args.sbp,
        on_bp_medication=args.bp_meds,
        is_diabetic=args.diabetic,
        is_smoker=args.smoker,
        egfr=args.egfr,
        hba1c=args.hba1c,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else "WARNING")

    if not args.sample and args.age is None:
        parser.error("--age is required unless --sample is given")

    try:
        assessment = assess(input_from_args(args))
    except InvalidInputError as e:
        if args.json:
            print(json.dumps({"errors": e.errors}, indent=2))
        else:
            print_header("INVALID INPUT")
            for field_name, message in sorted(e.errors.items()):
                print_error(f"{field_name}: {message}")
        return EXIT_INVALID_INPUT

    if args.json:
        print(json.dumps(assessment_to_dict(assessment), indent=2))
    else:
        display_assessment(assessment)
    return 0


if __name__ == "__main__":
    sys.exit(main())
