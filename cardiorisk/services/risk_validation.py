"""Input validation and age-band routing for the risk engine.

Every log and division argument used by the formulas is made strictly
positive by the range checks here (age >= 1, total cholesterol >= 100,
HDL >= 20, systolic BP >= 50), so scoring must only run on the normalized
copy that ``ensure_valid`` returns.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from cardiorisk.schemas.base import AgeBand, Race, Sex

logger = logging.getLogger(__name__)

MIN_AGE = 1
MAX_AGE = 130
ADULT_AGE = 18
ELDERLY_AGE = 80


@dataclass(frozen=True)
class RiskInput:
    """Patient snapshot submitted for one assessment.

    Only the fields required by the resolved age band need to be set;
    the rest are ignored for that band.
    """

    age: int
    sex: Sex
    race: Race = Race.WHITE
    total_cholesterol: float | None = None
    hdl_cholesterol: float | None = None
    systolic_bp: float | None = None
    on_bp_medication: bool = False
    is_diabetic: bool = False
    is_smoker: bool = False
    egfr: float | None = None
    hba1c: float | None = None


def parse_number(value: Any) -> float | None:
    """Parse an int, float or numeric string into a finite float.

    Returns None for missing, boolean, non-numeric or non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _parse_enum(enum_cls: type[Enum], value: Any) -> Any:
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class FieldRange:
    """Inclusive numeric range with the message shown when violated."""

    low: float
    high: float
    message: str

    def contains(self, value: Any) -> bool:
        number = parse_number(value)
        return number is not None and self.low <= number <= self.high


AGE_MESSAGE = "Enter valid age (1-130 years)"
SEX_MESSAGE = "Select sex (male or female)"
RACE_MESSAGE = "Select race (white or africanAmerican)"

NUMERIC_FIELDS = ("total_cholesterol", "hdl_cholesterol", "systolic_bp", "egfr", "hba1c")

PEDIATRIC_RANGES = {
    "systolic_bp": FieldRange(50, 150, "BP must be 50-150 mmHg for children"),
}

ADULT_RANGES = {
    "total_cholesterol": FieldRange(100, 400, "Total cholesterol must be 100-400 mg/dL"),
    "hdl_cholesterol": FieldRange(20, 100, "HDL must be 20-100 mg/dL"),
    "systolic_bp": FieldRange(70, 250, "Systolic BP must be 70-250 mmHg"),
    "egfr": FieldRange(15, 120, "eGFR must be 15-120 mL/min/1.73m²"),
}

HBA1C_RANGE = FieldRange(4, 15, "HbA1c must be 4-15%")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a RiskInput for its age band.

    ``normalized`` is set only for valid input: a copy with the age in
    whole years, numeric fields as floats and sex/race as enum members.
    Scorers compute from it, never from the raw input.
    """

    band: AgeBand
    errors: dict[str, str] = field(default_factory=dict)
    normalized: RiskInput | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors


class InvalidInputError(ValueError):
    """Raised when scoring is attempted on input that failed validation.

    Attributes:
        errors: Mapping of field name to human-readable violation message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__(f"Invalid risk input: {', '.join(sorted(self.errors))}")

    @property
    def fields(self) -> list[str]:
        return sorted(self.errors)


def _parse_age(age: Any) -> int | None:
    """Parse an age into whole years, or None if unparsable."""
    if isinstance(age, int) and not isinstance(age, bool):
        return age
    if not isinstance(age, (str, float)):
        return None
    years = parse_number(age)
    if years is None:
        return None
    # Partial years are truncated
    return int(years)


def classify_age_band(age: Any) -> AgeBand:
    """Classify an age into the band that drives validation and scoring.

    Args:
        age: Age in years. Numeric strings and floats are accepted.

    Returns:
        The AgeBand. Unparsable ages and ages outside 1-130 are INVALID.
    """
    years = _parse_age(age)
    if years is None or years < MIN_AGE or years > MAX_AGE:
        return AgeBand.INVALID
    if years < ADULT_AGE:
        return AgeBand.PEDIATRIC
    if years < ELDERLY_AGE:
        return AgeBand.ADULT
    return AgeBand.ELDERLY


def validate_risk_input(risk_input: RiskInput, band: AgeBand | None = None) -> ValidationResult:
    """Validate the subset of RiskInput fields relevant to an age band.

    Validation failures are returned, never raised.

    Args:
        risk_input: The patient snapshot.
        band: Pre-computed age band. Derived from ``risk_input.age`` if omitted.

    Returns:
        ValidationResult with the band and a field -> message map of violations.
    """
    if band is None:
        band = classify_age_band(risk_input.age)

    if band == AgeBand.INVALID:
        return ValidationResult(band=band, errors={"age": AGE_MESSAGE})

    errors: dict[str, str] = {}

    sex = _parse_enum(Sex, risk_input.sex)
    if sex is None:
        errors["sex"] = SEX_MESSAGE

    race = _parse_enum(Race, risk_input.race)
    if band == AgeBand.PEDIATRIC:
        ranges = PEDIATRIC_RANGES
    else:
        ranges = ADULT_RANGES
        if race is None:
            errors["race"] = RACE_MESSAGE

    for field_name, field_range in ranges.items():
        if not field_range.contains(getattr(risk_input, field_name)):
            errors[field_name] = field_range.message

    if band != AgeBand.PEDIATRIC and risk_input.is_diabetic:
        if not HBA1C_RANGE.contains(risk_input.hba1c):
            errors["hba1c"] = HBA1C_RANGE.message

    if errors:
        logger.debug(f"Validation failed for {band.value} input: {sorted(errors)}")
        return ValidationResult(band=band, errors=errors)

    # Race is unused by the pediatric score, so an unparsable value is kept
    normalized = replace(
        risk_input,
        age=_parse_age(risk_input.age),
        sex=sex,
        race=race if race is not None else risk_input.race,
        **{name: parse_number(getattr(risk_input, name)) for name in NUMERIC_FIELDS},
    )
    return ValidationResult(band=band, errors=errors, normalized=normalized)


def ensure_valid(risk_input: RiskInput) -> ValidationResult:
    """Validate input and return the result with its normalized copy.

    Raises:
        InvalidInputError: If any required field is missing or out of range.
    """
    result = validate_risk_input(risk_input)
    if not result.is_valid:
        raise InvalidInputError(result.errors)
    return result
