"""Cardiovascular Risk Engine.

Scores a validated patient snapshot with two independent models and
merges their outputs into one patient-facing risk level:

- ASCVD-style pooled-cohort equation (log-linear hazard)
- PREVENT-style additive equation
- Pediatric linear screening score, used by both model entry points
  for patients under 18

All functions are pure. They read only their arguments and the fixed
coefficient tables, so they are safe to call concurrently.
"""

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from threading import Lock
from typing import Any, Callable

from cardiorisk.schemas.base import (
    AgeBand,
    ConsolidatedLevel,
    RiskClassification,
    RiskModel,
    Sex,
)
from cardiorisk.services.risk_coefficients import (
    ASCVD_BASELINE_SURVIVAL,
    ELDERLY_ASCVD_MULTIPLIER,
    ELDERLY_PREVENT_MULTIPLIER,
    MAX_EFFECTIVE_AGE,
    MODEL_MAX_RISK,
    PEDIATRIC_DEFAULT_CHOLESTEROL,
    PEDIATRIC_PREVENT_SCALING,
    PEDIATRIC_THRESHOLD,
    PREVENT_PARAMETERS,
    RISK_THRESHOLDS,
    get_ascvd_coefficients,
    get_pediatric_coefficients,
)
from cardiorisk.services.risk_validation import RiskInput, ensure_valid

logger = logging.getLogger(__name__)

ASCVD_FORMULA_NAME = "ASCVD Pooled Cohort Equations"
PREVENT_FORMULA_NAME = "PREVENT Equations"
PEDIATRIC_FORMULA_NAME = "Pediatric Risk Estimation"
PEDIATRIC_DISCLAIMER = "Pediatric formulas are screening tools only"
CONSOLIDATION_METHODOLOGY = "Combined ASCVD and PREVENT assessment"


@dataclass(frozen=True)
class RiskResult:
    """Output of a single model run."""

    model: RiskModel
    risk_percent: float
    classification: str
    formula_name: str
    disclaimer: str | None = None
    age_band: AgeBand | None = None


@dataclass(frozen=True)
class ConsolidatedRisk:
    """Merge of one ASCVD and one PREVENT result for the same patient."""

    risk_level: ConsolidatedLevel
    ascvd_risk: float
    prevent_risk: float
    max_risk: float
    methodology: str = CONSOLIDATION_METHODOLOGY


@dataclass(frozen=True)
class RiskAssessment:
    """Full pipeline output for one RiskInput."""

    risk_input: RiskInput
    age_band: AgeBand
    ascvd: RiskResult
    prevent: RiskResult
    consolidated: ConsolidatedRisk


class IncompleteModelPairError(ValueError):
    """Raised when consolidation is attempted without both model results."""


# ============================================================================
# Shared helpers
# ============================================================================

def _clamp(value: float, upper: float) -> float:
    return min(max(value, 0.0), upper)


def round_percent(value: float) -> float:
    """Round a percentage to one decimal, exact halves rounding up (9.25 -> 9.3)."""
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def effective_age(age: int, band: AgeBand) -> int:
    """Age used by the adult formulas, capped at 85 for the elderly band."""
    if band == AgeBand.ELDERLY:
        return min(age, MAX_EFFECTIVE_AGE)
    return age


def _classify(risk_percent: float, model: RiskModel, labels: tuple[RiskClassification, ...]) -> RiskClassification:
    thresholds = RISK_THRESHOLDS[model]
    if risk_percent < thresholds.low:
        return labels[0]
    if risk_percent < thresholds.borderline:
        return labels[1]
    if risk_percent < thresholds.high:
        return labels[2]
    return labels[3]


def classify_ascvd(risk_percent: float) -> RiskClassification:
    """Classify an ASCVD percentage (<5, <7.5, <20, >=20)."""
    return _classify(
        risk_percent,
        RiskModel.ASCVD,
        (
            RiskClassification.LOW,
            RiskClassification.BORDERLINE,
            RiskClassification.INTERMEDIATE,
            RiskClassification.HIGH,
        ),
    )


def classify_prevent(risk_percent: float) -> RiskClassification:
    """Classify a PREVENT percentage (<5, <10, <20, >=20)."""
    return _classify(
        risk_percent,
        RiskModel.PREVENT,
        (
            RiskClassification.LOW,
            RiskClassification.BORDERLINE_INTERMEDIATE,
            RiskClassification.INTERMEDIATE,
            RiskClassification.HIGH,
        ),
    )


def classify_pediatric(risk_fraction: float) -> RiskClassification:
    """Classify a pediatric screening fraction against the 5% threshold."""
    if risk_fraction > PEDIATRIC_THRESHOLD:
        return RiskClassification.ELEVATED
    return RiskClassification.NORMAL


# ============================================================================
# Pediatric Screening Score
# ============================================================================

def pediatric_risk_fraction(risk_input: RiskInput, model: RiskModel) -> float:
    """Linear pediatric screening score as a fraction (not a percentage).

    The PREVENT variant scales the age, BP, smoker and diabetes terms
    and drops the cholesterol term.
    """
    coeff = get_pediatric_coefficients(model, risk_input.sex)

    if model == RiskModel.ASCVD:
        cholesterol = risk_input.total_cholesterol or PEDIATRIC_DEFAULT_CHOLESTEROL
        fraction = coeff.base * risk_input.age
        fraction += coeff.chol * cholesterol
        fraction += coeff.bp * risk_input.systolic_bp
        if risk_input.is_smoker:
            fraction += coeff.smoker
        if risk_input.is_diabetic:
            fraction += coeff.diab
        return fraction

    scaling = PEDIATRIC_PREVENT_SCALING
    fraction = coeff.base * risk_input.age * scaling.age
    fraction += coeff.bp * risk_input.systolic_bp * scaling.bp
    if risk_input.is_smoker:
        fraction += coeff.smoker * scaling.smoker
    if risk_input.is_diabetic:
        fraction += coeff.diab * scaling.diabetes
    return fraction


def _score_pediatric(risk_input: RiskInput, model: RiskModel) -> RiskResult:
    fraction = pediatric_risk_fraction(risk_input, model)
    risk_percent = _clamp(fraction * 100, MODEL_MAX_RISK[model])

    return RiskResult(
        model=model,
        risk_percent=round_percent(risk_percent),
        classification=classify_pediatric(fraction),
        formula_name=PEDIATRIC_FORMULA_NAME,
        disclaimer=PEDIATRIC_DISCLAIMER,
        age_band=AgeBand.PEDIATRIC,
    )


# ============================================================================
# ASCVD Pooled Cohort Equation
# ============================================================================

def ascvd_linear_predictor(risk_input: RiskInput, age: float) -> float:
    """Weighted log-linear sum for the pooled-cohort equation.

    Args:
        risk_input: Validated adult or elderly input.
        age: Effective age in years.

    Returns:
        The individual sum before mean-centering.
    """
    coeff = get_ascvd_coefficients(risk_input.sex, risk_input.race)

    ln_age = math.log(age)
    ln_total_chol = math.log(risk_input.total_cholesterol)
    ln_hdl = math.log(risk_input.hdl_cholesterol)
    ln_sbp = math.log(risk_input.systolic_bp)

    total = coeff.base
    total += coeff.age * ln_age
    total += coeff.age_chol * ln_age * ln_total_chol
    total += coeff.hdl * ln_hdl

    # Treated and untreated BP share one coefficient; sbp_age is only
    # non-zero for the female/African American group.
    total += coeff.sbp * ln_sbp
    total += coeff.sbp_age * ln_age * ln_sbp

    if risk_input.is_smoker:
        total += coeff.smoker
        total += coeff.smoker_age * ln_age
    if risk_input.is_diabetic:
        total += coeff.diabetic

    return total


def ascvd_risk_from_sum(linear_predictor: float, constant: float, band: AgeBand) -> float:
    """Convert a linear predictor into an (unrounded) risk percentage."""
    risk_percent = (1 - ASCVD_BASELINE_SURVIVAL ** math.exp(linear_predictor - constant)) * 100
    if band == AgeBand.ELDERLY:
        risk_percent *= ELDERLY_ASCVD_MULTIPLIER
    return _clamp(risk_percent, MODEL_MAX_RISK[RiskModel.ASCVD])


def score_ascvd(risk_input: RiskInput) -> RiskResult:
    """Calculate ASCVD-style 10-year risk.

    Args:
        risk_input: Patient snapshot.

    Returns:
        RiskResult for the ASCVD model.

    Raises:
        InvalidInputError: If the input fails validation for its age band.
    """
    validation = ensure_valid(risk_input)
    return _score_ascvd(validation.normalized, validation.band)


def _score_ascvd(risk_input: RiskInput, band: AgeBand) -> RiskResult:
    if band == AgeBand.PEDIATRIC:
        return _score_pediatric(risk_input, RiskModel.ASCVD)

    coeff = get_ascvd_coefficients(risk_input.sex, risk_input.race)
    age = effective_age(risk_input.age, band)
    linear_predictor = ascvd_linear_predictor(risk_input, age)
    risk_percent = ascvd_risk_from_sum(linear_predictor, coeff.constant, band)

    logger.debug(
        f"ASCVD {band.value} sum={linear_predictor:.4f} risk={risk_percent:.4f}%"
    )

    return RiskResult(
        model=RiskModel.ASCVD,
        risk_percent=round_percent(risk_percent),
        classification=classify_ascvd(risk_percent),
        formula_name=ASCVD_FORMULA_NAME,
        age_band=band,
    )


# ============================================================================
# PREVENT Equation
# ============================================================================

def prevent_base_risk(risk_input: RiskInput, age: float) -> float:
    """Additive PREVENT terms before the sex and elderly multipliers."""
    params = PREVENT_PARAMETERS
    cholesterol_ratio = risk_input.total_cholesterol / risk_input.hdl_cholesterol

    risk = params.base_age * math.log(age) * age
    risk += params.chol_ratio * cholesterol_ratio
    risk += params.bp * (risk_input.systolic_bp / 20)

    if risk_input.is_diabetic:
        risk += params.diabetic_base
        if risk_input.hba1c:
            risk += risk_input.hba1c * params.diabetic_hba1c
    if risk_input.is_smoker:
        risk += params.smoker

    risk += (120 - risk_input.egfr) * params.kidney
    return risk


def score_prevent(risk_input: RiskInput) -> RiskResult:
    """Calculate PREVENT-style 10-year risk, capped at 50%.

    Raises:
        InvalidInputError: If the input fails validation for its age band.
    """
    validation = ensure_valid(risk_input)
    return _score_prevent(validation.normalized, validation.band)


def _score_prevent(risk_input: RiskInput, band: AgeBand) -> RiskResult:
    if band == AgeBand.PEDIATRIC:
        return _score_pediatric(risk_input, RiskModel.PREVENT)

    age = effective_age(risk_input.age, band)
    risk_percent = prevent_base_risk(risk_input, age)

    if Sex(risk_input.sex) == Sex.MALE:
        risk_percent *= PREVENT_PARAMETERS.male_multiplier
    if band == AgeBand.ELDERLY:
        risk_percent *= ELDERLY_PREVENT_MULTIPLIER

    risk_percent = _clamp(risk_percent, MODEL_MAX_RISK[RiskModel.PREVENT])

    logger.debug(f"PREVENT {band.value} risk={risk_percent:.4f}%")

    return RiskResult(
        model=RiskModel.PREVENT,
        risk_percent=round_percent(risk_percent),
        classification=classify_prevent(risk_percent),
        formula_name=PREVENT_FORMULA_NAME,
        age_band=band,
    )


# ============================================================================
# Consolidation
# ============================================================================

CLASSIFICATION_ORDINALS = {
    RiskClassification.LOW.value: 1,
    RiskClassification.NORMAL.value: 1,
    RiskClassification.BORDERLINE.value: 2,
    RiskClassification.BORDERLINE_INTERMEDIATE.value: 2,
    RiskClassification.INTERMEDIATE.value: 3,
    RiskClassification.HIGH.value: 4,
    RiskClassification.ELEVATED.value: 4,
}


def classification_ordinal(classification: str) -> int:
    """Map a classification label to its 1-4 severity.

    Unknown labels default to 1 and are logged, since they point at
    drift between the classifiers and this table.
    """
    label = classification.value if isinstance(classification, RiskClassification) else classification
    ordinal = CLASSIFICATION_ORDINALS.get(label)
    if ordinal is None:
        logger.warning(f"Unknown risk classification '{label}', treating as Low")
        return 1
    return ordinal


def consolidate(ascvd: RiskResult | None, prevent: RiskResult | None) -> ConsolidatedRisk:
    """Merge ASCVD and PREVENT results into one risk level.

    High if either model is in its top category or any risk >= 20%,
    Moderate if either is Intermediate or any risk >= 10%, else Low.

    Raises:
        IncompleteModelPairError: If a result is missing or the models are
            not one ASCVD and one PREVENT result.
    """
    if ascvd is None or prevent is None:
        raise IncompleteModelPairError("Consolidation requires both ASCVD and PREVENT results")
    if ascvd.model != RiskModel.ASCVD or prevent.model != RiskModel.PREVENT:
        raise IncompleteModelPairError(
            f"Expected (ascvd, prevent) results, got ({ascvd.model}, {prevent.model})"
        )

    max_ordinal = max(
        classification_ordinal(ascvd.classification),
        classification_ordinal(prevent.classification),
    )
    max_risk = max(ascvd.risk_percent, prevent.risk_percent)

    if max_ordinal >= 4 or max_risk >= 20:
        level = ConsolidatedLevel.HIGH
    elif max_ordinal >= 3 or max_risk >= 10:
        level = ConsolidatedLevel.MODERATE
    else:
        level = ConsolidatedLevel.LOW

    return ConsolidatedRisk(
        risk_level=level,
        ascvd_risk=ascvd.risk_percent,
        prevent_risk=prevent.risk_percent,
        max_risk=max_risk,
    )


def assess(risk_input: RiskInput) -> RiskAssessment:
    """Run the full pipeline: validate, score both models, consolidate.

    Raises:
        InvalidInputError: If the input fails validation. No partial
            result is produced.
    """
    validation = ensure_valid(risk_input)
    ascvd = _score_ascvd(validation.normalized, validation.band)
    prevent = _score_prevent(validation.normalized, validation.band)

    return RiskAssessment(
        risk_input=risk_input,
        age_band=validation.band,
        ascvd=ascvd,
        prevent=prevent,
        consolidated=consolidate(ascvd, prevent),
    )


# ============================================================================
# Risk Engine Service
# ============================================================================

class RiskEngineService:
    """Service wrapper over the risk engine functions.

    Usage:
        service = get_risk_engine_service()
        assessment = service.assess(RiskInput(age=55, sex=Sex.MALE, ...))
        result = service.score("prevent", risk_input)
    """

    MODELS: dict[str, Callable[[RiskInput], RiskResult]] = {
        RiskModel.ASCVD.value: score_ascvd,
        RiskModel.PREVENT.value: score_prevent,
    }

    def get_available_models(self) -> dict[str, str]:
        """Get available models with their formula names."""
        return {
            RiskModel.ASCVD.value: ASCVD_FORMULA_NAME,
            RiskModel.PREVENT.value: PREVENT_FORMULA_NAME,
        }

    def score(self, model: str, risk_input: RiskInput) -> RiskResult:
        """Run a single model.

        Raises:
            ValueError: If the model is unknown.
            InvalidInputError: If the input fails validation.
        """
        model_name = model.lower()
        if model_name not in self.MODELS:
            available = ", ".join(self.MODELS.keys())
            raise ValueError(f"Unknown risk model: {model}. Available: {available}")
        return self.MODELS[model_name](risk_input)

    def assess(self, risk_input: RiskInput) -> RiskAssessment:
        return assess(risk_input)

    def consolidate(self, ascvd: RiskResult | None, prevent: RiskResult | None) -> ConsolidatedRisk:
        return consolidate(ascvd, prevent)

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about available models."""
        return {
            "total_models": len(self.MODELS),
            "model_list": list(self.MODELS.keys()),
            "age_bands": [band.value for band in AgeBand],
        }


# Singleton instance and lock
_risk_engine_service: RiskEngineService | None = None
_risk_engine_lock = Lock()


def get_risk_engine_service() -> RiskEngineService:
    """Get the singleton RiskEngineService instance."""
    global _risk_engine_service

    if _risk_engine_service is None:
        with _risk_engine_lock:
            if _risk_engine_service is None:
                logger.info("Creating singleton RiskEngineService instance")
                _risk_engine_service = RiskEngineService()

    return _risk_engine_service


def reset_risk_engine_service() -> None:
    """Reset the singleton instance (for testing)."""
    global _risk_engine_service
    with _risk_engine_lock:
        _risk_engine_service = None
