"""Coefficient tables for the cardiovascular risk models.

All calibrated constants used by the ASCVD-style and PREVENT-style
estimators live here, in a single table keyed by ``(model, sex, race)``.
Pediatric coefficients are keyed with ``race=None`` since race does not
enter the pediatric screening score.

The values are fixed assets. They are reproduced exactly as calibrated,
including the irregular cross terms (``sbp_age`` only for female/African
American, no ``smoker_age`` for male/African American).
"""

from dataclasses import dataclass
from types import MappingProxyType

from cardiorisk.schemas.base import Race, RiskModel, Sex


@dataclass(frozen=True)
class AscvdCoefficients:
    """Pooled-cohort log-linear coefficients for one (sex, race) group."""

    base: float
    age: float
    age_chol: float
    hdl: float
    sbp: float
    smoker: float
    diabetic: float
    constant: float
    sbp_age: float = 0.0
    smoker_age: float = 0.0


@dataclass(frozen=True)
class PediatricCoefficients:
    """Linear screening coefficients for one sex."""

    base: float
    chol: float
    bp: float
    smoker: float
    diab: float


@dataclass(frozen=True)
class PreventParameters:
    """Additive PREVENT-style model parameters."""

    base_age: float = 0.22
    chol_ratio: float = 0.35
    bp: float = 0.15
    diabetic_base: float = 1.8
    diabetic_hba1c: float = 0.05
    smoker: float = 1.2
    kidney: float = 0.02
    male_multiplier: float = 1.15


@dataclass(frozen=True)
class PediatricPreventScaling:
    """Multiplicative discounts applied by the PREVENT pediatric variant."""

    age: float = 0.8
    bp: float = 1.2
    smoker: float = 0.7
    diabetes: float = 1.1


@dataclass(frozen=True)
class RiskThresholds:
    """Upper bounds (exclusive) of the lower three risk categories."""

    low: float
    borderline: float
    high: float


# Baseline 10-year survival used by the pooled-cohort equation
ASCVD_BASELINE_SURVIVAL = 0.9533

# Elderly band adjustments
MAX_EFFECTIVE_AGE = 85
ELDERLY_ASCVD_MULTIPLIER = 1.25
ELDERLY_PREVENT_MULTIPLIER = 1.3

# Model ceilings for risk_percent
MODEL_MAX_RISK = MappingProxyType({
    RiskModel.ASCVD: 100.0,
    RiskModel.PREVENT: 50.0,
})

# Pediatric screening
PEDIATRIC_THRESHOLD = 0.05
PEDIATRIC_DEFAULT_CHOLESTEROL = 150.0
PEDIATRIC_PREVENT_SCALING = PediatricPreventScaling()

PREVENT_PARAMETERS = PreventParameters()

RISK_THRESHOLDS = MappingProxyType({
    RiskModel.ASCVD: RiskThresholds(low=5.0, borderline=7.5, high=20.0),
    RiskModel.PREVENT: RiskThresholds(low=5.0, borderline=10.0, high=20.0),
})


_ASCVD_TABLE = {
    (RiskModel.ASCVD, Sex.MALE, Race.WHITE): AscvdCoefficients(
        base=12.344, age=11.853, age_chol=-2.664, hdl=-7.990,
        sbp=1.769, smoker=7.837, smoker_age=-1.795, diabetic=0.658,
        constant=61.18,
    ),
    (RiskModel.ASCVD, Sex.MALE, Race.AFRICAN_AMERICAN): AscvdCoefficients(
        base=2.469, age=0.302, age_chol=0.0, hdl=-0.307,
        sbp=1.916, smoker=0.549, smoker_age=0.0, diabetic=0.645,
        constant=19.54,
    ),
    (RiskModel.ASCVD, Sex.FEMALE, Race.WHITE): AscvdCoefficients(
        base=-29.799, age=4.884, age_chol=0.0, hdl=-13.578,
        sbp=2.019, smoker=7.574, smoker_age=-1.665, diabetic=0.661,
        constant=-29.18,
    ),
    (RiskModel.ASCVD, Sex.FEMALE, Race.AFRICAN_AMERICAN): AscvdCoefficients(
        base=17.114, age=0.940, age_chol=0.0, hdl=-18.920,
        sbp=29.291, sbp_age=-6.432, smoker=0.691, diabetic=0.874,
        constant=86.61,
    ),
}

_PEDIATRIC_TABLE = {
    Sex.MALE: PediatricCoefficients(base=0.02, chol=0.0015, bp=0.001, smoker=0.08, diab=0.05),
    Sex.FEMALE: PediatricCoefficients(base=0.015, chol=0.0012, bp=0.0008, smoker=0.07, diab=0.04),
}

# Pediatric coefficients are shared by both model entry points so the two
# variants can never drift apart.
COEFFICIENT_TABLE = MappingProxyType({
    **_ASCVD_TABLE,
    **{
        (model, sex, None): coefficients
        for model in (RiskModel.ASCVD, RiskModel.PREVENT)
        for sex, coefficients in _PEDIATRIC_TABLE.items()
    },
})


def get_ascvd_coefficients(sex: Sex, race: Race) -> AscvdCoefficients:
    """Look up the pooled-cohort coefficients for a (sex, race) group.

    Raises:
        KeyError: If the group is not in the table.
    """
    return COEFFICIENT_TABLE[(RiskModel.ASCVD, Sex(sex), Race(race))]


def get_pediatric_coefficients(model: RiskModel, sex: Sex) -> PediatricCoefficients:
    """Look up pediatric screening coefficients for a model entry point."""
    return COEFFICIENT_TABLE[(RiskModel(model), Sex(sex), None)]
