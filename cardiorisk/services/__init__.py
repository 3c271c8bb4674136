"""Services for the cardiovascular risk engine.

Services implement the scoring logic:
- risk_validation: age-band routing and band-specific input validation
- risk_coefficients: calibrated coefficient tables for both models
- risk_engine: ASCVD, PREVENT and pediatric scoring plus consolidation
- risk_recommendations: guidance text per consolidated level
"""

from cardiorisk.services.risk_engine import (
    ConsolidatedRisk,
    IncompleteModelPairError,
    RiskAssessment,
    RiskEngineService,
    RiskResult,
    assess,
    consolidate,
    get_risk_engine_service,
    reset_risk_engine_service,
    score_ascvd,
    score_prevent,
)
from cardiorisk.services.risk_recommendations import age_band_label, get_recommendations
from cardiorisk.services.risk_validation import (
    InvalidInputError,
    RiskInput,
    ValidationResult,
    classify_age_band,
    ensure_valid,
    validate_risk_input,
)

__all__ = [
    # Inputs and validation
    "RiskInput",
    "ValidationResult",
    "InvalidInputError",
    "classify_age_band",
    "validate_risk_input",
    "ensure_valid",
    # Scoring
    "RiskResult",
    "ConsolidatedRisk",
    "RiskAssessment",
    "IncompleteModelPairError",
    "score_ascvd",
    "score_prevent",
    "consolidate",
    "assess",
    # Service
    "RiskEngineService",
    "get_risk_engine_service",
    "reset_risk_engine_service",
    # Guidance
    "get_recommendations",
    "age_band_label",
]
