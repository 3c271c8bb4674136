"""Cardiovascular risk API endpoints."""

import logging
import time

from fastapi import APIRouter, HTTPException, Request, status

from cardiorisk.core.audit import AuditAction, log_assessment, log_audit, log_validation_failure
from cardiorisk.schemas.base import AgeBand, RiskClassification, RiskModel
from cardiorisk.schemas.risk import (
    AssessmentResponse,
    ConsolidatedRiskResponse,
    ConsolidateRequest,
    ModelInfo,
    ModelListResponse,
    RiskInputRequest,
    RiskResultSchema,
    ValidationResponse,
)
from cardiorisk.services.risk_coefficients import MODEL_MAX_RISK, RISK_THRESHOLDS
from cardiorisk.services.risk_engine import (
    ASCVD_FORMULA_NAME,
    PREVENT_FORMULA_NAME,
    IncompleteModelPairError,
    get_risk_engine_service,
)
from cardiorisk.services.risk_recommendations import AGE_BAND_LABELS, age_band_label, get_recommendations
from cardiorisk.services.risk_validation import InvalidInputError, validate_risk_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/risk", tags=["Risk"])


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _invalid_input(error: InvalidInputError, request: Request, band: AgeBand) -> HTTPException:
    log_validation_failure(band.value, error.fields, ip_address=_client_ip(request))
    return HTTPException(
        status_code=422,
        detail={"message": "Invalid risk input", "errors": error.errors},
    )


@router.get(
    "/models",
    response_model=ModelListResponse,
    summary="List risk models",
    description="Describe both risk models, their thresholds and the age bands.",
)
async def list_models() -> ModelListResponse:
    """List available risk models with thresholds and categories."""
    models = [
        ModelInfo(
            name=RiskModel.ASCVD,
            formula_name=ASCVD_FORMULA_NAME,
            max_risk=MODEL_MAX_RISK[RiskModel.ASCVD],
            thresholds=vars(RISK_THRESHOLDS[RiskModel.ASCVD]),
            classifications=[
                RiskClassification.LOW.value,
                RiskClassification.BORDERLINE.value,
                RiskClassification.INTERMEDIATE.value,
                RiskClassification.HIGH.value,
            ],
        ),
        ModelInfo(
            name=RiskModel.PREVENT,
            formula_name=PREVENT_FORMULA_NAME,
            max_risk=MODEL_MAX_RISK[RiskModel.PREVENT],
            thresholds=vars(RISK_THRESHOLDS[RiskModel.PREVENT]),
            classifications=[
                RiskClassification.LOW.value,
                RiskClassification.BORDERLINE_INTERMEDIATE.value,
                RiskClassification.INTERMEDIATE.value,
                RiskClassification.HIGH.value,
            ],
        ),
    ]

    return ModelListResponse(
        models=models,
        age_bands={band.value: label for band, label in AGE_BAND_LABELS.items()},
        total_count=len(models),
    )


@router.post(
    "/validate",
    response_model=ValidationResponse,
    summary="Validate a risk input",
    description="Resolve the age band and check the fields it requires. Invalid input still returns 200.",
)
async def validate_input(payload: RiskInputRequest, request: Request) -> ValidationResponse:
    """Validate input without scoring it."""
    result = validate_risk_input(payload.to_risk_input())

    log_audit(
        action=AuditAction.VALIDATE,
        resource_type="risk_input",
        ip_address=_client_ip(request),
        details={"age_band": result.band.value, "fields": sorted(result.errors)},
        success=result.is_valid,
    )

    return ValidationResponse(
        is_valid=result.is_valid,
        age_band=result.band,
        age_band_label=age_band_label(result.band),
        errors=result.errors,
    )


@router.post(
    "/assess",
    response_model=AssessmentResponse,
    summary="Run a full risk assessment",
    description="Validate, score with both models and consolidate into one risk level.",
)
async def assess_risk(payload: RiskInputRequest, request: Request) -> AssessmentResponse:
    """Run both models and consolidate.

    Returns 422 with a field -> message map if the input is invalid;
    no partial score is returned.
    """
    risk_input = payload.to_risk_input()
    service = get_risk_engine_service()

    start_time = time.perf_counter()
    try:
        assessment = service.assess(risk_input)
    except InvalidInputError as e:
        raise _invalid_input(e, request, validate_risk_input(risk_input).band) from e
    calculation_time_ms = (time.perf_counter() - start_time) * 1000

    level = assessment.consolidated.risk_level
    log_assessment(assessment.age_band.value, level.value, ip_address=_client_ip(request))

    return AssessmentResponse.from_assessment(
        assessment,
        age_band_label=age_band_label(assessment.age_band),
        recommendations=get_recommendations(level),
        calculation_time_ms=round(calculation_time_ms, 3),
    )


async def _score_single(model: RiskModel, payload: RiskInputRequest, request: Request) -> RiskResultSchema:
    risk_input = payload.to_risk_input()
    try:
        result = get_risk_engine_service().score(model.value, risk_input)
    except InvalidInputError as e:
        raise _invalid_input(e, request, validate_risk_input(risk_input).band) from e

    log_audit(
        action=AuditAction.SCORE,
        resource_type=f"{model.value}_risk",
        ip_address=_client_ip(request),
        details={"age_band": result.age_band.value if result.age_band else None},
    )
    return RiskResultSchema.from_result(result)


@router.post(
    "/ascvd",
    response_model=RiskResultSchema,
    summary="Score with the ASCVD-style model",
)
async def score_ascvd_endpoint(payload: RiskInputRequest, request: Request) -> RiskResultSchema:
    return await _score_single(RiskModel.ASCVD, payload, request)


@router.post(
    "/prevent",
    response_model=RiskResultSchema,
    summary="Score with the PREVENT-style model",
)
async def score_prevent_endpoint(payload: RiskInputRequest, request: Request) -> RiskResultSchema:
    return await _score_single(RiskModel.PREVENT, payload, request)


@router.post(
    "/consolidate",
    response_model=ConsolidatedRiskResponse,
    summary="Consolidate two model results",
    description="Merge one ASCVD and one PREVENT result into a Low/Moderate/High level.",
)
async def consolidate_results(payload: ConsolidateRequest, request: Request) -> ConsolidatedRiskResponse:
    """Consolidate already-computed results."""
    try:
        consolidated = get_risk_engine_service().consolidate(
            payload.ascvd.to_result(),
            payload.prevent.to_result(),
        )
    except IncompleteModelPairError as e:
        logger.warning(f"Rejected consolidation request: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    log_audit(
        action=AuditAction.CONSOLIDATE,
        resource_type="risk_assessment",
        ip_address=_client_ip(request),
        details={"risk_level": consolidated.risk_level.value},
    )

    response = ConsolidatedRiskResponse.from_consolidated(consolidated)
    response.recommendations = get_recommendations(consolidated.risk_level)
    return response
