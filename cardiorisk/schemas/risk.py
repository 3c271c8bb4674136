"""Request and response schemas for the risk API.

Field aliases follow the camelCase names used by the web client
(``totalCholesterol``, ``systolicBP``, ...). Snake_case names are
accepted on input as well.
"""

from pydantic import BaseModel, ConfigDict, Field

from cardiorisk.schemas.base import AgeBand, ConsolidatedLevel, Race, RiskModel, Sex
from cardiorisk.services.risk_engine import ConsolidatedRisk, RiskAssessment, RiskResult
from cardiorisk.services.risk_validation import RiskInput


class CamelModel(BaseModel):
    """Base model accepting both alias and field names."""

    model_config = ConfigDict(populate_by_name=True)


# ==============================================================================
# Requests
# ==============================================================================


class RiskInputRequest(CamelModel):
    """Patient snapshot submitted for one assessment."""

    age: int = Field(..., description="Age in years (1-130)")
    sex: Sex = Field(..., description="male or female")
    race: Race = Field(default=Race.WHITE, description="white or africanAmerican")
    total_cholesterol: float | None = Field(
        None, alias="totalCholesterol", description="Total cholesterol in mg/dL (100-400)"
    )
    hdl_cholesterol: float | None = Field(
        None, alias="hdlCholesterol", description="HDL cholesterol in mg/dL (20-100)"
    )
    systolic_bp: float | None = Field(
        None, alias="systolicBP", description="Systolic BP in mmHg (50-150 pediatric, 70-250 adult)"
    )
    on_bp_medication: bool = Field(False, alias="onBloodPressureMedication")
    is_diabetic: bool = Field(False, alias="isDiabetic")
    is_smoker: bool = Field(False, alias="isSmoker")
    egfr: float | None = Field(None, description="eGFR in mL/min/1.73m² (15-120)")
    hba1c: float | None = Field(None, description="HbA1c in percent (4-15), required if diabetic")

    def to_risk_input(self) -> RiskInput:
        return RiskInput(
            age=self.age,
            sex=self.sex,
            race=self.race,
            total_cholesterol=self.total_cholesterol,
            hdl_cholesterol=self.hdl_cholesterol,
            systolic_bp=self.systolic_bp,
            on_bp_medication=self.on_bp_medication,
            is_diabetic=self.is_diabetic,
            is_smoker=self.is_smoker,
            egfr=self.egfr,
            hba1c=self.hba1c,
        )


class RiskResultSchema(CamelModel):
    """Output of a single model run."""

    model: RiskModel = Field(..., description="ascvd or prevent")
    risk_percent: float = Field(..., alias="riskPercent", ge=0, le=100, description="Risk percentage")
    classification: str = Field(..., description="Model-specific risk category")
    formula_name: str = Field("", alias="formulaName", description="Human-readable formula label")
    disclaimer: str | None = Field(None, description="Set for pediatric results")
    age_band: AgeBand | None = Field(None, alias="ageBand")

    @classmethod
    def from_result(cls, result: RiskResult) -> "RiskResultSchema":
        return cls(
            model=result.model,
            risk_percent=result.risk_percent,
            classification=str(getattr(result.classification, "value", result.classification)),
            formula_name=result.formula_name,
            disclaimer=result.disclaimer,
            age_band=result.age_band,
        )

    def to_result(self) -> RiskResult:
        return RiskResult(
            model=self.model,
            risk_percent=self.risk_percent,
            classification=self.classification,
            formula_name=self.formula_name,
            disclaimer=self.disclaimer,
            age_band=self.age_band,
        )


class ConsolidateRequest(CamelModel):
    """Two already-computed results for the same patient."""

    ascvd: RiskResultSchema
    prevent: RiskResultSchema


# ==============================================================================
# Responses
# ==============================================================================


class ConsolidatedRiskSchema(CamelModel):
    """Merged patient-facing risk level."""

    risk_level: ConsolidatedLevel = Field(..., alias="riskLevel")
    ascvd_risk: float = Field(..., alias="ascvdRisk")
    prevent_risk: float = Field(..., alias="preventRisk")
    max_risk: float = Field(..., alias="maxRisk")
    methodology: str

    @classmethod
    def from_consolidated(cls, consolidated: ConsolidatedRisk) -> "ConsolidatedRiskSchema":
        return cls(
            risk_level=consolidated.risk_level,
            ascvd_risk=consolidated.ascvd_risk,
            prevent_risk=consolidated.prevent_risk,
            max_risk=consolidated.max_risk,
            methodology=consolidated.methodology,
        )


class ConsolidatedRiskResponse(ConsolidatedRiskSchema):
    """Consolidation result with guidance."""

    recommendations: list[str] = Field(default_factory=list)


class ValidationResponse(CamelModel):
    """Outcome of validating an input for its age band."""

    is_valid: bool = Field(..., alias="isValid")
    age_band: AgeBand = Field(..., alias="ageBand")
    age_band_label: str = Field(..., alias="ageBandLabel")
    errors: dict[str, str] = Field(default_factory=dict, description="Field name to violation message")


class AssessmentResponse(CamelModel):
    """Full assessment: both model results plus the consolidated level."""

    age_band: AgeBand = Field(..., alias="ageBand")
    age_band_label: str = Field(..., alias="ageBandLabel")
    ascvd: RiskResultSchema
    prevent: RiskResultSchema
    consolidated: ConsolidatedRiskSchema
    recommendations: list[str] = Field(default_factory=list)
    calculation_time_ms: float = Field(..., alias="calculationTimeMs")

    @classmethod
    def from_assessment(
        cls,
        assessment: RiskAssessment,
        age_band_label: str,
        recommendations: list[str],
        calculation_time_ms: float,
    ) -> "AssessmentResponse":
        return cls(
            age_band=assessment.age_band,
            age_band_label=age_band_label,
            ascvd=RiskResultSchema.from_result(assessment.ascvd),
            prevent=RiskResultSchema.from_result(assessment.prevent),
            consolidated=ConsolidatedRiskSchema.from_consolidated(assessment.consolidated),
            recommendations=recommendations,
            calculation_time_ms=calculation_time_ms,
        )


class ModelInfo(CamelModel):
    """Description of one risk model."""

    name: RiskModel
    formula_name: str = Field(..., alias="formulaName")
    max_risk: float = Field(..., alias="maxRisk")
    thresholds: dict[str, float] = Field(..., description="Upper bounds of the lower categories")
    classifications: list[str]


class ModelListResponse(CamelModel):
    """Available models and age bands."""

    models: list[ModelInfo]
    age_bands: dict[str, str] = Field(..., alias="ageBands")
    total_count: int = Field(..., alias="totalCount")
