"""Tests for consolidating ASCVD and PREVENT results, and the full pipeline."""

import logging

import pytest

from cardiorisk.schemas.base import AgeBand, ConsolidatedLevel, RiskModel
from cardiorisk.services import risk_engine
from cardiorisk.services.risk_engine import (
    CONSOLIDATION_METHODOLOGY,
    IncompleteModelPairError,
    RiskResult,
    assess,
    classification_ordinal,
    consolidate,
)
from cardiorisk.services.risk_validation import InvalidInputError, RiskInput, ensure_valid


def ascvd(risk_percent: float, classification: str) -> RiskResult:
    return RiskResult(
        model=RiskModel.ASCVD,
        risk_percent=risk_percent,
        classification=classification,
        formula_name="ASCVD Pooled Cohort Equations",
    )


def prevent(risk_percent: float, classification: str) -> RiskResult:
    return RiskResult(
        model=RiskModel.PREVENT,
        risk_percent=risk_percent,
        classification=classification,
        formula_name="PREVENT Equations",
    )


# ============================================================================
# Ordinal Mapping
# ============================================================================


class TestOrdinals:
    """Test classification to severity mapping."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Low", 1),
            ("Normal", 1),
            ("Borderline", 2),
            ("Borderline Intermediate", 2),
            ("Intermediate", 3),
            ("High", 4),
            ("Elevated", 4),
        ],
    )
    def test_known_labels(self, label, expected):
        assert classification_ordinal(label) == expected

    def test_unknown_label_defaults_to_low_and_warns(self, caplog):
        """Test unknown labels fall back to 1 with a warning."""
        with caplog.at_level(logging.WARNING, logger="cardiorisk.services.risk_engine"):
            assert classification_ordinal("Severe") == 1

        assert "Unknown risk classification 'Severe'" in caplog.text


# ============================================================================
# Consolidation Laws
# ============================================================================


class TestConsolidate:
    """Test the consolidated risk level rules."""

    def test_low_low(self):
        result = consolidate(ascvd(2.0, "Low"), prevent(3.0, "Low"))
        assert result.risk_level == ConsolidatedLevel.LOW
        assert result.max_risk == 3.0

    def test_high_low(self):
        result = consolidate(ascvd(25.0, "High"), prevent(3.0, "Low"))
        assert result.risk_level == ConsolidatedLevel.HIGH

    def test_borderline_intermediate(self):
        """Test max ordinal 3 with max risk 12 gives Moderate."""
        result = consolidate(ascvd(6.0, "Borderline"), prevent(12.0, "Intermediate"))

        assert result.risk_level == ConsolidatedLevel.MODERATE
        assert result.ascvd_risk == 6.0
        assert result.prevent_risk == 12.0
        assert result.max_risk == 12.0
        assert result.methodology == CONSOLIDATION_METHODOLOGY

    def test_borderline_pair_stays_low(self):
        """Test two borderline labels under 10% stay Low."""
        result = consolidate(ascvd(6.0, "Borderline"), prevent(9.9, "Borderline Intermediate"))
        assert result.risk_level == ConsolidatedLevel.LOW

    def test_percentage_escalates_to_moderate(self):
        """Test a 10% risk escalates even with Low labels."""
        result = consolidate(ascvd(3.0, "Low"), prevent(10.0, "Low"))
        assert result.risk_level == ConsolidatedLevel.MODERATE

    def test_percentage_escalates_to_high(self):
        """Test a 20% risk escalates even with Low labels."""
        result = consolidate(ascvd(20.0, "Low"), prevent(1.0, "Low"))
        assert result.risk_level == ConsolidatedLevel.HIGH
        assert result.max_risk == 20.0

    def test_pediatric_labels(self):
        """Test Elevated maps like High and Normal like Low."""
        assert consolidate(ascvd(4.0, "Normal"), prevent(4.0, "Normal")).risk_level == ConsolidatedLevel.LOW
        assert consolidate(ascvd(6.0, "Elevated"), prevent(4.0, "Normal")).risk_level == ConsolidatedLevel.HIGH

    def test_unknown_label_does_not_escalate(self):
        result = consolidate(ascvd(1.0, "Severe"), prevent(2.0, "Low"))
        assert result.risk_level == ConsolidatedLevel.LOW

    def test_deterministic(self):
        pair = (ascvd(6.0, "Borderline"), prevent(12.0, "Intermediate"))
        assert consolidate(*pair) == consolidate(*pair)

    def test_missing_result_raises(self):
        with pytest.raises(IncompleteModelPairError):
            consolidate(ascvd(1.0, "Low"), None)
        with pytest.raises(IncompleteModelPairError):
            consolidate(None, prevent(1.0, "Low"))

    def test_swapped_models_raise(self):
        with pytest.raises(IncompleteModelPairError, match="Expected"):
            consolidate(prevent(1.0, "Low"), ascvd(1.0, "Low"))


# ============================================================================
# Full Pipeline
# ============================================================================


class TestAssess:
    """Test validate -> score x 2 -> consolidate."""

    def test_adult_pipeline(self, adult_input):
        assessment = assess(adult_input)

        assert assessment.age_band == AgeBand.ADULT
        assert assessment.ascvd.risk_percent == 0.0
        assert assessment.prevent.risk_percent == pytest.approx(13.2)
        assert assessment.consolidated.risk_level == ConsolidatedLevel.MODERATE
        assert assessment.consolidated.max_risk == pytest.approx(13.2)
        assert assessment.risk_input is adult_input

    def test_pediatric_pipeline(self, pediatric_input):
        assessment = assess(pediatric_input)

        assert assessment.age_band == AgeBand.PEDIATRIC
        assert assessment.ascvd.disclaimer is not None
        assert assessment.prevent.disclaimer is not None
        assert assessment.consolidated.risk_level == ConsolidatedLevel.HIGH

    def test_invalid_input_produces_no_result(self):
        with pytest.raises(InvalidInputError) as exc_info:
            assess(RiskInput(age=0, sex="male"))
        assert exc_info.value.errors == {"age": "Enter valid age (1-130 years)"}

    def test_idempotent(self, adult_input):
        assert assess(adult_input) == assess(adult_input)

    def test_validates_once(self, adult_input, monkeypatch):
        """Test both models are scored from a single validation pass."""
        calls = []

        def counting_ensure_valid(risk_input):
            calls.append(risk_input)
            return ensure_valid(risk_input)

        monkeypatch.setattr(risk_engine, "ensure_valid", counting_ensure_valid)
        assess(adult_input)

        assert calls == [adult_input]

    def test_string_input(self, adult_input):
        """Test string-typed fields that pass validation are scored."""
        textual = RiskInput(
            age="18", sex="female", race="white", total_cholesterol="150",
            hdl_cholesterol="50", systolic_bp="100", egfr="120",
        )
        assessment = assess(textual)

        assert assessment.consolidated == assess(adult_input).consolidated
        assert assessment.risk_input is textual
