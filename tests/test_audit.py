"""Tests for assessment audit logging."""

import logging
from datetime import UTC, datetime

from cardiorisk.core.audit import (
    AuditAction,
    AuditEvent,
    log_assessment,
    log_audit,
    log_validation_failure,
)


class TestAuditEvent:
    """Tests for AuditEvent model."""

    def test_audit_event_required_fields(self) -> None:
        """Test AuditEvent with required fields only."""
        event = AuditEvent(
            action=AuditAction.ASSESS,
            resource_type="risk_assessment",
        )
        assert event.action == AuditAction.ASSESS
        assert event.resource_type == "risk_assessment"
        assert event.success is True
        assert event.timestamp is not None

    def test_audit_event_timestamp_auto_set(self) -> None:
        """Test that timestamp is automatically set."""
        before = datetime.now(UTC)
        event = AuditEvent(action=AuditAction.VALIDATE, resource_type="risk_input")
        after = datetime.now(UTC)
        assert before <= event.timestamp <= after


class TestAuditActions:
    """Tests for audit action types."""

    def test_audit_action_values(self) -> None:
        """Test assessment action types exist."""
        assert AuditAction.ASSESS == "assess"
        assert AuditAction.SCORE == "score"
        assert AuditAction.VALIDATE == "validate"
        assert AuditAction.VALIDATION_FAILED == "validation_failed"
        assert AuditAction.CONSOLIDATE == "consolidate"


class TestLogFunctions:
    """Tests for audit logging convenience functions."""

    def test_log_audit_returns_event(self) -> None:
        """Test log_audit returns the audit event."""
        event = log_audit(
            action=AuditAction.CONSOLIDATE,
            resource_type="risk_assessment",
            details={"risk_level": "Low"},
        )
        assert isinstance(event, AuditEvent)
        assert event.details == {"risk_level": "Low"}

    def test_log_assessment_records_outcome(self) -> None:
        """Test log_assessment keeps band and level only."""
        event = log_assessment(age_band="adult", risk_level="Moderate", ip_address="10.0.0.1")
        assert event.action == AuditAction.ASSESS
        assert event.details == {"age_band": "adult", "risk_level": "Moderate"}
        assert event.ip_address == "10.0.0.1"

    def test_log_validation_failure_records_field_names(self, caplog) -> None:
        """Test validation failures are logged at WARNING with field names."""
        with caplog.at_level(logging.WARNING, logger="audit"):
            event = log_validation_failure(age_band="adult", fields=["systolic_bp", "egfr"])

        assert event.action == AuditAction.VALIDATION_FAILED
        assert event.success is False
        assert event.details["fields"] == ["egfr", "systolic_bp"]
        assert "validation_failed" in caplog.text
