"""Audit logging for risk assessments.

Provides logging for:
- Completed assessments and single-model scores
- Validation failures
- Consolidation requests

Audit events record the outcome (age band, risk level, failing field
names) but never the raw clinical values. They should be shipped to an
append-only store in production.
"""

import logging
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

# Separate audit logger for assessment events
audit_logger = logging.getLogger("audit")


class AuditAction(str, Enum):
    """Types of auditable actions."""

    ASSESS = "assess"
    SCORE = "score"
    VALIDATE = "validate"
    VALIDATION_FAILED = "validation_failed"
    CONSOLIDATE = "consolidate"

    # System
    ERROR = "error"


class AuditEvent(BaseModel):
    """Audit event record."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: AuditAction = Field(..., description="Type of action performed")
    resource_type: str = Field(..., description="Type of resource, e.g. risk_assessment")
    user_id: str | None = Field(None, description="User who performed action")
    ip_address: str | None = Field(None, description="Client IP address")
    details: dict | None = Field(None, description="Additional context")
    success: bool = Field(True, description="Whether action succeeded")


def log_audit(
    action: AuditAction,
    resource_type: str,
    user_id: str | None = None,
    ip_address: str | None = None,
    details: dict | None = None,
    success: bool = True,
) -> AuditEvent:
    """Log an audit event.

    Args:
        action: Type of action being audited
        resource_type: The type of resource involved
        user_id: User performing the action
        ip_address: Client IP address
        details: Additional context
        success: Whether the action succeeded

    Returns:
        The created AuditEvent
    """
    event = AuditEvent(
        action=action,
        resource_type=resource_type,
        user_id=user_id,
        ip_address=ip_address,
        details=details,
        success=success,
    )

    log_level = logging.INFO if success else logging.WARNING
    audit_logger.log(
        log_level,
        f"AUDIT: {action.value} {resource_type}"
        f"{f' user={user_id}' if user_id else ''}"
        f" success={success}",
        extra={"audit_event": event.model_dump()},
    )

    return event


def log_assessment(
    age_band: str,
    risk_level: str,
    user_id: str | None = None,
    ip_address: str | None = None,
) -> AuditEvent:
    """Log a completed assessment.

    Args:
        age_band: Resolved age band
        risk_level: Consolidated risk level
        user_id: User requesting the assessment
        ip_address: Client IP address

    Returns:
        The created AuditEvent
    """
    return log_audit(
        action=AuditAction.ASSESS,
        resource_type="risk_assessment",
        user_id=user_id,
        ip_address=ip_address,
        details={"age_band": age_band, "risk_level": risk_level},
    )


def log_validation_failure(
    age_band: str,
    fields: list[str],
    user_id: str | None = None,
    ip_address: str | None = None,
) -> AuditEvent:
    """Log rejected input. Only field names are recorded."""
    return log_audit(
        action=AuditAction.VALIDATION_FAILED,
        resource_type="risk_input",
        user_id=user_id,
        ip_address=ip_address,
        details={"age_band": age_band, "fields": sorted(fields)},
        success=False,
    )
