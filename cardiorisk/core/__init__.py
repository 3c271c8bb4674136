"""Core application configuration and utilities."""

from cardiorisk.core.audit import (
    AuditAction,
    AuditEvent,
    log_assessment,
    log_audit,
    log_validation_failure,
)
from cardiorisk.core.config import settings
from cardiorisk.core.logging import configure_logging

__all__ = [
    # Config
    "settings",
    # Logging
    "configure_logging",
    # Audit
    "AuditAction",
    "AuditEvent",
    "log_audit",
    "log_assessment",
    "log_validation_failure",
]
