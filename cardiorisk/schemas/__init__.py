"""Pydantic schemas and enums for the cardiovascular risk engine.

API request/response models live in ``cardiorisk.schemas.risk``.
"""

from cardiorisk.schemas.base import (
    AgeBand,
    ConsolidatedLevel,
    Race,
    RiskClassification,
    RiskModel,
    Sex,
)

__all__ = [
    # Enums
    "AgeBand",
    "ConsolidatedLevel",
    "Race",
    "RiskClassification",
    "RiskModel",
    "Sex",
]
