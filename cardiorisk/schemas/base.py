"""Base schemas and enums for the cardiovascular risk engine."""

from enum import Enum


class Sex(str, Enum):
    """Biological sex used to select model coefficients."""

    MALE = "male"
    FEMALE = "female"


class Race(str, Enum):
    """Race group used by the pooled-cohort coefficient table."""

    WHITE = "white"
    AFRICAN_AMERICAN = "africanAmerican"

    @classmethod
    def _missing_(cls, value: object) -> "Race | None":
        # Accept the short form and snake_case spellings used by older clients
        aliases = {"aa": cls.AFRICAN_AMERICAN, "african_american": cls.AFRICAN_AMERICAN}
        if isinstance(value, str):
            return aliases.get(value.lower())
        return None


class AgeBand(str, Enum):
    """Age band that drives validation rules and formula routing."""

    INVALID = "invalid"
    PEDIATRIC = "pediatric"  # 1-17
    ADULT = "adult"  # 18-79
    ELDERLY = "elderly"  # 80-130


class RiskModel(str, Enum):
    """Risk model family."""

    ASCVD = "ascvd"
    PREVENT = "prevent"


class RiskClassification(str, Enum):
    """Per-model risk categories.

    ASCVD uses Low/Borderline/Intermediate/High, PREVENT uses
    Low/Borderline Intermediate/Intermediate/High and the pediatric
    screening score uses Normal/Elevated.
    """

    LOW = "Low"
    BORDERLINE = "Borderline"
    BORDERLINE_INTERMEDIATE = "Borderline Intermediate"
    INTERMEDIATE = "Intermediate"
    HIGH = "High"
    NORMAL = "Normal"
    ELEVATED = "Elevated"


class ConsolidatedLevel(str, Enum):
    """Patient-facing risk level after merging both models."""

    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
