"""Patient-facing guidance for consolidated risk levels.

Kept apart from the engine so scoring stays free of display text.
"""

from cardiorisk.schemas.base import AgeBand, ConsolidatedLevel

RECOMMENDATIONS: dict[ConsolidatedLevel, list[str]] = {
    ConsolidatedLevel.LOW: [
        "Continue regular monitoring",
        "Maintain healthy lifestyle",
        "Annual cardiac checkup recommended",
    ],
    ConsolidatedLevel.MODERATE: [
        "Consult cardiologist within 2-4 weeks",
        "Monitor symptoms closely",
        "Consider stress testing",
        "Lifestyle modifications recommended",
    ],
    ConsolidatedLevel.HIGH: [
        "URGENT: Seek immediate medical attention",
        "Contact cardiologist or emergency services",
        "Do not delay medical evaluation",
        "Consider immediate cardiac assessment",
    ],
}

AGE_BAND_LABELS: dict[AgeBand, str] = {
    AgeBand.PEDIATRIC: "Pediatric Assessment",
    AgeBand.ADULT: "Adult Assessment",
    AgeBand.ELDERLY: "Elderly Assessment",
    AgeBand.INVALID: "Invalid Age",
}


def get_recommendations(level: ConsolidatedLevel | str) -> list[str]:
    """Recommendations for a consolidated level; empty for unknown levels."""
    try:
        level = ConsolidatedLevel(level)
    except ValueError:
        return []
    return list(RECOMMENDATIONS[level])


def age_band_label(band: AgeBand | str) -> str:
    return AGE_BAND_LABELS[AgeBand(band)]
