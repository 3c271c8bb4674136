"""Tests for consolidated-level guidance and age band labels."""

import pytest

from cardiorisk.schemas.base import AgeBand, ConsolidatedLevel
from cardiorisk.services.risk_recommendations import age_band_label, get_recommendations


class TestRecommendations:
    """Test recommendation lookup."""

    def test_low(self):
        assert get_recommendations(ConsolidatedLevel.LOW)[0] == "Continue regular monitoring"

    def test_moderate(self):
        recommendations = get_recommendations("Moderate")
        assert "Consider stress testing" in recommendations
        assert len(recommendations) == 4

    def test_high_is_urgent(self):
        assert get_recommendations(ConsolidatedLevel.HIGH)[0].startswith("URGENT")

    def test_unknown_level_is_empty(self):
        assert get_recommendations("Danger") == []

    def test_returns_copy(self):
        """Test callers cannot mutate the shared lists."""
        get_recommendations(ConsolidatedLevel.LOW).append("extra")
        assert "extra" not in get_recommendations(ConsolidatedLevel.LOW)


class TestAgeBandLabels:
    """Test age band display labels."""

    @pytest.mark.parametrize(
        "band,label",
        [
            (AgeBand.PEDIATRIC, "Pediatric Assessment"),
            (AgeBand.ADULT, "Adult Assessment"),
            (AgeBand.ELDERLY, "Elderly Assessment"),
            ("invalid", "Invalid Age"),
        ],
    )
    def test_labels(self, band, label):
        assert age_band_label(band) == label
