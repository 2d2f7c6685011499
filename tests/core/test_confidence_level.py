"""
Tests for ConfidenceLevel ordering.
"""

import pytest

from knowledge_core.boundary.db.models.knowledge_unit_model import ConfidenceLevel


class TestConfidenceLevelOrdering:
    """Tests for comparisons between confidence levels."""

    def test_levels_should_be_ordered_low_to_certain(self) -> None:
        """Test LOW < MEDIUM < HIGH < CERTAIN."""
        # Assert
        assert ConfidenceLevel.LOW < ConfidenceLevel.MEDIUM < ConfidenceLevel.HIGH
        assert ConfidenceLevel.HIGH < ConfidenceLevel.CERTAIN
        assert ConfidenceLevel.CERTAIN >= ConfidenceLevel.CERTAIN
        assert max([ConfidenceLevel.MEDIUM, ConfidenceLevel.LOW]) is ConfidenceLevel.MEDIUM

    def test_unclear_should_not_be_ordered(self) -> None:
        """Test the sentinel raises on comparison."""
        # Act / Assert
        with pytest.raises(TypeError):
            ConfidenceLevel.UNCLEAR < ConfidenceLevel.LOW
        with pytest.raises(TypeError):
            ConfidenceLevel.HIGH >= ConfidenceLevel.UNCLEAR

    def test_comparison_with_plain_string_should_raise(self) -> None:
        """Test ordering is only defined between levels."""
        # Act / Assert
        with pytest.raises(TypeError):
            ConfidenceLevel.LOW < "medium"

    def test_equality_should_still_match_value(self) -> None:
        """Test str-enum equality is unchanged."""
        # Assert
        assert ConfidenceLevel("high") is ConfidenceLevel.HIGH
        assert ConfidenceLevel.UNCLEAR == "unclear"
        assert ConfidenceLevel.UNCLEAR.rank is None
