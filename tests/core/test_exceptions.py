"""
Tests for the exception hierarchy.
"""

from knowledge_core.core.exceptions import (
    KnowledgeCoreException,
    StorageError,
    ValidationError,
)


class TestExceptions:
    """Tests for exception attributes and formatting."""

    def test_validation_error_should_carry_field(self) -> None:
        """Test field is exposed and details are kept."""
        # Act
        error = ValidationError("limit must be at least 1", field="limit", details={"value": 0})

        # Assert
        assert isinstance(error, KnowledgeCoreException)
        assert error.field == "limit"
        assert error.details["value"] == 0
        assert "limit must be at least 1" in str(error)

    def test_storage_error_should_carry_operation(self) -> None:
        """Test operation is exposed for the failing store call."""
        # Act
        error = StorageError("fragments.get_by_id failed", operation="get_by_id")

        # Assert
        assert isinstance(error, KnowledgeCoreException)
        assert error.operation == "get_by_id"
