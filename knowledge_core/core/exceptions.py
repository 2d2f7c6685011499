"""
Exception hierarchy for the knowledge core.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Absence of a record, a lost clustering race and a blocked deletion are
outcomes (see knowledge_core.core.outcomes), not exceptions.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the library
"""

from typing import Any


class KnowledgeCoreException(Exception):
    """Base exception for all knowledge core errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(KnowledgeCoreException):
    """Raised when input validation fails. Always caller-correctable."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        self.field = field
        super().__init__(message, details)


class StorageError(KnowledgeCoreException):
    """Raised when the underlying store is unavailable or a statement fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize storage error.

        Args:
            message: Error message
            operation: Store operation that failed (get_by_id, soft_delete, ...)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)
