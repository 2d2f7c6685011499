"""
Core business logic module.

Contains the exception hierarchy, outcome codes and the similarity ranker.
"""

from knowledge_core.core.exceptions import (
    KnowledgeCoreException,
    ValidationError,
    StorageError,
)
from knowledge_core.core.outcomes import AssignmentOutcome, DeletionOutcome

__all__ = [
    # Exceptions
    "KnowledgeCoreException",
    "ValidationError",
    "StorageError",
    # Outcomes
    "AssignmentOutcome",
    "DeletionOutcome",
]
