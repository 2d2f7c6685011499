"""Service orchestrators."""

from .clustering_service import ClusterCreationResult, ClusteringService, FragmentAssignment
from .consolidation_service import (
    ClusterSynthesizer,
    ConsolidationOutcome,
    ConsolidationService,
    ConsolidationStep,
)
from .deletion_service import DeletionResult, DeletionService

__all__ = [
    "ClusteringService",
    "ClusterCreationResult",
    "FragmentAssignment",
    "ConsolidationService",
    "ConsolidationOutcome",
    "ConsolidationStep",
    "ClusterSynthesizer",
    "DeletionService",
    "DeletionResult",
]
