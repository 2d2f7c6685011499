"""
Clustering assignment service.

Groups unclustered fragments into knowledge units. Every assignment is a
single conditional update in the store, so concurrent callers cannot
double-assign a fragment or cluster one that is being deleted.

Dependencies: knowledge_core.boundary.db.CRUD, knowledge_core.models
System role: Cluster assignment use case orchestration
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.fragment_crud import FragmentCRUD, fragment_crud
from knowledge_core.boundary.db.CRUD.knowledge_unit_crud import (
    KnowledgeUnitCRUD,
    knowledge_unit_crud,
)
from knowledge_core.boundary.db.models.knowledge_unit_model import KnowledgeUnitModel
from knowledge_core.core.exceptions import StorageError, ValidationError
from knowledge_core.core.outcomes import AssignmentOutcome
from knowledge_core.models.common import parse_schema
from knowledge_core.models.knowledge_unit import KnowledgeUnitAttributes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FragmentAssignment:
    """Outcome of assigning one fragment during a batch."""

    fragment_id: UUID
    outcome: AssignmentOutcome


@dataclass
class ClusterCreationResult:
    """A newly created knowledge unit and the per-fragment assignment outcomes."""

    knowledge_unit: KnowledgeUnitModel
    assignments: list[FragmentAssignment] = field(default_factory=list)

    def _ids(self, outcome: AssignmentOutcome) -> list[UUID]:
        return [a.fragment_id for a in self.assignments if a.outcome is outcome]

    @property
    def assigned_ids(self) -> list[UUID]:
        return self._ids(AssignmentOutcome.OK)

    @property
    def skipped_ids(self) -> list[UUID]:
        """Fragments that already belonged to another unit."""
        return self._ids(AssignmentOutcome.ALREADY_CLUSTERED)

    @property
    def missing_ids(self) -> list[UUID]:
        """Fragments that were absent or deleted."""
        return self._ids(AssignmentOutcome.NOT_FOUND)


class ClusteringService:
    """Clustering assignment orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        fragments: FragmentCRUD | None = None,
        knowledge_units: KnowledgeUnitCRUD | None = None,
    ) -> None:
        """
        Initialize clustering service with async database session.

        Args:
            db: Async SQLAlchemy session
            fragments: Fragment CRUD (defaults to the singleton)
            knowledge_units: KnowledgeUnit CRUD (defaults to the singleton)
        """
        self.db = db
        self.fragments = fragments or fragment_crud
        self.knowledge_units = knowledge_units or knowledge_unit_crud

    async def assign_to_cluster(
        self,
        fragment_id: UUID,
        knowledge_unit_id: UUID,
    ) -> AssignmentOutcome:
        """
        Attach a fragment to a knowledge unit if it is not clustered yet.

        Args:
            fragment_id: Fragment UUID
            knowledge_unit_id: KnowledgeUnit UUID

        Returns:
            AssignmentOutcome: OK, ALREADY_CLUSTERED or NOT_FOUND

        Raises:
            StorageError: If the store fails
        """
        log_extra = {
            "fragment_id": str(fragment_id),
            "knowledge_unit_id": str(knowledge_unit_id),
        }
        try:
            outcome = await self.fragments.assign_cluster(
                self.db, fragment_id, knowledge_unit_id
            )
        except StorageError as e:
            logger.error(
                "Failed to assign fragment to cluster",
                extra={**log_extra, "error": str(e)},
            )
            raise

        if outcome is AssignmentOutcome.OK:
            logger.info("Fragment assigned to cluster", extra=log_extra)
        elif outcome is AssignmentOutcome.ALREADY_CLUSTERED:
            logger.info("Fragment already clustered, skipped", extra=log_extra)
        else:
            logger.warning("Fragment or knowledge unit not found", extra=log_extra)
        return outcome

    async def create_cluster_from_fragments(
        self,
        fragment_ids: Iterable[UUID],
        attributes: KnowledgeUnitAttributes | dict[str, Any],
    ) -> ClusterCreationResult:
        """
        Create a knowledge unit and assign each fragment to it in turn.

        Fragments that lost a race or disappeared are reported per fragment
        and do not fail the batch. Duplicate ids are assigned once.

        Args:
            fragment_ids: Fragments to consolidate
            attributes: Field values for the new unit

        Returns:
            ClusterCreationResult: Created unit and per-fragment outcomes

        Raises:
            ValidationError: Empty batch or invalid unit attributes
            StorageError: If the store fails
        """
        ids = list(dict.fromkeys(fragment_ids))
        if not ids:
            raise ValidationError(
                "At least one fragment is required to create a cluster",
                field="fragment_ids",
            )
        unit_attributes = parse_schema(KnowledgeUnitAttributes, attributes)

        try:
            unit = await self.knowledge_units.create(self.db, **unit_attributes.to_fields())
        except StorageError as e:
            logger.error(
                "Failed to create knowledge unit",
                extra={"error": str(e), "fragment_count": len(ids)},
            )
            raise

        result = ClusterCreationResult(knowledge_unit=unit)
        for fragment_id in ids:
            outcome = await self.assign_to_cluster(fragment_id, unit.id)
            result.assignments.append(FragmentAssignment(fragment_id, outcome))

        logger.info(
            "Cluster created",
            extra={
                "knowledge_unit_id": str(unit.id),
                "assigned": len(result.assigned_ids),
                "skipped": len(result.skipped_ids),
                "missing": len(result.missing_ids),
            },
        )
        return result
