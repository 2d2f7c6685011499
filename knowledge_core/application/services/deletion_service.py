"""
Deletion service.

Wraps the logical deletes of fragments, sources and knowledge units and turns
their outcomes into messages an end user can act on.

Dependencies: knowledge_core.boundary.db.CRUD
System role: Deletion use case orchestration
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.fragment_crud import FragmentCRUD, fragment_crud
from knowledge_core.boundary.db.CRUD.knowledge_unit_crud import (
    KnowledgeUnitCRUD,
    knowledge_unit_crud,
)
from knowledge_core.boundary.db.CRUD.source_crud import SourceCRUD, source_crud
from knowledge_core.core.exceptions import StorageError
from knowledge_core.core.outcomes import DeletionOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionResult:
    """
    Result of a delete request.

    blocking_ids lists what prevented the deletion: the knowledge unit of a
    clustered fragment, or the clustered fragments of a source.
    """

    record_id: UUID
    outcome: DeletionOutcome
    message: str
    blocking_ids: list[UUID] = field(default_factory=list)

    @property
    def deleted(self) -> bool:
        return self.outcome is DeletionOutcome.OK


class DeletionService:
    """Deletion orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        fragments: FragmentCRUD | None = None,
        sources: SourceCRUD | None = None,
        knowledge_units: KnowledgeUnitCRUD | None = None,
    ) -> None:
        """
        Initialize deletion service with async database session.

        Args:
            db: Async SQLAlchemy session
            fragments: Fragment CRUD (defaults to the singleton)
            sources: Source CRUD (defaults to the singleton)
            knowledge_units: KnowledgeUnit CRUD (defaults to the singleton)
        """
        self.db = db
        self.fragments = fragments or fragment_crud
        self.sources = sources or source_crud
        self.knowledge_units = knowledge_units or knowledge_unit_crud

    def _log(self, kind: str, result: DeletionResult) -> None:
        extra = {
            "record_type": kind,
            "record_id": str(result.record_id),
            "outcome": result.outcome.value,
        }
        if result.outcome is DeletionOutcome.OK:
            logger.info("Record soft-deleted", extra=extra)
        elif result.outcome is DeletionOutcome.DELETION_BLOCKED:
            logger.warning(
                "Deletion blocked",
                extra={**extra, "blocking_ids": [str(i) for i in result.blocking_ids]},
            )
        else:
            logger.info("Record to delete not found", extra=extra)

    async def delete_fragment(self, fragment_id: UUID) -> DeletionResult:
        """
        Soft-delete a fragment unless it belongs to a knowledge unit.

        Args:
            fragment_id: Fragment UUID

        Returns:
            DeletionResult: Outcome with a user-facing message

        Raises:
            StorageError: If the store fails
        """
        try:
            outcome = await self.fragments.soft_delete(self.db, fragment_id)
            blocking: list[UUID] = []
            if outcome is DeletionOutcome.DELETION_BLOCKED:
                fragment = await self.fragments.get_by_id(self.db, fragment_id)
                if fragment is not None and fragment.cluster_id is not None:
                    blocking = [fragment.cluster_id]
        except StorageError as e:
            logger.error(
                "Failed to delete fragment",
                extra={"error": str(e), "fragment_id": str(fragment_id)},
            )
            raise

        if outcome is DeletionOutcome.OK:
            message = "Fragment deleted."
        elif outcome is DeletionOutcome.DELETION_BLOCKED:
            message = (
                "Cannot delete a fragment that belongs to a knowledge unit; "
                "unlink it from its knowledge unit first."
            )
        else:
            message = f"Fragment {fragment_id} does not exist or was already deleted."

        result = DeletionResult(fragment_id, outcome, message, blocking)
        self._log("fragment", result)
        return result

    async def delete_source(self, source_id: UUID) -> DeletionResult:
        """
        Soft-delete a source and its unclustered fragments.

        Args:
            source_id: Source UUID

        Returns:
            DeletionResult: Outcome with a user-facing message; when blocked,
            blocking_ids lists the clustered fragments

        Raises:
            StorageError: If the store fails
        """
        try:
            outcome = await self.sources.soft_delete(self.db, source_id)
            blocking: list[UUID] = []
            if outcome is DeletionOutcome.DELETION_BLOCKED:
                blocking = await self.sources.get_clustered_fragment_ids(self.db, source_id)
        except StorageError as e:
            logger.error(
                "Failed to delete source",
                extra={"error": str(e), "source_id": str(source_id)},
            )
            raise

        if outcome is DeletionOutcome.OK:
            message = "Source and its fragments deleted."
        elif outcome is DeletionOutcome.DELETION_BLOCKED:
            message = (
                f"Cannot delete source: {len(blocking)} of its fragments belong to "
                "knowledge units. Unlink them from their knowledge units first."
            )
        else:
            message = f"Source {source_id} does not exist or was already deleted."

        result = DeletionResult(source_id, outcome, message, blocking)
        self._log("source", result)
        return result

    async def delete_knowledge_unit(self, knowledge_unit_id: UUID) -> DeletionResult:
        """
        Soft-delete a knowledge unit. Its members keep their cluster_id.

        Args:
            knowledge_unit_id: KnowledgeUnit UUID

        Returns:
            DeletionResult: Outcome with a user-facing message

        Raises:
            StorageError: If the store fails
        """
        try:
            outcome = await self.knowledge_units.soft_delete(self.db, knowledge_unit_id)
        except StorageError as e:
            logger.error(
                "Failed to delete knowledge unit",
                extra={"error": str(e), "knowledge_unit_id": str(knowledge_unit_id)},
            )
            raise

        if outcome is DeletionOutcome.OK:
            message = "Knowledge unit deleted."
        else:
            message = (
                f"Knowledge unit {knowledge_unit_id} does not exist or was already deleted."
            )

        result = DeletionResult(knowledge_unit_id, outcome, message)
        self._log("knowledge_unit", result)
        return result
