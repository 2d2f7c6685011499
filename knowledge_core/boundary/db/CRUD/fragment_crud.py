"""
Fragment CRUD operations.

Extends the embedded-record CRUD with relationship traversal (by source, by
knowledge unit) and the two invariant-bearing writes: soft deletion and
cluster assignment. Both are single conditional UPDATE statements so that
concurrent callers cannot leave a fragment deleted and clustered at once, or
clustered into two units.

Dependencies: sqlalchemy, knowledge_core.boundary.db.models
System role: Fragment persistence operations
"""

from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.base import utc_now
from knowledge_core.boundary.db.models.fragment_model import FragmentModel
from knowledge_core.boundary.db.models.knowledge_unit_model import KnowledgeUnitModel
from knowledge_core.boundary.db.models.source_model import SourceModel
from knowledge_core.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_core.boundary.db.CRUD.embedded_crud import EmbeddedRecordCRUD
from knowledge_core.configs import get_settings
from knowledge_core.core.exceptions import ValidationError
from knowledge_core.core.outcomes import AssignmentOutcome, DeletionOutcome


class FragmentCRUD(EmbeddedRecordCRUD[FragmentModel]):
    """
    CRUD operations for FragmentModel.

    cluster_id and clustering_processed_at are written only by
    assign_cluster / mark_clustering_processed, is_deleted only by the
    soft-delete operations.
    """

    guarded_fields = BaseCRUD.guarded_fields | {"cluster_id", "clustering_processed_at"}

    def __init__(self, embedding_dimensions: int | None = None) -> None:
        """
        Initialize FragmentCRUD with FragmentModel.

        Args:
            embedding_dimensions: Vector length; None reads EMBEDDING_FRAGMENT_DIMENSIONS
        """
        super().__init__(FragmentModel, embedding_dimensions)

    def _configured_dimensions(self) -> int:
        return get_settings().embedding.fragment_dimensions

    async def validate(
        self,
        session: AsyncSession,
        values: dict[str, Any],
        partial: bool = False,
    ) -> dict[str, Any]:
        values = await super().validate(session, values, partial)
        source_id = values.get("source_id")
        if source_id is not None and not await self._reference_exists(
            session, SourceModel, source_id
        ):
            raise ValidationError(
                "Source does not exist",
                field="source_id",
                details={"source_id": str(source_id)},
            )
        return values

    async def get_by_ids(
        self,
        session: AsyncSession,
        ids: Iterable[UUID],
    ) -> Sequence[FragmentModel]:
        """
        Retrieve visible fragments among the given ids.

        Args:
            session: Async database session
            ids: Fragment UUIDs

        Returns:
            Sequence of FragmentModels; deleted or unknown ids are absent
        """
        id_list = list(ids)
        if not id_list:
            return []
        return await self.get_all(session, FragmentModel.id.in_(id_list))

    async def get_by_source_id(
        self,
        session: AsyncSession,
        source_id: UUID,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[FragmentModel]:
        """
        Retrieve visible fragments extracted from a source.

        Args:
            session: Async database session
            source_id: Source UUID
            limit: Maximum number of fragments to return
            offset: Number of fragments to skip

        Returns:
            Sequence of FragmentModels belonging to the source
        """
        return await self.get_all(
            session, FragmentModel.source_id == source_id, limit=limit, offset=offset
        )

    async def get_by_cluster_id(
        self,
        session: AsyncSession,
        knowledge_unit_id: UUID,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[FragmentModel]:
        """
        Retrieve the visible members of a knowledge unit.

        Soft-deleted members keep their cluster_id but are not returned.

        Args:
            session: Async database session
            knowledge_unit_id: KnowledgeUnit UUID
            limit: Maximum number of fragments to return
            offset: Number of fragments to skip

        Returns:
            Sequence of member FragmentModels
        """
        return await self.get_all(
            session,
            FragmentModel.cluster_id == knowledge_unit_id,
            limit=limit,
            offset=offset,
        )

    async def soft_delete(self, session: AsyncSession, id: UUID) -> DeletionOutcome:
        """
        Mark a fragment deleted unless it belongs to a knowledge unit.

        Args:
            session: Async database session
            id: Fragment UUID

        Returns:
            DeletionOutcome: OK, DELETION_BLOCKED (clustered, unchanged) or NOT_FOUND
        """
        deleted = await self._conditional_update(
            session,
            "soft_delete",
            [
                FragmentModel.id == id,
                FragmentModel.is_deleted.is_(False),
                FragmentModel.cluster_id.is_(None),
            ],
            {"is_deleted": True},
        )
        if deleted:
            return DeletionOutcome.OK
        if await self.get_by_id(session, id) is None:
            return DeletionOutcome.NOT_FOUND
        return DeletionOutcome.DELETION_BLOCKED

    async def soft_delete_unclustered_by_source(
        self,
        session: AsyncSession,
        source_id: UUID,
    ) -> list[UUID]:
        """
        Mark every visible, unclustered fragment of a source deleted.

        Args:
            session: Async database session
            source_id: Source UUID

        Returns:
            list[UUID]: Ids of the fragments that were deleted
        """
        return await self._conditional_update(
            session,
            "soft_delete_by_source",
            [
                FragmentModel.source_id == source_id,
                FragmentModel.is_deleted.is_(False),
                FragmentModel.cluster_id.is_(None),
            ],
            {"is_deleted": True},
        )

    async def assign_cluster(
        self,
        session: AsyncSession,
        fragment_id: UUID,
        knowledge_unit_id: UUID,
    ) -> AssignmentOutcome:
        """
        Set cluster_id only if it is currently NULL.

        The fragment must be visible and the knowledge unit must exist and not
        be deleted; all of this is checked inside the one UPDATE statement.
        When it matches no row, follow-up reads classify the outcome.

        Args:
            session: Async database session
            fragment_id: Fragment UUID
            knowledge_unit_id: Target KnowledgeUnit UUID

        Returns:
            AssignmentOutcome: OK, ALREADY_CLUSTERED or NOT_FOUND
        """
        unit_visible = (
            select(KnowledgeUnitModel.id)
            .where(
                KnowledgeUnitModel.id == knowledge_unit_id,
                KnowledgeUnitModel.is_deleted.is_(False),
            )
            .exists()
        )
        assigned = await self._conditional_update(
            session,
            "assign_cluster",
            [
                FragmentModel.id == fragment_id,
                FragmentModel.is_deleted.is_(False),
                FragmentModel.cluster_id.is_(None),
                unit_visible,
            ],
            {"cluster_id": knowledge_unit_id, "clustering_processed_at": utc_now()},
        )
        if assigned:
            return AssignmentOutcome.OK

        fragment = await self.get_by_id(session, fragment_id)
        if fragment is None:
            return AssignmentOutcome.NOT_FOUND
        if not await self._reference_exists(session, KnowledgeUnitModel, knowledge_unit_id):
            return AssignmentOutcome.NOT_FOUND
        return AssignmentOutcome.ALREADY_CLUSTERED

    async def mark_clustering_processed(self, session: AsyncSession, id: UUID) -> bool:
        """
        Record that the consolidation pass has considered a fragment.

        Args:
            session: Async database session
            id: Fragment UUID

        Returns:
            bool: True if the marker was set by this call
        """
        marked = await self._conditional_update(
            session,
            "mark_clustering_processed",
            [
                FragmentModel.id == id,
                FragmentModel.is_deleted.is_(False),
                FragmentModel.clustering_processed_at.is_(None),
            ],
            {"clustering_processed_at": utc_now()},
        )
        return bool(marked)

    async def get_next_unprocessed(self, session: AsyncSession) -> FragmentModel | None:
        """
        Retrieve the newest embedded fragment the consolidation pass has not seen.

        Args:
            session: Async database session

        Returns:
            FragmentModel if one is pending, None otherwise
        """
        stmt = (
            self._scan(
                FragmentModel.embedding.is_not(None),
                FragmentModel.cluster_id.is_(None),
                FragmentModel.clustering_processed_at.is_(None),
            )
            .order_by(FragmentModel.created_at.desc(), FragmentModel.id.desc())
            .limit(1)
        )
        result = await self._execute(session, stmt, "get_next_unprocessed")
        return result.scalar_one_or_none()


fragment_crud = FragmentCRUD()
