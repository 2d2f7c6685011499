"""
KnowledgeUnit CRUD operations.

Dependencies: sqlalchemy, knowledge_core.boundary.db.models
System role: Knowledge unit persistence operations
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.models.fragment_model import FragmentModel
from knowledge_core.boundary.db.models.knowledge_unit_model import KnowledgeUnitModel
from knowledge_core.boundary.db.CRUD.embedded_crud import EmbeddedRecordCRUD
from knowledge_core.boundary.db.CRUD.fragment_crud import FragmentCRUD, fragment_crud
from knowledge_core.configs import get_settings
from knowledge_core.core.exceptions import ValidationError
from knowledge_core.core.outcomes import DeletionOutcome


class KnowledgeUnitCRUD(EmbeddedRecordCRUD[KnowledgeUnitModel]):
    """
    CRUD operations for KnowledgeUnitModel.

    Membership is read through FragmentCRUD so that deleted members stay hidden.
    """

    max_lengths = {
        "title": 200,
        "summary": 500,
        "content": 10000,
        "confidence_comment": 1000,
        "clustering_comment": 2000,
    }

    def __init__(self, embedding_dimensions: int | None = None) -> None:
        """
        Initialize KnowledgeUnitCRUD with KnowledgeUnitModel.

        Args:
            embedding_dimensions: Vector length; None reads EMBEDDING_KNOWLEDGE_UNIT_DIMENSIONS
        """
        super().__init__(KnowledgeUnitModel, embedding_dimensions)

    def _configured_dimensions(self) -> int:
        return get_settings().embedding.knowledge_unit_dimensions

    async def validate(
        self,
        session: AsyncSession,
        values: dict[str, Any],
        partial: bool = False,
    ) -> dict[str, Any]:
        if "confidence" in values and values["confidence"] is None:
            raise ValidationError("confidence is required", field="confidence")
        return await super().validate(session, values, partial)

    async def get_with_fragments(
        self,
        session: AsyncSession,
        id: UUID,
        fragments: FragmentCRUD | None = None,
    ) -> tuple[KnowledgeUnitModel, Sequence[FragmentModel]] | None:
        """
        Retrieve a knowledge unit together with its visible members.

        Args:
            session: Async database session
            id: KnowledgeUnit UUID
            fragments: Fragment CRUD used for the member lookup

        Returns:
            (unit, members) if the unit is visible, None otherwise
        """
        unit = await self.get_by_id(session, id)
        if unit is None:
            return None
        members = await (fragments or fragment_crud).get_by_cluster_id(session, id)
        return unit, members

    async def soft_delete(self, session: AsyncSession, id: UUID) -> DeletionOutcome:
        """
        Mark a knowledge unit deleted.

        Members keep their cluster_id; the unit simply becomes invisible and
        no longer accepts assignments.

        Args:
            session: Async database session
            id: KnowledgeUnit UUID

        Returns:
            DeletionOutcome: OK or NOT_FOUND
        """
        deleted = await self._conditional_update(
            session,
            "soft_delete",
            [KnowledgeUnitModel.id == id, KnowledgeUnitModel.is_deleted.is_(False)],
            {"is_deleted": True},
        )
        return DeletionOutcome.OK if deleted else DeletionOutcome.NOT_FOUND


knowledge_unit_crud = KnowledgeUnitCRUD()
