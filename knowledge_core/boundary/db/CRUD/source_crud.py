"""
Source CRUD operations.

Deleting a source cascades a soft delete to its fragments and is refused while
any visible fragment of the source belongs to a knowledge unit.

Dependencies: sqlalchemy, knowledge_core.boundary.db.models
System role: Source persistence operations
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.models.fragment_model import FragmentModel
from knowledge_core.boundary.db.models.source_model import SourceModel, SourceType
from knowledge_core.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_core.boundary.db.CRUD.fragment_crud import FragmentCRUD, fragment_crud
from knowledge_core.core.exceptions import ValidationError
from knowledge_core.core.outcomes import DeletionOutcome

logger = logging.getLogger(__name__)


class SourceCRUD(BaseCRUD[SourceModel]):
    """CRUD operations for SourceModel."""

    def __init__(self, fragments: FragmentCRUD | None = None) -> None:
        """
        Initialize SourceCRUD with SourceModel.

        Args:
            fragments: Fragment CRUD used for the cascade (defaults to the singleton)
        """
        super().__init__(SourceModel)
        self.fragments = fragments or fragment_crud

    async def validate(
        self,
        session: AsyncSession,
        values: dict[str, Any],
        partial: bool = False,
    ) -> dict[str, Any]:
        if not partial or "name" in values:
            name = values.get("name")
            if name is None or not name.strip():
                raise ValidationError("name must not be empty", field="name")
            if len(name) > 255:
                raise ValidationError("name exceeds 255 characters", field="name")
        if values.get("source_type") is not None:
            try:
                values["source_type"] = SourceType(values["source_type"])
            except ValueError as exc:
                raise ValidationError(
                    f"Unknown source type: {values['source_type']}",
                    field="source_type",
                ) from exc
        return values

    async def get_clustered_fragment_ids(
        self,
        session: AsyncSession,
        source_id: UUID,
    ) -> list[UUID]:
        """
        List visible fragments of a source that belong to a knowledge unit.

        These are the fragments that block deleting the source.

        Args:
            session: Async database session
            source_id: Source UUID

        Returns:
            list[UUID]: Ids of clustered fragments
        """
        members = await self.fragments.get_all(
            session,
            FragmentModel.source_id == source_id,
            FragmentModel.cluster_id.is_not(None),
        )
        return [fragment.id for fragment in members]

    async def soft_delete(self, session: AsyncSession, id: UUID) -> DeletionOutcome:
        """
        Mark a source and its fragments deleted.

        The source row is updated only if no visible fragment of it is
        clustered, checked in the same UPDATE statement. Its unclustered
        fragments are then soft deleted under the fragment deletion guard.

        Args:
            session: Async database session
            id: Source UUID

        Returns:
            DeletionOutcome: OK, DELETION_BLOCKED or NOT_FOUND
        """
        clustered_member = (
            select(FragmentModel.id)
            .where(
                FragmentModel.source_id == id,
                FragmentModel.is_deleted.is_(False),
                FragmentModel.cluster_id.is_not(None),
            )
            .exists()
        )
        deleted = await self._conditional_update(
            session,
            "soft_delete",
            [SourceModel.id == id, SourceModel.is_deleted.is_(False), ~clustered_member],
            {"is_deleted": True},
        )
        if deleted:
            cascaded = await self.fragments.soft_delete_unclustered_by_source(session, id)
            logger.debug(
                "Cascaded source deletion to fragments",
                extra={"source_id": str(id), "fragment_count": len(cascaded)},
            )
            return DeletionOutcome.OK
        if await self.get_by_id(session, id) is None:
            return DeletionOutcome.NOT_FOUND
        return DeletionOutcome.DELETION_BLOCKED


source_crud = SourceCRUD()
