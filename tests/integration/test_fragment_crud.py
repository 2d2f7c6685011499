"""
Test suite for FragmentCRUD database operations.

Tests field validation, the deletion guard, single-winner cluster assignment,
membership traversal and the consolidation markers.

System role: Verification of fragment persistence layer
"""

import math
import uuid

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.embedded_crud import EmbeddedRecordCRUD
from knowledge_core.boundary.db.CRUD.fragment_crud import FragmentCRUD
from knowledge_core.boundary.db.models.fragment_model import FragmentModel
from knowledge_core.boundary.db.models.knowledge_unit_model import ConfidenceLevel
from knowledge_core.configs import get_settings
from knowledge_core.core.exceptions import ValidationError
from knowledge_core.core.outcomes import AssignmentOutcome, DeletionOutcome


class TestFragmentCRUDInit:
    """Test suite for FragmentCRUD initialization."""

    def test_init_should_set_model_to_fragment_model(self) -> None:
        """Test FragmentCRUD initializes with FragmentModel."""
        # Act
        crud = FragmentCRUD(embedding_dimensions=8)

        # Assert
        assert crud.model == FragmentModel
        assert crud.embedding_dimensions == 8

    def test_init_should_reject_non_positive_dimensions(self) -> None:
        """Test dimension must be at least one."""
        # Act / Assert
        with pytest.raises(ValidationError):
            FragmentCRUD(embedding_dimensions=0)

    def test_init_without_dimensions_should_read_fragment_setting(self) -> None:
        """Test dimension falls back to the fragment embedding setting."""
        # Act
        crud = FragmentCRUD()

        # Assert
        assert crud.embedding_dimensions == get_settings().embedding.fragment_dimensions

    def test_embedded_base_should_not_be_instantiable(self) -> None:
        """Test the shared base requires a per-kind dimension setting."""
        # Act / Assert
        with pytest.raises(TypeError):
            EmbeddedRecordCRUD(FragmentModel, embedding_dimensions=8)


class TestFragmentCRUDCreate:
    """Test suite for FragmentCRUD.create() validation."""

    @pytest.mark.asyncio
    async def test_create_should_store_embedding_and_defaults(
        self, make_fragment, embedding
    ) -> None:
        """Test valid fragment is created unclustered and visible."""
        # Act
        fragment = await make_fragment("A", embedding=embedding(1.0))

        # Assert
        assert fragment.id is not None
        assert fragment.embedding == embedding(1.0)
        assert fragment.cluster_id is None
        assert fragment.is_deleted is False
        assert fragment.clustering_processed_at is None

    @pytest.mark.asyncio
    async def test_create_should_reject_dimension_mismatch(self, make_fragment) -> None:
        """Test embedding length must match the configured dimension."""
        # Act / Assert
        with pytest.raises(ValidationError) as exc_info:
            await make_fragment(embedding=[1.0, 0.0, 0.0])
        assert exc_info.value.field == "embedding"
        assert exc_info.value.details["expected"] == 8

    @pytest.mark.asyncio
    async def test_create_should_reject_non_finite_values(self, make_fragment, embedding) -> None:
        """Test NaN components are rejected."""
        # Act / Assert
        with pytest.raises(ValidationError) as exc_info:
            await make_fragment(embedding=embedding(math.nan))
        assert exc_info.value.field == "embedding"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["title", "content"])
    async def test_create_should_reject_blank_required_text(
        self, make_fragment, field: str
    ) -> None:
        """Test title and content must not be blank."""
        # Act / Assert
        with pytest.raises(ValidationError) as exc_info:
            await make_fragment(**{field: "   "})
        assert exc_info.value.field == field

    @pytest.mark.asyncio
    async def test_create_should_reject_unknown_category(self, make_fragment) -> None:
        """Test category must exist."""
        # Act / Assert
        with pytest.raises(ValidationError) as exc_info:
            await make_fragment(category_id=uuid.uuid4())
        assert exc_info.value.field == "category_id"

    @pytest.mark.asyncio
    async def test_create_should_reject_unknown_source(self, make_fragment) -> None:
        """Test source reference must exist."""
        # Act / Assert
        with pytest.raises(ValidationError) as exc_info:
            await make_fragment(source_id=uuid.uuid4())
        assert exc_info.value.field == "source_id"

    @pytest.mark.asyncio
    async def test_create_should_normalize_confidence(self, make_fragment) -> None:
        """Test confidence given as a string becomes the enum."""
        # Act
        fragment = await make_fragment(confidence="high")

        # Assert
        assert fragment.confidence is ConfidenceLevel.HIGH

    @pytest.mark.asyncio
    async def test_create_should_reject_unknown_confidence(self, make_fragment) -> None:
        """Test unknown confidence level fails validation."""
        # Act / Assert
        with pytest.raises(ValidationError) as exc_info:
            await make_fragment(confidence="very high")
        assert exc_info.value.field == "confidence"

    @pytest.mark.asyncio
    async def test_create_should_reject_guarded_fields(self, make_fragment, sample_id) -> None:
        """Test cluster_id cannot be supplied at creation."""
        # Act / Assert
        with pytest.raises(ValidationError) as exc_info:
            await make_fragment(cluster_id=sample_id)
        assert exc_info.value.field == "cluster_id"


class TestFragmentCRUDSetEmbedding:
    """Test suite for FragmentCRUD.set_embedding() method."""

    @pytest.mark.asyncio
    async def test_set_embedding_should_attach_vector(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment, embedding
    ) -> None:
        """Test embedding can be attached after creation."""
        # Arrange
        fragment = await make_fragment()

        # Act
        result = await fragment_store.set_embedding(test_async_db, fragment.id, embedding(0.0, 1.0))

        # Assert
        assert result.embedding == embedding(0.0, 1.0)

    @pytest.mark.asyncio
    async def test_set_embedding_should_reject_wrong_dimension(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment
    ) -> None:
        """Test no implicit resizing or padding."""
        # Arrange
        fragment = await make_fragment()

        # Act / Assert
        with pytest.raises(ValidationError):
            await fragment_store.set_embedding(test_async_db, fragment.id, [1.0] * 9)


class TestFragmentCRUDSoftDelete:
    """Test suite for FragmentCRUD.soft_delete() method."""

    @pytest.mark.asyncio
    async def test_soft_delete_should_mark_unclustered_fragment_deleted(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment
    ) -> None:
        """Test deletion of an unclustered fragment is logical."""
        # Arrange
        fragment = await make_fragment()

        # Act
        outcome = await fragment_store.soft_delete(test_async_db, fragment.id)

        # Assert
        assert outcome is DeletionOutcome.OK
        audit = await fragment_store.get_all_including_deleted(
            test_async_db, FragmentModel.id == fragment.id
        )
        assert len(audit) == 1
        assert audit[0].is_deleted is True

    @pytest.mark.asyncio
    async def test_soft_delete_should_block_clustered_fragment(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment, make_unit
    ) -> None:
        """Test clustered fragment is not deleted and stays visible."""
        # Arrange
        fragment = await make_fragment()
        unit = await make_unit()
        await fragment_store.assign_cluster(test_async_db, fragment.id, unit.id)

        # Act
        outcome = await fragment_store.soft_delete(test_async_db, fragment.id)

        # Assert
        assert outcome is DeletionOutcome.DELETION_BLOCKED
        current = await fragment_store.get_by_id(test_async_db, fragment.id)
        assert current is not None
        assert current.is_deleted is False

    @pytest.mark.asyncio
    async def test_soft_delete_should_report_not_found_twice_deleted(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment
    ) -> None:
        """Test deleting an already deleted fragment is NOT_FOUND."""
        # Arrange
        fragment = await make_fragment()
        await fragment_store.soft_delete(test_async_db, fragment.id)

        # Act
        outcome = await fragment_store.soft_delete(test_async_db, fragment.id)

        # Assert
        assert outcome is DeletionOutcome.NOT_FOUND

    @pytest.mark.asyncio
    async def test_soft_delete_should_report_not_found_for_missing_id(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, sample_id: uuid.UUID
    ) -> None:
        """Test unknown id is NOT_FOUND."""
        # Act
        outcome = await fragment_store.soft_delete(test_async_db, sample_id)

        # Assert
        assert outcome is DeletionOutcome.NOT_FOUND


class TestFragmentCRUDAssignCluster:
    """Test suite for FragmentCRUD.assign_cluster() method."""

    @pytest.mark.asyncio
    async def test_assign_cluster_should_set_cluster_and_processed_marker(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment, make_unit
    ) -> None:
        """Test successful assignment sets both fields."""
        # Arrange
        fragment = await make_fragment()
        unit = await make_unit()

        # Act
        outcome = await fragment_store.assign_cluster(test_async_db, fragment.id, unit.id)

        # Assert
        assert outcome is AssignmentOutcome.OK
        current = await fragment_store.get_by_id(test_async_db, fragment.id)
        assert current.cluster_id == unit.id
        assert current.clustering_processed_at is not None

    @pytest.mark.asyncio
    async def test_assign_cluster_should_never_reassign(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment, make_unit
    ) -> None:
        """Test second assignment reports ALREADY_CLUSTERED and keeps the first unit."""
        # Arrange
        fragment = await make_fragment()
        first = await make_unit("X")
        second = await make_unit("Y")
        await fragment_store.assign_cluster(test_async_db, fragment.id, first.id)

        # Act
        outcome = await fragment_store.assign_cluster(test_async_db, fragment.id, second.id)

        # Assert
        assert outcome is AssignmentOutcome.ALREADY_CLUSTERED
        current = await fragment_store.get_by_id(test_async_db, fragment.id)
        assert current.cluster_id == first.id

    @pytest.mark.asyncio
    async def test_assign_cluster_should_not_find_deleted_fragment(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment, make_unit
    ) -> None:
        """Test deleted fragment cannot be assigned."""
        # Arrange
        fragment = await make_fragment()
        unit = await make_unit()
        await fragment_store.soft_delete(test_async_db, fragment.id)

        # Act
        outcome = await fragment_store.assign_cluster(test_async_db, fragment.id, unit.id)

        # Assert
        assert outcome is AssignmentOutcome.NOT_FOUND
        audit = await fragment_store.get_all_including_deleted(
            test_async_db, FragmentModel.id == fragment.id
        )
        assert audit[0].cluster_id is None

    @pytest.mark.asyncio
    async def test_assign_cluster_should_not_find_missing_unit(
        self,
        test_async_db: AsyncSession,
        fragment_store: FragmentCRUD,
        make_fragment,
        sample_id: uuid.UUID,
    ) -> None:
        """Test assignment to an unknown unit leaves the fragment unclustered."""
        # Arrange
        fragment = await make_fragment()

        # Act
        outcome = await fragment_store.assign_cluster(test_async_db, fragment.id, sample_id)

        # Assert
        assert outcome is AssignmentOutcome.NOT_FOUND
        current = await fragment_store.get_by_id(test_async_db, fragment.id)
        assert current.cluster_id is None

    @pytest.mark.asyncio
    async def test_assign_cluster_should_not_find_deleted_unit(
        self,
        test_async_db: AsyncSession,
        fragment_store: FragmentCRUD,
        unit_store,
        make_fragment,
        make_unit,
    ) -> None:
        """Test deleted unit no longer accepts members."""
        # Arrange
        fragment = await make_fragment()
        unit = await make_unit()
        await unit_store.soft_delete(test_async_db, unit.id)

        # Act
        outcome = await fragment_store.assign_cluster(test_async_db, fragment.id, unit.id)

        # Assert
        assert outcome is AssignmentOutcome.NOT_FOUND


class TestFragmentCRUDTraversal:
    """Test suite for relationship traversal methods."""

    @pytest.mark.asyncio
    async def test_get_by_cluster_id_should_hide_deleted_members(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment, make_unit
    ) -> None:
        """Test deleted members stay linked but invisible."""
        # Arrange
        unit = await make_unit()
        kept = await make_fragment("kept")
        hidden = await make_fragment("hidden")
        await fragment_store.assign_cluster(test_async_db, kept.id, unit.id)
        await fragment_store.assign_cluster(test_async_db, hidden.id, unit.id)
        await test_async_db.execute(
            update(FragmentModel).where(FragmentModel.id == hidden.id).values(is_deleted=True)
        )

        # Act
        members = await fragment_store.get_by_cluster_id(test_async_db, unit.id)

        # Assert
        assert [m.id for m in members] == [kept.id]

    @pytest.mark.asyncio
    async def test_get_by_source_id_should_return_source_fragments(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment, source
    ) -> None:
        """Test fragments of a source are found, other fragments are not."""
        # Arrange
        own = await make_fragment("own", source_id=source.id)
        await make_fragment("other")

        # Act
        result = await fragment_store.get_by_source_id(test_async_db, source.id)

        # Assert
        assert [f.id for f in result] == [own.id]

    @pytest.mark.asyncio
    async def test_get_by_ids_should_skip_deleted_and_unknown(
        self,
        test_async_db: AsyncSession,
        fragment_store: FragmentCRUD,
        make_fragment,
        sample_id: uuid.UUID,
    ) -> None:
        """Test batch lookup honours the soft-delete guard."""
        # Arrange
        visible = await make_fragment("visible")
        deleted = await make_fragment("deleted")
        await fragment_store.soft_delete(test_async_db, deleted.id)

        # Act
        result = await fragment_store.get_by_ids(
            test_async_db, [visible.id, deleted.id, sample_id]
        )

        # Assert
        assert [f.id for f in result] == [visible.id]
        assert await fragment_store.get_by_ids(test_async_db, []) == []


class TestFragmentCRUDConsolidationMarkers:
    """Test suite for clustering_processed_at handling."""

    @pytest.mark.asyncio
    async def test_mark_clustering_processed_should_set_once(
        self, test_async_db: AsyncSession, fragment_store: FragmentCRUD, make_fragment
    ) -> None:
        """Test marker is set only when currently empty."""
        # Arrange
        fragment = await make_fragment()

        # Act
        first = await fragment_store.mark_clustering_processed(test_async_db, fragment.id)
        second = await fragment_store.mark_clustering_processed(test_async_db, fragment.id)

        # Assert
        assert first is True
        assert second is False

    @pytest.mark.asyncio
    async def test_get_next_unprocessed_should_pick_newest_pending(
        self,
        test_async_db: AsyncSession,
        fragment_store: FragmentCRUD,
        make_fragment,
        make_unit,
        embedding,
    ) -> None:
        """Test seed selection skips unembedded, clustered and processed fragments."""
        # Arrange
        older = await make_fragment("older", embedding=embedding(1.0))
        newer = await make_fragment("newer", embedding=embedding(0.0, 1.0))
        processed = await make_fragment("processed", embedding=embedding(1.0))
        clustered = await make_fragment("clustered", embedding=embedding(1.0))
        await make_fragment("unembedded")
        unit = await make_unit()
        await fragment_store.mark_clustering_processed(test_async_db, processed.id)
        await fragment_store.assign_cluster(test_async_db, clustered.id, unit.id)

        # Act
        first = await fragment_store.get_next_unprocessed(test_async_db)
        await fragment_store.mark_clustering_processed(test_async_db, newer.id)
        second = await fragment_store.get_next_unprocessed(test_async_db)
        await fragment_store.mark_clustering_processed(test_async_db, older.id)
        third = await fragment_store.get_next_unprocessed(test_async_db)

        # Assert
        assert first.id == newer.id
        assert second.id == older.id
        assert third is None
