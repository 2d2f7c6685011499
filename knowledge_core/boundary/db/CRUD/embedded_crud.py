"""
Shared CRUD behaviour for records that carry text and an embedding.

Fragments and knowledge units share field validation: non-empty title and
content, an existing category, and an embedding whose length matches the
dimension configured for the record kind.

Dependencies: sqlalchemy, numpy, pgvector, knowledge_core.configs
System role: Validation and embedded-row scans for the vector record store
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence, TypeVar
from uuid import UUID

import numpy as np
from sqlalchemy import ColumnElement, Float, Select, bindparam, cast, func
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.base import Base
from knowledge_core.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_core.boundary.db.models.category_model import CategoryModel
from knowledge_core.boundary.db.models.knowledge_unit_model import ConfidenceLevel
from knowledge_core.boundary.db.types import EmbeddingVector, has_vector_operator
from knowledge_core.core.exceptions import ValidationError

EmbeddedT = TypeVar("EmbeddedT", bound=Base)


class EmbeddedRecordCRUD(BaseCRUD[EmbeddedT], ABC):
    """
    CRUD base for models with title/summary/content, category and embedding.

    The embedding dimension is fixed per record kind. It is passed explicitly
    or read once from settings on first use.
    """

    required_text_fields: tuple[str, ...] = ("title", "content")
    max_lengths: dict[str, int] = {
        "title": 200,
        "summary": 500,
        "content": 10000,
        "confidence_comment": 1000,
    }

    def __init__(
        self,
        model: type[EmbeddedT],
        embedding_dimensions: int | None = None,
    ) -> None:
        """
        Initialize CRUD with target model and optional fixed dimension.

        Args:
            model: SQLAlchemy model class
            embedding_dimensions: Vector length; None reads it from settings
        """
        super().__init__(model)
        if embedding_dimensions is not None and embedding_dimensions < 1:
            raise ValidationError(
                "embedding_dimensions must be at least 1",
                field="embedding_dimensions",
            )
        self._embedding_dimensions = embedding_dimensions

    @abstractmethod
    def _configured_dimensions(self) -> int:
        """Dimension setting for this record kind."""

    @property
    def embedding_dimensions(self) -> int:
        """Fixed embedding length for this record kind."""
        if self._embedding_dimensions is None:
            self._embedding_dimensions = self._configured_dimensions()
        return self._embedding_dimensions

    def validate_embedding(
        self,
        embedding: Sequence[float] | None,
        field: str = "embedding",
    ) -> list[float] | None:
        """
        Check an embedding against the configured dimension.

        Args:
            embedding: Candidate vector, or None for "not indexed"
            field: Field name reported on failure

        Returns:
            list[float] | None: Normalized vector

        Raises:
            ValidationError: Wrong length, non-numeric or non-finite values
        """
        if embedding is None:
            return None
        try:
            vector = np.asarray(embedding, dtype=float)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                "Embedding must be a sequence of numbers",
                field=field,
            ) from exc
        if vector.ndim != 1 or vector.shape[0] != self.embedding_dimensions:
            raise ValidationError(
                f"Embedding must have {self.embedding_dimensions} dimensions",
                field=field,
                details={
                    "expected": self.embedding_dimensions,
                    "actual": int(vector.shape[0]) if vector.ndim == 1 else list(vector.shape),
                },
            )
        if not np.all(np.isfinite(vector)):
            raise ValidationError("Embedding values must be finite", field=field)
        return vector.tolist()

    async def validate(
        self,
        session: AsyncSession,
        values: dict[str, Any],
        partial: bool = False,
    ) -> dict[str, Any]:
        for name in self.required_text_fields:
            if partial and name not in values:
                continue
            value = values.get(name)
            if value is None or not str(value).strip():
                raise ValidationError(f"{name} must not be empty", field=name)

        for name, limit in self.max_lengths.items():
            value = values.get(name)
            if value is not None and len(value) > limit:
                raise ValidationError(
                    f"{name} exceeds {limit} characters",
                    field=name,
                    details={"length": len(value)},
                )

        if partial and "category_id" in values:
            raise ValidationError(
                "Category cannot be changed after creation",
                field="category_id",
            )
        if not partial:
            category_id = values.get("category_id")
            if not await self._reference_exists(session, CategoryModel, category_id):
                raise ValidationError(
                    "Category does not exist",
                    field="category_id",
                    details={"category_id": str(category_id)},
                )

        if values.get("confidence") is not None:
            try:
                values["confidence"] = ConfidenceLevel(values["confidence"])
            except ValueError as exc:
                raise ValidationError(
                    f"Unknown confidence level: {values['confidence']}",
                    field="confidence",
                ) from exc

        if "embedding" in values:
            values["embedding"] = self.validate_embedding(values["embedding"])
        return values

    async def set_embedding(
        self,
        session: AsyncSession,
        id: UUID,
        embedding: Sequence[float] | None,
    ) -> EmbeddedT | None:
        """
        Attach or replace the embedding of a visible record.

        Args:
            session: Async database session
            id: Record UUID
            embedding: New vector, or None to mark the record unindexed

        Returns:
            Updated model instance if found, None otherwise
        """
        return await self.update_by_id(session, id, embedding=embedding)

    async def get_embedded(
        self,
        session: AsyncSession,
        *criteria: ColumnElement[bool],
    ) -> Sequence[EmbeddedT]:
        """
        Retrieve visible records that have an embedding.

        Args:
            session: Async database session
            *criteria: Extra WHERE clauses

        Returns:
            Sequence of model instances with non-null embeddings
        """
        stmt = self._scan(self.model.embedding.is_not(None), *criteria)
        result = await self._execute(session, stmt, "get_embedded")
        return result.scalars().all()

    def computes_distance(self, session: AsyncSession) -> bool:
        """True when the session's database evaluates cosine distance."""
        return has_vector_operator(session.get_bind().dialect)

    def cosine_distance(self, query_embedding: Sequence[float]) -> ColumnElement[float]:
        """SQL expression for the cosine distance of each row to a query vector."""
        query = cast(
            bindparam("query_embedding", list(query_embedding), type_=EmbeddingVector()),
            EmbeddingVector(),
        )
        return self.model.embedding.op("<=>", return_type=Float)(query)

    def nearest_statement(
        self,
        query_embedding: Sequence[float],
        limit: int,
        *criteria: ColumnElement[bool],
        min_similarity: float | None = None,
    ) -> Select:
        """
        Build the database-side nearest neighbour query.

        Rows of another width are filtered out before the operator runs.
        Zero-magnitude rows yield NaN, which fails the distance bound.

        Args:
            query_embedding: Validated non-zero query vector
            limit: Maximum number of rows
            *criteria: Extra WHERE clauses
            min_similarity: Drop rows whose 1 - distance is below this

        Returns:
            Select: Rows of (record, distance), nearest first
        """
        distance = self.cosine_distance(query_embedding)
        conditions = [
            self.model.embedding.is_not(None),
            func.vector_dims(self.model.embedding) == self.embedding_dimensions,
            distance <= 2.0,
            *criteria,
        ]
        if min_similarity is not None:
            conditions.append(1.0 - distance >= min_similarity)
        return (
            self._scan(*conditions)
            .add_columns(distance.label("distance"))
            .order_by(distance, self.model.created_at, self.model.id)
            .limit(limit)
        )

    async def get_nearest(
        self,
        session: AsyncSession,
        query_embedding: Sequence[float],
        limit: int,
        *criteria: ColumnElement[bool],
        min_similarity: float | None = None,
    ) -> list[tuple[EmbeddedT, float]]:
        """
        Let the database rank visible records by cosine distance.

        Only valid where computes_distance(session) is True.

        Returns:
            list[tuple]: (record, distance) pairs, nearest first
        """
        stmt = self.nearest_statement(
            query_embedding, limit, *criteria, min_similarity=min_similarity
        )
        result = await self._execute(session, stmt, "get_nearest")
        return [(record, float(distance)) for record, distance in result.all()]
