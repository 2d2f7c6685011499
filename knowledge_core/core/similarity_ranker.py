"""
Similarity ranking over embedded records.

Ranks visible records by cosine distance to a query embedding. Candidate rows
come from the store's guarded scan, so deleted and embedding-less records
never participate. PostgreSQL computes the distance, threshold, order and
limit with the pgvector <=> operator; other databases rank with numpy.

Dependencies: numpy, sqlalchemy, knowledge_core.boundary.db.CRUD
System role: Read-only ranking used by authoring workflows and consolidation
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Sequence
from uuid import UUID

import numpy as np
from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.embedded_crud import EmbeddedRecordCRUD
from knowledge_core.core.exceptions import ValidationError
from knowledge_core.models.common import parse_schema
from knowledge_core.models.similarity import SimilarityQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedRecord:
    """A record and its cosine distance to the query."""

    record: Any
    distance: float

    @property
    def similarity(self) -> float:
        return 1.0 - self.distance


def cosine_distances(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """
    Cosine distance between a query vector and each row of a matrix.

    Args:
        query: Non-zero vector of shape (d,)
        matrix: Non-zero rows of shape (n, d)

    Returns:
        np.ndarray: Distances in [0, 2], shape (n,)
    """
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    similarities = (matrix @ query) / norms
    return np.clip(1.0 - similarities, 0.0, 2.0)


class SimilarityRanker:
    """
    Ranks records of one kind by closeness to a query embedding.

    Ordering is ascending distance, then creation time, then id, so equal
    distances produce a reproducible order.
    """

    def __init__(self, store: EmbeddedRecordCRUD) -> None:
        """
        Args:
            store: CRUD of the record kind to rank (fragments or knowledge units)
        """
        self.store = store

    def _query_vector(self, query_embedding: Sequence[float]) -> np.ndarray:
        if query_embedding is None:
            raise ValidationError("Query embedding is required", field="query_embedding")
        vector = np.asarray(
            self.store.validate_embedding(query_embedding, field="query_embedding"),
            dtype=float,
        )
        if np.linalg.norm(vector) == 0:
            raise ValidationError(
                "Query embedding must have non-zero magnitude",
                field="query_embedding",
            )
        return vector

    def _filters(self, query: SimilarityQuery, criteria: Iterable[ColumnElement[bool]]) -> list:
        model = self.store.model
        filters = list(criteria)
        if query.exclude_clustered:
            if not hasattr(model, "cluster_id"):
                raise ValidationError(
                    f"{model.__tablename__} records cannot be clustered",
                    field="exclude_clustered",
                )
            filters.append(model.cluster_id.is_(None))
        if query.exclude_ids:
            filters.append(model.id.not_in(list(query.exclude_ids)))
        return filters

    def rank(
        self,
        query_vector: np.ndarray,
        records: Sequence[Any],
        query: SimilarityQuery,
    ) -> list[RankedRecord]:
        """
        Rank already-loaded records against a validated query vector.

        Records whose embedding has the wrong length, a non-finite value or
        zero magnitude are skipped.

        Args:
            query_vector: Non-zero query vector
            records: Candidate records carrying an `embedding`
            query: Ranking options

        Returns:
            list[RankedRecord]: At most query.limit results, most similar first
        """
        eligible = []
        vectors = []
        for record in records:
            vector = np.asarray(record.embedding, dtype=float)
            if vector.shape != query_vector.shape or not np.all(np.isfinite(vector)):
                continue
            if np.linalg.norm(vector) == 0:
                continue
            eligible.append(record)
            vectors.append(vector)
        if not eligible:
            return []

        distances = cosine_distances(query_vector, np.vstack(vectors))
        ranked = [
            RankedRecord(record=record, distance=float(distance))
            for record, distance in zip(eligible, distances)
        ]
        if query.min_similarity is not None:
            ranked = [item for item in ranked if item.similarity >= query.min_similarity]
        ranked.sort(
            key=lambda item: (item.distance, item.record.created_at, str(item.record.id))
        )
        return ranked[: query.limit]

    async def find_similar(
        self,
        session: AsyncSession,
        query_embedding: Sequence[float],
        limit: int,
        *criteria: ColumnElement[bool],
        min_similarity: float | None = None,
        exclude_clustered: bool = False,
        exclude_ids: Iterable[UUID] = (),
    ) -> list[RankedRecord]:
        """
        Find the records closest to a query embedding.

        The min_similarity filter runs before limit truncation, so raising the
        threshold never grows the result. A record matching the query exactly
        is returned unless its id is in exclude_ids.

        Args:
            session: Async database session
            query_embedding: Vector of the store's configured dimension
            limit: Maximum number of results (>= 1)
            *criteria: Extra WHERE clauses applied after the soft-delete guard
            min_similarity: Optional threshold in [-1, 1]
            exclude_clustered: Drop fragments that belong to a knowledge unit
            exclude_ids: Record ids to leave out

        Returns:
            list[RankedRecord]: Ascending distance; empty when nothing qualifies

        Raises:
            ValidationError: Bad limit, threshold, query vector or option
            StorageError: If the candidate scan fails
        """
        query = parse_schema(
            SimilarityQuery,
            {
                "limit": limit,
                "min_similarity": min_similarity,
                "exclude_clustered": exclude_clustered,
                "exclude_ids": frozenset(exclude_ids),
            },
        )
        query_vector = self._query_vector(query_embedding)
        filters = self._filters(query, criteria)

        if self.store.computes_distance(session):
            rows = await self.store.get_nearest(
                session,
                query_vector.tolist(),
                query.limit,
                *filters,
                min_similarity=query.min_similarity,
            )
            ranked = [
                RankedRecord(record=record, distance=min(max(distance, 0.0), 2.0))
                for record, distance in rows
            ]
            ranked_in = "database"
        else:
            candidates = await self.store.get_embedded(session, *filters)
            ranked = self.rank(query_vector, candidates, query)
            ranked_in = "numpy"
        logger.debug(
            "Ranked similar records",
            extra={
                "table": self.store.model.__tablename__,
                "ranked_in": ranked_in,
                "returned": len(ranked),
                "min_similarity": query.min_similarity,
            },
        )
        return ranked
