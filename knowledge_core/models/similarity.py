"""
Similarity query parameters.

Dependencies: pydantic
System role: Validated options for SimilarityRanker.find_similar
"""

from uuid import UUID

from pydantic import BaseModel, Field


class SimilarityQuery(BaseModel):
    """Options for one ranking call."""

    limit: int = Field(..., ge=1, description="Maximum number of results")
    min_similarity: float | None = Field(
        None,
        ge=-1.0,
        le=1.0,
        description="Drop results whose similarity (1 - distance) is below this, compared exactly",
    )
    exclude_clustered: bool = Field(False, description="Drop records that belong to a cluster")
    exclude_ids: frozenset[UUID] = Field(
        default_factory=frozenset,
        description="Record ids never returned, e.g. the query's own record",
    )
