"""
Knowledge unit schemas.

Dependencies: pydantic
System role: Attributes for creating a knowledge unit from a cluster
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from knowledge_core.boundary.db.models.knowledge_unit_model import ConfidenceLevel


class KnowledgeUnitAttributes(BaseModel):
    """Field values for a new knowledge unit."""

    title: str = Field(..., min_length=1, max_length=200, description="Unit title")
    summary: str = Field("", max_length=500, description="Brief summary")
    content: str = Field(..., min_length=1, max_length=10000, description="Consolidated text")
    confidence: ConfidenceLevel = Field(ConfidenceLevel.UNCLEAR, description="Confidence level")
    confidence_comment: str | None = Field(None, max_length=1000)
    clustering_comment: str | None = Field(None, max_length=2000)
    category_id: uuid.UUID
    embedding: list[float] | None = Field(None, description="Optional unit embedding")

    def to_fields(self) -> dict[str, Any]:
        """Keyword arguments for KnowledgeUnitCRUD.create."""
        return self.model_dump()
