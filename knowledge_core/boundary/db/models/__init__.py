"""
Database models package.

Exports:
  - CategoryModel: Shared category tag
  - SourceModel, SourceType: Originating transcript/document and its kind
  - FragmentModel: Extracted content unit with optional embedding
  - KnowledgeUnitModel, ConfidenceLevel: Consolidated unit and confidence enum

Dependencies: sqlalchemy, knowledge_core.boundary.db.base
System role: Database model definitions for domain entities
"""

from knowledge_core.boundary.db.models.category_model import CategoryModel
from knowledge_core.boundary.db.models.source_model import SourceModel, SourceType
from knowledge_core.boundary.db.models.knowledge_unit_model import (
    ConfidenceLevel,
    KnowledgeUnitModel,
)
from knowledge_core.boundary.db.models.fragment_model import FragmentModel

__all__ = [
    "CategoryModel",
    "SourceModel",
    "SourceType",
    "FragmentModel",
    "KnowledgeUnitModel",
    "ConfidenceLevel",
]
