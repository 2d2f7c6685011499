"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin, SoftDeleteMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(), session_scope()
  - CategoryModel, SourceModel, FragmentModel, KnowledgeUnitModel: Domain entities
  - SourceType, ConfidenceLevel: Enum types
  - category_crud, source_crud, fragment_crud, knowledge_unit_crud: CRUD singletons

Dependencies: sqlalchemy, knowledge_core.configs
System role: Vector record store for fragments and knowledge units, with
logical deletion and single-statement state transitions.
"""

from knowledge_core.boundary.db.base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin
from knowledge_core.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
    session_scope,
)
from knowledge_core.boundary.db.models import (
    CategoryModel,
    ConfidenceLevel,
    FragmentModel,
    KnowledgeUnitModel,
    SourceModel,
    SourceType,
)
from knowledge_core.boundary.db.CRUD import (
    BaseCRUD,
    EmbeddedRecordCRUD,
    CategoryCRUD,
    SourceCRUD,
    FragmentCRUD,
    KnowledgeUnitCRUD,
    category_crud,
    source_crud,
    fragment_crud,
    knowledge_unit_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "SoftDeleteMixin",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "session_scope",
    # Models
    "CategoryModel",
    "SourceModel",
    "SourceType",
    "FragmentModel",
    "KnowledgeUnitModel",
    "ConfidenceLevel",
    # CRUD classes
    "BaseCRUD",
    "EmbeddedRecordCRUD",
    "CategoryCRUD",
    "SourceCRUD",
    "FragmentCRUD",
    "KnowledgeUnitCRUD",
    # CRUD singletons
    "category_crud",
    "source_crud",
    "fragment_crud",
    "knowledge_unit_crud",
]
