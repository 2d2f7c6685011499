"""
CRUD operations for database models.

Exports base CRUD classes and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from knowledge_core.boundary.db.CRUD import fragment_crud, knowledge_unit_crud

    # Use singleton instances
    fragment = await fragment_crud.get_by_id(db, fragment_id)

    # Or instantiate classes directly for a fixed embedding dimension
    from knowledge_core.boundary.db.CRUD import FragmentCRUD
    custom_crud = FragmentCRUD(embedding_dimensions=8)
"""

from knowledge_core.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_core.boundary.db.CRUD.embedded_crud import EmbeddedRecordCRUD
from knowledge_core.boundary.db.CRUD.category_crud import CategoryCRUD, category_crud
from knowledge_core.boundary.db.CRUD.fragment_crud import FragmentCRUD, fragment_crud
from knowledge_core.boundary.db.CRUD.source_crud import SourceCRUD, source_crud
from knowledge_core.boundary.db.CRUD.knowledge_unit_crud import (
    KnowledgeUnitCRUD,
    knowledge_unit_crud,
)

__all__ = [
    "BaseCRUD",
    "EmbeddedRecordCRUD",
    "CategoryCRUD",
    "category_crud",
    "FragmentCRUD",
    "fragment_crud",
    "SourceCRUD",
    "source_crud",
    "KnowledgeUnitCRUD",
    "knowledge_unit_crud",
]
