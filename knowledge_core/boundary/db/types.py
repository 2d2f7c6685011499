"""
Custom column types.

Embeddings use the pgvector `vector` type on PostgreSQL, where the database
evaluates cosine distance, and a JSON array everywhere else.

Dependencies: sqlalchemy, pgvector
System role: Storage for embedding vectors
"""

from typing import Any

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator, TypeEngine

# Dialects whose embedding column supports the <=> cosine distance operator
VECTOR_DIALECTS = frozenset({"postgresql"})


def has_vector_operator(dialect: Dialect) -> bool:
    """True when the database computes cosine distance itself."""
    return dialect.name in VECTOR_DIALECTS


class EmbeddingVector(TypeDecorator):
    """
    Float vector column.

    Python None maps to SQL NULL (not JSON 'null') so that
    `embedding IS NULL` identifies records that are not indexed yet.
    The column has no fixed width; dimensionality is enforced by the CRUD
    layer per record kind.
    """

    impl = JSON(none_as_null=True)
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if has_vector_operator(dialect):
            return dialect.type_descriptor(Vector())
        return dialect.type_descriptor(self.impl)

    def process_bind_param(self, value: Any, dialect) -> list[float] | None:
        if value is None:
            return None
        return [float(component) for component in value]

    def process_result_value(self, value: Any, dialect) -> list[float] | None:
        if value is None:
            return None
        return [float(component) for component in value]
