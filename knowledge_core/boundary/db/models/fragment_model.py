"""
Fragment ORM model.

Represents an atomic unit of content extracted from a source, the smallest
unit of similarity search.

Dependencies: sqlalchemy, knowledge_core.boundary.db.base
System role: Fragment persistence and similarity search target
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import String, Text, Enum, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_core.boundary.db.base import Base, UUIDMixin, TimestampMixin, SoftDeleteMixin
from knowledge_core.boundary.db.models.knowledge_unit_model import ConfidenceLevel
from knowledge_core.boundary.db.types import EmbeddingVector


class FragmentModel(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    Fragment ORM model.

    Lifecycle: created by ingestion (embedding optional) → embedding attached →
    assigned to a knowledge unit at most once. cluster_id moves from NULL to a
    unit id exactly once and is never cleared or reassigned; while it is set
    the fragment cannot be deleted.

    Attributes:
        id: UUID primary key (auto-generated)
        title: Short title (200 char limit)
        summary: Brief summary (500 char limit)
        content: Extracted text (10000 char limit)
        category_id: Foreign key to categories.id
        source_id: Foreign key to sources.id (originating source)
        embedding: Optional vector, NULL means not indexed yet
        cluster_id: Weak reference to knowledge_units.id, NULL means unclustered
        clustering_processed_at: Set once the consolidation pass has considered it
        confidence: Optional extraction confidence
        confidence_comment: Factors behind the confidence (1000 char limit)
        is_deleted: Logical deletion flag
        created_at / updated_at: UTC timestamps

    Constraints:
        cluster_id: plain foreign key, no ON DELETE action
    """

    __tablename__ = "fragments"

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    summary: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    content: Mapped[str] = mapped_column(Text, nullable=False)

    category_id: Mapped[UUID] = mapped_column(
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )

    source_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("sources.id"),
        nullable=True,
        default=None,
        index=True,
    )

    embedding: Mapped[list[float] | None] = mapped_column(
        EmbeddingVector(),
        nullable=True,
        default=None,
    )

    cluster_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("knowledge_units.id"),
        nullable=True,
        default=None,
        index=True,
    )

    clustering_processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    confidence: Mapped[ConfidenceLevel | None] = mapped_column(
        Enum(ConfidenceLevel, native_enum=False),
        nullable=True,
        default=None,
    )

    confidence_comment: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
        default=None,
    )
