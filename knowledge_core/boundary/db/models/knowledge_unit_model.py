"""
KnowledgeUnit ORM model.

Represents a consolidated, de-duplicated statement synthesized from one or
more similar fragments.

Dependencies: sqlalchemy, knowledge_core.boundary.db.base
System role: Knowledge unit persistence and similarity search target
"""

import enum
from uuid import UUID

from sqlalchemy import String, Text, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_core.boundary.db.base import Base, UUIDMixin, TimestampMixin, SoftDeleteMixin
from knowledge_core.boundary.db.types import EmbeddingVector

_CONFIDENCE_ORDER = ("low", "medium", "high", "certain")


class ConfidenceLevel(str, enum.Enum):
    """
    Confidence in extracted or synthesized knowledge.

    Ordered LOW < MEDIUM < HIGH < CERTAIN. UNCLEAR is a sentinel for
    "could not be judged" and compares with nothing.
    """

    UNCLEAR = "unclear"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CERTAIN = "certain"

    @property
    def rank(self) -> int | None:
        """Position in the ordering, None for UNCLEAR."""
        if self.value in _CONFIDENCE_ORDER:
            return _CONFIDENCE_ORDER.index(self.value)
        return None

    def _ranks(self, other: object) -> tuple[int, int]:
        if not isinstance(other, ConfidenceLevel):
            raise TypeError(f"Cannot compare ConfidenceLevel with {type(other).__name__}")
        if self.rank is None or other.rank is None:
            raise TypeError(f"'{self.value}' and '{other.value}' are not ordered")
        return self.rank, other.rank

    def __lt__(self, other: object) -> bool:
        mine, theirs = self._ranks(other)
        return mine < theirs

    def __le__(self, other: object) -> bool:
        mine, theirs = self._ranks(other)
        return mine <= theirs

    def __gt__(self, other: object) -> bool:
        mine, theirs = self._ranks(other)
        return mine > theirs

    def __ge__(self, other: object) -> bool:
        mine, theirs = self._ranks(other)
        return mine >= theirs


class KnowledgeUnitModel(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    KnowledgeUnit ORM model.

    Members are the fragments whose cluster_id equals this unit's id. There is
    no ORM relationship to them: membership is resolved through the fragment
    CRUD so that soft-deleted members stay invisible. The embedding is computed
    independently and is never derived from the members.

    Attributes:
        id: UUID primary key (auto-generated)
        title: Short title (200 char limit)
        summary: Brief summary (500 char limit)
        content: Synthesized content (10000 char limit)
        confidence: ConfidenceLevel, UNCLEAR until judged
        confidence_comment: Factors behind the confidence (1000 char limit)
        clustering_comment: Reasoning recorded when the unit was clustered (2000 char limit)
        category_id: Foreign key to categories.id
        embedding: Optional vector, NULL until indexed
        is_deleted: Logical deletion flag
        created_at / updated_at: UTC timestamps
    """

    __tablename__ = "knowledge_units"

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    summary: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    content: Mapped[str] = mapped_column(Text, nullable=False)

    confidence: Mapped[ConfidenceLevel] = mapped_column(
        Enum(ConfidenceLevel, native_enum=False),
        nullable=False,
        default=ConfidenceLevel.UNCLEAR,
    )

    confidence_comment: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
        default=None,
    )

    clustering_comment: Mapped[str | None] = mapped_column(
        String(2000),
        nullable=True,
        default=None,
    )

    category_id: Mapped[UUID] = mapped_column(
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )

    embedding: Mapped[list[float] | None] = mapped_column(
        EmbeddingVector(),
        nullable=True,
        default=None,
    )
