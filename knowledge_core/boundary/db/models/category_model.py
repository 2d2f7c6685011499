"""
Category ORM model.

Shared tag referenced by fragments and knowledge units.

Dependencies: sqlalchemy, knowledge_core.boundary.db.base
System role: Category persistence
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_core.boundary.db.base import Base, UUIDMixin, TimestampMixin


class CategoryModel(Base, UUIDMixin, TimestampMixin):
    """
    Category ORM model.

    Immutable after creation. Many fragments and knowledge units may
    reference one category; deleting a referent never touches the category.

    Attributes:
        id: UUID primary key (auto-generated)
        name: Unique display name (100 char limit)
        icon: Optional icon identifier (100 char limit)
        created_at: Creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        doc="Category display name",
    )

    icon: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        default=None,
        doc="Icon identifier",
    )
