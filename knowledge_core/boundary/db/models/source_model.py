"""
Source ORM model.

Represents the meeting transcript or document fragments were extracted from.

Dependencies: sqlalchemy, knowledge_core.boundary.db.base
System role: Source persistence and fragment provenance
"""

import enum
from datetime import datetime

from sqlalchemy import String, Text, Enum, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_core.boundary.db.base import Base, UUIDMixin, TimestampMixin, SoftDeleteMixin


class SourceType(str, enum.Enum):
    """
    Kind of originating material.

    MEETING: Meeting transcript
    DOCUMENT: Written document
    """

    MEETING = "meeting"
    DOCUMENT = "document"


class SourceModel(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    Source ORM model.

    Fragments belong primarily to their source. Deleting a source soft-deletes
    its fragments, and is refused while any of them is clustered.

    Attributes:
        id: UUID primary key (auto-generated)
        name: Display name (255 char limit)
        source_type: MEETING or DOCUMENT
        content: Raw text the fragments were extracted from
        occurred_at: When the meeting happened or the document was written
        is_deleted: Logical deletion flag
    """

    __tablename__ = "sources"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Source display name",
    )

    source_type: Mapped[SourceType] = mapped_column(
        Enum(SourceType, native_enum=False),
        nullable=False,
        default=SourceType.MEETING,
    )

    content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    occurred_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )
