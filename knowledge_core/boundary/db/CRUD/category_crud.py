"""
Category CRUD operations.

Categories are created once and never modified or deleted.

Dependencies: sqlalchemy, knowledge_core.boundary.db.models.category_model
System role: Category persistence operations
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.models.category_model import CategoryModel
from knowledge_core.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_core.core.exceptions import ValidationError


class CategoryCRUD(BaseCRUD[CategoryModel]):
    """CRUD operations for CategoryModel."""

    def __init__(self) -> None:
        """Initialize CategoryCRUD with CategoryModel."""
        super().__init__(CategoryModel)

    async def validate(
        self,
        session: AsyncSession,
        values: dict[str, Any],
        partial: bool = False,
    ) -> dict[str, Any]:
        name = values.get("name")
        if name is None or not name.strip():
            raise ValidationError("name must not be empty", field="name")
        if await self.get_by_name(session, name.strip()) is not None:
            raise ValidationError(
                "Category name already exists",
                field="name",
                details={"name": name},
            )
        values["name"] = name.strip()
        return values

    async def get_by_name(self, session: AsyncSession, name: str) -> CategoryModel | None:
        """
        Retrieve a category by its unique name.

        Args:
            session: Async database session
            name: Category name

        Returns:
            CategoryModel if found, None otherwise
        """
        result = await self._execute(
            session, self._scan(CategoryModel.name == name), "get_by_name"
        )
        return result.scalar_one_or_none()

    async def update_by_id(self, session: AsyncSession, id: UUID, **kwargs) -> CategoryModel | None:
        """Categories are immutable after creation."""
        raise ValidationError(
            "Categories cannot be modified after creation",
            field=next(iter(kwargs), "category"),
            details={"category_id": str(id)},
        )


category_crud = CategoryCRUD()
