"""
Base CRUD operations for SQLAlchemy models.

Provides generic Create, Read, Update operations that can be inherited and
extended by model-specific CRUD classes. Every read is built from `_scan()`,
which applies the soft-delete guard before any caller criteria. Rows are never
physically deleted.

Dependencies: sqlalchemy, uuid
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, Iterable, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, Select, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.base import Base, SoftDeleteMixin
from knowledge_core.core.exceptions import StorageError, ValidationError

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Provides standard database operations that work with any SQLAlchemy model.
    Subclasses specify the model class and can override `validate` for
    model-specific field rules.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
        guarded_fields: Columns only changed through conditional updates
    """

    guarded_fields: frozenset[str] = frozenset({"is_deleted", "created_at", "updated_at"})

    def __init__(self, model: type[ModelT]) -> None:
        """
        Initialize CRUD with target model.

        Args:
            model: SQLAlchemy model class for database operations
        """
        self.model = model

    @property
    def soft_deletable(self) -> bool:
        """True when the model carries the is_deleted flag."""
        return issubclass(self.model, SoftDeleteMixin)

    def _scan(
        self,
        *criteria: ColumnElement[bool],
        include_deleted: bool = False,
    ) -> Select:
        """
        Build the SELECT every read operation starts from.

        The soft-delete guard is applied first, then caller criteria.
        populate_existing refreshes objects already in the session so reads
        reflect conditional updates issued with synchronize_session=False.

        Args:
            *criteria: Extra WHERE clauses
            include_deleted: Skip the soft-delete guard (audit/recovery only)

        Returns:
            Select: Statement selecting model rows
        """
        stmt = select(self.model)
        if self.soft_deletable and not include_deleted:
            stmt = stmt.where(self.model.is_deleted.is_(False))
        if criteria:
            stmt = stmt.where(*criteria)
        return stmt.execution_options(populate_existing=True)

    def _ordered(self, stmt: Select) -> Select:
        return stmt.order_by(self.model.created_at, self.model.id)

    async def _execute(self, session: AsyncSession, stmt: Any, operation: str):
        """
        Execute a statement, converting driver failures into StorageError.

        Args:
            session: Async database session
            stmt: Statement to execute
            operation: Operation name recorded on the error

        Returns:
            Result: SQLAlchemy result

        Raises:
            StorageError: If the statement fails
        """
        try:
            return await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(
                f"{self.model.__tablename__}.{operation} failed: {exc}",
                operation=operation,
                details={"table": self.model.__tablename__},
            ) from exc

    async def _reference_exists(
        self,
        session: AsyncSession,
        model: type[Base],
        id: UUID | None,
    ) -> bool:
        """Check that a referenced row exists and, if soft-deletable, is visible."""
        if id is None:
            return False
        stmt = select(model.id).where(model.id == id)
        if issubclass(model, SoftDeleteMixin):
            stmt = stmt.where(model.is_deleted.is_(False))
        result = await self._execute(session, stmt, "reference_lookup")
        return result.scalar_one_or_none() is not None

    async def _conditional_update(
        self,
        session: AsyncSession,
        operation: str,
        conditions: Iterable[ColumnElement[bool]],
        values: dict[str, Any],
        model: type[Base] | None = None,
    ) -> list[UUID]:
        """
        Compare-and-set update.

        Updates only the rows that still satisfy `conditions` in a single
        statement and reports which rows changed. An empty list means the
        guard no longer held (or the row does not exist).

        Args:
            session: Async database session
            operation: Operation name for error reporting
            conditions: WHERE clauses acting as the expected prior state
            values: Columns to set
            model: Target model (defaults to self.model)

        Returns:
            list[UUID]: Primary keys of the updated rows
        """
        target = model or self.model
        stmt = (
            update(target)
            .where(*conditions)
            .values(**values)
            .returning(target.id)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(session, stmt, operation)
        return list(result.scalars().all())

    def _check_writable(self, values: dict[str, Any]) -> None:
        columns = set(self.model.__table__.columns.keys())
        for name in values:
            if name not in columns:
                raise ValidationError(
                    f"Unknown field for {self.model.__tablename__}: {name}",
                    field=name,
                )
            if name in self.guarded_fields:
                raise ValidationError(
                    f"{name} cannot be written directly",
                    field=name,
                )

    async def validate(
        self,
        session: AsyncSession,
        values: dict[str, Any],
        partial: bool = False,
    ) -> dict[str, Any]:
        """
        Validate and normalize field values before a write.

        Args:
            session: Async database session (for reference lookups)
            values: Field values to write
            partial: True for updates, where absent fields are left alone

        Returns:
            dict: Normalized values

        Raises:
            ValidationError: Naming the offending field
        """
        return values

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Create a new record in the database.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated ID and timestamps

        Raises:
            ValidationError: If a field is invalid
            StorageError: If the insert fails
        """
        self._check_writable(kwargs)
        values = await self.validate(session, dict(kwargs), partial=False)
        instance = self.model(**values)
        session.add(instance)
        try:
            await session.flush()
            await session.refresh(instance)
        except SQLAlchemyError as exc:
            raise StorageError(
                f"{self.model.__tablename__}.create failed: {exc}",
                operation="create",
                details={"table": self.model.__tablename__},
            ) from exc
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        """
        Retrieve a single visible record by primary key.

        Args:
            session: Async database session
            id: UUID primary key

        Returns:
            Model instance if found and not deleted, None otherwise
        """
        result = await self._execute(session, self._scan(self.model.id == id), "get_by_id")
        return result.scalar_one_or_none()

    async def get_all(
        self,
        session: AsyncSession,
        *criteria: ColumnElement[bool],
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ModelT]:
        """
        Retrieve visible records with optional filtering and pagination.

        Args:
            session: Async database session
            *criteria: Extra WHERE clauses applied after the soft-delete guard
            limit: Maximum number of records to return (None for all)
            offset: Number of records to skip

        Returns:
            Sequence of model instances ordered by creation time
        """
        stmt = self._ordered(self._scan(*criteria)).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._execute(session, stmt, "get_all")
        return result.scalars().all()

    async def get_all_including_deleted(
        self,
        session: AsyncSession,
        *criteria: ColumnElement[bool],
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ModelT]:
        """
        Retrieve records without the soft-delete guard.

        Intended for audit and recovery tooling only. Nothing in the ranker or
        the clustering services calls this.

        Args:
            session: Async database session
            *criteria: Extra WHERE clauses
            limit: Maximum number of records to return (None for all)
            offset: Number of records to skip

        Returns:
            Sequence of model instances, deleted rows included
        """
        stmt = self._ordered(self._scan(*criteria, include_deleted=True)).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._execute(session, stmt, "get_all_including_deleted")
        return result.scalars().all()

    async def count(self, session: AsyncSession, *criteria: ColumnElement[bool]) -> int:
        """
        Count visible records.

        Args:
            session: Async database session
            *criteria: Extra WHERE clauses applied after the soft-delete guard

        Returns:
            int: Same number get_all would return without pagination
        """
        stmt = select(func.count()).select_from(self._scan(*criteria).subquery())
        result = await self._execute(session, stmt, "count")
        return result.scalar_one()

    async def update_by_id(
        self,
        session: AsyncSession,
        id: UUID,
        **kwargs,
    ) -> ModelT | None:
        """
        Update a visible record by primary key.

        Args:
            session: Async database session
            id: UUID primary key
            **kwargs: Fields to update with new values

        Returns:
            Updated model instance if found, None otherwise

        Raises:
            ValidationError: If a field is invalid or guarded
        """
        self._check_writable(kwargs)
        values = await self.validate(session, dict(kwargs), partial=True)
        if values:
            conditions = [self.model.id == id]
            if self.soft_deletable:
                conditions.append(self.model.is_deleted.is_(False))
            updated = await self._conditional_update(session, "update_by_id", conditions, values)
            if not updated:
                return None
        return await self.get_by_id(session, id)

    async def exists(self, session: AsyncSession, id: UUID) -> bool:
        """
        Check if a visible record exists by primary key.

        Args:
            session: Async database session
            id: UUID primary key

        Returns:
            True if record exists and is not deleted, False otherwise
        """
        return await self._reference_exists(session, self.model, id)
