"""
Shared CRUD helpers for SQLAlchemy models.

Model-specific CRUD classes inherit row insertion from here and add their
own queries. Rows use integer surrogate keys assigned by the database.

Dependencies: sqlalchemy
System role: Foundation for database CRUD classes
"""

from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from kbcopilot.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic CRUD base bound to one model class.

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Insert one row and load its generated ID.

        The session is flushed but not committed; the caller owns the
        transaction.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Persisted model instance
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance
