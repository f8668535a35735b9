"""Generic Repository base class for database access abstraction.

This module provides a type-safe, async-first repository pattern implementation
that works with SQLAlchemy 2.0 models. The generic base class provides common
CRUD operations that can be extended by model-specific repositories.

Example:
    from neighborguard.repositories import Repository
    from neighborguard.models import VideoAsset

    class VideoAssetRepository(Repository[VideoAsset]):
        model_class = VideoAsset
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func, select

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from neighborguard.models.circle import Base

# Type variable for the model class
# Bound to Base to ensure only SQLAlchemy models can be used
T = TypeVar("T", bound="Base")


class Repository(Generic[T]):  # noqa: UP046
    """Generic repository base class providing common CRUD operations.

    Repositories never commit. Commit happens in the service that owns the
    unit of work, or when the session context exits.

    Attributes:
        model_class: Class attribute that must be set to the SQLAlchemy model class.
        session: The async database session used for all operations.
    """

    # Subclasses must set this to their model class
    model_class: type[T]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: An async SQLAlchemy session for database operations.
                     The session should be obtained from get_db() or the session factory.
        """
        self.session = session

    async def get_by_id(self, entity_id: Any) -> T | None:
        """Retrieve an entity by its primary key.

        Args:
            entity_id: The primary key value of the entity to retrieve.

        Returns:
            The entity if found, None otherwise.
        """
        return await self.session.get(self.model_class, entity_id)

    async def create(self, entity: T) -> T:
        """Create a new entity in the database.

        Args:
            entity: The entity instance to persist.

        Returns:
            The persisted entity with database-generated values populated.

        Note:
            The entity is added to the session but not committed.
        """
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def create_many(self, entities: Sequence[T]) -> Sequence[T]:
        """Create multiple entities in a single batch operation.

        Uses add_all() and a single flush. An empty input is a no-op.
        """
        if not entities:
            return []

        self.session.add_all(entities)
        await self.session.flush()
        return entities

    async def delete(self, entity: T) -> None:
        """Delete an entity from the database.

        Note:
            Cascade delete behavior is defined by model relationships and
            foreign keys.
        """
        await self.session.delete(entity)
        await self.session.flush()

    async def exists(self, entity_id: Any) -> bool:
        """Check if an entity with the given primary key exists."""
        stmt = (
            select(func.count())
            .select_from(self.model_class)
            .where(self.model_class.id == entity_id)  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0
