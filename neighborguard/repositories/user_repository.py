"""Repository for User entity database operations."""

from __future__ import annotations

from sqlalchemy import select

from neighborguard.models import User
from neighborguard.repositories.base import Repository


class UserRepository(Repository[User]):
    """Repository for User entity database operations."""

    model_class = User

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
