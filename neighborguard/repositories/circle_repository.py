"""Repositories for circles and their membership rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from neighborguard.models import Circle, CircleMember, MemberRole
from neighborguard.repositories.base import Repository

if TYPE_CHECKING:
    from collections.abc import Sequence


class CircleRepository(Repository[Circle]):
    """Repository for Circle entity database operations."""

    model_class = Circle

    async def create_with_owner(
        self, *, owner_id: str, name: str, address: str | None = None
    ) -> Circle:
        """Create a circle together with its explicit owner membership row.

        Args:
            owner_id: User who owns the new circle.
            name: Display name of the circle.
            address: Optional street address.

        Returns:
            The persisted circle.
        """
        circle = Circle(owner_id=owner_id, name=name, address=address)
        self.session.add(circle)
        await self.session.flush()
        self.session.add(CircleMember(circle_id=circle.id, user_id=owner_id, role=MemberRole.OWNER))
        await self.session.flush()
        return circle

    async def get_first_owned_by(self, owner_id: str) -> Circle | None:
        """Get the oldest circle owned by a user."""
        stmt = (
            select(Circle)
            .where(Circle.owner_id == owner_id)
            .order_by(Circle.created_at.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class MembershipRepository(Repository[CircleMember]):
    """Repository for CircleMember rows: (circle, user) -> role."""

    model_class = CircleMember

    async def get_membership(self, circle_id: str, user_id: str) -> CircleMember | None:
        stmt = select(CircleMember).where(
            CircleMember.circle_id == circle_id,
            CircleMember.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_role(self, circle_id: str, user_id: str) -> MemberRole | None:
        """Look up a user's role in a circle without loading the row."""
        stmt = select(CircleMember.role).where(
            CircleMember.circle_id == circle_id,
            CircleMember.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_in_circle(self, circle_id: str, member_id: str) -> CircleMember | None:
        """Get a membership row by its own id, scoped to a circle."""
        stmt = (
            select(CircleMember)
            .options(selectinload(CircleMember.user))
            .where(CircleMember.id == member_id, CircleMember.circle_id == circle_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_circle(self, circle_id: str) -> Sequence[CircleMember]:
        """List a circle's members, oldest first, with their users loaded."""
        stmt = (
            select(CircleMember)
            .options(selectinload(CircleMember.user))
            .where(CircleMember.circle_id == circle_id)
            .order_by(CircleMember.created_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_for_user(self, user_id: str) -> Sequence[CircleMember]:
        """List a user's memberships, oldest first, with their circles loaded."""
        stmt = (
            select(CircleMember)
            .options(selectinload(CircleMember.circle))
            .where(CircleMember.user_id == user_id)
            .order_by(CircleMember.created_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def user_ids_for_circle(self, circle_id: str) -> list[str]:
        stmt = select(CircleMember.user_id).where(CircleMember.circle_id == circle_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
