"""Membership directory: (circle, user) -> role lookups and assertions.

Circle ownership is always materialized as an ``owner`` membership row, so
the membership table is the single source of truth for authorization.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from neighborguard.core.exceptions import CircleAccessDeniedError
from neighborguard.repositories.circle_repository import MembershipRepository

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from neighborguard.models import CircleMember, MemberRole


class MembershipDirectory:
    """Answers role lookups and membership assertions for a session."""

    def __init__(self, session: AsyncSession) -> None:
        self._members = MembershipRepository(session)

    async def get_role(self, circle_id: str, user_id: str | None) -> MemberRole | None:
        """Return the user's role in the circle, or None if not a recorded member."""
        if not user_id:
            return None
        return await self._members.get_role(circle_id, user_id)

    async def assert_member(self, circle_id: str, user_id: str) -> MemberRole:
        """Return the user's role in the circle.

        Raises:
            CircleAccessDeniedError: If no membership row exists for the pair.
        """
        role = await self.get_role(circle_id, user_id)
        if role is None:
            raise CircleAccessDeniedError(circle_id, user_id)
        return role

    async def memberships_for_user(self, user_id: str) -> Sequence[CircleMember]:
        """Memberships of a user, oldest first, with circles loaded."""
        return await self._members.list_for_user(user_id)
