"""Caller identity resolution and the "me" view.

Identity proofing happens elsewhere. A request either names a user id, which
must exist, or names nobody, in which case the configured default owner is
used so a fresh install is immediately usable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from neighborguard.core.config import get_settings
from neighborguard.core.exceptions import UserNotFoundError
from neighborguard.core.logging import get_logger
from neighborguard.models import CircleMember, MemberRole, User
from neighborguard.repositories.circle_repository import CircleRepository, MembershipRepository
from neighborguard.repositories.user_repository import UserRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from neighborguard.models import Circle

logger = get_logger(__name__)


@dataclass
class MeView:
    """The caller plus every circle they belong to, with their role there."""

    user: User
    memberships: list[CircleMember] = field(default_factory=list)


class UserService:
    """Resolves callers and manages user rows."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._users = UserRepository(session)
        self._circles = CircleRepository(session)
        self._members = MembershipRepository(session)

    async def resolve_current_user(self, header_user_id: str | None) -> User:
        """Resolve the caller from an optional user id.

        Args:
            header_user_id: Id supplied by the client. Blank counts as absent.

        Returns:
            The caller. Without an id this is the default owner, who is
            guaranteed to own a default circle.

        Raises:
            UserNotFoundError: If a non-empty id does not resolve.
        """
        if header_user_id and header_user_id.strip():
            user = await self._users.get_by_id(header_user_id.strip())
            if user is None:
                raise UserNotFoundError(header_user_id.strip())
            return user

        settings = get_settings()
        user = await self.get_or_create_by_email(
            settings.default_user_email, settings.default_user_name
        )
        await self.ensure_default_circle(user)
        await self.session.commit()
        return user

    async def get_or_create_by_email(self, email: str, name: str | None = None) -> User:
        """Find a user by email, creating one when missing.

        A new user's name defaults to the local part of the email. An
        existing user without a name picks up the supplied one.
        """
        email = email.strip()
        user = await self._users.get_by_email(email)
        clean_name = name.strip() if name and name.strip() else None

        if user is None:
            user = await self._users.create(User(email=email, name=clean_name or email.split("@")[0]))
            logger.info(f"Created user {user.id}", extra={"user_id": user.id})
        elif clean_name and not user.name:
            user.name = clean_name
            await self.session.flush()
        return user

    async def ensure_default_circle(self, user: User) -> Circle:
        """Make sure the user owns a circle with an explicit owner row."""
        circle = await self._circles.get_first_owned_by(user.id)
        if circle is None:
            settings = get_settings()
            circle = await self._circles.create_with_owner(
                owner_id=user.id,
                name=settings.default_circle_name,
                address=settings.default_circle_address,
            )
            logger.info(
                f"Created default circle {circle.id}",
                extra={"circle_id": circle.id, "user_id": user.id},
            )
            return circle

        membership = await self._members.get_membership(circle.id, user.id)
        if membership is None:
            await self._members.create(
                CircleMember(circle_id=circle.id, user_id=user.id, role=MemberRole.OWNER)
            )
        elif membership.role != MemberRole.OWNER:
            membership.role = MemberRole.OWNER
            await self.session.flush()
        return circle

    async def build_me(self, user: User) -> MeView:
        memberships = await self._members.list_for_user(user.id)
        return MeView(user=user, memberships=list(memberships))
