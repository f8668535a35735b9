"""Circle administration: creating circles and managing their members.

Only the circle owner may add, re-role or remove members. Owner membership
rows can never be removed or demoted through this path.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from neighborguard.core.exceptions import (
    CircleNotFoundError,
    InvalidInputError,
    MemberNotFoundError,
    OwnerRemovalError,
    OwnerRequiredError,
)
from neighborguard.core.logging import get_logger
from neighborguard.models import CircleMember, MemberRole
from neighborguard.repositories.circle_repository import CircleRepository, MembershipRepository
from neighborguard.services.membership import MembershipDirectory
from neighborguard.services.user_service import UserService

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from neighborguard.models import Circle, User

logger = get_logger(__name__)


def parse_role(value: str | MemberRole | None) -> MemberRole | None:
    """Convert a raw role into a MemberRole.

    Raises:
        InvalidInputError: If the value is not a known role.
    """
    if value is None or isinstance(value, MemberRole):
        return value
    try:
        return MemberRole(value)
    except ValueError:
        raise InvalidInputError(
            f"Invalid role: {value}",
            field="role",
            value=value,
            constraint=f"one of {[r.value for r in MemberRole]}",
        ) from None


class CircleService:
    """Service for circles and their membership rows."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._circles = CircleRepository(session)
        self._members = MembershipRepository(session)
        self._membership = MembershipDirectory(session)
        self._users = UserService(session)

    async def create_circle(self, owner: User, name: str, address: str | None = None) -> Circle:
        """Create a circle owned by ``owner`` with an explicit owner membership."""
        if not name or not name.strip():
            raise InvalidInputError("name is required", field="name")
        circle = await self._circles.create_with_owner(
            owner_id=owner.id, name=name.strip(), address=address
        )
        await self.session.commit()
        logger.info(
            f"Circle {circle.id} created",
            extra={"circle_id": circle.id, "user_id": owner.id},
        )
        return circle

    async def list_for_user(self, user: User) -> Sequence[CircleMember]:
        """The user's memberships (with circles), oldest first."""
        return await self._membership.memberships_for_user(user.id)

    async def list_members(self, circle_id: str, caller: User) -> Sequence[CircleMember]:
        """List a circle's members. The caller must be a member."""
        await self._require_circle(circle_id)
        await self._membership.assert_member(circle_id, caller.id)
        return await self._members.list_for_circle(circle_id)

    async def add_member(
        self,
        circle_id: str,
        caller: User,
        *,
        email: str,
        name: str | None = None,
        role: str | MemberRole | None = None,
    ) -> CircleMember:
        """Add a user (found or created by email) to a circle, or change their role.

        New members default to ``neighbor``. For an existing member the role
        is only changed when a different role is supplied.

        Raises:
            CircleNotFoundError: If the circle does not exist.
            OwnerRequiredError: If the caller is not the circle owner.
            InvalidInputError: On an unknown role or blank email.
            OwnerRemovalError: If the change would demote an owner row.
        """
        circle = await self._require_circle(circle_id)
        await self._require_owner(circle, caller)
        requested_role = parse_role(role)
        if not email or not email.strip():
            raise InvalidInputError("email is required", field="email")

        user = await self._users.get_or_create_by_email(email, name)
        member = await self._members.get_membership(circle.id, user.id)

        if member is None:
            member = await self._members.create(
                CircleMember(
                    circle_id=circle.id,
                    user_id=user.id,
                    role=requested_role or MemberRole.NEIGHBOR,
                )
            )
            logger.info(
                f"Added member {user.id} to circle {circle.id} as {member.role.value}",
                extra={"circle_id": circle.id, "user_id": caller.id},
            )
        elif requested_role is not None and member.role != requested_role:
            if member.role == MemberRole.OWNER:
                raise OwnerRemovalError(
                    "Cannot change the role of a circle owner",
                    details={"member_id": member.id, "role": requested_role.value},
                )
            member.role = requested_role
            await self.session.flush()
            logger.info(
                f"Changed role of {user.id} in circle {circle.id} to {requested_role.value}",
                extra={"circle_id": circle.id, "user_id": caller.id},
            )

        await self.session.commit()
        reloaded = await self._members.get_in_circle(circle.id, member.id)
        if reloaded is None:
            raise MemberNotFoundError(member.id)
        return reloaded

    async def remove_member(self, circle_id: str, member_id: str, caller: User) -> None:
        """Remove a membership row by its id.

        Raises:
            CircleNotFoundError: If the circle does not exist.
            OwnerRequiredError: If the caller is not the circle owner.
            MemberNotFoundError: If no such membership exists in the circle.
            OwnerRemovalError: If the row is an owner membership.
        """
        circle = await self._require_circle(circle_id)
        await self._require_owner(circle, caller)

        member = await self._members.get_in_circle(circle.id, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        if member.role == MemberRole.OWNER:
            raise OwnerRemovalError(details={"member_id": member_id})

        await self._members.delete(member)
        await self.session.commit()
        logger.info(
            f"Removed member {member.user_id} from circle {circle.id}",
            extra={"circle_id": circle.id, "user_id": caller.id},
        )

    async def _require_circle(self, circle_id: str) -> Circle:
        circle = await self._circles.get_by_id(circle_id)
        if circle is None:
            raise CircleNotFoundError(circle_id)
        return circle

    async def _require_owner(self, circle: Circle, caller: User) -> None:
        role = await self._membership.get_role(circle.id, caller.id)
        if role != MemberRole.OWNER:
            raise OwnerRequiredError(details={"circle_id": circle.id})
