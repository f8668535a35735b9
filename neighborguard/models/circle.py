"""Circle and membership models.

A circle is the group (household or neighborhood) that scopes membership,
events and notifications. Every circle carries an explicit ``owner``
membership row for its owner, so authorization only ever has to consult
``circle_members``.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from .enums import MemberRole, enum_values

if TYPE_CHECKING:
    from .user import User


def new_id() -> str:
    """Generate a new string UUID primary key."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Circle(Base):
    """A household or neighborhood group.

    Attributes:
        id: Unique identifier (UUID string)
        owner_id: User who created and owns the circle
        name: Display name shown in notifications ("New event in {name}")
        address: Optional street address
        invite_code: Optional code for joining the circle
    """

    __tablename__ = "circles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    invite_code: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    members: Mapped[list[CircleMember]] = relationship(
        "CircleMember", back_populates="circle", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_circles_owner_id", "owner_id"),)

    def __repr__(self) -> str:
        return f"<Circle(id={self.id!r}, name={self.name!r}, owner_id={self.owner_id!r})>"


class CircleMember(Base):
    """Membership of a user in a circle, with a role.

    The (circle_id, user_id) pair is unique. Rows are exclusively owned by
    their circle and removed with it.
    """

    __tablename__ = "circle_members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    circle_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("circles.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[MemberRole] = mapped_column(
        Enum(
            MemberRole,
            name="member_role_enum",
            values_callable=enum_values,
            native_enum=False,
            length=16,
        ),
        default=MemberRole.RESIDENT,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    circle: Mapped[Circle] = relationship("Circle", back_populates="members")
    user: Mapped[User] = relationship("User")

    __table_args__ = (
        UniqueConstraint("circle_id", "user_id", name="uq_circle_members_circle_user"),
        Index("idx_circle_members_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<CircleMember(circle_id={self.circle_id!r}, user_id={self.user_id!r}, "
            f"role={self.role.value!r})>"
        )
