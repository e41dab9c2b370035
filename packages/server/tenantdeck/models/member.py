"""Organization membership: binds a user to an org with a role."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Member(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "members"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "organization_id", name="uq_members_user_org"),
    )

    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    role: str = Field(nullable=False, default="member")  # owner | admin | member
