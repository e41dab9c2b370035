"""Invitation to join an organization, addressed to an email."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Invitation(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "invitations"

    email: str = Field(nullable=False, index=True)
    role: str = Field(nullable=False, default="member")  # admin | member
    status: str = Field(nullable=False, default="pending")
    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    inviter_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    expires_at: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
