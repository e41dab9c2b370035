"""User model (accounts managed by the auth layer)."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: str = Field(unique=True, index=True, nullable=False)
    name: Optional[str] = None
    image: Optional[str] = None
    password_hash: Optional[str] = Field(default=None)  # bcrypt
