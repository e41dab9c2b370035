"""User account schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class UserUpdateRequest(BaseModel):
    """Update the signed-in user's profile."""
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    image: Optional[HttpUrl] = None


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(min_length=2, max_length=100)
    new_password: str = Field(min_length=2, max_length=100)
    revoke_other_sessions: bool = False


class UserDeleteRequest(BaseModel):
    """Delete the signed-in account.

    ``org_id`` is the active organization; if the user owns it, it is
    deleted along with the account.
    """
    password: str = Field(min_length=2)
    org_id: uuid.UUID


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PasswordChangeResponse(BaseModel):
    message: str
    access_token: Optional[str] = None  # fresh token when other sessions were revoked
