"""
Invitation schemas and lifecycle.

An invitation starts ``pending`` and moves once to one of the terminal
states. Expiry is not a state: it is derived at read time from
``expires_at``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr

from .common import MemberRole
from .members import AssignableRole, MemberRead


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELED = "canceled"


INVITATION_TRANSITIONS: dict[InvitationStatus, list[InvitationStatus]] = {
    InvitationStatus.PENDING: [
        InvitationStatus.ACCEPTED,
        InvitationStatus.REJECTED,
        InvitationStatus.CANCELED,
    ],
    InvitationStatus.ACCEPTED: [],
    InvitationStatus.REJECTED: [],
    InvitationStatus.CANCELED: [],
}


def can_transition(current: InvitationStatus, target: InvitationStatus) -> bool:
    return target in INVITATION_TRANSITIONS.get(current, [])


def is_invitation_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    """True once ``now`` is past ``expires_at``. Naive datetimes are taken as UTC."""
    now = now or datetime.now(timezone.utc)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now > expires_at


class InvitationOutcome(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EMAIL_MISMATCH = "email_mismatch"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class InvitationCreateRequest(BaseModel):
    email: EmailStr
    role: AssignableRole = AssignableRole.MEMBER


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class InvitationRead(BaseModel):
    id: uuid.UUID
    email: str
    role: MemberRole
    status: InvitationStatus
    organization_id: uuid.UUID
    inviter_id: uuid.UUID
    expires_at: datetime
    created_at: datetime


class InvitationListResponse(BaseModel):
    data: List[InvitationRead]


class PublicInvitationResponse(BaseModel):
    """Invitation view for the invitee; carries no internal member ids."""
    id: uuid.UUID
    email: str
    role: MemberRole
    status: InvitationStatus
    expires_at: datetime
    organization_id: uuid.UUID
    organization_name: str
    organization_slug: str
    organization_logo: Optional[str] = None
    inviter_email: Optional[str] = None
    inviter_name: Optional[str] = None
    is_expired: bool
    is_valid: bool


class InvitationActionResponse(BaseModel):
    """Result of an invitee accepting or rejecting.

    ``email_mismatch`` is not an error: the signed-in user is not the
    recipient, so nothing was changed and the UI should prompt for the
    right account.
    """
    outcome: InvitationOutcome
    invitation_id: uuid.UUID
    organization_id: uuid.UUID
    member: Optional[MemberRead] = None
