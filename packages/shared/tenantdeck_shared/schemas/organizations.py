"""
Organization-related Pydantic schemas shared between server and clients.

Covers: org create request, org responses, the per-user org list and the
full organization view (org + members + invitations).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import MemberRole
from .invitations import InvitationRead
from .members import MemberRead


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="Organization display name; the slug is derived from it",
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgResponse(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    logo: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class OrgListItem(OrgResponse):
    role: MemberRole  # the requesting user's role in this org


class OrgListResponse(BaseModel):
    data: List[OrgListItem]


class FullOrgResponse(OrgResponse):
    members: List[MemberRead] = []
    invitations: List[InvitationRead] = []
