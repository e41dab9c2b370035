"""
Member management endpoints.

GET    /api/v1/orgs/{orgId}/members              — List members (oldest first)
PATCH  /api/v1/orgs/{orgId}/members/{memberId}   — Change a member's role
DELETE /api/v1/orgs/{orgId}/members/{memberId}   — Remove a member
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from tenantdeck.core.auth import OrgContext, require_member
from tenantdeck.core.membership import MembershipProvider, get_membership_provider
from tenantdeck.services import organizations as org_service
from tenantdeck_shared.schemas.common import MemberRole
from tenantdeck_shared.schemas.members import (
    MemberListResponse,
    MemberRead,
    MemberRoleUpdate,
)

router = APIRouter()


@router.get("", response_model=MemberListResponse, tags=["Members"])
async def list_members(
    ctx: OrgContext = Depends(require_member),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    items = await org_service.list_members(ctx.org_id, provider)
    return MemberListResponse(data=items)


@router.patch("/{memberId}", response_model=MemberRead, tags=["Members"])
async def update_member_role(
    memberId: uuid.UUID,
    body: MemberRoleUpdate,
    ctx: OrgContext = Depends(require_member),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    """Change a member's role (Owner/Admin; only owners grant admin)."""
    return await org_service.update_role(
        ctx.actor, ctx.org_id, memberId, MemberRole(body.role.value), provider
    )


@router.delete("/{memberId}", response_model=MemberRead, tags=["Members"])
async def remove_member(
    memberId: uuid.UUID,
    ctx: OrgContext = Depends(require_member),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    """Remove a member (Owner/Admin). Owners cannot be removed."""
    return await org_service.remove_member(ctx.actor, ctx.org_id, memberId, provider)
