"""
Invitation endpoints.

Org-scoped (owner/admin management):
GET    /api/v1/orgs/{orgId}/invitations                        — All invitations
GET    /api/v1/orgs/{orgId}/invitations/pending                — Pending only
POST   /api/v1/orgs/{orgId}/invitations                        — Invite an email
POST   /api/v1/orgs/{orgId}/invitations/{invitationId}/resend  — Re-send email
POST   /api/v1/orgs/{orgId}/invitations/{invitationId}/revoke  — Cancel

Invitee side:
GET    /api/v1/invitations/count                — Pending invitations for me
GET    /api/v1/invitations/{invitationId}       — Public view (no auth)
POST   /api/v1/invitations/{invitationId}/accept
POST   /api/v1/invitations/{invitationId}/reject
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from tenantdeck.core.auth import Actor, OrgContext, get_current_actor, require_member
from tenantdeck.core.errors import NotFoundError
from tenantdeck.core.membership import MembershipProvider, get_membership_provider
from tenantdeck.services import invitations as invitation_service
from tenantdeck.services import organizations as org_service
from tenantdeck_shared.schemas.common import CountResponse
from tenantdeck_shared.schemas.invitations import (
    InvitationActionResponse,
    InvitationCreateRequest,
    InvitationListResponse,
    InvitationRead,
    PublicInvitationResponse,
)

# ---------------------------------------------------------------------------
# Org-scoped routes
# ---------------------------------------------------------------------------
router_scoped = APIRouter()


async def _ensure_in_org(
    invitationId: uuid.UUID,
    ctx: OrgContext,
    provider: MembershipProvider,
) -> None:
    invitation = await provider.get_invitation(invitationId)
    if invitation is None or invitation.organization_id != ctx.org_id:
        raise NotFoundError("Invitation not found")


@router_scoped.get("", response_model=InvitationListResponse, tags=["Invitations"])
async def list_invitations(
    ctx: OrgContext = Depends(require_member),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    items = await org_service.list_invitations(ctx.org_id, provider)
    return InvitationListResponse(data=items)


@router_scoped.get("/pending", response_model=InvitationListResponse, tags=["Invitations"])
async def list_pending_invitations(
    ctx: OrgContext = Depends(require_member),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    items = await org_service.pending_invitations(ctx.org_id, provider)
    return InvitationListResponse(data=items)


@router_scoped.post("", response_model=InvitationRead, status_code=201, tags=["Invitations"])
async def invite_member(
    body: InvitationCreateRequest,
    ctx: OrgContext = Depends(require_member),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    """Invite an email address (Owner/Admin). The invitation email is sent immediately."""
    return await org_service.invite_member(ctx.actor, ctx.org_id, body, provider)


@router_scoped.post(
    "/{invitationId}/resend", response_model=InvitationRead, tags=["Invitations"]
)
async def resend_invitation(
    invitationId: uuid.UUID,
    ctx: OrgContext = Depends(require_member),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    await _ensure_in_org(invitationId, ctx, provider)
    return await org_service.resend_invitation(ctx.actor, invitationId, provider)


@router_scoped.post(
    "/{invitationId}/revoke", response_model=InvitationRead, tags=["Invitations"]
)
async def revoke_invitation(
    invitationId: uuid.UUID,
    ctx: OrgContext = Depends(require_member),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    await _ensure_in_org(invitationId, ctx, provider)
    return await org_service.revoke_invitation(ctx.actor, invitationId, provider)


# ---------------------------------------------------------------------------
# Invitee routes
# ---------------------------------------------------------------------------
router_public = APIRouter()


@router_public.get("/count", response_model=CountResponse, tags=["Invitations"])
async def invitation_count(
    actor: Actor = Depends(get_current_actor),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    return CountResponse(count=await org_service.invitation_count(actor, provider))


@router_public.get(
    "/{invitationId}", response_model=PublicInvitationResponse, tags=["Invitations"]
)
async def get_public_invitation(
    invitationId: uuid.UUID,
    provider: MembershipProvider = Depends(get_membership_provider),
):
    """Public invitation view for the acceptance page. No authentication required."""
    return await org_service.get_public_invitation(invitationId, provider)


@router_public.post(
    "/{invitationId}/accept", response_model=InvitationActionResponse, tags=["Invitations"]
)
async def accept_invitation(
    invitationId: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    return await invitation_service.accept_invitation(actor, invitationId, provider)


@router_public.post(
    "/{invitationId}/reject", response_model=InvitationActionResponse, tags=["Invitations"]
)
async def reject_invitation(
    invitationId: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    return await invitation_service.reject_invitation(actor, invitationId, provider)
