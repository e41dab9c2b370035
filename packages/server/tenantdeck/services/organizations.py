"""
Organization service — org creation, membership management and the
owner/admin side of the invitation lifecycle.

Every mutating operation resolves the caller's membership in the target
org first and applies the authorization guard before touching the store.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from tenantdeck.core.auth import Actor
from tenantdeck.core.config import get_settings
from tenantdeck.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    conflict_on_integrity_error,
)
from tenantdeck.core.membership import MembershipProvider
from tenantdeck.core.slugs import generate_unique_slug
from tenantdeck.models.invitation import Invitation
from tenantdeck.models.member import Member
from tenantdeck.models.organization import Organization
from tenantdeck.models.project import Project
from tenantdeck_shared.schemas.common import MemberRole
from tenantdeck_shared.schemas.invitations import (
    InvitationCreateRequest,
    InvitationRead,
    InvitationStatus,
    PublicInvitationResponse,
    can_transition,
    is_invitation_expired,
)
from tenantdeck_shared.schemas.members import (
    MemberRead,
    can_change_role,
    can_manage_members,
    can_remove_member,
)
from tenantdeck_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgListItem,
    OrgResponse,
)

log = structlog.get_logger()
settings = get_settings()

ORG_NAME_TAKEN = "An organization with this name already exists. Please try a different name."


async def _require_manager(
    provider: MembershipProvider,
    org_id: uuid.UUID,
    actor: Actor,
    detail: str,
) -> MemberRead:
    """Resolve the actor's membership and require owner/admin."""
    current = await provider.get_member_for_user(org_id, actor.user_id)
    if current is None or not can_manage_members(current.role):
        raise ForbiddenError(detail)
    return current


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

async def list_orgs(actor: Actor, provider: MembershipProvider) -> list[OrgListItem]:
    """List all orgs the actor belongs to, with their role."""
    return await provider.list_organizations(actor.user_id)


async def count_orgs(actor: Actor, provider: MembershipProvider) -> int:
    return len(await provider.list_organizations(actor.user_id))


async def create_org(
    actor: Actor,
    req: OrgCreateRequest,
    session: AsyncSession,
    provider: MembershipProvider,
) -> OrgResponse:
    """Create an org and make the creator its owner."""
    slug = await generate_unique_slug(session, Organization, req.name)
    with conflict_on_integrity_error(ORG_NAME_TAKEN):
        org = await provider.create_organization(req.name, slug, actor.user_id)

    log.info("org.created", org_id=str(org.id), slug=slug, creator=str(actor.user_id))
    return org


async def delete_org(org_id: uuid.UUID, session: AsyncSession) -> None:
    """Delete an org together with its projects, invitations and members."""
    await session.execute(delete(Project).where(Project.organization_id == org_id))
    await session.execute(delete(Invitation).where(Invitation.organization_id == org_id))
    await session.execute(delete(Member).where(Member.organization_id == org_id))
    await session.execute(delete(Organization).where(Organization.id == org_id))
    await session.flush()
    log.info("org.deleted", org_id=str(org_id))


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

async def list_members(org_id: uuid.UUID, provider: MembershipProvider) -> list[MemberRead]:
    return await provider.list_members(org_id)


async def update_role(
    actor: Actor,
    org_id: uuid.UUID,
    member_id: uuid.UUID,
    new_role: MemberRole,
    provider: MembershipProvider,
) -> MemberRead:
    """Change a member's role (owner/admin; only owners grant admin)."""
    current = await _require_manager(
        provider, org_id, actor, "You don't have permission to update roles"
    )

    target = await provider.get_member(member_id)
    if target is None or target.organization_id != org_id:
        raise NotFoundError("Member not found")

    if not can_change_role(current.role, target.role, new_role):
        if target.role == MemberRole.OWNER:
            raise ForbiddenError("Cannot change owner role")
        if new_role == MemberRole.ADMIN:
            raise ForbiddenError("Only owners can assign admin role")
        raise ForbiddenError("You don't have permission to update roles")

    updated = await provider.update_member_role(member_id, new_role)
    log.info(
        "member.role_updated",
        org_id=str(org_id),
        member_id=str(member_id),
        role=new_role.value,
        actor=str(actor.user_id),
    )
    return updated


async def remove_member(
    actor: Actor,
    org_id: uuid.UUID,
    member_id: uuid.UUID,
    provider: MembershipProvider,
) -> MemberRead:
    """Remove a member from the org. The owner can never be removed."""
    current = await _require_manager(
        provider, org_id, actor, "You don't have permission to remove members"
    )

    target = await provider.get_member(member_id)
    if target is None or target.organization_id != org_id:
        raise NotFoundError("Member not found")

    if not can_remove_member(current.role, target.role):
        if target.role == MemberRole.OWNER:
            raise ForbiddenError("Cannot remove organization owner")
        raise ForbiddenError("Admins cannot remove other admins")

    removed = await provider.remove_member(member_id)
    log.info(
        "member.removed",
        org_id=str(org_id),
        member_id=str(member_id),
        actor=str(actor.user_id),
    )
    return removed


# ---------------------------------------------------------------------------
# Invitations (management side)
# ---------------------------------------------------------------------------

async def list_invitations(
    org_id: uuid.UUID, provider: MembershipProvider
) -> list[InvitationRead]:
    return await provider.list_invitations(org_id)


async def pending_invitations(
    org_id: uuid.UUID, provider: MembershipProvider
) -> list[InvitationRead]:
    return await provider.list_invitations(org_id, status=InvitationStatus.PENDING)


async def invitation_count(actor: Actor, provider: MembershipProvider) -> int:
    """Pending invitations addressed to the actor's email."""
    return await provider.count_invitations_for_email(actor.email)


async def invite_member(
    actor: Actor,
    org_id: uuid.UUID,
    req: InvitationCreateRequest,
    provider: MembershipProvider,
) -> InvitationRead:
    """Invite an email address to the org and send the invitation email.

    Admins may invite at the admin role; unlike ``update_role``, granting
    admin through an invitation is not restricted to owners.
    """
    await _require_manager(
        provider, org_id, actor, "You don't have permission to invite members"
    )

    email = str(req.email)
    if await provider.get_member_by_email(org_id, email):
        raise ConflictError("User is already a member of this organization")

    pending = await provider.list_invitations(org_id, status=InvitationStatus.PENDING)
    if any(inv.email == email and not is_invitation_expired(inv.expires_at) for inv in pending):
        raise ConflictError("User is already invited to this organization")

    expires_at = datetime.now(timezone.utc) + timedelta(hours=settings.invitation_expires_hours)
    invitation = await provider.create_invitation(
        org_id, email, MemberRole(req.role.value), actor.user_id, expires_at
    )
    log.info(
        "invitation.created",
        invitation_id=str(invitation.id),
        org_id=str(org_id),
        role=invitation.role.value,
        inviter=str(actor.user_id),
    )

    await provider.send_invitation_email(invitation.id)
    return invitation


async def resend_invitation(
    actor: Actor, invitation_id: uuid.UUID, provider: MembershipProvider
) -> InvitationRead:
    """Re-send the email for a pending invitation.

    The stored status and ``expires_at`` are left as they are.
    """
    invitation = await provider.get_invitation(invitation_id)
    if invitation is None:
        raise NotFoundError("Invitation not found")

    await _require_manager(
        provider,
        invitation.organization_id,
        actor,
        "You don't have permission to resend invitations",
    )
    if invitation.status != InvitationStatus.PENDING:
        raise ConflictError("Only pending invitations can be resent")

    await provider.send_invitation_email(invitation.id)
    log.info("invitation.resent", invitation_id=str(invitation.id), actor=str(actor.user_id))
    return invitation


async def revoke_invitation(
    actor: Actor, invitation_id: uuid.UUID, provider: MembershipProvider
) -> InvitationRead:
    """Cancel a pending invitation."""
    invitation = await provider.get_invitation(invitation_id)
    if invitation is None:
        raise NotFoundError("Invitation not found")

    await _require_manager(
        provider,
        invitation.organization_id,
        actor,
        "You don't have permission to revoke invitations",
    )
    if not can_transition(invitation.status, InvitationStatus.CANCELED):
        raise ConflictError(f"Cannot revoke invitation in state '{invitation.status.value}'")

    canceled = await provider.cancel_invitation(invitation_id)
    log.info("invitation.revoked", invitation_id=str(invitation_id), actor=str(actor.user_id))
    return canceled


async def get_public_invitation(
    invitation_id: uuid.UUID,
    provider: MembershipProvider,
    now: Optional[datetime] = None,
) -> PublicInvitationResponse:
    """Unauthenticated invitation view with derived expiry/validity flags."""
    detail = await provider.get_invitation_detail(invitation_id)
    if detail is None:
        raise NotFoundError("Invitation not found")

    invitation = detail.invitation
    is_expired = is_invitation_expired(invitation.expires_at, now)
    return PublicInvitationResponse(
        id=invitation.id,
        email=invitation.email,
        role=invitation.role,
        status=invitation.status,
        expires_at=invitation.expires_at,
        organization_id=invitation.organization_id,
        organization_name=detail.organization.name,
        organization_slug=detail.organization.slug,
        organization_logo=detail.organization.logo,
        inviter_email=detail.inviter.email if detail.inviter else None,
        inviter_name=detail.inviter.name if detail.inviter else None,
        is_expired=is_expired,
        is_valid=invitation.status == InvitationStatus.PENDING and not is_expired,
    )
