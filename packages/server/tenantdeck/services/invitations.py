"""
Invitee side of the invitation lifecycle: accept and reject.

The signed-in user must be the invitation's recipient. A different email is
reported back as an ``email_mismatch`` outcome instead of an error, so the
UI can offer to switch accounts.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import structlog

from tenantdeck.core.auth import Actor
from tenantdeck.core.errors import ConflictError, NotFoundError, conflict_on_integrity_error
from tenantdeck.core.membership import MembershipProvider
from tenantdeck_shared.schemas.invitations import (
    InvitationActionResponse,
    InvitationOutcome,
    InvitationRead,
    InvitationStatus,
    can_transition,
    is_invitation_expired,
)

log = structlog.get_logger()


async def _load_for_recipient(
    actor: Actor, invitation_id: uuid.UUID, provider: MembershipProvider
) -> tuple[InvitationRead, Optional[InvitationActionResponse]]:
    invitation = await provider.get_invitation(invitation_id)
    if invitation is None:
        raise NotFoundError("Invitation not found")

    if invitation.email != actor.email:
        log.info(
            "invitation.email_mismatch",
            invitation_id=str(invitation.id),
            user_id=str(actor.user_id),
        )
        return invitation, InvitationActionResponse(
            outcome=InvitationOutcome.EMAIL_MISMATCH,
            invitation_id=invitation.id,
            organization_id=invitation.organization_id,
        )
    return invitation, None


def _ensure_actionable(
    invitation: InvitationRead, target: InvitationStatus, now: Optional[datetime]
) -> None:
    if not can_transition(invitation.status, target):
        raise ConflictError(f"Invitation has already been {invitation.status.value}")
    if is_invitation_expired(invitation.expires_at, now):
        raise ConflictError("Invitation has expired")


async def accept_invitation(
    actor: Actor,
    invitation_id: uuid.UUID,
    provider: MembershipProvider,
    now: Optional[datetime] = None,
) -> InvitationActionResponse:
    """Join the org at the invited role."""
    invitation, mismatch = await _load_for_recipient(actor, invitation_id, provider)
    if mismatch:
        return mismatch

    _ensure_actionable(invitation, InvitationStatus.ACCEPTED, now)

    if await provider.get_member_for_user(invitation.organization_id, actor.user_id):
        raise ConflictError("You are already a member of this organization")

    with conflict_on_integrity_error("You are already a member of this organization"):
        member = await provider.accept_invitation(invitation.id, actor.user_id)

    log.info(
        "invitation.accepted",
        invitation_id=str(invitation.id),
        org_id=str(invitation.organization_id),
        user_id=str(actor.user_id),
        role=member.role.value,
    )
    return InvitationActionResponse(
        outcome=InvitationOutcome.ACCEPTED,
        invitation_id=invitation.id,
        organization_id=invitation.organization_id,
        member=member,
    )


async def reject_invitation(
    actor: Actor,
    invitation_id: uuid.UUID,
    provider: MembershipProvider,
    now: Optional[datetime] = None,
) -> InvitationActionResponse:
    invitation, mismatch = await _load_for_recipient(actor, invitation_id, provider)
    if mismatch:
        return mismatch

    _ensure_actionable(invitation, InvitationStatus.REJECTED, now)
    await provider.reject_invitation(invitation.id)

    log.info("invitation.rejected", invitation_id=str(invitation.id), user_id=str(actor.user_id))
    return InvitationActionResponse(
        outcome=InvitationOutcome.REJECTED,
        invitation_id=invitation.id,
        organization_id=invitation.organization_id,
    )
