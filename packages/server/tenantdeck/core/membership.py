"""
Membership primitives: organizations, members and invitations.

Services talk to the ``MembershipProvider`` protocol and layer the
authorization guard and slug logic on top of it. ``SqlMembershipProvider``
is the SQLModel-backed implementation; routes get one per request from
``get_membership_provider``.

Every Member/Invitation row leaves this module as a read model built by
``_member_read``/``_invitation_read``. Role defaulting happens there and
nowhere else.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

import structlog
from fastapi import Depends
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tenantdeck.core.database import get_session
from tenantdeck.core.email import (
    Mailer,
    deliver,
    get_mailer,
    invitation_link,
    render_invitation_email,
)
from tenantdeck.models.base import as_utc
from tenantdeck.models.invitation import Invitation
from tenantdeck.models.member import Member
from tenantdeck.models.organization import Organization
from tenantdeck.models.user import User
from tenantdeck_shared.schemas.common import MemberRole, normalize_role
from tenantdeck_shared.schemas.invitations import InvitationRead, InvitationStatus
from tenantdeck_shared.schemas.members import MemberRead
from tenantdeck_shared.schemas.organizations import (
    FullOrgResponse,
    OrgListItem,
    OrgResponse,
)

log = structlog.get_logger()


@dataclass
class InvitationDetail:
    invitation: InvitationRead
    organization: OrgResponse
    inviter: Optional[User]


@runtime_checkable
class MembershipProvider(Protocol):
    """Organization/member/invitation primitives. No authorization is applied here."""

    async def list_organizations(self, user_id: uuid.UUID) -> list[OrgListItem]: ...

    async def create_organization(
        self, name: str, slug: str, user_id: uuid.UUID
    ) -> OrgResponse: ...

    async def get_full_organization(self, org_id: uuid.UUID) -> Optional[FullOrgResponse]: ...

    async def get_member(self, member_id: uuid.UUID) -> Optional[MemberRead]: ...

    async def get_member_for_user(
        self, org_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[MemberRead]: ...

    async def get_member_by_email(
        self, org_id: uuid.UUID, email: str
    ) -> Optional[MemberRead]: ...

    async def list_members(self, org_id: uuid.UUID) -> list[MemberRead]: ...

    async def list_invitations(
        self, org_id: uuid.UUID, status: Optional[InvitationStatus] = None
    ) -> list[InvitationRead]: ...

    async def count_invitations_for_email(self, email: str) -> int: ...

    async def get_invitation(self, invitation_id: uuid.UUID) -> Optional[InvitationRead]: ...

    async def get_invitation_detail(
        self, invitation_id: uuid.UUID
    ) -> Optional[InvitationDetail]: ...

    async def update_member_role(self, member_id: uuid.UUID, role: MemberRole) -> MemberRead: ...

    async def remove_member(self, member_id: uuid.UUID) -> MemberRead: ...

    async def create_invitation(
        self,
        org_id: uuid.UUID,
        email: str,
        role: MemberRole,
        inviter_id: uuid.UUID,
        expires_at: datetime,
    ) -> InvitationRead: ...

    async def cancel_invitation(self, invitation_id: uuid.UUID) -> InvitationRead: ...

    async def accept_invitation(
        self, invitation_id: uuid.UUID, user_id: uuid.UUID
    ) -> MemberRead: ...

    async def reject_invitation(self, invitation_id: uuid.UUID) -> InvitationRead: ...

    async def send_invitation_email(self, invitation_id: uuid.UUID) -> bool: ...


# ---------------------------------------------------------------------------
# Read-model builders (the single place roles are normalized)
# ---------------------------------------------------------------------------

def _member_read(member: Member, user: Optional[User] = None) -> MemberRead:
    return MemberRead(
        id=member.id,
        user_id=member.user_id,
        organization_id=member.organization_id,
        role=normalize_role(member.role),
        created_at=as_utc(member.created_at),
        email=user.email if user else None,
        name=user.name if user else None,
        image=user.image if user else None,
    )


def _invitation_read(invitation: Invitation) -> InvitationRead:
    return InvitationRead(
        id=invitation.id,
        email=invitation.email,
        role=normalize_role(invitation.role),
        status=InvitationStatus(invitation.status),
        organization_id=invitation.organization_id,
        inviter_id=invitation.inviter_id,
        expires_at=as_utc(invitation.expires_at),
        created_at=as_utc(invitation.created_at),
    )


def _org_response(org: Organization) -> OrgResponse:
    return OrgResponse(
        id=org.id,
        name=org.name,
        slug=org.slug,
        logo=org.logo,
        created_at=as_utc(org.created_at),
    )


class SqlMembershipProvider:
    """MembershipProvider backed by the relational store."""

    def __init__(self, session: AsyncSession, mailer: Mailer):
        self.session = session
        self.mailer = mailer

    # --- Organizations ---

    async def list_organizations(self, user_id: uuid.UUID) -> list[OrgListItem]:
        result = await self.session.execute(
            select(Organization, Member.role)
            .join(Member, Member.organization_id == Organization.id)
            .where(Member.user_id == user_id)
            .order_by(Organization.created_at)
        )
        return [
            OrgListItem(**_org_response(org).model_dump(), role=normalize_role(role))
            for org, role in result.all()
        ]

    async def create_organization(
        self, name: str, slug: str, user_id: uuid.UUID
    ) -> OrgResponse:
        """Create the org and its owner membership in the session's unit of work."""
        org = Organization(name=name, slug=slug)
        self.session.add(org)
        await self.session.flush()

        owner = Member(
            user_id=user_id,
            organization_id=org.id,
            role=MemberRole.OWNER.value,
        )
        self.session.add(owner)
        await self.session.flush()
        return _org_response(org)

    async def get_full_organization(self, org_id: uuid.UUID) -> Optional[FullOrgResponse]:
        org = await self.session.get(Organization, org_id)
        if not org:
            return None
        return FullOrgResponse(
            **_org_response(org).model_dump(),
            members=await self.list_members(org_id),
            invitations=await self.list_invitations(org_id),
        )

    # --- Members ---

    async def get_member(self, member_id: uuid.UUID) -> Optional[MemberRead]:
        result = await self.session.execute(
            select(Member, User)
            .join(User, User.id == Member.user_id)
            .where(Member.id == member_id)
        )
        row = result.one_or_none()
        return _member_read(*row) if row else None

    async def get_member_for_user(
        self, org_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[MemberRead]:
        result = await self.session.execute(
            select(Member, User)
            .join(User, User.id == Member.user_id)
            .where(Member.organization_id == org_id, Member.user_id == user_id)
        )
        row = result.one_or_none()
        return _member_read(*row) if row else None

    async def get_member_by_email(
        self, org_id: uuid.UUID, email: str
    ) -> Optional[MemberRead]:
        result = await self.session.execute(
            select(Member, User)
            .join(User, User.id == Member.user_id)
            .where(Member.organization_id == org_id, User.email == email)
        )
        row = result.one_or_none()
        return _member_read(*row) if row else None

    async def list_members(self, org_id: uuid.UUID) -> list[MemberRead]:
        result = await self.session.execute(
            select(Member, User)
            .join(User, User.id == Member.user_id)
            .where(Member.organization_id == org_id)
            .order_by(Member.created_at.asc())
        )
        return [_member_read(member, user) for member, user in result.all()]

    async def update_member_role(self, member_id: uuid.UUID, role: MemberRole) -> MemberRead:
        member = await self.session.get(Member, member_id)
        member.role = role.value
        self.session.add(member)
        await self.session.flush()
        return await self.get_member(member_id)

    async def remove_member(self, member_id: uuid.UUID) -> MemberRead:
        removed = await self.get_member(member_id)
        member = await self.session.get(Member, member_id)
        await self.session.delete(member)
        await self.session.flush()
        return removed

    # --- Invitations ---

    async def list_invitations(
        self, org_id: uuid.UUID, status: Optional[InvitationStatus] = None
    ) -> list[InvitationRead]:
        stmt = select(Invitation).where(Invitation.organization_id == org_id)
        if status:
            stmt = stmt.where(Invitation.status == status.value)
        result = await self.session.execute(stmt.order_by(Invitation.created_at.desc()))
        return [_invitation_read(inv) for inv in result.scalars().all()]

    async def count_invitations_for_email(self, email: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Invitation)
            .where(
                Invitation.email == email,
                Invitation.status == InvitationStatus.PENDING.value,
            )
        )
        return result.scalar_one()

    async def get_invitation(self, invitation_id: uuid.UUID) -> Optional[InvitationRead]:
        invitation = await self.session.get(Invitation, invitation_id)
        return _invitation_read(invitation) if invitation else None

    async def get_invitation_detail(
        self, invitation_id: uuid.UUID
    ) -> Optional[InvitationDetail]:
        result = await self.session.execute(
            select(Invitation, Organization)
            .join(Organization, Organization.id == Invitation.organization_id)
            .where(Invitation.id == invitation_id)
        )
        row = result.one_or_none()
        if not row:
            return None
        invitation, org = row
        inviter = await self.session.get(User, invitation.inviter_id)
        return InvitationDetail(
            invitation=_invitation_read(invitation),
            organization=_org_response(org),
            inviter=inviter,
        )

    async def create_invitation(
        self,
        org_id: uuid.UUID,
        email: str,
        role: MemberRole,
        inviter_id: uuid.UUID,
        expires_at: datetime,
    ) -> InvitationRead:
        invitation = Invitation(
            email=email,
            role=role.value,
            status=InvitationStatus.PENDING.value,
            organization_id=org_id,
            inviter_id=inviter_id,
            expires_at=expires_at,
        )
        self.session.add(invitation)
        await self.session.flush()
        return _invitation_read(invitation)

    async def _set_status(
        self, invitation_id: uuid.UUID, status: InvitationStatus
    ) -> Invitation:
        invitation = await self.session.get(Invitation, invitation_id)
        invitation.status = status.value
        self.session.add(invitation)
        await self.session.flush()
        return invitation

    async def cancel_invitation(self, invitation_id: uuid.UUID) -> InvitationRead:
        return _invitation_read(await self._set_status(invitation_id, InvitationStatus.CANCELED))

    async def reject_invitation(self, invitation_id: uuid.UUID) -> InvitationRead:
        return _invitation_read(await self._set_status(invitation_id, InvitationStatus.REJECTED))

    async def accept_invitation(
        self, invitation_id: uuid.UUID, user_id: uuid.UUID
    ) -> MemberRead:
        """Mark accepted and create the membership at the invitation's role."""
        invitation = await self._set_status(invitation_id, InvitationStatus.ACCEPTED)
        member = Member(
            user_id=user_id,
            organization_id=invitation.organization_id,
            role=normalize_role(invitation.role).value,
        )
        self.session.add(member)
        await self.session.flush()
        return await self.get_member(member.id)

    async def send_invitation_email(self, invitation_id: uuid.UUID) -> bool:
        detail = await self.get_invitation_detail(invitation_id)
        if detail is None:
            return False
        subject, body = render_invitation_email(
            email=detail.invitation.email,
            organization_name=detail.organization.name,
            invite_link=invitation_link(detail.invitation.id),
            inviter_name=detail.inviter.name if detail.inviter else None,
            inviter_email=detail.inviter.email if detail.inviter else None,
        )
        sent = await deliver(self.mailer, to=detail.invitation.email, subject=subject, html=body)
        log.info(
            "invitation.email_dispatched",
            invitation_id=str(invitation_id),
            delivered=sent,
        )
        return sent


def get_membership_provider(
    session: AsyncSession = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
) -> MembershipProvider:
    """FastAPI dependency: a provider bound to the request's session."""
    return SqlMembershipProvider(session, mailer)
