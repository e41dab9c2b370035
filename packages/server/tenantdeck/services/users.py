"""
User account service — profile, password, account deletion and the
org-level member statistics shown on the dashboard.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tenantdeck.core.auth import (
    Actor,
    hash_password,
    revoke_user_sessions,
    verify_password,
)
from tenantdeck.core.errors import ConflictError
from tenantdeck.core.membership import MembershipProvider
from tenantdeck.models.invitation import Invitation
from tenantdeck.models.member import Member
from tenantdeck.models.user import User
from tenantdeck.services.organizations import delete_org
from tenantdeck_shared.schemas.common import MemberRole
from tenantdeck_shared.schemas.members import MemberRead
from tenantdeck_shared.schemas.users import (
    PasswordChangeRequest,
    UserDeleteRequest,
    UserResponse,
    UserUpdateRequest,
)

log = structlog.get_logger()

RECENT_USERS_LIMIT = 5


def _check_password(user: User, password: str) -> None:
    if not user.password_hash or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid password")


# ---------------------------------------------------------------------------
# Org-level statistics
# ---------------------------------------------------------------------------

async def count_members(org_id: uuid.UUID, session: AsyncSession) -> int:
    result = await session.execute(
        select(func.count()).select_from(Member).where(Member.organization_id == org_id)
    )
    return result.scalar_one()


async def recent_users(
    org_id: uuid.UUID, session: AsyncSession, limit: int = RECENT_USERS_LIMIT
) -> list[UserResponse]:
    """Users behind the most recently created memberships, newest first."""
    result = await session.execute(
        select(User)
        .join(Member, Member.user_id == User.id)
        .where(Member.organization_id == org_id)
        .order_by(Member.created_at.desc())
        .limit(limit)
    )
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


async def get_user_role(
    actor: Actor, org_id: uuid.UUID, provider: MembershipProvider
) -> Optional[MemberRead]:
    """The actor's own membership in the org, or None."""
    return await provider.get_member_for_user(org_id, actor.user_id)


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------

async def update_user(
    actor: Actor, req: UserUpdateRequest, session: AsyncSession
) -> UserResponse:
    user = await session.get(User, actor.user_id)
    if req.name is not None:
        user.name = req.name
    if req.image is not None:
        user.image = str(req.image)
    session.add(user)
    await session.flush()

    log.info("user.updated", user_id=str(user.id))
    return UserResponse.model_validate(user)


async def change_password(
    actor: Actor, req: PasswordChangeRequest, session: AsyncSession
) -> bool:
    """Change the actor's password. Returns whether other sessions were revoked."""
    user = await session.get(User, actor.user_id)
    _check_password(user, req.current_password)

    user.password_hash = hash_password(req.new_password)
    session.add(user)
    await session.flush()

    if req.revoke_other_sessions:
        await revoke_user_sessions(user.id, before=datetime.now(timezone.utc))

    log.info(
        "user.password_changed",
        user_id=str(user.id),
        revoked_sessions=req.revoke_other_sessions,
    )
    return req.revoke_other_sessions


async def delete_user(
    actor: Actor, req: UserDeleteRequest, session: AsyncSession
) -> None:
    """Delete the actor's account.

    If the actor owns ``req.org_id``, that organization is deleted too. Owning
    any other organization blocks the deletion.
    """
    user = await session.get(User, actor.user_id)
    _check_password(user, req.password)

    result = await session.execute(
        select(Member.organization_id).where(
            Member.user_id == user.id,
            Member.role == MemberRole.OWNER.value,
        )
    )
    owned = set(result.scalars().all())
    if owned - {req.org_id}:
        raise ConflictError(
            "Transfer or delete the other organizations you own before deleting your account"
        )
    owns_org = req.org_id in owned

    if owns_org:
        await delete_org(req.org_id, session)

    await session.execute(delete(Invitation).where(Invitation.inviter_id == user.id))
    await session.execute(delete(Member).where(Member.user_id == user.id))
    await session.delete(user)
    await session.flush()

    log.info(
        "user.deleted",
        user_id=str(actor.user_id),
        deleted_org=str(req.org_id) if owns_org else None,
    )
