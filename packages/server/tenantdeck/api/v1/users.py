"""
User endpoints.

GET    /api/v1/orgs/{orgId}/users/count    — Number of members in the org
GET    /api/v1/orgs/{orgId}/users/recent   — Most recently joined users
GET    /api/v1/orgs/{orgId}/users/role     — My membership in the org
GET    /api/v1/me                          — My profile
PATCH  /api/v1/me                          — Update name/image
POST   /api/v1/me/password                 — Change password
DELETE /api/v1/me                          — Delete my account
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tenantdeck.core.auth import (
    Actor,
    OrgContext,
    create_jwt,
    get_current_actor,
    require_member,
)
from tenantdeck.core.database import get_session
from tenantdeck.core.membership import MembershipProvider, get_membership_provider
from tenantdeck.services import users as user_service
from tenantdeck_shared.schemas.common import CountResponse
from tenantdeck_shared.schemas.members import MemberRead
from tenantdeck_shared.schemas.users import (
    PasswordChangeRequest,
    PasswordChangeResponse,
    UserDeleteRequest,
    UserResponse,
    UserUpdateRequest,
)

router_scoped = APIRouter()


@router_scoped.get("/count", response_model=CountResponse, tags=["Users"])
async def count_users(
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return CountResponse(count=await user_service.count_members(ctx.org_id, session))


@router_scoped.get("/recent", response_model=List[UserResponse], tags=["Users"])
async def recent_users(
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await user_service.recent_users(ctx.org_id, session)


@router_scoped.get("/role", response_model=Optional[MemberRead], tags=["Users"])
async def get_user_role(
    ctx: OrgContext = Depends(require_member),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    return await user_service.get_user_role(ctx.actor, ctx.org_id, provider)


router_me = APIRouter()


@router_me.get("", response_model=UserResponse, tags=["Users"])
async def get_me(actor: Actor = Depends(get_current_actor)):
    return UserResponse.model_validate(actor.user)


@router_me.patch("", response_model=UserResponse, tags=["Users"])
async def update_me(
    body: UserUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    return await user_service.update_user(actor, body, session)


@router_me.post("/password", response_model=PasswordChangeResponse, tags=["Users"])
async def change_password(
    body: PasswordChangeRequest,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """Change password. With ``revoke_other_sessions`` a fresh token is returned."""
    revoked = await user_service.change_password(actor, body, session)
    if not revoked:
        return PasswordChangeResponse(message="Password changed")
    token, _jti = create_jwt(actor.user_id, actor.email)
    return PasswordChangeResponse(message="Password changed", access_token=token)


@router_me.delete("", status_code=204, tags=["Users"])
async def delete_me(
    body: UserDeleteRequest = Body(...),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
):
    """Delete the account; the active org is deleted too when the user owns it."""
    await user_service.delete_user(actor, body, session)
