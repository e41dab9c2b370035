"""
Organization API endpoints.

GET    /api/v1/orgs          — List orgs for the authenticated user
GET    /api/v1/orgs/count    — Number of orgs the user belongs to
POST   /api/v1/orgs          — Create a new org (creator becomes owner)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tenantdeck.core.auth import Actor, get_current_actor
from tenantdeck.core.database import get_session
from tenantdeck.core.membership import MembershipProvider, get_membership_provider
from tenantdeck.services import organizations as org_service
from tenantdeck_shared.schemas.common import CountResponse
from tenantdeck_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgListResponse,
    OrgResponse,
)

router = APIRouter()


@router.get("/orgs", response_model=OrgListResponse, tags=["Organizations"])
async def list_orgs(
    actor: Actor = Depends(get_current_actor),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    """List orgs the authenticated user belongs to."""
    items = await org_service.list_orgs(actor, provider)
    return OrgListResponse(data=items)


@router.get("/orgs/count", response_model=CountResponse, tags=["Organizations"])
async def count_orgs(
    actor: Actor = Depends(get_current_actor),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    return CountResponse(count=await org_service.count_orgs(actor, provider))


@router.post("/orgs", response_model=OrgResponse, status_code=201, tags=["Organizations"])
async def create_org(
    body: OrgCreateRequest,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    """Create a new organization. The slug is derived from the name."""
    return await org_service.create_org(actor, body, session, provider)
