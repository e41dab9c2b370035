"""
Project endpoints.

GET    /api/v1/orgs/{orgId}/projects          — List projects (newest first)
GET    /api/v1/orgs/{orgId}/projects/count    — Number of projects
GET    /api/v1/orgs/{orgId}/projects/recent   — Five most recent projects
GET    /api/v1/orgs/{orgId}/projects/full     — Org with members plus projects
POST   /api/v1/orgs/{orgId}/projects          — Create a project (any member)
PATCH  /api/v1/projects/{projectId}           — Update name/description
DELETE /api/v1/projects/{projectId}           — Delete (Owner/Admin)
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tenantdeck.core.auth import Actor, OrgContext, get_current_actor, require_member
from tenantdeck.core.database import get_session
from tenantdeck.core.membership import MembershipProvider, get_membership_provider
from tenantdeck.services import projects as project_service
from tenantdeck_shared.schemas.common import CountResponse
from tenantdeck_shared.schemas.projects import (
    FullProjectListResponse,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
)

# ---------------------------------------------------------------------------
# Org-scoped routes
# ---------------------------------------------------------------------------
router_scoped = APIRouter()


@router_scoped.get("", response_model=List[ProjectRead])
async def list_projects(
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await project_service.list_projects(ctx.org_id, session)


@router_scoped.get("/count", response_model=CountResponse)
async def count_projects(
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return CountResponse(count=await project_service.count_projects(ctx.org_id, session))


@router_scoped.get("/recent", response_model=List[ProjectRead])
async def recent_projects(
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await project_service.recent_projects(ctx.org_id, session)


@router_scoped.get("/full", response_model=FullProjectListResponse)
async def list_full_project(
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    return await project_service.list_full_project(ctx.org_id, session, provider)


@router_scoped.post("", response_model=ProjectRead, status_code=201)
async def create_project(
    project_in: ProjectCreate,
    ctx: OrgContext = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await project_service.create_project(ctx.actor, ctx.org_id, project_in, session)


# ---------------------------------------------------------------------------
# Project-addressed routes
# ---------------------------------------------------------------------------
router_global = APIRouter()


@router_global.patch("/{projectId}", response_model=ProjectRead)
async def update_project(
    projectId: uuid.UUID,
    project_in: ProjectUpdate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    return await project_service.update_project(actor, projectId, project_in, session, provider)


@router_global.delete("/{projectId}", response_model=ProjectRead)
async def delete_project(
    projectId: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
    provider: MembershipProvider = Depends(get_membership_provider),
):
    return await project_service.delete_project(actor, projectId, session, provider)
