"""
Project service — org-scoped project CRUD with globally unique slugs.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tenantdeck.core.auth import Actor
from tenantdeck.core.errors import (
    ForbiddenError,
    InternalFailureError,
    NotFoundError,
    conflict_on_integrity_error,
)
from tenantdeck.core.membership import MembershipProvider
from tenantdeck.core.slugs import generate_unique_slug
from tenantdeck.models.organization import Organization
from tenantdeck.models.project import Project
from tenantdeck_shared.schemas.members import can_delete_project
from tenantdeck_shared.schemas.projects import (
    FullProjectListResponse,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
)

log = structlog.get_logger()

PROJECT_NAME_TAKEN = "A project with this name already exists. Please try a different name."
RECENT_PROJECTS_LIMIT = 5


async def _get_project_or_404(session: AsyncSession, project_id: uuid.UUID) -> Project:
    project = await session.get(Project, project_id)
    if not project:
        raise NotFoundError("Project not found")
    return project


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def list_projects(org_id: uuid.UUID, session: AsyncSession) -> list[ProjectRead]:
    """All projects of the org, newest first."""
    result = await session.execute(
        select(Project)
        .where(Project.organization_id == org_id)
        .order_by(Project.created_at.desc())
    )
    return [ProjectRead.model_validate(p) for p in result.scalars().all()]


async def count_projects(org_id: uuid.UUID, session: AsyncSession) -> int:
    result = await session.execute(
        select(func.count()).select_from(Project).where(Project.organization_id == org_id)
    )
    return result.scalar_one()


async def recent_projects(
    org_id: uuid.UUID, session: AsyncSession, limit: int = RECENT_PROJECTS_LIMIT
) -> list[ProjectRead]:
    result = await session.execute(
        select(Project)
        .where(Project.organization_id == org_id)
        .order_by(Project.created_at.desc())
        .limit(limit)
    )
    return [ProjectRead.model_validate(p) for p in result.scalars().all()]


async def list_full_project(
    org_id: uuid.UUID, session: AsyncSession, provider: MembershipProvider
) -> FullProjectListResponse:
    """The org (with members and invitations) alongside its projects."""
    return FullProjectListResponse(
        organization=await provider.get_full_organization(org_id),
        projects=await list_projects(org_id, session),
    )


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

async def create_project(
    actor: Actor,
    org_id: uuid.UUID,
    req: ProjectCreate,
    session: AsyncSession,
) -> ProjectRead:
    if not await session.get(Organization, org_id):
        raise NotFoundError("Organization not found")

    slug = await generate_unique_slug(session, Project, req.name)
    project = Project(
        name=req.name,
        slug=slug,
        description=req.description,
        organization_id=org_id,
    )
    with conflict_on_integrity_error(PROJECT_NAME_TAKEN):
        session.add(project)
        await session.flush()

    log.info(
        "project.created",
        project_id=str(project.id),
        org_id=str(org_id),
        slug=slug,
        actor=str(actor.user_id),
    )
    return ProjectRead.model_validate(project)


async def update_project(
    actor: Actor,
    project_id: uuid.UUID,
    req: ProjectUpdate,
    session: AsyncSession,
    provider: MembershipProvider,
) -> ProjectRead:
    """Partial update; the slug is regenerated only when the name changes."""
    project = await _get_project_or_404(session, project_id)

    org = await session.get(Organization, project.organization_id)
    if not org or not await provider.get_member_for_user(org.id, actor.user_id):
        raise ForbiddenError("You don't have access to this project")

    update_data = req.model_dump(exclude_unset=True)
    name: Optional[str] = update_data.get("name")
    if name and name != project.name:
        project.slug = await generate_unique_slug(
            session, Project, name, exclude_id=project.id
        )
        project.name = name
    if "description" in update_data:
        project.description = update_data["description"]

    with conflict_on_integrity_error(PROJECT_NAME_TAKEN):
        session.add(project)
        await session.flush()
    await session.refresh(project)

    log.info("project.updated", project_id=str(project.id), actor=str(actor.user_id))
    return ProjectRead.model_validate(project)


async def delete_project(
    actor: Actor,
    project_id: uuid.UUID,
    session: AsyncSession,
    provider: MembershipProvider,
) -> ProjectRead:
    """Delete a project (owner/admin of its org only)."""
    project = await _get_project_or_404(session, project_id)

    org = await session.get(Organization, project.organization_id)
    if not org:
        raise ForbiddenError("You don't have access to delete this project")

    member = await provider.get_member_for_user(org.id, actor.user_id)
    if not can_delete_project(member.role if member else None):
        raise ForbiddenError("Only owners or admins can delete projects")

    deleted = ProjectRead.model_validate(project)
    try:
        await session.delete(project)
        await session.flush()
    except SQLAlchemyError as exc:
        log.error("project.delete_failed", project_id=str(project_id), error=str(exc))
        raise InternalFailureError("Failed to delete project") from exc

    log.info("project.deleted", project_id=str(project_id), actor=str(actor.user_id))
    return deleted
