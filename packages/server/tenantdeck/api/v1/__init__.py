"""
API v1 Router

Org-scoped endpoints are prefixed with /orgs/{orgId}; the caller must be
a member of that org.
"""

from fastapi import APIRouter

from . import invitations, members, organizations, projects, users

router = APIRouter()

router.include_router(organizations.router)

router.include_router(members.router, prefix="/orgs/{orgId}/members")
router.include_router(invitations.router_scoped, prefix="/orgs/{orgId}/invitations")
router.include_router(projects.router_scoped, prefix="/orgs/{orgId}/projects", tags=["Projects"])
router.include_router(users.router_scoped, prefix="/orgs/{orgId}/users")

router.include_router(invitations.router_public, prefix="/invitations")
router.include_router(projects.router_global, prefix="/projects", tags=["Projects"])
router.include_router(users.router_me, prefix="/me")


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/orgs",
            "/orgs/{orgId}/members",
            "/orgs/{orgId}/invitations",
            "/orgs/{orgId}/projects",
            "/orgs/{orgId}/users",
            "/invitations/{invitationId}",
            "/projects/{projectId}",
            "/me",
        ],
    }
