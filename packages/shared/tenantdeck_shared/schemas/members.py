"""
Membership schemas and the role-based authorization guard.

The guard functions are pure: they take already-resolved roles and return
allow/deny. A ``None`` actor role means the caller has no membership row and
is always denied.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from .common import MANAGER_ROLES, MemberRole


class AssignableRole(str, Enum):
    """Roles that can be granted through invitations and role changes."""
    ADMIN = "admin"
    MEMBER = "member"


# ---------------------------------------------------------------------------
# Authorization guard
# ---------------------------------------------------------------------------

def can_manage_members(actor_role: Optional[MemberRole]) -> bool:
    return actor_role in MANAGER_ROLES


def can_change_role(
    actor_role: Optional[MemberRole],
    target_role: MemberRole,
    new_role: MemberRole,
) -> bool:
    """Decide whether ``actor_role`` may move a ``target_role`` member to ``new_role``.

    Rules:
    - The owner role is immutable: it can be neither changed nor granted.
    - Only an owner may promote to admin.
    - Otherwise owners and admins may change roles.
    """
    if target_role == MemberRole.OWNER or new_role == MemberRole.OWNER:
        return False
    if new_role == MemberRole.ADMIN and actor_role != MemberRole.OWNER:
        return False
    return can_manage_members(actor_role)


def can_remove_member(actor_role: Optional[MemberRole], target_role: MemberRole) -> bool:
    """Owners may remove anyone but themselves; admins may remove plain members."""
    if target_role == MemberRole.OWNER:
        return False
    if actor_role == MemberRole.ADMIN and target_role == MemberRole.ADMIN:
        return False
    return can_manage_members(actor_role)


def can_delete_project(actor_role: Optional[MemberRole]) -> bool:
    return actor_role in MANAGER_ROLES


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class MemberRoleUpdate(BaseModel):
    role: AssignableRole


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class MemberRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    organization_id: uuid.UUID
    role: MemberRole
    created_at: datetime
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None


class MemberListResponse(BaseModel):
    data: List[MemberRead]
