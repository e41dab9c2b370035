"""
Tests for the role-based authorization guard and invitation lifecycle helpers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tenantdeck_shared.schemas.common import MemberRole, normalize_role
from tenantdeck_shared.schemas.invitations import (
    InvitationStatus,
    can_transition,
    is_invitation_expired,
)
from tenantdeck_shared.schemas.members import (
    can_change_role,
    can_delete_project,
    can_manage_members,
    can_remove_member,
)

OWNER, ADMIN, MEMBER = MemberRole.OWNER, MemberRole.ADMIN, MemberRole.MEMBER


class TestNormalizeRole:
    def test_missing_role_reads_as_member(self):
        assert normalize_role(None) == MEMBER
        assert normalize_role("") == MEMBER

    def test_known_roles(self):
        assert normalize_role("owner") == OWNER
        assert normalize_role("admin") == ADMIN


class TestCanManageMembers:
    def test_owner_and_admin(self):
        assert can_manage_members(OWNER)
        assert can_manage_members(ADMIN)

    def test_member_and_non_member(self):
        assert not can_manage_members(MEMBER)
        assert not can_manage_members(None)


class TestCanRemoveMember:
    @pytest.mark.parametrize("actor", [OWNER, ADMIN, MEMBER, None])
    def test_owner_is_never_removable(self, actor):
        assert not can_remove_member(actor, OWNER)

    def test_admin_cannot_remove_admin(self):
        assert not can_remove_member(ADMIN, ADMIN)

    def test_admin_removes_member(self):
        assert can_remove_member(ADMIN, MEMBER)

    @pytest.mark.parametrize("target", [ADMIN, MEMBER])
    def test_owner_removes_any_non_owner(self, target):
        assert can_remove_member(OWNER, target)

    def test_member_cannot_remove(self):
        assert not can_remove_member(MEMBER, MEMBER)
        assert not can_remove_member(None, MEMBER)


class TestCanChangeRole:
    @pytest.mark.parametrize("actor", [ADMIN, MEMBER, None])
    def test_only_owner_promotes_to_admin(self, actor):
        assert not can_change_role(actor, MEMBER, ADMIN)

    def test_owner_promotes_to_admin(self):
        assert can_change_role(OWNER, MEMBER, ADMIN)

    @pytest.mark.parametrize("actor", [OWNER, ADMIN])
    def test_owner_role_is_immutable(self, actor):
        assert not can_change_role(actor, OWNER, MEMBER)

    def test_owner_cannot_be_granted(self):
        assert not can_change_role(OWNER, ADMIN, OWNER)

    def test_admin_demotes_admin(self):
        assert can_change_role(ADMIN, ADMIN, MEMBER)

    def test_member_cannot_change_roles(self):
        assert not can_change_role(MEMBER, MEMBER, MEMBER)


class TestCanDeleteProject:
    def test_roles(self):
        assert can_delete_project(OWNER)
        assert can_delete_project(ADMIN)
        assert not can_delete_project(MEMBER)
        assert not can_delete_project(None)


class TestInvitationLifecycle:
    def test_pending_transitions(self):
        for target in (InvitationStatus.ACCEPTED, InvitationStatus.REJECTED, InvitationStatus.CANCELED):
            assert can_transition(InvitationStatus.PENDING, target)

    @pytest.mark.parametrize(
        "terminal",
        [InvitationStatus.ACCEPTED, InvitationStatus.REJECTED, InvitationStatus.CANCELED],
    )
    def test_terminal_states(self, terminal):
        assert not can_transition(terminal, InvitationStatus.ACCEPTED)
        assert not can_transition(terminal, InvitationStatus.CANCELED)

    def test_expiry(self):
        now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert is_invitation_expired(now - timedelta(seconds=1), now)
        assert not is_invitation_expired(now + timedelta(hours=1), now)
        assert not is_invitation_expired(now, now)

    def test_naive_expiry_is_utc(self):
        now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert is_invitation_expired(datetime(2026, 1, 1, 11, 0), now)
