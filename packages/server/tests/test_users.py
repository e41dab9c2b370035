"""
Integration tests for the user account service.

Tests cover:
- Org-level member statistics
- Profile update
- Password change with optional session revocation
- Account deletion, including the owned active org
"""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from tenantdeck.core.auth import Actor, hash_password, verify_password
from tenantdeck.core.errors import ConflictError
from tenantdeck.models.organization import Organization
from tenantdeck.models.user import User
from tenantdeck.services import users as user_service
from tenantdeck_shared.schemas.common import MemberRole
from tenantdeck_shared.schemas.users import (
    PasswordChangeRequest,
    UserDeleteRequest,
    UserResponse,
    UserUpdateRequest,
)

PASSWORD = "correct-horse"


@pytest.fixture(scope="module")
def password_hash():
    return hash_password(PASSWORD)


@pytest.fixture
async def account(make_user, password_hash):
    return Actor(await make_user(email="me@example.com", name="Me", password_hash=password_hash))


class TestOrgStatistics:
    async def test_count_and_recent(self, session, make_user, add_member, org):
        for i in range(6):
            await add_member(org.id, await make_user(email=f"u{i}@example.com"))

        assert await user_service.count_members(org.id, session) == 7
        recent = await user_service.recent_users(org.id, session)
        assert len(recent) == 5
        assert recent[0].email == "u5@example.com"

    async def test_user_role(self, provider, make_user, owner, org):
        member = await user_service.get_user_role(owner, org.id, provider)
        assert member.role == MemberRole.OWNER

        stranger = Actor(await make_user())
        assert await user_service.get_user_role(stranger, org.id, provider) is None


class TestUpdateUser:
    async def test_updates_name_and_image(self, session, account):
        updated = await user_service.update_user(
            account,
            UserUpdateRequest(name="New Name", image="https://cdn.example.com/me.png"),
            session,
        )
        assert updated.name == "New Name"
        assert updated.image == "https://cdn.example.com/me.png"

    async def test_omitted_fields_unchanged(self, session, account):
        updated = await user_service.update_user(account, UserUpdateRequest(), session)
        assert updated.name == "Me"

    def test_invalid_image(self):
        with pytest.raises(ValidationError):
            UserUpdateRequest(image="not a url")


class TestChangePassword:
    async def test_changes_hash(self, session, account):
        revoked = await user_service.change_password(
            account,
            PasswordChangeRequest(current_password=PASSWORD, new_password="new-secret"),
            session,
        )
        assert revoked is False
        user = await session.get(User, account.user_id)
        assert verify_password("new-secret", user.password_hash)

    async def test_wrong_current_password(self, session, account):
        with pytest.raises(HTTPException) as exc_info:
            await user_service.change_password(
                account,
                PasswordChangeRequest(current_password="wrong", new_password="new-secret"),
                session,
            )
        assert exc_info.value.status_code == 400

    async def test_revokes_other_sessions(self, session, account):
        redis = AsyncMock()
        with patch("tenantdeck.core.auth.get_redis", AsyncMock(return_value=redis)):
            revoked = await user_service.change_password(
                account,
                PasswordChangeRequest(
                    current_password=PASSWORD,
                    new_password="new-secret",
                    revoke_other_sessions=True,
                ),
                session,
            )
        assert revoked is True
        redis.setex.assert_awaited_once()
        key = redis.setex.await_args.args[0]
        assert key == f"td:jwt:revoked_before:{account.user_id}"


class TestDeleteUser:
    async def test_deletes_owned_active_org(self, session, provider, make_user, password_hash):
        me = Actor(await make_user(email="founder@example.com", password_hash=password_hash))
        org = await provider.create_organization("Solo", "solo", me.user_id)

        await user_service.delete_user(
            me, UserDeleteRequest(password=PASSWORD, org_id=org.id), session
        )

        assert await session.get(User, me.user_id) is None
        assert await session.get(Organization, org.id) is None

    async def test_keeps_org_when_only_member(self, session, provider, add_member, owner, org, account):
        await add_member(org.id, account.user, "member")

        await user_service.delete_user(
            account, UserDeleteRequest(password=PASSWORD, org_id=org.id), session
        )

        assert await session.get(Organization, org.id) is not None
        assert await provider.get_member_for_user(org.id, account.user_id) is None
        assert [m.email for m in await provider.list_members(org.id)] == ["owner@example.com"]

    async def test_wrong_password(self, session, account):
        with pytest.raises(HTTPException):
            await user_service.delete_user(
                account, UserDeleteRequest(password="wrong-pass", org_id=uuid.uuid4()), session
            )
        assert await session.get(User, account.user_id) is not None

    async def test_other_owned_org_blocks_deletion(
        self, session, provider, make_user, add_member, password_hash
    ):
        me = Actor(await make_user(email="founder@example.com", password_hash=password_hash))
        active = await provider.create_organization("Active", "active", me.user_id)
        other = await provider.create_organization("Other", "other", me.user_id)
        teammate = await make_user(email="teammate@example.com")
        await add_member(other.id, teammate, "member")

        with pytest.raises(ConflictError, match="other organizations you own"):
            await user_service.delete_user(
                me, UserDeleteRequest(password=PASSWORD, org_id=active.id), session
            )

        assert await session.get(User, me.user_id) is not None
        assert await session.get(Organization, active.id) is not None
        owner = await provider.get_member_for_user(other.id, me.user_id)
        assert owner.role == MemberRole.OWNER


class TestFixedIdentifiers:
    """Seeded rows use fixed, non-random UUIDs."""

    SEEDED_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000010")
    SEEDED_ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")

    async def test_user_response_accepts_any_uuid_version(self, session, add_member, org):
        user = User(id=self.SEEDED_USER_ID, email="alice@acme.dev", name="Alice")
        session.add(user)
        await session.flush()
        await add_member(org.id, user)

        assert UserResponse.model_validate(user).id == self.SEEDED_USER_ID
        recent = await user_service.recent_users(org.id, session)
        assert self.SEEDED_USER_ID in [u.id for u in recent]

    def test_delete_request_accepts_any_uuid_version(self):
        req = UserDeleteRequest(password=PASSWORD, org_id=self.SEEDED_ORG_ID)
        assert req.org_id == self.SEEDED_ORG_ID
