"""
Tests for authentication primitives and the org membership dependency.

Covers:
- Password hashing
- JWT creation, decoding and revocation checks
- require_member (org-scoping)
- Email delivery failure handling
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import httpx
import jwt
import pytest

from tenantdeck.core.auth import (
    create_jwt,
    decode_jwt,
    hash_password,
    is_session_revoked,
    require_member,
    verify_password,
)
from tenantdeck.core.email import deliver, render_invitation_email
from tenantdeck.core.errors import NotFoundError
from tenantdeck_shared.schemas.common import MemberRole


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("MySecureP@ssw0rd!")
        assert hashed != "MySecureP@ssw0rd!"
        assert verify_password("MySecureP@ssw0rd!", hashed)
        assert not verify_password("wrong-password", hashed)


class TestJWT:
    def test_round_trip_claims(self):
        uid = uuid.uuid4()
        token, jti = create_jwt(uid, "me@example.com")
        payload = decode_jwt(token)
        assert payload["sub"] == str(uid)
        assert payload["email"] == "me@example.com"
        assert payload["jti"] == jti

    def test_expired_token(self):
        token, _ = create_jwt(uuid.uuid4(), "me@example.com", expires_delta=timedelta(seconds=-1))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_jwt(token)

    def test_tampered_token(self):
        token, _ = create_jwt(uuid.uuid4(), "me@example.com")
        with pytest.raises(jwt.PyJWTError):
            decode_jwt(token + "x")


class TestRevocation:
    def _redis(self, exists=0, cutoff=None):
        redis = AsyncMock()
        redis.exists.return_value = exists
        redis.get.return_value = cutoff
        return redis

    async def test_active_session(self):
        token, _ = create_jwt(uuid.uuid4(), "me@example.com")
        with patch("tenantdeck.core.auth.get_redis", AsyncMock(return_value=self._redis())):
            assert await is_session_revoked(decode_jwt(token)) is False

    async def test_revoked_jti(self):
        token, _ = create_jwt(uuid.uuid4(), "me@example.com")
        with patch("tenantdeck.core.auth.get_redis", AsyncMock(return_value=self._redis(exists=1))):
            assert await is_session_revoked(decode_jwt(token)) is True

    async def test_issued_before_cutoff(self):
        token, _ = create_jwt(uuid.uuid4(), "me@example.com")
        cutoff = str(int((datetime.now(timezone.utc) + timedelta(minutes=1)).timestamp()))
        with patch("tenantdeck.core.auth.get_redis", AsyncMock(return_value=self._redis(cutoff=cutoff))):
            assert await is_session_revoked(decode_jwt(token)) is True


class TestRequireMember:
    async def test_member_gets_context(self, session, owner, org):
        ctx = await require_member(orgId=org.id, actor=owner, session=session)
        assert ctx.org_id == org.id
        assert ctx.role == MemberRole.OWNER

    async def test_non_member_sees_not_found(self, session, make_user, org):
        from tenantdeck.core.auth import Actor

        stranger = Actor(await make_user())
        with pytest.raises(NotFoundError):
            await require_member(orgId=org.id, actor=stranger, session=session)

    async def test_unknown_org(self, session, owner):
        with pytest.raises(NotFoundError):
            await require_member(orgId=uuid.uuid4(), actor=owner, session=session)


class TestEmail:
    def test_render_invitation(self):
        subject, body = render_invitation_email(
            email="new@example.com",
            organization_name="Acme <Inc>",
            invite_link="http://localhost:3000/accept-invitation/abc",
            inviter_name="Olivia",
            inviter_email="owner@example.com",
        )
        assert "invited" in subject
        assert "Acme &lt;Inc&gt;" in body
        assert "Olivia (owner@example.com)" in body

    async def test_delivery_failure_is_swallowed(self):
        mailer = AsyncMock()
        mailer.send.side_effect = httpx.ConnectError("refused")
        assert await deliver(mailer, to="a@example.com", subject="s", html="h") is False

    async def test_delivery_success(self, mailer):
        assert await deliver(mailer, to="a@example.com", subject="s", html="h") is True
        assert mailer.sent[0]["to"] == "a@example.com"
