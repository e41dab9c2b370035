"""
Authentication and org-scoped authorization for Tenantdeck.

Supports:
- Email/Password accounts with bcrypt hashes
- Bearer JWT sessions with Redis revocation (per token and per user)
- An explicit ``Actor`` resolved per request; services never read ambient state
- ``require_member`` for org-scoped routes
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tenantdeck.core.config import get_settings
from tenantdeck.core.database import get_session
from tenantdeck.core.errors import NotFoundError
from tenantdeck.core.redis import get_redis, revoked_before_key, revoked_jti_key
from tenantdeck.models.member import Member
from tenantdeck.models.organization import Organization
from tenantdeck.models.user import User
from tenantdeck_shared.schemas.common import MemberRole, normalize_role

log = structlog.get_logger()
settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    email: str,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed JWT. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "email": email,
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


# ---------------------------------------------------------------------------
# Session revocation (Redis)
# ---------------------------------------------------------------------------

async def revoke_jwt(jti: str, ttl_seconds: int | None = None) -> None:
    """Add a JWT ID to the revocation list until the token would have expired."""
    redis = await get_redis()
    ttl = ttl_seconds or settings.jwt_expire_minutes * 60
    await redis.setex(revoked_jti_key(jti), ttl, "1")


async def is_jwt_revoked(jti: str) -> bool:
    redis = await get_redis()
    return await redis.exists(revoked_jti_key(jti)) > 0


async def revoke_user_sessions(user_id: uuid.UUID, before: datetime) -> None:
    """Reject every token for ``user_id`` issued before ``before``."""
    redis = await get_redis()
    await redis.setex(
        revoked_before_key(user_id),
        settings.jwt_expire_minutes * 60,
        str(int(before.timestamp())),
    )


async def is_session_revoked(payload: dict) -> bool:
    jti = payload.get("jti")
    if jti and await is_jwt_revoked(jti):
        return True
    redis = await get_redis()
    cutoff = await redis.get(revoked_before_key(uuid.UUID(payload["sub"])))
    return cutoff is not None and int(payload.get("iat", 0)) < int(cutoff)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

class Actor:
    """The authenticated caller, passed explicitly into every service call."""

    def __init__(self, user: User):
        self.user = user
        self.user_id = user.id
        self.email = user.email
        self.name = user.name


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> Actor:
    """Resolve the caller from a ``Authorization: Bearer <jwt>`` header."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        payload = decode_jwt(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    if await is_session_revoked(payload):
        raise HTTPException(status_code=401, detail="Session has been revoked")

    user = await session.get(User, uuid.UUID(payload["sub"]))
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return Actor(user)


class OrgContext:
    """An actor plus their membership in the org named by the route."""

    def __init__(self, actor: Actor, org: Organization, member: Member):
        self.actor = actor
        self.org = org
        self.member = member
        self.org_id = org.id
        self.role: MemberRole = normalize_role(member.role)


async def require_member(
    orgId: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_session),
) -> OrgContext:
    """Any member of the org can access this endpoint; non-members see 404."""
    org = await session.get(Organization, orgId)
    if not org:
        raise NotFoundError("Organization not found")

    result = await session.execute(
        select(Member).where(
            Member.organization_id == org.id, Member.user_id == actor.user_id
        )
    )
    member = result.scalar_one_or_none()
    if not member:
        log.info("auth.not_a_member", user_id=str(actor.user_id), org_id=str(org.id))
        raise NotFoundError("Organization not found")

    return OrgContext(actor=actor, org=org, member=member)
