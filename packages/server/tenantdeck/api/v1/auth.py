"""
Authentication endpoints.

- Email/Password registration & login
- Bearer JWT sessions; logout revokes the presented token
"""

from __future__ import annotations

from typing import Optional

import jwt
import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tenantdeck.core.auth import (
    bearer_scheme,
    create_jwt,
    decode_jwt,
    hash_password,
    revoke_jwt,
    verify_password,
)
from tenantdeck.core.database import get_session
from tenantdeck.models.user import User

log = structlog.get_logger()
router = APIRouter()


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    user_id: str
    email: str
    access_token: str
    token_type: str = "bearer"


# ---------------------------------------------------------------------------
# Email/Password
# ---------------------------------------------------------------------------

@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, session: AsyncSession = Depends(get_session)):
    """Register a new user with email/password and open a session."""
    email = str(body.email)
    result = await session.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(email=email, name=body.name, password_hash=hash_password(body.password))
    session.add(user)
    await session.flush()

    token, _jti = create_jwt(user.id, user.email)
    log.info("user.registered", user_id=str(user.id), email=email)
    return AuthResponse(user_id=str(user.id), email=email, access_token=token)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, session: AsyncSession = Depends(get_session)):
    """Authenticate with email/password and receive a JWT."""
    email = str(body.email)
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not user.password_hash:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not verify_password(body.password, user.password_hash):
        log.warning("auth.login_failure", email=email, reason="bad_password")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token, _jti = create_jwt(user.id, user.email)
    log.info("auth.login_success", user_id=str(user.id), email=email)
    return AuthResponse(user_id=str(user.id), email=email, access_token=token)


@router.post("/logout", status_code=204)
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
):
    """Revoke the presented token. Unknown or expired tokens are ignored."""
    if credentials is None:
        return None
    try:
        payload = decode_jwt(credentials.credentials)
    except jwt.PyJWTError:
        return None

    jti = payload.get("jti")
    if jti:
        await revoke_jwt(jti)
        log.info("auth.logout", user_id=payload.get("sub"), jti=jti)
    return None
