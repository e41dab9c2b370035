"""
Shared fixtures — in-memory SQLite store, recording mailer, actors.
"""

from __future__ import annotations

import uuid
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import tenantdeck.models  # noqa: F401
from tenantdeck.core.auth import Actor
from tenantdeck.core.membership import SqlMembershipProvider
from tenantdeck.models.member import Member
from tenantdeck.models.user import User


class RecordingMailer:
    """Mailer stand-in that keeps every message it was asked to send."""

    def __init__(self):
        self.sent: list[dict] = []

    async def send(self, *, to: str, subject: str, html: str) -> None:
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def provider(session, mailer):
    return SqlMembershipProvider(session, mailer)


@pytest.fixture
def make_user(session):
    async def _make(email: Optional[str] = None, name: Optional[str] = None, password_hash=None) -> User:
        user = User(
            email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
            name=name,
            password_hash=password_hash,
        )
        session.add(user)
        await session.flush()
        return user

    return _make


@pytest.fixture
def add_member(session):
    async def _add(org_id: uuid.UUID, user: User, role: str = "member") -> Member:
        member = Member(user_id=user.id, organization_id=org_id, role=role)
        session.add(member)
        await session.flush()
        return member

    return _add


@pytest.fixture
async def owner(make_user):
    return Actor(await make_user(email="owner@example.com", name="Olivia Owner"))


@pytest.fixture
async def org(owner, provider):
    """An org named "Acme Inc" owned by ``owner``."""
    return await provider.create_organization("Acme Inc", "acme-inc", owner.user_id)
