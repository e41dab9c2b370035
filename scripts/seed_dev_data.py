#!/usr/bin/env python3
"""Seed a development database with an organization, members, an invitation and projects.

Usage:
    python scripts/seed_dev_data.py

Reads TD_DATABASE_URL (or defaults to localhost). Every seeded user logs in
with the password ``password123``.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import text

from tenantdeck.core.auth import hash_password
from tenantdeck.core.database import engine, get_session_context

# Deterministic UUIDs for reproducibility
ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
USER_IDS = {
    "alice@acme.dev": (uuid.UUID("00000000-0000-0000-0000-000000000010"), "Alice", "owner"),
    "bob@acme.dev": (uuid.UUID("00000000-0000-0000-0000-000000000011"), "Bob", "admin"),
    "carol@acme.dev": (uuid.UUID("00000000-0000-0000-0000-000000000012"), "Carol", "member"),
}
INVITATION_ID = uuid.UUID("00000000-0000-0000-0000-000000000020")
PROJECT_IDS = [uuid.UUID(f"00000000-0000-0000-0000-0000000001{i:02d}") for i in range(3)]


async def seed():
    password_hash = hash_password("password123")

    async with get_session_context() as session:
        # Organization
        await session.execute(text("""
            INSERT INTO organizations (id, name, slug)
            VALUES (:id, :name, :slug)
            ON CONFLICT (id) DO NOTHING
        """), {"id": ORG_ID, "name": "Acme Robotics", "slug": "acme-robotics"})

        # Users and memberships
        for email, (uid, name, role) in USER_IDS.items():
            await session.execute(text("""
                INSERT INTO users (id, email, name, password_hash)
                VALUES (:id, :email, :name, :hash)
                ON CONFLICT (id) DO NOTHING
            """), {"id": uid, "email": email, "name": name, "hash": password_hash})
            await session.execute(text("""
                INSERT INTO members (id, user_id, organization_id, role)
                VALUES (:id, :uid, :oid, :role)
                ON CONFLICT DO NOTHING
            """), {"id": uuid.uuid4(), "uid": uid, "oid": ORG_ID, "role": role})

        # Pending invitation
        await session.execute(text("""
            INSERT INTO invitations (id, email, role, status, organization_id, inviter_id, expires_at)
            VALUES (:id, :email, 'member', 'pending', :oid, :inviter, :expires)
            ON CONFLICT (id) DO NOTHING
        """), {
            "id": INVITATION_ID,
            "email": "dave@acme.dev",
            "oid": ORG_ID,
            "inviter": USER_IDS["alice@acme.dev"][0],
            "expires": datetime.now(timezone.utc) + timedelta(hours=48),
        })

        # Projects
        projects = [
            ("API Server", "api-server", "Public REST API"),
            ("Documentation Site", "documentation-site", None),
            ("Product Launch", "product-launch", "Q3 launch checklist"),
        ]
        for pid, (name, slug, description) in zip(PROJECT_IDS, projects):
            await session.execute(text("""
                INSERT INTO projects (id, organization_id, name, slug, description)
                VALUES (:id, :oid, :name, :slug, :description)
                ON CONFLICT (id) DO NOTHING
            """), {"id": pid, "oid": ORG_ID, "name": name, "slug": slug, "description": description})

    await engine.dispose()
    print(f"Seeded org {ORG_ID} with {len(USER_IDS)} members and {len(projects)} projects.")


if __name__ == "__main__":
    asyncio.run(seed())
