"""
URL-safe unique slugs for organizations and projects.

Slugs are unique per table across the whole store. The probe below only
finds a currently-free candidate; two concurrent callers can still pick the
same one, and the table's unique index rejects the second write.
"""

from __future__ import annotations

import re
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

_WHITESPACE = re.compile(r"\s+")


def slugify(name: str) -> str:
    """Lower-case, trim and collapse whitespace runs to single hyphens."""
    return _WHITESPACE.sub("-", name.strip().lower())


async def generate_unique_slug(
    session: AsyncSession,
    model: type[SQLModel],
    name: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> str:
    """Return the first of ``base``, ``base-1``, ``base-2``… not taken in ``model``.

    A row whose id is ``exclude_id`` does not count as a collision, so a
    record being renamed can keep its own slug.
    """
    base_slug = slugify(name)
    slug = base_slug
    counter = 1

    while True:
        result = await session.execute(select(model.id).where(model.slug == slug))
        existing_id = result.scalar_one_or_none()
        if existing_id is None or (exclude_id is not None and existing_id == exclude_id):
            return slug
        slug = f"{base_slug}-{counter}"
        counter += 1
