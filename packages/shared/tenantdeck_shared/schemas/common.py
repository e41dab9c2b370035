from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MemberRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


MANAGER_ROLES = frozenset({MemberRole.OWNER, MemberRole.ADMIN})


def normalize_role(value: Optional[str]) -> MemberRole:
    """Resolve a stored role string. Unset roles read as ``member``."""
    if not value:
        return MemberRole.MEMBER
    return MemberRole(value)


class CountResponse(BaseModel):
    count: int


class ErrorBody(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorBody
