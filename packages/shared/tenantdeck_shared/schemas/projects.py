from typing import List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, Field

from .organizations import FullOrgResponse


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None


class ProjectRead(BaseModel):
    id: UUID
    organization_id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FullProjectListResponse(BaseModel):
    organization: Optional[FullOrgResponse] = None
    projects: List[ProjectRead]
