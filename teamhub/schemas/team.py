"""
Team schemas.
"""

import uuid
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from teamhub.schemas.organization import MemberResponse


class TeamCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_name: str = Field(..., min_length=1, max_length=255, alias="teamName")


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    team_name: str
    org_id: uuid.UUID
    members: List[MemberResponse] = []
    projects: List[uuid.UUID] = []
