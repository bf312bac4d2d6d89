"""
Project schemas.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from teamhub.schemas.organization import MemberResponse


class ProjectCreate(BaseModel):
    """
    Project creation request.

    ``projectName`` is checked by the cascade so a missing name is reported
    as a 400 with the domain message rather than a field error.
    """

    model_config = ConfigDict(populate_by_name=True)

    project_name: Optional[str] = Field(None, max_length=500, alias="projectName")
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    """Project update request. Empty values leave the field unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    project_name: Optional[str] = Field(None, max_length=500, alias="projectName")
    description: Optional[str] = None


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    project_name: str
    description: str
    org_id: uuid.UUID
    created_by: uuid.UUID
    members: List[MemberResponse] = []
    teams: List[uuid.UUID] = []
