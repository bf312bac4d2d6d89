"""
Organization and membership schemas.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RoleAssignment(BaseModel):
    """
    Body for the add-member endpoints.

    ``asRoleOf`` defaults to member; an unknown role is rejected with 400.
    """

    model_config = ConfigDict(populate_by_name=True)

    as_role_of: Optional[str] = Field(None, alias="asRoleOf")


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    role: Optional[str] = None
    user_name: Optional[str] = None
    email: Optional[str] = None


class OrganizationCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    org_name: str = Field(..., min_length=1, max_length=255, alias="orgName")


class OrganizationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    org_name: str
    created_by: uuid.UUID
    members: List[MemberResponse] = []
    teams: List[uuid.UUID] = []
    projects: List[uuid.UUID] = []


class TimelineEventResponse(BaseModel):
    """Timeline entry. ``subject_id`` may name something that no longer exists."""

    model_config = ConfigDict(from_attributes=True)

    sequence: int
    event_type: str
    text: str
    actor_id: Optional[uuid.UUID] = None
    subject_id: Optional[uuid.UUID] = None
    payload: Dict[str, Any] = {}
    created_at: datetime
