"""
Team endpoints.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Response, status

from teamhub.api.deps import CurrentUser, Workspace
from teamhub.api.responses import envelope
from teamhub.schemas.common import ApiResponse
from teamhub.schemas.organization import RoleAssignment
from teamhub.schemas.team import TeamCreate, TeamResponse

router = APIRouter()


@router.post("", response_model=ApiResponse[TeamResponse], status_code=status.HTTP_201_CREATED)
async def create_team(
    org_id: uuid.UUID,
    data: TeamCreate,
    response: Response,
    user: CurrentUser,
    service: Workspace,
):
    """Create a team. The creator becomes its leader."""
    result = await service.create_team(user.id, org_id, data.team_name)
    return envelope(response, result, TeamResponse)


@router.post("/{team_id}/members/{member_id}", response_model=ApiResponse[TeamResponse])
async def add_member_to_team(
    org_id: uuid.UUID,
    team_id: uuid.UUID,
    member_id: uuid.UUID,
    response: Response,
    user: CurrentUser,
    service: Workspace,
    data: Optional[RoleAssignment] = None,
):
    """Add an organization member to a team. Linked projects are not re-synced."""
    result = await service.add_member_to_team(
        user.id,
        org_id,
        team_id,
        member_id,
        as_role_of=data.as_role_of if data else None,
    )
    return envelope(response, result, TeamResponse)
