"""
Organization endpoints.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from teamhub.api.deps import CurrentUser, Workspace
from teamhub.api.responses import envelope, ok
from teamhub.schemas.common import ApiResponse
from teamhub.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    RoleAssignment,
    TimelineEventResponse,
)

router = APIRouter()


@router.post("", response_model=ApiResponse[OrganizationResponse], status_code=status.HTTP_201_CREATED)
async def create_organization(
    data: OrganizationCreate,
    response: Response,
    user: CurrentUser,
    service: Workspace,
):
    """Create an organization. The creator becomes its admin."""
    result = await service.create_organization(user.id, data.org_name)
    return envelope(response, result, OrganizationResponse)


@router.get("/{org_id}", response_model=ApiResponse[OrganizationResponse])
async def get_organization(
    org_id: uuid.UUID,
    user: CurrentUser,
    service: Workspace,
):
    detail = await service.get_organization(user.id, org_id)
    return ok(OrganizationResponse.model_validate(detail), "Organization details")


@router.post("/{org_id}/members/{member_id}", response_model=ApiResponse[OrganizationResponse])
async def add_member_to_org(
    org_id: uuid.UUID,
    member_id: uuid.UUID,
    response: Response,
    user: CurrentUser,
    service: Workspace,
    data: Optional[RoleAssignment] = None,
):
    result = await service.add_member_to_org(
        user.id,
        org_id,
        member_id,
        as_role_of=data.as_role_of if data else None,
    )
    return envelope(response, result, OrganizationResponse)


@router.get("/{org_id}/timeline", response_model=ApiResponse[List[TimelineEventResponse]])
async def get_timeline(
    org_id: uuid.UUID,
    user: CurrentUser,
    service: Workspace,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """Organization timeline, oldest first."""
    events = await service.get_timeline(user.id, org_id, limit=limit, offset=offset)
    return ok([TimelineEventResponse.model_validate(event) for event in events], "Organization timeline")
