"""
Project endpoints.

Every mutation runs as one cascade; the response carries the project state
that was committed.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Response, status

from teamhub.api.deps import CurrentUser, Workspace
from teamhub.api.responses import envelope, ok
from teamhub.schemas.common import ApiResponse
from teamhub.schemas.organization import RoleAssignment
from teamhub.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate

router = APIRouter()


@router.post("", response_model=ApiResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(
    org_id: uuid.UUID,
    data: ProjectCreate,
    response: Response,
    user: CurrentUser,
    service: Workspace,
):
    """Create a project. The creator becomes its owner and admin."""
    result = await service.create_project(user.id, org_id, data.project_name, data.description)
    return envelope(response, result, ProjectResponse)


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def get_project(
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    user: CurrentUser,
    service: Workspace,
):
    detail = await service.get_project(user.id, org_id, project_id)
    return ok(ProjectResponse.model_validate(detail), "Project details")


@router.patch("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def update_project(
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    data: ProjectUpdate,
    response: Response,
    user: CurrentUser,
    service: Workspace,
):
    result = await service.update_project(
        user.id,
        org_id,
        project_id,
        project_name=data.project_name,
        description=data.description,
    )
    return envelope(response, result, ProjectResponse)


@router.delete("/{project_id}", response_model=ApiResponse[None])
async def delete_project(
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    response: Response,
    user: CurrentUser,
    service: Workspace,
):
    """Delete a project. Owner only."""
    result = await service.delete_project(user.id, org_id, project_id)
    return envelope(response, result)


@router.post("/{project_id}/members/{member_id}", response_model=ApiResponse[ProjectResponse])
async def add_member_to_project(
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    response: Response,
    user: CurrentUser,
    service: Workspace,
    data: Optional[RoleAssignment] = None,
):
    result = await service.add_member_to_project(
        user.id,
        org_id,
        project_id,
        member_id,
        as_role_of=data.as_role_of if data else None,
    )
    return envelope(response, result, ProjectResponse)


@router.delete("/{project_id}/members/{member_id}", response_model=ApiResponse[ProjectResponse])
async def remove_member_from_project(
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    response: Response,
    user: CurrentUser,
    service: Workspace,
):
    result = await service.remove_member_from_project(user.id, org_id, project_id, member_id)
    return envelope(response, result, ProjectResponse)


@router.post("/{project_id}/teams/{team_id}", response_model=ApiResponse[ProjectResponse])
async def add_team_to_project(
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    team_id: uuid.UUID,
    response: Response,
    user: CurrentUser,
    service: Workspace,
    data: Optional[RoleAssignment] = None,
):
    """Link a team and add its members. Existing members keep their role."""
    result = await service.add_team_to_project(
        user.id,
        org_id,
        project_id,
        team_id,
        as_role_of=data.as_role_of if data else None,
    )
    return envelope(response, result, ProjectResponse)


@router.post("/{project_id}/teams/{team_id}/sync", response_model=ApiResponse[ProjectResponse])
async def sync_team_into_project(
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    team_id: uuid.UUID,
    response: Response,
    user: CurrentUser,
    service: Workspace,
    data: Optional[RoleAssignment] = None,
):
    result = await service.sync_team_into_project(
        user.id,
        org_id,
        project_id,
        team_id,
        as_role_of=data.as_role_of if data else None,
    )
    return envelope(response, result, ProjectResponse)


@router.delete("/{project_id}/teams/{team_id}", response_model=ApiResponse[ProjectResponse])
async def remove_team_from_project(
    org_id: uuid.UUID,
    project_id: uuid.UUID,
    team_id: uuid.UUID,
    response: Response,
    user: CurrentUser,
    service: Workspace,
):
    """Unlink a team. Members it brought in stay in the project."""
    result = await service.remove_team_from_project(user.id, org_id, project_id, team_id)
    return envelope(response, result, ProjectResponse)
