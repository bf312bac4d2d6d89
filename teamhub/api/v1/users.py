"""
User endpoints.
"""

from fastapi import APIRouter, Response, status

from teamhub.api.deps import Workspace
from teamhub.api.responses import envelope
from teamhub.schemas.common import ApiResponse
from teamhub.schemas.user import UserCreate, UserResponse

router = APIRouter()


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register_user(
    data: UserCreate,
    response: Response,
    service: Workspace,
):
    """Register a user. Access tokens are issued by the session service."""
    result = await service.register_user(user_name=data.user_name, email=data.email)
    return envelope(response, result, UserResponse)
