"""
FastAPI dependencies for the acting user and the workspace service.
"""

import uuid
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from teamhub.errors import Unauthorized
from teamhub.kernel.identity.jwt import verify_access_token
from teamhub.kernel.models.user import User
from teamhub.kernel.workspace import WorkspaceService, build_coordinator


# Security scheme
security = HTTPBearer(auto_error=False)


@lru_cache
def get_workspace_service() -> WorkspaceService:
    """Application-wide workspace service. Overridden in tests."""
    return WorkspaceService(build_coordinator())


Workspace = Annotated[WorkspaceService, Depends(get_workspace_service)]


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    service: Workspace,
) -> User:
    """Resolve the acting user from the bearer token or raise 401."""
    if not credentials:
        raise Unauthorized("Not authenticated")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise Unauthorized("Invalid or expired token")

    try:
        user_id = uuid.UUID(payload.sub)
    except ValueError:
        raise Unauthorized("Invalid or expired token")

    user = await service.get_user(user_id)
    if not user or not user.is_active:
        raise Unauthorized("User not found")

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
