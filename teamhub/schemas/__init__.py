"""
Pydantic schemas for API request/response validation.
"""

from teamhub.schemas.common import (
    ApiResponse,
    ErrorResponse,
    FieldError,
    HealthResponse,
)
from teamhub.schemas.user import UserCreate, UserResponse
from teamhub.schemas.organization import (
    MemberResponse,
    OrganizationCreate,
    OrganizationResponse,
    RoleAssignment,
    TimelineEventResponse,
)
from teamhub.schemas.team import TeamCreate, TeamResponse
from teamhub.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse

__all__ = [
    # Common
    "ApiResponse",
    "ErrorResponse",
    "FieldError",
    "HealthResponse",
    # Users
    "UserCreate",
    "UserResponse",
    # Organizations
    "MemberResponse",
    "OrganizationCreate",
    "OrganizationResponse",
    "RoleAssignment",
    "TimelineEventResponse",
    # Teams
    "TeamCreate",
    "TeamResponse",
    # Projects
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
]
