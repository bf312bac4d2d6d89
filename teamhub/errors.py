"""
Domain error taxonomy.

Every error carries the HTTP-equivalent status code and a public message.
The gate and the edge model raise these directly and they reach the caller
verbatim; the transaction coordinator turns everything else into
CascadeFailed.
"""

from fastapi import status


class TeamHubError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TeamHubError):
    """A required field is missing or empty."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthorized(TeamHubError):
    """No valid actor context."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(TeamHubError):
    """Actor's role is not in the allowed set, or actor is not the owner."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class NotFound(TeamHubError):
    """Organization, project, team or user is absent."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class NotAMember(NotFound):
    """Actor holds no role in the target organization or project."""

    default_message = "You are not a member of this resource"


class NotFoundInOrg(NotFound):
    """Target user is not a member of the organization."""

    default_message = "Member not part of this organization"


class DuplicateMembership(TeamHubError):
    """The membership edge already exists."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Member is already part of this project"


class DuplicateTeam(TeamHubError):
    """The team is already linked to the project."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Team is already in this project"


class CascadeFailed(TeamHubError):
    """A cascade transaction aborted. The cause is logged, never exposed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Operation failed due to server error, please try again later"
