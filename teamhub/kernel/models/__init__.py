"""
Kernel Data Models

Entity tables (users, organizations, teams, projects), the membership edge
table that carries every membership set in both directions, and the
organization timeline.
"""

from teamhub.kernel.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, generate_uuid
from teamhub.kernel.models.user import User
from teamhub.kernel.models.organization import Organization
from teamhub.kernel.models.team import Team
from teamhub.kernel.models.project import Project
from teamhub.kernel.models.membership import (
    EdgeKind,
    EdgePair,
    MembershipEdge,
    Role,
    ROLE_KINDS,
    roles_at_least,
)
from teamhub.kernel.models.timeline import TimelineEvent, TimelineEventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "generate_uuid",
    # Entities
    "User",
    "Organization",
    "Team",
    "Project",
    # Membership
    "EdgeKind",
    "EdgePair",
    "MembershipEdge",
    "Role",
    "ROLE_KINDS",
    "roles_at_least",
    # Timeline
    "TimelineEvent",
    "TimelineEventType",
]
