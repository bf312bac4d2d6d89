"""
Stable Kernel Layer

Foundational components for membership consistency:
- Membership Edge Model (paired edges, one row per direction)
- Role Authorization Gate (declarative per-operation policies)
- Cascade Engine (every write a structural mutation implies)
- Transaction Coordinator (all-or-nothing cascades)
- Organization Timeline (append-only history)

Architectural Invariants:
- Every membership edge has its reverse edge
- Authorization runs against pre-mutation state
- A cascade is fully applied or not applied at all
- Notifications go out only after commit
"""

from teamhub.kernel.models import (
    User,
    Organization,
    Team,
    Project,
    MembershipEdge,
    EdgeKind,
    EdgePair,
    Role,
    TimelineEvent,
    TimelineEventType,
)
from teamhub.kernel.workspace import WorkspaceService, build_coordinator

__all__ = [
    # Entities
    "User",
    "Organization",
    "Team",
    "Project",
    # Membership
    "MembershipEdge",
    "EdgeKind",
    "EdgePair",
    "Role",
    # Timeline
    "TimelineEvent",
    "TimelineEventType",
    # Services
    "WorkspaceService",
    "build_coordinator",
]
