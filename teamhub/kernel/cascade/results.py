"""
Values returned by cascades.

Details are snapshots taken inside the transaction, so callers see exactly
the state that was committed.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, List, Optional

from teamhub.notifications.messages import Notification


@dataclass
class MemberEntry:
    user_id: uuid.UUID
    role: Optional[str]
    user_name: Optional[str] = None
    email: Optional[str] = None


@dataclass
class ProjectDetail:
    id: uuid.UUID
    project_name: str
    description: str
    org_id: uuid.UUID
    created_by: uuid.UUID
    members: List[MemberEntry] = field(default_factory=list)
    teams: List[uuid.UUID] = field(default_factory=list)


@dataclass
class TeamDetail:
    id: uuid.UUID
    team_name: str
    org_id: uuid.UUID
    members: List[MemberEntry] = field(default_factory=list)
    projects: List[uuid.UUID] = field(default_factory=list)


@dataclass
class OrganizationDetail:
    id: uuid.UUID
    org_name: str
    created_by: uuid.UUID
    members: List[MemberEntry] = field(default_factory=list)
    teams: List[uuid.UUID] = field(default_factory=list)
    projects: List[uuid.UUID] = field(default_factory=list)


@dataclass
class CascadeResult:
    """
    Outcome of a committed cascade.

    ``notifications`` is the post-commit event list; the coordinator hands
    it to the dispatcher only after the transaction has committed.
    """

    message: str
    payload: Any = None
    status_code: int = 200
    notifications: List[Notification] = field(default_factory=list)
